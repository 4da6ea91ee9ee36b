"""artorio — Turn pixel art into game blueprints using ordered colour rules.

Usage: uv run artorio <command> [options]

Commands are auto-discovered from artorio/commands/.
Each command module's docstring is its documentation.
Run `artorio help <command>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, artorio looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
"""

import argparse
import importlib
import sys

from artorio import registry
from artorio.config import load_env
from artorio.core.errors import ArtorioError


def _load_command_module(name: str) -> object:
    """Load the raw module for a command (for docstring access)."""
    return importlib.import_module(f'artorio.commands.{name}')


def _short_doc(name: str, fallback: str) -> str:
    doc = (_load_command_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else fallback


def _build_parser() -> argparse.ArgumentParser:
    commands = registry.all_commands()

    epilog = (
        'Examples:\n'
        "  artorio convert logo.png --rule '#ffffff=stone-wall'\n"
        '  artorio convert logo.png -r cfg.bin -o logo.txt --center\n'
        "  artorio convert logo.png --rule '#ffffff=stone-wall' --save\n"
        '  artorio decode logo.txt --json\n'
        '  artorio rules cfg.bin\n'
        '  artorio help convert\n'
        '\n'
        'Env vars (set in .env or environment):\n'
        '  ARTORIO_RULES     default rule file (cfg.bin)\n'
        '  ARTORIO_ENVELOPE  game | codec (game)\n'
    )
    parser = argparse.ArgumentParser(
        prog='artorio',
        description='Turn pixel art into game blueprints using ordered colour rules.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    # Global --env-file option before subcommand
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    sub = parser.add_subparsers(dest='command', help='Command to run')

    for name, cmd in sorted(commands.items()):
        p = sub.add_parser(name, help=_short_doc(name, cmd.help))
        cmd.add_arguments(p)

    # `help` subcommand — prints full module docstring for a command
    help_parser = sub.add_parser('help', help='Print full docs for a command')
    help_parser.add_argument('topic', nargs='?', help='Command name')

    return parser


def _print_help(topic: str | None) -> int:
    """Print full module docstring for a command."""
    commands = registry.all_commands()

    if topic is None:
        print('Available commands:\n')
        for name, cmd in sorted(commands.items()):
            print(f'  {name:<10} {_short_doc(name, cmd.help)}')
        print('\nRun: artorio help <command> for full docs.')
        return 0

    if topic not in commands:
        print(f'Unknown command: {topic}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(commands))}', file=sys.stderr)
        return 1

    print((_load_command_module(topic).__doc__ or '').strip() or f'(No module docs for {topic!r})')
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Load .env before anything else — OS env vars always win
    env_path = load_env(env_file=args.env_file)
    if env_path:
        print(f'artorio: loaded {env_path}', file=sys.stderr)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == 'help':
        return _print_help(args.topic)

    try:
        return registry.get(args.command).execute(args)
    except ArtorioError as exc:
        print(f'Error: {exc}', file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
