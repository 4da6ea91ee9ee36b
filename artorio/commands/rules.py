"""List the rules stored in a saved rule file.

Shows rules in precedence order: when colour ranges overlap, the rule
listed first wins. The file is validated as it is read, so a rule with an
empty item name or an inverted range is reported as an error.

Example:
    uv run artorio rules cfg.bin
    uv run artorio rules --json
"""

from artorio.config import get_settings
from artorio.core.types import Command
from artorio.report import format_rules_json, format_rules_text
from artorio.rulefile import read_rule_file

command = Command(
    name='rules',
    help='List the rules in a saved rule file, in precedence order.',
)


@command.arguments
def add_arguments(parser) -> None:
    parser.add_argument('rule_file', nargs='?', default=None, help='Rule file (default: $ARTORIO_RULES or cfg.bin)')
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


@command.run
def run(args) -> int:
    path = args.rule_file or get_settings().rules_path
    image_path, rules = read_rule_file(path)
    if args.json:
        print(format_rules_json(rules, image_path))
    else:
        print(format_rules_text(rules, image_path))
    return 0
