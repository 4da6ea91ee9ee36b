"""Convert an image into a blueprint string.

Each pixel is checked against the rules in order; the first rule that
accepts the pixel's RGB colour places its item at the pixel's (x, y).
Pixels no rule accepts are left empty. Alpha is ignored.

Rules come from a saved rule file (-r, default $ARTORIO_RULES or cfg.bin)
and/or from --rule arguments, which are appended after the file's rules
(the default rule file is only read when no --rule is given):

    --rule '#ffffff=stone-wall'               exact colour
    --rule '#000000-#3f3f3f=refined-concrete' inclusive RGB range

The image argument may be omitted when the rule file stores an image path.
--save writes the rules in use and the image path back to the rule file,
so the next run needs neither.

The blueprint string is written to stdout (or -o FILE); a summary of the
placed items goes to stderr. --json prints the summary and the string as
JSON on stdout instead.

Envelopes (-e):
    game   '0' + base64(zlib(json)), pasteable into the game (default)
    codec  base64(version byte + zlib(json))

Example:
    uv run artorio convert logo.png -r cfg.bin -o logo.txt
    uv run artorio convert logo.png --rule '#ff0000=red-wire' --center --save
    uv run artorio convert
"""

import os
import sys

from artorio.config import ENVELOPE_CHOICES, get_settings
from artorio.core.errors import RuleFileError
from artorio.core.rules import RuleSet, parse_rule_arg
from artorio.core.types import Command
from artorio.pipeline import convert
from artorio.report import format_json, format_text
from artorio.rulefile import read_rule_file, write_rule_file

command = Command(
    name='convert',
    help='Convert an image to a blueprint string using ordered colour rules.',
)


@command.arguments
def add_arguments(parser) -> None:
    parser.add_argument('image', nargs='?', default=None, help='Source image (default: path stored in the rule file)')
    parser.add_argument('-r', '--rules', default=None, help='Saved rule file (default: $ARTORIO_RULES or cfg.bin)')
    parser.add_argument(
        '--rule',
        action='append',
        default=[],
        metavar='SPEC',
        help="Extra rule, '#rrggbb=item' or '#rrggbb-#rrggbb=item'. Repeatable.",
    )
    parser.add_argument('-s', '--save', action='store_true', help='Write the rules and image path to the rule file')
    parser.add_argument('-o', '--output', default=None, help='Write the blueprint string to this file')
    parser.add_argument('-l', '--label', default=None, help='Blueprint label')
    parser.add_argument('-c', '--center', action='store_true', help='Centre the blueprint on the image centre')
    parser.add_argument('-e', '--envelope', choices=ENVELOPE_CHOICES, default=None, help='Output envelope')
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


def _collect_rules(args, settings) -> tuple[RuleSet, str]:
    """Return (rules, image path stored in the rule file or '')."""
    rules = []
    stored_image = ''
    rules_path = args.rules
    if rules_path is None and not args.rule and os.path.isfile(settings.rules_path):
        rules_path = settings.rules_path
    if rules_path is not None:
        stored_image, file_rules = read_rule_file(rules_path)
        rules.extend(file_rules)
    elif not args.rule:
        raise RuleFileError(f'No rules given: pass --rule or a rule file ({settings.rules_path} not found)')
    rules.extend(parse_rule_arg(text) for text in args.rule)
    # An empty rule file is valid; conversion then reports that nothing matched
    return RuleSet(rules), stored_image


@command.run
def run(args) -> int:
    settings = get_settings()
    envelope = args.envelope or settings.envelope
    rules, stored_image = _collect_rules(args, settings)

    image = args.image or stored_image
    if not image:
        raise RuleFileError('No image given and the rule file stores no image path')

    if args.save:
        save_path = args.rules or settings.rules_path
        write_rule_file(save_path, image, rules)
        print(f'artorio: saved {len(rules)} rule(s) to {save_path}', file=sys.stderr)

    result = convert(image, rules, label=args.label, centre=args.center, envelope=envelope)

    if args.output:
        with open(args.output, 'w', encoding='ascii') as f:
            f.write(result.blueprint)
            f.write('\n')

    if args.json:
        print(format_json(result.document, blueprint=result.blueprint, source=image))
        return 0

    if not args.output:
        print(result.blueprint)
    print(format_text(result.document, source=image, matched_count=result.matched_count), file=sys.stderr)
    if args.output:
        print(f'artorio: wrote {args.output}', file=sys.stderr)
    return 0
