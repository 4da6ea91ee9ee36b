"""Decode a blueprint string and summarise its contents.

Accepts the string itself, a file containing it, or '-' for stdin. Every
stage is validated; damaged input fails with a specific error instead of
producing a partial document:

    unsupported version   unknown version marker
    corrupt data          bad base64, truncated or damaged zlib stream
    malformed document    JSON missing fields or with bad coordinates

Example:
    uv run artorio decode logo.txt
    uv run artorio decode - -e codec --json < logo.txt
"""

import os
import sys

from artorio.config import ENVELOPE_CHOICES, get_settings
from artorio.core.codec import get_envelope
from artorio.core.types import Command
from artorio.report import format_json, format_text

command = Command(
    name='decode',
    help='Decode a blueprint string (or file) and print what it places.',
)


@command.arguments
def add_arguments(parser) -> None:
    parser.add_argument('blueprint', help="Blueprint string, file containing one, or '-' for stdin")
    parser.add_argument('-e', '--envelope', choices=ENVELOPE_CHOICES, default=None, help='Input envelope')
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


def _read_input(value: str) -> tuple[str, str | None]:
    """Return (text, source file or None)."""
    if value == '-':
        return sys.stdin.read(), '<stdin>'
    if os.path.isfile(value):
        with open(value, encoding='ascii', errors='replace') as f:
            return f.read(), value
    return value, None


@command.run
def run(args) -> int:
    envelope = args.envelope or get_settings().envelope
    _encode, decode = get_envelope(envelope)
    text, source = _read_input(args.blueprint)
    doc = decode(text)
    if args.json:
        print(format_json(doc, source=source))
    else:
        print(format_text(doc, source=source))
    return 0
