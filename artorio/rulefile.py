"""Read and write the saved rule list (cfg.bin).

Binary layout, little-endian, using .NET BinaryWriter conventions:

    string   image path
    int32    rule count
    per rule:
        bool     use_range (1 byte)
        3 bytes  from R, G, B
        3 bytes  to R, G, B (written even for exact rules)
        string   item name

A string is its UTF-8 byte length as a 7-bit varint, then the bytes.

The core never touches this file; the CLI loads it into a RuleSet.
"""

from __future__ import annotations

import io
import struct
from pathlib import Path

from artorio.core.errors import RuleFileError
from artorio.core.rules import RuleSet
from artorio.core.types import ColorRule

DEFAULT_RULE_FILE = 'cfg.bin'


def _write_string(buf: io.BytesIO, text: str) -> None:
    data = text.encode('utf-8')
    n = len(data)
    while n >= 0x80:
        buf.write(bytes([(n & 0x7F) | 0x80]))
        n >>= 7
    buf.write(bytes([n]))
    buf.write(data)


def _read_exact(buf: io.BytesIO, n: int) -> bytes:
    data = buf.read(n)
    if len(data) != n:
        raise RuleFileError(f'Rule file truncated: wanted {n} byte(s), got {len(data)}')
    return data


def _read_string(buf: io.BytesIO) -> str:
    length = 0
    shift = 0
    while True:
        if shift > 28:
            raise RuleFileError('Rule file has an invalid string length prefix')
        byte = _read_exact(buf, 1)[0]
        length |= (byte & 0x7F) << shift
        if not byte & 0x80:
            break
        shift += 7
    try:
        return _read_exact(buf, length).decode('utf-8')
    except UnicodeDecodeError as exc:
        raise RuleFileError(f'Rule file string is not UTF-8: {exc}') from exc


def dump_rules(image_path: str, rules: RuleSet) -> bytes:
    buf = io.BytesIO()
    _write_string(buf, image_path)
    buf.write(struct.pack('<i', len(rules)))
    for rule in rules:
        buf.write(struct.pack('<?', rule.use_range))
        buf.write(bytes(rule.color_from))
        buf.write(bytes(rule.color_to))
        _write_string(buf, rule.item_name)
    return buf.getvalue()


def load_rules(data: bytes) -> tuple[str, RuleSet]:
    """Parse rule file bytes. Returns (image_path, rules)."""
    buf = io.BytesIO(data)
    image_path = _read_string(buf)
    (count,) = struct.unpack('<i', _read_exact(buf, 4))
    if count < 0:
        raise RuleFileError(f'Rule file has a negative rule count ({count})')

    rules = []
    for _ in range(count):
        use_range = _read_exact(buf, 1)[0] != 0
        color_from = tuple(_read_exact(buf, 3))
        color_to = tuple(_read_exact(buf, 3))
        item_name = _read_string(buf)
        rules.append(ColorRule(use_range=use_range, color_from=color_from, color_to=color_to, item_name=item_name))
    return image_path, RuleSet(rules)


def read_rule_file(path: str | Path) -> tuple[str, RuleSet]:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise RuleFileError(f'Cannot read rule file {str(path)!r}: {exc}') from exc
    return load_rules(data)


def write_rule_file(path: str | Path, image_path: str, rules: RuleSet) -> None:
    data = dump_rules(image_path, rules)
    try:
        Path(path).write_bytes(data)
    except OSError as exc:
        raise RuleFileError(f'Cannot write rule file {str(path)!r}: {exc}') from exc
