"""Blueprint string codec.

Encode pipeline:
  1. document -> compact JSON (field-tagged, fixed key order)
  2. zlib, level 9
  3. one format-version byte prepended to the compressed payload
  4. standard padded base64

The game's own import envelope differs only in where the version marker
lives: it is the ASCII character '0' in front of base64(zlib(json)).
encode_game_string / decode_game_string handle that form.

Encoding applies the same document checks as decoding, so it never emits a
string its own decoder would reject. Decoding validates every stage and
raises a BlueprintDecodeError subclass on the first problem; a document is
only returned if every stage passed.
Unknown JSON fields are ignored so newer writers stay readable.
"""

from __future__ import annotations

import base64
import binascii
import json
import zlib
from typing import Any

from artorio.core.errors import CorruptDataError, MalformedDocumentError, UnsupportedVersionError
from artorio.core.types import BlueprintDocument, PlacedItem

FORMAT_VERSION = 0
GAME_VERSION_PREFIX = '0'
SUPPORTED_FORMAT_VERSIONS = frozenset({FORMAT_VERSION})

COMPRESSION_LEVEL = 9
MAX_DOCUMENT_VERSION = 0xFFFF


# -- document <-> JSON -------------------------------------------------------


def document_to_dict(doc: BlueprintDocument) -> dict[str, Any]:
    blueprint: dict[str, Any] = {'item': 'blueprint'}
    if doc.label is not None:
        blueprint['label'] = doc.label
    blueprint['version'] = doc.version
    blueprint['entities'] = [
        {
            'entity_number': n,
            'name': item.item_name,
            'position': {'x': item.grid_x, 'y': item.grid_y},
        }
        for n, item in enumerate(doc.items, start=1)
    ]
    return {'blueprint': blueprint}


def _require_int(value: Any, what: str) -> int:
    # bool is an int subclass; true/false is never a valid coordinate
    if not isinstance(value, int) or isinstance(value, bool):
        raise MalformedDocumentError(f'{what} must be an integer, got {value!r}')
    return value


def _check_version(version: Any) -> int:
    version = _require_int(version, 'version')
    if not 0 <= version <= MAX_DOCUMENT_VERSION:
        raise MalformedDocumentError(f'Document version {version} out of range')
    return version


def _check_label(label: Any) -> None:
    if label is not None and not isinstance(label, str):
        raise MalformedDocumentError('"label" must be a string')


def _check_name(i: int, name: Any) -> None:
    if not isinstance(name, str) or not name:
        raise MalformedDocumentError(f'Entity {i} has no "name"')


def _check_entity(i: int, name: Any, x: Any, y: Any) -> PlacedItem:
    _check_name(i, name)
    x = _require_int(x, f'Entity {i} position.x')
    y = _require_int(y, f'Entity {i} position.y')
    return PlacedItem(grid_x=x, grid_y=y, item_name=name)


def validate_document(doc: BlueprintDocument) -> None:
    """Apply the decoder's checks to a document about to be encoded."""
    _check_version(doc.version)
    _check_label(doc.label)
    for i, item in enumerate(doc.items):
        if not isinstance(item, PlacedItem):
            raise MalformedDocumentError(f'Entity {i} is not a PlacedItem')
        _check_entity(i, item.item_name, item.grid_x, item.grid_y)


def document_from_dict(obj: Any) -> BlueprintDocument:
    if not isinstance(obj, dict) or not isinstance(obj.get('blueprint'), dict):
        raise MalformedDocumentError('Missing "blueprint" object')
    bp = obj['blueprint']

    if 'version' not in bp:
        raise MalformedDocumentError('Missing "version" field')
    version = _check_version(bp['version'])
    label = bp.get('label')
    _check_label(label)

    entities = bp.get('entities')
    if not isinstance(entities, list):
        raise MalformedDocumentError('Missing "entities" list')

    items = []
    for i, entity in enumerate(entities):
        if not isinstance(entity, dict):
            raise MalformedDocumentError(f'Entity {i} is not an object')
        _check_name(i, entity.get('name'))
        pos = entity.get('position')
        if not isinstance(pos, dict) or 'x' not in pos or 'y' not in pos:
            raise MalformedDocumentError(f'Entity {i} has no "position"')
        items.append(_check_entity(i, entity.get('name'), pos['x'], pos['y']))

    return BlueprintDocument(version=version, items=tuple(items), label=label)


def _serialize(doc: BlueprintDocument) -> bytes:
    validate_document(doc)
    try:
        return json.dumps(document_to_dict(doc), separators=(',', ':'), ensure_ascii=False).encode('utf-8')
    except UnicodeEncodeError as exc:
        raise MalformedDocumentError(f'Document text is not valid UTF-8: {exc}') from exc


def _deserialize(raw: bytes) -> BlueprintDocument:
    try:
        obj = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedDocumentError(f'Payload is not valid JSON: {exc}') from exc
    return document_from_dict(obj)


# -- compression / text -------------------------------------------------------


def _decompress(data: bytes) -> bytes:
    d = zlib.decompressobj()
    try:
        raw = d.decompress(data)
    except zlib.error as exc:
        raise CorruptDataError(f'Decompression failed: {exc}') from exc
    if not d.eof:
        raise CorruptDataError('Compressed stream is truncated')
    if d.unused_data:
        raise CorruptDataError(f'{len(d.unused_data)} unexpected byte(s) after compressed stream')
    return raw


def _b64decode(text: str) -> bytes:
    try:
        return base64.b64decode(text.strip().encode('ascii'), validate=True)
    except (UnicodeEncodeError, binascii.Error) as exc:
        raise CorruptDataError(f'Not valid base64 text: {exc}') from exc


# -- public API ---------------------------------------------------------------


def encode(doc: BlueprintDocument) -> str:
    """Document -> version-prefixed, compressed, base64 text."""
    payload = bytes([FORMAT_VERSION]) + zlib.compress(_serialize(doc), COMPRESSION_LEVEL)
    return base64.b64encode(payload).decode('ascii')


def decode(text: str) -> BlueprintDocument:
    """Inverse of encode(). Raises UnsupportedVersionError, CorruptDataError or MalformedDocumentError."""
    data = _b64decode(text)
    if not data:
        raise CorruptDataError('Blueprint string is empty')
    if data[0] not in SUPPORTED_FORMAT_VERSIONS:
        raise UnsupportedVersionError(f'Unsupported blueprint format version {data[0]}')
    return _deserialize(_decompress(data[1:]))


def encode_game_string(doc: BlueprintDocument) -> str:
    """Document -> '0' + base64(zlib(json)), the form the game's import dialog accepts."""
    return GAME_VERSION_PREFIX + base64.b64encode(zlib.compress(_serialize(doc), COMPRESSION_LEVEL)).decode('ascii')


def decode_game_string(text: str) -> BlueprintDocument:
    text = text.strip()
    if not text:
        raise CorruptDataError('Blueprint string is empty')
    if text[0] != GAME_VERSION_PREFIX:
        raise UnsupportedVersionError(f'Unsupported blueprint version marker {text[0]!r}')
    return _deserialize(_decompress(_b64decode(text[1:])))


ENVELOPES = {
    'codec': (encode, decode),
    'game': (encode_game_string, decode_game_string),
}


def get_envelope(name: str):
    """Return the (encode, decode) pair for an envelope name."""
    if name not in ENVELOPES:
        raise KeyError(f'Unknown envelope: {name}. Available: {", ".join(sorted(ENVELOPES))}')
    return ENVELOPES[name]
