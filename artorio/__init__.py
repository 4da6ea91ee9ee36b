"""artorio — convert pixel art into compressed, text-safe game blueprints."""

from artorio.pipeline import convert
from artorio.core.codec import decode, decode_game_string, encode, encode_game_string
from artorio.core.errors import (
    ArtorioError,
    BlueprintDecodeError,
    ConversionError,
    CorruptDataError,
    DecodeError,
    EmptyImageError,
    InvalidRuleError,
    MalformedDocumentError,
    NoMatchesError,
    RuleFileError,
    UnsupportedVersionError,
)
from artorio.core.grid import assemble
from artorio.core.matcher import load_image, scan
from artorio.core.rules import RuleSet
from artorio.core.types import BlueprintDocument, ColorRule, ConversionResult, PlacedItem

__version__ = '0.1.0'

__all__ = [
    'ArtorioError',
    'BlueprintDecodeError',
    'BlueprintDocument',
    'ColorRule',
    'ConversionError',
    'ConversionResult',
    'CorruptDataError',
    'DecodeError',
    'EmptyImageError',
    'InvalidRuleError',
    'MalformedDocumentError',
    'NoMatchesError',
    'PlacedItem',
    'RuleFileError',
    'RuleSet',
    'UnsupportedVersionError',
    'assemble',
    'convert',
    'decode',
    'decode_game_string',
    'encode',
    'encode_game_string',
    'load_image',
    'scan',
]
