"""Typed failures for the conversion and decode paths.

Every failure is deterministic for a given input, so nothing here is retried.
Callers catch ArtorioError to handle all of them at once.
"""


class ArtorioError(Exception):
    """Base class for every error raised by artorio."""


class InvalidRuleError(ArtorioError, ValueError):
    """A colour rule failed validation when its RuleSet was built."""


class ConversionError(ArtorioError):
    """Image -> document path failed."""


class EmptyImageError(ConversionError):
    pass


class DecodeError(ConversionError):
    """The source image could not be read or decoded."""


class NoMatchesError(ConversionError):
    """No pixel matched any rule, so there is nothing to place."""


class BlueprintDecodeError(ArtorioError):
    """Blueprint string -> document path failed."""


class UnsupportedVersionError(BlueprintDecodeError):
    pass


class CorruptDataError(BlueprintDecodeError):
    """Text or compressed payload is damaged."""


class MalformedDocumentError(BlueprintDecodeError):
    """Payload decompressed but does not describe a valid document."""


class RuleFileError(ArtorioError):
    """A saved rule file is truncated or unreadable."""
