"""Image + rules -> blueprint string.

The whole conversion is one synchronous call with no shared state, so it can
be run from a worker thread and several conversions may run at once.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import numpy as np
from PIL import Image

from artorio.core.codec import get_envelope
from artorio.core.grid import assemble_scan
from artorio.core.matcher import load_image, scan
from artorio.core.rules import RuleSet
from artorio.core.types import ColorRule, ConversionResult


def convert(
    image: Image.Image | np.ndarray | str | Path,
    rules: RuleSet | Iterable[ColorRule],
    label: str | None = None,
    centre: bool = False,
    envelope: str = 'codec',
) -> ConversionResult:
    """Scan, assemble and encode. Raises an ArtorioError subclass on failure."""
    encode, _decode = get_envelope(envelope)
    if isinstance(image, (str, Path)):
        image = load_image(image)
    result = scan(image, rules)
    doc = assemble_scan(result, label=label, centre=centre)
    return ConversionResult(blueprint=encode(doc), matched_count=result.matched_count, document=doc)
