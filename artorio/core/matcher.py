"""Pixel scanning: map every pixel of an image to the item of its first matching rule.

Images are compared by RGB only. RGBA / LA / P images are converted with
PIL's convert('RGB'), which drops the alpha channel without compositing, so a
fully transparent pixel matches exactly like an opaque one of the same colour.
Arrays with a fourth channel are sliced to the first three.

Each rule becomes one boolean mask over the whole image. Rules are applied in
declared order and a pixel keeps the first rule that claims it, which gives
the same first-match-wins result as evaluating RuleSet.match per pixel.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from artorio.core.errors import DecodeError, EmptyImageError
from artorio.core.rules import RuleSet
from artorio.core.types import ColorRule, ScanResult

UNMATCHED = -1


def load_image(path: str | Path) -> Image.Image:
    """Open and fully decode an image file. Raises DecodeError on any failure."""
    try:
        image = Image.open(path)
        image.load()
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise DecodeError(f'Cannot decode image {str(path)!r}: {exc}') from exc
    return image


def to_rgb_array(image: Image.Image | np.ndarray) -> np.ndarray:
    """Return an (H, W, 3) uint8 array. The source is never modified."""
    if isinstance(image, Image.Image):
        if image.width == 0 or image.height == 0:
            raise EmptyImageError(f'Image has no pixels ({image.width}x{image.height})')
        return np.asarray(image.convert('RGB'), dtype=np.uint8)

    arr = np.asarray(image)
    if arr.ndim == 2:
        arr = np.stack([arr, arr, arr], axis=-1)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise DecodeError(f'Expected an (H, W, 3) or (H, W, 4) array, got shape {arr.shape}')
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise EmptyImageError(f'Image has no pixels ({arr.shape[1]}x{arr.shape[0]})')
    arr = arr[:, :, :3]
    if arr.dtype != np.uint8:
        if not np.issubdtype(arr.dtype, np.integer) or arr.min() < 0 or arr.max() > 255:
            raise DecodeError(f'Pixel values must be 8-bit integers, got dtype {arr.dtype}')
        arr = arr.astype(np.uint8)
    return arr


def _rule_mask(arr: np.ndarray, rule: ColorRule) -> np.ndarray:
    if rule.use_range:
        lo = np.array(rule.color_from, dtype=np.uint8)
        hi = np.array(rule.color_to, dtype=np.uint8)
        return np.all((arr >= lo) & (arr <= hi), axis=-1)
    return np.all(arr == np.array(rule.color_from, dtype=np.uint8), axis=-1)


def match_indices(arr: np.ndarray, rules: RuleSet) -> np.ndarray:
    """(H, W) int array of the first matching rule index per pixel, UNMATCHED where none."""
    assigned = np.full(arr.shape[:2], UNMATCHED, dtype=np.int32)
    for i, rule in enumerate(rules):
        free = assigned == UNMATCHED
        if not free.any():
            break
        assigned[_rule_mask(arr, rule) & free] = i
    return assigned


def scan(image: Image.Image | np.ndarray, rules: RuleSet | Iterable[ColorRule]) -> ScanResult:
    """Scan every pixel once, row-major, and collect (x, y) -> item name for matches."""
    if not isinstance(rules, RuleSet):
        rules = RuleSet(rules)

    arr = to_rgb_array(image)
    height, width = arr.shape[:2]
    assigned = match_indices(arr, rules)

    # np.nonzero walks C-order, i.e. row by row, left to right
    ys, xs = np.nonzero(assigned != UNMATCHED)
    names = [rule.item_name for rule in rules]
    grid: dict[tuple[int, int], str] = {}
    for x, y, idx in zip(xs.tolist(), ys.tolist(), assigned[ys, xs].tolist()):
        grid[(x, y)] = names[idx]

    return ScanResult(grid=grid, matched_count=len(grid), width=width, height=height)
