"""Assemble a BlueprintDocument from a scanned pixel grid.

Pixel (x, y) becomes placement (x, y): one entity per matched pixel, no
scaling. An optional origin is subtracted from every coordinate, which lets
the caller centre the blueprint on the cursor when it is pasted in game.
"""

from __future__ import annotations

from artorio.core.errors import NoMatchesError
from artorio.core.types import DOCUMENT_VERSION, BlueprintDocument, PlacedItem, ScanResult


def assemble(
    grid: dict[tuple[int, int], str],
    matched_count: int,
    label: str | None = None,
    origin: tuple[int, int] = (0, 0),
) -> BlueprintDocument:
    """Build the document. Item order follows the grid's (row-major) order."""
    if matched_count == 0 or not grid:
        raise NoMatchesError('No pixel matched any rule; nothing to place')

    ox, oy = origin
    items = tuple(PlacedItem(grid_x=x - ox, grid_y=y - oy, item_name=name) for (x, y), name in grid.items())
    return BlueprintDocument(version=DOCUMENT_VERSION, items=items, label=label)


def centre_origin(scan: ScanResult) -> tuple[int, int]:
    """Origin that puts the image centre at placement (0, 0)."""
    return (scan.width // 2, scan.height // 2)


def assemble_scan(scan: ScanResult, label: str | None = None, centre: bool = False) -> BlueprintDocument:
    origin = centre_origin(scan) if centre else (0, 0)
    return assemble(scan.grid, scan.matched_count, label=label, origin=origin)
