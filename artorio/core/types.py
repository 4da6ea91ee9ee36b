"""Shared types for artorio: ColorRule, PlacedItem, BlueprintDocument, ScanResult, Command."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from artorio.core.errors import InvalidRuleError

RGB = tuple[int, int, int]

# Schema version of BlueprintDocument understood by the codec
DOCUMENT_VERSION = 1


@dataclass(frozen=True)
class ColorRule:
    """One colour predicate bound to an item name.

    An exact rule matches only color_from. A range rule matches any colour
    inside the inclusive box [color_from, color_to], checked per channel.
    """

    use_range: bool
    color_from: RGB
    color_to: RGB = (0, 0, 0)  # unused unless use_range
    item_name: str = ''

    def __post_init__(self) -> None:
        # Accept lists and numpy rows; store hashable tuples
        for name in ('color_from', 'color_to'):
            try:
                object.__setattr__(self, name, tuple(getattr(self, name)))
            except TypeError as exc:
                value = getattr(self, name)
                raise InvalidRuleError(f'Rule {self.item_name!r}: {name} {value!r} is not an RGB triple') from exc

    @classmethod
    def exact(cls, color: RGB, item_name: str) -> ColorRule:
        return cls(use_range=False, color_from=color, color_to=color, item_name=item_name)

    @classmethod
    def range(cls, color_from: RGB, color_to: RGB, item_name: str) -> ColorRule:
        return cls(use_range=True, color_from=color_from, color_to=color_to, item_name=item_name)

    def matches(self, pixel: RGB) -> bool:
        r, g, b = pixel[0], pixel[1], pixel[2]
        if not self.use_range:
            return (r, g, b) == self.color_from
        lo, hi = self.color_from, self.color_to
        return lo[0] <= r <= hi[0] and lo[1] <= g <= hi[1] and lo[2] <= b <= hi[2]


@dataclass(frozen=True)
class PlacedItem:
    """A single entity placement in the blueprint grid."""

    grid_x: int
    grid_y: int
    item_name: str


@dataclass(frozen=True)
class BlueprintDocument:
    """Structured description of a construction, prior to encoding."""

    version: int = DOCUMENT_VERSION
    items: tuple[PlacedItem, ...] = ()
    label: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, 'items', tuple(self.items))

    def item_counts(self) -> dict[str, int]:
        """Number of placements per item name, most common first."""
        counts: dict[str, int] = {}
        for item in self.items:
            counts[item.item_name] = counts.get(item.item_name, 0) + 1
        return dict(sorted(counts.items(), key=lambda x: -x[1]))


@dataclass
class ScanResult:
    """Output of the pixel matcher. grid keys are (x, y), in row-major order."""

    grid: dict[tuple[int, int], str] = field(default_factory=dict)
    matched_count: int = 0
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class ConversionResult:
    blueprint: str
    matched_count: int
    document: BlueprintDocument


class Command:
    """A self-registering CLI command.

    Usage in a command module:

        command = Command(name='convert', help='Convert an image to a blueprint')

        @command.arguments
        def add_arguments(parser):
            ...

        @command.run
        def run(args):
            ...
    """

    def __init__(self, name: str, help: str = ''):
        self.name = name
        self.help = help
        self._run_fn: Callable | None = None
        self._args_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def arguments(self, fn: Callable) -> Callable:
        """Decorator to register the argparse setup function."""
        self._args_fn = fn
        return fn

    def add_arguments(self, parser: Any) -> None:
        if self._args_fn is not None:
            self._args_fn(parser)

    def execute(self, args: Any) -> int:
        """Execute the command's run function. Returns the exit code."""
        if self._run_fn is None:
            raise RuntimeError(f'Command {self.name} has no run function')
        return self._run_fn(args) or 0
