"""Ordered colour rules with first-match-wins precedence.

A RuleSet is validated once, when it is built. Matching never raises: a pixel
either yields the item name of the earliest rule that accepts it, or None.

Exact rules are bucketed into a dict keyed by colour. A lookup hit at index i
only has to be checked against range rules declared before i, so the result
is the same as scanning every rule in order.
"""

from __future__ import annotations

import numbers
import re
from collections.abc import Iterable, Iterator

from artorio.core.errors import InvalidRuleError
from artorio.core.types import RGB, ColorRule

_HEX_RE = re.compile(r'^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$')


def hex_to_rgb(value: str) -> RGB:
    """Parse '#rrggbb', 'rrggbb' or '#rgb'. Raises InvalidRuleError otherwise."""
    m = _HEX_RE.match(value.strip())
    if not m:
        raise InvalidRuleError(f'Invalid colour: {value!r} (expected #rrggbb)')
    h = m.group(1)
    if len(h) == 3:
        h = ''.join(c * 2 for c in h)
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))


def rgb_to_hex(rgb: RGB) -> str:
    return f'#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}'


def validate_rule(rule: ColorRule) -> None:
    if not isinstance(rule.item_name, str) or not rule.item_name.strip():
        raise InvalidRuleError('Rule item name must not be empty')
    colours = [rule.color_from, rule.color_to] if rule.use_range else [rule.color_from]
    for colour in colours:
        if len(colour) != 3 or any(not isinstance(c, numbers.Integral) or not 0 <= c <= 255 for c in colour):
            raise InvalidRuleError(f'Rule {rule.item_name!r}: colour {colour!r} is not an 8-bit RGB triple')
    if rule.use_range and any(lo > hi for lo, hi in zip(rule.color_from, rule.color_to)):
        raise InvalidRuleError(
            f'Rule {rule.item_name!r}: range start {rgb_to_hex(rule.color_from)} '
            f'exceeds end {rgb_to_hex(rule.color_to)} on at least one channel'
        )


class RuleSet:
    """Immutable, validated, ordered collection of ColorRule."""

    def __init__(self, rules: Iterable[ColorRule] = ()):
        self._rules: tuple[ColorRule, ...] = tuple(rules)
        for rule in self._rules:
            validate_rule(rule)

        # colour -> index of the first exact rule declaring it
        self._exact: dict[RGB, int] = {}
        # (index, rule) for range rules, in declared order
        self._ranges: list[tuple[int, ColorRule]] = []
        for i, rule in enumerate(self._rules):
            if rule.use_range:
                self._ranges.append((i, rule))
            else:
                self._exact.setdefault(rule.color_from, i)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[ColorRule]:
        return iter(self._rules)

    def __getitem__(self, index: int) -> ColorRule:
        return self._rules[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._rules == other._rules

    def __repr__(self) -> str:
        return f'RuleSet({list(self._rules)!r})'

    @property
    def rules(self) -> tuple[ColorRule, ...]:
        return self._rules

    def match_index(self, pixel: RGB) -> int | None:
        """Index of the first rule accepting pixel, or None."""
        key = (int(pixel[0]), int(pixel[1]), int(pixel[2]))
        exact_idx = self._exact.get(key)
        for i, rule in self._ranges:
            if exact_idx is not None and i > exact_idx:
                break
            if rule.matches(key):
                return i
        return exact_idx

    def match(self, pixel: RGB) -> str | None:
        """Item name of the first rule accepting pixel, or None for no match."""
        idx = self.match_index(pixel)
        return None if idx is None else self._rules[idx].item_name


def parse_rule_arg(text: str) -> ColorRule:
    """Parse a CLI rule: '#rrggbb=item' (exact) or '#rrggbb-#rrggbb=item' (range)."""
    colours, sep, item = text.partition('=')
    if not sep:
        raise InvalidRuleError(f'Invalid rule {text!r}: expected COLOUR=ITEM or FROM-TO=ITEM')
    item = item.strip()
    if '-' in colours:
        lo, _, hi = colours.partition('-')
        return ColorRule.range(hex_to_rgb(lo), hex_to_rgb(hi), item)
    return ColorRule.exact(hex_to_rgb(colours), item)
