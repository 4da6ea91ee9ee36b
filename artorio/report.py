"""Report builder — text and JSON output for artorio commands."""

import json
from typing import Any

from artorio.core.rules import RuleSet, rgb_to_hex
from artorio.core.types import BlueprintDocument, ColorRule


def _bounds(doc: BlueprintDocument) -> tuple[int, int, int, int] | None:
    if not doc.items:
        return None
    xs = [item.grid_x for item in doc.items]
    ys = [item.grid_y for item in doc.items]
    return (min(xs), min(ys), max(xs), max(ys))


def document_summary(doc: BlueprintDocument) -> dict[str, Any]:
    bounds = _bounds(doc)
    return {
        'version': doc.version,
        'label': doc.label,
        'entities': len(doc.items),
        'bounds': list(bounds) if bounds else None,
        'items': doc.item_counts(),
    }


def format_text(doc: BlueprintDocument, source: str | None = None, matched_count: int | None = None) -> str:
    """Format a document summary as human-readable text."""
    lines = []
    header = f'artorio: {source}' if source else 'artorio: blueprint'
    if doc.label:
        header += f' — {doc.label!r}'
    lines.append(header)

    count = matched_count if matched_count is not None else len(doc.items)
    lines.append(f'  entities: {count}  (document v{doc.version})')
    bounds = _bounds(doc)
    if bounds:
        x1, y1, x2, y2 = bounds
        lines.append(f'  bounds: [{x1},{y1}→{x2},{y2}]')

    lines.append('')
    for name, n in doc.item_counts().items():
        pct = n / max(len(doc.items), 1) * 100
        lines.append(f'  {name:<24} {n:>7}  {pct:5.1f}%')
    return '\n'.join(lines)


def format_json(doc: BlueprintDocument, blueprint: str | None = None, source: str | None = None) -> str:
    """Format a document summary as JSON. Includes the blueprint string when given."""
    obj: dict[str, Any] = {}
    if source:
        obj['source'] = source
    obj.update(document_summary(doc))
    if blueprint is not None:
        obj['blueprint'] = blueprint
    return json.dumps(obj, indent=2, ensure_ascii=False)


def _rule_dict(rule: ColorRule) -> dict[str, Any]:
    obj: dict[str, Any] = {'range': rule.use_range, 'from': rgb_to_hex(rule.color_from)}
    if rule.use_range:
        obj['to'] = rgb_to_hex(rule.color_to)
    obj['item'] = rule.item_name
    return obj


def format_rules_text(rules: RuleSet, image_path: str = '') -> str:
    lines = []
    if image_path:
        lines.append(f'image: {image_path}')
    lines.append(f'{len(rules)} rule(s), first match wins:')
    for i, rule in enumerate(rules, start=1):
        if rule.use_range:
            colours = f'{rgb_to_hex(rule.color_from)}-{rgb_to_hex(rule.color_to)}'
        else:
            colours = rgb_to_hex(rule.color_from)
        lines.append(f'  {i:>3}. {colours:<15} → {rule.item_name}')
    return '\n'.join(lines)


def format_rules_json(rules: RuleSet, image_path: str = '') -> str:
    return json.dumps({'image': image_path, 'rules': [_rule_dict(r) for r in rules]}, indent=2, ensure_ascii=False)
