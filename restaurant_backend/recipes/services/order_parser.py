# recipes/services/order_parser.py

"""
POS ORDER-LINE PARSER

    "2 Burger [1 Add Cheese, 1 Extra Patty], 1 Fries"
    -> [OrderItem(2, "Burger", [Modifier(1, "Add Cheese"), Modifier(1, "Extra Patty")]),
        OrderItem(1, "Fries", [])]

- top-level items split on commas outside square brackets
- an item without a leading quantity counts as 1
- a modifier without a leading quantity counts as 1
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

ITEM_SPLIT = re.compile(r",(?![^\[]*\])")
ITEM_PATTERN = re.compile(r"^(\d+)\s+(.*?)(?:\s*\[(.*)\])?$")
MODIFIER_PATTERN = re.compile(r"^(\d+)\s+(.*)$")


@dataclass(frozen=True)
class Modifier:
    qty: int
    name: str


@dataclass(frozen=True)
class OrderItem:
    qty: int
    name: str
    modifiers: list[Modifier] = field(default_factory=list)


def _parse_modifiers(content: str | None) -> list[Modifier]:
    if not content:
        return []

    modifiers = []
    for part in content.split(","):
        part = part.strip()
        if not part:
            continue
        match = MODIFIER_PATTERN.match(part)
        if match:
            modifiers.append(Modifier(qty=int(match.group(1)), name=match.group(2).strip()))
        else:
            modifiers.append(Modifier(qty=1, name=part))
    return modifiers


def parse_order_line(line) -> list[OrderItem]:
    if not line or not isinstance(line, str):
        return []

    items = []
    for chunk in ITEM_SPLIT.split(line):
        chunk = chunk.strip()
        if not chunk:
            continue

        match = ITEM_PATTERN.match(chunk)
        if match:
            items.append(
                OrderItem(
                    qty=int(match.group(1)),
                    name=match.group(2).strip(),
                    modifiers=_parse_modifiers(match.group(3)),
                )
            )
        else:
            items.append(OrderItem(qty=1, name=chunk))
    return items
