from __future__ import annotations

import re

from threatop.models.core import OutcomeBand
from threatop.models.events import RollEvent

OPPORTUNITY_MARGINS = frozenset({-3, -2, -1, 7, 8, 9})
THREAT_MARGINS = frozenset({-9, -8, -7, 0, 2})

DC_OPTION_RE = re.compile(r"dc:([+-]?\d+)")


def resolve_difficulty(event: RollEvent) -> int | None:
    context = event.context
    if context is None:
        return None
    if context.dc is not None and context.dc.value is not None:
        return context.dc.value
    if context.roll is None:
        return None
    for option in context.roll.options:
        match = DC_OPTION_RE.fullmatch(option)
        if match:
            return int(match.group(1))
    return None


def margin(roll_total: int, difficulty: int) -> int:
    return roll_total - difficulty


def classify_margin(value: int) -> OutcomeBand:
    if value in OPPORTUNITY_MARGINS:
        return OutcomeBand.OPPORTUNITY
    if value in THREAT_MARGINS:
        return OutcomeBand.THREAT
    return OutcomeBand.NONE


def classify(roll_total: int, difficulty: int) -> OutcomeBand:
    return classify_margin(margin(roll_total, difficulty))
