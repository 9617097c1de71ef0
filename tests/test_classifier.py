from __future__ import annotations

import pytest

from threatop.engine.classifier import classify, classify_margin, margin, resolve_difficulty
from threatop.models.core import OutcomeBand
from threatop.models.events import RollContext, RollEvent


def _event(context: dict | None) -> RollEvent:
    return RollEvent(
        message_id="m1",
        is_roll=True,
        roll_totals=[15],
        from_system=True,
        context=RollContext.model_validate(context) if context is not None else None,
    )


@pytest.mark.parametrize(
    ("value", "band"),
    [
        (-3, OutcomeBand.OPPORTUNITY),
        (-4, OutcomeBand.NONE),
        (9, OutcomeBand.OPPORTUNITY),
        (10, OutcomeBand.NONE),
        (0, OutcomeBand.THREAT),
        (2, OutcomeBand.THREAT),
        (1, OutcomeBand.NONE),
        (-7, OutcomeBand.THREAT),
        (-6, OutcomeBand.NONE),
    ],
)
def test_margin_boundaries(value, band):
    assert classify_margin(value) is band


def test_band_table_is_literal_and_asymmetric():
    opportunity = {m for m in range(-20, 21) if classify_margin(m) is OutcomeBand.OPPORTUNITY}
    threat = {m for m in range(-20, 21) if classify_margin(m) is OutcomeBand.THREAT}
    assert opportunity == {-3, -2, -1, 7, 8, 9}
    assert threat == {-9, -8, -7, 0, 2}
    for value in (1, -4, -5, -6, 3, 4, 5, 6, 10, 25, -10, -30):
        assert classify_margin(value) is OutcomeBand.NONE


def test_classify_depends_only_on_margin():
    assert classify(15, 13) is classify(5, 3) is OutcomeBand.THREAT
    assert classify(10, 13) is OutcomeBand.OPPORTUNITY
    first = [classify_margin(m) for m in range(-12, 13)]
    second = [classify_margin(m) for m in reversed(range(-12, 13))]
    assert first == list(reversed(second))


def test_margin_is_signed_and_unclamped():
    assert margin(3, 40) == -37
    assert margin(40, 3) == 37


def test_difficulty_prefers_structured_dc():
    event = _event({"type": "skill-check", "dc": {"value": 18}, "roll": {"options": ["dc:12"]}})
    assert resolve_difficulty(event) == 18


def test_difficulty_falls_back_to_dc_option():
    event = _event({"type": "skill-check", "roll": {"options": ["secret", "dc:21"]}})
    assert resolve_difficulty(event) == 21


def test_first_dc_option_in_delivery_order_wins():
    event = _event({"type": "skill-check", "roll": {"options": ["dc:15", "dc:12"]}})
    assert resolve_difficulty(event) == 15
    event = _event({"type": "skill-check", "roll": {"options": ["dc:hard", "dc:20", "dc:11"]}})
    assert resolve_difficulty(event) == 20

def test_difficulty_fallback_requires_integer_suffix():
    event = _event({"type": "skill-check", "roll": {"options": ["dc:hard", "dc", "xdc:14"]}})
    assert resolve_difficulty(event) is None


def test_difficulty_missing_everywhere():
    assert resolve_difficulty(_event({"type": "skill-check"})) is None
    assert resolve_difficulty(_event({"type": "skill-check", "dc": {}})) is None
    assert resolve_difficulty(_event(None)) is None
