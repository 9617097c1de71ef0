from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from threatop.models.events import RollContext, RollEvent

log = logging.getLogger(__name__)

ATTACK_OPTIONS = frozenset({"action:strike", "action:attack-roll"})


def _total(roll: Any) -> int | None:
    total = roll.get("total") if isinstance(roll, dict) else None
    if isinstance(total, bool) or not isinstance(total, int):
        return None
    return total


def _roll_totals(rolls: Any) -> list[int]:
    if not isinstance(rolls, list) or not rolls or _total(rolls[0]) is None:
        return []
    # only the first roll is classified; malformed later rolls are dropped
    return [t for t in (_total(roll) for roll in rolls) if t is not None]


def read_roll_event(message, scope: str, system_id: str) -> RollEvent:
    """Snapshot a host message as a RollEvent without ever raising on bad metadata."""
    flags = message.flags if isinstance(message.flags, dict) else {}
    system_flags = flags.get(system_id)
    context = None
    if isinstance(system_flags, dict) and system_flags.get("context") is not None:
        try:
            context = RollContext.model_validate(system_flags["context"])
        except ValidationError as exc:
            log.debug("roll_context_invalid message=%s errors=%s", message.message_id, exc.error_count())
    return RollEvent(
        message_id=str(message.message_id),
        is_roll=bool(message.is_roll),
        roll_totals=_roll_totals(message.rolls),
        from_system=isinstance(system_flags, dict),
        context=context,
        already_processed=bool(message.get_flag(scope, "processed")),
    )


def is_attack(context: RollContext) -> bool:
    return context.type == "attack" or bool(ATTACK_OPTIONS & context.options)


def should_process(event: RollEvent | None) -> bool:
    if event is None:
        return False
    if not event.is_roll or not event.roll_totals or not event.from_system:
        return False
    if event.already_processed:
        return False
    context = event.context
    if context is None:
        return False
    if event.check_type != "skill-check":
        return False
    if is_attack(context) or event.check_type == "save":
        return False
    return True
