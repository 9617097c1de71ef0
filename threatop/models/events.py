from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

CheckType = Literal["skill-check", "attack", "save", "other"]

CHECK_TYPES: tuple[str, ...] = ("skill-check", "attack", "save", "other")


class DifficultyClass(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: int | None = None


class RollOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    # ordered: the first dc:<n> tag is the one that counts
    options: tuple[str, ...] = ()


class RollContext(BaseModel):
    """Roll metadata the game system attaches to a chat message."""

    model_config = ConfigDict(frozen=True)

    type: str | None = None
    options: frozenset[str] = Field(default_factory=frozenset)
    dc: DifficultyClass | None = None
    roll: RollOptions | None = None


class RollEvent(BaseModel):
    """Immutable snapshot of a rendered roll message.

    ``context`` is ``None`` when the message carries no game-system context
    or when that context could not be validated.
    """

    model_config = ConfigDict(frozen=True)

    message_id: str
    is_roll: bool = False
    roll_totals: list[int] = Field(default_factory=list)
    from_system: bool = False
    context: RollContext | None = None
    already_processed: bool = False

    @property
    def roll_total(self) -> int | None:
        return self.roll_totals[0] if self.roll_totals else None

    @property
    def check_type(self) -> CheckType:
        raw = self.context.type if self.context is not None else None
        if raw in CHECK_TYPES:
            return raw  # type: ignore[return-value]
        return "other"

    @property
    def target_difficulty(self) -> int | None:
        if self.context is None or self.context.dc is None:
            return None
        return self.context.dc.value
