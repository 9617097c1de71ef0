from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal


class OutcomeBand(str, Enum):
    NONE = "none"
    OPPORTUNITY = "opportunity"
    THREAT = "threat"


RenderStatus = Literal[
    "filtered",
    "already_processed",
    "missing_difficulty",
    "no_band",
    "annotated",
    "persist_failed",
]


@dataclass(frozen=True)
class AnnotationRecord:
    band: OutcomeBand
    label: str
    style_class: str
    processed_marker: bool = True


@dataclass
class RenderOutcome:
    message_id: str
    status: RenderStatus
    difficulty: int | None = None
    margin: int | None = None
    band: OutcomeBand = OutcomeBand.NONE
    record: AnnotationRecord | None = None

    @property
    def annotated(self) -> bool:
        return self.status == "annotated"


@dataclass
class ChatReply:
    ok: bool
    message: str
