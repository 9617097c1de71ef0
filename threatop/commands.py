from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

log = logging.getLogger(__name__)

CHECK_COMMAND = "!check"
RENDER_COMMAND = "!render"
DEFAULT_CHECK_TYPE = "skill-check"

TOTAL_RE = re.compile(r"[+-]?\d+")
DC_VALUE_RE = re.compile(r"dc=([+-]?\d+)")
TYPE_RE = re.compile(r"type:(\S+)")


@dataclass(frozen=True)
class RollReport:
    """A roll result reported in chat, in the shape the game system attaches to its messages."""

    total: int
    check_type: str = DEFAULT_CHECK_TYPE
    dc_value: int | None = None
    options: tuple[str, ...] = ()
    roll_options: tuple[str, ...] = ()

    def context(self) -> dict[str, Any]:
        context: dict[str, Any] = {"type": self.check_type, "options": list(self.options)}
        if self.dc_value is not None:
            context["dc"] = {"value": self.dc_value}
        if self.roll_options:
            context["roll"] = {"options": list(self.roll_options)}
        return context

    def flags(self, system_id: str) -> dict[str, Any]:
        return {system_id: {"context": self.context()}}

    def rolls(self) -> list[dict[str, int]]:
        return [{"total": self.total}]


def parse_roll_command(text: str) -> RollReport | None:
    """Parse ``!check <total> [dc=<n>] [dc:<n>] [type:<category>] [tag ...]``."""
    tokens = text.strip().split()
    if len(tokens) < 2 or tokens[0].lower() != CHECK_COMMAND:
        return None
    if not TOTAL_RE.fullmatch(tokens[1]):
        log.debug("roll_command_bad_total text=%s", text)
        return None

    check_type = DEFAULT_CHECK_TYPE
    dc_value: int | None = None
    options: list[str] = []
    roll_options: list[str] = []
    for raw in tokens[2:]:
        token = raw.lower()
        dc_match = DC_VALUE_RE.fullmatch(token)
        type_match = TYPE_RE.fullmatch(token)
        if dc_match:
            dc_value = int(dc_match.group(1))
        elif token.startswith("dc:"):
            roll_options.append(token)
        elif type_match:
            check_type = type_match.group(1)
        elif token not in options:
            options.append(token)
    return RollReport(
        total=int(tokens[1]),
        check_type=check_type,
        dc_value=dc_value,
        options=tuple(options),
        roll_options=tuple(roll_options),
    )


def parse_render_command(text: str) -> str | None:
    tokens = text.strip().split()
    if len(tokens) != 2 or tokens[0].lower() != RENDER_COMMAND:
        return None
    return tokens[1]
