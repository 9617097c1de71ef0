from __future__ import annotations

import logging
import sqlite3

from threatop.commands import parse_render_command, parse_roll_command
from threatop.db.store import ChatMessage, Store
from threatop.engine.annotator import detail_class
from threatop.engine.classifier import resolve_difficulty
from threatop.engine.render_engine import ThreatOpportunityEngine
from threatop.engine.roll_filter import read_roll_event
from threatop.markup import build_roll_content, find_annotations
from threatop.models.core import ChatReply, RenderOutcome

log = logging.getLogger(__name__)

HELP_TEXT = (
    "Commands: !check <total> [dc=<n>] [dc:<n>] [type:<skill-check|attack|save|other>] [tags...]"
    " | !render <message-id>"
)


class ChatHost:
    """Chat log side of the bot: records reported rolls and re-renders stored messages."""

    def __init__(self, store: Store, engine: ThreatOpportunityEngine) -> None:
        self.store = store
        self.engine = engine

    def handle_message(self, message_id: str, author_id: str, author_name: str, text: str, channel: str = "") -> ChatReply | None:
        log.info("chat_message_received message=%s author=%s text=%s", message_id, author_id, text)
        stripped = text.strip()
        if stripped.lower() == "!help":
            return ChatReply(True, HELP_TEXT)
        target = parse_render_command(stripped)
        if target is not None:
            return self.rerender(target)
        if stripped.lower().startswith("!check"):
            return self.record_roll(message_id, author_id, author_name, stripped, channel)
        return None

    def record_roll(self, message_id: str, author_id: str, author_name: str, text: str, channel: str = "") -> ChatReply:
        report = parse_roll_command(text)
        if report is None:
            return ChatReply(False, f"Could not read that roll. {HELP_TEXT}")
        try:
            message = self.store.create_message(
                message_id,
                author_id,
                build_roll_content(author_name, report.check_type, report.total),
                author_name=author_name,
                channel=channel,
                rolls=report.rolls(),
                flags=report.flags(self.engine.system_id),
            )
        except sqlite3.IntegrityError:
            log.warning("chat_message_duplicate message=%s", message_id)
            return ChatReply(False, f"Message {message_id} is already recorded.")
        outcome = self.engine.handle_render(message)
        return ChatReply(True, self.describe(message, outcome, author_name))

    def rerender(self, message_id: str) -> ChatReply:
        message = self.store.get_message(message_id)
        if message is None:
            return ChatReply(False, f"No roll recorded for message {message_id}.")
        outcome = self.engine.handle_render(message)
        return ChatReply(True, self.describe(message, outcome, message.author_name))

    def describe(self, message: ChatMessage, outcome: RenderOutcome, author_name: str) -> str:
        total = message.rolls[0].get("total") if message.rolls else "?"
        line = f"{author_name} rolled {total}"
        difficulty = outcome.difficulty
        if difficulty is None and outcome.status == "already_processed":
            difficulty = resolve_difficulty(read_roll_event(message, self.engine.scope, self.engine.system_id))
        if difficulty is not None:
            line += f" vs DC {difficulty}"
        labels = [label for _, label in find_annotations(message.content, detail_class(self.engine.scope))]
        if labels:
            return f"{line}: **{labels[0]}**"
        if outcome.status == "persist_failed":
            return f"{line} (annotation could not be saved)"
        return f"{line}."
