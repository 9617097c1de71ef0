from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from threatop.db.schema import init_db

log = logging.getLogger(__name__)


class MessageNotFoundError(LookupError):
    pass


class ChatMessage:
    """Handle on a chat-log message.

    Flag reads go to the database each time so that a marker written by an
    earlier render is always observed.
    """

    def __init__(self, store: Store, row: sqlite3.Row) -> None:
        self.store = store
        self.message_id: str = row["message_id"]
        self.author_id: str = row["author_id"]
        self.author_name: str = row["author_name"] or row["author_id"]
        self.channel: str = row["channel"]
        self.content: str = row["content"]
        self.is_roll = bool(row["is_roll"])
        self.rolls: list[dict[str, Any]] = _load_json(row["rolls_json"], [])
        self.flags: dict[str, Any] = _load_json(row["flags_json"], {})

    def get_flag(self, scope: str, key: str) -> Any:
        return self.store.get_message_flag(self.message_id, scope, key)

    def set_flag(self, scope: str, key: str, value: Any) -> None:
        self.flags = self.store.set_message_flag(self.message_id, scope, key, value)

    def update(self, content: str) -> None:
        self.store.update_message_content(self.message_id, content)
        self.content = content


def _load_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        log.warning("chat_message_json_invalid raw=%r", raw[:80])
        return default


class Store:
    def __init__(self, db_path: str) -> None:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        # one connection shared by the bot's worker threads
        self.lock = threading.RLock()
        init_db(self.conn)

    @contextmanager
    def tx(self) -> Iterator[sqlite3.Connection]:
        with self.lock:
            log.debug("transaction_start")
            try:
                yield self.conn
                self.conn.commit()
                log.debug("transaction_commit")
            except Exception:
                self.conn.rollback()
                log.exception("transaction_rollback")
                raise

    def create_message(
        self,
        message_id: str,
        author_id: str,
        content: str,
        *,
        author_name: str = "",
        channel: str = "",
        rolls: list[dict[str, Any]] | None = None,
        flags: dict[str, Any] | None = None,
    ) -> ChatMessage:
        rolls = rolls or []
        log.info("chat_message_create message=%s author=%s rolls=%s", message_id, author_id, len(rolls))
        with self.tx() as conn:
            conn.execute(
                """
                INSERT INTO chat_messages(message_id, author_id, author_name, channel, content, is_roll, rolls_json, flags_json)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    message_id,
                    author_id,
                    author_name,
                    channel,
                    content,
                    1 if rolls else 0,
                    json.dumps(rolls, sort_keys=True),
                    json.dumps(flags or {}, sort_keys=True),
                ),
            )
        message = self.get_message(message_id)
        if message is None:
            raise MessageNotFoundError(message_id)
        return message

    def get_message(self, message_id: str) -> ChatMessage | None:
        with self.lock:
            row = self.conn.execute("SELECT * FROM chat_messages WHERE message_id = ?", (message_id,)).fetchone()
        if row is None:
            return None
        return ChatMessage(self, row)

    def get_message_flag(self, message_id: str, scope: str, key: str) -> Any:
        with self.lock:
            row = self.conn.execute("SELECT flags_json FROM chat_messages WHERE message_id = ?", (message_id,)).fetchone()
        if row is None:
            return None
        flags = _load_json(row["flags_json"], {})
        scoped = flags.get(scope)
        if not isinstance(scoped, dict):
            return None
        return scoped.get(key)

    def set_message_flag(self, message_id: str, scope: str, key: str, value: Any) -> dict[str, Any]:
        with self.tx() as conn:
            row = conn.execute("SELECT flags_json FROM chat_messages WHERE message_id = ?", (message_id,)).fetchone()
            if row is None:
                raise MessageNotFoundError(message_id)
            flags = _load_json(row["flags_json"], {})
            scoped = flags.get(scope)
            if not isinstance(scoped, dict):
                scoped = {}
            scoped[key] = value
            flags[scope] = scoped
            conn.execute(
                "UPDATE chat_messages SET flags_json = ? WHERE message_id = ?",
                (json.dumps(flags, sort_keys=True), message_id),
            )
        log.debug("chat_message_flag_set message=%s scope=%s key=%s", message_id, scope, key)
        return flags

    def update_message_content(self, message_id: str, content: str) -> None:
        with self.tx() as conn:
            cursor = conn.execute(
                "UPDATE chat_messages SET content = ? WHERE message_id = ?",
                (content, message_id),
            )
            if cursor.rowcount == 0:
                raise MessageNotFoundError(message_id)
        log.debug("chat_message_content_updated message=%s", message_id)
