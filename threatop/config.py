from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    db_path: str = os.getenv("DB_PATH", "chatlog.db")
    dev_mode: bool = os.getenv("DEV_MODE", "0") == "1"
    discord_token: str | None = os.getenv("DISCORD_TOKEN")
    bot_channel: str = os.getenv("BOT_CHANNEL", "dice").strip().lstrip("#")
    locale: str = os.getenv("LOCALE", "en").strip().lower()
    flag_scope: str = os.getenv("FLAG_SCOPE", "pf2e-threat-opportunity")
    game_system: str = os.getenv("GAME_SYSTEM", "pf2e")

    def redacted(self) -> dict[str, object]:
        return {
            "db_path": self.db_path,
            "dev_mode": self.dev_mode,
            "discord_token_set": bool(self.discord_token),
            "bot_channel": self.bot_channel,
            "locale": self.locale,
            "flag_scope": self.flag_scope,
            "game_system": self.game_system,
        }


def configure_logging(dev_mode: bool) -> None:
    level = logging.DEBUG if dev_mode else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
