from __future__ import annotations

import logging

from threatop.config import Settings, configure_logging
from threatop.db.store import Store
from threatop.discord_bot import run_discord_bot
from threatop.engine.render_engine import ThreatOpportunityEngine
from threatop.host import ChatHost
from threatop.i18n import Localizer


def build_host(settings: Settings) -> ChatHost:
    store = Store(settings.db_path)
    engine = ThreatOpportunityEngine(
        Localizer(settings.locale),
        scope=settings.flag_scope,
        system_id=settings.game_system,
    )
    return ChatHost(store, engine)


def main() -> None:
    settings = Settings()
    configure_logging(settings.dev_mode)
    logging.getLogger(__name__).info("app_start %s", settings.redacted())
    host = build_host(settings)
    run_discord_bot(host, settings)


if __name__ == "__main__":
    main()
