from __future__ import annotations

import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)

LANG_DIR = Path(__file__).resolve().parent / "lang"
DEFAULT_LOCALE = "en"


def load_catalog(locale: str, lang_dir: Path = LANG_DIR) -> dict[str, str]:
    path = lang_dir / f"{locale}.json"
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    return {str(key): str(value) for key, value in data.items()}


class Localizer:
    """Looks up display strings by key; unknown keys come back unchanged."""

    def __init__(self, locale: str = DEFAULT_LOCALE, lang_dir: Path = LANG_DIR) -> None:
        self.fallback = load_catalog(DEFAULT_LOCALE, lang_dir)
        catalog = load_catalog(locale, lang_dir)
        if not catalog and locale != DEFAULT_LOCALE:
            log.warning("locale_missing locale=%s fallback=%s", locale, DEFAULT_LOCALE)
            locale = DEFAULT_LOCALE
            catalog = self.fallback
        self.locale = locale
        self.catalog = catalog

    def localize(self, key: str) -> str:
        if key in self.catalog:
            return self.catalog[key]
        if key in self.fallback:
            return self.fallback[key]
        log.debug("localization_key_missing locale=%s key=%s", self.locale, key)
        return key
