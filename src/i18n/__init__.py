"""
Message catalogs - message key to localized text.

The domain only emits message keys. The HTTP boundary negotiates a
locale from the Accept-Language header and passes it explicitly to
resolve(); there is no ambient "current language".
"""

import json
import logging
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).parent / "locales"


class MessageCatalog:
    """Read-only set of per-locale message tables."""

    def __init__(self, messages: dict[str, dict[str, str]], default_locale: str = "en") -> None:
        messages = {locale.lower(): table for locale, table in messages.items()}
        default_locale = default_locale.lower()
        if default_locale not in messages:
            raise ValueError(f"No catalog for default locale {default_locale!r}")
        self._messages = messages
        self.default_locale = default_locale

    @classmethod
    def load(cls, directory: Path = LOCALES_DIR, default_locale: str = "en") -> "MessageCatalog":
        """Load every ``<locale>.json`` file in the directory."""
        messages = {
            path.stem.lower(): json.loads(path.read_text(encoding="utf-8"))
            for path in sorted(directory.glob("*.json"))
        }
        logger.debug("Loaded message catalogs: %s", ", ".join(messages))
        return cls(messages, default_locale)

    @property
    def locales(self) -> list[str]:
        return list(self._messages)

    def negotiate(self, accept_language: str | None) -> str:
        """
        Pick the best supported locale for an Accept-Language value.

        Ranges are tried by descending q-value (ties keep header order);
        ``pl-PL`` falls back to ``pl``. Unsupported or missing headers
        yield the default locale.
        """
        if not accept_language:
            return self.default_locale

        ranges: list[tuple[float, str]] = []
        for part in accept_language.split(","):
            tag, _, params = part.strip().partition(";")
            tag = tag.strip().lower()
            if not tag:
                continue
            quality = 1.0
            params = params.strip()
            if params.startswith("q="):
                try:
                    quality = float(params[2:])
                except ValueError:
                    continue
            if quality > 0:
                ranges.append((quality, tag))

        for _, tag in sorted(ranges, key=lambda item: -item[0]):
            if tag == "*":
                return self.default_locale
            if tag in self._messages:
                return tag
            primary = tag.split("-", 1)[0]
            if primary in self._messages:
                return primary
        return self.default_locale

    def resolve(self, key: str, locale: str) -> str:
        """
        Render a message key in the locale.

        Falls back to the default locale, then to the key itself.
        """
        table = self._messages.get(locale, {})
        if key in table:
            return table[key]
        return self._messages[self.default_locale].get(key, key)


@lru_cache
def get_catalog(default_locale: str = "en") -> MessageCatalog:
    """Get cached catalog loaded from the bundled locale files."""
    return MessageCatalog.load(default_locale=default_locale)


__all__ = ["LOCALES_DIR", "MessageCatalog", "get_catalog"]
