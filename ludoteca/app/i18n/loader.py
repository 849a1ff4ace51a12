"""
ludoteca/app/i18n/loader.py

Message catalogue for the console.

messages.txt holds one entry per line:

    es:booking:success| "¡Reserva realizada con éxito!"

Lookups fall back to DEFAULT_LANG and finally to the key itself.
"""

import re
from pathlib import Path
from typing import Dict, Optional, Set

from ludoteca.app.config import DEFAULT_LANG as _CONFIGURED_LANG

MESSAGES: Dict[str, Dict[str, str]] = {}
AVAILABLE_LANGS: Set[str] = set()

DEFAULT_LANG = _CONFIGURED_LANG or "es"

MESSAGES_PATH = Path(__file__).resolve().parent / "messages.txt"

ENTRY_RE = re.compile(r'^(?P<lang>\w+):(?P<key>[^|]+)\|\s*"(?P<text>.*)"$')


def parse_entry(line: str) -> Optional[tuple[str, str, str]]:
    """(lang, key, text) for a catalogue line; None for blanks, comments and junk."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    match = ENTRY_RE.match(line)
    if match is None:
        return None

    text = match["text"].replace("\\n", "\n").strip()
    return match["lang"], match["key"].strip(), text


def load_messages(path: str | Path = MESSAGES_PATH) -> None:
    """(Re)load the catalogue; previous entries are dropped."""
    path = Path(path)

    MESSAGES.clear()
    AVAILABLE_LANGS.clear()

    if not path.exists():
        raise RuntimeError(f"messages file not found: {path}")

    for line in path.read_text(encoding="utf-8").splitlines():
        entry = parse_entry(line)
        if entry is None:
            continue
        lang, key, text = entry
        MESSAGES.setdefault(lang, {})[key] = text
        AVAILABLE_LANGS.add(lang)


def t(key: str, lang: str | None = None, *args) -> str:
    """Translated text; %-style args are applied when they fit the template."""
    lang = lang or DEFAULT_LANG
    text = MESSAGES.get(lang, {}).get(key) or MESSAGES.get(DEFAULT_LANG, {}).get(key) or key

    if not args:
        return text
    try:
        return text % args
    except (TypeError, ValueError):
        return text


def has_key(key: str, lang: str | None = None) -> bool:
    """True when the key is translated for lang (or the default language)."""
    return key in MESSAGES.get(lang or DEFAULT_LANG, {}) or key in MESSAGES.get(DEFAULT_LANG, {})


def get_available_langs() -> list[str]:
    return sorted(AVAILABLE_LANGS)
