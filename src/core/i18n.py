"""Locale dictionaries and the translation function handed to notifications."""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Mapping

LOGGER = logging.getLogger(__name__)

LOCALES_DIR = os.path.join(os.path.dirname(__file__), "locales")
DEFAULT_LANG = "en"
PLURAL_SEPARATOR = "||||"

_PLACEHOLDER = re.compile(r"%\{(\w+)\}")


def load_locale(lang: str) -> dict[str, Any]:
    """Load the dictionary for ``lang``, falling back to English."""

    path = os.path.join(LOCALES_DIR, f"{lang}.json")
    if not os.path.exists(path):
        LOGGER.warning("No locale for %r, falling back to %s", lang, DEFAULT_LANG)
        path = os.path.join(LOCALES_DIR, f"{DEFAULT_LANG}.json")
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _plural_index(lang: str, count: Any) -> int:
    try:
        number = abs(float(count))
    except (TypeError, ValueError):
        return 0
    # French treats 0 as singular.
    if lang == "fr":
        return 0 if number < 2 else 1
    return 0 if number == 1 else 1


class Translation:
    """Polyglot-style lookups: dotted keys, %{name} placeholders, plural forms."""

    def __init__(self, lang: str, dictionary: Mapping[str, Any] | None = None) -> None:
        self.lang = lang
        self.dictionary = dictionary if dictionary is not None else load_locale(lang)

    def _lookup(self, key: str) -> Any:
        node: Any = self.dictionary
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def t(self, key: str, **params: Any) -> str:
        phrase = self._lookup(key)
        if not isinstance(phrase, str):
            LOGGER.warning("Missing translation for %s (%s)", key, self.lang)
            return key

        if PLURAL_SEPARATOR in phrase and "smart_count" in params:
            forms = [form.strip() for form in phrase.split(PLURAL_SEPARATOR)]
            index = min(_plural_index(self.lang, params["smart_count"]), len(forms) - 1)
            phrase = forms[index]

        return _PLACEHOLDER.sub(
            lambda match: str(params.get(match.group(1), match.group(0))),
            phrase,
        )
