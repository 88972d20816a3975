"""Localized message catalog for user-facing error text.

Messages use the ``%{name}`` interpolation syntax, the same syntax used by
translation instruction templates, so both go through :func:`interpolate`.
A literal ``%`` is written as ``%%``.
"""

from __future__ import annotations

import re
from typing import Any, Dict

PLACEHOLDER_PATTERN = re.compile(r"%%|%\{(\w+)\}")

CATALOG: Dict[str, Dict[str, str]] = {
    "en": {
        "error": "An unexpected error occurred.",
        "invalid_locale": "Invalid locale: %{invalid}",
        "no_locales": "No locales to operate on. Configure LOCALEFLOW_LOCALES or pass --locales.",
        "no_results": "The translation provider returned no results.",
        "provider_configuration": "The translation provider is misconfigured.",
        "missing_dependency": (
            "The %{provider} provider requires the '%{package}' package. "
            "Install it with `pip install %{package}`."
        ),
        "unknown_provider": "Unknown translation provider '%{name}'.",
        "provider_failed": "Translation service temporarily unavailable: %{reason}",
        "provider_malformed": "Translation provider response malformed: %{reason}",
        "provider_count_mismatch": (
            "Translation provider returned %{actual} strings for a batch of %{expected}."
        ),
        "batch_failed": "Batch %{batch} failed: %{reason}",
    },
}

DEFAULT_LOCALE = "en"
_current_locale = DEFAULT_LOCALE


def set_locale(locale: str) -> None:
    """Select the catalog used for subsequent lookups."""

    global _current_locale
    _current_locale = locale if locale in CATALOG else DEFAULT_LOCALE


def interpolate(template: str, **values: Any) -> str:
    """Replace ``%{name}`` placeholders; unknown names are left untouched."""

    def replace(match: re.Match[str]) -> str:
        if match.group(0) == "%%":
            return "%"
        name = match.group(1)
        if name not in values:
            return match.group(0)
        return str(values[name])

    return PLACEHOLDER_PATTERN.sub(replace, template)


def t(key: str, **data: Any) -> str:
    """Look up ``key`` in the active catalog and interpolate ``data``."""

    catalog = CATALOG.get(_current_locale) or CATALOG[DEFAULT_LOCALE]
    template = catalog.get(key) or CATALOG[DEFAULT_LOCALE].get(key)
    if template is None:
        return key
    return interpolate(template, **data)
