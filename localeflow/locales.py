"""Locale validation and resolution of locale command options."""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, List, Sequence, Union

from .errors import InvalidLocaleError

logger = logging.getLogger(__name__)

VALID_LOCALE_PATTERN = re.compile(r"^\w[\w\-.]*\Z", re.IGNORECASE | re.ASCII)
LIST_DELIMITER_PATTERN = re.compile(r"\s*[+:,]\s*")

ALL_TOKEN = "all"
BASE_TOKEN = "base"

RawLocales = Union[str, Sequence[str], None]
LocaleEnumerator = Callable[[], Iterable[str]]


def validate_locale(locale: object) -> str:
    """Return ``locale`` unchanged, or raise if it does not match the grammar."""

    if not isinstance(locale, str) or not VALID_LOCALE_PATTERN.match(locale):
        raise InvalidLocaleError(locale)
    return locale


def _flatten(raw: RawLocales) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    return [str(value) for value in raw if value is not None]


def explode_list(tokens: Sequence[str]) -> List[str]:
    """Split delimited tokens such as ``"en, fr+de"`` into single values."""

    exploded: List[str] = []
    for token in tokens:
        exploded.extend(
            piece for piece in LIST_DELIMITER_PATTERN.split(token.strip()) if piece
        )
    return exploded


class LocaleResolver:
    """Expands raw locale arguments into an ordered list of locale ids."""

    def __init__(self, base_locale: str, enumerate_all: LocaleEnumerator) -> None:
        self.base_locale = base_locale
        self.enumerate_all = enumerate_all

    def resolve(self, raw: RawLocales, *arguments: str) -> List[str]:
        """Resolve a ``--locales`` style value.

        ``arguments`` are positional command arguments; they come before the
        option value, the same way the command line lists them. ``"all"`` or
        an empty value yields every known locale. Duplicates are kept.
        """

        argv = list(arguments) + _flatten(raw)
        if argv == [ALL_TOKEN] or not any(token.strip() for token in argv):
            locales = list(self.enumerate_all())
        else:
            locales = [
                self.base_locale if value == BASE_TOKEN else value
                for value in explode_list(argv)
            ]
            for locale in locales:
                validate_locale(locale)

        logger.debug("locales for the command are %r", locales)
        return locales

    def resolve_single(self, raw: str | None) -> str:
        """Resolve a ``--locale`` style value; ``"base"`` or blank means the base locale."""

        if raw is None or not raw.strip() or raw == BASE_TOKEN:
            return self.base_locale
        return raw
