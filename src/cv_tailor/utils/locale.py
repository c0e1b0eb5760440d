"""Locale resolution for prompt language and localized dates."""

from __future__ import annotations

import logging
from datetime import date

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "fr": "French",
    "pt": "Portuguese",
}

_MONTHS: dict[str, list[str]] = {
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
    "fr": [
        "janvier", "février", "mars", "avril", "mai", "juin",
        "juillet", "août", "septembre", "octobre", "novembre", "décembre",
    ],
    "pt": [
        "janeiro", "fevereiro", "março", "abril", "maio", "junho",
        "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
    ],
}


def is_supported(locale: str | None) -> bool:
    return (locale or "").strip() in LANGUAGE_NAMES


def resolve_locale(locale: str | None) -> str:
    """Return a supported locale code, degrading to English with a warning.

    Empty or missing values silently mean the default; anything else that is
    not supported is logged once and replaced.
    """
    code = (locale or "").strip()
    if not code:
        return DEFAULT_LOCALE
    if code not in LANGUAGE_NAMES:
        logger.warning('Unsupported locale "%s", defaulting to English', code)
        return DEFAULT_LOCALE
    return code


def language_name(locale: str) -> str:
    """Display name of an already-resolved locale."""
    return LANGUAGE_NAMES.get(locale, LANGUAGE_NAMES[DEFAULT_LOCALE])


def format_month_year(value: date, locale: str) -> str:
    """Format as e.g. 'January 2024', 'janvier 2024', 'janeiro de 2024'."""
    months = _MONTHS.get(locale, _MONTHS[DEFAULT_LOCALE])
    month = months[value.month - 1]
    if locale == "pt":
        return f"{month} de {value.year}"
    return f"{month} {value.year}"
