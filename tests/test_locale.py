"""Tests for locale resolution and localized dates."""

import logging
from datetime import date

import pytest

from cv_tailor.utils.locale import (
    format_month_year,
    is_supported,
    language_name,
    resolve_locale,
)


class TestResolveLocale:
    @pytest.mark.parametrize("code", ["en", "fr", "pt"])
    def test_supported(self, code):
        assert is_supported(code)
        assert resolve_locale(code) == code

    def test_strips_whitespace(self):
        assert resolve_locale(" fr ") == "fr"

    def test_blank_defaults_silently(self, caplog):
        with caplog.at_level(logging.WARNING, logger="cv_tailor.utils.locale"):
            assert resolve_locale("") == "en"
            assert resolve_locale(None) == "en"
        assert caplog.records == []

    def test_unsupported_warns_once(self, caplog):
        with caplog.at_level(logging.WARNING, logger="cv_tailor.utils.locale"):
            assert resolve_locale("xx") == "en"
        assert len(caplog.records) == 1
        assert '"xx"' in caplog.records[0].getMessage()


class TestFormatting:
    def test_language_names(self):
        assert language_name("en") == "English"
        assert language_name("fr") == "French"
        assert language_name("pt") == "Portuguese"

    @pytest.mark.parametrize(
        "locale,expected",
        [
            ("en", "January 2024"),
            ("fr", "janvier 2024"),
            ("pt", "janeiro de 2024"),
        ],
    )
    def test_month_year(self, locale, expected):
        assert format_month_year(date(2024, 1, 15), locale) == expected

    def test_month_year_december(self):
        assert format_month_year(date(2023, 12, 1), "fr") == "décembre 2023"
