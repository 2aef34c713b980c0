# tests/test_normalize.py

import math

import pytest

from app.analytics.normalize import (parse_number, is_number, format_currency, format_percent,
                                     format_integer, format_decimal, format_number, normalize_text)


@pytest.mark.parametrize("raw, expected", [
    ("1.234,56", 1234.56),
    ("12,5%", 12.5),
    ("R$ 1.000.000,00", 1000000.0),
    ("8.5", 8.5),
    ("1.234.567", 1234567.0),
    ("-3,5", -3.5),
    (" 42 ", 42.0),
    (7, 7.0),
    (2.25, 2.25),
])
def test_parse_number_reads_brazilian_formats(raw, expected):
    assert parse_number(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", None, "abc", "R$", True, False, float('nan'), float('inf'), "1,2,3"])
def test_parse_number_never_raises_and_falls_back_to_zero(raw):
    assert parse_number(raw) == 0.0


def test_is_number():
    assert is_number("8,5")
    assert is_number(3)
    assert is_number("1.234,56")
    assert is_number("R$ 1.000,00")
    assert is_number("12,5%")
    assert not is_number("R$")
    assert not is_number("1,2,3")
    assert not is_number("Centro")
    assert not is_number("")
    assert not is_number(None)
    assert not is_number(math.nan)


def test_formatters():
    assert format_currency(1234.56) == "R$ 1.234,56"
    assert format_currency("R$ 1.000.000,00") == "R$ 1.000.000,00"
    assert format_percent(12.345) == "12,35%"
    assert format_integer(7.6) == "8"
    assert format_integer(7.5) == "8"
    assert format_decimal(1.5, places=1) == "1,5"
    assert format_decimal("0,25") == "0,25"
    assert format_number(1234567) == "1.234.567"


def test_normalize_text_strips_accents_and_case():
    assert normalize_text(" pós venda ") == "POS VENDA"
    assert normalize_text("Venda") == "VENDA"
    assert normalize_text(None) == ""
