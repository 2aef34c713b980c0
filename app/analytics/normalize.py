# ==============================================================================
# app/analytics/normalize.py
# ------------------------------------------------------------------------------
# Parsing of raw spreadsheet cells into numbers, and Brazilian (pt-BR)
# formatting of numbers back into text for display and for the write path.
# ==============================================================================

import math
import re
import unicodedata
from decimal import Decimal, ROUND_HALF_UP
from numbers import Number

# "1.234" or "12.345.678": dots grouping thousands, no decimal part
_THOUSANDS_ONLY = re.compile(r'-?[1-9]\d{0,2}(\.\d{3})+')


def _to_float(value):
    """
    Reads a cell as a finite float, or returns None when it is not one.

    Strips the "R$" and "%" marks and any whitespace; a comma is the decimal
    separator and dots group thousands ("1.234,56", "1.234").
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Number):
        number = float(value)
        return number if math.isfinite(number) else None

    text = str(value).replace('R$', '').replace('%', '')
    text = re.sub(r'\s+', '', text)
    if not text:
        return None

    if ',' in text:
        text = text.replace('.', '').replace(',', '.')
    elif _THOUSANDS_ONLY.fullmatch(text):
        text = text.replace('.', '')

    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_number(value):
    """
    Converts any cell value into a float. Never raises.

    Accepts numbers (returned as float), Brazilian formatted text such as
    "R$ 1.234,56" or "12,5%", and empty values. Anything that does not parse
    into a finite number becomes 0.0.
    """
    number = _to_float(value)
    return 0.0 if number is None else number


def is_number(value):
    """True when the value is a number or text that reads as one ("R$ 1.000,00", "12,5%")."""
    return _to_float(value) is not None


def _swap_separators(text):
    return text.replace(',', 'X').replace('.', ',').replace('X', '.')


def _rounded(value, places):
    """Half-up rounding on the decimal text of the number (12.345 -> 12.35)."""
    exponent = Decimal(1).scaleb(-places)
    return Decimal(repr(parse_number(value))).quantize(exponent, rounding=ROUND_HALF_UP)


def format_number(value, places=0):
    """1234567 -> "1.234.567"; 1234.5 with places=2 -> "1.234,50"."""
    return _swap_separators(f"{_rounded(value, places):,.{places}f}")


def format_currency(value):
    """1234.56 -> "R$ 1.234,56"."""
    return f"R$ {format_number(value, 2)}"


def format_decimal(value, places=2):
    """Fixed decimals with a comma and no thousand separators: 1.5 -> "1,50"."""
    return f"{_rounded(value, places):.{places}f}".replace('.', ',')


def format_percent(value, places=2):
    """Value already expressed in percent units: 12.5 -> "12,50%"."""
    return f"{format_decimal(value, places)}%"


def format_integer(value):
    """Rounds half up: 7.5 -> "8"."""
    return str(int(math.floor(parse_number(value) + 0.5)))


def normalize_text(text):
    """Trims, uppercases and strips accents: " pós venda " -> "POS VENDA"."""
    if not text:
        return ''
    decomposed = unicodedata.normalize('NFD', str(text).strip().upper())
    return ''.join(ch for ch in decomposed if unicodedata.category(ch) != 'Mn')
