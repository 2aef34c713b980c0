# ==============================================================================
# app/analytics/periods.py
# ------------------------------------------------------------------------------
# Date parsing and the predefined reporting periods of the sales dashboard.
# All periods are inclusive (start, end) pairs of dates.
# ==============================================================================

import calendar
from datetime import date, datetime, timedelta
from numbers import Number

import pandas as pd

PERIOD_LABELS = {
    'hoje': 'Hoje',
    'ontem': 'Ontem',
    'ultimos7dias': 'Últimos 7 dias',
    'ultimos30dias': 'Últimos 30 dias',
    'estemes': 'Este mês',
    'mespassado': 'Mês passado',
    'esteano': 'Este ano',
    'esteanoateagora': 'Este ano até agora',
    'anopassado': 'Ano passado',
    'personalizado': 'Personalizado',
}

DEFAULT_PERIOD = 'estemes'

_DATE_FORMATS = ('%d/%m/%Y', '%Y-%m-%d', '%d-%m-%Y', '%d/%m/%Y %H:%M:%S', '%Y-%m-%d %H:%M:%S')


def parse_date(value):
    """
    Reads a sheet cell as a date. Accepts datetime/date objects, Excel serial
    numbers and the text formats used upstream. Returns None when the value
    is empty or not a date.
    """
    if value is None or value == '' or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, Number):
        if pd.isna(value):
            return None
        # Excel serial date (days since 1899-12-30)
        return (pd.Timestamp('1899-12-30') + pd.to_timedelta(float(value), unit='D')).date()

    text = str(value).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def month_bounds(year, month):
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def resolve_period(key, today=None):
    """Returns the (start, end) dates of a predefined period."""
    today = today or date.today()

    if key == 'hoje':
        return today, today
    if key == 'ontem':
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday
    if key == 'ultimos7dias':
        return today - timedelta(days=6), today
    if key == 'ultimos30dias':
        return today - timedelta(days=29), today
    if key == 'mespassado':
        last_month_end = today.replace(day=1) - timedelta(days=1)
        return month_bounds(last_month_end.year, last_month_end.month)
    if key == 'esteano':
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if key == 'esteanoateagora':
        return date(today.year, 1, 1), today
    if key == 'anopassado':
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    return month_bounds(today.year, today.month)


def period_label(key):
    return PERIOD_LABELS.get(key, PERIOD_LABELS[DEFAULT_PERIOD])


def previous_year(period):
    """Same calendar dates one year earlier (29/02 falls back to 28/02)."""
    def shift(day):
        try:
            return day.replace(year=day.year - 1)
        except ValueError:
            return day.replace(year=day.year - 1, day=28)
    start, end = period
    return shift(start), shift(end)


def overlaps(start_a, end_a, start_b, end_b):
    return start_a <= end_b and end_a >= start_b


def format_date(value):
    """date -> "DD/MM/YYYY"; anything else -> "N/A"."""
    if isinstance(value, (date, datetime)):
        return value.strftime('%d/%m/%Y')
    return 'N/A'
