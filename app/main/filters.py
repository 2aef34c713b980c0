# ==============================================================================
# app/main/filters.py
# ------------------------------------------------------------------------------
# Defines custom Jinja2 template filters for the application (pt-BR formats).
# ==============================================================================

from app.main import bp
from app.analytics.normalize import format_currency, format_decimal, format_number, format_percent
from app.analytics.periods import format_date


@bp.app_template_filter('brl')
def brl_filter(value):
    """
    Formats a value as Brazilian currency.
    Example: 1234.5 -> "R$ 1.234,50"
    """
    return format_currency(value)


@bp.app_template_filter('pt_number')
def pt_number_filter(value, places=0):
    return format_number(value, places)


@bp.app_template_filter('pt_decimal')
def pt_decimal_filter(value, places=2):
    return format_decimal(value, places)


@bp.app_template_filter('pt_percent')
def pt_percent_filter(value, places=1):
    """Fraction -> percent text: 0.873 -> "87,3%"."""
    try:
        return format_percent(float(value) * 100, places)
    except (ValueError, TypeError):
        return value


@bp.app_template_filter('pt_date')
def pt_date_filter(value):
    return format_date(value)
