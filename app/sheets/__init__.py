# ==============================================================================
# app/sheets/__init__.py
# ------------------------------------------------------------------------------
# Access to the spreadsheet client of the running app. The client is built
# lazily from the config and kept in app.extensions['sheets'], so tests can
# install an in-memory replacement there.
# ==============================================================================

from flask import current_app

from app.sheets.client import SheetsClient
from app.sheets.errors import SheetsConfigError
from app.sheets.store import ParameterStore


def get_client():
    client = current_app.extensions.get('sheets')
    if client is None:
        client = SheetsClient.from_config(current_app.config)
        current_app.extensions['sheets'] = client
    return client


def get_store():
    return ParameterStore(get_client())


def sales_rows():
    """Rows of the sales (ADESOES) sheet."""
    config = current_app.config
    spreadsheet_id = config.get('SALES_SPREADSHEET_ID')
    if not spreadsheet_id:
        raise SheetsConfigError('Variável SALES_SPREADSHEET_ID não configurada.')
    return get_client().get_values(config['SALES_SHEET_NAME'], spreadsheet_id=spreadsheet_id)


def sales_goal_rows():
    """Rows of the monthly sales goals sheet."""
    config = current_app.config
    spreadsheet_id = config.get('SALES_GOALS_SPREADSHEET_ID') or config.get('SALES_SPREADSHEET_ID')
    if not spreadsheet_id:
        raise SheetsConfigError('Variável SALES_GOALS_SPREADSHEET_ID não configurada.')
    return get_client().get_values(config['SALES_GOALS_SHEET_NAME'], spreadsheet_id=spreadsheet_id)


def funnel_rows():
    """Rows of the lead funnel sheet; [] when no funnel spreadsheet is configured."""
    config = current_app.config
    spreadsheet_id = config.get('FUNNEL_SPREADSHEET_ID')
    if not spreadsheet_id:
        return []
    return get_client().get_values(config['FUNNEL_SHEET_NAME'], spreadsheet_id=spreadsheet_id)
