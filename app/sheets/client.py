# ==============================================================================
# app/sheets/client.py
# ------------------------------------------------------------------------------
# Thin wrapper over gspread: reads a range as a list of rows and writes a
# single cell. Authenticates with a base64 encoded service account JSON.
# Every gspread, google-auth or connection failure comes out as a SheetsError.
# ==============================================================================

import base64
import binascii
import json
import logging

import gspread
from gspread.exceptions import APIError, SpreadsheetNotFound
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from requests.exceptions import RequestException

from app.sheets.errors import SheetsConfigError, SheetsError

SCOPES = ['https://www.googleapis.com/auth/spreadsheets']

RAW = 'RAW'
USER_ENTERED = 'USER_ENTERED'


def decode_service_account(encoded):
    """Base64 text -> service account dict. Raises SheetsConfigError when unusable."""
    if not encoded:
        raise SheetsConfigError('Variável GOOGLE_SERVICE_ACCOUNT_BASE64 não configurada.')
    try:
        info = json.loads(base64.b64decode(encoded).decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise SheetsConfigError(f'Credenciais inválidas: {e}') from e
    if not isinstance(info, dict) or not info.get('client_email') or not info.get('private_key'):
        raise SheetsConfigError('Credenciais inválidas: client_email ou private_key ausente.')
    return info


class SheetsClient:
    """Reads and writes values of one or more spreadsheets with a single service account."""

    def __init__(self, credentials_b64, spreadsheet_id=None):
        self.spreadsheet_id = spreadsheet_id
        self._info = decode_service_account(credentials_b64)
        self._gc = None
        self._spreadsheets = {}

    @classmethod
    def from_config(cls, config):
        return cls(config.get('GOOGLE_SERVICE_ACCOUNT_BASE64'), config.get('GOOGLE_SHEET_ID'))

    def _client(self):
        if self._gc is None:
            try:
                credentials = Credentials.from_service_account_info(self._info, scopes=SCOPES)
            except (GoogleAuthError, ValueError) as e:
                raise SheetsConfigError(f'Credenciais inválidas: {e}') from e
            self._gc = gspread.authorize(credentials)
        return self._gc

    def _open(self, spreadsheet_id=None):
        key = spreadsheet_id or self.spreadsheet_id
        if not key:
            # Only the PEX pages use the default spreadsheet
            raise SheetsConfigError('Variável GOOGLE_SHEET_ID não configurada.')
        if key not in self._spreadsheets:
            try:
                self._spreadsheets[key] = self._client().open_by_key(key)
            except SpreadsheetNotFound as e:
                raise SheetsError(f'Planilha {key} não encontrada ou sem acesso.') from e
            except (APIError, GoogleAuthError, RequestException) as e:
                raise SheetsError(f'Erro ao acessar a planilha: {e}') from e
        return self._spreadsheets[key]

    def get_values(self, range_name, spreadsheet_id=None):
        """Rows of the range as lists of strings; [] when the range is empty."""
        spreadsheet = self._open(spreadsheet_id)
        try:
            response = spreadsheet.values_get(range_name)
        except (APIError, GoogleAuthError, RequestException) as e:
            logging.error(f"Failed to read range '{range_name}': {e}")
            raise SheetsError(f"Erro ao ler '{range_name}': {e}") from e
        values = response.get('values', [])
        logging.info(f"Read {len(values)} rows from '{range_name}'.")
        return values

    def update_cell(self, range_name, value, input_option=RAW, spreadsheet_id=None):
        """Writes one value to a single cell range such as "'UNI CONS'!B5"."""
        spreadsheet = self._open(spreadsheet_id)
        try:
            spreadsheet.values_update(
                range_name,
                params={'valueInputOption': input_option},
                body={'values': [[value]]},
            )
        except (APIError, GoogleAuthError, RequestException) as e:
            logging.error(f"Failed to write '{range_name}': {e}")
            raise SheetsError(f"Erro ao atualizar '{range_name}': {e}") from e
        logging.info(f"Updated '{range_name}' = {value!r} ({input_option}).")
