# ==============================================================================
# app/sheets/store.py
# ------------------------------------------------------------------------------
# The parameter store. Reads the PEX configuration sheets and writes single
# cells back: consultant and cluster of a unit, indicator weights, cluster
# goals and unit bonuses. Every write locates its row with a fresh read.
# ==============================================================================

import logging

from app.analytics import loader
from app.analytics.normalize import format_currency, format_decimal, format_integer, format_percent, parse_number
from app.analytics.schema import (RESULTS_RANGE, HISTORY_RANGE, WEIGHTS_RANGE, GOALS_RANGE, GOALS_FALLBACK_RANGE,
                                  UNITS_RANGE, CONSULTANTS_RANGE, RESULTS_SHEET, RESULTS_UNIT_INDEX,
                                  RESULTS_QUARTER_INDEX, RESULTS_BONUS_COLUMN, WEIGHTS_SHEET,
                                  WEIGHT_QUARTER_COLUMNS, GOALS_SHEET, GOAL_COLUMNS, UNITS_SHEET,
                                  UNIT_CONSULTANT_COLUMN, UNIT_CLUSTER_COLUMN)
from app.sheets.client import RAW, USER_ENTERED
from app.sheets.errors import InvalidRequest, NotFound, SheetsError


def _find_row(rows, match):
    """1-based sheet row number of the first data row accepted by match(row), or None."""
    for index, row in enumerate(rows[1:], start=2):
        if match(row):
            return index
    return None


def _col(row, index):
    return str(row[index]).strip() if index < len(row) else ''


def format_goal_value(column, value):
    """(text, input option) a goal column is written with."""
    number = parse_number(value)
    if column == 'VVR':
        return format_currency(number), RAW
    if '%' in column or column == 'CONFORMIDADE':
        return format_percent(number, 2), USER_ENTERED
    return format_integer(number), USER_ENTERED


def format_weight_value(value):
    return str(value).strip().replace('.', ',')


def format_bonus_value(value):
    return format_decimal(value, 1)


class ParameterStore:
    """Reads and updates the configuration sheets through a SheetsClient."""

    def __init__(self, client):
        self.client = client

    # --- Raw reads (JSON API) ---

    def results_rows(self):
        return self.client.get_values(RESULTS_RANGE)

    def history_rows(self):
        return self.client.get_values(HISTORY_RANGE)

    def weight_rows(self):
        return self.client.get_values(WEIGHTS_RANGE)

    def goal_rows(self):
        try:
            return self.client.get_values(GOALS_RANGE)
        except SheetsError as e:
            logging.warning(f"Reading '{GOALS_RANGE}' failed ({e}); trying '{GOALS_FALLBACK_RANGE}'.")
            return self.client.get_values(GOALS_FALLBACK_RANGE)

    def unit_rows(self):
        return self.client.get_values(UNITS_RANGE)

    def consultant_rows(self):
        return self.client.get_values(CONSULTANTS_RANGE)

    # --- Parsed reads ---

    def records(self):
        return loader.load_pex_records(self.results_rows())

    def history(self):
        return loader.load_pex_records(self.history_rows(), required=('unit', 'date'))

    def weights(self):
        return loader.load_weights(self.weight_rows())

    def goals(self):
        return loader.load_cluster_goals(self.goal_rows())

    def bonuses(self):
        return loader.load_bonus(self.results_rows())

    def units(self):
        return loader.load_unit_assignments(self.unit_rows())

    # --- Single-cell writes ---

    def _locate(self, rows, match, sheet, not_found):
        if not rows:
            raise NotFound(f'A planilha {sheet} está vazia', title='Planilha vazia')
        row_number = _find_row(rows, match)
        if row_number is None:
            logging.warning(f"{not_found} ({sheet})")
            raise NotFound(not_found)
        return row_number

    def update_consultant(self, unit, consultant):
        rows = self.unit_rows()
        row = self._locate(rows, lambda r: _col(r, 0) == unit, UNITS_SHEET,
                           f'A unidade "{unit}" não foi encontrada na planilha')
        self.client.update_cell(f'{UNITS_SHEET}!{UNIT_CONSULTANT_COLUMN}{row}', consultant, RAW)
        return f'Consultor atualizado com sucesso para a unidade {unit}'

    def update_cluster(self, unit, cluster):
        rows = self.unit_rows()
        row = self._locate(rows, lambda r: _col(r, 0) == unit, UNITS_SHEET,
                           f'A unidade "{unit}" não foi encontrada na planilha')
        self.client.update_cell(f'{UNITS_SHEET}!{UNIT_CLUSTER_COLUMN}{row}', cluster, RAW)
        return f'Cluster atualizado com sucesso para a unidade {unit}'

    def update_weight(self, indicator, quarter, weight):
        column = WEIGHT_QUARTER_COLUMNS.get(str(quarter))
        if column is None:
            raise InvalidRequest(f'Quarter "{quarter}" inválido', title='Quarter inválido')
        rows = self.weight_rows()
        row = self._locate(rows, lambda r: _col(r, 0) == indicator, WEIGHTS_SHEET,
                           f'O indicador "{indicator}" não foi encontrado na planilha')
        self.client.update_cell(f'{WEIGHTS_SHEET}!{column}{row}', format_weight_value(weight), USER_ENTERED)
        return f'Peso atualizado com sucesso para {indicator} no Quarter {quarter}'

    def update_goal(self, cluster, column_name, value):
        column = GOAL_COLUMNS.get(column_name)
        if column is None:
            raise InvalidRequest(f'A coluna "{column_name}" não é válida', title='Coluna inválida')
        rows = self.goal_rows()
        row = self._locate(rows, lambda r: _col(r, 0) == cluster, GOALS_SHEET,
                           f'O cluster "{cluster}" não foi encontrado na planilha')
        text, input_option = format_goal_value(column_name, value)
        self.client.update_cell(f'{GOALS_SHEET}!{column}{row}', text, input_option)
        return f'Meta atualizada com sucesso para {cluster} ({column_name})'

    def update_bonus(self, unit, quarter, value):
        rows = self.results_rows()
        row = self._locate(
            rows,
            lambda r: _col(r, RESULTS_UNIT_INDEX) == unit and _col(r, RESULTS_QUARTER_INDEX) == str(quarter),
            RESULTS_SHEET,
            f'Não foi encontrado registro para unidade "{unit}" no quarter "{quarter}"',
        )
        self.client.update_cell(f'{RESULTS_SHEET}!{RESULTS_BONUS_COLUMN}{row}', format_bonus_value(value), USER_ENTERED)
        return f'Bônus atualizado com sucesso para {unit} no Quarter {quarter}'

    def write(self, change):
        """Applies one pending Change from the parameters page."""
        if change.entity == 'consultant':
            return self.update_consultant(change.field, change.value)
        if change.entity == 'cluster':
            return self.update_cluster(change.field, change.value)
        if change.entity == 'weight':
            indicator, quarter = change.field
            return self.update_weight(indicator, quarter, change.value)
        if change.entity == 'goal':
            cluster, column = change.field
            return self.update_goal(cluster, column, change.value)
        if change.entity == 'bonus':
            unit, quarter = change.field
            return self.update_bonus(unit, quarter, change.value)
        raise InvalidRequest(f'Tipo de alteração desconhecido: {change.entity}')
