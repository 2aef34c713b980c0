# ==============================================================================
# app/analytics/table.py
# ------------------------------------------------------------------------------
# Server-side table state for the summary and detail tables: search, sort,
# pagination and export (TSV, CSV, XLSX). The view never talks to the network;
# it only formats the rows it was given.
# ==============================================================================

import csv
import math
from collections import namedtuple
from datetime import date
from io import BytesIO, StringIO

import pandas as pd

from app.analytics.normalize import is_number, parse_number

Column = namedtuple('Column', ['key', 'label', 'formatter'])
Column.__new__.__defaults__ = (None,)

ASC, DESC = 'asc', 'desc'


class TableView:
    """
    A table of dict rows described by Columns.

    Usage:
        view = TableView(columns, rows, page_size=10)
        view.search('centro')
        view.set_sort('score', 'desc')
        view.page(2)          # rows of page 2
        view.to_delimited(';')
    """

    def __init__(self, columns, rows, page_size=10):
        self.columns = list(columns)
        self.rows = list(rows)
        self.page_size = max(int(page_size or 10), 1)
        self.query = ''
        self.sort_key = None
        self.sort_dir = None

    # --- State ---

    def search(self, query):
        self.query = (query or '').strip()
        return self

    def set_sort(self, key, direction):
        """Applies a sort coming from the query string; unknown keys or directions clear it."""
        if key in self.keys and direction in (ASC, DESC):
            self.sort_key, self.sort_dir = key, direction
        else:
            self.sort_key, self.sort_dir = None, None
        return self

    def toggle_sort(self, key):
        """asc -> desc -> none on the same column; a new column starts at asc."""
        if key != self.sort_key:
            self.sort_key, self.sort_dir = key, ASC
        elif self.sort_dir == ASC:
            self.sort_dir = DESC
        else:
            self.sort_key, self.sort_dir = None, None
        return self

    def next_sort(self, key):
        """(key, dir) the header link of a column should point to."""
        if key != self.sort_key:
            return key, ASC
        if self.sort_dir == ASC:
            return key, DESC
        return None, None

    @property
    def keys(self):
        return [column.key for column in self.columns]

    # --- Rows ---

    def display(self, row, column):
        value = row.get(column.key, '')
        if column.formatter:
            return column.formatter(value)
        if value is None:
            return ''
        if isinstance(value, date):
            return value.strftime('%d/%m/%Y')
        return str(value)

    def _matches(self, row):
        needle = self.query.lower()
        return any(needle in self.display(row, column).lower() for column in self.columns)

    def _sorted(self, rows):
        if not self.sort_key:
            return rows
        key = self.sort_key
        values = [row.get(key) for row in rows]
        numeric = all(v is None or v == '' or is_number(v) for v in values)

        if numeric:
            sort_value = lambda row: parse_number(row.get(key))
        else:
            sort_value = lambda row: str(row.get(key, '') or '').lower()
        # sorted() is stable, so equal keys keep their relative order in both directions
        return sorted(rows, key=sort_value, reverse=self.sort_dir == DESC)

    @property
    def visible_rows(self):
        """All filtered and sorted rows (every page)."""
        rows = [row for row in self.rows if self._matches(row)] if self.query else list(self.rows)
        return self._sorted(rows)

    @property
    def page_count(self):
        return max(math.ceil(len(self.visible_rows) / self.page_size), 1)

    def clamp_page(self, number):
        try:
            number = int(number)
        except (TypeError, ValueError):
            number = 1
        return min(max(number, 1), self.page_count)

    def page(self, number):
        number = self.clamp_page(number)
        start = (number - 1) * self.page_size
        return self.visible_rows[start:start + self.page_size]

    # --- Export ---

    def export_rows(self):
        """Header row of labels followed by the displayed values of every visible row."""
        rows = [[column.label for column in self.columns]]
        for row in self.visible_rows:
            rows.append([self.display(row, column) for column in self.columns])
        return rows

    def to_delimited(self, sep='\t'):
        """TSV (sep='\\t') or semicolon CSV; CSV output starts with a UTF-8 BOM for Excel."""
        buffer = StringIO()
        writer = csv.writer(buffer, delimiter=sep, lineterminator='\n')
        writer.writerows(self.export_rows())
        text = buffer.getvalue()
        return ('\ufeff' + text) if sep == ';' else text

    def to_xlsx(self, sheet_name='Dados'):
        header, *body = self.export_rows()
        df = pd.DataFrame(body, columns=header)
        output = BytesIO()
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
        output.seek(0)
        return output


def export_filename(label, context, ext, today=None):
    """("Tabela Resumo", "Quarter 1", "xlsx") -> "Tabela_Resumo_Quarter_1_19-10-2026.xlsx"."""
    today = today or date.today()
    parts = [label, context, today.strftime('%d-%m-%Y')]
    name = '_'.join('_'.join(str(part).split()) for part in parts if part)
    return f"{name}.{ext}"
