# tests/conftest.py

import base64
import json

import pytest

from config import Config
from app.sheets.errors import SheetsError

RESULTS_HEADER = (
    ['nm_unidade', 'cluster', 'Consultor', 'Bonus', 'Pontuação sem bonus', 'Pontuação com bonus',
     'VVR', 'MAC', 'Endividamento', 'NPS', 'MC % (entrega)', 'Satisfação do colaborador - e-NPS',
     '*Conformidades']
    + [f'extra_{i}' for i in range(13, 21)]
    + ['QUARTER']
)


def pex_row(unit, cluster, consultant, quarter, score, bonus='0', vvr='0', mac='0'):
    """One DEVERIA row with the quarter in column V (index 21)."""
    row = [unit, cluster, consultant, bonus, score, score, vvr, mac, '1', '70', '30', '60', '90']
    row += [''] * 8
    row.append(quarter)
    return row


def funnel_row(title, unit, created, meeting=''):
    """One lead funnel row: title in A, creation date in M, diagnosis in BH, unit in BU."""
    row = [''] * 73
    row[0], row[12], row[59], row[72] = title, created, meeting, unit
    return row


def default_ranges():
    return {
        'DEVERIA!A:V': [
            RESULTS_HEADER,
            pex_row('Alpha', 'C1', 'Ana', '1', '80', vvr='8,5', mac='7'),
            pex_row('Beta', 'C1', 'Bruno', '1', '70', vvr='9', mac='6'),
            pex_row('Gama', 'C2', 'Ana', '1', '95', vvr='10', mac='9'),
            pex_row('Delta', 'C2', 'Carla', '1', '60', vvr='5', mac='4'),
            pex_row('Alpha', 'C1', 'Ana', '2', '90', bonus='1,0', vvr='9,5', mac='8'),
        ],
        'HISTORICO!A:Z': [
            ['nm_unidade', 'data', 'VVR', 'MAC'],
            ['Alpha', '01/02/2024', '7', '6'],
            ['Alpha', '01/01/2024', '6', '5'],
            ['Beta', '01/01/2024', '8', '7'],
        ],
        'CRITERIOS RANKING!B:F': [
            ['INDICADOR', 'Q1', 'Q2', 'Q3', 'Q4'],
            ['VVR', '2', '2', '2', '2'],
            ['MAC', '2', '2', '2', '2'],
            ['ENDIVIDAMENTO', '1', '1', '1', '1'],
            ['NPS', '1', '1', '1', '1'],
            ['% MC (ENTREGA)', '1', '1', '1', '1'],
            ['E-NPS', '1', '1', '1', '1'],
            ['% CONFORMIDADES', '2', '2', '2', '2'],
        ],
        'METAS POR CLUSTER!A:H': [
            ['CLUSTER', 'VVR', '% ATIGIMENTO MAC', '% ENDIVIDAMENTO', 'NPS', '% MC ENTREGA', 'E-NPS', 'CONFORMIDADE'],
            ['C1', 'R$ 1.000.000,00', '80%', '10%', '75', '30%', '70', '90%'],
            ['C2', 'R$ 500.000,00', '70%', '15%', '70', '25%', '65', '85%'],
        ],
        'UNI CONS!A:G': [
            ['nm_unidade', 'Consultor', 'Cluster', '', '', 'Consultores ativos', 'Cluster ativos'],
            ['Alpha', 'Ana', 'C1', '', '', 'Ana\nBruno\nCarla', 'C1\nC2'],
            ['Beta', 'Bruno', 'C1'],
            ['Gama', 'Ana', 'C2'],
            ['Delta', 'Carla', 'C2'],
        ],
        'UNI CONS!A:F': [
            ['nm_unidade', 'Consultor', 'Cluster', '', '', 'Consultores ativos'],
            ['Alpha', 'Ana', 'C1', '', '', 'Ana\nBruno\nCarla'],
        ],
        'ADESOES': [
            ['nm_unidade', 'dt_cadastro_integrante', 'vl_plano', 'venda_posvenda', 'nm_integrante', 'consultor_comercial',
             'nm_fundo', 'curso_fundo', 'tp_servico', 'tipo_cliente'],
            ['Alpha', '05/03/2024', '1.000,00', 'VENDA', 'João', 'Ana', 'Fundo Med', 'Medicina', 'MV', 'Novo'],
            ['Alpha', '10/03/2024', '500,00', 'Pós Venda', 'Maria', 'Ana', 'Fundo Dir', 'Direito', 'FORMATURA', 'Antigo'],
            ['Beta', '15/03/2024', '2.000,00', 'VENDA', 'Pedro', 'Bruno', 'Fundo Med', 'Medicina', 'mv + baile', 'Novo'],
            ['Beta', '', '999,00', 'VENDA', 'Sem data', 'Bruno'],
            ['Gama', '02/04/2024', '300,00', 'VENDA', 'Lia', 'Carla', 'Fundo Eng', 'Engenharia', 'MV', 'Novo'],
        ],
        'metas': [
            ['nm_unidade', 'ano', 'mês', 'meta vvr_venda', 'meta vvr_pos_venda', 'meta adesões',
             'meta_leads', 'meta_reunioes', 'meta_contratos'],
            ['Alpha', '2024', '3', '2.000,00', '1.000,00', '10', '4', '2', '2'],
            ['Beta', '2024', '3', '4.000,00', '0', '5', '0', '0', '2'],
            ['Alpha', '2024', '4', '3.000,00', '0', '8'],
        ],
        'base': [
            ['titulo'],
            funnel_row('Lead 1', 'Alpha', '02/03/2024', meeting='Sim'),
            funnel_row('Lead 2', 'Alpha', '20/03/2024'),
            funnel_row('Lead 3', 'Beta', '21/03/2024', meeting='Sim'),
            funnel_row('Lead 4', 'Alpha', '01/04/2024', meeting='Sim'),
            funnel_row('', 'Alpha', '03/03/2024'),
        ],
    }


class FakeSheets:
    """In-memory stand-in for SheetsClient: serves fixed ranges and records writes."""

    def __init__(self, ranges=None):
        self.ranges = ranges if ranges is not None else default_ranges()
        self.updates = []
        self.read_errors = set()
        self.write_errors = set()

    def get_values(self, range_name, spreadsheet_id=None):
        if range_name in self.read_errors:
            raise SheetsError(f"Erro ao ler '{range_name}'")
        return [list(row) for row in self.ranges.get(range_name, [])]

    def update_cell(self, range_name, value, input_option='RAW', spreadsheet_id=None):
        if range_name in self.write_errors:
            raise SheetsError(f"Erro ao atualizar '{range_name}'")
        self.updates.append((range_name, value, input_option))


CREDENTIALS = base64.b64encode(json.dumps(
    {'client_email': 'bot@example.iam.gserviceaccount.com', 'private_key': 'KEY'}).encode('utf-8')).decode('ascii')


class RecordingSpreadsheet:
    """Stands in for a gspread Spreadsheet; raises `error` from every call when set."""

    def __init__(self, values=None, error=None):
        self.values = values or []
        self.error = error
        self.updates = []

    def values_get(self, range_name):
        if self.error:
            raise self.error
        return {'values': self.values}

    def values_update(self, range_name, params=None, body=None):
        if self.error:
            raise self.error
        self.updates.append((range_name, params, body))


class TestConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    SECRET_KEY = 'test-secret'
    ADMIN_PASSWORD = 'segredo'
    GOOGLE_SHEET_ID = 'pex-sheet'
    GOOGLE_SERVICE_ACCOUNT_BASE64 = 'unused'
    SALES_SPREADSHEET_ID = 'sales-sheet'
    SALES_GOALS_SPREADSHEET_ID = 'sales-sheet'
    FUNNEL_SPREADSHEET_ID = 'funnel-sheet'
    TABLE_PAGE_SIZE = 2


@pytest.fixture
def fake_sheets():
    return FakeSheets()


@pytest.fixture
def app(fake_sheets):
    """
    Creates a new app instance with the in-memory spreadsheet installed
    and yields it within an application context.
    """
    from app import create_app

    app = create_app(TestConfig)
    app.extensions['sheets'] = fake_sheets

    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    with client.session_transaction() as session:
        session['admin_logged_in'] = True
    return client
