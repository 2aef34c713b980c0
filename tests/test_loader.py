# tests/test_loader.py

import logging
from datetime import date

import pytest

from app.analytics import loader
from app.sheets.errors import DataError
from tests.conftest import default_ranges


def test_resolve_headers_maps_aliases_and_keeps_unknown_names():
    headers = ['nm_unidade', 'Consultor Responsável', 'Bônus', 'MC %\n(entrega)', ' Observação ']
    assert loader.resolve_headers(headers) == ['unit', 'consultant', 'bonus', 'margin', 'Observação']


def test_resolve_headers_first_alias_wins_on_duplicates():
    assert loader.resolve_headers(['cluster', 'CLUSTER']) == ['cluster', 'CLUSTER']


def test_load_pex_records_resolves_fields_and_pads_short_rows():
    rows = [
        ['nm_unidade', 'QUARTER', 'Cluster', 'Pontuação com Bônus', 'VVR'],
        [' Alpha ', '1', 'C1', '85,5'],
        ['', '1', 'C1', '10', '1'],
    ]
    records = loader.load_pex_records(rows)

    assert len(records) == 1
    record = records[0]
    assert record['unit'] == 'Alpha'
    assert record['quarter'] == '1'
    assert record['score'] == '85,5'
    assert record['vvr'] == ''
    assert record['consultant'] == ''


def test_load_pex_records_warns_only_about_required_headers(caplog):
    history = [['nm_unidade', 'data', 'VVR'], ['Alpha', '01/02/2024', '7']]

    with caplog.at_level(logging.WARNING):
        records = loader.load_pex_records(history, required=('unit', 'date'))
    assert records[0]['date'] == '01/02/2024'
    assert 'missing' not in caplog.text

    with caplog.at_level(logging.WARNING):
        loader.load_pex_records(history)
    assert "missing ['quarter']" in caplog.text


def test_load_pex_records_empty_sheet():
    assert loader.load_pex_records([]) == []
    assert loader.load_pex_records([['nm_unidade']]) == []


def test_rows_to_dicts():
    rows = [['a', 'b'], ['1'], ['2', '3']]
    assert loader.rows_to_dicts(rows) == [{'a': '1', 'b': ''}, {'a': '2', 'b': '3'}]


def test_load_weights_and_find_weight():
    weights = loader.load_weights(default_ranges()['CRITERIOS RANKING!B:F'])
    assert list(weights)[0] == 'VVR'
    assert weights['MAC'] == {'1': '2', '2': '2', '3': '2', '4': '2'}
    assert loader.find_weight(weights, 'e-nps') == weights['E-NPS']
    assert loader.find_weight(weights, 'missing', '% mc (entrega)') == weights['% MC (ENTREGA)']
    assert loader.find_weight(weights, 'missing') is None


def test_load_cluster_goals_parses_values():
    goals = loader.load_cluster_goals(default_ranges()['METAS POR CLUSTER!A:H'])
    assert goals[0]['cluster'] == 'C1'
    assert goals[0]['VVR'] == 1000000.0
    assert goals[0]['% ATIGIMENTO MAC'] == 80.0
    assert goals[1]['NPS'] == 70.0


def test_load_bonus_groups_quarters_by_unit():
    bonuses = loader.load_bonus(default_ranges()['DEVERIA!A:V'])
    by_unit = {b['unit']: b['quarters'] for b in bonuses}
    assert [b['unit'] for b in bonuses] == ['Alpha', 'Beta', 'Delta', 'Gama']
    assert by_unit['Alpha'] == {'1': '0', '2': '1,0', '3': '0', '4': '0'}


def test_load_unit_assignments_splits_active_lists():
    units, consultants, clusters = loader.load_unit_assignments(default_ranges()['UNI CONS!A:G'])
    assert units[0] == {'unit': 'Alpha', 'consultant': 'Ana', 'cluster': 'C1'}
    assert len(units) == 4
    assert consultants == ['Ana', 'Bruno', 'Carla']
    assert clusters == ['C1', 'C2']


def test_load_sales_drops_rows_without_date_and_fills_defaults():
    sales = loader.load_sales(default_ranges()['ADESOES'])
    assert len(sales) == 4
    first = sales[0]
    assert first['dt_cadastro_integrante'] == date(2024, 3, 5)
    assert first['vl_plano'] == 1000.0
    assert first['nm_fundo'] == 'Fundo Med'
    assert first['tp_servico'] == 'MV'
    assert first['id_fundo'] == 'N/A'

    minimal = loader.load_sales([['nm_unidade', 'dt_cadastro_integrante', 'vl_plano'], ['Alpha', '01/03/2024', '10']])
    assert minimal[0]['curso_fundo'] == ''
    assert minimal[0]['venda_posvenda'] == 'N/A'


def test_load_sales_requires_essential_columns():
    with pytest.raises(DataError) as excinfo:
        loader.load_sales([['nm_unidade', 'vl_plano'], ['Alpha', '10']])
    assert 'dt_cadastro_integrante' in excinfo.value.message


def test_load_sales_goals_keyed_by_unit_year_month():
    goals = loader.load_sales_goals(default_ranges()['metas'])
    goal = goals[('Alpha', 2024, 3)]
    assert goal['meta_vvr_vendas'] == 2000.0
    assert goal['meta_vvr_posvendas'] == 1000.0
    assert goal['meta_vvr_total'] == 3000.0
    assert goal['meta_adesoes'] == 10
    assert goal['meta_leads'] == 4
    assert goal['meta_contratos'] == 2
    assert goals[('Alpha', 2024, 4)]['meta_leads'] == 0


def test_load_sales_goals_falls_back_to_positions_for_blank_operational_headers():
    rows = [['nm_unidade', 'ano', 'mês', 'meta vvr_venda', 'meta vvr_pos_venda', 'meta adesões', '', '', '', '', ''],
            ['Alpha', '2024', '3', '1', '1', '1', '', '', '30', '12', '3']]
    goal = loader.load_sales_goals(rows)[('Alpha', 2024, 3)]
    assert (goal['meta_leads'], goal['meta_reunioes'], goal['meta_contratos']) == (30, 12, 3)


def test_load_funnel_skips_untitled_rows_and_parses_dates():
    leads = loader.load_funnel(default_ranges()['base'])
    assert [lead['titulo'] for lead in leads] == ['Lead 1', 'Lead 2', 'Lead 3', 'Lead 4']
    assert leads[0]['nm_unidade'] == 'Alpha'
    assert leads[0]['criado_em'] == date(2024, 3, 2)
    assert leads[0]['diagnostico_realizado'] == 'Sim'
    assert leads[1]['diagnostico_realizado'] == ''
    assert loader.load_funnel([]) == []
