# tests/test_api.py

import pytest


@pytest.mark.parametrize("path, first_cell", [
    ('/api/sheets', 'nm_unidade'),
    ('/api/pesos', 'INDICADOR'),
    ('/api/metas', 'CLUSTER'),
    ('/api/bonus', 'nm_unidade'),
    ('/api/clusters', 'nm_unidade'),
    ('/api/consultores', 'nm_unidade'),
])
def test_get_returns_raw_rows(client, path, first_cell):
    response = client.get(path)
    assert response.status_code == 200
    assert response.get_json()[0][0] == first_cell


def test_historico_returns_objects(client):
    response = client.get('/api/historico')
    assert response.get_json()[0] == {'nm_unidade': 'Alpha', 'data': '01/02/2024', 'VVR': '7', 'MAC': '6'}


def test_sales_endpoints_wrap_values(client):
    assert client.get('/api/sales').get_json()['values'][1][0] == 'Alpha'
    assert client.get('/api/vendas-metas').get_json()['values'][0][1] == 'ano'
    assert client.get('/api/funil').get_json()['values'][1][0] == 'Lead 1'


def test_funnel_endpoint_is_empty_without_funnel_sheet(app, client):
    app.config['FUNNEL_SPREADSHEET_ID'] = None
    assert client.get('/api/funil').get_json() == {'values': []}


def test_post_consultor(client, fake_sheets):
    response = client.post('/api/consultores', json={'unidade': 'Gama', 'consultor': 'Bruno'})
    assert response.status_code == 200
    assert response.get_json()['success'] is True
    assert fake_sheets.updates == [('UNI CONS!B4', 'Bruno', 'RAW')]


def test_post_pesos_accepts_numeric_quarter(client, fake_sheets):
    response = client.post('/api/pesos', json={'indicador': 'MAC', 'quarter': 2, 'peso': '1.5'})
    assert response.status_code == 200
    assert fake_sheets.updates == [('CRITERIOS RANKING!D3', '1,5', 'USER_ENTERED')]


def test_post_metas_percent_column(client, fake_sheets):
    response = client.post('/api/metas', json={'cluster': 'C1', 'coluna': '% ENDIVIDAMENTO', 'valor': 12})
    assert response.status_code == 200
    assert fake_sheets.updates == [('METAS POR CLUSTER!D2', '12,00%', 'USER_ENTERED')]


def test_post_bonus(client, fake_sheets):
    response = client.post('/api/bonus', json={'unidade': 'Delta', 'quarter': '1', 'valor': 2})
    assert response.status_code == 200
    assert fake_sheets.updates == [('DEVERIA!D5', '2,0', 'USER_ENTERED')]


@pytest.mark.parametrize("path, body", [
    ('/api/consultores', {'unidade': 'Alpha'}),
    ('/api/clusters', {'unidade': '  ', 'cluster': 'C1'}),
    ('/api/pesos', {'indicador': 'VVR', 'quarter': '1'}),
    ('/api/metas', {}),
    ('/api/bonus', None),
])
def test_post_missing_fields_is_400(client, fake_sheets, path, body):
    response = client.post(path, json=body) if body is not None else client.post(path, data='not json')
    assert response.status_code == 400
    assert set(response.get_json()) == {'error', 'message'}
    assert fake_sheets.updates == []


def test_invalid_goal_column_is_400(client):
    response = client.post('/api/metas', json={'cluster': 'C1', 'coluna': 'LUCRO', 'valor': 1})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Coluna inválida'


def test_unknown_unit_is_404(client):
    response = client.post('/api/clusters', json={'unidade': 'Nowhere', 'cluster': 'C1'})
    assert response.status_code == 404
    assert 'Nowhere' in response.get_json()['message']


def test_unsupported_method_is_405_json(client):
    response = client.delete('/api/pesos')
    assert response.status_code == 405
    assert response.get_json()['error'] == 'Método não permitido'


def test_read_failure_is_500(client, fake_sheets):
    fake_sheets.read_errors.add('DEVERIA!A:V')
    response = client.get('/api/sheets')
    assert response.status_code == 500
    assert 'DEVERIA' in response.get_json()['message']


def test_write_failure_is_500(client, fake_sheets):
    fake_sheets.write_errors.add('UNI CONS!C2')
    response = client.post('/api/clusters', json={'unidade': 'Alpha', 'cluster': 'C2'})
    assert response.status_code == 500
    assert response.get_json()['error'] == 'Erro ao processar requisição'


def test_missing_sales_config_is_500(app, client):
    app.config['SALES_SPREADSHEET_ID'] = None
    app.config['SALES_GOALS_SPREADSHEET_ID'] = None
    response = client.get('/api/sales')
    assert response.status_code == 500
    assert response.get_json()['error'] == 'Configuração incompleta'
