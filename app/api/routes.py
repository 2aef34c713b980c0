# ==============================================================================
# app/api/routes.py
# ------------------------------------------------------------------------------
# JSON endpoints over the spreadsheets. GET returns the raw rows of a range;
# POST updates a single cell of a configuration sheet. Errors come back as
# {"error": ..., "message": ...} with the matching HTTP status.
# ==============================================================================

from flask import jsonify, request, current_app

from app.api import bp
from app.analytics.loader import rows_to_dicts
from app.sheets import get_store, sales_rows, sales_goal_rows, funnel_rows
from app.sheets.errors import SheetsError, InvalidRequest


def _error(title, message, status):
    return jsonify({'error': title, 'message': message}), status


@bp.errorhandler(SheetsError)
def handle_sheets_error(e):
    if e.status_code >= 500:
        current_app.logger.error(f"API error on {request.path}: {e.message}")
    else:
        current_app.logger.warning(f"API request rejected on {request.path}: {e.message}")
    return _error(e.title, e.message, e.status_code)


@bp.errorhandler(Exception)
def handle_unexpected_error(e):
    current_app.logger.error(f"Unexpected API error on {request.path}: {e}", exc_info=True)
    return _error('Erro ao processar requisição', str(e) or 'Erro inesperado', 500)


@bp.app_errorhandler(405)
def method_not_allowed(e):
    if request.path.startswith('/api/'):
        return _error('Método não permitido', f'O método {request.method} não é suportado', 405)
    return e


def _payload(*fields, message):
    """JSON body with every field present; a missing or empty field is a 400."""
    data = request.get_json(silent=True) or {}
    values = [data.get(field) for field in fields]
    if any(value is None or (isinstance(value, str) and not value.strip()) for value in values):
        raise InvalidRequest(message)
    return values


def _success(message):
    return jsonify({'success': True, 'message': message})

# --- Read-only ---

@bp.route('/sheets', methods=['GET'])
def sheets():
    return jsonify(get_store().results_rows())


@bp.route('/historico', methods=['GET'])
def historico():
    return jsonify(rows_to_dicts(get_store().history_rows()))


@bp.route('/sales', methods=['GET'])
def sales():
    return jsonify({'values': sales_rows()})


@bp.route('/vendas-metas', methods=['GET'])
def sales_goals():
    return jsonify({'values': sales_goal_rows()})


@bp.route('/funil', methods=['GET'])
def funil():
    return jsonify({'values': funnel_rows()})

# --- Read / single-cell update ---

@bp.route('/pesos', methods=['GET', 'POST'])
def pesos():
    store = get_store()
    if request.method == 'GET':
        return jsonify(store.weight_rows())
    indicator, quarter, weight = _payload('indicador', 'quarter', 'peso',
                                          message='Indicador, quarter e peso são obrigatórios')
    return _success(store.update_weight(indicator, str(quarter), weight))


@bp.route('/metas', methods=['GET', 'POST'])
def metas():
    store = get_store()
    if request.method == 'GET':
        return jsonify(store.goal_rows())
    cluster, column, value = _payload('cluster', 'coluna', 'valor',
                                      message='cluster, coluna e valor são obrigatórios')
    return _success(store.update_goal(cluster, column, value))


@bp.route('/bonus', methods=['GET', 'POST'])
def bonus():
    store = get_store()
    if request.method == 'GET':
        return jsonify(store.results_rows())
    unit, quarter, value = _payload('unidade', 'quarter', 'valor',
                                    message='unidade, quarter e valor são obrigatórios')
    return _success(store.update_bonus(unit, str(quarter), value))


@bp.route('/clusters', methods=['GET', 'POST'])
def clusters():
    store = get_store()
    if request.method == 'GET':
        return jsonify(store.unit_rows())
    unit, cluster = _payload('unidade', 'cluster', message='Unidade e cluster são obrigatórios')
    return _success(store.update_cluster(unit, cluster))


@bp.route('/consultores', methods=['GET', 'POST'])
def consultores():
    store = get_store()
    if request.method == 'GET':
        return jsonify(store.consultant_rows())
    unit, consultant = _payload('unidade', 'consultor', message='Unidade e consultor são obrigatórios')
    return _success(store.update_consultant(unit, consultant))
