# ==============================================================================
# app/main/routes.py
# ------------------------------------------------------------------------------
# Defines all user-facing routes for the main application blueprint: the PEX
# pages (ranking, resultados, dashboard, parametros), the Vendas page and the
# admin login. Every page re-reads the spreadsheets on each request.
# ==============================================================================

from datetime import date
from functools import wraps
from io import BytesIO

from flask import (render_template, request, flash, redirect, url_for,
                   current_app, session, send_file)

from app.main import bp
from app.main.forms import AdminLoginForm, ParameterSectionForm, weights_form_class
from app.main import utils
from app.analytics import loader
from app.analytics.changes import commit, validate_weight_sums
from app.analytics.filters import unique_values
from app.analytics.normalize import format_decimal, parse_number
from app.analytics.sales import select_sales
from app.analytics.schema import GOAL_COLUMNS, SALE_FILTERS
from app.analytics.periods import (PERIOD_LABELS, DEFAULT_PERIOD, resolve_period, period_label, parse_date)
from app.analytics.table import export_filename
from app.sheets import get_store, sales_rows, sales_goal_rows, funnel_rows
from app.sheets.errors import SheetsError

EXPORT_FORMATS = {
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'tsv': 'text/tab-separated-values; charset=utf-8',
    'csv': 'text/csv; charset=utf-8',
}

# --- Helper Functions ---

def admin_required(f):
    """Decorator to protect admin routes with session-based authentication."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not session.get('admin_logged_in'):
            flash('Faça login como administrador para acessar esta página.', 'warning')
            return redirect(url_for('main.admin_login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function


def _table_args():
    return {
        'query': request.args.get('q', ''),
        'sort': request.args.get('sort'),
        'direction': request.args.get('dir'),
        'page_size': current_app.config.get('TABLE_PAGE_SIZE', 10),
    }


def _export(view, fmt, label, context, sheet_name):
    """Sends the table as an attachment in the requested format (xlsx by default)."""
    fmt = fmt if fmt in EXPORT_FORMATS else 'xlsx'
    filename = export_filename(label, context, fmt, date.today())
    if fmt == 'xlsx':
        output = view.to_xlsx(sheet_name)
    else:
        text = view.to_delimited('\t' if fmt == 'tsv' else ';')
        output = BytesIO(text.encode('utf-8'))
    return send_file(output, mimetype=EXPORT_FORMATS[fmt], as_attachment=True, download_name=filename)


def _fetch_error(e):
    current_app.logger.error(f"Failed to load spreadsheet data: {e.message}")
    return e.message

# --- PEX Routes ---

@bp.route('/')
def index():
    return redirect(url_for('main.ranking_page'))


@bp.route('/ranking')
def ranking_page():
    """General ranking of the units in a quarter, optionally scoped by cluster/consultant."""
    try:
        records = get_store().records()
    except SheetsError as e:
        return render_template('ranking.html', error=_fetch_error(e), data=None)

    data = utils.prepare_ranking_data(
        records,
        quarter=request.args.get('quarter'),
        cluster=request.args.get('cluster') or None,
        consultant=request.args.get('consultant') or None,
    )
    return render_template('ranking.html', data=data, error=None)


@bp.route('/resultados')
def resultados():
    """Results of a single unit: positions, quarter scores, indicators and history."""
    try:
        store = get_store()
        records = store.records()
        weights = store.weights()
        history = store.history()
    except SheetsError as e:
        return render_template('resultados.html', error=_fetch_error(e), data=None)

    data = utils.prepare_results_data(
        records, history, weights,
        unit=request.args.get('unit'),
        quarter=request.args.get('quarter'),
        indicator=request.args.get('indicator'),
    )
    return render_template('resultados.html', data=data, error=None)


def _summary_view(records):
    return utils.build_summary_table(
        records,
        quarter=request.args.get('quarter') or None,
        cluster=request.args.get('cluster') or None,
        consultant=request.args.get('consultant') or None,
        **_table_args(),
    )


@bp.route('/dashboard')
def dashboard():
    """Summary table with filters, search, sort and pagination."""
    try:
        records = get_store().records()
    except SheetsError as e:
        return render_template('dashboard.html', error=_fetch_error(e), view=None)

    view = _summary_view(records)
    page = view.clamp_page(request.args.get('page', 1))
    return render_template(
        'dashboard.html',
        view=view,
        page=page,
        rows=view.page(page),
        quarters=utils.quarter_options(records),
        clusters=unique_values(records, 'cluster'),
        consultants=unique_values(records, 'consultant'),
        args=request.args,
        error=None,
    )


@bp.route('/dashboard/export')
def dashboard_export():
    try:
        records = get_store().records()
    except SheetsError as e:
        flash(f'Não foi possível exportar: {_fetch_error(e)}', 'danger')
        return redirect(url_for('main.dashboard', **request.args))

    view = _summary_view(records)
    quarter = request.args.get('quarter')
    context = f"Quarter {quarter}" if quarter else ''
    return _export(view, request.args.get('format', 'xlsx'), 'PEX Tabela Resumo', context, 'Tabela Resumo')


@bp.route('/parametros', methods=['GET', 'POST'])
@admin_required
def parametros():
    """Parameter management. Each section posts its edits, which are diffed and saved cell by cell."""
    quarters = list(current_app.config['QUARTERS'])
    try:
        store = get_store()
        units, active_consultants, active_clusters = store.units()
        weights = store.weights()
        goals = store.goals()
        bonuses = store.bonuses()
    except SheetsError as e:
        return render_template('parametros.html', error=_fetch_error(e))

    WeightsForm, weight_fields = weights_form_class(weights, quarters, current_app.config['MAX_WEIGHT_PER_INDICATOR'])
    weights_form = WeightsForm()
    section_form = ParameterSectionForm()

    if request.method == 'POST':
        section = request.form.get('section')
        if section == 'pesos':
            if not weights_form.validate_on_submit():
                for errors in weights_form.errors.values():
                    for error in errors:
                        flash(error, 'danger')
                return redirect(url_for('main.parametros'))
            changes = utils.diff_weights(request.form, weight_fields, weights)
            invalid = validate_weight_sums(weights, changes, quarters, current_app.config['MAX_WEIGHT_TOTAL'])
            if invalid:
                flash('A soma dos pesos deve ser exatamente '
                      f"{current_app.config['MAX_WEIGHT_TOTAL']} em cada quarter. " + '; '.join(invalid), 'danger')
                return redirect(url_for('main.parametros'))
        elif section_form.validate_on_submit():
            if section in ('consultor', 'cluster'):
                changes = utils.diff_assignments(request.form, section, units)
            elif section == 'metas':
                changes = utils.diff_goals(request.form, goals)
            elif section == 'bonus':
                changes = utils.diff_bonuses(request.form, bonuses, quarters)
            else:
                flash('Seção desconhecida.', 'danger')
                return redirect(url_for('main.parametros'))
        else:
            flash('Formulário inválido ou expirado. Tente novamente.', 'danger')
            return redirect(url_for('main.parametros'))

        if not changes:
            flash('Nenhuma alteração para salvar.', 'info')
            return redirect(url_for('main.parametros'))

        result = commit(changes, store.write)
        if result.failed is None:
            current_app.logger.info(f"Saved {len(result.applied)} parameter change(s) in section '{section}'.")
            flash(f'{len(result.applied)} alteração(ões) salva(s) com sucesso.', 'success')
        else:
            message = getattr(result.error, 'message', str(result.error))
            current_app.logger.error(f"Parameter save stopped at {result.failed}: {message}")
            flash(f'{len(result.applied)} alteração(ões) salva(s). Falha ao salvar '
                  f'{utils.describe_change(result.failed)}: {message}. '
                  f'{len(result.pending)} alteração(ões) não enviada(s).', 'danger')
        return redirect(url_for('main.parametros'))

    totals = {q: format_decimal(sum(parse_number(w.get(q)) for w in weights.values()), 2) for q in quarters}
    return render_template(
        'parametros.html',
        error=None,
        units=units,
        active_consultants=active_consultants,
        active_clusters=active_clusters,
        weights=weights,
        weight_fields=weight_fields,
        weights_form=weights_form,
        weight_totals=totals,
        goals=goals,
        goal_columns=list(GOAL_COLUMNS),
        bonuses=bonuses,
        quarters=quarters,
        section_form=section_form,
        field_name=utils.field_name,
    )

# --- Vendas Routes ---

def _vendas_period():
    """(key, (start, end)) from the query string; a custom range needs both dates."""
    key = request.args.get('periodo', DEFAULT_PERIOD)
    if key == 'personalizado':
        start = parse_date(request.args.get('dataInicio'))
        end = parse_date(request.args.get('dataFim'))
        if start and end and start <= end:
            return key, (start, end)
        key = DEFAULT_PERIOD
    if key not in PERIOD_LABELS:
        key = DEFAULT_PERIOD
    return key, resolve_period(key)


def _sales_filters():
    """{sales column: selected values} for every Vendas multi-select filter."""
    return {field: request.args.getlist(param) for param, field, _ in SALE_FILTERS}


def _load_sales():
    return loader.load_sales(sales_rows()), loader.load_sales_goals(sales_goal_rows())


@bp.route('/vendas')
def vendas():
    """Sales dashboard: KPI cards, operational indicators, monthly chart, unit ranking and detail table."""
    key, period = _vendas_period()
    units = request.args.getlist('unidade')
    filters = _sales_filters()
    internal = request.args.get('meta') == 'interna'
    try:
        sales, goals = _load_sales()
        leads = loader.load_funnel(funnel_rows())
    except SheetsError as e:
        return render_template('vendas.html', error=_fetch_error(e), data=None, periods=PERIOD_LABELS)

    data = utils.prepare_vendas_data(sales, goals, period, units, internal,
                                     current_app.config['INTERNAL_GOAL_MULTIPLIER'],
                                     filters=filters, leads=leads)
    view = utils.build_detail_table(data['sales'], **_table_args())
    page = view.clamp_page(request.args.get('page', 1))
    return render_template(
        'vendas.html',
        error=None,
        data=data,
        view=view,
        page=page,
        rows=view.page(page),
        periods=PERIOD_LABELS,
        period_key=key,
        period=period,
        period_name=period_label(key),
        selected_units=units,
        sale_filters=SALE_FILTERS,
        internal=internal,
        args=request.args,
    )


@bp.route('/vendas/export')
def vendas_export():
    key, period = _vendas_period()
    units = request.args.getlist('unidade')
    try:
        sales, _ = _load_sales()
    except SheetsError as e:
        flash(f'Não foi possível exportar: {_fetch_error(e)}', 'danger')
        return redirect(url_for('main.vendas', **request.args))

    selected = select_sales(sales, period, units, _sales_filters())
    view = utils.build_detail_table(selected, **_table_args())
    return _export(view, request.args.get('format', 'tsv'), 'Dados Detalhados', period_label(key), 'Vendas')

# --- Admin Routes ---

@bp.route('/admin/login', methods=['GET', 'POST'])
def admin_login():
    """Handles admin login."""
    form = AdminLoginForm()
    if form.validate_on_submit():
        if form.password.data == current_app.config.get('ADMIN_PASSWORD'):
            session['admin_logged_in'] = True
            flash('Login realizado com sucesso.', 'success')
            next_page = request.args.get('next')
            if not next_page or not next_page.startswith('/') or next_page.startswith('//'):
                next_page = url_for('main.parametros')
            return redirect(next_page)
        else:
            current_app.logger.warning('Failed admin login attempt.')
            flash('Senha inválida.', 'danger')
    return render_template('admin_login.html', form=form, title='Acesso administrativo')


@bp.route('/admin/logout')
def admin_logout():
    """Handles admin logout."""
    session.pop('admin_logged_in', None)
    flash('Você saiu da área administrativa.', 'info')
    return redirect(url_for('main.index'))
