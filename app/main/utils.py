# ==============================================================================
# app/main/utils.py
# ------------------------------------------------------------------------------
# Prepares the data of each page from the loaded records: option lists,
# rankings, the summary and detail tables and the chart series. Routes
# stay thin and only deal with requests, sessions and templates.
# ==============================================================================

from app.analytics import ranking
from app.analytics.changes import ChangeSet
from app.analytics.filters import filter_records, unique_values
from app.analytics.normalize import format_currency, format_decimal, parse_number
from app.analytics.periods import parse_date, format_date, previous_year
from app.analytics.sales import (compute_kpis, monthly_series, sales_ranking, select_sales, select_leads,
                                 operational_indicators, goal_color)
from app.analytics.schema import INDICATORS, SUMMARY_COLUMNS, DETAIL_COLUMNS, GOAL_COLUMNS, SALE_FILTERS
from app.analytics.table import Column, TableView

TEXT_COLUMNS = ('unit', 'cluster', 'consultant')


def quarter_options(records):
    """Quarters present in the data, numerically ordered."""
    return sorted(unique_values(records, 'quarter'), key=lambda q: (parse_number(q), q))


# --- Ranking page ---

def prepare_ranking_data(records, quarter=None, cluster=None, consultant=None):
    quarters = quarter_options(records)
    quarter = quarter if quarter in quarters else (quarters[0] if quarters else None)

    in_quarter = filter_records(records, quarter=quarter)
    general = ranking.build_ranking(in_quarter)
    entries = ranking.scoped_ranking(general, cluster=cluster, consultant=consultant)

    return {
        'quarters': quarters,
        'clusters': unique_values(records, 'cluster'),
        'consultants': unique_values(records, 'consultant'),
        'selected': {'quarter': quarter, 'cluster': cluster or '', 'consultant': consultant or ''},
        'entries': entries,
        'podium': entries[:3] if len(entries) >= 3 else [],
    }


# --- Results page ---

def history_series(history, unit, field):
    """Chronological (labels, values) of one indicator of a unit in HISTORICO."""
    points = []
    for record in history:
        if record.get('unit') != unit:
            continue
        day = parse_date(record.get('date'))
        if day is None:
            continue
        points.append((day, parse_number(record.get(field))))
    points.sort(key=lambda point: point[0])
    return {
        'labels': [format_date(day) for day, _ in points],
        'values': [round(value, 2) for _, value in points],
    }


def prepare_results_data(records, history, weights, unit=None, quarter=None, indicator=None):
    units = unique_values(records, 'unit')
    quarters = quarter_options(records)
    unit = unit if unit in units else (units[0] if units else None)
    quarter = quarter if quarter in quarters else (quarters[0] if quarters else None)
    fields = [item['field'] for item in INDICATORS]
    indicator = indicator if indicator in fields else fields[0]

    data = {
        'units': units,
        'quarters': quarters,
        'indicators': INDICATORS,
        'selected': {'unit': unit, 'quarter': quarter, 'indicator': indicator},
        'record': None,
    }
    if unit is None:
        return data

    record = next((r for r in records if r['unit'] == unit and r.get('quarter') == quarter), None)
    unit_cluster = record.get('cluster') if record else next(
        (r.get('cluster') for r in records if r['unit'] == unit), '')

    general = ranking.build_ranking(records)
    in_quarter = ranking.quarter_ranking(records, quarter)
    in_quarter_cluster = ranking.quarter_ranking(records, quarter, cluster=unit_cluster)

    data.update({
        'record': record,
        'cluster': unit_cluster,
        'score': parse_number(record.get('score')) if record else 0.0,
        'bonus': parse_number(record.get('bonus')) if record else 0.0,
        'positions': {
            'network': ranking.position_of(general, unit),
            'cluster': ranking.position_of(ranking.scoped_ranking(general, cluster=unit_cluster), unit),
            'network_quarter': ranking.position_of(in_quarter, unit),
            'cluster_quarter': ranking.position_of(in_quarter_cluster, unit),
        },
        'quarter_scores': ranking.quarter_scores(records, unit),
        'breakdown': ranking.indicator_breakdown(records, unit, quarter, weights),
        'history': history_series(history, unit, indicator),
    })
    return data


# --- Summary table (dashboard page) ---

def _decimal(value):
    return format_decimal(value, 2)


def summary_columns():
    return [Column(key, label, None if key in TEXT_COLUMNS else _decimal) for key, label in SUMMARY_COLUMNS]


def build_summary_table(records, quarter=None, cluster=None, consultant=None,
                        query='', sort=None, direction=None, page_size=10):
    rows = filter_records(records, quarter=quarter, cluster=cluster, consultant=consultant)
    view = TableView(summary_columns(), rows, page_size=page_size)
    return view.search(query).set_sort(sort, direction)


# --- Vendas page ---

def detail_columns():
    formatters = {'vl_plano': format_currency}
    return [Column(key, label, formatters.get(key)) for key, label in DETAIL_COLUMNS]


def build_detail_table(sales, query='', sort=None, direction=None, page_size=10):
    view = TableView(detail_columns(), sales, page_size=page_size)
    return view.search(query).set_sort(sort, direction)


def _with_colors(kpis):
    kpis['colors'] = {
        'total': goal_color(kpis['percent_total']),
        'sales': goal_color(kpis['percent_sales']),
        'after_sales': goal_color(kpis['percent_after_sales']),
    }
    return kpis


def prepare_vendas_data(sales, goals, period, units=None, internal_goal=False, multiplier=0.85,
                        filters=None, leads=None):
    """
    Everything the Vendas page shows. `filters` maps sales columns to the
    selected values (see SALE_FILTERS); `leads` are the funnel records.
    """
    selected = select_sales(sales, period, units, filters)
    goal_args = dict(internal_goal=internal_goal, multiplier=multiplier)
    kpis = compute_kpis(sales, goals, units, period, filters=filters, **goal_args)
    last_year = compute_kpis(sales, goals, units, previous_year(period), filters=filters, **goal_args)
    operational = operational_indicators(selected, select_leads(leads or [], period, units),
                                         goals, units, period, **goal_args)
    for indicator in operational.values():
        indicator['color'] = goal_color(indicator['percent'])
    return {
        'units': unique_values(sales, 'nm_unidade'),
        'filter_options': {field: unique_values(sales, field) for _, field, _ in SALE_FILTERS},
        'kpis': _with_colors(kpis),
        'previous_year': {'period': previous_year(period), 'kpis': _with_colors(last_year)},
        'operational': operational,
        'series': monthly_series(sales, goals, units),
        'ranking': sales_ranking(selected),
        'sales': selected,
    }


# --- Parameters page ---

FIELD_SEPARATOR = '::'


def field_name(*parts):
    return FIELD_SEPARATOR.join(str(part) for part in parts)


def diff_assignments(form, kind, units):
    """Edits of the consultant or cluster of each unit ('consultor::<unit>' / 'cluster::<unit>')."""
    entity, attribute = ('consultant', 'consultant') if kind == 'consultor' else ('cluster', 'cluster')
    changes = ChangeSet()
    for unit in units:
        name = field_name(kind, unit['unit'])
        if name in form:
            changes.edit(entity, unit['unit'], form[name].strip(), original=unit[attribute])
    return changes


def diff_weights(form_data, field_map, weights):
    changes = ChangeSet()
    for name, (indicator, quarter) in field_map.items():
        if name in form_data:
            value = str(form_data[name]).strip()
            original = weights[indicator].get(quarter, '')
            if parse_number(value) != parse_number(original):
                changes.edit('weight', (indicator, quarter), value)
    return changes


def diff_goals(form, goals):
    changes = ChangeSet()
    for goal in goals:
        for column in GOAL_COLUMNS:
            name = field_name('meta', goal['cluster'], column)
            if name in form and parse_number(form[name]) != goal[column]:
                changes.edit('goal', (goal['cluster'], column), form[name].strip())
    return changes


def diff_bonuses(form, bonuses, quarters):
    changes = ChangeSet()
    for bonus in bonuses:
        for quarter in quarters:
            name = field_name('bonus', bonus['unit'], quarter)
            if name in form and parse_number(form[name]) != parse_number(bonus['quarters'].get(quarter)):
                changes.edit('bonus', (bonus['unit'], quarter), form[name].strip())
    return changes


def describe_change(change):
    """Human readable name of a change for flash messages."""
    labels = {'consultant': 'Consultor', 'cluster': 'Cluster', 'weight': 'Peso', 'goal': 'Meta', 'bonus': 'Bônus'}
    field = change.field if isinstance(change.field, str) else ' / '.join(str(part) for part in change.field)
    return f"{labels.get(change.entity, change.entity)} {field}"
