# ==============================================================================
# app/analytics/sales.py
# ------------------------------------------------------------------------------
# KPIs of the Vendas dashboard: realized VVR (sales and after-sales) against
# the monthly goals of the selected units, the operational indicators (leads,
# meetings, contracts, memberships), the monthly series for the chart and
# the realized-VVR ranking of units.
# ==============================================================================

import pandas as pd

from app.analytics.filters import filter_records
from app.analytics.normalize import normalize_text
from app.analytics.periods import month_bounds, overlaps
from app.analytics.schema import CONTRACT_SERVICE_MARKER

SALE = 'VENDA'
AFTER_SALE = 'POS VENDA'


def select_sales(sales, period, units=None, filters=None):
    """
    Sales inside the inclusive period, restricted to the selected units
    (none = all). `filters` maps a sales column to the accepted values;
    empty lists are ignored.
    """
    start, end = period
    return filter_records(sales, date_field='dt_cadastro_integrante', start=start, end=end,
                          nm_unidade=list(units or []), **(filters or {}))


def select_leads(leads, period, units=None):
    """Funnel leads created inside the period, restricted to the selected units."""
    start, end = period
    return filter_records(leads, date_field='criado_em', start=start, end=end,
                          nm_unidade=list(units or []))


def _unit_matches(unit, selected):
    return not selected or unit.strip().lower() in selected


def goal_totals(goals, units, period):
    """Sums the monthly goals whose month overlaps the period and whose unit is selected."""
    selected = {u.strip().lower() for u in (units or []) if u}
    start, end = period
    totals = {'meta_vvr_vendas': 0.0, 'meta_vvr_posvendas': 0.0, 'meta_adesoes': 0,
              'meta_leads': 0, 'meta_reunioes': 0, 'meta_contratos': 0}
    for (unit, year, month), goal in goals.items():
        if not _unit_matches(unit, selected):
            continue
        month_start, month_end = month_bounds(year, month)
        if overlaps(month_start, month_end, start, end):
            for key in totals:
                totals[key] += goal.get(key, 0)
    return totals


def _percent(realized, goal):
    return realized / goal if goal > 0 else 0


def compute_kpis(sales, goals, units, period, internal_goal=False, multiplier=0.85, filters=None):
    """
    Realized vs goal for the period.

    `sales` may be the full sheet; it is filtered here by period, units and
    `filters` (see select_sales).
    With `internal_goal` the goals are scaled by `multiplier`. Percentages
    are fractions (1.0 = goal reached) and 0 when there is no goal.
    """
    selected = select_sales(sales, period, units, filters)
    realized_sales = sum(s['vl_plano'] for s in selected if normalize_text(s['venda_posvenda']) == SALE)
    realized_after = sum(s['vl_plano'] for s in selected if normalize_text(s['venda_posvenda']) == AFTER_SALE)

    totals = goal_totals(goals, units, period)
    factor = multiplier if internal_goal else 1
    goal_sales = totals['meta_vvr_vendas'] * factor
    goal_after = totals['meta_vvr_posvendas'] * factor

    realized_total = realized_sales + realized_after
    goal_total = goal_sales + goal_after
    return {
        'realized_total': realized_total,
        'realized_sales': realized_sales,
        'realized_after_sales': realized_after,
        'goal_total': goal_total,
        'goal_sales': goal_sales,
        'goal_after_sales': goal_after,
        'percent_total': _percent(realized_total, goal_total),
        'percent_sales': _percent(realized_sales, goal_sales),
        'percent_after_sales': _percent(realized_after, goal_after),
        'memberships': len(selected),
        'goal_memberships': totals['meta_adesoes'],
        'percent_memberships': _percent(len(selected), totals['meta_adesoes']),
    }


def is_contract(sale):
    return CONTRACT_SERVICE_MARKER in str(sale.get('tp_servico', '')).upper()


def operational_indicators(selected_sales, selected_leads, goals, units, period,
                           internal_goal=False, multiplier=0.85):
    """
    Leads, meetings, contracts and memberships against the summed monthly
    goals, each as {total, goal, percent}.

    Both lists must already be filtered to the period and units. A meeting is
    a lead with the diagnosis filled in; a contract is a sale whose service
    type contains "MV". With `internal_goal` every goal is scaled by
    `multiplier`.
    """
    totals = goal_totals(goals, units, period)
    factor = multiplier if internal_goal else 1
    realized = {
        'leads': (len(selected_leads), totals['meta_leads']),
        'meetings': (sum(1 for lead in selected_leads if lead.get('diagnostico_realizado')),
                     totals['meta_reunioes']),
        'contracts': (sum(1 for sale in selected_sales if is_contract(sale)), totals['meta_contratos']),
        'memberships': (len(selected_sales), totals['meta_adesoes']),
    }
    indicators = {}
    for name, (total, goal) in realized.items():
        goal = goal * factor
        indicators[name] = {'total': total, 'goal': goal, 'percent': _percent(total, goal)}
    return indicators


def monthly_series(sales, goals, units=None):
    """
    Realized VVR and goal per month ("YYYY-MM"), in chronological order.
    Months appear when they have either a sale or a goal.
    """
    selected_units = {u.strip().lower() for u in (units or []) if u}
    realized, goal = {}, {}

    for sale in sales:
        if not _unit_matches(str(sale['nm_unidade']), selected_units):
            continue
        key = sale['dt_cadastro_integrante'].strftime('%Y-%m')
        realized[key] = realized.get(key, 0.0) + sale['vl_plano']

    for (unit, year, month), values in goals.items():
        if not _unit_matches(unit, selected_units):
            continue
        key = f"{year:04d}-{month:02d}"
        goal[key] = goal.get(key, 0.0) + values.get('meta_vvr_total', 0.0)

    months = sorted(set(realized) | set(goal))
    return {
        'labels': months,
        'realized': [round(realized.get(m, 0.0), 2) for m in months],
        'goal': [round(goal.get(m, 0.0), 2) for m in months],
    }


def sales_ranking(sales):
    """Units ranked by realized VVR; ties keep first-appearance order, positions 1..N."""
    if not sales:
        return []
    df = pd.DataFrame({
        'unit': [str(s['nm_unidade']) for s in sales],
        'vvr': [s['vl_plano'] for s in sales],
    })
    grouped = df.groupby('unit', sort=False).agg(vvr=('vvr', 'sum'), count=('vvr', 'size')).reset_index()
    grouped = grouped.sort_values('vvr', ascending=False, kind='stable').reset_index(drop=True)
    grouped['position'] = grouped.index + 1
    return [
        {'unit': row['unit'], 'vvr': float(row['vvr']), 'count': int(row['count']), 'position': int(row['position'])}
        for row in grouped.to_dict('records')
    ]


def goal_color(percent):
    if percent >= 1:
        return 'success'
    if percent >= 0.5:
        return 'warning'
    return 'danger'
