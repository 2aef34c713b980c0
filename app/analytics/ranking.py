# ==============================================================================
# app/analytics/ranking.py
# ------------------------------------------------------------------------------
# The ranking engine. Groups PEX records by unit, averages their score and
# assigns contiguous positions. Also builds the per-unit views of the
# results page: quarter scores and the indicator breakdown.
# ==============================================================================

import logging

import pandas as pd

from app.analytics.loader import find_weight
from app.analytics.normalize import parse_number
from app.analytics.schema import INDICATORS

RANKING_COLUMNS = ['unit', 'cluster', 'consultant', 'mean', 'count', 'position']


def _rank(df):
    """Stable sort by mean (descending) and number the rows 1..N."""
    df = df.sort_values('mean', ascending=False, kind='stable').reset_index(drop=True)
    df['position'] = df.index + 1
    return df


def _to_entries(df):
    return [
        {
            'unit': row['unit'],
            'cluster': row['cluster'],
            'consultant': row['consultant'],
            'mean': float(row['mean']),
            'count': int(row['count']),
            'position': int(row['position']),
        }
        for row in df.to_dict('records')
    ]


def _warn_on_reassignment(df, field):
    changed = df.groupby('unit', sort=False)[field].nunique()
    for unit in changed[changed > 1].index:
        values = df.loc[df['unit'] == unit, field].unique().tolist()
        logging.warning(f"Unit '{unit}' has more than one {field} in the data {values}; using the last one.")


def build_ranking(records, score_field='score'):
    """
    Aggregates records into ranking entries.

    Units are grouped in order of first appearance; the mean is the plain
    average of the normalized score, and the cluster/consultant shown is the
    one of the unit's last record. Ties keep the first-appearance order.
    """
    if not records:
        return []

    df = pd.DataFrame({
        'unit': [str(r.get('unit', '')) for r in records],
        'cluster': [str(r.get('cluster', '')) for r in records],
        'consultant': [str(r.get('consultant', '')) for r in records],
        'score': [parse_number(r.get(score_field)) for r in records],
    })
    _warn_on_reassignment(df, 'cluster')
    _warn_on_reassignment(df, 'consultant')

    grouped = df.groupby('unit', sort=False).agg(
        total=('score', 'sum'),
        count=('score', 'size'),
        cluster=('cluster', 'last'),
        consultant=('consultant', 'last'),
    ).reset_index()
    grouped['mean'] = grouped['total'] / grouped['count']

    return _to_entries(_rank(grouped))


def scoped_ranking(ranking, cluster=None, consultant=None):
    """Keeps the entries of one cluster and/or consultant and renumbers them from 1."""
    entries = [
        entry for entry in ranking
        if (not cluster or entry['cluster'] == cluster)
        and (not consultant or entry['consultant'] == consultant)
    ]
    if not entries:
        return []
    return _to_entries(_rank(pd.DataFrame(entries, columns=RANKING_COLUMNS)))


def position_of(ranking, unit):
    """(position, total) of a unit in a ranking; position 0 when the unit is absent."""
    for entry in ranking:
        if entry['unit'] == unit:
            return entry['position'], len(ranking)
    return 0, len(ranking)


def quarter_ranking(records, quarter, cluster=None):
    """Ranking of a single quarter, over the whole network or one cluster."""
    selected = [
        r for r in records
        if str(r.get('quarter')) == str(quarter) and (not cluster or r.get('cluster') == cluster)
    ]
    return build_ranking(selected)


def quarter_scores(records, unit, quarters=('1', '2', '3', '4')):
    """[(quarter, score)] of one unit, rounded to 2 decimals; 0 for a missing quarter."""
    scores = []
    for quarter in quarters:
        record = next(
            (r for r in records if r.get('unit') == unit and str(r.get('quarter')) == str(quarter)),
            None,
        )
        value = parse_number(record.get('score')) if record else 0.0
        scores.append((str(quarter), round(value, 2)))
    return scores


def _best(records, field):
    """(value, unit) of the highest positive value of a field, or (0, None)."""
    best_value, best_unit = 0.0, None
    for record in records:
        value = parse_number(record.get(field))
        if value > best_value:
            best_value, best_unit = value, record.get('unit')
    return best_value, best_unit


def indicator_breakdown(records, unit, quarter, weights):
    """
    Builds the indicator cards of the results page.

    For each of the seven indicators: the unit's value in the quarter, the best
    value of the network and of the unit's cluster (with the unit holding it),
    and a note with the indicator weight for the quarter when there is one.
    """
    in_quarter = [r for r in records if str(r.get('quarter')) == str(quarter)]
    record = next((r for r in in_quarter if r.get('unit') == unit), None)
    if record is None:
        return []
    cluster_records = [r for r in in_quarter if r.get('cluster') == record.get('cluster')]

    breakdown = []
    for indicator in INDICATORS:
        field = indicator['field']
        network_best, network_unit = _best(in_quarter, field)
        cluster_best, cluster_unit = _best(cluster_records, field)

        weight_row = find_weight(weights or {}, indicator['weight_name'], indicator['code'], indicator['title'])
        weight = weight_row.get(str(quarter)) if weight_row else None
        note = f"Peso: {weight}" if weight not in (None, '') else indicator['description']

        breakdown.append({
            'field': field,
            'code': indicator['code'],
            'title': indicator['title'],
            'value': parse_number(record.get(field)),
            'network_best': network_best,
            'network_best_unit': network_unit,
            'cluster_best': cluster_best,
            'cluster_best_unit': cluster_unit,
            'note': note,
        })
    return breakdown
