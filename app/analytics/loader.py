# ==============================================================================
# app/analytics/loader.py
# ------------------------------------------------------------------------------
# Turns raw spreadsheet rows (first row = header) into records keyed by the
# canonical field ids of schema.py. Header spellings are resolved once per
# load, so the rest of the code never looks up alternative names.
# ==============================================================================

import logging

from app.analytics.normalize import parse_number
from app.analytics.periods import parse_date
from app.analytics.schema import (PEX_ALIASES, TEXT_FIELDS, SALE_COLUMNS, SALE_REQUIRED_COLUMNS,
                                  SALES_GOAL_COLUMNS, SALES_GOAL_FALLBACK_INDEX,
                                  ACTIVE_CONSULTANTS_HEADER, ACTIVE_CLUSTERS_HEADER,
                                  GOAL_COLUMNS, RESULTS_UNIT_INDEX, RESULTS_QUARTER_INDEX,
                                  FUNNEL_COLUMNS)
from app.sheets.errors import DataError


def _cell(row, index, default=''):
    if index is None or index < 0 or index >= len(row):
        return default
    value = row[index]
    return default if value is None else value


def rows_to_dicts(rows):
    """Header row + data rows -> list of {header: cell} dicts (missing cells are '')."""
    if not rows or len(rows) < 2:
        return []
    headers = [str(h) for h in rows[0]]
    return [{header: _cell(row, i) for i, header in enumerate(headers)} for row in rows[1:]]


def resolve_headers(headers, aliases=PEX_ALIASES):
    """
    Maps every header cell to its canonical id. Headers unknown to the alias
    table keep their raw (stripped) text. When two headers resolve to the same
    id, the first one wins and the later one keeps its raw name.
    """
    lookup = {}
    for canonical, spellings in aliases.items():
        for spelling in spellings:
            lookup.setdefault(spelling, canonical)
            lookup.setdefault(spelling.strip(), canonical)

    resolved, taken = [], set()
    for header in headers:
        raw = str(header)
        canonical = lookup.get(raw, lookup.get(raw.strip()))
        if canonical and canonical not in taken:
            taken.add(canonical)
            resolved.append(canonical)
        else:
            resolved.append(raw.strip())
    return resolved


def load_pex_records(rows, required=('unit', 'quarter')):
    """
    Reads DEVERIA (or HISTORICO) rows into records. Text fields are stripped
    strings; indicator fields keep their raw cell value and are normalized by
    whoever consumes them. Rows without a unit name are skipped.

    A warning is logged when any of the `required` fields has no header.
    """
    if not rows or len(rows) < 2:
        return []

    keys = resolve_headers(rows[0])
    missing = [field for field in required if field not in keys]
    if missing:
        logging.warning(f"PEX sheet header is missing {missing}. Available headers: {rows[0]}")

    records = []
    for row in rows[1:]:
        record = {key: _cell(row, i) for i, key in enumerate(keys)}
        for field in TEXT_FIELDS:
            record[field] = str(record.get(field, '') or '').strip()
        if not record['unit']:
            continue
        records.append(record)
    return records


def load_weights(rows):
    """
    CRITERIOS RANKING!B:F -> {indicator: {'1': w1, '2': w2, '3': w3, '4': w4}}
    keeping the sheet's row order. Values stay as the strings read.
    """
    weights = {}
    for row in (rows or [])[1:]:
        indicator = str(_cell(row, 0)).strip()
        if not indicator:
            continue
        weights[indicator] = {str(q): str(_cell(row, q)).strip() for q in range(1, 5)}
    return weights


def find_weight(weights, *names):
    """First weight row matching any of the names, compared case-insensitively."""
    by_upper = {name.upper(): quarters for name, quarters in weights.items()}
    for name in names:
        if name and name.upper() in by_upper:
            return by_upper[name.upper()]
    return None


def load_cluster_goals(rows):
    """METAS POR CLUSTER!A:H -> [{'cluster': ..., 'VVR': 1000000.0, ...}]."""
    goals = []
    columns = list(GOAL_COLUMNS)
    for row in (rows or [])[1:]:
        cluster = str(_cell(row, 0)).strip()
        if not cluster:
            continue
        goal = {'cluster': cluster}
        for offset, column in enumerate(columns, start=1):
            goal[column] = parse_number(_cell(row, offset))
        goals.append(goal)
    return goals


def load_bonus(rows):
    """
    DEVERIA rows read positionally (unit in A, bonus in D, quarter in V) ->
    [{'unit': ..., 'quarters': {'1': '0', ...}}] sorted by unit.
    """
    by_unit = {}
    for row in (rows or [])[1:]:
        unit = str(_cell(row, RESULTS_UNIT_INDEX)).strip()
        quarter = str(_cell(row, RESULTS_QUARTER_INDEX)).strip()
        if not unit or not quarter:
            continue
        quarters = by_unit.setdefault(unit, {'1': '0', '2': '0', '3': '0', '4': '0'})
        quarters[quarter] = str(_cell(row, 3) or '0')
    return [{'unit': unit, 'quarters': by_unit[unit]} for unit in sorted(by_unit)]


def _split_options(rows, index):
    options = []
    for row in rows:
        for option in str(_cell(row, index)).split('\n'):
            option = option.strip()
            if option and option not in options:
                options.append(option)
    return options


def load_unit_assignments(rows):
    """
    UNI CONS -> (units, active_consultants, active_clusters). Each unit is
    {'unit', 'consultant', 'cluster'}; the active option lists come from
    newline-separated cells anywhere in their columns.
    """
    if not rows:
        return [], [], []
    headers = [str(h).strip() for h in rows[0]]

    def index_of(name):
        return headers.index(name) if name in headers else None

    unit_idx = index_of('nm_unidade')
    consultant_idx = index_of('Consultor')
    cluster_idx = index_of('Cluster')
    data = rows[1:]

    units = [
        {
            'unit': str(_cell(row, unit_idx)).strip(),
            'consultant': str(_cell(row, consultant_idx)).strip(),
            'cluster': str(_cell(row, cluster_idx)).strip(),
        }
        for row in data if str(_cell(row, unit_idx)).strip()
    ]
    consultants = _split_options(data, index_of(ACTIVE_CONSULTANTS_HEADER))
    clusters = _split_options(data, index_of(ACTIVE_CLUSTERS_HEADER))
    return units, consultants, clusters


def load_sales(rows):
    """
    ADESOES rows -> sale records. Header names are matched lower-cased.
    Raises DataError when an essential column is missing; rows without a
    readable date are dropped.
    """
    if not rows or len(rows) < 2:
        return []

    headers = [str(h).strip().lower() for h in rows[0]]
    indices = {column: (headers.index(column) if column in headers else None) for column in SALE_COLUMNS}
    missing = [column for column in SALE_REQUIRED_COLUMNS if indices[column] is None]
    if missing:
        logging.error(f"Sales sheet headers found: {headers}")
        raise DataError(f"Colunas essenciais não encontradas na planilha: {', '.join(missing)}")

    sales = []
    for row in rows[1:]:
        sale_date = parse_date(_cell(row, indices['dt_cadastro_integrante']))
        if sale_date is None:
            continue
        sale = {}
        for column, default in SALE_COLUMNS.items():
            if indices[column] is None:
                sale[column] = default
            else:
                sale[column] = _cell(row, indices[column]) or (default if default is not None else '')
        sale['nm_unidade'] = str(sale['nm_unidade']).strip() or 'N/A'
        if sale['venda_posvenda'] == 'N/A' and indices['venda_posvenda'] is not None:
            sale['venda_posvenda'] = 'VENDA'
        sale['dt_cadastro_integrante'] = sale_date
        sale['vl_plano'] = parse_number(sale['vl_plano'])
        sales.append(sale)
    logging.info(f"Loaded {len(sales)} valid sales out of {len(rows) - 1} rows.")
    return sales


def _to_int(value):
    return int(parse_number(value))


def load_sales_goals(rows):
    """metas sheet -> {(unit, year, month): goal dict}. Rows without unit/year/month are ignored."""
    if not rows or len(rows) < 2:
        return {}

    headers = [str(h).strip().lower() for h in rows[0]]
    indices = {key: (headers.index(name) if name in headers else SALES_GOAL_FALLBACK_INDEX.get(key))
               for key, name in SALES_GOAL_COLUMNS.items()}

    goals = {}
    for row in rows[1:]:
        unit = str(_cell(row, indices['unit'])).strip()
        year = _to_int(_cell(row, indices['year']))
        month = _to_int(_cell(row, indices['month']))
        if not unit or not year or not 1 <= month <= 12:
            continue
        sales_goal = parse_number(_cell(row, indices['meta_vvr_vendas']))
        after_sales_goal = parse_number(_cell(row, indices['meta_vvr_posvendas']))
        goals[(unit, year, month)] = {
            'meta_vvr_vendas': sales_goal,
            'meta_vvr_posvendas': after_sales_goal,
            'meta_vvr_total': sales_goal + after_sales_goal,
            'meta_adesoes': _to_int(_cell(row, indices['meta_adesoes'])),
            'meta_leads': _to_int(_cell(row, indices['meta_leads'])),
            'meta_reunioes': _to_int(_cell(row, indices['meta_reunioes'])),
            'meta_contratos': _to_int(_cell(row, indices['meta_contratos'])),
        }
    return goals


def load_funnel(rows):
    """
    Lead funnel rows -> lead records (the first row is the header and is
    skipped). Rows without a title are not leads; `criado_em` becomes a date
    or None.
    """
    leads = []
    for row in (rows or [])[1:]:
        lead = {field: str(_cell(row, index)).strip() for field, index in FUNNEL_COLUMNS.items()}
        if not lead['titulo']:
            continue
        lead['criado_em'] = parse_date(lead['criado_em'])
        leads.append(lead)
    logging.info(f"Loaded {len(leads)} funnel leads.")
    return leads
