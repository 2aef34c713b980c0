# ==============================================================================
# app/analytics/filters.py
# ------------------------------------------------------------------------------
# Selection of records by the dashboard filters (quarter, cluster, consultant,
# unit lists, date ranges) and the option lists used to populate them.
# ==============================================================================

from app.analytics.periods import parse_date


def is_provided(value):
    """A criterion counts only when it is not None, not "" and not an empty collection."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ''
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) > 0
    return True


def _matches(record, field, expected):
    if field not in record:
        return False
    actual = record[field]
    if isinstance(expected, (list, tuple, set, frozenset)):
        return str(actual) in {str(item) for item in expected}
    return str(actual) == str(expected)


def _in_range(record, date_field, start, end):
    if date_field not in record:
        return False
    day = parse_date(record[date_field])
    if day is None:
        return False
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def filter_records(records, date_field='date', start=None, end=None, **criteria):
    """
    Returns the records matching every provided criterion.

        filter_records(records, quarter='1', cluster=['A', 'B'])
        filter_records(sales, date_field='dt_cadastro_integrante', start=d1, end=d2)

    A list criterion means membership, anything else means equality on the
    string form. start/end bound the date field inclusively. The input list
    is never mutated; with no active criterion a copy of it comes back.
    """
    active = {field: value for field, value in criteria.items() if is_provided(value)}
    start = parse_date(start) if is_provided(start) else None
    end = parse_date(end) if is_provided(end) else None
    check_dates = start is not None or end is not None

    result = []
    for record in records:
        if not all(_matches(record, field, value) for field, value in active.items()):
            continue
        if check_dates and not _in_range(record, date_field, start, end):
            continue
        result.append(record)
    return result


def unique_values(records, field):
    """Sorted distinct values of a field, skipping blanks and "N/A"."""
    values = {str(record.get(field, '')).strip() for record in records}
    values.discard('')
    values.discard('N/A')
    return sorted(values)
