# ==============================================================================
# app/analytics/changes.py
# ------------------------------------------------------------------------------
# Pending edits of the parameters page. A ChangeSet collects single-cell
# changes, commit() writes them one by one and stops at the first failure,
# and validate_weight_sums() checks the quarter totals before a weights save.
# ==============================================================================

import logging
from collections import namedtuple

from app.analytics.normalize import format_decimal, parse_number

Change = namedtuple('Change', ['entity', 'field', 'value'])
CommitResult = namedtuple('CommitResult', ['applied', 'failed', 'error', 'pending'])


class ChangeSet:
    """
    Ordered changes keyed by (entity, field).

    Editing a key again replaces its value in place; editing it back to the
    original value removes it.
    """

    def __init__(self):
        self._changes = {}

    def edit(self, entity, field, value, original=None):
        key = (entity, field)
        if original is not None and str(value).strip() == str(original).strip():
            self._changes.pop(key, None)
        else:
            self._changes[key] = Change(entity, field, value)
        return self

    def discard(self, entity, field):
        self._changes.pop((entity, field), None)

    def get(self, entity, field, default=None):
        change = self._changes.get((entity, field))
        return change.value if change else default

    def __iter__(self):
        return iter(list(self._changes.values()))

    def __len__(self):
        return len(self._changes)

    def __bool__(self):
        return bool(self._changes)

    def __contains__(self, key):
        return key in self._changes


def commit(changes, write):
    """
    Calls write(change) for every change, in order. The first exception
    stops the batch; writes already applied stay applied.
    """
    pending = list(changes)
    applied = []
    for index, change in enumerate(pending):
        try:
            write(change)
        except Exception as e:
            logging.error(f"Failed to save {change.entity} / {change.field}: {e}")
            return CommitResult(applied, change, e, pending[index + 1:])
        applied.append(change)
    return CommitResult(applied, None, None, [])


def validate_weight_sums(weights, changes=None, quarters=('1', '2', '3', '4'), total=10):
    """
    Returns one message per quarter whose weights do not add up to `total`,
    e.g. "1º Quarter: 9,5". A pending ('weight', (indicator, quarter)) change
    overrides the stored weight. An empty list means the weights are valid.
    """
    errors = []
    for quarter in quarters:
        quarter_sum = 0.0
        for indicator, values in weights.items():
            current = values.get(quarter, 0)
            value = changes.get('weight', (indicator, quarter), current) if changes else current
            quarter_sum += parse_number(value)
        if round(quarter_sum, 6) != total:
            formatted = format_decimal(quarter_sum, 2).rstrip('0').rstrip(',')
            errors.append(f"{quarter}º Quarter: {formatted}")
    return errors
