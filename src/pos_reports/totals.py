"""Section subtotals and the grand total."""

import logging
from typing import Iterable, List, Optional, Sequence, Union

from .models import ReportSection, Row, RowType
from .row_normalizer import to_number

logger = logging.getLogger(__name__)

TOTAL_LABEL = "Total:"
GRAND_TOTAL_LABEL = "Grand Total:"

Number = Union[int, float]


def _tidy(total: Number) -> Number:
    # Keep integer sums integral; round money sums to cents
    if isinstance(total, float):
        return round(total, 2)
    return total


def sum_column(rows: Iterable[Row], key: str) -> Number:
    """Sum one column, counting non-numeric or missing values as 0."""
    total: Number = 0
    for row in rows:
        if row.is_total:
            continue
        total += to_number(row.get(key))
    return _tidy(total)


def total_label_key(section: ReportSection) -> Optional[str]:
    """Column that holds the "Total:" label for a section."""
    if section.label_column_key and section.label_column_key != section.totals_column_key:
        return section.label_column_key
    for key in section.column_keys:
        if key != section.totals_column_key:
            return key
    return None


def build_total_row(section: ReportSection, total: Number) -> Row:
    """Synthetic row: label in the label column, sum in the totals column, rest empty."""
    label_key = total_label_key(section)
    values = {}
    for key in section.column_keys:
        if key == section.totals_column_key:
            values[key] = total
        elif key == label_key:
            values[key] = TOTAL_LABEL
        else:
            values[key] = ""
    return Row.from_mapping(values, RowType.SUBTOTAL_TOTAL)


def section_total(section: ReportSection) -> Optional[Number]:
    """Subtotal of a section, or None when it has no totals column or no rows."""
    if not section.totals_column_key or section.is_empty:
        return None
    return sum_column(section.rows, section.totals_column_key)


def with_total_row(section: ReportSection) -> List[Row]:
    """
    Section rows followed by their Total row.

    Sections with no rows or no totals column come back unchanged.
    """
    rows = list(section.rows)
    total = section_total(section)
    if total is None:
        return rows
    logger.debug("Section %r total over %d rows: %s", section.name, len(rows), total)
    rows.append(build_total_row(section, total))
    return rows


def grand_total(sections: Sequence[ReportSection]) -> Optional[Number]:
    """Sum of every section subtotal; None if no section carries one."""
    subtotals = [section_total(section) for section in sections]
    subtotals = [value for value in subtotals if value is not None]
    if not subtotals:
        return None
    return _tidy(sum(subtotals))
