"""Turn domain records into uniform report rows."""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from .errors import InvalidRecordError
from .models import CellValue, Row, RowType

logger = logging.getLogger(__name__)

_MISSING = object()

FieldSource = Union[str, Callable[[Mapping[str, Any]], Any]]


@dataclass(frozen=True)
class FieldSpec:
    """
    How one row column is read from a source record.

    `source` is either a dotted path into the record ("products.name"
    follows the nested product reference) or a callable receiving the
    whole record. A missing or null value falls back to `placeholder`;
    a required field with no placeholder makes the record invalid.
    """
    key: str
    source: FieldSource
    placeholder: Any = None
    required: bool = False
    formatter: Optional[Callable[[Any], CellValue]] = None


def resolve_path(record: Mapping[str, Any], path: str) -> Any:
    """Follow a dotted path through nested mappings; missing links give _MISSING."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return _MISSING
        value = value[part]
    return value


def get_path(record: Mapping[str, Any], path: str, default: Any = None) -> Any:
    value = resolve_path(record, path)
    return default if value is _MISSING else value


def to_number(value: Any) -> float:
    """Numeric value of a cell, 0 for anything non-numeric or non-finite."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal) and not value.is_finite():
        return 0
    if isinstance(value, (float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
    else:
        return 0
    # "nan" and "inf" parse as floats but are not amounts
    return number if math.isfinite(number) else 0


def format_money(value: Any) -> float:
    """Currency amount rounded to two decimals."""
    return round(float(to_number(value)), 2)


def format_quantity(value: Any) -> Union[int, float]:
    number = to_number(value)
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def format_date(value: Any) -> str:
    """ISO date string; datetimes lose their time part."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return ""
    text = str(value)
    # Timestamps from the data store come as "2024-01-01T10:00:00+00:00"
    if len(text) > 10 and text[4] == "-" and text[10] in ("T", " "):
        return text[:10]
    return text


def format_text(value: Any) -> str:
    return "" if value is None else str(value)


def _coerce_primitive(value: Any) -> CellValue:
    if value is None or isinstance(value, (str, int, float)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, datetime)):
        return format_date(value)
    return str(value)


def normalize_record(
    record: Optional[Mapping[str, Any]],
    fields: Sequence[FieldSpec],
    record_index: Optional[int] = None,
) -> Row:
    """
    Build a Row from one record using the given field mapping.

    Absent foreign data (a sale whose product was deleted) resolves to the
    field's placeholder. Only a null record, or a required field that has
    neither a value nor a placeholder, raises InvalidRecordError.
    """
    if record is None:
        raise InvalidRecordError("record is empty", record_index=record_index)
    if not isinstance(record, Mapping):
        raise InvalidRecordError(
            f"expected a mapping, got {type(record).__name__}",
            record_index=record_index,
        )

    values = {}
    for spec in fields:
        if callable(spec.source):
            value = spec.source(record)
        else:
            value = resolve_path(record, spec.source)

        if isinstance(value, str) and not value.strip():
            value = None

        if value is _MISSING or value is None:
            if spec.placeholder is None:
                if spec.required:
                    raise InvalidRecordError(
                        f"required field '{spec.key}' is missing",
                        field=spec.key,
                        record_index=record_index,
                    )
                values[spec.key] = None
                continue
            value = spec.placeholder

        if spec.formatter is not None:
            value = spec.formatter(value)
        values[spec.key] = _coerce_primitive(value)

    return Row.from_mapping(values, RowType.BODY)


def normalize_records(
    records: Sequence[Optional[Mapping[str, Any]]],
    fields: Sequence[FieldSpec],
) -> List[Row]:
    """Normalize a whole dataset; the first invalid record aborts the batch."""
    rows = [
        normalize_record(record, fields, record_index=idx)
        for idx, record in enumerate(records)
    ]
    logger.debug("Normalized %d records into %d-column rows", len(rows), len(fields))
    return rows
