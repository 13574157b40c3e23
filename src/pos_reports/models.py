"""Report request, section and row types shared by the compositor."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

CellValue = Union[str, int, float, None]


class RowType(Enum):
    """Row kinds drawn inside a section table."""
    HEADER = "HEADER"
    BODY = "BODY"
    SUBTOTAL_TOTAL = "SUBTOTAL_TOTAL"


@dataclass(frozen=True)
class ColumnSpec:
    """A table column: the row key it reads and the header label it shows."""
    key: str
    label: str


@dataclass(frozen=True)
class Row:
    """
    Ordered, immutable mapping from column key to display value.

    Values are primitives already formatted by the row normalizer
    (strings, ints, or floats rounded to two decimals).
    """
    items: Tuple[Tuple[str, CellValue], ...]
    row_type: RowType = RowType.BODY

    @classmethod
    def from_mapping(
        cls,
        values: Mapping[str, CellValue],
        row_type: RowType = RowType.BODY,
    ) -> "Row":
        return cls(items=tuple(values.items()), row_type=row_type)

    @property
    def is_total(self) -> bool:
        return self.row_type == RowType.SUBTOTAL_TOTAL

    def keys(self) -> List[str]:
        return [key for key, _ in self.items]

    def get(self, key: str, default: CellValue = None) -> CellValue:
        for item_key, value in self.items:
            if item_key == key:
                return value
        return default

    def as_dict(self) -> Dict[str, CellValue]:
        return dict(self.items)

    def __getitem__(self, key: str) -> CellValue:
        for item_key, value in self.items:
            if item_key == key:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return any(item_key == key for item_key, _ in self.items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class ReportSection:
    """One homogeneous table within a report."""
    name: str
    columns: Tuple[ColumnSpec, ...]
    rows: Tuple[Row, ...]
    totals_column_key: Optional[str] = None
    # Column that carries the "Total:" label; defaults to the first
    # rendered column other than the totals column.
    label_column_key: Optional[str] = None

    def __post_init__(self):
        # Accept lists from callers but keep the section immutable.
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "rows", tuple(self.rows))

    @property
    def column_keys(self) -> List[str]:
        return [column.key for column in self.columns]

    @property
    def is_empty(self) -> bool:
        return not self.rows


@dataclass(frozen=True)
class ReportRequest:
    """Everything needed to lay out one exported document."""
    title: str
    date_range_label: str = ""
    sections: Tuple[ReportSection, ...] = field(default_factory=tuple)
    # Shown in the page footer when set. Left to the caller so that the
    # same request always produces the same document.
    generated_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "sections", tuple(self.sections))


def format_cell_value(value: Any) -> str:
    """String form of a row value as drawn in a cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)
