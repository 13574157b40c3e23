"""
Shared test fixtures for the report compositor tests.

Provides reusable fixtures for:
- Layout configuration
- Sample sections (sales with a totals column, empty damages)
- Section factories for large or wide tables
"""

from datetime import datetime

import pytest

from pos_reports.config import LayoutConfig
from pos_reports.models import ColumnSpec, ReportRequest, ReportSection, Row


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SALES_COLUMNS = [
    ColumnSpec("date", "Date"),
    ColumnSpec("product", "Product"),
    ColumnSpec("qty", "Qty"),
    ColumnSpec("revenue", "Revenue"),
]


def make_rows(count, start=1):
    """Numbered sales rows: revenue equals the row number."""
    return [
        Row.from_mapping({
            "date": f"2024-01-{(i % 28) + 1:02d}",
            "product": f"Product {i}",
            "qty": 1,
            "revenue": i,
        })
        for i in range(start, start + count)
    ]


def make_section(name="Sales", rows=None, columns=None, totals_column_key="revenue"):
    return ReportSection(
        name=name,
        columns=columns if columns is not None else SALES_COLUMNS,
        rows=rows if rows is not None else [],
        totals_column_key=totals_column_key,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config():
    """Default layout configuration."""
    return LayoutConfig()


@pytest.fixture
def sales_section():
    """Two-row sales section totalling 150."""
    return ReportSection(
        name="Sales",
        columns=SALES_COLUMNS,
        rows=[
            Row.from_mapping({"date": "2024-01-01", "product": "A", "qty": 2, "revenue": 100}),
            Row.from_mapping({"date": "2024-01-02", "product": "B", "qty": 1, "revenue": 50}),
        ],
        totals_column_key="revenue",
    )


@pytest.fixture
def empty_damages_section():
    return ReportSection(
        name="Damages",
        columns=[
            ColumnSpec("date", "Date"),
            ColumnSpec("product", "Product"),
            ColumnSpec("loss", "Loss"),
        ],
        rows=[],
        totals_column_key="loss",
    )


@pytest.fixture
def generated_at():
    return datetime(2024, 2, 1, 9, 30)


@pytest.fixture
def sales_request(sales_section, generated_at):
    return ReportRequest(
        title="Sales Report",
        date_range_label="Date Range: 2024-01-01 - 2024-01-31",
        sections=[sales_section],
        generated_at=generated_at,
    )
