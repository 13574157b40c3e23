"""Section templates for each exportable dataset of the back office."""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

from .models import ColumnSpec, ReportRequest, ReportSection
from .row_normalizer import (
    FieldSpec, format_date, format_money, format_quantity, format_text,
    get_path, normalize_records, to_number,
)


class ReportKind(Enum):
    """Datasets the export screen can turn into a report section."""
    SALES = "sales"
    PURCHASES = "purchases"
    DAMAGES = "damages"
    RETURNS = "returns"
    BOTTLES = "bottles"
    OTHER_INCOME = "other_income"
    OTHER_EXPENSE = "other_expense"
    CURRENT_STOCK = "current_stock"


@dataclass(frozen=True)
class SectionTemplate:
    """Columns, field mapping and subtotal settings for one dataset."""
    kind: ReportKind
    title: str
    columns: List[ColumnSpec]
    fields: List[FieldSpec]
    totals_column_key: Optional[str] = None
    label_column_key: Optional[str] = None


NOT_AVAILABLE = "N/A"
UNKNOWN_PRODUCT = "Unknown Product"


def _product_price_times_quantity(record: Mapping[str, Any]) -> float:
    """Line value from the joined product's price; a deleted product counts as 0."""
    price = get_path(record, "products.price")
    return to_number(price) * to_number(record.get("quantity"))


def _price_times_quantity(record: Mapping[str, Any]) -> float:
    return to_number(record.get("price")) * to_number(record.get("quantity"))


def _product_fields(date_source: str, product_placeholder: str = NOT_AVAILABLE) -> List[FieldSpec]:
    return [
        FieldSpec("date", date_source, placeholder="", formatter=format_date),
        FieldSpec("product_name", "products.name", placeholder=product_placeholder,
                  formatter=format_text),
        FieldSpec("category_name", "products.categories.name", placeholder=NOT_AVAILABLE,
                  formatter=format_text),
        FieldSpec("quantity", "quantity", required=True, formatter=format_quantity),
    ]


def get_sales_template() -> SectionTemplate:
    """Sales joined with products and categories; revenue is stored per sale."""
    return SectionTemplate(
        kind=ReportKind.SALES,
        title="Sales",
        columns=[
            ColumnSpec("date", "Date"),
            ColumnSpec("product_name", "Product"),
            ColumnSpec("category_name", "Category"),
            ColumnSpec("quantity", "Qty"),
            ColumnSpec("total_price", "Revenue"),
        ],
        fields=_product_fields("sale_date") + [
            FieldSpec("total_price", "revenue", placeholder=0, formatter=format_money),
        ],
        totals_column_key="total_price",
        label_column_key="date",
    )


def get_purchases_template() -> SectionTemplate:
    return SectionTemplate(
        kind=ReportKind.PURCHASES,
        title="Purchases",
        columns=[
            ColumnSpec("date", "Date"),
            ColumnSpec("product_name", "Product"),
            ColumnSpec("category_name", "Category"),
            ColumnSpec("quantity", "Qty"),
            ColumnSpec("total_price", "Cost"),
        ],
        fields=_product_fields("purchase_date") + [
            FieldSpec("total_price", _product_price_times_quantity, placeholder=0,
                      formatter=format_money),
        ],
    )


def get_damages_template() -> SectionTemplate:
    """Damage reports valued at the product's current price."""
    return SectionTemplate(
        kind=ReportKind.DAMAGES,
        title="Damages",
        columns=[
            ColumnSpec("date", "Date"),
            ColumnSpec("product_name", "Product"),
            ColumnSpec("quantity", "Qty"),
            ColumnSpec("reason", "Reason"),
            ColumnSpec("total_price", "Loss"),
        ],
        fields=_product_fields("damage_date") + [
            FieldSpec("reason", "reason", placeholder=NOT_AVAILABLE, formatter=format_text),
            FieldSpec("total_price", _product_price_times_quantity, placeholder=0,
                      formatter=format_money),
        ],
        totals_column_key="total_price",
        label_column_key="date",
    )


def get_returns_template() -> SectionTemplate:
    """Returned goods, valued at the product's current price like damages."""
    return SectionTemplate(
        kind=ReportKind.RETURNS,
        title="Returns",
        columns=[
            ColumnSpec("date", "Date"),
            ColumnSpec("product_name", "Product"),
            ColumnSpec("quantity", "Qty"),
            ColumnSpec("reason", "Reason"),
            ColumnSpec("value", "Value"),
        ],
        fields=_product_fields("return_date", product_placeholder=UNKNOWN_PRODUCT) + [
            FieldSpec("reason", "reason", placeholder="", formatter=format_text),
            FieldSpec("value", _product_price_times_quantity, placeholder=0,
                      formatter=format_money),
        ],
        totals_column_key="value",
        label_column_key="date",
    )


def get_bottles_template() -> SectionTemplate:
    """Empty-bottle stock movements, valued at the deposit price per bottle."""
    return SectionTemplate(
        kind=ReportKind.BOTTLES,
        title="Bottles",
        columns=[
            ColumnSpec("date", "Date"),
            ColumnSpec("bottle_type", "Type"),
            ColumnSpec("unit", "Unit"),
            ColumnSpec("quantity", "Qty"),
            ColumnSpec("value", "Value"),
        ],
        fields=[
            FieldSpec("date", "date", placeholder="", formatter=format_date),
            FieldSpec("bottle_type", "type", placeholder=NOT_AVAILABLE, formatter=format_text),
            FieldSpec("unit", "unit", placeholder="", formatter=format_text),
            FieldSpec("quantity", "quantity", required=True, formatter=format_quantity),
            FieldSpec("value", _price_times_quantity, placeholder=0, formatter=format_money),
        ],
        totals_column_key="value",
        label_column_key="date",
    )


def _ledger_template(kind: ReportKind, title: str, date_source: str) -> SectionTemplate:
    return SectionTemplate(
        kind=kind,
        title=title,
        columns=[
            ColumnSpec("date", "Date"),
            ColumnSpec("label", "Description"),
            ColumnSpec("amount", "Amount"),
        ],
        fields=[
            FieldSpec("date", date_source, placeholder="", formatter=format_date),
            FieldSpec("label", "label", placeholder="", formatter=format_text),
            FieldSpec("amount", "amount", placeholder=0, formatter=format_money),
        ],
        totals_column_key="amount",
        label_column_key="date",
    )


def get_other_income_template() -> SectionTemplate:
    return _ledger_template(ReportKind.OTHER_INCOME, "Other Income", "income_date")


def get_other_expense_template() -> SectionTemplate:
    return _ledger_template(ReportKind.OTHER_EXPENSE, "Other Expenses", "expense_date")


def _stock_category(record: Mapping[str, Any]) -> Any:
    # Joined rows nest the category; flattened product exports carry category_name
    return get_path(record, "categories.name") or record.get("category_name")


def get_current_stock_template() -> SectionTemplate:
    """Product stock on hand; records are product rows, not movements."""
    return SectionTemplate(
        kind=ReportKind.CURRENT_STOCK,
        title="Current Stock",
        columns=[
            ColumnSpec("category_name", "Category"),
            ColumnSpec("product_name", "Product"),
            ColumnSpec("price", "Price"),
            ColumnSpec("quantity", "Stock"),
            ColumnSpec("stock_value", "Value"),
        ],
        fields=[
            FieldSpec("category_name", _stock_category, placeholder=NOT_AVAILABLE,
                      formatter=format_text),
            FieldSpec("product_name", "name", placeholder=NOT_AVAILABLE, formatter=format_text),
            FieldSpec("price", "price", placeholder=0, formatter=format_money),
            FieldSpec("quantity", "current_stock", placeholder=0, formatter=format_quantity),
            FieldSpec(
                "stock_value",
                lambda r: to_number(r.get("price")) * to_number(r.get("current_stock")),
                placeholder=0,
                formatter=format_money,
            ),
        ],
        totals_column_key="stock_value",
        label_column_key="category_name",
    )


_TEMPLATE_BUILDERS = {
    ReportKind.SALES: get_sales_template,
    ReportKind.PURCHASES: get_purchases_template,
    ReportKind.DAMAGES: get_damages_template,
    ReportKind.RETURNS: get_returns_template,
    ReportKind.BOTTLES: get_bottles_template,
    ReportKind.OTHER_INCOME: get_other_income_template,
    ReportKind.OTHER_EXPENSE: get_other_expense_template,
    ReportKind.CURRENT_STOCK: get_current_stock_template,
}


def get_template(kind: Union[ReportKind, str]) -> SectionTemplate:
    """Get the section template for a dataset kind (enum or its value)."""
    return _TEMPLATE_BUILDERS[ReportKind(kind)]()


def build_section(
    kind: Union[ReportKind, str],
    records: Sequence[Optional[Mapping[str, Any]]],
    name: Optional[str] = None,
) -> ReportSection:
    """
    Normalize already-fetched records into a report section.

    Raises InvalidRecordError if any record cannot become a row.
    """
    template = get_template(kind)
    rows = normalize_records(records, template.fields)
    return ReportSection(
        name=name or template.title,
        columns=template.columns,
        rows=rows,
        totals_column_key=template.totals_column_key,
        label_column_key=template.label_column_key,
    )


DateLike = Union[date, datetime, str, None]


def format_date_range(date_from: DateLike, date_to: DateLike) -> str:
    """Banner text for the report period; empty when no bound is given."""
    start = format_date(date_from)
    end = format_date(date_to)
    if not start and not end:
        return ""
    if start and end:
        return f"Date Range: {start} - {end}"
    if start:
        return f"Date Range: from {start}"
    return f"Date Range: until {end}"


def build_report_request(
    title: str,
    sections: Sequence[ReportSection],
    date_from: DateLike = None,
    date_to: DateLike = None,
    generated_at: Optional[datetime] = None,
) -> ReportRequest:
    return ReportRequest(
        title=title,
        date_range_label=format_date_range(date_from, date_to),
        sections=tuple(sections),
        generated_at=generated_at,
    )


def report_filename(subject: str, on_date: Optional[date] = None) -> str:
    """Download name for an exported report: `<subject>-<ISO-date>.pdf`."""
    on_date = on_date or date.today()
    if isinstance(on_date, datetime):
        on_date = on_date.date()
    slug = re.sub(r"[^A-Za-z0-9]+", "_", subject).strip("_").lower() or "report"
    return f"{slug}-{on_date.isoformat()}.pdf"


def build_category_stock_sections(
    records: Sequence[Mapping[str, Any]],
) -> List[ReportSection]:
    """
    One current-stock section per category, in order of first appearance.

    Products without a category are grouped under "N/A".
    """
    groups = {}
    for record in records:
        category = format_text(_stock_category(record) or NOT_AVAILABLE)
        groups.setdefault(category, []).append(record)
    return [
        build_section(ReportKind.CURRENT_STOCK, group, name=category)
        for category, group in groups.items()
    ]


def build_category_stock_request(
    category_name: str,
    records: Sequence[Mapping[str, Any]],
    generated_at: Optional[datetime] = None,
) -> ReportRequest:
    """Stock report for a single category, titled after it."""
    section = build_section(ReportKind.CURRENT_STOCK, records, name=category_name)
    return ReportRequest(
        title=f"Category Stock Report: {category_name}",
        sections=(section,),
        generated_at=generated_at,
    )
