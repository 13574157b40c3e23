"""
Tests for the per-dataset section templates.

Covers:
- Field mapping and placeholders for joined records
- Computed values (price x quantity)
- Totals columns per dataset
- Date range banner and download filename
- End-to-end rendering of template-built sections
"""

from datetime import date, datetime

import pytest

from pos_reports.errors import InvalidRecordError
from pos_reports.pdf_renderer import compose_report
from pos_reports.report_templates import (
    ReportKind, build_report_request, build_section, format_date_range,
    build_category_stock_request, build_category_stock_sections, get_template, report_filename,
)
from pos_reports.totals import build_total_row, section_total


def _product(name="Lager", price=2.5, category="Beer"):
    return {
        "name": name,
        "price": price,
        "categories": {"name": category} if category else None,
    }


class TestTemplates:
    """Tests for get_template()."""

    @pytest.mark.parametrize("kind", list(ReportKind))
    def test_every_kind_fits_the_column_cap(self, kind):
        template = get_template(kind)
        assert 1 <= len(template.columns) <= 5
        assert {c.key for c in template.columns} <= {f.key for f in template.fields}
        if template.totals_column_key:
            assert template.totals_column_key in {c.key for c in template.columns}

    def test_lookup_by_value(self):
        assert get_template("damages").kind == ReportKind.DAMAGES

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            get_template("payroll")

    @pytest.mark.parametrize("kind, totals", [
        (ReportKind.SALES, "total_price"),
        (ReportKind.DAMAGES, "total_price"),
        (ReportKind.BOTTLES, "value"),
        (ReportKind.OTHER_INCOME, "amount"),
        (ReportKind.OTHER_EXPENSE, "amount"),
        (ReportKind.RETURNS, "value"),
        (ReportKind.CURRENT_STOCK, "stock_value"),
        (ReportKind.PURCHASES, None),
    ])
    def test_totals_columns(self, kind, totals):
        assert get_template(kind).totals_column_key == totals


class TestBuildSection:
    """Tests for build_section()."""

    def test_sales(self):
        records = [
            {"sale_date": "2024-01-01T10:00:00", "quantity": 2, "revenue": 100,
             "products": _product()},
            {"sale_date": "2024-01-02", "quantity": 1, "revenue": 50, "products": None},
        ]
        section = build_section(ReportKind.SALES, records)
        assert section.name == "Sales"
        assert section.rows[0].as_dict() == {
            "date": "2024-01-01",
            "product_name": "Lager",
            "category_name": "Beer",
            "quantity": 2,
            "total_price": 100.0,
        }
        assert section.rows[1]["product_name"] == "N/A"
        assert section.rows[1]["category_name"] == "N/A"
        assert section_total(section) == 150.0

    def test_damages_value_from_product_price(self):
        records = [
            {"damage_date": "2024-01-03", "quantity": 4, "reason": "Broken",
             "products": _product(price=2.5)},
            {"damage_date": "2024-01-04", "quantity": 2, "reason": "",
             "products": None},
        ]
        section = build_section("damages", records)
        assert section.rows[0]["total_price"] == 10.0
        assert section.rows[1]["total_price"] == 0.0
        assert section.rows[1]["reason"] == "N/A"

    def test_returns_use_unknown_product(self):
        section = build_section(
            ReportKind.RETURNS,
            [{"return_date": "2024-01-05", "quantity": 1, "products": None}],
        )
        assert section.rows[0]["product_name"] == "Unknown Product"
        assert section.rows[0]["value"] == 0.0

    def test_returns_valued_and_totaled(self):
        records = [
            {"return_date": "2024-01-05", "quantity": 4, "reason": "Expired",
             "products": _product(price=2.5)},
            {"return_date": "2024-01-06", "quantity": 2, "products": _product("Stout", price=3)},
            {"return_date": "2024-01-07", "quantity": 1, "products": None},
        ]
        section = build_section(ReportKind.RETURNS, records)
        assert [c.key for c in section.columns] == [
            "date", "product_name", "quantity", "reason", "value",
        ]
        assert [row["value"] for row in section.rows] == [10.0, 6.0, 0.0]
        assert section.rows[1]["reason"] == ""
        assert section_total(section) == 16.0
        assert build_total_row(section, 16.0)["date"] == "Total:"

    def test_bottles(self):
        section = build_section(
            ReportKind.BOTTLES,
            [{"date": "2024-01-01", "type": "Beer crate", "unit": "crate",
              "quantity": 3, "price": 1.5}],
        )
        assert section.rows[0]["value"] == 4.5
        assert section_total(section) == 4.5

    def test_other_expense(self):
        section = build_section(
            ReportKind.OTHER_EXPENSE,
            [{"expense_date": "2024-01-09", "label": "Rent", "amount": "1,200.00"}],
        )
        assert section.name == "Other Expenses"
        assert section.rows[0].as_dict() == {
            "date": "2024-01-09", "label": "Rent", "amount": 1200.0,
        }

    def test_current_stock(self):
        section = build_section(
            ReportKind.CURRENT_STOCK,
            [{"name": "Cola", "price": 1.2, "current_stock": 10,
              "categories": {"name": "Soft Drinks"}}],
        )
        row = section.rows[0]
        assert row["category_name"] == "Soft Drinks"
        assert row["stock_value"] == 12.0
        assert section.label_column_key == "category_name"

    def test_custom_name(self):
        assert build_section(ReportKind.SALES, [], name="January Sales").name == "January Sales"

    def test_missing_quantity_is_invalid(self):
        with pytest.raises(InvalidRecordError) as exc_info:
            build_section(ReportKind.SALES, [{"sale_date": "2024-01-01", "revenue": 5}])
        assert exc_info.value.field == "quantity"

    def test_empty_records(self):
        section = build_section(ReportKind.DAMAGES, [])
        assert section.is_empty
        assert section_total(section) is None


class TestRequestHelpers:
    """Tests for build_report_request(), format_date_range() and report_filename()."""

    def test_date_range(self):
        assert format_date_range(date(2024, 1, 1), "2024-01-31") == \
            "Date Range: 2024-01-01 - 2024-01-31"

    def test_open_date_ranges(self):
        assert format_date_range("2024-01-01", None) == "Date Range: from 2024-01-01"
        assert format_date_range(None, "2024-01-31") == "Date Range: until 2024-01-31"
        assert format_date_range(None, None) == ""

    def test_build_report_request(self):
        sales = build_section(ReportKind.SALES, [])
        request = build_report_request(
            "Sales Report", [sales], date(2024, 1, 1), date(2024, 1, 31),
            generated_at=datetime(2024, 2, 1),
        )
        assert request.title == "Sales Report"
        assert request.date_range_label == "Date Range: 2024-01-01 - 2024-01-31"
        assert request.sections == (sales,)

    @pytest.mark.parametrize("subject, expected", [
        ("sales", "sales-2024-01-31.pdf"),
        ("Other Income", "other_income-2024-01-31.pdf"),
        ("", "report-2024-01-31.pdf"),
    ])
    def test_report_filename(self, subject, expected):
        assert report_filename(subject, date(2024, 1, 31)) == expected

    def test_report_filename_from_datetime(self):
        assert report_filename("bottles", datetime(2024, 3, 5, 23, 59)) == "bottles-2024-03-05.pdf"


class TestEndToEnd:
    """Template-built sections through the whole compositor."""

    def test_sales_and_damages_report(self, config):
        sales = build_section(ReportKind.SALES, [
            {"sale_date": "2024-01-01", "quantity": 2, "revenue": 100, "products": _product()},
            {"sale_date": "2024-01-02", "quantity": 1, "revenue": 50, "products": _product("Stout")},
        ])
        damages = build_section(ReportKind.DAMAGES, [])
        request = build_report_request("Business Report", [sales, damages], "2024-01-01", "2024-01-31")

        document = compose_report(request, config)
        assert document.page_count == 1
        assert document.sections[0].total == 150.0
        assert document.sections[1].skipped_empty
        assert "Total:" in document.cell_texts()
        assert "150.00" in document.cell_texts()


class TestCategoryStock:
    """Tests for the per-category stock report helpers."""

    def _stock(self, name, category, price=1.0, stock=1):
        record = {"name": name, "price": price, "current_stock": stock}
        if category is not None:
            record["categories"] = {"name": category}
        return record

    def test_sections_grouped_in_first_appearance_order(self):
        records = [
            self._stock("Lager", "Beer", 2.0, 10),
            self._stock("Cola", "Soft Drinks", 1.0, 5),
            self._stock("Stout", "Beer", 3.0, 2),
            self._stock("Loose Item", None, 4.0, 1),
        ]
        sections = build_category_stock_sections(records)
        assert [s.name for s in sections] == ["Beer", "Soft Drinks", "N/A"]
        assert [r["product_name"] for r in sections[0].rows] == ["Lager", "Stout"]
        assert section_total(sections[0]) == 26.0
        assert sections[2].rows[0]["category_name"] == "N/A"

    def test_flat_category_name(self):
        records = [{"name": "Gin", "price": 20, "current_stock": 1, "category_name": "Spirits"}]
        sections = build_category_stock_sections(records)
        assert sections[0].name == "Spirits"
        assert sections[0].rows[0]["category_name"] == "Spirits"

    def test_no_records(self):
        assert build_category_stock_sections([]) == []

    def test_category_request(self, config, generated_at):
        request = build_category_stock_request(
            "Beer",
            [self._stock("Lager", "Beer", 2.0, 10), self._stock("Stout", "Beer", 3.0, 2)],
            generated_at=generated_at,
        )
        assert request.title == "Category Stock Report: Beer"
        assert [s.name for s in request.sections] == ["Beer"]

        document = compose_report(request, config)
        assert document.sections[0].total == 26.0
        assert "Total:" in document.cell_texts()
