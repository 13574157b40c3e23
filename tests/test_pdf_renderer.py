"""
Tests for the PDF document emitter.

Covers:
- compose_report() produces a valid PDF in memory
- Deterministic output for identical requests
- Render failures surface as RenderPrimitiveFailure
- RenderedDocument helpers
"""

from unittest.mock import patch

import pytest

from conftest import make_rows, make_section
from pos_reports.config import LayoutConfig
from pos_reports.errors import RenderPrimitiveFailure, ReportError
from pos_reports.models import ReportRequest
from pos_reports.pdf_renderer import PDFRenderer, compose_report


class TestComposeReport:
    """Tests for compose_report()."""

    def test_produces_pdf_bytes(self, sales_request, config):
        document = compose_report(sales_request, config)
        assert document.pdf_bytes.startswith(b"%PDF-")
        assert document.pdf_bytes.rstrip().endswith(b"%%EOF")
        assert document.size == len(document.pdf_bytes)
        assert document.page_count == 1
        assert document.title == "Sales Report"
        assert document.grand_total == 150

    def test_default_config(self, sales_request):
        assert compose_report(sales_request).page_count == 1

    def test_page_count_matches_pdf(self, config):
        request = ReportRequest(title="Long", sections=[make_section(rows=make_rows(100))])
        document = compose_report(request, config)
        assert document.page_count > 1
        assert b"/Count %d" % document.page_count in document.pdf_bytes
        assert len(document.pages) == document.page_count

    def test_empty_request_renders_title_page(self, config):
        document = compose_report(ReportRequest(title="Nothing"), config)
        assert document.page_count == 1
        assert document.sections == []
        assert document.cells == []

    def test_cell_texts_by_page(self, config):
        request = ReportRequest(title="Long", sections=[make_section(rows=make_rows(100))])
        document = compose_report(request, config)
        all_texts = document.cell_texts()
        per_page = sum((document.cell_texts(i) for i in range(document.page_count)), [])
        assert all_texts == per_page
        assert "Product 1" in document.cell_texts(0)


class TestDeterminism:
    """Identical requests give identical documents."""

    def test_identical_bytes(self, sales_request, config):
        first = compose_report(sales_request, config)
        second = compose_report(sales_request, config)
        assert first.page_count == second.page_count
        assert first.cell_texts() == second.cell_texts()
        assert first.pdf_bytes == second.pdf_bytes

    def test_footer_timestamp_comes_from_request(self, sales_section, config):
        from datetime import datetime
        a = ReportRequest(title="T", sections=[sales_section], generated_at=datetime(2024, 1, 1))
        b = ReportRequest(title="T", sections=[sales_section], generated_at=datetime(2024, 1, 2))
        assert compose_report(a, config).pdf_bytes != compose_report(b, config).pdf_bytes


class TestRenderFailures:
    """ReportLab failures abort the export."""

    def test_canvas_failure_wrapped(self, sales_request, config):
        with patch("pos_reports.pdf_renderer.canvas.Canvas", side_effect=MemoryError("no buffer")):
            with pytest.raises(RenderPrimitiveFailure) as exc_info:
                compose_report(sales_request, config)
        assert isinstance(exc_info.value, ReportError)
        assert isinstance(exc_info.value.__cause__, MemoryError)

    def test_save_failure_wrapped(self, sales_request, config):
        with patch("reportlab.pdfgen.canvas.Canvas.save", side_effect=OSError("disk")):
            with pytest.raises(RenderPrimitiveFailure, match="disk"):
                compose_report(sales_request, config)

    def test_failure_is_logged(self, sales_request, config, caplog):
        with patch("pos_reports.pdf_renderer.canvas.Canvas", side_effect=RuntimeError("boom")):
            with pytest.raises(RenderPrimitiveFailure):
                compose_report(sales_request, config)
        assert "PDF output failed" in caplog.text


class TestRenderedDocument:
    """Tests for RenderedDocument helpers."""

    def test_save_writes_bytes(self, sales_request, config, tmp_path):
        document = compose_report(sales_request, config)
        path = document.save(tmp_path / "exports" / "sales-2024-01-31.pdf")
        assert path.read_bytes() == document.pdf_bytes

    def test_renderer_rejects_invalid_config(self):
        with pytest.raises(ValueError):
            PDFRenderer(LayoutConfig(max_columns=0))

    @pytest.mark.parametrize("style", ["default", "slate", "mono"])
    def test_styles_render(self, sales_request, style):
        document = compose_report(sales_request, LayoutConfig(style=style))
        assert document.pdf_bytes.startswith(b"%PDF-")
