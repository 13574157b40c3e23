"""PDF rendering using ReportLab."""

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from reportlab.pdfgen import canvas

from .config import LayoutConfig
from .errors import RenderPrimitiveFailure
from .layout_engine import PageLayout
from .models import ReportRequest
from .row_renderer import DrawRect, DrawText, Primitive
from .section_composer import ComposedReport, RenderedCell, SectionResult, SectionComposer

logger = logging.getLogger(__name__)


@dataclass
class RenderedDocument:
    """Finished report handed back to the export flow."""
    pdf_bytes: bytes
    page_count: int
    pages: List[List[Primitive]]
    sections: List[SectionResult]
    cells: List[RenderedCell] = field(default_factory=list)
    grand_total: Optional[Union[int, float]] = None
    title: str = ""

    @property
    def size(self) -> int:
        return len(self.pdf_bytes)

    def cell_texts(self, page_index: Optional[int] = None) -> List[str]:
        """Text of every table cell, optionally restricted to one page."""
        return [
            cell.text for cell in self.cells
            if page_index is None or cell.page_index == page_index
        ]

    def save(self, path: Path) -> Path:
        """Write the PDF bytes to disk for a download collaborator."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.pdf_bytes)
        return path


class PDFRenderer:
    """Paints composed pages onto a ReportLab canvas held in memory."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = (config or LayoutConfig()).validate()
        self.layout = PageLayout.from_config(self.config)

    def render_document(self, request: ReportRequest) -> RenderedDocument:
        """
        Lay out and emit a complete document.

        Each call runs its own layout pass, so concurrent exports never
        share a cursor or a canvas.

        Raises:
            RenderPrimitiveFailure: ReportLab failed to draw or serialize.
        """
        composed = SectionComposer(self.config).compose(request)
        pdf_bytes = self.emit(composed, request)

        logger.info(
            "Rendered %r: %d page(s), %d section(s), %d bytes",
            request.title, composed.page_count, len(composed.sections), len(pdf_bytes),
        )

        return RenderedDocument(
            pdf_bytes=pdf_bytes,
            page_count=composed.page_count,
            pages=composed.pages,
            sections=composed.sections,
            cells=composed.cells,
            grand_total=composed.grand_total,
            title=request.title,
        )

    def emit(self, composed: ComposedReport, request: ReportRequest) -> bytes:
        """Paint every page and return the serialized PDF."""
        buffer = io.BytesIO()
        try:
            c = canvas.Canvas(
                buffer,
                pagesize=(self.layout.page_width, self.layout.page_height),
                invariant=1 if self.config.invariant else 0,
            )
            c.setTitle(request.title)

            total_pages = composed.page_count
            for page_index, primitives in enumerate(composed.pages):
                for primitive in primitives:
                    self._paint(c, primitive)
                self._draw_footer(c, page_index, total_pages, request)
                c.showPage()

            c.save()
        except Exception as exc:
            logger.exception("PDF output failed for %r", request.title)
            raise RenderPrimitiveFailure(f"Failed to render PDF: {exc}") from exc

        return buffer.getvalue()

    def _to_pdf_y(self, y: float) -> float:
        """Convert a top-origin y to ReportLab's bottom-origin y."""
        return self.layout.page_height - y

    def _paint(self, c: canvas.Canvas, primitive: Primitive):
        if isinstance(primitive, DrawRect):
            self._paint_rect(c, primitive)
        elif isinstance(primitive, DrawText):
            self._paint_text(c, primitive)
        else:
            raise TypeError(f"Unknown primitive: {type(primitive).__name__}")

    def _paint_rect(self, c: canvas.Canvas, rect: DrawRect):
        fill = rect.fill_color is not None
        stroke = rect.stroke_color is not None
        if not fill and not stroke:
            return
        if fill:
            c.setFillColor(rect.fill_color)
        if stroke:
            c.setStrokeColor(rect.stroke_color)
            c.setLineWidth(rect.line_width)
        c.rect(
            rect.x,
            self._to_pdf_y(rect.y + rect.height),
            rect.width,
            rect.height,
            fill=fill,
            stroke=stroke,
        )

    def _paint_text(self, c: canvas.Canvas, text: DrawText):
        c.setFont(text.font_name, text.font_size)
        c.setFillColor(text.color)
        y = self._to_pdf_y(text.y)
        if text.align == "center":
            c.drawCentredString(text.x, y, text.text)
        elif text.align == "right":
            c.drawRightString(text.x, y, text.text)
        else:
            c.drawString(text.x, y, text.text)

    def _draw_footer(
        self,
        c: canvas.Canvas,
        page_index: int,
        total_pages: int,
        request: ReportRequest,
    ):
        """Page number and generation stamp inside the bottom margin."""
        config = self.config
        style = config.report_style
        parts = []
        if config.show_page_numbers:
            parts.append(f"Page {page_index + 1} of {total_pages}")
        if request.generated_at is not None:
            parts.append(f"Generated on {request.generated_at:%Y-%m-%d %H:%M}")
        if not parts:
            return

        c.setFont(style.font_family, config.footer_font_size)
        c.setFillColor(style.footer_text_color)
        y = self.layout.margin_bottom / 2
        c.drawCentredString(self.layout.page_width / 2, y, "  |  ".join(parts))


def compose_report(
    request: ReportRequest,
    config: Optional[LayoutConfig] = None,
) -> RenderedDocument:
    """Turn a report request into a rendered PDF document."""
    return PDFRenderer(config).render_document(request)
