"""Lay out report sections onto pages of draw primitives."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .config import LayoutConfig
from .layout_engine import ColumnLayout, PageLayout, PageOverflowManager, plan_columns
from .models import ColumnSpec, ReportRequest, ReportSection, Row, RowType, format_cell_value
from .row_renderer import (
    DrawRect, DrawText, Primitive, cell_texts, render_header_row, render_row,
    text_baseline, truncate_text,
)
from .styles import get_bold_font
from .totals import GRAND_TOTAL_LABEL, build_total_row, grand_total, section_total

logger = logging.getLogger(__name__)

CONTINUED_SUFFIX = " (continued)"


@dataclass(frozen=True)
class RenderedCell:
    """A drawn table cell, as captured for comparison and inspection."""
    page_index: int
    section_index: int
    row_index: int
    col_index: int
    column_key: str
    text: str
    bbox: Tuple[float, float, float, float]  # x0, top, x1, bottom
    row_type: RowType


@dataclass
class SectionResult:
    """What happened to one section during layout."""
    name: str
    columns: Tuple[ColumnSpec, ...]
    dropped_columns: Tuple[ColumnSpec, ...] = ()
    rendered_rows: int = 0  # Data rows drawn, excluding the Total row
    omitted_rows: int = 0   # Rows past the per-section cap
    total: Optional[Union[int, float]] = None
    has_total_row: bool = False
    first_page: int = 0
    last_page: int = 0
    skipped_empty: bool = False

    @property
    def truncated_columns(self) -> bool:
        return bool(self.dropped_columns)


@dataclass
class ComposedReport:
    """Pages of primitives plus per-section bookkeeping for one request."""
    pages: List[List[Primitive]]
    sections: List[SectionResult]
    cells: List[RenderedCell] = field(default_factory=list)
    grand_total: Optional[Union[int, float]] = None
    page_breaks: int = 0

    @property
    def page_count(self) -> int:
        return len(self.pages)


class SectionComposer:
    """
    Single-use layout pass over a ReportRequest.

    Holds the page cursor and page buffers for one pass only; build a new
    composer for every export.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = (config or LayoutConfig()).validate()
        self.layout = PageLayout.from_config(self.config)
        self.overflow = PageOverflowManager(self.layout)
        self.pages: List[List[Primitive]] = [[]]
        self.cells: List[RenderedCell] = []

    def _page(self, page_index: int) -> List[Primitive]:
        while len(self.pages) <= page_index:
            self.pages.append([])
        return self.pages[page_index]

    def _draw(self, primitives: List[Primitive]):
        self._page(self.overflow.page_index).extend(primitives)

    def compose(self, request: ReportRequest) -> ComposedReport:
        """Lay out title, date banner and every section of the request."""
        self.overflow.reset()
        self.pages = [[]]
        self.cells = []

        self._draw_document_title(request)

        results: List[SectionResult] = []
        for section_idx, section in enumerate(request.sections):
            results.append(self._compose_section(section_idx, section))

            if section_idx < len(request.sections) - 1:
                if self.overflow.can_fit(self.config.section_spacing):
                    self.overflow.advance(self.config.section_spacing)

        grand = grand_total(request.sections)
        totaled = sum(1 for r in results if r.total is not None)
        if grand is not None and self.config.show_grand_total and totaled > 1:
            self._draw_grand_total(grand)

        self.overflow.finish()
        # The last break may leave a trailing page buffer that only the
        # cursor knows about.
        self._page(self.overflow.page_index)

        return ComposedReport(
            pages=self.pages,
            sections=results,
            cells=self.cells,
            grand_total=grand,
            page_breaks=self.overflow.page_breaks,
        )

    def _draw_document_title(self, request: ReportRequest):
        """Centered title on page 1, followed by the date range banner."""
        config = self.config
        style = config.report_style
        center_x = self.layout.page_width / 2
        width = self.layout.content_width

        top = self.overflow.advance(config.title_height).y_position
        bold_font = get_bold_font(style.font_family)
        self._draw([DrawText(
            x=center_x,
            y=text_baseline(top, config.title_height, config.title_font_size),
            text=truncate_text(request.title, width, bold_font, config.title_font_size),
            font_name=bold_font,
            font_size=config.title_font_size,
            color=style.title_color,
            align="center",
        )])

        if request.date_range_label:
            top = self.overflow.advance(config.date_banner_height).y_position
            self._draw([DrawText(
                x=center_x,
                y=text_baseline(top, config.date_banner_height, config.date_banner_font_size),
                text=truncate_text(
                    request.date_range_label, width, style.font_family,
                    config.date_banner_font_size,
                ),
                font_name=style.font_family,
                font_size=config.date_banner_font_size,
                color=style.title_color,
                align="center",
            )])

    def _draw_section_title(self, text: str):
        config = self.config
        style = config.report_style
        bold_font = get_bold_font(style.font_family)
        top = self.overflow.advance(config.section_title_height).y_position
        self._draw([DrawText(
            x=self.layout.content_start_x,
            y=text_baseline(top, config.section_title_height, config.section_title_font_size),
            text=truncate_text(
                text, self.layout.content_width, bold_font, config.section_title_font_size
            ),
            font_name=bold_font,
            font_size=config.section_title_font_size,
            color=style.section_title_color,
        )])

    def _compose_section(self, section_idx: int, section: ReportSection) -> SectionResult:
        config = self.config
        plan = plan_columns(
            section.columns,
            self.layout.page_width,
            config.margin,
            config.max_columns,
        )
        result = SectionResult(
            name=section.name,
            columns=plan.columns,
            dropped_columns=plan.dropped_columns,
        )

        if plan.truncated_columns:
            logger.warning(
                "Section %r: %d column(s) beyond the %d-column limit are not rendered",
                section.name, len(plan.dropped_columns), config.max_columns,
            )

        if section.is_empty or plan.column_count == 0:
            # Nothing to tabulate: the title alone stands for the section
            self.overflow.ensure_room(config.section_title_height)
            result.first_page = result.last_page = self.overflow.page_index
            self._draw_section_title(section.name)
            result.skipped_empty = True
            logger.debug("Section %r has no rows; title only", section.name)
            return result

        capped = list(section.rows[:config.max_rows_per_section])
        result.rendered_rows = len(capped)
        result.omitted_rows = len(section.rows) - len(capped)
        if result.omitted_rows:
            logger.warning(
                "Section %r: %d row(s) past the %d-row limit are not rendered",
                section.name, result.omitted_rows, config.max_rows_per_section,
            )

        rows: List[Row] = capped
        result.total = section_total(section)
        if result.total is not None:
            if section.totals_column_key not in plan.keys:
                logger.warning(
                    "Section %r: totals column %r is not among the rendered columns",
                    section.name, section.totals_column_key,
                )
            rows = capped + [build_total_row(section, result.total)]
            result.has_total_row = True

        self.overflow.ensure_room(
            config.section_title_height + config.header_row_height + config.row_height
        )
        result.first_page = self.overflow.page_index
        self._draw_section_title(section.name)
        self.overflow.begin_table()

        for row_idx, row in enumerate(rows):
            broke = self.overflow.break_if_needed(config.row_height)
            if broke and config.show_continued_titles:
                self._draw_section_title(section.name + CONTINUED_SUFFIX)
            if self.overflow.header_pending:
                self._draw_header(plan)
            self._draw_row(section_idx, row_idx, row, plan)

        result.last_page = self.overflow.page_index
        return result

    def _draw_header(self, plan: ColumnLayout):
        position = self.overflow.place_header(self.config.header_row_height)
        self._draw(render_header_row(plan, position, self.config))

    def _draw_row(self, section_idx: int, row_idx: int, row: Row, plan: ColumnLayout):
        config = self.config
        position = self.overflow.place_row(config.row_height)
        self._page(position.page_index).extend(
            render_row(row, plan, position, row_idx, config)
        )

        top = position.y_position
        bottom = top + config.row_height
        for col_idx, (key, text) in enumerate(zip(plan.keys, cell_texts(row, plan, config))):
            x = plan.column_x(col_idx)
            self.cells.append(RenderedCell(
                page_index=position.page_index,
                section_index=section_idx,
                row_index=row_idx,
                col_index=col_idx,
                column_key=key,
                text=text,
                bbox=(x, top, x + plan.column_width, bottom),
                row_type=row.row_type,
            ))

    def _draw_grand_total(self, grand: Union[int, float]):
        """Full-width band after the last section."""
        config = self.config
        style = config.report_style
        height = config.row_height
        bold_font = get_bold_font(style.font_family)

        self.overflow.ensure_room(config.section_spacing + height)
        self.overflow.advance(config.section_spacing)
        top = self.overflow.advance(height).y_position
        x = self.layout.content_start_x
        width = self.layout.content_width
        baseline = text_baseline(top, height, config.header_font_size)

        self._draw([
            DrawRect(
                x=x,
                y=top,
                width=width,
                height=height,
                fill_color=style.total_row_color,
                stroke_color=style.grid_color,
                line_width=style.grid_line_width,
            ),
            DrawText(
                x=x + config.cell_inset,
                y=baseline,
                text=GRAND_TOTAL_LABEL,
                font_name=bold_font,
                font_size=config.header_font_size,
                color=style.total_text_color,
            ),
            DrawText(
                x=x + width - config.cell_inset,
                y=baseline,
                text=format_cell_value(grand),
                font_name=bold_font,
                font_size=config.header_font_size,
                color=style.total_text_color,
                align="right",
            ),
        ])


def compose_sections(
    request: ReportRequest,
    config: Optional[LayoutConfig] = None,
) -> ComposedReport:
    """Run one layout pass with a fresh composer."""
    return SectionComposer(config).compose(request)
