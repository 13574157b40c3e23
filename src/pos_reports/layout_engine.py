"""Column planning and page overflow tracking for report tables."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from .config import LayoutConfig
from .models import ColumnSpec

logger = logging.getLogger(__name__)

DEFAULT_MAX_COLUMNS = 5

# Float slack when comparing row bottoms against the page limit
_EPSILON = 1e-6


@dataclass(frozen=True)
class PageLayout:
    """
    Page geometry in points.

    Y coordinates grow downward from the top edge of the page; the PDF
    emitter flips them into ReportLab's bottom-left origin.
    """
    page_width: float
    page_height: float
    margin_left: float
    margin_right: float
    margin_top: float
    margin_bottom: float
    orientation: str = "portrait"  # "portrait" or "landscape"

    @classmethod
    def from_config(cls, config: LayoutConfig) -> "PageLayout":
        width, height = config.page_dimensions
        return cls(
            page_width=width,
            page_height=height,
            margin_left=config.margin,
            margin_right=config.margin,
            margin_top=config.margin_top,
            margin_bottom=config.margin_bottom,
            orientation=config.orientation,
        )

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom

    @property
    def content_start_x(self) -> float:
        return self.margin_left

    @property
    def content_start_y(self) -> float:
        """Top of content area."""
        return self.margin_top

    @property
    def bottom_limit(self) -> float:
        """Lowest y a drawn row may reach."""
        return self.page_height - self.margin_bottom


@dataclass(frozen=True)
class ColumnLayout:
    """Uniform column grid for one section."""
    columns: Tuple[ColumnSpec, ...]
    column_width: float
    start_x: float
    dropped_columns: Tuple[ColumnSpec, ...] = ()

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def truncated_columns(self) -> bool:
        return bool(self.dropped_columns)

    @property
    def total_width(self) -> float:
        return self.column_width * len(self.columns)

    @property
    def keys(self) -> List[str]:
        return [column.key for column in self.columns]

    def column_x(self, col_index: int) -> float:
        return self.start_x + col_index * self.column_width


def plan_columns(
    columns: Sequence[ColumnSpec],
    page_width: float,
    margin: float,
    max_columns: int = DEFAULT_MAX_COLUMNS,
) -> ColumnLayout:
    """
    Compute a fixed-width column grid.

    width = (page_width - 2 * margin) / min(len(columns), max_columns).
    Columns past `max_columns` are never drawn; they are reported in
    `dropped_columns` so callers can tell.
    """
    if max_columns < 1:
        raise ValueError("max_columns must be at least 1")

    columns = tuple(columns)
    if not columns:
        return ColumnLayout(columns=(), column_width=0.0, start_x=margin)

    rendered = columns[:max_columns]
    dropped = columns[max_columns:]
    width = (page_width - 2 * margin) / len(rendered)

    if dropped:
        logger.debug(
            "Dropping %d column(s) past the %d-column cap: %s",
            len(dropped), max_columns, ", ".join(c.key for c in dropped),
        )

    return ColumnLayout(
        columns=rendered,
        column_width=width,
        start_x=margin,
        dropped_columns=dropped,
    )


@dataclass
class PageCursor:
    """Current page and vertical write position of a render pass."""
    page_index: int
    y_position: float

    def copy(self) -> "PageCursor":
        return PageCursor(self.page_index, self.y_position)


class PageState(Enum):
    """Overflow manager states."""
    HEADER_PENDING = "header_pending"  # Column header must be drawn next
    RENDERING_ROWS = "rendering_rows"
    PAGE_FULL = "page_full"
    DONE = "done"


class PageOverflowManager:
    """
    Tracks the write cursor for one render pass and decides page breaks.

    Before each row the caller asks `break_if_needed(row_height)`. When the
    row would cross the bottom margin the manager enters PAGE_FULL, moves to
    a fresh page, resets the cursor to the top margin and returns to
    HEADER_PENDING, so the column header is redrawn before the deferred row.
    `check_row` alone stops in PAGE_FULL, where no row may be placed until
    `start_new_page` runs. Rows never span pages.
    """

    def __init__(self, layout: PageLayout):
        self.layout = layout
        self.cursor = PageCursor(0, layout.content_start_y)
        self.state = PageState.HEADER_PENDING
        self.page_breaks = 0

    def reset(self):
        """Reset state for a new document."""
        self.cursor = PageCursor(0, self.layout.content_start_y)
        self.state = PageState.HEADER_PENDING
        self.page_breaks = 0

    @property
    def page_index(self) -> int:
        return self.cursor.page_index

    @property
    def page_count(self) -> int:
        return self.cursor.page_index + 1

    @property
    def remaining_height(self) -> float:
        return self.layout.bottom_limit - self.cursor.y_position

    @property
    def header_pending(self) -> bool:
        return self.state == PageState.HEADER_PENDING

    def can_fit(self, height: float) -> bool:
        """Check if content of given height fits on current page."""
        return self.cursor.y_position + height <= self.layout.bottom_limit + _EPSILON

    def start_new_page(self) -> int:
        """Move to a new page and return the new page index."""
        self.cursor.page_index += 1
        self.cursor.y_position = self.layout.content_start_y
        self.page_breaks += 1
        self.state = PageState.HEADER_PENDING
        logger.debug("Page break -> page %d", self.cursor.page_index)
        return self.cursor.page_index

    def check_row(self, row_height: float) -> PageState:
        """Enter PAGE_FULL if a row of `row_height` no longer fits; returns the state."""
        if self.state == PageState.DONE:
            raise RuntimeError("render pass already finished")
        if not self.can_fit(row_height):
            self.state = PageState.PAGE_FULL
        return self.state

    def ensure_room(self, height: float) -> bool:
        """Break the page unless `height` fits. Returns True if it broke."""
        if self.can_fit(height):
            return False
        self.start_new_page()
        return True

    def begin_table(self):
        """A new table starts; its column header is owed before any row."""
        self.state = PageState.HEADER_PENDING

    def break_if_needed(self, row_height: float) -> bool:
        """
        Called before placing a row.

        Returns True when the row was deferred to a new page; the manager
        is then back in HEADER_PENDING.
        """
        if self.check_row(row_height) != PageState.PAGE_FULL:
            return False
        self.start_new_page()
        return True

    def place_header(self, height: float) -> PageCursor:
        """Reserve the column header band and start accepting rows."""
        position = self.advance(height)
        self.state = PageState.RENDERING_ROWS
        return position

    def place_row(self, height: float) -> PageCursor:
        """Reserve a row band; returns the cursor at the row's top edge."""
        if self.state == PageState.HEADER_PENDING:
            raise RuntimeError("column header must be drawn before rows")
        if self.state == PageState.PAGE_FULL:
            raise RuntimeError("page is full; start a new page first")
        if self.state == PageState.DONE:
            raise RuntimeError("render pass already finished")
        return self.advance(height)

    def advance(self, height: float) -> PageCursor:
        """Move the cursor down by `height`; returns its previous position."""
        if height < 0:
            raise ValueError("cursor only moves down the page")
        position = self.cursor.copy()
        self.cursor.y_position += height
        return position

    def finish(self) -> int:
        """End the pass; returns the total page count."""
        self.state = PageState.DONE
        return self.page_count
