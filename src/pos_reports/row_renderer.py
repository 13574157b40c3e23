"""Draw primitives for table rows."""

from dataclasses import dataclass
from typing import List, Optional, Union

from reportlab.lib.colors import Color
from reportlab.pdfbase.pdfmetrics import stringWidth

from .config import LayoutConfig
from .layout_engine import ColumnLayout, PageCursor
from .models import Row, format_cell_value
from .styles import get_bold_font

# Baseline offset below the vertical centre, as a fraction of font size
BASELINE_SHIFT = 0.35


@dataclass(frozen=True)
class DrawRect:
    """Rectangle in top-origin page coordinates."""
    x: float
    y: float  # Top edge
    width: float
    height: float
    fill_color: Optional[Color] = None
    stroke_color: Optional[Color] = None
    line_width: float = 0.5


@dataclass(frozen=True)
class DrawText:
    """Single line of text; `y` is the baseline in top-origin coordinates."""
    x: float
    y: float
    text: str
    font_name: str
    font_size: float
    color: Color
    align: str = "left"  # "left", "center", "right"
    col_index: Optional[int] = None


Primitive = Union[DrawRect, DrawText]


def truncate_text(
    text: str,
    max_width: float,
    font_name: str,
    font_size: float,
    marker: str = "",
) -> str:
    """
    Cut text so it fits within max_width; never wraps.

    With a non-empty `marker` (e.g. "...") the marker is appended to cut
    text and counted against the width.
    """
    if not text:
        return text

    if stringWidth(text, font_name, font_size) <= max_width:
        return text

    marker_width = stringWidth(marker, font_name, font_size) if marker else 0.0
    available_width = max_width - marker_width
    if available_width <= 0:
        return ""

    # Prefix width grows with length: binary search the longest prefix that fits
    low, high = 0, len(text) - 1
    while low < high:
        mid = (low + high + 1) // 2
        if stringWidth(text[:mid], font_name, font_size) <= available_width:
            low = mid
        else:
            high = mid - 1

    if low == 0:
        return ""
    return text[:low] + marker


def text_baseline(top: float, height: float, font_size: float) -> float:
    """Baseline that vertically centres a line of text in a band."""
    return top + height / 2 + font_size * BASELINE_SHIFT


def render_header_row(
    layout: ColumnLayout,
    cursor: PageCursor,
    config: LayoutConfig,
) -> List[Primitive]:
    """Column header band: filled background, bordered cells, centred labels."""
    style = config.report_style
    height = config.header_row_height
    font_name = get_bold_font(style.font_family)
    font_size = config.header_font_size
    top = cursor.y_position

    primitives: List[Primitive] = [
        DrawRect(
            x=layout.start_x,
            y=top,
            width=layout.total_width,
            height=height,
            fill_color=style.header_bg_color,
        )
    ]

    baseline = text_baseline(top, height, font_size)
    max_text_width = layout.column_width - 2 * config.cell_inset
    for col_idx, column in enumerate(layout.columns):
        x = layout.column_x(col_idx)
        primitives.append(DrawRect(
            x=x,
            y=top,
            width=layout.column_width,
            height=height,
            stroke_color=style.header_border_color,
            line_width=style.grid_line_width,
        ))
        label = truncate_text(
            column.label, max_text_width, font_name, font_size, config.truncation_marker
        )
        if label:
            primitives.append(DrawText(
                x=x + layout.column_width / 2,
                y=baseline,
                text=label,
                font_name=font_name,
                font_size=font_size,
                color=style.header_text_color,
                align="center",
                col_index=col_idx,
            ))
    return primitives


def row_fill_color(row: Row, row_index: int, config: LayoutConfig) -> Optional[Color]:
    """Background for a row: even indexes are tinted, total rows use their own fill."""
    style = config.report_style
    if row.is_total:
        return style.total_row_color
    if row_index % 2 == 0:
        return style.alternating_row_color
    return None


def cell_texts(row: Row, layout: ColumnLayout, config: LayoutConfig) -> List[str]:
    """Truncated text of each rendered cell, in column order."""
    style = config.report_style
    font_name = get_bold_font(style.font_family) if row.is_total else style.font_family
    max_text_width = layout.column_width - 2 * config.cell_inset
    return [
        truncate_text(
            format_cell_value(row.get(key)),
            max_text_width,
            font_name,
            config.font_size,
            config.truncation_marker,
        )
        for key in layout.keys
    ]


def render_row(
    row: Row,
    layout: ColumnLayout,
    cursor: PageCursor,
    row_index: int,
    config: LayoutConfig,
) -> List[Primitive]:
    """
    Draw primitives for one data or total row at the cursor.

    Each of the planned columns gets a bordered cell of fixed height and
    left-aligned, vertically centred text cut to the cell's inner width.
    Keys missing from the row render as empty cells.
    """
    style = config.report_style
    height = config.row_height
    top = cursor.y_position
    fill = row_fill_color(row, row_index, config)

    if row.is_total:
        font_name = get_bold_font(style.font_family)
        color = style.total_text_color
    else:
        font_name = style.font_family
        color = style.text_color

    primitives: List[Primitive] = []
    baseline = text_baseline(top, height, config.font_size)
    for col_idx, text in enumerate(cell_texts(row, layout, config)):
        x = layout.column_x(col_idx)
        primitives.append(DrawRect(
            x=x,
            y=top,
            width=layout.column_width,
            height=height,
            fill_color=fill,
            stroke_color=style.grid_color,
            line_width=style.grid_line_width,
        ))
        if text:
            primitives.append(DrawText(
                x=x + config.cell_inset,
                y=baseline,
                text=text,
                font_name=font_name,
                font_size=config.font_size,
                color=color,
                align="left",
                col_index=col_idx,
            ))
    return primitives
