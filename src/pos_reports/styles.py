"""Colour and font profiles for exported reports."""

from dataclasses import dataclass
from typing import Dict
from reportlab.lib.colors import Color, HexColor, black, white


@dataclass(frozen=True)
class ReportStyle:
    """Visual profile applied to every table in a document."""
    name: str
    font_family: str  # Base font name (Helvetica, Times-Roman, Courier)
    title_color: Color
    section_title_color: Color
    header_bg_color: Color
    header_text_color: Color
    header_border_color: Color
    text_color: Color
    grid_color: Color
    grid_line_width: float
    alternating_row_color: Color  # Fill for even-index rows
    total_row_color: Color
    total_text_color: Color
    footer_text_color: Color


REPORT_STYLES: Dict[str, ReportStyle] = {
    # Blue header band with light grey zebra rows
    "default": ReportStyle(
        name="default",
        font_family="Helvetica",
        title_color=black,
        section_title_color=HexColor("#3B82F6"),
        header_bg_color=HexColor("#3B82F6"),
        header_text_color=white,
        header_border_color=white,
        text_color=black,
        grid_color=HexColor("#C8C8C8"),
        grid_line_width=0.5,
        alternating_row_color=HexColor("#F5F5F5"),
        total_row_color=HexColor("#F1F5F9"),
        total_text_color=HexColor("#0F172A"),
        footer_text_color=HexColor("#64748B"),
    ),
    "slate": ReportStyle(
        name="slate",
        font_family="Helvetica",
        title_color=HexColor("#1E293B"),
        section_title_color=HexColor("#3B82F6"),
        header_bg_color=HexColor("#F8FAFC"),
        header_text_color=HexColor("#1E293B"),
        header_border_color=HexColor("#D1D5DB"),
        text_color=HexColor("#0F172A"),
        grid_color=HexColor("#E2E8F0"),
        grid_line_width=0.3,
        alternating_row_color=HexColor("#F8FAFC"),
        total_row_color=HexColor("#F1F5F9"),
        total_text_color=HexColor("#3B82F6"),
        footer_text_color=HexColor("#64748B"),
    ),
    # Black and white, for receipt-style printers
    "mono": ReportStyle(
        name="mono",
        font_family="Courier",
        title_color=black,
        section_title_color=black,
        header_bg_color=HexColor("#D0D0D0"),
        header_text_color=black,
        header_border_color=black,
        text_color=black,
        grid_color=black,
        grid_line_width=0.75,
        alternating_row_color=HexColor("#EEEEEE"),
        total_row_color=HexColor("#D0D0D0"),
        total_text_color=black,
        footer_text_color=black,
    ),
}


def get_report_style(name: str) -> ReportStyle:
    """Get a style profile by name, falling back to the default profile."""
    return REPORT_STYLES.get(name, REPORT_STYLES["default"])


def get_bold_font(font_family: str) -> str:
    """Get the bold variant of a font family."""
    if font_family == "Times-Roman":
        return "Times-Bold"
    elif font_family == "Courier":
        return "Courier-Bold"
    else:
        return f"{font_family}-Bold"
