"""Layout configuration and YAML loading for the report compositor."""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional, Tuple
import yaml
from reportlab.lib.pagesizes import A4, LETTER, landscape
from reportlab.lib.units import mm

from .styles import ReportStyle, get_report_style

PAGE_SIZES = {
    "A4": A4,          # 595 x 842 points
    "LETTER": LETTER,  # 612 x 792 points
}


@dataclass
class LayoutConfig:
    """
    Fonts, margins and caps for one render pass.

    Passed explicitly into every layout component; nothing reads
    formatting values from module state.
    """

    page_size: str = "A4"
    orientation: str = "portrait"  # "portrait" or "landscape"

    # Margins (points). `margin` is the left/right margin used for
    # column planning.
    margin: float = 15 * mm
    margin_top: float = 20 * mm
    margin_bottom: float = 15 * mm

    # Fixed row heights (points)
    row_height: float = 18.0
    header_row_height: float = 16.0
    title_height: float = 28.0
    date_banner_height: float = 22.0
    section_title_height: float = 22.0
    section_spacing: float = 14.0
    cell_inset: float = 3.0

    # Font sizes
    font_size: float = 8.0
    header_font_size: float = 9.0
    title_font_size: float = 18.0
    date_banner_font_size: float = 10.0
    section_title_font_size: float = 12.0
    footer_font_size: float = 7.0

    # Caps
    max_columns: int = 5
    max_rows_per_section: int = 100

    # "" cuts overflowing text; "..." marks the cut
    truncation_marker: str = ""
    style: str = "default"

    show_grand_total: bool = True
    show_continued_titles: bool = True
    show_page_numbers: bool = True
    # Strip timestamps and random IDs from the PDF so identical requests
    # give identical bytes.
    invariant: bool = True

    @property
    def page_dimensions(self) -> Tuple[float, float]:
        """(width, height) in points after applying orientation."""
        size = PAGE_SIZES.get(self.page_size.upper())
        if size is None:
            raise ValueError(f"Unknown page size: {self.page_size}")
        if self.orientation == "landscape":
            return landscape(size)
        return size

    @property
    def report_style(self) -> ReportStyle:
        return get_report_style(self.style)

    def validate(self) -> "LayoutConfig":
        """
        Check that the page can hold at least one section.

        Returns self, raises ValueError if not.
        """
        if self.orientation not in ("portrait", "landscape"):
            raise ValueError(f"Unknown orientation: {self.orientation}")
        if self.max_columns < 1:
            raise ValueError("max_columns must be at least 1")
        if self.max_rows_per_section < 1:
            raise ValueError("max_rows_per_section must be at least 1")
        if self.row_height <= 0 or self.header_row_height <= 0:
            raise ValueError("row heights must be positive")

        page_width, page_height = self.page_dimensions
        if page_width - 2 * self.margin <= 2 * self.cell_inset:
            raise ValueError(
                f"Margin {self.margin:.1f} leaves no room for columns on a "
                f"{page_width:.0f}pt wide page"
            )

        usable = page_height - self.margin_top - self.margin_bottom
        needed = (
            self.title_height
            + self.date_banner_height
            + self.section_title_height
            + self.header_row_height
            + self.row_height
        )
        if usable < needed:
            raise ValueError(
                f"Content height {usable:.1f} is smaller than the {needed:.1f} "
                f"needed for a title, a section header and one row"
            )
        return self

    @classmethod
    def from_yaml(cls, path: Path) -> "LayoutConfig":
        """Load configuration from a YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown layout settings: {', '.join(unknown)}")

        return cls(**data).validate()

    def to_yaml(self, path: Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(asdict(self), f, default_flow_style=False, sort_keys=False)


def load_config(path: Optional[Path] = None) -> LayoutConfig:
    """Load config from path or return default config."""
    if path is None:
        return LayoutConfig()
    return LayoutConfig.from_yaml(path)
