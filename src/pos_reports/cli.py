"""Command-line interface for exporting POS reports to PDF."""

import argparse
import json
import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

from .config import LayoutConfig, load_config
from .errors import ReportError
from .pdf_renderer import RenderedDocument, compose_report
from .report_templates import (
    ReportKind, build_report_request, build_section, report_filename,
)
from .sample_data import generate_dataset

logger = logging.getLogger(__name__)


def load_dataset(path: Path) -> Dict[str, List[dict]]:
    """
    Read records from a JSON file mapping dataset kind to a list of records.

    Example: {"sales": [...], "damages": [...]}
    """
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected an object keyed by dataset kind")
    for kind, records in data.items():
        if records is not None and not isinstance(records, list):
            raise ValueError(f"{path}: records for {kind!r} must be a list")
    return data


def build_document(
    dataset: Dict[str, List[dict]],
    title: str,
    config: LayoutConfig,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    generated_at: Optional[datetime] = None,
) -> RenderedDocument:
    """Turn records keyed by dataset kind into one rendered report."""
    sections = [
        build_section(kind, records or [])
        for kind, records in dataset.items()
    ]
    request = build_report_request(
        title,
        sections,
        date_from=date_from,
        date_to=date_to,
        generated_at=generated_at,
    )
    return compose_report(request, config)


def print_summary(document: RenderedDocument, pdf_path: Path):
    print(f"\nReport written: {pdf_path}")
    print(f"  Pages: {document.page_count}")
    print(f"  Size: {document.size} bytes")
    for section in document.sections:
        line = f"  {section.name}: {section.rendered_rows} row(s)"
        if section.total is not None:
            line += f", total {section.total}"
        if section.omitted_rows:
            line += f", {section.omitted_rows} omitted"
        if section.truncated_columns:
            line += f", {len(section.dropped_columns)} column(s) dropped"
        print(line)
    if document.grand_total is not None:
        print(f"  Grand total: {document.grand_total}")


def _parse_date(value: str) -> date:
    return date.fromisoformat(value)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="POS Report Compositor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML layout configuration file",
    )
    parser.add_argument(
        "--input",
        type=Path,
        help="JSON file of records keyed by dataset kind (sample data if omitted)",
    )
    parser.add_argument(
        "--kinds",
        nargs="+",
        choices=[k.value for k in ReportKind],
        default=[ReportKind.SALES.value, ReportKind.DAMAGES.value],
        help="Datasets to include when generating sample data",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path("out"),
        help="Output directory for the PDF",
    )
    parser.add_argument("--title", default=None, help="Report title")
    parser.add_argument("--date-from", type=_parse_date, help="Start of the period (YYYY-MM-DD)")
    parser.add_argument("--date-to", type=_parse_date, help="End of the period (YYYY-MM-DD)")
    parser.add_argument(
        "--rows",
        type=int,
        default=25,
        help="Rows per dataset when generating sample data",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for sample data",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        parser.error(f"Invalid configuration: {e}")

    date_to = args.date_to or date.today()
    date_from = args.date_from or (date_to - timedelta(days=30))

    if args.input:
        try:
            dataset = load_dataset(args.input)
        except (OSError, ValueError) as e:
            logger.error("Cannot read %s: %s", args.input, e)
            return 1
        subject = args.input.stem
    else:
        print(f"Generating sample data ({args.rows} rows per dataset, seed {args.seed})...")
        dataset = generate_dataset(
            [ReportKind(k) for k in args.kinds],
            start=date_from,
            end=date_to,
            seed=args.seed,
            num_rows=args.rows,
        )
        subject = "_".join(dataset) if len(dataset) > 1 else next(iter(dataset), "report")

    if args.title:
        title = args.title
    elif len(dataset) == 1:
        title = f"{next(iter(dataset)).replace('_', ' ').title()} Report"
    else:
        title = "Business Report"

    try:
        document = build_document(
            dataset,
            title,
            config,
            date_from=date_from,
            date_to=date_to,
            generated_at=datetime.now(),
        )
    except (ReportError, ValueError, TypeError) as e:
        logger.error("Report failed: %s", e)
        return 1

    pdf_path = document.save(args.out_dir / report_filename(subject, date.today()))
    print_summary(document, pdf_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
