# snapshot_signals_root/app.py
# APPLICATION ENTRY POINT

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

try:
    _project_root = Path(__file__).resolve().parent
    if str(_project_root) not in sys.path:
        sys.path.insert(0, str(_project_root))

    from config import settings
    from analytics import build_age_report, build_daily_report, build_weekday_report
    from analytics.orchestrator import AgeReport, DailyReport
    from data_processing import SignalsError
    from reporting import render_age_report, render_daily_report, render_weekday_report
    from visualization import chart_file_name, export_figure, plot_age_groups, plot_jurisdiction_chart, set_plotly_theme

except ImportError as e:
    print(f"FATAL ERROR in app.py: A core module failed to import.", file=sys.stderr)
    print("1. Ensure the package is installed: `pip install -e .`", file=sys.stderr)
    print("2. Run the app from the project root: `python app.py --date YYYY-MM-DD`", file=sys.stderr)
    print(f"\nPython Path: {sys.path}\nOriginal ImportError: {e}", file=sys.stderr)
    sys.exit(1)

logger = logging.getLogger(__name__)

AGE_CHART_TITLE = "Cases by age group and date: Allegheny County"


def configure_logging() -> None:
    # stdout carries the markdown report; log records go to stderr.
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format=settings.LOG_FORMAT,
        datefmt=settings.LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True
    )
    # Image export libraries are chatty at INFO.
    logging.getLogger("kaleido").setLevel(logging.WARNING)
    logging.getLogger("choreographer").setLevel(logging.WARNING)


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snapshot-signals",
        description="Derive case, hospitalization and reporting-bias signals from daily public-health snapshots.",
    )
    parser.add_argument("--date", type=_parse_date, default=None, help="Analyze for specified date (%%Y-%%m-%%d format)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-d", "--dayreport", action="store_true", help="Print the weekday reporting-bias breakdown")
    mode.add_argument("-a", "--agereport", action="store_true", help="Chart 7 day average cases per age group")
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory for exported PNG charts")
    parser.add_argument("--no-charts", action="store_true", help="Skip building and exporting charts")
    return parser


def export_daily_charts(report: DailyReport, output_dir: Path) -> int:
    """Renders every chart attached to the report. Returns how many were written."""
    written = 0
    for section in report.jurisdictions:
        for chart in section.charts:
            if export_figure(plot_jurisdiction_chart(chart), output_dir / chart_file_name(chart)):
                written += 1
    return written


def export_age_charts(report: AgeReport, output_dir: Path) -> int:
    """Renders the full and truncated age-group charts. Returns how many were written."""
    figures = {
        "case_ages.png": plot_age_groups(report.averages, AGE_CHART_TITLE),
        "case_ages_truncated.png": plot_age_groups(report.averages, AGE_CHART_TITLE, truncate=True),
    }
    return sum(export_figure(fig, output_dir / name) for name, fig in figures.items())


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    today = args.date or date.today()
    output_dir = args.output_dir or settings.OUTPUT_DIR
    with_charts = not args.no_charts
    if with_charts:
        set_plotly_theme()

    try:
        if args.dayreport:
            print(render_weekday_report(build_weekday_report(today)), end="")
            return 0

        if args.agereport:
            report = build_age_report(today)
            if with_charts:
                export_age_charts(report, output_dir)
            print(render_age_report(report), end="")
            return 0

        report = build_daily_report(today, with_charts=with_charts)
        if with_charts:
            written = export_daily_charts(report, output_dir)
            try:
                written += export_age_charts(build_age_report(today), output_dir)
            except SignalsError as e:
                logger.warning(f"Age-group charts skipped: {e}")
            logger.info(f"Exported {written} chart(s) to {output_dir}.")
        print(render_daily_report(report), end="")
        return 0
    except SignalsError as e:
        logger.critical(f"Report for {today:%Y-%m-%d} failed: {e}")
        print(f"Error creating report: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(run())
