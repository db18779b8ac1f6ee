# snapshot_signals_root/reporting/markdown.py
# MARKDOWN RENDERING OF DAILY, WEEKDAY AND AGE-GROUP REPORTS

import logging
from typing import List

from analytics.orchestrator import AgeReport, DailyReport, JurisdictionReport, WeekdayReport
from analytics.trends import BedCensus
from analytics.weekday import WEEKDAY_NAMES

logger = logging.getLogger(__name__)

# Two trailing spaces force a markdown line break.
BREAK = "  "


def _front_matter(stamp: str) -> List[str]:
    return ["+++", f'title = "{stamp}"', f"date = {stamp}", "+++", ""]


def render_jurisdiction(section: JurisdictionReport) -> List[str]:
    lines = [f"## {section.display_name}"]
    if section.new_cases_reported is not None:
        lines.append(f"{section.name} reports {section.new_cases_reported} new cases.{BREAK}")
    if section.hospitalized is not None:
        lines.append(f"Hospitalizations are {section.hospitalized.change:+d} to {section.hospitalized.latest}{BREAK}")
    if section.icu is not None:
        icu_line = f"ICUs are {section.icu.change:+d} to {section.icu.latest}"
        if section.icu_percent_full is not None:
            icu_line += f" ({section.icu_percent_full:.0f}% full)"
        lines.append(icu_line + BREAK)
    if section.steps is not None:
        steps = section.steps
        lines.append(f"This week's 7 day avg to {steps.this_week:.0f} cases/day{BREAK}")
        lines.append(f"Last week's 7 day avg to {steps.one_week_ago:.0f} cases/day{BREAK}")
    if section.risk_level is not None:
        lines.append(f"Transmission risk: {section.risk_level.value}{BREAK}")
    for error in section.errors:
        lines.append(f"_Unavailable: {error}_{BREAK}")
    lines.append("")
    return lines


def render_census(jurisdiction: str, census: BedCensus) -> str:
    week1, week2 = census.vs_one_week, census.vs_two_weeks
    return (
        f"{jurisdiction} hospital census: Using {census.beds_used} med/surg beds, "
        f"{week1.difference} {week1.change.phrase} than last week, "
        f"{week2.difference} {week2.change.phrase} than 2 weeks ago."
    )


def render_daily_report(report: DailyReport) -> str:
    """Renders the full daily report as markdown with TOML front matter."""
    stamp = report.report_date.strftime("%Y-%m-%d")
    lines = _front_matter(stamp)
    lines.append(f"# Cases & hospitalization signals for {stamp}")
    lines.append("")

    for section in report.jurisdictions:
        lines.extend(render_jurisdiction(section))

    if report.pcr_new_tests is not None:
        lines.append(f"Today's results reflect {report.pcr_new_tests} new PCR test results")
        lines.append("")

    lines.append("## Hospitalizations")
    if report.census is not None:
        lines.append(render_census(report.census_jurisdiction, report.census))
    else:
        lines.append(f"_{report.census_jurisdiction} hospital census unavailable._")
    lines.append("")

    lines.append("Increases in 7 day avg cases/day from a week ago:")
    lines.append("")
    for item in report.rising:
        steps = item.steps
        lines.append(
            f"{item.name} rose from {steps.one_week_ago:.1f} to {steps.this_week:.1f}"
            f" (14d {steps.two_weeks_ago:.1f}){BREAK}"
        )

    if report.errors:
        lines.append("")
        lines.append("## Notes")
        lines.extend(f"- {error}" for error in report.errors)

    logger.debug(f"Rendered daily report for {stamp} with {len(report.jurisdictions)} jurisdiction(s).")
    return "\n".join(lines) + "\n"


def render_weekday_report(report: WeekdayReport) -> str:
    """Share of recent cases reported on each weekday, as a markdown table."""
    stamp = report.report_date.strftime("%Y-%m-%d")
    lines = [f"# Weekday reporting share: {report.jurisdiction} ({stamp})", "",
             "| Weekday | Share of cases |", "|---|---|"]
    for weekday, share in report.weights.items():
        lines.append(f"| {WEEKDAY_NAMES[int(weekday)]} | {share:.3f} |")
    lines.append("")
    lines.append(f"Total: {report.weights.sum():.3f}")
    return "\n".join(lines) + "\n"


def render_age_report(report: AgeReport) -> str:
    """Latest 7 day average cases per age group."""
    stamp = report.report_date.strftime("%Y-%m-%d")
    lines = [f"# Cases by age group ({stamp})", ""]
    if report.averages.empty:
        lines.append("_Not enough test records for a 7 day average._")
        return "\n".join(lines) + "\n"
    as_of = report.averages.index[-1]
    lines.append(f"7 day avg cases/day as of {as_of:%Y-%m-%d}:")
    lines.append("")
    lines.extend(["| Age group | Cases/day |", "|---|---|"])
    for bucket, value in report.averages.iloc[-1].items():
        lines.append(f"| {bucket} | {int(value)} |")
    return "\n".join(lines) + "\n"
