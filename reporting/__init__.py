# snapshot_signals_root/reporting/__init__.py
# PACKAGE API

"""Markdown renderers for the daily, weekday and age-group reports."""

from .markdown import (
    render_jurisdiction,
    render_census,
    render_daily_report,
    render_weekday_report,
    render_age_report,
)

__all__ = [
    "render_jurisdiction",
    "render_census",
    "render_daily_report",
    "render_weekday_report",
    "render_age_report",
]
