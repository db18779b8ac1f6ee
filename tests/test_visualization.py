# snapshot_signals_root/tests/test_visualization.py
# VISUALIZATION TESTS

from unittest.mock import patch

import pandas as pd
import plotly.graph_objects as go
import pytest

from analytics import ChartSpec, build_chart_series
from config import settings
from visualization import (
    chart_file_name,
    create_empty_figure,
    export_figure,
    plot_age_groups,
    plot_jurisdiction_chart,
    set_plotly_theme,
)

# Fixtures are sourced from conftest.py

@pytest.fixture(scope="module", autouse=True)
def apply_theme():
    """Apply the custom Plotly theme for all tests in this module."""
    set_plotly_theme()


@pytest.fixture
def chart_data(make_series):
    counts = [40] * 29 + [80] + [10]
    return build_chart_series(make_series(counts), title="Allegheny County")


# --- Plotting Tests ---
def test_create_empty_figure_properties():
    """Verifies that empty figures are created with the correct message and layout."""
    fig = create_empty_figure(title="Empty Test", message="No data here.")
    assert isinstance(fig, go.Figure)
    assert "Empty Test" in fig.layout.title.text
    assert fig.layout.annotations[0].text == "No data here."


def test_plot_jurisdiction_chart_structure(chart_data):
    fig = plot_jurisdiction_chart(ChartSpec("Allegheny County", chart_data))
    names = [trace.name for trace in fig.data]
    assert names == ["Daily new cases", "7 day avg new cases", "Total hospitalized", "ICU beds used", "Current Cases Level"]
    assert "Allegheny County" in fig.layout.title.text
    assert pd.Timestamp(fig.layout.xaxis.range[0]) == pd.Timestamp(settings.ANALYTICS.chart_start_date)
    # Highest daily count is 80; 5% headroom.
    assert fig.layout.yaxis.range[1] == 84
    level = fig.data[-1]
    assert list(level.y) == [chart_data.current_level, chart_data.current_level]


def test_plot_jurisdiction_chart_recent_and_truncated(chart_data):
    recent = plot_jurisdiction_chart(ChartSpec("Allegheny County_60days", chart_data, recent_days=60))
    last_day = max(trace.index.max() for trace in chart_data.traces.values())
    assert pd.Timestamp(recent.layout.xaxis.range[1]) == last_day + pd.Timedelta(days=1)
    assert pd.Timestamp(recent.layout.xaxis.range[0]) == last_day + pd.Timedelta(days=1) - pd.Timedelta(days=61)

    truncated = plot_jurisdiction_chart(ChartSpec("Allegheny County_trunc", chart_data, y_truncate=True))
    assert truncated.layout.yaxis.range[1] == 21


def test_plot_jurisdiction_chart_headroom_counts_provisional_day(make_series):
    data = build_chart_series(make_series([40] * 30 + [200]), title="Allegheny County")
    assert data.traces["Daily new cases"].max() == 40
    assert data.peak_cases == 200
    fig = plot_jurisdiction_chart(ChartSpec("Allegheny County", data))
    assert fig.layout.yaxis.range[1] == 210


def test_plot_age_groups_uses_first_eight_buckets():
    days = pd.date_range("2021-01-07", periods=5)
    averages = pd.DataFrame({bucket: [1, 2, 3, 4, 5] for bucket in settings.AGE_BUCKETS}, index=days)
    fig = plot_age_groups(averages, title="Cases by age group")
    assert len(fig.data) == 8
    assert "unknown" not in [trace.name for trace in fig.data]
    assert fig.layout.yaxis.range[1] == 750
    assert plot_age_groups(averages, title="Cases by age group", truncate=True).layout.yaxis.range[1] == 150


def test_plot_age_groups_empty_input():
    fig = plot_age_groups(pd.DataFrame(), title="Cases by age group")
    assert "No age-group data" in fig.layout.annotations[0].text


def test_chart_file_name_replaces_spaces(chart_data):
    assert chart_file_name(ChartSpec("Allegheny County_60days", chart_data)) == "Allegheny_County_60days.png"


# --- Export Tests ---
def test_export_figure_writes_png(tmp_path):
    fig = create_empty_figure("Export")
    with patch.object(go.Figure, "write_image") as mock_write:
        assert export_figure(fig, tmp_path / "charts" / "out.png")
    mock_write.assert_called_once()
    assert mock_write.call_args.kwargs["format"] == "png"
    assert (tmp_path / "charts").is_dir()


def test_export_figure_failure_is_logged_not_raised(tmp_path, caplog):
    fig = create_empty_figure("Export")
    with patch.object(go.Figure, "write_image", side_effect=RuntimeError("no renderer")):
        assert export_figure(fig, tmp_path / "out.png") is False
    assert "Failed to export chart" in caplog.text
