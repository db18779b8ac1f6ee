# snapshot_signals_root/visualization/plots.py
# CENTRALIZED PLOTTING FACTORY FOR JURISDICTION AND AGE-GROUP CHARTS

import logging
from pathlib import Path
from typing import Optional, Union

import html
import pandas as pd
import plotly.graph_objects as go
import plotly.io as pio

from analytics.chart_series import (
    AVG_CASES_LABEL,
    CURRENT_LEVEL_LABEL,
    DAILY_CASES_LABEL,
    HOSPITALIZED_LABEL,
    ICU_LABEL,
    ChartSpec,
)
from config import settings

logger = logging.getLogger(__name__)

AGE_CHART_MAX_CASES = 750
AGE_CHART_TRUNCATED_MAX_CASES = 150
AGE_CHART_BUCKET_COUNT = 8

# --- Helper Functions ---
def _hex_to_rgba(hex_color: str, alpha: float) -> str:
    """Converts a hex color string to an rgba string for Plotly compatibility."""
    hex_color = hex_color.lstrip('#')
    if len(hex_color) != 6: return 'rgba(0,0,0,0.1)'
    try:
        rgb = tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))
        return f'rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha})'
    except ValueError:
        return 'rgba(0,0,0,0.1)'

def _trace_styles():
    return {
        DAILY_CASES_LABEL: dict(color=_hex_to_rgba(settings.COLOR_DAILY_CASES, 0.6), width=1),
        AVG_CASES_LABEL: dict(color=settings.COLOR_AVG_CASES, width=2),
        HOSPITALIZED_LABEL: dict(color=settings.COLOR_HOSPITALIZED, width=2),
        ICU_LABEL: dict(color=settings.COLOR_ICU, width=2),
    }

# --- Theme Setup ---
def set_plotly_theme():
    """Sets the custom signals theme as the default for all Plotly charts."""
    base_layout = {
        'font': {'family': "sans-serif", 'size': 12, 'color': settings.COLOR_TEXT_PRIMARY},
        'title': {'x': 0.5, 'xanchor': 'center', 'font': {'size': 24, 'color': settings.COLOR_TEXT_HEADINGS}},
        'paper_bgcolor': settings.COLOR_BACKGROUND_CONTENT,
        'plot_bgcolor': settings.COLOR_BACKGROUND_CONTENT,
        'margin': dict(l=60, r=60, t=70, b=50),
        'legend': dict(yanchor="top", y=0.99, xanchor="left", x=0.01, bordercolor='#000000', borderwidth=1, font={'size': 11}),
        'xaxis': {'showgrid': True, 'gridcolor': '#e9ecef', 'zeroline': False},
        'yaxis': {'gridcolor': '#e9ecef', 'zeroline': False},
    }
    signals_template = go.layout.Template(layout=base_layout)
    signals_template.layout.colorway = settings.PLOTLY_COLORWAY
    pio.templates['signals'] = signals_template
    pio.templates.default = 'signals'
    logger.debug("Custom 'signals' Plotly theme applied.")

# --- Factory Functions for Charts ---
def create_empty_figure(title: str, message: str = "No data available.") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(
        title_text=f"<b>{html.escape(title)}</b>",
        xaxis={"visible": False}, yaxis={"visible": False},
        annotations=[{"text": html.escape(message), "xref": "paper", "yref": "paper", "showarrow": False, "font": {"size": 14, "color": settings.COLOR_TEXT_MUTED}}]
    )
    return fig

def plot_jurisdiction_chart(chart: ChartSpec) -> go.Figure:
    """
    Cases and hospitalizations for one jurisdiction.

    Draws daily cases, the rounded trailing average, hospital and ICU census,
    and a flat line at the latest average. Recent charts start
    ``recent_days + 1`` days before the day after the last observation; full
    charts start at the configured chart start date. The y axis tops out 5%
    above the highest count in the series, or a quarter of that when truncated.
    """
    data = chart.data
    title = f"Cases and hospitalizations: {data.title}"
    daily = data.traces.get(DAILY_CASES_LABEL)
    if daily is None or not data.traces:
        return create_empty_figure(title)

    last_dates = [trace.index.max() for trace in data.traces.values() if not trace.empty]
    if not last_dates:
        return create_empty_figure(title)
    max_date = max(last_dates) + pd.Timedelta(days=1)
    if chart.recent_days is not None:
        min_date = max_date - pd.Timedelta(days=chart.recent_days + 1)
    else:
        min_date = pd.Timestamp(settings.ANALYTICS.chart_start_date)

    max_y = data.peak_cases or (int(daily.max()) if not daily.empty else 1000)
    max_y += max_y // 20
    if chart.y_truncate:
        max_y //= 4

    fig = go.Figure()
    styles = _trace_styles()
    for label, trace in data.traces.items():
        fig.add_trace(go.Scatter(
            x=trace.index, y=trace.values, mode='lines', name=label,
            line=styles.get(label),
            hovertemplate=f'<b>%{{x|%Y-%m-%d}}</b><br>{html.escape(label)}: %{{y:,.0f}}<extra></extra>',
        ))
    fig.add_trace(go.Scatter(
        x=[min_date, max_date], y=[data.current_level, data.current_level], mode='lines',
        name=CURRENT_LEVEL_LABEL, line=dict(color=_hex_to_rgba(settings.COLOR_CURRENT_LEVEL, 0.4), width=2),
        hoverinfo='skip',
    ))
    fig.update_layout(
        title_text=f"<b>{html.escape(title)}</b>",
        xaxis_title="Date", showlegend=True,
        width=settings.CHART_WIDTH_PX, height=settings.CHART_HEIGHT_PX,
    )
    fig.update_xaxes(range=[min_date, max_date])
    fig.update_yaxes(range=[0, max(max_y, 1)])
    return fig

def plot_age_groups(averages: pd.DataFrame, title: str, truncate: bool = False) -> go.Figure:
    """Trailing-average cases per age group, one line for each of the first eight buckets."""
    if not isinstance(averages, pd.DataFrame) or averages.empty:
        return create_empty_figure(title, "No age-group data available.")
    max_cases = AGE_CHART_TRUNCATED_MAX_CASES if truncate else AGE_CHART_MAX_CASES
    fig = go.Figure()
    for bucket in list(averages.columns)[:AGE_CHART_BUCKET_COUNT]:
        fig.add_trace(go.Scatter(
            x=averages.index, y=averages[bucket].values, mode='lines', name=str(bucket), line=dict(width=1),
            hovertemplate=f'<b>%{{x|%Y-%m-%d}}</b><br>{html.escape(str(bucket))}: %{{y:,.0f}}<extra></extra>',
        ))
    fig.update_layout(
        title_text=f"<b>{html.escape(title)}</b>",
        xaxis_title="Date", showlegend=True,
        width=settings.CHART_WIDTH_PX, height=settings.CHART_HEIGHT_PX,
    )
    fig.update_xaxes(range=[averages.index.min(), averages.index.max() + pd.Timedelta(days=1)])
    fig.update_yaxes(range=[0, max_cases])
    return fig

# --- Export ---
def export_figure(fig: go.Figure, path: Union[str, Path], scale: Optional[float] = None) -> bool:
    """Writes a figure to a PNG file. Failures are logged and reported as False."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.write_image(str(path), format='png', width=settings.CHART_WIDTH_PX, height=settings.CHART_HEIGHT_PX, scale=scale)
        logger.info(f"Chart written to {path}.")
        return True
    except Exception as e:
        logger.error(f"Failed to export chart to '{path}': {e}", exc_info=True)
        return False

def chart_file_name(chart: ChartSpec) -> str:
    """File name for an exported jurisdiction chart: spaces become underscores."""
    return f"{chart.file_stem.replace(' ', '_')}.png"
