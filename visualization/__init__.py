# snapshot_signals_root/visualization/__init__.py
# PACKAGE API

"""
Initializes the visualization package, defining its public API.
This file explicitly exports all public-facing functions from its submodules,
providing a single, consistent import point for the rest of the application.
"""

# --- Core Plotting Functions from plots.py ---
from .plots import (
    set_plotly_theme,
    create_empty_figure,
    plot_jurisdiction_chart,
    plot_age_groups,
    export_figure,
    chart_file_name,
)

# --- Define the canonical public API for the package ---
__all__ = [
    "set_plotly_theme",
    "create_empty_figure",
    "plot_jurisdiction_chart",
    "plot_age_groups",
    "export_figure",
    "chart_file_name",
]
