# snapshot_signals_root/config/__init__.py
# This file makes the 'config' directory a Python package.
# It exposes the singleton 'settings' instance for easy, clean importing.

from .settings import AnalyticsConfig, JurisdictionConfig, Settings, SnapshotPaths, settings

__all__ = ["settings", "Settings", "SnapshotPaths", "AnalyticsConfig", "JurisdictionConfig"]
