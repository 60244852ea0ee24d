"""
Dashboard Components Module

Reusable UI components for the Streamlit dashboard.

Components:
- charts: Plotly operating-environment and summary charts
- scene: 3D factory layout with status markers
- status: Legend, badges, machine cards and banners
"""

from .charts import (
    COLORS,
    TIER_COLORS,
    create_machine_chart,
    create_status_summary_chart,
)
from .scene import create_factory_scene
from .status import (
    render_alert_banner,
    render_machine_card,
    render_status_indicator,
    render_status_legend,
)

__all__ = [
    # Charts
    "COLORS",
    "TIER_COLORS",
    "create_machine_chart",
    "create_status_summary_chart",

    # Scene
    "create_factory_scene",

    # Status
    "render_alert_banner",
    "render_machine_card",
    "render_status_indicator",
    "render_status_legend",
]
