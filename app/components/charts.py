"""
Chart Components for Dashboard

This module provides Plotly-based chart components for the operating
environment view and the factory status summary.

All charts are designed to be:
- Responsive and interactive
- Consistent in styling
- Color-coded for quick interpretation
"""

from typing import Dict, List, Optional

import pandas as pd
import plotly.graph_objects as go

from core.timeseries import (
    DEFAULT_DISPLAY_OPTION,
    SENSOR_SERIES,
    SERIES_LABELS,
    format_tick,
)


# =========================================
# Color Schemes
# =========================================

COLORS = {
    "normal": "#10B981",     # Green
    "warning": "#F97316",    # Orange
    "critical": "#EF4444",   # Red
    "primary": "#3B82F6",    # Blue
    "secondary": "#6B7280",  # Gray
    "background": "#1F2937", # Dark gray
    "text": "#F9FAFB",       # Light text
    "grid": "#374151",       # Grid lines
}

TIER_COLORS = {
    "normal": COLORS["normal"],
    "warning": COLORS["warning"],
    "critical": COLORS["critical"],
}

SERIES_COLORS = {
    "vibration": "#8B5CF6",
    "temperature": "#F97316",
    "noise_frequency": "#06B6D4",
}

SERIES_UNITS = {
    "vibration": "mm/s",
    "temperature": "°C",
    "noise_frequency": "Hz",
}

MAX_TICKS = 8


# =========================================
# Chart Layout Defaults
# =========================================

def get_default_layout(title: str = "", height: int = 400) -> dict:
    """Get default chart layout settings."""
    return {
        "title": {
            "text": title,
            "font": {"size": 16, "color": COLORS["text"]},
            "x": 0.5,
            "xanchor": "center"
        },
        "paper_bgcolor": "rgba(0,0,0,0)",
        "plot_bgcolor": "rgba(0,0,0,0)",
        "height": height,
        "margin": {"l": 60, "r": 40, "t": 60, "b": 60},
        "font": {"color": COLORS["text"], "size": 12},
        "xaxis": {
            "gridcolor": COLORS["grid"],
            "showgrid": True,
            "zeroline": False,
        },
        "yaxis": {
            "gridcolor": COLORS["grid"],
            "showgrid": True,
            "zeroline": False,
        },
        "legend": {
            "bgcolor": "rgba(0,0,0,0.5)",
            "bordercolor": COLORS["grid"],
            "font": {"color": COLORS["text"]}
        },
        "hovermode": "x unified",
    }


# =========================================
# Machine Operating Environment Chart
# =========================================

def average_by_timestamp(frame: pd.DataFrame) -> pd.DataFrame:
    """Average the machine's equipment readings at each timestamp."""
    if frame.empty:
        return pd.DataFrame(columns=["timestamp"] + SENSOR_SERIES)
    columns = [s for s in SENSOR_SERIES if s in frame.columns]
    averaged = frame.groupby("timestamp", as_index=False)[columns].mean()
    return averaged.sort_values("timestamp").reset_index(drop=True)


def _tick_positions(timestamps: pd.Series) -> List:
    if len(timestamps) <= MAX_TICKS:
        return list(timestamps)
    step = (len(timestamps) - 1) / (MAX_TICKS - 1)
    return [timestamps.iloc[round(i * step)] for i in range(MAX_TICKS)]


def create_machine_chart(
    frame: pd.DataFrame,
    machine: str,
    display_option: str = DEFAULT_DISPLAY_OPTION.value,
    series: Optional[List[str]] = None,
    height: int = 350
) -> go.Figure:
    """
    Create a machine's operating environment chart.

    Each visible series gets its own y-axis so vibration, temperature
    and noise frequency stay readable on one chart.

    Args:
        frame: Rows of one machine (see filter_machine_frame)
        machine: Machine name used as the title
        display_option: Rolling window, controls tick labels
        series: Series to draw (all if None)
        height: Chart height in pixels

    Returns:
        Plotly Figure object
    """
    series = list(SENSOR_SERIES) if series is None else series
    averaged = average_by_timestamp(frame)
    fig = go.Figure()

    axis_names = ["y", "y2", "y3"]
    layout = get_default_layout(machine.replace("_", " "), height)
    layout["xaxis"]["domain"] = [0.0, 0.86]
    layout["margin"]["r"] = 20
    layout["legend"]["orientation"] = "h"
    layout["legend"]["yanchor"] = "bottom"
    layout["legend"]["y"] = 1.02
    layout["legend"]["xanchor"] = "center"
    layout["legend"]["x"] = 0.5

    for index, name in enumerate(series[:len(axis_names)]):
        color = SERIES_COLORS.get(name, COLORS["primary"])
        unit = SERIES_UNITS.get(name, "")
        fig.add_trace(go.Scatter(
            x=averaged["timestamp"],
            y=averaged[name] if name in averaged.columns else [],
            mode="lines",
            name=SERIES_LABELS.get(name, name),
            yaxis=axis_names[index],
            line={"color": color, "width": 2},
            hovertemplate=f"%{{y:.2f}} {unit}<extra></extra>"
        ))

        axis = {
            "title": {"text": unit, "font": {"color": color}},
            "tickfont": {"color": color},
            "showgrid": index == 0,
            "gridcolor": COLORS["grid"],
            "zeroline": False,
        }
        if index == 0:
            layout["yaxis"].update(axis)
        else:
            axis.update({
                "overlaying": "y",
                "side": "right",
                "anchor": "x" if index == 1 else "free",
            })
            if index == 2:
                axis["position"] = 0.94
            layout[f"yaxis{index + 1}"] = axis

    if not averaged.empty:
        ticks = _tick_positions(averaged["timestamp"])
        layout["xaxis"]["tickmode"] = "array"
        layout["xaxis"]["tickvals"] = ticks
        layout["xaxis"]["ticktext"] = [format_tick(t, display_option) for t in ticks]
    else:
        layout["annotations"] = [{
            "text": "No data in the selected range",
            "showarrow": False,
            "font": {"color": COLORS["secondary"], "size": 14},
            "xref": "paper", "yref": "paper", "x": 0.5, "y": 0.5,
        }]

    fig.update_layout(**layout)

    return fig


# =========================================
# Status Summary Chart
# =========================================

def create_status_summary_chart(
    counts: Dict[str, int],
    title: str = "Equipment Status",
    height: int = 250
) -> go.Figure:
    """
    Create a horizontal bar chart of equipment counts per severity tier.

    Args:
        counts: {"normal": n, "warning": n, "critical": n}
        title: Chart title
        height: Chart height in pixels

    Returns:
        Plotly Figure object
    """
    tiers = ["critical", "warning", "normal"]
    values = [counts.get(tier, 0) for tier in tiers]

    fig = go.Figure(go.Bar(
        x=values,
        y=[tier.title() for tier in tiers],
        orientation="h",
        marker={"color": [TIER_COLORS[tier] for tier in tiers]},
        text=values,
        textposition="auto",
        hovertemplate="<b>%{y}</b>: %{x}<extra></extra>"
    ))

    layout = get_default_layout(title, height)
    layout["xaxis"]["title"] = "Equipment"
    layout["xaxis"]["dtick"] = 1
    layout["showlegend"] = False
    layout["hovermode"] = "closest"

    fig.update_layout(**layout)

    return fig
