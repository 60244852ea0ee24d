"""
Factory Scene Component

Draws the factory floor as a Plotly 3D scene: a grey block per machine
and a status marker per piece of equipment, colored by severity tier.
Markers of alerting equipment blink by being hidden on odd phases.
"""

from typing import Dict, Optional

import plotly.graph_objects as go

from core.classifier import ClassificationResult, TierSource
from core.layout import equipment_ids, machine_names, marker_position

from .charts import COLORS, TIER_COLORS


UNKNOWN_COLOR = "#808080"
HIDDEN_OPACITY = 0.08


def _machine_bounds(machine: str):
    """Axis-aligned box around a machine's equipment markers."""
    points = [
        marker_position(name) for name in equipment_ids() if name.startswith(f"{machine}_")
    ]
    xs, ys, zs = zip(*points)
    pad = 2.0
    return (
        (min(xs) - pad, max(xs) + pad),
        (min(ys) - pad - 4.0, max(ys) - 1.0),
        (min(zs) - pad, max(zs) + pad),
    )


def _box_trace(machine: str) -> go.Mesh3d:
    (x0, x1), (h0, h1), (d0, d1) = _machine_bounds(machine)
    return go.Mesh3d(
        x=[x0, x0, x1, x1, x0, x0, x1, x1],
        y=[d0, d1, d1, d0, d0, d1, d1, d0],
        z=[h0, h0, h0, h0, h1, h1, h1, h1],
        i=[7, 0, 0, 0, 4, 4, 6, 6, 4, 0, 3, 2],
        j=[3, 4, 1, 2, 5, 6, 5, 2, 0, 1, 6, 3],
        k=[0, 7, 2, 3, 6, 7, 1, 1, 5, 5, 7, 6],
        color="#9CA3AF",
        opacity=0.25,
        name=machine,
        hoverinfo="name",
        showscale=False,
    )


def create_factory_scene(
    result: ClassificationResult,
    visibility: Optional[Dict[str, bool]] = None,
    height: int = 600
) -> go.Figure:
    """
    Create the 3D factory scene.

    Args:
        result: Latest classification
        visibility: Per-identifier blink visibility (all visible if None)
        height: Chart height in pixels

    Returns:
        Plotly Figure object
    """
    visibility = visibility or {}
    fig = go.Figure()

    for machine in machine_names():
        fig.add_trace(_box_trace(machine))

    names = equipment_ids()
    xs, ys, zs, colors, opacities, texts = [], [], [], [], [], []
    for name in names:
        # scene y is floor depth, scene z is height
        x, y, z = marker_position(name)
        tier = result.tiers.get(name)
        source = result.sources.get(name)
        xs.append(x)
        ys.append(z)
        zs.append(y)
        colors.append(TIER_COLORS[tier.value] if tier else UNKNOWN_COLOR)
        opacities.append(1.0 if visibility.get(name, True) else HIDDEN_OPACITY)

        detail = tier.value.title() if tier else "No data"
        if source is TierSource.SNAPSHOT:
            detail += " (last known)"
        fraction = result.critical_fractions.get(name)
        if fraction is not None:
            detail += f"<br>Critical: {fraction:.0f}%"
        texts.append(f"<b>{name}</b><br>{detail}")

    # Per-point opacity is not supported on Scatter3d, so fade via RGBA
    fig.add_trace(go.Scatter3d(
        x=xs,
        y=ys,
        z=zs,
        mode="markers",
        name="Equipment",
        marker={
            "size": 9,
            "color": [_with_alpha(c, a) for c, a in zip(colors, opacities)],
            "line": {"width": 1, "color": COLORS["background"]},
        },
        text=texts,
        hovertemplate="%{text}<extra></extra>",
    ))

    fig.update_layout(
        height=height,
        paper_bgcolor="#e8eaf4",
        margin={"l": 0, "r": 0, "t": 10, "b": 0},
        showlegend=False,
        scene={
            "xaxis": {"visible": False},
            "yaxis": {"visible": False},
            "zaxis": {"visible": False},
            "aspectmode": "data",
            "camera": {"eye": {"x": 0.1, "y": -1.6, "z": 0.9}},
        },
        uirevision="factory-scene",
    )

    return fig


def _with_alpha(hex_color: str, alpha: float) -> str:
    r, g, b = int(hex_color[1:3], 16), int(hex_color[3:5], 16), int(hex_color[5:7], 16)
    return f"rgba({r}, {g}, {b}, {alpha})"
