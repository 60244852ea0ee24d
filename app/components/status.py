"""
Status Legend, Badges and Machine Cards

Small HTML components for the factory layout view: the tier legend with
live counts, per-equipment status badges, machine cards, and the
stale-data banner.
"""

from typing import Dict, List, Optional, Tuple

import streamlit as st

from core.classifier import SeverityTier
from core.records import PredictionRecord

from .charts import TIER_COLORS


TIER_CONFIG = {
    "normal": {"emoji": "🟢", "label": "Normal"},
    "warning": {"emoji": "🟠", "label": "Warning"},
    "critical": {"emoji": "🔴", "label": "Critical"},
    "unknown": {"emoji": "⚪", "label": "No data"},
}


def _tier_key(tier: Optional[SeverityTier]) -> str:
    return tier.value if tier else "unknown"


def tier_badge_color(tier: Optional[SeverityTier]) -> str:
    return TIER_COLORS.get(_tier_key(tier), "#6B7280")


# =========================================
# Legend Component
# =========================================

def render_status_legend(counts: Dict[str, int]) -> None:
    """
    Render the tier legend with the number of equipment in each tier.

    Args:
        counts: {"normal": n, "warning": n, "critical": n}
    """
    items = []
    for key in ("normal", "warning", "critical"):
        color = TIER_COLORS[key]
        config = TIER_CONFIG[key]
        items.append(f"""
        <div style="
            display: flex;
            align-items: center;
            gap: 8px;
            padding: 6px 12px;
            background: {color}20;
            border: 1px solid {color}40;
            border-radius: 6px;
        ">
            <span style="
                width: 12px;
                height: 12px;
                border-radius: 50%;
                background: {color};
                display: inline-block;
            "></span>
            <span style="color: {color}; font-weight: 600;">{config['label']}</span>
            <span style="color: #F9FAFB; font-weight: bold;">{counts.get(key, 0)}</span>
        </div>
        """)

    legend_html = f"""
    <div style="display: flex; gap: 12px; flex-wrap: wrap; margin: 8px 0;">
        {''.join(items)}
    </div>
    """

    st.markdown(legend_html, unsafe_allow_html=True)


# =========================================
# Status Indicator Component
# =========================================

def render_status_indicator(
    tier: Optional[SeverityTier],
    message: str = "",
    size: str = "medium"
) -> None:
    """
    Render a severity badge.

    Args:
        tier: Severity tier (None renders "No data")
        message: Optional message to display instead of the tier label
        size: "small", "medium", or "large"
    """
    config = TIER_CONFIG[_tier_key(tier)]
    color = tier_badge_color(tier)

    sizes = {
        "small": {"font": "0.75rem", "padding": "2px 6px"},
        "medium": {"font": "0.875rem", "padding": "4px 10px"},
        "large": {"font": "1rem", "padding": "6px 14px"},
    }
    size_config = sizes.get(size, sizes["medium"])

    indicator_html = f"""
    <div style="
        display: inline-flex;
        align-items: center;
        gap: 6px;
        font-size: {size_config['font']};
        color: {color};
        background: {color}20;
        padding: {size_config['padding']};
        border-radius: 6px;
        border: 1px solid {color}40;
    ">
        <span>{config['emoji']}</span>
        <span>{message or config['label']}</span>
    </div>
    """

    st.markdown(indicator_html, unsafe_allow_html=True)


# =========================================
# Machine Card Component
# =========================================

def _format_optional(value: Optional[float], pattern: str) -> str:
    return pattern.format(value) if value is not None else "–"


def machine_card_rows(record: PredictionRecord) -> List[Tuple[str, str]]:
    """Label and formatted value for each reading shown on a machine card."""
    return [
        ("Vibration", f"{record.vibration:.2f} mm/s"),
        ("Temperature", f"{record.temperature:.1f} °C"),
        ("Noise", f"{record.noise_frequency:.0f} Hz"),
        ("Good parts", _format_optional(record.good_count, "{:d}")),
        ("Cycle time", _format_optional(record.cycle_time, "{:.1f} s")),
        ("Performance", _format_optional(record.performance, "{:.0%}")),
        ("OEE", _format_optional(record.oee, "{:.0%}")),
    ]


def render_machine_card(
    equipment: str,
    tier: Optional[SeverityTier],
    record: Optional[PredictionRecord] = None,
    last_known: bool = False
) -> None:
    """
    Render a card with an equipment's tier and its latest readings.

    Args:
        equipment: Equipment identifier
        tier: Current severity tier
        record: Latest prediction record for the equipment, if any
        last_known: True when the tier comes from the stored snapshot
    """
    color = tier_badge_color(tier)
    config = TIER_CONFIG[_tier_key(tier)]
    suffix = " (last known)" if last_known else ""

    if record is None:
        body = '<div style="color: #6B7280; font-size: 0.85rem;">No recent readings</div>'
    else:
        rows = machine_card_rows(record)
        body = "".join(
            f"""
            <div style="display: flex; justify-content: space-between; font-size: 0.85rem;">
                <span style="color: #9CA3AF;">{label}</span>
                <span style="color: #F9FAFB;">{value}</span>
            </div>
            """
            for label, value in rows
        )
        body += f"""
        <div style="color: #6B7280; font-size: 0.75rem; margin-top: 6px;">
            {record.timestamp.strftime('%d/%m %H:%M:%S')}
        </div>
        """

    card_html = f"""
    <div style="
        padding: 0.75rem 1rem;
        background: linear-gradient(135deg, rgba(31, 41, 55, 0.6), rgba(17, 24, 39, 0.8));
        border-radius: 10px;
        border: 1px solid #374151;
        border-top: 4px solid {color};
        margin-bottom: 0.75rem;
    ">
        <div style="
            display: flex;
            justify-content: space-between;
            align-items: center;
            margin-bottom: 0.5rem;
        ">
            <span style="color: #F9FAFB; font-weight: 600;">{equipment.replace('_', ' ')}</span>
            <span style="color: {color}; font-size: 0.8rem;">{config['emoji']} {config['label']}{suffix}</span>
        </div>
        {body}
    </div>
    """

    st.markdown(card_html, unsafe_allow_html=True)


# =========================================
# Alert Banner Component
# =========================================

def render_alert_banner(
    message: str,
    severity: str = "warning",
    icon: Optional[str] = None
) -> None:
    """
    Render an alert banner.

    Args:
        message: Alert message
        severity: "info", "warning", "error", or "success"
        icon: Optional custom icon
    """
    severity_config = {
        "info": {"color": "#3B82F6", "bg": "#1E3A5F", "icon": "ℹ️"},
        "warning": {"color": "#FBBF24", "bg": "#422006", "icon": "⚠️"},
        "error": {"color": "#EF4444", "bg": "#450A0A", "icon": "🚨"},
        "success": {"color": "#10B981", "bg": "#064E3B", "icon": "✅"},
    }

    config = severity_config.get(severity, severity_config["info"])
    display_icon = icon if icon else config["icon"]

    banner_html = f"""
    <div style="
        display: flex;
        align-items: center;
        gap: 12px;
        padding: 12px 16px;
        background: {config['bg']};
        border-left: 4px solid {config['color']};
        border-radius: 0 8px 8px 0;
        margin: 8px 0;
    ">
        <span style="font-size: 1.25rem;">{display_icon}</span>
        <span style="color: {config['color']}; font-size: 0.95rem;">{message}</span>
    </div>
    """

    st.markdown(banner_html, unsafe_allow_html=True)
