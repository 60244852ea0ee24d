"""
Factory Digital Twin - Streamlit Dashboard

Main dashboard application for watching equipment status on the
factory floor and browsing each machine's operating environment.

Features:
- 3D factory layout with per-equipment status markers
- Blinking markers for warning and critical equipment
- Last-known status restored on reload, before any network call
- Per-machine sensor charts with date range and rolling window
- Offline mode with locally generated predictions

Run with: streamlit run app/dashboard.py
"""

import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import requests
import streamlit as st
from streamlit_autorefresh import st_autorefresh

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.components import (
    create_factory_scene,
    create_machine_chart,
    create_status_summary_chart,
    render_alert_banner,
    render_machine_card,
    render_status_indicator,
    render_status_legend,
)
from core.aggregator import latest_by_equipment
from core.classifier import TierSource
from core.config import DashboardSettings
from core.controller import DashboardController
from core.layout import equipment_ids, machine_names
from core.poller import DataPoller
from core.records import records_from_rows
from core.store import KeyValueStore
from core.timeseries import (
    DisplayOption,
    SENSOR_SERIES,
    SERIES_LABELS,
    filter_machine_frame,
    rows_to_frame,
    visible_series,
)
from engine.generator import LocalPredictionSource


# =========================================
# Configuration
# =========================================

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

SETTINGS = DashboardSettings.from_env()

PAGE_CSS = """
<style>
    .main .block-container {
        padding-top: 2rem;
        padding-bottom: 2rem;
    }

    [data-testid="stSidebar"] {
        background: linear-gradient(180deg, #1F2937 0%, #111827 100%);
    }

    .stTabs [data-baseweb="tab-list"] {
        gap: 8px;
    }

    .stTabs [data-baseweb="tab"] {
        background: rgba(31, 41, 55, 0.6);
        border-radius: 8px;
        padding: 10px 20px;
    }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
"""


def setup_page():
    """Page configuration and custom CSS; must run first on every rerun."""
    st.set_page_config(
        page_title="Factory Digital Twin",
        page_icon="🏭",
        layout="wide",
        initial_sidebar_state="expanded"
    )
    st.markdown(PAGE_CSS, unsafe_allow_html=True)


# =========================================
# API Helper Functions
# =========================================

def post_api(endpoint: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    """POST to API."""
    try:
        response = requests.post(
            f"{SETTINGS.api_url.rstrip('/')}{endpoint}",
            params=params,
            timeout=30
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"API Error: {e}")
        return None


@st.cache_data(ttl=30)
def check_api_health() -> bool:
    """Check if API is available."""
    try:
        response = requests.get(f"{SETTINGS.api_url.rstrip('/')}/health", timeout=5)
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False


# =========================================
# Controller
# =========================================

def build_controller(settings: DashboardSettings) -> DashboardController:
    """Create and mount the controller for this browser session."""
    store = KeyValueStore(settings.state_dir)

    if settings.offline_mode:
        source = LocalPredictionSource()
        on_close = None
        logger.info("Offline mode: using locally generated predictions")
    else:
        poller = DataPoller(settings.data_url, timeout=settings.request_timeout_seconds)
        source = poller.fetch
        on_close = poller.close
        logger.info(f"Polling {settings.data_url} every {settings.poll_interval_seconds}s")

    controller = DashboardController(
        source,
        store,
        poll_interval_seconds=settings.poll_interval_seconds,
        blink_interval_seconds=settings.blink_interval_seconds,
        on_close=on_close,
    )
    controller.mount()
    return controller


def get_controller() -> DashboardController:
    if "controller" not in st.session_state:
        st.session_state.controller = build_controller(SETTINGS)
    return st.session_state.controller


def _parse_date(value: str) -> Optional[date]:
    if not value:
        return None
    try:
        return pd.Timestamp(value).date()
    except (ValueError, TypeError):
        return None


def _start_bound(value: Optional[date]) -> str:
    return value.isoformat() if value else ""


def _end_bound(value: Optional[date]) -> str:
    # Inclusive of the whole selected day
    return f"{value.isoformat()}T23:59:59" if value else ""


# =========================================
# Sidebar
# =========================================

def render_sidebar(controller: DashboardController) -> str:
    """Render the sidebar with controls. Returns the selected page."""
    with st.sidebar:
        st.markdown("## 🏭 Factory Digital Twin")
        st.markdown("---")

        # Data source status
        if SETTINGS.offline_mode:
            st.info("💻 Offline mode (local predictions)")
        elif check_api_health():
            st.success("🟢 API Connected")
        else:
            st.error("🔴 API Disconnected")
            st.info(f"API URL: {SETTINGS.api_url}")

        state = controller.state
        if state.last_success_at:
            last = pd.Timestamp(state.last_success_at, unit="s", tz="UTC")
            st.caption(f"Last update: {last.strftime('%H:%M:%S')} UTC")
        st.caption(f"Polling every {SETTINGS.poll_interval_seconds:g}s")

        if st.button("🔄 Refresh now", use_container_width=True):
            controller.poll_once()

        if not SETTINGS.offline_mode:
            with st.expander("🌱 Demo data"):
                hours = st.slider("Hours of history", 1, 168, 24)
                reset = st.checkbox("Replace existing predictions", value=False)
                if st.button("Seed demo predictions", use_container_width=True):
                    result = post_api("/data/demo/setup", {"hours": hours, "reset": reset})
                    if result:
                        st.success(result.get("message", "Seeded"))
                        controller.poll_once()

        st.markdown("---")
        st.subheader("📅 Date Range")
        st.caption("Applies to machines without their own range")
        start = st.date_input(
            "Start date", value=_parse_date(state.start_date), key="global-start"
        )
        end = st.date_input(
            "End date", value=_parse_date(state.end_date), key="global-end"
        )
        start_bound, end_bound = _start_bound(start), _end_bound(end)
        if (start_bound, end_bound) != (state.start_date, state.end_date):
            state.set_date_range(start_bound, end_bound, store=controller.store)

        st.markdown("---")
        st.subheader("📍 Navigation")
        return st.radio(
            "Go to",
            ["🏭 Factory Layout", "📈 Operating Environment", "ℹ️ About"],
            label_visibility="collapsed"
        )


# =========================================
# Factory Layout Page
# =========================================

def render_layout_page(controller: DashboardController):
    """Render the 3D factory layout with live equipment status."""
    st.title("🏭 Factory Layout")

    state = controller.state
    result = state.result

    if state.last_error is not None:
        render_alert_banner(
            f"Could not refresh data ({state.last_error.kind}): {state.last_error.message}. "
            "Showing the last known status.",
            severity="error"
        )
    elif state.restored:
        render_alert_banner("Showing the last known status while waiting for data.", "info")
    elif controller.is_stale():
        render_alert_banner("Data may be out of date.", "warning")

    render_status_legend(result.counts)

    col1, col2 = st.columns([3, 1])
    with col1:
        fig = create_factory_scene(result, controller.visibility())
        st.plotly_chart(fig, use_container_width=True, key="factory-scene")
    with col2:
        st.plotly_chart(
            create_status_summary_chart(result.counts),
            use_container_width=True,
            key="status-summary"
        )
        alerting = result.alerting()
        if alerting:
            st.markdown("**⚠️ Needs attention**")
            for name in alerting:
                render_status_indicator(result.tiers[name], name.replace("_", " "), size="small")

    st.markdown("---")
    st.subheader("🔧 Equipment")

    latest = latest_by_equipment(records_from_rows(state.chart_rows))
    for machine in machine_names():
        st.markdown(f"**{machine.replace('_', ' ')}**")
        members = [name for name in equipment_ids() if name.startswith(f"{machine}_")]
        cols = st.columns(len(members))
        for col, name in zip(cols, members):
            with col:
                render_machine_card(
                    name,
                    result.tiers.get(name),
                    latest.get(name),
                    last_known=result.sources.get(name) is TierSource.SNAPSHOT,
                )


# =========================================
# Operating Environment Page
# =========================================

def render_machine_controls(controller: DashboardController, machine: str):
    """Per-machine date range, rolling window and series selection."""
    state = controller.state
    bounds = state.filters.get(machine, {"startDate": "", "endDate": ""})
    options = [option.value for option in DisplayOption]

    col1, col2, col3 = st.columns(3)
    with col1:
        start = st.date_input(
            "Start date", value=_parse_date(bounds.get("startDate", "")), key=f"{machine}-start"
        )
    with col2:
        end = st.date_input(
            "End date", value=_parse_date(bounds.get("endDate", "")), key=f"{machine}-end"
        )
    with col3:
        option = st.selectbox(
            "Display",
            options,
            index=options.index(state.display_option_for(machine)),
            format_func=str.title,
            key=f"{machine}-option"
        )

    series = st.multiselect(
        "Series",
        SENSOR_SERIES,
        default=visible_series(state.display_modes, machine),
        format_func=lambda name: SERIES_LABELS[name],
        key=f"{machine}-series"
    )

    if _start_bound(start) != bounds.get("startDate", ""):
        state.set_filter(machine, "startDate", _start_bound(start), store=controller.store)
    if _end_bound(end) != bounds.get("endDate", ""):
        state.set_filter(machine, "endDate", _end_bound(end), store=controller.store)
    if option != state.display_option_for(machine):
        state.set_display_option(machine, option, store=controller.store)
    if series != visible_series(state.display_modes, machine):
        state.set_display_mode(machine, series, store=controller.store)


def render_environment_page(controller: DashboardController):
    """Render one sensor chart per machine."""
    st.title("📈 Operating Environment")

    state = controller.state
    frame = rows_to_frame(state.chart_rows)
    if frame.empty:
        st.info("No readings yet. Charts appear after the first successful poll.")

    tabs = st.tabs([machine.replace("_", " ") for machine in machine_names()])
    for tab, machine in zip(tabs, machine_names()):
        with tab:
            render_machine_controls(controller, machine)
            machine_frame = filter_machine_frame(
                frame,
                machine,
                filters=state.filters.get(machine),
                display_option=state.display_option_for(machine),
                global_start=state.start_date,
                global_end=state.end_date,
            )
            fig = create_machine_chart(
                machine_frame,
                machine,
                display_option=state.display_option_for(machine),
                series=visible_series(state.display_modes, machine),
            )
            st.plotly_chart(fig, use_container_width=True, key=f"{machine}-chart")
            st.caption(f"{len(machine_frame)} readings in range")


# =========================================
# About Page
# =========================================

def render_about_page():
    """Render the about page."""
    st.title("ℹ️ About")

    st.markdown("""
    ## Factory Digital Twin

    A live view of the factory floor driven by a predictive maintenance model.

    ### 🚦 Status Rules

    Every poll groups the model's predictions by equipment. The share of
    **critical** predictions decides the tier:

    | Critical share | Tier |
    |----------------|------|
    | more than 50% | 🔴 Critical |
    | more than 30% | 🟠 Warning |
    | otherwise | 🟢 Normal |

    Equipment missing from the latest poll keeps its **last known** status,
    taken from the first stored prediction for it. Warning and critical
    markers blink.

    ### 💾 Saved Locally

    The last known status, the latest readings, and every chart setting
    are saved so a reload shows the same view before the first poll.

    ### 🛠️ Technology Stack

    - **Backend**: FastAPI + SQLAlchemy
    - **Frontend**: Streamlit + Plotly
    """)


# =========================================
# Main Application
# =========================================

def main():
    """Main application entry point."""
    setup_page()
    st_autorefresh(interval=SETTINGS.blink_interval_ms, key="dashboard-refresh")

    controller = get_controller()
    controller.tick()

    page = render_sidebar(controller)

    if page == "🏭 Factory Layout":
        render_layout_page(controller)
    elif page == "📈 Operating Environment":
        render_environment_page(controller)
    elif page == "ℹ️ About":
        render_about_page()


if __name__ == "__main__":
    main()
