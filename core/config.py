"""
Dashboard Configuration

All settings come from environment variables so the same code runs
locally, in Docker, and on Streamlit Cloud.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class DashboardSettings:
    """
    Runtime settings for the poller, timers, and local store.

    Example:
        settings = DashboardSettings.from_env()
        print(settings.data_url)  # http://localhost:8000/data/
    """
    api_url: str = "http://localhost:8000"
    data_endpoint: str = "/data/"
    poll_interval_seconds: float = 10.0
    blink_interval_ms: int = 500
    request_timeout_seconds: float = 10.0
    state_dir: str = ".dashboard_state"
    offline_mode: bool = False

    @property
    def data_url(self) -> str:
        """Full URL of the prediction data endpoint."""
        return f"{self.api_url.rstrip('/')}/{self.data_endpoint.lstrip('/')}"

    @property
    def blink_interval_seconds(self) -> float:
        return self.blink_interval_ms / 1000.0

    @classmethod
    def from_env(cls) -> "DashboardSettings":
        """Build settings from environment variables."""
        return cls(
            api_url=os.getenv("API_URL", cls.api_url),
            data_endpoint=os.getenv("DATA_ENDPOINT", cls.data_endpoint),
            poll_interval_seconds=float(
                os.getenv("POLL_INTERVAL_SECONDS", cls.poll_interval_seconds)
            ),
            blink_interval_ms=int(os.getenv("BLINK_INTERVAL_MS", cls.blink_interval_ms)),
            request_timeout_seconds=float(
                os.getenv("REQUEST_TIMEOUT_SECONDS", cls.request_timeout_seconds)
            ),
            state_dir=os.getenv("STATE_DIR", cls.state_dir),
            offline_mode=_env_bool("OFFLINE_MODE"),
        )
