"""
Factory Digital Twin - Streamlit Cloud Version

Standalone entry point that runs the dashboard without the data API:
predictions are generated locally on every poll.

Run with: streamlit run streamlit_app.py
"""

import os

# Must be set before the dashboard reads its settings
os.environ.setdefault("OFFLINE_MODE", "true")

from app.dashboard import main  # noqa: E402

main()
