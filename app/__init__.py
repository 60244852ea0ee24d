"""
Streamlit Dashboard Application

This module provides the web-based dashboard for the factory digital twin.

Components:
- dashboard.py: Main dashboard application
- components/: Reusable UI components
  - charts.py: Plotly chart components
  - scene.py: 3D factory layout
  - status.py: Legend, badges and machine cards

Features:
- Live equipment status with blinking alerts
- Last-known status restored on reload
- Per-machine operating environment charts
"""

__version__ = "0.1.0"
