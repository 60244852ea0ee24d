"""
API Routes Module

This module contains the API endpoint implementations:
- data.py: Prediction data endpoints (polled by the dashboard)

All routers are combined in main.py to create the complete API.
"""

from .data import router as data_router

__all__ = [
    "data_router",
]
