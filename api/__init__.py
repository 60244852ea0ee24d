"""
API Module - FastAPI Backend

This module provides the prediction data service the dashboard polls.
It stores model predictions and serves them in the dashboard's
envelope format.

Key Components:
- main.py: FastAPI application and root endpoints
- models.py: Pydantic schemas for request/response validation
- database.py: SQLAlchemy connection management
- routes/: API endpoint implementations

Endpoints:
- GET /data/: Recent predictions in the {status, data} envelope
- POST /data/: Ingest a batch of predictions
- GET /data/status: Severity tier per equipment
- POST /data/demo/setup: Seed synthetic predictions
"""

__version__ = "0.1.0"
