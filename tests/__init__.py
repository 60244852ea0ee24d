"""
Test Suite for the Factory Digital Twin

This module contains tests for:
- Record parsing and status aggregation (test_records.py, test_aggregator.py)
- Severity classification (test_classifier.py)
- Local persistence and dashboard state (test_store.py, test_state.py)
- Polling, timers and the controller (test_poller.py, test_scheduler.py, test_controller.py)
- Operating environment series (test_timeseries.py)
- Synthetic data (test_generator.py)
- API endpoints (test_api.py)

Run tests with:
    pytest tests/ -v
    pytest tests/ --cov=core --cov=api
"""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
