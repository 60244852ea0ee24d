"""
Tests for the Data Poller

A stub session stands in for requests.Session so no network is used.

Run with: pytest tests/test_poller.py -v
"""

import pytest
import requests
from core.errors import NetworkFailure, ParseFailure
from core.poller import DataPoller


URL = "http://localhost:8000/data/"

VALID_PAYLOAD = {
    "status": "success",
    "data": [
        {
            "equipment": "Machine_1_Equipment_1",
            "prediction": 1,
            "timestamp": "2024-05-01T08:00:00Z",
            "vibration": 4.2,
            "temperature": 51.0,
            "noise_frequency": 140.0,
        }
    ],
}


class StubResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class StubSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


class TestDataPoller:
    """Test one poll."""

    def test_fetch_success(self):
        """Test a valid envelope yields records."""
        session = StubSession(StubResponse(VALID_PAYLOAD))
        poller = DataPoller(URL, timeout=3.0, session=session)

        records = poller.fetch()

        assert len(records) == 1
        assert records[0].equipment == "Machine_1_Equipment_1"
        assert session.calls == [(URL, 3.0)]

    def test_connection_error(self):
        """Test a refused connection is a network failure."""
        session = StubSession(error=requests.exceptions.ConnectionError("refused"))
        poller = DataPoller(URL, session=session)

        with pytest.raises(NetworkFailure) as exc_info:
            poller.fetch()

        assert exc_info.value.url == URL

    def test_timeout(self):
        """Test a timeout is a network failure."""
        session = StubSession(error=requests.exceptions.Timeout("read timed out"))

        with pytest.raises(NetworkFailure):
            DataPoller(URL, session=session).fetch()

    def test_http_error_status(self):
        """Test a non-2xx status is a network failure."""
        session = StubSession(StubResponse(VALID_PAYLOAD, status_code=503))

        with pytest.raises(NetworkFailure):
            DataPoller(URL, session=session).fetch()

    def test_invalid_json(self):
        """Test a non-JSON body is a parse failure."""
        session = StubSession(StubResponse(invalid_json=True))

        with pytest.raises(ParseFailure):
            DataPoller(URL, session=session).fetch()

    def test_schema_mismatch(self):
        """Test a JSON body with the wrong shape is a parse failure."""
        session = StubSession(StubResponse({"status": "success", "data": [{"equipment": "x"}]}))

        with pytest.raises(ParseFailure):
            DataPoller(URL, session=session).fetch()

    def test_close(self):
        """Test close releases the session."""
        session = StubSession()
        DataPoller(URL, session=session).close()

        assert session.closed
