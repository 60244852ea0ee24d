"""
Data Poller

Fetches the prediction envelope from the prediction service and turns
it into validated records. One call is one poll; scheduling lives in
the controller. Failures are raised as NetworkFailure or ParseFailure
and never retried here, because the next poll tick is the retry.
"""

import logging
from typing import List, Optional

import requests

from .errors import NetworkFailure, ParseFailure
from .records import PredictionRecord, parse_envelope

logger = logging.getLogger(__name__)


class DataPoller:
    """
    HTTP client for the prediction data endpoint.

    Example:
        poller = DataPoller("http://localhost:8000/data/")
        records = poller.fetch()
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        """
        Args:
            url: Full URL of the data endpoint
            timeout: Request timeout in seconds
            session: Optional session (a stub can be injected in tests)
        """
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self) -> List[PredictionRecord]:
        """
        Perform one GET and return the validated records.

        Raises:
            NetworkFailure: Connection error, timeout, or non-2xx status
            ParseFailure: Body is not JSON or fails schema validation
        """
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise NetworkFailure(f"Request to prediction service failed: {e}", url=self.url) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseFailure(f"Response body is not valid JSON: {e}", url=self.url) from e

        records = parse_envelope(payload, url=self.url)
        logger.debug(f"Fetched {len(records)} prediction records from {self.url}")
        return records

    def close(self) -> None:
        """Close the underlying session, aborting pooled connections."""
        self.session.close()
