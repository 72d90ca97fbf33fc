"""HTTP client for the submission endpoint."""

from typing import Sequence

import pydantic
import requests

from .exceptions import TransportError
from .schema import ItemResult, RawRecord

_results_adapter = pydantic.TypeAdapter(list[ItemResult])


class SubmissionClient:
    """Posts scraped bookmarks to a running ``bookmark2vault serve``."""

    def __init__(self, base_url: str, timeout: float = 600.0, session=None):
        self.base_url = base_url.rstrip("/")
        # A batch is analyzed item by item on the server, so allow it time
        self._timeout = timeout
        self._session = session or requests.Session()

    def submit(self, bookmarks: Sequence[RawRecord]) -> list[ItemResult]:
        """Send one batch and return the per-item results.

        Raises TransportError if the server is unreachable, answers with an
        error status, or returns something that is not a result list.
        """
        url = f"{self.base_url}/api/bookmarks"
        payload = {"bookmarks": [b.to_wire() for b in bookmarks]}
        try:
            response = self._session.post(url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            raise TransportError(f"Could not reach {url}: {e}") from e

        if not response.ok:
            try:
                detail = response.json().get("error")
            except (ValueError, AttributeError):
                detail = None
            raise TransportError(detail or f"HTTP {response.status_code}")

        try:
            return _results_adapter.validate_python(response.json())
        except (ValueError, pydantic.ValidationError) as e:
            raise TransportError(f"Unexpected response from {url}: {e}") from e

    def health(self) -> bool:
        """True if the endpoint answers its health check."""
        try:
            response = self._session.get(f"{self.base_url}/health", timeout=5)
        except requests.RequestException:
            return False
        return response.ok
