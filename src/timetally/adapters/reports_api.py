"""HTTP client for the time-tracking web app's report endpoint.

Fetches ``GET /api/reports/entries?from=YYYY-MM-DD&to=YYYY-MM-DD``. The
server scopes entries to the authenticated user and orders them most recent
first.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx

from ..core.entries import TimeEntry, entries_from_payload
from ..core.time import to_iso_date
from ..core.validation import validate_entries_document
from ..observability import get_logger

__all__ = ["ApiError", "ReportsApiClient"]

log = get_logger("api")

REPORT_ENTRIES_PATH = "/api/reports/entries"


class ApiError(Exception):
    """Non-2xx response or transport failure.

    ``status`` is 0 when no response was received. ``errors`` lists
    payload validation failures.
    """

    def __init__(self, status: int, message: str, details: Any = None, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details
        self.errors = errors or []

    def __str__(self) -> str:
        if self.status:
            return f"{self.message} (HTTP {self.status})"
        return self.message


def _read_error(response: httpx.Response) -> ApiError:
    """Build an ApiError, preferring the JSON ``error`` or ``message`` field."""
    status = response.status_code
    message = f"Request failed: {status}"
    details: Any = None

    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            details = response.json()
        except ValueError:
            details = None
        if isinstance(details, dict) and isinstance(details.get("error"), str):
            message = details["error"]
        elif isinstance(details, dict) and isinstance(details.get("message"), str):
            message = details["message"]
        elif details is not None:
            message = str(details)
    elif response.text:
        message = response.text

    return ApiError(status, message, details)


class ReportsApiClient:
    """Entry source that reads from the web app.

    Parameters
    ----------
    base_url
        Web app base URL (e.g. "http://localhost:3000")
    timeout
        Request timeout in seconds
    token
        Optional bearer token
    headers
        Extra request headers
    transport
        Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        token: str | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token
        self.headers = dict(headers or {})
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json", **self.headers}
        if self.token:
            headers["authorization"] = f"Bearer {self.token}"
        return headers

    def get_report_entries(self, from_iso: str, to_iso: str) -> list[TimeEntry]:
        """Fetch entries for ``[from_iso, to_iso)`` local calendar dates.

        Raises
        ------
        ApiError
            On non-2xx responses, timeouts or connection failures, or when
            the payload does not match the entries schema
        """
        url = f"{self.base_url}{REPORT_ENTRIES_PATH}"
        params = {"from": from_iso, "to": to_iso}

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(url, params=params, headers=self._headers())
        except httpx.TimeoutException as exc:
            raise ApiError(0, f"Request to {url} timed out after {self.timeout}s") from exc
        except httpx.ConnectError as exc:
            raise ApiError(0, f"Web app not available at {self.base_url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ApiError(0, f"HTTP error: {exc}") from exc

        if not response.is_success:
            raise _read_error(response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(response.status_code, "Expected a JSON response", response.text) from exc

        result = validate_entries_document(payload)
        if not result.valid:
            log.warning("Invalid entries payload", url=url, errors=result.errors)
            raise ApiError(response.status_code, "Invalid entries payload", payload, errors=result.errors)

        entries = entries_from_payload(payload)
        log.debug("Fetched report entries", url=url, params=params, count=len(entries))
        return entries

    def list_entries(self, start: datetime, end_exclusive: datetime) -> list[TimeEntry]:
        """Entry source interface: window bounds are local midnights."""
        return self.get_report_entries(to_iso_date(start), to_iso_date(end_exclusive))
