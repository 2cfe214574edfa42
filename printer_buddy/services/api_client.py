"""
HTTP client for the printer catalog backend.

This is the only module that performs network I/O. Every call either returns
decoded schema objects or raises a GatewayError subclass:

    GatewayError
    ├── NetworkError      - DNS, refused connection, timeout
    │   └── HTTPStatusError - backend answered with a non-2xx status
    └── DecodeError       - body is not JSON or not the expected shape

Usage:
    from printer_buddy.services.api_client import PrinterAPIClient

    client = PrinterAPIClient()
    results = client.post_recommendation_request(answers)
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

import requests

from printer_buddy.config.manager import config_manager
from printer_buddy.schemas.catalog import (
    Material,
    MaterialFilters,
    MaterialSummary,
    Printer,
    PrinterFilters,
    PrinterSummary,
    PrintIssue,
    PrintIssueSummary,
    TroubleshootingFilters,
)
from printer_buddy.schemas.quiz import QuizAnswers, RecommendationResult
from printer_buddy.utils.logger import log

T = TypeVar("T")


class GatewayError(Exception):
    """Base class for failures talking to the backend."""

    def __init__(self, endpoint: str, message: str, details: Optional[str] = None):
        self.endpoint = endpoint
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class NetworkError(GatewayError):
    """The request did not complete: DNS failure, refused connection, timeout."""


class HTTPStatusError(NetworkError):
    """The backend answered with a non-2xx status."""

    def __init__(self, endpoint: str, status_code: int, details: Optional[str] = None):
        self.status_code = status_code
        super().__init__(
            endpoint,
            f"Server returned HTTP {status_code}",
            details=details,
        )


class DecodeError(GatewayError):
    """The response body could not be decoded into the expected shape."""


class PrinterAPIClient:
    """
    Blocking client for the catalog backend.

    Callers that must not block (the quiz orchestrator, UI views) run these
    methods on a worker thread.
    """

    RECOMMEND_PATH = "/printers/recommend"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
    ):
        """
        Args:
            base_url: Backend root URL. Defaults to ``api.base_url`` from config
            timeout: Request timeout in seconds. Defaults to ``api.timeout_seconds``
            token: Bearer token. Defaults to the token stored in the OS keyring
        """
        self.base_url = (base_url or config_manager.get_api_base_url()).rstrip("/")
        self.timeout = timeout if timeout is not None else config_manager.get_api_timeout()
        self._token = token

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._token if self._token is not None else config_manager.get_api_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Sequence[Tuple[str, str]]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform a request and return the decoded JSON body."""
        url = self._url(path)
        log.debug(f"{method} {url} params={list(params or [])}")

        try:
            if method == "POST":
                response = requests.post(
                    url, json=payload, headers=self._headers(), timeout=self.timeout
                )
            else:
                response = requests.get(
                    url, params=params or None, headers=self._headers(), timeout=self.timeout
                )
        except requests.Timeout as e:
            log.warning(f"{method} {path} timed out after {self.timeout}s")
            raise NetworkError(path, f"Request timed out after {self.timeout:g}s", str(e)) from e
        except requests.ConnectionError as e:
            log.warning(f"{method} {path} could not connect: {e}")
            raise NetworkError(path, f"Could not connect to {self.base_url}", str(e)) from e
        except requests.RequestException as e:
            log.warning(f"{method} {path} failed: {e}")
            raise NetworkError(path, f"Request failed: {e}", str(e)) from e

        if not 200 <= response.status_code < 300:
            log.warning(f"{method} {path} returned HTTP {response.status_code}")
            raise HTTPStatusError(path, response.status_code, details=response.text[:200])

        try:
            return response.json()
        except ValueError as e:
            log.warning(f"{method} {path} returned a non-JSON body")
            raise DecodeError(path, "Response was not valid JSON", str(e)) from e

    def _decode(self, path: str, body: Any, parse: Callable[[Any], T]) -> T:
        try:
            return parse(body)
        except (KeyError, TypeError, ValueError) as e:
            log.warning(f"Unexpected response shape from {path}: {e}")
            raise DecodeError(path, f"Unexpected response format: {e}", str(e)) from e

    def _decode_list(self, path: str, body: Any, parse: Callable[[Any], T]) -> List[T]:
        if not isinstance(body, list):
            raise DecodeError(
                path, f"Unexpected response format: expected a list, got {type(body).__name__}"
            )
        return self._decode(path, body, lambda items: [parse(item) for item in items])

    # =========================================================================
    # Recommendations
    # =========================================================================

    def post_recommendation_request(self, answers: QuizAnswers) -> List[RecommendationResult]:
        """
        Ask the backend to score printers against the quiz answers.

        Raises:
            ValueError: If the answers are incomplete (no request is sent)
            GatewayError: On transport, status or decoding failure
        """
        payload = answers.to_payload()
        body = self._request("POST", self.RECOMMEND_PATH, payload=payload)
        results = self._decode_list(self.RECOMMEND_PATH, body, RecommendationResult.from_dict)
        log.info(f"Received {len(results)} recommendations")
        return results

    # =========================================================================
    # Catalog
    # =========================================================================

    def check_health(self) -> str:
        """Return the backend's reported status string (e.g. "healthy")."""
        body = self._request("GET", "/health")
        return self._decode("/health", body, lambda b: str(b["status"]))

    def fetch_printers(self, filters: Optional[PrinterFilters] = None) -> List[PrinterSummary]:
        filters = filters or PrinterFilters()
        body = self._request("GET", "/printers", params=filters.to_params())
        return self._decode_list("/printers", body, PrinterSummary.from_dict)

    def fetch_printer(self, printer_id: int) -> Printer:
        path = f"/printers/{printer_id}"
        return self._decode(path, self._request("GET", path), Printer.from_dict)

    def fetch_materials(self, filters: Optional[MaterialFilters] = None) -> List[MaterialSummary]:
        filters = filters or MaterialFilters()
        body = self._request("GET", "/materials", params=filters.to_params())
        return self._decode_list("/materials", body, MaterialSummary.from_dict)

    def fetch_material(self, material_id: int) -> Material:
        path = f"/materials/{material_id}"
        return self._decode(path, self._request("GET", path), Material.from_dict)

    def fetch_troubleshooting(
        self, filters: Optional[TroubleshootingFilters] = None
    ) -> List[PrintIssueSummary]:
        filters = filters or TroubleshootingFilters()
        body = self._request("GET", "/troubleshooting", params=filters.to_params())
        return self._decode_list("/troubleshooting", body, PrintIssueSummary.from_dict)

    def fetch_troubleshooting_issue(self, issue_id: int) -> PrintIssue:
        path = f"/troubleshooting/{issue_id}"
        return self._decode(path, self._request("GET", path), PrintIssue.from_dict)
