"""
Record Store Client

HTTP client for the source-of-record REST API. Reads records with GET and
writes results back with POST (PUT/PATCH also available).

Transient failures are retried a bounded number of times inside the client
(POST only when the request cannot have been processed); callers only ever
see a single FetchError or WriteError.
"""

import time
import logging
from typing import Any, Dict, Optional, Type

import httpx

from .errors import FetchError, WriteError, RecordStoreError

logger = logging.getLogger("enricher.common.record_store")

RETRYABLE_STATUS = {502, 503, 504}

# POST is not idempotent: only retried when the request never reached the
# server (connection failures) or the server refused it outright (503).
NON_IDEMPOTENT_METHODS = {"POST"}
UNSENT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class RecordStoreClient:
    """
    Thin wrapper around httpx.Client for the record store.

    Usage:
        with RecordStoreClient(base_url="https://api.example.com", api_key="...") as store:
            record = store.fetch("/data")
            ack = store.write("/data", {"data4": "..."})
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        max_retries: int = 2,
        backoff: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize record store client.

        Args:
            base_url: API base URL; endpoints are resolved against it
            api_key: Optional bearer token
            timeout: Per-request timeout in seconds
            max_retries: Extra attempts after a transient failure
            backoff: Seconds to wait per attempt number between retries
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self.base_url = base_url
        self.max_retries = max(0, max_retries)
        self.backoff = backoff
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_config(cls, store_config) -> "RecordStoreClient":
        """Build a client from a RecordStoreConfig."""
        return cls(
            base_url=store_config.base_url,
            api_key=store_config.api_key or None,
            timeout=store_config.timeout,
            max_retries=store_config.max_retries,
        )

    def fetch(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a record. Raises FetchError."""
        logger.info("Fetching data from: %s", endpoint)
        data = self._request("GET", endpoint, FetchError, params=params)
        logger.debug("Data received: %s", data)
        return data

    def write(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        """POST a payload back. Raises WriteError."""
        logger.info("Posting data to: %s", endpoint)
        ack = self._request("POST", endpoint, WriteError, json=payload)
        logger.debug("Post acknowledged: %s", ack)
        return ack

    def update(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        """PUT a full replacement. Raises WriteError."""
        logger.info("Updating data at: %s", endpoint)
        return self._request("PUT", endpoint, WriteError, json=payload)

    def patch(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        """PATCH a partial update. Raises WriteError."""
        logger.info("Patching data at: %s", endpoint)
        return self._request("PATCH", endpoint, WriteError, json=payload)

    def _request(
        self,
        method: str,
        endpoint: str,
        error_cls: Type[RecordStoreError],
        **kwargs: Any,
    ) -> Any:
        verb = "fetch" if error_cls is FetchError else "write"
        idempotent = method not in NON_IDEMPOTENT_METHODS
        attempt = 0
        while True:
            try:
                response = self._client.request(method, endpoint, **kwargs)
                response.raise_for_status()
                return _response_body(response)
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                retryable = status in RETRYABLE_STATUS if idempotent else status == 503
                if retryable and attempt < self.max_retries:
                    attempt += 1
                    logger.warning("%s %s returned %d, retrying (%d/%d)",
                                   method, endpoint, status, attempt, self.max_retries)
                    time.sleep(self.backoff * attempt)
                    continue
                logger.error("API %s failed: %s %s -> %d", verb, method, endpoint, status)
                raise error_cls(
                    f"API {verb} failed: HTTP {status}",
                    status=status,
                    body=_response_body(e.response),
                ) from e
            except httpx.TransportError as e:
                retryable = idempotent or isinstance(e, UNSENT_ERRORS)
                if retryable and attempt < self.max_retries:
                    attempt += 1
                    logger.warning("%s %s transport error (%s), retrying (%d/%d)",
                                   method, endpoint, e, attempt, self.max_retries)
                    time.sleep(self.backoff * attempt)
                    continue
                logger.error("API %s failed: %s %s -> %s", verb, method, endpoint, e)
                raise error_cls(f"API {verb} failed: {e}") from e
            except httpx.RequestError as e:
                # undecodable body, redirect loop
                logger.error("API %s failed: %s %s -> %s", verb, method, endpoint, e)
                raise error_cls(f"API {verb} failed: {e}") from e
            except (httpx.InvalidURL, TypeError) as e:
                # Malformed URL or a body that is not JSON-serializable
                raise error_cls(f"API {verb} failed: {e}") from e

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RecordStoreClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
