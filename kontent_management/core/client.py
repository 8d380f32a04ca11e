"""
Core HTTP client for the Kontent.ai Management API.

Handles authentication headers, request/response, retries and error mapping.

Invariants:
    - Transient statuses and network faults are retried only for retry-safe requests
    - Exponential backoff with +/-25% jitter, bounded by RetryPolicy.max_attempts
    - Non-transient 4xx/5xx fail immediately as APIError
    - A 2xx body that cannot be parsed is MalformedResponseError, never a transport error
"""

import asyncio
import json
import logging
import os
import random
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx

from kontent_management.core.errors import (
    APIError,
    InvalidArgumentError,
    MalformedResponseError,
    OperationCancelledError,
    TransientTransportError,
)
from kontent_management.core.pagination import AsyncListing
from kontent_management.core.transport import DEFAULT_TIMEOUT, HttpxTransport, Transport
from kontent_management.core.types import ListingPage

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "https://manage.kontent.ai/v2"
CONTINUATION_HEADER = "x-continuation"
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE"})
NETWORK_ERRORS = (httpx.TransportError, ConnectionError, TimeoutError)

T = TypeVar("T")

HeadersProvider = Callable[[], Mapping[str, str]]


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently retry-safe requests are retried."""

    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 30.0
    transient_statuses: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise InvalidArgumentError("max_attempts must be at least 1", details={"argument": "max_attempts"})

    def backoff(self, attempt: int) -> float:
        """Exponential backoff with +/-25% jitter, in seconds."""
        delay = min(self.max_delay, (2**attempt) * self.base_delay)
        return delay * random.uniform(0.75, 1.25)  # nosec B311


@dataclass
class Request:
    """One logical API call."""

    method: str
    path: str
    data: Any = None
    retry_safe: bool | None = None
    headers: dict[str, str] = field(default_factory=dict)
    resource: str = ""
    identifier: str | None = None

    @property
    def is_retry_safe(self) -> bool:
        if self.retry_safe is not None:
            return self.retry_safe
        return self.method.upper() in IDEMPOTENT_METHODS

    def context(self) -> dict[str, Any]:
        """Error context attached to every failure raised for this request."""
        ctx: dict[str, Any] = {"method": self.method, "path": self.path}
        if self.resource:
            ctx["resource"] = self.resource
        if self.identifier is not None:
            ctx["identifier"] = self.identifier
        return ctx


def bearer_headers(api_key: str | None) -> HeadersProvider:
    """Header provider sending the Management API key as a bearer token."""

    def provide() -> Mapping[str, str]:
        if not api_key:
            raise InvalidArgumentError("KONTENT_MANAGEMENT_API_KEY environment variable not set")
        return {"Authorization": f"Bearer {api_key}"}

    return provide


def _api_error(status: int, body: str | None, context: dict[str, Any]) -> APIError:
    """Map an error response body onto APIError."""
    fallback = f"HTTP {status}"
    if not body:
        return APIError(fallback, status=status, details=context)
    try:
        error_data = json.loads(body)
    except json.JSONDecodeError:
        return APIError(fallback, status=status, details={**context, "body": body[:500]})
    if not isinstance(error_data, dict):
        return APIError(fallback, status=status, details=context)

    # Handle both {"code", "message", "details"} and the service's
    # {"error_code", "message", "request_id", "validation_errors"}
    code = error_data.get("code", error_data.get("error_code"))
    validation_errors = error_data.get("validation_errors") or []
    details = dict(context)
    if error_data.get("details") is not None:
        details["error_details"] = error_data["details"]
    return APIError(
        error_data.get("message") or fallback,
        status=status,
        error_code=code,
        request_id=error_data.get("request_id"),
        validation_errors=validation_errors,
        details=details,
    )


class APIClient:
    """
    Low-level async client for the Kontent.ai Management API.

    Handles:
    - Authentication via an injected header provider
    - Retry with backoff for transient failures
    - Error classification and response parsing
    - Pagination for list endpoints
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_policy: RetryPolicy | None = None,
        transport: Transport | None = None,
        headers_provider: HeadersProvider | None = None,
    ):
        """
        Initialize the API client.

        Args:
            api_key: Management API key (or KONTENT_MANAGEMENT_API_KEY env var)
            base_url: API base URL (or KONTENT_MANAGEMENT_BASE_URL env var)
            timeout: Request timeout in seconds for the default transport
            retry_policy: Retry policy for retry-safe requests
            transport: Transport to send requests with (httpx by default)
            headers_provider: Callable returning auth headers, consulted once per call

        """
        env_base_url = os.environ.get("KONTENT_MANAGEMENT_BASE_URL", DEFAULT_BASE_URL)
        self.base_url = (base_url or env_base_url).rstrip("/")
        self.retry_policy = retry_policy or RetryPolicy()
        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpxTransport(timeout=timeout)
        self._headers_provider = headers_provider or bearer_headers(
            api_key or os.environ.get("KONTENT_MANAGEMENT_API_KEY")
        )

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self.transport, HttpxTransport):
            await self.transport.aclose()

    def build_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    # =========================================================================
    # Execution
    # =========================================================================

    async def execute(
        self,
        request: Request,
        parser: Callable[[Any], T] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        """
        Execute a request, retrying transient failures when it is retry-safe.

        Args:
            request: The request to send
            parser: Optional function applied to the decoded JSON body
            cancel_event: Event that aborts the call (and pending retries) when set

        Returns:
            Parsed response, or None for an empty success body when no parser is given

        Raises:
            APIError: Non-retryable error status
            TransientTransportError: Retries exhausted (or request not retry-safe)
            MalformedResponseError: Success status with an unparseable body
            OperationCancelledError: cancel_event was set

        """
        context = request.context()
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            **self._headers_provider(),
            **request.headers,
        }
        body = json.dumps(request.data) if request.data is not None else None
        url = self.build_url(request.path)
        policy = self.retry_policy
        max_attempts = policy.max_attempts if request.is_retry_safe else 1

        attempt = 0
        while True:
            self._check_cancelled(cancel_event, context)
            attempt += 1
            last_status: int | None = None
            try:
                status, response_body = await self.transport.send(request.method, url, body, headers)
            except NETWORK_ERRORS as e:
                failure = f"Connection error: {e}"
            else:
                if 200 <= status < 300:
                    logger.debug(f"{request.method} {url} -> {status} (attempt {attempt})")
                    return self._parse(status, response_body, parser, context)
                if status not in policy.transient_statuses:
                    raise _api_error(status, response_body, {**context, "status": status})
                last_status = status
                failure = f"Transient status {status}"

            if attempt >= max_attempts:
                raise TransientTransportError(
                    f"{failure} after {attempt} attempt(s) for {request.method} {request.path}",
                    attempts=attempt,
                    status=last_status,
                    details=context,
                )

            delay = policy.backoff(attempt - 1)
            logger.warning(
                f"{failure} on {request.method} {request.path}, retry in {delay:.2f}s (attempt {attempt})",
            )
            await self._wait(delay, cancel_event, context)

    @staticmethod
    def _check_cancelled(cancel_event: asyncio.Event | None, context: dict[str, Any]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelledError("Operation cancelled", details=context)

    @staticmethod
    async def _wait(delay: float, cancel_event: asyncio.Event | None, context: dict[str, Any]) -> None:
        """Sleep before the next attempt, waking early if cancelled."""
        if cancel_event is None:
            await asyncio.sleep(delay)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        raise OperationCancelledError("Operation cancelled while waiting to retry", details=context)

    @staticmethod
    def _parse(
        status: int,
        body: str | None,
        parser: Callable[[Any], T] | None,
        context: dict[str, Any],
    ) -> Any:
        if not body:
            if parser is None:
                return None
            raise MalformedResponseError("Empty response body", status=status, body=body, details=context)
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Invalid JSON response: {e}", status=status, body=body, details=context)
        if parser is None:
            return data
        try:
            return parser(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedResponseError(
                f"Unexpected response shape: {e!r}",
                status=status,
                body=body,
                details=context,
            )

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    async def get(self, path: str, parser: Callable[[Any], T] | None = None, **kwargs: Any) -> Any:
        """Make a GET request."""
        return await self._send("GET", path, None, parser, **kwargs)

    async def post(self, path: str, data: Any = None, parser: Callable[[Any], T] | None = None, **kwargs: Any) -> Any:
        """Make a POST request. Not retried unless retry_safe=True."""
        return await self._send("POST", path, data, parser, **kwargs)

    async def put(self, path: str, data: Any = None, parser: Callable[[Any], T] | None = None, **kwargs: Any) -> Any:
        """Make a PUT request."""
        return await self._send("PUT", path, data, parser, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> None:
        """Make a DELETE request."""
        await self._send("DELETE", path, None, None, **kwargs)

    async def _send(
        self,
        method: str,
        path: str,
        data: Any,
        parser: Callable[[Any], T] | None,
        *,
        retry_safe: bool | None = None,
        resource: str = "",
        identifier: Any = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        request = Request(
            method=method,
            path=path,
            data=data,
            retry_safe=retry_safe,
            resource=resource,
            identifier=str(identifier) if identifier is not None else None,
        )
        return await self.execute(request, parser, cancel_event)

    # =========================================================================
    # Pagination
    # =========================================================================

    def paginate(
        self,
        path: str,
        parser: Callable[[dict[str, Any]], T],
        items_key: str = "items",
        resource: str = "",
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncListing[T]:
        """
        Lazily iterate through all pages of a listing endpoint.

        Args:
            path: API path
            parser: Function to parse each item
            items_key: Key of the items array in each page
            resource: Resource kind, for error context and logs
            cancel_event: Event that aborts the traversal when set

        Returns:
            AsyncListing yielding parsed items from all pages

        """

        async def fetch_page(continuation_token: str | None) -> ListingPage[T]:
            request = Request("GET", path, resource=resource)
            if continuation_token:
                request.headers[CONTINUATION_HEADER] = continuation_token
            return await self.execute(
                request,
                lambda data: ListingPage.from_dict(data, parser, items_key),
                cancel_event,
            )

        return AsyncListing(fetch_page, resource=resource, cancel_event=cancel_event)
