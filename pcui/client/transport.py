"""
HTTP Transport Adapter.

Performs the REST and WebDAV calls issued by the resource clients.
Every call carries `Authorization: Bearer <token>`; only the token
exchange goes out without it.

`call()` never raises: network failures, non-2xx statuses and
unparseable bodies come back as a failed OperationResult whose message
reads "<command> failed. <<error>>".
"""

import json
from enum import Enum
from typing import Any

import httpx

from pcui.client.result import OperationResult
from pcui.core.config import get_app_config
from pcui.core.exceptions import (
    ApplicationError,
    MalformedResponseError,
    NotFoundError,
    TransportError,
)
from pcui.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpMethod(str, Enum):
    """Request kinds understood by the adapter."""

    GET = "GET"
    GET_FILE = "GET_FILE"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PROPFIND = "PROPFIND"


def _get_timeout() -> float:
    """Load the HTTP timeout from application.yaml."""
    return float(get_app_config().application.timeouts.http)


def _server_message(response: httpx.Response) -> str | None:
    """Extract the server's error text from an error body, if it has one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    message = body.get("message")
    if isinstance(message, dict):
        message = message.get("value")
    return message if isinstance(message, str) else None


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    text = f"{response.status_code} {response.reason_phrase}"
    detail = _server_message(response)
    if detail:
        text = f"{text}: {detail}"
    if response.status_code == 404:
        raise NotFoundError(text)
    raise TransportError(text, status_code=response.status_code)


def _pretty_json(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError as e:
        raise MalformedResponseError(f"Response is not JSON: {e}") from e
    return json.dumps(data, indent=2, ensure_ascii=False)


class TransportAdapter:
    """
    Synchronous HTTP client shared by the Cell and Box clients.

    Features:
    - Explicit proxy (environment proxies are not consulted by httpx itself)
    - Timeout from application.yaml
    - Structured logging of requests, responses and failures

    Usage:
        with TransportAdapter(proxy=get_proxy()) as transport:
            result = transport.call("ls", HttpMethod.GET, url, token=token)
    """

    def __init__(
        self,
        proxy: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            proxy: Proxy URL applied to all outbound calls.
            timeout: Request timeout in seconds. If None, reads application.yaml.
            transport: Alternative httpx transport (used by tests).
        """
        if timeout is None:
            try:
                timeout = _get_timeout()
            except (RuntimeError, FileNotFoundError, ValueError):
                timeout = DEFAULT_TIMEOUT

        self.proxy = proxy
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def __enter__(self) -> "TransportAdapter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=self.timeout,
                proxy=self.proxy,
                transport=self._transport,
                trust_env=False,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request, converting httpx errors into TransportError."""
        client = self._get_client()

        log_with_source(logger, "transport", "debug", "HTTP request", method=method, url=url)

        try:
            response = client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        log_with_source(
            logger,
            "transport",
            "debug",
            "HTTP response",
            method=method,
            url=url,
            status_code=response.status_code,
        )

        _raise_for_status(response)
        return response

    def exchange_token(self, url: str, form: dict[str, str]) -> dict[str, Any]:
        """
        POST form-encoded credentials and return the parsed JSON body.

        Sent without an Authorization header.

        Raises:
            TransportError: On network failure or non-2xx status
            MalformedResponseError: If the body is not a JSON object
        """
        response = self._send("POST", url, data=form, headers={"Accept": "application/json"})
        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Token response is not JSON: {e}") from e
        if not isinstance(body, dict):
            raise MalformedResponseError("Token response is not a JSON object")
        return body

    def call(
        self,
        command: str,
        method: HttpMethod,
        url: str,
        *,
        token: str,
        body: Any = None,
    ) -> OperationResult:
        """
        Perform one authenticated call and normalize its outcome.

        Args:
            command: Shell command name, used in failure messages
            method: Request kind
            url: Absolute target URL
            token: Bearer access token
            body: JSON-serializable payload for POST, bytes for PUT,
                XML text for PROPFIND

        Returns:
            OperationResult carrying the display text (and raw bytes for GET_FILE)
        """
        headers = {"Authorization": f"Bearer {token}"}

        try:
            if method is HttpMethod.GET:
                headers["Accept"] = "application/json"
                response = self._send("GET", url, headers=headers)
                return OperationResult.success(url, _pretty_json(response))

            if method is HttpMethod.GET_FILE:
                response = self._send("GET", url, headers=headers)
                return OperationResult.success(url, content=response.content)

            if method is HttpMethod.POST:
                headers["Accept"] = "application/json"
                response = self._send("POST", url, headers=headers, json=body)
                return OperationResult.success(url, _pretty_json(response))

            if method is HttpMethod.PUT:
                response = self._send("PUT", url, headers=headers, content=body or b"")
                return OperationResult.success(url, response.text)

            if method is HttpMethod.DELETE:
                headers["Accept"] = "application/json"
                self._send("DELETE", url, headers=headers)
                return OperationResult.success(url, "")

            if method is HttpMethod.PROPFIND:
                headers["Depth"] = "1"
                headers["Content-Type"] = "application/xml; charset=utf-8"
                response = self._send("PROPFIND", url, headers=headers, content=body or "")
                return OperationResult.success(url, response.text)

            raise ValueError(f"Unsupported method: {method}")

        except ApplicationError as e:
            log_with_source(
                logger,
                "transport",
                "warning",
                "HTTP call failed",
                command=command,
                method=method.value,
                url=url,
                error=e.message,
                code=e.code,
            )
            return OperationResult.failure(url, command, e.message)
