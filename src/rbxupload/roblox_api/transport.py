"""HTTP transport shared by both upload protocols.

:class:`ApiTransport` owns the single ``httpx.Client`` used for an upload
invocation and handles one request at a time:

1. Send the request (redirects are never followed, so a session cookie
   cannot be dropped or leaked by a cross-host redirect).
2. Record request count and latency metrics.
3. Emit a redacted debug dump when ``debug_dump_payload`` is enabled.
4. Convert any ``httpx`` failure into :class:`TransportError`.

Status handling is left to the protocol that issued the request, because
the two flows interpret ``403`` and ``400`` differently.  The transport
never retries.
"""

from __future__ import annotations

import json as _json
import sys
import time
from typing import Any

import httpx

from rbxupload.config import UploaderConfig
from rbxupload.errors import InvalidHeaderError, TransportError
from rbxupload.observability import NoopMetricsHook, get_logger
from rbxupload.utils.redact import redact
from rbxupload.utils.secret import SecretString

log = get_logger("rbxupload.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def header_value(secret: SecretString, header: str) -> str:
    """Unwrap *secret* for use as the value of *header*.

    Raises
    ------
    InvalidHeaderError
        If the secret is not a valid header value.
    """
    return check_header_value(secret.expose_secret(), header)


def check_header_value(value: str, header: str) -> str:
    """Return *value* if it may be sent as *header*.

    Only visible ASCII characters and spaces are allowed.

    Raises
    ------
    InvalidHeaderError
        If *value* is empty or contains a disallowed character.  The
        error never includes the value itself.
    """
    if not value or any(not (0x20 <= ord(ch) <= 0x7E) for ch in value):
        raise InvalidHeaderError(
            message=f"Value for header {header} contains characters that are not allowed in an HTTP header",
            context={"header": header},
        )
    return value


def is_success(response: httpx.Response) -> bool:
    """Return ``True`` for any ``2xx`` status."""
    return 200 <= response.status_code < 300


def _dump_payload(
    method: str,
    url: str,
    headers: dict | None,
    response_status: int | None,
    response_body: Any | None,
    secret: str | None = None,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    dump: dict[str, Any] = {
        "method": method,
        "url": url,
    }
    if headers is not None:
        dump["request_headers"] = dict(headers)
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    safe_dump = redact(dump, secret)
    print(
        _json.dumps(safe_dump, indent=2, default=str),
        file=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class ApiTransport:
    """Synchronous HTTP transport for the asset-upload endpoints.

    Parameters
    ----------
    config:
        A :class:`UploaderConfig` controlling timeouts, proxy and debug dumps.
    secret:
        The credential in use.  Only consulted to scrub debug dumps.
    """

    def __init__(self, config: UploaderConfig, secret: SecretString | None = None) -> None:
        self._config = config
        self._secret = secret
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()

        proxy: httpx.URL | str | None = config.http_proxy
        self._client = httpx.Client(
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=proxy,
            follow_redirects=False,
        )

    @property
    def metrics(self) -> Any:
        return self._metrics

    def send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request and return the raw response.

        Parameters
        ----------
        method:
            HTTP method.
        url:
            Absolute URL.
        **kwargs:
            Forwarded to :meth:`httpx.Client.request` (``headers=``,
            ``params=``, ``content=``, ``data=``, ``files=``).

        Raises
        ------
        TransportError
            On timeouts, connection, DNS, TLS or protocol failures.
        """
        t0 = time.monotonic()
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            self._metrics.increment(
                "rbxupload.requests_total",
                tags={"method": method, "status": "error"},
            )
            log.warning(
                "Request transport error",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": method,
                        "url": url,
                        "error": str(exc),
                    }
                },
            )
            raise TransportError(
                message=f"Network error on {method} {url}: {exc}",
                context={"method": method, "url": url},
                cause=exc,
            ) from exc

        elapsed_ms = (time.monotonic() - t0) * 1000
        status = str(response.status_code)
        self._metrics.increment(
            "rbxupload.requests_total",
            tags={"method": method, "status": status},
        )
        self._metrics.timing(
            "rbxupload.request_duration_ms",
            elapsed_ms,
            tags={"method": method, "status": status},
        )
        log.debug(
            "Request complete",
            extra={
                "extra_fields": {
                    "op": "request",
                    "method": method,
                    "url": url,
                    "status_code": response.status_code,
                    "elapsed_ms": round(elapsed_ms, 1),
                }
            },
        )

        if self._config.debug_dump_payload:
            self._emit_debug_dump(method, url, kwargs.get("headers"), response)

        return response

    def _emit_debug_dump(
        self,
        method: str,
        url: str,
        headers: dict | None,
        response: httpx.Response,
    ) -> None:
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text[:1000]
        secret = self._secret.expose_secret() if self._secret else None
        _dump_payload(method, url, headers, response.status_code, body, secret=secret)

    def close(self) -> None:
        """Close the underlying HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> ApiTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
