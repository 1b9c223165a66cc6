"""Session image upload flow (cookie authentication).

Every request carries the ``.ROBLOSECURITY`` cookie.  State-changing
requests also need an ``X-CSRF-Token``, which the service hands out by
rejecting a request with ``403`` and the token in a response header:

* With no token cached, the first state-changing request doubles as the
  challenge (or, with ``prefetch_csrf``, an empty POST to ``csrf_url``
  is sent first).  A ``403`` without the header at that point is fatal.
* A ``403`` carrying a fresh token replaces the cached token and the
  request is retried exactly once.

The upload itself is a single ``POST`` of the raw image bytes.  A
response can carry a moderation verdict instead of an asset id; the
plain :meth:`SessionProtocol.upload` fails on it, while
:meth:`SessionProtocol.upload_with_moderation_retry` tries again after a
pause.
"""

from __future__ import annotations

import time

import httpx

from rbxupload.config import UploaderConfig
from rbxupload.errors import ApiError, MissingCsrfTokenError, RbxUploadError
from rbxupload.models import DriverState, UploadMetadata, UploadResult
from rbxupload.observability import get_logger
from rbxupload.utils.secret import SecretString

from .backoff import is_moderation_verdict
from .responses import parse_asset_id, parse_json_object, response_error
from .state import UploadStateMachine
from .transport import ApiTransport, check_header_value, header_value, is_success

log = get_logger("rbxupload.session")

ASSET_TYPE_DECAL = 13
CSRF_HEADER = "X-CSRF-Token"
COOKIE_NAME = ".ROBLOSECURITY"


class SessionProtocol:
    """Upload driver for cookie authentication.

    Parameters
    ----------
    cookie:
        The ``.ROBLOSECURITY`` value.  Owned by this driver and cleared on
        :meth:`close`.
    config:
        Endpoint, timeout and moderation-retry configuration.
    transport:
        Optional pre-built transport (tests inject one).
    """

    name = "session"

    def __init__(
        self,
        cookie: SecretString,
        config: UploaderConfig,
        transport: ApiTransport | None = None,
    ) -> None:
        self._cookie = cookie
        self._config = config
        self._transport = transport if transport is not None else ApiTransport(config, cookie)
        self._metrics = self._transport.metrics
        self._csrf_token: str | None = None

    def __repr__(self) -> str:
        return (
            f"SessionProtocol(upload_url={self._config.session_upload_url!r}, "
            f"has_csrf_token={self._csrf_token is not None})"
        )

    @property
    def csrf_token(self) -> str | None:
        return self._csrf_token

    # -- public API --------------------------------------------------------

    def upload(self, data: bytes, metadata: UploadMetadata) -> UploadResult:
        """Upload once; a moderation verdict fails with ``ApiError("moderation")``.

        Raises
        ------
        MissingCsrfTokenError
            If the CSRF challenge yields no token.
        ResponseError
            On any other non-2xx response.
        BadResponseJsonError
            On a 2xx response without a valid ``AssetId``.
        ApiError
            On a moderation verdict.
        TransportError
            On network failures.
        """
        return self._run(data, metadata, retries=0)

    def upload_with_moderation_retry(self, data: bytes, metadata: UploadMetadata) -> UploadResult:
        """Upload, retrying up to ``moderation_retries`` more times while the
        service returns moderation verdicts, sleeping ``moderation_delay``
        seconds between attempts.

        Raises
        ------
        ApiError
            ``"moderation"`` once every attempt was rejected.
        """
        return self._run(data, metadata, retries=self._config.moderation_retries)

    def fetch_csrf_token(self) -> str:
        """Send the explicit CSRF challenge and cache the token it returns.

        Raises
        ------
        MissingCsrfTokenError
            If the response has no ``X-CSRF-Token`` header.
        """
        response = self._transport.send(
            "POST",
            self._config.csrf_url,
            headers=self._headers(),
            content=b"",
        )
        token = response.headers.get(CSRF_HEADER)
        if not token:
            raise MissingCsrfTokenError(context={"status": response.status_code})
        self._csrf_token = token
        log.debug(
            "CSRF token obtained",
            extra={"extra_fields": {"op": "csrf_challenge", "status_code": response.status_code}},
        )
        return token

    def close(self) -> None:
        """Close the transport and wipe the cookie."""
        self._transport.close()
        self._cookie.clear()

    # -- internals ---------------------------------------------------------

    def _run(self, data: bytes, metadata: UploadMetadata, retries: int) -> UploadResult:
        sm = UploadStateMachine(self.name)
        attempts = retries + 1
        try:
            for attempt in range(attempts):
                if attempt:
                    sm.transition(DriverState.RETRYING_MODERATION)
                    self._metrics.increment(
                        "rbxupload.moderation_retries_total",
                        tags={"protocol": self.name},
                    )
                    log.warning(
                        "Image failed moderation, retrying",
                        extra={
                            "extra_fields": {
                                "op": "upload",
                                "attempt": attempt + 1,
                                "max_attempts": attempts,
                                "delay": self._config.moderation_delay,
                            }
                        },
                    )
                    time.sleep(self._config.moderation_delay)

                asset_id = self._attempt(data, metadata, sm)
                if asset_id is not None:
                    sm.transition(DriverState.DONE)
                    self._metrics.increment(
                        "rbxupload.upload_success_total",
                        tags={"protocol": self.name},
                    )
                    return UploadResult(asset_id=asset_id)

            raise ApiError("moderation", context={"attempts": attempts})
        except RbxUploadError as exc:
            sm.fail()
            self._metrics.increment(
                "rbxupload.upload_failure_total",
                tags={"protocol": self.name, "code": exc.code},
            )
            raise

    def _attempt(self, data: bytes, metadata: UploadMetadata, sm: UploadStateMachine) -> int | None:
        """One upload, including the CSRF dance.

        Returns the asset id, or ``None`` on a moderation verdict.
        """
        sm.transition(DriverState.ENSURING_CSRF)
        if self._csrf_token is None and self._config.prefetch_csrf:
            self.fetch_csrf_token()
        sm.transition(DriverState.UPLOADING)
        response = self._post_image(data, metadata)

        if response.status_code == 403:
            token = response.headers.get(CSRF_HEADER)
            if token:
                self._csrf_token = token
                self._metrics.increment("rbxupload.csrf_refresh_total", tags={"protocol": self.name})
                log.info(
                    "CSRF token refreshed, retrying upload",
                    extra={"extra_fields": {"op": "upload"}},
                )
                sm.transition(DriverState.ENSURING_CSRF)
                sm.transition(DriverState.UPLOADING)
                response = self._post_image(data, metadata)
            elif self._csrf_token is None:
                raise MissingCsrfTokenError(context={"status": response.status_code})

        return self._read_upload_response(response)

    def _post_image(self, data: bytes, metadata: UploadMetadata) -> httpx.Response:
        params: list[tuple[str, str]] = [
            ("assetTypeId", str(ASSET_TYPE_DECAL)),
            ("name", metadata.name),
            ("description", metadata.description),
        ]
        if metadata.creator.is_group:
            params.append(("groupId", str(metadata.creator.creator_id)))

        headers = self._headers()
        headers["Content-Type"] = "*/*"
        headers["Requester"] = "Client"
        if self._csrf_token is not None:
            headers[CSRF_HEADER] = check_header_value(self._csrf_token, CSRF_HEADER)

        return self._transport.send(
            "POST",
            self._config.session_upload_url,
            params=params,
            headers=headers,
            content=data,
        )

    def _read_upload_response(self, response: httpx.Response) -> int | None:
        secret = self._secret_text()
        if is_success(response):
            body = parse_json_object(response, secret)
            if is_moderation_verdict(response.status_code, response.text, body):
                return None
            return parse_asset_id(body.get("AssetId"), response.text, secret)

        if is_moderation_verdict(response.status_code, response.text):
            return None
        raise response_error(response, secret)

    def _headers(self) -> dict[str, str]:
        return {"Cookie": f"{COOKIE_NAME}={header_value(self._cookie, 'Cookie')}"}

    def _secret_text(self) -> str | None:
        return self._cookie.expose_secret() or None
