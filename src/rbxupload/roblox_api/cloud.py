"""Cloud asset upload flow (API-key authentication).

The cloud flow takes two kinds of round-trip:

1. **Create** -- ``POST {base}/assets/v1/assets`` with a multipart body
   holding the image (``fileContent``) and a JSON description
   (``request``).  The response names a background operation.
2. **Poll** -- ``GET {base}/{operation}`` until the operation reports
   ``done``, backing off exponentially under a global deadline.

Both requests authenticate with the ``x-api-key`` header.
"""

from __future__ import annotations

import json
import time
from typing import Any

from rbxupload.config import UploaderConfig
from rbxupload.errors import ApiError, BadRequestJsonError, BadResponseJsonError, RbxUploadError
from rbxupload.models import DriverState, UploadMetadata, UploadResult
from rbxupload.observability import get_logger
from rbxupload.utils.redact import scrub
from rbxupload.utils.secret import SecretString

from .backoff import compute_poll_delay
from .responses import parse_asset_id, parse_json_object, response_error
from .state import UploadStateMachine
from .transport import ApiTransport, header_value, is_success

log = get_logger("rbxupload.cloud")

ASSETS_PATH = "/assets/v1/assets"
ASSET_TYPE_DECAL = "Decal"
API_KEY_HEADER = "x-api-key"


def build_request_document(metadata: UploadMetadata) -> str:
    """Serialise *metadata* into the ``request`` part of the create call.

    The output is byte-stable for a given *metadata*: keys are emitted in
    a fixed order with compact separators.  The creator id is written as
    a decimal string, the form the endpoint documents for ``userId`` and
    ``groupId``.

    Raises
    ------
    BadRequestJsonError
        If the metadata cannot be serialised.
    """
    creator_key = "groupId" if metadata.creator.is_group else "userId"
    document: dict[str, Any] = {
        "assetType": ASSET_TYPE_DECAL,
        "displayName": metadata.name,
        "description": metadata.description,
        "creationContext": {
            "creator": {creator_key: str(metadata.creator.creator_id)},
        },
    }
    try:
        return json.dumps(document, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise BadRequestJsonError(cause=exc) from exc


class CloudProtocol:
    """Upload driver for API-key authentication.

    Parameters
    ----------
    api_key:
        The cloud API key.  Owned by this driver and cleared on
        :meth:`close`.
    config:
        Endpoint, timeout and polling configuration.
    transport:
        Optional pre-built transport (tests inject one).
    """

    name = "cloud"

    def __init__(
        self,
        api_key: SecretString,
        config: UploaderConfig,
        transport: ApiTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._config = config
        self._transport = transport if transport is not None else ApiTransport(config, api_key)
        self._metrics = self._transport.metrics

    def __repr__(self) -> str:
        return f"CloudProtocol(base_url={self._config.cloud_base_url!r})"

    # -- public API --------------------------------------------------------

    def upload(self, data: bytes, metadata: UploadMetadata) -> UploadResult:
        """Create the asset and wait for its processing operation.

        Raises
        ------
        ResponseError
            On a non-2xx response to either request.
        BadResponseJsonError
            On a 2xx response whose body does not match the schema.
        ApiError
            ``"processing failed"`` if the operation ends without an asset
            id, ``"timeout"`` if it does not end before the deadline.
        TransportError
            On network failures.
        """
        sm = UploadStateMachine(self.name)
        try:
            sm.transition(DriverState.CREATING)
            operation = self.create_asset(data, metadata)
            sm.transition(DriverState.POLLING)
            result = self.poll_operation(operation)
            sm.transition(DriverState.DONE)
        except RbxUploadError as exc:
            sm.fail()
            self._metrics.increment(
                "rbxupload.upload_failure_total",
                tags={"protocol": self.name, "code": exc.code},
            )
            raise
        self._metrics.increment("rbxupload.upload_success_total", tags={"protocol": self.name})
        return result

    def upload_with_moderation_retry(self, data: bytes, metadata: UploadMetadata) -> UploadResult:
        """Same as :meth:`upload`.

        Moderation on the cloud endpoint happens after the asset exists,
        so there is no rejected upload to retry.
        """
        return self.upload(data, metadata)

    def create_asset(self, data: bytes, metadata: UploadMetadata) -> str:
        """Send the create request and return the operation path."""
        request_document = build_request_document(metadata)
        url = f"{self._config.cloud_base_url.rstrip('/')}{ASSETS_PATH}"
        response = self._transport.send(
            "POST",
            url,
            headers=self._auth_headers(),
            data={"request": request_document},
            files={"fileContent": ("image.png", data, "image/png")},
        )
        if not is_success(response):
            raise response_error(response, self._secret_text())

        body = parse_json_object(response, self._secret_text())
        path = body.get("path")
        if not isinstance(path, str) or not path.strip("/"):
            raise BadResponseJsonError(
                body=scrub(response.text, self._secret_text()),
                context={"reason": "missing operation path"},
            )
        log.debug(
            "Asset create accepted",
            extra={"extra_fields": {"op": "create", "operation": path}},
        )
        return path

    def get_operation(self, operation: str) -> dict[str, Any]:
        """Fetch the current state of *operation* once."""
        url = f"{self._config.cloud_base_url.rstrip('/')}/{operation.lstrip('/')}"
        response = self._transport.send("GET", url, headers=self._auth_headers())
        if not is_success(response):
            raise response_error(response, self._secret_text())

        body = parse_json_object(response, self._secret_text())
        done = body.get("done", False)
        if not isinstance(done, bool):
            raise BadResponseJsonError(
                body=scrub(response.text, self._secret_text()),
                context={"reason": "'done' is not a boolean"},
            )
        return body

    def poll_operation(self, operation: str) -> UploadResult:
        """Poll *operation* until it is done or the deadline passes."""
        cfg = self._config
        start = time.monotonic()
        attempt = 0

        while True:
            body = self.get_operation(operation)
            self._metrics.increment("rbxupload.poll_total", tags={"protocol": self.name})

            if body.get("done"):
                return self._operation_result(body)

            remaining = cfg.poll_deadline - (time.monotonic() - start)
            if remaining <= 0:
                log.warning(
                    "Operation did not finish before the deadline",
                    extra={
                        "extra_fields": {
                            "op": "poll",
                            "operation": operation,
                            "polls": attempt + 1,
                            "deadline": cfg.poll_deadline,
                        }
                    },
                )
                raise ApiError("timeout", context={"operation": operation, "polls": attempt + 1})

            delay = compute_poll_delay(
                attempt,
                initial=cfg.poll_initial_delay,
                multiplier=cfg.poll_multiplier,
                maximum=cfg.poll_max_delay,
            )
            log.debug(
                "Operation pending",
                extra={
                    "extra_fields": {
                        "op": "poll",
                        "operation": operation,
                        "attempt": attempt + 1,
                        "delay": delay,
                    }
                },
            )
            time.sleep(min(delay, remaining))
            attempt += 1

    def close(self) -> None:
        """Close the transport and wipe the API key."""
        self._transport.close()
        self._api_key.clear()

    # -- internals ---------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        return {API_KEY_HEADER: header_value(self._api_key, API_KEY_HEADER)}

    def _secret_text(self) -> str | None:
        return self._api_key.expose_secret() or None

    def _operation_result(self, body: dict[str, Any]) -> UploadResult:
        payload = body.get("response")
        if not isinstance(payload, dict) or payload.get("assetId") is None:
            raise ApiError("processing failed", context={"operation": body.get("path")})

        raw = json.dumps(body)
        asset_id = parse_asset_id(payload["assetId"], raw, self._secret_text())
        version = payload.get("assetVersionNumber")
        if isinstance(version, bool) or not isinstance(version, int):
            version = None
        return UploadResult(asset_id=asset_id, asset_version_number=version)
