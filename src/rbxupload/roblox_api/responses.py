"""Response parsing shared by the cloud and session protocols.

Every body that ends up inside an error is scrubbed of the credential
first, so an endpoint echoing a request back cannot leak it.
"""

from __future__ import annotations

from typing import Any

import httpx

from rbxupload.errors import BadResponseJsonError, ResponseError
from rbxupload.models import MAX_CREATOR_ID
from rbxupload.utils.redact import scrub

MAX_ASSET_ID = MAX_CREATOR_ID


def response_error(response: httpx.Response, secret: str | None) -> ResponseError:
    """Build a :class:`ResponseError` for a non-2xx *response*."""
    return ResponseError(
        status=response.status_code,
        body=scrub(response.text, secret),
    )


def parse_json_object(response: httpx.Response, secret: str | None) -> dict[str, Any]:
    """Parse a 2xx body that must be a JSON object.

    Raises
    ------
    BadResponseJsonError
        If the body is not JSON or not an object.
    """
    try:
        data = response.json()
    except ValueError as exc:
        raise BadResponseJsonError(body=scrub(response.text, secret), cause=exc) from exc
    if not isinstance(data, dict):
        raise BadResponseJsonError(
            body=scrub(response.text, secret),
            context={"reason": "expected a JSON object"},
        )
    return data


def parse_asset_id(value: Any, body: str, secret: str | None) -> int:
    """Validate an asset id taken from a response body.

    Accepts a JSON integer or a string of decimal digits.  Zero, negative
    and out-of-range ids are rejected.

    Raises
    ------
    BadResponseJsonError
        If *value* is not a valid asset id.
    """
    asset_id: int | None = None
    if isinstance(value, int) and not isinstance(value, bool):
        asset_id = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        asset_id = int(value)

    if asset_id is None or not 0 < asset_id <= MAX_ASSET_ID:
        raise BadResponseJsonError(
            body=scrub(body, secret),
            context={"reason": f"invalid asset id {value!r}"},
        )
    return asset_id
