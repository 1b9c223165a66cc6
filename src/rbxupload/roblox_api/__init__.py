"""rbxupload.roblox_api -- asset upload protocols and their HTTP plumbing.

This sub-package provides:

* :mod:`.transport` -- single-request HTTP transport (no retries).
* :mod:`.backoff` -- poll delay and moderation-verdict helpers.
* :mod:`.state` -- per-call driver state machine.
* :mod:`.cloud` -- API-key flow: create, then poll the operation.
* :mod:`.session` -- cookie flow: CSRF handshake, upload, moderation retry.
* :mod:`.client` -- driver that picks a flow from the credential.
"""

from __future__ import annotations

from .backoff import compute_poll_delay, is_moderation_verdict
from .client import RobloxApiClient
from .cloud import CloudProtocol, build_request_document
from .session import SessionProtocol
from .state import UploadStateMachine
from .transport import ApiTransport

__all__ = [
    "ApiTransport",
    "CloudProtocol",
    "RobloxApiClient",
    "SessionProtocol",
    "UploadStateMachine",
    "build_request_document",
    "compute_poll_delay",
    "is_moderation_verdict",
]
