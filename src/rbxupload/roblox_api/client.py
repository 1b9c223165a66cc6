"""Upload driver selected by credential variant.

The two protocol flows share nothing but their caller-facing contract,
so :class:`RobloxApiClient` holds exactly one of them and forwards to
it.  The choice is made once, from the credential, in
:meth:`RobloxApiClient.from_credential`.
"""

from __future__ import annotations

from rbxupload.auth import ApiKeyCredential, CookieCredential, Credential
from rbxupload.config import UploaderConfig
from rbxupload.models import UploadMetadata, UploadResult

from .cloud import CloudProtocol
from .session import SessionProtocol


class RobloxApiClient:
    """Caller-facing upload driver.

    Parameters
    ----------
    protocol:
        The protocol flow to drive.  Usually built by
        :meth:`from_credential`.
    """

    def __init__(self, protocol: CloudProtocol | SessionProtocol) -> None:
        self._protocol = protocol

    @classmethod
    def from_credential(cls, credential: Credential, config: UploaderConfig) -> RobloxApiClient:
        """Build the driver that matches *credential*.

        An :class:`ApiKeyCredential` selects the cloud flow; a
        :class:`CookieCredential` selects the session flow.
        """
        if isinstance(credential, ApiKeyCredential):
            return cls(CloudProtocol(credential.secret, config))
        if isinstance(credential, CookieCredential):
            return cls(SessionProtocol(credential.secret, config))
        raise TypeError(f"Unsupported credential type: {type(credential).__name__}")

    @property
    def protocol(self) -> CloudProtocol | SessionProtocol:
        return self._protocol

    def upload(self, data: bytes, metadata: UploadMetadata) -> UploadResult:
        """Upload *data* and return the new asset's id.

        Moderation verdicts are not retried.
        """
        return self._protocol.upload(data, metadata)

    def upload_with_moderation_retry(self, data: bytes, metadata: UploadMetadata) -> UploadResult:
        """Upload *data*, retrying moderation verdicts where the flow allows it."""
        return self._protocol.upload_with_moderation_retry(data, metadata)

    def close(self) -> None:
        """Release the HTTP client and wipe the credential."""
        self._protocol.close()

    def __enter__(self) -> RobloxApiClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"RobloxApiClient(protocol={self._protocol.name!r})"
