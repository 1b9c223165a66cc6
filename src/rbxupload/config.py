"""Configuration for rbxupload.

:class:`UploaderConfig` is a dataclass that captures every tuneable knob
of the upload pipeline: which credential to use, where the two protocol
flows send their requests, and the timing of the cloud polling loop and
the session moderation-retry policy.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

DEFAULT_CLOUD_BASE_URL = "https://apis.roblox.com"
DEFAULT_SESSION_UPLOAD_URL = "https://data.roblox.com/data/upload/json"
DEFAULT_CSRF_URL = "https://auth.roblox.com/v2/logout"

_SECRET_FIELDS = frozenset({"api_key", "cookie"})
_URL_FIELDS = ("cloud_base_url", "session_upload_url", "csrf_url")
_LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")


@dataclass
class UploaderConfig:
    """Complete configuration for an upload invocation.

    Every parameter has a default; with neither ``api_key`` nor
    ``cookie`` set the credential resolver falls back to cookie
    discovery.

    Parameters
    ----------
    api_key:
        Cloud API key.  Takes precedence over any cookie.  Never logged.
    cookie:
        ``.ROBLOSECURITY`` session cookie value.  Never logged.
    cloud_base_url:
        Root URL for the cloud asset endpoints (create and operation poll).
    session_upload_url:
        Session-flow image upload endpoint.
    csrf_url:
        Endpoint that answers an empty POST with ``403`` and an
        ``X-CSRF-Token`` header.  Only used when ``prefetch_csrf`` is set.
    prefetch_csrf:
        Perform an explicit CSRF challenge before the first session upload.
        When ``False`` the first upload doubles as the challenge.
    timeout_seconds:
        Per-request HTTP timeout in seconds.
    poll_initial_delay:
        Delay (seconds) before the second poll of a cloud operation.
    poll_multiplier:
        Growth factor applied to the poll delay after each pending poll.
    poll_max_delay:
        Cap (seconds) on a single poll interval.
    poll_deadline:
        Global deadline (seconds) for the cloud polling loop.
    moderation_retries:
        Additional upload attempts made by the moderation-retry policy.
    moderation_delay:
        Sleep (seconds) between moderation retries.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~rbxupload.observability.MetricsHook`.
    debug_dump_payload:
        Write a redacted dump of every request/response to *stderr*.
    """

    # ── Credentials ─────────────────────────────────────────────────────
    api_key: str | None = None

    cookie: str | None = None

    # ── Endpoints ───────────────────────────────────────────────────────
    cloud_base_url: str = DEFAULT_CLOUD_BASE_URL

    session_upload_url: str = DEFAULT_SESSION_UPLOAD_URL

    csrf_url: str = DEFAULT_CSRF_URL

    prefetch_csrf: bool = False

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Cloud polling ───────────────────────────────────────────────────
    poll_initial_delay: float = 0.5

    poll_multiplier: float = 2.0

    poll_max_delay: float = 4.0

    poll_deadline: float = 60.0

    # ── Session moderation retry ────────────────────────────────────────
    moderation_retries: int = 4

    moderation_delay: float = 5.0

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in _URL_FIELDS:
            parsed = urlparse(getattr(self, name))
            if parsed.scheme == "http" and parsed.hostname not in _LOCAL_HOSTS:
                raise ValueError(
                    f"{name} uses insecure HTTP for non-local host '{parsed.hostname}'. "
                    "Use HTTPS to protect your credentials, or target localhost for testing."
                )
            if parsed.scheme not in ("http", "https"):
                raise ValueError(f"{name} must be an http(s) URL, got {getattr(self, name)!r}")

        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.poll_initial_delay < 0:
            raise ValueError(f"poll_initial_delay must be >= 0, got {self.poll_initial_delay}")
        if self.poll_multiplier < 1:
            raise ValueError(f"poll_multiplier must be >= 1, got {self.poll_multiplier}")
        if self.poll_max_delay < 0:
            raise ValueError(f"poll_max_delay must be >= 0, got {self.poll_max_delay}")
        if self.poll_deadline <= 0:
            raise ValueError(f"poll_deadline must be > 0, got {self.poll_deadline}")
        if self.moderation_retries < 0:
            raise ValueError(f"moderation_retries must be >= 0, got {self.moderation_retries}")
        if self.moderation_delay < 0:
            raise ValueError(f"moderation_delay must be >= 0, got {self.moderation_delay}")

    def __repr__(self) -> str:
        """Mask credentials to prevent accidental leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name in _SECRET_FIELDS and val is not None:
                parts.append(f"{f.name}='****'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"UploaderConfig({', '.join(parts)})"
