"""Metrics hook protocol and no-op default implementation.

rbxupload emits counters and timings around every outbound request and
at the decision points of the upload protocols.  By default a
:class:`NoopMetricsHook` is used.  Callers can pass their own object
satisfying :class:`MetricsHook` via ``UploaderConfig(metrics=...)``.

Emitted metric names:

* ``rbxupload.requests_total``            -- counter
* ``rbxupload.request_duration_ms``       -- timing
* ``rbxupload.poll_total``                -- counter
* ``rbxupload.csrf_refresh_total``        -- counter
* ``rbxupload.moderation_retries_total``  -- counter
* ``rbxupload.upload_success_total``      -- counter
* ``rbxupload.upload_failure_total``      -- counter
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict of string keys and values.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
