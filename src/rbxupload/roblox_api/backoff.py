"""Pure decision helpers for the two upload protocols.

* :func:`compute_poll_delay` -- the delay before the next cloud poll.
* :func:`is_moderation_verdict` -- whether a session upload response is
  a moderation rejection rather than a success or a hard failure.
"""

from __future__ import annotations

from typing import Any

MODERATION_MARKER = "image failed moderation"


def compute_poll_delay(
    attempt: int,
    initial: float = 0.5,
    multiplier: float = 2.0,
    maximum: float = 4.0,
) -> float:
    """Compute the delay before poll number ``attempt + 1``.

    The delay grows as ``initial * multiplier ** attempt`` and is capped
    at *maximum*.  No jitter is applied: a single client polls a single
    operation.

    Parameters
    ----------
    attempt:
        Number of pending polls seen so far, minus one (0-indexed).
    initial:
        Delay after the first pending poll, in seconds.
    multiplier:
        Growth factor.
    maximum:
        Cap on any single interval, in seconds.

    Examples
    --------
    >>> [compute_poll_delay(n) for n in range(6)]
    [0.5, 1.0, 2.0, 4.0, 4.0, 4.0]
    """
    if attempt < 0:
        raise ValueError(f"attempt must be >= 0, got {attempt}")
    # Large exponents overflow float; the cap is reached long before.
    if attempt > 64:
        return maximum
    return min(initial * (multiplier ** attempt), maximum)


def is_moderation_verdict(status_code: int, body_text: str, body_json: Any = None) -> bool:
    """Decide whether a session upload response is a moderation rejection.

    Two shapes count as a verdict:

    * a ``2xx`` response whose JSON object has ``"Moderated": true``;
    * a ``400`` response whose body contains ``image failed moderation``.
    """
    if 200 <= status_code < 300:
        return isinstance(body_json, dict) and body_json.get("Moderated") is True
    if status_code == 400:
        return MODERATION_MARKER in body_text.lower()
    return False
