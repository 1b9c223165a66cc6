"""Per-call state machine for the upload protocols.

Each call to ``upload`` or ``upload_with_moderation_retry`` runs its own
:class:`UploadStateMachine`.  The protocols drive it at every step, so an
out-of-order step (polling before the create request, uploading after a
terminal state) fails loudly instead of sending a request.
"""

from __future__ import annotations

from rbxupload.models import DriverState


class UploadStateMachine:
    """Finite state machine for a single protocol call.

    Valid transitions::

        IDLE                -> CREATING | ENSURING_CSRF | FAILED
        CREATING            -> POLLING | FAILED
        POLLING             -> DONE | FAILED
        ENSURING_CSRF       -> UPLOADING | FAILED
        UPLOADING           -> DONE | ENSURING_CSRF | RETRYING_MODERATION | FAILED
        RETRYING_MODERATION -> ENSURING_CSRF | FAILED
        DONE                -> (terminal)
        FAILED              -> (terminal)

    Parameters
    ----------
    protocol:
        Label of the protocol driving this call (``"cloud"`` or
        ``"session"``), used in error messages.
    """

    VALID_TRANSITIONS: dict[DriverState, set[DriverState]] = {
        DriverState.IDLE: {
            DriverState.CREATING,
            DriverState.ENSURING_CSRF,
            DriverState.FAILED,
        },
        DriverState.CREATING: {DriverState.POLLING, DriverState.FAILED},
        DriverState.POLLING: {DriverState.DONE, DriverState.FAILED},
        DriverState.ENSURING_CSRF: {DriverState.UPLOADING, DriverState.FAILED},
        DriverState.UPLOADING: {
            DriverState.DONE,
            DriverState.ENSURING_CSRF,
            DriverState.RETRYING_MODERATION,
            DriverState.FAILED,
        },
        DriverState.RETRYING_MODERATION: {DriverState.ENSURING_CSRF, DriverState.FAILED},
        DriverState.DONE: set(),
        DriverState.FAILED: set(),
    }

    def __init__(self, protocol: str) -> None:
        self.protocol: str = protocol
        self.state: DriverState = DriverState.IDLE
        self.history: list[DriverState] = [DriverState.IDLE]

    @property
    def is_terminal(self) -> bool:
        return not self.VALID_TRANSITIONS[self.state]

    def transition(self, new_state: DriverState) -> None:
        """Move to *new_state*.

        Raises
        ------
        ValueError
            If the transition from the current state is not valid.
        """
        allowed = self.VALID_TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise ValueError(
                f"Invalid state transition: {self.state.value} -> {new_state.value} "
                f"for {self.protocol} upload. "
                f"Allowed transitions from {self.state.value}: "
                f"{{{', '.join(sorted(s.value for s in allowed))}}}"
            )
        self.state = new_state
        self.history.append(new_state)

    def fail(self) -> None:
        """Move to ``FAILED`` unless the call already ended."""
        if not self.is_terminal:
            self.transition(DriverState.FAILED)
