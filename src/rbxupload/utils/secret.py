"""Secret string wrapper for credentials.

:class:`SecretString` holds a credential in a mutable ``bytearray`` so the
backing storage can be zeroed once the credential is no longer needed.
It never renders its contents through ``repr``, ``str`` or ``format``;
the only accessor is :meth:`SecretString.expose_secret`, which is meant
to be called at the point where an outbound header is built.
"""

from __future__ import annotations

import hmac

_MASK = "**********"


class SecretString:
    """A string whose contents stay out of logs, reprs and tracebacks.

    Parameters
    ----------
    value:
        The plaintext secret.

    Examples
    --------
    >>> s = SecretString("hunter2")
    >>> s
    SecretString('**********')
    >>> s.expose_secret()
    'hunter2'
    """

    __slots__ = ("_buf",)

    def __init__(self, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"SecretString expects str, got {type(value).__name__}")
        self._buf = bytearray(value.encode("utf-8"))

    def expose_secret(self) -> str:
        """Return the plaintext.  Call only where a header value is built."""
        return self._buf.decode("utf-8")

    def clear(self) -> None:
        """Zero the backing buffer and drop its contents."""
        for i in range(len(self._buf)):
            self._buf[i] = 0
        del self._buf[:]

    def __del__(self) -> None:
        buf = getattr(self, "_buf", None)
        if buf is not None:
            self.clear()

    def __len__(self) -> int:
        return len(self._buf)

    def __bool__(self) -> bool:
        return len(self._buf) > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretString):
            return NotImplemented
        return hmac.compare_digest(bytes(self._buf), bytes(other._buf))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"SecretString('{_MASK}')"

    def __str__(self) -> str:
        return _MASK

    def __format__(self, format_spec: str) -> str:
        return format(_MASK, format_spec)

    def __reduce__(self):
        raise TypeError("SecretString cannot be pickled")

    def __copy__(self):
        raise TypeError("SecretString cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("SecretString cannot be copied")
