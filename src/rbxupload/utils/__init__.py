from .redact import redact, scrub
from .secret import SecretString

__all__ = [
    "SecretString",
    "redact",
    "scrub",
]
