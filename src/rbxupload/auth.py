"""Credential types and resolution.

A credential is one of two variants:

* :class:`ApiKeyCredential` -- a cloud API key sent as ``x-api-key``.
* :class:`CookieCredential` -- a ``.ROBLOSECURITY`` session cookie.

:func:`resolve_credential` picks exactly one of them from the
configuration, falling back to :func:`discover_cookie` when nothing was
configured explicitly.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass

from rbxupload.config import UploaderConfig
from rbxupload.errors import MissingCredentialError
from rbxupload.observability import get_logger
from rbxupload.utils.secret import SecretString

log = get_logger("rbxupload.auth")

COOKIE_ENV_VAR = "ROBLOSECURITY"
COOKIE_NAME = ".ROBLOSECURITY"


@dataclass(frozen=True, eq=False)
class ApiKeyCredential:
    """Cloud API key credential."""

    secret: SecretString


@dataclass(frozen=True, eq=False)
class CookieCredential:
    """Browser session cookie credential."""

    secret: SecretString


Credential = ApiKeyCredential | CookieCredential


def _strip_cookie_name(value: str) -> str:
    value = value.strip()
    prefix = f"{COOKIE_NAME}="
    if value.startswith(prefix):
        value = value[len(prefix):]
    return value


def discover_cookie() -> SecretString | None:
    """Look for a session cookie in the environment.

    Reads the ``ROBLOSECURITY`` environment variable.  A leading
    ``.ROBLOSECURITY=`` is accepted and stripped.

    Returns
    -------
    SecretString | None
        The cookie, or ``None`` when the variable is unset or blank.
    """
    raw = os.environ.get(COOKIE_ENV_VAR)
    if raw is None:
        return None
    value = _strip_cookie_name(raw)
    if not value:
        return None
    return SecretString(value)


def resolve_credential(
    config: UploaderConfig,
    discover: Callable[[], SecretString | None] = discover_cookie,
) -> Credential:
    """Choose the credential for this invocation.

    Precedence: configured API key, then configured cookie, then
    *discover*.  An API key wins even when a cookie is also configured.

    Parameters
    ----------
    config:
        Configuration carrying the optional ``api_key`` / ``cookie``.
    discover:
        Cookie discovery collaborator; called only when neither value is
        configured.

    Raises
    ------
    MissingCredentialError
        If no credential could be found.
    """
    if config.api_key:
        log.debug(
            "Using API key credential",
            extra={"extra_fields": {"op": "resolve_credential", "mode": "api_key"}},
        )
        return ApiKeyCredential(SecretString(config.api_key))

    # A blank cookie, or a bare ".ROBLOSECURITY=", counts as not configured.
    cookie = _strip_cookie_name(config.cookie) if config.cookie else ""
    if cookie:
        log.debug(
            "Using configured session cookie",
            extra={"extra_fields": {"op": "resolve_credential", "mode": "cookie"}},
        )
        return CookieCredential(SecretString(cookie))

    discovered = discover()
    if discovered:
        log.debug(
            "Using discovered session cookie",
            extra={"extra_fields": {"op": "resolve_credential", "mode": "discovered_cookie"}},
        )
        return CookieCredential(discovered)

    raise MissingCredentialError(
        message=(
            "No credential found: pass --api-key or --cookie, or set the "
            f"{COOKIE_ENV_VAR} environment variable"
        ),
    )
