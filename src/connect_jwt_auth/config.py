from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_INSTALL_KEYS_URL = "https://connect-install-keys.atlassian.com"
DEFAULT_AUTHORIZATION_SERVER_URL = "https://auth.atlassian.io"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class Settings:
    """Read-only flags threaded through every verification and issuance call."""

    verify_jwt_expiration: bool = True
    signed_install: bool = False
    context_path: str = ""
    install_keys_url: str = DEFAULT_INSTALL_KEYS_URL
    authorization_server_url: str = DEFAULT_AUTHORIZATION_SERVER_URL
    # None keeps the transport default.
    http_timeout: float | None = None

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str = "CONNECT_JWT_",
    ) -> Settings:
        env = os.environ if environ is None else environ
        defaults = cls()

        def _get(name: str) -> str | None:
            value = env.get(prefix + name)
            if value is None or not value.strip():
                return None
            return value.strip()

        verify_exp = _get("VERIFY_EXPIRATION")
        signed_install = _get("SIGNED_INSTALL")
        timeout = _get("HTTP_TIMEOUT")
        return cls(
            verify_jwt_expiration=(
                _parse_bool(verify_exp, prefix + "VERIFY_EXPIRATION")
                if verify_exp is not None
                else defaults.verify_jwt_expiration
            ),
            signed_install=(
                _parse_bool(signed_install, prefix + "SIGNED_INSTALL")
                if signed_install is not None
                else defaults.signed_install
            ),
            context_path=_get("CONTEXT_PATH") or defaults.context_path,
            install_keys_url=_get("INSTALL_KEYS_URL") or defaults.install_keys_url,
            authorization_server_url=(
                _get("AUTHORIZATION_SERVER_URL") or defaults.authorization_server_url
            ),
            http_timeout=_parse_timeout(timeout, prefix + "HTTP_TIMEOUT"),
        )


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (got {value!r})")


def _parse_timeout(value: str | None, name: str) -> float | None:
    if value is None:
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds (got {value!r})") from None
    if timeout <= 0:
        raise ValueError(f"{name} must be positive")
    return timeout
