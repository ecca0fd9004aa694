"""Delegated user access tokens via the OAuth 2.0 JWT bearer grant."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable
from typing import Any, cast

from .codec import encode
from .config import Settings
from .errors import (
    MissingAccountId,
    MissingAuthenticationContext,
    MissingOAuthClientId,
    TokenExchangeError,
)
from .http import http_post_form
from .models import ClientRecord

logger = logging.getLogger(__name__)

EXPIRE_IN_SECONDS = 60
JWT_CLAIM_PREFIX = "urn:atlassian:connect"
GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
SCOPE_SEPARATOR = " "
TOKEN_PATH = "/oauth2/token"


def prepare_jwt_token(
    client_record: ClientRecord | None,
    account_id: str | None,
    *,
    settings: Settings | None = None,
    now: int | None = None,
) -> str:
    if client_record is None:
        raise MissingAuthenticationContext("Missing Authentication context")
    if not client_record.oauth_client_id:
        raise MissingOAuthClientId(
            f"client record {client_record.client_key} has no OAuth client id"
        )
    if not account_id:
        raise MissingAccountId("Missing User key")
    settings = settings or Settings()

    issued_at = int(time.time()) if now is None else int(now)
    claims = {
        "iss": f"{JWT_CLAIM_PREFIX}:clientid:{client_record.oauth_client_id}",
        "sub": f"{JWT_CLAIM_PREFIX}:useraccountid:{account_id}",
        "tnt": client_record.base_url,
        "aud": settings.authorization_server_url,
        "iat": issued_at,
        "exp": issued_at + EXPIRE_IN_SECONDS,
    }
    return encode(claims, client_record.shared_secret, algorithm="HS256")


def format_scopes(scopes: Iterable[str] | None) -> str | None:
    if scopes is None:
        return None
    return SCOPE_SEPARATOR.join(scopes).upper()


def get_access_token(
    client_record: ClientRecord | None,
    account_id: str | None,
    scopes: Iterable[str] | None = None,
    *,
    settings: Settings | None = None,
) -> dict[str, Any]:
    settings = settings or Settings()
    form = {
        "grant_type": GRANT_TYPE,
        "assertion": prepare_jwt_token(client_record, account_id, settings=settings),
    }
    scope_text = format_scopes(scopes)
    if scope_text is not None:
        form["scopes"] = scope_text

    url = settings.authorization_server_url.rstrip("/") + TOKEN_PATH
    response = http_post_form(
        url,
        form,
        headers={"Accept": "application/json"},
        timeout=settings.http_timeout,
    )
    if not response.ok:
        logger.error("token exchange failed with status %s", response.status)
        raise TokenExchangeError(response.status, response.body)

    try:
        parsed = json.loads(response.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TokenExchangeError(response.status, response.body) from exc
    if not isinstance(parsed, dict):
        raise TokenExchangeError(response.status, response.body)
    return cast(dict[str, Any], parsed)
