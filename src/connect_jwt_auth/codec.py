from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

import jwt
from jwt import exceptions as jwt_exceptions
from jwt.api_jwt import decode_complete

from .errors import DecodeError, ExpiredError, VerificationError

HMAC_ALGORITHMS: tuple[str, ...] = ("HS256", "HS384", "HS512")
RSA_ALGORITHM = "RS256"


@dataclass(frozen=True)
class DecodeOptions:
    algorithms: tuple[str, ...] = HMAC_ALGORITHMS
    audience: str | None = None
    # When set, the aud claim is required and must match audience.
    verify_aud: bool = False
    verify_exp: bool = True


def _check_segments(token: object) -> str:
    if not isinstance(token, str) or not token:
        raise DecodeError("token must be a non-empty string")
    if len(token.split(".")) != 3:
        raise DecodeError("expected a JWS with three dot-separated parts")
    return token


def decode_unsafe(token: str, *, verify_exp: bool = False) -> tuple[dict[str, Any], dict[str, Any]]:
    """Parse claims and header without checking the signature.

    Only expiration can optionally be enforced here; a missing or bogus signature
    never fails this step.
    """
    token = _check_segments(token)
    try:
        header = jwt.get_unverified_header(token)
        claims = jwt.decode(
            token,
            options={
                "verify_signature": False,
                "verify_exp": verify_exp,
                "verify_nbf": False,
                "verify_iat": False,
                "verify_aud": False,
                "verify_iss": False,
                "verify_sub": False,
                "verify_jti": False,
            },
        )
    except jwt_exceptions.ExpiredSignatureError as exc:
        raise ExpiredError(str(exc)) from exc
    except jwt_exceptions.PyJWTError as exc:
        raise DecodeError(str(exc)) from exc
    if not isinstance(header, dict):
        raise DecodeError("token header must be a JSON object")
    return cast(dict[str, Any], claims), header


def decode_verified(
    token: str,
    key: Any,
    options: DecodeOptions,
) -> tuple[dict[str, Any], dict[str, Any]]:
    token = _check_segments(token)
    jwt_options: dict[str, Any] = {
        "verify_signature": True,
        "verify_exp": options.verify_exp,
        "verify_aud": options.verify_aud,
    }
    if options.verify_aud:
        jwt_options["require"] = ["aud"]
    try:
        decoded = decode_complete(
            token,
            key=key,
            algorithms=list(options.algorithms),
            audience=options.audience if options.verify_aud else None,
            options=jwt_options,
        )
    except jwt_exceptions.ExpiredSignatureError as exc:
        raise ExpiredError("signature has expired") from exc
    except jwt_exceptions.InvalidSignatureError as exc:
        raise VerificationError("signature is invalid") from exc
    except jwt_exceptions.DecodeError as exc:
        raise DecodeError(str(exc)) from exc
    except jwt_exceptions.PyJWTError as exc:
        # Audience, algorithm, key type and time-claim failures.
        raise VerificationError(str(exc)) from exc
    return cast(dict[str, Any], decoded["payload"]), cast(dict[str, Any], decoded["header"])


def encode(
    claims: Mapping[str, Any],
    key: Any,
    *,
    algorithm: str = "HS256",
    headers: Mapping[str, Any] | None = None,
) -> str:
    if algorithm == "none":
        raise ValueError("refusing to sign with alg=none")
    return jwt.encode(
        dict(claims),
        key=key,
        algorithm=algorithm,
        headers=dict(headers) if headers else None,
    )
