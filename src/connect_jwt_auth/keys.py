from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from .codec import HMAC_ALGORITHMS, RSA_ALGORITHM, DecodeOptions
from .config import Settings
from .errors import KeyResolutionError, UnverifiableAlgorithm
from .http import http_get
from .models import ClientRecord
from .store import ClientStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyMaterial:
    key: Any
    options: DecodeOptions
    client_record: ClientRecord | None
    asymmetric: bool


def lookup_client_record(
    claims: Mapping[str, Any],
    app_key: str,
    client_store: ClientStore,
) -> ClientRecord | None:
    iss = claims.get("iss")
    if not isinstance(iss, str) or not iss:
        return None
    return client_store.find(iss, app_key)


def uses_asymmetric_path(
    header: Mapping[str, Any],
    settings: Settings,
    *,
    force_asymmetric_verify: bool = False,
) -> bool:
    if force_asymmetric_verify:
        return True
    return settings.signed_install and header.get("alg") == RSA_ALGORITHM


def resolve(
    header: Mapping[str, Any],
    claims: Mapping[str, Any],
    client_record: ClientRecord | None,
    settings: Settings,
    *,
    force_asymmetric_verify: bool = False,
    audience: str | None = None,
) -> KeyMaterial:
    """Pick the key a token must verify against.

    ``client_record`` is the result of looking up ``(iss, app_key)``; it is
    required on the shared-secret path and passed through on the public-key path.
    """
    if header.get("alg") == "none":
        raise UnverifiableAlgorithm(
            f"the JWT checking algorithm was set to none for client_key {claims.get('iss')}"
        )

    if uses_asymmetric_path(header, settings, force_asymmetric_verify=force_asymmetric_verify):
        return KeyMaterial(
            key=fetch_public_key(header.get("kid"), settings),
            options=DecodeOptions(
                algorithms=(RSA_ALGORITHM,),
                audience=audience,
                verify_aud=True,
                verify_exp=settings.verify_jwt_expiration,
            ),
            client_record=client_record,
            asymmetric=True,
        )

    if client_record is None:
        raise KeyResolutionError(f"could not find client record for client_key {claims.get('iss')}")
    return KeyMaterial(
        key=client_record.shared_secret,
        options=DecodeOptions(
            algorithms=HMAC_ALGORITHMS,
            verify_exp=settings.verify_jwt_expiration,
        ),
        client_record=client_record,
        asymmetric=False,
    )


def public_key_url(kid: str, settings: Settings) -> str:
    return f"{settings.install_keys_url.rstrip('/')}/{urllib.parse.quote(kid, safe='')}"


def fetch_public_key(kid: object, settings: Settings) -> rsa.RSAPublicKey:
    if not isinstance(kid, str) or not kid.strip():
        raise KeyResolutionError("token header has no kid to fetch a public key for")

    url = public_key_url(kid, settings)
    logger.debug("fetching public key for kid %s", kid)
    try:
        response = http_get(url, timeout=settings.http_timeout)
    except (OSError, ValueError) as exc:
        raise KeyResolutionError(f"error retrieving public key for kid {kid}: {exc}") from exc

    if not response.ok or not response.body.strip():
        raise KeyResolutionError(
            f"error retrieving public key. Response code {response.status} and kid {kid}"
        )

    try:
        key = load_pem_public_key(response.body.strip())
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyResolutionError(f"public key for kid {kid} is not a valid PEM key") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyResolutionError(f"public key for kid {kid} is not an RSA key")
    return key
