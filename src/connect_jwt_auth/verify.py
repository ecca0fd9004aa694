from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .codec import decode_unsafe, decode_verified
from .config import Settings
from .errors import ConnectJwtError, ErrorKind
from .keys import lookup_client_record, resolve
from .models import ClientRecord, RequestInfo, Unverified, VerificationResult, Verified
from .qsh import compute_and_compare
from .store import ClientStore

_log = logging.getLogger(__name__)


class JWTVerification:
    """Verify one inbound Connect JWT.

    Every expected failure comes back as an :class:`Unverified` result and is
    logged; nothing in the verification path raises for bad input.
    """

    def __init__(
        self,
        app_key: str | None,
        audience: str | None,
        force_asymmetric_verify: bool,
        token: str | None,
        request: RequestInfo | None,
        client_store: ClientStore,
        *,
        settings: Settings | None = None,
        exclude_qsh_params: Iterable[str] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self.app_key = app_key
        self.audience = audience
        self.force_asymmetric_verify = force_asymmetric_verify
        self.token = token
        self.request = request
        self.client_store = client_store
        self.settings = settings or Settings()
        self.exclude_qsh_params = tuple(exclude_qsh_params)
        self.logger = logger or _log

    def verify(self) -> VerificationResult:
        if not self.token or not self.app_key:
            return self._fail(ErrorKind.INPUT_MISSING, "missing JWT or app key")

        try:
            unverified_claims, header = decode_unsafe(self.token)
        except ConnectJwtError as exc:
            self.logger.error("Could not decode JWT: %s", exc, exc_info=True)
            return Unverified(_kind(exc, ErrorKind.DECODE_ERROR), str(exc))

        client_key = unverified_claims.get("iss")
        client_record = lookup_client_record(unverified_claims, self.app_key, self.client_store)

        if header.get("alg") == "none":
            return self._fail(
                ErrorKind.UNVERIFIABLE_ALGORITHM,
                f"The JWT checking algorithm was set to none for client_key {client_key} "
                f"and app_key {self.app_key}",
            )

        try:
            material = resolve(
                header,
                unverified_claims,
                client_record,
                self.settings,
                force_asymmetric_verify=self.force_asymmetric_verify,
                audience=self.audience,
            )
        except ConnectJwtError as exc:
            return self._fail(
                _kind(exc, ErrorKind.KEY_RESOLUTION_ERROR),
                f"{exc} (app_key {self.app_key})",
            )

        self.logger.debug(
            "verifying JWT for client_key %s against %s",
            client_key,
            "the install public key" if material.asymmetric else "the shared secret",
        )

        try:
            claims, header = decode_verified(self.token, material.key, material.options)
        except ConnectJwtError as exc:
            kind = _kind(exc, ErrorKind.VERIFICATION_ERROR)
            if kind is ErrorKind.EXPIRED_ERROR:
                expired_at = unverified_claims.get("exp")
                message = f"Error decoding JWT segments - signature is expired at {expired_at}"
            else:
                message = f"Error decoding JWT segments - {exc}"
            return self._fail(kind, message)

        if not header or not claims:
            return self._fail(
                ErrorKind.DECODE_ERROR,
                f"Error decoding JWT segments - no header and payload for client_key {client_key} "
                f"and app_key {self.app_key}",
            )

        query_hash_verified = self._check_qsh(claims, material.client_record)
        context = claims.get("context")
        return Verified(
            client_record=material.client_record,
            account_id=_account_id(claims),
            context=context,
            query_hash_verified=query_hash_verified,
        )

    def _check_qsh(self, claims: Mapping[str, Any], client_record: ClientRecord | None) -> bool:
        claimed = claims.get("qsh")
        if not claimed:
            return False
        if self.request is None:
            self.logger.warning("JWT carries a qsh claim but no request was supplied")
            return False
        verified = compute_and_compare(
            claimed,
            self.request,
            client_record,
            self.exclude_qsh_params,
            self.settings.context_path,
        )
        if not verified:
            self.logger.info(
                "qsh mismatch for %s %s", self.request.method.upper(), self.request.path
            )
        return verified

    def _fail(self, kind: ErrorKind, message: str) -> Unverified:
        self.logger.error(message)
        return Unverified(kind, message)


def _kind(exc: ConnectJwtError, default: ErrorKind) -> ErrorKind:
    return exc.kind if exc.kind is not None else default


def _account_id(claims: Mapping[str, Any]) -> str | None:
    # Jira and Confluence send the acting user inside the context claim.
    context = claims.get("context")
    if isinstance(context, Mapping):
        user = context.get("user")
        if isinstance(user, Mapping) and user.get("accountId"):
            return str(user["accountId"])
    sub = claims.get("sub")
    return sub if isinstance(sub, str) else None


def verify_token(
    token: str | None,
    *,
    app_key: str | None,
    client_store: ClientStore,
    request: RequestInfo | None = None,
    audience: str | None = None,
    force_asymmetric_verify: bool = False,
    settings: Settings | None = None,
    exclude_qsh_params: Iterable[str] = (),
    logger: logging.Logger | None = None,
) -> VerificationResult:
    return JWTVerification(
        app_key,
        audience,
        force_asymmetric_verify,
        token,
        request,
        client_store,
        settings=settings,
        exclude_qsh_params=exclude_qsh_params,
        logger=logger,
    ).verify()
