"""Error taxonomy for token verification and issuance."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INPUT_MISSING = "InputMissing"
    DECODE_ERROR = "DecodeError"
    UNVERIFIABLE_ALGORITHM = "UnverifiableAlgorithm"
    KEY_RESOLUTION_ERROR = "KeyResolutionError"
    VERIFICATION_ERROR = "VerificationError"
    EXPIRED_ERROR = "ExpiredError"


class ConnectJwtError(Exception):
    """Base class for every error raised by this package."""

    kind: ErrorKind | None = None


class InputMissing(ConnectJwtError):
    kind = ErrorKind.INPUT_MISSING


class MissingAuthenticationContext(InputMissing):
    """No client record was supplied for issuing an assertion."""


class MissingOAuthClientId(InputMissing):
    """The client record has no OAuth client id to issue an assertion for."""


class MissingAccountId(InputMissing):
    """No user account id was supplied for issuing an assertion."""


class DecodeError(ConnectJwtError):
    """Token structure is malformed (segments, base64 or JSON)."""

    kind = ErrorKind.DECODE_ERROR


class UnverifiableAlgorithm(ConnectJwtError):
    """Token header asks for ``alg=none``."""

    kind = ErrorKind.UNVERIFIABLE_ALGORITHM


class KeyResolutionError(ConnectJwtError):
    """No key material could be found: unknown client record or failed key fetch."""

    kind = ErrorKind.KEY_RESOLUTION_ERROR


class VerificationError(ConnectJwtError):
    """Signature or claims did not validate."""

    kind = ErrorKind.VERIFICATION_ERROR


class ExpiredError(VerificationError):
    kind = ErrorKind.EXPIRED_ERROR


class TokenExchangeError(ConnectJwtError):
    """The authorization server refused an assertion exchange."""

    def __init__(self, status: int, body: bytes = b"") -> None:
        super().__init__(f"Request failed with {status}")
        self.status = status
        self.body = body
