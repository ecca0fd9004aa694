from __future__ import annotations

from .codec import DecodeOptions, decode_unsafe, decode_verified, encode
from .config import Settings
from .errors import (
    ConnectJwtError,
    DecodeError,
    ErrorKind,
    ExpiredError,
    InputMissing,
    KeyResolutionError,
    MissingAccountId,
    MissingAuthenticationContext,
    MissingOAuthClientId,
    TokenExchangeError,
    UnverifiableAlgorithm,
    VerificationError,
)
from .models import ClientRecord, RequestInfo, Unverified, VerificationResult, Verified
from .oauth2 import get_access_token, prepare_jwt_token
from .qsh import compute_qsh
from .store import ClientStore, InMemoryClientStore
from .verify import JWTVerification, verify_token
from .version import __version__

__all__ = [
    "ClientRecord",
    "ClientStore",
    "ConnectJwtError",
    "DecodeError",
    "DecodeOptions",
    "ErrorKind",
    "ExpiredError",
    "InMemoryClientStore",
    "InputMissing",
    "JWTVerification",
    "KeyResolutionError",
    "MissingAccountId",
    "MissingAuthenticationContext",
    "MissingOAuthClientId",
    "RequestInfo",
    "Settings",
    "TokenExchangeError",
    "UnverifiableAlgorithm",
    "Unverified",
    "VerificationError",
    "VerificationResult",
    "Verified",
    "__version__",
    "compute_qsh",
    "decode_unsafe",
    "decode_verified",
    "encode",
    "get_access_token",
    "prepare_jwt_token",
    "verify_token",
]
