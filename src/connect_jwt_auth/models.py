from __future__ import annotations

import re
import urllib.parse
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from .errors import ErrorKind

Scalar = Union[str, int, float, bool, None]
QueryValue = Union[Scalar, Sequence["QueryValue"], Mapping[str, "QueryValue"]]

_BRACKET_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_BRACKET_PART = re.compile(r"\[([^\[\]]*)\]")


@dataclass(frozen=True)
class ClientRecord:
    """Credentials stored for one installed add-on instance."""

    client_key: str
    app_key: str
    shared_secret: str
    base_url: str | None = None
    oauth_client_id: str | None = None


@dataclass(frozen=True)
class RequestInfo:
    """The parts of an inbound HTTP request that take part in the query hash."""

    method: str
    url: str
    path: str
    query: Mapping[str, QueryValue] = field(default_factory=dict)

    @classmethod
    def from_url(cls, method: str, url: str) -> RequestInfo:
        parts = urllib.parse.urlsplit(url)
        return cls(
            method=method,
            url=url,
            path=parts.path,
            query=parse_query_string(parts.query),
        )


def parse_query_string(query: str) -> dict[str, QueryValue]:
    """Parse ``a=1&b[]=2&c[d]=3`` into scalars, lists and nested mappings.

    Repeated plain keys keep the last value, like Rack does.
    """
    params: dict[str, Any] = {}
    for raw_key, value in urllib.parse.parse_qsl(query, keep_blank_values=True):
        path = _split_bracket_key(raw_key)
        if path is None:
            params[raw_key] = value
            continue
        _assign(params, path, value)
    return params


def _split_bracket_key(key: str) -> list[str] | None:
    match = _BRACKET_KEY.match(key)
    if match is None or not match.group(2):
        return None
    names = _BRACKET_PART.findall(match.group(2))
    # Only a trailing "[]" denotes a list; "a[][b]" stays a literal key.
    if "" in names[:-1]:
        return None
    return [match.group(1), *names]


def _assign(target: dict[str, Any], path: list[str], value: str) -> None:
    head, rest = path[0], path[1:]
    if not rest:
        target[head] = value
        return
    if rest == [""]:
        current = target.get(head)
        if not isinstance(current, list):
            current = []
            target[head] = current
        current.append(value)
        return
    child = target.get(head)
    if not isinstance(child, dict):
        child = {}
        target[head] = child
    _assign(child, rest, value)


@dataclass(frozen=True)
class Verified:
    client_record: ClientRecord | None
    account_id: str | None
    context: Any
    query_hash_verified: bool

    @property
    def verified(self) -> Literal[True]:
        return True

    def as_tuple(self) -> tuple[ClientRecord | None, str | None, Any, bool, bool]:
        return (
            self.client_record,
            self.account_id,
            self.context,
            self.query_hash_verified,
            True,
        )


@dataclass(frozen=True)
class Unverified:
    error: ErrorKind
    message: str = ""

    @property
    def client_record(self) -> None:
        return None

    @property
    def account_id(self) -> None:
        return None

    @property
    def context(self) -> None:
        return None

    @property
    def query_hash_verified(self) -> Literal[False]:
        return False

    @property
    def verified(self) -> Literal[False]:
        return False

    def as_tuple(self) -> tuple[None, None, None, bool, bool]:
        return (None, None, None, False, False)


VerificationResult = Union[Verified, Unverified]
