"""Query string hash (qsh) canonicalization.

The canonical request is ``METHOD&PATH&QUERY`` where QUERY holds every
parameter except ``jwt`` and the excluded names, sorted by key and
percent-encoded. The qsh is the hex SHA-256 of that string.
"""

from __future__ import annotations

import hashlib
import hmac
import urllib.parse
from collections.abc import Iterable, Mapping
from typing import Any

from .models import ClientRecord, QueryValue, RequestInfo

JWT_PARAM = "jwt"


def _quote(text: str) -> str:
    # Only the unreserved set stays literal; space becomes %20.
    return urllib.parse.quote(text, safe="")


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _encode_scalar(key: str, value: Any) -> str:
    return f"{_quote(key)}={_quote(_scalar_text(value))}"


def _join(parts: Iterable[str]) -> str:
    return "&".join(part for part in parts if part)


def _is_empty_container(value: QueryValue) -> bool:
    return isinstance(value, (Mapping, list, tuple)) and not value


def _encode_sequence(key: str, values: Iterable[QueryValue]) -> str:
    items = list(values)
    if not items:
        return f"{_quote(key + '[]')}="
    return _join(encode_param(f"{key}[]", item) for item in items)


def _encode_mapping(key: str, values: Mapping[str, QueryValue]) -> str:
    # Empty containers nested in a mapping contribute nothing, so an empty
    # mapping encodes to the empty string.
    return _join(
        sorted(
            encode_param(f"{key}[{sub}]", item)
            for sub, item in values.items()
            if not _is_empty_container(item)
        )
    )


def encode_param(key: str, value: QueryValue) -> str:
    if isinstance(value, Mapping):
        return _encode_mapping(key, value)
    if isinstance(value, (list, tuple)):
        return _encode_sequence(key, value)
    return _encode_scalar(key, value)


def canonical_query(
    query: Mapping[str, QueryValue],
    excluded_params: Iterable[str] = (),
) -> str:
    excluded = {JWT_PARAM, *excluded_params}
    pairs = sorted(
        ((key, value) for key, value in query.items() if key not in excluded),
        key=lambda pair: pair[0],
    )
    return _join(encode_param(key, value) for key, value in pairs)


def canonical_path(
    request: RequestInfo,
    client_record: ClientRecord | None,
    context_path: str = "",
) -> str:
    base_url = client_record.base_url if client_record is not None else None
    url = urllib.parse.urlsplit(request.url)._replace(query="", fragment="").geturl()
    if base_url and base_url in url:
        path = url[url.index(base_url) + len(base_url) :]
    else:
        path = request.path
        if context_path and path.startswith(context_path):
            path = path[len(context_path) :]
    return path or "/"


def canonical_request(
    request: RequestInfo,
    client_record: ClientRecord | None = None,
    excluded_params: Iterable[str] = (),
    context_path: str = "",
) -> str:
    path = canonical_path(request, client_record, context_path)
    query = canonical_query(request.query, excluded_params)
    return f"{request.method.upper()}&{path}&{query}"


def compute_qsh(
    request: RequestInfo,
    client_record: ClientRecord | None = None,
    excluded_params: Iterable[str] = (),
    context_path: str = "",
) -> str:
    canonical = canonical_request(request, client_record, excluded_params, context_path)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_and_compare(
    claimed_qsh: object,
    request: RequestInfo,
    client_record: ClientRecord | None = None,
    excluded_params: Iterable[str] = (),
    context_path: str = "",
) -> bool:
    if not isinstance(claimed_qsh, str):
        return False
    expected = compute_qsh(request, client_record, excluded_params, context_path)
    return hmac.compare_digest(claimed_qsh.encode("utf-8"), expected.encode("ascii"))
