from __future__ import annotations

import http.client
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

_MAX_BODY_BYTES = 512 * 1024


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def http_get(
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> HttpResponse:
    req = urllib.request.Request(url, headers=dict(headers or {}), method="GET")
    return _send(req, timeout=timeout)


def http_post_form(
    url: str,
    data: Mapping[str, str],
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> HttpResponse:
    body = urllib.parse.urlencode(dict(data)).encode("ascii")
    merged = {"Content-Type": "application/x-www-form-urlencoded"}
    merged.update(headers or {})
    req = urllib.request.Request(url, data=body, headers=merged, method="POST")
    return _send(req, timeout=timeout)


def _send(req: urllib.request.Request, *, timeout: float | None) -> HttpResponse:
    _check_scheme(req.full_url)
    kwargs: dict[str, Any] = {}
    if timeout is not None:
        kwargs["timeout"] = timeout
    try:
        with urllib.request.urlopen(req, **kwargs) as response:
            body = response.read(_MAX_BODY_BYTES + 1)
            status = int(response.status)
    except urllib.error.HTTPError as exc:
        # Non-2xx statuses are reported, not raised; transport failures still raise.
        return HttpResponse(status=exc.code, body=exc.read(_MAX_BODY_BYTES))
    except http.client.HTTPException as exc:
        # A garbled response is a transport failure like any other.
        raise ConnectionError(f"invalid HTTP response from {req.full_url}: {exc!r}") from exc
    if len(body) > _MAX_BODY_BYTES:
        raise ValueError("response too large")
    return HttpResponse(status=status, body=body)


def _check_scheme(url: str) -> None:
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in {"http", "https"}:
        raise ValueError("url must be http(s)")
