from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol

import requests


@dataclass(frozen=True)
class HttpResult:
    status_code: int
    headers: dict[str, str]
    body_bytes: bytes

    def json(self) -> Any:
        return json.loads(self.body_bytes.decode("utf-8"))


class GenerateTransport(Protocol):
    def post_generate(self, payload: dict[str, Any]) -> HttpResult: ...


class GenerateApiClient:
    """Posts chat submissions to ``/api/generate``.

    Network errors propagate as ``requests.RequestException``; the caller
    decides how to show them.
    """

    def __init__(self, *, base_url: str, timeout_seconds: float):
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = float(timeout_seconds)

    @property
    def generate_url(self) -> str:
        return f"{self._base_url}/api/generate"

    def post_generate(self, payload: dict[str, Any]) -> HttpResult:
        resp = requests.post(self.generate_url, json=payload, timeout=self._timeout_seconds)
        return HttpResult(
            status_code=int(resp.status_code),
            headers={k.lower(): v for k, v in resp.headers.items()},
            body_bytes=resp.content,
        )
