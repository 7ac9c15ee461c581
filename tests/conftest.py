from __future__ import annotations

import io
import json
import urllib.error
import urllib.request
from typing import Any

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

API = "https://api.github.com"


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def key_path(tmp_path, rsa_key) -> str:
    pem = rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    path = tmp_path / "app.pem"
    path.write_bytes(pem)
    return str(path)


class FakeResponse:
    def __init__(self, body: bytes, status: int = 200, reason: str = "OK"):
        self._body = body
        self.status = status
        self.reason = reason
        self.headers = {"Content-Type": "application/json; charset=utf-8"}

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


class FakeGitHub:
    """Stands in for urllib.request.urlopen and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, bytes]] = {}
        self.requests: list[urllib.request.Request] = []

    def add(self, method: str, url: str, payload: Any = None, status: int = 200, raw: bytes | None = None) -> None:
        body = raw if raw is not None else json.dumps(payload).encode("utf-8")
        self.routes[(method, url)] = (status, body)

    @property
    def calls(self) -> list[tuple[str, str]]:
        return [(r.get_method(), r.full_url) for r in self.requests]

    def __call__(self, req: urllib.request.Request, *args: Any, **kwargs: Any) -> FakeResponse:
        self.requests.append(req)
        key = (req.get_method(), req.full_url)
        if key not in self.routes:
            raise urllib.error.URLError(f"no route for {key}")
        status, body = self.routes[key]
        if status >= 400:
            raise urllib.error.HTTPError(req.full_url, status, "Not Found", {}, io.BytesIO(body))
        return FakeResponse(body, status=status)


@pytest.fixture
def github(monkeypatch) -> FakeGitHub:
    fake = FakeGitHub()
    monkeypatch.setattr(urllib.request, "urlopen", fake)
    return fake
