from __future__ import annotations

import time

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .errors import ConfigError, FileError, KeyParseError, SigningError

# GitHub rejects app JWTs that live longer than ten minutes.
JWT_LIFETIME_SECONDS = 10 * 60


class GitHubAppAuth:
    def __init__(self, app_id: str | None, private_key_path: str | None):
        if not app_id:
            raise ConfigError("appId is required")
        if not private_key_path:
            raise ConfigError("keyPath is required")
        self.app_id = app_id
        self.private_key_path = private_key_path

    def _read_private_key(self) -> bytes:
        try:
            with open(self.private_key_path, "rb") as f:
                return f.read()
        except OSError as e:
            raise FileError(f"Unable to read key file {self.private_key_path}: {e}") from e

    def _load_private_key(self) -> rsa.RSAPrivateKey:
        data = self._read_private_key()
        try:
            key = serialization.load_pem_private_key(data, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyParseError(f"Invalid PEM private key in {self.private_key_path}: {e}") from e
        if not isinstance(key, rsa.RSAPrivateKey):
            raise KeyParseError(f"Key in {self.private_key_path} is not an RSA private key")
        return key

    def create_jwt(self, now: int | None = None) -> str:
        private_key = self._load_private_key()
        if now is None:
            now = int(time.time())
        payload = {
            "iss": self.app_id,
            "iat": now,
            "exp": now + JWT_LIFETIME_SECONDS,
        }
        try:
            return jwt.encode(payload, private_key, algorithm="RS256")
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise SigningError(f"Failed to sign JWT: {e}") from e
