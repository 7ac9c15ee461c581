from __future__ import annotations


class GhaTokenError(RuntimeError):
    pass


class ConfigError(GhaTokenError):
    pass


class FileError(GhaTokenError):
    pass


class KeyParseError(GhaTokenError):
    pass


class SigningError(GhaTokenError):
    pass


class TransportError(GhaTokenError):
    pass


class GitHubAPIError(TransportError):
    def __init__(self, status: int, message: str, body: str | None = None):
        super().__init__(f"GitHub API error {status}: {message}" + (f" | body={body}" if body else ""))
        self.status = status
        self.message = message
        self.body = body


class DecodeError(GhaTokenError):
    pass


class NotFoundError(GhaTokenError):
    pass
