from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigError

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class Config:
    app_id: str
    key_path: str
    api_url: str = DEFAULT_API_URL
    installation_id: str | None = None
    repo_owner: str | None = None
    repo_name: str | None = None
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.app_id:
            raise ConfigError("appId is required")
        if not self.key_path:
            raise ConfigError("keyPath is required")
        if bool(self.repo_owner) != bool(self.repo_name):
            raise ConfigError("repo owner and name must be given together")
        object.__setattr__(self, "api_url", (self.api_url or DEFAULT_API_URL).rstrip("/"))

    @property
    def repo_full_name(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"


def parse_repo(value: str) -> tuple[str, str]:
    parts = value.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ConfigError(f"repo argument value must be owner/repo but was: {value}")
    return parts[0], parts[1]
