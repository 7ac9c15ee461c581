from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

from .errors import DecodeError, GitHubAPIError, TransportError

logger = logging.getLogger(__name__)

ACCEPT = "application/vnd.github.machine-man-preview+json"
USER_AGENT = "gha-token"


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class InstallationToken:
    token: str
    expires_at: str


@dataclass(frozen=True)
class Installation:
    id: int
    access_tokens_url: str
    repositories_url: str


def parse_installation_token(data: Any) -> InstallationToken:
    if not isinstance(data, dict) or not data.get("token"):
        raise DecodeError(f"Missing token in response: {data}")
    return InstallationToken(token=str(data["token"]), expires_at=str(data.get("expires_at") or ""))


def parse_installations(data: Any) -> list[Installation]:
    if not isinstance(data, list):
        raise DecodeError(f"Expected a list of installations, got: {data}")
    out: list[Installation] = []
    for it in data:
        try:
            out.append(
                Installation(
                    id=int(it["id"]),
                    access_tokens_url=str(it["access_tokens_url"]),
                    repositories_url=str(it["repositories_url"]),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Malformed installation entry: {it}") from e
    return out


def parse_repositories(data: Any) -> list[RepoRef]:
    repos = data.get("repositories") if isinstance(data, dict) else None
    if not isinstance(repos, list):
        raise DecodeError(f"Expected a repositories listing, got: {data}")
    out: list[RepoRef] = []
    for it in repos:
        owner = ((it or {}).get("owner") or {}).get("login") or ""
        name = (it or {}).get("name") or ""
        out.append(RepoRef(owner=str(owner), name=str(name)))
    return out


def _dump_request(req: urllib.request.Request) -> str:
    parsed = urllib.parse.urlsplit(req.full_url)
    path = parsed.path or "/"
    if parsed.query:
        path += "?" + parsed.query
    lines = [f"{req.get_method()} {path} HTTP/1.1", f"Host: {parsed.netloc}"]
    lines += [f"{k}: {v}" for k, v in req.header_items()]
    body = req.data.decode("utf-8", errors="replace") if req.data else ""
    return "\r\n".join(lines) + "\r\n\r\n" + body


def _dump_response(status: int, reason: str, headers: Any, body: bytes) -> str:
    lines = [f"HTTP/1.1 {status} {reason}"]
    if headers is not None:
        lines += [f"{k}: {v}" for k, v in headers.items()]
    return "\r\n".join(lines) + "\r\n\r\n" + body.decode("utf-8", errors="replace")


class GitHubClient:
    """Issues single JSON requests against the GitHub REST API.

    With ``verbose`` set, the raw request and response are logged around
    every call.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def _log(self, msg: str, *args: Any) -> None:
        if self.verbose:
            logger.info(msg, *args)

    def request(self, method: str, url: str, authorization: str) -> Any:
        headers = {
            "Authorization": authorization,
            "Accept": ACCEPT,
            "User-Agent": USER_AGENT,
        }
        try:
            req = urllib.request.Request(url, headers=headers, method=method.upper())
            self._log("GitHub request:\n%s", _dump_request(req))
            with urllib.request.urlopen(req) as resp:
                raw = resp.read()
                self._log("GitHub response:\n%s", _dump_response(resp.status, resp.reason, resp.headers, raw))
        except urllib.error.HTTPError as e:
            body = None
            try:
                body = e.read().decode("utf-8", errors="ignore")
            except Exception:
                body = None
            self._log("GitHub response:\n%s", _dump_response(e.code, str(e.reason), e.headers, (body or "").encode("utf-8")))
            raise GitHubAPIError(e.code, str(e.reason), body) from e
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            raise TransportError(f"GitHub request failed: {method} {url}: {e}") from e

        text = raw.decode("utf-8", errors="replace")
        if not text.strip():
            return {}
        try:
            result = json.loads(text)
        except ValueError as e:
            raise DecodeError(f"Invalid JSON in response to {method} {url}: {e}") from e
        self._log("%s", result)
        return result

    def create_installation_token(self, url: str, jwt_token: str) -> InstallationToken:
        data = self.request("POST", url, f"Bearer {jwt_token}")
        return parse_installation_token(data)

    def list_installations(self, api_url: str, jwt_token: str) -> list[Installation]:
        data = self.request("GET", f"{api_url.rstrip('/')}/app/installations", f"Bearer {jwt_token}")
        return parse_installations(data)

    def list_repositories(self, url: str, installation_token: str) -> list[RepoRef]:
        data = self.request("GET", url, f"token {installation_token}")
        return parse_repositories(data)
