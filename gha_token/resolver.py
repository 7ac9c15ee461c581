from __future__ import annotations

import logging

from .config import Config
from .errors import NotFoundError
from .github_app_auth import GitHubAppAuth
from .github_client import GitHubClient, InstallationToken

logger = logging.getLogger(__name__)


class TokenResolver:
    """Turns a Config into a single token string.

    With no selector the app JWT itself is returned. An installation ID
    exchanges the JWT for that installation's token. A repo selector probes
    installations in listed order and returns the token of the first one
    whose repositories include the repo.
    """

    def __init__(self, config: Config, client: GitHubClient, auth: GitHubAppAuth):
        self.config = config
        self.client = client
        self.auth = auth

    def resolve(self) -> str:
        cfg = self.config
        jwt_token = self.auth.create_jwt()

        if not cfg.installation_id and not cfg.repo_owner:
            logger.info("Generated JWT token for app ID %s", cfg.app_id)
            return jwt_token

        if cfg.installation_id:
            token = self.installation_token(jwt_token, cfg.installation_id)
            logger.info(
                "Generated installation token for app ID %s and installation ID %s that expires at %s",
                cfg.app_id,
                cfg.installation_id,
                token.expires_at,
            )
            return token.token

        token = self.installation_token_for_repo(jwt_token, cfg.repo_owner or "", cfg.repo_name or "")
        logger.info(
            "Generated installation token for app ID %s and repo %s that expires at %s",
            cfg.app_id,
            cfg.repo_full_name,
            token.expires_at,
        )
        return token.token

    def installation_token(self, jwt_token: str, installation_id: str) -> InstallationToken:
        url = f"{self.config.api_url}/app/installations/{installation_id}/access_tokens"
        return self.client.create_installation_token(url, jwt_token)

    def installation_token_for_repo(self, jwt_token: str, owner: str, repo: str) -> InstallationToken:
        installations = self.client.list_installations(self.config.api_url, jwt_token)
        for inst in installations:
            token = self.client.create_installation_token(inst.access_tokens_url, jwt_token)
            repos = self.client.list_repositories(inst.repositories_url, token.token)
            for r in repos:
                if r.owner == owner and r.name == repo:
                    return token
        raise NotFoundError(
            f"repository {owner}/{repo} not found in installations of app {self.config.app_id}"
        )
