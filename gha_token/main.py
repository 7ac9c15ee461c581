from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import NoReturn, Sequence

import dotenv

from .config import DEFAULT_API_URL, Config, parse_repo
from .errors import ConfigError, GhaTokenError
from .github_app_auth import GitHubAppAuth
from .github_client import GitHubClient
from .resolver import TokenResolver

_HANDLER_NAME = "gha-token"


class UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(
        prog="gha-token",
        description="Print a GitHub App JWT or installation access token to stdout.",
    )
    p.add_argument(
        "-g", "--apiUrl", dest="api_url",
        default=os.getenv("GITHUB_API_URL", DEFAULT_API_URL),
        help="GitHub API URL (default: %(default)s)",
    )
    p.add_argument(
        "-a", "--appId", dest="app_id",
        default=os.getenv("GITHUB_APP_ID"),
        help="Application ID as defined in app settings (required)",
    )
    p.add_argument(
        "-k", "--keyPath", dest="key_path",
        default=os.getenv("GITHUB_APP_PRIVATE_KEY_PATH"),
        help="Path to key PEM file generated in app settings (required)",
    )
    p.add_argument(
        "-i", "--installId", dest="installation_id",
        help="Installation ID of the application",
    )
    p.add_argument("-r", "--repo", help="{owner/repo} of the GitHub repository")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose stderr")
    return p


def usage(parser: argparse.ArgumentParser, msg: str = "") -> int:
    if msg:
        print(f"ERROR: {msg}\n", file=sys.stderr)
    parser.print_help(sys.stderr)
    return 1


def setup_logging(verbose: bool) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO if verbose else logging.WARNING)

    # Drop the handler left by a previous call
    for existing in root_logger.handlers[:]:
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
    root_logger.addHandler(handler)


def parse_config(parser: argparse.ArgumentParser, argv: Sequence[str]) -> Config:
    args = parser.parse_args(argv)

    repo_owner = repo_name = None
    if args.repo:
        repo_owner, repo_name = parse_repo(args.repo)

    installation_id = args.installation_id
    if not installation_id and not args.repo:
        installation_id = os.getenv("GITHUB_APP_INSTALLATION_ID")

    return Config(
        app_id=args.app_id or "",
        key_path=args.key_path or "",
        api_url=args.api_url,
        installation_id=installation_id or None,
        repo_owner=repo_owner,
        repo_name=repo_name,
        verbose=args.verbose,
    )


def main(argv: Sequence[str] | None = None) -> int:
    dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))

    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    parser = build_parser()
    if not argv:
        return usage(parser)

    try:
        cfg = parse_config(parser, argv)
    except (UsageError, ConfigError) as e:
        return usage(parser, str(e))

    setup_logging(cfg.verbose)

    try:
        resolver = TokenResolver(
            config=cfg,
            client=GitHubClient(verbose=cfg.verbose),
            auth=GitHubAppAuth(cfg.app_id, cfg.key_path),
        )
        token = resolver.resolve()
    except GhaTokenError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(token)
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
