"""
Best-guess owner of a repository, for display only.

Two signals are used: the REST commit list (most recent commit with an
author), and for the GraphQL overview the first commits on the default
branch, skipping service accounts, with pull-request authorship as fallback.
"""

from __future__ import annotations

from typing import Optional

from app import config, github_client
from app.cache import COMMITS, Cache
from app.errors import GitHubError
from app.logging import get_logger

logger = get_logger(__name__)

GRAPHQL_COMMIT_SCAN = 5

OWNER_BLOCKLIST = frozenset(
    {
        "github-classroom[bot]",
        "github-actions[bot]",
        "dependabot[bot]",
        "web-flow",
        "invalid-email-address",
        "ghost",
    }
)


def blocklist() -> frozenset:
    extra = set(config.OWNER_BLOCKLIST_EXTRA)
    if config.USERNAME:
        extra.add(config.USERNAME)
    return OWNER_BLOCKLIST | extra


def owner_from_commits(commits: Optional[list]) -> Optional[dict]:
    if not commits:
        return None

    for item in commits:
        if item.get("author"):
            return item["author"]
        raw = (item.get("commit") or {}).get("author")
        if raw:
            # commit is not linked to a GitHub account
            return {
                "login": raw.get("name"),
                "name": raw.get("name"),
                "email": raw.get("email"),
                "synthetic": True,
            }
    return None


def infer_repo_owner(repo_name: str, cache: Cache) -> Optional[dict]:
    try:
        commits = cache.get_or_fetch(COMMITS, repo_name, lambda: github_client.get_commits(repo_name))
    except GitHubError as e:
        logger.warning("owner_lookup_failed", repo=repo_name, error=str(e))
        return None
    return owner_from_commits(commits)


def _commit_login(node: dict) -> Optional[str]:
    user = ((node or {}).get("author") or {}).get("user") or {}
    return user.get("login")


def owner_from_graphql(repo_node: dict) -> Optional[str]:
    blocked = blocklist()
    history = (((repo_node.get("defaultBranchRef") or {}).get("target") or {}).get("history") or {})
    for node in (history.get("nodes") or [])[:GRAPHQL_COMMIT_SCAN]:
        login = _commit_login(node)
        if login and login not in blocked:
            return login

    for pr in (repo_node.get("pullRequests") or {}).get("nodes") or []:
        login = (pr.get("author") or {}).get("login")
        if login:
            return login
    return None
