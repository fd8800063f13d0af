"""
Operations behind the HTTP routes.

Upstream failures are logged and turned into plain values here (None, False,
[] or a partial list); no route reports a GitHub failure as an HTTP error.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable, Optional

from dateutil import parser as dateparser

from app import config, github_client
from app.cache import GRAPHQL, REPOS, REPOS_KEY, Cache, graphql_key
from app.errors import GitHubError, UpstreamError
from app.logging import get_logger
from app.ownership import infer_repo_owner, owner_from_graphql
from app.pagination import PageResult, fetch_org_events, paginate_graphql
from app.queries import ORG_OVERVIEW_QUERY

logger = get_logger(__name__)


# --- members / repositories ---

def list_members() -> list[dict]:
    try:
        return github_client.get_org_members()
    except GitHubError as e:
        logger.warning("members_failed", error=str(e))
        return []


def _pulls(repo_name: str) -> list[dict]:
    try:
        return github_client.get_pulls(repo_name)
    except GitHubError as e:
        logger.warning("pulls_failed", repo=repo_name, error=str(e))
        return []


def _build_repos(cache: Cache) -> list[dict]:
    repos = github_client.get_org_repos()
    for repo in repos:
        repo["owner"] = infer_repo_owner(repo["name"], cache)
        repo["pulls"] = _pulls(repo["name"])
    return repos


def list_repos(cache: Cache) -> list[dict]:
    try:
        return cache.get_or_fetch(REPOS, REPOS_KEY, lambda: _build_repos(cache))
    except GitHubError as e:
        logger.warning("repos_failed", error=str(e))
        return []


# --- invitations ---

def _create_student_repository(user_id: int, canvas_username: str) -> Optional[str]:
    try:
        repo = github_client.generate_from_template(config.TEMPLATE_REPOSITORY, canvas_username)
        login = github_client.get_user_by_id(user_id)["login"]
        github_client.add_collaborator(repo["name"], login)
    except (GitHubError, KeyError) as e:
        logger.warning("student_repository_failed", user_id=user_id, name=canvas_username, error=str(e))
        return None
    return repo.get("html_url")


def invite(user_id: int, canvas_username: Optional[str] = None) -> dict:
    try:
        github_client.invite_to_org(user_id)
        message = "success"
    except UpstreamError as e:
        message = "already-member" if e.status_code == 422 else "error"
        logger.warning("invite_rejected", user_id=user_id, status_code=e.status_code)
    except GitHubError as e:
        message = "error"
        logger.warning("invite_failed", user_id=user_id, error=str(e))

    result: dict = {"message": message}
    if canvas_username:
        repository = None
        if message != "error" and config.TEMPLATE_REPOSITORY:
            repository = _create_student_repository(user_id, canvas_username)
        result["repository"] = repository
    return result


# --- reviewers ---

_WEB_PULL = re.compile(r"^https?://github\.com/([\w.-]+)/([\w.-]+)/pulls?/(\d+)(?:[/?#]|$)")


def _api_pull_pattern() -> re.Pattern:
    return re.compile(rf"^{re.escape(config.GITHUB_API)}/repos/([\w.-]+)/([\w.-]+)/pulls/(\d+)(?:[/?#]|$)")


def normalize_pull_url(url: str) -> Optional[str]:
    """Rewrite a github.com or API pull request URL into its REST API form.

    Returns None for anything else, so the relay's credentials only ever go
    to the configured GitHub API host.
    """
    url = url.strip()
    for pattern in (_api_pull_pattern(), _WEB_PULL):
        m = pattern.match(url)
        if m:
            owner, repo, number = m.groups()
            return f"{config.GITHUB_API}/repos/{owner}/{repo}/pulls/{number}"
    return None


def request_reviewer(username: str, pull_url: str) -> bool:
    api_url = normalize_pull_url(pull_url)
    if api_url is None:
        logger.warning("reviewer_request_rejected", reviewer=username, pull=pull_url)
        return False
    try:
        status = github_client.request_reviewers(api_url, [username])
    except GitHubError as e:
        logger.warning("reviewer_request_failed", reviewer=username, pull=pull_url, error=str(e))
        return False
    return status == 201


def request_reviewers(pairs: Iterable[tuple[str, str]]) -> bool:
    """Request each review in order, one at a time. Individual failures are ignored."""
    for username, pull_url in pairs:
        request_reviewer(username, pull_url)
    return True


# --- events ---

def org_events() -> PageResult:
    result = fetch_org_events()
    logger.info("events_fetched", count=len(result.items), pages=result.pages, truncated=result.truncated)
    return result


def _created_at(event: dict) -> Optional[datetime]:
    raw = event.get("created_at")
    if not isinstance(raw, str):
        return None
    parsed = dateparser.parse(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def repo_created_events(since: Optional[str] = None) -> list[dict]:
    events = [e for e in org_events().items if e.get("type") == "CreateEvent"]
    if since:
        try:
            cutoff = dateparser.parse(since)
        except (ValueError, OverflowError) as e:
            logger.warning("since_ignored", since=since, error=str(e))
            return events
        if cutoff.tzinfo is None:
            cutoff = cutoff.replace(tzinfo=timezone.utc)
        events = [e for e in events if (_created_at(e) or cutoff) >= cutoff]
    return events


def rate_limit() -> Optional[dict]:
    try:
        return github_client.get_rate_limit()
    except GitHubError as e:
        logger.warning("rate_limit_failed", error=str(e))
        return None


# --- GraphQL ---

def _shape_pull(pr: dict) -> dict:
    reviewers = [
        ((n.get("requestedReviewer") or {}).get("login"))
        for n in (pr.get("reviewRequests") or {}).get("nodes") or []
    ]
    return {
        "number": pr.get("number"),
        "title": pr.get("title"),
        "url": pr.get("url"),
        "author": (pr.get("author") or {}).get("login"),
        "reviewers": [r for r in reviewers if r],
    }


def curated_gql(cache: Cache) -> list[dict]:
    try:
        data = cache.get_or_fetch(
            GRAPHQL,
            graphql_key(ORG_OVERVIEW_QUERY),
            lambda: github_client.graphql(ORG_OVERVIEW_QUERY, {"org": config.ORGANIZATION}),
        )
    except GitHubError as e:
        logger.warning("gql_overview_failed", error=str(e))
        return []

    nodes = (((data.get("organization") or {}).get("repositories") or {}).get("nodes")) or []
    return [
        {
            "name": repo.get("name"),
            "url": repo.get("url"),
            "owner": owner_from_graphql(repo),
            "pullRequests": [_shape_pull(pr) for pr in (repo.get("pullRequests") or {}).get("nodes") or []],
        }
        for repo in nodes
    ]


def run_gql_query(query: str, cache: Cache) -> Optional[dict]:
    """Run a caller-supplied query that takes a `$cursor` variable, following every page."""

    def run_page(cursor: Optional[str]) -> dict:
        return cache.get_or_fetch(
            GRAPHQL,
            graphql_key(query, cursor),
            lambda: github_client.graphql(query, {"cursor": cursor}),
        )

    result = paginate_graphql(run_page, max_pages=config.GRAPHQL_MAX_PAGES)
    if result.truncated:
        logger.warning("gql_query_truncated", pages=result.pages)
    return result.data
