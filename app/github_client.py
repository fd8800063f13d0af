from typing import Any
from urllib.parse import parse_qs

import requests

from app import config
from app.errors import GraphQLError, NetworkError, UpstreamError


def _headers() -> dict:
    return {"Accept": "application/vnd.github+json"}


def _auth() -> tuple[str, str]:
    return (config.USERNAME, config.PRIVATE_KEY)


def _body(r: requests.Response) -> Any:
    try:
        return r.json()
    except ValueError:
        return r.text


def _request(method: str, url: str, **kwargs) -> requests.Response:
    kwargs.setdefault("headers", _headers())
    kwargs.setdefault("auth", _auth())
    kwargs.setdefault("timeout", config.GITHUB_TIMEOUT)
    try:
        r = requests.request(method, url, **kwargs)
    except requests.RequestException as e:
        raise NetworkError(str(e)) from e
    if not r.ok:
        raise UpstreamError(r.status_code, _body(r), url)
    return r


def _json(r: requests.Response) -> Any:
    try:
        return r.json()
    except ValueError as e:
        raise UpstreamError(r.status_code, r.text, r.url) from e


def _get(path: str, params: dict | None = None) -> Any:
    r = _request("GET", f"{config.GITHUB_API}{path}", params=params)
    return _json(r)


def _org_repo(repo_name: str) -> str:
    return f"/repos/{config.ORGANIZATION}/{repo_name}"


def get_org_members() -> list[dict]:
    return _get(f"/orgs/{config.ORGANIZATION}/members", params={"per_page": 100})


def get_org_repos() -> list[dict]:
    return _get(f"/orgs/{config.ORGANIZATION}/repos", params={"per_page": 100})


def get_commits(repo_name: str, per_page: int = 30) -> list[dict]:
    return _get(f"{_org_repo(repo_name)}/commits", params={"per_page": per_page})


def get_pulls(repo_name: str) -> list[dict]:
    return _get(f"{_org_repo(repo_name)}/pulls", params={"state": "open", "per_page": 100})


def get_org_events(page: int, per_page: int = 100) -> list[dict]:
    """Fetch one page of the organization event feed. `page` is 1-based, as GitHub expects."""
    return _get(
        f"/orgs/{config.ORGANIZATION}/events",
        params={"per_page": per_page, "page": page},
    )


def get_rate_limit() -> dict:
    return _get("/rate_limit")


def get_user_by_id(user_id: int) -> dict:
    return _get(f"/user/{user_id}")


def invite_to_org(user_id: int) -> dict:
    r = _request(
        "POST",
        f"{config.GITHUB_API}/orgs/{config.ORGANIZATION}/invitations",
        json={"invitee_id": user_id},
    )
    return _json(r)


def generate_from_template(template: str, name: str, private: bool = True) -> dict:
    r = _request(
        "POST",
        f"{config.GITHUB_API}/repos/{template}/generate",
        json={"owner": config.ORGANIZATION, "name": name, "private": private},
    )
    return _json(r)


def add_collaborator(repo_name: str, login: str, permission: str = "push") -> int:
    r = _request(
        "PUT",
        f"{config.GITHUB_API}{_org_repo(repo_name)}/collaborators/{login}",
        json={"permission": permission},
    )
    return r.status_code


def request_reviewers(pull_api_url: str, logins: list[str]) -> int:
    """Ask GitHub to request reviews on a pull request. Returns the HTTP status."""
    r = _request(
        "POST",
        f"{pull_api_url.rstrip('/')}/requested_reviewers",
        json={"reviewers": logins},
    )
    return r.status_code


def graphql(query: str, variables: dict | None = None) -> dict:
    url = f"{config.GITHUB_API}/graphql"
    r = _request(
        "POST",
        url,
        json={"query": query, "variables": variables or {}},
        headers={
            "Authorization": f"Bearer {config.PRIVATE_KEY}",
            "Content-Type": "application/json",
        },
        auth=None,
    )
    payload = _json(r)
    if payload.get("errors") and not payload.get("data"):
        raise GraphQLError(payload["errors"], url)
    return payload.get("data") or {}


def exchange_oauth_code(code: str, state: str | None = None) -> str | None:
    """Trade an OAuth callback code for a user access token."""
    r = _request(
        "POST",
        config.GITHUB_OAUTH_TOKEN_URL,
        json={
            "client_id": config.CLIENT_ID,
            "client_secret": config.CLIENT_SECRET,
            "code": code,
            "state": state,
        },
        headers={"Accept": "application/json"},
        auth=None,
    )
    # GitHub answers form-encoded unless the Accept header is honoured
    if r.headers.get("Content-Type", "").startswith("application/json"):
        return _json(r).get("access_token")
    return (parse_qs(r.text).get("access_token") or [None])[0]
