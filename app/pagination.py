"""
Pagination over the GitHub REST event feed and GraphQL cursor connections.

Neither routine raises on an upstream failure: the data gathered so far is
returned together with the error that stopped the walk.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from app import github_client
from app.errors import GitHubError
from app.logging import get_logger

logger = get_logger(__name__)

EVENTS_PAGE_SIZE = 100
EVENTS_MAX_PAGES = 4


@dataclass
class PageResult:
    items: list = field(default_factory=list)
    pages: int = 0
    error: Optional[Exception] = None

    @property
    def truncated(self) -> bool:
        return self.error is not None


def paginate_pages(
    fetch_page: Callable[[int], list],
    page_size: int = EVENTS_PAGE_SIZE,
    max_pages: int = EVENTS_MAX_PAGES,
) -> PageResult:
    """
    Walk zero-indexed pages until one comes back short or max_pages is reached.

    fetch_page(p) must return the items of page p. A page that fails stops the
    walk; the pages already fetched are kept.
    """
    result = PageResult()
    for page in range(max_pages):
        try:
            batch = fetch_page(page)
        except GitHubError as e:
            logger.warning("pagination_aborted", page=page, error=str(e), items=len(result.items))
            result.error = e
            break
        result.pages += 1
        result.items.extend(batch)
        if len(batch) != page_size:
            break
    return result


def fetch_org_events() -> PageResult:
    return paginate_pages(
        lambda p: github_client.get_org_events(page=p + 1, per_page=EVENTS_PAGE_SIZE)
    )


def find_connection(data: Any) -> Optional[dict]:
    """First dict (depth-first) that looks like a GraphQL connection."""
    if isinstance(data, dict):
        if isinstance(data.get("pageInfo"), dict):
            return data
        for value in data.values():
            found = find_connection(value)
            if found is not None:
                return found
    elif isinstance(data, list):
        for value in data:
            found = find_connection(value)
            if found is not None:
                return found
    return None


def _connection_items(conn: dict) -> tuple[str, list]:
    if "edges" in conn:
        return "edges", conn.get("edges") or []
    return "nodes", conn.get("nodes") or []


@dataclass
class GraphQLPageResult:
    data: Optional[dict] = None
    pages: int = 0
    error: Optional[Exception] = None

    @property
    def truncated(self) -> bool:
        return self.error is not None


def paginate_graphql(
    run_page: Callable[[Optional[str]], dict],
    max_pages: int,
) -> GraphQLPageResult:
    """
    Follow the first connection in a GraphQL response through every page.

    run_page(cursor) returns the `data` of one page. The merged result is the
    first page with the connection's edges/nodes replaced by those of every
    page and its pageInfo taken from the last page fetched.
    """
    result = GraphQLPageResult()
    merged_conn: Optional[dict] = None
    list_key = "nodes"
    cursor: Optional[str] = None

    while result.pages < max_pages:
        try:
            page = run_page(cursor)
        except GitHubError as e:
            logger.warning("graphql_pagination_aborted", page=result.pages, error=str(e))
            result.error = e
            break
        result.pages += 1
        conn = find_connection(page)

        if result.data is None:
            result.data = copy.deepcopy(page)
            merged_conn = find_connection(result.data)
            if merged_conn is None:
                break
            list_key, items = _connection_items(merged_conn)
            merged_conn[list_key] = list(items)
        elif conn is not None:
            merged_conn[list_key].extend(_connection_items(conn)[1])
            merged_conn["pageInfo"] = conn["pageInfo"]

        page_info = (conn or {}).get("pageInfo") or {}
        if not page_info.get("hasNextPage") or not page_info.get("endCursor"):
            break
        cursor = page_info["endCursor"]
    return result
