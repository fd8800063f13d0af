import responses
from responses import matchers

from app.errors import NetworkError, UpstreamError
from app.pagination import fetch_org_events, find_connection, paginate_graphql, paginate_pages
from conftest import API, ORG, events


def pages_of(*sizes):
    calls = []

    def fetch(page):
        calls.append(page)
        return events(sizes[page], start=page * 1000)

    return fetch, calls


def test_stops_at_first_short_page():
    fetch, calls = pages_of(100, 100, 7, 100)
    result = paginate_pages(fetch)

    assert calls == [0, 1, 2]
    assert len(result.items) == 207
    assert result.items[0]["id"] == "0"
    assert result.items[100]["id"] == "1000"
    assert result.items[-1]["id"] == "2006"
    assert not result.truncated


def test_never_more_than_four_pages():
    fetch, calls = pages_of(100, 100, 100, 100, 100, 100)
    result = paginate_pages(fetch)

    assert calls == [0, 1, 2, 3]
    assert len(result.items) == 400
    assert result.pages == 4


def test_empty_feed():
    fetch, calls = pages_of(0)
    result = paginate_pages(fetch)

    assert calls == [0]
    assert result.items == []


def test_failure_keeps_partial_results():
    def fetch(page):
        if page == 2:
            raise UpstreamError(502, "bad gateway")
        return events(100, start=page * 100)

    result = paginate_pages(fetch)

    assert len(result.items) == 200
    assert result.truncated
    assert isinstance(result.error, UpstreamError)


def test_failure_on_first_page():
    def fetch(page):
        raise NetworkError("connection refused")

    result = paginate_pages(fetch)

    assert result.items == []
    assert result.pages == 0
    assert result.truncated


def test_org_events_uses_one_based_github_pages(gh):
    for page, size in ((1, 100), (2, 100), (3, 100), (4, 40)):
        gh.add(
            responses.GET,
            f"{API}/orgs/{ORG}/events",
            json=events(size, start=page * 1000),
            match=[matchers.query_param_matcher({"per_page": "100", "page": str(page)})],
        )

    result = fetch_org_events()

    assert len(result.items) == 340
    assert len(gh.calls) == 4


def test_find_connection_is_depth_first():
    data = {"repository": {"ref": {"target": {"history": {"pageInfo": {}, "edges": []}}}}}
    assert find_connection(data) is data["repository"]["ref"]["target"]["history"]
    assert find_connection({"viewer": {"login": "x"}}) is None


def history_page(nodes, next_cursor=None):
    return {
        "repository": {
            "object": {
                "history": {
                    "pageInfo": {"hasNextPage": next_cursor is not None, "endCursor": next_cursor},
                    "nodes": nodes,
                }
            }
        }
    }


def test_graphql_pages_are_merged():
    pages = {None: history_page([{"oid": "a"}, {"oid": "b"}], "c1"), "c1": history_page([{"oid": "c"}])}
    seen = []

    def run_page(cursor):
        seen.append(cursor)
        return pages[cursor]

    result = paginate_graphql(run_page, max_pages=10)

    assert seen == [None, "c1"]
    history = result.data["repository"]["object"]["history"]
    assert [n["oid"] for n in history["nodes"]] == ["a", "b", "c"]
    assert history["pageInfo"]["hasNextPage"] is False
    # the caller's first page is left untouched
    assert len(pages[None]["repository"]["object"]["history"]["nodes"]) == 2


def test_graphql_page_ceiling():
    def run_page(cursor):
        n = int(cursor or 0)
        return history_page([{"oid": str(n)}], str(n + 1))

    result = paginate_graphql(run_page, max_pages=3)

    assert result.pages == 3
    assert len(result.data["repository"]["object"]["history"]["nodes"]) == 3


def test_graphql_failure_returns_pages_so_far():
    def run_page(cursor):
        if cursor:
            raise UpstreamError(502)
        return history_page([{"oid": "a"}], "next")

    result = paginate_graphql(run_page, max_pages=10)

    assert result.truncated
    assert [n["oid"] for n in result.data["repository"]["object"]["history"]["nodes"]] == ["a"]
