import pytest
import responses
from fastapi.testclient import TestClient

from app import config
from app.cache import MemoryCache, get_cache
from app.main import app

API = "https://api.github.com"
ORG = "acme"


@pytest.fixture(autouse=True)
def github_settings(monkeypatch):
    """Every test talks to the same fake organization."""
    monkeypatch.setattr(config, "GITHUB_API", API)
    monkeypatch.setattr(config, "ORGANIZATION", ORG)
    monkeypatch.setattr(config, "USERNAME", "relay-bot")
    monkeypatch.setattr(config, "PRIVATE_KEY", "secret")
    monkeypatch.setattr(config, "CLIENT_ID", "client-id")
    monkeypatch.setattr(config, "CLIENT_SECRET", "client-secret")
    monkeypatch.setattr(config, "TEMPLATE_REPOSITORY", None)
    monkeypatch.setattr(config, "OWNER_BLOCKLIST_EXTRA", [])
    monkeypatch.setattr(config, "GQL_QUERY_ENABLED", True)


@pytest.fixture()
def gh():
    """Mocked GitHub: every outbound `requests` call must be registered here."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture()
def cache():
    return MemoryCache()


@pytest.fixture()
def client(cache):
    """
    Override the process-wide cache so each test starts empty.
    """
    app.dependency_overrides[get_cache] = lambda: cache
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def commit(login=None, name="Someone", email="someone@example.com"):
    item = {"sha": f"sha-{name}", "commit": {"author": {"name": name, "email": email}}}
    item["author"] = {"login": login, "id": 1} if login else None
    return item


def events(n, type_="PushEvent", start=0):
    return [{"id": str(start + i), "type": type_} for i in range(n)]
