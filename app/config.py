import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _csv(name: str) -> list[str]:
    return [v.strip() for v in os.getenv(name, "").split(",") if v.strip()]


GITHUB_API = os.getenv("GITHUB_API", "https://api.github.com").rstrip("/")
GITHUB_OAUTH_TOKEN_URL = "https://github.com/login/oauth/access_token"

ORGANIZATION = os.getenv("GITHUB_ORGANIZATION", "")
USERNAME = os.getenv("GITHUB_USERNAME", "")
PRIVATE_KEY = os.getenv("GITHUB_PRIVATE_KEY", "")
CLIENT_ID = os.getenv("GITHUB_CLIENT_ID", "")
CLIENT_SECRET = os.getenv("GITHUB_CLIENT_SECRET", "")

# "owner/name" of the repository new students get a copy of
TEMPLATE_REPOSITORY = os.getenv("GITHUB_TEMPLATE_REPOSITORY") or None

GITHUB_TIMEOUT = float(os.getenv("GITHUB_TIMEOUT", "30"))

CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
ENV = os.getenv("ENV", "development")

CACHE_SINGLE_FLIGHT = _flag("CACHE_SINGLE_FLIGHT", True)
GRAPHQL_MAX_PAGES = int(os.getenv("GRAPHQL_MAX_PAGES", "20"))
GQL_QUERY_ENABLED = _flag("GQL_QUERY_ENABLED", True)
OWNER_BLOCKLIST_EXTRA = _csv("OWNER_BLOCKLIST")
