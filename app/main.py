import json
import uuid

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from app import config, github_client
from app.cache import Cache, get_cache
from app.errors import GitHubError
from app.logging import configure_logging, get_logger
from app.relay import rate_limit
from app.routes.graphql import router as graphql_router
from app.routes.org import router as org_router
from app.routes.reviews import router as reviews_router

configure_logging()
logger = get_logger(__name__)

app = FastAPI(title="GitHub Organization Relay")

# CORS: the front-end runs on another origin and calls the relay from the browser
allow_origins = [o.strip() for o in config.CORS_ALLOW_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(org_router)
app.include_router(reviews_router)
app.include_router(graphql_router)


@app.get("/")
def root():
    return "OK"


@app.get("/oauth")
def oauth_start():
    return {"id": str(uuid.uuid4()), "clientId": config.CLIENT_ID}


CALLBACK_PAGE = """<!DOCTYPE html>
<html>
<head>
  <script>
    window.opener && window.opener.postMessage(JSON.stringify({payload}), '*')
    window.close()
  </script>
</head>
<body>
  <span style="padding: 2rem; font-size: 18px;">
    This page should close in a few seconds.
  </span>
</body>
</html>
"""


@app.get("/oauth/callback", response_class=HTMLResponse)
def oauth_callback(code: str = Query(...), state: str | None = Query(None)):
    try:
        token = github_client.exchange_oauth_code(code, state)
    except GitHubError as e:
        logger.warning("oauth_exchange_failed", error=str(e))
        token = None

    payload = json.dumps({"success": token is not None, "accessToken": token})
    # keep the token from closing the script element
    payload = payload.replace("<", "\\u003c")
    return CALLBACK_PAGE.replace("{payload}", payload)


@app.get("/limit")
def limit():
    return rate_limit()


@app.get("/clear-cache")
def clear_cache(cache: Cache = Depends(get_cache)):
    cache.clear()
    return "OK"


@app.get("/cache/stats")
def cache_stats(cache: Cache = Depends(get_cache)):
    return {
        "entries": len(cache),
        "hits": cache.stats.hit,
        "misses": cache.stats.miss,
        "writes": cache.stats.write,
    }
