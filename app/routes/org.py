from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app import relay
from app.cache import Cache, get_cache
from app.schemas import InviteIn

router = APIRouter(tags=["organization"])


@router.post("/invite")
def invite(body: InviteIn):
    return relay.invite(body.userId, body.canvasUsername)


@router.get("/users")
def users():
    return relay.list_members()


@router.get("/repos")
def repos(cache: Cache = Depends(get_cache)):
    """
    Organization repositories, each with `owner` and `pulls` attached.
    The whole list is cached until /clear-cache.
    """
    return relay.list_repos(cache)


@router.get("/events")
def events(response: Response):
    result = relay.org_events()
    if result.truncated:
        response.headers["X-Events-Truncated"] = "true"
    return result.items


@router.get("/events/repo-created")
def repo_created(since: Optional[str] = Query(None, description="ISO-8601 lower bound on created_at")):
    return relay.repo_created_events(since)
