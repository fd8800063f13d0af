from __future__ import annotations

from fastapi import APIRouter

from app import relay
from app.schemas import ReviewerBatchItem, ReviewerRequestIn

router = APIRouter(tags=["reviews"])


@router.post("/request-reviewer")
def request_reviewer(body: ReviewerRequestIn) -> bool:
    return relay.request_reviewer(body.username, body.pullRequest.url)


@router.post("/request-reviewers")
def request_reviewers(body: list[ReviewerBatchItem]) -> bool:
    # sequential on purpose: reviewers are assigned in the order given
    return relay.request_reviewers(item.pair() for item in body)
