from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, model_validator


class InviteIn(BaseModel):
    userId: int
    canvasUsername: Optional[str] = None


class PullRequestRef(BaseModel):
    url: str


class ReviewerRequestIn(BaseModel):
    username: str
    pullRequest: PullRequestRef


class ReviewerBatchItem(BaseModel):
    """One entry of /request-reviewers.

    Clients send either {reviewer, pr} or {username, pullRequest}; pr may be
    a bare URL or an object with a url.
    """

    reviewer: Optional[str] = None
    pr: Optional[Union[str, PullRequestRef]] = None
    username: Optional[str] = None
    pullRequest: Optional[Union[str, PullRequestRef]] = None

    @model_validator(mode="after")
    def _check_shape(self):
        if not (self.reviewer or self.username):
            raise ValueError("reviewer or username is required")
        if self.pr is None and self.pullRequest is None:
            raise ValueError("pr or pullRequest is required")
        return self

    def pair(self) -> tuple[str, str]:
        ref = self.pr if self.pr is not None else self.pullRequest
        url = ref.url if isinstance(ref, PullRequestRef) else ref
        return (self.reviewer or self.username, url)


class GraphQLQueryIn(BaseModel):
    query: str
