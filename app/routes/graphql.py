from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app import config, relay
from app.cache import Cache, get_cache
from app.schemas import GraphQLQueryIn

router = APIRouter(tags=["graphql"])


@router.get("/gql")
def gql(cache: Cache = Depends(get_cache)):
    return relay.curated_gql(cache)


@router.post("/gql-query")
def gql_query(body: GraphQLQueryIn, cache: Cache = Depends(get_cache)):
    """
    Run a caller-supplied GraphQL query with the relay's token and follow its
    `$cursor` pagination. Any query text is accepted.
    """
    if not config.GQL_QUERY_ENABLED:
        raise HTTPException(status_code=404, detail="Not Found")
    return relay.run_gql_query(body.query, cache)
