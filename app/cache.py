"""
Process-wide memoization of GitHub responses.

Entries never expire and are never overwritten implicitly: once a key is
filled, every lookup returns that value until clear() empties the whole
mapping. Keys are grouped in namespaces so a repository name, the "repos"
listing key and a GraphQL content hash can never collide.
"""

from __future__ import annotations

import base64
import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import Event, Lock
from typing import Any, Callable, Dict, Optional, Tuple

from app import config
from app.logging import get_logger

logger = get_logger(__name__)

COMMITS = "commits"
REPOS = "repos"
GRAPHQL = "graphql"

REPOS_KEY = "repos"
NO_CURSOR = "<none>"


def graphql_key(query: str, cursor: Optional[str] = None) -> str:
    """Deterministic key for one page of a GraphQL query."""
    digest = hashlib.sha1((query + (cursor or NO_CURSOR)).encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


@dataclass
class CacheStats:
    hit: int = 0
    miss: int = 0
    write: int = 0


class Cache(ABC):
    """Key/value store for upstream responses with an administrative clear."""

    stats: CacheStats

    @abstractmethod
    def get(self, namespace: str, key: str) -> Tuple[bool, Any]:
        """Return (found, value)."""

    @abstractmethod
    def set(self, namespace: str, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def get_or_fetch(self, namespace: str, key: str, fetch: Callable[[], Any]) -> Any:
        """Return the cached value, or call fetch() once and remember its result."""

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


class _Flight:
    def __init__(self) -> None:
        self.done = Event()
        self.value: Any = None
        self.error: Optional[BaseException] = None


class MemoryCache(Cache):
    """In-memory cache shared by every request handled by the process.

    With single_flight enabled, concurrent misses on the same key wait for the
    first caller's fetch instead of issuing their own upstream request.
    """

    def __init__(self, *, single_flight: bool = True):
        self._mu = Lock()
        self._data: Dict[Tuple[str, str], Any] = {}
        self._inflight: Dict[Tuple[str, str], _Flight] = {}
        self._generation = 0
        self.single_flight = single_flight
        self.stats = CacheStats()

    def get(self, namespace: str, key: str) -> Tuple[bool, Any]:
        with self._mu:
            k = (namespace, key)
            if k in self._data:
                self.stats.hit += 1
                return True, self._data[k]
            self.stats.miss += 1
            return False, None

    def set(self, namespace: str, key: str, value: Any) -> None:
        with self._mu:
            self._data[(namespace, key)] = value
            self.stats.write += 1

    def get_or_fetch(self, namespace: str, key: str, fetch: Callable[[], Any]) -> Any:
        k = (namespace, key)
        with self._mu:
            if k in self._data:
                self.stats.hit += 1
                return self._data[k]
            self.stats.miss += 1
            flight = self._inflight.get(k) if self.single_flight else None
            leader = flight is None
            if leader:
                flight = _Flight()
                if self.single_flight:
                    self._inflight[k] = flight
            generation = self._generation

        if not leader:
            logger.debug("cache_wait", namespace=namespace, key=key)
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return flight.value

        try:
            value = fetch()
        except BaseException as e:
            flight.error = e
            raise
        else:
            flight.value = value
            with self._mu:
                # a clear() during the fetch wins over this result
                if generation == self._generation:
                    self._data[k] = value
                    self.stats.write += 1
            return value
        finally:
            with self._mu:
                if self._inflight.get(k) is flight:
                    del self._inflight[k]
            flight.done.set()

    def clear(self) -> None:
        with self._mu:
            count = len(self._data)
            self._data.clear()
            self._inflight.clear()
            self._generation += 1
        logger.info("cache_cleared", entries=count)

    def __len__(self) -> int:
        with self._mu:
            return len(self._data)


cache = MemoryCache(single_flight=config.CACHE_SINGLE_FLIGHT)


def get_cache() -> Cache:
    return cache
