"""
In-memory caches for the catalog: the Twitch access token and the ranked
result sets, keyed by request parameters.

One instance is created per application and injected into the catalog
service, so TTL and single-flight behaviour can be tested in isolation.
"""

import json
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import structlog

from questlog.metrics import catalog_cache_lookups_total, catalog_inflight_fetches

logger = structlog.get_logger("catalog_cache")


def make_cache_key(prefix: str, **kwargs) -> str:
    """
    Generate a cache key from keyword arguments

    Args:
        prefix: Prefix for the cache key (e.g., "catalog")
        **kwargs: Values to include in key; lists are kept in order

    Returns:
        Cache key string
    """
    key_parts = [prefix]
    for k, v in sorted(kwargs.items()):
        key_parts.append(f"{k}={json.dumps(v, sort_keys=True)}")
    return ":".join(key_parts)


@dataclass
class CacheEntry:
    payload: Any
    cached_at: float


class CatalogCache:
    """Token cache plus a TTL map of ranked results with single-flight per key"""

    def __init__(self, ttl: float = 300, token_expiry_margin: float = 60, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self.token_expiry_margin = token_expiry_margin
        self._clock = clock
        self._lock = threading.Lock()
        self._results: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, Future] = {}
        self._access_token: Optional[str] = None
        self._token_expires_at: float = 0.0
        self._stats = {"hits": 0, "misses": 0, "shared": 0, "fetch_errors": 0}

    # ------------------------------------------------------------------
    # Access token
    # ------------------------------------------------------------------

    def get_token(self) -> Optional[str]:
        """Return the cached token while more than the expiry margin remains"""
        with self._lock:
            if self._access_token and self._token_expires_at - self._clock() > self.token_expiry_margin:
                return self._access_token
            return None

    def store_token(self, token: str, expires_in: float) -> None:
        with self._lock:
            self._access_token = token
            self._token_expires_at = self._clock() + max(float(expires_in or 0), 0.0)

    # ------------------------------------------------------------------
    # Ranked results
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._get_fresh(key)

    def _get_fresh(self, key: str) -> Optional[Any]:
        entry = self._results.get(key)
        if entry is None:
            return None
        if self._clock() - entry.cached_at < self.ttl:
            return entry.payload
        del self._results[key]
        return None

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [k for k, entry in self._results.items() if now - entry.cached_at >= self.ttl]
        for k in expired:
            del self._results[k]

    def get_or_fetch(self, key: str, fetcher: Callable[[], Any]) -> Any:
        """Return the cached payload for key, fetching it at most once.

        Callers arriving while a fetch for the same key is running wait for
        that fetch and get its result (or its exception). Failures are not
        cached.
        """
        with self._lock:
            payload = self._get_fresh(key)
            if payload is not None:
                self._stats["hits"] += 1
                catalog_cache_lookups_total.labels(result="hit").inc()
                logger.debug("Catalog cache HIT", key=key)
                return payload

            flight = self._in_flight.get(key)
            leader = flight is None
            if leader:
                flight = Future()
                self._in_flight[key] = flight
                self._stats["misses"] += 1
                catalog_cache_lookups_total.labels(result="miss").inc()
            else:
                self._stats["shared"] += 1
                catalog_cache_lookups_total.labels(result="shared").inc()

        if not leader:
            logger.debug("Catalog cache waiting on in-flight fetch", key=key)
            return flight.result()

        logger.debug("Catalog cache MISS", key=key)
        catalog_inflight_fetches.inc()
        try:
            payload = fetcher()
        except BaseException as exc:
            with self._lock:
                self._stats["fetch_errors"] += 1
                self._in_flight.pop(key, None)
            flight.set_exception(exc)
            raise
        finally:
            catalog_inflight_fetches.dec()

        with self._lock:
            self._purge_expired()
            self._results[key] = CacheEntry(payload=payload, cached_at=self._clock())
            self._in_flight.pop(key, None)
        flight.set_result(payload)
        return payload

    def clear(self) -> int:
        """Drop every ranked result set; the access token is kept"""
        with self._lock:
            count = len(self._results)
            self._results.clear()
        logger.info("Catalog cache cleared", entries=count)
        return count

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                **self._stats,
                "entries": len(self._results),
                "in_flight": len(self._in_flight),
                "ttl": self.ttl,
                "token_cached": self._access_token is not None,
            }
