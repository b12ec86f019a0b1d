"""Point-store helpers with TTL caching for the route server.

Bins come either from a local YAML/JSON seed file or from the collections
backend over HTTP. Remote reads are retried on 5xx and transport errors with
exponential backoff and jitter.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx
import yaml
from cachetools import TTLCache

from binroute.tools import ConfigLoader

logger = logging.getLogger(__name__)

# Retry configuration
MAX_RETRIES = 3
BACKOFF_BASE = 2
BACKOFF_MAX = 8

CACHE_MAXSIZE = 64

_CACHES: Dict[int, TTLCache] = {}


class PointStoreError(RuntimeError):
    """Raised when bins cannot be read from the configured store."""


@dataclass
class StoreSettings:
    """Where to read bins from; the ``store`` section of a profile."""

    backend: str = "file"
    path: Optional[str] = "data/bins.yaml"
    base_url: Optional[str] = None
    timeout_sec: float = 10.0
    cache_ttl_sec: int = 60

    @classmethod
    def from_profile(cls, profile: Optional[Mapping[str, Any]]) -> "StoreSettings":
        section = dict((profile or {}).get("store") or {})
        defaults = cls()
        settings = cls(
            backend=str(section.get("backend", defaults.backend)).lower(),
            path=section.get("path", defaults.path),
            base_url=section.get("base_url", defaults.base_url),
            timeout_sec=float(section.get("timeout_sec", defaults.timeout_sec)),
            cache_ttl_sec=int(section.get("cache_ttl_sec", defaults.cache_ttl_sec)),
        )
        if settings.backend not in ("file", "http"):
            raise ValueError(f"Unknown store backend '{settings.backend}'. Use 'file' or 'http'.")
        if settings.backend == "file" and not settings.path:
            raise ValueError("store.path is required for the file backend")
        if settings.backend == "http" and not settings.base_url:
            raise ValueError("store.base_url is required for the http backend")
        return settings

    @property
    def source(self) -> str:
        return self.base_url if self.backend == "http" else str(self.path)


def exponential_backoff_with_jitter(attempt: int) -> float:
    """
    Calculate backoff time with exponential growth and jitter.

    Formula: min(BACKOFF_BASE^attempt + random(0,1), BACKOFF_MAX)
    """
    base_delay = BACKOFF_BASE ** attempt
    jitter = random.random()
    return min(base_delay + jitter, BACKOFF_MAX)


def _cache_for(ttl: int) -> TTLCache:
    cache = _CACHES.get(ttl)
    if cache is None:
        cache = TTLCache(maxsize=CACHE_MAXSIZE, ttl=ttl)
        _CACHES[ttl] = cache
    return cache


def _cache_key(settings: StoreSettings, area_id: Optional[str]) -> Tuple[str, str, str]:
    return (settings.backend, settings.source, area_id or "")


def clear_cache() -> None:
    """Drop every cached point list."""
    for cache in _CACHES.values():
        cache.clear()


def get_cache_stats() -> Dict[str, Any]:
    return {
        f"ttl_{ttl}": {"size": len(cache), "maxsize": cache.maxsize, "ttl": ttl}
        for ttl, cache in _CACHES.items()
    }


def _records_from_payload(payload: Any, source: str) -> List[Dict[str, Any]]:
    if isinstance(payload, dict):
        payload = payload.get("bins")
    if payload is None:
        return []
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise PointStoreError(f"Expected a list of bin records from {source}")
    return payload


def _record_area(record: Mapping[str, Any]) -> Optional[str]:
    return record.get("areaId", record.get("groupId"))


def _read_file(settings: StoreSettings, area_id: Optional[str]) -> List[Dict[str, Any]]:
    path: Path = ConfigLoader.resolve_path(str(settings.path))
    if not path.exists():
        raise PointStoreError(f"Bin seed file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                payload = json.load(f)
            else:
                payload = yaml.safe_load(f)
    except (ValueError, yaml.YAMLError) as exc:
        raise PointStoreError(f"Could not parse bin seed file {path}: {exc}") from exc

    records = _records_from_payload(payload, str(path))
    if area_id:
        records = [record for record in records if _record_area(record) == area_id]
    return records


async def _fetch_remote(
    settings: StoreSettings,
    area_id: Optional[str],
    client: Optional[httpx.AsyncClient] = None,
) -> List[Dict[str, Any]]:
    url = f"{str(settings.base_url).rstrip('/')}/bins"
    params = {"areaId": area_id} if area_id else None

    last_error: Optional[Exception] = None
    for attempt in range(MAX_RETRIES):
        try:
            if client is not None:
                response = await client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=settings.timeout_sec) as http:
                    response = await http.get(url, params=params)
            response.raise_for_status()
            return _records_from_payload(response.json(), url)

        except httpx.HTTPStatusError as exc:
            last_error = exc
            if exc.response.status_code < 500:
                raise PointStoreError(f"Bin store rejected request: {exc}") from exc

        except httpx.TransportError as exc:
            last_error = exc

        except ValueError as exc:
            raise PointStoreError(f"Bin store returned invalid JSON from {url}") from exc

        if attempt < MAX_RETRIES - 1:
            sleep_time = exponential_backoff_with_jitter(attempt)
            logger.warning(
                "Bin store request failed (attempt %d/%d): %s; retrying in %.1fs",
                attempt + 1,
                MAX_RETRIES,
                last_error,
                sleep_time,
            )
            await asyncio.sleep(sleep_time)

    raise PointStoreError(f"Bin store unavailable after {MAX_RETRIES} attempts: {last_error}") from last_error


async def load_points(
    area_id: Optional[str],
    settings: StoreSettings,
    *,
    client: Optional[httpx.AsyncClient] = None,
    use_cache: bool = True,
) -> List[Dict[str, Any]]:
    """
    Fetch raw bin records for an area, all bins when ``area_id`` is empty.

    Records are returned as stored; coordinates are not validated here.

    Raises:
        PointStoreError: If the store cannot be read
    """
    cache = _cache_for(settings.cache_ttl_sec) if use_cache and settings.cache_ttl_sec > 0 else None
    key = _cache_key(settings, area_id)
    if cache is not None and key in cache:
        return list(cache[key])

    if settings.backend == "http":
        records = await _fetch_remote(settings, area_id, client=client)
    else:
        records = await asyncio.to_thread(_read_file, settings, area_id)

    logger.info("Loaded %d bins from %s (area=%s)", len(records), settings.backend, area_id or "all")
    if cache is not None:
        cache[key] = list(records)
    return records
