"""Figma REST API 唯讀封裝（files / nodes / images / variables）."""

import logging
import time
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import unquote

import requests

from .errors import AuthError, FigmaAPIError, NodeNotFoundError, RateLimitError, with_retry

logger = logging.getLogger(__name__)

CACHE_TTL = 300.0


class FigmaClient:
    """Figma REST API client；file / node 讀取有 5 分鐘的記憶體快取."""

    BASE_URL = "https://api.figma.com/v1"

    def __init__(
        self,
        token: str,
        max_retries: int = 3,
        timeout: float = 30.0,
        cache_ttl: float = CACHE_TTL,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.token = token
        self.max_retries = max_retries
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self._clock = clock
        self._sleep = sleep
        self._cache: Dict[Tuple[str, Tuple], Tuple[float, dict]] = {}
        self.session = session or requests.Session()
        self.session.headers.update({
            "X-Figma-Token": token,
            "Content-Type": "application/json",
        })

    # ─── public API ───

    def get_file(self, file_key: str, depth: Optional[int] = None) -> dict:
        params = {"depth": depth} if depth else {}
        return self._cached_get(f"/files/{file_key}", params)

    def get_nodes(self, file_key: str, node_ids: List[str]) -> dict:
        return self._cached_get(f"/files/{file_key}/nodes", {"ids": ",".join(node_ids)})

    def get_node(self, file_key: str, node_id: str) -> dict:
        """單一節點的 document；不存在時丟 NodeNotFoundError."""
        data = self.get_nodes(file_key, [node_id])
        entry = (data.get("nodes") or {}).get(node_id)
        if not entry or not entry.get("document"):
            raise NodeNotFoundError(node_id)
        return entry

    def get_images(self, file_key: str, node_ids: List[str], format: str = "png", scale: int = 2) -> dict:
        params = {"ids": ",".join(node_ids), "format": format, "scale": scale}
        return self._get(f"/images/{file_key}", params)

    def get_variables(self, file_key: str) -> dict:
        return self._get(f"/files/{file_key}/variables/local", {})

    def clear_cache(self) -> None:
        self._cache.clear()

    # ─── HTTP ───

    def _cached_get(self, path: str, params: dict) -> dict:
        key = (path, tuple(sorted(params.items())))
        hit = self._cache.get(key)
        now = self._clock()
        if hit is not None and now - hit[0] < self.cache_ttl:
            logger.debug("cache hit %s", path)
            return hit[1]
        data = self._get(path, params)
        self._cache[key] = (now, data)
        return data

    def _get(self, path: str, params: dict) -> dict:
        return with_retry(lambda: self._request(path, params), max_retries=self.max_retries, sleep=self._sleep)

    def _request(self, path: str, params: dict) -> dict:
        url = f"{self.BASE_URL}{path}"
        logger.debug("GET %s %s", url, params)
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise FigmaAPIError(f"network error: {e}") from e

        status = resp.status_code
        if status in (401, 403):
            raise AuthError(f"Figma API {status}: {resp.text[:200]}")
        if status == 429:
            retry_after = resp.headers.get("Retry-After")
            try:
                seconds = float(retry_after) if retry_after else None
            except ValueError:
                seconds = None
            raise RateLimitError("Figma API rate limit", retry_after=seconds)
        if status >= 400:
            raise FigmaAPIError(f"Figma API {status}: {resp.text[:200]}", status=status)
        return resp.json()


def parse_figma_url(url: str) -> Tuple[Optional[str], Optional[str]]:
    """https://www.figma.com/design/KEY/Title?node-id=1-2 → ('KEY', '1:2')."""
    file_key = None
    node_id = None
    parts = url.split("?", 1)
    segments = [s for s in parts[0].split("/") if s]
    for marker in ("file", "design", "proto"):
        if marker in segments:
            index = segments.index(marker)
            if index + 1 < len(segments):
                file_key = segments[index + 1]
            break
    if len(parts) == 2:
        for pair in parts[1].split("&"):
            key, _, value = pair.partition("=")
            if key == "node-id" and value:
                node_id = unquote(value).replace("-", ":")
    return file_key, node_id
