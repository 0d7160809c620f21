# tapsim_api.py
# Thin aiohttp client for api.tapsim.gg. Returns decoded JSON as-is; making
# sense of its shape is records.extract_records' job.

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

log = logging.getLogger("tapsimbot.api")

DEFAULT_API_BASE = "https://api.tapsim.gg/api/tapsim"


class UpstreamError(Exception):
    """The API could not be reached or answered badly. Worth retrying later."""


class TapSimAPI:
    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        timeout: float = 10.0,
        retries: int = 1,
        backoff: float = 2.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.retries = retries
        self.backoff = backoff
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "TapSimAPI":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

    async def _get_once(self, url: str, params: Optional[Dict[str, Any]]) -> Any:
        session = self._get_session()
        async with session.get(url, params=params, timeout=self.timeout) as resp:
            resp.raise_for_status()
            return await resp.json(content_type=None)

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        attempts = 1 + max(self.retries, 0)
        last_exc: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            try:
                return await self._get_once(url, params)
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                last_exc = e
                log.warning("GET %s failed (attempt %d/%d): %r", url, attempt, attempts, e)
                if attempt < attempts:
                    await asyncio.sleep(self.backoff * attempt)

        raise UpstreamError(f"GET {url} failed after {attempts} attempt(s): {last_exc}") from last_exc

    # ----- endpoints ---------------------------------------------------------

    async def eggs(self) -> Any:
        return await self.get_json("eggs", {"sort": "price", "order": "desc", "limit": 100})

    async def items(self, limit: int = 100) -> Any:
        return await self.get_json("items", {"limit": limit})

    async def top_values(self) -> Any:
        return await self.get_json(
            "items", {"type": "Pet", "sort": "value", "order": "desc", "page": 1, "limit": 50}
        )

    async def enchants(self) -> Any:
        return await self.get_json("plaza/enchants")

    async def snipes(self) -> Any:
        return await self.get_json("plaza/snipes", {"basis": "value", "maxPercent": 80})

    async def ads(self) -> Any:
        return await self.get_json("ads", {"page": 1, "limit": 20})
