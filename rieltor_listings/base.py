from __future__ import annotations

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import httpx
from loguru import logger as log
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .common import HEADERS, REQ_TIMEOUT, FETCH_ATTEMPTS, RetrievalError

# FETCH_ATTEMPTS defaults to 1: a failed request is reported, not retried
_retrying = retry(
    reraise=True,
    stop=stop_after_attempt(FETCH_ATTEMPTS),
    wait=wait_exponential(multiplier=0.8, min=1, max=6),
    retry=retry_if_exception_type(httpx.HTTPError),
)


def load_html(file_path: str) -> str:
    try:
        return Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RetrievalError(f"Failed to load file: {e}") from e


@_retrying
def _get(url: str) -> str:
    with httpx.Client(headers=HEADERS, follow_redirects=True, timeout=REQ_TIMEOUT) as c:
        r = c.get(url)
        r.raise_for_status()
        return r.text


@_retrying
async def _aget(url: str, client: httpx.AsyncClient) -> str:
    r = await client.get(url)
    r.raise_for_status()
    return r.text


def fetch_html(url: str) -> str:
    log.debug("GET {}", url)
    try:
        return _get(url)
    except httpx.HTTPError as e:
        raise RetrievalError(f"Failed to fetch {url}: {e}") from e


async def afetch_html(url: str, client: Optional[httpx.AsyncClient] = None) -> str:
    log.debug("GET {} (async)", url)
    try:
        if client is not None:
            return await _aget(url, client)
        async with httpx.AsyncClient(headers=HEADERS, follow_redirects=True, timeout=REQ_TIMEOUT) as ac:
            return await _aget(url, ac)
    except httpx.HTTPError as e:
        raise RetrievalError(f"Failed to fetch {url}: {e}") from e


class BaseExtractor:
    def __init__(self, url: str):
        self.url = url
        self.host = urlparse(url).netloc

    def fetch(self) -> str:
        return fetch_html(self.url)

    def extract(self):
        raise NotImplementedError
