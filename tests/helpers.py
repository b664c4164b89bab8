"""Shared builders for tests."""

import asyncio
import json
from typing import Callable, Dict, List, Optional

import httpx

from newscache.ingestion import article_id_for
from newscache.models import Article

BASE_TIME = 1_700_000_000_000


def make_article(
    n: int,
    category: str = "tech",
    *,
    published: Optional[int] = None,
    title: Optional[str] = None,
    author: str = "Jane Doe",
    source_name: Optional[str] = "Daily Planet",
) -> Article:
    """Article number ``n``; higher numbers are newer unless ``published`` is given."""
    url = f"https://news.example.com/{n}"
    return Article(
        article_id=article_id_for(url),
        category=category,
        title=title or f"Story {n}",
        author=author,
        published_at="",
        published_at_millis=published if published is not None else BASE_TIME + n * 1000,
        url=url,
        image_url=None,
        source_name=source_name,
        fetched_at=BASE_TIME,
    )


def raw_article(n: int, **overrides) -> Dict:
    data = {
        "title": f"Story {n}",
        "author": "Jane Doe",
        "publishedAt": f"2024-01-{(n % 28) + 1:02d}T10:30:00Z",
        "url": f"https://news.example.com/{n}",
        "urlToImage": f"https://img.example.com/{n}.jpg",
        "sourceName": "Daily Planet",
    }
    data.update(overrides)
    return data


def feed_transport(
    feeds: Dict[str, List[Dict]],
    *,
    status: int = 200,
    gate: Optional[Dict[str, asyncio.Event]] = None,
    seen: Optional[List[httpx.Request]] = None,
) -> httpx.MockTransport:
    """Mock feed endpoint serving ``feeds[category]``.

    Requests for a category listed in ``gate`` wait for its event first.
    """

    async def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        category = request.url.params.get("category", "")
        if gate and category in gate:
            await gate[category].wait()
        if status != 200:
            return httpx.Response(status, json={"message": "boom"})
        body = {"category": category, "articles": feeds.get(category, [])}
        return httpx.Response(200, content=json.dumps(body).encode(), headers={"Content-Type": "application/json"})

    return httpx.MockTransport(handler)


def failing_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


async def wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> None:
    """Poll ``predicate`` on the event loop until it holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
