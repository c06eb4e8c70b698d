"""
Walking paginated collections.

Every page link is already a RequestDescriptor by the time it reaches this
module, so following a link is simply another trip through the client's request
pipeline. Nothing is cached: fetching the same next page twice costs two
remote calls.

The remote decides how long a walk is. ``iter_pages`` imposes no limit unless
``max_pages`` is given, and callers walking large collections (all bills of a
congress runs to tens of thousands of items) should pass one.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, AsyncIterator, List, Optional, Set

from .envelope import Envelope, RequestDescriptor

if TYPE_CHECKING:
    from .client import CongressClient


def has_next(envelope: Envelope[Any]) -> bool:
    return envelope.pagination is not None and envelope.pagination.next is not None


def has_previous(envelope: Envelope[Any]) -> bool:
    return envelope.pagination is not None and envelope.pagination.previous is not None


async def _follow(client: "CongressClient", envelope: Envelope[Any], descriptor: RequestDescriptor,
                  timeout: Optional[float]) -> Envelope[Any]:
    if isinstance(envelope.data, list):
        return await client.get_collection(descriptor.path, descriptor.params,
                                           data_key=envelope.data_key, timeout=timeout)
    return await client.request(descriptor, data_key=envelope.data_key, timeout=timeout)


async def fetch_next(client: "CongressClient", envelope: Envelope[Any], *,
                     timeout: Optional[float] = None) -> Envelope[Any]:
    """Fetch the page after ``envelope``. Raises ValueError if there is none."""
    if not has_next(envelope):
        raise ValueError("Envelope has no next page")
    return await _follow(client, envelope, envelope.pagination.next, timeout)


async def fetch_previous(client: "CongressClient", envelope: Envelope[Any], *,
                         timeout: Optional[float] = None) -> Envelope[Any]:
    """Fetch the page before ``envelope``. Raises ValueError if there is none."""
    if not has_previous(envelope):
        raise ValueError("Envelope has no previous page")
    return await _follow(client, envelope, envelope.pagination.previous, timeout)


async def iter_pages(client: "CongressClient", descriptor: RequestDescriptor, *,
                     data_key: Optional[str] = None,
                     max_pages: Optional[int] = None) -> AsyncIterator[Envelope[List[Any]]]:
    """
    Yield collection pages starting at ``descriptor`` until the remote stops
    supplying a next link.

    A CongressApiError on any page propagates to the caller; a walk is never
    silently cut short by a rate limit. The walk also stops if the remote hands
    back a next link that was already followed.
    """
    envelope = await client.get_collection(descriptor.path, descriptor.params, data_key=data_key)
    yield envelope

    seen: Set[RequestDescriptor] = {descriptor}
    pages = 1
    while has_next(envelope):
        if max_pages is not None and pages >= max_pages:
            client.logger.info(f"Stopping pagination of /{descriptor.path} at max_pages={max_pages}.")
            return
        nxt = envelope.pagination.next
        if nxt in seen:
            client.logger.warning(f"Detected repeated next link for /{nxt.path}. Breaking loop.")
            return
        seen.add(nxt)
        envelope = await fetch_next(client, envelope)
        pages += 1
        yield envelope

    client.logger.info(f"No more pages for /{descriptor.path} after {pages} page(s).")


async def iter_items(client: "CongressClient", descriptor: RequestDescriptor, *,
                     data_key: Optional[str] = None,
                     max_pages: Optional[int] = None) -> AsyncIterator[Any]:
    """Flatten ``iter_pages`` into individual items."""
    async for page in iter_pages(client, descriptor, data_key=data_key, max_pages=max_pages):
        for item in page.data:
            yield item
