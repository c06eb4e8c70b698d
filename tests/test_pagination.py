# tests/test_pagination.py
import asyncio

import pytest

from congress_client import (CongressApiError, ErrorKind, RequestDescriptor,
                             fetch_next, fetch_previous, has_next, has_previous)

API_BASE = "https://api.congress.gov/v3"

PAGE_1 = {
    "bills": [{"number": "1"}, {"number": "2"}],
    "pagination": {"count": 5, "next": f"{API_BASE}/bill?offset=2&limit=2&format=json"},
    "request": {"contentType": "application/json", "format": "json"},
}
PAGE_2 = {
    "bills": [{"number": "3"}, {"number": "4"}],
    "pagination": {
        "count": 5,
        "next": f"{API_BASE}/bill?offset=4&limit=2&format=json",
        "prev": f"{API_BASE}/bill?offset=0&limit=2&format=json",
    },
    "request": {"contentType": "application/json", "format": "json"},
}
PAGE_3 = {
    "bills": [{"number": "5"}],
    "pagination": {"count": 5, "prev": f"{API_BASE}/bill?offset=2&limit=2&format=json"},
    "request": {"contentType": "application/json", "format": "json"},
}


@pytest.fixture
def bill_pages(requests_mock):
    requests_mock.get(f"{API_BASE}/bill?offset=0", json=PAGE_1)
    requests_mock.get(f"{API_BASE}/bill?offset=2", json=PAGE_2)
    requests_mock.get(f"{API_BASE}/bill?offset=4", json=PAGE_3)
    return requests_mock


def first_page(client):
    return asyncio.run(client.get_collection("bill", {"offset": 0, "limit": 2}))


def test_next_then_previous_returns_to_same_data(client, bill_pages):
    page1 = first_page(client)

    async def walk():
        page2 = await client.fetch_next(page1)
        back = await client.fetch_previous(page2)
        return page2, back

    page2, back = asyncio.run(walk())
    assert page2.data == PAGE_2["bills"]
    assert back.data == page1.data
    assert back == page1


def test_has_next_and_previous(client, bill_pages):
    page1 = first_page(client)
    assert has_next(page1) and not has_previous(page1)
    page3 = asyncio.run(client.fetch_next(asyncio.run(client.fetch_next(page1))))
    assert has_previous(page3) and not has_next(page3)


def test_fetching_without_link_is_a_caller_error(client, bill_pages):
    page1 = first_page(client)
    with pytest.raises(ValueError):
        asyncio.run(fetch_previous(client, page1))


def test_no_implicit_caching(client, bill_pages):
    page1 = first_page(client)
    before = bill_pages.call_count

    async def twice():
        return await fetch_next(client, page1), await fetch_next(client, page1)

    a, b = asyncio.run(twice())
    assert a == b
    assert bill_pages.call_count == before + 2


def test_iter_pages_walks_until_no_next(client, bill_pages):
    async def collect():
        return [page.data async for page in client.iter_pages("bill", {"offset": 0})]

    pages = asyncio.run(collect())
    assert pages == [PAGE_1["bills"], PAGE_2["bills"], PAGE_3["bills"]]
    assert bill_pages.call_count == 3


def test_iter_pages_max_pages_guard(client, bill_pages):
    async def collect():
        return [page async for page in client.iter_pages("bill", {"offset": 0}, max_pages=2)]

    assert len(asyncio.run(collect())) == 2
    assert bill_pages.call_count == 2


def test_iter_items_flattens(client, bill_pages):
    async def collect():
        return [item["number"] async for item in client.iter_items("bill", {"offset": 0})]

    assert asyncio.run(collect()) == ["1", "2", "3", "4", "5"]


def test_iter_pages_stops_on_repeated_link(client, requests_mock):
    looping = {
        "members": [{"bioguideId": "A000001"}],
        "pagination": {"count": 99, "next": f"{API_BASE}/member?offset=0"},
    }
    requests_mock.get(f"{API_BASE}/member", json=looping)

    async def collect():
        return [page async for page in client.iter_pages("member", {"offset": 0})]

    assert len(asyncio.run(collect())) == 1
    assert requests_mock.call_count == 1


def test_rate_limit_mid_walk_surfaces(client, requests_mock):
    requests_mock.get(f"{API_BASE}/bill?offset=0", json=PAGE_1)
    requests_mock.get(f"{API_BASE}/bill?offset=2", status_code=429)
    seen = []

    async def collect():
        async for page in client.iter_pages("bill", {"offset": 0}):
            seen.append(page)

    with pytest.raises(CongressApiError) as exc:
        asyncio.run(collect())
    assert exc.value.kind is ErrorKind.RATE_LIMITED
    assert len(seen) == 1
    assert requests_mock.call_count == 1 + client.config.max_attempts


def test_detail_envelope_follows_links_as_objects(client, requests_mock):
    requests_mock.get(f"{API_BASE}/committee/house/hsag00", json={
        "committee": {"systemCode": "hsag00"},
        "pagination": {"count": 1, "next": f"{API_BASE}/committee/house/hsag00?offset=1"},
    })
    env = asyncio.run(client.request(RequestDescriptor("committee/house/hsag00")))
    nxt = asyncio.run(client.fetch_next(env))
    assert nxt.data == {"systemCode": "hsag00"}
