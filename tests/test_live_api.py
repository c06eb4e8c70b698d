"""
Smoke tests against the real Congress.gov API.

Skipped unless CONGRESS_API_KEY is available (environment or .env file).
"""
import asyncio
import os

import pytest
from dotenv import load_dotenv

from congress_client import CongressClient, ErrorKind, CongressApiError
from congress_client import resources

load_dotenv()

pytestmark = [
    pytest.mark.live,
    pytest.mark.skipif(not os.getenv("CONGRESS_API_KEY"), reason="CONGRESS_API_KEY not set"),
]


@pytest.fixture(scope="module")
def client():
    """Create a single client instance for all tests."""
    c = CongressClient.from_env(log_level=20)
    yield c
    c.close()


@pytest.mark.timeout(30)
def test_bill_detail(client):
    bill = asyncio.run(resources.get_bill(client, 117, "hr", 3076)).data
    assert bill.congress == 117
    assert bill.title


@pytest.mark.timeout(30)
def test_bill_listing_pages(client):
    async def two_pages():
        first = await resources.list_bills(client, 117, "hr", limit=2)
        second = await resources.next_page(client, first)
        return first, second

    first, second = asyncio.run(two_pages())
    assert len(first.data) == 2
    assert first.pagination.next.params["offset"] == 2
    assert {b.bill_number for b in first.data}.isdisjoint({b.bill_number for b in second.data})


@pytest.mark.timeout(30)
def test_unknown_member_is_not_found(client):
    with pytest.raises(CongressApiError) as exc:
        asyncio.run(resources.get_member(client, "Z999999"))
    assert exc.value.kind in (ErrorKind.NOT_FOUND, ErrorKind.VALIDATION_ERROR)
