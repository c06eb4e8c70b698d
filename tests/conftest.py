import random

import pytest

from congress_client import ClientConfig, CongressClient

API_BASE = "https://api.congress.gov/v3"


@pytest.fixture
def config():
    return ClientConfig(api_key="test_key")


@pytest.fixture
def sleeps():
    """Delays the retry engine asked for, in order."""
    return []


@pytest.fixture
def client(config, sleeps):
    async def fake_sleep(delay):
        sleeps.append(delay)

    c = CongressClient(config, sleep=fake_sleep, rng=random.Random(7))
    yield c
    c.close()
