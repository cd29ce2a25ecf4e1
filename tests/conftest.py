import io
import json
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rpg_card import background
from rpg_card.cache import FreshnessCache, MemoryKV
from rpg_card.models import UserRecord


class FakeResponse(io.BytesIO):
    """Stands in for the object returned by urllib.request.urlopen."""

    def __init__(self, payload, status=200):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        super().__init__(body)
        self.status = status


@pytest.fixture
def alice():
    return UserRecord(
        login="alice",
        bio="hi",
        followers=10,
        following=5,
        public_repos=3,
        created_at="2020-01-01",
    )


@pytest.fixture
def memory_cache():
    return FreshnessCache(MemoryKV(), ttl=60)


@pytest.fixture(autouse=True)
def _drain_background():
    yield
    background.drain()
