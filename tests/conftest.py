# Test Fixtures
import threading
import time
from typing import Iterable, Optional

import pytest

from imagelinks_catalog.kv import InMemoryKeyValueStore
from imagelinks_catalog.models import LinkRecord
from imagelinks_catalog.store import CatalogStore
from imagelinks_core.config import Settings


class FakeProber:
    """Prober whose dead URLs are known up front."""

    def __init__(self, dead: Iterable[str] = (), delay: Optional[dict] = None):
        self.dead = set(dead)
        self.delay = delay or {}
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def is_reachable(self, url: str) -> bool:
        with self._lock:
            self.calls.append(url)
        if url in self.delay:
            time.sleep(self.delay[url])
        return url not in self.dead

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return CatalogStore(kv)


@pytest.fixture
def make_record():
    def _make(url: str, tag: str = "default", width: int = 0, height: int = 0) -> LinkRecord:
        return LinkRecord(url=url, tag=tag, width=width, height=height)
    return _make


@pytest.fixture
def sample_records(make_record):
    return [
        make_record("https://img.example.com/forest.jpg", "nature", 1920, 1080),
        make_record("https://img.example.com/lake.png", "nature", 1000, 1000),
        make_record("https://img.example.com/city.webp", "urban", 1080, 1920),
        make_record("https://img.example.com/unknown.gif", "misc"),
    ]


@pytest.fixture
def seeded_store(store, sample_records):
    store.save_catalog(sample_records)
    return store


@pytest.fixture
def fake_prober():
    return FakeProber()


@pytest.fixture
def api_settings():
    return Settings(
        _env_file=None,
        admin_username="admin",
        admin_password="s3cret",
        cookie_secure=False,
        sweep_max_concurrency=4,
    )


@pytest.fixture
def prober_factory():
    return FakeProber
