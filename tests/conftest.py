"""
Shared fixtures.

Log files go to a temporary directory; every other fixture is in memory.
"""

import os
import random
import tempfile

os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='wordwise-logs-'))

import pytest

from wordwise.models.game import WordSource
from wordwise.models.history import HistoryEntry
from wordwise.models.snapshot import Settings, Snapshot
from wordwise.models.stats import Statistics
from wordwise.services.history_service import HistoryStore
from wordwise.services.local_data_service import LocalDataService
from wordwise.services.local_store import InMemoryLocalStore
from wordwise.services.sync_service import SyncClient
from wordwise.services.sync_store_service import InMemorySyncRepository, SyncStoreService
from wordwise.services.sync_transport import InProcessSyncTransport


class FakeClock:
    """Millisecond clock that advances by `step` on every call."""

    def __init__(self, start=1_700_000_000_000, step=1000):
        self.now = start
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


class SequentialIds:
    def __init__(self, prefix='id'):
        self.prefix = prefix
        self.count = 0

    def __call__(self):
        self.count += 1
        return f"{self.prefix}-{self.count}"


def entry(word, result=3, timestamp=None, id=None, source=WordSource.LIST, understanding=None):
    """HistoryEntry shorthand for tests."""
    return HistoryEntry(word=word, result=result, source=source, id=id,
                        timestamp=timestamp, understanding=understanding)


def snapshot(stats=None, history=None, used_words=None, settings=None):
    return Snapshot(
        stats=stats or Statistics(),
        history=list(history or []),
        used_words=set(used_words or ()),
        settings=settings or Settings(),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def memory_store():
    return InMemoryLocalStore()


@pytest.fixture
def local_data(memory_store, ids, clock):
    return LocalDataService(memory_store, HistoryStore(memory_store, id_factory=ids, clock=clock))


@pytest.fixture
def sync_store():
    return SyncStoreService(InMemorySyncRepository())


@pytest.fixture
def make_device(sync_store):
    """Factory for independent devices sharing one sync store."""
    def factory(name='device', transport=None):
        store = InMemoryLocalStore()
        data = LocalDataService(store, HistoryStore(store, id_factory=SequentialIds(name), clock=FakeClock()))
        client = SyncClient(transport or InProcessSyncTransport(sync_store), data)
        return data, client
    return factory


@pytest.fixture
def app():
    from wordwise import create_app, initialize_services
    from wordwise.config import TestingConfig
    from wordwise.services.word_picker import WordPicker

    initialize_services(TestingConfig, word_picker=WordPicker(rng=random.Random(7)))
    app = create_app(TestingConfig)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
