import pytest

from fakes import RecordingNotifier
from photoindex.lib.database import InMemoryAdapter
from photoindex.services.repository import Repository


@pytest.fixture
def adapter():
    db = InMemoryAdapter()
    yield db
    db.dispose()


@pytest.fixture
def session(adapter):
    s = adapter.session()
    yield s
    s.close()


@pytest.fixture
def repo(session):
    return Repository(session)


@pytest.fixture
def notifier():
    return RecordingNotifier()
