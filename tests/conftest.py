import os
import tempfile
import pytest
from docfetch.cache.db import SqliteCacheStore
from docfetch.core import config
from docfetch.fetch.base import BaseFetcher, FetchFailure


@pytest.fixture
def db_path():
    """Temporary SQLite file, removed after the test"""
    temp_db = tempfile.NamedTemporaryFile(suffix='.sqlite', delete=False)
    temp_db.close()
    yield temp_db.name
    if os.path.exists(temp_db.name):
        os.unlink(temp_db.name)

@pytest.fixture
def store(db_path):
    return SqliteCacheStore(db_path)

@pytest.fixture(autouse=True)
def setup_test_environment(db_path):
    """Point the app at the temporary database and keep the scheduler off"""
    original_db_path = config.settings.DATABASE_PATH
    original_scheduler = config.settings.SCHEDULER_ENABLED

    config.settings.DATABASE_PATH = db_path
    config.settings.SCHEDULER_ENABLED = False

    yield

    config.settings.DATABASE_PATH = original_db_path
    config.settings.SCHEDULER_ENABLED = original_scheduler

class StubFetcher(BaseFetcher):
    """Returns canned outcomes per URL and records every call"""

    def __init__(self, outcomes=None):
        self.outcomes = outcomes or {}
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        outcome = self.outcomes.get(url, FetchFailure.invalid_url())
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

@pytest.fixture
def stub_fetcher():
    return StubFetcher()

