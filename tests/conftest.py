from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Ensure src-layout packages are importable without an editable install.
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from core.config import AppSettings  # noqa: E402
from core.domain.errors import StorageError  # noqa: E402


class MemoryStore:
    """In-memory KeyValueStore that counts calls."""

    def __init__(self, initial=None, *, fail_reads=False, fail_removes=False):
        self.data = dict(initial or {})
        self.fail_reads = fail_reads
        self.fail_removes = fail_removes
        self.reads = 0
        self.removes = 0

    async def get_item(self, key):
        self.reads += 1
        if self.fail_reads:
            raise StorageError("storage unavailable")
        return self.data.get(key)

    async def set_item(self, key, value):
        self.data[key] = value

    async def remove_items(self, keys):
        self.removes += 1
        if self.fail_removes:
            raise StorageError("storage unavailable")
        for key in keys:
            self.data.pop(key, None)


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides):
        values = {
            "api_url": "http://api.test/api",
            "storage_path": tmp_path / "storage.json",
            "request_timeout_seconds": 5.0,
            "max_attempts": 3,
            "backoff_seconds": 1.0,
        }
        values.update(overrides)
        return AppSettings(_env_file=None, **values)

    return _make


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def make_store():
    return MemoryStore
