"""
Shared pytest fixtures for tenantkv tests.

- Settings, tenant context and the process-wide read-only state are reset
  around every test so nothing leaks between tests.
- ``fake_redis`` / ``store`` give an in-memory Redis behind a NamespacedRedis
  with its own ``ReadOnlyState``.
"""

import sys
from pathlib import Path

import pytest

# Ensure tenantkv package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from _support.fake_redis import FakeRedis  # noqa: E402

from tenantkv.client import NamespacedRedis  # noqa: E402
from tenantkv.config import RedisConfig, clear_settings_cache  # noqa: E402
from tenantkv.namespace import clear_tenant, reset_default_namespace  # noqa: E402
from tenantkv.readonly import ReadOnlyState, reset_shared_read_only_state  # noqa: E402


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolate_global_state(monkeypatch):
    for name in ("TENANTKV_REDIS_CONFIG_FILE", "TENANTKV_DEFAULT_NAMESPACE", "TENANTKV_REDIS_PASSWORD"):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    reset_shared_read_only_state()
    reset_default_namespace()
    clear_tenant()
    yield
    clear_tenant()
    reset_default_namespace()
    reset_shared_read_only_state()
    clear_settings_cache()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def read_only_state(clock) -> ReadOnlyState:
    return ReadOnlyState(15.0, clock=clock)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store(fake_redis, read_only_state) -> NamespacedRedis:
    return NamespacedRedis(
        RedisConfig(host="localhost", port=6379, db=0),
        client=fake_redis,
        read_only_state=read_only_state,
    )
