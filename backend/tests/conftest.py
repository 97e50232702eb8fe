import sys
from datetime import date, timedelta
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from icebreaker.core import build_core
from icebreaker.main import app
from icebreaker.settings import Settings


class FakeClock:
	"""Manually advanced epoch-seconds clock."""

	def __init__(self, now: float = 1_700_000_000.0) -> None:
		self.now = now

	def __call__(self) -> float:
		return self.now

	def advance(self, seconds: float) -> None:
		self.now += seconds


class FakeToday:
	def __init__(self, day: date = date(2026, 10, 18)) -> None:
		self.day = day

	def __call__(self) -> date:
		return self.day

	def advance(self, days: int = 1) -> None:
		self.day = self.day + timedelta(days=days)


@pytest.fixture
def clock():
	return FakeClock()


@pytest.fixture
def today():
	return FakeToday()


@pytest.fixture
def config():
	return Settings(
		default_visibility_range=20,
		auto_expire_seconds=60.0,
		purge_after_seconds=600.0,
		best_match_threshold=70.0,
		highlight_count=3,
		match_page_size=20,
		store_lock_timeout_seconds=0.05,
		store_lock_attempts=2,
	)


@pytest.fixture
def core(config, clock, today):
	return build_core(config=config, clock=clock, today=today)


@pytest_asyncio.fixture
async def api_client(core):
	original = app.state.core
	app.state.core = core
	transport = ASGITransport(app=app)
	try:
		async with AsyncClient(transport=transport, base_url="http://testserver") as client:
			yield client
	finally:
		app.state.core = original
