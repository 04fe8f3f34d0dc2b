from datetime import datetime, timedelta, timezone
from typing import Optional

from starlette.testclient import TestClient

from records_lib.config import Config
from records_lib.main import create_app

ADMIN_TOKEN = 'test-admin-token'
START = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)


class StepClock:
    """Clock for stores: each call returns the previous value plus `step`."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.now
        self.now += self.step
        self.calls += 1
        return value


class FrozenClock:
    """Clock that never advances; the store must still produce increasing stamps."""

    def __init__(self, at: datetime = START):
        self.at = at

    def __call__(self) -> datetime:
        return self.at


def make_client(tmp_path, admin_token: Optional[str] = ADMIN_TOKEN, **overrides) -> TestClient:
    """Build an app over `tmp_path/data` and return a TestClient for it."""
    config = Config(data_dir=str(tmp_path / 'data'), admin_token=admin_token, **overrides)
    return TestClient(create_app(config))


def admin_headers(token: str = ADMIN_TOKEN) -> dict:
    return {'Authorization': f'Bearer {token}'}
