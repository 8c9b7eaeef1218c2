from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from api import create_app
from catalog import Catalog


class FakeClock:
    """Settable clock so loan and penalty tests do not depend on wall time."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def catalog(clock):
    # A fresh seeded catalog per test
    return Catalog(clock=clock, loan_days=14, penalty_grace_days=14, penalty_per_day=2)


@pytest.fixture
def client(catalog):
    with TestClient(create_app(catalog)) as test_client:
        yield test_client
