"""Shared fixtures: in-memory SQLite, a Flask app on it, and model factories."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import pytest

from fintrack.api import create_app
from fintrack.models.finance import Transaction, TransactionType
from fintrack.services.storage import Database, create_db_engine


USER_ID = "user-1"


def make_transaction(
    amount: str,
    category: str,
    type: TransactionType = TransactionType.EXPENSE,
    user_id: str = USER_ID,
    date: Optional[datetime] = None,
    category_id: Optional[str] = None,
) -> Transaction:
    return Transaction(
        amount=Decimal(amount),
        type=type,
        category=category,
        category_id=category_id,
        user_id=user_id,
        date=date or datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc),
    )


class TickingClock:
    """Returns a strictly increasing UTC time on each call."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(minutes=1)
        return self.now


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def database(engine):
    database = Database(engine=engine)
    database.connect()
    return database


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def app(engine, clock):
    app = create_app(engine_override=engine, clock=clock)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    with client.session_transaction() as sess:
        sess["user_id"] = USER_ID
    return client
