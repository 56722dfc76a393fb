from datetime import date, datetime

import pytest

from budget_bot.service import BudgetService
from budget_bot.store import BudgetStore


class FakeClock:
    """Settable stand-in for the server clock."""

    def __init__(self, today: date):
        self.current = today

    def today(self) -> date:
        return self.current

    def now(self) -> datetime:
        return datetime(self.current.year, self.current.month, self.current.day, 12, 0, 0)


@pytest.fixture
def clock():
    return FakeClock(date(2025, 3, 14))


@pytest.fixture
def store(clock):
    return BudgetStore(today=clock.today)


@pytest.fixture
def service(store, clock):
    return BudgetService(store, now=clock.now)
