"""In-memory per-user budget state with a daily reset."""

import logging
import threading
from datetime import date
from typing import Callable, Dict, Optional

from budget_bot.models import BudgetState

logger = logging.getLogger(__name__)


class BudgetStore:
    """Holds one BudgetState per user id for the lifetime of the process.

    Nothing is persisted: a restart starts everyone from a blank state.
    "Today" is whatever ``today()`` says, one clock for every user.
    """

    def __init__(self, today: Optional[Callable[[], date]] = None):
        self.today = today or date.today
        self._states: Dict[str, BudgetState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def lock(self, user_id: str) -> threading.Lock:
        """Return the lock that serializes updates for ``user_id``."""
        with self._locks_guard:
            user_lock = self._locks.get(user_id)
            if user_lock is None:
                user_lock = self._locks[user_id] = threading.Lock()
            return user_lock

    def get_or_create(self, user_id: str) -> BudgetState:
        """Return today's state for a user, creating or resetting it as needed."""
        today = self.today()
        state = self._states.get(user_id)
        if state is None:
            state = BudgetState(user_id=user_id, last_reset_date=today)
            self._states[user_id] = state
            logger.info(f"Created budget state for {user_id}")
        elif state.last_reset_date != today:
            logger.info(f"Day rollover for {user_id}: {state.last_reset_date} -> {today}")
            state.spent_today = 0.0
            state.last_reset_date = today
        return state

    def record_expense(self, state: BudgetState, amount: float) -> float:
        state.spent_today = round(state.spent_today + amount, 2)
        return state.spent_today

    def set_daily_limit(self, state: BudgetState, amount: float):
        state.daily_limit = round(amount, 2)

    def compute_remaining(self, state: BudgetState) -> Optional[float]:
        """Amount left under the limit, floored at zero; None without a limit."""
        if state.daily_limit is None:
            return None
        return round(max(0.0, state.daily_limit - state.spent_today), 2)

    def usage_ratio(self, state: BudgetState) -> Optional[float]:
        if not state.daily_limit or state.daily_limit <= 0:
            return None
        return state.spent_today / state.daily_limit
