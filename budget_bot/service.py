import logging
from datetime import datetime
from typing import Callable, Optional

from budget_bot import replies
from budget_bot.classifier import classify_message
from budget_bot.models import BotReply, BudgetState, ClassifiedMessage, Intent, LogRow
from budget_bot.store import BudgetStore

logger = logging.getLogger(__name__)

FAILURE_TYPE = "error"


class BudgetService:
    def __init__(self, store: BudgetStore, now: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.now = now or datetime.now

    def handle(self, user_id: str, text: Optional[str]) -> BotReply:
        """Classify one message, apply it to the sender's budget and build the reply."""
        message = classify_message(text)
        logger.info(f"User {user_id}: intent={message.intent.value} amount={message.amount}")

        with self.store.lock(user_id):
            state = self.store.get_or_create(user_id)
            reply_text = self._apply(state, message)
            log_row = self._log_row(user_id, message, state)

        return BotReply(text=reply_text, message=message, log_row=log_row)

    def failure_row(self, user_id: str, text: str, error: Exception) -> LogRow:
        """Log row for a message that never reached classification."""
        return LogRow(
            timestamp=self._timestamp(),
            user_id=user_id,
            type=FAILURE_TYPE,
            note=f"{type(error).__name__}: {text}"[:200],
        )

    def _apply(self, state: BudgetState, message: ClassifiedMessage) -> str:
        if message.intent == Intent.UNRECOGNIZED:
            return replies.ONBOARDING_MESSAGE

        if message.missing_amount:
            return replies.missing_amount_reply(message.intent)

        if message.intent == Intent.SET_DAILY_LIMIT:
            self.store.set_daily_limit(state, message.amount)
            return replies.limit_set_reply(message.amount)

        if message.intent == Intent.BALANCE_QUERY:
            return replies.balance_reply(
                state.spent_today,
                self.store.compute_remaining(state),
                state.daily_limit,
            )

        if message.intent == Intent.INCOME:
            return replies.income_reply(message.amount)

        self.store.record_expense(state, message.amount)
        return replies.expense_reply(
            message.amount,
            message.category,
            self.store.compute_remaining(state),
            self.store.usage_ratio(state),
        )

    def _log_row(self, user_id: str, message: ClassifiedMessage, state: BudgetState) -> LogRow:
        return LogRow(
            timestamp=self._timestamp(),
            user_id=user_id,
            type=message.intent.value,
            amount=message.amount,
            category=message.category or "",
            daily_limit=state.daily_limit,
            spent_today=state.spent_today,
        )

    def _timestamp(self) -> str:
        return self.now().isoformat(timespec="seconds")
