from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Intent(str, Enum):
    SET_DAILY_LIMIT = "set_daily_limit"
    BALANCE_QUERY = "balance_query"
    INCOME = "income"
    EXPENSE = "expense"
    UNRECOGNIZED = "unrecognized"


class BudgetState(BaseModel):
    user_id: str = Field(..., description="Sender address, e.g. 'whatsapp:+15551234567'")
    daily_limit: Optional[float] = Field(None, description="Daily spending limit, unset until configured")
    spent_today: float = Field(0.0, ge=0, description="Sum of expenses recorded since the last reset")
    last_reset_date: date = Field(..., description="Server-local date of the last reset")


class ClassifiedMessage(BaseModel):
    raw_text: str
    intent: Intent
    amount: Optional[float] = None
    category: Optional[str] = None
    missing_amount: bool = False


class LogRow(BaseModel):
    timestamp: str
    user_id: str
    type: str
    amount: Optional[float] = None
    category: str = ""
    daily_limit: Optional[float] = None
    spent_today: Optional[float] = None
    note: str = ""

    def as_row(self) -> list[str]:
        """Flatten into spreadsheet cells, blanks for missing values."""
        def cell(value) -> str:
            return "" if value is None else str(value)

        return [
            self.timestamp,
            self.user_id,
            self.type,
            cell(self.amount),
            self.category,
            cell(self.daily_limit),
            cell(self.spent_today),
            self.note,
        ]


class BotReply(BaseModel):
    text: str
    message: ClassifiedMessage
    log_row: LogRow
