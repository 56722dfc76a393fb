"""Rule-based intent detection for incoming chat messages.

Rules are tried in the order of ``INTENT_RULES`` and the first one that
matches decides the intent. Matching is plain substring/regex work on the
lowercased text; there is no language model involved.
"""

import math
import re
from typing import Callable, Optional

from budget_bot.models import ClassifiedMessage, Intent

AMOUNT_PATTERN = re.compile(r"\d+(?:\.\d+)?")
DAILY_LIMIT_PATTERN = re.compile(r"daily\s*limit", re.IGNORECASE)

BALANCE_TRIGGERS = (
    "balance",
    "left today",
    "how much left",
    "how much is left",
    "how much do i have",
    "remaining",
)

INCOME_TRIGGERS = (
    "got paid",
    "received",
    "income",
    "earned",
    "salary",
)

EXPENSE_TRIGGERS = (
    "spent",
    "spend",
    "paid",
    "bought",
    "cost",
)

# Priority order: the first category with a keyword hit wins. Keywords match
# whole words, plurals included, so "rent" does not fire on "parents".
CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("Food", ("lunch", "dinner", "breakfast", "food", "coffee", "restaurant",
              "grocery", "groceries", "snack", "pizza", "burger", "meal", "cafe")),
    ("Housing", ("rent", "mortgage", "electricity", "water bill", "utilities",
                 "internet", "housing")),
    ("Transport", ("uber", "lyft", "taxi", "bus", "train", "metro", "subway",
                   "gas", "fuel", "parking", "transport")),
    ("Shopping", ("clothes", "shoe", "amazon", "shopping", "mall", "shirt")),
    ("Subscriptions", ("netflix", "spotify", "subscription", "hulu", "disney",
                       "icloud")),
    ("Health", ("pharmacy", "doctor", "medicine", "gym", "dentist", "health",
                "hospital")),
    ("Entertainment", ("movie", "cinema", "concert", "game", "bar", "party",
                       "entertainment")),
]
DEFAULT_CATEGORY = "Other"
INCOME_CATEGORY = "Income"

CATEGORY_PATTERNS: list[tuple[str, re.Pattern]] = [
    (category, re.compile(r"\b(?:" + "|".join(map(re.escape, keywords)) + r")(?:s|es)?\b"))
    for category, keywords in CATEGORY_KEYWORDS
]

# Intents whose reply needs an amount; without one the user gets a corrective prompt.
AMOUNT_REQUIRED = {Intent.SET_DAILY_LIMIT, Intent.INCOME, Intent.EXPENSE}


def extract_amount(text: str) -> Optional[float]:
    """Return the first number in ``text``, or None when absent or not finite."""
    match = AMOUNT_PATTERN.search(text)
    if match is None:
        return None
    amount = float(match.group(0))
    if not math.isfinite(amount):
        return None
    return amount


def has_number(text: str) -> bool:
    return AMOUNT_PATTERN.search(text) is not None


def detect_category(text: str) -> str:
    lowered = text.lower()
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(lowered):
            return category
    return DEFAULT_CATEGORY


def contains_any(text: str, phrases) -> bool:
    return any(phrase in text for phrase in phrases)


def _wants_daily_limit(lowered: str) -> bool:
    return DAILY_LIMIT_PATTERN.search(lowered) is not None and has_number(lowered)


def _asks_balance(lowered: str) -> bool:
    return contains_any(lowered, BALANCE_TRIGGERS)


def _reports_income(lowered: str) -> bool:
    return contains_any(lowered, INCOME_TRIGGERS)


def _reports_expense(lowered: str) -> bool:
    # A bare number with no other trigger is read as an expense.
    return contains_any(lowered, EXPENSE_TRIGGERS) or has_number(lowered)


INTENT_RULES: list[tuple[Intent, Callable[[str], bool]]] = [
    (Intent.SET_DAILY_LIMIT, _wants_daily_limit),
    (Intent.BALANCE_QUERY, _asks_balance),
    (Intent.INCOME, _reports_income),
    (Intent.EXPENSE, _reports_expense),
]


def detect_intent(text: str) -> Intent:
    lowered = text.strip().lower()
    if not lowered:
        return Intent.UNRECOGNIZED
    for intent, matches in INTENT_RULES:
        if matches(lowered):
            return intent
    return Intent.UNRECOGNIZED


def classify_message(text: Optional[str]) -> ClassifiedMessage:
    """Classify a message and pull out the amount and category it carries."""
    raw_text = (text or "").strip()
    intent = detect_intent(raw_text)

    amount = None
    if intent in AMOUNT_REQUIRED:
        amount = extract_amount(raw_text)

    category = None
    if intent == Intent.EXPENSE:
        category = detect_category(raw_text)
    elif intent == Intent.INCOME:
        category = INCOME_CATEGORY

    return ClassifiedMessage(
        raw_text=raw_text,
        intent=intent,
        amount=amount,
        category=category,
        missing_amount=intent in AMOUNT_REQUIRED and amount is None,
    )
