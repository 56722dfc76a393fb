from typing import Optional

from budget_bot.models import Intent

ONBOARDING_MESSAGE = (
    "Hi! 👋\n"
    "I help you organize your money.\n\n"
    "Send messages like:\n"
    "• Spent 12 on lunch\n"
    "• Got paid 800 today\n"
    "• Daily limit 60\n"
    "• Balance\n\n"
    "You can also send voice messages.\n"
    "Let's start 🙂"
)

# Example shown when the amount could not be read, per intent. A daily limit
# lands here only when its number overflows; "daily limit" with no number at
# all falls through to the later rules.
AMOUNT_EXAMPLES = {
    Intent.SET_DAILY_LIMIT: "Daily limit 60",
    Intent.INCOME: "Got paid 800",
    Intent.EXPENSE: "Spent 12 on lunch",
}

FAILURE_MESSAGE = (
    "Sorry, something went wrong on my side. "
    "Please try again or type it, e.g. Spent 12 on lunch"
)
EMPTY_TRANSCRIPT_MESSAGE = (
    "Couldn't understand the audio. "
    "Please try again or type it, e.g. Spent 12 on lunch"
)

LIMIT_REACHED_WARNING = "🚫 Daily limit reached."
NEAR_LIMIT_WARNING = "⚠️ You've used 80% of your daily limit."
NEAR_LIMIT_RATIO = 0.8


def format_money(amount: float) -> str:
    """$12 for whole amounts, $12.50 otherwise."""
    amount = round(amount, 2)
    if amount == int(amount):
        return f"${int(amount)}"
    return f"${amount:.2f}"


def warning_for(ratio: Optional[float]) -> Optional[str]:
    if ratio is None:
        return None
    if ratio >= 1.0:
        return LIMIT_REACHED_WARNING
    if ratio >= NEAR_LIMIT_RATIO:
        return NEAR_LIMIT_WARNING
    return None


def missing_amount_reply(intent: Intent) -> str:
    example = AMOUNT_EXAMPLES.get(intent, AMOUNT_EXAMPLES[Intent.EXPENSE])
    return f"Couldn't catch the amount. Try: {example}"


def limit_set_reply(amount: float) -> str:
    return f"Daily limit set: {format_money(amount)}"


def balance_reply(spent_today: float, remaining: Optional[float], daily_limit: Optional[float]) -> str:
    text = f"Today: {format_money(spent_today)} spent"
    if remaining is None:
        return f"{text} · No daily limit set"
    return f"{text} · {format_money(remaining)} left (limit {format_money(daily_limit)})"


def income_reply(amount: float) -> str:
    return f"Saved: {format_money(amount)} — Income"


def expense_reply(amount: float, category: str, remaining: Optional[float], ratio: Optional[float]) -> str:
    text = f"Saved: {format_money(amount)} — {category}"
    if remaining is not None:
        text += f" · {format_money(remaining)} left today"
    warning = warning_for(ratio)
    if warning:
        text += f"\n{warning}"
    return text


def heard_prefix(transcript: str, reply: str) -> str:
    return f'Heard: "{transcript}"\n\n{reply}'
