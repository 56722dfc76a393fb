import logging

import anthropic

from budget_bot.config import Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a friendly budgeting assistant on WhatsApp. The user sent a message "
    "that is not an expense, income, daily limit or balance request. Answer in one "
    "or two short sentences, plain text, no markdown. Do not invent numbers about "
    "the user's spending."
)


class ReplyAssistant:
    """Short LLM replies for messages the rules could not place."""

    def __init__(self, settings: Settings):
        self.model = settings.model_name
        self.client = None
        if settings.anthropic_api_key:
            self.client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def small_talk(self, text: str) -> str | None:
        if not self.enabled or not text:
            return None
        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=200,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": text}],
            )
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            return None
        reply = "".join(block.text for block in message.content if block.type == "text").strip()
        return reply or None
