"""Entry point for the WhatsApp budget bot."""

import sys

import uvicorn

from budget_bot.config import settings


def main():
    try:
        uvicorn.run("budget_bot.main:app", host=settings.host, port=settings.port)
    except KeyboardInterrupt:
        print("\nShutting down WhatsApp budget bot...")
        sys.exit(0)


if __name__ == "__main__":
    main()
