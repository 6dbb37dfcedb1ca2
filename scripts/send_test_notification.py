#!/usr/bin/env python3
"""Check notification channel configuration and send a Telegram test message."""

import asyncio

from leadline.adapters.email import EmailSender
from leadline.adapters.telegram import TelegramSender
from leadline.config import settings


async def main() -> int:
    email = EmailSender(settings)
    telegram = TelegramSender(settings)

    print(f"Email configured:    {email.is_configured()} (to {email.recipient})")
    print(f"Telegram configured: {telegram.is_configured()}")

    if not telegram.is_configured():
        print("Set LEADLINE_TELEGRAM_BOT_TOKEN and LEADLINE_TELEGRAM_CHAT_ID to send a test message.")
        await telegram.aclose()
        return 1

    try:
        result = await telegram.send_test_message()
    finally:
        await telegram.aclose()

    if result.success:
        print(f"Test message sent: {result.message_id}")
        return 0
    print(f"Test message failed: {result.error}")
    return 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
