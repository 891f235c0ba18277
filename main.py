#!/usr/bin/env python3
"""Aki - Main Entry Point

A Discord bot that posts Danbooru images, with per-server custom tag commands
and SFW/NSFW channel filtering.
"""
import asyncio
from typing import Optional

import discord

from aki.bot import AkiBot
from aki.config import BOT_TOKEN, logger, intents

MAX_START_ATTEMPTS = 5


def retry_delay(error: Exception, attempt: int) -> Optional[float]:
    """Seconds to wait before starting again, or None to give up.

    Discord and Cloudflare rate limits back off exponentially (2, 4, 8, 16s).
    A bad token is never retried.
    """
    if isinstance(error, discord.LoginFailure):
        return None
    if attempt >= MAX_START_ATTEMPTS:
        return None
    if isinstance(error, discord.HTTPException):
        if error.status == 429 or "cloudflare" in str(error).lower():
            return 2 ** attempt
        return 5
    return 10


def main():
    """Main entry point for the bot."""
    if not BOT_TOKEN:
        logger.error("❌ BOT_TOKEN not found in .env file!")
        return

    logger.info("🚀 Starting Aki...")

    for attempt in range(1, MAX_START_ATTEMPTS + 1):
        # A closed client cannot be started again
        bot = AkiBot(intents=intents)
        try:
            bot.run(BOT_TOKEN, reconnect=True)
            return
        except Exception as e:
            delay = retry_delay(e, attempt)
            if isinstance(e, discord.LoginFailure):
                logger.error("❌ INVALID TOKEN - Bot token may be banned or revoked!")
                return
            if delay is None:
                logger.error(f"❌ Failed after {attempt} attempts: {e}")
                return

            logger.warning(f"⚠️ Bot stopped ({e}). Retry {attempt}/{MAX_START_ATTEMPTS - 1} in {delay}s...")
            asyncio.run(asyncio.sleep(delay))


if __name__ == "__main__":
    main()
