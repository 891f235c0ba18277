"""Aki - Danbooru images for Discord servers

This package contains the bot split into logical modules.

Structure:
- config.py: Configuration and initialization
- errors.py: Exceptions and failure kinds
- messages.py: User-facing text
- rating.py: Content rating policy
- danbooru.py: Danbooru API client
- custom_tags.py: Custom tag commands stored in Discord's command registry
- waifus.py: Waifu tag pool
- dispatch.py: Command gate shared by every image command
- services.py: Shared service objects
- event_handlers.py: Discord event handlers
- bot.py: Bot and command tree
- commands/: Slash command implementations

Usage:
    from aki.bot import AkiBot
    from aki.config import BOT_TOKEN

    bot = AkiBot()
    bot.run(BOT_TOKEN)
"""

__version__ = "1.0.0"
__author__ = "Aki Contributors"
