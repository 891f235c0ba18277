"""Command modules for Aki

Contains all slash command implementations organized by category.

Categories:
- images.py: /search, /fetch, /post, /waifu
- custom_tags.py: /add, /list, /remove
- help.py: /help
- context_menu.py: Right-click context menu commands

Custom tag commands themselves are not in the tree; see aki.tree.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from discord.ext import commands
    from ..services import Services


def register_commands(bot: "commands.Bot", services: "Services"):
    """Register all commands with the bot.

    Args:
        bot: The Discord bot instance
        services: Shared services the commands run against
    """
    from .images import register_image_commands
    from .custom_tags import register_custom_tag_commands
    from .help import register_help_command
    from .context_menu import register_context_menus

    register_image_commands(bot, services)
    register_custom_tag_commands(bot, services)
    register_help_command(bot, services)
    register_context_menus(bot, services)
