"""Aki bot and command tree

Custom tag commands are guild commands that the local command tree does not
know about. discord.py reports them as ``CommandNotFound`` through the tree's
error hook, which is where they get routed to the command gate.
"""
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from utils.discord_formatter import error_embed

from .commands import register_commands
from .commands.replies import reject_if_throttled, defer, send, send_result
from .config import logger, intents as default_intents
from .dispatch import InteractionContext
from .event_handlers import register_events
from .rating import Rating
from .services import build_services
from . import messages


def rating_option(data: dict) -> Optional[Rating]:
    """``rating`` option from raw interaction data, None if absent or unknown."""
    for option in data.get("options") or []:
        if option.get("name") == "rating":
            try:
                return Rating.parse(option.get("value"))
            except ValueError:
                return None
    return None


class AkiCommandTree(app_commands.CommandTree):

    """Command tree that runs unknown guild commands as custom tag commands."""

    services = None

    async def on_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        if (
            isinstance(error, app_commands.CommandNotFound)
            and interaction.type is discord.InteractionType.application_command
            and self.services is not None
        ):
            await self.run_custom_command(interaction)
            return

        command_name = interaction.command.name if interaction.command else "unknown"
        logger.error("Error in /%s: %r", command_name, error, exc_info=error)
        await send(
            interaction,
            embed=error_embed("Unexpected Error", messages.GENERIC_ERROR, interaction.user),
            ephemeral=True,
        )

    async def run_custom_command(self, interaction: discord.Interaction):
        data = interaction.data or {}
        name = data.get("name", "")

        if await reject_if_throttled(interaction, self.services):
            return
        if not await defer(interaction):
            return

        ctx = InteractionContext.from_interaction(interaction)
        result = await self.services.gate.run_custom_command(
            ctx, name, command_id=data.get("id"), rating=rating_option(data),
        )
        await send_result(interaction, result)


class AkiBot(commands.Bot):

    """Discord client with Aki's services, commands and events attached."""

    def __init__(self, intents: discord.Intents = default_intents):
        super().__init__(command_prefix=commands.when_mentioned, intents=intents, tree_cls=AkiCommandTree)
        self.services = build_services(self)
        self.tree.services = self.services

        self.cache_sweeper = register_events(self, self.services)
        register_commands(self, self.services)

    async def close(self):
        if self.cache_sweeper.is_running():
            self.cache_sweeper.cancel()
        await self.services.danbooru.close()
        logger.info("👋 Bot shutting down gracefully...")
        await super().close()
