"""/help command for Aki"""
from typing import TYPE_CHECKING

import discord
from discord import app_commands

from utils.discord_formatter import help_embed

from ..config import MAX_CUSTOM_TAGS
from ..dispatch import InteractionContext
from .replies import defer, send

if TYPE_CHECKING:
    from discord.ext import commands
    from ..services import Services


def register_help_command(bot: "commands.Bot", services: "Services"):
    gate = services.gate

    @bot.tree.command(name="help", description="Get help using the Aki bot")
    @app_commands.guild_only()
    async def help_command(interaction: discord.Interaction):
        if not await defer(interaction, ephemeral=True):
            return

        ctx = InteractionContext.from_interaction(interaction)
        listed = await gate.list_custom_tags(ctx)
        # Help still renders when the registry is unreachable
        custom_count = len(listed.commands) if listed.ok else 0

        embed = help_embed(custom_count, MAX_CUSTOM_TAGS, ctx.channel_is_unsafe, interaction.user)
        await send(interaction, embed=embed, ephemeral=True)
