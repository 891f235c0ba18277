"""Custom tag management commands for Aki

- /add: register a guild command that searches a fixed tag
- /list: show the guild's custom tag commands
- /remove: delete a custom tag command

/add and /remove need the Manage Messages permission.
"""
from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands

from utils.discord_formatter import (
    command_added_embed,
    command_removed_embed,
    custom_list_embed,
    failure_embed,
)

from ..config import MAX_CUSTOM_TAGS
from ..dispatch import InteractionContext
from .replies import custom_command_autocomplete, defer, send, tag_autocomplete

if TYPE_CHECKING:
    from discord.ext import commands
    from ..services import Services


def register_custom_tag_commands(bot: "commands.Bot", services: "Services"):
    """Register custom tag management commands with the bot.

    Args:
        bot: The Discord bot instance
        services: Shared services
    """
    gate = services.gate

    @bot.tree.command(name="add", description="Add a custom tag command to this server")
    @app_commands.describe(
        name="Name of the new command",
        tag="Danbooru tag the command searches for",
        description="Optional description shown in the command list",
    )
    @app_commands.default_permissions(manage_messages=True)
    @app_commands.guild_only()
    async def add_command(
        interaction: discord.Interaction,
        name: str,
        tag: str,
        description: Optional[str] = None,
    ):
        if not await defer(interaction, ephemeral=True):
            return

        ctx = InteractionContext.from_interaction(interaction)
        result = await gate.add_custom_tag(ctx, name, tag, description)

        if result.ok:
            embed = command_added_embed(result.command, description, interaction.user)
        else:
            embed = failure_embed(result, interaction.user)
        await send(interaction, embed=embed, ephemeral=True)

    @add_command.autocomplete("tag")
    async def add_tag_autocomplete(interaction: discord.Interaction, current: str):
        return await tag_autocomplete(gate, current)

    @bot.tree.command(name="list", description="List all custom tag commands in this server")
    @app_commands.guild_only()
    async def list_command(interaction: discord.Interaction):
        if not await defer(interaction, ephemeral=True):
            return

        ctx = InteractionContext.from_interaction(interaction)
        result = await gate.list_custom_tags(ctx)

        if result.ok:
            guild_name = interaction.guild.name if interaction.guild else "this server"
            embed = custom_list_embed(result.commands, guild_name, MAX_CUSTOM_TAGS, interaction.user)
        else:
            embed = failure_embed(result, interaction.user)
        await send(interaction, embed=embed, ephemeral=True)

    @bot.tree.command(name="remove", description="Remove a custom tag command from this server")
    @app_commands.describe(name="Name of the command to remove")
    @app_commands.default_permissions(manage_messages=True)
    @app_commands.guild_only()
    async def remove_command(interaction: discord.Interaction, name: str):
        if not await defer(interaction, ephemeral=True):
            return

        ctx = InteractionContext.from_interaction(interaction)
        result = await gate.remove_custom_tag(ctx, name)

        if result.ok:
            embed = command_removed_embed(result.command, len(result.commands), MAX_CUSTOM_TAGS, interaction.user)
        else:
            embed = failure_embed(result, interaction.user)
        await send(interaction, embed=embed, ephemeral=True)

    @remove_command.autocomplete("name")
    async def remove_name_autocomplete(interaction: discord.Interaction, current: str):
        return await custom_command_autocomplete(gate, interaction.guild_id, current)
