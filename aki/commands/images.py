"""Image commands for Aki

- /search: random image for a tag
- /fetch: random image
- /post: image by Danbooru post ID
- /waifu: random image from the waifu tag pool
"""
from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands

from ..dispatch import InteractionContext
from .replies import (
    RATING_CHOICES,
    defer,
    rating_from_choice,
    reject_if_throttled,
    send_result,
    tag_autocomplete,
)

if TYPE_CHECKING:
    from discord.ext import commands
    from ..services import Services


def register_image_commands(bot: "commands.Bot", services: "Services"):
    """Register image commands with the bot.

    Args:
        bot: The Discord bot instance
        services: Shared services
    """
    gate = services.gate

    @bot.tree.command(name="search", description="Get a random image for a Danbooru tag")
    @app_commands.describe(tag="The tag to search for", rating="Filter by a specific content rating")
    @app_commands.choices(rating=RATING_CHOICES)
    @app_commands.guild_only()
    async def search_command(
        interaction: discord.Interaction,
        tag: str,
        rating: Optional[app_commands.Choice[str]] = None,
    ):
        if await reject_if_throttled(interaction, services):
            return
        if not await defer(interaction):
            return

        ctx = InteractionContext.from_interaction(interaction)
        result = await gate.search(ctx, tag, rating_from_choice(rating))
        await send_result(interaction, result)

    @search_command.autocomplete("tag")
    async def search_tag_autocomplete(interaction: discord.Interaction, current: str):
        return await tag_autocomplete(gate, current)

    @bot.tree.command(name="fetch", description="Get a random image from Danbooru")
    @app_commands.describe(rating="Filter by a specific content rating")
    @app_commands.choices(rating=RATING_CHOICES)
    @app_commands.guild_only()
    async def fetch_command(interaction: discord.Interaction, rating: Optional[app_commands.Choice[str]] = None):
        if await reject_if_throttled(interaction, services):
            return
        if not await defer(interaction):
            return

        ctx = InteractionContext.from_interaction(interaction)
        result = await gate.fetch(ctx, rating_from_choice(rating))
        await send_result(interaction, result)

    @bot.tree.command(name="post", description="Get an image by its Danbooru post ID")
    @app_commands.describe(id="Danbooru post ID")
    @app_commands.guild_only()
    async def post_command(interaction: discord.Interaction, id: str):
        if await reject_if_throttled(interaction, services):
            return
        if not await defer(interaction):
            return

        ctx = InteractionContext.from_interaction(interaction)
        result = await gate.post(ctx, id)
        await send_result(interaction, result)

    @bot.tree.command(name="waifu", description="Get a random waifu image")
    @app_commands.describe(rating="Filter by a specific content rating")
    @app_commands.choices(rating=RATING_CHOICES)
    @app_commands.guild_only()
    async def waifu_command(interaction: discord.Interaction, rating: Optional[app_commands.Choice[str]] = None):
        if await reject_if_throttled(interaction, services):
            return
        if not await defer(interaction):
            return

        ctx = InteractionContext.from_interaction(interaction)
        result = await gate.waifu(ctx, rating_from_choice(rating))
        await send_result(interaction, result)
