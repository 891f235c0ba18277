"""Context menu commands for Aki

Right-click menu commands for images the bot has posted:
- Info: post statistics
- Tags: categorized tag list
- Save: DM the image to yourself
- Remove: delete the image (only the person who requested it)
"""
import re
from typing import TYPE_CHECKING, Optional, Tuple

import discord

from utils.discord_formatter import error_embed, failure_embed, post_info_embed, tags_embed, warning_embed

from ..config import logger, DANBOORU_BASE_URL
from ..danbooru import categorize_tags
from ..dispatch import InteractionContext
from .. import messages
from .replies import defer, reject_if_throttled, send

if TYPE_CHECKING:
    from discord.ext import commands
    from ..services import Services

IMAGE_URL = re.compile(r"https?://\S+\.(?:png|jpg)(?:\?id=(\d+))?", re.IGNORECASE)
ID_FROM_URL = re.compile(r"\?id=(\d+)")


def find_image(message) -> Tuple[Optional[str], Optional[str]]:
    """Image URL (query string stripped) and Danbooru post ID of a bot message.

    Looks at the message text, then embed images, then the first attachment.
    Either part may be None.
    """
    sources = [message.content]
    for embed in message.embeds:
        sources.append(embed.image.url or embed.thumbnail.url)

    for source in sources:
        if not source:
            continue
        match = IMAGE_URL.search(source)
        if match:
            return match.group(0).split("?")[0], match.group(1)

    if message.attachments and message.attachments[0].url:
        url = message.attachments[0].url
        match = ID_FROM_URL.search(url)
        return url.split("?")[0], match.group(1) if match else None

    return None, None


def find_post_id(message) -> Optional[str]:
    return find_image(message)[1]


async def dm_image(user, url: str) -> bool:
    """Send an image URL to a user privately. False if their DMs are closed."""
    try:
        await user.send(content=url)
        return True
    except discord.HTTPException as e:
        logger.info("Could not DM %s: %s", user, e)
        return False


def requested_by(message: discord.Message) -> Optional[int]:
    metadata = getattr(message, "interaction_metadata", None)
    if metadata is not None and metadata.user is not None:
        return metadata.user.id
    return None


def register_context_menus(bot: "commands.Bot", services: "Services"):
    """Register context menu commands with the bot.

    Args:
        bot: The Discord bot instance
        services: Shared services
    """
    gate = services.gate

    async def _fetch_post_for(interaction: discord.Interaction, message: discord.Message):
        """Shared lookup for Info and Tags. Replies and returns None on failure."""
        if message.author.id != bot.user.id:
            await send(
                interaction,
                embed=error_embed("Access Denied", messages.BOT_MESSAGES_ONLY, interaction.user),
                ephemeral=True,
            )
            return None

        post_id = find_post_id(message)
        if not post_id:
            await send(
                interaction,
                embed=warning_embed("No Image Found", messages.NO_IMAGE_IN_MESSAGE, interaction.user),
                ephemeral=True,
            )
            return None

        ctx = InteractionContext.from_interaction(interaction)
        result = await gate.post(ctx, post_id)
        if not result.ok:
            await send(interaction, embed=failure_embed(result, interaction.user), ephemeral=True)
            return None
        return result.post

    @bot.tree.context_menu(name="Info")
    @discord.app_commands.guild_only()
    async def info_context(interaction: discord.Interaction, message: discord.Message):
        if await reject_if_throttled(interaction, services):
            return
        if not await defer(interaction, ephemeral=True):
            return

        post = await _fetch_post_for(interaction, message)
        if post is None:
            return

        embed = post_info_embed(post, DANBOORU_BASE_URL, interaction.user)
        await send(interaction, embed=embed, ephemeral=True)

    @bot.tree.context_menu(name="Tags")
    @discord.app_commands.guild_only()
    async def tags_context(interaction: discord.Interaction, message: discord.Message):
        if await reject_if_throttled(interaction, services):
            return
        if not await defer(interaction, ephemeral=True):
            return

        post = await _fetch_post_for(interaction, message)
        if post is None:
            return

        categories = categorize_tags(post.tag_string, post.artist_tag)
        embed = tags_embed(post, categories, DANBOORU_BASE_URL, interaction.user)
        await send(interaction, embed=embed, ephemeral=True)

    @bot.tree.context_menu(name="Save")
    @discord.app_commands.guild_only()
    async def save_context(interaction: discord.Interaction, message: discord.Message):
        if not await defer(interaction, ephemeral=True):
            return

        if not InteractionContext.from_interaction(interaction).bot_can_view:
            await send(
                interaction,
                embed=error_embed("Missing Permissions", messages.BOT_MISSING_PERMISSIONS, interaction.user),
                ephemeral=True,
            )
            return

        if message.author.id != bot.user.id:
            await send(
                interaction,
                embed=error_embed("Access Denied", messages.BOT_MESSAGES_ONLY, interaction.user),
                ephemeral=True,
            )
            return

        url, _ = find_image(message)
        if not url:
            await send(
                interaction,
                embed=error_embed("No Image Found", messages.NO_IMAGE_IN_MESSAGE, interaction.user),
                ephemeral=True,
            )
            return

        if not await dm_image(interaction.user, url):
            await send(
                interaction,
                embed=error_embed("DM Failed", messages.DM_FAILED, interaction.user),
                ephemeral=True,
            )
            return

        try:
            await interaction.delete_original_response()
        except discord.HTTPException as e:
            logger.warning("Could not clear Save reply: %s", e)

    @bot.tree.context_menu(name="Remove")
    async def remove_context(interaction: discord.Interaction, message: discord.Message):
        if not await defer(interaction, ephemeral=True):
            return

        if message.author.id != bot.user.id:
            await send(
                interaction,
                embed=error_embed("Access Denied", messages.BOT_MESSAGES_ONLY, interaction.user),
                ephemeral=True,
            )
            return

        in_dm = isinstance(interaction.channel, discord.DMChannel)
        if not in_dm and requested_by(message) != interaction.user.id:
            await send(
                interaction,
                embed=error_embed("Removal Denied", messages.REMOVAL_DENIED, interaction.user),
                ephemeral=True,
            )
            return

        try:
            await message.delete()
            await interaction.delete_original_response()
            logger.info("🗑️ %s removed message %s", interaction.user, message.id)
        except discord.NotFound:
            logger.warning("Message %s was already gone", message.id)
        except discord.HTTPException as e:
            logger.error(f"❌ Failed to remove message {message.id}: {e}")
            await send(
                interaction,
                embed=error_embed("Unexpected Error", messages.GENERIC_ERROR, interaction.user),
                ephemeral=True,
            )
