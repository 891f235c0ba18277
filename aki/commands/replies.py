"""Reply helpers shared by all commands

Expired interactions (discord.NotFound) are logged and dropped.
"""
from typing import List, Optional

import discord
from discord import app_commands

from utils.discord_formatter import error_embed, failure_embed

from ..config import logger
from ..rating import SELECTABLE_RATINGS, Rating
from .. import messages

RATING_CHOICES = [app_commands.Choice(name=rating.label, value=rating.value) for rating in SELECTABLE_RATINGS]


def rating_from_choice(choice: Optional[app_commands.Choice]) -> Optional[Rating]:
    return Rating.parse(choice.value) if choice is not None else None


async def defer(interaction: discord.Interaction, ephemeral: bool = False) -> bool:
    """Acknowledge the interaction. Returns False if it already expired."""
    try:
        await interaction.response.defer(ephemeral=ephemeral, thinking=True)
        return True
    except discord.NotFound:
        logger.warning("Interaction %s expired before it could be deferred", interaction.id)
        return False


async def send(
    interaction: discord.Interaction,
    content: Optional[str] = None,
    embed: Optional[discord.Embed] = None,
    ephemeral: bool = False,
) -> None:
    kwargs = {"ephemeral": ephemeral}
    if content is not None:
        kwargs["content"] = content
    if embed is not None:
        kwargs["embed"] = embed

    try:
        if interaction.response.is_done():
            await interaction.followup.send(**kwargs)
        else:
            await interaction.response.send_message(**kwargs)
    except discord.NotFound:
        logger.warning("Interaction %s expired before the reply was sent", interaction.id)
    except discord.HTTPException as e:
        logger.error(f"❌ Failed to send reply: {e}")


async def send_result(interaction: discord.Interaction, result, ephemeral: bool = False) -> None:
    """Image URL on success, error/warning embed otherwise."""
    if result.ok:
        await send(interaction, content=result.content, ephemeral=ephemeral)
    else:
        await send(interaction, embed=failure_embed(result, interaction.user), ephemeral=ephemeral)


async def reject_if_throttled(interaction: discord.Interaction, services) -> bool:
    """Per-user throttle in front of every command that calls Danbooru."""
    if not services.user_limiter.is_rate_limited(interaction.user.id):
        return False

    await send(
        interaction,
        embed=error_embed("Rate Limited", messages.USER_RATE_LIMIT, interaction.user),
        ephemeral=True,
    )
    return True


async def tag_autocomplete(gate, current: str) -> List[app_commands.Choice[str]]:
    suggestions = await gate.tag_choices(current)
    return [app_commands.Choice(name=tag.name, value=tag.name) for tag in suggestions]


async def custom_command_autocomplete(gate, guild_id: Optional[int], current: str) -> List[app_commands.Choice[str]]:
    commands = await gate.custom_command_choices(guild_id, current)
    return [
        app_commands.Choice(name=f"{cmd.name} → {cmd.tag or 'unknown tag'}"[:100], value=cmd.name)
        for cmd in commands
    ]
