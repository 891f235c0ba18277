"""Event handlers for Aki

This module contains all Discord event handlers:
- on_ready: Bot startup, waifu pool, command sync, cache sweep
- on_guild_join, on_guild_remove: Server bookkeeping in the logs
- on_disconnect, on_resumed: Connection lifecycle
"""
from typing import TYPE_CHECKING

import discord
from discord.ext import tasks

from .config import logger, CACHE_SWEEP_MINUTES, WAIFUS_FILE

if TYPE_CHECKING:
    from discord.ext import commands
    from .services import Services


def make_cache_sweeper(services: "Services") -> tasks.Loop:
    """Background loop that drops expired cache entries and idle rate limit users."""

    @tasks.loop(minutes=CACHE_SWEEP_MINUTES)
    async def sweep_cache():
        removed = services.cache.sweep()
        if removed:
            logger.debug("🧹 Swept %s expired cache entries", removed)

        idle = services.user_limiter.sweep()
        if idle:
            logger.debug("🧹 Forgot %s idle rate limit entries", idle)

    return sweep_cache


def register_events(bot: "commands.Bot", services: "Services"):
    """Register all event handlers with the bot.

    Args:
        bot: The Discord bot instance
        services: Shared services
    """
    sweep_cache = make_cache_sweeper(services)

    @bot.event
    async def on_ready():
        """Bot startup handler."""
        logger.info("✅ Logged in as %s!", bot.user)
        logger.info("📊 Connected to %s servers", len(bot.guilds))

        if not services.waifus.tags:
            services.waifus.load(WAIFUS_FILE)

        try:
            synced = await bot.tree.sync()
            logger.info("🔄 Synced %s slash commands", len(synced))
        except Exception as e:
            logger.error("Failed to sync commands: %s", e)

        if not sweep_cache.is_running():
            sweep_cache.start()

        await bot.change_presence(
            status=discord.Status.dnd,
            activity=discord.Activity(type=discord.ActivityType.watching, name="Danbooru"),
        )

    @bot.event
    async def on_guild_join(guild: discord.Guild):
        logger.info("➕ Joined server: %s (ID: %s)", guild.name, guild.id)

    @bot.event
    async def on_guild_remove(guild: discord.Guild):
        logger.info("➖ Removed from server: %s (ID: %s)", guild.name, guild.id)

    @bot.event
    async def on_disconnect():
        """Handle disconnection from Discord."""
        logger.warning("⚠️ Bot disconnected from Discord! Will attempt to reconnect...")

    @bot.event
    async def on_resumed():
        """Handle reconnection to Discord."""
        logger.info("✅ Bot reconnected to Discord successfully!")

    return sweep_cache
