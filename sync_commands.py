#!/usr/bin/env python3
"""Deploy Aki's slash commands and check the bot token.

    python sync_commands.py            # sync global commands
    python sync_commands.py --guild    # copy them to DEV_GUILD_ID for fast testing
    python sync_commands.py --status   # only log in and list servers

Syncing to a guild replaces every command registered there, custom tag
commands included.
"""
import argparse

import discord

from aki.bot import AkiBot
from aki.config import BOT_TOKEN, DEV_GUILD_ID, logger


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Sync Aki's slash commands with Discord")
    parser.add_argument("--guild", action="store_true", help="sync to DEV_GUILD_ID instead of globally")
    parser.add_argument("--status", action="store_true", help="only check the token and list servers")
    return parser.parse_args(argv)


async def sync(bot, to_guild: bool):
    if to_guild:
        guild = discord.Object(id=DEV_GUILD_ID)
        bot.tree.copy_global_to(guild=guild)
        synced = await bot.tree.sync(guild=guild)
        print(f"🔄 Synced {len(synced)} commands to guild {DEV_GUILD_ID}")
    else:
        synced = await bot.tree.sync()
        print(f"🔄 Synced {len(synced)} global commands")


def main(argv=None):
    args = parse_args(argv)
    if args.guild and DEV_GUILD_ID is None:
        print("❌ --guild needs DEV_GUILD_ID in .env or config.toml")
        return

    bot = AkiBot()

    # Replaces the regular on_ready handler
    @bot.event
    async def on_ready():
        print(f"✅ Bot is ALIVE: {bot.user}")
        print(f"📊 Connected to {len(bot.guilds)} servers:")
        for guild in bot.guilds:
            print(f"  - {guild.name} (ID: {guild.id})")

        try:
            if not args.status:
                await sync(bot, args.guild)
        except discord.HTTPException as e:
            logger.error("Failed to sync commands: %s", e)
        finally:
            await bot.close()

    try:
        print("🔍 Connecting to Discord...")
        bot.run(BOT_TOKEN)
    except discord.LoginFailure:
        print("❌ INVALID TOKEN - Bot may be banned or token revoked!")
    except Exception as e:
        print(f"❌ Error: {e}")


if __name__ == "__main__":
    main()
