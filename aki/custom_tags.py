"""Custom Tag Commands - per-server shortcut commands

A custom tag command is a real guild slash command whose description carries
the tag it searches for:

    "Tag: cat_girl • Auto-generated description"

Discord's command registry is the only storage. Every read goes back to
Discord so commands deleted from another client disappear on the next call.
"""
import re
from dataclasses import dataclass
from typing import List, Optional

import discord

from .config import (
    logger,
    DEFAULT_TAG_DESCRIPTION,
    MAX_DESCRIPTION_LENGTH,
    RESERVED_COMMAND_NAMES,
    TAG_PREFIX,
    TAG_SEPARATOR,
)
from .errors import (
    CommandNotFound,
    RegistrationFailed,
    RegistryUnavailable,
    UnregisterFailed,
)
from .rating import SELECTABLE_RATINGS
from . import messages

VALID_COMMAND_NAME = re.compile(r"^[a-z0-9_:]{1,64}$")

# Discord application command types / option types
CHAT_INPUT = 1
STRING_OPTION = 3


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class CustomTagCommand:
    id: str
    name: str
    description: str
    tag: Optional[str]


# ============================================================================
# DESCRIPTION ENCODING
# ============================================================================

def encode_description(tag: str, description: Optional[str] = None) -> str:
    """Build the command description that stores ``tag``, cut to Discord's limit."""
    text = f"{TAG_PREFIX} {tag} {TAG_SEPARATOR} {description or DEFAULT_TAG_DESCRIPTION}"
    return text[:MAX_DESCRIPTION_LENGTH]


def tag_from_description(description: Optional[str]) -> Optional[str]:
    """Read the tag back out of a command description.

    Returns:
        The tag, or None if the description is not a custom tag description

    """
    if not description or not description.startswith(TAG_PREFIX):
        return None

    after_prefix = description[len(TAG_PREFIX):].strip()
    tag, _, _ = after_prefix.partition(TAG_SEPARATOR)
    return tag.strip()


def tag_from_command(command) -> Optional[str]:
    """Decode the tag of a CustomTagCommand or a raw command payload."""
    description = command.get("description") if isinstance(command, dict) else command.description
    return tag_from_description(description)


def validate_name(name: str) -> ValidationResult:
    if not VALID_COMMAND_NAME.match(name or ""):
        return ValidationResult(False, messages.INVALID_COMMAND_NAME)
    if name in RESERVED_COMMAND_NAMES:
        return ValidationResult(False, messages.RESERVED_COMMAND_NAME)
    return ValidationResult(True)


def build_command_payload(name: str, tag: str, description: Optional[str] = None) -> dict:
    """JSON body for a guild slash command that searches ``tag``."""
    return {
        "type": CHAT_INPUT,
        "name": name.lower(),
        "description": encode_description(tag, description),
        "options": [
            {
                "type": STRING_OPTION,
                "name": "rating",
                "description": "Filter by a specific content rating",
                "required": False,
                "choices": [{"name": rating.label, "value": rating.value} for rating in SELECTABLE_RATINGS],
            },
        ],
    }


def command_from_payload(payload: dict) -> CustomTagCommand:
    description = payload.get("description", "")
    return CustomTagCommand(
        id=str(payload.get("id", "")),
        name=payload.get("name", ""),
        description=description,
        tag=tag_from_command(payload),
    )


# ============================================================================
# DISCORD REGISTRY TRANSPORT
# ============================================================================

class DiscordCommandRegistry:

    """Guild command CRUD through discord.py's HTTP client.

    Any object with the same three coroutines can stand in for this one.
    """

    def __init__(self, bot: discord.Client):
        self.bot = bot

    @property
    def application_id(self) -> int:
        if self.bot.application_id is None:
            raise RuntimeError("Bot is not logged in yet")
        return self.bot.application_id

    async def fetch_commands(self, guild_id: int) -> List[dict]:
        return await self.bot.http.get_guild_commands(self.application_id, guild_id)

    async def create_command(self, guild_id: int, payload: dict) -> dict:
        return await self.bot.http.upsert_guild_command(self.application_id, guild_id, payload)

    async def delete_command(self, guild_id: int, command_id: str) -> None:
        await self.bot.http.delete_guild_command(self.application_id, guild_id, int(command_id))


# ============================================================================
# CUSTOM TAG REGISTRY
# ============================================================================

class CustomTagRegistry:

    """Create, list and delete custom tag commands for a guild."""

    def __init__(self, transport):
        self.transport = transport

    async def list_guild_tags(self, guild_id: int) -> List[CustomTagCommand]:
        """All custom tag commands currently registered in the guild.

        Raises:
            RegistryUnavailable: The guild command list could not be fetched

        """
        try:
            payloads = await self.transport.fetch_commands(guild_id)
        except Exception as e:
            logger.error("Failed to get commands for guild %s: %s", guild_id, e)
            raise RegistryUnavailable("Failed to fetch guild commands.") from e

        return [
            command_from_payload(payload)
            for payload in payloads
            if str(payload.get("description", "")).startswith(TAG_PREFIX)
        ]

    async def register(
        self,
        guild_id: int,
        name: str,
        tag: str,
        description: Optional[str] = None,
    ) -> CustomTagCommand:
        """Create the guild command. Cap and collision checks are the caller's job.

        Raises:
            RegistrationFailed: Discord rejected the command or did not answer

        """
        payload = build_command_payload(name, tag, description)
        try:
            created = await self.transport.create_command(guild_id, payload)
        except Exception as e:
            logger.error("Failed to register command /%s in guild %s: %s", name, guild_id, e)
            raise RegistrationFailed("Failed to register the command with Discord.") from e

        logger.info("Registered custom command /%s -> %s in guild %s", payload["name"], tag, guild_id)
        return command_from_payload(created or payload)

    async def unregister(self, guild_id: int, name: str) -> CustomTagCommand:
        """Delete the custom tag command called ``name``.

        Raises:
            CommandNotFound: No custom tag command has that exact name
            UnregisterFailed: The command was found but could not be deleted
            RegistryUnavailable: The guild command list could not be fetched

        """
        commands = await self.list_guild_tags(guild_id)
        command = next((cmd for cmd in commands if cmd.name == name), None)
        if command is None:
            logger.warning("Command /%s not found for deletion in guild %s.", name, guild_id)
            raise CommandNotFound(f"Command /{name} not found.")

        try:
            await self.transport.delete_command(guild_id, command.id)
        except Exception as e:
            logger.error("Failed to unregister command /%s from guild %s: %s", name, guild_id, e)
            raise UnregisterFailed("Failed to unregister the command from Discord.") from e

        logger.info("Removed custom command /%s from guild %s", name, guild_id)
        return command
