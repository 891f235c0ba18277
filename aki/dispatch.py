"""Command Gate - the one pipeline every image command runs through

Image commands (/search, /fetch, /waifu, /post and every custom tag command)
go through the same checks, in order, stopping at the first failure:

1. Context: inside a server, bot can see the channel
2. User tags: not too many, none blacklisted
3. Tag to search: literal, random waifu, or the custom command's hidden tag
4. Rating: requested or channel default, must be allowed in the channel
5. Custom tags only: hidden tag looks NSFW in a safe channel
6. Danbooru call under an overall deadline
7. Nothing found
8. The returned post's own rating must be allowed in the channel
9. Reply with the image URL

Results come back as GateResult values. Nothing here talks to Discord except
the custom tag registry.
"""
import asyncio
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Tuple

import discord

from .config import (
    logger,
    AUTOCOMPLETE_DEADLINE_SECONDS,
    BLACKLISTED_TAGS,
    COMMAND_DEADLINE_SECONDS,
    MAX_CUSTOM_TAGS,
    MAX_USER_TAGS,
    TAG_SEPARATOR,
)
from .custom_tags import CustomTagCommand, ValidationResult, tag_from_description, validate_name
from .danbooru import Post, TagSuggestion, normalize_tag
from .errors import (
    CommandNotFound,
    FailureKind,
    classify_exception,
)
from .rating import Rating, channel_allows, effective_rating, looks_nsfw
from . import messages

VALID_POST_ID = re.compile(r"^\d+$")

MAX_TAG_CHOICES = 5
MAX_COMMAND_CHOICES = 25


@dataclass(frozen=True)
class InteractionContext:
    guild_id: Optional[int]
    channel_id: Optional[int]
    channel_is_unsafe: bool
    user_id: int
    bot_can_view: bool = True

    @classmethod
    def from_interaction(cls, interaction: discord.Interaction) -> "InteractionContext":
        channel = interaction.channel
        unsafe = isinstance(channel, discord.TextChannel) and channel.is_nsfw()
        bot_can_view = True
        if interaction.guild is not None:
            bot_can_view = interaction.app_permissions.view_channel
        return cls(
            guild_id=interaction.guild_id,
            channel_id=interaction.channel_id,
            channel_is_unsafe=unsafe,
            user_id=interaction.user.id,
            bot_can_view=bot_can_view,
        )


@dataclass(frozen=True)
class GateResult:
    ok: bool
    content: Optional[str] = None
    kind: Optional[FailureKind] = None
    message: Optional[str] = None
    post: Optional[Post] = None
    command: Optional[CustomTagCommand] = None
    commands: Tuple[CustomTagCommand, ...] = field(default_factory=tuple)
    searched_tag: Optional[str] = None

    @classmethod
    def success(cls, content: Optional[str] = None, **kwargs) -> "GateResult":
        return cls(ok=True, content=content, **kwargs)

    @classmethod
    def failure(cls, kind: FailureKind, message: Optional[str] = None, **kwargs) -> "GateResult":
        return cls(ok=False, kind=kind, message=message or messages.DEFAULT_MESSAGES[kind], **kwargs)

    @property
    def title(self) -> str:
        return self.kind.title if self.kind else ""


def split_user_tags(tags: str) -> List[str]:
    return [tag.strip() for tag in tags.lower().split(",") if tag.strip()]


class CommandGate:

    """Runs image and custom tag commands against Danbooru and the registry."""

    def __init__(
        self,
        danbooru,
        registry,
        waifus,
        max_user_tags: int = MAX_USER_TAGS,
        max_custom_tags: int = MAX_CUSTOM_TAGS,
        request_deadline: float = COMMAND_DEADLINE_SECONDS,
        autocomplete_deadline: float = AUTOCOMPLETE_DEADLINE_SECONDS,
    ):
        self.danbooru = danbooru
        self.registry = registry
        self.waifus = waifus
        self.max_user_tags = max_user_tags
        self.max_custom_tags = max_custom_tags
        self.request_deadline = request_deadline
        self.autocomplete_deadline = autocomplete_deadline

    # ========================================================================
    # SHARED CHECKS
    # ========================================================================

    @staticmethod
    def check_context(ctx: InteractionContext, guild_only: bool = True) -> Optional[GateResult]:
        if guild_only and ctx.guild_id is None:
            return GateResult.failure(FailureKind.GUILD_ONLY)
        if not ctx.bot_can_view:
            return GateResult.failure(FailureKind.MISSING_BOT_PERMISSIONS)
        return None

    def validate_tags(self, tags: str) -> Optional[GateResult]:
        """Reject too many comma-separated tags or any blacklisted one."""
        if not tags or not tags.strip():
            return None

        tag_list = split_user_tags(tags)
        if len(tag_list) > self.max_user_tags:
            return GateResult.failure(FailureKind.TOO_MANY_TAGS)

        for tag in tag_list:
            if tag in BLACKLISTED_TAGS or normalize_tag(tag) in BLACKLISTED_TAGS:
                return GateResult.failure(FailureKind.BLACKLISTED_TAG)
        return None

    def _failure_from_exception(self, error: BaseException, action: str, **kwargs) -> GateResult:
        kind = classify_exception(error)
        if kind is FailureKind.GENERIC_ERROR:
            logger.error("%s error: %r", action, error, exc_info=error)
        else:
            logger.info("%s failed: %s (%s)", action, kind.name, error)
        return GateResult.failure(kind, **kwargs)

    async def _within_deadline(self, awaitable):
        return await asyncio.wait_for(awaitable, timeout=self.request_deadline)

    # ========================================================================
    # IMAGE PIPELINE
    # ========================================================================

    async def run_image_pipeline(
        self,
        ctx: InteractionContext,
        action: str,
        rating: Optional[Rating] = None,
        user_tags: str = "",
        resolve_tag: Callable[[], Optional[str]] = lambda: "",
        custom: bool = False,
        fetch: Optional[Callable[[str, Rating], Awaitable[Optional[Post]]]] = None,
        not_found: Optional[str] = None,
    ) -> GateResult:
        """Steps 1-9 shared by every image command.

        Args:
            ctx: Validated interaction context
            action: Name used in log lines
            rating: Rating the user asked for, or None for the channel default
            user_tags: Free text tags typed by the user, validated before use
            resolve_tag: Returns the tag to search, or None if it cannot be worked out
            custom: Apply the NSFW keyword check for custom tag commands
            fetch: Called with (tag, rating) to get the post; random search by default
            not_found: Message for step 7 instead of the searched tag line

        """
        fetch = fetch or self.danbooru.fetch_random
        failure = self.check_context(ctx)
        if failure:
            return failure

        invalid = self.validate_tags(user_tags)
        if invalid:
            return invalid

        tag = resolve_tag()
        if tag is None:
            return GateResult.failure(FailureKind.INVALID_CUSTOM_TAG)

        effective = effective_rating(rating, ctx.channel_is_unsafe)
        if not channel_allows(effective, ctx.channel_is_unsafe):
            return GateResult.failure(FailureKind.CONTENT_RESTRICTED, searched_tag=tag)

        if custom and not ctx.channel_is_unsafe and rating is None and looks_nsfw(tag):
            return GateResult.failure(FailureKind.NSFW_TAG_IN_SFW, searched_tag=tag)

        try:
            post = await self._within_deadline(fetch(tag, effective))
        except Exception as e:
            return self._failure_from_exception(e, action, searched_tag=tag)

        if post is None or not post.file_url:
            return GateResult.failure(
                FailureKind.NO_IMAGE_FOUND,
                not_found or f"{messages.NO_IMAGE}\n*Tag searched: `{tag or 'random'}`*",
                searched_tag=tag,
            )

        if not channel_allows(post.rating, ctx.channel_is_unsafe):
            logger.info("%s: discarded post %s rated %s for a safe channel", action, post.id, post.rating.name)
            return GateResult.failure(FailureKind.CONTENT_RESTRICTED, searched_tag=tag)

        return GateResult.success(post.file_url, post=post, searched_tag=tag)

    async def search(self, ctx: InteractionContext, tag: str, rating: Optional[Rating] = None) -> GateResult:
        tag = tag or ""
        return await self.run_image_pipeline(ctx, "search", rating, user_tags=tag, resolve_tag=lambda: tag)

    async def fetch(self, ctx: InteractionContext, rating: Optional[Rating] = None) -> GateResult:
        return await self.run_image_pipeline(ctx, "fetch", rating)

    async def waifu(self, ctx: InteractionContext, rating: Optional[Rating] = None) -> GateResult:
        return await self.run_image_pipeline(ctx, "waifu", rating, resolve_tag=self.waifus.pick)

    async def custom_tag(
        self,
        ctx: InteractionContext,
        command_name: str,
        command_description: Optional[str],
        rating: Optional[Rating] = None,
    ) -> GateResult:
        """Run a custom tag command given the description it was registered with."""
        return await self.run_image_pipeline(
            ctx,
            f"custom-tag:{command_name}",
            rating,
            resolve_tag=lambda: tag_from_description(command_description) or None,
            custom=True,
        )

    async def run_custom_command(
        self,
        ctx: InteractionContext,
        command_name: str,
        command_id: Optional[str] = None,
        rating: Optional[Rating] = None,
    ) -> GateResult:
        """Look up a custom tag command in the live registry, then run it."""
        failure = self.check_context(ctx)
        if failure:
            return failure

        try:
            commands = await self._within_deadline(self.registry.list_guild_tags(ctx.guild_id))
        except Exception as e:
            return self._failure_from_exception(e, f"custom-tag:{command_name}")

        command = next(
            (cmd for cmd in commands if (command_id and cmd.id == str(command_id)) or cmd.name == command_name),
            None,
        )
        if command is None:
            return GateResult.failure(FailureKind.COMMAND_NOT_FOUND, messages.command_not_found(command_name))

        return await self.custom_tag(ctx, command.name, command.description, rating)

    async def post(self, ctx: InteractionContext, post_id: str) -> GateResult:
        failure = self.check_context(ctx)
        if failure:
            return failure

        post_id = (post_id or "").strip()
        if not VALID_POST_ID.match(post_id):
            return GateResult.failure(FailureKind.INVALID_POST_ID)

        return await self.run_image_pipeline(
            ctx,
            "post",
            fetch=lambda tag, rating: self.danbooru.fetch_by_id(post_id),
            not_found=messages.POST_NOT_FOUND,
        )

    # ========================================================================
    # CUSTOM TAG MANAGEMENT
    # ========================================================================

    async def add_custom_tag(
        self,
        ctx: InteractionContext,
        name: str,
        tag: str,
        description: Optional[str] = None,
    ) -> GateResult:
        failure = self.check_context(ctx)
        if failure:
            return failure

        name = normalize_tag(name)
        tag = normalize_tag(tag)

        name_check: ValidationResult = validate_name(name)
        if not name_check.is_valid:
            return GateResult.failure(FailureKind.INVALID_COMMAND_NAME, name_check.error)

        if not tag or TAG_SEPARATOR in tag:
            return GateResult.failure(FailureKind.INVALID_CUSTOM_TAG, "Please provide a single valid tag.")

        invalid = self.validate_tags(tag)
        if invalid:
            return invalid

        try:
            existing = await self._within_deadline(self.registry.list_guild_tags(ctx.guild_id))
        except Exception as e:
            return self._failure_from_exception(e, "add")

        if len(existing) >= self.max_custom_tags:
            return GateResult.failure(FailureKind.MAX_TAGS_REACHED, commands=tuple(existing))

        if any(cmd.name == name for cmd in existing):
            return GateResult.failure(
                FailureKind.COMMAND_EXISTS, messages.command_exists(name), commands=tuple(existing),
            )

        try:
            created = await self._within_deadline(self.registry.register(ctx.guild_id, name, tag, description))
        except Exception as e:
            return self._failure_from_exception(e, "add")

        return GateResult.success(command=created, commands=tuple(existing) + (created,))

    async def remove_custom_tag(self, ctx: InteractionContext, name: str) -> GateResult:
        failure = self.check_context(ctx)
        if failure:
            return failure

        name = normalize_tag(name)

        try:
            existing = await self._within_deadline(self.registry.list_guild_tags(ctx.guild_id))
        except Exception as e:
            return self._failure_from_exception(e, "remove")

        if not any(cmd.name == name for cmd in existing):
            return GateResult.failure(
                FailureKind.COMMAND_NOT_FOUND, messages.command_not_found(name), commands=tuple(existing),
            )

        try:
            removed = await self._within_deadline(self.registry.unregister(ctx.guild_id, name))
        except CommandNotFound:
            # Deleted by someone else since we listed
            return GateResult.failure(FailureKind.COMMAND_NOT_FOUND, messages.command_not_found(name))
        except Exception as e:
            return self._failure_from_exception(e, "remove")

        remaining = tuple(cmd for cmd in existing if cmd.id != removed.id)
        return GateResult.success(command=removed, commands=remaining)

    async def list_custom_tags(self, ctx: InteractionContext) -> GateResult:
        failure = self.check_context(ctx)
        if failure:
            return failure

        try:
            commands = await self._within_deadline(self.registry.list_guild_tags(ctx.guild_id))
        except Exception as e:
            return self._failure_from_exception(e, "list")

        return GateResult.success(commands=tuple(sorted(commands, key=lambda cmd: cmd.name)))

    # ========================================================================
    # AUTOCOMPLETE
    # ========================================================================

    async def tag_choices(self, prefix: str) -> List[TagSuggestion]:
        """Top tag suggestions for a dropdown. Never raises."""
        if not prefix or not prefix.strip():
            return []
        try:
            suggestions = await asyncio.wait_for(
                self.danbooru.suggest(prefix),
                timeout=self.autocomplete_deadline,
            )
        except Exception as e:
            logger.debug("Tag autocomplete failed for %r: %s", prefix, e)
            return []
        return list(suggestions[:MAX_TAG_CHOICES])

    async def custom_command_choices(self, guild_id: Optional[int], prefix: str) -> List[CustomTagCommand]:
        """Custom commands whose name contains ``prefix``. Never raises."""
        if guild_id is None:
            return []
        try:
            commands = await asyncio.wait_for(
                self.registry.list_guild_tags(guild_id),
                timeout=self.autocomplete_deadline,
            )
        except Exception as e:
            logger.debug("Custom command autocomplete failed in guild %s: %s", guild_id, e)
            return []

        focused = (prefix or "").lower()
        return [cmd for cmd in commands if focused in cmd.name.lower()][:MAX_COMMAND_CHOICES]
