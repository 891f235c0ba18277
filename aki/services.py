"""Process-lifetime services shared by commands and event handlers."""
from dataclasses import dataclass

import discord

from utils.cache import ResponseCache
from utils.security import RateLimiter

from .config import (
    API_TIMEOUT_SECONDS,
    CACHE_TTL_SECONDS,
    DANBOORU_BASE_URL,
    MAX_CUSTOM_TAGS,
    MAX_USER_TAGS,
    RANDOM_CACHE_PROBABILITY,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    USER_AGENT,
    USER_RATE_LIMIT_MAX_REQUESTS,
    USER_RATE_LIMIT_WINDOW_SECONDS,
    COMMAND_DEADLINE_SECONDS,
    AUTOCOMPLETE_DEADLINE_SECONDS,
)
from .custom_tags import CustomTagRegistry, DiscordCommandRegistry
from .danbooru import DanbooruClient
from .dispatch import CommandGate
from .waifus import WaifuPool


@dataclass
class Services:
    cache: ResponseCache
    rate_limiter: RateLimiter
    user_limiter: RateLimiter
    danbooru: DanbooruClient
    registry: CustomTagRegistry
    waifus: WaifuPool
    gate: CommandGate


def build_services(bot: discord.Client) -> Services:
    """Create every shared object once, wired together."""
    cache = ResponseCache(default_ttl=CACHE_TTL_SECONDS)
    rate_limiter = RateLimiter(
        max_requests=RATE_LIMIT_MAX_REQUESTS,
        window_seconds=RATE_LIMIT_WINDOW_SECONDS,
    )
    user_limiter = RateLimiter(
        max_requests=USER_RATE_LIMIT_MAX_REQUESTS,
        window_seconds=USER_RATE_LIMIT_WINDOW_SECONDS,
    )
    danbooru = DanbooruClient(
        rate_limiter,
        cache,
        base_url=DANBOORU_BASE_URL,
        timeout=API_TIMEOUT_SECONDS,
        user_agent=USER_AGENT,
        cache_ttl=CACHE_TTL_SECONDS,
        cache_probability=RANDOM_CACHE_PROBABILITY,
    )
    registry = CustomTagRegistry(DiscordCommandRegistry(bot))
    waifus = WaifuPool()
    gate = CommandGate(
        danbooru,
        registry,
        waifus,
        max_user_tags=MAX_USER_TAGS,
        max_custom_tags=MAX_CUSTOM_TAGS,
        request_deadline=COMMAND_DEADLINE_SECONDS,
        autocomplete_deadline=AUTOCOMPLETE_DEADLINE_SECONDS,
    )
    return Services(
        cache=cache,
        rate_limiter=rate_limiter,
        user_limiter=user_limiter,
        danbooru=danbooru,
        registry=registry,
        waifus=waifus,
        gate=gate,
    )
