"""Danbooru API client

Every request goes through the shared rate limiter and response cache:
- fetch_by_id: a single post by id
- fetch_random: one random post for a tag and rating
- suggest: tag name completions ordered by popularity
"""
import asyncio
import random
import re
from dataclasses import dataclass
from typing import Any, List, Optional

import aiohttp

from utils.security import sanitize_tag

from .config import (
    logger,
    API_TIMEOUT_SECONDS,
    BLACKLISTED_TAGS,
    CACHE_TTL_SECONDS,
    DANBOORU_BASE_URL,
    RANDOM_CACHE_PROBABILITY,
    UNKNOWN_ARTIST,
    USER_AGENT,
)
from .errors import ApiServerError, ConnectionFailed, RateLimitExceeded
from .rating import Rating

# Statuses fetch_random treats as "nothing found" without logging
QUIET_STATUSES = {403, 404, 429}

MAX_SUGGESTIONS = 10


@dataclass(frozen=True)
class Post:
    id: int
    file_url: str
    score: int
    rating: Rating
    tag_string: str
    artist_tag: str
    fav_count: int

    @property
    def tags(self) -> List[str]:
        return self.tag_string.split()

    @property
    def page_url(self) -> str:
        return post_url(self.id)


@dataclass(frozen=True)
class TagSuggestion:
    name: str
    post_count: int


def post_url(post_id: int, base_url: str = DANBOORU_BASE_URL) -> str:
    return f"{base_url}/posts/{post_id}"


def normalize_tag(text: str) -> str:
    """Lowercase and join words with underscores, Danbooru style."""
    return sanitize_tag(text)


def is_blacklisted(tag_string: str) -> bool:
    return any(tag in BLACKLISTED_TAGS for tag in tag_string.lower().split())


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def normalize_post(data: Any) -> Optional[Post]:
    """Build a Post from a raw API object.

    Returns None unless the object has an id, an image URL and a tag string,
    and none of its tags are blacklisted.
    """
    if not isinstance(data, dict):
        return None

    image_url = data.get("file_url") or data.get("large_file_url") or data.get("preview_file_url")
    tag_string = data.get("tag_string")
    if not image_url or not isinstance(image_url, str) or not tag_string or not data.get("id"):
        return None

    post_id = _to_int(data["id"])
    if post_id <= 0:
        return None

    tag_string = str(tag_string)
    if is_blacklisted(tag_string):
        return None

    try:
        rating = Rating.parse(data.get("rating")) or Rating.GENERAL
    except ValueError:
        return None

    return Post(
        id=post_id,
        file_url=f"{image_url.split('?')[0]}?id={post_id}",
        score=_to_int(data.get("score")),
        rating=rating,
        tag_string=tag_string,
        artist_tag=str(data.get("tag_string_artist") or UNKNOWN_ARTIST),
        fav_count=_to_int(data.get("fav_count")),
    )


def build_search_tags(tags: str, rating: Rating) -> str:
    base_filter = f"-status:deleted rating:{rating.value} filetype:png,jpg score:>50"
    clean_tags = re.sub(r"\s+", "_", tags.strip()) if tags else ""
    return f"{base_filter} {clean_tags}" if clean_tags else base_filter


class DanbooruClient:

    """Async Danbooru client with rate limiting and caching.

    The aiohttp session is created on first use and shared by all requests.
    """

    def __init__(
        self,
        rate_limiter,
        cache,
        base_url: str = DANBOORU_BASE_URL,
        timeout: float = API_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        cache_ttl: float = CACHE_TTL_SECONDS,
        cache_probability: float = RANDOM_CACHE_PROBABILITY,
        session=None,
        rng=random.random,
    ):
        self.rate_limiter = rate_limiter
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.cache_ttl = cache_ttl
        self.cache_probability = cache_probability
        self.session = session
        self.rng = rng

    def _get_session(self):
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self.session

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()

    async def _get_json(self, path: str, params: Optional[dict] = None):
        """GET ``path`` and return ``(status, json_or_None)``.

        Raises:
            RateLimitExceeded: The outbound budget for this window is used up
            ConnectionFailed: No response was received

        """
        if not self.rate_limiter.try_acquire():
            raise RateLimitExceeded("Rate limit exceeded. Please try again later.")

        session = self._get_session()
        try:
            async with session.get(f"{self.base_url}{path}", params=params) as response:
                if response.status < 200 or response.status >= 300:
                    return response.status, None
                return response.status, await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ConnectionFailed("Request timeout") from e
        except aiohttp.ClientError as e:
            raise ConnectionFailed(f"Network connection failed: {e}") from e

    @staticmethod
    def _raise_for_server_error(status: int, what: str) -> None:
        if status == 503:
            raise ApiServerError(f"{what} temporarily unavailable", status)
        if status >= 500:
            raise ApiServerError(f"{what} server error ({status})", status)

    async def fetch_by_id(self, post_id) -> Optional[Post]:
        """Fetch one post by id.

        Returns:
            The post, or None if it is missing or fails normalization

        Raises:
            ApiServerError: 5xx from Danbooru, or 408 when the connection failed
            RateLimitExceeded: Outbound budget exhausted

        """
        key = str(post_id)
        cached = self.cache.get("posts", key)
        if cached is not None:
            return cached

        try:
            status, data = await self._get_json(f"/posts/{key}.json")
        except ConnectionFailed as e:
            raise ApiServerError("Connection timeout - please try again", 408) from e
        except (ApiServerError, RateLimitExceeded):
            raise
        except Exception as e:
            logger.error("Failed to fetch post %s: %s", key, e)
            return None

        if data is None:
            self._raise_for_server_error(status, "API")
            if status != 404:
                logger.warning("API request failed with status %s for ID: %s", status, key)
            return None

        post = normalize_post(data)
        if post:
            self.cache.set("posts", key, post, self.cache_ttl)
        return post

    async def fetch_random(self, tags: str, rating: Rating) -> Optional[Post]:
        """Fetch one random post matching ``tags`` with exactly ``rating``.

        A cached result for the same query is reused only some of the time so
        repeated requests keep returning fresh images.

        Raises:
            ApiServerError: 422 when Danbooru refuses the tag/rating combination,
                5xx on server trouble, 408 when the connection failed
            RateLimitExceeded: Outbound budget exhausted

        """
        cache_key = f"{tags}-{rating.value}"
        cached = self.cache.get("random", cache_key)
        if cached is not None and self.rng() < self.cache_probability:
            return cached

        params = {
            "limit": "1",
            "random": "true",
            "tags": build_search_tags(tags, rating),
        }
        try:
            status, data = await self._get_json("/posts.json", params)
        except ConnectionFailed as e:
            raise ApiServerError("Connection timeout - please try again", 408) from e
        except (ApiServerError, RateLimitExceeded):
            raise
        except Exception as e:
            logger.error("Failed to fetch random image: %s", e)
            return None

        if data is None:
            self._raise_for_server_error(status, "API")
            if status == 422:
                raise ApiServerError("Content not suitable for this channel", status)
            if status not in QUIET_STATUSES:
                logger.warning("Random image API request failed with status %s", status)
            return None

        post = normalize_post(data[0]) if isinstance(data, list) and data else None
        if post:
            self.cache.set("random", cache_key, post, self.cache_ttl)
        return post

    async def suggest(self, prefix: str) -> List[TagSuggestion]:
        """Tag completions for ``prefix``, most used first.

        Returns an empty list on every failure except Danbooru server errors.
        """
        clean = normalize_tag(prefix)
        if not clean:
            return []

        cached = self.cache.get("autocomplete", clean)
        if cached is not None:
            return cached

        params = {
            "search[name_matches]": f"{clean}*",
            "search[order]": "count",
            "limit": str(MAX_SUGGESTIONS),
        }
        try:
            status, data = await self._get_json("/tags.json", params)
        except (ConnectionFailed, RateLimitExceeded) as e:
            logger.debug("Tag autocomplete skipped for %r: %s", prefix, e)
            return []
        except Exception as e:
            logger.error("Failed to fetch tag autocomplete for %r: %s", prefix, e)
            return []

        if data is None:
            self._raise_for_server_error(status, "Autocomplete API")
            logger.warning("Tag autocomplete request failed with status %s for input: %s", status, prefix)
            return []

        suggestions = []
        for item in data if isinstance(data, list) else []:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            count = item.get("post_count")
            if not isinstance(name, str) or not name or isinstance(count, bool) or not isinstance(count, int):
                continue
            if name.lower() in BLACKLISTED_TAGS:
                continue
            suggestions.append(TagSuggestion(name=normalize_tag(name), post_count=max(count, 0)))

        suggestions.sort(key=lambda tag: tag.post_count, reverse=True)
        suggestions = suggestions[:MAX_SUGGESTIONS]

        if suggestions:
            self.cache.set("autocomplete", clean, suggestions, self.cache_ttl)
        return suggestions


# ============================================================================
# TAG CATEGORIES
# ============================================================================

_CATEGORY_PATTERNS = {
    "character": [
        re.compile(r"^\d+(girl|boy)s?$"),
        re.compile(r"^multiple_(girls|boys)$"),
        re.compile(r"_\([^)]+\)$"),
    ],
    "copyright": [
        re.compile(r"^(original|touhou|kantai_collection|fate|azur_lane|genshin_impact|pokemon)$"),
        re.compile(r"_project$"),
        re.compile(r"_series$"),
    ],
    "meta": [
        re.compile(r"^(commentary|translated|translation_request|check_translation)$"),
        re.compile(r"^(commission|request|sketch|wip)$"),
        re.compile(r"^(highres|absurdres|incredibly_absurdres)$"),
        re.compile(r"text$"),
        re.compile(r"^(monochrome|greyscale|sepia)$"),
    ],
}


def categorize_tags(tag_string: str, artist_tag: Optional[str] = None) -> dict:
    """Sort a post's tags into artist/character/copyright/meta/general buckets."""
    categories = {"artist": [], "character": [], "copyright": [], "general": [], "meta": []}

    for tag in tag_string.split():
        if artist_tag and tag == artist_tag:
            categories["artist"].append(tag)
            continue

        lower = tag.lower()
        for category, patterns in _CATEGORY_PATTERNS.items():
            if any(pattern.search(lower) for pattern in patterns):
                categories[category].append(tag)
                break
        else:
            categories["general"].append(tag)

    return categories
