"""Rating policy - which content ratings a channel may display.

Channels are binary: a safe channel shows only ``general`` posts, an NSFW
channel shows everything. Ratings are checked twice per request, once for the
rating we ask Danbooru for and once for the rating of the post it returns.
"""
import enum
import re
from typing import Optional

from .config import DEFAULT_RATING_NSFW, DEFAULT_RATING_SFW, NSFW_PATTERNS


class Rating(enum.Enum):
    GENERAL = "g"
    SENSITIVE = "s"
    QUESTIONABLE = "q"
    EXPLICIT = "e"

    @classmethod
    def parse(cls, value) -> Optional["Rating"]:
        """Accept a Rating, a Danbooru letter or a full name. Empty input gives None."""
        if value is None or isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if not text:
            return None
        for rating in cls:
            if text == rating.value or text == rating.name.lower():
                return rating
        raise ValueError(f"Unknown rating: {value!r}")

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def emoji(self) -> str:
        return _EMOJIS[self]


_EMOJIS = {
    Rating.GENERAL: "✅",
    Rating.SENSITIVE: "⚠️",
    Rating.QUESTIONABLE: "🔶",
    Rating.EXPLICIT: "🔞",
}

# The only ratings users can pick directly; general and explicit come from the channel default
SELECTABLE_RATINGS = (Rating.QUESTIONABLE, Rating.SENSITIVE)

_NSFW_REGEXES = [re.compile(pattern) for pattern in NSFW_PATTERNS]


def default_rating(channel_is_unsafe: bool) -> Rating:
    if channel_is_unsafe:
        return Rating.parse(DEFAULT_RATING_NSFW)
    return Rating.parse(DEFAULT_RATING_SFW)


def effective_rating(requested: Optional[Rating], channel_is_unsafe: bool) -> Rating:
    """The rating to search for: the requested one if given, else the channel default."""
    if requested is not None:
        return requested
    return default_rating(channel_is_unsafe)


def channel_allows(rating: Rating, channel_is_unsafe: bool) -> bool:
    return channel_is_unsafe or rating is Rating.GENERAL


def looks_nsfw(tag_text: str) -> bool:
    """Heuristic check used to warn before running a custom tag in a safe channel."""
    text = (tag_text or "").lower()
    return any(regex.search(text) for regex in _NSFW_REGEXES)
