"""Configuration and initialization for Aki

Loads settings from:
1. Environment variables (.env)
2. config.toml file
3. Default values

This module should be imported first by all other modules.
"""
import logging
import os
from pathlib import Path

import toml
from dotenv import load_dotenv

# ============================================================================
# ENVIRONMENT & CONFIG LOADING
# ============================================================================

# Load environment variables
load_dotenv()
BOT_TOKEN = os.getenv("BOT_TOKEN")

# Load config from toml file
CONFIG_FILE = Path(os.getenv("AKI_CONFIG", "config.toml"))
config = toml.load(CONFIG_FILE) if CONFIG_FILE.exists() else {}

# ============================================================================
# CONFIGURATION PARSING HELPERS
# ============================================================================

def get_setting(key: str, default, cast=str):
    """Read a setting from env var first, then config.toml, then default."""
    env_value = os.getenv(key)
    if env_value is not None and env_value.strip() != "":
        return cast(env_value.strip())
    if key in config:
        return cast(config[key])
    return default


def parse_str_list(key: str, default: list) -> list:
    """Parse a comma-separated list from env var or a list from config file."""
    env_value = os.getenv(key)
    if env_value is not None:
        env_value = env_value.strip()
        if env_value == "[]" or env_value == "":
            return []
        return [item.strip() for item in env_value.split(",") if item.strip()]
    value = config.get(key)
    if isinstance(value, list):
        return [str(item) for item in value]
    return list(default)

# ============================================================================
# LOGGING SETUP
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("Aki")

# ============================================================================
# DANBOORU API CONFIGURATION
# ============================================================================

DANBOORU_BASE_URL = get_setting("DANBOORU_BASE_URL", "https://danbooru.donmai.us").rstrip("/")
API_TIMEOUT_SECONDS = get_setting("API_TIMEOUT_SECONDS", 15.0, float)
USER_AGENT = get_setting("USER_AGENT", "Aki (Discord Bot)")

# Cache
CACHE_TTL_SECONDS = get_setting("CACHE_TTL_SECONDS", 60.0, float)
RANDOM_CACHE_PROBABILITY = get_setting("RANDOM_CACHE_PROBABILITY", 0.3, float)
CACHE_SWEEP_MINUTES = get_setting("CACHE_SWEEP_MINUTES", 5.0, float)

# Outbound budget shared by every Danbooru call
RATE_LIMIT_MAX_REQUESTS = get_setting("RATE_LIMIT_MAX_REQUESTS", 30, int)
RATE_LIMIT_WINDOW_SECONDS = get_setting("RATE_LIMIT_WINDOW_SECONDS", 60, int)

# Per-user throttle for image commands
USER_RATE_LIMIT_MAX_REQUESTS = get_setting("USER_RATE_LIMIT_MAX_REQUESTS", 5, int)
USER_RATE_LIMIT_WINDOW_SECONDS = get_setting("USER_RATE_LIMIT_WINDOW_SECONDS", 10, int)

# ============================================================================
# BOT BEHAVIOUR
# ============================================================================

MAX_USER_TAGS = get_setting("MAX_USER_TAGS", 1, int)  # Danbooru limits tags per search
MAX_CUSTOM_TAGS = get_setting("MAX_CUSTOM_TAGS", 25, int)
COMMAND_DEADLINE_SECONDS = get_setting("COMMAND_DEADLINE_SECONDS", 8.0, float)
AUTOCOMPLETE_DEADLINE_SECONDS = get_setting("AUTOCOMPLETE_DEADLINE_SECONDS", 2.0, float)

DEFAULT_RATING_SFW = get_setting("DEFAULT_RATING_SFW", "g")
DEFAULT_RATING_NSFW = get_setting("DEFAULT_RATING_NSFW", "e")

WAIFUS_FILE = Path(get_setting("WAIFUS_FILE", "assets/waifus.txt"))

# Guild to sync commands to while developing (global sync when unset)
DEV_GUILD_ID = get_setting("DEV_GUILD_ID", None, int)

# ============================================================================
# CUSTOM TAG COMMANDS
# ============================================================================

# Changing any of these breaks commands that are already registered
TAG_PREFIX = "Tag:"
TAG_SEPARATOR = "•"
DEFAULT_TAG_DESCRIPTION = "Auto-generated description"
MAX_DESCRIPTION_LENGTH = 100
RESERVED_COMMAND_NAMES = frozenset({
    "add", "fetch", "help", "list", "post", "remove", "search", "waifu",
})

UNKNOWN_ARTIST = "Unknown"

# ============================================================================
# CONTENT FILTERS
# ============================================================================

DEFAULT_BLACKLISTED_TAGS = [
    "loli", "shota", "lolicon", "shotacon", "underage", "child", "minor", "kid", "baby", "toddler",
    "child_porn", "cp",
    "gore", "guro", "snuff", "death", "murder", "torture", "blood", "violence", "rape_gore",
    "cannibalism", "necrophilia",
    "non_con", "forced", "unwilling", "mind_control", "hypnosis", "drugged",
    "scat", "poop", "defecation", "urine", "watersports", "piss", "toilet", "diaper",
]
BLACKLISTED_TAGS = frozenset(
    tag.lower() for tag in parse_str_list("BLACKLISTED_TAGS", DEFAULT_BLACKLISTED_TAGS)
)

NSFW_PATTERNS = [
    "nude", "sex", "porn", "hentai", "ecchi", "bikini", "underwear", "suggestive", "erotic", "nsfw",
] + parse_str_list("EXTRA_NSFW_PATTERNS", [])

# ============================================================================
# DISCORD BOT INTENTS
# ============================================================================

import discord

intents = discord.Intents.default()
intents.guilds = True
