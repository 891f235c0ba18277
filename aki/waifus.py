"""Waifu tag pool used by /waifu."""
import random
from pathlib import Path
from typing import List, Optional

from .config import logger

FALLBACK_WAIFU_TAG = "1girl"


def load_waifu_tags(path: Path) -> List[str]:
    """Load one tag per line, skipping blank lines and # comments."""
    if not path.exists():
        logger.error(f"Waifu tag file not found: {path}")
        return []

    try:
        with open(path, encoding="utf-8") as f:
            lines = [line.strip() for line in f]
    except OSError as e:
        logger.error(f"Failed to load waifu tags: {e}")
        return []

    tags = [line for line in lines if line and not line.startswith("#")]
    logger.info("Loaded %s waifu tags", len(tags))
    return tags


def pick_waifu_tag(tags: List[str], choice=random.choice) -> str:
    return choice(tags) if tags else FALLBACK_WAIFU_TAG


class WaifuPool:

    """In-memory list of waifu tags, loaded once at startup."""

    def __init__(self, tags: Optional[List[str]] = None):
        self.tags = list(tags or [])

    def load(self, path: Path) -> int:
        self.tags = load_waifu_tags(path)
        return len(self.tags)

    def pick(self) -> str:
        return pick_waifu_tag(self.tags)
