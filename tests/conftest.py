"""Fakes shared by the test suite. Nothing here touches the network."""
import asyncio
import itertools

import pytest

from aki.custom_tags import CustomTagRegistry
from aki.danbooru import DanbooruClient, normalize_post
from aki.dispatch import CommandGate, InteractionContext
from aki.waifus import WaifuPool
from utils.cache import ResponseCache
from utils.security import RateLimiter


class FakeClock:

    def __init__(self, now: float = 600.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:

    def __init__(self, status: int = 200, payload=None):
        self.status = status
        self.payload = payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def json(self, content_type=None):
        return self.payload


class FakeSession:

    """Stands in for aiohttp.ClientSession; ``handler(url, params)`` decides the answer."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []
        self.closed = False

    def get(self, url, params=None):
        self.calls.append((url, params))
        result = self.handler(url, params)
        if isinstance(result, BaseException):
            raise result
        return result

    async def close(self):
        self.closed = True


class FakeTransport:

    """In-memory guild command registry with the DiscordCommandRegistry interface."""

    def __init__(self):
        self.guilds = {}
        self.deleted = []
        self.created = []
        self.fail_fetch = False
        self.fail_create = False
        self.fail_delete = False
        self.stalled = set()
        self._ids = itertools.count(1000)

    def add_raw(self, guild_id, name, description):
        payload = {"id": str(next(self._ids)), "name": name, "description": description}
        self.guilds.setdefault(guild_id, []).append(payload)
        return payload

    async def _stall(self, operation):
        if operation in self.stalled:
            await asyncio.sleep(3600)

    async def fetch_commands(self, guild_id):
        await self._stall("fetch")
        if self.fail_fetch:
            raise RuntimeError("registry down")
        return [dict(payload) for payload in self.guilds.get(guild_id, [])]

    async def create_command(self, guild_id, payload):
        await self._stall("create")
        if self.fail_create:
            raise RuntimeError("create rejected")
        created = dict(payload, id=str(next(self._ids)))
        self.guilds.setdefault(guild_id, []).append(created)
        self.created.append(created)
        return created

    async def delete_command(self, guild_id, command_id):
        await self._stall("delete")
        if self.fail_delete:
            raise RuntimeError("delete rejected")
        commands = self.guilds.get(guild_id, [])
        self.guilds[guild_id] = [cmd for cmd in commands if cmd["id"] != command_id]
        self.deleted.append(command_id)


class FakeDanbooru:

    """Records upstream calls; ``result`` is returned or raised."""

    def __init__(self, result=None, delay: float = 0.0):
        self.result = result
        self.delay = delay
        self.random_calls = []
        self.id_calls = []
        self.suggestions = []

    async def _answer(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result

    async def fetch_random(self, tags, rating):
        self.random_calls.append((tags, rating))
        return await self._answer()

    async def fetch_by_id(self, post_id):
        self.id_calls.append(post_id)
        return await self._answer()

    async def suggest(self, prefix):
        if isinstance(self.suggestions, BaseException):
            raise self.suggestions
        return list(self.suggestions)


def post_data(post_id=1, rating="g", tags="1girl solo", **extra):
    data = {
        "id": post_id,
        "file_url": f"https://cdn.donmai.us/original/ab/cd/{post_id}.jpg",
        "score": 120,
        "rating": rating,
        "tag_string": tags,
        "tag_string_artist": "some_artist",
        "fav_count": 40,
    }
    data.update(extra)
    return data


def make_post(post_id=1, rating="g", tags="1girl solo"):
    return normalize_post(post_data(post_id, rating, tags))


GUILD_ID = 111


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResponseCache(default_ttl=60.0, clock=clock)


@pytest.fixture
def limiter(clock):
    return RateLimiter(max_requests=30, window_seconds=60, clock=clock)


@pytest.fixture
def make_client(cache, limiter):
    def factory(handler, rng=lambda: 0.99):
        session = FakeSession(handler)
        client = DanbooruClient(
            limiter,
            cache,
            base_url="https://danbooru.test",
            session=session,
            rng=rng,
        )
        return client, session
    return factory


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def registry(transport):
    return CustomTagRegistry(transport)


@pytest.fixture
def danbooru():
    return FakeDanbooru()


@pytest.fixture
def gate(danbooru, registry):
    return CommandGate(danbooru, registry, WaifuPool(["hatsune_miku"]))


@pytest.fixture
def safe_ctx():
    return InteractionContext(guild_id=GUILD_ID, channel_id=5, channel_is_unsafe=False, user_id=42)


@pytest.fixture
def unsafe_ctx():
    return InteractionContext(guild_id=GUILD_ID, channel_id=6, channel_is_unsafe=True, user_id=42)
