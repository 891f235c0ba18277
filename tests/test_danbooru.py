import asyncio

import aiohttp
import pytest

from aki.danbooru import build_search_tags, categorize_tags, normalize_post
from aki.errors import ApiServerError, RateLimitExceeded
from aki.rating import Rating

from conftest import FakeResponse, post_data


# ============================================================================
# NORMALIZATION
# ============================================================================

def test_normalize_post():
    post = normalize_post(post_data(post_id=7, rating="q", file_url="https://cdn.test/a.png?download=1"))

    assert post.id == 7
    assert post.file_url == "https://cdn.test/a.png?id=7"
    assert post.rating is Rating.QUESTIONABLE
    assert post.score == 120
    assert post.artist_tag == "some_artist"
    assert post.page_url.endswith("/posts/7")


def test_normalize_post_falls_back_to_other_urls():
    data = post_data(file_url=None, large_file_url="https://cdn.test/large.jpg")
    assert normalize_post(data).file_url == "https://cdn.test/large.jpg?id=1"


def test_normalize_post_defaults():
    data = {"id": 3, "file_url": "https://cdn.test/x.jpg", "tag_string": "solo"}
    post = normalize_post(data)

    assert post.rating is Rating.GENERAL
    assert post.score == 0
    assert post.fav_count == 0
    assert post.artist_tag == "Unknown"


def test_blacklisted_post_is_rejected():
    assert normalize_post(post_data(tags="1girl loli")) is None
    assert normalize_post(post_data(tags="1girl GORE")) is None


@pytest.mark.parametrize("data", [
    None,
    [],
    {"id": 1, "tag_string": "solo"},
    {"id": 1, "file_url": "https://cdn.test/x.jpg"},
    {"file_url": "https://cdn.test/x.jpg", "tag_string": "solo"},
    {"id": -4, "file_url": "https://cdn.test/x.jpg", "tag_string": "solo"},
    {"id": 1, "file_url": "https://cdn.test/x.jpg", "tag_string": "solo", "rating": "z"},
])
def test_incomplete_posts_are_rejected(data):
    assert normalize_post(data) is None


def test_build_search_tags():
    base = "-status:deleted rating:g filetype:png,jpg score:>50"
    assert build_search_tags("", Rating.GENERAL) == base
    assert build_search_tags("cat girl", Rating.GENERAL) == f"{base} cat_girl"
    assert build_search_tags("1girl", Rating.EXPLICIT).startswith("-status:deleted rating:e ")


def test_categorize_tags():
    categories = categorize_tags("1girl some_artist touhou highres smile hakurei_reimu_(cosplay)", "some_artist")

    assert categories["artist"] == ["some_artist"]
    assert categories["character"] == ["1girl", "hakurei_reimu_(cosplay)"]
    assert categories["copyright"] == ["touhou"]
    assert categories["meta"] == ["highres"]
    assert categories["general"] == ["smile"]


# ============================================================================
# RANDOM POSTS
# ============================================================================

async def test_fetch_random_sends_query(make_client):
    client, session = make_client(lambda url, params: FakeResponse(200, [post_data(post_id=9)]))

    post = await client.fetch_random("cat_girl", Rating.GENERAL)

    assert post.id == 9
    url, params = session.calls[0]
    assert url == "https://danbooru.test/posts.json"
    assert params["random"] == "true"
    assert params["limit"] == "1"
    assert params["tags"].endswith("rating:g filetype:png,jpg score:>50 cat_girl")


async def test_fetch_random_blacklisted_post_gives_none(make_client):
    client, _ = make_client(lambda url, params: FakeResponse(200, [post_data(tags="loli solo")]))
    assert await client.fetch_random("solo", Rating.GENERAL) is None


async def test_fetch_random_empty_result(make_client):
    client, _ = make_client(lambda url, params: FakeResponse(200, []))
    assert await client.fetch_random("no_such_tag", Rating.GENERAL) is None


async def test_fetch_random_422_raises(make_client):
    client, _ = make_client(lambda url, params: FakeResponse(422))
    with pytest.raises(ApiServerError) as excinfo:
        await client.fetch_random("bikini", Rating.GENERAL)
    assert excinfo.value.status == 422


@pytest.mark.parametrize("status", [500, 502, 503])
async def test_fetch_random_server_errors_raise(make_client, status):
    client, _ = make_client(lambda url, params: FakeResponse(status))
    with pytest.raises(ApiServerError) as excinfo:
        await client.fetch_random("1girl", Rating.GENERAL)
    assert excinfo.value.status == status


@pytest.mark.parametrize("status", [400, 403, 404, 429])
async def test_fetch_random_other_statuses_give_none(make_client, status):
    client, _ = make_client(lambda url, params: FakeResponse(status))
    assert await client.fetch_random("1girl", Rating.GENERAL) is None


@pytest.mark.parametrize("error", [asyncio.TimeoutError(), aiohttp.ClientConnectionError("reset")])
async def test_fetch_random_connection_failure_is_408(make_client, error):
    client, _ = make_client(lambda url, params: error)
    with pytest.raises(ApiServerError) as excinfo:
        await client.fetch_random("1girl", Rating.GENERAL)
    assert excinfo.value.status == 408


async def test_random_cache_used_only_when_rng_says_so(make_client, cache):
    client, session = make_client(lambda url, params: FakeResponse(200, [post_data(post_id=2)]), rng=lambda: 0.0)
    cached = normalize_post(post_data(post_id=1))
    cache.set("random", "1girl-g", cached)

    assert await client.fetch_random("1girl", Rating.GENERAL) is cached
    assert session.calls == []

    client.rng = lambda: 0.5
    fresh = await client.fetch_random("1girl", Rating.GENERAL)
    assert fresh.id == 2
    assert len(session.calls) == 1


async def test_rate_limit_blocks_before_request(make_client, limiter):
    client, session = make_client(lambda url, params: FakeResponse(200, []))
    for _ in range(30):
        limiter.try_acquire()

    with pytest.raises(RateLimitExceeded):
        await client.fetch_random("1girl", Rating.GENERAL)
    assert session.calls == []


# ============================================================================
# POSTS BY ID
# ============================================================================

async def test_fetch_by_id_caches(make_client):
    client, session = make_client(lambda url, params: FakeResponse(200, post_data(post_id=55)))

    first = await client.fetch_by_id("55")
    second = await client.fetch_by_id("55")

    assert first == second
    assert first.id == 55
    assert len(session.calls) == 1
    assert session.calls[0][0] == "https://danbooru.test/posts/55.json"


async def test_fetch_by_id_missing(make_client):
    client, _ = make_client(lambda url, params: FakeResponse(404))
    assert await client.fetch_by_id("1") is None


async def test_fetch_by_id_server_error(make_client):
    client, _ = make_client(lambda url, params: FakeResponse(503))
    with pytest.raises(ApiServerError):
        await client.fetch_by_id("1")


# ============================================================================
# AUTOCOMPLETE
# ============================================================================

async def test_suggest_sorts_filters_and_normalizes(make_client):
    payload = [
        {"name": "cat_ears", "post_count": 500},
        {"name": "Cat Girl", "post_count": 9000},
        {"name": "loli", "post_count": 99999},
        {"name": "broken", "post_count": "many"},
        {"post_count": 3},
        "junk",
    ]
    client, session = make_client(lambda url, params: FakeResponse(200, payload))

    suggestions = await client.suggest("Cat")

    assert [(tag.name, tag.post_count) for tag in suggestions] == [("cat_girl", 9000), ("cat_ears", 500)]
    params = session.calls[0][1]
    assert params["search[name_matches]"] == "cat*"
    assert params["search[order]"] == "count"


async def test_suggest_caps_at_ten(make_client):
    payload = [{"name": f"tag_{i}", "post_count": i} for i in range(20)]
    client, _ = make_client(lambda url, params: FakeResponse(200, payload))

    suggestions = await client.suggest("tag")
    assert len(suggestions) == 10
    assert suggestions[0].post_count == 19


async def test_suggest_is_cached(make_client):
    client, session = make_client(lambda url, params: FakeResponse(200, [{"name": "solo", "post_count": 1}]))

    await client.suggest("so")
    await client.suggest("so")
    assert len(session.calls) == 1


async def test_suggest_swallows_connection_failures(make_client):
    client, _ = make_client(lambda url, params: aiohttp.ClientConnectionError("down"))
    assert await client.suggest("cat") == []


async def test_suggest_empty_input_skips_request(make_client):
    client, session = make_client(lambda url, params: FakeResponse(200, []))
    assert await client.suggest("   ") == []
    assert session.calls == []
