import pytest

from aki.custom_tags import (
    CustomTagCommand,
    build_command_payload,
    encode_description,
    tag_from_command,
    tag_from_description,
    validate_name,
)
from aki.errors import CommandNotFound, RegistrationFailed, RegistryUnavailable, UnregisterFailed
from aki import messages

from conftest import GUILD_ID


def test_neko_description():
    assert encode_description("cat_girl") == "Tag: cat_girl • Auto-generated description"


@pytest.mark.parametrize("tag", ["cat_girl", "1girl", "hatsune_miku", "fate/stay_night", "a:b"])
def test_decode_reverses_encode(tag):
    assert tag_from_description(encode_description(tag, "Some description")) == tag


def test_description_is_truncated_to_discord_limit():
    description = encode_description("cat_girl", "x" * 200)
    assert len(description) == 100
    assert tag_from_description(description) == "cat_girl"


def test_decode_requires_prefix():
    assert tag_from_description("Get a random image") is None
    assert tag_from_description(None) is None
    assert tag_from_description("tag: lowercase • nope") is None


def test_decode_without_separator_takes_rest():
    assert tag_from_description("Tag: cat_girl") == "cat_girl"


def test_tag_from_command_accepts_payload_or_object():
    assert tag_from_command({"description": "Tag: fox_girl • Foxes"}) == "fox_girl"
    assert tag_from_command(CustomTagCommand("1", "fox", "Tag: fox_girl • Foxes", None)) == "fox_girl"


@pytest.mark.parametrize("name", ["neko", "cat_girl", "a", "ns:tag", "x" * 64])
def test_valid_names(name):
    assert validate_name(name).is_valid


@pytest.mark.parametrize("name", ["", "Neko", "cat girl", "bad!", "x" * 65])
def test_invalid_names(name):
    result = validate_name(name)
    assert not result.is_valid
    assert result.error == messages.INVALID_COMMAND_NAME


@pytest.mark.parametrize("name", ["search", "fetch", "waifu", "add", "remove", "list", "help", "post"])
def test_reserved_names(name):
    result = validate_name(name)
    assert not result.is_valid
    assert result.error == messages.RESERVED_COMMAND_NAME


def test_payload_has_rating_option():
    payload = build_command_payload("Neko", "cat_girl")
    assert payload["name"] == "neko"
    assert payload["type"] == 1
    choices = payload["options"][0]["choices"]
    assert {choice["value"] for choice in choices} == {"q", "s"}


async def test_register_then_list(registry):
    created = await registry.register(GUILD_ID, "neko", "cat_girl")

    listed = await registry.list_guild_tags(GUILD_ID)
    assert [cmd.name for cmd in listed] == ["neko"]
    assert listed[0].tag == "cat_girl"
    assert listed[0].id == created.id


async def test_list_ignores_commands_without_prefix(registry, transport):
    transport.add_raw(GUILD_ID, "other", "Some other guild command")
    transport.add_raw(GUILD_ID, "neko", "Tag: cat_girl • Cats")

    listed = await registry.list_guild_tags(GUILD_ID)
    assert [cmd.name for cmd in listed] == ["neko"]


async def test_unregister_then_list(registry):
    await registry.register(GUILD_ID, "neko", "cat_girl")
    await registry.register(GUILD_ID, "fox", "fox_girl")

    removed = await registry.unregister(GUILD_ID, "neko")

    assert removed.name == "neko"
    assert [cmd.name for cmd in await registry.list_guild_tags(GUILD_ID)] == ["fox"]


async def test_unregister_unknown_leaves_registry_untouched(registry, transport):
    await registry.register(GUILD_ID, "neko", "cat_girl")

    with pytest.raises(CommandNotFound):
        await registry.unregister(GUILD_ID, "missing")

    assert transport.deleted == []
    assert len(await registry.list_guild_tags(GUILD_ID)) == 1


async def test_registry_errors_are_typed(registry, transport):
    await registry.register(GUILD_ID, "neko", "cat_girl")

    transport.fail_delete = True
    with pytest.raises(UnregisterFailed):
        await registry.unregister(GUILD_ID, "neko")

    transport.fail_create = True
    with pytest.raises(RegistrationFailed):
        await registry.register(GUILD_ID, "fox", "fox_girl")

    transport.fail_fetch = True
    with pytest.raises(RegistryUnavailable):
        await registry.list_guild_tags(GUILD_ID)
