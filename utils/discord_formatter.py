"""Build Discord embeds for Aki replies"""
from typing import Dict, List, Optional, Sequence

import discord

from aki.config import DEFAULT_TAG_DESCRIPTION, UNKNOWN_ARTIST
from aki.messages import COMMAND_ADDED, COMMAND_REMOVED, NO_CUSTOM_COMMANDS

# Embed colors by reply type
COLORS = {
    "default": 0xE40206,
    "success": 0x00FF88,
    "warning": 0xFFA500,
    "error": 0xFF4444,
    "info": 0x5865F2,
}

FIELD_LIMIT = 1024
TAG_LIMIT = 40


def bold(text) -> str:
    return f"**{text}**"


def inline_code(text) -> str:
    return f"`{text}`"


def link(label: str, url: str) -> str:
    return f"[{label}]({url})"


def bullet(items: Sequence[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def truncate(text: str, limit: int = FIELD_LIMIT) -> str:
    if len(text) > limit:
        return text[:limit - 3] + "..."
    return text


def make_embed(kind: str = "default", title: Optional[str] = None, description: Optional[str] = None) -> discord.Embed:
    """Embed with the color for ``kind`` and the current timestamp."""
    return discord.Embed(
        title=title,
        description=description,
        color=COLORS.get(kind, COLORS["default"]),
        timestamp=discord.utils.utcnow(),
    )


def with_standard_footer(embed: discord.Embed, user: Optional[discord.abc.User]) -> discord.Embed:
    if user is not None:
        embed.set_footer(
            text=f"Requested by {user.display_name}",
            icon_url=user.display_avatar.url,
        )
    return embed


def error_embed(title: str, description: str, user=None) -> discord.Embed:
    return with_standard_footer(make_embed("error", f"❌ {title}", description), user)


def warning_embed(title: str, description: str, user=None) -> discord.Embed:
    return with_standard_footer(make_embed("warning", f"⚠️ {title}", description), user)


def success_embed(title: str, description: str, user=None) -> discord.Embed:
    return with_standard_footer(make_embed("success", f"✅ {title}", description), user)


def failure_embed(result, user=None) -> discord.Embed:
    """Error or warning embed for a failed GateResult."""
    if result.kind is not None and result.kind.is_warning:
        return warning_embed(result.title, result.message, user)
    return error_embed(result.title, result.message, user)


# ============================================================================
# POSTS
# ============================================================================

def post_info_embed(post, base_url: str, user=None) -> discord.Embed:
    """Statistics for a Danbooru post shown by the Info context menu."""
    page = f"{base_url}/posts/{post.id}"
    artist_name = post.artist_tag.replace("_", " ") or UNKNOWN_ARTIST
    if post.artist_tag == UNKNOWN_ARTIST:
        artist_display = UNKNOWN_ARTIST
    else:
        artist_display = link(artist_name, f"{base_url}/posts?tags={post.artist_tag}")

    embed = make_embed("info", f"📊 Post #{post.id}", f"{bold('Artist:')} {artist_display}")
    embed.url = page
    embed.add_field(
        name="📊 Statistics",
        value=bullet([
            f"Score: {bold(post.score)}",
            f"Favorites: {bold(post.fav_count)}",
            f"Post ID: {inline_code(post.id)}",
        ]),
        inline=True,
    )
    embed.add_field(
        name="🏷️ Content Info",
        value=bullet([
            f"Rating: {post.rating.emoji} {post.rating.label}",
            f"Tags: {len(post.tags)} total",
            f"Artist: {artist_name}",
        ]),
        inline=True,
    )
    embed.add_field(
        name="🔗 Quick Actions",
        value=bullet([
            'Right-click → "Tags" to see all tags',
            f"Visit the {link('Danbooru page', page)} for more details",
        ]),
        inline=False,
    )
    return with_standard_footer(embed, user)


def _tag_list(tags: Sequence[str], highlight: Optional[str] = None) -> str:
    formatted = []
    for tag in tags:
        display = tag.replace("_", " ")
        formatted.append(bold(f'"{display}"') if tag == highlight else inline_code(display))
    return truncate(" • ".join(formatted))


def tags_embed(post, categories: Dict[str, List[str]], base_url: str, user=None) -> discord.Embed:
    """Categorized tag list shown by the Tags context menu."""
    page = f"{base_url}/posts/{post.id}"
    total = len(post.tags)

    embed = make_embed("info", f"📊 Tags for Post #{post.id}", f"Found {bold(total)} tags total.")
    embed.url = page

    shown = 0
    if categories["artist"]:
        embed.add_field(name="🎨 Artist", value=_tag_list(categories["artist"], post.artist_tag), inline=False)
        shown += len(categories["artist"])

    if categories["character"]:
        characters = categories["character"][:15]
        embed.add_field(name="👤 Characters & Count", value=_tag_list(characters), inline=False)
        shown += len(characters)

    if categories["copyright"]:
        copyrights = categories["copyright"][:10]
        embed.add_field(name="📚 Series/Copyright", value=_tag_list(copyrights), inline=False)
        shown += len(copyrights)

    if categories["general"]:
        remaining = TAG_LIMIT - shown
        general = categories["general"][:max(remaining, 10)]
        embed.add_field(name="🏷️ General Tags", value=_tag_list(general), inline=False)
        shown += len(general)

    if categories["meta"]:
        embed.add_field(name="📝 Meta Tags", value=_tag_list(categories["meta"]), inline=False)
        shown += len(categories["meta"])

    if total > shown:
        embed.add_field(
            name="⚡ Additional Tags",
            value=f"And {bold(total - shown)} more tags. Visit the {link('Danbooru page', page)} to see all tags.",
            inline=False,
        )

    return with_standard_footer(embed, user)


# ============================================================================
# CUSTOM TAG COMMANDS
# ============================================================================

def command_added_embed(command, description: Optional[str], user=None) -> discord.Embed:
    embed = success_embed(
        COMMAND_ADDED,
        f"Successfully created the {inline_code('/' + command.name)} command for this server!",
        user,
    )
    embed.add_field(name="🏷️ Target Tag", value=inline_code(command.tag), inline=True)
    embed.add_field(name="📝 Description", value=description or DEFAULT_TAG_DESCRIPTION, inline=True)
    embed.add_field(
        name="🎯 Usage",
        value=f"Use {inline_code('/' + command.name)} to search for {bold(command.tag.replace('_', ' '))} images",
        inline=False,
    )
    return embed


def command_removed_embed(command, remaining: int, max_custom_tags: int, user=None) -> discord.Embed:
    embed = success_embed(
        COMMAND_REMOVED,
        f"Successfully removed the {inline_code('/' + command.name)} command from this server.",
        user,
    )
    embed.add_field(name="🏷️ Tag", value=inline_code(command.tag or "???"), inline=True)
    embed.add_field(name="📊 Remaining", value=f"{remaining}/{max_custom_tags}", inline=True)
    return embed


def custom_list_embed(commands, guild_name: str, max_custom_tags: int, user=None) -> discord.Embed:
    """Custom commands of a guild grouped by first letter."""
    if not commands:
        embed = warning_embed(NO_CUSTOM_COMMANDS, "This server doesn't have any custom tag commands yet!", user)
        embed.add_field(
            name="🚀 Getting Started",
            value=bullet([
                f"Use {inline_code('/add name:neko tag:cat_girl')} to create your first command",
                f"You can create up to {max_custom_tags} custom commands per server",
                "Popular tags like `1girl`, `landscape` or `cat_girl` work great!",
            ]),
        )
        return embed

    count = len(commands)
    embed = make_embed(
        "info",
        f"🏷️ Custom Commands for {guild_name}",
        f"Found {bold(count)} custom command{'' if count == 1 else 's'}. "
        f"You can create {bold(max(max_custom_tags - count, 0))} more.",
    )

    groups: Dict[str, List[str]] = {}
    for command in commands:
        line = f"{inline_code('/' + command.name)} → {inline_code(command.tag or '???')}"
        groups.setdefault(command.name[0].upper(), []).append(line)

    for letter in sorted(groups):
        embed.add_field(name=f"📁 {letter}", value=truncate("\n".join(groups[letter])), inline=True)

    embed.add_field(
        name="💡 Pro Tips",
        value=bullet([
            f"Use {inline_code('/remove')} to delete unwanted commands",
            "Right-click any bot image for quick actions",
            f"Commands support a {inline_code('rating:')} option",
        ]),
        inline=False,
    )
    return with_standard_footer(embed, user)


# ============================================================================
# HELP
# ============================================================================

def help_embed(custom_count: int, max_custom_tags: int, channel_is_unsafe: bool, user=None) -> discord.Embed:
    embed = make_embed(
        "default",
        "🎌 Welcome to Aki",
        f"{bold('Danbooru images for your server')}\n\n"
        f"**Server Status:** {custom_count}/{max_custom_tags} custom commands • "
        f"{'🔞 NSFW Enabled' if channel_is_unsafe else '✅ SFW Mode'}",
    )
    embed.add_field(
        name="🖼️ Image Commands",
        value=bullet([
            f"{inline_code('/search')} - Random image for a tag",
            f"{inline_code('/fetch')} - Random image",
            f"{inline_code('/post')} - Image by Danbooru post ID",
            f"{inline_code('/waifu')} - Random waifu image",
        ]),
        inline=False,
    )
    embed.add_field(
        name="🏷️ Custom Tag Management",
        value=bullet([
            f"{inline_code('/add')} - Create a custom command*",
            f"{inline_code('/list')} - View this server's custom commands",
            f"{inline_code('/remove')} - Delete a custom command*",
        ]) + '\n*Requires "Manage Messages" permission*',
        inline=False,
    )
    embed.add_field(
        name="🔒 Ratings",
        value=(
            "This NSFW channel has access to all content ratings."
            if channel_is_unsafe
            else "This SFW channel is restricted to safe content only."
        ),
        inline=False,
    )
    embed.add_field(
        name="🖱️ Context Menus",
        value=bullet([
            f"{bold('Info')} - Post details and stats",
            f"{bold('Tags')} - All tags of the image",
            f"{bold('Save')} - Send the image to your DMs",
            f"{bold('Remove')} - Delete a bot image you requested",
        ]),
        inline=False,
    )
    return with_standard_footer(embed, user)
