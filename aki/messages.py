"""User-facing message strings."""
from .config import MAX_CUSTOM_TAGS, MAX_USER_TAGS
from .errors import FailureKind

NO_IMAGE = "No image found. The post might be gone or doesn't exist."
NO_IMAGE_IN_MESSAGE = "No image found in this message."
BLACKLISTED_TAG = "Your search contains a blacklisted tag. Please try again."
TOO_MANY_TAGS = f"Maximum {MAX_USER_TAGS} search tag allowed due to API limitations."
NSFW_IN_SFW = "NSFW content can only be viewed in NSFW channels."
NSFW_TAG_IN_SFW = "This command seems to be for NSFW content. To use it, you need to be in an NSFW channel."
GENERIC_ERROR = "An unexpected error occurred. Please report this."
BOT_MISSING_PERMISSIONS = "I do not have the required permissions to perform this action."
GUILD_ONLY = "This command only works in servers, not in DMs."
BOT_MESSAGES_ONLY = "I can only perform this action on messages that I have sent."
INVALID_CUSTOM_TAG = "This does not appear to be a valid custom tag command."
POST_NOT_FOUND = "This image no longer exists on Danbooru or the post was deleted."
RATE_LIMIT = "Too many requests. Please wait a moment and try again."
API_SERVER_ERROR = "The API server is currently experiencing issues. Please try again later."
TIMEOUT = "The request took too long. Please try again."
REMOVAL_DENIED = "Only the person who used the command to generate this message can remove it."
DM_FAILED = "Failed to DM you. Check that you allow direct messages from server members."
MAX_TAGS_REACHED = (
    f"This server has reached the maximum limit of {MAX_CUSTOM_TAGS} custom commands. "
    "Please remove an existing command before adding a new one."
)
REGISTRATION_FAILED = "Failed to register the command with Discord. Please try again later."
REMOVAL_FAILED = "An error occurred while communicating with Discord. Please try again later."
REGISTRY_UNAVAILABLE = "Failed to fetch custom commands. Please try again later."
INVALID_POST_ID = "Please provide a valid numeric post ID."
INVALID_COMMAND_NAME = (
    "Command name must be 1-64 characters long and can only contain "
    "lowercase letters, numbers, underscores and colons."
)
RESERVED_COMMAND_NAME = "This name is reserved and cannot be used."
USER_RATE_LIMIT = "You're making requests too quickly. Please wait a moment."

COMMAND_ADDED = "Custom Command Added"
COMMAND_REMOVED = "Custom Command Removed"
NO_CUSTOM_COMMANDS = "No Custom Commands Found"


def command_exists(name: str) -> str:
    return f"The command `/{name}` already exists in this server."


def command_not_found(name: str) -> str:
    return f"The command `/{name}` doesn't exist in this server."


# Default text shown for each failure kind when the gate has nothing more specific
DEFAULT_MESSAGES = {
    FailureKind.GUILD_ONLY: GUILD_ONLY,
    FailureKind.MISSING_BOT_PERMISSIONS: BOT_MISSING_PERMISSIONS,
    FailureKind.TOO_MANY_TAGS: TOO_MANY_TAGS,
    FailureKind.BLACKLISTED_TAG: BLACKLISTED_TAG,
    FailureKind.INVALID_POST_ID: INVALID_POST_ID,
    FailureKind.INVALID_CUSTOM_TAG: INVALID_CUSTOM_TAG,
    FailureKind.INVALID_COMMAND_NAME: INVALID_COMMAND_NAME,
    FailureKind.CONTENT_RESTRICTED: NSFW_IN_SFW,
    FailureKind.NSFW_TAG_IN_SFW: NSFW_TAG_IN_SFW,
    FailureKind.RATE_LIMITED: RATE_LIMIT,
    FailureKind.API_SERVER_ERROR: API_SERVER_ERROR,
    FailureKind.TIMEOUT: TIMEOUT,
    FailureKind.NO_IMAGE_FOUND: NO_IMAGE,
    FailureKind.MAX_TAGS_REACHED: MAX_TAGS_REACHED,
    FailureKind.COMMAND_EXISTS: "That command already exists in this server.",
    FailureKind.REGISTRATION_FAILED: REGISTRATION_FAILED,
    FailureKind.UNREGISTER_FAILED: REMOVAL_FAILED,
    FailureKind.COMMAND_NOT_FOUND: "That command doesn't exist in this server.",
    FailureKind.REGISTRY_UNAVAILABLE: REGISTRY_UNAVAILABLE,
    FailureKind.GENERIC_ERROR: GENERIC_ERROR,
}
