"""Error taxonomy for Aki

Transport failures are raised as typed exceptions where they are first
observed (Danbooru client, command registry). The command gate turns them into
a ``FailureKind`` with ``classify_exception`` so no caller has to inspect
error messages.
"""
import asyncio
import enum


class AkiError(Exception):
    """Base class for errors raised by Aki services."""
    pass


class ApiServerError(AkiError):
    """Danbooru answered with a status the caller must react to."""

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status

    def __repr__(self) -> str:
        return f"ApiServerError(status={self.status}, message={str(self)!r})"


class RateLimitExceeded(AkiError):
    """The self-imposed outbound request budget for this window is used up."""
    pass


class ConnectionFailed(AkiError):
    """The request never got a response (DNS, reset, client timeout)."""
    pass


class RegistryError(AkiError):
    """A Discord command registry operation failed."""
    pass


class RegistrationFailed(RegistryError):
    """Discord rejected or never answered a command registration."""
    pass


class UnregisterFailed(RegistryError):
    """The command was found but deleting it failed."""
    pass


class CommandNotFound(RegistryError):
    """No custom tag command with that name exists in the guild."""
    pass


class RegistryUnavailable(RegistryError):
    """The guild command list could not be read."""
    pass


class FailureKind(enum.Enum):
    GUILD_ONLY = "guild_only"
    MISSING_BOT_PERMISSIONS = "missing_bot_permissions"
    TOO_MANY_TAGS = "too_many_tags"
    BLACKLISTED_TAG = "blacklisted_tag"
    INVALID_POST_ID = "invalid_post_id"
    INVALID_CUSTOM_TAG = "invalid_custom_tag"
    INVALID_COMMAND_NAME = "invalid_command_name"
    CONTENT_RESTRICTED = "content_restricted"
    NSFW_TAG_IN_SFW = "nsfw_tag_in_sfw"
    RATE_LIMITED = "rate_limited"
    API_SERVER_ERROR = "api_server_error"
    TIMEOUT = "timeout"
    NO_IMAGE_FOUND = "no_image_found"
    MAX_TAGS_REACHED = "max_tags_reached"
    COMMAND_EXISTS = "command_exists"
    REGISTRATION_FAILED = "registration_failed"
    UNREGISTER_FAILED = "unregister_failed"
    COMMAND_NOT_FOUND = "command_not_found"
    REGISTRY_UNAVAILABLE = "registry_unavailable"
    GENERIC_ERROR = "generic_error"

    @property
    def title(self) -> str:
        return _TITLES[self]

    @property
    def is_warning(self) -> bool:
        """Failures shown as warnings rather than errors."""
        return self in _WARNING_KINDS


_TITLES = {
    FailureKind.GUILD_ONLY: "Guild Only",
    FailureKind.MISSING_BOT_PERMISSIONS: "Missing Permissions",
    FailureKind.TOO_MANY_TAGS: "Invalid Tag",
    FailureKind.BLACKLISTED_TAG: "Invalid Tag",
    FailureKind.INVALID_POST_ID: "Invalid Post ID",
    FailureKind.INVALID_CUSTOM_TAG: "Invalid Custom Tag",
    FailureKind.INVALID_COMMAND_NAME: "Invalid Command Name",
    FailureKind.CONTENT_RESTRICTED: "Content Restricted",
    FailureKind.NSFW_TAG_IN_SFW: "NSFW Content",
    FailureKind.RATE_LIMITED: "Rate Limited",
    FailureKind.API_SERVER_ERROR: "API Server Error",
    FailureKind.TIMEOUT: "Request Timeout",
    FailureKind.NO_IMAGE_FOUND: "No Image Found",
    FailureKind.MAX_TAGS_REACHED: "Server Limit Reached",
    FailureKind.COMMAND_EXISTS: "Command Already Exists",
    FailureKind.REGISTRATION_FAILED: "Registration Failed",
    FailureKind.UNREGISTER_FAILED: "Removal Failed",
    FailureKind.COMMAND_NOT_FOUND: "Command Not Found",
    FailureKind.REGISTRY_UNAVAILABLE: "Service Error",
    FailureKind.GENERIC_ERROR: "Unexpected Error",
}

_WARNING_KINDS = frozenset({
    FailureKind.NO_IMAGE_FOUND,
    FailureKind.MAX_TAGS_REACHED,
    FailureKind.COMMAND_NOT_FOUND,
    FailureKind.COMMAND_EXISTS,
})


def classify_exception(error: BaseException) -> FailureKind:
    """Map an exception raised during an upstream or registry call to a failure kind.

    Args:
        error: The exception caught by the command gate

    Returns:
        The matching FailureKind, GENERIC_ERROR when nothing matches

    """
    if isinstance(error, RateLimitExceeded):
        return FailureKind.RATE_LIMITED
    if isinstance(error, asyncio.TimeoutError):
        return FailureKind.TIMEOUT
    if isinstance(error, ApiServerError):
        if error.status == 422:
            return FailureKind.NSFW_TAG_IN_SFW
        if error.status == 408:
            return FailureKind.TIMEOUT
        if error.status >= 500:
            return FailureKind.API_SERVER_ERROR
        return FailureKind.GENERIC_ERROR
    if isinstance(error, ConnectionFailed):
        return FailureKind.TIMEOUT
    if isinstance(error, CommandNotFound):
        return FailureKind.COMMAND_NOT_FOUND
    if isinstance(error, RegistrationFailed):
        return FailureKind.REGISTRATION_FAILED
    if isinstance(error, UnregisterFailed):
        return FailureKind.UNREGISTER_FAILED
    if isinstance(error, RegistryUnavailable):
        return FailureKind.REGISTRY_UNAVAILABLE
    return FailureKind.GENERIC_ERROR
