"""Security utilities - rate limiting and tag sanitization"""
import re
import time
from collections import defaultdict


def sanitize_tag(text: str, max_length: int = 200) -> str:
    """Normalize user input into Danbooru tag form.

    Args:
        text: Raw user input
        max_length: Maximum length to truncate to

    Returns:
        Lowercase tag with whitespace runs replaced by underscores

    """
    if not text:
        return ""

    text = re.sub(r"\s+", "_", text.strip().lower())

    # Truncate to max length
    if len(text) > max_length:
        text = text[:max_length]

    return text


class RateLimiter:

    """Rate limiter to protect outbound request budgets.

    Two modes are supported:
    - ``try_acquire()`` counts calls in fixed windows shared by every caller.
    - ``is_rate_limited(user_id)`` tracks a sliding window per user.
    """

    def __init__(self, max_requests: int = 30, window_seconds: int = 60, clock=time.time):
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests allowed in window
            window_seconds: Time window in seconds
            clock: Callable returning the current time in seconds

        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.window_counts = {}
        self.request_counts = defaultdict(list)

    def _window_start(self, now: float) -> float:
        return (now // self.window_seconds) * self.window_seconds

    def try_acquire(self) -> bool:
        """Take one slot from the current fixed window.

        Returns:
            True if the call may proceed, False if the window is exhausted

        """
        now = self.clock()
        window_start = self._window_start(now)
        requests = self.window_counts.get(window_start, 0)

        if requests >= self.max_requests:
            return False

        self.window_counts[window_start] = requests + 1

        # Drop windows that can no longer be current
        for key in list(self.window_counts):
            if key < window_start:
                del self.window_counts[key]

        return True

    def is_rate_limited(self, user_id: int) -> bool:
        """Check if user is rate limited.

        Args:
            user_id: Discord user ID

        Returns:
            True if rate limited, False otherwise

        """
        current_time = self.clock()
        user_requests = self.request_counts[user_id]

        # Remove old requests outside the window
        user_requests[:] = [
            req_time for req_time in user_requests
            if current_time - req_time < self.window_seconds
        ]

        # Check if limit exceeded
        if len(user_requests) >= self.max_requests:
            return True

        # Track this request
        user_requests.append(current_time)
        return False

    def sweep(self) -> int:
        """Forget users with no requests left in the sliding window.

        Returns:
            Number of users dropped

        """
        current_time = self.clock()
        idle = [
            user_id for user_id, user_requests in self.request_counts.items()
            if not user_requests or current_time - user_requests[-1] >= self.window_seconds
        ]
        for user_id in idle:
            del self.request_counts[user_id]
        return len(idle)
