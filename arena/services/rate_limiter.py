"""
Rate limiting for player-facing slash commands.

Simple in-memory limiter keyed by user and command, using time-based windows.
"""

import time
import asyncio
from functools import wraps
from collections import defaultdict, deque
import logging

from arena.config import Config

logger = logging.getLogger(__name__)

class SimpleRateLimiter:
    """In-memory rate limiter for Discord commands.

    Request history lives in memory; on every check, keys whose requests
    have all aged out of their window are dropped so the map only holds
    active users.
    """

    def __init__(self):
        self._requests = defaultdict(deque)
        self._windows = {}
        self._lock = asyncio.Lock()

    def _drop_stale_keys(self, now: float):
        stale = [
            key for key, requests in self._requests.items()
            if not requests or requests[-1] <= now - self._windows.get(key, 0)
        ]
        for key in stale:
            self._requests.pop(key, None)
            self._windows.pop(key, None)

    async def is_allowed(self, user_id: int, command: str, limit: int, window: int) -> bool:
        """Check if user can execute command within rate limit."""
        if limit <= 0 or window <= 0:
            return False

        key = f"{user_id}:{command}"
        now = time.time()

        async with self._lock:
            self._drop_stale_keys(now)
            self._windows[key] = window
            requests = self._requests[key]
            while requests and requests[0] <= now - window:
                requests.popleft()

            if len(requests) < limit:
                requests.append(now)
                return True

            logger.debug(f"Rate limited {key} ({len(requests)} requests in {window}s)")
            return False

    async def reset(self, user_id: int, command: str):
        key = f"{user_id}:{command}"
        async with self._lock:
            self._requests.pop(key, None)
            self._windows.pop(key, None)

def rate_limit(command: str, limit: int = 1, window: int = 60):
    """Decorator for rate limiting Discord commands."""
    def decorator(func):
        @wraps(func)
        async def wrapper(self, interaction, *args, **kwargs):
            rate_limiter = self.bot.rate_limiter

            # Bot owner bypasses rate limits
            if Config.OWNER_DISCORD_ID and interaction.user.id == Config.OWNER_DISCORD_ID:
                return await func(self, interaction, *args, **kwargs)

            if not await rate_limiter.is_allowed(interaction.user.id, command, limit, window):
                await interaction.response.send_message(
                    f"⏰ Slow down! Please wait before using `/{command}` again.",
                    ephemeral=True
                )
                return

            return await func(self, interaction, *args, **kwargs)
        return wrapper
    return decorator
