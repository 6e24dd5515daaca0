"""
Services package for the engagement arena bot.

Read-side services (leaderboard, bonus suggestions) and command rate limiting.
"""

from .base import BaseService
from .rate_limiter import SimpleRateLimiter

__all__ = ['BaseService', 'SimpleRateLimiter']
