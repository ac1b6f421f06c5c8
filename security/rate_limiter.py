"""
security/rate_limiter.py
-------------------------
Rate limiting for /cointip, so a single user cannot flood the ledger API
with balance and deposit requests.
"""

import time
from collections import defaultdict
from functools import wraps
from typing import Callable

from telegram import Update
from telegram.ext import ContextTypes

from config import RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)

# {user_id: [timestamp1, timestamp2, ...]}
_user_timestamps: dict[int, list[float]] = defaultdict(list)


def _cleanup(now: float) -> None:
    """Remove expired timestamps, and users left with none."""
    cutoff = now - RATE_LIMIT_WINDOW_SECONDS
    for user_id in list(_user_timestamps):
        recent = [t for t in _user_timestamps[user_id] if t > cutoff]
        if recent:
            _user_timestamps[user_id] = recent
        else:
            del _user_timestamps[user_id]


def allow(user_id: int) -> bool:
    """Record one request for the user; False if the window is already full."""
    now = time.time()
    _cleanup(now)
    if len(_user_timestamps[user_id]) >= RATE_LIMIT_MESSAGES:
        return False
    _user_timestamps[user_id].append(now)
    return True


def reset() -> None:
    """Forget all recorded requests. Used by the tests."""
    _user_timestamps.clear()


def rate_limited(func: Callable):
    """
    Decorator that enforces rate limiting per user.

    Configuration (via .env):
        RATE_LIMIT_MESSAGES: Max commands per window (default: 10).
        RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds (default: 60).

    Behavior:
        - Tracks command timestamps per user.
        - If exceeded, replies with a warning and blocks the handler.
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not allow(user.id):
            logger.warning(f"⚠️ Rate limit hit for user {user.id}")
            if update.message:
                await update.message.reply_text(
                    "⚠️ Too many cointip commands. Please wait a bit and try again."
                )
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
