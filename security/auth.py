"""
security/auth.py
-----------------
Access control for the cointip Telegram handlers.
Blocks any user not in the allowed whitelist from tipping or
using /cointip.
"""

from functools import wraps
from typing import Callable

from telegram import Update
from telegram.ext import ContextTypes

from config import ALLOWED_USER_IDS
from utils.logger import get_logger

logger = get_logger(__name__)


def is_allowed(user_id: int) -> bool:
    """An empty whitelist allows everyone."""
    return not ALLOWED_USER_IDS or user_id in ALLOWED_USER_IDS


def authorized_only(func: Callable):
    """
    Decorator that restricts a handler to whitelisted users only.

    Usage:
        @authorized_only
        async def my_handler(update, context):
            ...

    Behavior:
        - If ALLOWED_USER_IDS is empty, ALL users are allowed (dev mode).
        - If the list is set, only those users can tip or run commands.
        - Unauthorized attempts are logged; message updates also get a reply.
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if is_allowed(user.id):
            return await func(update, context, *args, **kwargs)

        logger.warning(
            f"🚫 Unauthorized cointip attempt: user_id={user.id}, "
            f"username={user.username}, name={user.first_name}"
        )
        if update.message:
            await update.message.reply_text("⛔ Sorry, cointip is not enabled for your account.")

    return wrapper
