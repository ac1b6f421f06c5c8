"""
handlers/telegram_adapter.py
----------------------------
Telegram glue for cointip. Turns /cointip commands and message reactions
into events on the plugin queues. No tipping logic lives here.

Telegram reaction updates don't say who wrote the reacted message, so group
messages are indexed by author as they arrive.
"""

from collections import OrderedDict
from typing import Optional

from telegram import ReactionTypeCustomEmoji, ReactionTypeEmoji, Update
from telegram.error import TelegramError
from telegram.ext import (
    BaseHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    MessageReactionHandler,
    filters,
)

from config import TIP_REACTIONS
from models.events import CommandEvent, CommandResponse, ReactionEvent
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.logger import get_logger

logger = get_logger(__name__)

PLUGIN_KEY = "cointip"

# Runs before the default group so indexing never blocks other handlers.
INDEX_HANDLER_GROUP = -1


class MessageAuthorIndex:
    """Bounded LRU map of (chat id, message id) -> author user id."""

    def __init__(self, max_size: int = 5000):
        self.max_size = max_size
        self._authors: OrderedDict[tuple[int, int], str] = OrderedDict()

    def record(self, chat_id: int, message_id: int, user_id: str) -> None:
        key = (chat_id, message_id)
        self._authors[key] = user_id
        self._authors.move_to_end(key)
        while len(self._authors) > self.max_size:
            self._authors.popitem(last=False)

    def author_of(self, chat_id: int, message_id: int) -> Optional[str]:
        return self._authors.get((chat_id, message_id))

    def __len__(self) -> int:
        return len(self._authors)


def reaction_key(reaction) -> Optional[str]:
    """Emoji text or custom emoji id of a reaction; None for other kinds."""
    if isinstance(reaction, ReactionTypeEmoji):
        return reaction.emoji
    if isinstance(reaction, ReactionTypeCustomEmoji):
        return reaction.custom_emoji_id
    return None


def tip_reaction(reaction, aliases: dict[str, str]) -> Optional[str]:
    """Translate a Telegram reaction to a tip tier name like ':cointip_5:'."""
    key = reaction_key(reaction)
    if key is None:
        return None
    return aliases.get(key, key)


def added_reactions(old: tuple, new: tuple) -> list:
    """Reactions present in `new` but not in `old`."""
    return [r for r in new if r not in old]


def _private_reply(context: ContextTypes.DEFAULT_TYPE, user_id: int, chat_id: int):
    async def reply(response: CommandResponse) -> None:
        target = chat_id if response.in_channel else user_id
        try:
            await context.bot.send_message(chat_id=target, text=response.text)
        except TelegramError as e:
            logger.error(f"Failed to send cointip reply to {target}: {e}")

    return reply


@authorized_only
@rate_limited
async def cointip_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /cointip <command> by queueing it for the command loop."""
    plugin = context.bot_data[PLUGIN_KEY]
    user = update.effective_user
    chat = update.effective_chat

    event = CommandEvent(
        text=" ".join(context.args or []),
        user_id=str(user.id),
        reply=_private_reply(context, user.id, chat.id),
    )
    await plugin.commands.put(event)


async def index_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Remember who wrote each group message so reactions can be attributed."""
    plugin = context.bot_data[PLUGIN_KEY]
    message = update.effective_message
    if not message or not message.from_user:
        return
    # Anonymous admins, linked channel posts and bots have no reachable owner.
    if message.sender_chat or message.from_user.is_bot:
        return
    plugin.authors.record(message.chat_id, message.message_id, str(message.from_user.id))


@authorized_only
async def cointip_reaction(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Queue every newly added tip reaction for the reaction loop."""
    plugin = context.bot_data[PLUGIN_KEY]
    reaction_update = update.message_reaction
    if not reaction_update or not reaction_update.user:
        return

    author = plugin.authors.author_of(reaction_update.chat.id, reaction_update.message_id)
    if author is None:
        logger.debug(
            f"Unknown author for message {reaction_update.message_id} "
            f"in chat {reaction_update.chat.id}, ignoring reaction"
        )
        return

    for reaction in added_reactions(reaction_update.old_reaction, reaction_update.new_reaction):
        name = tip_reaction(reaction, TIP_REACTIONS)
        if name is None:
            continue
        await plugin.reactions.put(
            ReactionEvent(
                reaction=name,
                user_id=str(reaction_update.user.id),
                item_user_id=author,
            )
        )


def build_handlers() -> list[tuple[BaseHandler, int]]:
    """All Telegram handlers for cointip, paired with their handler group."""
    return [
        (MessageHandler(filters.ChatType.GROUPS, index_message), INDEX_HANDLER_GROUP),
        (CommandHandler("cointip", cointip_command), 0),
        (MessageReactionHandler(cointip_reaction), 0),
    ]
