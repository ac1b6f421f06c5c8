"""
models/events.py
----------------
Events exchanged between the chat adapter and the cointip event loops.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable


@dataclass(frozen=True)
class CommandResponse:
    """A reply to a command. Private replies go only to the invoking user."""
    text: str
    in_channel: bool = False


ReplySink = Callable[[CommandResponse], Awaitable[None]]


@dataclass(frozen=True)
class CommandEvent:
    """
    One `/cointip ...` invocation.

    Attributes:
        text: Everything after the command name, e.g. 'balance'.
        user_id: Chat user id of the invoker.
        reply: Coroutine function that delivers a CommandResponse.
    """
    text: str
    user_id: str
    reply: ReplySink


@dataclass(frozen=True)
class ReactionEvent:
    """
    A reaction added by `user_id` to a message written by `item_user_id`.

    `reaction` is the tier identifier, e.g. ':cointip_5:'.
    """
    reaction: str
    user_id: str
    item_user_id: str
