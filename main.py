"""
main.py
-------
Entry point for the CoinTip Telegram bot.

Responsibilities:
    - Register the cointip plugin (Coinbase client + bank account).
    - Configure and start the Telegram bot with the cointip handlers.
    - Stop the plugin's event loops on shutdown.
"""

from telegram import BotCommand, Update
from telegram.ext import Application

from config import (
    COINBASE_API_KEY,
    COINBASE_API_SECRET,
    COINTIP_BANK_ACCOUNT_ID,
    TELEGRAM_BOT_TOKEN,
)
from handlers.telegram_adapter import PLUGIN_KEY
from plugin import register
from utils.logger import get_logger

logger = get_logger(__name__)


async def start_plugin(application: Application) -> None:
    """Register the plugin, wire its handlers and start its loops."""
    plugin = await register(COINBASE_API_KEY, COINBASE_API_SECRET, COINTIP_BANK_ACCOUNT_ID)
    if plugin is None:
        raise RuntimeError("cointip plugin failed to register")

    plugin.attach(application)
    plugin.start()

    await application.bot.set_my_commands(
        [BotCommand("cointip", "💸 Tip your friends! (balance, deposit, withdraw, help)")]
    )
    logger.info("Bot commands menu registered successfully.")


async def stop_plugin(application: Application) -> None:
    """Stop the plugin's event loops."""
    plugin = application.bot_data.get(PLUGIN_KEY)
    if plugin is not None:
        await plugin.stop()


def main() -> None:
    """Initialize and run the bot."""
    logger.info("Starting Telegram bot...")
    app = (
        Application.builder()
        .token(TELEGRAM_BOT_TOKEN)
        .post_init(start_plugin)
        .post_shutdown(stop_plugin)
        .build()
    )

    logger.info("🚀 CoinTip is running! Press Ctrl+C to stop.")
    # Reaction updates are only delivered when requested explicitly.
    app.run_polling(
        drop_pending_updates=True,
        allowed_updates=[Update.MESSAGE, Update.MESSAGE_REACTION],
    )
    logger.info("CoinTip stopped.")


if __name__ == "__main__":
    main()
