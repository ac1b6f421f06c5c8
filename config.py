"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def parse_reaction_aliases(raw: str) -> dict[str, str]:
    """
    Parse a ``key=:tier:`` list into a reaction alias table.

    Example:
        "👍=:cointip_1:,🔥=:cointip_5:" -> {"👍": ":cointip_1:", "🔥": ":cointip_5:"}

    Malformed pairs (no '=' or an empty side) are skipped.
    """
    aliases: dict[str, str] = {}
    for pair in raw.split(","):
        key, sep, tier = pair.partition("=")
        key, tier = key.strip(), tier.strip()
        if sep and key and tier:
            aliases[key] = tier
    return aliases


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── Coinbase ──────────────────────────────────────────────
COINBASE_API_KEY: str = os.getenv("COINBASE_API_KEY", "")
COINBASE_API_SECRET: str = os.getenv("COINBASE_API_SECRET", "")
COINBASE_API_URL: str = os.getenv("COINBASE_API_URL", "https://api.coinbase.com")
COINBASE_API_VERSION: str = os.getenv("COINBASE_API_VERSION", "2017-08-07")
COINBASE_TIMEOUT_SECONDS: float = float(os.getenv("COINBASE_TIMEOUT_SECONDS", "10"))

# ── Cointip ───────────────────────────────────────────────
# User id whose cointip account funds every newly created account.
COINTIP_BANK_ACCOUNT_ID: str = os.getenv("COINTIP_BANK_ACCOUNT_ID", "bank")

TIP_REACTIONS: dict[str, str] = parse_reaction_aliases(
    os.getenv(
        "TIP_REACTIONS",
        "👍=:cointip_1:,❤=:cointip_2:,🔥=:cointip_5:,🎉=:cointip_10:,🏆=:cointip_25:",
    )
)

# How many group messages to remember for resolving tip recipients.
AUTHOR_INDEX_SIZE: int = int(os.getenv("AUTHOR_INDEX_SIZE", "5000"))

# ── Security ──────────────────────────────────────────────
_raw_ids = os.getenv("ALLOWED_USER_IDS", "")
ALLOWED_USER_IDS: list[int] = (
    [int(uid.strip()) for uid in _raw_ids.split(",") if uid.strip()]
    if _raw_ids
    else []
)

# ── Rate Limiting ─────────────────────────────────────────
RATE_LIMIT_MESSAGES: int = int(os.getenv("RATE_LIMIT_MESSAGES", "10"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
