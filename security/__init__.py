"""
security/ - Access Control
==========================
Whitelist and rate-limit decorators for the Telegram handlers.
"""
