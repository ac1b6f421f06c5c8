"""
handlers/ - Presentation Layer
================================
The cointip event loops and the Telegram adapter that feeds them.
The adapter turns updates into events; the loops delegate to the
AccountService and the ledger client and reply to the user.
"""
