"""
models/ - Domain Models
=======================
Plain dataclasses for accounts, balances, transactions and chat events.
"""
