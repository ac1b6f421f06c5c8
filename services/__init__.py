"""
services/ - Business Logic Layer
=================================
The Coinbase ledger client and the account cache / provisioner built on it.
"""
