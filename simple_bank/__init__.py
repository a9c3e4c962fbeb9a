"""
Simple Bank

A small ledger-style banking service: users, accounts, and atomic transfers
between accounts with an append-only entry log.
"""

__version__ = "1.0.0"
