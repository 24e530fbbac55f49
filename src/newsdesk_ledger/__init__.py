"""Newsdesk ledger: payments, employee payouts and the financial ledger."""

__version__ = "0.1.0"
