"""Ledger store adapters."""
