"""Ledger persistence: store adapters and the application repository."""
