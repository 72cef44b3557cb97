"""Sigil - Test account keys and sender addresses."""
