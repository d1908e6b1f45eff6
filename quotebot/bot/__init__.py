"""Telegram transport and command dispatch."""
