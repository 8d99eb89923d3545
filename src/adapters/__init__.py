"""Adapters that bind the core engine to the game log and the console."""
