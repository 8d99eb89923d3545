"""Core domain package for exilewatch.

Core contains polling, line dispatch, and the event channel without any
knowledge of the game log format, keeping the engine portable.
"""
