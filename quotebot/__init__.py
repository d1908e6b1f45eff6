"""Chat-driven crypto / stock price quoting bot."""

__version__ = "0.1.0"
