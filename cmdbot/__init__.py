"""Discord bot for per-server custom text commands."""

__version__ = "1.0.0"
