"""
Configuration management for solana_ixparse.

Loads settings from environment variables and an optional .env file.
"""

from solana_ixparse.config.settings import ParserSettings, get_settings  # noqa: F401

__all__ = ["ParserSettings", "get_settings"]
