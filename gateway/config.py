"""
Gemini credential lookup.
Reads the API key from environment variables (.env file).
"""

import os


def get_api_key() -> str:
    """
    Return the Gemini API key, or an empty string.

    Environment variables:
        GEMINI_API_KEY  - preferred
        API_KEY         - accepted for older .env files
    """
    return (os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY") or "").strip()


def has_api_key() -> bool:
    """Check if a Gemini API key is configured."""
    return bool(get_api_key())
