"""
Gemini API client initialization and credential lookup.
"""

from __future__ import annotations
import os

from google import genai

from .errors import ConfigurationError

_API_KEY_VARS = ("GEMINI_API_KEY", "GOOGLE_GENAI_API_KEY", "API_KEY")


def get_api_key() -> str:
    """
    Read the access credential from the environment.

    Returns:
        The first non-empty of GEMINI_API_KEY, GOOGLE_GENAI_API_KEY, API_KEY,
        or an empty string when none is set
    """
    for var in _API_KEY_VARS:
        value = os.getenv(var, "").strip()
        if value:
            return value
    return ""


def get_genai_client(api_key: str) -> genai.Client:
    """
    Build a Gemini API client for the given key.

    A new client is created on every call so a freshly selected key is
    always the one in use.

    Raises:
        ConfigurationError: if the key is empty
    """
    if not api_key:
        raise ConfigurationError(
            "API key is not set. Set GEMINI_API_KEY or select a key in the sidebar."
        )
    return genai.Client(api_key=api_key)
