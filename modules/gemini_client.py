"""
Gemini API client initialization and configuration.
"""

from __future__ import annotations
import os
from typing import Optional

from google import genai

from .config import (
    DEFAULT_IMAGE_MODEL,
    DEFAULT_VIDEO_MODEL,
    VIDEO_MAX_WAIT_SECONDS,
    VIDEO_POLL_INTERVAL_SECONDS,
)


def get_api_key(override: Optional[str] = None) -> Optional[str]:
    """
    Resolve the Gemini API key.

    A key chosen in the UI takes precedence over the environment.
    """
    if override:
        return override
    # Prefer official GEMINI_API_KEY; fallback to GOOGLE_GENAI_API_KEY for compatibility.
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_GENAI_API_KEY")


def get_genai_client(api_key: Optional[str] = None) -> Optional["genai.Client"]:
    """
    Initialize and return Gemini API client.

    Returns:
        genai.Client instance or None if API key not available
    """
    key = get_api_key(api_key)
    if not key:
        return None
    return genai.Client(api_key=key)


def get_image_model_name() -> str:
    return os.getenv("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL)


def get_video_model_name() -> str:
    return os.getenv("GEMINI_VIDEO_MODEL", DEFAULT_VIDEO_MODEL)


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_video_poll_interval() -> float:
    return _env_number("VIDEO_POLL_INTERVAL_SECONDS", VIDEO_POLL_INTERVAL_SECONDS)


def get_video_max_wait() -> float:
    return _env_number("VIDEO_MAX_WAIT_SECONDS", VIDEO_MAX_WAIT_SECONDS)
