"""
Utility functions for Logo Animation Studio.
"""

from __future__ import annotations
import io
import logging
import os
from typing import Tuple
from PIL import Image

from .errors import InvalidImageError

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_ROOT_LOGGER = "logo_studio"


def get_logger(name: str) -> logging.Logger:
    """
    Return a module logger under the package namespace.

    The package root logger gets a single stream handler the first time any
    module asks for a logger; the level comes from LOG_LEVEL.

    Args:
        name: Short module name, e.g. "job_poller"

    Returns:
        logging.Logger named "logo_studio.<name>"
    """
    root = logging.getLogger(_ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")


def load_image_bytes(file) -> Tuple[bytes, str]:
    """
    Load an uploaded logo and convert it to PNG bytes.

    Transparency is kept so uploaded logos animate the same way generated
    ones do.

    Args:
        file: Streamlit UploadedFile object or any binary file-like

    Returns:
        Tuple of (image_bytes, mime_type)

    Raises:
        InvalidImageError: if the file is not a readable image
    """
    try:
        image = Image.open(file).convert("RGBA")
    except OSError as exc:
        raise InvalidImageError(f"The uploaded file is not a readable image: {exc}") from exc
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue(), "image/png"


def strip_code_fences(text: str) -> str:
    """
    Strip markdown fences a model may wrap around markup.

    Handles a leading ```svg or bare ``` and a trailing ```.

    Args:
        text: Raw model output

    Returns:
        The markup without fences, trimmed
    """
    if not text:
        return ""
    cleaned = text.strip()
    if cleaned.startswith("```svg"):
        cleaned = cleaned[len("```svg"):].strip()
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:].strip()
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3].strip()
    return cleaned
