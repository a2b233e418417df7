"""
Configuration, constants, and data models for Logo Animation Studio.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .utils import get_logger

logger = get_logger("config")


# ---------- Data Models ----------
class AspectRatio(str, Enum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    SQUARE = "1:1"


class GenerationKind(str, Enum):
    LOGO = "logo"
    VIDEO = "video"


@dataclass(frozen=True)
class GenerationRequest:
    """One request to the hosted API. Immutable once submitted."""
    kind: GenerationKind
    prompt: str
    source_image: Optional[bytes] = None
    aspect_ratio: AspectRatio = AspectRatio.SQUARE


@dataclass(frozen=True)
class LogoArtifact:
    """Logo raster plus vector markup. svg_markup is None only for uploads."""
    png_bytes: bytes
    svg_markup: Optional[str] = None


@dataclass(frozen=True)
class VideoArtifact:
    video_bytes: bytes
    mime_type: str = "video/mp4"


# Ratios offered for animation; 1:1 is only used for the logo raster
VIDEO_ASPECT_RATIOS = {
    AspectRatio.LANDSCAPE: "16:9 Landscape",
    AspectRatio.PORTRAIT: "9:16 Portrait",
}


# ---------- Models ----------
DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"
DEFAULT_SVG_MODEL = "gemini-2.5-pro"
DEFAULT_VIDEO_MODEL = "veo-3.1-fast-generate-preview"
DEFAULT_VIDEO_RESOLUTION = "720p"


# ---------- Video Job Progress ----------
VIDEO_LOADING_MESSAGES = (
    "Warming up the animation engine...",
    "Sketching the keyframes...",
    "Adding digital ink and paint...",
    "Rendering the final cut...",
    "Polishing the pixels...",
    "This is taking a bit longer than usual, but good things are coming!",
    "Finalizing the masterpiece...",
)
FETCHING_VIDEO_MESSAGE = "Fetching your video..."
LOGO_BUSY_MESSAGE = "Designing your unique logo (PNG & SVG)..."

DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_MESSAGE_INTERVAL = 5.0
DEFAULT_DOWNLOAD_TIMEOUT = 120.0


# ---------- Prompts ----------
DEFAULT_ANIMATION_PROMPT = "A cool, dynamic animation of this logo."
UI_ANIMATION_PROMPT = "A dynamic, professional animation of this logo."

LOGO_PNG_PROMPT = (
    'A professional, modern, minimalist logo for a company that does "{description}". '
    "Flat design, vector style, on a transparent background, high contrast, PNG format."
)

LOGO_SVG_PROMPT = """You are an expert vector artist who writes clean SVG logos.
Design a professional, modern, minimalist logo for a company that does: "{description}".

RULES:
- The SVG code must be a single, self-contained block.
- Use a viewBox="0 0 100 100".
- The background MUST be transparent.
- Use simple shapes (<path>, <circle>, <rect>, etc.) and flat colors. No gradients or complex filters.
- Do not include any raster data (like <image> tags).
- Do not include any scripts.
- The entire output should be ONLY the SVG code, starting with <svg> and ending with </svg>. Do not include markdown fences like ```svg or any explanations.
"""


# ---------- Settings ----------
def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


@dataclass(frozen=True)
class StudioSettings:
    """Runtime settings for the generation layer."""
    image_model: str = DEFAULT_IMAGE_MODEL
    svg_model: str = DEFAULT_SVG_MODEL
    video_model: str = DEFAULT_VIDEO_MODEL
    video_resolution: str = DEFAULT_VIDEO_RESOLUTION
    poll_interval: float = DEFAULT_POLL_INTERVAL
    message_interval: float = DEFAULT_MESSAGE_INTERVAL
    max_wait: Optional[float] = None
    download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT

    @classmethod
    def from_env(cls) -> "StudioSettings":
        """
        Build settings from environment variables.

        Invalid numbers fall back to the defaults. VIDEO_MAX_WAIT of 0 or
        less means the job is polled until it finishes.
        """
        max_wait = _env_float("VIDEO_MAX_WAIT", 0.0)
        return cls(
            image_model=os.getenv("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            svg_model=os.getenv("GEMINI_SVG_MODEL", DEFAULT_SVG_MODEL),
            video_model=os.getenv("GEMINI_VIDEO_MODEL", DEFAULT_VIDEO_MODEL),
            video_resolution=os.getenv("VIDEO_RESOLUTION", DEFAULT_VIDEO_RESOLUTION),
            poll_interval=_env_float("VIDEO_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            message_interval=_env_float("VIDEO_MESSAGE_INTERVAL", DEFAULT_MESSAGE_INTERVAL),
            max_wait=max_wait if max_wait > 0 else None,
            download_timeout=_env_float("DOWNLOAD_TIMEOUT", DEFAULT_DOWNLOAD_TIMEOUT),
        )
