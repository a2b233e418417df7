"""
Generation Client - logo and video calls against the Gemini API.

Logo generation runs the raster and the vector call side by side; both
parts are required. Video generation submits one Veo job, hands it to the
JobPoller and downloads the finished file.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

import requests
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from .config import (
    DEFAULT_ANIMATION_PROMPT,
    LOGO_PNG_PROMPT,
    LOGO_SVG_PROMPT,
    AspectRatio,
    GenerationKind,
    GenerationRequest,
    LogoArtifact,
    StudioSettings,
    VideoArtifact,
)
from .errors import ConfigurationError, DownloadError, PartialArtifactError, SubmissionError
from .gemini_client import get_genai_client
from .job_poller import JobPoller, JobStatus, ProgressCallback
from .utils import get_logger, strip_code_fences

logger = get_logger("generation_client")


class GeminiVideoJobs:
    """JobPoller backend over the Veo long-running operations API."""

    def __init__(self, client, settings: StudioSettings):
        self.client = client
        self.settings = settings

    async def start(self, request: GenerationRequest):
        image = None
        if request.source_image:
            image = genai_types.Image(image_bytes=request.source_image, mime_type="image/png")
        try:
            return await self.client.aio.models.generate_videos(
                model=self.settings.video_model,
                prompt=request.prompt or DEFAULT_ANIMATION_PROMPT,
                image=image,
                config=genai_types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution=self.settings.video_resolution,
                    aspect_ratio=request.aspect_ratio.value,
                ),
            )
        except genai_errors.APIError as exc:
            raise SubmissionError(str(exc)) from exc

    async def refresh(self, operation):
        return await self.client.aio.operations.get(operation)

    def name(self, operation) -> str:
        return getattr(operation, "name", None) or "<unnamed>"

    def status(self, operation) -> JobStatus:
        if not operation.done:
            return JobStatus.pending()
        if operation.error:
            return JobStatus.failed(_operation_error_message(operation.error))
        response = operation.response
        videos = (response.generated_videos if response else None) or []
        if not videos and response is not None and response.rai_media_filtered_reasons:
            return JobStatus.failed("; ".join(response.rai_media_filtered_reasons))
        video = videos[0].video if videos else None
        return JobStatus.done(video.uri if video else None)


def _operation_error_message(error) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(error)


class GenerationClient:
    """
    Domain-level calls for the two wizard steps.

    ``api_key_provider`` is called on every operation so a key selected
    after construction is picked up.
    """

    def __init__(
        self,
        api_key_provider: Callable[[], str],
        settings: Optional[StudioSettings] = None,
        poller_factory=None,
    ):
        self.api_key_provider = api_key_provider
        self.settings = settings or StudioSettings.from_env()
        self.poller_factory = poller_factory or self._default_poller

    def _require_api_key(self) -> str:
        api_key = (self.api_key_provider() or "").strip()
        if not api_key:
            raise ConfigurationError("API key is not set. Please select an API key to continue.")
        return api_key

    def _default_poller(self, backend) -> JobPoller:
        return JobPoller(
            backend,
            poll_interval=self.settings.poll_interval,
            message_interval=self.settings.message_interval,
            max_wait=self.settings.max_wait,
        )

    # ---------- Logo ----------
    async def generate_logo(self, description: str) -> LogoArtifact:
        """Generate the PNG and SVG logo for a company description."""
        client = get_genai_client(self._require_api_key())
        started = time.monotonic()
        calls = [
            asyncio.ensure_future(self._generate_png(client, description)),
            asyncio.ensure_future(self._generate_svg(client, description)),
        ]
        try:
            png_bytes, svg_markup = await asyncio.gather(*calls)
        except genai_errors.APIError as exc:
            raise SubmissionError(str(exc)) from exc
        finally:
            # One failed call must not leave the other running
            for call in calls:
                call.cancel()
            await asyncio.gather(*calls, return_exceptions=True)
        logger.info(f"Logo calls finished in {time.monotonic() - started:.1f}s")

        if not png_bytes:
            raise PartialArtifactError("Failed to generate the PNG logo image.")
        if not svg_markup:
            # PNG without SVG counts as a failed logo
            raise PartialArtifactError("Successfully generated PNG, but failed to generate the SVG logo.")
        return LogoArtifact(png_bytes=png_bytes, svg_markup=svg_markup)

    async def _generate_png(self, client, description: str) -> Optional[bytes]:
        response = await client.aio.models.generate_images(
            model=self.settings.image_model,
            prompt=LOGO_PNG_PROMPT.format(description=description),
            config=genai_types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type="image/png",
                aspect_ratio=AspectRatio.SQUARE.value,
            ),
        )
        images = response.generated_images or []
        if not images or images[0].image is None:
            return None
        return images[0].image.image_bytes

    async def _generate_svg(self, client, description: str) -> str:
        response = await client.aio.models.generate_content(
            model=self.settings.svg_model,
            contents=LOGO_SVG_PROMPT.format(description=description),
        )
        return strip_code_fences(response.text or "")

    # ---------- Video ----------
    async def generate_video(
        self,
        prompt: str,
        source_image: bytes,
        aspect_ratio: AspectRatio,
        on_progress: ProgressCallback,
    ) -> VideoArtifact:
        """Animate the logo and return the downloaded video bytes."""
        api_key = self._require_api_key()
        backend = GeminiVideoJobs(get_genai_client(api_key), self.settings)
        poller = self.poller_factory(backend)

        request = GenerationRequest(
            kind=GenerationKind.VIDEO,
            prompt=prompt,
            source_image=source_image,
            aspect_ratio=AspectRatio(aspect_ratio),
        )
        handle = await poller.submit(request)
        uri = await poller.await_completion(handle, on_progress)

        video_bytes = await asyncio.to_thread(
            _download, uri, api_key, self.settings.download_timeout
        )
        logger.info(f"Downloaded video ({len(video_bytes)} bytes)")
        return VideoArtifact(video_bytes=video_bytes)


def _download(uri: str, api_key: str, timeout: float) -> bytes:
    try:
        resp = requests.get(uri, params={"key": api_key}, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        raise DownloadError(f"Failed to download video: {exc}") from exc
    if not resp.ok:
        raise DownloadError.for_status(resp.status_code, resp.reason)
    return resp.content
