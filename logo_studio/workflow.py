"""
Workflow Controller - sequences the two wizard steps and owns UI state.

All state lives in one WorkflowState record. Only controller methods mutate
it, and each method checks the current step and busy flags before acting, so
at most one logo request and one video job are in flight at a time.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Callable, Optional

from .config import AspectRatio
from .errors import ConfigurationError, InvalidImageError
from .gemini_client import get_api_key
from .utils import get_logger, load_image_bytes

logger = get_logger("workflow")

INVALID_KEY_MARKER = "Requested entity was not found"

SELECT_KEY_MESSAGE = (
    "Please select an API key to generate videos. "
    "You may need to enable billing for your project."
)
VERIFY_KEY_MESSAGE = "Could not verify API key. Please select one to proceed."
INVALID_KEY_MESSAGE = (
    "Your API key is invalid. Please select a new key and ensure billing is enabled for your project."
)


class Step(str, Enum):
    GENERATE = "generate"
    ANIMATE = "animate"


class ErrorClass(str, Enum):
    GENERIC = "generic"
    INVALID_CREDENTIAL = "invalid_credential"


def classify_error(message: str) -> ErrorClass:
    """Map an upstream error message to how the UI should react."""
    if message and INVALID_KEY_MARKER in message:
        return ErrorClass.INVALID_CREDENTIAL
    return ErrorClass.GENERIC


@dataclass
class WorkflowState:
    step: Step = Step.GENERATE
    logo_png: Optional[bytes] = None
    logo_svg: Optional[str] = None
    video_bytes: Optional[bytes] = None
    is_generating_logo: bool = False
    is_generating_video: bool = False
    progress_message: str = ""
    error: Optional[str] = None
    api_key_selected: bool = True

    @property
    def is_busy(self) -> bool:
        return self.is_generating_logo or self.is_generating_video

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, f.default)


class CredentialStore:
    """The API key chosen for this session, seeded from the environment."""

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = (api_key if api_key is not None else get_api_key()).strip()

    @property
    def api_key(self) -> str:
        return self._api_key

    def has_selected_key(self) -> bool:
        return bool(self._api_key)

    def select_key(self, api_key: str) -> None:
        api_key = (api_key or "").strip()
        if not api_key:
            raise ConfigurationError("No API key entered.")
        self._api_key = api_key


class WorkflowController:
    """
    Drives the generate -> animate wizard.

    ``on_change`` is called after every state change, including each
    progress message while a video job is pending.
    """

    def __init__(
        self,
        client,
        credentials: CredentialStore,
        state: Optional[WorkflowState] = None,
        on_change: Optional[Callable[[WorkflowState], None]] = None,
    ):
        self.client = client
        self.credentials = credentials
        self.state = state or WorkflowState()
        self.on_change = on_change

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self.state)

    def _accepts(self, step: Step, action: str) -> bool:
        if self.state.is_busy:
            logger.warning(f"Ignoring {action}: a request is already running")
            return False
        if self.state.step is not step:
            logger.warning(f"Ignoring {action} in step {self.state.step.value}")
            return False
        return True

    # ---------- Step 1 ----------
    async def generate_logo(self, description: str) -> bool:
        if not self._accepts(Step.GENERATE, "logo generation"):
            return False
        state = self.state
        if not description or not description.strip():
            state.error = "Please describe your company or product first."
            self._notify()
            return False

        state.error = None
        state.is_generating_logo = True
        self._notify()
        try:
            artifact = await self.client.generate_logo(description.strip())
            state.logo_png = artifact.png_bytes
            state.logo_svg = artifact.svg_markup
            state.step = Step.ANIMATE
            return True
        except Exception as exc:
            logger.error(f"Logo generation failed: {exc}")
            state.error = str(exc) or "An unknown error occurred during logo generation."
            return False
        finally:
            state.is_generating_logo = False
            self._notify()

    def upload_logo(self, image_bytes: bytes) -> bool:
        if not self._accepts(Step.GENERATE, "logo upload"):
            return False
        if not image_bytes:
            self.state.error = "The uploaded file is empty."
            self._notify()
            return False
        state = self.state
        state.error = None
        state.logo_png = image_bytes
        state.logo_svg = None
        state.step = Step.ANIMATE
        self._notify()
        return True

    def upload_logo_file(self, file) -> bool:
        """Decode an uploaded image to PNG and use it as the logo."""
        if not self._accepts(Step.GENERATE, "logo upload"):
            return False
        try:
            image_bytes, _ = load_image_bytes(file)
        except InvalidImageError as exc:
            logger.warning(f"Rejected upload: {exc}")
            self.state.error = str(exc)
            self._notify()
            return False
        return self.upload_logo(image_bytes)

    # ---------- Step 2 ----------
    def _verify_credential(self) -> bool:
        state = self.state
        try:
            selected = self.credentials.has_selected_key()
        except Exception as exc:
            logger.warning(f"Credential check failed: {exc}")
            state.api_key_selected = False
            state.error = VERIFY_KEY_MESSAGE
            return False
        if not selected:
            state.api_key_selected = False
            state.error = SELECT_KEY_MESSAGE
            return False
        state.api_key_selected = True
        return True

    def _on_progress(self, message: str) -> None:
        self.state.progress_message = message
        self._notify()

    async def generate_video(self, prompt: str, aspect_ratio: AspectRatio) -> bool:
        if not self._accepts(Step.ANIMATE, "video generation"):
            return False
        state = self.state
        if not state.logo_png:
            state.error = "No logo image available to animate."
            self._notify()
            return False

        state.error = None
        if not self._verify_credential():
            self._notify()
            return False

        state.is_generating_video = True
        state.video_bytes = None
        self._notify()
        try:
            artifact = await self.client.generate_video(
                prompt, state.logo_png, aspect_ratio, self._on_progress
            )
            state.video_bytes = artifact.video_bytes
            return True
        except Exception as exc:
            message = str(exc) or "An unknown error occurred during video generation."
            if classify_error(message) is ErrorClass.INVALID_CREDENTIAL:
                logger.warning("Provider rejected the API key; asking for a new one")
                state.error = INVALID_KEY_MESSAGE
                state.api_key_selected = False
            else:
                if isinstance(exc, ConfigurationError):
                    state.api_key_selected = False
                logger.error(f"Video generation failed: {message}")
                state.error = message
            return False
        finally:
            state.is_generating_video = False
            state.progress_message = ""
            self._notify()

    # ---------- Credentials & reset ----------
    def select_key(self, api_key: str) -> bool:
        try:
            self.credentials.select_key(api_key)
        except ConfigurationError as exc:
            self.state.error = f"Failed to select the API key: {exc}"
            self._notify()
            return False
        self.state.api_key_selected = True
        self.state.error = None
        self._notify()
        return True

    def start_over(self) -> None:
        self.state.reset()
        self._notify()
