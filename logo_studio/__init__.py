"""
Logo Animation Studio - Modular Components

This package contains the core modules for the Logo Animation Studio:
- config: Configuration, constants, and data models
- errors: Error types surfaced to the UI
- utils: Logging and helper functions
- gemini_client: Gemini API client initialization
- job_poller: Long-running video job polling with rotating progress messages
- generation_client: Logo (PNG + SVG) and video generation calls
- workflow: Wizard state and the controller that sequences both steps
"""

# Lazy imports to avoid circular dependencies and hot-reload issues
__all__ = [
    # Config
    "AspectRatio",
    "GenerationKind",
    "GenerationRequest",
    "LogoArtifact",
    "VideoArtifact",
    "StudioSettings",
    "VIDEO_ASPECT_RATIOS",
    "UI_ANIMATION_PROMPT",
    "LOGO_BUSY_MESSAGE",
    # Errors
    "StudioError",
    "ConfigurationError",
    "SubmissionError",
    "JobFailedError",
    "JobTimeoutError",
    "MissingResultError",
    "DownloadError",
    "PartialArtifactError",
    "InvalidImageError",
    # Utils
    "get_logger",
    "load_image_bytes",
    "strip_code_fences",
    # Gemini Client
    "get_api_key",
    "get_genai_client",
    # Job Poller
    "JobPoller",
    "JobHandle",
    "JobStatus",
    "JobState",
    "ProgressTicker",
    # Generation Client
    "GenerationClient",
    # Workflow
    "Step",
    "WorkflowState",
    "WorkflowController",
    "CredentialStore",
    "classify_error",
]

_CONFIG_NAMES = (
    "AspectRatio", "GenerationKind", "GenerationRequest", "LogoArtifact", "VideoArtifact",
    "StudioSettings", "VIDEO_ASPECT_RATIOS", "UI_ANIMATION_PROMPT", "LOGO_BUSY_MESSAGE",
)
_ERROR_NAMES = (
    "StudioError", "ConfigurationError", "SubmissionError", "JobFailedError", "JobTimeoutError",
    "MissingResultError", "DownloadError", "PartialArtifactError", "InvalidImageError",
)


def __getattr__(name):
    """Lazy import to avoid circular dependencies and streamlit hot-reload issues."""
    if name in __all__:
        if name in _CONFIG_NAMES:
            from . import config
            return getattr(config, name)
        elif name in _ERROR_NAMES:
            from . import errors
            return getattr(errors, name)
        elif name in ("get_logger", "load_image_bytes", "strip_code_fences"):
            from . import utils
            return getattr(utils, name)
        elif name in ("get_api_key", "get_genai_client"):
            from . import gemini_client
            return getattr(gemini_client, name)
        elif name in ("JobPoller", "JobHandle", "JobStatus", "JobState", "ProgressTicker"):
            from . import job_poller
            return getattr(job_poller, name)
        elif name == "GenerationClient":
            from .generation_client import GenerationClient
            return GenerationClient
        elif name in ("Step", "WorkflowState", "WorkflowController", "CredentialStore", "classify_error"):
            from . import workflow
            return getattr(workflow, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
