"""
Job Poller - drives one long-running video job to a terminal state.

Two timers run side by side while a job is pending: the poll loop asks the
provider for the job status every ``poll_interval`` seconds, and a
ProgressTicker rotates human-readable status messages every
``message_interval`` seconds. The ticker is always torn down before
``await_completion`` returns or raises.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence

from .config import (
    DEFAULT_MESSAGE_INTERVAL,
    DEFAULT_POLL_INTERVAL,
    FETCHING_VIDEO_MESSAGE,
    VIDEO_LOADING_MESSAGES,
    GenerationRequest,
)
from .errors import JobFailedError, JobTimeoutError, MissingResultError
from .utils import get_logger

logger = get_logger("job_poller")

ProgressCallback = Callable[[str], None]


class JobState(str, Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class JobStatus:
    state: JobState
    result_uri: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def pending(cls) -> "JobStatus":
        return cls(JobState.PENDING)

    @classmethod
    def done(cls, result_uri: Optional[str]) -> "JobStatus":
        return cls(JobState.DONE, result_uri=result_uri)

    @classmethod
    def failed(cls, reason: str) -> "JobStatus":
        return cls(JobState.FAILED, reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.state is not JobState.PENDING


@dataclass(frozen=True)
class JobHandle:
    """Provider operation returned on submission."""
    name: str
    operation: Any


def message_for_tick(messages: Sequence[str], tick: int) -> str:
    return messages[tick % len(messages)]


class ProgressTicker:
    """Emits a rotating status message at a fixed cadence."""

    def __init__(self, messages: Sequence[str], interval: float, on_progress: ProgressCallback):
        if not messages:
            raise ValueError("ProgressTicker needs at least one message")
        self.messages = tuple(messages)
        self.interval = interval
        self.on_progress = on_progress
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        tick = 0
        while True:
            try:
                self.on_progress(message_for_tick(self.messages, tick))
            except Exception as exc:
                logger.warning(f"Progress callback failed on tick {tick}: {exc}")
            tick += 1
            await asyncio.sleep(self.interval)

    async def stop(self) -> None:
        """Cancel the ticker. No message is emitted once this returns."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


class JobPoller:
    """
    Submit a job and poll it until it is done or failed.

    ``backend`` adapts the provider and must offer:
        async start(request) -> operation
        async refresh(operation) -> operation
        status(operation) -> JobStatus
        name(operation) -> str
    """

    def __init__(
        self,
        backend,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        message_interval: float = DEFAULT_MESSAGE_INTERVAL,
        messages: Sequence[str] = VIDEO_LOADING_MESSAGES,
        max_wait: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        ticker_factory=ProgressTicker,
    ):
        self.backend = backend
        self.poll_interval = poll_interval
        self.message_interval = message_interval
        self.messages = tuple(messages)
        self.max_wait = max_wait
        self._sleep = sleep
        self._ticker_factory = ticker_factory

    async def submit(self, request: GenerationRequest) -> JobHandle:
        """Send the request. Provider rejections surface as SubmissionError."""
        operation = await self.backend.start(request)
        handle = JobHandle(name=self.backend.name(operation), operation=operation)
        logger.info(f"Submitted {request.kind.value} job {handle.name}")
        return handle

    async def await_completion(self, handle: JobHandle, on_progress: ProgressCallback) -> str:
        """
        Poll until the job is terminal and return its result URI.

        Raises:
            JobFailedError: the job failed (JobTimeoutError if max_wait ran out)
            MissingResultError: the job finished without a result URI
        """
        ticker = self._ticker_factory(self.messages, self.message_interval, on_progress)
        ticker.start()
        try:
            status = await self._poll_until_terminal(handle)
        finally:
            await ticker.stop()

        if status.state is JobState.FAILED:
            logger.warning(f"Job {handle.name} failed: {status.reason}")
            raise JobFailedError(status.reason or "Video generation failed.")

        on_progress(FETCHING_VIDEO_MESSAGE)
        if not status.result_uri:
            raise MissingResultError("Video generation completed, but no download link was found.")
        logger.info(f"Job {handle.name} done")
        return status.result_uri

    async def _poll_until_terminal(self, handle: JobHandle) -> JobStatus:
        operation = handle.operation
        status = self.backend.status(operation)
        elapsed = 0.0
        while not status.is_terminal:
            if self.max_wait is not None and elapsed >= self.max_wait:
                raise JobTimeoutError(
                    f"Video generation did not finish within {self.max_wait:g} seconds."
                )
            await self._sleep(self.poll_interval)
            elapsed += self.poll_interval
            operation = await self.backend.refresh(operation)
            status = self.backend.status(operation)
            logger.debug(f"Job {handle.name}: {status.state.value} after {elapsed:g}s")
        return status
