"""Unit tests for the video job poller (no API key required)."""

import asyncio

import pytest

from logo_studio.config import (
    FETCHING_VIDEO_MESSAGE,
    VIDEO_LOADING_MESSAGES,
    AspectRatio,
    GenerationKind,
    GenerationRequest,
)
from logo_studio.errors import (
    JobFailedError,
    JobTimeoutError,
    MissingResultError,
    SubmissionError,
)
from logo_studio.job_poller import (
    JobHandle,
    JobPoller,
    JobState,
    JobStatus,
    ProgressTicker,
    message_for_tick,
)

VIDEO_REQUEST = GenerationRequest(
    kind=GenerationKind.VIDEO,
    prompt="spin it",
    source_image=b"png",
    aspect_ratio=AspectRatio.LANDSCAPE,
)


class FakeBackend:
    """Walks through a fixed list of statuses, one per refresh."""

    def __init__(self, statuses, refresh_error=None, start_error=None):
        self.statuses = list(statuses)
        self.refresh_error = refresh_error
        self.start_error = start_error
        self.refresh_calls = 0

    async def start(self, request):
        if self.start_error:
            raise self.start_error
        return 0

    async def refresh(self, operation):
        self.refresh_calls += 1
        if self.refresh_error:
            raise self.refresh_error
        return min(operation + 1, len(self.statuses) - 1)

    def status(self, operation):
        return self.statuses[operation]

    def name(self, operation):
        return "operations/test-job"


class RecordingTicker:
    """Ticker stand-in that only counts start/stop calls."""

    def __init__(self, messages, interval, on_progress):
        self.messages = messages
        self.interval = interval
        self.on_progress = on_progress
        self.starts = 0
        self.stops = 0

    def start(self):
        self.starts += 1

    async def stop(self):
        self.stops += 1


@pytest.fixture
def tickers():
    return []


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_poller(tickers, sleeps):
    async def fake_sleep(seconds):
        sleeps.append(seconds)

    def ticker_factory(messages, interval, on_progress):
        ticker = RecordingTicker(messages, interval, on_progress)
        tickers.append(ticker)
        return ticker

    def factory(backend, **kwargs):
        return JobPoller(backend, sleep=fake_sleep, ticker_factory=ticker_factory, **kwargs)

    return factory


async def _run(poller, on_progress):
    handle = await poller.submit(VIDEO_REQUEST)
    return await poller.await_completion(handle, on_progress)


class TestJobStatus:
    def test_pending_is_not_terminal(self):
        assert not JobStatus.pending().is_terminal

    def test_done_and_failed_are_terminal(self):
        assert JobStatus.done("uri").is_terminal
        assert JobStatus.failed("boom").is_terminal
        assert JobStatus.failed("boom").state is JobState.FAILED


class TestMessageForTick:
    @pytest.mark.parametrize("tick", range(0, 22))
    def test_cycles_and_wraps(self, tick):
        """Tick i shows messages[i mod N]."""
        expected = VIDEO_LOADING_MESSAGES[tick % len(VIDEO_LOADING_MESSAGES)]
        assert message_for_tick(VIDEO_LOADING_MESSAGES, tick) == expected


class TestAwaitCompletion:
    @pytest.mark.asyncio
    async def test_done_returns_result_uri(self, make_poller, tickers, sleeps):
        backend = FakeBackend([
            JobStatus.pending(),
            JobStatus.pending(),
            JobStatus.done("https://example.com/video.mp4?alt=media"),
        ])
        progress = []
        poller = make_poller(backend)

        uri = await _run(poller, progress.append)

        assert uri == "https://example.com/video.mp4?alt=media"
        assert backend.refresh_calls == 2
        assert sleeps == [10.0, 10.0]
        assert len(tickers) == 1
        assert tickers[0].starts == 1
        assert tickers[0].stops == 1
        assert progress == [FETCHING_VIDEO_MESSAGE]

    @pytest.mark.asyncio
    async def test_ticker_uses_message_cadence(self, make_poller, tickers):
        backend = FakeBackend([JobStatus.done("uri")])
        await _run(make_poller(backend, poll_interval=10, message_interval=5), lambda m: None)

        assert tickers[0].interval == 5
        assert tickers[0].messages == VIDEO_LOADING_MESSAGES

    @pytest.mark.asyncio
    async def test_already_done_does_not_poll(self, make_poller, sleeps):
        backend = FakeBackend([JobStatus.done("uri")])
        uri = await _run(make_poller(backend), lambda m: None)

        assert uri == "uri"
        assert sleeps == []
        assert backend.refresh_calls == 0

    @pytest.mark.asyncio
    async def test_failed_raises_and_stops_ticker(self, make_poller, tickers):
        backend = FakeBackend([JobStatus.pending(), JobStatus.failed("Quota exceeded")])
        progress = []

        with pytest.raises(JobFailedError, match="Quota exceeded"):
            await _run(make_poller(backend), progress.append)

        assert tickers[0].stops == 1
        assert FETCHING_VIDEO_MESSAGE not in progress

    @pytest.mark.asyncio
    async def test_poll_exception_propagates_and_stops_ticker(self, make_poller, tickers):
        backend = FakeBackend(
            [JobStatus.pending(), JobStatus.done("uri")],
            refresh_error=RuntimeError("connection reset"),
        )

        with pytest.raises(RuntimeError, match="connection reset"):
            await _run(make_poller(backend), lambda m: None)

        assert tickers[0].stops == 1

    @pytest.mark.asyncio
    async def test_done_without_uri_raises_missing_result(self, make_poller, tickers):
        backend = FakeBackend([JobStatus.pending(), JobStatus.done(None)])
        progress = []

        with pytest.raises(MissingResultError):
            await _run(make_poller(backend), progress.append)

        assert tickers[0].stops == 1
        assert progress == [FETCHING_VIDEO_MESSAGE]

    @pytest.mark.asyncio
    async def test_max_wait_raises_timeout(self, make_poller, tickers):
        backend = FakeBackend([JobStatus.pending()])

        with pytest.raises(JobTimeoutError):
            await _run(make_poller(backend, poll_interval=10, max_wait=20), lambda m: None)

        assert backend.refresh_calls == 2
        assert tickers[0].stops == 1

    @pytest.mark.asyncio
    async def test_timeout_is_a_job_failure(self, make_poller):
        backend = FakeBackend([JobStatus.pending()])

        with pytest.raises(JobFailedError):
            await _run(make_poller(backend, max_wait=5), lambda m: None)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_returns_named_handle(self, make_poller):
        handle = await make_poller(FakeBackend([JobStatus.pending()])).submit(VIDEO_REQUEST)

        assert isinstance(handle, JobHandle)
        assert handle.name == "operations/test-job"
        assert handle.operation == 0

    @pytest.mark.asyncio
    async def test_rejection_propagates(self, make_poller, tickers):
        backend = FakeBackend([], start_error=SubmissionError("400 INVALID_ARGUMENT"))

        with pytest.raises(SubmissionError):
            await make_poller(backend).submit(VIDEO_REQUEST)

        assert tickers == []


async def _wait_for(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.002)


class TestProgressTicker:
    @pytest.mark.asyncio
    async def test_emits_in_order_and_wraps(self):
        received = []
        ticker = ProgressTicker(["a", "b", "c"], 0.001, received.append)
        ticker.start()
        await _wait_for(lambda: len(received) >= 7)
        await ticker.stop()

        assert received[:7] == ["a", "b", "c", "a", "b", "c", "a"]

    @pytest.mark.asyncio
    async def test_silent_after_stop(self):
        received = []
        ticker = ProgressTicker(["a", "b"], 0.001, received.append)
        ticker.start()
        await _wait_for(lambda: len(received) >= 2)
        await ticker.stop()
        count = len(received)

        await asyncio.sleep(0.02)

        assert len(received) == count

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        ticker = ProgressTicker(["a"], 1, lambda m: None)
        await ticker.stop()
        ticker.start()
        await ticker.stop()
        await ticker.stop()

    def test_requires_messages(self):
        with pytest.raises(ValueError):
            ProgressTicker([], 1, lambda m: None)


class TestWithRealTimers:
    @pytest.mark.asyncio
    async def test_no_progress_after_return(self):
        backend = FakeBackend([
            JobStatus.pending(),
            JobStatus.pending(),
            JobStatus.pending(),
            JobStatus.done("uri"),
        ])
        received = []
        poller = JobPoller(backend, poll_interval=0.01, message_interval=0.001, messages=["x", "y"])

        uri = await _run(poller, received.append)
        count = len(received)
        await asyncio.sleep(0.02)

        assert uri == "uri"
        assert received[0] == "x"
        assert received[-1] == FETCHING_VIDEO_MESSAGE
        assert len(received) == count

    @pytest.mark.asyncio
    async def test_failing_progress_callback_keeps_the_result(self):
        backend = FakeBackend([JobStatus.pending()] * 5 + [JobStatus.done("uri")])
        received = []

        def flaky_write(message):
            received.append(message)
            if len(received) == 1:
                raise RuntimeError("ui write failed")

        poller = JobPoller(backend, poll_interval=0.01, message_interval=0.001, messages=["a", "b"])

        uri = await _run(poller, flaky_write)

        assert uri == "uri"
        assert backend.refresh_calls == 5
        assert received[:3] == ["a", "b", "a"]
        assert received[-1] == FETCHING_VIDEO_MESSAGE

    @pytest.mark.asyncio
    async def test_cancelling_the_wait_stops_progress(self):
        backend = FakeBackend([JobStatus.pending()])
        received = []
        poller = JobPoller(backend, poll_interval=0.005, message_interval=0.001, messages=["x"])

        task = asyncio.ensure_future(_run(poller, received.append))
        await _wait_for(lambda: len(received) >= 3)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        count = len(received)
        await asyncio.sleep(0.02)

        assert len(received) == count
