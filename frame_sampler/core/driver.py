"""Sequential frame capture over a shared, seekable surface."""

import asyncio
import time
import weakref
from typing import Callable, List, Optional

from frame_sampler.config.config import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_RESTORE_TIMEOUT,
    DEFAULT_SETTLE_TIMEOUT,
    FRAME_INDEX_WIDTH,
    IMAGE_EXTENSION,
    TIMESTAMP_MS_WIDTH,
)
from frame_sampler.config.sampler_config import CaptureConfig
from frame_sampler.core.surface import FrameCanvas, MediaSource
from frame_sampler.exceptions import CaptureFailed, NotPausedError, SurfaceBusyError
from frame_sampler.logging.logger import get_logger
from frame_sampler.models import (
    CapturedFrame,
    CaptureFailure,
    CaptureOutcome,
    CapturePlan,
    PipelineRun,
)

OutcomeCallback = Callable[[CaptureOutcome], None]

# surface -> run currently walking it
_active_runs: "weakref.WeakKeyDictionary[MediaSource, PipelineRun]" = weakref.WeakKeyDictionary()


class CancelToken:
    """Caller-owned flag, checked before every reposition request."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def frame_filename(base_name: str, index: int, timestamp: float) -> str:
    """Name for the frame captured at plan position ``index``.

    >>> frame_filename("clip", 2, 1.234)
    'clip_frame_002_t0001234ms.jpeg'
    """
    millis = int(round(timestamp * 1000))
    return (
        f"{base_name}_frame_{index:0{FRAME_INDEX_WIDTH}d}"
        f"_t{millis:0{TIMESTAMP_MS_WIDTH}d}ms.{IMAGE_EXTENSION}"
    )


def is_surface_busy(surface: MediaSource) -> bool:
    return surface in _active_runs


class CaptureDriver:
    """Walks a CapturePlan one reposition at a time and captures each frame.

    Only one reposition request is outstanding at any moment: the driver
    installs a one-shot settle listener, assigns the surface position, and
    waits for that listener before touching the pixels. A step whose frame
    cannot be read, drawn or encoded, or that does not settle in time, is
    recorded as a CaptureFailure and the walk moves on. The surface position
    is put back where it was on every exit path.
    """

    def __init__(
        self,
        quality: float = DEFAULT_JPEG_QUALITY,
        settle_timeout: Optional[float] = DEFAULT_SETTLE_TIMEOUT,
        restore_timeout: Optional[float] = DEFAULT_RESTORE_TIMEOUT,
        canvas_factory: Callable[[int, int], FrameCanvas] = FrameCanvas,
    ):
        self.quality = quality
        self.settle_timeout = settle_timeout
        self.restore_timeout = restore_timeout
        self.canvas_factory = canvas_factory
        self.logger = get_logger()

    @classmethod
    def from_config(cls, config: CaptureConfig) -> "CaptureDriver":
        return cls(
            quality=config.quality,
            settle_timeout=config.settle_timeout,
            restore_timeout=config.restore_timeout,
        )

    async def capture(
        self,
        surface: MediaSource,
        plan: CapturePlan,
        base_name: str,
        *,
        cancel_token: Optional[CancelToken] = None,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> List[CaptureOutcome]:
        """Capture one frame per planned timestamp, in plan order.

        Returns exactly ``len(plan)`` outcomes. Timestamps skipped because
        ``cancel_token`` was set are reported as failures with reason
        ``"cancelled"``.

        Raises:
            NotPausedError: the surface is playing; nothing was sought.
            SurfaceBusyError: another run owns the surface; nothing was sought.
        """
        if not surface.paused:
            raise NotPausedError("Pause the video before capturing frames")
        if is_surface_busy(surface):
            raise SurfaceBusyError("A capture run is already in progress on this surface")

        run = PipelineRun(surface=surface, plan=plan, restore_position=surface.position)
        _active_runs[surface] = run

        self.logger.log_operation_start(
            "frame capture",
            frames=len(plan),
            base_name=base_name,
            restore_to=f"{run.restore_position:.3f}s",
        )
        started = time.monotonic()
        moved = False

        try:
            for index, timestamp in enumerate(plan):
                if cancel_token is not None and cancel_token.cancelled:
                    run.cancelled = True
                    break

                moved = True
                outcome = await self._capture_step(run, index, timestamp, base_name)
                run.outcomes.append(outcome)
                if on_outcome is not None:
                    on_outcome(outcome)
                self.logger.log_progress(index + 1, len(plan), "capture")

            if run.cancelled:
                self.logger.info(f"Capture cancelled after {len(run.outcomes)}/{len(plan)} frames")
                for index in range(len(run.outcomes), len(plan)):
                    outcome = CaptureFailure(timestamp=plan[index], index=index, reason="cancelled")
                    run.outcomes.append(outcome)
                    if on_outcome is not None:
                        on_outcome(outcome)
        finally:
            try:
                if moved:
                    await self._restore(run)
            finally:
                _active_runs.pop(surface, None)

        self.logger.log_operation_complete(
            "frame capture",
            time.monotonic() - started,
            captured=len(run.frames),
            failed=len(run.failures),
        )
        return list(run.outcomes)

    async def _capture_step(
        self,
        run: PipelineRun,
        index: int,
        timestamp: float,
        base_name: str,
    ) -> CaptureOutcome:
        surface = run.surface
        try:
            await self._await_settle(run, timestamp, self.settle_timeout)
        except asyncio.TimeoutError:
            run.stale_signals[timestamp] += 1
            return self._failure(index, timestamp, f"no settle signal within {self.settle_timeout}s")

        try:
            canvas = self.canvas_factory(surface.natural_width, surface.natural_height)
            try:
                frame = surface.read_frame()
            except Exception as exc:
                raise CaptureFailed(f"Failed to read frame: {exc}", timestamp) from exc
            canvas.draw(frame)
            image = canvas.encode(self.quality)
        except CaptureFailed as exc:
            if exc.timestamp is None:
                exc.timestamp = timestamp
            return self._failure(index, timestamp, str(exc))

        return CapturedFrame(
            timestamp=timestamp,
            index=index,
            image=image,
            suggested_name=frame_filename(base_name, index, timestamp),
        )

    async def _await_settle(
        self,
        run: PipelineRun,
        target: float,
        timeout: Optional[float],
    ) -> float:
        """Reposition the run's surface to ``target`` and wait for its settle signal.

        A step that timed out may still settle later. Surfaces settle in
        request order, so one signal per timed-out request at ``target`` is
        discarded before a signal is accepted for this request.
        """
        surface = run.surface
        loop = asyncio.get_running_loop()
        settled: "asyncio.Future[float]" = loop.create_future()

        def on_settle(position: float) -> None:
            # signals for any other request are stale
            if position != target or settled.done():
                return
            if run.stale_signals[position] > 0:
                run.stale_signals[position] -= 1
                return
            surface.remove_settle_listener(on_settle)
            settled.set_result(position)

        surface.add_settle_listener(on_settle)
        try:
            surface.position = target
            return await asyncio.wait_for(settled, timeout)
        finally:
            surface.remove_settle_listener(on_settle)

    async def _restore(self, run: PipelineRun) -> None:
        try:
            await self._await_settle(run, run.restore_position, self.restore_timeout)
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Surface did not settle after restoring position {run.restore_position:.3f}s"
            )

    def _failure(self, index: int, timestamp: float, reason: str) -> CaptureFailure:
        self.logger.warning(f"⚠️ Skipped frame #{index} at {timestamp:.3f}s: {reason}")
        return CaptureFailure(timestamp=timestamp, index=index, reason=reason)


async def capture(
    surface: MediaSource,
    plan: CapturePlan,
    base_name: str,
    *,
    config: Optional[CaptureConfig] = None,
    cancel_token: Optional[CancelToken] = None,
    on_outcome: Optional[OutcomeCallback] = None,
) -> List[CaptureOutcome]:
    """Capture ``plan`` from ``surface`` with a driver built from ``config``."""
    driver = CaptureDriver.from_config(config) if config is not None else CaptureDriver()
    return await driver.capture(
        surface,
        plan,
        base_name,
        cancel_token=cancel_token,
        on_outcome=on_outcome,
    )
