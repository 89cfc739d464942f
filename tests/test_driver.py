import asyncio

import pytest

from frame_sampler.core.driver import CancelToken, CaptureDriver, capture, frame_filename, is_surface_busy
from frame_sampler.core.planner import plan
from frame_sampler.core.surface import FrameCanvas
from frame_sampler.config import CaptureConfig
from frame_sampler.exceptions import EncodeFailed, NotPausedError, SurfaceBusyError
from frame_sampler.models import CapturedFrame, CaptureFailure

WINDOW = [2.0, 2.5, 3.0, 3.5, 4.0]


def run(coro):
    return asyncio.run(coro)


def test_frame_filename():
    assert frame_filename("clip", 2, 1.234) == "clip_frame_002_t0001234ms.jpeg"
    assert frame_filename("x", 0, 0.0) == "x_frame_000_t0000000ms.jpeg"
    assert frame_filename("x", 12, 125.5) == "x_frame_012_t0125500ms.jpeg"


def test_capture_end_to_end(make_surface):
    surface = make_surface(duration=5.0, position=2.0)
    window = plan(2.0, 2.0, 0.5, surface.duration)

    outcomes = run(capture(surface, window, "clip"))

    assert len(outcomes) == 5
    assert all(isinstance(o, CapturedFrame) for o in outcomes)
    assert [o.timestamp for o in outcomes] == WINDOW
    assert [o.index for o in outcomes] == [0, 1, 2, 3, 4]
    assert outcomes[1].suggested_name == "clip_frame_001_t0002500ms.jpeg"
    assert outcomes[0].image[:2] == b"\xff\xd8"
    assert outcomes[0].data_url.startswith("data:image/jpeg;base64,")
    assert surface.position == 2.0
    assert surface.seeks == WINDOW + [2.0]


def test_capture_never_has_two_pending_seeks(make_surface):
    surface = make_surface(duration=10.0, position=0.0)
    run(capture(surface, plan(0.0, 10.0, 0.5, 10.0), "clip"))
    assert surface.max_pending == 1
    assert surface.pending == 0
    assert surface.listener_count == 0


def test_capture_requires_paused_surface(make_surface):
    surface = make_surface(paused=False, position=1.0)

    with pytest.raises(NotPausedError):
        run(capture(surface, plan(1.0, 1.0, 0.5, 5.0), "clip"))

    assert surface.seeks == []
    assert surface.position == 1.0
    assert not is_surface_busy(surface)


def test_capture_continues_past_unreadable_frame(make_surface):
    surface = make_surface(position=2.0, unreadable={3.0})

    outcomes = run(capture(surface, plan(2.0, 2.0, 0.5, 5.0), "clip"))

    assert len(outcomes) == 5
    assert [o.timestamp for o in outcomes] == WINDOW
    assert [o.ok for o in outcomes] == [True, True, False, True, True]
    assert isinstance(outcomes[2], CaptureFailure)
    assert outcomes[2].index == 2
    assert surface.position == 2.0


class BrokenCanvas(FrameCanvas):
    def encode(self, quality):
        raise EncodeFailed("encoder unavailable")


def test_encode_failure_is_recorded_per_frame(make_surface):
    surface = make_surface(position=0.5)
    driver = CaptureDriver(canvas_factory=BrokenCanvas)

    outcomes = run(driver.capture(surface, plan(0.0, 1.0, 0.5, 5.0), "clip"))

    assert len(outcomes) == 3
    assert all(not o.ok for o in outcomes)
    assert outcomes[0].reason == "encoder unavailable"
    assert surface.position == 0.5


def test_zero_sized_surface_fails_every_frame(make_surface):
    surface = make_surface(position=0.0, width=0, height=0)

    outcomes = run(capture(surface, plan(0.0, 1.0, 0.5, 5.0), "clip"))

    assert [o.ok for o in outcomes] == [False, False, False]


def test_stalled_seek_times_out_and_walk_advances(make_surface):
    surface = make_surface(position=2.0, stalled={2.5})
    config = CaptureConfig(settle_timeout=0.05)

    outcomes = run(capture(surface, plan(2.0, 2.0, 0.5, 5.0), "clip", config=config))

    assert [o.ok for o in outcomes] == [True, False, True, True, True]
    assert "no settle signal" in outcomes[1].reason
    assert surface.position == 2.0
    assert surface.listener_count == 0


def test_stale_settle_signals_are_ignored(make_surface):
    class EchoingSurface(make_surface):
        def _settle(self, seconds):
            for listener in list(self._listeners):
                listener(seconds - 0.5)
            super()._settle(seconds)

    surface = EchoingSurface(position=2.0)

    outcomes = run(capture(surface, plan(2.0, 2.0, 0.5, 5.0), "clip"))

    assert [o.timestamp for o in outcomes] == WINDOW
    assert all(o.ok for o in outcomes)
    assert surface.max_pending == 1


def test_cancel_token_fills_remaining_outcomes(make_surface):
    surface = make_surface(position=2.0)
    token = CancelToken()
    seen = []

    def on_outcome(outcome):
        seen.append(outcome)
        if len(seen) == 2:
            token.cancel()

    outcomes = run(capture(surface, plan(2.0, 2.0, 0.5, 5.0), "clip", cancel_token=token, on_outcome=on_outcome))

    assert len(outcomes) == 5
    assert [o.ok for o in outcomes] == [True, True, False, False, False]
    assert {o.reason for o in outcomes[2:]} == {"cancelled"}
    assert [o.timestamp for o in outcomes] == WINDOW
    assert len(seen) == 5
    assert surface.seeks == [2.0, 2.5, 2.0]
    assert surface.position == 2.0


def test_cancel_before_first_step_does_not_seek(make_surface):
    surface = make_surface(position=1.0)
    token = CancelToken()
    token.cancel()

    outcomes = run(capture(surface, plan(2.0, 1.0, 0.5, 5.0), "clip", cancel_token=token))

    assert [o.reason for o in outcomes] == ["cancelled"] * 3
    assert surface.seeks == []


def test_task_cancellation_restores_position(make_surface):
    surface = make_surface(position=2.0, stalled={3.0})
    driver = CaptureDriver(settle_timeout=None)

    async def scenario():
        task = asyncio.ensure_future(driver.capture(surface, plan(2.0, 2.0, 0.5, 5.0), "clip"))
        surface.on_seek = lambda seconds: task.cancel() if seconds == 3.0 else None
        with pytest.raises(asyncio.CancelledError):
            await task

    run(scenario())

    assert surface.position == 2.0
    assert surface.seeks == [2.0, 2.5, 3.0, 2.0]
    assert surface.listener_count == 0
    assert not is_surface_busy(surface)


def test_second_run_on_busy_surface_is_rejected(make_surface):
    surface = make_surface(position=2.0)
    window = plan(2.0, 2.0, 0.5, 5.0)
    driver = CaptureDriver()

    async def scenario():
        first = asyncio.ensure_future(driver.capture(surface, window, "a"))
        await asyncio.sleep(0)
        with pytest.raises(SurfaceBusyError):
            await driver.capture(surface, window, "b")
        return await first

    outcomes = run(scenario())

    assert len(outcomes) == 5
    assert surface.seeks == WINDOW + [2.0]
    assert not is_surface_busy(surface)

    again = run(driver.capture(surface, window, "c"))
    assert len(again) == 5


def test_empty_plan_returns_no_outcomes(make_surface):
    surface = make_surface(duration=1.0, position=0.5)

    outcomes = run(capture(surface, plan(5.0, 1.0, 0.5, surface.duration), "clip"))

    assert outcomes == []
    assert surface.seeks == []


def test_surface_read_error_is_recorded_per_frame(make_surface):
    class FlakySurface(make_surface):
        def read_frame(self):
            if self.position == 2.5:
                raise OSError("device lost")
            return super().read_frame()

    surface = FlakySurface(position=2.0)

    outcomes = run(capture(surface, plan(2.0, 2.0, 0.5, 5.0), "clip"))

    assert len(outcomes) == 5
    assert [o.ok for o in outcomes] == [True, False, True, True, True]
    assert "device lost" in outcomes[1].reason
    assert outcomes[1].timestamp == 2.5
    assert surface.position == 2.0
    assert not is_surface_busy(surface)


def test_capture_errors_carry_their_timestamp(make_surface):
    raised = []

    class RecordingCanvas(FrameCanvas):
        def encode(self, quality):
            error = EncodeFailed("encoder unavailable")
            raised.append(error)
            raise error

    surface = make_surface(position=0.0)
    driver = CaptureDriver(canvas_factory=RecordingCanvas)

    run(driver.capture(surface, plan(1.0, 1.0, 0.5, 5.0), "clip"))

    assert [e.timestamp for e in raised] == [1.0, 1.5, 2.0]


def test_late_settle_from_timed_out_step_does_not_finish_restore(make_surface):
    class LateSettleSurface(make_surface):
        """Settles in request order; the first seek to 2.5 takes 0.2s."""

        def __init__(self, **kwargs):
            super().__init__(**kwargs)
            self.late = {2.5}
            self._last_when = 0.0

        def _schedule(self, seconds):
            loop = asyncio.get_running_loop()
            delay = 0.2 if seconds in self.late else 0.0
            self.late.discard(seconds)
            self._last_when = max(loop.time() + delay, self._last_when + 0.001)
            loop.call_at(self._last_when, self._settle, seconds)

    surface = LateSettleSurface(position=2.5)
    driver = CaptureDriver(settle_timeout=0.05)

    outcomes = run(driver.capture(surface, plan(2.0, 0.5, 0.5, 5.0), "clip"))

    assert [o.ok for o in outcomes] == [True, False]
    assert surface.seeks == [2.0, 2.5, 2.5]
    # both the late signal and the restore's own signal were consumed
    assert surface.pending == 0
    assert surface.position == 2.5
    assert surface.listener_count == 0
