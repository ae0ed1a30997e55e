"""
Tests for the frame-driven animation runtime.
"""

import pytest

from particle_chain.core.runtime import ManualFrameScheduler, ModelCell, on_animation_frame, start


class Recorder:
    """Model is a tuple of the messages folded so far."""

    def __init__(self):
        self.views: list[tuple] = []
        self.surfaces: list[object] = []
        self.dispatches: list[object] = []

    @staticmethod
    def tick(elapsed_ms):
        return ("tick", elapsed_ms)

    @staticmethod
    def update(model, msg):
        return model + (msg,)

    def view(self, surface, dispatch, model):
        self.surfaces.append(surface)
        self.dispatches.append(dispatch)
        self.views.append(model)


def _start(recorder, scheduler, **kwargs):
    return start(
        "surface",
        (),
        recorder.tick,
        recorder.update,
        recorder.view,
        scheduler=scheduler,
        **kwargs,
    )


class TestOnAnimationFrame:
    def test_first_frame_only_primes(self):
        scheduler = ManualFrameScheduler()
        steps: list[float] = []
        loop = on_animation_frame(scheduler, steps.append)

        assert scheduler.pending == 1
        scheduler.advance(1000.0)
        assert steps == []
        assert loop.last_ms == 1000.0
        assert scheduler.pending == 1

    def test_elapsed_is_delta_between_frames(self):
        scheduler = ManualFrameScheduler()
        steps: list[float] = []
        loop = on_animation_frame(scheduler, steps.append)

        for ts in (0.0, 16.0, 40.0, 50.0):
            scheduler.advance(ts)

        assert steps == [16.0, 24.0, 10.0]
        assert loop.frames == 3

    def test_dispose_allows_one_noop_frame(self):
        scheduler = ManualFrameScheduler()
        steps: list[float] = []
        loop = on_animation_frame(scheduler, steps.append)
        scheduler.advance(0.0)
        scheduler.advance(16.0)

        loop.dispose()
        assert scheduler.pending == 1
        scheduler.advance(32.0)

        assert steps == [16.0]
        assert scheduler.pending == 0

    def test_exception_stops_loop(self):
        scheduler = ManualFrameScheduler()

        def boom(elapsed_ms):
            raise ValueError("bad frame")

        on_animation_frame(scheduler, boom)
        scheduler.advance(0.0)
        with pytest.raises(ValueError):
            scheduler.advance(16.0)
        assert scheduler.pending == 0


class TestStart:
    def test_tick_update_then_view(self):
        recorder = Recorder()
        scheduler = ManualFrameScheduler()
        animation = _start(recorder, scheduler)

        scheduler.advance(100.0)
        assert animation.model == ()
        assert recorder.views == []

        scheduler.advance(116.0)
        assert animation.model == (("tick", 16.0),)
        assert recorder.views == [(("tick", 16.0),)]
        assert recorder.surfaces == ["surface"]
        assert animation.frames == 1

    def test_dispatch_applies_immediately(self):
        recorder = Recorder()
        scheduler = ManualFrameScheduler()
        animation = _start(recorder, scheduler)
        scheduler.advance(0.0)

        animation.dispatch("move-1")
        animation.dispatch("move-2")
        assert animation.model == ("move-1", "move-2")

        scheduler.advance(16.0)
        assert recorder.views[-1] == ("move-1", "move-2", ("tick", 16.0))

    def test_view_receives_dispatch(self):
        recorder = Recorder()
        scheduler = ManualFrameScheduler()
        animation = _start(recorder, scheduler)
        scheduler.advance(0.0)
        scheduler.advance(16.0)

        recorder.dispatches[0]("from-view")
        assert animation.model[-1] == "from-view"

    def test_subscribe_gets_host_and_dispatch(self):
        recorder = Recorder()
        scheduler = ManualFrameScheduler()
        seen: dict[str, object] = {}

        def subscribe(host, dispatch):
            seen["host"] = host
            dispatch("subscribed")

        animation = _start(recorder, scheduler, subscribe=subscribe, host="window")

        assert seen["host"] == "window"
        assert animation.model == ("subscribed",)

    def test_dispose(self):
        recorder = Recorder()
        scheduler = ManualFrameScheduler()
        animation = _start(recorder, scheduler)
        scheduler.run(3, frame_ms=10.0)
        assert animation.frames == 2

        animation.dispose()
        scheduler.run(3, frame_ms=10.0)

        assert animation.disposed
        assert animation.frames == 2
        assert len(recorder.views) == 2
        assert scheduler.pending == 0

    def test_update_error_halts_loop(self):
        scheduler = ManualFrameScheduler()

        def update(model, msg):
            if msg[0] == "tick":
                raise RuntimeError("update failed")
            return model

        start("surface", (), Recorder.tick, update, lambda s, d, m: None, scheduler=scheduler)
        scheduler.advance(0.0)
        with pytest.raises(RuntimeError):
            scheduler.advance(16.0)
        assert scheduler.pending == 0


def test_model_cell_holds_value():
    cell = ModelCell(1)
    cell.value = 2
    assert cell.value == 2
