"""
Frame-driven animation runtime.

Drives a model through time with caller-supplied functions and knows
nothing about what the model represents:

- ``tick`` wraps the elapsed milliseconds into a domain message
- ``update`` folds one message into the model and returns the new model
- ``view`` draws the model onto the surface
- ``subscribe`` optionally wires host events to ``dispatch``

Frames are requested one at a time from a ``FrameScheduler``, the same way
a browser hands out animation frames. Everything runs on one thread.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Generic, Protocol, TypeVar

ModelT = TypeVar("ModelT")
MsgT = TypeVar("MsgT")

FrameCallback = Callable[[float], None]
Update = Callable[[ModelT, MsgT], ModelT]
View = Callable[[Any, Callable[[MsgT], None], ModelT], None]
Subscribe = Callable[[Any, Callable[[MsgT], None]], None]


class FrameScheduler(Protocol):
    def request_frame(self, callback: FrameCallback) -> None:
        """Call ``callback(timestamp_ms)`` once, on the next frame."""


class ManualFrameScheduler:
    """
    Scheduler driven by explicit timestamps.

    Used for headless runs and tests: ``advance(ts)`` fires the callbacks
    requested so far, in request order.
    """

    def __init__(self) -> None:
        self._pending: deque[FrameCallback] = deque()
        self.now_ms = 0.0

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def advance(self, timestamp_ms: float) -> int:
        self.now_ms = float(timestamp_ms)
        ready = list(self._pending)
        self._pending.clear()
        for callback in ready:
            callback(self.now_ms)
        return len(ready)

    def run(self, frames: int, frame_ms: float = 1000.0 / 60.0) -> None:
        """Fire ``frames`` frames spaced ``frame_ms`` apart."""
        for _ in range(max(0, int(frames))):
            self.advance(self.now_ms + frame_ms)


@dataclass
class ModelCell(Generic[ModelT]):
    """Owned slot holding the current model; written only by the runtime."""
    value: ModelT


@dataclass
class FrameLoop:
    last_ms: float | None = None
    disposed: bool = False
    frames: int = 0

    def dispose(self) -> None:
        self.disposed = True


def on_animation_frame(scheduler: FrameScheduler, step: Callable[[float], None]) -> FrameLoop:
    """
    Call ``step(elapsed_ms)`` on every frame after the first.

    The first frame only records its timestamp. Disposal is checked at the
    top of each callback, so one more no-op frame may fire. An exception
    from ``step`` propagates before the next frame is requested, which
    stops the loop.
    """
    loop = FrameLoop()

    def frame(timestamp_ms: float) -> None:
        if loop.disposed:
            return
        if loop.last_ms is not None:
            step(timestamp_ms - loop.last_ms)
            loop.frames += 1
        loop.last_ms = timestamp_ms
        scheduler.request_frame(frame)

    scheduler.request_frame(frame)
    return loop


class Animation(Generic[ModelT, MsgT]):
    """Handle returned by ``start``."""

    def __init__(self, cell: ModelCell[ModelT], loop: FrameLoop, dispatch: Callable[[MsgT], None]) -> None:
        self._cell = cell
        self._loop = loop
        self.dispatch = dispatch

    @property
    def model(self) -> ModelT:
        return self._cell.value

    @property
    def frames(self) -> int:
        return self._loop.frames

    @property
    def disposed(self) -> bool:
        return self._loop.disposed

    def dispose(self) -> None:
        self._loop.dispose()


def start(
    surface: Any,
    init: ModelT,
    tick: Callable[[float], MsgT],
    update: Update[ModelT, MsgT],
    view: View[MsgT, ModelT],
    subscribe: Subscribe[MsgT] | None = None,
    *,
    scheduler: FrameScheduler,
    host: Any = None,
) -> Animation[ModelT, MsgT]:
    """
    Start the frame loop.

    Args:
        surface: Drawing surface handed to ``view``
        init: Starting model
        tick: Builds the per-frame message from the elapsed milliseconds
        update: Pure fold step
        view: Draws the model; must not mutate it
        subscribe: Registers host event sources that call ``dispatch``
        scheduler: Source of animation frames
        host: Element passed to ``subscribe``

    Returns:
        Handle exposing the current model, ``dispatch`` and ``dispose``
    """
    cell = ModelCell(init)

    def dispatch(msg: MsgT) -> None:
        # Applied immediately; the next frame renders it.
        cell.value = update(cell.value, msg)

    if subscribe is not None:
        subscribe(host, dispatch)

    def step(elapsed_ms: float) -> None:
        cell.value = update(cell.value, tick(elapsed_ms))
        view(surface, dispatch, cell.value)

    loop = on_animation_frame(scheduler, step)
    return Animation(cell, loop, dispatch)
