from __future__ import annotations

import sys
import time
import traceback
from typing import Any, Callable

import numpy as np

from . import transform as tf
from .surface import Color


POLL_INTERVAL_S = 0.25


def _require_pyglet() -> Any:
    try:
        import pyglet  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("Missing dependency: install pyglet (pip install pyglet).") from e
    return pyglet


def clock_ms() -> float:
    return time.perf_counter() * 1000.0


class PygletFrameScheduler:
    """
    One-shot frame requests on the pyglet clock.

    A frame callback that raises stops the animation (nothing requests the
    next frame) but not the window: the error is reported on stderr and kept
    in ``error``.
    """

    def __init__(self, target_fps: int = 60) -> None:
        self._pyglet = _require_pyglet()
        self.interval = 1.0 / max(10, int(target_fps))
        self.error: Exception | None = None

    def request_frame(self, callback: Callable[[float], None]) -> None:
        def fire(dt: float) -> None:  # noqa: ARG001
            self.run_frame(callback, clock_ms())

        self._pyglet.clock.schedule_once(fire, self.interval)

    def run_frame(self, callback: Callable[[float], None], timestamp: float) -> bool:
        try:
            callback(timestamp)
        except Exception as exc:
            self.error = exc
            print(f"[chain] frame loop stopped: {exc}", file=sys.stderr)
            traceback.print_exc()
            return False
        return True


class PygletSurface:
    """
    Canvas-style surface on top of pyglet shapes.

    Coordinates have a top-left origin like a browser canvas and are flipped
    into pyglet's bottom-left window space when a path is filled. Filled paths
    become polygons in a batch that ``draw`` renders from ``on_draw``.
    """

    def __init__(self, window: Any) -> None:
        self._pyglet = _require_pyglet()
        self._window = window
        self._batch = self._pyglet.graphics.Batch()
        self._shapes: list[Any] = []
        self._stack: list[tuple[np.ndarray, Color]] = []
        self._path: list[tuple[float, float]] = []
        self._matrix = tf.identity()
        self.fill_style: Color = (255, 255, 255, 255)

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:  # noqa: ARG002
        # Retained shapes cannot be partially erased; any clear drops them all.
        for shape in self._shapes:
            shape.delete()
        self._shapes.clear()

    def save(self) -> None:
        self._stack.append((self._matrix.copy(), self.fill_style))

    def restore(self) -> None:
        if self._stack:
            self._matrix, self.fill_style = self._stack.pop()

    def translate(self, x: float, y: float) -> None:
        self._matrix = self._matrix @ tf.translation(x, y)

    def rotate(self, radians: float) -> None:
        self._matrix = self._matrix @ tf.rotation(radians)

    def scale(self, sx: float, sy: float) -> None:
        self._matrix = self._matrix @ tf.scaling(sx, sy)

    def begin_path(self) -> None:
        self._path = []

    def move_to(self, x: float, y: float) -> None:
        self._path = [(float(x), float(y))]

    def line_to(self, x: float, y: float) -> None:
        self._path.append((float(x), float(y)))

    def fill(self) -> None:
        if len(self._path) < 3:
            return
        to_window = tf.flip_y(self._window.height) @ self._matrix
        coords = [tuple(pt) for pt in tf.apply(to_window, self._path).tolist()]
        polygon = self._pyglet.shapes.Polygon(*coords, color=tuple(self.fill_style), batch=self._batch)
        self._shapes.append(polygon)

    def draw(self) -> None:
        self._batch.draw()


def create_window(*, width: int, height: int, title: str) -> Any:
    pyglet = _require_pyglet()
    from pyglet import gl  # type: ignore

    config_candidates: list[dict[str, Any]] = [
        {"double_buffer": True, "sample_buffers": 1, "samples": 4},
        {"double_buffer": True},
    ]

    for cfg_kwargs in config_candidates:
        try:
            config = gl.Config(**cfg_kwargs)
            return pyglet.window.Window(
                width=width,
                height=height,
                caption=title,
                config=config,
                resizable=True,
                vsync=True,
            )
        except Exception:
            continue

    try:
        return pyglet.window.Window(width=width, height=height, caption=title, resizable=True, vsync=True)
    except Exception as e:
        raise RuntimeError(f"Could not open a drawing window: {e}") from e


def run_pyglet(
    *,
    width: int,
    height: int,
    background_rgb: tuple[int, int, int],
    launch: Callable[[Any, PygletSurface, PygletFrameScheduler], Any],
    on_key: Callable[[str], None] | None = None,
    on_exit: Callable[[], None] | None = None,
    on_poll: Callable[[], None] | None = None,
    get_caption: Callable[[], str] | None = None,
    target_fps: int,
    title: str,
) -> None:
    """
    Open a window and run the pyglet event loop until it closes.

    ``launch(window, surface, scheduler)`` starts the animation; ``on_poll``
    runs a few times per second for housekeeping such as file watching.
    """
    pyglet = _require_pyglet()
    from pyglet import gl  # type: ignore
    from pyglet.window import key  # type: ignore

    window = create_window(width=width, height=height, title=title)

    bg_r, bg_g, bg_b = background_rgb
    gl.glClearColor(bg_r / 255.0, bg_g / 255.0, bg_b / 255.0, 1.0)
    gl.glEnable(gl.GL_BLEND)
    gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)

    surface = PygletSurface(window)
    scheduler = PygletFrameScheduler(target_fps)
    launch(window, surface, scheduler)

    mapping = {
        key.UP: "up",
        key.DOWN: "down",
        key.LEFT: "left",
        key.RIGHT: "right",
        key.PLUS: "plus",
        key.EQUAL: "plus",
        key.NUM_ADD: "plus",
        key.MINUS: "minus",
        key.NUM_SUBTRACT: "minus",
        key.ESCAPE: "esc",
    }

    def on_draw() -> None:
        window.clear()
        surface.draw()
        if get_caption is not None:
            window.set_caption(get_caption())

    def on_key_press(symbol: int, modifiers: int) -> Any:  # noqa: ARG001
        k = mapping.get(symbol)
        if k is None:
            return None
        if k == "esc":
            # close() does not dispatch on_close.
            on_close()
            window.close()
            return pyglet.event.EVENT_HANDLED
        if on_key is not None:
            on_key(k)
        return pyglet.event.EVENT_HANDLED

    def on_close() -> None:
        if on_exit is not None:
            on_exit()
        pyglet.app.exit()

    window.push_handlers(on_draw=on_draw, on_key_press=on_key_press, on_close=on_close)
    if on_poll is not None:
        pyglet.clock.schedule_interval(lambda dt: on_poll(), POLL_INTERVAL_S)
    pyglet.app.run(1.0 / max(10, target_fps))
