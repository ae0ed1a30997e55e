from __future__ import annotations

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable

from particle_chain.core.chain import ChainModel, Position, init_model, settings_messages, update
from particle_chain.core.messages import Msg, MouseMove, Tick, UpdateCanvasSize
from particle_chain.core.runtime import Animation, FrameScheduler, ManualFrameScheduler, start
from particle_chain.params import ChainSettings
from particle_chain.rendering.drawing import view
from particle_chain.rendering.surface import RecordingSurface
from particle_chain.ui.callbacks import KeyHandler

AUTORELOAD_INTERVAL_S = 0.5
HEADLESS_FRAME_MS = 1000.0 / 60.0


def subscribe(window: Any, dispatch: Callable[[Msg], None]) -> None:
    """Forward pointer moves and resizes from a pyglet window."""

    def pointer(x: int, y: int) -> None:
        # pyglet reports bottom-left origin; the chain works top-left.
        dispatch(MouseMove(Position(float(x), float(window.height - y))))

    def on_mouse_motion(x: int, y: int, dx: int, dy: int) -> None:  # noqa: ARG001
        pointer(x, y)

    def on_mouse_drag(x: int, y: int, dx: int, dy: int, buttons: int, modifiers: int) -> None:  # noqa: ARG001
        pointer(x, y)

    def on_resize(width: int, height: int) -> None:
        dispatch(UpdateCanvasSize(float(width), float(height)))

    window.push_handlers(
        on_mouse_motion=on_mouse_motion,
        on_mouse_drag=on_mouse_drag,
        on_resize=on_resize,
    )


class ParticleChainApp:
    def __init__(
        self,
        settings: ChainSettings | None = None,
        *,
        params_path: Path | None = None,
        watch: bool = False,
    ) -> None:
        self.params_path = params_path
        self.settings = (settings or ChainSettings()).clamp()
        self.watch = bool(watch and params_path is not None)
        self.animation: Animation[ChainModel, Msg] | None = None
        self.keys: KeyHandler | None = None

        self._last_params_mtime: float | None = None
        if self.params_path is not None and self.params_path.exists():
            self._last_params_mtime = self.params_path.stat().st_mtime
        self._last_autoreload = time.monotonic()

        for warning in self.settings.validate():
            print(f"[params] {warning}")

    @property
    def model(self) -> ChainModel:
        if self.animation is None:
            raise RuntimeError("The animation has not been started.")
        return self.animation.model

    def start(self, surface: Any, scheduler: FrameScheduler, host: Any = None) -> Animation[ChainModel, Msg]:
        self.animation = start(
            surface,
            init_model(self.settings),
            Tick,
            update,
            view,
            subscribe if host is not None else None,
            scheduler=scheduler,
            host=host,
        )
        self.keys = KeyHandler(
            get_settings=lambda: self.model.settings,
            dispatch=self.animation.dispatch,
            on_change=lambda text: print(f"[chain] {text}"),
        )
        return self.animation

    def stop(self) -> None:
        if self.animation is not None:
            self.animation.dispose()

    def run(self) -> None:
        from particle_chain.rendering.pyglet_renderer import run_pyglet

        s = self.settings
        run_pyglet(
            width=int(s.canvas_width),
            height=int(s.canvas_height),
            background_rgb=s.background,
            launch=lambda window, surface, scheduler: self.start(surface, scheduler, host=window),
            on_key=self._on_key,
            on_exit=self.stop,
            on_poll=self.maybe_autoreload if self.watch else None,
            get_caption=self._get_caption,
            target_fps=s.target_fps,
            title=s.title,
        )

    def run_headless(self, frames: int, frame_ms: float = HEADLESS_FRAME_MS) -> ChainModel:
        """Run ``frames`` frames against a recording surface and return the final model."""
        surface = RecordingSurface()
        scheduler = ManualFrameScheduler()
        animation = self.start(surface, scheduler)
        scheduler.advance(0.0)
        for _ in range(max(0, int(frames))):
            surface.reset()
            scheduler.advance(scheduler.now_ms + frame_ms)
            if self.watch:
                self.maybe_autoreload()
        model = animation.model
        self.stop()

        lead = model.particles[0]
        tail = model.particles[-1]
        print(f"[headless] {animation.frames} frames, {len(model.particles)} particles, {surface.fills} fills last frame")
        print(f"[headless] lead=({lead.x:.2f}, {lead.y:.2f}) tail=({tail.x:.2f}, {tail.y:.2f})")
        return model

    def maybe_autoreload(self) -> None:
        if self.params_path is None or not self.params_path.exists():
            return
        now = time.monotonic()
        if (now - self._last_autoreload) < AUTORELOAD_INTERVAL_S:
            return
        self._last_autoreload = now

        mtime = self.params_path.stat().st_mtime
        if self._last_params_mtime is None or mtime > self._last_params_mtime:
            self._last_params_mtime = mtime
            self.reload_params()

    def reload_params(self) -> None:
        if self.params_path is None or self.animation is None:
            return
        try:
            loaded = ChainSettings.load(self.params_path)
        except (OSError, ValueError) as e:
            print(f"Params reload failed: {e}", file=sys.stderr)
            return

        current = self.model.settings
        for msg in settings_messages(current, loaded):
            self.animation.dispatch(msg)

        live = replace(
            loaded,
            canvas_width=current.canvas_width,
            canvas_height=current.canvas_height,
            segment_count=current.segment_count,
            follow_speed=current.follow_speed,
            particle_size=current.particle_size,
        )
        if live != current:
            print("[params] some changes apply on restart only (idle wander, colors, fps, seed, title).")
        for warning in loaded.validate():
            print(f"[params] {warning}")
        print(f"[params] reloaded {self.params_path}")

    def _on_key(self, k: str) -> None:
        if self.keys is not None:
            self.keys.handle_key(k)

    def _get_caption(self) -> str:
        if self.animation is None:
            return self.settings.title
        s = self.model.settings
        return f"{s.title} | segments {s.segment_count} | follow {s.follow_speed:g} | size {s.particle_size:g}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Particle chain following the mouse pointer")
    parser.add_argument("--params", type=Path, default=None, help="JSON settings file")
    parser.add_argument("--segments", type=int, default=None, help="Trailing particles besides the lead")
    parser.add_argument("--follow-speed", type=float, default=None, help="Fraction of the distance closed per step")
    parser.add_argument("--size", type=float, default=None, help="Particle size")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the wander phases")
    parser.add_argument("--no-idle", action="store_true", help="Disable idle wandering before the pointer moves")
    parser.add_argument("--watch", action="store_true", help="Reload --params when the file changes")
    parser.add_argument("--headless", action="store_true", help="Run without a window and print the final state")
    parser.add_argument("--frames", type=int, default=600, help="Frames to run in --headless mode")
    return parser


def settings_from_args(args: argparse.Namespace) -> ChainSettings:
    settings = ChainSettings.load(args.params) if args.params is not None else ChainSettings()
    overrides: dict[str, Any] = {}
    if args.segments is not None:
        overrides["segment_count"] = args.segments
    if args.follow_speed is not None:
        overrides["follow_speed"] = args.follow_speed
    if args.size is not None:
        overrides["particle_size"] = args.size
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.no_idle:
        overrides["idle_wander_enabled"] = False
    return replace(settings, **overrides).clamp()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = settings_from_args(args)
    except (OSError, ValueError) as e:
        print(f"[params] {e}", file=sys.stderr)
        return 2

    app = ParticleChainApp(settings, params_path=args.params, watch=args.watch)
    if args.headless:
        app.run_headless(args.frames)
        return 0
    try:
        app.run()
    except RuntimeError as e:
        print(f"[chain] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
