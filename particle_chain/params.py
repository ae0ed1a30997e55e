from __future__ import annotations

import json
import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

DEFAULT_WANDER_RADIUS = 150.0


@dataclass(frozen=True, slots=True)
class ChainSettings:
    particle_size: float = 25.0  # half-width of each arrow silhouette
    follow_speed: float = 0.1  # fraction of the remaining distance closed per step
    segment_count: int = 16  # trailing particles besides the lead
    canvas_width: float = 600.0
    canvas_height: float = 600.0

    idle_wander_enabled: bool = True
    wander_radius: float = DEFAULT_WANDER_RADIUS
    fill_color: tuple[int, int, int, int] = (255, 255, 255, 255)
    background: tuple[int, int, int] = (0, 0, 0)
    target_fps: int = 60
    seed: int = 1
    title: str = "Particle chain"

    def clamp(self) -> "ChainSettings":
        follow_speed = float(self.follow_speed)
        if not math.isfinite(follow_speed):
            follow_speed = 0.0
        return replace(
            self,
            particle_size=max(1.0, float(self.particle_size)),
            follow_speed=max(0.0, follow_speed),
            segment_count=max(0, int(self.segment_count)),
            canvas_width=max(1.0, float(self.canvas_width)),
            canvas_height=max(1.0, float(self.canvas_height)),
            idle_wander_enabled=bool(self.idle_wander_enabled),
            wander_radius=max(0.0, float(self.wander_radius)),
            fill_color=_clamp_color(self.fill_color, 4),
            background=_clamp_color(self.background, 3),
            target_fps=max(10, int(self.target_fps)),
            seed=int(self.seed),
            title=str(self.title or "Particle chain"),
        )

    def validate(self) -> list[str]:
        warnings: list[str] = []

        if self.follow_speed == 0.0:
            warnings.append("follow_speed=0 freezes every particle.")
        elif self.follow_speed > 1.0:
            warnings.append("follow_speed > 1 overshoots the target.")

        if self.idle_wander_enabled:
            half = min(self.canvas_width, self.canvas_height) / 2.0
            if self.wander_radius > half:
                warnings.append("wander_radius is larger than half the canvas; the idle lead leaves the surface.")
        elif self.wander_radius != DEFAULT_WANDER_RADIUS:
            warnings.append("wander_radius ignored while idle_wander_enabled is false.")

        return warnings

    @classmethod
    def load(cls, path: str | Path) -> "ChainSettings":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("The settings file must contain a JSON object.")
        names = {f.name for f in fields(cls)}
        filtered: dict[str, Any] = {k: v for k, v in data.items() if k in names}
        for key in ("fill_color", "background"):
            if key in filtered:
                filtered[key] = tuple(filtered[key])
        try:
            return cls(**filtered).clamp()
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid settings in {path}: {e}") from e


def _clamp_color(color: Any, size: int) -> tuple[int, ...]:
    values = [max(0, min(255, int(c))) for c in tuple(color)[:size]]
    while len(values) < size:
        values.append(255)
    return tuple(values)
