"""
Drawing surface contract.

Any object with these methods can be drawn on: the pyglet adapter in
``pyglet_renderer`` and the ``RecordingSurface`` used for headless runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

Color = tuple[int, int, int, int]


class Surface(Protocol):
    fill_style: Color

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None: ...

    def save(self) -> None: ...

    def restore(self) -> None: ...

    def translate(self, x: float, y: float) -> None: ...

    def rotate(self, radians: float) -> None: ...

    def scale(self, sx: float, sy: float) -> None: ...

    def begin_path(self) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def fill(self) -> None: ...


@dataclass
class RecordingSurface:
    """
    Surface that records every call as ``(name, *args)``.

    ``depth`` tracks the save/restore nesting so callers can check that
    every scoped transform was reverted.
    """
    fill_style: Color = (255, 255, 255, 255)
    calls: list[tuple[Any, ...]] = field(default_factory=list)
    depth: int = 0
    fills: int = 0
    _saved: list[Color] = field(default_factory=list, repr=False)

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        self.calls.append(("clear_rect", x, y, width, height))

    def save(self) -> None:
        self._saved.append(self.fill_style)
        self.depth += 1
        self.calls.append(("save",))

    def restore(self) -> None:
        if not self._saved:
            raise RuntimeError("restore() without matching save()")
        self.fill_style = self._saved.pop()
        self.depth -= 1
        self.calls.append(("restore",))

    def translate(self, x: float, y: float) -> None:
        self.calls.append(("translate", x, y))

    def rotate(self, radians: float) -> None:
        self.calls.append(("rotate", radians))

    def scale(self, sx: float, sy: float) -> None:
        self.calls.append(("scale", sx, sy))

    def begin_path(self) -> None:
        self.calls.append(("begin_path",))

    def move_to(self, x: float, y: float) -> None:
        self.calls.append(("move_to", x, y))

    def line_to(self, x: float, y: float) -> None:
        self.calls.append(("line_to", x, y))

    def fill(self) -> None:
        self.fills += 1
        self.calls.append(("fill", self.fill_style))

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def reset(self) -> None:
        self.calls.clear()
        self.fills = 0
