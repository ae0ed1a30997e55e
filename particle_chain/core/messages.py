"""
Messages understood by the particle chain.

The set is closed: ``chain.update`` handles every variant of ``Msg`` and a
static type checker flags any branch that is missing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from particle_chain.core.chain import Position


@dataclass(frozen=True, slots=True)
class Tick:
    """One animation frame; ``elapsed_ms`` since the previous frame."""
    elapsed_ms: float


@dataclass(frozen=True, slots=True)
class MouseMove:
    """Pointer moved, in surface-local coordinates."""
    position: Position


@dataclass(frozen=True, slots=True)
class UpdateCanvasSize:
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class UpdateSegmentCount:
    count: int


@dataclass(frozen=True, slots=True)
class UpdateFollowSpeed:
    speed: float


@dataclass(frozen=True, slots=True)
class UpdateParticleSize:
    size: float


Msg = Union[
    Tick,
    MouseMove,
    UpdateCanvasSize,
    UpdateSegmentCount,
    UpdateFollowSpeed,
    UpdateParticleSize,
]
