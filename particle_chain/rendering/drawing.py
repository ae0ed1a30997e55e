"""
Drawing helpers for the particle chain.

This module turns the chain model into surface calls: a scoped transform
per particle and one filled arrow silhouette inside it.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator

if TYPE_CHECKING:
    from particle_chain.core.chain import ChainModel, Particle
    from particle_chain.rendering.surface import Color, Surface


# Arrow silhouette, in units of half the base width.
ARROW_TAIL = 1.732
ARROW_NOTCH = 1.2


# =============================================================================
# Scoped Transforms
# =============================================================================

@dataclass(frozen=True, slots=True)
class Transform:
    """
    Coordinate change applied by ``with_context``.

    Attributes:
        translate: (x, y) offset, applied first
        rotate: Rotation in radians, applied second
        scale: (sx, sy) factors, applied last

    Fields left as None are skipped; an empty Transform is the identity.
    """
    translate: tuple[float, float] | None = None
    rotate: float | None = None
    scale: tuple[float, float] | None = None


IDENTITY = Transform()


@contextmanager
def with_context(surface: Surface, transform: Transform = IDENTITY) -> Iterator[Surface]:
    """
    Apply ``transform`` for the duration of the block.

    The surface state is restored on every exit path, so drawing inside the
    block never leaks into later draws.
    """
    surface.save()
    try:
        if transform.translate is not None:
            surface.translate(*transform.translate)
        if transform.rotate is not None:
            surface.rotate(transform.rotate)
        if transform.scale is not None:
            surface.scale(*transform.scale)
        yield surface
    finally:
        surface.restore()


def fill_path(
    surface: Surface,
    points: Iterable[tuple[float, float]],
    fill_style: Color | None = None,
) -> None:
    """
    Fill the closed polygon through ``points``.

    Args:
        surface: Target surface
        points: Polygon vertices, in the current coordinate frame
        fill_style: RGBA color; the surface's current style when None
    """
    pts = list(points)
    if not pts:
        return
    surface.begin_path()
    first_x, first_y = pts[0]
    surface.move_to(first_x, first_y)
    for x, y in pts[1:]:
        surface.line_to(x, y)
    if fill_style is not None:
        surface.fill_style = fill_style
    surface.fill()


def clear(surface: Surface, width: float, height: float) -> None:
    surface.clear_rect(0.0, 0.0, width, height)


# =============================================================================
# Particle Geometry
# =============================================================================

def particle_scale(particle_id: int, total: int) -> float:
    """
    Size factor of a link: close to 1 at the lead, 0 at the tail.

    Args:
        particle_id: 1-based position in the chain
        total: Number of particles (at least 1)

    Returns:
        cos(pi/2 * id/total), in [0, 1] for 1 <= id <= total
    """
    return math.cos(math.pi / 2.0 * (float(particle_id) / float(max(1, total))))


def particle_angle(particle: Particle) -> float:
    return math.atan2(particle.dy, particle.dx)


def arrow_points(base_width: float) -> list[tuple[float, float]]:
    """Arrow silhouette pointing along +x with its tip at the origin."""
    w = float(base_width) / 2.0
    return [
        (-w * ARROW_TAIL, -w),
        (0.0, 0.0),
        (-w * ARROW_TAIL, w),
        (-w * ARROW_NOTCH, 0.0),
    ]


def particle_transform(particle: Particle, total: int) -> Transform:
    scale = particle_scale(particle.id, total)
    return Transform(
        translate=(particle.x, particle.y),
        rotate=particle_angle(particle),
        scale=(scale, scale),
    )


def draw_particle(
    surface: Surface,
    particle: Particle,
    total: int,
    base_width: float,
    fill_style: Color = (255, 255, 255, 255),
) -> None:
    with with_context(surface, particle_transform(particle, total)) as ctx:
        fill_path(ctx, arrow_points(base_width), fill_style)


def view(surface: Surface, dispatch: Callable[[Any], None], model: ChainModel) -> None:  # noqa: ARG001
    """Clear the canvas and draw every particle in ascending ``id`` order."""
    settings = model.settings
    clear(surface, settings.canvas_width, settings.canvas_height)
    total = len(model.particles)
    for particle in model.particles:
        draw_particle(surface, particle, total, settings.particle_size, settings.fill_color)
