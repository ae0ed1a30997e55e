"""
Particle chain model.

The lead particle (``id == 1``) follows the pointer, or wanders around the
canvas center while the pointer has not moved yet. Every other particle
follows the link immediately ahead of it. All functions here are pure:
they return new values and never mutate the model they are given.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field, replace
from typing import Iterable, Never, NoReturn

from particle_chain.core.messages import (
    Msg,
    MouseMove,
    Tick,
    UpdateCanvasSize,
    UpdateFollowSpeed,
    UpdateParticleSize,
    UpdateSegmentCount,
)
from particle_chain.params import DEFAULT_WANDER_RADIUS, ChainSettings

# Elapsed milliseconds are divided by this before scaling the follow step.
TIME_DIVISOR = 10.0

SPAWN_X = -50.0
SPAWN_Y = -50.0
WANDER_SPEED_MIN = 0.03
WANDER_SPEED_SPAN = 0.03


@dataclass(frozen=True, slots=True)
class Position:
    x: float
    y: float


# Sentinel: the pointer has not moved yet.
EMPTY_POSITION = Position(0.0, 0.0)


@dataclass(frozen=True, slots=True)
class Particle:
    """
    One link of the chain.

    Attributes:
        id: 1-based index; ``id - 2`` is the index of the link it follows
        x, y: Current location
        dx, dy: Last computed displacement toward the target (render only)
        angle_x, angle_y: Phase of the idle wander motion
        speed_x, speed_y: Phase increment per step
        radius: Idle wander radius around the canvas center
    """
    id: int
    x: float = SPAWN_X
    y: float = SPAWN_Y
    dx: float = 0.0
    dy: float = 0.0
    angle_x: float = 0.0
    angle_y: float = 0.0
    speed_x: float = WANDER_SPEED_MIN
    speed_y: float = WANDER_SPEED_MIN
    radius: float = DEFAULT_WANDER_RADIUS


@dataclass(frozen=True, slots=True)
class ChainModel:
    particles: tuple[Particle, ...]
    settings: ChainSettings
    mouse_position: Position = EMPTY_POSITION
    # Generator state for the next re-creation, from ``random.Random.getstate()``.
    rng_state: tuple = field(default_factory=lambda: random.Random().getstate(), repr=False)


def create_particle(index: int, rng: random.Random, radius: float = DEFAULT_WANDER_RADIUS) -> Particle:
    return Particle(
        id=index + 1,
        angle_x=math.pi * 2.0 * rng.random(),
        angle_y=math.pi * 2.0 * rng.random(),
        speed_x=WANDER_SPEED_SPAN * rng.random() + WANDER_SPEED_MIN,
        speed_y=WANDER_SPEED_SPAN * rng.random() + WANDER_SPEED_MIN,
        radius=radius,
    )


def create_particles(settings: ChainSettings, rng: random.Random) -> tuple[Particle, ...]:
    """Build a fresh chain of ``segment_count + 1`` particles."""
    return tuple(
        create_particle(index, rng, settings.wander_radius)
        for index in range(settings.segment_count + 1)
    )


def init_model(settings: ChainSettings, rng: random.Random | None = None) -> ChainModel:
    settings = settings.clamp()
    if rng is None:
        rng = random.Random(settings.seed)
    return ChainModel(
        particles=create_particles(settings, rng),
        settings=settings,
        mouse_position=EMPTY_POSITION,
        rng_state=rng.getstate(),
    )


# =============================================================================
# Physics
# =============================================================================

def _follow(particle: Particle, target_x: float, target_y: float, factor: float) -> Particle:
    dx = target_x - particle.x
    dy = target_y - particle.y
    return replace(
        particle,
        x=particle.x + dx * factor,
        y=particle.y + dy * factor,
        dx=dx,
        dy=dy,
    )


def _wander(particle: Particle, settings: ChainSettings) -> Particle:
    target_x = settings.canvas_width / 2.0 + math.cos(particle.angle_x) * particle.radius
    target_y = settings.canvas_height / 2.0 + math.sin(particle.angle_y) * particle.radius
    # Angles grow without bound; only their cos/sin are read.
    return replace(
        particle,
        x=target_x,
        y=target_y,
        dx=target_x - particle.x,
        dy=target_y - particle.y,
        angle_x=particle.angle_x + particle.speed_x,
        angle_y=particle.angle_y + particle.speed_y,
    )


def update_particle(
    particle: Particle,
    particles: tuple[Particle, ...],
    settings: ChainSettings,
    mouse_position: Position,
    scaled_delta: float = 1.0,
) -> Particle:
    """
    Advance one particle by one step.

    ``particles`` is the snapshot taken before the step, so a follower aims
    at where its leader was on the previous frame.
    """
    factor = settings.follow_speed * scaled_delta

    if particle.id > 1:
        aim = particles[particle.id - 2]
        return _follow(particle, aim.x, aim.y, factor)

    if settings.idle_wander_enabled and mouse_position == EMPTY_POSITION:
        return _wander(particle, settings)

    return _follow(particle, mouse_position.x, mouse_position.y, factor)


def tick(model: ChainModel, elapsed_ms: float) -> ChainModel:
    scaled_delta = float(elapsed_ms) / TIME_DIVISOR
    snapshot = model.particles
    particles = tuple(
        update_particle(particle, snapshot, model.settings, model.mouse_position, scaled_delta)
        for particle in snapshot
    )
    return replace(model, particles=particles)


# =============================================================================
# Message handling
# =============================================================================

def fold_mouse_move(model: ChainModel, msgs: Iterable[Msg]) -> ChainModel:
    """Keep the last ``MouseMove`` of the batch; other messages are ignored."""
    position: Position | None = None
    for msg in msgs:
        if isinstance(msg, MouseMove):
            position = msg.position
    if position is None:
        return model
    return replace(model, mouse_position=position)


def _unhandled(msg: Never) -> NoReturn:
    raise TypeError(f"Unhandled message: {msg!r}")


def update(model: ChainModel, msg: Msg) -> ChainModel:
    if isinstance(msg, Tick):
        return tick(model, msg.elapsed_ms)
    elif isinstance(msg, MouseMove):
        return fold_mouse_move(model, [msg])
    elif isinstance(msg, UpdateCanvasSize):
        settings = replace(model.settings, canvas_width=msg.width, canvas_height=msg.height)
        return replace(model, settings=settings.clamp())
    elif isinstance(msg, UpdateSegmentCount):
        # ``id`` encodes the following order: rebuild, never resize in place.
        settings = replace(model.settings, segment_count=msg.count).clamp()
        rng = random.Random()
        rng.setstate(model.rng_state)
        particles = create_particles(settings, rng)
        return replace(
            model,
            particles=particles,
            settings=settings,
            mouse_position=EMPTY_POSITION,
            rng_state=rng.getstate(),
        )
    elif isinstance(msg, UpdateFollowSpeed):
        settings = replace(model.settings, follow_speed=msg.speed)
        return replace(model, settings=settings.clamp())
    elif isinstance(msg, UpdateParticleSize):
        settings = replace(model.settings, particle_size=msg.size)
        return replace(model, settings=settings.clamp())
    else:
        _unhandled(msg)


def settings_messages(old: ChainSettings, new: ChainSettings) -> list[Msg]:
    """Messages that move a model configured with ``old`` to ``new``."""
    msgs: list[Msg] = []
    if (old.canvas_width, old.canvas_height) != (new.canvas_width, new.canvas_height):
        msgs.append(UpdateCanvasSize(new.canvas_width, new.canvas_height))
    if old.segment_count != new.segment_count:
        msgs.append(UpdateSegmentCount(new.segment_count))
    if old.follow_speed != new.follow_speed:
        msgs.append(UpdateFollowSpeed(new.follow_speed))
    if old.particle_size != new.particle_size:
        msgs.append(UpdateParticleSize(new.particle_size))
    return msgs
