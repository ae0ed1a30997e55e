"""
Keyboard callbacks for the particle chain.

Keys are translated into tuning messages and dispatched, so every change
goes through the same update function as pointer events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from particle_chain.core.messages import (
    Msg,
    UpdateFollowSpeed,
    UpdateParticleSize,
    UpdateSegmentCount,
)

if TYPE_CHECKING:
    from particle_chain.params import ChainSettings


class KeyHandler:
    """
    Maps key names to messages.

    UP/DOWN change the segment count, RIGHT/LEFT the follow speed and
    PLUS/MINUS the particle size.
    """

    SEGMENT_STEP = 1
    FOLLOW_SPEED_STEP = 0.01
    SIZE_STEP = 1.0

    def __init__(
        self,
        *,
        get_settings: Callable[[], "ChainSettings"],
        dispatch: Callable[[Msg], None],
        on_change: Callable[[str], None] | None = None,
    ):
        self._get_settings = get_settings
        self._dispatch = dispatch
        self._on_change = on_change

    def message_for(self, key: str) -> Msg | None:
        settings = self._get_settings()
        if key in ("up", "down"):
            step = self.SEGMENT_STEP if key == "up" else -self.SEGMENT_STEP
            count = max(0, settings.segment_count + step)
            if count == settings.segment_count:
                return None
            return UpdateSegmentCount(count)
        if key in ("right", "left"):
            step = self.FOLLOW_SPEED_STEP if key == "right" else -self.FOLLOW_SPEED_STEP
            # Rounded so repeated nudges do not accumulate float noise.
            return UpdateFollowSpeed(max(0.0, round(settings.follow_speed + step, 4)))
        if key in ("plus", "minus"):
            step = self.SIZE_STEP if key == "plus" else -self.SIZE_STEP
            return UpdateParticleSize(max(1.0, settings.particle_size + step))
        return None

    def handle_key(self, key: str) -> bool:
        """
        Process a key press.

        Returns:
            True if the key produced a message
        """
        msg = self.message_for(key)
        if msg is None:
            return False
        self._dispatch(msg)
        if self._on_change is not None:
            self._on_change(describe(msg))
        return True


def describe(msg: Msg) -> str:
    if isinstance(msg, UpdateSegmentCount):
        return f"segment_count={msg.count}"
    if isinstance(msg, UpdateFollowSpeed):
        return f"follow_speed={msg.speed:g}"
    if isinstance(msg, UpdateParticleSize):
        return f"particle_size={msg.size:g}"
    return repr(msg)
