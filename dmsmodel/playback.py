"""Controller-driven switching between a model's animations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .dms_format import Model

ANIMATION_CHANGE_COOLDOWN_MS = 500


@dataclass
class AnimationSwitcher:
    """Cycles through animations on button presses, with a debounce cooldown."""

    current: int = 0
    cooldown_ms: int = ANIMATION_CHANGE_COOLDOWN_MS
    last_change_ms: int = 0

    def press(self, model: Model, now_ms: int) -> Optional[str]:
        """Handle a press at ``now_ms``; return the new animation's name if switched."""
        if now_ms - self.last_change_ms < self.cooldown_ms:
            return None
        count = model.animation_count()
        if count <= 0:
            return None
        self.current = (self.current + 1) % count
        model.set_animation(self.current)
        self.last_change_ms = now_ms
        return model.animation_name(self.current)