"""The Worker: fatigue tracking for a dmm run.

Every node the interpreter visits makes the worker a little more tired. Once
the worker is deactivated and has not been checked on for a while, it stops
and asks what the current node evaluates to before it carries on.
"""
from __future__ import annotations
import random
import time
from enum import Enum
from typing import Callable, Optional

from .ast_nodes import ASTNode, Literal


class Mood(Enum):
    HAPPY = "=D"
    GLAD = "=)"
    OKAY = "=I"
    SAD = "=("
    AGGRESSIVE = "=X"
    DEPRESSIVE = "X/"
    DEACTIVATED = "Xc"

    def __str__(self):
        return self.value


# Calmest first. A level below a mood's bound has that mood; at or above the
# last bound the mood is DEACTIVATED.
MOOD_ORDER = (
    Mood.HAPPY, Mood.GLAD, Mood.OKAY, Mood.SAD,
    Mood.AGGRESSIVE, Mood.DEPRESSIVE, Mood.DEACTIVATED,
)
MOOD_RANGE = (20, 30, 40, 100, 1000, 10000)


def mood_for(level: int, mood_range: tuple[int, ...] = MOOD_RANGE) -> Mood:
    for mood, bound in zip(MOOD_ORDER, mood_range):
        if level < bound:
            return mood
    return Mood.DEACTIVATED


class Worker:
    """Tracks fatigue for one interpreter."""

    def __init__(self, strict: bool = False, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None,
                 mood_range: tuple[int, ...] = MOOD_RANGE, max_growth: int = 5,
                 cooldown: tuple[float, float] = (30.0, 120.0)):
        self.strict = strict          # --strict: never tired, never asks
        self.rng = rng or random.Random()
        self.clock = clock or time.monotonic
        self.mood_range = mood_range
        self.max_growth = max_growth
        self.cooldown_range = cooldown
        self.fatigue = 0
        self._prev_mood = Mood.HAPPY
        self.last_reset = self.clock()
        self.cooldown = self._draw_cooldown()

    def _draw_cooldown(self) -> float:
        low, high = self.cooldown_range
        return self.rng.uniform(low, high)

    @property
    def mood(self) -> Mood:
        return mood_for(self.fatigue, self.mood_range)

    @property
    def exhausted(self) -> bool:
        return self.mood == Mood.DEACTIVATED

    def call(self) -> bool:
        """One node visited. Returns True when this changed the mood."""
        if self.strict:
            return False
        self.fatigue += self.rng.randint(1, self.max_growth)
        return self.mood_changed()

    def mood_changed(self) -> bool:
        new_mood = self.mood
        changed = new_mood != self._prev_mood
        self._prev_mood = new_mood
        return changed

    def cooled_down(self) -> bool:
        return self.clock() - self.last_reset >= self.cooldown

    def wants_check(self, node: ASTNode) -> bool:
        """Whether the worker stops to ask about ``node``. Bare literals are
        never asked about."""
        if self.strict or isinstance(node, Literal):
            return False
        return self.exhausted and self.cooled_down()

    def reset(self):
        """A correct answer: rested again, with a new cooldown."""
        self.fatigue = 0
        self.last_reset = self.clock()
        self.cooldown = self._draw_cooldown()
