"""The Shouter: how dmm prints things."""
from __future__ import annotations
import random
import time
from typing import Callable, Optional

from .worker import Mood, mood_for

COUGHS = ("*hust*", "*keuch*", "*arr*")

# Voice damage above this and the Shouter can only cough
VOICE_LIMIT = 1000


class Shouter:
    """Writes text with randomly upper-cased characters.

    The louder the shout, the more characters come out in capitals and the
    more the voice suffers. In robot mode text is written as is.
    """

    def __init__(self, robot: bool = False, rng: Optional[random.Random] = None,
                 write: Callable[[str], None] = print,
                 sleep: Callable[[float], None] = time.sleep, delay: float = 0.05):
        self.robot = robot
        self.rng = rng or random.Random()
        self.write = write
        self.sleep = sleep
        self.delay = delay
        self.voice_damage = 0

    @property
    def mood(self) -> Mood:
        return mood_for(self.voice_damage)

    def emit(self, intensity: int, text: str):
        if self.robot:
            self.write(text)
            return

        if self.voice_damage > VOICE_LIMIT:
            self.write(f"{self.mood} {self.rng.choice(COUGHS)}")
            return

        chance = (intensity - 1) * 10  # percent
        shouted = "".join(
            ch.upper() if chance > self.rng.randrange(100) else ch
            for ch in text
        )
        self.sleep(self.delay * intensity)
        self.write(shouted)
        self.voice_damage += intensity
