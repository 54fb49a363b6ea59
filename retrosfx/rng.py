"""Random sources for parameter randomization.

Randomization never swaps a process-global generator: the engine receives the
source it should draw from, so a seeded call cannot leak into later unseeded
ones and there is nothing to restore when rendering fails.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Protocol, TypeVar

_LOGGER = logging.getLogger("retrosfx.rng")

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280

T = TypeVar("T")
Seed = int | float


class RandomSource(Protocol):
    def random(self) -> float: ...


class LcgRandom:
    """Linear-congruential source: ``state = (state*9301 + 49297) mod 233280``."""

    def __init__(self, seed: Seed) -> None:
        self.seed = seed
        # Reduced once so huge seeds cannot overflow the first multiplication.
        self._state: Seed = seed % LCG_MODULUS

    @property
    def state(self) -> Seed:
        return self._state

    def random(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS

    def __repr__(self) -> str:
        return f"LcgRandom(seed={self.seed!r})"


class RandomController:
    """Hands out the source a randomization call should use."""

    def __init__(self, ambient: RandomSource | None = None) -> None:
        self._ambient: RandomSource = ambient if ambient is not None else random.Random()

    @property
    def ambient(self) -> RandomSource:
        return self._ambient

    def source_for(self, seed: Seed | None) -> RandomSource:
        if seed is None:
            return self._ambient
        return LcgRandom(seed)

    def with_seed(self, seed: Seed | None, fn: Callable[[RandomSource], T]) -> T:
        """Run ``fn`` with a seeded source, or the ambient one when ``seed`` is None."""
        source = self.source_for(seed)
        if seed is not None:
            _LOGGER.debug("Randomizing with %r", source)
        return fn(source)
