from __future__ import annotations

import logging
import secrets
from typing import Any, Iterable, Mapping, Sequence, Tuple, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

MASK64 = 0xFFFFFFFFFFFFFFFF
SEED_MULTIPLIER = 2685821657736338717
GOLDEN_GAMMA = 0x9E3779B97F4A7C15

Weights = Union[Mapping[Any, float], Iterable[Tuple[Any, float]]]


def _finalize(z: int) -> int:
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & MASK64
    return z ^ (z >> 31)


def mix_seed(seed: int) -> int:
    """Derive an independent 64-bit sub-seed from ``seed``.

    Used where a secondary pass needs its own stream without drawing from
    (and thereby shifting) the main generation stream.
    """
    return _finalize((seed + GOLDEN_GAMMA) & MASK64)


class Prng:
    """Seedable 64-bit pseudo-random stream (splitmix64).

    Every helper is derived from :meth:`next` using integer arithmetic only, so
    two instances seeded alike produce the same sequence on every platform.
    Generation code must draw all of its randomness from one of these.
    """

    __slots__ = ("_state", "initial_seed")

    def __init__(self, seed: int = 0) -> None:
        self._state = 0
        self.initial_seed = 0
        self.seed(seed)

    @classmethod
    def from_entropy(cls) -> "Prng":
        seed = secrets.randbits(64)
        logger.info("No seed provided; using environment entropy seed=%d", seed)
        return cls(seed)

    def seed(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"seed must be non-negative, got {value}")
        self.initial_seed = value & MASK64
        # Spread the seed so small consecutive seeds do not share low bits
        self._state = (self.initial_seed * SEED_MULTIPLIER) & MASK64

    def next(self) -> int:
        self._state = (self._state + GOLDEN_GAMMA) & MASK64
        return _finalize(self._state)

    # ---- Derived helpers -------------------------------------------------
    def random(self) -> float:
        """Uniform float in [0, 1) from the top 53 bits."""
        return (self.next() >> 11) * (1.0 / (1 << 53))

    def randrange(self, start: int, stop: int) -> int:
        """Uniform integer in the half-open range [start, stop)."""
        span = stop - start
        if span <= 0:
            raise ValueError(f"empty range for randrange({start}, {stop})")
        # Rejection sampling keeps the draw unbiased for spans that do not
        # divide 2**64.
        limit = (1 << 64) - ((1 << 64) % span)
        while True:
            r = self.next()
            if r < limit:
                return start + r % span

    def randint(self, a: int, b: int) -> int:
        """Uniform integer in the closed range [a, b]."""
        return self.randrange(a, b + 1)

    def chance(self, probability: float) -> bool:
        return self.random() < probability

    def coin(self) -> bool:
        return (self.next() >> 63) == 1

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise ValueError("Prng.choice() received an empty sequence")
        return seq[self.randrange(0, len(seq))]

    def weighted_choice(self, weights: Weights) -> Any:
        """
        Select a key by cumulative weight. Accepts a mapping or a sequence of
        (key, weight) pairs; order of iteration decides the cumulative layout.
        Zero weights are skipped. Raises ValueError if a weight is negative or
        every weight is zero.
        """
        items = list(weights.items()) if isinstance(weights, Mapping) else list(weights)
        if not items:
            raise ValueError("weighted_choice requires a non-empty weights mapping")

        keys = []
        cumulative = []
        total = 0.0
        for key, w in items:
            if w < 0:
                raise ValueError(f"Weight for {key!r} must be non-negative, got {w}")
            if w == 0:
                continue
            total += w
            keys.append(key)
            cumulative.append(total)

        if total == 0:
            raise ValueError("All weights are zero; cannot make a weighted choice")

        r = self.random() * total
        for i, c in enumerate(cumulative):
            if r < c:
                return keys[i]
        # Float rounding can leave r == total
        return keys[-1]

    def __repr__(self) -> str:
        return f"Prng(seed={self.initial_seed})"


__all__ = ["Prng", "mix_seed", "MASK64"]
