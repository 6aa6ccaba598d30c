from __future__ import annotations

import random


class ColorPicker:
    """Hands out translucent ``rgba(...)`` colours for chart series.

    Unseeded pickers give different colours on every request; pass a seed to
    make the sequence reproducible.
    """

    def __init__(self, seed: int | None = None, alpha: float = 0.7) -> None:
        self._rng = random.Random(seed)
        self._alpha = alpha

    def next_color(self) -> str:
        r, g, b = (self._rng.randrange(255) for _ in range(3))
        return f"rgba({r}, {g}, {b}, {self._alpha})"

    def colors(self, count: int) -> list[str]:
        return [self.next_color() for _ in range(count)]
