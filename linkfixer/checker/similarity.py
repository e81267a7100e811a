"""String similarity metrics used to rank replacement candidates.

Any callable ``(a, b) -> float`` returning a symmetric score in ``[0, 1]``
(1.0 only for identical strings) can stand in for :func:`dice_coefficient`.
"""

from __future__ import annotations

from collections import Counter
from typing import Callable

Similarity = Callable[[str, str], float]


def _bigrams(text: str) -> Counter[str]:
    return Counter(text[i : i + 2] for i in range(len(text) - 1))


def dice_coefficient(first: str, second: str) -> float:
    """Sørensen-Dice coefficient over character bigrams, whitespace ignored."""
    first = "".join(first.split())
    second = "".join(second.split())

    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    first_grams = _bigrams(first)
    second_grams = _bigrams(second)
    overlap = sum((first_grams & second_grams).values())
    return (2.0 * overlap) / (len(first) + len(second) - 2)
