import math
from typing import Iterable


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; 62.5 must become 63
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)
