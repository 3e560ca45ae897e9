"""
Interval and chi cache cell representation.

An interval covers a contiguous range [lower, upper] of the attribute and
carries one observation count per class. Only the bounds of the folded
values are kept; the lower bound is the interval's representative value.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .types import ChiStatus


@dataclass(eq=False)
class Interval:
    """
    A contiguous range of attribute values with its class frequencies.

    Attributes:
        lower: Smallest attribute value folded into the interval
        upper: Largest attribute value folded into the interval
        frequencies: Count of examples per class (index = class index)
    """
    lower: float
    upper: float
    frequencies: np.ndarray

    @classmethod
    def singleton(cls, value: float, class_index: int, n_classes: int) -> 'Interval':
        """Create an interval holding a single example."""
        frequencies = np.zeros(n_classes, dtype=np.int64)
        frequencies[class_index] = 1
        return cls(lower=value, upper=value, frequencies=frequencies)

    def __str__(self) -> str:
        return f"[{self.lower} ({', '.join(str(f) for f in self.frequency_list())})]"

    @property
    def n_values(self) -> int:
        """Number of examples folded into the interval."""
        return int(self.frequencies.sum())

    @property
    def n_classes(self) -> int:
        return len(self.frequencies)

    def add(self, value: float, class_index: int) -> None:
        """Fold one more example into the interval."""
        self.lower = min(self.lower, value)
        self.upper = max(self.upper, value)
        self.frequencies[class_index] += 1

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def merge(self, other: 'Interval') -> 'Interval':
        """
        Fuse with another interval.

        Args:
            other: Interval with the same number of classes

        Returns:
            New interval spanning both, with summed frequencies
        """
        if other.n_classes != self.n_classes:
            raise ValueError(
                f"Cannot merge intervals with {self.n_classes} and {other.n_classes} classes"
            )
        return Interval(
            lower=min(self.lower, other.lower),
            upper=max(self.upper, other.upper),
            frequencies=self.frequencies + other.frequencies
        )

    def frequency_list(self) -> List[int]:
        return [int(f) for f in self.frequencies]


@dataclass
class ChiCell:
    """
    One slot of the chi cache: the score of an adjacent interval pair.

    Attributes:
        status: STALE until computed, COMPUTED afterwards
        score: Chi-square score (None while stale)
    """
    status: ChiStatus = ChiStatus.STALE
    score: Optional[float] = None

    @classmethod
    def computed(cls, score: float) -> 'ChiCell':
        return cls(status=ChiStatus.COMPUTED, score=score)

    @property
    def is_stale(self) -> bool:
        return self.status is ChiStatus.STALE

    def invalidate(self) -> None:
        """Mark the cell for recomputation."""
        self.status = ChiStatus.STALE
        self.score = None
