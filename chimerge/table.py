"""
ChiMerge interval table.

This is the main class implementing the ChiMerge discretization of one
numeric attribute. Key components:

Algorithm Overview:
1. Construction: one interval per distinct attribute value, with per-class counts
2. Populate: compute χ² for every adjacent pair whose cached score is stale
3. Stop check: halt if the interval count is below max_interval or the
   lowest χ² exceeds chi_threshold
4. Merge: fuse the pair with the lowest χ² (every tied pair if batch_merge)
5. Invalidate the cached scores next to each merge point and repeat

Cache invariant:
    len(chi) == len(intervals) - 1
"""

import logging
import math
from typing import Any, Hashable, Iterable, Iterator, List, Optional, Sequence

import numpy as np

from .config import ChiMergeConfig
from .exceptions import CacheInvariantError, ConfigurationError
from .history import MergeHistory, MergeRecord, RoundRecord
from .interval import ChiCell, Interval
from .statistics import ChiSquareTest
from .types import HaltReason

logger = logging.getLogger(__name__)


def first_seen_labels(rows: Iterable[Sequence[Any]]) -> List[Hashable]:
    """Distinct class labels (last tuple element) in first-seen order."""
    labels: List[Hashable] = []
    seen = set()
    for row in rows:
        label = row[-1]
        if label not in seen:
            seen.add(label)
            labels.append(label)
    return labels


class IntervalTable:
    """
    Ordered intervals of one attribute plus the cache of adjacent-pair χ² scores.

    Parameters:
        rows: Data tuples (attribute values..., class label)
        column: Index of the attribute to discretize
        class_list: Class labels in index order (default: first-seen order in rows)
        config: ChiMergeConfig (default parameters when omitted)
        **overrides: Individual config fields overriding `config`

    Attributes:
        intervals: Current intervals, ascending by lower bound
        chi: ChiCell per adjacent pair, chi[i] scores (intervals[i], intervals[i+1])
        initial_intervals: Intervals as built from the data, before merging
        class_list: Class labels; frequencies[i] counts class_list[i]
        rounds: Number of rounds run so far
        halt_reason: Stopping criterion that ended the loop (None while running)
        history: Round and merge records
    """

    def __init__(
        self,
        rows: Iterable[Sequence[Any]],
        column: int,
        class_list: Optional[Sequence[Hashable]] = None,
        config: Optional[ChiMergeConfig] = None,
        **overrides: Any
    ):
        config = config if config is not None else ChiMergeConfig()
        if overrides:
            config = config.replace(**overrides)

        self.column = column
        self.config = config
        self.chi_tester = ChiSquareTest(expected_freq_threshold=config.expected_freq_threshold)

        self.intervals: List[Interval] = []
        self.chi: List[ChiCell] = []
        self.class_list: List[Hashable] = []
        self.rounds = 0
        self.halt_reason: Optional[HaltReason] = None

        self.history = MergeHistory()
        self.history.parameters = {"column": column, **config.to_dict()}

        self.sort_data(rows, column, class_list)
        self.initial_intervals = [
            Interval(iv.lower, iv.upper, iv.frequencies.copy()) for iv in self.intervals
        ]
        logger.debug("Interval count: %d", len(self.intervals))

    def __len__(self) -> int:
        return len(self.intervals)

    def __iter__(self) -> Iterator[Interval]:
        return iter(self.intervals)

    @property
    def n_classes(self) -> int:
        return len(self.class_list)

    @property
    def is_halted(self) -> bool:
        return self.halt_reason is not None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def sort_data(
        self,
        rows: Iterable[Sequence[Any]],
        column: int,
        class_list: Optional[Sequence[Hashable]] = None
    ) -> None:
        """
        Build the initial partition: one interval per distinct attribute value.

        Args:
            rows: Data tuples (attribute values..., class label)
            column: Index of the attribute to discretize
            class_list: Class labels in index order (default: first-seen order)
        """
        rows = list(rows)
        if class_list is None:
            class_list = first_seen_labels(rows)
        self.class_list = list(class_list)
        class_index = {label: i for i, label in enumerate(self.class_list)}
        n_classes = len(self.class_list)

        if isinstance(column, bool) or not isinstance(column, (int, np.integer)) or column < 0:
            raise ConfigurationError(f"Attribute column must be a non-negative integer, got {column!r}")

        buckets = {}
        for row in rows:
            if column >= len(row) - 1:
                raise ConfigurationError(
                    f"Selected attribute index {column} out of range for a row of "
                    f"{len(row) - 1} attribute(s)"
                )
            label = row[-1]
            if label not in class_index:
                raise ConfigurationError(f"Unknown class label {label!r}")

            value = float(row[column])
            if math.isnan(value):
                raise ConfigurationError(f"Missing value in attribute column {column}")

            interval = buckets.get(value)
            if interval is not None:
                interval.add(value, class_index[label])
            else:
                buckets[value] = Interval.singleton(value, class_index[label], n_classes)

        self.intervals = sorted(buckets.values(), key=lambda interval: interval.lower)
        self.chi = [ChiCell() for _ in range(max(0, len(self.intervals) - 1))]

    # ------------------------------------------------------------------
    # Merge loop
    # ------------------------------------------------------------------

    def chimerge(self) -> 'IntervalTable':
        """
        Run merge rounds until a stopping criterion is met.

        Returns:
            self, with the final intervals and chi cache
        """
        if self.is_halted:
            return self

        while True:
            self.rounds += 1
            record = RoundRecord(round_number=self.rounds, interval_count=len(self.intervals))
            logger.debug("Round %d: %d intervals", self.rounds, len(self.intervals))

            self.populate_chi()
            lowest_chi = self.lowest_chi()
            record.intervals = [
                (interval.lower, tuple(interval.frequency_list())) for interval in self.intervals
            ]
            record.chi_values = [cell.score for cell in self.chi]
            record.lowest_chi = lowest_chi
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(record.intervals_text())
                logger.debug(record.chi_pairs_text())

            reason = self._stop_reason(lowest_chi)
            if reason is not None:
                record.halt_reason = reason
                self.history.add_round(record)
                self.halt_reason = reason
                logger.info(
                    "Column %s halted on %s after %d round(s) with %d interval(s)",
                    self.column, reason.value, self.rounds, len(self.intervals)
                )
                return self

            record.merges = self.merge_by_chi(lowest_chi, self.rounds)
            self.history.add_round(record)

    def _stop_reason(self, lowest_chi: Optional[float]) -> Optional[HaltReason]:
        """
        Check stopping criteria, interval count first.

        Args:
            lowest_chi: Lowest score in the populated cache (None without pairs)

        Returns:
            The criterion that fired, or None to keep merging
        """
        if len(self.intervals) < self.config.max_interval:
            return HaltReason.MAX_INTERVAL
        if lowest_chi is None:
            return HaltReason.SINGLE_INTERVAL
        if lowest_chi > self.config.chi_threshold:
            return HaltReason.CHI_THRESHOLD
        return None

    def populate_chi(self) -> None:
        """Compute the score of every stale adjacent pair."""
        for index, cell in enumerate(self.chi):
            if cell.is_stale:
                self.chi[index] = ChiCell.computed(self.chitest_at(index))

    def chitest_at(self, index: int) -> float:
        """χ² score of intervals[index] and intervals[index + 1]."""
        return self.chi_tester.test(
            self.intervals[index].frequencies,
            self.intervals[index + 1].frequencies
        )

    def lowest_chi(self) -> Optional[float]:
        """Lowest computed score in the cache, None if nothing is computed."""
        scores = [cell.score for cell in self.chi if not cell.is_stale]
        if not scores:
            return None
        return min(scores)

    def _index_of(self, score: float) -> Optional[int]:
        for index, cell in enumerate(self.chi):
            if not cell.is_stale and cell.score == score:
                return index
        return None

    def merge_by_chi(self, score: float, round_number: int = 0) -> List[MergeRecord]:
        """
        Merge the first pair whose cached score equals `score`.

        With batch_merge, keep merging pairs that still hold exactly `score`
        until none is left. Pairs invalidated by an earlier merge of the same
        round are not candidates.

        Args:
            score: The round's lowest χ²
            round_number: Round counter stored in the merge records

        Returns:
            Records of the merges performed
        """
        merges = []
        index = self._index_of(score)
        while index is not None:
            merges.append(self.merge(index, round_number))
            if not self.config.batch_merge:
                break
            index = self._index_of(score)
        return merges

    def merge(self, index: int, round_number: int = 0) -> MergeRecord:
        """
        Fuse intervals[index] and intervals[index + 1] and update the chi cache.

        Args:
            index: Position of the lower interval of the pair
            round_number: Round counter stored in the merge record

        Returns:
            MergeRecord of the fused pair
        """
        left = self.intervals[index]
        right = self.intervals[index + 1]
        record = MergeRecord(
            round_number=round_number,
            index=index,
            left=(left.lower, left.upper, tuple(left.frequency_list())),
            right=(right.lower, right.upper, tuple(right.frequency_list())),
            chi_square=self.chi[index].score
        )
        logger.debug("Merging interval %s and %s by chi %.3f", left, right, record.chi_square)

        self.intervals[index] = left.merge(right)
        del self.intervals[index + 1]
        self.update_chi_after_merge(index)
        self._check_cache()
        return record

    def update_chi_after_merge(self, index: int) -> None:
        """Invalidate the neighbours of a merge point and drop the merged pair's slot."""
        if index > 0:
            self.chi[index - 1].invalidate()
        if index + 1 < len(self.chi):
            self.chi[index + 1].invalidate()
        del self.chi[index]

    def _check_cache(self) -> None:
        expected = max(0, len(self.intervals) - 1)
        if len(self.chi) != expected:
            raise CacheInvariantError(
                f"Chi cache holds {len(self.chi)} value(s) for {len(self.intervals)} interval(s)"
            )

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def boundaries(self) -> List[float]:
        """Lower bound of every interval."""
        return [interval.lower for interval in self.intervals]

    @property
    def cut_points(self) -> List[float]:
        """Lower bounds of every interval but the first."""
        return self.boundaries[1:]

    def chi_values(self) -> List[Optional[float]]:
        """Cached score per adjacent pair, None where stale."""
        return [cell.score for cell in self.chi]

    def frequency_matrix(self) -> np.ndarray:
        """intervals × classes matrix of counts."""
        if not self.intervals:
            return np.zeros((0, self.n_classes), dtype=np.int64)
        return np.vstack([interval.frequencies for interval in self.intervals])

    def class_totals(self) -> np.ndarray:
        """Number of examples per class over all intervals."""
        return self.frequency_matrix().sum(axis=0)

    def assign(self, values: Any) -> np.ndarray:
        """
        Map attribute values to interval indices.

        Each interval is closed on its lower bound; values below the first
        boundary fall into interval 0.

        Args:
            values: Scalar or array-like of attribute values

        Returns:
            Array of interval indices
        """
        return np.searchsorted(np.asarray(self.cut_points, dtype=float), values, side="right")
