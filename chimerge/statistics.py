"""
Chi-square statistic used by ChiMerge.

Chi-square test statistic:
    χ² = Σᵢ Σⱼ (Aᵢⱼ - Eᵢⱼ)² / Eᵢⱼ

    where Eᵢⱼ = (Rᵢ × Cⱼ) / N  (expected frequency under independence)

    Aᵢⱼ: observed count of class j in interval i
    Rᵢ:  number of examples in interval i
    Cⱼ:  number of examples of class j over the compared intervals
    N:   total number of examples over the compared intervals

Cells with Eᵢⱼ = 0 contribute nothing. Expected frequencies below a floor
(0.5 by default) are raised to the floor, so a near-empty cell cannot
dominate the statistic.

Critical value for a significance level α:
    χ²_crit = F⁻¹(1 - α; ddl),  ddl = (number of classes - 1)
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy import stats

from .exceptions import DegenerateStatisticError

logger = logging.getLogger(__name__)


@dataclass
class ChiSquareResult:
    """
    Full result of a chi-square computation.

    Attributes:
        statistic: The chi-square statistic (floored expected frequencies)
        degrees_of_freedom: (r-1)(c-1) over non-empty rows and columns
        p_value: P(χ²_ddl ≥ statistic)
        expected_frequencies: Expected frequencies after applying the floor
        observed_frequencies: Matrix of observed frequencies
    """
    statistic: float
    degrees_of_freedom: int
    p_value: float
    expected_frequencies: np.ndarray
    observed_frequencies: np.ndarray


def as_frequency_table(events: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Stack frequency vectors into an events × classes matrix.

    Args:
        events: Two or more equal-length vectors of non-negative counts

    Returns:
        2-D float array, one row per event
    """
    if len(events) < 2:
        raise ValueError("At least two frequency vectors are required")

    lengths = {len(event) for event in events}
    if len(lengths) != 1:
        raise ValueError(f"Frequency vectors must have equal length, got {sorted(lengths)}")
    if 0 in lengths:
        raise ValueError("Frequency vectors must not be empty")

    table = np.array([np.asarray(event, dtype=float) for event in events])
    if np.any(table < 0):
        raise ValueError("Frequencies must be non-negative")
    return table


def compute_expected_frequencies(observed: np.ndarray) -> np.ndarray:
    """
    Compute expected frequencies under independence.

        Eᵢⱼ = (Rᵢ × Cⱼ) / N

    Args:
        observed: r × c matrix of observed frequencies

    Returns:
        r × c matrix of expected frequencies (zeros when N = 0)
    """
    row_sums = observed.sum(axis=1, keepdims=True)  # Rᵢ
    col_sums = observed.sum(axis=0, keepdims=True)  # Cⱼ
    total = observed.sum()  # N

    if total == 0:
        return np.zeros_like(observed, dtype=float)

    return (row_sums * col_sums) / total


def chi_threshold_for_significance(significance: float, n_classes: int) -> float:
    """
    Chi-square critical value used as a merge threshold.

    Args:
        significance: Significance level α in (0, 1)
        n_classes: Number of classes; degrees of freedom = n_classes - 1

    Returns:
        χ² value exceeded with probability α under independence
    """
    if not (0 < significance < 1):
        raise ValueError("significance must be in (0, 1)")
    if n_classes < 2:
        raise ValueError("At least two classes are needed for a chi-square threshold")

    return float(stats.chi2.ppf(1.0 - significance, n_classes - 1))


class ChiSquareTest:
    """
    Chi-square independence score between events (intervals) and classes.

    Parameters:
        expected_freq_threshold: Floor for expected frequencies (default 0.5).
                                 Expected values that are zero are skipped,
                                 values in (0, floor) are replaced by the floor.
        strict: Raise DegenerateStatisticError when every frequency is zero
                instead of scoring 0.0
    """

    def __init__(self, expected_freq_threshold: float = 0.5, strict: bool = False):
        if expected_freq_threshold < 0:
            raise ValueError("expected_freq_threshold must be ≥ 0")
        self.expected_freq_threshold = expected_freq_threshold
        self.strict = strict

    def _floored_expected(self, observed: np.ndarray) -> np.ndarray:
        expected = compute_expected_frequencies(observed)
        small = (expected > 0) & (expected < self.expected_freq_threshold)
        expected[small] = self.expected_freq_threshold
        return expected

    def _score(self, observed: np.ndarray, expected: np.ndarray) -> float:
        if observed.sum() == 0:
            if self.strict:
                raise DegenerateStatisticError(
                    "Chi-square over frequency tables with a zero grand total"
                )
            logger.warning("Chi-square requested over all-zero frequencies, scoring 0.0")
            return 0.0

        # Zero expected frequency means the row or column is empty
        mask = expected > 0
        contributions = (observed[mask] - expected[mask]) ** 2 / expected[mask]
        # Added one cell at a time, event-major: batch merge compares scores exactly
        return float(sum(contributions.tolist()))

    def test(self, *events: Sequence[float]) -> float:
        """
        Compute the chi-square score of the given events.

        Args:
            *events: One frequency vector per event, each with one count per class

        Returns:
            Non-negative chi-square score. Low scores mean the events have
            similar class distributions.
        """
        observed = as_frequency_table(events)
        return self._score(observed, self._floored_expected(observed))

    def evaluate(self, *events: Sequence[float]) -> ChiSquareResult:
        """
        Compute the chi-square score together with degrees of freedom and p-value.

        Args:
            *events: One frequency vector per event

        Returns:
            ChiSquareResult
        """
        observed = as_frequency_table(events)
        expected = self._floored_expected(observed)
        chi_sq = self._score(observed, expected)

        non_zero_rows = np.sum(observed.sum(axis=1) > 0)
        non_zero_cols = np.sum(observed.sum(axis=0) > 0)
        ddl = int(max(0, (non_zero_rows - 1) * (non_zero_cols - 1)))

        if ddl > 0:
            p_value = float(1.0 - stats.chi2.cdf(chi_sq, ddl))
        else:
            p_value = 1.0  # No degrees of freedom means no test possible

        return ChiSquareResult(
            statistic=chi_sq,
            degrees_of_freedom=ddl,
            p_value=p_value,
            expected_frequencies=expected,
            observed_frequencies=observed
        )
