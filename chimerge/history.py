"""
History tracking for the ChiMerge loop.

This module provides data structures for traceability of:
- Every round (interval count, chi cache, lowest chi)
- Every merge (the two intervals fused and their chi-square score)
- The stopping criterion that ended the loop
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

from .types import HaltReason


@dataclass
class MergeRecord:
    """
    Record of a single merge of two adjacent intervals.

    Attributes:
        round_number: Round in which the merge happened (1-based)
        index: Position of the lower interval before the merge
        left: (lower, upper, frequencies) of the lower interval
        right: (lower, upper, frequencies) of the upper interval
        chi_square: Chi-square score of the pair
    """
    round_number: int
    index: int
    left: Tuple[float, float, Tuple[int, ...]]
    right: Tuple[float, float, Tuple[int, ...]]
    chi_square: float

    @property
    def merged_frequencies(self) -> Tuple[int, ...]:
        return tuple(a + b for a, b in zip(self.left[2], self.right[2]))


def format_bounds(lower: float, frequencies: Tuple[int, ...]) -> str:
    """Format an interval as `[lower (f0, f1, ...)]`."""
    return f"[{lower} ({', '.join(str(f) for f in frequencies)})]"


@dataclass
class RoundRecord:
    """
    Record of one round of the merge loop.

    Attributes:
        round_number: 1-based round counter
        interval_count: Number of intervals when the round started
        intervals: (lower, frequencies) of each interval when the round started
        chi_values: Chi cache after it was populated
        lowest_chi: Lowest chi value in the cache (None without pairs)
        merges: Merges performed in the round
        halt_reason: Set on the last round, when a stopping criterion fired
    """
    round_number: int
    interval_count: int
    intervals: List[Tuple[float, Tuple[int, ...]]] = field(default_factory=list)
    chi_values: List[float] = field(default_factory=list)
    lowest_chi: Optional[float] = None
    merges: List[MergeRecord] = field(default_factory=list)
    halt_reason: Optional[HaltReason] = None

    def intervals_text(self) -> str:
        return "Intervals: " + ", ".join(format_bounds(*bounds) for bounds in self.intervals)

    def chi_pairs_text(self) -> str:
        """Each interval with the chi value against its right neighbour, `nil` for the last."""
        pairs = []
        for index, bounds in enumerate(self.intervals):
            score = self.chi_values[index] if index < len(self.chi_values) else None
            chi = "nil" if score is None else f"{round(score, 2)}"
            pairs.append(f"{format_bounds(*bounds)} -> {chi}")
        return "Chi values: " + ", ".join(pairs)


@dataclass
class MergeHistory:
    """
    Complete history of one discretization.

    Attributes:
        rounds: Round records in execution order
        parameters: Parameters used for the discretization
    """
    rounds: List[RoundRecord] = field(default_factory=list)
    parameters: Dict[str, Any] = field(default_factory=dict)

    def add_round(self, record: RoundRecord):
        """Add a round record."""
        self.rounds.append(record)

    @property
    def merges(self) -> List[MergeRecord]:
        """All merges, in the order they were performed."""
        return [merge for record in self.rounds for merge in record.merges]

    @property
    def halt_reason(self) -> Optional[HaltReason]:
        if not self.rounds:
            return None
        return self.rounds[-1].halt_reason

    def get_summary(self) -> str:
        """Generate human-readable summary of the merge history."""
        lines = []
        lines.append("=" * 60)
        lines.append("CHIMERGE HISTORY")
        lines.append("=" * 60)
        lines.append(f"Parameters: {self.parameters}")
        lines.append(f"Rounds: {len(self.rounds)}, merges: {len(self.merges)}")

        for record in self.rounds:
            lowest = f"{record.lowest_chi:.4f}" if record.lowest_chi is not None else "n/a"
            lines.append(
                f"\n  Round {record.round_number}: {record.interval_count} intervals, "
                f"lowest χ²={lowest}"
            )
            lines.append(f"    {record.intervals_text()}")
            lines.append(f"    {record.chi_pairs_text()}")
            for merge in record.merges:
                lines.append(
                    f"    MERGED [{merge.left[0]}..{merge.left[1]}] + "
                    f"[{merge.right[0]}..{merge.right[1]}] (χ²={merge.chi_square:.4f})"
                )
            if record.halt_reason is not None:
                lines.append(f"    HALTED: {record.halt_reason.value}")

        return "\n".join(lines)
