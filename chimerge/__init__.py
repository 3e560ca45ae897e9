"""
ChiMerge

Bottom-up discretization of numeric attributes. Adjacent intervals are
merged while their class distributions are statistically
indistinguishable, judged by a chi-square independence score.

Reference:
- Kerber, R. (1992). ChiMerge: Discretization of numeric attributes.
  Proceedings of AAAI-92, 123-128.
"""

from .config import ChiMergeConfig
from .dataset import Dataset
from .exceptions import (
    ChiMergeError,
    ConfigurationError,
    DegenerateStatisticError,
    CacheInvariantError,
)
from .history import MergeHistory, MergeRecord, RoundRecord
from .interval import Interval, ChiCell
from .statistics import ChiSquareTest, ChiSquareResult, chi_threshold_for_significance
from .table import IntervalTable
from .types import ChiStatus, HaltReason
from .report import (
    format_report,
    interval_summary_table,
    successive_merges_table,
    chi_pairs_text,
)

__version__ = "1.0.0"

__all__ = [
    "ChiMergeConfig",
    "Dataset",
    "ChiMergeError",
    "ConfigurationError",
    "DegenerateStatisticError",
    "CacheInvariantError",
    "MergeHistory",
    "MergeRecord",
    "RoundRecord",
    "Interval",
    "ChiCell",
    "ChiSquareTest",
    "ChiSquareResult",
    "chi_threshold_for_significance",
    "IntervalTable",
    "ChiStatus",
    "HaltReason",
    "format_report",
    "interval_summary_table",
    "successive_merges_table",
    "chi_pairs_text",
]
