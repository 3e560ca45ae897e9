"""
Configuration for a ChiMerge discretization.

Defaults follow the usual ChiMerge setup for a three-class problem:
    max_interval = 6
    chi_threshold = 4.61  (χ² critical value, 2 degrees of freedom, α = 0.10)
    expected_freq_threshold = 0.5
    batch_merge = False
"""

import math
import numbers
from dataclasses import dataclass, asdict, fields, replace as dataclass_replace
from typing import Any, Dict

import numpy as np

from .exceptions import ConfigurationError
from .statistics import chi_threshold_for_significance


DEFAULT_MAX_INTERVAL = 6
DEFAULT_CHI_THRESHOLD = 4.61
DEFAULT_EXPECTED_FREQ_THRESHOLD = 0.5


@dataclass(frozen=True)
class ChiMergeConfig:
    """
    Tuning parameters for one IntervalTable.

    Attributes:
        max_interval: Merging stops once the interval count falls strictly
                      below this value
        chi_threshold: Merging stops once the lowest pairwise chi-square
                       is strictly greater than this value
        expected_freq_threshold: Floor applied to small expected frequencies
                                 in the chi-square computation
        batch_merge: Merge every pair tied at the lowest chi in one round
    """
    max_interval: int = DEFAULT_MAX_INTERVAL
    chi_threshold: float = DEFAULT_CHI_THRESHOLD
    expected_freq_threshold: float = DEFAULT_EXPECTED_FREQ_THRESHOLD
    batch_merge: bool = False

    def __post_init__(self):
        """Validate parameters."""
        if isinstance(self.max_interval, bool) or not isinstance(self.max_interval, numbers.Integral):
            raise ConfigurationError("max_interval must be an integer")
        if self.max_interval < 1:
            raise ConfigurationError("max_interval must be ≥ 1")
        object.__setattr__(self, "max_interval", int(self.max_interval))

        for name in ("chi_threshold", "expected_freq_threshold"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
            if math.isnan(value) or value < 0:
                raise ConfigurationError(f"{name} must be ≥ 0, got {value!r}")
            object.__setattr__(self, name, float(value))

        if not isinstance(self.batch_merge, (bool, np.bool_)):
            raise ConfigurationError(f"batch_merge must be a boolean, got {self.batch_merge!r}")
        object.__setattr__(self, "batch_merge", bool(self.batch_merge))

    @classmethod
    def from_significance(
        cls,
        significance: float,
        n_classes: int,
        **kwargs: Any
    ) -> 'ChiMergeConfig':
        """
        Build a config whose chi_threshold is the χ² critical value for a
        significance level.

        Args:
            significance: Significance level α in (0, 1)
            n_classes: Number of classes (degrees of freedom = n_classes - 1)
            **kwargs: Remaining config fields

        Returns:
            Validated ChiMergeConfig
        """
        if "chi_threshold" in kwargs:
            raise ConfigurationError("Pass either significance or chi_threshold, not both")
        try:
            threshold = chi_threshold_for_significance(significance, n_classes)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        return cls(chi_threshold=threshold, **kwargs)

    def replace(self, **overrides: Any) -> 'ChiMergeConfig':
        """Return a copy with some fields overridden (None values are ignored)."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"Unknown ChiMerge parameter(s): {sorted(unknown)}")
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return dataclass_replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a plain dictionary."""
        return asdict(self)
