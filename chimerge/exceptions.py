"""
Exceptions raised by the ChiMerge package.

ConfigurationError is raised before any merge work starts.
CacheInvariantError signals a programming defect in chi cache
maintenance and is never caught inside the package.
"""


class ChiMergeError(Exception):
    """Base class for all ChiMerge errors."""


class ConfigurationError(ChiMergeError, ValueError):
    """Invalid column selection, parameter value or class label."""


class DegenerateStatisticError(ChiMergeError, ArithmeticError):
    """Chi-square requested over frequency tables whose grand total is zero."""


class CacheInvariantError(ChiMergeError, RuntimeError):
    """The chi cache and the interval list went out of sync after a merge."""
