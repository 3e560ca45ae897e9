"""
Enumerations for ChiMerge.

- ChiStatus: state of one slot of the adjacent-pair chi cache
- HaltReason: which stopping criterion ended the merge loop
"""

from enum import Enum


class ChiStatus(Enum):
    """
    State of a chi-square cache slot.
    
    - STALE: No score yet, or a neighbour changed since it was computed.
             The slot is recomputed at the start of the next round.
             
    - COMPUTED: The slot holds the chi-square score of its adjacent pair.
    """
    STALE = "stale"
    COMPUTED = "computed"


class HaltReason(Enum):
    """
    Stopping criterion that ended the merge loop.
    
    - MAX_INTERVAL: Interval count fell strictly below max_interval
    - CHI_THRESHOLD: Lowest pairwise chi exceeded chi_threshold
    - SINGLE_INTERVAL: No adjacent pair left to compare
    """
    MAX_INTERVAL = "max_interval"
    CHI_THRESHOLD = "chi_threshold"
    SINGLE_INTERVAL = "single_interval"
