"""
Reporting for ChiMerge tables.

Provides text and DataFrame views of a discretized attribute:

- Interval bounds and class frequencies
- Chi-square value of every adjacent pair
- Merge parameters and halt reason
- Successive merges, round by round
"""

from typing import List, Optional, Tuple

import pandas as pd

from .interval import Interval
from .table import IntervalTable


def format_interval(interval: Interval) -> str:
    """Format an interval as `[lower (f0, f1, ...)]`."""
    return str(interval)


def format_chi(score: Optional[float], digits: int = 2) -> str:
    """Format a cached chi value, `nil` when it is stale or absent."""
    if score is None:
        return "nil"
    return f"{round(score, digits)}"


def intervals_text(table: IntervalTable) -> str:
    """Interval count and intervals on two lines."""
    intervals = ", ".join(format_interval(interval) for interval in table.intervals)
    return f"Interval count: {len(table)}\nIntervals: {intervals}"


def chi_pairs_text(table: IntervalTable) -> str:
    """Each interval with the chi value against its right neighbour."""
    chi = table.chi_values()
    pairs = []
    for index, interval in enumerate(table.intervals):
        score = chi[index] if index < len(chi) else None
        pairs.append(f"{format_interval(interval)} -> {format_chi(score)}")
    return "Chi values: " + ", ".join(pairs)


def interval_summary_table(table: IntervalTable) -> pd.DataFrame:
    """
    Generate a summary table of the current intervals.

    Args:
        table: An IntervalTable (merged or not)

    Returns:
        DataFrame with one row per interval: bounds, example count,
        one column per class label and the chi value to the next interval
    """
    chi = table.chi_values()
    rows = []
    for index, interval in enumerate(table.intervals):
        row = {
            'Interval': index + 1,
            'Lower': interval.lower,
            'Upper': interval.upper,
            'Count': interval.n_values,
        }
        for label, freq in zip(table.class_list, interval.frequency_list()):
            row[str(label)] = freq
        row['Chi'] = chi[index] if index < len(chi) else None
        rows.append(row)

    columns = ['Interval', 'Lower', 'Upper', 'Count'] + [str(l) for l in table.class_list] + ['Chi']
    return pd.DataFrame(rows, columns=columns)


def successive_merges_table(table: IntervalTable) -> Tuple[Optional[pd.DataFrame], str]:
    """
    Generate a "Successive merges" table.

    Shows each merge performed by the loop with:
    - Round number
    - The two intervals fused
    - Chi-square statistic
    - Class frequencies of the merged interval

    Args:
        table: An IntervalTable after chimerge()

    Returns:
        Tuple of (DataFrame with the data, formatted string for display)
    """
    merges = table.history.merges
    if not merges:
        return None, "No merge operations were performed."

    rows = []
    for merge in merges:
        rows.append({
            'Round': merge.round_number,
            'Left': f"[{merge.left[0]}..{merge.left[1]}]",
            'Right': f"[{merge.right[0]}..{merge.right[1]}]",
            'Chi-square': merge.chi_square,
            'Frequencies': ", ".join(str(f) for f in merge.merged_frequencies),
        })
    df = pd.DataFrame(rows)

    lines = []
    lines.append("╔" + "═" * 76 + "╗")
    lines.append(f"║{'TABLE: Successive Merges':^76}║")
    lines.append(f"║{'Column ' + str(table.column):^76}║")
    lines.append("╠" + "═" * 76 + "╣")
    lines.append(f"║ {'Round':^7} │ {'Left':^16} │ {'Right':^16} │ {'Chi-square':^10} │ {'Freqs':^12} ║")
    lines.append("╠" + "═" * 76 + "╣")
    for _, row in df.iterrows():
        chi2_str = f"{row['Chi-square']:.3f}"
        lines.append(
            f"║ {row['Round']:^7} │ {row['Left']:^16} │ {row['Right']:^16} │ "
            f"{chi2_str:^10} │ {row['Frequencies']:^12} ║"
        )
    lines.append("╚" + "═" * 76 + "╝")
    lines.append("")
    lines.append(f"Summary: {len(merges)} merge(s) over {table.rounds} round(s)")

    return df, "\n".join(lines)


def merge_params_text(table: IntervalTable) -> str:
    """Parameters block for a discretized column."""
    config = table.config
    halt = table.halt_reason.value if table.halt_reason is not None else "running"
    lines = [
        "#" * 44,
        f"# Data column {table.column} discretized with ChiMerge",
        f"# Rounds elapsed: {table.rounds}",
        f"# Max interval: {config.max_interval}",
        f"# Chi threshold: {config.chi_threshold}",
        f"# Expected frequency threshold: {config.expected_freq_threshold}",
        f"# Batch merged: {str(config.batch_merge).lower()}",
        f"# Halted on: {halt}",
        "+" * 44,
    ]
    return "\n".join(lines)


def format_report(table: IntervalTable) -> str:
    """
    Full report of a discretized column.

    Args:
        table: An IntervalTable after chimerge()

    Returns:
        Parameters block followed by one `[lower..upper]: freqs, chi: x`
        line per interval
    """
    chi = table.chi_values()
    lines: List[str] = [merge_params_text(table)]
    for index, interval in enumerate(table.intervals):
        score = chi[index] if index < len(chi) else None
        lines.append(
            f"# [{interval.lower}..{interval.upper}]: {interval.frequency_list()}, "
            f"chi: {format_chi(score)}"
        )
    lines.append("#" * 44)
    return "\n".join(lines)
