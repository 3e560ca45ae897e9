"""Tests for IntervalTable construction and the merge loop."""

import numpy as np
import pytest

from chimerge import (
    CacheInvariantError,
    ChiCell,
    ChiMergeConfig,
    ConfigurationError,
    HaltReason,
    IntervalTable,
)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestSortData:
    def test_one_interval_per_distinct_value(self):
        rows = [(3.0, "a"), (1.0, "b"), (3.0, "a"), (2.0, "a"), (1.0, "a")]
        table = IntervalTable(rows, 0)

        assert table.class_list == ["a", "b"]
        assert table.boundaries == [1.0, 2.0, 3.0]
        assert [iv.frequency_list() for iv in table.intervals] == [[1, 1], [1, 0], [2, 0]]
        assert len(table.chi) == 2
        assert all(cell.is_stale for cell in table.chi)

    def test_explicit_class_list_sets_index_order(self):
        rows = [(1.0, "a"), (2.0, "b")]
        table = IntervalTable(rows, 0, class_list=["b", "a"])
        assert [iv.frequency_list() for iv in table.intervals] == [[0, 1], [1, 0]]

    def test_selects_column(self, random_rows):
        table = IntervalTable(random_rows, 1)
        assert table.boundaries == sorted({row[1] for row in random_rows})

    def test_initial_intervals_are_kept(self, two_runs_rows):
        table = IntervalTable(two_runs_rows, 0, max_interval=2).chimerge()
        assert len(table.initial_intervals) == 8
        assert len(table) == 2

    def test_column_out_of_range(self, two_runs_rows):
        with pytest.raises(ConfigurationError):
            IntervalTable(two_runs_rows, 1)

    def test_negative_column(self, two_runs_rows):
        with pytest.raises(ConfigurationError):
            IntervalTable(two_runs_rows, -1)

    def test_unknown_label(self):
        with pytest.raises(ConfigurationError):
            IntervalTable([(1.0, "a"), (2.0, "c")], 0, class_list=["a", "b"])

    def test_missing_value(self):
        with pytest.raises(ConfigurationError):
            IntervalTable([(1.0, "a"), (float("nan"), "a")], 0)

    def test_overrides_apply_to_config(self, two_runs_rows):
        table = IntervalTable(two_runs_rows, 0, config=ChiMergeConfig(max_interval=3), batch_merge=True)
        assert table.config.max_interval == 3
        assert table.config.batch_merge is True
        assert table.chi_tester.expected_freq_threshold == 0.5


# ---------------------------------------------------------------------------
# Merge loop
# ---------------------------------------------------------------------------

class TestChiMerge:
    def test_batch_merge_run(self, two_runs_rows):
        table = IntervalTable(two_runs_rows, 0, max_interval=2, batch_merge=True).chimerge()

        assert table.halt_reason is HaltReason.CHI_THRESHOLD
        assert table.boundaries == [1.0, 5.0]
        assert [iv.frequency_list() for iv in table.intervals] == [[4, 0], [0, 4]]
        assert table.chi_values() == [8.0]
        assert table.rounds == 3
        assert [len(r.merges) for r in table.history.rounds] == [4, 2, 0]

    def test_single_merge_per_round(self, two_runs_rows):
        table = IntervalTable(two_runs_rows, 0, max_interval=2).chimerge()

        assert table.halt_reason is HaltReason.CHI_THRESHOLD
        assert [iv.frequency_list() for iv in table.intervals] == [[4, 0], [0, 4]]
        assert table.rounds == 7
        assert [len(r.merges) for r in table.history.rounds] == [1, 1, 1, 1, 1, 1, 0]

    def test_batch_reduces_more_than_one_in_a_round(self, two_runs_rows):
        batch = IntervalTable(two_runs_rows, 0, max_interval=2, batch_merge=True).chimerge()
        single = IntervalTable(two_runs_rows, 0, max_interval=2).chimerge()

        assert batch.history.rounds[1].interval_count == 4
        assert single.history.rounds[1].interval_count == 7

    def test_count_equal_to_max_interval_still_merges(self, two_runs_rows):
        table = IntervalTable(two_runs_rows, 0, max_interval=8).chimerge()

        assert table.halt_reason is HaltReason.MAX_INTERVAL
        assert len(table) == 7
        assert len(table.history.merges) == 1

    def test_count_below_max_interval_halts_immediately(self, two_runs_rows):
        table = IntervalTable(two_runs_rows, 0, max_interval=9).chimerge()

        assert table.halt_reason is HaltReason.MAX_INTERVAL
        assert len(table) == 8
        assert table.rounds == 1
        assert table.history.merges == []
        assert all(not cell.is_stale for cell in table.chi)

    def test_count_criterion_takes_priority(self, separated_rows):
        table = IntervalTable(separated_rows, 0, max_interval=4).chimerge()
        assert table.halt_reason is HaltReason.MAX_INTERVAL

    def test_halts_on_threshold(self, separated_rows):
        table = IntervalTable(separated_rows, 0, max_interval=2).chimerge()

        assert table.halt_reason is HaltReason.CHI_THRESHOLD
        assert len(table) == 3
        assert table.chi_values() == [10.0, 10.0]
        assert table.history.merges == []

    def test_threshold_is_strict(self, separated_rows):
        table = IntervalTable(separated_rows, 0, max_interval=1, chi_threshold=10.0).chimerge()
        assert len(table) == 1

    def test_single_interval(self):
        rows = [(1.0, "a"), (1.0, "b")]
        table = IntervalTable(rows, 0, max_interval=1).chimerge()
        assert table.halt_reason is HaltReason.SINGLE_INTERVAL
        assert table.chi == []

    def test_empty_table(self):
        table = IntervalTable([], 0).chimerge()
        assert len(table) == 0
        assert table.chi == []
        assert table.halt_reason is HaltReason.MAX_INTERVAL

    def test_second_call_is_a_no_op(self, two_runs_rows):
        table = IntervalTable(two_runs_rows, 0, max_interval=2).chimerge()
        rounds = table.rounds
        assert table.chimerge() is table
        assert table.rounds == rounds

    def test_merge_records(self, two_runs_rows):
        table = IntervalTable(two_runs_rows, 0, max_interval=8).chimerge()
        (merge,) = table.history.merges
        assert merge.round_number == 1
        assert merge.index == 0
        assert merge.left == (1.0, 1.0, (1, 0))
        assert merge.right == (2.0, 2.0, (1, 0))
        assert merge.chi_square == 0.0
        assert merge.merged_frequencies == (2, 0)

    def test_runs_to_one_interval(self, random_rows):
        table = IntervalTable(random_rows, 0, max_interval=1, chi_threshold=1e9).chimerge()
        assert len(table) == 1
        assert table.halt_reason is HaltReason.SINGLE_INTERVAL


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("batch_merge", [False, True])
def test_conservation_and_cache_size_after_every_merge(random_rows, monkeypatch, batch_merge):
    table = IntervalTable(random_rows, 0, max_interval=1, chi_threshold=1e9, batch_merge=batch_merge)
    totals = table.class_totals().copy()
    n_examples = len(random_rows)
    counts = [len(table)]
    original_merge = table.merge

    def checked_merge(index, round_number=0):
        record = original_merge(index, round_number)
        np.testing.assert_array_equal(table.class_totals(), totals)
        assert sum(iv.n_values for iv in table.intervals) == n_examples
        assert len(table.chi) == len(table.intervals) - 1
        counts.append(len(table))
        return record

    monkeypatch.setattr(table, "merge", checked_merge)
    table.chimerge()

    assert counts == list(range(counts[0], 0, -1))


def test_interval_count_shrinks_each_round(random_rows):
    table = IntervalTable(random_rows, 0, batch_merge=True).chimerge()
    rounds = table.history.rounds
    for before, after in zip(rounds, rounds[1:]):
        assert after.interval_count == before.interval_count - len(before.merges)
        assert len(before.merges) >= 1


def test_intervals_stay_ordered_and_disjoint(random_rows):
    table = IntervalTable(random_rows, 0, max_interval=3).chimerge()
    for left, right in zip(table.intervals, table.intervals[1:]):
        assert left.upper < right.lower


def test_terminates_within_initial_count(random_rows):
    table = IntervalTable(random_rows, 0, max_interval=1, chi_threshold=1e9).chimerge()
    assert table.rounds <= len(table.initial_intervals)


# ---------------------------------------------------------------------------
# Cache maintenance
# ---------------------------------------------------------------------------

def test_merge_invalidates_neighbours(two_runs_rows):
    table = IntervalTable(two_runs_rows, 0)
    table.populate_chi()
    table.merge(2)

    assert len(table.chi) == 6
    assert [cell.is_stale for cell in table.chi] == [False, True, True, False, False, False]


def test_merge_at_edges(two_runs_rows):
    table = IntervalTable(two_runs_rows, 0)
    table.populate_chi()
    table.merge(6)
    assert [cell.is_stale for cell in table.chi] == [False] * 5 + [True]
    table.merge(0)
    assert [cell.is_stale for cell in table.chi] == [True] + [False] * 3 + [True]


def test_desynchronised_cache_is_detected(two_runs_rows):
    table = IntervalTable(two_runs_rows, 0)
    table.populate_chi()
    table.chi.append(ChiCell())
    with pytest.raises(CacheInvariantError):
        table.merge(0)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

def test_cut_points_and_assign(two_runs_rows):
    table = IntervalTable(two_runs_rows, 0, max_interval=2).chimerge()
    assert table.cut_points == [5.0]
    np.testing.assert_array_equal(table.assign([0.5, 1.0, 4.9, 5.0, 10.0]), [0, 0, 0, 1, 1])


def test_frequency_matrix(two_runs_rows):
    table = IntervalTable(two_runs_rows, 0, max_interval=2).chimerge()
    np.testing.assert_array_equal(table.frequency_matrix(), [[4, 0], [0, 4]])
    np.testing.assert_array_equal(table.class_totals(), [4, 4])


def test_interval_contains(two_runs_rows):
    table = IntervalTable(two_runs_rows, 0, max_interval=2).chimerge()
    first, second = table.intervals
    assert first.contains(2.5)
    assert not first.contains(5.0)
    assert second.contains(8.0)
