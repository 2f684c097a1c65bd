import pytest

from core.scorer import schedule_overlap


def test_identical_lists_overlap_fully():
    assert schedule_overlap(["Monday", "Friday"], ["Friday", "Monday"]) == 1.0


def test_disjoint_lists_do_not_overlap():
    assert schedule_overlap(["Monday"], ["Tuesday"]) == 0.0


def test_partial_overlap_is_jaccard():
    assert schedule_overlap(["Mon", "Tue", "Wed"], ["Wed", "Thu"]) == pytest.approx(1 / 4)


@pytest.mark.parametrize("first,second", [
    ([], ["Monday"]),
    (["Monday"], []),
    ([], []),
    (None, ["Monday"]),
    (["  "], ["Monday"]),
])
def test_missing_preferences_are_neutral(first, second):
    assert schedule_overlap(first, second) == 0.5
    assert schedule_overlap(first, second, neutral=0.25) == 0.25


def test_comparison_ignores_case_and_whitespace():
    assert schedule_overlap([" monday", "FRIDAY"], ["Monday", "friday "]) == 1.0


def test_duplicates_do_not_change_result():
    assert schedule_overlap(["Monday", "monday"], ["Monday"]) == 1.0
