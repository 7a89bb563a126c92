import pytest

from autocat.keywords import clean_keywords, merge_unique, split_keywords


@pytest.mark.parametrize(
    "value, expected",
    [
        ("a;b,c", ["a", "b,c"]),
        ("a,b,c", ["a", "b", "c"]),
        ("", []),
        ("solo", ["solo"]),
        (" cat ; dog ", ["cat", "dog"]),
        ("Paris, Eiffel Tower", ["Paris", "Eiffel Tower"]),
    ],
)
def test_split_keywords(value, expected):
    assert split_keywords(value) == expected


def test_split_keywords_keeps_empty_segments():
    assert split_keywords("a;;b;") == ["a", "", "b", ""]


def test_merge_unique_preserves_first_seen_order():
    assert merge_unique(["x", "y"], ["y", "z"]) == ["x", "y", "z"]


def test_merge_unique_drops_duplicates_within_a_source():
    assert merge_unique(["a", "a", "b"], [], ["b", "c", "a"]) == ["a", "b", "c"]


def test_merge_unique_without_lists():
    assert merge_unique() == []


def test_clean_keywords_trims_and_drops_empty():
    assert clean_keywords([" a ", "", "  ", "b"]) == ["a", "b"]
