"""Tests for natural ordering."""

from voxshelf.natural import natural_key, natural_sorted, optional_natural_key


def test_numbers_compare_by_value():
    assert natural_sorted(["track10", "track9", "track1"]) == ["track1", "track9", "track10"]


def test_leading_numbers():
    assert natural_sorted(["10.mp3", "2.mp3", "1.mp3"]) == ["1.mp3", "2.mp3", "10.mp3"]


def test_text_is_case_insensitive():
    assert natural_sorted(["b", "A", "c"]) == ["A", "b", "c"]


def test_ties_broken_by_raw_string():
    assert natural_key("Track") != natural_key("track")
    assert natural_sorted(["track", "Track"]) == ["Track", "track"]


def test_none_sorts_after_strings():
    values = [None, "SE", "mp3"]
    assert sorted(values, key=optional_natural_key) == ["mp3", "SE", None]


def test_multiple_number_runs():
    names = ["disc2 track1", "disc1 track10", "disc1 track2"]
    assert natural_sorted(names) == ["disc1 track2", "disc1 track10", "disc2 track1"]


def test_sort_through_key():
    items = [{"n": "a10"}, {"n": "a2"}]
    assert natural_sorted(items, key=lambda i: i["n"]) == [{"n": "a2"}, {"n": "a10"}]
