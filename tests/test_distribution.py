"""Tests für die Halbjahres-Verteilung (engine.distribution)."""

import logging

import pytest

from engine.distribution import expand_distribution, parse_distribution, to_hours
from models.assignment import Semester


class TestParseDistribution:
    @pytest.mark.parametrize("tag", [None, "", "both", "BOTH", "  both "])
    def test_both_gives_full_hours_in_each_semester(self, tag):
        """Ohne Angabe oder "both": volle Stundenzahl in beiden Halbjahren."""
        assert parse_distribution(4, tag) == (4.0, 4.0)

    def test_first_semester_only(self):
        assert parse_distribution(3, "1") == (3.0, 0.0)

    def test_second_semester_only(self):
        assert parse_distribution(3, "2") == (0.0, 3.0)

    def test_split_is_literal(self):
        """"a-b" wird wörtlich übernommen, unabhängig von der Gesamtzahl."""
        assert parse_distribution(4, "3-1") == (3.0, 1.0)
        assert parse_distribution(2, "2-4") == (2.0, 4.0)

    def test_split_with_decimal_comma(self):
        assert parse_distribution(3, "1,5-1,5") == (1.5, 1.5)

    def test_unreadable_split_falls_back(self, caplog):
        """Nicht lesbare Zahlen → (total, total) mit Warnung."""
        with caplog.at_level(logging.WARNING, logger="engine.distribution"):
            assert parse_distribution(4, "x-y") == (4.0, 4.0)
        assert "x-y" in caplog.text

    def test_unknown_tag_falls_back_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="engine.distribution"):
            assert parse_distribution(2, "3") == (2.0, 2.0)
        assert "Unbekannte Verteilung" in caplog.text

    def test_known_tag_logs_nothing(self, caplog):
        with caplog.at_level(logging.WARNING, logger="engine.distribution"):
            parse_distribution(2, "1")
        assert caplog.text == ""


class TestExpandDistribution:
    def test_both_creates_two_entries(self):
        assert expand_distribution(4, "both") == [
            (Semester.FIRST, 4.0),
            (Semester.SECOND, 4.0),
        ]

    def test_single_semester_creates_one_entry(self):
        assert expand_distribution(2, "2") == [(Semester.SECOND, 2.0)]

    def test_zero_side_of_split_is_dropped(self):
        assert expand_distribution(2, "2-0") == [(Semester.FIRST, 2.0)]

    @pytest.mark.parametrize("total", [0, -1, "abc", "", None, float("nan"), float("inf")])
    def test_invalid_total_gives_nothing(self, total):
        assert expand_distribution(total, "both") == []

    def test_string_total_accepted(self):
        assert expand_distribution("2,5", "1") == [(Semester.FIRST, 2.5)]


class TestToHours:
    def test_numbers(self):
        assert to_hours(3) == 3.0
        assert to_hours("4") == 4.0
        assert to_hours(" 1,5 ") == 1.5

    def test_unreadable(self):
        assert to_hours("vier") is None
        assert to_hours(True) is None
        assert to_hours(float("inf")) is None
