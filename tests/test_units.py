"""Tests for byte quantity parsing and formatting"""

import pytest

from xuimanager.units import GB, UNITS, bytes_to_gb, bytes_to_human, human_to_bytes, parse_quantity, percent_used


class TestHumanToBytes:

    @pytest.mark.parametrize("text,expected", [
        ("0B", 0),
        ("512B", 512),
        ("1kB", 1024),
        ("1.5MB", 1572864),
        ("2GB", 2 * GB),
        ("1TB", 1024 ** 4),
        ("1PB", 1024 ** 5),
        (" 300kB ", 307200),
        ("1.2 MB", int(1.2 * 1024 ** 2 + 0.5)),
    ])
    def test_valid(self, text, expected):
        assert human_to_bytes(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "12", "MB", "1.5XB", "1.5mb", "-1MB", None])
    def test_malformed_is_zero(self, text):
        assert human_to_bytes(text) == 0

    def test_parse_quantity_distinguishes_garbage_from_zero(self):
        assert parse_quantity("0B") == 0
        assert parse_quantity("garbage") is None

    def test_fractional_rounds_half_up(self):
        # 0.5 * 1 byte
        assert parse_quantity("0.5B") == 1


class TestBytesToHuman:

    def test_picks_largest_unit(self):
        assert bytes_to_human(512) == "512B"
        assert bytes_to_human(1536) == "1.50kB"
        assert bytes_to_human(3 * GB) == "3.00GB"

    def test_explicit_unit(self):
        assert bytes_to_human(GB, unit="MB") == "1024.00MB"

    @pytest.mark.parametrize("unit", UNITS)
    @pytest.mark.parametrize("forced", [True, False])
    def test_reparse_stays_within_rounding(self, unit, forced):
        power = UNITS.index(unit)
        n = 3 * 1024 ** power + 1234567 % (1024 ** power or 1) + 7
        text = bytes_to_human(n, unit=unit if forced else None)

        assert text.endswith(unit)
        # two decimals of the unit, plus half a byte
        assert abs(human_to_bytes(text) - n) <= 0.005 * 1024 ** power + 0.5


def test_bytes_to_gb_and_percent():
    assert bytes_to_gb(GB + GB // 2) == 1.5
    assert percent_used(GB, 4) == 25.0
    assert percent_used(GB, 0) == 0.0
