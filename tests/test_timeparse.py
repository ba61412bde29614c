"""Tests for time token parsing and decimal rendering."""

from fractions import Fraction

import pytest

from keycut.errors import InvalidTimeFormat, MissingFrameRate
from keycut.timeparse import check_time_token, format_seconds, frame_epsilon, parse_time

from conftest import make_media


class TestFrameIndex:
    def test_f0(self, media):
        spec = parse_time("f0", media)
        assert spec.seconds == 0
        assert spec.epsilon == Fraction(1, 90)

    def test_frame_to_seconds(self, media):
        spec = parse_time("f90", media)
        assert spec.seconds == 3
        assert spec.token == "f90"

    def test_ntsc_rate_is_exact(self):
        media = make_media(fps=(30000, 1001))
        spec = parse_time("f30", media)
        assert spec.seconds == Fraction(1001, 1000)
        assert spec.epsilon == Fraction(1001, 90000)

    def test_custom_epsilon_divisor(self, media):
        spec = parse_time("f1", media, epsilon_divisor=4)
        assert spec.epsilon == Fraction(1, 120)

    def test_missing_frame_rate(self):
        media = make_media(fps=None)
        with pytest.raises(MissingFrameRate, match="f10"):
            parse_time("f10", media)

    def test_no_media(self):
        with pytest.raises(MissingFrameRate):
            parse_time("f10", None)


class TestFractionAndSeconds:
    def test_fraction(self, media):
        spec = parse_time("1001/30", media)
        assert spec.seconds == Fraction(1001, 30)
        assert spec.epsilon is None

    def test_fraction_matches_plain_seconds(self, media):
        assert parse_time("30/1", media).seconds == parse_time("30", media).seconds

    def test_plain_decimal(self):
        assert parse_time("12.5", None).seconds == Fraction(25, 2)

    def test_decimal_is_not_float(self):
        # 0.1 has no exact binary representation
        assert parse_time("0.1", None).seconds == Fraction(1, 10)

    def test_leading_dot(self):
        assert parse_time(".5", None).seconds == Fraction(1, 2)

    def test_mm_ss(self):
        assert parse_time("1:30", None).seconds == 90

    def test_hh_mm_ss_fractional(self):
        assert parse_time("1:02:03.25", None).seconds == Fraction(372325, 100)

    def test_whitespace_stripped(self):
        assert parse_time(" 5 ", None).seconds == 5


class TestInvalid:
    @pytest.mark.parametrize("token", ["", "abc", "-1", "1:2:3:4", "f", "f-1", "1/0", "1e3", "1:", "x:10"])
    def test_rejected(self, token):
        with pytest.raises(InvalidTimeFormat):
            parse_time(token, make_media())

    def test_too_many_parts_message(self):
        with pytest.raises(InvalidTimeFormat, match="too many parts"):
            check_time_token("1:2:3:4")

    def test_check_accepts_frame_without_media(self):
        check_time_token("f120")


class TestFormatSeconds:
    def test_integer(self):
        assert format_seconds(Fraction(5)) == "5"

    def test_leading_zero(self):
        assert format_seconds(Fraction(1, 3)) == "0.3333333333"

    def test_zero(self):
        assert format_seconds(Fraction(0)) == "0"

    def test_no_exponent(self):
        assert format_seconds(Fraction(100)) == "100"
        assert format_seconds(Fraction(1, 10**9)) == "0.000000001"

    def test_trailing_zeros_stripped(self):
        assert format_seconds(Fraction(5, 2)) == "2.5"

    @pytest.mark.parametrize(
        "value",
        [Fraction(1, 90), Fraction(1001, 30), Fraction(179, 90), Fraction(3), Fraction(2, 3)],
    )
    def test_reparse_within_tolerance(self, value):
        reparsed = parse_time(format_seconds(value), None).seconds
        assert abs(reparsed - value) <= Fraction(1, 10**10)

    def test_parse_is_deterministic(self, media):
        assert parse_time("f77", media) == parse_time("f77", media)


class TestFrameEpsilon:
    def test_one_third_frame(self):
        assert frame_epsilon((25, 1)) == Fraction(1, 75)

    def test_zero_rate(self):
        with pytest.raises(MissingFrameRate):
            frame_epsilon((0, 1))
