"""Tests for utils/formatting.py."""

import unittest

from utils.formatting import (
    escape_markdown,
    format_compact,
    format_magnitude,
    format_percent,
    parse_units,
    to_float,
)

E18 = 10**18


class TestFormatMagnitude(unittest.TestCase):
    def test_millions_two_decimals(self):
        self.assertEqual(format_magnitude(1_234_567 * E18), "1.23 M")

    def test_millions_no_decimals_from_ten_million(self):
        self.assertEqual(format_magnitude(10_000_000 * E18), "10 M")
        self.assertEqual(format_magnitude(123_456_789 * E18), "123 M")

    def test_thousands_one_decimal(self):
        self.assertEqual(format_magnitude(23_456 * E18), "23.5 K")
        self.assertEqual(format_magnitude(1_000 * E18), "1.0 K")

    def test_thousands_no_decimals_from_hundred_thousand(self):
        self.assertEqual(format_magnitude(100_000 * E18), "100 K")
        self.assertEqual(format_magnitude(999_999 * E18), "1000 K")

    def test_small_values_are_integers(self):
        self.assertEqual(format_magnitude(0), "0")
        self.assertEqual(format_magnitude(999 * E18), "999")
        self.assertEqual(format_magnitude(E18 // 10), "0")

    def test_half_rounds_up(self):
        self.assertEqual(format_compact(2.5), "3")
        self.assertEqual(format_compact(0.5), "1")

    def test_huge_values_have_no_exponent(self):
        result = format_magnitude(10**40 * E18)
        self.assertTrue(result.endswith(" M"))
        self.assertNotIn("e", result.lower().replace(" m", ""))
        self.assertFalse(result.startswith("-"))

    def test_custom_decimals(self):
        self.assertEqual(format_magnitude(2_500_000 * 10**6, decimals=6), "2.50 M")

    def test_to_float(self):
        self.assertEqual(to_float(15 * E18 // 10), 1.5)


class TestFormatPercent(unittest.TestCase):
    def test_zero_total(self):
        self.assertEqual(format_percent(0, 0), "—")
        self.assertEqual(format_percent(5, 0), "—")

    def test_one_decimal(self):
        self.assertEqual(format_percent(100_000 * E18, 1_000_000 * E18), "10.0 %")
        self.assertEqual(format_percent(1, 3), "33.3 %")

    def test_truncates_before_division(self):
        # 2/3 = 66.66..%, floor division gives 666 per mille
        self.assertEqual(format_percent(2, 3), "66.6 %")
        self.assertEqual(format_percent(999, 1000 * E18), "0.0 %")

    def test_full(self):
        self.assertEqual(format_percent(7 * E18, 7 * E18), "100.0 %")


class TestParseUnits(unittest.TestCase):
    def test_integer(self):
        self.assertEqual(parse_units("50000"), 50_000 * E18)

    def test_fraction(self):
        self.assertEqual(parse_units("1.5"), 15 * E18 // 10)
        self.assertEqual(parse_units(" 0.000000000000000001 "), 1)

    def test_decimals(self):
        self.assertEqual(parse_units("2", decimals=6), 2_000_000)

    def test_invalid(self):
        for value in ("", "abc", "1,000", "NaN", "Infinity"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_units(value)

    def test_too_many_decimals(self):
        with self.assertRaises(ValueError):
            parse_units("0.0000000000000000001")


class TestEscapeMarkdown(unittest.TestCase):
    def test_escapes_special_characters(self):
        self.assertEqual(escape_markdown("a_b*c`d[e"), "a\\_b\\*c\\`d\\[e")

    def test_plain_text_untouched(self):
        self.assertEqual(escape_markdown("HTTP 503 for url"), "HTTP 503 for url")


if __name__ == "__main__":
    unittest.main()
