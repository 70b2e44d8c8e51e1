# tests/test_price_extractor.py

"""Tests for currency text parsing."""

import unittest

from src.errors import CheckError, ParseError
from src.filters.price_extractor import (
    MatchPolicy,
    PriceExtractor,
    find_prices,
)


class TestExtractSingleAmount(unittest.TestCase):
    """Text holding exactly one dollar amount."""

    def setUp(self) -> None:
        self.extractor = PriceExtractor()

    def test_plain_amount(self) -> None:
        self.assertEqual(self.extractor.extract("$19.99"), 19.99)

    def test_whole_dollars(self) -> None:
        self.assertEqual(self.extractor.extract("$20"), 20.0)

    def test_thousands_separator_stripped(self) -> None:
        self.assertEqual(self.extractor.extract("$1,299.00"), 1299.0)

    def test_millions(self) -> None:
        self.assertEqual(
            self.extractor.extract("Now $1,234,567.89!"), 1234567.89
        )

    def test_ungrouped_large_amount(self) -> None:
        """Four digits without a separator are not truncated."""
        self.assertEqual(self.extractor.extract("$1299.50"), 1299.5)

    def test_surrounding_text_ignored(self) -> None:
        self.assertEqual(
            self.extractor.extract("Sale price:\n $15.00 each"), 15.0
        )

    def test_single_decimal_digit_not_a_fraction(self) -> None:
        """Only two-digit fractions count as cents."""
        self.assertEqual(self.extractor.extract("$15.5"), 15.0)


class TestExtractFailures(unittest.TestCase):
    """Text with no dollar amount."""

    def test_no_amount_raises_parse_error(self) -> None:
        with self.assertRaises(ParseError):
            PriceExtractor().extract("Out of stock")

    def test_other_currency_raises(self) -> None:
        with self.assertRaises(ParseError):
            PriceExtractor().extract("€19.99")

    def test_empty_and_none(self) -> None:
        for text in ("", None):
            with self.subTest(text=text):
                with self.assertRaises(ParseError):
                    PriceExtractor().extract(text)

    def test_parse_error_is_a_check_error(self) -> None:
        """ParseError is handled at the item boundary like other check errors."""
        with self.assertRaises(CheckError) as ctx:
            PriceExtractor().extract("n/a")
        self.assertEqual(ctx.exception.reason, "ParseError")


class TestMatchPolicy(unittest.TestCase):
    """Resolution when several amounts are present."""

    TEXT = "Was $49.99 Now $29.99 Save $20.00"

    def test_find_prices_document_order(self) -> None:
        self.assertEqual(find_prices(self.TEXT), [49.99, 29.99, 20.0])

    def test_first_is_default(self) -> None:
        self.assertEqual(PriceExtractor().extract(self.TEXT), 49.99)

    def test_last(self) -> None:
        self.assertEqual(
            PriceExtractor(MatchPolicy.LAST).extract(self.TEXT), 20.0
        )

    def test_lowest(self) -> None:
        self.assertEqual(
            PriceExtractor("lowest").extract(self.TEXT), 20.0
        )

    def test_highest(self) -> None:
        self.assertEqual(
            PriceExtractor("highest").extract(self.TEXT), 49.99
        )

    def test_unknown_policy_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PriceExtractor("median")


if __name__ == "__main__":
    unittest.main()
