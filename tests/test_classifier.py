"""Tests for keyword-based reply selection."""

import unittest
from unittest.mock import Mock

import requests

from shopchat.classifier import (
    DEFAULT_TEXT,
    HELP_TEXT,
    NO_RESULTS_TEXT,
    TROUBLE_TEXT,
    classify,
    extract_search_terms,
    format_price,
)


def make_api(products=None):
    api = Mock()
    api.search_products.return_value = products if products is not None else []
    return api


class TestSearchRule(unittest.TestCase):
    """Test the search/find rule."""

    def test_search_strips_keyword(self):
        """Test 'search shoes' searches for 'shoes'."""
        api = make_api()
        classify("search shoes", api)
        api.search_products.assert_called_once_with("shoes")

    def test_find_is_case_insensitive(self):
        """Test upper-case 'FIND' matches and the query is lower-cased."""
        api = make_api()
        classify("FIND Red Shoes", api)
        api.search_products.assert_called_once_with("red shoes")

    def test_listing_one_line_per_product(self):
        """Test results are formatted as a line per product."""
        api = make_api([
            {"name": "Runner", "price": 59.99, "stock": 4},
            {"name": "Hiker", "price": 120, "stock": 0},
        ])
        reply = classify("search shoes", api)
        self.assertEqual(
            reply,
            "I found these products:\n"
            "- Runner: $59.99 (4 in stock)\n"
            "- Hiker: $120 (0 in stock)"
        )

    def test_empty_results(self):
        """Test an empty result set gives the no-results text."""
        self.assertEqual(classify("search unicorns", make_api([])), NO_RESULTS_TEXT)

    def test_error_body_counts_as_no_results(self):
        """Test a dict error body is treated as an empty result."""
        api = make_api({"error": "boom"})
        self.assertEqual(classify("find lamps", api), NO_RESULTS_TEXT)

    def test_search_failure_returns_trouble_text(self):
        """Test a failed search call degrades to the trouble text."""
        api = Mock()
        api.search_products.side_effect = requests.ConnectionError("down")
        self.assertEqual(classify("search shoes", api), TROUBLE_TEXT)

    def test_malformed_results_return_trouble_text(self):
        """Test non-dict entries in the result list degrade to the trouble text."""
        self.assertEqual(classify("search shoes", make_api(["shoe"])), TROUBLE_TEXT)

    def test_whole_prices_drop_trailing_zero(self):
        """Test a JSON 80.0 renders as $80 while cents are kept."""
        self.assertEqual(format_price(80.0), "80")
        self.assertEqual(format_price(59.99), "59.99")
        self.assertEqual(format_price(120), "120")
        api = make_api([{"name": "Hiker", "price": 80.0, "stock": 2}])
        self.assertEqual(classify("find boots", api), "I found these products:\n- Hiker: $80 (2 in stock)")

    def test_search_wins_over_help(self):
        """Test rule order: search is checked before help."""
        api = make_api()
        self.assertEqual(classify("help me find a jacket", api), NO_RESULTS_TEXT)
        api.search_products.assert_called_once_with("help me  a jacket")

    def test_extract_removes_first_occurrence_only(self):
        """Test only the first 'search' and first 'find' are removed."""
        self.assertEqual(extract_search_terms("search find search"), "search")
        self.assertEqual(extract_search_terms("  search  laptops  "), "laptops")


class TestStaticRules(unittest.TestCase):
    """Test the help and default rules."""

    def test_help(self):
        """Test 'help' returns the help text verbatim."""
        api = make_api()
        self.assertEqual(classify("help", api), HELP_TEXT)
        api.search_products.assert_not_called()

    def test_how_to(self):
        """Test 'how to pay' returns the help text verbatim."""
        self.assertEqual(classify("how to pay", make_api()), HELP_TEXT)

    def test_default(self):
        """Test anything else returns the default text verbatim."""
        api = make_api()
        self.assertEqual(classify("hello", api), DEFAULT_TEXT)
        api.search_products.assert_not_called()

    def test_help_text_content(self):
        """Test the help text lists the supported capabilities."""
        self.assertTrue(HELP_TEXT.startswith("I can help you with:\n"))
        self.assertIn("- Searching products (try 'search electronics')", HELP_TEXT)
        self.assertTrue(HELP_TEXT.endswith("What would you like to know more about?"))


if __name__ == "__main__":
    unittest.main()
