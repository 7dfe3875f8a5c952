"""Keyword rules that turn a user message into a canned bot reply."""

from typing import Any, Dict, Iterable

import requests

from shopchat.logger import get_logger

logger = get_logger()

GREETING_TEXT = (
    "Welcome! How can I help you today? You can ask about our products, "
    "search for items, or get help with shopping."
)

HELP_TEXT = (
    "I can help you with:\n"
    "- Searching products (try 'search electronics')\n"
    "- Browse categories (e.g., 'show smartphones')\n"
    "- Find products in price range (e.g., '10 to 50 dollars')\n"
    "- Get product recommendations\n"
    "- Checking prices and stock\n"
    "What would you like to know more about?"
)

DEFAULT_TEXT = (
    "I'm here to help you shop! You can:\n"
    "- Search for products\n"
    "- Browse by category\n"
    "- Find products in a specific price range\n"
    "- Get product recommendations\n"
    "Type 'help' for more information"
)

NO_RESULTS_TEXT = "I couldn't find any products matching your search. Can you try different keywords?"

TROUBLE_TEXT = "I'm having trouble processing your request. Please try again later."

SEARCH_KEYWORDS = ("search", "find")
HELP_KEYWORDS = ("help", "how to")


def extract_search_terms(lowercase_text: str) -> str:
    """Drop the first 'search' and the first 'find' from the text and trim it."""
    terms = lowercase_text
    for keyword in SEARCH_KEYWORDS:
        terms = terms.replace(keyword, "", 1)
    return terms.strip()


def format_price(price: Any) -> str:
    """Render a price the way the storefront shows it: 80.0 -> 80, 59.99 -> 59.99."""
    if isinstance(price, float) and price.is_integer():
        return str(int(price))
    return str(price)


def format_product_line(product: Dict[str, Any]) -> str:
    return f"- {product.get('name')}: ${format_price(product.get('price'))} ({product.get('stock')} in stock)"


def format_product_listing(products: Iterable[Dict[str, Any]]) -> str:
    lines = [format_product_line(product) for product in products]
    return "I found these products:\n" + "\n".join(lines)


def classify(text: str, api) -> str:
    """
    Pick the bot reply for a user message.

    Rules are checked in order and the first match wins:
    search/find runs a product search, help/how to returns the help text,
    anything else gets the default prompt. Matching is a case-insensitive
    substring test.

    Args:
        text: Raw user message
        api: Client exposing `search_products(query)`

    Returns:
        Reply text
    """
    lowercase_text = text.lower()

    if any(keyword in lowercase_text for keyword in SEARCH_KEYWORDS):
        query = extract_search_terms(lowercase_text)
        try:
            products = api.search_products(query)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error processing message: {str(e)}", exc_info=True)
            return TROUBLE_TEXT

        # Error bodies come back as dicts and count as no results
        if isinstance(products, list) and products:
            if not all(isinstance(product, dict) for product in products):
                logger.error(f"Malformed search results for '{query}': {products!r}")
                return TROUBLE_TEXT
            logger.info(f"Search '{query}' returned {len(products)} product(s)")
            return format_product_listing(products)
        logger.info(f"Search '{query}' returned no products")
        return NO_RESULTS_TEXT

    if any(keyword in lowercase_text for keyword in HELP_KEYWORDS):
        return HELP_TEXT

    return DEFAULT_TEXT
