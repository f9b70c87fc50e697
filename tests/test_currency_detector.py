"""Unit tests for free-text currency detection and amount extraction."""
import pytest

from everything_converter.models.conversion import CurrencyPair
from everything_converter.services.currency_detector import (
    CURRENCY_KEYWORDS,
    CURRENCY_NAMES,
    detect_currency,
    detect_currency_conversion,
    extract_amount,
    get_currency_display_name,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("100 usd", "USD"),
        ("$", "USD"),
        ("$100", "USD"),
        ("us$100", "USD"),
        ("c$20", "CAD"),
        ("a few Euros", "EUR"),
        ("€50", "EUR"),
        ("  £20 ", "GBP"),
        ("10,000 yen", "JPY"),
        ("bitcoin", "BTC"),
        ("2 ETH", "ETH"),
    ],
)
def test_detect_currency_common_forms(text, expected):
    assert detect_currency(text) == expected


def test_every_keyword_detects_its_own_code():
    """Each keyword, on its own, resolves to the code it is listed under."""
    for code, keywords in CURRENCY_KEYWORDS.items():
        for keyword in keywords:
            assert detect_currency(keyword) == code, keyword


def test_longer_keyword_wins_over_shorter_one():
    """Multi-word names beat the generic keyword they contain."""
    assert detect_currency("500 philippine peso") == "PHP"
    assert detect_currency("20 canadian dollars") == "CAD"
    assert detect_currency("100 hk$") == "HKD"
    assert detect_currency("1000 mexican peso") == "MXN"


def test_keywords_do_not_match_inside_words():
    """Short codes must not fire inside ordinary words."""
    assert detect_currency("europe") is None
    assert detect_currency("bananas") is None
    assert detect_currency("58kg") is None


def test_detect_currency_empty_input():
    assert detect_currency("") is None
    assert detect_currency(None) is None


def test_detect_conversion_requires_both_sides():
    assert detect_currency_conversion("100 usd", "eur") == CurrencyPair("USD", "EUR")
    assert detect_currency_conversion("100 usd", "200 eur") == CurrencyPair("USD", "EUR")
    assert detect_currency_conversion("100 usd", "bananas") is None
    assert detect_currency_conversion("58kg", "euros") is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("100 usd", 100.0),
        ("1,234.5 USD", 1234.5),
        ("$19.99", 19.99),
        ("spend 3 then 4", 3.0),
        ("some dollars", 1.0),
        ("dollars", 1.0),
        ("", 1.0),
    ],
)
def test_extract_amount(text, expected):
    assert extract_amount(text) == pytest.approx(expected)


def test_display_names_cover_every_code():
    assert set(CURRENCY_NAMES) == set(CURRENCY_KEYWORDS)
    assert get_currency_display_name("EUR") == "Euro"
    assert get_currency_display_name("XYZ") == "XYZ"
