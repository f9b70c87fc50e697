"""
Currency detection for free-text conversion requests.

Decides whether both ends of a conversion name money, and if so which ISO
codes and what amount. Pure text processing, no I/O.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Pattern, Tuple

from everything_converter.models.conversion import CurrencyPair

# ISO 4217 codes (plus BTC/ETH) and the keywords that identify them
CURRENCY_KEYWORDS: Dict[str, List[str]] = {
    "USD": ["usd", "dollar", "dollars", "$", "us dollar", "us dollars", "american dollar"],
    "EUR": ["eur", "euro", "euros", "€"],
    "GBP": ["gbp", "pound", "pounds", "£", "british pound", "sterling"],
    "JPY": ["jpy", "yen", "¥", "japanese yen"],
    "CHF": ["chf", "franc", "francs", "swiss franc"],
    "CAD": ["cad", "canadian dollar", "canadian dollars", "c$"],
    "AUD": ["aud", "australian dollar", "australian dollars", "a$"],
    "NZD": ["nzd", "new zealand dollar", "nz dollar"],
    "CNY": ["cny", "yuan", "renminbi", "rmb", "chinese yuan"],
    "INR": ["inr", "rupee", "rupees", "₹", "indian rupee"],
    "KRW": ["krw", "won", "₩", "korean won"],
    "RUB": ["rub", "ruble", "rubles", "₽", "russian ruble"],
    "BRL": ["brl", "real", "r$", "brazilian real"],
    "ZAR": ["zar", "rand", "south african rand"],
    "SEK": ["sek", "krona", "kronor", "swedish krona"],
    "NOK": ["nok", "norwegian krone", "norwegian kroner"],
    "DKK": ["dkk", "danish krone", "danish kroner"],
    "SGD": ["sgd", "singapore dollar", "s$"],
    "HKD": ["hkd", "hong kong dollar", "hk$"],
    "MXN": ["mxn", "peso", "pesos", "mexican peso"],
    "THB": ["thb", "baht", "฿", "thai baht"],
    "MYR": ["myr", "ringgit", "malaysian ringgit"],
    "PHP": ["php", "philippine peso", "₱"],
    "IDR": ["idr", "rupiah", "indonesian rupiah"],
    "PLN": ["pln", "zloty", "polish zloty"],
    "TRY": ["try", "₺", "lira", "turkish lira"],
    "AED": ["aed", "dirham", "uae dirham"],
    "SAR": ["sar", "riyal", "saudi riyal"],
    "ILS": ["ils", "shekel", "₪", "israeli shekel"],
    "ARS": ["ars", "argentine peso"],
    "CLP": ["clp", "chilean peso"],
    "COP": ["cop", "colombian peso"],
    "EGP": ["egp", "egyptian pound"],
    "PKR": ["pkr", "pakistani rupee"],
    "BDT": ["bdt", "taka", "bangladeshi taka"],
    "VND": ["vnd", "₫", "dong", "vietnamese dong"],
    "NGN": ["ngn", "naira", "₦", "nigerian naira"],
    "UAH": ["uah", "hryvnia", "₴", "ukrainian hryvnia"],
    "CZK": ["czk", "czech koruna", "koruna"],
    "HUF": ["huf", "forint", "hungarian forint"],
    "RON": ["ron", "leu", "romanian leu"],
    "BTC": ["btc", "bitcoin", "₿"],
    "ETH": ["eth", "ethereum", "ether"],
}

CURRENCY_NAMES: Dict[str, str] = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "JPY": "Japanese Yen",
    "CHF": "Swiss Franc",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "NZD": "New Zealand Dollar",
    "CNY": "Chinese Yuan",
    "INR": "Indian Rupee",
    "KRW": "Korean Won",
    "RUB": "Russian Ruble",
    "BRL": "Brazilian Real",
    "ZAR": "South African Rand",
    "SEK": "Swedish Krona",
    "NOK": "Norwegian Krone",
    "DKK": "Danish Krone",
    "SGD": "Singapore Dollar",
    "HKD": "Hong Kong Dollar",
    "MXN": "Mexican Peso",
    "THB": "Thai Baht",
    "MYR": "Malaysian Ringgit",
    "PHP": "Philippine Peso",
    "IDR": "Indonesian Rupiah",
    "PLN": "Polish Zloty",
    "TRY": "Turkish Lira",
    "AED": "UAE Dirham",
    "SAR": "Saudi Riyal",
    "ILS": "Israeli Shekel",
    "ARS": "Argentine Peso",
    "CLP": "Chilean Peso",
    "COP": "Colombian Peso",
    "EGP": "Egyptian Pound",
    "PKR": "Pakistani Rupee",
    "BDT": "Bangladeshi Taka",
    "VND": "Vietnamese Dong",
    "NGN": "Nigerian Naira",
    "UAH": "Ukrainian Hryvnia",
    "CZK": "Czech Koruna",
    "HUF": "Hungarian Forint",
    "RON": "Romanian Leu",
    "BTC": "Bitcoin",
    "ETH": "Ethereum",
}

# A word keyword must not touch a letter on either side ([^\W\d_] is "any letter");
# symbol-only keywords such as "$" may ("us$100")
_NOT_LETTER_BEFORE = r"(?<![^\W\d_])"
_NOT_LETTER_AFTER = r"(?![^\W\d_])"

_AMOUNT_PATTERN = re.compile(r"\d[\d,]*\.?\d*")


def _keyword_pattern(keyword: str) -> Pattern[str]:
    if not any(ch.isalpha() for ch in keyword):
        return re.compile(re.escape(keyword))
    return re.compile(_NOT_LETTER_BEFORE + re.escape(keyword) + _NOT_LETTER_AFTER)


def _compile_matchers() -> List[Tuple[str, str, Pattern[str]]]:
    # Longest keywords first so "philippine peso" wins over "peso";
    # sorted() is stable, so equal lengths keep table order.
    pairs = [
        (keyword, code)
        for code, keywords in CURRENCY_KEYWORDS.items()
        for keyword in keywords
    ]
    pairs = sorted(pairs, key=lambda pair: -len(pair[0]))
    return [(keyword, code, _keyword_pattern(keyword)) for keyword, code in pairs]


_MATCHERS = _compile_matchers()


def detect_currency(text: str) -> Optional[str]:
    """
    Return the ISO code of the first currency keyword found in ``text``.

    Args:
        text: Free text such as "100 usd", "$", "a few euros"

    Returns:
        Upper-case currency code, or None when no keyword matches
    """
    if not text:
        return None
    normalized = text.lower().strip()
    for keyword, code, pattern in _MATCHERS:
        if normalized == keyword or pattern.search(normalized):
            return code
    return None


def detect_currency_conversion(from_text: str, to_text: str) -> Optional[CurrencyPair]:
    """Return both codes only when *both* sides look like money."""
    from_currency = detect_currency(from_text)
    to_currency = detect_currency(to_text)
    if from_currency and to_currency:
        return CurrencyPair(from_currency=from_currency, to_currency=to_currency)
    return None


def extract_amount(text: str) -> float:
    """Extract the first number in ``text`` ("1,234.5 USD" -> 1234.5); 1.0 if none."""
    match = _AMOUNT_PATTERN.search(text or "")
    if match:
        digits = match.group(0).replace(",", "")
        if digits:
            return float(digits)
    return 1.0


def get_currency_display_name(code: str) -> str:
    return CURRENCY_NAMES.get(code, code)
