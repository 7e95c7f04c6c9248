"""Description normalization.

Bank statement descriptions mix the merchant name with per-transaction noise:
authorization numbers, dates, times, payment-rail shorthand. ``normalize``
keeps only the stable part so that two charges from the same merchant map to
the same text:

    "UBER* TRIP 4821 09/14"  -> "uber trip"
    "Uber *Trip 9932 10/02"  -> "uber trip"
"""

import re
import unicodedata

from fincore_ml.config.patterns import BANK_STOPWORDS

DATE_PATTERN = re.compile(r"\b\d{1,4}[/.\-]\d{1,2}(?:[/.\-]\d{1,4})?\b")
TIME_PATTERN = re.compile(r"\b\d{1,2}:\d{2}(?::\d{2})?\b")
TOKEN_PATTERN = re.compile(r"[^\W_]+")


def strip_diacritics(text: str) -> str:
    """Casefold and remove combining accents ("Café" -> "cafe")."""
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _is_transient(token: str) -> bool:
    """Tokens made mostly of digits are ids, amounts or card numbers."""
    digits = sum(ch.isdigit() for ch in token)
    return digits * 2 > len(token)


def raw_tokens(text: str) -> list[str]:
    """Accent-free tokens with nothing removed."""
    return TOKEN_PATTERN.findall(strip_diacritics(text))


def normalize(description: str, stopwords: frozenset[str] = BANK_STOPWORDS) -> str:
    if not description:
        return ""

    text = strip_diacritics(description)
    text = DATE_PATTERN.sub(" ", text)
    text = TIME_PATTERN.sub(" ", text)

    tokens = [
        token
        for token in TOKEN_PATTERN.findall(text)
        if not _is_transient(token) and token not in stopwords
    ]
    return " ".join(tokens)


def tokenize(normalized: str) -> list[str]:
    return normalized.split()
