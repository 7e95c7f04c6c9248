"""Detection of transfers between the organization's own accounts.

A transfer is recognized when the description names one of the
organization's accounts (by name, alias or account number) or contains a
generic own-account phrase such as a credit card bill payment. Single-word
account names are only trusted next to a transfer cue ("pix", "ted",
"transferencia"); otherwise an account named "Itau" would swallow every
purchase at the Itau shopping mall.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from fincore_ml.config.patterns import TRANSFER_CUES, TRANSFER_PHRASES
from fincore_ml.data_models import InternalAccount

from .normalizer import normalize, raw_tokens, tokenize

logger = logging.getLogger(__name__)

ACCOUNT_NUMBER_PATTERN = re.compile(r"\d[\d.\-/]*\d")
MIN_ACCOUNT_DIGITS = 4

TransferKind = Literal["account_name", "account_number", "phrase"]


@dataclass(frozen=True)
class TransferMatch:
    """Evidence that a transaction moves money between own accounts."""

    kind: TransferKind
    matched: str
    account_name: str | None = None

    @property
    def reasoning(self) -> str:
        if self.kind == "account_number":
            return (
                f"Internal transfer: description contains the number of "
                f'account "{self.account_name}"'
            )
        if self.kind == "account_name":
            return (
                f'Internal transfer: description references account "{self.matched}"'
            )
        return f'Internal transfer: description contains "{self.matched}"'


@dataclass(frozen=True)
class _Alias:
    tokens: tuple[str, ...]
    text: str
    account_name: str


def _digits(text: str) -> str:
    return "".join(ch for ch in text if ch.isdigit())


def _contains_sequence(tokens: Sequence[str], needle: Sequence[str]) -> bool:
    """True when ``needle`` appears contiguously in ``tokens``."""
    size = len(needle)
    if size == 0 or size > len(tokens):
        return False
    first = needle[0]
    for start, token in enumerate(tokens[: len(tokens) - size + 1]):
        if token == first and tuple(tokens[start : start + size]) == tuple(needle):
            return True
    return False


class TransferDetector:
    """Matches descriptions against own-account identifiers and phrases."""

    name = "transfer"

    def __init__(
        self,
        accounts: Iterable[InternalAccount] = (),
        phrases: Iterable[str] = TRANSFER_PHRASES,
    ) -> None:
        self._aliases: list[_Alias] = []
        self._numbers: dict[str, str] = {}
        seen: set[tuple[str, ...]] = set()

        for account in accounts:
            for identifier in account.identifiers:
                tokens = tuple(tokenize(normalize(identifier)))
                if not tokens or tokens in seen:
                    continue
                seen.add(tokens)
                self._aliases.append(_Alias(tokens, " ".join(tokens), account.name))

            if account.account_number:
                digits = _digits(account.account_number)
                if len(digits) >= MIN_ACCOUNT_DIGITS:
                    self._numbers[digits] = account.name

        # Longest aliases first so "itau empresas" wins over "itau"
        self._aliases.sort(key=lambda alias: len(alias.tokens), reverse=True)

        self._phrases: list[tuple[str, ...]] = []
        for phrase in phrases:
            tokens = tuple(tokenize(normalize(phrase)))
            if len(tokens) >= 2:
                self._phrases.append(tokens)
            else:
                logger.debug("Ignoring transfer phrase %r: too short", phrase)

    @property
    def alias_count(self) -> int:
        return len(self._aliases)

    def detect(self, raw_description: str, normalized: str) -> TransferMatch | None:
        """Return transfer evidence, or None when the description is ambiguous."""
        if self._numbers:
            for candidate in ACCOUNT_NUMBER_PATTERN.findall(raw_description):
                digits = _digits(candidate)
                if digits in self._numbers:
                    return TransferMatch(
                        kind="account_number",
                        matched=digits,
                        account_name=self._numbers[digits],
                    )

        tokens = tokenize(normalized)
        if not tokens:
            return None

        has_cue: bool | None = None
        for alias in self._aliases:
            if not _contains_sequence(tokens, alias.tokens):
                continue
            if len(alias.tokens) == 1:
                if has_cue is None:
                    has_cue = not TRANSFER_CUES.isdisjoint(raw_tokens(raw_description))
                if not has_cue:
                    continue
            return TransferMatch(
                kind="account_name",
                matched=alias.text,
                account_name=alias.account_name,
            )

        for phrase in self._phrases:
            if _contains_sequence(tokens, phrase):
                return TransferMatch(kind="phrase", matched=" ".join(phrase))

        return None
