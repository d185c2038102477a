"""
Query Classification

Derives what a search query requires of a candidate: text tokens, strength
numbers, or (for bare numbers) a supplier identifier.
"""

import re
from dataclasses import dataclass, field

from pharmacy_tools.search.normalize import (
    PACK_SIZE_TOKENS,
    UNIT_TOKENS,
    is_number_token,
    normalize_for_search,
    to_tokens,
)

_DECIMAL_TOKEN_RE = re.compile(r"^\d+\.\d+$")

# Up to this many meaningful text tokens are all required; longer pasted
# lines only require the first two
MAX_STRICT_TEXT_TOKENS = 4
FORGIVING_TEXT_TOKENS = 2
MIN_ID_TOKEN_LENGTH = 4
MIN_TEXT_TOKEN_LENGTH = 4


@dataclass(frozen=True)
class QueryProfile:
    """Classified search query."""

    raw: str
    normalized: str
    tokens: list[str] = field(default_factory=list)
    number_with_unit: str | None = None
    id_number_tokens: list[str] = field(default_factory=list)
    meaningful_text_tokens: list[str] = field(default_factory=list)
    required_text_tokens: list[str] = field(default_factory=list)
    required_strength_tokens: list[str] = field(default_factory=list)
    is_likely_id_search: bool = False
    indicates_combination: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _scan_tokens(normalized: str) -> list[str]:
    """Tokens with noise words kept, so pack-size words like 'stk' stay visible."""
    return [
        t for t in normalized.split(" ")
        if t and (len(t) >= 2 or is_number_token(t))
    ]


def _number_with_unit(tokens: list[str]) -> str | None:
    for current, following in zip(tokens, tokens[1:]):
        if is_number_token(current) and following in UNIT_TOKENS:
            return current
    return None


def _strength_numbers(tokens: list[str]) -> list[str]:
    """
    Numbers before the pack-size part of the query.

    Scanning stops at the first pack-size word, and numbers right next to one
    ("120 doser") are skipped, so "160/4,5 ... 120 doser" yields 160 and 4.5.
    """
    numbers = []
    for i, token in enumerate(tokens):
        if token in PACK_SIZE_TOKENS:
            break
        if not is_number_token(token):
            continue
        previous = tokens[i - 1] if i > 0 else None
        following = tokens[i + 1] if i + 1 < len(tokens) else None
        if previous in PACK_SIZE_TOKENS or following in PACK_SIZE_TOKENS:
            continue
        numbers.append(token)
    return numbers


def indicates_combination(text: str) -> bool:
    """True when the text looks like a combination ('a/b', 'a og b', 'a and b')."""
    lowered = f" {text.lower()} "
    return "/" in lowered or " og " in lowered or " and " in lowered


def classify_query(query: str) -> QueryProfile:
    """Classify a raw search query."""
    normalized = normalize_for_search(query)
    tokens = to_tokens(query)
    if not tokens:
        return QueryProfile(raw=query, normalized=normalized)

    number_with_unit = _number_with_unit(tokens)

    id_number_tokens = _unique(
        [t for t in tokens if t.isdigit() and len(t) >= MIN_ID_TOKEN_LENGTH]
    )

    text_tokens = [t for t in tokens if not is_number_token(t) and t not in UNIT_TOKENS]
    meaningful_text_tokens = [
        t for t in text_tokens
        if len(t) >= MIN_TEXT_TOKEN_LENGTH and t not in ("mg", "ml")
    ]

    if 1 <= len(meaningful_text_tokens) <= MAX_STRICT_TEXT_TOKENS:
        required_text_tokens = list(meaningful_text_tokens)
    else:
        required_text_tokens = meaningful_text_tokens[:FORGIVING_TEXT_TOKENS]

    is_likely_id_search = (
        bool(id_number_tokens) and not meaningful_text_tokens and number_with_unit is None
    )

    strength_numbers = _unique(_strength_numbers(_scan_tokens(normalized)))
    decimal_token = next((t for t in tokens if _DECIMAL_TOKEN_RE.match(t)), None)

    if number_with_unit is not None:
        required_strength_tokens = [number_with_unit]
    elif len(strength_numbers) >= 2:
        # TODO: revisit if strengths with three or more components turn up
        required_strength_tokens = strength_numbers[:2]
    elif decimal_token is not None:
        required_strength_tokens = [decimal_token]
    elif len(strength_numbers) == 1 and not is_likely_id_search:
        required_strength_tokens = [strength_numbers[0]]
    else:
        required_strength_tokens = []

    return QueryProfile(
        raw=query,
        normalized=normalized,
        tokens=tokens,
        number_with_unit=number_with_unit,
        id_number_tokens=id_number_tokens,
        meaningful_text_tokens=meaningful_text_tokens,
        required_text_tokens=required_text_tokens,
        required_strength_tokens=required_strength_tokens,
        is_likely_id_search=is_likely_id_search,
        indicates_combination=indicates_combination(query),
    )
