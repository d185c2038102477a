"""
Search Text Normalization

Normalization and tokenization shared by indexed catalog text and queries.
"""

import re

# Packaging / form / filler words common in pasted product lines
NOISE_TOKENS = frozenset({
    "stk", "stk.", "blister", "blisterpakning", "pakning", "blist",
    "modi", "modif", "modif.", "modifisert",
    "kap", "kaps", "kapsel", "tab", "tablett", "mikstur", "susp",
    "inj", "inf", "oppl", "pulv", "pulver", "væske", "aerosol", "inh", "spray",
    "dråper", "dr", "depot", "retard", "sr", "cr", "xr", "frisett", "fri",
})

UNIT_TOKENS = frozenset({
    "mg", "g", "mcg", "ug", "µg", "mikrog", "mikrogram", "ml", "dose", "t", "time",
})

# Words that mark the pack-size part of a pasted line ("120 doser")
PACK_SIZE_TOKENS = frozenset({
    "dose", "doser", "doses", "inhalasjoner", "inhalationer", "inh",
    "stk", "stk.", "pak", "pakning",
})

_ZERO_WIDTH_RE = re.compile("[\u200b\u200c\u200d\u2060\ufeff]")
_DECIMAL_COMMA_RE = re.compile(r"(\d),(\d)")
_UNIT_GAP_RE = re.compile(r"(\d)\s+(mg|g|mcg|ug|µg|mikrog|mikrogram|ml)\b")
_DIGIT_LETTER_RE = re.compile(r"(\d)([^\W\d_])")
_LETTER_DIGIT_RE = re.compile(r"([^\W\d_])(\d)")
_PUNCTUATION_RE = re.compile(r"[µμ,;:()\[\]{}/\\|+\-_*\"'!?–—‘’“”«»]")
_WHITESPACE_RE = re.compile(r"\s+")
_NUMBER_TOKEN_RE = re.compile(r"^\d+(?:\.\d+)?$")


def normalize_for_search(value: str | None) -> str:
    """
    Normalize text for matching.

    "Paracet 500mg/30 mg" and "paracet 500 mg 30 mg" normalize identically;
    "0,4" becomes "0.4". Idempotent.
    """
    if not value:
        return ""
    text = value.lower()
    text = _ZERO_WIDTH_RE.sub("", text)
    text = _DECIMAL_COMMA_RE.sub(r"\1.\2", text)
    text = _UNIT_GAP_RE.sub(r"\1\2", text)
    text = _DIGIT_LETTER_RE.sub(r"\1 \2", text)
    text = _LETTER_DIGIT_RE.sub(r"\1 \2", text)
    text = _PUNCTUATION_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def is_number_token(token: str) -> bool:
    return bool(_NUMBER_TOKEN_RE.match(token))


def to_tokens(value: str | None) -> list[str]:
    """Tokenize normalized text, dropping noise words and 1-char non-numbers."""
    tokens: list[str] = []
    for token in normalize_for_search(value).split(" "):
        if not token or token in NOISE_TOKENS:
            continue
        if len(token) < 2 and not is_number_token(token):
            continue
        # Adjacent duplicates only
        if tokens and tokens[-1] == token:
            continue
        tokens.append(token)
    return tokens


def token_matches(hay_tokens: list[str] | tuple[str, ...], needle: str) -> bool:
    """
    Numbers must equal a token exactly ("7.5" never matches "75"); text
    matches as a token prefix ("xirom" matches "xiromed").
    """
    needle = needle.replace(",", ".")
    if is_number_token(needle):
        return needle in hay_tokens
    return any(token.startswith(needle) for token in hay_tokens)
