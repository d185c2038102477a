"""
Medication Input Parser

Parses free-text medication input (pasted product line, or a bare product
number) into a (product, strength) pair.

Resolution order:
    1. Product number (5-7 digits) -> exact variant hit
    2. Product name, longest name first
Strength is extracted from the input itself, falling back to the strength
text of the matched variant. Combination products then get a
substance-specific override.
"""

import math
import re
from dataclasses import dataclass
from typing import Callable

from pharmacy_tools.omeq.products import (
    ProductIndex,
    ProductIndexItem,
    StrengthVariant,
    normalize_text,
)


@dataclass(frozen=True)
class Strength:
    """A parsed strength. per_hour marks patch delivery rates (µg/hour)."""

    value: float
    unit: str  # mg | mcg | µg
    per_hour: bool = False


@dataclass
class ParsedMedicationInput:
    """Result of parsing one line of medication input."""

    product: ProductIndexItem | None = None
    strength: Strength | None = None
    variant: StrengthVariant | None = None


_NUMBER = r"(\d+(?:[.,]\d+)?)"

_PRODUCT_NUMBER_RE = re.compile(r"(?<!\d)(\d{5,7})(?!\d)")
_TRANSDERMAL_RE = re.compile(
    _NUMBER + r"\s*(mcg|[µμ]g|ug)\s*(?:/|per\s*)(?:hour|time|h)\b", re.IGNORECASE
)
_SIMPLE_RE = re.compile(_NUMBER + r"\s*(mg|mcg|[µμ]g|ug)\b", re.IGNORECASE)
_SECOND_COMPONENT_MG_RE = re.compile(r"/\s*" + _NUMBER + r"\s*mg\b", re.IGNORECASE)
_FIRST_COMPONENT_MG_RE = re.compile(_NUMBER + r"\s*mg\s*/", re.IGNORECASE)


def _parse_decimal(text: str) -> float | None:
    try:
        value = float(text.replace(",", "."))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _micro_unit(raw_unit: str) -> str:
    return "µg" if raw_unit.lower() in ("µg", "μg", "ug") else "mcg"


# =============================================================================
# Strength extraction rules (tried in order, first hit wins)
# =============================================================================


def transdermal_strength(text: str) -> Strength | None:
    """'25 mcg/time', '12 µg/h', '50 ug per hour' -> per-hour strength."""
    match = _TRANSDERMAL_RE.search(text)
    if not match:
        return None
    value = _parse_decimal(match.group(1))
    if value is None:
        return None
    return Strength(value=value, unit=_micro_unit(match.group(2)), per_hour=True)


def simple_strength(text: str) -> Strength | None:
    """'200 mg', '0,2mg', '100 mcg' -> strength."""
    match = _SIMPLE_RE.search(text)
    if not match:
        return None
    value = _parse_decimal(match.group(1))
    if value is None:
        return None
    raw_unit = match.group(2).lower()
    unit = "mg" if raw_unit == "mg" else _micro_unit(raw_unit)
    return Strength(value=value, unit=unit)


StrengthRule = Callable[[str], "Strength | None"]

STRENGTH_RULES: list[tuple[str, StrengthRule]] = [
    ("transdermal", transdermal_strength),
    ("simple", simple_strength),
]


def extract_strength(text: str | None) -> Strength | None:
    """Extract the first strength found by the ordered rules."""
    if not text:
        return None
    for _name, rule in STRENGTH_RULES:
        strength = rule(text)
        if strength is not None:
            return strength
    return None


# =============================================================================
# Combination product overrides
# =============================================================================


def codeine_component(text: str) -> Strength | None:
    """Second component of 'X mg/Y mg' (paracetamol/codeine -> codeine)."""
    match = _SECOND_COMPONENT_MG_RE.search(text)
    if not match:
        return None
    value = _parse_decimal(match.group(1))
    return Strength(value=value, unit="mg") if value is not None else None


def oxycodone_component(text: str) -> Strength | None:
    """First component of 'X mg/Y mg' (oxycodone/naloxone -> oxycodone)."""
    match = _FIRST_COMPONENT_MG_RE.search(text)
    if not match:
        return None
    value = _parse_decimal(match.group(1))
    return Strength(value=value, unit="mg") if value is not None else None


CODEINE_COMBINATION_ATC = frozenset({"N02AJ06"})
OXYCODONE_COMBINATION_ATC = frozenset({"N02AA05", "N02AA55"})

COMBINATION_OVERRIDES: list[tuple[frozenset[str], StrengthRule]] = [
    (CODEINE_COMBINATION_ATC, codeine_component),
    (OXYCODONE_COMBINATION_ATC, oxycodone_component),
]


def apply_combination_override(
    product: ProductIndexItem,
    text: str,
    variant: StrengthVariant | None,
    strength: Strength | None,
) -> Strength | None:
    """
    Replace the generic strength for combination products.

    The input text is tried first, then the variant's strength text. Falls
    back to the generic strength when neither yields the component.
    """
    for codes, rule in COMBINATION_OVERRIDES:
        if product.atc_code not in codes:
            continue
        for source in (text, variant.strength if variant else None):
            if not source:
                continue
            component = rule(source)
            if component is not None:
                return component
    return strength


# =============================================================================
# Product resolution
# =============================================================================


def find_product_by_number(
    text: str,
    index: ProductIndex,
) -> tuple[ProductIndexItem, StrengthVariant] | None:
    """Resolve a 5-7 digit product number in the text to its product variant."""
    for match in _PRODUCT_NUMBER_RE.finditer(text):
        hit = index.by_number.get(int(match.group(1).lstrip("0") or "0"))
        if hit is not None:
            return hit
    return None


def find_product_in_text(text: str, index: ProductIndex) -> ProductIndexItem | None:
    """
    Find the product whose name occurs in the text.

    Names are tried longest first so e.g. "Palexia depot" is not shadowed by
    "Palexia". A name matches when it is contained in the text, word-bounded
    or with letters glued on ("depottabletter", "Dolcontin200mg").
    """
    normalized = normalize_text(text)
    if not normalized:
        return None

    for item, name in index.by_length:
        if name and name in normalized:
            return item

    return None


def parse_medication_input(text: str, index: ProductIndex) -> ParsedMedicationInput:
    """Parse one line of medication input against the product index."""
    if not text or not text.strip():
        return ParsedMedicationInput()

    product: ProductIndexItem | None
    variant: StrengthVariant | None = None

    hit = find_product_by_number(text, index)
    if hit is not None:
        product, variant = hit
    else:
        product = find_product_in_text(text, index)

    strength = extract_strength(text)
    if strength is None and variant is not None:
        strength = extract_strength(variant.strength)

    if product is not None:
        strength = apply_combination_override(product, text, variant, strength)

    return ParsedMedicationInput(product=product, strength=strength, variant=variant)
