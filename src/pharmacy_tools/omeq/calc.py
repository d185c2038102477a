"""
OMEQ Calculation

Oral morphine equivalents from (product, daily dose, strength).

Every non-result is a ReasonCode, checked in this order:
    missing-input -> no-route -> unsupported-form -> unsupported-methadone
    -> no-omeq-factor -> missing-strength -> missing-input (dose)
No rounding happens here; see round_omeq for display.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from pharmacy_tools.omeq.opioids import METHADONE_ATC, AdministrationRoute, find_opioid
from pharmacy_tools.omeq.parser import Strength, parse_medication_input
from pharmacy_tools.omeq.products import ProductForm, ProductIndex, ProductIndexItem


class ReasonCode(str, Enum):
    """Why a calculation did or did not produce a value."""

    OK = "ok"
    MISSING_INPUT = "missing-input"
    NO_ROUTE = "no-route"
    UNSUPPORTED_FORM = "unsupported-form"
    UNSUPPORTED_METHADONE = "unsupported-methadone"
    NO_OMEQ_FACTOR = "no-omeq-factor"
    MISSING_STRENGTH = "missing-strength"


@dataclass(frozen=True)
class OMEQResult:
    """Calculated OMEQ (None unless reason is OK)."""

    omeq: float | None
    reason: ReasonCode

    @property
    def ok(self) -> bool:
        return self.reason == ReasonCode.OK


UNSUPPORTED_FORMS = frozenset({ProductForm.SUBLINGUAL_TABLET, ProductForm.SUBLINGUAL_FILM})

_MICROGRAM_UNITS = frozenset({"µg", "μg", "ug", "mcg"})


def to_number(value: float | int | str | None) -> float | None:
    """Parse a number, accepting decimal comma. Non-finite -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def strength_to_mg(strength: Strength | None) -> float | None:
    """Convert a strength to mg. Units other than mg, g, µg/ug/mcg -> None."""
    if strength is None:
        return None
    value = to_number(strength.value)
    if value is None:
        return None

    unit = str(strength.unit).strip().lower()
    if unit == "mg":
        return value
    if unit == "g":
        return value * 1000
    if unit in _MICROGRAM_UNITS:
        return value / 1000

    # mg/ml and other compound units
    return None


def strength_to_mcg_per_hour(strength: Strength | None) -> float | None:
    """Delivery rate of a patch strength in µg/hour, None if not a rate."""
    if strength is None or not strength.per_hour:
        return None
    if str(strength.unit).strip().lower() not in _MICROGRAM_UNITS:
        return None
    return to_number(strength.value)


def calculate_omeq(
    product: ProductIndexItem | None,
    daily_dose: float | None,
    strength: Strength | None,
) -> OMEQResult:
    """
    Calculate OMEQ for one medication.

    Args:
        product: Resolved product
        daily_dose: Units per day (ignored for patches)
        strength: Parsed strength

    Returns:
        OMEQResult with the value, or None and the first failing reason
    """
    if product is None:
        return OMEQResult(None, ReasonCode.MISSING_INPUT)

    route = product.route
    if route is None:
        return OMEQResult(None, ReasonCode.NO_ROUTE)

    if product.form in UNSUPPORTED_FORMS:
        return OMEQResult(None, ReasonCode.UNSUPPORTED_FORM)

    if product.atc_code == METHADONE_ATC and route == AdministrationRoute.ORAL:
        return OMEQResult(None, ReasonCode.UNSUPPORTED_METHADONE)

    opioid = find_opioid(product.atc_code, route)
    if opioid is None:
        return OMEQResult(None, ReasonCode.NO_OMEQ_FACTOR)

    if product.form == ProductForm.PATCH:
        rate = strength_to_mcg_per_hour(strength)
        if rate is None:
            return OMEQResult(None, ReasonCode.MISSING_STRENGTH)
        return OMEQResult(rate * opioid.omeq_factor, ReasonCode.OK)

    strength_mg = strength_to_mg(strength)
    if strength_mg is None:
        return OMEQResult(None, ReasonCode.MISSING_STRENGTH)

    if not daily_dose:
        return OMEQResult(None, ReasonCode.MISSING_INPUT)

    return OMEQResult(daily_dose * strength_mg * opioid.omeq_factor, ReasonCode.OK)


def parse_daily_dose(text: str | None) -> float | None:
    """Parse the dose field ('2', '1,5'). Blank or invalid -> None."""
    if text is None:
        return None
    return to_number(text.strip())


def round_omeq(value: float, digits: int = 2) -> float:
    """Round half up for display (2.345 -> 2.35)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass
class OMEQRow:
    """One line of the calculator: medication text + daily dose text."""

    medication_text: str = ""
    dose_text: str = ""


def calculate_row(
    row: OMEQRow,
    index: ProductIndex,
    max_daily_units: float = 20,
) -> OMEQResult:
    """
    Parse and calculate one calculator row.

    Patches ignore the dose field. For other forms a dose above
    max_daily_units is treated as missing (users typing mg instead of units).
    """
    parsed = parse_medication_input(row.medication_text, index)

    if parsed.product is not None and parsed.product.form == ProductForm.PATCH:
        return calculate_omeq(parsed.product, None, parsed.strength)

    dose = parse_daily_dose(row.dose_text)
    if dose is not None and dose > max_daily_units:
        dose = None

    return calculate_omeq(parsed.product, dose, parsed.strength)


def calculate_total_omeq(
    rows: list[OMEQRow],
    index: ProductIndex,
    max_daily_units: float = 20,
    round_digits: int = 2,
) -> float:
    """Sum OMEQ over all rows that calculate, rounded for display."""
    total = 0.0
    for row in rows:
        result = calculate_row(row, index, max_daily_units)
        if result.omeq is not None:
            total += result.omeq
    return round_omeq(total, round_digits)
