"""
OMEQ Module

Medication input parsing and oral morphine equivalent calculation.
"""

from pharmacy_tools.omeq.calc import (
    OMEQResult,
    OMEQRow,
    ReasonCode,
    calculate_omeq,
    calculate_total_omeq,
    strength_to_mg,
)
from pharmacy_tools.omeq.opioids import OPIOIDS, AdministrationRoute, OpioidDefinition, find_opioid
from pharmacy_tools.omeq.parser import ParsedMedicationInput, Strength, parse_medication_input
from pharmacy_tools.omeq.products import (
    Product,
    ProductForm,
    ProductIndex,
    ProductIndexItem,
    form_to_route,
    load_product_catalog,
)

__all__ = [
    "OMEQResult",
    "OMEQRow",
    "ReasonCode",
    "calculate_omeq",
    "calculate_total_omeq",
    "strength_to_mg",
    "OPIOIDS",
    "AdministrationRoute",
    "OpioidDefinition",
    "find_opioid",
    "ParsedMedicationInput",
    "Strength",
    "parse_medication_input",
    "Product",
    "ProductForm",
    "ProductIndex",
    "ProductIndexItem",
    "form_to_route",
    "load_product_catalog",
]
