"""
Product Catalog

Opioid products keyed by ATC code, the form -> route mapping, and the
product index used by the medication input parser.

Catalog rows come in two historical shapes: the current one carries
``variants`` (strength text + product numbers), the legacy one carries flat
``strengths`` and/or ``productNumbers``/``productNumber`` lists.
``normalize_product`` folds both into a single ``Product`` so matching code
never branches on shape.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any

from pharmacy_tools.omeq.opioids import AdministrationRoute

logger = logging.getLogger(__name__)


def normalize_text(value: str) -> str:
    """Lowercase, drop commas and parentheses, collapse whitespace."""
    return re.sub(r"\s+", " ", re.sub(r"[,()]", " ", value.lower())).strip()


class ProductForm(str, Enum):
    """Administration form as written in the product catalog."""

    PATCH = "depotplaster"
    SUBLINGUAL_TABLET = "sublingvaltablett"
    SUBLINGUAL_FILM = "sublingvalfilm"
    LYOPHILISATE_TABLET = "lyofilisattablett"
    NASAL_SPRAY = "nesespray"
    MIXTURE = "mikstur"
    DROPS = "dråper"
    CAPSULE = "kapsel"
    TABLET = "tablett"
    EFFERVESCENT_TABLET = "brusetablett"
    EXTENDED_RELEASE_TABLET = "depottablett"
    SUPPOSITORY = "stikkpille"
    INJECTION = "injeksjon"
    INFUSION_INJECTION_LIQUID = "infusjons-/injeksjonsvæske"
    DEPOT_INJECTION_LIQUID = "depotinjeksjonsvæske"
    OTHER = "annet"

    @classmethod
    def parse(cls, value: Any) -> "ProductForm | None":
        """Parse a catalog form string; unknown values map to OTHER."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if not text:
            return None
        try:
            return cls(text)
        except ValueError:
            return cls.OTHER


_FORM_ROUTES: dict[ProductForm, AdministrationRoute] = {
    ProductForm.PATCH: AdministrationRoute.TRANSDERMAL,
    ProductForm.INJECTION: AdministrationRoute.PARENTERAL,
    ProductForm.INFUSION_INJECTION_LIQUID: AdministrationRoute.PARENTERAL,
    ProductForm.DEPOT_INJECTION_LIQUID: AdministrationRoute.PARENTERAL,
    ProductForm.NASAL_SPRAY: AdministrationRoute.INTRANASAL,
    ProductForm.SUBLINGUAL_TABLET: AdministrationRoute.SUBLINGUAL,
    ProductForm.SUBLINGUAL_FILM: AdministrationRoute.SUBLINGUAL,
    ProductForm.LYOPHILISATE_TABLET: AdministrationRoute.SUBLINGUAL,
    ProductForm.SUPPOSITORY: AdministrationRoute.RECTAL,
    ProductForm.DROPS: AdministrationRoute.ORAL,
    ProductForm.TABLET: AdministrationRoute.ORAL,
    ProductForm.EFFERVESCENT_TABLET: AdministrationRoute.ORAL,
    ProductForm.EXTENDED_RELEASE_TABLET: AdministrationRoute.ORAL,
    ProductForm.CAPSULE: AdministrationRoute.ORAL,
    ProductForm.MIXTURE: AdministrationRoute.ORAL,
}


def form_to_route(form: ProductForm | str | None) -> AdministrationRoute | None:
    """Map a product form to its administration route (None for 'annet'/unknown)."""
    parsed = ProductForm.parse(form)
    if parsed is None:
        return None
    return _FORM_ROUTES.get(parsed)


@dataclass(frozen=True)
class StrengthVariant:
    """One strength of a product and the product numbers sold with it."""

    strength: str | None = None
    product_numbers: tuple[int, ...] = ()


@dataclass(frozen=True)
class Product:
    """A catalog product (trade name + form)."""

    name: str
    atc_code: str
    form: ProductForm | None = None
    manufacturer: str | None = None
    variants: tuple[StrengthVariant, ...] = ()
    notes: str | None = None

    @property
    def route(self) -> AdministrationRoute | None:
        return form_to_route(self.form)

    @property
    def strengths(self) -> list[str]:
        return [v.strength for v in self.variants if v.strength]


@dataclass(frozen=True)
class ProductIndexItem:
    """Product as seen by the input parser (display name, ATC, form)."""

    name: str
    atc_code: str
    form: ProductForm | None = None
    manufacturer: str | None = None

    @property
    def route(self) -> AdministrationRoute | None:
        return form_to_route(self.form)

    @classmethod
    def from_product(cls, product: Product) -> "ProductIndexItem":
        return cls(
            name=product.name,
            atc_code=product.atc_code,
            form=product.form,
            manufacturer=product.manufacturer,
        )


def _to_product_number(value: Any) -> int | None:
    """Parse a product number; strings may carry leading zeros."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text.isdigit():
        return None
    return int(text)


def _product_numbers(values: Any) -> tuple[int, ...]:
    if values is None:
        return ()
    if not isinstance(values, (list, tuple)):
        values = [values]
    numbers = []
    for value in values:
        number = _to_product_number(value)
        if number is not None:
            numbers.append(number)
    return tuple(numbers)


def normalize_product(atc_code: str, data: dict[str, Any]) -> Product | None:
    """
    Convert one raw catalog row into a Product.

    Handles both the variant shape and the legacy flat shape. Rows without a
    name are skipped (None).
    """
    name = str(data.get("name") or "").strip()
    if not name:
        return None

    variants: list[StrengthVariant] = []
    for raw in data.get("variants") or []:
        if not isinstance(raw, dict):
            continue
        strength = raw.get("strength")
        variants.append(
            StrengthVariant(
                strength=str(strength).strip() if strength else None,
                product_numbers=_product_numbers(raw.get("productNumbers")),
            )
        )

    covered = {v.strength for v in variants}
    legacy_strengths = [str(s).strip() for s in data.get("strengths") or [] if s]
    for strength in legacy_strengths:
        if strength not in covered:
            variants.append(StrengthVariant(strength=strength))
            covered.add(strength)

    # Legacy flat identifier list: only attributable to a strength when there is one
    legacy_numbers = _product_numbers(data.get("productNumbers")) + _product_numbers(
        data.get("productNumber")
    )
    if legacy_numbers:
        if len(variants) == 1:
            only = variants[0]
            variants[0] = StrengthVariant(
                strength=only.strength,
                product_numbers=only.product_numbers + legacy_numbers,
            )
        else:
            variants.append(StrengthVariant(strength=None, product_numbers=legacy_numbers))

    return Product(
        name=name,
        atc_code=atc_code.strip().upper(),
        form=ProductForm.parse(data.get("form")),
        manufacturer=data.get("manufacturer") or None,
        variants=tuple(variants),
        notes=data.get("notes") or None,
    )


def normalize_catalog(raw: dict[str, Any]) -> dict[str, list[Product]]:
    """Normalize a raw ATC -> product rows mapping."""
    catalog: dict[str, list[Product]] = {}
    skipped = 0

    for atc_code, rows in raw.items():
        products = []
        for row in rows or []:
            product = normalize_product(atc_code, row) if isinstance(row, dict) else None
            if product is None:
                skipped += 1
                continue
            products.append(product)
        catalog[atc_code.strip().upper()] = products

    if skipped:
        logger.debug("Skipped %d catalog rows without a name", skipped)
    return catalog


def load_product_catalog(path: str | Path | None = None) -> dict[str, list[Product]]:
    """
    Load the product catalog.

    Args:
        path: JSON file with an ATC -> product rows object. Defaults to the
            catalog bundled with the package.
    """
    if path is None:
        text = resources.files("pharmacy_tools.omeq").joinpath("data/atc_products.json").read_text(
            encoding="utf-8"
        )
    else:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Product catalog not found: {path}")
        text = path.read_text(encoding="utf-8")

    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("Product catalog must be a JSON object keyed by ATC code")

    catalog = normalize_catalog(raw)
    logger.info(
        "Loaded %d products under %d ATC codes",
        sum(len(p) for p in catalog.values()),
        len(catalog),
    )
    return catalog


class ProductIndex:
    """
    Lookup structure for the medication input parser.

    Holds the products longest-name-first (stable, so catalog order breaks
    ties) and a product number -> (item, variant) map. The first product in
    catalog order owns a number when it is listed more than once.
    """

    def __init__(self, products: list[Product]):
        self.products = list(products)
        self.items = [ProductIndexItem.from_product(p) for p in self.products]

        self.by_length = sorted(
            zip(self.items, (normalize_text(i.name) for i in self.items)),
            key=lambda pair: len(pair[1]),
            reverse=True,
        )

        self.by_number: dict[int, tuple[ProductIndexItem, StrengthVariant]] = {}
        for product, item in zip(self.products, self.items):
            for variant in product.variants:
                for number in variant.product_numbers:
                    self.by_number.setdefault(number, (item, variant))

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def from_catalog(cls, catalog: dict[str, list[Product]]) -> "ProductIndex":
        products = [p for rows in catalog.values() for p in rows]
        index = cls(products)
        logger.debug(
            "Built product index: %d products, %d product numbers",
            len(index.items),
            len(index.by_number),
        )
        return index

