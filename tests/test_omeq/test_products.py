"""
Tests for the product catalog and product index.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

import json
from pathlib import Path

import pytest

from pharmacy_tools.omeq.opioids import AdministrationRoute
from pharmacy_tools.omeq.products import (
    Product,
    ProductForm,
    ProductIndex,
    StrengthVariant,
    form_to_route,
    load_product_catalog,
    normalize_catalog,
    normalize_product,
    normalize_text,
)


class TestNormalizeText:
    """Tests for product name normalization."""

    def test_normalize(self):
        """Test lowercasing and punctuation removal."""
        assert normalize_text("OxyContin (depot),  10 mg") == "oxycontin depot 10 mg"

    def test_empty(self):
        """Test empty input."""
        assert normalize_text("  ") == ""


class TestProductForm:
    """Tests for ProductForm parsing and routes."""

    def test_parse_known(self):
        """Test known forms parse case-insensitively."""
        assert ProductForm.parse("Depotplaster") == ProductForm.PATCH
        assert ProductForm.parse(" tablett ") == ProductForm.TABLET

    def test_parse_unknown(self):
        """Test unknown forms map to OTHER."""
        assert ProductForm.parse("pulver til mikstur") == ProductForm.OTHER

    def test_parse_missing(self):
        """Test missing forms parse to None."""
        assert ProductForm.parse(None) is None
        assert ProductForm.parse("") is None

    @pytest.mark.parametrize(
        "form,route",
        [
            ("depotplaster", AdministrationRoute.TRANSDERMAL),
            ("injeksjon", AdministrationRoute.PARENTERAL),
            ("infusjons-/injeksjonsvæske", AdministrationRoute.PARENTERAL),
            ("depotinjeksjonsvæske", AdministrationRoute.PARENTERAL),
            ("nesespray", AdministrationRoute.INTRANASAL),
            ("sublingvalfilm", AdministrationRoute.SUBLINGUAL),
            ("lyofilisattablett", AdministrationRoute.SUBLINGUAL),
            ("stikkpille", AdministrationRoute.RECTAL),
            ("dråper", AdministrationRoute.ORAL),
            ("depottablett", AdministrationRoute.ORAL),
            ("mikstur", AdministrationRoute.ORAL),
        ],
    )
    def test_form_to_route(self, form: str, route: AdministrationRoute):
        """Test form to route mapping."""
        assert form_to_route(form) == route

    def test_form_without_route(self):
        """Test 'annet', unknown and missing forms have no route."""
        assert form_to_route("annet") is None
        assert form_to_route("ukjent") is None
        assert form_to_route(None) is None


class TestNormalizeProduct:
    """Tests for catalog row normalization."""

    def test_variant_shape(self):
        """Test rows with variants."""
        product = normalize_product(
            "n02ax02",
            {
                "name": "Tramagetic OD",
                "form": "depottablett",
                "variants": [{"strength": "200 mg", "productNumbers": [538145]}],
            },
        )

        assert product.atc_code == "N02AX02"
        assert product.form == ProductForm.EXTENDED_RELEASE_TABLET
        assert product.variants == (StrengthVariant("200 mg", (538145,)),)
        assert product.route == AdministrationRoute.ORAL

    def test_strengths_not_duplicated(self):
        """Test legacy strengths already covered by variants are not repeated."""
        product = normalize_product(
            "N02AA05",
            {
                "name": "OxyNorm",
                "form": "kapsel",
                "strengths": ["5 mg", "10 mg"],
                "variants": [{"strength": "5 mg", "productNumbers": [9521]}],
            },
        )

        assert product.strengths == ["5 mg", "10 mg"]
        assert product.variants[1].product_numbers == ()

    def test_legacy_single_strength(self):
        """Test flat product numbers attach to a single strength."""
        product = normalize_product(
            "R05DA04",
            {"name": "Kodein", "form": "tablett", "strengths": ["25 mg"], "productNumbers": ["0599456"]},
        )

        assert product.variants == (StrengthVariant("25 mg", (599456,)),)

    def test_legacy_many_strengths(self):
        """Test flat product numbers are kept apart when strengths are ambiguous."""
        product = normalize_product(
            "N02AA01",
            {
                "name": "Morfin",
                "form": "tablett",
                "strengths": ["10 mg", "30 mg"],
                "productNumber": 551747,
            },
        )

        assert len(product.variants) == 3
        assert product.variants[-1] == StrengthVariant(None, (551747,))

    def test_invalid_numbers_dropped(self):
        """Test non-numeric product numbers are ignored."""
        product = normalize_product(
            "N02AA01",
            {"name": "Morfin", "variants": [{"strength": "10 mg", "productNumbers": ["abc", True, 123]}]},
        )

        assert product.variants[0].product_numbers == (123,)

    def test_missing_name(self):
        """Test rows without a name are skipped."""
        assert normalize_product("N02AA01", {"form": "tablett"}) is None

    def test_normalize_catalog(self):
        """Test invalid rows are skipped per ATC code."""
        catalog = normalize_catalog({"n02aa01": [{"name": "Morfin"}, {"form": "tablett"}, "junk"]})

        assert list(catalog) == ["N02AA01"]
        assert [p.name for p in catalog["N02AA01"]] == ["Morfin"]


class TestLoadProductCatalog:
    """Tests for load_product_catalog."""

    def test_bundled_catalog(self, product_catalog):
        """Test the bundled catalog loads."""
        assert len(product_catalog) == 14
        names = {p.name for p in product_catalog["N02AX02"]}
        assert "Tramagetic OD" in names

    def test_custom_path(self, tmp_path: Path):
        """Test loading a catalog from a file."""
        path = tmp_path / "products.json"
        path.write_text(json.dumps({"N02AA01": [{"name": "Morfin", "form": "tablett"}]}))

        catalog = load_product_catalog(path)

        assert catalog["N02AA01"][0].name == "Morfin"

    def test_missing_file(self, tmp_path: Path):
        """Test missing catalog file raises."""
        with pytest.raises(FileNotFoundError):
            load_product_catalog(tmp_path / "missing.json")

    def test_wrong_shape(self, tmp_path: Path):
        """Test a catalog that is not an object raises."""
        path = tmp_path / "products.json"
        path.write_text("[]")

        with pytest.raises(ValueError):
            load_product_catalog(path)


class TestProductIndex:
    """Tests for ProductIndex."""

    def test_size(self, product_index: ProductIndex):
        """Test every catalog product is indexed."""
        assert len(product_index) == 78

    def test_longest_name_first(self, product_index: ProductIndex):
        """Test names are ordered longest first by their matched form."""
        lengths = [len(name) for _, name in product_index.by_length]
        assert lengths == sorted(lengths, reverse=True)

    def test_length_of_normalized_name(self):
        """Test ordering uses the normalized name, not the raw catalog name."""
        index = ProductIndex([Product("Abc  (retard)", "N02AA01"), Product("Abcdefghijk", "N02AA01")])

        assert [name for _, name in index.by_length] == ["abcdefghijk", "abc retard"]

    def test_by_number(self, product_index: ProductIndex):
        """Test product number lookup returns item and variant."""
        item, variant = product_index.by_number[538145]

        assert item.name == "Tramagetic OD"
        assert item.atc_code == "N02AX02"
        assert variant.strength == "200 mg"

    def test_first_product_owns_number(self):
        """Test a number listed twice belongs to the first product."""
        products = [
            Product("First", "N02AA01", variants=(StrengthVariant("10 mg", (111111,)),)),
            Product("Second", "N02AA01", variants=(StrengthVariant("30 mg", (111111,)),)),
        ]

        index = ProductIndex(products)

        assert index.by_number[111111][0].name == "First"
