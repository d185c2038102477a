"""
Pytest Configuration and Shared Fixtures

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

import json
from pathlib import Path
from typing import Any

import pytest

from pharmacy_tools.omeq.products import ProductIndex, load_product_catalog


# =============================================================================
# PRODUCT CATALOG FIXTURES
# =============================================================================


@pytest.fixture(scope="session")
def product_catalog():
    """Bundled product catalog."""
    return load_product_catalog()


@pytest.fixture(scope="session")
def product_index(product_catalog) -> ProductIndex:
    """Product index built from the bundled catalog."""
    return ProductIndex.from_catalog(product_catalog)


# =============================================================================
# SEARCH CATALOG FIXTURES
# =============================================================================


@pytest.fixture
def fest_rows() -> list[dict[str, Any]]:
    """Registry rows covering plain, combination and look-alike strengths."""
    return [
        {
            "id": "ID_PARACET",
            "varenavn": "Paracet",
            "navnFormStyrke": "Paracet tab 500 mg",
            "virkestoff": "Paracetamol",
            "atc": "N02BE01",
            "produsent": "Karo Pharma",
            "reseptgruppe": "F",
        },
        {
            "id": "ID_CANDESARTAN",
            "varenavn": "Candesartan Krka",
            "navnFormStyrke": "Candesartan Krka tab 8 mg",
            "virkestoff": "Kandesartan",
            "atc": "C09CA06",
            "reseptgruppe": "C",
        },
        {
            "id": "ID_CANDESARTAN_HCT",
            "varenavn": "Candesartan/Hydrochlorothiazide Krka",
            "navnFormStyrke": "Candesartan/Hydrochlorothiazide Krka tab 16 mg/12,5 mg",
            "virkestoff": "Kandesartan og hydroklortiazid",
            "atc": "C09DA06",
            "reseptgruppe": "C",
        },
        {
            "id": "ID_CLOPIDOGREL",
            "varenavn": "Clopidogrel Krka",
            "navnFormStyrke": "Clopidogrel Krka tab 75 mg",
            "virkestoff": "Klopidogrel",
            "atc": "B01AC04",
        },
        {
            "id": "ID_ZOPICLONE",
            "varenavn": "Zopiclone Mylan",
            "navnFormStyrke": "Zopiclone Mylan tab 7,5 mg",
            "virkestoff": "Zopiklon",
            "atc": "N05CF01",
        },
        {
            "id": "ID_SYMBICORT",
            "varenavn": "Symbicort Turbuhaler",
            "navnFormStyrke": "Symbicort Turbuhaler inh pulv 160 µg/4,5 µg",
            "virkestoff": "Budesonid og formoterol",
            "atc": "R03AK07",
        },
    ]


@pytest.fixture
def pim_rows() -> list[dict[str, Any]]:
    """Supplier catalog rows with overlapping identifiers."""
    return [
        {"farmaloggNumber": "311148", "name": "Paracet", "nameFormStrength": "Paracet tab 500 mg 20 stk"},
        {"farmaloggNumber": "311155", "name": "Paracet", "nameFormStrength": "Paracet tab 500 mg 100 stk"},
        {"farmaloggNumber": "3111", "name": "Ibux", "nameFormStrength": "Ibux tab 400 mg 30 stk"},
        {"name": "Missing number"},
    ]


# =============================================================================
# INTERACTION FIXTURES
# =============================================================================


def _substance(name: str | None, atc: str | None = None) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if name is not None:
        data["substans"] = name
    if atc is not None:
        data["atc"] = {"v": atc, "dn": name, "s": "2.16.578.1.12.4.1.1.7180"}
    return data


@pytest.fixture
def interaction_records() -> list[dict[str, Any]]:
    """Raw interaction register records."""
    return [
        {
            "interaksjonId": "ID_TRAMADOL_SSRI",
            "relevans": {"v": "1", "dn": "Bør unngås"},
            "kliniskKonsekvens": "Økt risiko for serotonergt syndrom.",
            "interaksjonsmekanisme": "Additiv serotonerg effekt.",
            "handtering": "Unngå kombinasjonen.",
            "referanser": [{"kilde": "Preston CL. Stockley's Drug Interactions.", "lenke": "https://example.org/1"}],
            "substansgrupper": [
                {"navn": "Tramadol", "substanser": [_substance("Tramadol", "N02AX02")]},
                {
                    "navn": "SSRI",
                    "substanser": [
                        _substance("Fluoksetin", "N06AB03"),
                        _substance("Sertralin", "N06AB06"),
                    ],
                },
            ],
        },
        {
            "interaksjonId": "ID_OPIOID_BENZO",
            "relevans": {"v": "2", "dn": "Forholdsregler bør tas"},
            "kliniskKonsekvens": "Økt sedasjon og respirasjonsdepresjon.",
            "handtering": "Vurder dosereduksjon.",
            "substansgrupper": [
                {
                    "navn": "Opioider",
                    "substanser": [
                        _substance("Morfin", "N02AA01"),
                        _substance("Oksykodon", "N02AA05"),
                    ],
                },
                {"navn": "Benzodiazepiner", "substanser": [_substance("Diazepam", "N05BA01")]},
            ],
        },
        {
            "interaksjonId": "ID_PARACETAMOL_WARFARIN",
            "relevans": {"v": "3", "dn": "Ingen tiltak nødvendig"},
            "kliniskKonsekvens": "Mulig økt INR ved høye doser.",
            "substansgrupper": [
                {"navn": "Paracetamol", "substanser": [_substance("Paracetamol", "N02BE01")]},
                {"navn": "Warfarin", "substanser": [_substance("Warfarin", "B01AA03")]},
            ],
        },
        {
            "interaksjonId": "ID_ALCOHOL_ESTROGEN",
            "relevans": None,
            "substansgrupper": [
                {"navn": "Alkohol", "substanser": [_substance("Ætanol"), _substance(None, "V99")]},
                {"substanser": [_substance("Østradiol", "G03CA03")]},
                None,
            ],
        },
    ]


# =============================================================================
# FILE FIXTURES
# =============================================================================


@pytest.fixture
def write_json(tmp_path: Path):
    """Write an object to a JSON file under tmp_path and return the path."""

    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def data_files(write_json, fest_rows, pim_rows, interaction_records) -> dict[str, Path]:
    """All datasets written to disk."""
    return {
        "fest": write_json("fest.json", fest_rows),
        "pim": write_json("pim.json", pim_rows),
        "interactions": write_json("interactions.json", interaction_records),
    }
