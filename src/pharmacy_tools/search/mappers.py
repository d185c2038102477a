"""
Catalog Mappers

Turn raw catalog rows into SearchIndexItem. Each source names its fields
differently, so each gets its own mapper.

FEST rows (registry export):
    id, varenavn, navnFormStyrke, atc, virkestoff, produsent, reseptgruppe
PIM rows (supplier catalog):
    farmaloggNumber, name, nameFormStrength
"""

import logging
from typing import Any, Iterable

from pharmacy_tools.search.normalize import normalize_for_search
from pharmacy_tools.search.types import SearchIndexItem, SearchSource

logger = logging.getLogger(__name__)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _first(row: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = _text(row.get(key))
        if value:
            return value
    return None


def _join(*parts: str | None) -> str:
    return " ".join(p for p in parts if p)


def fest_to_search_index(rows: Iterable[dict[str, Any]]) -> list[SearchIndexItem]:
    """Map registry rows. Rows with no name at all are skipped."""
    items: list[SearchIndexItem] = []
    skipped = 0

    for row in rows:
        name = _first(row, "varenavn", "name")
        name_form_strength = _first(row, "navnFormStyrke", "nameFormStrength")
        display_name = name_form_strength or name
        row_id = _first(row, "id") or display_name
        if not display_name:
            skipped += 1
            continue

        substance = _first(row, "virkestoff", "substance")
        atc = _first(row, "atc")

        items.append(
            SearchIndexItem(
                source=SearchSource.FEST,
                id=f"{SearchSource.FEST.value}:{row_id}",
                display_name=display_name,
                search_text=normalize_for_search(_join(display_name, substance, atc)),
                atc=atc,
                substance=substance,
                prescription_group=_first(row, "reseptgruppe", "prescriptionGroup"),
                manufacturer=_first(row, "produsent", "manufacturer"),
                name=name,
                name_form_strength=name_form_strength,
            )
        )

    if skipped:
        logger.debug("Skipped %d FEST rows without a name", skipped)
    return items


def pim_to_search_index(rows: Iterable[dict[str, Any]]) -> list[SearchIndexItem]:
    """Map supplier catalog rows. Rows without a farmalogg number are skipped."""
    items: list[SearchIndexItem] = []
    skipped = 0

    for row in rows:
        number = _first(row, "farmaloggNumber", "farmalogg_number")
        name = _first(row, "name")
        name_form_strength = _first(row, "nameFormStrength", "name_form_strength")
        if not number:
            skipped += 1
            continue

        display_name = name_form_strength or name or ""
        items.append(
            SearchIndexItem(
                source=SearchSource.PIM,
                id=f"{SearchSource.PIM.value}:{number}",
                display_name=display_name,
                search_text=normalize_for_search(_join(name, name_form_strength, number)),
                farmalogg_number=number,
                name=name,
                name_form_strength=name_form_strength,
            )
        )

    if skipped:
        logger.debug("Skipped %d PIM rows without a farmalogg number", skipped)
    return items
