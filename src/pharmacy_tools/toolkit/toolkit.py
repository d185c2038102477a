"""
Pharmacy Toolkit

Owns the product, search and interaction indexes and exposes the query
operations on top of them. Indexes are built on first use and kept until
reload().
"""

from pathlib import Path
from typing import Iterable

from pharmacy_tools.interactions.index import (
    InteractionEntity,
    InteractionIndex,
    MatchResult,
    build_interactions_index,
    filter_entities,
)
from pharmacy_tools.omeq.calc import (
    OMEQResult,
    OMEQRow,
    calculate_omeq,
    calculate_row,
    calculate_total_omeq,
    parse_daily_dose,
)
from pharmacy_tools.omeq.parser import ParsedMedicationInput, parse_medication_input
from pharmacy_tools.omeq.products import ProductForm, ProductIndex, load_product_catalog
from pharmacy_tools.search.engine import MedicationSearchIndex
from pharmacy_tools.search.types import SearchIndexItem
from pharmacy_tools.toolkit.config import ToolkitConfig, load_config
from pharmacy_tools.toolkit.datasets import load_json_rows, load_optional_rows


class Toolkit:
    """Entry point for the medication engines."""

    def __init__(self, config: ToolkitConfig | None = None):
        """Initialize toolkit with configuration."""
        self.config = config or ToolkitConfig()

        # Built lazily
        self._product_index: ProductIndex | None = None
        self._search_index: MedicationSearchIndex | None = None
        self._interaction_index: InteractionIndex | None = None

    @classmethod
    def from_config(cls, config_path: str | Path) -> "Toolkit":
        """Create toolkit from config file."""
        return cls(load_config(config_path))

    @property
    def product_index(self) -> ProductIndex:
        """Get or build the product index."""
        if self._product_index is None:
            catalog = load_product_catalog(self.config.data.products_path)
            self._product_index = ProductIndex.from_catalog(catalog)
        return self._product_index

    @property
    def search_index(self) -> MedicationSearchIndex:
        """Get or build the medication search index."""
        if self._search_index is None:
            self._search_index = MedicationSearchIndex.build(
                fest_rows=load_optional_rows(self.config.data.fest_path),
                pim_rows=load_optional_rows(self.config.data.pim_path),
                max_results=self.config.search.max_results,
                min_full_query_length=self.config.search.min_full_query_length,
            )
        return self._search_index

    @property
    def interaction_index(self) -> InteractionIndex:
        """Get or build the interaction index."""
        if self._interaction_index is None:
            path = self.config.data.interactions_path
            if not path:
                raise ValueError("No interactions dataset configured (data.interactions_path)")
            self._interaction_index = build_interactions_index(load_json_rows(path))
        return self._interaction_index

    def reload(self) -> None:
        """Drop all built indexes; they are rebuilt on next use."""
        self._product_index = None
        self._search_index = None
        self._interaction_index = None

    # -------------------------------------------------------------------------
    # OMEQ
    # -------------------------------------------------------------------------

    def parse_medication(self, text: str) -> ParsedMedicationInput:
        """Parse medication input text."""
        return parse_medication_input(text, self.product_index)

    def calculate(self, medication_text: str, dose_text: str | None = None) -> OMEQResult:
        """Parse medication text and calculate its OMEQ (no dose limit)."""
        parsed = self.parse_medication(medication_text)
        dose = None
        if not (parsed.product and parsed.product.form == ProductForm.PATCH):
            dose = parse_daily_dose(dose_text)
        return calculate_omeq(parsed.product, dose, parsed.strength)

    def calculate_row(self, row: OMEQRow) -> OMEQResult:
        """Calculate one calculator row, applying the daily unit limit."""
        return calculate_row(row, self.product_index, self.config.omeq.max_daily_units)

    def total_omeq(self, rows: list[OMEQRow]) -> float:
        """Total OMEQ over calculator rows, rounded for display."""
        return calculate_total_omeq(
            rows,
            self.product_index,
            max_daily_units=self.config.omeq.max_daily_units,
            round_digits=self.config.omeq.round_digits,
        )

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self, query: str, max_results: int | None = None) -> list[SearchIndexItem]:
        """Search the medication catalogs."""
        return self.search_index.search(query, max_results)

    # -------------------------------------------------------------------------
    # Interactions
    # -------------------------------------------------------------------------

    def suggest_substances(self, query: str) -> list[InteractionEntity]:
        """Autocomplete options for the interaction lookup."""
        return filter_entities(
            self.interaction_index.entities,
            query,
            limit=self.config.interactions.autocomplete_limit,
        )

    def match_interactions(self, terms: Iterable[str]) -> list[MatchResult]:
        """Interactions between the selected substances/ATC codes."""
        return self.interaction_index.match(terms)
