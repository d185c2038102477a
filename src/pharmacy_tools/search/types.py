"""
Search Data Types

Common shape for rows from the national registry (FEST) and the supplier
catalog (PIM).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SearchSource(str, Enum):
    """Catalog a search item came from."""

    FEST = "FEST"
    PIM = "PIM"


@dataclass(frozen=True)
class SearchIndexItem:
    """A catalog row prepared for searching."""

    source: SearchSource
    id: str  # "<source>:<source id>"
    display_name: str
    search_text: str  # normalized

    # FEST only
    atc: str | None = None
    substance: str | None = None
    prescription_group: str | None = None
    manufacturer: str | None = None

    # PIM only
    farmalogg_number: str | None = None
    name: str | None = None
    name_form_strength: str | None = None

    @property
    def is_combination(self) -> bool:
        """Combination product: '/' in the name or ' og '/' and ' in the substance."""
        name = self.display_name.lower()
        substance = (self.substance or "").lower()
        return "/" in name or " og " in substance or " and " in substance

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {
            "source": self.source.value,
            "id": self.id,
            "display_name": self.display_name,
        }
        for key in (
            "atc",
            "substance",
            "prescription_group",
            "manufacturer",
            "farmalogg_number",
            "name",
            "name_form_strength",
        ):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data
