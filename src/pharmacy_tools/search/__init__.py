"""
Search Module

Normalized, scored product search over the FEST and PIM catalogs.
"""

from pharmacy_tools.search.engine import MedicationSearchIndex, SearchHit
from pharmacy_tools.search.mappers import fest_to_search_index, pim_to_search_index
from pharmacy_tools.search.normalize import normalize_for_search, to_tokens
from pharmacy_tools.search.query import QueryProfile, classify_query
from pharmacy_tools.search.types import SearchIndexItem, SearchSource

__all__ = [
    "MedicationSearchIndex",
    "SearchHit",
    "fest_to_search_index",
    "pim_to_search_index",
    "normalize_for_search",
    "to_tokens",
    "QueryProfile",
    "classify_query",
    "SearchIndexItem",
    "SearchSource",
]
