"""
Interactions Module

Interaction register index and selected-term matching.
"""

from pharmacy_tools.interactions.index import (
    InteractionEntity,
    InteractionIndex,
    InteractionOccurrence,
    MatchResult,
    RelevanceKind,
    build_interactions_index,
    filter_entities,
    format_interaction_summary,
    match_interactions_by_selected_terms,
    relevance_kind,
    terms_for_entities,
)
from pharmacy_tools.interactions.types import InteractionRecord, Substance, SubstanceGroup

__all__ = [
    "InteractionEntity",
    "InteractionIndex",
    "InteractionOccurrence",
    "MatchResult",
    "RelevanceKind",
    "build_interactions_index",
    "filter_entities",
    "format_interaction_summary",
    "match_interactions_by_selected_terms",
    "relevance_kind",
    "terms_for_entities",
    "InteractionRecord",
    "Substance",
    "SubstanceGroup",
]
