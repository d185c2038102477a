"""
Medication Search

Scored multi-token search over the registry and supplier catalogs.

Build once per catalog load, then call ``search`` per keystroke. Items are
tokenized at build time; a query is classified once and compared against
the prepared tokens.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable

from pharmacy_tools.search.mappers import fest_to_search_index, pim_to_search_index
from pharmacy_tools.search.normalize import is_number_token, to_tokens, token_matches
from pharmacy_tools.search.query import QueryProfile, classify_query
from pharmacy_tools.search.types import SearchIndexItem, SearchSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 25
MIN_FULL_QUERY_LENGTH = 8

NUMBER_SCORE = 2
TEXT_SCORE = 1
REQUIRED_TEXT_BONUS = 3
REQUIRED_STRENGTH_BONUS = 3
EXACT_ID_BONUS = 20
PREFIX_ID_BONUS = 10
COMBINED_STRENGTH_BONUS = 4
FULL_QUERY_BONUS = 6

_STRENGTH_UNITS = "mg|g|mcg|ug|µg|mikrog|mikrogram|ml"


@dataclass(frozen=True)
class SearchHit:
    """A matched item and its score."""

    item: SearchIndexItem
    score: int
    exact_id: bool = False


def _combined_strength_pattern(number: str) -> re.Pattern[str]:
    """'32' -> matches '32 mg/' or '32/' in raw catalog text."""
    escaped = re.escape(number).replace(r"\.", "[.,]")
    return re.compile(
        rf"(?<![\d.,]){escaped}\s*(?:(?:{_STRENGTH_UNITS})\s*)?/",
        re.IGNORECASE,
    )


class MedicationSearchIndex:
    """Search index over FEST and PIM items."""

    def __init__(
        self,
        items: list[SearchIndexItem],
        max_results: int = DEFAULT_MAX_RESULTS,
        min_full_query_length: int = MIN_FULL_QUERY_LENGTH,
    ):
        self.items = list(items)
        self.max_results = max_results
        self.min_full_query_length = min_full_query_length
        self._tokens = [tuple(to_tokens(item.search_text)) for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def build(
        cls,
        fest_rows: Iterable[dict[str, Any]] = (),
        pim_rows: Iterable[dict[str, Any]] = (),
        **kwargs: Any,
    ) -> "MedicationSearchIndex":
        """Build from raw catalog rows (FEST rows first, then PIM)."""
        fest_items = fest_to_search_index(fest_rows)
        pim_items = pim_to_search_index(pim_rows)
        logger.info(
            "Built search index: %d FEST items, %d PIM items",
            len(fest_items),
            len(pim_items),
        )
        return cls(fest_items + pim_items, **kwargs)

    def search(self, query: str, max_results: int | None = None) -> list[SearchIndexItem]:
        """Return the best matching items, highest score first."""
        return [hit.item for hit in self.search_hits(query, max_results)]

    def search_hits(self, query: str, max_results: int | None = None) -> list[SearchHit]:
        """Like search, but keeps scores."""
        limit = self.max_results if max_results is None else max_results
        profile = classify_query(query)
        if profile.is_empty:
            return []

        combined_re = None
        if len(profile.required_strength_tokens) == 1:
            combined_re = _combined_strength_pattern(profile.required_strength_tokens[0])

        hits: list[SearchHit] = []
        has_non_combination = False

        for item, hay_tokens in zip(self.items, self._tokens):
            hit = self._score(item, hay_tokens, profile, combined_re)
            if hit is None:
                continue
            if not profile.indicates_combination and not item.is_combination:
                has_non_combination = True
            hits.append(hit)

        if profile.is_likely_id_search:
            if any(hit.exact_id for hit in hits):
                hits = [hit for hit in hits if hit.exact_id]
        elif not profile.indicates_combination and has_non_combination:
            hits = [hit for hit in hits if not hit.item.is_combination]

        # sorted() is stable: equal scores keep catalog order
        hits = sorted(hits, key=lambda hit: hit.score, reverse=True)
        return hits[:limit]

    def _score(
        self,
        item: SearchIndexItem,
        hay_tokens: tuple[str, ...],
        profile: QueryProfile,
        combined_re: re.Pattern[str] | None,
    ) -> SearchHit | None:
        """Score one candidate, None when it fails a requirement."""
        if profile.is_likely_id_search and item.source != SearchSource.PIM:
            return None

        hay = item.search_text

        for token in profile.required_text_tokens:
            if not token_matches(hay_tokens, token):
                return None
        for token in profile.required_strength_tokens:
            if not token_matches(hay_tokens, token):
                return None

        score = 0
        exact_id = False

        if profile.is_likely_id_search:
            item_id = item.farmalogg_number or ""
            for token in profile.id_number_tokens:
                if not item_id.startswith(token):
                    return None
                if item_id == token:
                    exact_id = True
                    score += EXACT_ID_BONUS
                else:
                    score += PREFIX_ID_BONUS

        for token in profile.tokens:
            if is_number_token(token):
                if token in hay_tokens:
                    score += NUMBER_SCORE
            elif token in hay:
                score += TEXT_SCORE

        score += REQUIRED_TEXT_BONUS * len(profile.required_text_tokens)
        score += REQUIRED_STRENGTH_BONUS * len(profile.required_strength_tokens)

        if combined_re is not None and combined_re.search(item.display_name):
            score += COMBINED_STRENGTH_BONUS

        if len(profile.normalized) >= self.min_full_query_length and profile.normalized in hay:
            score += FULL_QUERY_BONUS

        return SearchHit(item=item, score=score, exact_id=exact_id)
