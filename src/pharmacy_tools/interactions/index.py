"""
Interaction Index

Inverted index from substance names and ATC codes to interaction records.

Every ATC code is indexed under all of its prefixes
(N02AA01 -> N, N0, N02, N02A, N02AA, N02AA0, N02AA01), so selecting a class
code finds interactions registered on any of its children.

An interaction is reported only when the selected terms hit at least two
distinct substance groups of it.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from pharmacy_tools.interactions.types import InteractionRecord, normalize_atc

logger = logging.getLogger(__name__)

MIN_MATCHED_GROUPS = 2
DEFAULT_AUTOCOMPLETE_LIMIT = 12

_ATC_TERM_RE = re.compile(r"^[A-Za-z]\d{2}[A-Za-z0-9]*$")
_ATC_KEY_RE = re.compile(r"^[A-Z]\d{2}[A-Z0-9]*$")

# Norwegian collation: æ, ø, å sort after z
_NORDIC_ORDER = str.maketrans({"æ": "z{", "ø": "z|", "å": "z}"})


def normalize_text(value: str) -> str:
    """Lowercase, trim and collapse whitespace; µ -> u."""
    return re.sub(r"\s+", " ", value.lower().strip()).replace("µ", "u")


def looks_like_atc(term: str) -> bool:
    return bool(_ATC_TERM_RE.match(term.strip()))


def nordic_sort_key(label: str) -> str:
    """Sort key approximating Norwegian (nb) collation."""
    text = label.casefold().translate(_NORDIC_ORDER)
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


@dataclass(frozen=True)
class InteractionEntity:
    """A selectable substance (autocomplete option)."""

    label: str
    key: str  # normalized name
    atc: str | None = None

    @property
    def identity(self) -> str:
        return f"atc:{self.atc}" if self.atc else f"name:{self.key}"

    @property
    def display_label(self) -> str:
        return f"{self.label} ({self.atc})" if self.atc else self.label


@dataclass(frozen=True)
class InteractionOccurrence:
    """Where a substance occurs: interaction and substance group."""

    interaction_index: int
    group_index: int
    key: str
    atc: str | None
    label: str


@dataclass
class MatchResult:
    """An interaction hit by the selected terms in two or more groups."""

    interaction_index: int
    matched_groups: list[int] = field(default_factory=list)
    group_to_selected_terms: dict[int, list[str]] = field(default_factory=dict)


@dataclass
class InteractionIndex:
    """Entities, term -> occurrences, and the normalized records."""

    entities: list[InteractionEntity] = field(default_factory=list)
    term_index: dict[str, list[InteractionOccurrence]] = field(default_factory=dict)
    interactions: list[InteractionRecord] = field(default_factory=list)

    @classmethod
    def build(cls, records: Iterable[InteractionRecord | dict[str, Any]]) -> "InteractionIndex":
        return build_interactions_index(records)

    def occurrences(self, term: str) -> list[InteractionOccurrence]:
        """
        Occurrences for a normalized term.

        ATC-shaped terms missing from the index fall back to a scan for
        indexed ATC keys starting with the term.
        """
        direct = self.term_index.get(term)
        if direct:
            return direct

        if not _ATC_KEY_RE.match(term):
            return []

        found: list[InteractionOccurrence] = []
        for key, occurrences in self.term_index.items():
            if _ATC_KEY_RE.match(key) and key.startswith(term):
                found.extend(occurrences)
        return found

    def match(self, selected_terms: Iterable[str]) -> list[MatchResult]:
        return match_interactions_by_selected_terms(self, selected_terms)


def build_interactions_index(
    records: Iterable[InteractionRecord | dict[str, Any]],
) -> InteractionIndex:
    """
    Build the index. Raw dicts are normalized with InteractionRecord.from_dict;
    substances without a name are skipped, never the whole record.
    """
    index = InteractionIndex()
    seen_entities: set[str] = set()

    def add(term: str, occurrence: InteractionOccurrence) -> None:
        index.term_index.setdefault(term, []).append(occurrence)

    for interaction_index, raw in enumerate(records):
        record = raw if isinstance(raw, InteractionRecord) else InteractionRecord.from_dict(raw)
        index.interactions.append(record)

        for group_index, group in enumerate(record.substance_groups):
            for substance in group.substances:
                label = (substance.name or "").strip()
                if not label:
                    continue

                key = normalize_text(label)
                atc = substance.atc

                entity = InteractionEntity(label=label, key=key, atc=atc)
                if entity.identity not in seen_entities:
                    seen_entities.add(entity.identity)
                    index.entities.append(entity)

                occurrence = InteractionOccurrence(
                    interaction_index=interaction_index,
                    group_index=group_index,
                    key=key,
                    atc=atc,
                    label=label,
                )
                add(key, occurrence)

                if atc:
                    code = normalize_atc(atc)
                    for length in range(1, len(code) + 1):
                        add(code[:length], occurrence)

    index.entities.sort(key=lambda e: nordic_sort_key(e.label))

    logger.info(
        "Built interaction index: %d interactions, %d entities, %d terms",
        len(index.interactions),
        len(index.entities),
        len(index.term_index),
    )
    return index


def _normalize_term(term: str) -> str:
    return normalize_atc(term) if looks_like_atc(term) else normalize_text(term)


def match_interactions_by_selected_terms(
    index: InteractionIndex,
    selected_terms: Iterable[str],
) -> list[MatchResult]:
    """
    Match selected terms (substance labels or ATC codes/prefixes).

    Returns interactions with hits in at least two distinct substance groups,
    in original interaction order.
    """
    terms = [_normalize_term(t) for t in selected_terms if t and t.strip()]

    groups_by_interaction: dict[int, dict[int, set[str]]] = {}
    for term in terms:
        for occurrence in index.occurrences(term):
            groups = groups_by_interaction.setdefault(occurrence.interaction_index, {})
            groups.setdefault(occurrence.group_index, set()).add(term)

    results = []
    for interaction_index in sorted(groups_by_interaction):
        groups = groups_by_interaction[interaction_index]
        if len(groups) < MIN_MATCHED_GROUPS:
            continue
        matched_groups = sorted(groups)
        results.append(
            MatchResult(
                interaction_index=interaction_index,
                matched_groups=matched_groups,
                group_to_selected_terms={gi: sorted(groups[gi]) for gi in matched_groups},
            )
        )

    return results


def terms_for_entities(entities: Iterable[InteractionEntity]) -> list[str]:
    """Selected entities -> search terms (name key, plus ATC when known)."""
    terms = []
    for entity in entities:
        terms.append(entity.key)
        if entity.atc:
            terms.append(entity.atc)
    return terms


def filter_entities(
    entities: list[InteractionEntity],
    query: str,
    limit: int = DEFAULT_AUTOCOMPLETE_LIMIT,
) -> list[InteractionEntity]:
    """
    Autocomplete: label-prefix hits first, then label or ATC substring hits.
    """
    q = query.strip().lower()
    if not q:
        return entities[:limit]

    starts = [e for e in entities if e.label.lower().startswith(q)]
    contains = [
        e for e in entities
        if not e.label.lower().startswith(q)
        and (q in e.label.lower() or (e.atc is not None and q in e.atc.lower()))
    ]
    return (starts + contains)[:limit]


class RelevanceKind(str, Enum):
    """Coarse severity derived from the relevance text."""

    AVOID = "avoid"
    CAUTION = "caution"
    OK = "ok"


def relevance_kind(relevance_text: str | None) -> RelevanceKind:
    text = (relevance_text or "").lower()
    if "unngå" in text:
        return RelevanceKind.AVOID
    if "forholdsreg" in text:
        return RelevanceKind.CAUTION
    return RelevanceKind.OK


def format_interaction_summary(record: InteractionRecord) -> str:
    """Plain-text summary for pasting into a note."""
    lines = [f"Klinisk konsekvens: {record.clinical_consequence or '-'}"]
    if record.handling:
        lines.append(f"Håndtering: {record.handling}")
    return "\n".join(lines)


def pair_label(record: InteractionRecord, result: MatchResult) -> str:
    """'Group A × Group B' for the first two matched groups."""
    names = []
    for group_index in result.matched_groups[:2]:
        if group_index < len(record.substance_groups):
            name = record.substance_groups[group_index].name
            if name:
                names.append(name)
    return " × ".join(names) or "Vis treff"
