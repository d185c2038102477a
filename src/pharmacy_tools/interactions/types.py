"""
Interaction Data Types

Interaction records as exported from the FEST interaction register. The raw
JSON is loose (any nested field may be missing or null); ``from_dict``
normalizes it once so the index never has to guard against missing parts.
"""

from dataclasses import dataclass, field
from typing import Any


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def normalize_atc(value: str) -> str:
    """Uppercase and remove whitespace: ' n02 aa01' -> 'N02AA01'."""
    return "".join(value.split()).upper()


@dataclass(frozen=True)
class CodedValue:
    """A FEST coded value: v (code), dn (display name), s (code system)."""

    v: str | None = None
    dn: str | None = None
    s: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "CodedValue | None":
        data = _as_dict(data)
        if not data:
            return None
        return cls(v=_text(data.get("v")), dn=_text(data.get("dn")), s=_text(data.get("s")))


@dataclass(frozen=True)
class Reference:
    """Literature reference."""

    source: str | None = None
    link: str | None = None


@dataclass(frozen=True)
class Substance:
    """One substance in a substance group."""

    name: str | None = None
    atc: str | None = None  # normalized

    @classmethod
    def from_dict(cls, data: Any) -> "Substance":
        data = _as_dict(data)
        atc = _text(_as_dict(data.get("atc")).get("v"))
        return cls(
            name=_text(data.get("substans")),
            atc=normalize_atc(atc) if atc else None,
        )


@dataclass(frozen=True)
class SubstanceGroup:
    """Named group of substances on one side of an interaction."""

    name: str | None = None
    substances: tuple[Substance, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "SubstanceGroup":
        data = _as_dict(data)
        return cls(
            name=_text(data.get("navn")),
            substances=tuple(Substance.from_dict(s) for s in _as_list(data.get("substanser"))),
        )

    @property
    def display_name(self) -> str:
        """Group name, else the first substance name."""
        if self.name:
            return self.name
        for substance in self.substances:
            if substance.name:
                return substance.name
        return "(Ukjent)"


@dataclass(frozen=True)
class InteractionRecord:
    """A normalized interaction record."""

    interaction_id: str | None = None
    entry_id: str | None = None
    timestamp: str | None = None
    status: CodedValue | None = None
    relevance: CodedValue | None = None
    clinical_consequence: str | None = None
    mechanism: str | None = None
    source_basis: CodedValue | None = None
    handling: str | None = None
    display_rules: tuple[CodedValue, ...] = ()
    references: tuple[Reference, ...] = ()
    substance_groups: tuple[SubstanceGroup, ...] = field(default_factory=tuple)

    @property
    def relevance_text(self) -> str | None:
        return self.relevance.dn if self.relevance else None

    @property
    def relevance_code(self) -> str | None:
        return self.relevance.v if self.relevance else None

    @classmethod
    def from_dict(cls, data: Any) -> "InteractionRecord":
        """Normalize one raw record. Never raises on missing fields."""
        data = _as_dict(data)
        display_rules = []
        for rule in _as_list(data.get("visningsregler")):
            coded = CodedValue.from_dict(rule)
            if coded is not None:
                display_rules.append(coded)

        references = []
        for ref in _as_list(data.get("referanser")):
            ref = _as_dict(ref)
            if ref:
                references.append(Reference(source=_text(ref.get("kilde")), link=_text(ref.get("lenke"))))

        return cls(
            interaction_id=_text(data.get("interaksjonId")),
            entry_id=_text(data.get("oppfId")),
            timestamp=_text(data.get("tidspunkt")),
            status=CodedValue.from_dict(data.get("status")),
            relevance=CodedValue.from_dict(data.get("relevans")),
            clinical_consequence=_text(data.get("kliniskKonsekvens")),
            mechanism=_text(data.get("interaksjonsmekanisme")),
            source_basis=CodedValue.from_dict(data.get("kildegrunnlag")),
            handling=_text(data.get("handtering")),
            display_rules=tuple(display_rules),
            references=tuple(references),
            substance_groups=tuple(
                SubstanceGroup.from_dict(g) for g in _as_list(data.get("substansgrupper"))
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "interaction_id": self.interaction_id,
            "relevance": self.relevance_text,
            "relevance_code": self.relevance_code,
            "clinical_consequence": self.clinical_consequence,
            "mechanism": self.mechanism,
            "handling": self.handling,
            "substance_groups": [
                {
                    "name": g.name,
                    "substances": [{"name": s.name, "atc": s.atc} for s in g.substances],
                }
                for g in self.substance_groups
            ],
        }
