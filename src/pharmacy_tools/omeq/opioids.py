"""
Opioid Reference Table

Equianalgesic conversion factors relative to oral morphine (OMEQ).

Lookup is by ATC code AND administration route. The first matching entry wins,
so the order of OPIOIDS is part of the contract and must follow the
reference table exactly.
"""

from enum import Enum
from typing import NamedTuple


class AdministrationRoute(str, Enum):
    """Administration route used for OMEQ lookup."""

    ORAL = "oral"
    PARENTERAL = "parenteral"
    TRANSDERMAL = "transdermal"
    SUBLINGUAL = "sublingual"
    INTRANASAL = "intranasal"
    RECTAL = "rectal"


class OpioidDefinition(NamedTuple):
    """Reference entry for one substance/route combination."""
    id: str
    substance: str
    atc_codes: tuple[str, ...]
    routes: tuple[AdministrationRoute, ...]
    omeq_factor: float
    is_patch: bool = False
    is_short_acting: bool = False
    help_text: str | None = None


_ORAL = AdministrationRoute.ORAL
_PARENTERAL = AdministrationRoute.PARENTERAL
_TRANSDERMAL = AdministrationRoute.TRANSDERMAL
_SUBLINGUAL = AdministrationRoute.SUBLINGUAL
_INTRANASAL = AdministrationRoute.INTRANASAL
_RECTAL = AdministrationRoute.RECTAL

_PATCH_HELP = "For depotplaster er døgndose ikke nødvendig. Velg riktig styrke."
_FENTANYL_HELP = (
    "Styrken er allerede omregnet fra µg til mg. "
    "Legg inn døgndose som antall tabletter/doser (nesespray)."
)


# =============================================================================
# OMEQ factors (order is significant)
# =============================================================================

OPIOIDS: list[OpioidDefinition] = [
    # -------------------------------------------------------------------------
    # Buprenorfin
    # -------------------------------------------------------------------------
    OpioidDefinition("buprenorfin-sublingval", "Buprenorfin", ("N02AE01",), (_SUBLINGUAL,), 48,
                     is_short_acting=True),
    OpioidDefinition("buprenorfin-transdermal", "Buprenorfin", ("N02AE01",), (_TRANSDERMAL,), 2.22,
                     is_patch=True, help_text=_PATCH_HELP),

    # -------------------------------------------------------------------------
    # Dihydrokodein
    # -------------------------------------------------------------------------
    OpioidDefinition("dihydrokodein-oral", "Dihydrokodein", ("N02AA08",), (_ORAL,), 0.05),

    # -------------------------------------------------------------------------
    # Fentanyl
    # -------------------------------------------------------------------------
    OpioidDefinition("fentanyl-parenteral", "Fentanyl", ("N01AH01", "N02AB03"), (_PARENTERAL,), 150,
                     is_short_acting=True, help_text=_FENTANYL_HELP),
    OpioidDefinition("fentanyl-sublingval-intranasal", "Fentanyl", ("N01AH01", "N02AB03"),
                     (_SUBLINGUAL, _INTRANASAL), 250,
                     is_short_acting=True, help_text=_FENTANYL_HELP),
    OpioidDefinition("fentanyl-transdermal", "Fentanyl", ("N01AH01", "N02AB03"), (_TRANSDERMAL,), 2.4,
                     is_patch=True, help_text=_PATCH_HELP),

    # -------------------------------------------------------------------------
    # Hydromorfon
    # -------------------------------------------------------------------------
    OpioidDefinition("hydromorfon-oral", "Hydromorfon", ("N02AA03",), (_ORAL,), 5),
    OpioidDefinition("hydromorfon-parenteral", "Hydromorfon", ("N02AA03",), (_PARENTERAL,), 15,
                     is_short_acting=True),

    # -------------------------------------------------------------------------
    # Ketobemidon
    # -------------------------------------------------------------------------
    OpioidDefinition("ketobemidon-oral", "Ketobemidon", ("N02AB01", "N02AG02"), (_ORAL,), 1),
    OpioidDefinition("ketobemidon-parenteral", "Ketobemidon", ("N02AB01", "N02AG02"), (_PARENTERAL,), 3,
                     is_short_acting=True),
    OpioidDefinition("ketobemidon-rektal", "Ketobemidon", ("N02AB01", "N02AG02"), (_RECTAL,), 0.3),

    # -------------------------------------------------------------------------
    # Kodein
    # -------------------------------------------------------------------------
    OpioidDefinition("kodein-oral-rektal", "Kodein", ("N02AJ06", "R05DA04"), (_ORAL, _RECTAL), 0.1,
                     help_text="Styke til kodein er allerede valgt. "
                               "Legg inn døgndose som antall tabletter/stikkpiller."),

    # -------------------------------------------------------------------------
    # Metadon
    # -------------------------------------------------------------------------
    OpioidDefinition("metadon-oral", "Metadon", ("N07BC02",), (_ORAL,), 6,
                     help_text="Vær oppmerksom på ulike styrker. Legg inn døgndose i mg, ikke i ml."),
    OpioidDefinition("metadon-parenteral", "Metadon", ("N07BC02",), (_PARENTERAL,), 6,
                     is_short_acting=True),

    # -------------------------------------------------------------------------
    # Morfin
    # -------------------------------------------------------------------------
    OpioidDefinition("morfin-oral", "Morfin", ("N02AA01",), (_ORAL,), 1),
    OpioidDefinition("morfin-parenteral", "Morfin", ("N02AA01",), (_PARENTERAL,), 3,
                     is_short_acting=True),
    OpioidDefinition("morfin-rektal", "Morfin", ("N02AA01",), (_RECTAL,), 0.94),

    # -------------------------------------------------------------------------
    # Oksykodon
    # -------------------------------------------------------------------------
    OpioidDefinition("oksykodon-oral", "Oksykodon", ("N02AA05", "N02AA55"), (_ORAL,), 1.5,
                     help_text="Styrken for virkestoffet oksykodon er allerede valgt. "
                               "Legg inn døgndose som antall tabletter/doser."),
    OpioidDefinition("oksykodon-parenteral", "Oksykodon", ("N02AA05", "N02AA55"), (_PARENTERAL,), 3,
                     is_short_acting=True),

    # -------------------------------------------------------------------------
    # Opium, petidin, tapentadol, tramadol
    # -------------------------------------------------------------------------
    OpioidDefinition("opium-morfin-oral", "Opium (morfin)", ("A07DA02",), (_ORAL,), 1,
                     help_text="1 dråpe inneholder 0,5 mg morfin. 10 dråper = 5 mg morfin."),
    OpioidDefinition("petidin-parenteral", "Petidin", ("N02AB02",), (_PARENTERAL,), 0.3,
                     is_short_acting=True),
    OpioidDefinition("petidin-rektal", "Petidin", ("N02AB02",), (_RECTAL,), 0.1),
    OpioidDefinition("tapentadol-oral", "Tapentadol", ("N02AX06",), (_ORAL,), 0.2),
    OpioidDefinition("tramadol-oral", "Tramadol", ("N02AX02",), (_ORAL,), 0.15),
]


METHADONE_ATC = "N07BC02"


def find_opioid(
    atc_code: str | None,
    route: AdministrationRoute | None,
) -> OpioidDefinition | None:
    """
    Find the OMEQ reference entry for an ATC code and route.

    Returns the first entry whose codes contain atc_code and whose routes
    contain route, or None.
    """
    if not atc_code or route is None:
        return None

    for opioid in OPIOIDS:
        if atc_code in opioid.atc_codes and route in opioid.routes:
            return opioid

    return None


def opioid_groups() -> list[tuple[str, str, list[OpioidDefinition]]]:
    """
    Group the reference table by substance, keeping table order.

    Returns:
        List of (substance, comma-joined ATC codes, entries)
    """
    by_substance: dict[str, list[OpioidDefinition]] = {}
    for opioid in OPIOIDS:
        by_substance.setdefault(opioid.substance, []).append(opioid)

    groups = []
    for substance, items in by_substance.items():
        codes: list[str] = []
        for item in items:
            for code in item.atc_codes:
                if code not in codes:
                    codes.append(code)
        groups.append((substance, ", ".join(codes), items))

    return groups


_ROUTE_LABELS = {
    AdministrationRoute.ORAL: "Oral",
    AdministrationRoute.RECTAL: "Rektal",
    AdministrationRoute.PARENTERAL: "Parenteral",
    AdministrationRoute.TRANSDERMAL: "Transdermal",
    AdministrationRoute.SUBLINGUAL: "Sublingval",
    AdministrationRoute.INTRANASAL: "Intranasal",
}


def route_label(routes: tuple[AdministrationRoute, ...] | list[AdministrationRoute]) -> str:
    """Display label for the routes of one reference entry."""
    route_set = set(routes)
    if {AdministrationRoute.SUBLINGUAL, AdministrationRoute.INTRANASAL} <= route_set:
        return "Sublingval/intranasal"
    if {AdministrationRoute.ORAL, AdministrationRoute.RECTAL} <= route_set:
        return "Oral/rektal"

    if not routes:
        return ""
    first = routes[0]
    if first in _ROUTE_LABELS:
        return _ROUTE_LABELS[first]
    return "/".join(r.value for r in routes)


def format_factor(value: float) -> str:
    """Format a factor with decimal comma: 2.4 -> '2,4', 48 -> '48'."""
    if float(value).is_integer():
        return str(int(value))
    return str(value).replace(".", ",")
