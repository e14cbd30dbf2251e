"""Static registry of invoice presets (CIUS profiles and extensions).

A preset is selected from the document's specification identifier
(``cbc:CustomizationID``, BT-24).  An exact match always wins; otherwise the
longest registered prefix decides, so that versioned or extended
identifiers (``...:xrechnung_3.0``, ``...#conformant#...``) still resolve.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

log = logging.getLogger(__name__)

EN16931 = "urn:cen.eu:en16931:2017"
PEPPOL_BIS3 = f"{EN16931}#compliant#urn:fdc:peppol.eu:2017:poacc:billing:3.0"


class PresetVariant(str, Enum):
    PEPPOL = "peppol"
    CIUS_RO = "cius-ro"
    CIUS_IT = "cius-it"
    CIUS_ES_FACE = "cius-es-face"
    NLCIUS = "nlcius"
    XRECHNUNG = "xrechnung"


@dataclass(frozen=True)
class Preset:
    variant: PresetVariant
    name: str
    specification: str
    prefixes: Tuple[str, ...] = ()

    def matches(self, specification: str) -> int:
        """Return match strength for ``specification`` (0 = no match).

        Exact matches rank above every prefix match; prefix matches rank by
        prefix length.
        """
        if specification == self.specification:
            return 1_000_000
        best = 0
        for prefix in self.prefixes:
            if specification.startswith(prefix):
                best = max(best, len(prefix))
        return best


PRESETS: Tuple[Preset, ...] = (
    Preset(
        PresetVariant.PEPPOL,
        "Peppol BIS Billing 3.0",
        PEPPOL_BIS3,
        prefixes=(f"{PEPPOL_BIS3}#conformant#",),
    ),
    Preset(
        PresetVariant.CIUS_RO,
        "CIUS-RO",
        f"{EN16931}#compliant#urn:efactura.mfinante.ro:CIUS-RO:1.0.1",
        prefixes=(f"{EN16931}#compliant#urn:efactura.mfinante.ro:CIUS-RO:",),
    ),
    Preset(
        PresetVariant.CIUS_IT,
        "CIUS-IT",
        f"{EN16931}#compliant#urn:fatturapa.gov.it:CIUS-IT:2.0.0",
        prefixes=(f"{EN16931}#compliant#urn:fatturapa.gov.it:CIUS-IT:",),
    ),
    Preset(
        PresetVariant.CIUS_ES_FACE,
        "CIUS-ES-FACe",
        f"{EN16931}#compliant#urn:feap.gob.es",
    ),
    Preset(
        PresetVariant.NLCIUS,
        "NLCIUS",
        f"{EN16931}#compliant#urn:fdc:nen.nl:nlcius:v1.0",
        prefixes=(f"{EN16931}#compliant#urn:fdc:nen.nl:nlcius:",),
    ),
    Preset(
        PresetVariant.XRECHNUNG,
        "XRechnung",
        f"{EN16931}#compliant#urn:xeinkauf.de:kosit:xrechnung_3.0",
        prefixes=(
            f"{EN16931}#compliant#urn:xeinkauf.de:kosit:xrechnung_",
            f"{EN16931}#compliant#urn:xoev-de:kosit:standard:xrechnung_",
        ),
    ),
)


def get_preset(variant: PresetVariant | str) -> Preset:
    """Return the registered preset for ``variant``."""
    variant = PresetVariant(variant)
    for preset in PRESETS:
        if preset.variant is variant:
            return preset
    raise KeyError(variant)


def resolve_preset(specification: str) -> Optional[Preset]:
    """Return the preset bound to ``specification`` or ``None``."""
    best: Optional[Preset] = None
    best_score = 0
    for preset in PRESETS:
        score = preset.matches(specification)
        if score > best_score:
            best, best_score = preset, score
    if best is not None:
        log.debug("Resolved preset %s for %s", best.name, specification)
    return best
