"""
CareMatch - Matching Reference Data
Immutable lookup tables consulted by the eligibility gate and factor scorers.

Keys and values are lower-case specialization codes as used by facilities
when publishing assignments.
"""

from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple


# Assignment specialization -> candidate specializations considered adjacent.
# Explicitly enumerated: adjacency is not assumed to be symmetric.
RELATED_SPECIALIZATIONS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "urgences": ("cardiologie", "pneumologie", "neurologie", "traumatologie"),
    "cardiologie": ("urgences", "reanimation", "soins_intensifs"),
    "pediatrie": ("urgences", "neonatologie", "puericulture"),
    "geriatrie": ("neurologie", "cardiologie", "psychiatrie"),
    "reanimation": ("urgences", "cardiologie", "pneumologie", "anesthesie"),
    "chirurgie": ("urgences", "anesthesie", "soins_intensifs"),
    "psychiatrie": ("neurologie", "geriatrie", "addictologie"),
})

# Assignment specialization -> certifications that earn the specialized-cert bonus
SPECIALIZED_CERTIFICATIONS: Mapping[str, FrozenSet[str]] = MappingProxyType({
    "urgences": frozenset({"AFGSU", "ACLS", "PALS"}),
    "cardiologie": frozenset({"BLS", "ACLS", "ECG"}),
    "pediatrie": frozenset({"PALS", "Vaccination"}),
    "reanimation": frozenset({"ACLS", "BLS", "Ventilation"}),
    "chirurgie": frozenset({"BLS", "Bloc_Operatoire", "Sterilisation"}),
})

ADVANCED_CERTIFICATIONS: FrozenSet[str] = frozenset({"BLS", "ACLS", "PALS", "AFGSU"})

GENERALIST_SPECIALIZATIONS: FrozenSet[str] = frozenset({"general", "polyvalent"})

EMERGENCY_SPECIALIZATION = "urgences"

NIGHT_SHIFTS: FrozenSet[str] = frozenset({"nuit", "night"})

# Matched case-insensitively against the assignment title
INFECTIOUS_DISEASE_KEYWORDS: Tuple[str, ...] = ("covid",)

# km/h by mobility mode
TRAVEL_SPEEDS_KMH: Mapping[str, float] = MappingProxyType({
    "walking": 5,
    "bike": 15,
    "public_transport": 25,
    "vehicle": 40,
})
DEFAULT_TRAVEL_SPEED_KMH = TRAVEL_SPEEDS_KMH["public_transport"]


def related_specializations(assignment_specialization: str) -> Tuple[str, ...]:
    return RELATED_SPECIALIZATIONS.get(assignment_specialization.lower(), ())


def specialized_certifications(assignment_specialization: str) -> FrozenSet[str]:
    return SPECIALIZED_CERTIFICATIONS.get(assignment_specialization.lower(), frozenset())
