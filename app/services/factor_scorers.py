"""
CareMatch - Factor Scorers
Eight independent, pure scoring functions.

Each scorer returns a FactorResult whose raw score is bounded by its cap:

    +-----------------+------+
    | specialization  |  30  |
    | experience      |  25  |
    | proximity       |  15  |
    | certifications  |  10  |
    | adaptability    |  10  |
    | availability    |   5  |
    | history         |   5  |
    | bonus           |  10  |  (never weighted)
    +-----------------+------+

Every point awarded is accompanied by a factor string naming why, so a
total can be recomputed by hand from the explanation list.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from app.schemas.matching_schemas import (
    Assignment,
    CandidateProfile,
    Mobility,
    PatientCategory,
    Urgency,
)
from app.services.reference_data import (
    ADVANCED_CERTIFICATIONS,
    EMERGENCY_SPECIALIZATION,
    GENERALIST_SPECIALIZATIONS,
    INFECTIOUS_DISEASE_KEYWORDS,
    NIGHT_SHIFTS,
    related_specializations,
    specialized_certifications,
)

SPECIALIZATION_CAP = 30
EXPERIENCE_CAP = 25
PROXIMITY_CAP = 15
CERTIFICATIONS_CAP = 10
ADAPTABILITY_CAP = 10
AVAILABILITY_CAP = 5
HISTORY_CAP = 5
BONUS_CAP = 10

# Used when a candidate has never been assigned
DEFAULT_DAYS_SINCE_LAST_MISSION = 30


@dataclass(frozen=True)
class FactorResult:
    score: float
    factors: List[str] = field(default_factory=list)
    warning: Optional[str] = None


def _years(value: float) -> str:
    return f"{value:g}"


# =============================================================================
# 1. SPECIALIZATION (max 30)
# =============================================================================

def score_specialization(candidate: CandidateProfile, assignment: Assignment) -> FactorResult:
    score = 0
    factors = []
    candidate_specs = sorted(candidate.specializations)
    lowered = {spec.lower() for spec in candidate_specs}
    wanted = assignment.specialization.lower()

    if wanted in lowered:
        score = 30
        factors.append(f"Specialization {assignment.specialization} mastered")
    else:
        related = related_specializations(assignment.specialization)
        related_spec = next((s for s in candidate_specs if s.lower() in related), None)
        if related_spec:
            score = 20
            factors.append(f"Related specialization ({related_spec})")
        elif lowered & GENERALIST_SPECIALIZATIONS:
            score = 15
            factors.append("Adaptable generalist profile")

    if len(candidate_specs) > 2:
        score += 3
        factors.append("Multiple specializations")

    return FactorResult(min(score, SPECIALIZATION_CAP), factors)


# =============================================================================
# 2. EXPERIENCE (max 25)
# =============================================================================

def score_experience(candidate: CandidateProfile, assignment: Assignment) -> FactorResult:
    factors = []
    warning = None
    ratio = candidate.experience / max(assignment.required_experience, 1)

    if ratio >= 2:
        score = 25
        factors.append(f"Experience well above requirement ({_years(candidate.experience)} years)")
    elif ratio >= 1.5:
        score = 22
        factors.append(f"Highly experienced ({_years(candidate.experience)} years)")
    elif ratio >= 1:
        score = 20
        factors.append(f"Adequate experience ({_years(candidate.experience)} years)")
    elif ratio >= 0.8:
        score = 15
        factors.append("Experience close to requirement")
        warning = "Experience slightly insufficient"
    else:
        score = 8
        warning = "Experience insufficient for this assignment"

    if candidate.completed_missions > 20:
        score += 3
        factors.append("Many successful assignments")
    elif candidate.completed_missions > 10:
        score += 2
        factors.append("Good assignment track record")

    return FactorResult(min(score, EXPERIENCE_CAP), factors, warning)


# =============================================================================
# 3. PROXIMITY (max 15)
# =============================================================================

PROXIMITY_TIERS = (
    (2, 15, "Very close (≤2km)"),
    (5, 13, "Close (≤5km)"),
    (10, 11, "Nearby (≤10km)"),
    (20, 8, "Reasonable distance (≤20km)"),
    (30, 5, "Acceptable distance (≤30km)"),
)


def score_proximity(candidate: CandidateProfile, assignment: Assignment, distance_km: float) -> FactorResult:
    factors = []
    for limit, points, label in PROXIMITY_TIERS:
        if distance_km <= limit:
            score = points
            factors.append(label)
            break
    else:
        score = 2
        factors.append("Long distance (>30km)")

    if candidate.mobility == Mobility.VEHICLE and distance_km > 10:
        score += 2
        factors.append("Own vehicle")

    return FactorResult(min(score, PROXIMITY_CAP), factors)


# =============================================================================
# 4. CERTIFICATIONS & LANGUAGES (max 10)
# =============================================================================

def score_certifications(candidate: CandidateProfile, assignment: Assignment) -> FactorResult:
    score = 0
    factors = []

    advanced = sorted(candidate.certifications & ADVANCED_CERTIFICATIONS)
    if advanced:
        score += min(len(advanced) * 3, 8)
        factors.append(f"Certifications: {', '.join(advanced)}")

    if candidate.certifications & specialized_certifications(assignment.specialization):
        score += 4
        factors.append("Specialized certifications")

    common_languages = sorted(candidate.languages & assignment.preferred_languages)
    if common_languages:
        score += 2
        factors.append(f"Languages: {', '.join(common_languages)}")

    return FactorResult(min(score, CERTIFICATIONS_CAP), factors)


# =============================================================================
# 5. ADAPTABILITY (max 10)
# =============================================================================

def score_adaptability(candidate: CandidateProfile, assignment: Assignment) -> FactorResult:
    score = 0
    factors = []

    if assignment.stress_level <= candidate.stress_resistance:
        score += 4
        factors.append("Stress resistance suited to the assignment")
    elif assignment.stress_level <= candidate.stress_resistance + 1:
        score += 2
        factors.append("Can handle the stress level")

    if assignment.team_size > 5 and candidate.teamwork >= 4:
        score += 3
        factors.append("Excellent teamwork")
    elif candidate.teamwork >= 3:
        score += 2
        factors.append("Good team spirit")

    if candidate.flexibility >= 4:
        score += 3
        factors.append("Highly flexible")
    elif candidate.flexibility >= 3:
        score += 2
        factors.append("Good adaptability")

    return FactorResult(min(score, ADAPTABILITY_CAP), factors)


# =============================================================================
# 6. AVAILABILITY (max 5)
# =============================================================================

def score_availability(candidate: CandidateProfile, assignment: Assignment) -> FactorResult:
    score = 0
    factors = []

    if assignment.shift in candidate.preferred_shifts:
        score += 3
        factors.append(f"Prefers {assignment.shift} shifts")
    elif not candidate.preferred_shifts:
        score += 2
        factors.append("Flexible on shifts")

    if assignment.shift.lower() in NIGHT_SHIFTS and candidate.night_shift_experience:
        score += 2
        factors.append("Night shift experience")

    if assignment.patient_type in candidate.preferred_patient_types:
        score += 1
        factors.append(f"Prefers {assignment.patient_type} patients")

    return FactorResult(min(score, AVAILABILITY_CAP), factors)


# =============================================================================
# 7. HISTORY (max 5)
# =============================================================================

def score_history(candidate: CandidateProfile, assignment: Assignment) -> FactorResult:
    score = 0
    factors = []

    past = candidate.establishment_history.get(assignment.establishment_id, 0)
    if past > 0:
        score += min(past, 4)
        factors.append(f"{past} successful assignments at this facility")

    if candidate.rating >= 4.8:
        score += 1
        factors.append("Excellent rating (4.8+)")
    elif candidate.rating >= 4.5:
        score += 0.5
        factors.append("Very good rating (4.5+)")

    return FactorResult(min(score, HISTORY_CAP), factors)


# =============================================================================
# 8. SPECIAL BONUS (max 10, unweighted)
# =============================================================================

def _as_utc(value: datetime) -> datetime:
    # naive timestamps are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since_last_mission(candidate: CandidateProfile, now: datetime) -> float:
    if candidate.last_mission_date is None:
        return DEFAULT_DAYS_SINCE_LAST_MISSION
    elapsed = _as_utc(now) - _as_utc(candidate.last_mission_date)
    return elapsed.total_seconds() / 86400


def score_bonus(candidate: CandidateProfile, assignment: Assignment, now: datetime) -> FactorResult:
    score = 0
    factors = []

    if assignment.urgency == Urgency.HIGH and days_since_last_mission(candidate, now) >= 7:
        score += 5
        factors.append("Immediately available for urgent assignment")

    if assignment.specialization.lower() == EMERGENCY_SPECIALIZATION and candidate.urgency_experience:
        score += 3
        factors.append("Emergency care experience")

    if assignment.patient_type == PatientCategory.PEDIATRIC and candidate.pediatric_experience:
        score += 3
        factors.append("Pediatric experience")

    if assignment.patient_type == PatientCategory.GERIATRIC and candidate.geriatric_experience:
        score += 3
        factors.append("Geriatric experience")

    title = assignment.title.lower()
    if candidate.covid_experience and any(k in title for k in INFECTIOUS_DISEASE_KEYWORDS):
        score += 4
        factors.append("Validated infectious disease experience")

    return FactorResult(min(score, BONUS_CAP), factors)
