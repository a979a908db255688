"""
CareMatch - Eligibility Gate
Hard pass/fail filter applied before any scoring.

A candidate is eliminated when any gate fails:
    - inactive profile
    - distance above min(candidate.max_distance, config.max_distance)
    - experience below required experience minus a one-year grace margin
    - no exact/related specialization, when exact specialization is
      required and emergency mode is off
    - a required certification is missing
    - rating below config.min_rating, when set
"""

from enum import Enum
from typing import Iterable, List, Optional, Tuple
import logging

from app.schemas.matching_schemas import Assignment, CandidateProfile, MatchingConfig
from app.services.reference_data import related_specializations

logger = logging.getLogger(__name__)

EXPERIENCE_GRACE_YEARS = 1


class EligibilityReason(str, Enum):
    INACTIVE = "inactive"
    TOO_FAR = "too_far"
    INSUFFICIENT_EXPERIENCE = "insufficient_experience"
    SPECIALIZATION_MISMATCH = "specialization_mismatch"
    MISSING_CERTIFICATION = "missing_certification"
    RATING_TOO_LOW = "rating_too_low"


def is_specialization_match(candidate_spec: str, assignment_spec: str) -> bool:
    """Exact (case-insensitive) match or listed as related to the assignment's specialization."""
    candidate_spec = candidate_spec.lower()
    return (
        candidate_spec == assignment_spec.lower()
        or candidate_spec in related_specializations(assignment_spec)
    )


def ineligibility_reason(
    candidate: CandidateProfile,
    assignment: Assignment,
    config: MatchingConfig,
    distance_km: float,
) -> Optional[EligibilityReason]:
    """Return the first failing gate, or None when the candidate may be scored."""
    if not candidate.is_active:
        return EligibilityReason.INACTIVE

    if distance_km > min(candidate.max_distance, config.max_distance):
        return EligibilityReason.TOO_FAR

    if candidate.experience < max(0, assignment.required_experience - EXPERIENCE_GRACE_YEARS):
        return EligibilityReason.INSUFFICIENT_EXPERIENCE

    if config.require_exact_specialization and not config.emergency_mode:
        if not any(
            is_specialization_match(spec, assignment.specialization)
            for spec in candidate.specializations
        ):
            return EligibilityReason.SPECIALIZATION_MISMATCH

    if assignment.required_certifications and not assignment.required_certifications <= candidate.certifications:
        return EligibilityReason.MISSING_CERTIFICATION

    if config.min_rating is not None and candidate.rating < config.min_rating:
        return EligibilityReason.RATING_TOO_LOW

    return None


def eligible_with_distance(
    candidates: Iterable[CandidateProfile],
    assignment: Assignment,
    config: MatchingConfig,
    geo_service,
) -> List[Tuple[CandidateProfile, float]]:
    """
    Candidates that pass every gate, each paired with its distance (km)
    to the assignment so scoring does not recompute it.
    """
    assignment_loc = (assignment.latitude, assignment.longitude)
    eligible = []
    for candidate in candidates:
        distance = geo_service.calculate_distance(
            (candidate.latitude, candidate.longitude), assignment_loc
        )
        reason = ineligibility_reason(candidate, assignment, config, distance)
        if reason is None:
            eligible.append((candidate, distance))
        else:
            logger.debug(
                "Candidate %s eliminated for assignment %s: %s",
                candidate.id, assignment.id, reason.value
            )
    return eligible


def filter_eligible(
    candidates: Iterable[CandidateProfile],
    assignment: Assignment,
    config: MatchingConfig,
    geo_service,
) -> List[CandidateProfile]:
    """Keep only the candidates that pass every gate."""
    return [c for c, _ in eligible_with_distance(candidates, assignment, config, geo_service)]
