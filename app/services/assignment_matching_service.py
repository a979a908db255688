"""
CareMatch - Assignment Matching Service
Runs the matching engine for a stored assignment against the active
candidate pool.

CONFIG PRECEDENCE:
    application defaults  <  facility saved criteria  <  request overrides

`minExperience` in a request replaces the assignment's required experience
for that run only. Nothing is persisted and nobody is notified: results are
marked `notification_sent=False` for the downstream notifier to act on.
"""

from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from app.config import get_settings
from app.schemas.matching_schemas import (
    Assignment,
    AssignmentMatchResponse,
    CandidateMatchSchema,
    CandidateProfile,
    FacilityCriteriaSchema,
    FactorBreakdownSchema,
    MatchCriteriaRequest,
    MatchingConfig,
)
from app.services.matching_engine import MatchingEngine, MatchResult, round_half_up
from app.services.repositories import (
    AssignmentRepository,
    CandidatePoolProvider,
    FacilityPreferenceRepository,
)

logger = logging.getLogger(__name__)

ALGORITHM_NAME = "deterministic_reinforced"


def build_config(
    defaults: MatchingConfig,
    facility: Optional[FacilityCriteriaSchema] = None,
    request: Optional[MatchCriteriaRequest] = None,
) -> MatchingConfig:
    """Layer facility criteria and request overrides on top of defaults."""
    values = defaults.model_dump()

    if facility is not None:
        for key in ("minimum_score", "max_candidates", "max_distance", "min_rating"):
            value = getattr(facility, key)
            if value is not None:
                values[key] = value
        values["require_exact_specialization"] = facility.require_exact_specialization
        values["prioritize_history"] = facility.prioritize_history
        values["emergency_mode"] = facility.emergency_mode
        if facility.custom_weights is not None:
            values["custom_weights"] = facility.custom_weights.model_dump()

    if request is not None:
        for key in ("max_candidates", "max_distance", "min_rating"):
            value = getattr(request, key)
            if value is not None:
                values[key] = value

    return MatchingConfig(**values)


def apply_experience_floor(assignment: Assignment, request: Optional[MatchCriteriaRequest]) -> Assignment:
    if request is None or request.min_experience is None:
        return assignment
    return assignment.model_copy(update={"required_experience": request.min_experience})


def to_candidate_match(result: MatchResult, candidate: CandidateProfile) -> CandidateMatchSchema:
    scores = result.scores
    return CandidateMatchSchema(
        candidate_id=result.candidate_id,
        name=candidate.full_name,
        score=result.total_score,
        distance=round_half_up(result.distance * 10) / 10,
        estimated_travel_time=result.estimated_travel_time,
        experience=candidate.experience,
        rating=candidate.rating,
        specializations=sorted(candidate.specializations),
        matching_factors=list(result.factors),
        breakdown=FactorBreakdownSchema(
            specialization=round_half_up(scores.specialization),
            experience=round_half_up(scores.experience),
            proximity=round_half_up(scores.proximity),
            certifications=round_half_up(scores.certifications),
            adaptability=round_half_up(scores.adaptability),
            availability=round_half_up(scores.availability),
            history=round_half_up(scores.history),
            bonus=round_half_up(scores.bonus),
        ),
        confidence=result.confidence,
        priority=result.priority,
        warnings=list(result.warnings),
        notification_sent=False,
    )


class AssignmentMatchingService:
    """Glue between the repositories and the stateless engine."""

    def __init__(self, db: Session, engine: Optional[MatchingEngine] = None):
        self.settings = get_settings()
        self.assignments = AssignmentRepository(db)
        self.candidates = CandidatePoolProvider(db)
        self.preferences = FacilityPreferenceRepository(db)
        self.engine = engine or MatchingEngine.from_settings(self.settings)

    def match_assignment(
        self,
        assignment_id: int,
        request: Optional[MatchCriteriaRequest] = None,
        now: Optional[datetime] = None,
    ) -> AssignmentMatchResponse:
        """
        Match the stored assignment against the active pool.

        Raises AssignmentNotFoundError for an unknown id.
        """
        # The request boundary is the one place allowed to read the clock
        now = now or datetime.now(timezone.utc)

        assignment = self.assignments.get(assignment_id)
        facility = self.preferences.get(assignment.establishment_id)
        config = build_config(MatchingConfig.default(self.settings), facility, request)
        assignment = apply_experience_floor(assignment, request)

        pool = self.candidates.list_active()
        by_id = {c.id: c for c in pool}

        logger.info("Matching assignment %s with criteria %s", assignment_id, request)
        results = self.engine.find_best_matches(assignment, pool, config, now=now)

        return AssignmentMatchResponse(
            success=True,
            assignment_id=assignment_id,
            total_matches=len(results),
            matches=[to_candidate_match(r, by_id[r.candidate_id]) for r in results],
            criteria=self._criteria(config, assignment, request),
        )

    @staticmethod
    def _criteria(
        config: MatchingConfig,
        assignment: Assignment,
        request: Optional[MatchCriteriaRequest],
    ) -> Dict[str, Any]:
        criteria: Dict[str, Any] = {
            "maxDistance": config.max_distance,
            "minExperience": assignment.required_experience,
            "maxCandidates": config.max_candidates,
            "minimumScore": config.minimum_score,
            "algorithm": ALGORITHM_NAME,
        }
        if request is not None:
            criteria.update(request.model_dump(by_alias=True, exclude_none=True))
        return criteria
