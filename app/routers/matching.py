"""
CareMatch - Matching Engine Router
API endpoints for deterministic candidate-assignment matching.
"""

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.services.assignment_matching_service import AssignmentMatchingService
from app.services.matching_engine import MatchingEngine, MatchingInputError
from app.services.repositories import AssignmentNotFoundError, FacilityPreferenceRepository
from app.schemas.matching_schemas import (
    AssignmentMatchResponse,
    FacilityCriteriaResponse,
    FacilityCriteriaSchema,
    FactorScoresSchema,
    MatchCriteriaRequest,
    MatchPreviewRequest,
    MatchPreviewResponse,
    MatchResultSchema,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, code: str, details=None) -> HTTPException:
    detail = {"error": message, "code": code}
    if details is not None:
        detail["details"] = details
    return HTTPException(status_code=status_code, detail=detail)


def _parse_id(raw: str, code: str, label: str) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise _error(400, f"Invalid {label} id", code)
    if value <= 0:
        raise _error(400, f"Invalid {label} id", code)
    return value


# ============================================
# Assignment Matching Endpoints
# ============================================

@router.post("/match/assignment/{assignment_id}", response_model=AssignmentMatchResponse)
def match_assignment(
    assignment_id: str,
    criteria: Optional[MatchCriteriaRequest] = Body(default=None),
    db: Session = Depends(get_db)
):
    """
    **Match Candidates to an Assignment**

    Filters the active candidate pool, scores every eligible nurse on
    eight bounded factors and returns the ranked shortlist.

    ## Scoring (max raw points)

    - Specialization (30), Experience (25), Proximity (15)
    - Certifications (10), Adaptability (10)
    - Availability (5), History (5)
    - Special bonus (10, never weighted)

    ## Request Body (optional)

    ```json
    {
        "maxDistance": 30,     // km, 1-200
        "minExperience": 3,    // years, 0-50, replaces the assignment requirement
        "maxCandidates": 5,    // 1-50
        "minRating": 4.0       // 1-5
    }
    ```
    """
    parsed_id = _parse_id(assignment_id, "INVALID_ASSIGNMENT_ID", "assignment")
    service = AssignmentMatchingService(db)
    try:
        return service.match_assignment(parsed_id, criteria)
    except AssignmentNotFoundError as e:
        raise _error(404, str(e), "ASSIGNMENT_NOT_FOUND")
    except MatchingInputError as e:
        raise _error(400, str(e), "INVALID_CRITERIA", e.details)
    except Exception as e:
        logger.exception("Matching failed for assignment %s", parsed_id)
        raise _error(500, f"Matching error: {str(e)}", "MATCHING_ERROR")


@router.post("/match/preview", response_model=MatchPreviewResponse)
def preview_matching(request: MatchPreviewRequest):
    """
    **Stateless Matching Preview**

    Runs the engine on the assignment and candidates supplied in the body,
    with an explicit `now`. Nothing is read from or written to the
    database; use it to try weight changes before saving them.
    """
    engine = MatchingEngine.from_settings()
    try:
        run = engine.run(request.assignment, request.candidates, request.config, now=request.now)
    except MatchingInputError as e:
        raise _error(400, str(e), "INVALID_CRITERIA", e.details)

    return MatchPreviewResponse(
        assignment_id=run.assignment_id,
        total_candidates=run.total_candidates,
        eligible_candidates=run.eligible_candidates,
        total_matches=len(run.results),
        matches=[
            MatchResultSchema(
                candidate_id=r.candidate_id,
                total_score=r.total_score,
                scores=FactorScoresSchema(**r.to_dict()["scores"]),
                factors=list(r.factors),
                warnings=list(r.warnings),
                distance=r.distance,
                estimated_travel_time=r.estimated_travel_time,
                confidence=r.confidence,
                priority=r.priority,
            ) for r in run.results
        ],
    )


# ============================================
# Facility Criteria Endpoints
# ============================================

@router.get("/match/facility/{facility_id}/criteria", response_model=FacilityCriteriaResponse)
def get_facility_criteria(facility_id: str, db: Session = Depends(get_db)):
    """Saved matching criteria for a facility (defaults when none saved)."""
    parsed_id = _parse_id(facility_id, "INVALID_FACILITY_ID", "facility")
    criteria = FacilityPreferenceRepository(db).get(parsed_id) or FacilityCriteriaSchema()
    return FacilityCriteriaResponse(facility_id=parsed_id, criteria=criteria)


@router.put("/match/facility/{facility_id}/criteria", response_model=FacilityCriteriaResponse)
def update_facility_criteria(
    facility_id: str,
    criteria: FacilityCriteriaSchema,
    db: Session = Depends(get_db)
):
    """
    **Save a Facility's Default Matching Criteria**

    Applied to every matching run for the facility's assignments, before
    any per-request overrides.
    """
    parsed_id = _parse_id(facility_id, "INVALID_FACILITY_ID", "facility")
    saved = FacilityPreferenceRepository(db).save(parsed_id, criteria)
    return FacilityCriteriaResponse(facility_id=parsed_id, criteria=saved)
