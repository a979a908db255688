"""
CareMatch - Repositories
Read-side collaborators of the matching engine: assignment lookup, the
active candidate pool and saved facility criteria. Match results are never
stored here.
"""

from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.models import models
from app.schemas.matching_schemas import (
    Assignment,
    CandidateProfile,
    FacilityCriteriaSchema,
    MatchingWeights,
)

logger = logging.getLogger(__name__)


class AssignmentNotFoundError(LookupError):
    def __init__(self, assignment_id: int):
        super().__init__(f"Assignment {assignment_id} not found")
        self.assignment_id = assignment_id


def _history_from_row(raw) -> dict:
    # JSON object keys come back as strings
    return {int(facility_id): int(count) for facility_id, count in (raw or {}).items()}


def _stored(value, default):
    """Column value, or the default only when the column is NULL."""
    return default if value is None else value


def candidate_from_row(row: models.CandidateProfile) -> CandidateProfile:
    return CandidateProfile(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        specializations=frozenset(row.specializations or []),
        experience=row.experience or 0,
        certifications=frozenset(row.certifications or []),
        languages=frozenset(row.languages or []),
        technical_skills=frozenset(row.technical_skills or []),
        rating=row.rating or 0,
        completed_missions=row.completed_missions or 0,
        latitude=row.latitude,
        longitude=row.longitude,
        max_distance=row.max_distance or 0,
        mobility=row.mobility.value if row.mobility else "public_transport",
        preferred_shifts=frozenset(row.preferred_shifts or []),
        preferred_patient_types=frozenset(row.preferred_patient_types or []),
        preferred_environments=frozenset(row.preferred_environments or []),
        night_shift_experience=bool(row.night_shift_experience),
        urgency_experience=bool(row.urgency_experience),
        covid_experience=bool(row.covid_experience),
        pediatric_experience=bool(row.pediatric_experience),
        geriatric_experience=bool(row.geriatric_experience),
        stress_resistance=_stored(row.stress_resistance, 3),
        teamwork=_stored(row.teamwork, 3),
        flexibility=_stored(row.flexibility, 3),
        establishment_history=_history_from_row(row.establishment_history),
        is_active=bool(row.is_active),
        last_mission_date=row.last_mission_date,
    )


def assignment_from_row(row: models.Assignment) -> Assignment:
    return Assignment(
        id=row.id,
        establishment_id=row.establishment_id,
        title=row.title,
        specialization=row.specialization,
        required_experience=row.required_experience or 0,
        required_certifications=frozenset(row.required_certifications or []),
        required_skills=frozenset(row.required_skills or []),
        preferred_languages=frozenset(row.preferred_languages or []),
        urgency=row.urgency.value if row.urgency else "medium",
        patient_type=row.patient_type or "adult",
        environment=row.environment or "hospital",
        team_size=_stored(row.team_size, 1),
        stress_level=_stored(row.stress_level, 3),
        shift=row.shift,
        duration=_stored(row.duration, 8),
        start_date=row.start_date,
        latitude=row.latitude,
        longitude=row.longitude,
        hourly_rate=row.hourly_rate,
    )


class AssignmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, assignment_id: int) -> Assignment:
        row = self.db.query(models.Assignment).filter(models.Assignment.id == assignment_id).first()
        if not row:
            raise AssignmentNotFoundError(assignment_id)
        return assignment_from_row(row)


class CandidatePoolProvider:
    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> List[CandidateProfile]:
        """All active candidates, in id order."""
        rows = (
            self.db.query(models.CandidateProfile)
            .filter(models.CandidateProfile.is_active.is_(True))
            .order_by(models.CandidateProfile.id)
            .all()
        )
        return [candidate_from_row(row) for row in rows]


class FacilityPreferenceRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, facility_id: int) -> Optional[FacilityCriteriaSchema]:
        row = self.db.get(models.FacilityMatchingPreference, facility_id)
        if not row:
            return None
        return FacilityCriteriaSchema(
            minimum_score=row.minimum_score,
            max_candidates=row.max_candidates,
            max_distance=row.max_distance,
            min_rating=row.min_rating,
            require_exact_specialization=bool(row.require_exact_specialization),
            prioritize_history=bool(row.prioritize_history),
            emergency_mode=bool(row.emergency_mode),
            custom_weights=MatchingWeights(**row.custom_weights) if row.custom_weights else None,
        )

    def save(self, facility_id: int, criteria: FacilityCriteriaSchema) -> FacilityCriteriaSchema:
        row = self.db.get(models.FacilityMatchingPreference, facility_id)
        if not row:
            row = models.FacilityMatchingPreference(establishment_id=facility_id)
            self.db.add(row)

        row.minimum_score = criteria.minimum_score
        row.max_candidates = criteria.max_candidates
        row.max_distance = criteria.max_distance
        row.min_rating = criteria.min_rating
        row.require_exact_specialization = criteria.require_exact_specialization
        row.prioritize_history = criteria.prioritize_history
        row.emergency_mode = criteria.emergency_mode
        row.custom_weights = criteria.custom_weights.model_dump() if criteria.custom_weights else None

        self.db.commit()
        logger.info("Saved matching criteria for facility %s", facility_id)
        return criteria
