"""Tests for the read-side repositories and config layering."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from app.config import Settings
from app.models import models
from app.schemas.matching_schemas import (
    FacilityCriteriaSchema,
    MatchCriteriaRequest,
    MatchingConfig,
    MatchingWeights,
    Mobility,
    Urgency,
)
from app.services.assignment_matching_service import apply_experience_floor, build_config
from app.services.repositories import (
    AssignmentNotFoundError,
    AssignmentRepository,
    CandidatePoolProvider,
    FacilityPreferenceRepository,
    candidate_from_row,
)


def _candidate_row(**overrides):
    data = dict(
        first_name="Pierre", last_name="Dubois",
        specializations=["urgences"], experience=3, certifications=["BLS"],
        latitude=45.75, longitude=4.85, max_distance=30,
        mobility=models.Mobility.VEHICLE,
    )
    data.update(overrides)
    return models.CandidateProfile(**data)


class TestCandidatePoolProvider:

    def test_lists_active_candidates_in_id_order(self, db_session):
        db_session.add_all([
            _candidate_row(first_name="A"),
            _candidate_row(first_name="B", is_active=False),
            _candidate_row(first_name="C"),
        ])
        db_session.commit()

        pool = CandidatePoolProvider(db_session).list_active()
        assert [c.first_name for c in pool] == ["A", "C"]
        assert [c.id for c in pool] == sorted(c.id for c in pool)

    def test_maps_row_to_profile(self, db_session):
        db_session.add(_candidate_row(
            establishment_history={"4": 2},
            preferred_shifts=["jour", "nuit"],
            last_mission_date=datetime(2025, 1, 2, 9, 0),
        ))
        db_session.commit()

        candidate = CandidatePoolProvider(db_session).list_active()[0]
        assert candidate.establishment_history == {4: 2}
        assert candidate.preferred_shifts == frozenset({"jour", "nuit"})
        assert candidate.mobility == "vehicle"
        assert candidate.stress_resistance == 3
        assert candidate.full_name == "Pierre Dubois"

    def test_null_soft_attributes_use_defaults(self):
        row = _candidate_row(id=1, stress_resistance=None, teamwork=None, flexibility=None)
        candidate = candidate_from_row(row)
        assert (candidate.stress_resistance, candidate.teamwork, candidate.flexibility) == (3, 3, 3)

    def test_stored_zero_is_not_replaced(self):
        with pytest.raises(ValidationError):
            candidate_from_row(_candidate_row(id=1, teamwork=0))

    def test_orm_and_schema_share_enums(self):
        assert models.Mobility is Mobility
        assert models.Urgency is Urgency


class TestAssignmentRepository:

    def test_get(self, db_session):
        db_session.add(models.Assignment(
            establishment_id=3, title="Nuit réanimation", specialization="reanimation",
            required_experience=4, required_certifications=["ACLS"], shift="nuit",
            urgency=models.Urgency.HIGH, latitude=45.7, longitude=4.8,
        ))
        db_session.commit()

        assignment = AssignmentRepository(db_session).get(1)
        assert assignment.establishment_id == 3
        assert assignment.required_certifications == frozenset({"ACLS"})
        assert assignment.urgency == "high"
        assert assignment.patient_type == "adult"

    def test_missing_assignment(self, db_session):
        with pytest.raises(AssignmentNotFoundError):
            AssignmentRepository(db_session).get(42)


class TestFacilityPreferenceRepository:

    def test_save_and_reload(self, db_session):
        repo = FacilityPreferenceRepository(db_session)
        assert repo.get(5) is None

        repo.save(5, FacilityCriteriaSchema(
            minimum_score=70, emergency_mode=True,
            custom_weights=MatchingWeights(proximity=2.0),
        ))
        saved = repo.get(5)
        assert saved.minimum_score == 70
        assert saved.emergency_mode is True
        assert saved.custom_weights.proximity == 2.0
        assert saved.max_distance is None

    def test_save_overwrites(self, db_session):
        repo = FacilityPreferenceRepository(db_session)
        repo.save(5, FacilityCriteriaSchema(minimum_score=70))
        repo.save(5, FacilityCriteriaSchema(max_candidates=3))
        saved = repo.get(5)
        assert saved.minimum_score is None
        assert saved.max_candidates == 3


class TestBuildConfig:

    def test_defaults_from_settings(self):
        settings = Settings(matching_minimum_score=55, matching_max_candidates=7, matching_max_distance_km=25)
        config = MatchingConfig.default(settings)
        assert (config.minimum_score, config.max_candidates, config.max_distance) == (55, 7, 25)

    def test_request_overrides_facility_overrides_defaults(self):
        defaults = MatchingConfig(minimum_score=60, max_candidates=10, max_distance=50)
        facility = FacilityCriteriaSchema(minimum_score=75, max_distance=30, require_exact_specialization=True)
        request = MatchCriteriaRequest(max_distance=20, max_candidates=2)

        config = build_config(defaults, facility, request)
        assert config.minimum_score == 75
        assert config.max_distance == 20
        assert config.max_candidates == 2
        assert config.require_exact_specialization is True

    def test_facility_weights_carried(self):
        facility = FacilityCriteriaSchema(custom_weights=MatchingWeights(history=3.0))
        config = build_config(MatchingConfig(), facility, None)
        assert config.weights.history == 3.0
        assert config.weights.specialization == 1.0

    def test_min_experience_replaces_requirement(self, make_assignment):
        assignment = make_assignment(required_experience=2)
        updated = apply_experience_floor(assignment, MatchCriteriaRequest(min_experience=5))
        assert updated.required_experience == 5
        assert assignment.required_experience == 2
        assert apply_experience_floor(assignment, None) is assignment
