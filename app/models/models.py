from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, JSON, Enum
from sqlalchemy.sql import func
from app.database import Base
from app.schemas.matching_schemas import Mobility, Urgency


class CandidateProfile(Base):
    """A nurse who may be matched to assignments."""
    __tablename__ = "candidate_profiles"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)

    # Capabilities (JSON lists)
    specializations = Column(JSON, default=list)
    experience = Column(Float, default=0.0)
    certifications = Column(JSON, default=list)
    languages = Column(JSON, default=list)
    technical_skills = Column(JSON, default=list)

    # Reputation
    rating = Column(Float, default=0.0)
    completed_missions = Column(Integer, default=0)

    # Logistics
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    max_distance = Column(Float, default=30.0)
    mobility = Column(Enum(Mobility), default=Mobility.PUBLIC_TRANSPORT)

    # Preferences
    preferred_shifts = Column(JSON, default=list)
    preferred_patient_types = Column(JSON, default=list)
    preferred_environments = Column(JSON, default=list)

    # Experience flags
    night_shift_experience = Column(Boolean, default=False)
    urgency_experience = Column(Boolean, default=False)
    covid_experience = Column(Boolean, default=False)
    pediatric_experience = Column(Boolean, default=False)
    geriatric_experience = Column(Boolean, default=False)

    # Soft attributes (1-5)
    stress_resistance = Column(Integer, default=3)
    teamwork = Column(Integer, default=3)
    flexibility = Column(Integer, default=3)

    # facility id (as string key) -> successful missions
    establishment_history = Column(JSON, default=dict)

    is_active = Column(Boolean, default=True, index=True)
    last_mission_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Assignment(Base):
    """A job posting published by a care facility."""
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    establishment_id = Column(Integer, index=True, nullable=False)
    title = Column(String, nullable=False)

    # Requirements
    specialization = Column(String, nullable=False)
    required_experience = Column(Float, default=0.0)
    required_certifications = Column(JSON, default=list)
    required_skills = Column(JSON, default=list)
    preferred_languages = Column(JSON, default=list)

    # Context
    urgency = Column(Enum(Urgency), default=Urgency.MEDIUM)
    patient_type = Column(String, default="adult")
    environment = Column(String, default="hospital")
    team_size = Column(Integer, default=1)
    stress_level = Column(Integer, default=3)
    shift = Column(String, nullable=False)
    duration = Column(Float, default=8.0)
    start_date = Column(DateTime(timezone=True), nullable=True)

    # Logistics
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    hourly_rate = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class FacilityMatchingPreference(Base):
    """Saved matching criteria for a facility (one row per facility)."""
    __tablename__ = "facility_matching_preferences"

    establishment_id = Column(Integer, primary_key=True)
    minimum_score = Column(Float, nullable=True)
    max_candidates = Column(Integer, nullable=True)
    max_distance = Column(Float, nullable=True)
    min_rating = Column(Float, nullable=True)
    require_exact_specialization = Column(Boolean, default=False)
    prioritize_history = Column(Boolean, default=False)
    emergency_mode = Column(Boolean, default=False)
    custom_weights = Column(JSON, nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
