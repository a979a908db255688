"""
CareMatch - Matching Engine Schemas
Pydantic models for the deterministic matching engine and its API.

Domain inputs (CandidateProfile, Assignment, MatchingConfig) are frozen and
validated on construction: out-of-range values raise ValidationError instead
of being clamped, so every score can be traced back to accepted input.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, FrozenSet, List, Optional
from datetime import datetime
from enum import Enum


# --- Enums ---
class Mobility(str, Enum):
    WALKING = "walking"
    BIKE = "bike"
    PUBLIC_TRANSPORT = "public_transport"
    VEHICLE = "vehicle"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PatientCategory(str, Enum):
    ADULT = "adult"
    PEDIATRIC = "pediatric"
    GERIATRIC = "geriatric"
    MIXED = "mixed"


class WorkEnvironment(str, Enum):
    HOSPITAL = "hospital"
    CLINIC = "clinic"
    HOME_CARE = "home_care"
    EMERGENCY = "emergency"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Priority(str, Enum):
    NORMAL = "normal"
    PREFERRED = "preferred"
    EXCELLENT = "excellent"


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DomainModel(CamelModel):
    """Immutable engine input; enum fields hold their plain string values."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=True,
        validate_default=True,
        extra="forbid",
    )


# --- Engine inputs ---

class CandidateProfile(DomainModel):
    """A nurse who may be matched. Never mutated by the engine."""
    id: int
    first_name: str = ""
    last_name: str = ""

    specializations: FrozenSet[str] = frozenset()
    experience: float = Field(default=0.0, ge=0)
    certifications: FrozenSet[str] = frozenset()
    languages: FrozenSet[str] = frozenset()
    technical_skills: FrozenSet[str] = frozenset()

    rating: float = Field(default=0.0, ge=0, le=5)
    completed_missions: int = Field(default=0, ge=0)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    max_distance: float = Field(..., ge=0)
    mobility: Mobility = Mobility.PUBLIC_TRANSPORT

    preferred_shifts: FrozenSet[str] = frozenset()
    preferred_patient_types: FrozenSet[str] = frozenset()
    preferred_environments: FrozenSet[str] = frozenset()

    night_shift_experience: bool = False
    urgency_experience: bool = False
    covid_experience: bool = False
    pediatric_experience: bool = False
    geriatric_experience: bool = False

    stress_resistance: int = Field(default=3, ge=1, le=5)
    teamwork: int = Field(default=3, ge=1, le=5)
    flexibility: int = Field(default=3, ge=1, le=5)

    # facility id -> successfully completed assignments there
    establishment_history: Dict[int, int] = Field(default_factory=dict)

    is_active: bool = True
    last_mission_date: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Assignment(DomainModel):
    """A job posting ("mission") to be staffed."""
    id: int
    establishment_id: int
    title: str

    specialization: str
    required_experience: float = Field(default=0.0, ge=0)
    required_certifications: FrozenSet[str] = frozenset()
    required_skills: FrozenSet[str] = frozenset()
    preferred_languages: FrozenSet[str] = frozenset()

    urgency: Urgency = Urgency.MEDIUM
    patient_type: PatientCategory = PatientCategory.ADULT
    environment: WorkEnvironment = WorkEnvironment.HOSPITAL
    team_size: int = Field(default=1, ge=1)
    stress_level: int = Field(default=3, ge=1, le=5)
    shift: str
    duration: float = Field(default=8.0, gt=0)
    start_date: Optional[datetime] = None

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    hourly_rate: Optional[float] = Field(default=None, ge=0)


MAX_WEIGHT = 10.0


class MatchingWeights(DomainModel):
    """Per-factor multipliers. The bonus factor is never weighted."""
    specialization: float = Field(default=1.0, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    experience: float = Field(default=1.0, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    proximity: float = Field(default=1.0, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    certifications: float = Field(default=1.0, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    adaptability: float = Field(default=1.0, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    availability: float = Field(default=1.0, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)
    history: float = Field(default=1.0, gt=0, le=MAX_WEIGHT, allow_inf_nan=False)


class MatchingConfig(DomainModel):
    """Per-call tuning owned by the caller (e.g. a facility's saved criteria)."""
    minimum_score: float = Field(default=60, ge=0, allow_inf_nan=False)
    max_candidates: int = Field(default=10, ge=0)
    max_distance: float = Field(default=50, ge=0, allow_inf_nan=False)

    custom_weights: Optional[MatchingWeights] = None

    require_exact_specialization: bool = False
    prioritize_history: bool = False  # reserved, not consulted by the scorers
    emergency_mode: bool = False

    min_rating: Optional[float] = Field(default=None, ge=0, le=5, allow_inf_nan=False)

    @property
    def weights(self) -> MatchingWeights:
        return self.custom_weights or MatchingWeights()

    @classmethod
    def default(cls, settings=None) -> "MatchingConfig":
        """Config built from application settings."""
        if settings is None:
            from app.config import get_settings
            settings = get_settings()
        return cls(
            minimum_score=settings.matching_minimum_score,
            max_candidates=settings.matching_max_candidates,
            max_distance=settings.matching_max_distance_km,
        )


# --- API: assignment matching ---

class MatchCriteriaRequest(CamelModel):
    """Optional overrides sent with POST /match/assignment/{id}."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    max_distance: Optional[float] = Field(default=None, ge=1, le=200)
    min_experience: Optional[float] = Field(default=None, ge=0, le=50)
    max_candidates: Optional[int] = Field(default=None, ge=1, le=50)
    min_rating: Optional[float] = Field(default=None, ge=1, le=5)


class FactorBreakdownSchema(CamelModel):
    specialization: int
    experience: int
    proximity: int
    certifications: int
    adaptability: int
    availability: int
    history: int
    bonus: int


class CandidateMatchSchema(CamelModel):
    """One ranked candidate as returned to the facility dashboard."""
    candidate_id: int
    name: str
    score: int
    distance: float
    estimated_travel_time: int
    experience: float
    rating: float
    specializations: List[str]
    matching_factors: List[str]
    breakdown: FactorBreakdownSchema
    confidence: Confidence
    priority: Priority
    warnings: List[str]
    notification_sent: bool = False


class AssignmentMatchResponse(CamelModel):
    success: bool = True
    assignment_id: int
    total_matches: int
    matches: List[CandidateMatchSchema]
    criteria: Dict[str, Any]


# --- API: stateless preview ---

class FactorScoresSchema(CamelModel):
    specialization: float
    experience: float
    proximity: float
    certifications: float
    adaptability: float
    availability: float
    history: float
    bonus: float


class MatchResultSchema(CamelModel):
    """Full engine output record, unrounded sub-scores included."""
    candidate_id: int
    total_score: int
    scores: FactorScoresSchema
    factors: List[str]
    warnings: List[str]
    distance: float
    estimated_travel_time: int
    confidence: Confidence
    priority: Priority


class MatchPreviewRequest(CamelModel):
    assignment: Assignment
    candidates: List[CandidateProfile]
    config: Optional[MatchingConfig] = None
    now: datetime


class MatchPreviewResponse(CamelModel):
    assignment_id: int
    total_candidates: int
    eligible_candidates: int
    total_matches: int
    matches: List[MatchResultSchema]


# --- API: facility preferences ---

class FacilityCriteriaSchema(CamelModel):
    """Saved matching criteria for a facility. Unset fields use app defaults."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    minimum_score: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    max_candidates: Optional[int] = Field(default=None, ge=1, le=50)
    max_distance: Optional[float] = Field(default=None, ge=1, le=200)
    min_rating: Optional[float] = Field(default=None, ge=1, le=5)
    require_exact_specialization: bool = False
    prioritize_history: bool = False
    emergency_mode: bool = False
    custom_weights: Optional[MatchingWeights] = None


class FacilityCriteriaResponse(CamelModel):
    success: bool = True
    facility_id: int
    criteria: FacilityCriteriaSchema
