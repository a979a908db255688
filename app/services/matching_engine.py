"""
CareMatch - Deterministic Matching Engine
Ranks candidate nurses for one assignment with an explainable weighted score.

PIPELINE:
    1. Eligibility gate   - hard pass/fail filter (see eligibility.py)
    2. Factor scorers     - eight bounded, independent scores (see factor_scorers.py)
    3. Aggregation        - weighted sum + bonus, distance, confidence, priority
    4. Ranking            - minimum score cut, sort by score desc, truncate

    TOTAL_SCORE = round(  specialization × w_spec + experience × w_exp
                        + proximity × w_prox + certifications × w_cert
                        + adaptability × w_adapt + availability × w_avail
                        + history × w_hist + bonus )

DETERMINISM:
    Output depends only on (assignment, candidates, config, now). The engine
    never reads the wall clock; `now` is supplied by the caller. Ties are
    broken by candidate id ascending.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import math

from app.schemas.matching_schemas import (
    Assignment,
    CandidateProfile,
    Confidence,
    MatchingConfig,
    Priority,
)
from app.services.geospatial_service import GeospatialService
from app.services.eligibility import eligible_with_distance, filter_eligible
from app.services import factor_scorers as scorers

logger = logging.getLogger(__name__)


class MatchingInputError(ValueError):
    """Raised when the engine is handed input it cannot score."""

    def __init__(self, message: str, details: Optional[List[dict]] = None):
        super().__init__(message)
        self.details = details or []


# ============================================
# Data Classes for Matching Results
# ============================================

@dataclass(frozen=True)
class FactorScores:
    """Weighted sub-scores (bonus is unweighted)."""
    specialization: float
    experience: float
    proximity: float
    certifications: float
    adaptability: float
    availability: float
    history: float
    bonus: float

    def total(self) -> float:
        return (
            self.specialization + self.experience + self.proximity
            + self.certifications + self.adaptability + self.availability
            + self.history + self.bonus
        )


@dataclass(frozen=True)
class MatchResult:
    """One surviving candidate, with everything needed to audit the score."""
    candidate_id: int
    total_score: int
    scores: FactorScores
    factors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    distance: float
    estimated_travel_time: int
    confidence: Confidence
    priority: Priority

    def to_dict(self) -> dict:
        data = asdict(self)
        data["factors"] = list(self.factors)
        data["warnings"] = list(self.warnings)
        data["confidence"] = self.confidence.value
        data["priority"] = self.priority.value
        return data


@dataclass(frozen=True)
class MatchRun:
    """Result of one engine invocation."""
    assignment_id: int
    results: List[MatchResult]
    total_candidates: int
    eligible_candidates: int


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify_confidence(total_score: int, factor_count: int, warning_count: int) -> Confidence:
    if total_score >= 85 and factor_count >= 6 and warning_count == 0:
        return Confidence.HIGH
    if total_score >= 70 and factor_count >= 4 and warning_count <= 1:
        return Confidence.MEDIUM
    return Confidence.LOW


def classify_priority(total_score: int, scores: FactorScores) -> Priority:
    if total_score >= 90:
        return Priority.EXCELLENT
    if total_score >= 75 and scores.specialization >= 25:
        return Priority.PREFERRED
    return Priority.NORMAL


def rank_results(results: Iterable[MatchResult], config: MatchingConfig) -> List[MatchResult]:
    """Drop results under the minimum score, sort best first, truncate."""
    kept = [r for r in results if r.total_score >= config.minimum_score]
    kept.sort(key=lambda r: (-r.total_score, r.candidate_id))
    return kept[:config.max_candidates]


class MatchingEngine:
    """
    Stateless matching engine.

    Scoring is independent per candidate, so pools larger than
    `parallel_threshold` are scored on a thread pool. Results are merged
    in input order before ranking, which keeps the output identical to a
    sequential run.
    """

    def __init__(
        self,
        geo_service: Optional[GeospatialService] = None,
        max_workers: int = 4,
        parallel_threshold: int = 32,
    ):
        self.geo_service = geo_service or GeospatialService()
        self.max_workers = max_workers
        self.parallel_threshold = parallel_threshold

    @classmethod
    def from_settings(cls, settings=None) -> "MatchingEngine":
        if settings is None:
            from app.config import get_settings
            settings = get_settings()
        return cls(
            max_workers=settings.matching_max_workers,
            parallel_threshold=settings.matching_parallel_threshold,
        )

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def find_best_matches(
        self,
        assignment: Assignment,
        candidates: Sequence[CandidateProfile],
        config: Optional[MatchingConfig] = None,
        *,
        now: datetime,
    ) -> List[MatchResult]:
        """Run the full pipeline and return the ranked, truncated match list."""
        return self.run(assignment, candidates, config, now=now).results

    def run(
        self,
        assignment: Assignment,
        candidates: Sequence[CandidateProfile],
        config: Optional[MatchingConfig] = None,
        *,
        now: datetime,
    ) -> MatchRun:
        config = config or MatchingConfig.default()
        candidates = list(candidates)
        self._validate_inputs(assignment, candidates, config, now)

        eligible = eligible_with_distance(candidates, assignment, config, self.geo_service)
        scored = self._score_all(eligible, assignment, config, now)
        results = rank_results(scored, config)

        logger.info(
            "Matching assignment %s: %d candidates, %d eligible, %d returned",
            assignment.id, len(candidates), len(eligible), len(results)
        )
        return MatchRun(
            assignment_id=assignment.id,
            results=results,
            total_candidates=len(candidates),
            eligible_candidates=len(eligible),
        )

    def filter_eligible(
        self,
        candidates: Sequence[CandidateProfile],
        assignment: Assignment,
        config: MatchingConfig,
    ) -> List[CandidateProfile]:
        """Candidates that pass every eligibility gate."""
        return filter_eligible(candidates, assignment, config, self.geo_service)

    def score_candidate(
        self,
        candidate: CandidateProfile,
        assignment: Assignment,
        config: MatchingConfig,
        now: datetime,
        distance_km: Optional[float] = None,
    ) -> MatchResult:
        """Score one candidate. Eligibility is not checked here."""
        if distance_km is None:
            distance_km = self._distance(candidate, assignment)
        weights = config.weights

        specialization = scorers.score_specialization(candidate, assignment)
        experience = scorers.score_experience(candidate, assignment)
        proximity = scorers.score_proximity(candidate, assignment, distance_km)
        certifications = scorers.score_certifications(candidate, assignment)
        adaptability = scorers.score_adaptability(candidate, assignment)
        availability = scorers.score_availability(candidate, assignment)
        history = scorers.score_history(candidate, assignment)
        bonus = scorers.score_bonus(candidate, assignment, now)

        scores = FactorScores(
            specialization=specialization.score * weights.specialization,
            experience=experience.score * weights.experience,
            proximity=proximity.score * weights.proximity,
            certifications=certifications.score * weights.certifications,
            adaptability=adaptability.score * weights.adaptability,
            availability=availability.score * weights.availability,
            history=history.score * weights.history,
            bonus=bonus.score,
        )

        ordered = (
            specialization, experience, proximity, certifications,
            adaptability, availability, history, bonus,
        )
        factors = tuple(f for result in ordered for f in result.factors if f)
        warnings = tuple(result.warning for result in ordered if result.warning)

        total_score = round_half_up(scores.total())

        return MatchResult(
            candidate_id=candidate.id,
            total_score=total_score,
            scores=scores,
            factors=factors,
            warnings=warnings,
            distance=distance_km,
            estimated_travel_time=self.geo_service.estimate_travel_time(distance_km, candidate.mobility),
            confidence=classify_confidence(total_score, len(factors), len(warnings)),
            priority=classify_priority(total_score, scores),
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _distance(self, candidate: CandidateProfile, assignment: Assignment) -> float:
        return self.geo_service.calculate_distance(
            (candidate.latitude, candidate.longitude),
            (assignment.latitude, assignment.longitude),
        )

    def _score_all(
        self,
        eligible: List[Tuple[CandidateProfile, float]],
        assignment: Assignment,
        config: MatchingConfig,
        now: datetime,
    ) -> List[MatchResult]:
        def score(item: Tuple[CandidateProfile, float]) -> MatchResult:
            candidate, distance = item
            return self.score_candidate(candidate, assignment, config, now, distance)

        if len(eligible) <= self.parallel_threshold or self.max_workers <= 1:
            return [score(item) for item in eligible]

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(score, eligible))

    @staticmethod
    def _validate_inputs(assignment, candidates, config, now) -> None:
        details = []
        if not isinstance(assignment, Assignment):
            details.append({"field": "assignment", "message": "expected an Assignment"})
        for index, candidate in enumerate(candidates):
            if not isinstance(candidate, CandidateProfile):
                details.append({"field": f"candidates[{index}]", "message": "expected a CandidateProfile"})
        if not isinstance(config, MatchingConfig):
            details.append({"field": "config", "message": "expected a MatchingConfig"})
        if not isinstance(now, datetime):
            details.append({"field": "now", "message": "expected a datetime"})
        if details:
            raise MatchingInputError("Invalid matching input", details)
