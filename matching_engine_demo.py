#!/usr/bin/env python3
"""
+==============================================================================+
|              CAREMATCH - MATCHING ENGINE DEMO (no database)                  |
|                                                                              |
|  Ranks three sample nurses for an emergency-care assignment in Lyon and      |
|  prints the explainable breakdown of every surviving match.                  |
|                                                                              |
|  Run: python matching_engine_demo.py                                         |
+==============================================================================+

SCORING OVERVIEW:
=================

+-----------------------------------------------------------------------------+
|  TOTAL = Specialization(30) + Experience(25) + Proximity(15)                 |
|        + Certifications(10) + Adaptability(10) + Availability(5)             |
|        + History(5)   [each × facility weight]                               |
|        + Bonus(10)    [unweighted]                                           |
+-----------------------------------------------------------------------------+
"""

from datetime import datetime, timedelta, timezone

from app.schemas.matching_schemas import Assignment, CandidateProfile, MatchingConfig
from app.services.matching_engine import MatchingEngine


NOW = datetime(2025, 3, 14, 8, 0, tzinfo=timezone.utc)

ASSIGNMENT = Assignment(
    id=1,
    establishment_id=1,
    title="Renfort urgences",
    specialization="urgences",
    required_experience=2,
    urgency="medium",
    shift="jour",
    latitude=45.764043,
    longitude=4.835659,
    required_certifications={"BLS"},
    required_skills={"perfusion"},
    preferred_languages={"français"},
    team_size=5,
    stress_level=3,
    hourly_rate=28,
)

CANDIDATES = [
    CandidateProfile(
        id=1, first_name="Sophie", last_name="Martin",
        specializations={"urgences", "cardiologie"}, experience=5, rating=4.8, completed_missions=45,
        certifications={"BLS", "ACLS"}, languages={"français"}, preferred_shifts={"jour"},
        max_distance=40, mobility="vehicle", urgency_experience=True, covid_experience=True,
        latitude=45.77, longitude=4.84, establishment_history={1: 3},
        stress_resistance=4, teamwork=5, flexibility=4,
        last_mission_date=NOW - timedelta(days=7), preferred_patient_types={"adult"},
    ),
    CandidateProfile(
        id=2, first_name="Pierre", last_name="Dubois",
        specializations={"urgences"}, experience=3, rating=4.6, completed_missions=28,
        certifications={"BLS"}, languages={"français"}, preferred_shifts={"jour", "nuit"},
        max_distance=30, mobility="public_transport", night_shift_experience=True, urgency_experience=True,
        latitude=45.75, longitude=4.85,
        stress_resistance=4, teamwork=4, flexibility=5,
        last_mission_date=NOW - timedelta(days=3), preferred_patient_types={"adult"},
    ),
    CandidateProfile(
        id=3, first_name="Marie", last_name="Leroy",
        specializations={"reanimation"}, experience=8, rating=4.9, completed_missions=72,
        certifications={"BLS", "ACLS", "AFGSU"}, languages={"français", "anglais"}, preferred_shifts={"jour"},
        max_distance=35, mobility="vehicle", urgency_experience=True, covid_experience=True,
        latitude=45.78, longitude=4.82, establishment_history={1: 1},
        stress_resistance=5, teamwork=5, flexibility=3,
        last_mission_date=NOW - timedelta(days=5), preferred_patient_types={"adult"},
    ),
]


def main():
    engine = MatchingEngine()
    config = MatchingConfig(minimum_score=60, max_candidates=10, max_distance=50)
    results = engine.find_best_matches(ASSIGNMENT, CANDIDATES, config, now=NOW)

    names = {c.id: c.full_name for c in CANDIDATES}
    print(f"Assignment #{ASSIGNMENT.id} - {ASSIGNMENT.title}: {len(results)} match(es)\n")
    for rank, result in enumerate(results, start=1):
        print(f"{rank}. {names[result.candidate_id]:<15} score={result.total_score:>3}  "
              f"{result.distance:.1f} km / {result.estimated_travel_time} min  "
              f"confidence={result.confidence.value} priority={result.priority.value}")
        for factor in result.factors:
            print(f"     + {factor}")
        for warning in result.warnings:
            print(f"     ! {warning}")
        print()


if __name__ == "__main__":
    main()
