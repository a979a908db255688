"""Tests for the matching HTTP endpoints."""

import pytest

from app.models import models
from tests.conftest import point_north_of_origin, ORIGIN

PREFIX = "/api/v1"


def _candidate(distance_km, **overrides):
    lat, lon = point_north_of_origin(distance_km)
    data = dict(
        first_name="Nurse", last_name=str(distance_km),
        specializations=["urgences"], experience=5, certifications=["BLS"],
        rating=4.0, latitude=lat, longitude=lon, max_distance=40,
        mobility=models.Mobility.PUBLIC_TRANSPORT,
    )
    data.update(overrides)
    return models.CandidateProfile(**data)


@pytest.fixture
def seeded(db_session):
    """
    One emergency-care assignment (id 1, facility 1) and four candidates:
        1: 1 km, 5 years          -> 83
        2: 3 km, 3 years          -> 78
        3: missing BLS            -> excluded
        4: inactive               -> excluded
    """
    db_session.add(models.Assignment(
        establishment_id=1, title="Renfort urgences", specialization="urgences",
        required_experience=2, required_certifications=["BLS"], shift="jour",
        urgency=models.Urgency.MEDIUM, team_size=5, stress_level=3,
        latitude=ORIGIN[0], longitude=ORIGIN[1],
    ))
    db_session.add_all([
        _candidate(1.0, first_name="Sophie", last_name="Martin"),
        _candidate(3.0, experience=3),
        _candidate(1.0, certifications=["ACLS"]),
        _candidate(1.0, is_active=False),
    ])
    db_session.commit()
    return db_session


class TestMatchAssignment:

    def test_ranked_matches(self, client, seeded):
        response = client.post(f"{PREFIX}/match/assignment/1")
        assert response.status_code == 200
        body = response.json()

        assert body["success"] is True
        assert body["assignmentId"] == 1
        assert body["totalMatches"] == 2
        assert [m["candidateId"] for m in body["matches"]] == [1, 2]
        assert [m["score"] for m in body["matches"]] == [83, 78]

        top = body["matches"][0]
        assert top["name"] == "Sophie Martin"
        assert top["distance"] == 1.0
        assert top["breakdown"] == {
            "specialization": 30, "experience": 25, "proximity": 15, "certifications": 3,
            "adaptability": 8, "availability": 2, "history": 0, "bonus": 0,
        }
        assert top["confidence"] == "medium"
        assert top["priority"] == "preferred"
        assert top["notificationSent"] is False
        assert "Specialization urgences mastered" in top["matchingFactors"]

        assert body["criteria"]["algorithm"] == "deterministic_reinforced"
        assert body["criteria"]["maxDistance"] == 50
        assert body["criteria"]["minExperience"] == 2

    def test_overrides(self, client, seeded):
        response = client.post(
            f"{PREFIX}/match/assignment/1",
            json={"maxCandidates": 1, "maxDistance": 30},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["totalMatches"] == 1
        assert body["criteria"]["maxCandidates"] == 1
        assert body["criteria"]["maxDistance"] == 30

    def test_min_experience_override(self, client, seeded):
        response = client.post(f"{PREFIX}/match/assignment/1", json={"minExperience": 5})
        body = response.json()
        assert body["criteria"]["minExperience"] == 5
        assert [m["candidateId"] for m in body["matches"]] == [1]
        assert body["matches"][0]["breakdown"]["experience"] == 20

    def test_empty_result_is_not_an_error(self, client, seeded):
        response = client.post(f"{PREFIX}/match/assignment/1", json={"minRating": 5})
        assert response.status_code == 200
        assert response.json()["totalMatches"] == 0
        assert response.json()["matches"] == []

    @pytest.mark.parametrize("assignment_id", ["abc", "0", "-3"])
    def test_invalid_assignment_id(self, client, assignment_id):
        response = client.post(f"{PREFIX}/match/assignment/{assignment_id}")
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_ASSIGNMENT_ID"

    def test_unknown_assignment(self, client, seeded):
        response = client.post(f"{PREFIX}/match/assignment/99")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "ASSIGNMENT_NOT_FOUND"

    @pytest.mark.parametrize("payload", [
        {"maxDistance": 500},
        {"maxCandidates": 0},
        {"minRating": 0.5},
        {"weights": {"proximity": 2}},
    ])
    def test_malformed_criteria(self, client, seeded, payload):
        response = client.post(f"{PREFIX}/match/assignment/1", json=payload)
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["code"] == "INVALID_CRITERIA"
        assert detail["details"]


class TestFacilityCriteria:

    def test_defaults_when_nothing_saved(self, client):
        response = client.get(f"{PREFIX}/match/facility/1/criteria")
        assert response.status_code == 200
        assert response.json()["criteria"]["minimumScore"] is None

    def test_saved_criteria_apply_to_matching(self, client, seeded):
        response = client.put(
            f"{PREFIX}/match/facility/1/criteria",
            json={"minimumScore": 80, "customWeights": {"proximity": 1.0}},
        )
        assert response.status_code == 200
        assert client.get(f"{PREFIX}/match/facility/1/criteria").json()["criteria"]["minimumScore"] == 80

        body = client.post(f"{PREFIX}/match/assignment/1").json()
        assert [m["candidateId"] for m in body["matches"]] == [1]
        assert body["criteria"]["minimumScore"] == 80

    def test_zero_weight_rejected(self, client):
        response = client.put(
            f"{PREFIX}/match/facility/1/criteria",
            json={"customWeights": {"proximity": 0}},
        )
        assert response.status_code == 400

    def test_huge_weight_rejected(self, client, seeded):
        response = client.put(
            f"{PREFIX}/match/facility/1/criteria",
            json={"customWeights": {"history": 1e308}},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_CRITERIA"
        assert client.post(f"{PREFIX}/match/assignment/1").status_code == 200


class TestPreview:

    def _payload(self):
        near_lat, near_lon = point_north_of_origin(3)
        far_lat, far_lon = point_north_of_origin(12)
        base = {
            "specializations": ["urgences"], "experience": 5, "certifications": ["BLS"],
            "rating": 4.0, "maxDistance": 40,
        }
        return {
            "assignment": {
                "id": 10, "establishmentId": 1, "title": "Renfort", "specialization": "urgences",
                "requiredExperience": 2, "requiredCertifications": ["BLS"], "shift": "jour",
                "teamSize": 5, "latitude": ORIGIN[0], "longitude": ORIGIN[1],
            },
            "candidates": [
                dict(base, id=1, latitude=far_lat, longitude=far_lon),
                dict(base, id=2, latitude=near_lat, longitude=near_lon),
                dict(base, id=3, latitude=near_lat, longitude=near_lon, isActive=False),
            ],
            "config": {"minimumScore": 0},
            "now": "2025-03-14T08:00:00Z",
        }

    def test_preview(self, client):
        response = client.post(f"{PREFIX}/match/preview", json=self._payload())
        assert response.status_code == 200
        body = response.json()
        assert body["totalCandidates"] == 3
        assert body["eligibleCandidates"] == 2
        assert [m["candidateId"] for m in body["matches"]] == [2, 1]
        assert body["matches"][0]["scores"]["proximity"] == 13
        assert body["matches"][1]["scores"]["proximity"] == 8

    def test_preview_is_deterministic(self, client):
        first = client.post(f"{PREFIX}/match/preview", json=self._payload()).content
        second = client.post(f"{PREFIX}/match/preview", json=self._payload()).content
        assert first == second

    def test_preview_rejects_invalid_profile(self, client):
        payload = self._payload()
        payload["candidates"][0]["rating"] = 7
        response = client.post(f"{PREFIX}/match/preview", json=payload)
        assert response.status_code == 400

    def test_preview_rejects_overflowing_weights(self, client):
        payload = self._payload()
        payload["config"]["customWeights"] = {"specialization": 1e308, "experience": 1e308}
        response = client.post(f"{PREFIX}/match/preview", json=payload)
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_CRITERIA"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["checks"]["database"]["status"] == "healthy"
