import sys
import os

# Add the project root to the python path
sys.path.append(os.getcwd())

from datetime import datetime, timedelta, timezone
from app.database import SessionLocal, engine, Base
from app.models.models import Assignment, CandidateProfile, Mobility, Urgency
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("Seeder")


def seed_data():
    logger.info("creating tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        # Check if data exists
        if db.query(CandidateProfile).count() > 0:
            logger.info("Data already exists. Skipping seed.")
            return

        now = datetime.now(timezone.utc)

        logger.info("Seeding Candidates...")
        # Coordinates are around Lyon
        candidates = [
            CandidateProfile(
                first_name="Sophie", last_name="Martin",
                specializations=["urgences", "cardiologie"], experience=5, rating=4.8, completed_missions=45,
                certifications=["BLS", "ACLS"], languages=["français"], technical_skills=["perfusion"],
                preferred_shifts=["jour"], max_distance=40, mobility=Mobility.VEHICLE,
                urgency_experience=True, covid_experience=True,
                latitude=45.770000, longitude=4.840000, establishment_history={"1": 3},
                stress_resistance=4, teamwork=5, flexibility=4, is_active=True,
                last_mission_date=now - timedelta(days=7),
                preferred_patient_types=["adult"], preferred_environments=["hospital"],
            ),
            CandidateProfile(
                first_name="Pierre", last_name="Dubois",
                specializations=["urgences"], experience=3, rating=4.6, completed_missions=28,
                certifications=["BLS"], languages=["français"], technical_skills=["perfusion"],
                preferred_shifts=["jour", "nuit"], max_distance=30, mobility=Mobility.PUBLIC_TRANSPORT,
                night_shift_experience=True, urgency_experience=True,
                latitude=45.750000, longitude=4.850000, establishment_history={},
                stress_resistance=4, teamwork=4, flexibility=5, is_active=True,
                last_mission_date=now - timedelta(days=3),
                preferred_patient_types=["adult"], preferred_environments=["hospital"],
            ),
            CandidateProfile(
                first_name="Marie", last_name="Leroy",
                specializations=["reanimation"], experience=8, rating=4.9, completed_missions=72,
                certifications=["BLS", "ACLS", "AFGSU"], languages=["français", "anglais"],
                technical_skills=["perfusion", "ventilation"],
                preferred_shifts=["jour"], max_distance=35, mobility=Mobility.VEHICLE,
                urgency_experience=True, covid_experience=True,
                latitude=45.780000, longitude=4.820000, establishment_history={"1": 1},
                stress_resistance=5, teamwork=5, flexibility=3, is_active=True,
                last_mission_date=now - timedelta(days=5),
                preferred_patient_types=["adult"], preferred_environments=["hospital"],
            ),
        ]
        db.add_all(candidates)
        db.commit()

        logger.info("Seeding Assignments...")
        assignment = Assignment(
            establishment_id=1,
            title="Infirmier(e) urgences - renfort week-end",
            specialization="urgences",
            required_experience=2,
            required_certifications=["BLS"],
            required_skills=["perfusion"],
            preferred_languages=["français"],
            urgency=Urgency.MEDIUM,
            patient_type="adult",
            environment="hospital",
            team_size=5,
            stress_level=3,
            shift="jour",
            duration=8,
            start_date=now + timedelta(days=2),
            latitude=45.764043,
            longitude=4.835659,
            hourly_rate=28,
        )
        db.add(assignment)
        db.commit()

        logger.info("Seeding Complete!")
    except Exception as e:
        logger.error(f"Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_data()
