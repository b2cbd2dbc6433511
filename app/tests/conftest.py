# app/tests/conftest.py

import os
import tempfile

# Settings are read at import time; point them at throwaway resources first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EXPORTS_DIR", tempfile.mkdtemp(prefix="youth-exports-"))
os.environ.setdefault("EXPORT_TASK_BACKEND", "background")

from datetime import date, datetime

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base
from app.exports.tracker import ExportJobTracker
from app.youth.models import (
    BusinessProfile,
    BusinessYouthRelationship,
    Certification,
    Education,
    PortfolioProject,
    Skill,
    SocialMediaLink,
    TrainingProgram,
    YouthProfile,
    YouthSkill,
    YouthTraining,
)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across connections"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    """Database session fixture for testing"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def executed_statements(engine):
    """Collects every SQL statement sent to the database."""
    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", record)
    yield statements
    event.remove(engine, "before_cursor_execute", record)


@pytest.fixture
def tracker(tmp_path):
    return ExportJobTracker(tmp_path / "exports")


@pytest.fixture
def seeded_youth(db_session):
    """
    Four profiles across three districts with a spread of related records.

    Ama (Bekwai, 22) has one of everything except certifications and
    social media; Kwame (Bekwai, 24) has no education.
    """
    ama = YouthProfile(
        participant_code="BKW-001",
        full_name="Ama Mensah",
        first_name="Ama",
        last_name="Mensah",
        age=22,
        gender="Female",
        district="Bekwai",
        town="Bekwai",
        dare_model="Collaborative",
        training_status="Completed",
        employment_status="Self-employed",
        core_skills="Tailoring, Kente weaving",
        languages_spoken=["Twi", "English"],
        emergency_contact={"name": "Kofi Mensah", "phone": "0240000000"},
        created_at=datetime(2024, 1, 10, 9, 0),
    )
    kwame = YouthProfile(
        participant_code="BKW-002",
        full_name="Kwame Boateng",
        first_name="Kwame",
        last_name="Boateng",
        age=24,
        gender="Male",
        district="Bekwai",
        dare_model="MakerSpace",
        training_status="In Progress",
        employment_status="Unemployed",
        core_skills="Carpentry",
        created_at=datetime(2024, 2, 15, 9, 0),
    )
    abena = YouthProfile(
        participant_code="GSG-001",
        full_name="Abena Owusu",
        first_name="Abena",
        last_name="Owusu",
        age=19,
        gender="Female",
        district="Gushegu",
        dare_model="Madam Anchor",
        training_status="In Progress",
        created_at=datetime(2024, 3, 1, 9, 0),
    )
    yaw = YouthProfile(
        participant_code="YKR-001",
        full_name="Yaw Darko",
        first_name="Yaw",
        last_name="Darko",
        age=30,
        gender="Male",
        district="Yilo Krobo",
        dare_model="Collaborative",
        training_status="Completed",
        core_skills="Welding",
        created_at=datetime(2024, 4, 20, 9, 0),
    )
    db_session.add_all([ama, kwame, abena, yaw])
    db_session.flush()

    tailoring = Skill(name="Tailoring")
    welding = Skill(name="Welding")
    marketing = TrainingProgram(name="Digital Marketing", description="Selling online")
    tailors = BusinessProfile(business_name="Bekwai Tailors", business_description="Garment shop")
    db_session.add_all([tailoring, welding, marketing, tailors])
    db_session.flush()

    db_session.add_all([
        Education(
            youth_id=ama.id,
            qualification_type="Tertiary",
            qualification_name="BSc Fashion Design",
            institution="KNUST",
            graduation_year=2023,
        ),
        Education(
            youth_id=abena.id,
            qualification_type="Secondary",
            qualification_name="WASSCE",
            institution="Gushegu SHS",
        ),
        Education(
            youth_id=yaw.id,
            qualification_type="Technical",
            qualification_name="Welding Certificate",
            institution="Koforidua Technical",
        ),
        YouthSkill(youth_id=ama.id, skill_id=tailoring.id, proficiency="Advanced"),
        YouthSkill(youth_id=yaw.id, skill_id=welding.id, proficiency="Expert"),
        Certification(
            youth_id=kwame.id,
            certification_name="First Aid",
            issuing_organization="Red Cross",
            skills=["CPR"],
        ),
        YouthTraining(youth_id=ama.id, program_id=marketing.id, status="Completed"),
        YouthTraining(youth_id=abena.id, program_id=marketing.id, status="In Progress"),
        BusinessYouthRelationship(
            business_id=tailors.id,
            youth_id=ama.id,
            role="Owner",
            join_date=date(2023, 6, 1),
        ),
        PortfolioProject(youth_id=ama.id, title="Kente Collection"),
        SocialMediaLink(
            youth_id=kwame.id,
            platform="LinkedIn",
            url="https://linkedin.com/in/kwame",
        ),
    ])
    db_session.commit()

    return {"ama": ama.id, "kwame": kwame.id, "abena": abena.id, "yaw": yaw.id}
