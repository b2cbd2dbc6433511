### app/youth/models.py

"""
ORM models for youth profiles and their related records.

These tables are owned by the profile management routes; the export
pipeline only reads them.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db import Base


class YouthProfile(Base):
    """A program participant."""

    __tablename__ = "youth_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Identification
    participant_code: Mapped[Optional[str]] = mapped_column(Text, index=True)
    full_name: Mapped[Optional[str]] = mapped_column(Text, index=True)
    preferred_name: Mapped[Optional[str]] = mapped_column(Text)
    profile_picture: Mapped[Optional[str]] = mapped_column(Text)

    # Personal info
    first_name: Mapped[Optional[str]] = mapped_column(Text)
    middle_name: Mapped[Optional[str]] = mapped_column(Text)
    last_name: Mapped[Optional[str]] = mapped_column(Text)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date)
    year_of_birth: Mapped[Optional[int]] = mapped_column(Integer)
    age: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    age_group: Mapped[Optional[str]] = mapped_column(Text)
    gender: Mapped[Optional[str]] = mapped_column(Text)
    marital_status: Mapped[Optional[str]] = mapped_column(Text)
    children_count: Mapped[Optional[int]] = mapped_column(Integer, default=0)
    dependents: Mapped[Optional[str]] = mapped_column(Text)
    national_id: Mapped[Optional[str]] = mapped_column(Text)
    pwd_status: Mapped[Optional[str]] = mapped_column(Text)

    # Location & contact
    district: Mapped[Optional[str]] = mapped_column(
        Text, index=True, comment="One of Bekwai, Gushegu, Lower Manya Krobo, Yilo Krobo"
    )
    town: Mapped[Optional[str]] = mapped_column(Text)
    home_address: Mapped[Optional[str]] = mapped_column(Text)
    country: Mapped[Optional[str]] = mapped_column(Text, default="Ghana")
    admin_level_1: Mapped[Optional[str]] = mapped_column(Text)
    admin_level_2: Mapped[Optional[str]] = mapped_column(Text)
    admin_level_3: Mapped[Optional[str]] = mapped_column(Text)
    admin_level_4: Mapped[Optional[str]] = mapped_column(Text)
    admin_level_5: Mapped[Optional[str]] = mapped_column(Text)
    phone_number: Mapped[Optional[str]] = mapped_column(Text)
    additional_phone_number_1: Mapped[Optional[str]] = mapped_column(Text)
    additional_phone_number_2: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    emergency_contact: Mapped[Optional[dict]] = mapped_column(JSON, default=dict)

    # Education & skills
    highest_education_level: Mapped[Optional[str]] = mapped_column(Text)
    active_student_status: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    core_skills: Mapped[Optional[str]] = mapped_column(Text)
    skill_level: Mapped[Optional[str]] = mapped_column(Text)
    industry_expertise: Mapped[Optional[str]] = mapped_column(Text)
    languages_spoken: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    communication_style: Mapped[Optional[str]] = mapped_column(Text)
    digital_skills: Mapped[Optional[str]] = mapped_column(Text)
    digital_skills_2: Mapped[Optional[str]] = mapped_column(Text)

    # Work history
    years_of_experience: Mapped[Optional[int]] = mapped_column(Integer)
    work_history: Mapped[Optional[str]] = mapped_column(
        Text, comment="Structured history stored as serialized text"
    )

    # Program participation
    business_interest: Mapped[Optional[str]] = mapped_column(Text)
    employment_status: Mapped[Optional[str]] = mapped_column(Text)
    specific_job: Mapped[Optional[str]] = mapped_column(Text)
    training_status: Mapped[Optional[str]] = mapped_column(Text, index=True)
    program_status: Mapped[Optional[str]] = mapped_column(Text)
    transition_status: Mapped[Optional[str]] = mapped_column(Text)
    onboarded_to_tracker: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    dare_model: Mapped[Optional[str]] = mapped_column(
        Text, comment="One of Collaborative, MakerSpace, Madam Anchor"
    )

    # Madam, mentor & guarantor
    madam_name: Mapped[Optional[str]] = mapped_column(Text)
    madam_phone: Mapped[Optional[str]] = mapped_column(Text)
    local_mentor_name: Mapped[Optional[str]] = mapped_column(Text)
    local_mentor_contact: Mapped[Optional[str]] = mapped_column(Text)
    guarantor: Mapped[Optional[str]] = mapped_column(Text)
    guarantor_phone: Mapped[Optional[str]] = mapped_column(Text)

    # Partner & refugee support
    implementing_partner_name: Mapped[Optional[str]] = mapped_column(Text)
    refugee_status: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    idp_status: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    community_hosts_refugees: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)

    # Program details
    partner_start_date: Mapped[Optional[date]] = mapped_column(Date)
    program_name: Mapped[Optional[str]] = mapped_column(Text)
    program_details: Mapped[Optional[str]] = mapped_column(Text)
    program_contact_person: Mapped[Optional[str]] = mapped_column(Text)
    program_contact_phone_number: Mapped[Optional[str]] = mapped_column(Text)
    cohort: Mapped[Optional[str]] = mapped_column(Text)

    # Flags & meta
    new_data_submission: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    is_deleted: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    host_community_status: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self):
        return f"<YouthProfile(id={self.id}, full_name={self.full_name!r}, district={self.district})>"


class Education(Base):
    """Education record owned by a youth profile."""

    __tablename__ = "education"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    youth_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("youth_profiles.id"), nullable=False, index=True
    )
    qualification_type: Mapped[str] = mapped_column(Text, nullable=False)
    qualification_name: Mapped[str] = mapped_column(Text, nullable=False)
    specialization: Mapped[Optional[str]] = mapped_column(Text)
    level_completed: Mapped[Optional[str]] = mapped_column(Text)
    institution: Mapped[Optional[str]] = mapped_column(Text)
    graduation_year: Mapped[Optional[int]] = mapped_column(Integer)
    is_highest_qualification: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    certificate_url: Mapped[Optional[str]] = mapped_column(Text)
    qualification_status: Mapped[Optional[str]] = mapped_column(
        Text, default="Completed", comment="Completed, In Progress or Incomplete"
    )
    additional_details: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class Skill(Base):
    """Skill catalogue entry."""

    __tablename__ = "skills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class YouthSkill(Base):
    """Skill assignment of a youth profile (composite key)."""

    __tablename__ = "youth_skills"

    youth_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("youth_profiles.id"), primary_key=True
    )
    skill_id: Mapped[int] = mapped_column(Integer, ForeignKey("skills.id"), primary_key=True)
    proficiency: Mapped[Optional[str]] = mapped_column(
        Text, default="Intermediate", comment="Beginner, Intermediate, Advanced or Expert"
    )
    is_primary: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    years_of_experience: Mapped[Optional[int]] = mapped_column(Integer, default=0)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class Certification(Base):
    """Certification earned by a youth profile."""

    __tablename__ = "certifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    youth_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("youth_profiles.id"), nullable=False, index=True
    )
    certification_name: Mapped[str] = mapped_column(Text, nullable=False)
    issuing_organization: Mapped[Optional[str]] = mapped_column(Text)
    issue_date: Mapped[Optional[date]] = mapped_column(Date)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date)
    credential_id: Mapped[Optional[str]] = mapped_column(Text)
    credential_url: Mapped[Optional[str]] = mapped_column(Text)
    skills: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class TrainingProgram(Base):
    """Training program definition."""

    __tablename__ = "training_programs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(Text)
    total_modules: Mapped[Optional[int]] = mapped_column(Integer, default=0)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class YouthTraining(Base):
    """Enrolment of a youth profile in a training program."""

    __tablename__ = "youth_training"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    youth_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("youth_profiles.id"), nullable=False, index=True
    )
    program_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("training_programs.id"), nullable=False
    )
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    completion_date: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[Optional[str]] = mapped_column(
        Text, default="In Progress", comment="In Progress, Completed or Dropped"
    )
    certification_received: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class BusinessProfile(Base):
    """Business that youth can be linked to."""

    __tablename__ = "business_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_name: Mapped[Optional[str]] = mapped_column(Text)
    business_description: Mapped[Optional[str]] = mapped_column(Text)
    district: Mapped[Optional[str]] = mapped_column(Text)
    business_location: Mapped[Optional[str]] = mapped_column(Text)
    business_contact: Mapped[Optional[str]] = mapped_column(Text)
    dare_model: Mapped[Optional[str]] = mapped_column(Text)
    business_start_date: Mapped[Optional[date]] = mapped_column(Date)
    registration_status: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class BusinessYouthRelationship(Base):
    """Link between a business and a youth profile (composite key)."""

    __tablename__ = "business_youth_relationships"

    business_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("business_profiles.id"), primary_key=True
    )
    youth_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("youth_profiles.id"), primary_key=True
    )
    role: Mapped[str] = mapped_column(
        Text, nullable=False, default="Member", comment="Owner, Member, Partner, ..."
    )
    join_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class PortfolioProject(Base):
    """Portfolio project of a youth profile."""

    __tablename__ = "portfolio_projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    youth_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("youth_profiles.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(Text)
    client: Mapped[Optional[str]] = mapped_column(Text)
    project_url: Mapped[Optional[str]] = mapped_column(Text)
    repository_url: Mapped[Optional[str]] = mapped_column(Text)
    featured_image: Mapped[Optional[str]] = mapped_column(Text)
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    completion_date: Mapped[Optional[date]] = mapped_column(Date)
    is_active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    is_featured: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    skills: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class SocialMediaLink(Base):
    """Social media / portfolio link of a youth profile."""

    __tablename__ = "social_media_links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    youth_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("youth_profiles.id"), nullable=False, index=True
    )
    platform: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    username: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=datetime.utcnow)
