### app/exports/builders/youth_builder.py

"""
Youth Profile Export Query Builder

Builds the primary youth profile query from the export filters and one query
per related collection, each scoped to the matched profile ids. Every
selected column is labelled with its camelCase field name, which is the key
used in the exported documents.
"""

from dataclasses import dataclass
from typing import Callable, List, Sequence

from pydantic.alias_generators import to_camel
from sqlalchemy import Select, and_, or_, select

from app.exports.schemas import IncludeOptions, YouthExportRequest
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
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Key under which related rows reference their owning profile
OWNER_KEY = "youthId"

SORT_COLUMNS = {
    "fullName": YouthProfile.full_name,
    "firstName": YouthProfile.first_name,
    "lastName": YouthProfile.last_name,
    "district": YouthProfile.district,
    "age": YouthProfile.age,
    "dateOfBirth": YouthProfile.date_of_birth,
    "createdAt": YouthProfile.created_at,
    "updatedAt": YouthProfile.updated_at,
}

KEYWORD_COLUMNS = (
    YouthProfile.full_name,
    YouthProfile.first_name,
    YouthProfile.last_name,
    YouthProfile.participant_code,
    YouthProfile.core_skills,
    YouthProfile.industry_expertise,
    YouthProfile.town,
)

LIKE_ESCAPE = "\\"

CATEGORICAL_COLUMNS = {
    "district": YouthProfile.district,
    "gender": YouthProfile.gender,
    "dare_model": YouthProfile.dare_model,
    "training_status": YouthProfile.training_status,
    "employment_status": YouthProfile.employment_status,
}


def escape_like(value: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def labelled_columns(model) -> list:
    """All table columns of a model, labelled with camelCase keys."""
    return [column.label(to_camel(column.key)) for column in model.__table__.columns]


def build_youth_export_query(request: YouthExportRequest) -> Select:
    """
    Build the primary youth profile query with filters and sorting.

    Args:
        request: Validated export request

    Returns:
        SQLAlchemy Select ready for execution
    """
    filters = request.filters
    conditions = []

    for field_name, column in CATEGORICAL_COLUMNS.items():
        values = getattr(filters, field_name)
        if values:
            conditions.append(column.in_(values))

    # Either bound may be missing; the range is open on that side
    if filters.min_age is not None:
        conditions.append(YouthProfile.age >= filters.min_age)
    if filters.max_age is not None:
        conditions.append(YouthProfile.age <= filters.max_age)

    if filters.keyword:
        pattern = f"%{escape_like(filters.keyword)}%"
        conditions.append(
            or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in KEYWORD_COLUMNS))
        )

    if filters.created_after is not None:
        conditions.append(YouthProfile.created_at >= filters.created_after)
    if filters.created_before is not None:
        conditions.append(YouthProfile.created_at <= filters.created_before)

    query = select(*labelled_columns(YouthProfile))
    if conditions:
        query = query.where(and_(*conditions))

    sort_column = SORT_COLUMNS.get(request.sort_by, YouthProfile.full_name)
    if request.sort_direction == "desc":
        query = query.order_by(sort_column.desc())
    else:
        query = query.order_by(sort_column.asc())

    query = query.order_by(YouthProfile.id.asc())

    logger.info(
        "Youth export query built",
        filter_count=len(conditions),
        sort_by=request.sort_by,
        sort_direction=request.sort_direction,
    )
    return query


def build_education_query(youth_ids: Sequence[int]) -> Select:
    return (
        select(*labelled_columns(Education))
        .where(Education.youth_id.in_(youth_ids))
        .order_by(Education.youth_id, Education.id)
    )


def build_skills_query(youth_ids: Sequence[int]) -> Select:
    """Skill assignments with the skill name resolved from the catalogue."""
    return (
        select(
            YouthSkill.youth_id.label("youthId"),
            YouthSkill.skill_id.label("skillId"),
            Skill.name.label("skillName"),
            YouthSkill.proficiency.label("proficiency"),
            YouthSkill.years_of_experience.label("yearsOfExperience"),
            YouthSkill.is_primary.label("isPrimary"),
            YouthSkill.notes.label("notes"),
            YouthSkill.created_at.label("createdAt"),
        )
        .select_from(YouthSkill)
        .join(Skill, YouthSkill.skill_id == Skill.id)
        .where(YouthSkill.youth_id.in_(youth_ids))
        .order_by(YouthSkill.youth_id, YouthSkill.skill_id)
    )


def build_certifications_query(youth_ids: Sequence[int]) -> Select:
    return (
        select(*labelled_columns(Certification))
        .where(Certification.youth_id.in_(youth_ids))
        .order_by(Certification.youth_id, Certification.id)
    )


def build_training_query(youth_ids: Sequence[int]) -> Select:
    """Training enrolments with the program name and description joined in."""
    return (
        select(
            YouthTraining.id.label("id"),
            YouthTraining.youth_id.label("youthId"),
            YouthTraining.program_id.label("programId"),
            TrainingProgram.name.label("programName"),
            TrainingProgram.description.label("programDescription"),
            YouthTraining.start_date.label("startDate"),
            YouthTraining.completion_date.label("completionDate"),
            YouthTraining.status.label("status"),
            YouthTraining.certification_received.label("certificationReceived"),
            YouthTraining.notes.label("notes"),
            YouthTraining.created_at.label("createdAt"),
        )
        .select_from(YouthTraining)
        .join(TrainingProgram, YouthTraining.program_id == TrainingProgram.id)
        .where(YouthTraining.youth_id.in_(youth_ids))
        .order_by(YouthTraining.youth_id, YouthTraining.id)
    )


def build_businesses_query(youth_ids: Sequence[int]) -> Select:
    """Business links with the business name and description joined in."""
    return (
        select(
            BusinessYouthRelationship.youth_id.label("youthId"),
            BusinessYouthRelationship.business_id.label("businessId"),
            BusinessProfile.business_name.label("businessName"),
            BusinessProfile.business_description.label("businessDescription"),
            BusinessYouthRelationship.role.label("role"),
            BusinessYouthRelationship.join_date.label("joinDate"),
            BusinessYouthRelationship.is_active.label("isActive"),
        )
        .select_from(BusinessYouthRelationship)
        .join(BusinessProfile, BusinessYouthRelationship.business_id == BusinessProfile.id)
        .where(BusinessYouthRelationship.youth_id.in_(youth_ids))
        .order_by(BusinessYouthRelationship.youth_id, BusinessYouthRelationship.business_id)
    )


def build_portfolio_query(youth_ids: Sequence[int]) -> Select:
    return (
        select(*labelled_columns(PortfolioProject))
        .where(PortfolioProject.youth_id.in_(youth_ids))
        .order_by(PortfolioProject.youth_id, PortfolioProject.id)
    )


def build_social_media_query(youth_ids: Sequence[int]) -> Select:
    return (
        select(*labelled_columns(SocialMediaLink))
        .where(SocialMediaLink.youth_id.in_(youth_ids))
        .order_by(SocialMediaLink.youth_id, SocialMediaLink.id)
    )


@dataclass(frozen=True)
class RelatedCollection:
    """
    A one-to-many collection attached to each exported profile.

    key: document field holding the list
    include_flag: IncludeOptions attribute that requests it
    build_query: builds the single query scoped to the matched profile ids
    """

    key: str
    include_flag: str
    build_query: Callable[[Sequence[int]], Select]


RELATED_COLLECTIONS: List[RelatedCollection] = [
    RelatedCollection("education", "education", build_education_query),
    RelatedCollection("skills", "skills", build_skills_query),
    RelatedCollection("certifications", "certifications", build_certifications_query),
    RelatedCollection("training", "training", build_training_query),
    RelatedCollection("businesses", "businesses", build_businesses_query),
    RelatedCollection("portfolioProjects", "portfolio", build_portfolio_query),
    RelatedCollection("socialMediaLinks", "social_media", build_social_media_query),
]


def requested_collections(include: IncludeOptions) -> List[RelatedCollection]:
    """Collections whose include flag is set, in export order."""
    return [
        collection
        for collection in RELATED_COLLECTIONS
        if getattr(include, collection.include_flag)
    ]
