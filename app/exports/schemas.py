### app/exports/schemas.py

"""
Pydantic schemas for export API requests and responses.

Clients send camelCase keys (``dareModel``, ``sortBy``); snake_case is also
accepted so the same models can be built from Python code and tests.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.exports.models import ExportFormat, ExportStatus

DEFAULT_SORT_FIELD = "fullName"
DEFAULT_SORT_DIRECTION = "asc"
DEFAULT_FILENAME = "youth-export"

# Sort keys accepted from clients, mapped to their canonical field name
SORT_FIELD_ALIASES = {
    "name": "fullName",
    "fullName": "fullName",
    "firstName": "firstName",
    "lastName": "lastName",
    "district": "district",
    "age": "age",
    "dateOfBirth": "dateOfBirth",
    "createdAt": "createdAt",
    "creationTime": "createdAt",
    "updatedAt": "updatedAt",
}

# Flat request flags used by older clients, folded into `include`
LEGACY_INCLUDE_FLAGS = {
    "includeEducation": "education",
    "includeSkills": "skills",
    "includeCertifications": "certifications",
    "includeTraining": "training",
    "includeBusinesses": "businesses",
    "includePortfolio": "portfolio",
    "includeSocialMedia": "socialMedia",
}

CATEGORICAL_FILTERS = ("district", "gender", "dare_model", "training_status", "employment_status")


class CamelModel(BaseModel):
    """Base model exchanging camelCase keys with clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExportFilters(CamelModel):
    """Which youth profiles to include. Every filter is optional."""

    district: List[str] = Field(default_factory=list, description="Districts to include")
    gender: List[str] = Field(default_factory=list)
    dare_model: List[str] = Field(default_factory=list, description="DARE program models")
    training_status: List[str] = Field(default_factory=list)
    employment_status: List[str] = Field(default_factory=list)

    min_age: Optional[int] = Field(None, ge=0)
    max_age: Optional[int] = Field(None, ge=0)

    keyword: Optional[str] = Field(None, description="Free-text search across names, code and skills")

    created_after: Optional[datetime] = Field(None, description="Inclusive lower bound on creation time")
    created_before: Optional[datetime] = Field(None, description="Inclusive upper bound on creation time")

    @field_validator(*CATEGORICAL_FILTERS, mode="before")
    @classmethod
    def coerce_to_list(cls, value: Any) -> Any:
        # An empty list means "no restriction"
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple, set)):
            return [item.strip() if isinstance(item, str) else item for item in value if item not in ("", None)]
        return value

    @field_validator("keyword")
    @classmethod
    def blank_keyword_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @model_validator(mode="after")
    def check_ranges(self) -> "ExportFilters":
        if self.min_age is not None and self.max_age is not None and self.min_age > self.max_age:
            raise ValueError("minAge cannot be greater than maxAge")
        if (
            self.created_after is not None
            and self.created_before is not None
            and self.created_after > self.created_before
        ):
            raise ValueError("createdAfter cannot be later than createdBefore")
        return self

    def applied(self) -> Dict[str, Any]:
        """Only the filters that actually restrict the result, as JSON data."""
        data = self.model_dump(mode="json", by_alias=True)
        return {key: value for key, value in data.items() if value not in (None, [], "")}


class IncludeOptions(CamelModel):
    """Related collections to attach to each profile."""

    education: bool = True
    skills: bool = True
    certifications: bool = True
    training: bool = True
    businesses: bool = True
    portfolio: bool = True
    social_media: bool = True


class YouthExportRequest(CamelModel):
    """Request schema for creating a youth profile export job"""

    filters: ExportFilters = Field(default_factory=ExportFilters)

    format: ExportFormat = Field(
        ExportFormat.JSON,
        description="Export format (json, xlsx, csv)"
    )

    include: IncludeOptions = Field(default_factory=IncludeOptions)

    sort_by: str = Field(DEFAULT_SORT_FIELD, description="fullName, district, age, createdAt, ...")

    sort_direction: str = Field(DEFAULT_SORT_DIRECTION, description="asc or desc")

    filename: str = Field(DEFAULT_FILENAME, description="Basename suggested for the download")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "filters": {
                    "district": ["Bekwai"],
                    "minAge": 20,
                    "maxAge": 24,
                },
                "format": "csv",
                "include": {"education": True, "skills": False},
                "sortBy": "fullName",
                "sortDirection": "asc",
                "filename": "bekwai-youth",
            }
        },
    )

    @model_validator(mode="before")
    @classmethod
    def fold_legacy_include_flags(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        legacy = {key: data[key] for key in LEGACY_INCLUDE_FLAGS if key in data}
        if not legacy:
            return data
        data = {key: value for key, value in data.items() if key not in legacy}
        include = dict(data.get("include") or {})
        for flag, value in legacy.items():
            include.setdefault(LEGACY_INCLUDE_FLAGS[flag], value)
        data["include"] = include
        return data

    @field_validator("filters", "include", mode="before")
    @classmethod
    def null_means_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            if value == "excel":
                return ExportFormat.XLSX.value
        return value

    @field_validator("filename", mode="before")
    @classmethod
    def sanitize_filename(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_FILENAME
        cleaned = re.sub(r"[^A-Za-z0-9]", "-", str(value).strip())
        return cleaned or DEFAULT_FILENAME

    @model_validator(mode="after")
    def resolve_sort(self) -> "YouthExportRequest":
        # Unknown sort keys fall back to the default ordering instead of failing
        canonical = SORT_FIELD_ALIASES.get(self.sort_by)
        if canonical is None:
            self.sort_by = DEFAULT_SORT_FIELD
            self.sort_direction = DEFAULT_SORT_DIRECTION
            return self
        self.sort_by = canonical
        direction = str(self.sort_direction).strip().lower()
        self.sort_direction = direction if direction in ("asc", "desc") else DEFAULT_SORT_DIRECTION
        return self


class ExportResponse(CamelModel):
    """Response schema for export job creation"""

    job_id: str = Field(..., description="Opaque export job ID")

    status: ExportStatus = Field(..., description="Current status of export job")

    message: str = Field(..., description="User-friendly status message")

    status_url: str = Field(..., description="URL to check export status")

    download_url: str = Field(..., description="URL to download the file once completed")


class ExportStatusResponse(CamelModel):
    """Response schema for export status check"""

    job_id: str = Field(..., description="Export job ID")

    status: ExportStatus = Field(..., description="Current status")

    format: Optional[ExportFormat] = Field(None, description="Export format (when completed)")

    size_bytes: Optional[int] = Field(None, description="Size of the generated file")

    created_at: Optional[datetime] = Field(None, description="When export was requested")

    completed_at: Optional[datetime] = Field(None, description="When export finished")

    error: Optional[str] = Field(None, description="Error details (if status is failed)")


class ExportListItem(CamelModel):
    """Schema for a single export in list view"""

    job_id: str
    format: ExportFormat
    status: ExportStatus
    file_name: str
    size_bytes: Optional[int] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class PaginatedExportListResponse(CamelModel):
    """Response schema for paginated export list"""

    items: List[ExportListItem] = Field(..., description="List of exports")

    total_items: int = Field(..., description="Total number of exports")

    page: int = Field(..., description="Current page number")

    per_page: int = Field(..., description="Items per page")

    total_pages: int = Field(..., description="Total number of pages")
