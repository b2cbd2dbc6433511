# app/tests/test_export_schemas.py

import pytest
from datetime import datetime

from pydantic import ValidationError

from app.exports.models import ExportFormat
from app.exports.schemas import ExportFilters, IncludeOptions, YouthExportRequest


class TestExportFilters:
    """Filter parsing and validation"""

    def test_defaults_do_not_restrict(self):
        filters = ExportFilters()

        assert filters.district == []
        assert filters.gender == []
        assert filters.min_age is None
        assert filters.keyword is None
        assert filters.applied() == {}

    def test_single_value_becomes_list(self):
        filters = ExportFilters.model_validate({"district": "Bekwai", "dareModel": None})

        assert filters.district == ["Bekwai"]
        assert filters.dare_model == []

    def test_blank_keyword_is_ignored(self):
        assert ExportFilters(keyword="   ").keyword is None
        assert ExportFilters(keyword="  ama ").keyword == "ama"

    def test_min_age_above_max_age_rejected(self):
        with pytest.raises(ValidationError, match="minAge"):
            ExportFilters.model_validate({"minAge": 30, "maxAge": 20})

    def test_created_range_reversed_rejected(self):
        with pytest.raises(ValidationError, match="createdAfter"):
            ExportFilters(
                created_after=datetime(2024, 5, 1),
                created_before=datetime(2024, 1, 1),
            )

    def test_negative_age_rejected(self):
        with pytest.raises(ValidationError):
            ExportFilters.model_validate({"minAge": -1})

    def test_open_ended_age_range_is_valid(self):
        filters = ExportFilters.model_validate({"minAge": 20})

        assert filters.min_age == 20
        assert filters.max_age is None

    def test_applied_uses_camel_case_and_skips_empty(self):
        filters = ExportFilters.model_validate(
            {"district": ["Bekwai"], "minAge": 20, "maxAge": 24, "gender": []}
        )

        assert filters.applied() == {"district": ["Bekwai"], "minAge": 20, "maxAge": 24}


class TestYouthExportRequest:
    """Request defaults, normalisation and sort fallback"""

    def test_defaults(self):
        request = YouthExportRequest()

        assert request.format == ExportFormat.JSON
        assert request.sort_by == "fullName"
        assert request.sort_direction == "asc"
        assert request.filename == "youth-export"
        assert request.include == IncludeOptions()
        assert all(request.include.model_dump().values())

    def test_unknown_sort_field_falls_back_to_full_name_ascending(self):
        request = YouthExportRequest.model_validate({"sortBy": "zzz", "sortDirection": "desc"})

        assert request.sort_by == "fullName"
        assert request.sort_direction == "asc"

    def test_sort_aliases_resolve(self):
        assert YouthExportRequest.model_validate({"sortBy": "name"}).sort_by == "fullName"
        assert YouthExportRequest.model_validate({"sortBy": "creationTime"}).sort_by == "createdAt"

    def test_sort_direction_normalised(self):
        assert YouthExportRequest.model_validate({"sortBy": "age", "sortDirection": "DESC"}).sort_direction == "desc"
        assert YouthExportRequest.model_validate({"sortBy": "age", "sortDirection": "sideways"}).sort_direction == "asc"

    @pytest.mark.parametrize("value, expected", [
        ("json", ExportFormat.JSON),
        ("CSV", ExportFormat.CSV),
        ("xlsx", ExportFormat.XLSX),
        ("excel", ExportFormat.XLSX),
    ])
    def test_format_accepted(self, value, expected):
        assert YouthExportRequest.model_validate({"format": value}).format == expected

    def test_unsupported_format_rejected(self):
        with pytest.raises(ValidationError):
            YouthExportRequest.model_validate({"format": "pdf"})

    def test_filename_sanitised(self):
        request = YouthExportRequest.model_validate({"filename": "../Bekwai youth/2024"})

        assert request.filename == "---Bekwai-youth-2024"
        assert "/" not in request.filename

    def test_empty_filename_uses_default(self):
        assert YouthExportRequest.model_validate({"filename": ""}).filename == "youth-export"

    def test_partial_include_keeps_other_defaults(self):
        request = YouthExportRequest.model_validate({"include": {"skills": False, "socialMedia": False}})

        assert request.include.skills is False
        assert request.include.social_media is False
        assert request.include.education is True

    def test_legacy_include_flags_folded(self):
        request = YouthExportRequest.model_validate(
            {"includeEducation": False, "includePortfolio": False}
        )

        assert request.include.education is False
        assert request.include.portfolio is False
        assert request.include.training is True

    def test_explicit_include_wins_over_legacy_flag(self):
        request = YouthExportRequest.model_validate(
            {"include": {"education": True}, "includeEducation": False}
        )

        assert request.include.education is True

    def test_null_filters_and_include_use_defaults(self):
        request = YouthExportRequest.model_validate({"filters": None, "include": None})

        assert request.filters == ExportFilters()
        assert request.include == IncludeOptions()

    def test_invalid_filters_reject_request(self):
        with pytest.raises(ValidationError):
            YouthExportRequest.model_validate({"filters": {"minAge": 40, "maxAge": 18}})

    def test_request_survives_json_round_trip(self):
        request = YouthExportRequest.model_validate({
            "filters": {"district": ["Bekwai"], "createdAfter": "2024-01-01T00:00:00"},
            "format": "csv",
            "sortBy": "age",
            "sortDirection": "desc",
        })

        restored = YouthExportRequest.model_validate(request.model_dump(mode="json", by_alias=True))

        assert restored == request
