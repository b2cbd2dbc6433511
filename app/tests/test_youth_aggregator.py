# app/tests/test_youth_aggregator.py

import pytest
from datetime import date
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.exports.aggregator import YouthExportAggregator
from app.exports.builders.youth_builder import RELATED_COLLECTIONS
from app.exports.exceptions import AggregationError
from app.exports.schemas import YouthExportRequest

NO_COLLECTIONS = {
    "education": False,
    "skills": False,
    "certifications": False,
    "training": False,
    "businesses": False,
    "portfolio": False,
    "socialMedia": False,
}


def _selects(statements):
    return [s for s in statements if s.lstrip().upper().startswith("SELECT")]


def _names(documents):
    return [document["fullName"] for document in documents]


@pytest.fixture
def aggregator(db_session, seeded_youth):
    return YouthExportAggregator(db_session)


class TestFiltering:
    """Primary query filters and ordering"""

    def test_no_filters_returns_everyone_sorted_by_name(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest(include=NO_COLLECTIONS))

        assert _names(documents) == ["Abena Owusu", "Ama Mensah", "Kwame Boateng", "Yaw Darko"]

    def test_bekwai_age_range_with_education(self, aggregator, seeded_youth):
        request = YouthExportRequest.model_validate({
            "filters": {"district": ["Bekwai"], "minAge": 20, "maxAge": 24},
            "include": {**NO_COLLECTIONS, "education": True},
        })

        documents = aggregator.aggregate(request)

        assert _names(documents) == ["Ama Mensah", "Kwame Boateng"]
        assert len(documents[0]["education"]) == 1
        assert documents[0]["education"][0]["qualificationName"] == "BSc Fashion Design"
        assert documents[1]["education"] == []
        assert "skills" not in documents[0]

    def test_unknown_sort_uses_full_name(self, aggregator):
        documents = aggregator.aggregate(
            YouthExportRequest.model_validate({"sortBy": "zzz", "include": NO_COLLECTIONS})
        )

        assert _names(documents) == ["Abena Owusu", "Ama Mensah", "Kwame Boateng", "Yaw Darko"]

    def test_sort_by_age_descending(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest.model_validate({
            "sortBy": "age",
            "sortDirection": "desc",
            "include": NO_COLLECTIONS,
        }))

        assert [document["age"] for document in documents] == [30, 24, 22, 19]

    def test_keyword_matches_skills_case_insensitively(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest.model_validate({
            "filters": {"keyword": "KENTE"},
            "include": NO_COLLECTIONS,
        }))

        assert _names(documents) == ["Ama Mensah"]

    def test_keyword_matches_participant_code(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest.model_validate({
            "filters": {"keyword": "bkw"},
            "include": NO_COLLECTIONS,
        }))

        assert _names(documents) == ["Ama Mensah", "Kwame Boateng"]

    @pytest.mark.parametrize("keyword", ["%", "_", "BKW-00_", "100%"])
    def test_keyword_wildcards_match_literally(self, aggregator, keyword):
        documents = aggregator.aggregate(YouthExportRequest.model_validate({
            "filters": {"keyword": keyword},
            "include": NO_COLLECTIONS,
        }))

        assert documents == []

    def test_created_range_is_inclusive(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest.model_validate({
            "filters": {
                "createdAfter": "2024-02-15T09:00:00",
                "createdBefore": "2024-03-01T09:00:00",
            },
            "include": NO_COLLECTIONS,
        }))

        assert _names(documents) == ["Abena Owusu", "Kwame Boateng"]

    def test_categorical_filters_are_anded(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest.model_validate({
            "filters": {"dareModel": ["Collaborative"], "gender": ["Male"]},
            "include": NO_COLLECTIONS,
        }))

        assert _names(documents) == ["Yaw Darko"]

    def test_multiple_values_within_a_filter_are_ored(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest.model_validate({
            "filters": {"district": ["Gushegu", "Yilo Krobo"]},
            "include": NO_COLLECTIONS,
        }))

        assert _names(documents) == ["Abena Owusu", "Yaw Darko"]

    def test_documents_use_camel_case_keys(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest.model_validate({
            "filters": {"keyword": "kente"},
            "include": NO_COLLECTIONS,
        }))

        ama = documents[0]
        assert ama["participantCode"] == "BKW-001"
        assert ama["languagesSpoken"] == ["Twi", "English"]
        assert ama["emergencyContact"]["name"] == "Kofi Mensah"
        assert "full_name" not in ama


class TestRelatedCollections:
    """Secondary queries and merging"""

    def test_one_query_per_requested_collection(self, aggregator, executed_statements):
        executed_statements.clear()

        aggregator.aggregate(YouthExportRequest())

        assert len(_selects(executed_statements)) == 1 + len(RELATED_COLLECTIONS)

    def test_query_count_does_not_depend_on_profile_count(self, aggregator, executed_statements):
        request = YouthExportRequest.model_validate({
            "filters": {"district": ["Gushegu"]},
            "include": {**NO_COLLECTIONS, "education": True, "training": True},
        })
        executed_statements.clear()

        documents = aggregator.aggregate(request)

        assert len(documents) == 1
        assert len(_selects(executed_statements)) == 3

    def test_empty_result_runs_no_related_queries(self, aggregator, executed_statements):
        request = YouthExportRequest.model_validate({
            "filters": {"district": ["Gushegu"], "minAge": 25},
        })
        executed_statements.clear()

        documents = aggregator.aggregate(request)

        assert documents == []
        assert len(_selects(executed_statements)) == 1

    def test_related_items_belong_to_their_profile(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest())

        for document in documents:
            for collection in RELATED_COLLECTIONS:
                for item in document[collection.key]:
                    assert item["youthId"] == document["id"]

    def test_profiles_without_records_get_empty_lists(self, aggregator):
        documents = {d["fullName"]: d for d in aggregator.aggregate(YouthExportRequest())}

        yaw = documents["Yaw Darko"]
        assert yaw["certifications"] == []
        assert yaw["businesses"] == []
        assert yaw["socialMediaLinks"] == []

    def test_catalogue_names_joined_in(self, aggregator):
        documents = {d["fullName"]: d for d in aggregator.aggregate(YouthExportRequest())}
        ama = documents["Ama Mensah"]

        assert ama["skills"][0]["skillName"] == "Tailoring"
        assert ama["skills"][0]["proficiency"] == "Advanced"
        assert ama["training"][0]["programName"] == "Digital Marketing"
        assert ama["training"][0]["programDescription"] == "Selling online"
        assert ama["businesses"][0]["businessName"] == "Bekwai Tailors"
        assert ama["businesses"][0]["joinDate"] == date(2023, 6, 1)
        assert ama["portfolioProjects"][0]["title"] == "Kente Collection"

    def test_no_profile_appears_twice(self, aggregator):
        documents = aggregator.aggregate(YouthExportRequest())
        ids = [document["id"] for document in documents]

        assert len(ids) == len(set(ids)) == 4


class TestFailures:
    """Query failures surface as AggregationError"""

    def test_primary_query_failure(self, db_session, seeded_youth):
        aggregator = YouthExportAggregator(db_session)
        error = OperationalError("SELECT", {}, Exception("database is locked"))

        with patch.object(db_session, "execute", side_effect=error):
            with pytest.raises(AggregationError) as exc_info:
                aggregator.aggregate(YouthExportRequest())

        assert exc_info.value.stage == "youth profiles"

    def test_secondary_query_failure_discards_partial_result(self, db_session, seeded_youth):
        aggregator = YouthExportAggregator(db_session)
        real_execute = db_session.execute
        calls = {"count": 0}

        def flaky_execute(statement, *args, **kwargs):
            calls["count"] += 1
            if calls["count"] == 2:
                raise OperationalError("SELECT", {}, Exception("connection reset"))
            return real_execute(statement, *args, **kwargs)

        with patch.object(db_session, "execute", side_effect=flaky_execute):
            with pytest.raises(AggregationError) as exc_info:
                aggregator.aggregate(YouthExportRequest())

        assert exc_info.value.stage == "education"
        assert "connection reset" in str(exc_info.value)
