"""Unit tests for the entity batch coordinator."""

from unittest.mock import MagicMock

import pytest

from domains.core import BadRequestError, NotFoundError
from domains.entity_hub.core.models import EntityKind
from domains.entity_hub.core.store import EntityStores
from domains.entity_hub.services import BatchResult, EntityService, parse_ids, parse_kinds

from tests.fakes import BrokenStore


class TestParsing:
    """Test ID list and kind list parsing."""

    def test_comma_separated_ids(self):
        assert parse_ids(" t1, ,t2 ,") == ["t1", "t2"]

    def test_id_array(self):
        assert parse_ids(["t1", " t2 ", ""]) == ["t1", "t2"]

    def test_missing_ids(self):
        assert parse_ids(None) == []
        assert parse_ids(42) == []

    def test_all_kinds_by_default(self):
        assert parse_kinds(None) == list(EntityKind)

    def test_unknown_kinds_ignored(self):
        assert parse_kinds("Topics, videos,notes,topics") == [EntityKind.TOPICS, EntityKind.NOTES]


class TestBatchResult:
    """Test result aggregation and pruning."""

    def test_empty_lists_pruned(self):
        result = BatchResult("created", "updated")
        result.add("created", EntityKind.TOPICS, {"id": "t1"})

        assert result.to_dict() == {
            "success": True,
            "created": {"topics": [{"id": "t1"}]},
            "updated": {},
            "errors": {},
        }
        assert result.status_code == 200

    def test_errors_make_multi_status(self):
        result = BatchResult("data")
        result.add_error(EntityKind.NOTES, {"id": "n1", "error": "Note with ID n1 not found"})

        assert result.success is False
        assert result.status_code == 207


class TestCreateOrUpdate:
    """Test batch create/update."""

    def test_absent_kinds_not_reported(self, entity_service):
        """Kinds missing from the request never show up in the response."""
        result = entity_service.create_or_update({"topics": [{"name": "AI"}]}).to_dict()

        for section in ("created", "updated", "errors"):
            assert set(result[section]) <= {"topics"}

    def test_mixed_batch_reports_partial_failure(self, entity_service):
        """A bad category does not prevent the topic from being created."""
        result = entity_service.create_or_update({
            "topics": [{"name": "AI"}],
            "categories": [{"invalid": "x"}],
        })
        body = result.to_dict()

        assert result.status_code == 207
        assert body["success"] is False
        assert len(body["created"]["topics"]) == 1
        assert body["created"]["topics"][0]["id"]
        assert body["errors"]["categories"] == [{
            "data": {"invalid": "x"},
            "error": 'Validation error: "name" is required',
        }]

    def test_valid_and_invalid_item_of_same_kind(self, entity_service):
        result = entity_service.create_or_update({
            "topics": [{"name": "AI"}, {"name": "Broken", "priority": 99}],
        }).to_dict()

        assert [t["name"] for t in result["created"]["topics"]] == ["AI"]
        assert len(result["errors"]["topics"]) == 1

    def test_invalid_reference_type_on_update(self, entity_service):
        result = entity_service.create_or_update({
            "notes": [{"id": "n1", "content": "hi", "reference_type": "bogus", "reference_id": "a1"}],
        })
        errors = result.to_dict()["errors"]["notes"]

        assert result.status_code == 207
        assert len(errors) == 1
        assert "reference_type" in errors[0]["error"]

    def test_create_defaults(self, entity_service):
        body = entity_service.create_or_update({
            "topics": [{"name": "AI"}],
            "notes": [{"content": "x", "reference_type": "topic", "reference_id": "t1"}],
        }).to_dict()

        topic = body["created"]["topics"][0]
        note = body["created"]["notes"][0]
        assert topic["unread_count"] == 0
        assert topic["priority"] == 0
        assert note["is_archived"] is False
        assert note["priority"] == 0
        assert note["created_at"]

    def test_generated_ids_unique(self, entity_service):
        body = entity_service.create_or_update({
            "topics": [{"name": "A"}, {"name": "B"}, {"name": "C"}],
        }).to_dict()

        ids = [t["id"] for t in body["created"]["topics"]]
        assert all(ids)
        assert len(set(ids)) == 3

    def test_update_is_idempotent(self, entity_service, seed, stores):
        seed("topics", {"id": "t1", "name": "AI", "priority": 1, "keywords": ["ml"]})
        payload = {"id": "t1", "priority": 5, "description": "Updated"}

        first = entity_service.create_or_update({"topics": [payload]}).to_dict()
        second = entity_service.create_or_update({"topics": [payload]}).to_dict()

        assert first["errors"] == {}
        assert second["errors"] == {}
        assert stores.topics.find_by_id("t1") == {
            "id": "t1", "name": "AI", "priority": 5, "keywords": ["ml"], "description": "Updated",
        }
        assert second["updated"]["topics"][0]["priority"] == 5

    def test_update_missing_entity(self, entity_service):
        body = entity_service.create_or_update({"events": [{"id": "e9", "priority": 1}]}).to_dict()

        assert body["errors"]["events"] == [{
            "data": {"id": "e9", "priority": 1},
            "error": "Event with ID e9 not found",
        }]

    def test_item_with_id_updates_existing(self, entity_service, seed):
        """Items carrying an id are merged into the stored document."""
        seed("categories", {"id": "c1", "name": "Tech"})

        body = entity_service.create_or_update({"categories": [{"id": "c1", "name": "Science"}]}).to_dict()

        assert body["updated"]["categories"][0]["name"] == "Science"

    def test_store_exception_isolated(self, stores):
        stores.topics.create = MagicMock(side_effect=RuntimeError("disk full"))
        service = EntityService(stores)

        body = service.create_or_update({
            "topics": [{"name": "AI"}],
            "events": [{"date": "2024-03-13T00:00:00Z", "description": "Vote"}],
        }).to_dict()

        assert body["errors"]["topics"] == [{"data": {"name": "AI"}, "error": "Failed to create topic"}]
        assert len(body["created"]["events"]) == 1

    def test_debug_adds_details(self, stores):
        stores.topics.create = MagicMock(side_effect=RuntimeError("disk full"))
        service = EntityService(stores, debug=True)

        error = service.create_or_update({"topics": [{"name": "AI"}]}).to_dict()["errors"]["topics"][0]

        assert error["details"] == "disk full"

    def test_failed_update_reported(self, stores, seed):
        seed("topics", {"id": "t1", "name": "AI"})
        stores.topics.update = MagicMock(return_value=False)
        service = EntityService(stores)

        result = service.create_or_update({"topics": [{"id": "t1", "priority": 2}]})
        body = result.to_dict()

        assert result.status_code == 207
        assert body["updated"] == {}
        assert body["errors"]["topics"] == [{
            "data": {"id": "t1", "priority": 2},
            "error": "Failed to update topic with ID t1",
        }]

    def test_duplicate_subcategory_ids_rejected(self, entity_service):
        result = entity_service.create_or_update({
            "categories": [{
                "name": "Tech",
                "subcategories": [{"id": "s1", "name": "AI"}, {"id": "s1", "name": "ML"}],
            }],
        })
        body = result.to_dict()

        assert result.status_code == 207
        assert body["created"] == {}
        assert body["errors"]["categories"][0]["error"] == (
            'Validation error: "subcategories" contains a duplicate id "s1"'
        )

    def test_non_list_kind_skipped(self, entity_service):
        body = entity_service.create_or_update({"topics": {"name": "AI"}, "events": []}).to_dict()

        assert body == {"success": True, "created": {}, "updated": {}, "errors": {}}


class TestGetByIds:
    """Test batch reads."""

    def test_found_and_missing(self, entity_service, seed):
        seed("topics", {"id": "t1", "name": "AI"})

        result = entity_service.get_by_ids({EntityKind.TOPICS: "t1,missing"})
        body = result.to_dict()

        assert result.status_code == 207
        assert body["data"]["topics"] == [{"id": "t1", "name": "AI"}]
        assert body["errors"]["topics"] == [{"id": "missing", "error": "Topic with ID missing not found"}]

    def test_no_ids(self, entity_service):
        body = entity_service.get_by_ids({}).to_dict()

        assert body == {"success": True, "data": {}, "errors": {}}

    def test_read_exception_isolated(self, stores, seed):
        seed("events", {"id": "e1", "date": "2024-03-13T00:00:00Z", "description": "Vote"})
        stores.topics.find_by_id = MagicMock(side_effect=RuntimeError("timeout"))
        service = EntityService(stores)

        result = service.get_by_ids({EntityKind.TOPICS: "t1", EntityKind.EVENTS: "e1"})
        body = result.to_dict()

        assert result.status_code == 207
        assert body["errors"]["topics"] == [{"id": "t1", "error": "Failed to retrieve topic with ID t1"}]
        assert [e["id"] for e in body["data"]["events"]] == ["e1"]

    def test_read_failure_details_in_debug(self, stores):
        stores.topics.find_by_id = MagicMock(side_effect=RuntimeError("timeout"))
        service = EntityService(stores, debug=True)

        body = service.get_by_ids({EntityKind.TOPICS: "t1"}).to_dict()

        assert body["errors"]["topics"] == [{
            "id": "t1",
            "error": "Failed to retrieve topic with ID t1",
            "details": "timeout",
        }]


class TestDeleteByIds:
    """Test batch deletes."""

    def test_delete_twice(self, entity_service, seed):
        seed("topics", {"id": "t1", "name": "AI"})

        first = entity_service.delete_by_ids({"topicIds": ["t1"]})
        second = entity_service.delete_by_ids({"topicIds": ["t1"]})

        assert first.status_code == 200
        assert first.to_dict()["deleted"] == {"topics": ["t1"]}
        assert second.status_code == 207
        assert second.to_dict()["errors"]["topics"] == [{"id": "t1", "error": "Topic with ID t1 not found"}]

    def test_non_string_id_not_found(self, entity_service):
        body = entity_service.delete_by_ids({"noteIds": [7]}).to_dict()

        assert body["errors"]["notes"] == [{"id": 7, "error": "Note with ID 7 not found"}]

    def test_failed_delete_reported(self, stores, seed):
        seed("topics", {"id": "t1", "name": "AI"})
        stores.topics.delete = MagicMock(return_value=False)
        service = EntityService(stores)

        result = service.delete_by_ids({"topicIds": ["t1"]})
        body = result.to_dict()

        assert result.status_code == 207
        assert body["deleted"] == {}
        assert body["errors"]["topics"] == [{"id": "t1", "error": "Failed to delete topic with ID t1"}]
        assert stores.topics.find_by_id("t1") is not None


class TestQueries:
    """Test search, listing and single reads."""

    def test_search_requires_query(self, stores):
        stores.topics.search = MagicMock()
        service = EntityService(stores)

        with pytest.raises(BadRequestError):
            service.search("  ")
        stores.topics.search.assert_not_called()

    def test_search_selected_kinds(self, entity_service, seed):
        seed("topics", {"id": "t1", "name": "AI Policy"}, {"id": "t2", "name": "Sports"})
        seed("categories", {"id": "c1", "name": "Tech", "subcategories": [{"id": "s1", "name": "AI"}]})

        body = entity_service.search("ai", types="topics,categories")

        assert body["query"] == "ai"
        assert [t["id"] for t in body["topics"]] == ["t1"]
        assert [c["id"] for c in body["categories"]] == ["c1"]
        assert "events" not in body

    def test_search_excludes_archived_notes(self, entity_service, seed):
        seed(
            "notes",
            {"id": "n1", "content": "budget", "reference_type": "topic", "reference_id": "t1"},
            {"id": "n2", "content": "budget", "reference_type": "topic", "reference_id": "t1",
             "is_archived": True},
        )

        body = entity_service.search("budget", types="notes")

        assert [n["id"] for n in body["notes"]] == ["n1"]

    def test_list_kind_ordering_and_pagination(self, entity_service, seed):
        seed(
            "topics",
            {"id": "t1", "name": "B", "priority": 1},
            {"id": "t2", "name": "A", "priority": 5},
            {"id": "t3", "name": "C", "priority": 5},
        )

        body = entity_service.list_kind(EntityKind.TOPICS, limit=2)

        assert [t["id"] for t in body["topics"]] == ["t2", "t3"]
        assert body["count"] == 2
        assert body["pagination"] == {"limit": 2, "skip": 0}

    def test_list_kind_falls_back_when_store_unavailable(self):
        broken = BrokenStore()
        service = EntityService(EntityStores(broken, broken, broken, broken))

        body = service.list_kind(EntityKind.CATEGORIES)

        assert body["count"] == len(body["categories"]) > 0
        assert body["categories"][0]["subcategories"]
        assert body["pagination"] == {"limit": 20, "skip": 0}

    def test_get_one(self, entity_service, seed):
        seed("events", {"id": "e1", "date": "2024-03-13T00:00:00Z", "description": "Vote"})

        assert entity_service.get_one(EntityKind.EVENTS, "e1")["description"] == "Vote"
        with pytest.raises(NotFoundError):
            entity_service.get_one(EntityKind.EVENTS, "e2")
