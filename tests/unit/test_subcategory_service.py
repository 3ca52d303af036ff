"""Unit tests for embedded subcategory management."""

import pytest

from domains.core import ConflictError, NotFoundError, ValidationError


@pytest.fixture
def category(seed):
    return seed("categories", {
        "id": "c1",
        "name": "Technology",
        "subcategories": [{"id": "s1", "name": "AI", "topics_ids": ["t1"], "priority": 2}],
    })[0]


class TestSubcategoryReads:
    """Test listing and single reads."""

    def test_list(self, subcategory_service, category):
        assert [s["id"] for s in subcategory_service.list_subcategories("c1")] == ["s1"]

    def test_list_missing_category(self, subcategory_service):
        with pytest.raises(NotFoundError) as exc_info:
            subcategory_service.list_subcategories("c404")

        assert exc_info.value.message == "Category with ID c404 not found"

    def test_get_missing_subcategory(self, subcategory_service, category):
        with pytest.raises(NotFoundError) as exc_info:
            subcategory_service.get_subcategory("c1", "s404")

        assert exc_info.value.message == "Subcategory with ID s404 not found"


class TestSubcategoryWrites:
    """Test add, update and remove."""

    def test_add_generates_id(self, subcategory_service, category, stores):
        sub = subcategory_service.add_subcategory("c1", {"name": "Security", "keywords": ["infosec"]})

        assert sub["id"]
        assert sub["name"] == "Security"
        assert sub["topics_ids"] == []
        assert sub["priority"] == 0
        stored = stores.categories.find_by_id("c1")["subcategories"]
        assert [s["name"] for s in stored] == ["AI", "Security"]

    def test_add_duplicate_id(self, subcategory_service, category):
        with pytest.raises(ConflictError) as exc_info:
            subcategory_service.add_subcategory("c1", {"id": "s1", "name": "Again"})

        assert exc_info.value.message == "Subcategory with ID s1 already exists"

    def test_add_invalid(self, subcategory_service, category):
        with pytest.raises(ValidationError) as exc_info:
            subcategory_service.add_subcategory("c1", {"description": "no name"})

        assert exc_info.value.message == '"name" is required'

    def test_update_merges_and_keeps_id(self, subcategory_service, category):
        sub = subcategory_service.update_subcategory("c1", "s1", {"id": "hijack", "priority": 7})

        assert sub == {"id": "s1", "name": "AI", "topics_ids": ["t1"], "priority": 7}
        assert subcategory_service.get_subcategory("c1", "s1")["priority"] == 7

    def test_update_missing(self, subcategory_service, category):
        with pytest.raises(NotFoundError):
            subcategory_service.update_subcategory("c1", "s404", {"priority": 1})

    def test_remove(self, subcategory_service, category):
        subcategory_service.remove_subcategory("c1", "s1")

        assert subcategory_service.list_subcategories("c1") == []
        with pytest.raises(NotFoundError):
            subcategory_service.remove_subcategory("c1", "s1")
