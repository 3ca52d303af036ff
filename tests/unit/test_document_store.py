"""Unit tests for the PostgreSQL JSONB document stores.

The database handle is a mock whose ``cursor()`` context yields a mock cursor,
so these tests check the SQL issued and the row handling only.
"""

from contextlib import contextmanager
from unittest.mock import MagicMock

import psycopg2
import pytest

from domains.entity_hub.core.store import CategoryStore, EventStore, NoteStore, TopicStore


def make_database(cursor):
    database = MagicMock()

    @contextmanager
    def _cursor():
        yield cursor

    database.cursor.side_effect = _cursor
    return database


@pytest.fixture
def cursor():
    return MagicMock()


class TestCreate:
    """Test INSERT handling and create hooks."""

    def test_insert_returns_stored_document(self, cursor):
        cursor.fetchone.return_value = {"doc": {"id": "t1", "name": "AI"}}
        store = TopicStore(make_database(cursor))

        result = store.create({"id": "t1", "name": "AI"})

        sql, params = cursor.execute.call_args[0]
        assert sql == "INSERT INTO topics (id, doc) VALUES (%s, %s) RETURNING doc"
        assert params[0] == "t1"
        assert params[1].adapted == {"id": "t1", "name": "AI"}
        assert result == {"id": "t1", "name": "AI"}

    def test_missing_id_generated(self, cursor):
        cursor.fetchone.return_value = {"doc": {}}
        store = TopicStore(make_database(cursor))

        store.create({"name": "AI"})

        params = cursor.execute.call_args[0][1]
        assert params[0]
        assert params[1].adapted["id"] == params[0]

    def test_duplicate_id_returns_none(self, cursor):
        cursor.execute.side_effect = psycopg2.IntegrityError("duplicate key")
        store = TopicStore(make_database(cursor))

        assert store.create({"id": "t1", "name": "AI"}) is None

    def test_category_gets_empty_subcategories(self, cursor):
        cursor.fetchone.return_value = {"doc": {}}
        CategoryStore(make_database(cursor)).create({"id": "c1", "name": "Tech"})

        assert cursor.execute.call_args[0][1][1].adapted["subcategories"] == []

    def test_event_gets_empty_timeline(self, cursor):
        cursor.fetchone.return_value = {"doc": {}}
        EventStore(make_database(cursor)).create({"id": "e1", "date": "2024-01-01", "description": "x"})

        assert cursor.execute.call_args[0][1][1].adapted["timeline"] == {"events": []}

    def test_note_defaults(self, cursor):
        cursor.fetchone.return_value = {"doc": {}}
        NoteStore(make_database(cursor)).create({
            "id": "n1", "content": "x", "reference_type": "topic", "reference_id": "t1",
        })

        doc = cursor.execute.call_args[0][1][1].adapted
        assert doc["is_archived"] is False
        assert doc["tags"] == []
        assert doc["metadata"] == {}
        assert doc["created_at"] == doc["updated_at"]
        assert doc["created_at"].endswith("Z")


class TestUpdateDelete:
    """Test partial updates and deletes."""

    def test_update_merges_without_id(self, cursor):
        cursor.rowcount = 1
        store = TopicStore(make_database(cursor))

        assert store.update("t1", {"id": "t1", "priority": 5}) is True

        sql, params = cursor.execute.call_args[0]
        assert sql == "UPDATE topics SET doc = doc || %s WHERE id = %s"
        assert params[0].adapted == {"priority": 5}
        assert params[1] == "t1"

    def test_update_missing_document(self, cursor):
        cursor.rowcount = 0
        assert TopicStore(make_database(cursor)).update("nope", {"priority": 1}) is False

    def test_note_update_touches_updated_at(self, cursor):
        cursor.rowcount = 1
        NoteStore(make_database(cursor)).update("n1", {"content": "y"})

        patch = cursor.execute.call_args[0][1][0].adapted
        assert patch["content"] == "y"
        assert "updated_at" in patch

    def test_delete(self, cursor):
        cursor.rowcount = 1
        store = EventStore(make_database(cursor))

        assert store.delete("e1") is True
        assert cursor.execute.call_args[0] == ("DELETE FROM events WHERE id = %s", ("e1",))


class TestQueries:
    """Test read queries."""

    def test_find_by_id_missing(self, cursor):
        cursor.fetchone.return_value = None
        assert TopicStore(make_database(cursor)).find_by_id("t1") is None

    def test_get_all_uses_default_order(self, cursor):
        cursor.fetchall.return_value = [{"doc": {"id": "t1"}}]
        store = TopicStore(make_database(cursor))

        assert store.get_all(limit=10, skip=5) == [{"id": "t1"}]

        sql, params = cursor.execute.call_args[0]
        assert "ORDER BY (doc->>'priority')::numeric DESC NULLS LAST, doc->>'name' ASC NULLS LAST, id ASC" in sql
        assert params == [10, 5]

    def test_note_listing_excludes_archived(self, cursor):
        cursor.fetchall.return_value = []
        NoteStore(make_database(cursor)).get_all()

        sql, params = cursor.execute.call_args[0]
        assert "doc @> %s" in sql
        assert params[0].adapted == {"is_archived": False}

    def test_category_search_includes_subcategory_names(self, cursor):
        cursor.fetchall.return_value = []
        CategoryStore(make_database(cursor)).search("ai", limit=10)

        sql = cursor.execute.call_args[0][0]
        assert "item.value->>'name' ILIKE %s" in sql

    def test_count(self, cursor):
        cursor.fetchone.return_value = {"count": 3}
        store = NoteStore(make_database(cursor))

        assert store.count({"reference_id": "t1"}) == 3
