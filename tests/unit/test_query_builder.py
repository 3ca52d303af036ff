"""Unit tests for the JSONB query builder."""

from domains.doc_core.database import QueryBuilder, escape_like


def make_builder():
    return QueryBuilder(
        table="topics",
        allowed_fields={"name", "description", "keywords", "subcategories", "priority", "published_date"},
        numeric_fields={"priority"},
    )


class TestEscapeLike:
    """Test LIKE wildcard escaping."""

    def test_wildcards_escaped(self):
        assert escape_like("50%_off") == "50\\%\\_off"

    def test_backslash_escaped_first(self):
        assert escape_like("a\\b") == "a\\\\b"


class TestFieldExpressions:
    """Test field expression generation."""

    def test_text_field(self):
        assert make_builder().field_expr("name") == "doc->>'name'"

    def test_numeric_field_cast(self):
        assert make_builder().field_expr("priority") == "(doc->>'priority')::numeric"

    def test_unknown_field_rejected(self):
        assert make_builder().field_expr("password") is None


class TestBuild:
    """Test SQL generation."""

    def test_default_query_orders_by_id(self):
        sql, params = make_builder().build()

        assert sql == "SELECT doc FROM topics ORDER BY id ASC"
        assert params == []

    def test_order_limit_offset(self):
        sql, params = (
            make_builder()
            .order_by("priority DESC")
            .order_by("name asc")
            .limit(20)
            .offset(40)
            .build()
        )

        assert sql == (
            "SELECT doc FROM topics ORDER BY (doc->>'priority')::numeric DESC NULLS LAST, "
            "doc->>'name' ASC NULLS LAST, id ASC LIMIT %s OFFSET %s"
        )
        assert params == [20, 40]

    def test_invalid_order_ignored(self):
        sql, _ = make_builder().order_by("name; DROP TABLE topics").order_by("secret DESC").build()

        assert sql == "SELECT doc FROM topics ORDER BY id ASC"

    def test_containment_filter(self):
        sql, params = make_builder().where_contains({"topics_ids": ["t1"]}).build()

        assert "WHERE doc @> %s" in sql
        assert params[0].adapted == {"topics_ids": ["t1"]}

    def test_empty_containment_skipped(self):
        sql, params = make_builder().where_contains({}).build()

        assert "WHERE" not in sql
        assert params == []

    def test_comparison_conditions(self):
        sql, params = (
            make_builder()
            .where("priority", ">=3")
            .where("published_date", ["<=2024-12-31T00:00:00Z", ">2024-01-01T00:00:00Z"])
            .build()
        )

        assert "(doc->>'priority')::numeric >= %s" in sql
        assert "doc->>'published_date' <= %s" in sql
        assert "doc->>'published_date' > %s" in sql
        assert params == [3, "2024-12-31T00:00:00Z", "2024-01-01T00:00:00Z"]

    def test_unknown_filter_field_ignored(self):
        sql, params = make_builder().where("owner", "me").build()

        assert "WHERE" not in sql
        assert params == []

    def test_count_query(self):
        sql, params = make_builder().where("name", "AI").build_count()

        assert sql == "SELECT COUNT(*) as count FROM topics WHERE doc->>'name' = %s"
        assert params == ["AI"]


class TestSearch:
    """Test multi-field substring search."""

    def test_search_branches(self):
        sql, params = (
            make_builder()
            .search(
                "ai",
                text_fields=["name", "description"],
                array_fields=["keywords"],
                nested_fields={"subcategories": "name"},
            )
            .build()
        )

        assert "doc->>'name' ILIKE %s" in sql
        assert "doc->>'description' ILIKE %s" in sql
        assert "jsonb_array_elements_text" in sql
        assert "item.value->>'name' ILIKE %s" in sql
        assert " OR " in sql
        assert params == ["%ai%"] * 4

    def test_search_keyword_escaped(self):
        _, params = make_builder().search("100%", text_fields=["name"]).build()

        assert params == ["%100\\%%"]

    def test_search_without_fields_adds_nothing(self):
        sql, _ = make_builder().search("ai").build()

        assert "WHERE" not in sql
