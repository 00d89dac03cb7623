# ==============================================
# Tests for ORDER BY meta rewriting
# ==============================================

import pytest

from term_locks.host.term_query import base_clauses, build_terms_query
from term_locks.meta_ui.projection import TermMetaProjection


@pytest.fixture
def clauses():
    return base_clauses(["category"], {"orderby": "name"})


class TestProjectOrderby:
    def test_meta_key_becomes_meta_value(self, projection):
        assert projection.project_orderby("color") == "meta_value"

    @pytest.mark.parametrize("orderby", ["name", "count", "", "meta_value"])
    def test_other_keys_pass_through(self, projection, orderby):
        assert projection.project_orderby(orderby) == orderby


class TestProjectQueryClauses:
    @pytest.mark.parametrize("args", [
        {"orderby": "name"},
        {"orderby": "count"},
        {"orderby": "locks"},
        {"orderby": ""},
        {},
        None,
    ])
    def test_unrelated_orderby_is_untouched(self, projection, clauses, args):
        snapshot = dict(clauses)
        result = projection.project_query_clauses(clauses, ["category"], args)
        assert result is clauses
        assert result == snapshot

    @pytest.mark.parametrize("orderby", ["color", "meta_value"])
    def test_order_by_meta_value(self, projection, clauses, orderby):
        result = projection.project_query_clauses(clauses, ["category"], {"orderby": orderby})

        assert result["join"] == " INNER JOIN wp_termmeta AS tm ON t.term_id = tm.term_id"
        assert result["orderby"] == "ORDER BY tm.meta_value"
        assert result["fields"] == "t.*, tm.*"
        assert result["where"] == "t.taxonomy IN (%s) AND tm.meta_key = 'color'"

    def test_input_clauses_not_mutated(self, projection, clauses):
        projection.project_query_clauses(clauses, ["category"], {"orderby": "color"})
        assert clauses["join"] == ""
        assert clauses["fields"] == "t.*"

    def test_numeric_order(self, projection, clauses):
        result = projection.project_query_clauses(clauses, ["category"], {"orderby": "meta_value_num"})
        assert result["orderby"] == "ORDER BY tm.meta_value+0"

    def test_key_type_cast(self, host, clauses):
        projection = TermMetaProjection(host, "priority", key_type="SIGNED")
        result = projection.project_query_clauses(clauses, ["category"], {"orderby": "priority"})
        assert result["orderby"] == "ORDER BY CAST(tm.meta_value AS SIGNED)"

    def test_meta_key_is_escaped(self, host, clauses):
        projection = TermMetaProjection(host, "o'key")
        result = projection.project_query_clauses(clauses, ["category"], {"orderby": "o'key"})
        assert result["where"].endswith("tm.meta_key = 'o\\'key'")

    def test_table_prefix_from_host(self, host, clauses):
        host.table_prefix = "site2_"
        projection = TermMetaProjection(host, "color")
        result = projection.project_query_clauses(clauses, ["category"], {"orderby": "color"})
        assert "INNER JOIN site2_termmeta AS tm" in result["join"]


class TestBuildTermsQuery:
    def test_plain_listing(self, host):
        sql, params = build_terms_query(host, ["category", "post_tag"])
        assert sql == "SELECT t.* FROM wp_terms AS t WHERE t.taxonomy IN (%s, %s) ORDER BY t.name ASC"
        assert params == ["category", "post_tag"]

    def test_paging_and_order(self, host):
        sql, _ = build_terms_query(host, ["category"], {"orderby": "slug", "order": "desc", "number": 10, "offset": 20})
        assert sql.endswith("ORDER BY t.slug DESC LIMIT 10 OFFSET 20")

    def test_ordering_by_projected_key(self, host, projection):
        sql, params = build_terms_query(host, ["category"], {"orderby": "color"})
        assert sql == (
            "SELECT t.*, tm.* FROM wp_terms AS t "
            "INNER JOIN wp_termmeta AS tm ON t.term_id = tm.term_id "
            "WHERE t.taxonomy IN (%s) AND tm.meta_key = 'color' "
            "ORDER BY tm.meta_value ASC"
        )
        assert params == ["category"]

    def test_other_orderby_unchanged_with_projection(self, host, projection):
        with_projection, _ = build_terms_query(host, ["category"], {"orderby": "name"})
        assert "termmeta" not in with_projection
