# ==============================================
# Tests for TermMetaProjection
# ==============================================

import pytest

from term_locks.host.admin_host import AdminHost
from term_locks.host.memory import InMemoryOptionStore, InMemoryRoleStore
from term_locks.host.types import AdminRequest, StoreError, Term
from term_locks.meta_ui.projection import NO_VALUE, TermMetaProjection


class ScriptedMetaStore:
    """Term meta store whose write results are set by the test."""

    def __init__(self, update_result=None, delete_result=True, raise_on=None):
        self.update_result = update_result
        self.delete_result = delete_result
        self.raise_on = raise_on or set()

    def get_term_meta(self, term_id, meta_key):
        if "get" in self.raise_on:
            raise StoreError("read failed")
        return None

    def update_term_meta(self, term_id, meta_key, meta_value):
        if "update" in self.raise_on:
            raise StoreError("write failed")
        return self.update_result

    def delete_term_meta(self, term_id, meta_key):
        return self.delete_result

    def term_meta_exists(self, term_id, meta_key):
        return False


def scripted_projection(store):
    host = AdminHost(store, InMemoryOptionStore(), InMemoryRoleStore())
    return TermMetaProjection(host, "color")


class TestRegister:
    def test_resolves_taxonomies_with_ui(self, projection):
        assert projection.taxonomies == ["category", "post_tag"]

    def test_explicit_taxonomies_kept(self, host):
        projection = TermMetaProjection(host, "color", taxonomies=["post_tag"])
        projection.register()
        assert projection.taxonomies == ["post_tag"]
        assert not host.has_filter("manage_edit-category_columns")

    def test_taxonomy_match_is_filterable(self, host):
        host.add_filter("wp_term_color_get_taxonomies", lambda match: {"show_ui": False})
        projection = TermMetaProjection(host, "color")
        projection.register()
        assert projection.taxonomies == ["nav_menu"]

    def test_second_registration_is_a_no_op(self, host, projection):
        duplicate = TermMetaProjection(host, "color")
        assert not duplicate.register()
        assert not host.has_filter("create_term", duplicate.on_save_term)
        assert host.has_filter("create_term", projection.on_save_term)

    def test_fires_init_action(self, host):
        seen = []
        host.add_action("wp_term_meta_color/init", seen.append)
        projection = TermMetaProjection(host, "color")
        projection.register()
        assert seen == [projection]

    def test_hooks_subscribed(self, host, projection):
        for name in (
            "create_term", "edit_term", "terms_clauses", "get_terms_orderby", "admin_init",
            "manage_edit-category_columns", "manage_category_custom_column",
            "manage_edit-category_sortable_columns", "category_add_form_fields",
            "category_edit_form_fields", "load-edit-tags",
        ):
            assert host.has_filter(name), name

    def test_fancy_flag_is_filterable(self, host, projection):
        assert projection.fancy is True

        host.add_filter("wp_fancy_term_size", lambda fancy: False)
        plain = TermMetaProjection(host, "size")
        plain.register()
        assert plain.fancy is False

    def test_no_column_no_column_hooks(self, host, admin):
        projection = TermMetaProjection(host, "flag", has_column=False)
        projection.register()
        assert not host.has_filter("manage_edit-category_columns")
        assert not host.has_filter("quick_edit_custom_box")
        with host.request(AdminRequest(actor=admin, taxonomy="category", screen="edit-tags")):
            pass
        assert not host.has_filter("quick_edit_custom_box")
        assert host.has_filter("category_edit_form_fields")

    def test_meta_key_required(self, host):
        with pytest.raises(ValueError):
            TermMetaProjection(host, "")

    def test_db_version_key(self, projection):
        assert projection.db_version_key == "wtm_term_color_version"


class TestPersistence:
    def test_set_and_get(self, host, projection):
        assert projection.set_meta(7, "category", "red")
        assert projection.get_meta(7) == "red"

    def test_unchanged_value_reports_false(self, projection):
        projection.set_meta(7, "category", "red")
        assert not projection.set_meta(7, "category", "red")

    def test_empty_value_deletes(self, host, projection):
        projection.set_meta(7, "category", "red")
        assert projection.set_meta(7, "category", "")
        assert not host.meta_store.term_meta_exists(7, "color")
        assert projection.get_meta(7) is None

    @pytest.mark.parametrize("empty", ["", None, {}, 0])
    def test_empty_value_never_stores(self, host, projection, empty):
        assert not projection.set_meta(8, "category", empty)
        assert not host.meta_store.term_meta_exists(8, "color")

    @pytest.mark.parametrize("result, expected", [
        (True, True),
        (False, False),
        (17, True),
        (0, False),
        (StoreError("disk full"), False),
    ])
    def test_store_results_normalized(self, result, expected):
        projection = scripted_projection(ScriptedMetaStore(update_result=result))
        assert projection.set_meta(7, "category", "red") is expected

    def test_raised_store_error_is_false(self, capsys):
        projection = scripted_projection(ScriptedMetaStore(raise_on={"update"}))
        assert projection.set_meta(7, "category", "red") is False
        assert "Could not save 'color'" in capsys.readouterr().out

    def test_read_errors_propagate(self):
        projection = scripted_projection(ScriptedMetaStore(raise_on={"get"}))
        with pytest.raises(StoreError):
            projection.get_meta(7)

    def test_clean_cache(self, host, projection, category):
        host.save_term(category)
        projection.set_meta(7, "category", "red")
        assert host.get_term(7) is category
        projection.set_meta(7, "category", "blue", clean_cache=True)
        assert host.get_term(7) is None


class TestSaveTerm:
    def test_posted_value_saved(self, host, projection, admin, category):
        with host.request(AdminRequest(actor=admin, form={"term-color": "blue"})):
            host.save_term(category)
        assert projection.get_meta(7) == "blue"

    def test_missing_field_clears(self, host, projection, admin, category):
        projection.set_meta(7, "category", "blue")
        with host.request(AdminRequest(actor=admin, form={"name": "Sports"})):
            host.save_term(category)
        assert projection.get_meta(7) is None

    def test_parse_value_callback(self, host, admin, category):
        projection = TermMetaProjection(host, "color", parse_value=lambda raw: raw.strip().upper())
        projection.register()
        with host.request(AdminRequest(actor=admin, form={"term-color": " red "})):
            host.save_term(category, created=True)
        assert projection.get_meta(7) == "RED"


class TestColumns:
    def test_column_header(self, host, projection):
        columns = host.apply_filters("manage_edit-category_columns", {"name": "Name"})
        assert columns == {"name": "Name", "color": "Color"}

    def test_sortable_columns(self, host, projection):
        columns = host.apply_filters("manage_edit-category_sortable_columns", {"name": "name"})
        assert columns["color"] == "color"

    def test_column_value_needs_taxonomy_request(self, host, projection, admin):
        projection.set_meta(7, "category", "red")
        assert projection.column_value("", "color", 7) == ""
        with host.request(AdminRequest(actor=admin)):
            assert projection.column_value("", "color", 7) == ""

    def test_column_value(self, host, projection, admin):
        projection.set_meta(7, "category", "<b>red</b>")
        with host.request(AdminRequest(actor=admin, taxonomy="category")):
            assert host.apply_filters("manage_category_custom_column", "", "color", 7) == "&lt;b&gt;red&lt;/b&gt;"
            assert projection.column_value("", "color", 8) == NO_VALUE
            assert projection.column_value("", "name", 7) == ""
            assert projection.column_value("already", "color", 7) == "already"


class TestFields:
    def test_add_form_field(self, host, projection):
        markup = host.apply_filters("category_add_form_fields", "", "category")
        assert 'name="term-color"' in markup
        assert 'value=""' in markup
        assert "Pick a color." in markup

    def test_edit_form_field_shows_value(self, host, projection, category):
        projection.set_meta(7, "category", 'r"ed')
        markup = host.apply_filters("category_edit_form_fields", "", category, "category")
        assert 'value="r&quot;ed"' in markup
        assert markup.startswith('<tr class="form-field term-color-wrap">')

    def test_quick_edit_field(self, host, projection, admin):
        with host.request(AdminRequest(actor=admin, taxonomy="category", screen="edit-tags")):
            markup = host.apply_filters("quick_edit_custom_box", "", "color", "edit-tags", "category")
        assert 'class="ptitle" name="term-color"' in markup

    @pytest.mark.parametrize("column, screen, taxonomy", [
        ("name", "edit-tags", "category"),
        ("color", "term", "category"),
        ("color", "edit-tags", "nav_menu"),
    ])
    def test_quick_edit_field_elsewhere(self, projection, column, screen, taxonomy):
        assert projection.quick_edit_field(column, screen, taxonomy) == ""


class TestEditTagsScreen:
    def test_quick_edit_waits_for_the_screen(self, host, projection):
        assert not host.has_filter("quick_edit_custom_box")

    def test_targeted_taxonomy_subscribes_once(self, host, projection, admin):
        for _ in range(2):
            with host.request(AdminRequest(actor=admin, taxonomy="category", screen="edit-tags")):
                pass
        assert len(host._hooks["quick_edit_custom_box"]) == 1

    @pytest.mark.parametrize("taxonomy, screen", [
        ("nav_menu", "edit-tags"),
        (None, "edit-tags"),
        ("category", "term"),
    ])
    def test_other_screens_leave_quick_edit_off(self, host, projection, admin, taxonomy, screen):
        with host.request(AdminRequest(actor=admin, taxonomy=taxonomy, screen=screen)):
            pass
        assert not host.has_filter("quick_edit_custom_box")

    def test_help_tabs_callback(self, host, admin):
        tab = {"id": "color_help", "title": "Colors", "content": ""}
        projection = TermMetaProjection(host, "color", help_tabs=lambda tabs: tabs + [tab])
        projection.register()

        assert host.apply_filters("term_help_tabs", []) == []
        with host.request(AdminRequest(actor=admin, taxonomy="post_tag", screen="edit-tags")):
            assert host.apply_filters("term_help_tabs", []) == [tab]


class TestSchemaVersion:
    @pytest.fixture
    def calls(self):
        return []

    @pytest.fixture
    def versioned(self, host, calls):
        projection = TermMetaProjection(
            host,
            "color",
            db_version=5,
            on_install=lambda: calls.append("install"),
            on_upgrade=lambda old: calls.append(("upgrade", old)),
        )
        projection.register()
        return projection

    def test_fresh_install(self, host, versioned, calls):
        assert versioned.maybe_upgrade_schema()
        assert calls == ["install", ("upgrade", 0)]
        assert host.options.get_option("wtm_term_color_version") == 5

    def test_current_version_does_nothing(self, host, versioned, calls):
        versioned.maybe_upgrade_schema()
        calls.clear()
        assert not versioned.maybe_upgrade_schema()
        assert calls == []

    def test_upgrade_from_older(self, host, versioned, calls):
        host.options.update_option("wtm_term_color_version", 3)
        host.do_action("admin_init")
        assert calls == [("upgrade", 3)]
        assert host.options.get_option("wtm_term_color_version") == 5
