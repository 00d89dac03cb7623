# ==============================================
# TermMetaProjection
# ==============================================
#
# PURPOSE:
#   Bridge ONE term meta key to every admin surface that shows
#   or edits it: list-table column, sortable flag, add/edit form
#   fields, quick-edit field, the terms query ORDER BY, and the
#   save path that writes the posted value back.
#
# WHY THIS CLASS EXISTS:
#   Each piece of per-term metadata needs the same plumbing.
#   Consumers (e.g. the lock policy) hold a projection and pass
#   it their meta key plus a few callbacks instead of
#   re-implementing columns, forms and persistence.
#
# CLASS: TermMetaProjection
# -------------------------
#   Stateful, holds the host, the meta key, labels and the
#   resolved taxonomy list (fixed after register()).
#
#   Constructor:
#   ------------
#   - __init__(host, meta_key, labels=None, taxonomies=None, ...)
#       Callbacks (all optional):
#         parse_value(raw)        → value to store for a posted field
#         render_add_field()      → replaces the add-form markup
#         render_edit_field(term) → replaces the edit-form markup
#         on_install()            → first schema install
#         on_upgrade(old_version) → every schema upgrade
#         help_tabs(tabs)         → help tabs for the terms list screen
#
#   Methods:
#   --------
#   - register() -> bool
#   - get_meta(term_id) / set_meta(term_id, taxonomy, value, clean_cache)
#   - on_save_term(term_id, tt_id, taxonomy)
#   - project_orderby(orderby) / project_query_clauses(clauses, taxonomies, args)
#   - column_header / column_value / sortable_columns
#   - add_form_field / edit_form_field / quick_edit_field
#   - edit_tags_page()  (terms list screen loaded)
#   - maybe_upgrade_schema()
#
# ==============================================

import html
from typing import Any, Callable, Dict, List, Optional

from pymysql.converters import escape_string

from term_locks.host.types import StoreError, Term

# Generic "order by meta value" keys every projection accepts
META_VALUE = "meta_value"
META_VALUE_NUM = "meta_value_num"

NO_VALUE = "&#8212;"


class TermMetaProjection:
    """Projects one term meta key onto list tables, forms and queries."""

    db_version = 201809141200

    def __init__(
        self,
        host,
        meta_key: str,
        labels: Optional[Dict[str, str]] = None,
        taxonomies: Optional[List[str]] = None,
        has_column: bool = True,
        has_fields: bool = True,
        key_type: Optional[str] = None,
        no_value: str = NO_VALUE,
        db_version: Optional[int] = None,
        db_version_key: Optional[str] = None,
        parse_value: Optional[Callable[[Any], Any]] = None,
        render_add_field: Optional[Callable[[], str]] = None,
        render_edit_field: Optional[Callable[[Term], str]] = None,
        on_install: Optional[Callable[[], None]] = None,
        on_upgrade: Optional[Callable[[int], None]] = None,
        help_tabs: Optional[Callable[[List[dict]], List[dict]]] = None,
    ):
        if not meta_key:
            raise ValueError("meta_key is required")

        self.host = host
        self.meta_key = meta_key
        self.labels = {"singular": "", "plural": "", "description": ""}
        self.labels.update(labels or {})
        self.taxonomies: List[str] = list(taxonomies or [])
        self.has_column = has_column
        self.has_fields = has_fields
        self.key_type = key_type
        self.no_value = no_value
        if db_version is not None:
            self.db_version = db_version
        self.db_version_key = db_version_key or f"wtm_term_{meta_key}_version"

        self._parse_value = parse_value
        self._render_add_field = render_add_field
        self._render_edit_field = render_edit_field
        self._on_install = on_install
        self._on_upgrade = on_upgrade
        self._help_tabs = help_tabs
        self.fancy = False

    @property
    def field_name(self) -> str:
        """Name of the posted form field carrying this meta value."""
        return f"term-{self.meta_key}"

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self) -> bool:
        """
        Register the meta key and subscribe to host events.

        Returns:
            False when the meta key was already registered; nothing
            is subscribed a second time in that case.
        """
        if not self.host.register_meta(self.meta_key, self.sanitize_callback, self.auth_callback):
            return False

        self.fancy = bool(self.host.apply_filters(f"wp_fancy_term_{self.meta_key}", True))

        # Only look for taxonomies if not already set
        if not self.taxonomies:
            self.taxonomies = self._get_taxonomies()

        # Saving and queries
        self.host.add_action("create_term", self.on_save_term)
        self.host.add_action("edit_term", self.on_save_term)
        self.host.add_filter("terms_clauses", self.project_query_clauses)
        self.host.add_filter("get_terms_orderby", self.project_orderby)

        for taxonomy in self.taxonomies:
            if self.has_column:
                self.host.add_filter(f"manage_edit-{taxonomy}_columns", self.column_header)
                self.host.add_filter(f"manage_{taxonomy}_custom_column", self.column_value)
                self.host.add_filter(f"manage_edit-{taxonomy}_sortable_columns", self.sortable_columns)

            if self.has_fields:
                self.host.add_filter(f"{taxonomy}_add_form_fields", self._append_add_form_field)
                self.host.add_filter(f"{taxonomy}_edit_form_fields", self._append_edit_form_field)

        self.host.add_action("admin_init", self.maybe_upgrade_schema)
        self.host.add_action("load-edit-tags", self.edit_tags_page)

        self.host.do_action(f"wp_term_meta_{self.meta_key}/init", self)
        return True

    def _get_taxonomies(self) -> List[str]:
        match = self.host.apply_filters(
            f"wp_term_{self.meta_key}_get_taxonomies",
            {"show_ui": True}
        )
        return self.host.get_taxonomies(**match)

    def sanitize_callback(self, meta_value: Any, meta_key: str = "", meta_type: str = "term") -> Any:
        return meta_value

    def auth_callback(self, allowed: bool = False, meta_key: str = "", term_id: int = 0,
                      actor_id: int = 0, cap: str = "", caps=None) -> bool:
        return allowed

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def get_meta(self, term_id: int) -> Any:
        """
        Read this key for a term.

        Returns:
            The stored value, or None if unset. Store errors propagate.
        """
        return self.host.meta_store.get_term_meta(term_id, self.meta_key)

    def set_meta(self, term_id: int, taxonomy: str = "", meta_value: Any = "",
                 clean_cache: bool = False) -> bool:
        """
        Write (or delete) this key for a term.

        An empty value deletes the stored row instead of writing it.

        Args:
            term_id: Term ID
            taxonomy: Taxonomy the term belongs to
            meta_value: Value to store
            clean_cache: Whether to drop the cached term afterwards

        Returns:
            Whether the store reported a change
        """
        try:
            if not meta_value:
                result = self.host.meta_store.delete_term_meta(term_id, self.meta_key)
            else:
                meta_value = self.host.sanitize_meta(self.meta_key, meta_value)
                result = self.host.meta_store.update_term_meta(term_id, self.meta_key, meta_value)

                if not isinstance(result, bool):
                    result = False if isinstance(result, StoreError) else bool(result)
        except StoreError as e:
            print(f"✗ Could not save '{self.meta_key}' for term {term_id}: {e}")
            result = False

        if clean_cache:
            self.host.do_action("clean_term_cache", term_id, taxonomy)

        return bool(result)

    def on_save_term(self, term_id: int, tt_id: int = 0, taxonomy: str = "") -> None:
        # Absent field means "clear it"
        request = self.host.current_request
        form = request.form if request is not None else {}
        raw = form.get(self.field_name) or ""

        value = self._parse_value(raw) if self._parse_value else raw
        self.set_meta(term_id, taxonomy, value)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def project_orderby(self, orderby: str = "", args=None, taxonomies=None) -> str:
        # Ordering by this meta key → generic meta value ordering
        if orderby == self.meta_key:
            return META_VALUE
        return orderby

    def project_query_clauses(self, clauses: Dict[str, str], taxonomies=None, args=None) -> Dict[str, str]:
        """
        Join term meta and order by this key's value.

        Only acts when args["orderby"] is this meta key, "meta_value"
        or "meta_value_num". Any other orderby gets the very same
        clauses object back.
        """
        orderby = (args or {}).get("orderby", "")
        if orderby not in (self.meta_key, META_VALUE, META_VALUE_NUM):
            return clauses

        prefix = self.host.table_prefix
        rewritten = dict(clauses)
        rewritten["join"] = (
            f"{clauses.get('join', '')} INNER JOIN {prefix}termmeta AS tm ON t.term_id = tm.term_id"
        )

        if orderby == META_VALUE_NUM:
            rewritten["orderby"] = "ORDER BY tm.meta_value+0"
        elif self.key_type:
            rewritten["orderby"] = f"ORDER BY CAST(tm.meta_value AS {self.key_type})"
        else:
            rewritten["orderby"] = "ORDER BY tm.meta_value"

        rewritten["fields"] = f"{clauses.get('fields', '')}, tm.*"
        rewritten["where"] = f"{clauses.get('where', '')} AND tm.meta_key = '{escape_string(self.meta_key)}'"
        return rewritten

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def column_header(self, columns: Dict[str, str]) -> Dict[str, str]:
        columns = dict(columns)
        columns[self.meta_key] = self.labels["singular"]
        return columns

    def column_value(self, current: str = "", column_name: str = "", term_id: int = 0) -> str:
        request = self.host.current_request
        if request is None or not request.taxonomy or column_name != self.meta_key or current:
            return current

        meta = self.get_meta(term_id)
        if not meta:
            return self.no_value
        return self.format_value(meta)

    def sortable_columns(self, columns: Dict[str, str]) -> Dict[str, str]:
        columns = dict(columns)
        columns[self.meta_key] = self.meta_key
        return columns

    def format_value(self, meta: Any) -> str:
        return html.escape(str(meta))

    # ------------------------------------------------------------------
    # Markup
    # ------------------------------------------------------------------

    def add_form_field(self) -> str:
        """Markup for the "Add New Term" form."""
        if self._render_add_field is not None:
            return self._render_add_field()

        key = html.escape(self.meta_key)
        out = f'<div class="form-field term-{key}-wrap">'
        out += f'<label for="term-{key}">{html.escape(self.labels["singular"])}</label>'
        out += self.form_field()
        out += self._description()
        out += "</div>"
        return out

    def edit_form_field(self, term: Term) -> str:
        """Markup for the "Edit Term" screen."""
        if self._render_edit_field is not None:
            return self._render_edit_field(term)

        key = html.escape(self.meta_key)
        out = f'<tr class="form-field term-{key}-wrap">'
        out += f'<th scope="row" valign="top"><label for="term-{key}">{html.escape(self.labels["singular"])}</label></th>'
        out += f"<td>{self.form_field(term)}{self._description()}</td>"
        out += "</tr>"
        return out

    def quick_edit_field(self, column_name: str = "", screen: str = "", taxonomy: str = "") -> str:
        # Only our column, on the terms list screen, for a targeted taxonomy
        if column_name != self.meta_key or screen != "edit-tags" or taxonomy not in self.taxonomies:
            return ""

        key = html.escape(self.meta_key)
        return (
            '<fieldset><div class="inline-edit-col"><label>'
            f'<span class="title">{html.escape(self.labels["singular"])}</span>'
            '<span class="input-text-wrap">'
            f'<input type="text" class="ptitle" name="term-{key}" value="">'
            "</span></label></div></fieldset>"
        )

    def form_field(self, term: Optional[Term] = None) -> str:
        value = self.get_meta(term.term_id) if term is not None else ""
        key = html.escape(self.meta_key)
        shown = html.escape(str(value)) if value else ""
        return f'<input type="text" name="term-{key}" id="term-{key}" value="{shown}">'

    def _description(self) -> str:
        if not self.labels.get("description"):
            return ""
        return f'<p class="description">{html.escape(self.labels["description"])}</p>'

    def _append_add_form_field(self, markup: str = "", taxonomy: str = "") -> str:
        return markup + self.add_form_field()

    def _append_edit_form_field(self, markup: str, term: Term, taxonomy: str = "") -> str:
        return markup + self.edit_form_field(term)

    def _append_quick_edit_field(self, markup: str, column_name: str = "",
                                 screen: str = "", taxonomy: str = "") -> str:
        return markup + self.quick_edit_field(column_name, screen, taxonomy)

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------

    def edit_tags_page(self) -> None:
        """
        Subscribe the terms list screen hooks (quick edit, help tabs).

        Only runs for a request on one of this key's taxonomies, and
        subscribes each hook once however often the screen loads.
        """
        request = self.host.current_request
        if request is None or request.taxonomy not in self.taxonomies:
            return

        if self.has_column and not self.host.has_filter("quick_edit_custom_box", self._append_quick_edit_field):
            self.host.add_filter("quick_edit_custom_box", self._append_quick_edit_field)

        if self._help_tabs is not None and not self.host.has_filter("term_help_tabs", self._help_tabs):
            self.host.add_filter("term_help_tabs", self._help_tabs)

    # ------------------------------------------------------------------
    # Schema version
    # ------------------------------------------------------------------

    def maybe_upgrade_schema(self) -> bool:
        """
        Install or upgrade when the stored version is behind.

        Returns:
            True if the stored version marker was bumped
        """
        version = int(self.host.options.get_option(self.db_version_key, 0) or 0)

        if version == 0:
            self.install()

        if version < self.db_version:
            self.upgrade(version)
            self.host.options.update_option(self.db_version_key, self.db_version)
            print(f"✓ '{self.meta_key}' schema at version {self.db_version} (was {version})")
            return True

        return False

    def install(self) -> None:
        if self._on_install is not None:
            self._on_install()

    def upgrade(self, old_version: int = 0) -> None:
        if self._on_upgrade is not None:
            self._on_upgrade(old_version)
