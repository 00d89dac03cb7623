# ==============================================
# LockPolicy
# ==============================================
#
# PURPOSE:
#   Lock terms against editing and/or deletion. Reads the lock
#   record through a TermMetaProjection on the "locks" key and
#   uses it to:
#     - veto edit_term / delete_term / manage_categories checks
#     - hide row actions the actor may no longer use
#     - mark edit-locked term names with a lock icon
#     - render the two lock checkboxes on the edit screen
#
# STATE TABLE (per term):
# -----------------------
#   edit | delete | editable | deletable
#   -----+--------+----------+----------
#    no  |   no   |   yes    |   yes
#    yes |   no   |   no     |   yes
#    no  |   yes  |   yes    |   no
#    yes |   yes  |   no     |   no
#
#   There is no lock/unlock action. The edit form is submitted
#   with both boxes in the wanted state and the record is
#   overwritten (last writer wins).
#
# CLASS: LockPolicy
# -----------------
#   Constructor:
#   ------------
#   - __init__(host, taxonomies=None, meta_key="locks", labels=None)
#
#   Methods:
#   --------
#   - register() -> bool
#   - get_locks(term_id) -> LockRecord
#   - evaluate_capability(caps, cap, actor_id, args) -> list[str]
#   - filter_row_actions(actions, term) -> dict
#   - decorate_display_name(name, term) -> str
#   - render_lock_fields(term) -> str
#   - help_tabs(tabs) -> list[dict]
#   - install() / upgrade(old_version)
#
# ==============================================

import html
from typing import Any, Dict, List, Optional

from term_locks.host.types import DO_NOT_ALLOW, Term
from term_locks.locks.capabilities import (
    GUARDED_CAPS,
    MANAGE_NETWORK,
    MANAGE_OPTIONS,
    MANAGE_TERM_LOCKS,
)
from term_locks.locks.record import LockRecord, make_lock_token
from term_locks.locks.roles import grant_manage_capability
from term_locks.meta_ui.projection import TermMetaProjection

DEFAULT_LABELS = {
    "singular": "Lock",
    "plural": "Locks",
    "description": "Lock this term from being edited or deleted.",
}

HELP_TAB_ID = "wp_term_lock_help_tab"

# Row actions removed per lock flag
EDIT_ACTIONS = ("edit", "inline hide-if-no-js")
DELETE_ACTIONS = ("delete",)


class LockPolicy:
    version = "1.1.0"
    db_version = 201809141200

    def __init__(
        self,
        host,
        taxonomies: Optional[List[str]] = None,
        meta_key: str = "locks",
        labels: Optional[Dict[str, str]] = None
    ):
        self.host = host
        self.labels = dict(DEFAULT_LABELS)
        self.labels.update(labels or {})

        # Locks get no list column, and nothing on the "Add" form
        self.projection = TermMetaProjection(
            host,
            meta_key,
            labels=self.labels,
            taxonomies=taxonomies,
            has_column=False,
            db_version=self.db_version,
            parse_value=self._parse_payload,
            render_add_field=lambda: "",
            render_edit_field=self.render_lock_fields,
            on_install=self.install,
            on_upgrade=self.upgrade,
            help_tabs=self.help_tabs,
        )

    @property
    def meta_key(self) -> str:
        return self.projection.meta_key

    @property
    def taxonomies(self) -> List[str]:
        return self.projection.taxonomies

    def register(self) -> bool:
        """Subscribe the projection, then the lock-specific filters."""
        if not self.projection.register():
            return False

        for taxonomy in self.taxonomies:
            self.host.add_filter(f"{taxonomy}_row_actions", self.filter_row_actions)

        # Run late so other capability mappers have had their say
        self.host.add_filter("map_meta_cap", self.evaluate_capability, 99)
        self.host.add_filter("term_name", self.decorate_display_name, 99)
        return True

    def _parse_payload(self, raw: Any) -> Dict[str, str]:
        return LockRecord.from_payload(raw).to_meta()

    def get_locks(self, term_id: int) -> LockRecord:
        return LockRecord.from_meta(self.projection.get_meta(term_id))

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def evaluate_capability(self, caps: List[str], cap: str = "", actor_id: int = 0,
                            args: Optional[list] = None) -> List[str]:
        """
        Filter the capabilities a check maps to.

        Args:
            caps: Capabilities the host mapped `cap` onto so far
            cap: Capability being checked
            actor_id: Who is asking
            args: Extra context; args[0] is the term ID when present

        Returns:
            caps untouched, or ["do_not_allow"] when a lock vetoes it
        """
        # Multisite is limited to super admins, single site to admins
        if cap == MANAGE_TERM_LOCKS:
            return [MANAGE_NETWORK] if self.host.multisite else [MANAGE_OPTIONS]

        if cap not in GUARDED_CAPS:
            return caps

        # Nothing to look up, or nothing to enforce
        if not args or self.host.is_super_admin(actor_id):
            return caps

        locks = self.get_locks(args[0])
        if locks.is_empty:
            return caps

        if any(locks.is_locked(flag) for flag in GUARDED_CAPS[cap]):
            return [DO_NOT_ALLOW]

        return caps

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def filter_row_actions(self, actions: Dict[str, str], term: Term) -> Dict[str, str]:
        if self.host.current_user_can(MANAGE_TERM_LOCKS):
            return actions

        locks = self.get_locks(term.term_id)
        if locks.is_empty:
            return actions

        actions = dict(actions)
        if locks.edit_locked:
            for action in EDIT_ACTIONS:
                actions.pop(action, None)
        if locks.delete_locked:
            for action in DELETE_ACTIONS:
                actions.pop(action, None)
        return actions

    def decorate_display_name(self, name: str = "", term: Any = None) -> str:
        # Some list contexts pass a plain value instead of a term
        term_id = getattr(term, "term_id", None)
        if term_id is None:
            return name

        if self.get_locks(term_id).edit_locked:
            name = (
                '</a><span class="dashicons dashicons-lock"></span> '
                f'<span class="row-title">{name}</span><a href="">'
            )
        return name

    def render_lock_fields(self, term: Term) -> str:
        """Edit/delete lock checkboxes; empty for actors who can't manage locks."""
        if not self.host.current_user_can(MANAGE_TERM_LOCKS):
            return ""

        locks = self.get_locks(term.term_id)
        actor = self.host.current_actor
        token = make_lock_token(actor.actor_id if actor else 0)

        rows = []
        for flag, label in (("edit", "Edit Lock"), ("delete", "Delete Lock")):
            value = getattr(locks, flag) or token
            checked = " checked='checked'" if locks.is_locked(flag) else ""
            rows.append(
                "<li><label>"
                f'<input type="checkbox" name="term-{html.escape(self.meta_key)}[{flag}]" '
                f'value="{html.escape(value)}"{checked} />'
                f'<span class="term-lock-{flag}">{label}</span>'
                "</label></li>"
            )

        description = ""
        if self.labels.get("description"):
            description = f'<p class="description">{html.escape(self.labels["description"])}</p>'

        return (
            '<tr class="form-field term-lock-wrap">'
            '<th scope="row" valign="top">'
            f'<label for="term-{html.escape(self.meta_key)}">{html.escape(self.labels["plural"])}</label>'
            "</th>"
            f"<td><ul>{''.join(rows)}</ul>{description}</td>"
            "</tr>"
        )

    def help_tabs(self, tabs: Optional[List[dict]] = None) -> List[dict]:
        tabs = list(tabs or [])
        tabs.append({
            "id": HELP_TAB_ID,
            "title": "Locks",
            "content": (
                "<p>Some terms might be locked, preventing them from being edited or deleted.</p>"
                "<p>If a term is locked, you'll need to contact a system administrator to modify it.</p>"
            ),
        })
        return tabs

    # ------------------------------------------------------------------
    # Installation
    # ------------------------------------------------------------------

    def install(self) -> None:
        grant_manage_capability(self.host.roles)

    def upgrade(self, old_version: int = 0) -> None:
        grant_manage_capability(self.host.roles)
