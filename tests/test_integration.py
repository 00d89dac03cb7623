# ==============================================
# Integration Tests
# ==============================================
#
# Drive TermLocks end to end on the in-memory backend:
# setup, locking through the edit form, capability checks
# and the admin screens that react to the lock record.
# ==============================================

import pytest

from term_locks.config import AppConfig, LocksConfig, MongoConfig, MySQLConfig
from term_locks.host.types import Actor, AdminRequest, Term
from term_locks.locks.capabilities import DELETE_TERM, EDIT_TERM, MANAGE_TERM_LOCKS
from term_locks.term_locks import TermLocks

ADMIN = Actor(actor_id=1, role="administrator")
EDITOR = Actor(actor_id=2, role="editor")


@pytest.fixture
def app():
    app = TermLocks(AppConfig(MySQLConfig(), MongoConfig(), LocksConfig()))
    app.host.add_actor(ADMIN)
    app.host.add_actor(EDITOR)
    return app


class TestTermLocksIntegration:
    def test_setup_grants_manage_locks(self, app):
        assert app.setup() == {"upgraded": True, "granted": True}
        assert app.host.roles.has_capability("administrator", MANAGE_TERM_LOCKS)
        assert app.can(ADMIN, MANAGE_TERM_LOCKS)
        assert not app.can(EDITOR, MANAGE_TERM_LOCKS)
        assert app.setup() == {"upgraded": False, "granted": False}

    def test_lock_then_unlock(self, app):
        assert app.can(EDITOR, EDIT_TERM, 12)

        record = app.lock(12, "category", edit=True, actor=ADMIN)
        assert record.edit.endswith(":1")
        assert not app.can(EDITOR, EDIT_TERM, 12)
        assert app.can(EDITOR, DELETE_TERM, 12)
        assert app.can(EDITOR, EDIT_TERM, 13)

        assert app.unlock(12, "category").is_empty
        assert app.can(EDITOR, EDIT_TERM, 12)

    def test_relock_overwrites(self, app):
        app.lock(12, "category", edit=True, delete=True)
        record = app.lock(12, "category", delete=True)

        assert not record.edit_locked
        assert record.delete_locked

    def test_admin_screens_follow_locks(self, app):
        app.setup()
        app.lock(12, "category", edit=True, delete=True)
        term = Term(term_id=12, taxonomy="category", name="News")
        actions = {"edit": "", "inline hide-if-no-js": "", "delete": "", "view": ""}

        with app.host.request(AdminRequest(actor=EDITOR, taxonomy="category")):
            assert app.host.apply_filters("category_row_actions", actions, term) == {"view": ""}
            assert app.host.apply_filters("category_edit_form_fields", "", term, "category") == ""

        with app.host.request(AdminRequest(actor=ADMIN, taxonomy="category")):
            assert app.host.apply_filters("category_row_actions", actions, term) == actions
            assert "term-locks[edit]" in app.host.apply_filters("category_edit_form_fields", "", term, "category")

        assert "dashicons-lock" in app.host.apply_filters("term_name", "News", term)

    def test_listing_needs_mysql(self, app):
        with pytest.raises(RuntimeError):
            app.query_terms(["category"], {"orderby": "locks"})
