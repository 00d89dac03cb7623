# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# This file contains shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - host        → AdminHost over in-memory stores, two taxonomies
# - admin       → Actor with the administrator role
# - editor      → Actor with the editor role (no manage_term_locks)
# - super_admin → Actor flagged as super-administrator
# - projection  → TermMetaProjection on a plain "color" key
# - policy      → Registered LockPolicy on "locks"
# - category    → Term(7, "category", "Sports")
#
# NOTES:
# ------
# - No database is needed; MySQL/Mongo tests use fake connections
# ==============================================

import pytest

from term_locks.host.admin_host import AdminHost
from term_locks.host.memory import InMemoryOptionStore, InMemoryRoleStore, InMemoryTermMetaStore
from term_locks.host.types import Actor, AdminRequest, Term
from term_locks.locks.policy import LockPolicy
from term_locks.meta_ui.projection import TermMetaProjection


@pytest.fixture
def roles():
    return InMemoryRoleStore({
        "administrator": {"manage_options", "manage_categories", "manage_term_locks"},
        "editor": {"manage_categories"},
    })


@pytest.fixture
def host(roles):
    host = AdminHost(InMemoryTermMetaStore(), InMemoryOptionStore(), roles)
    host.register_taxonomy("category")
    host.register_taxonomy("post_tag")
    host.register_taxonomy("nav_menu", show_ui=False)
    return host


@pytest.fixture
def admin(host):
    return host.add_actor(Actor(actor_id=1, role="administrator"))


@pytest.fixture
def editor(host):
    return host.add_actor(Actor(actor_id=2, role="editor"))


@pytest.fixture
def super_admin(host):
    return host.add_actor(Actor(actor_id=3, role="editor", is_super_admin=True))


@pytest.fixture
def category():
    return Term(term_id=7, taxonomy="category", name="Sports")


@pytest.fixture
def projection(host):
    projection = TermMetaProjection(
        host,
        "color",
        labels={"singular": "Color", "plural": "Colors", "description": "Pick a color."},
    )
    projection.register()
    return projection


@pytest.fixture
def policy(host):
    policy = LockPolicy(host)
    policy.register()
    return policy


@pytest.fixture
def as_actor(host):
    """Run a block as actor: `with as_actor(editor, taxonomy="category"):`"""
    def _as_actor(actor, **kwargs):
        return host.request(AdminRequest(actor=actor, **kwargs))
    return _as_actor
