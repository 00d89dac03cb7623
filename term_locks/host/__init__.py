# ==============================================
# TOPIC 1: HOST (Admin runtime collaborators)
# ==============================================
#
# Everything the admin host supplies: the hook registry, the
# request scope, capability resolution, and the store contracts
# the other topics read and write through.
#
# Modules:
# --------
# - types.py        → Term, Actor, AdminRequest, StoreError, store protocols
# - admin_host.py   → AdminHost (hooks, registries, request scope, capabilities)
# - memory.py       → In-memory term meta / option / role stores
# - term_query.py   → Terms listing query built through the clause filters
#
# ==============================================

from .types import Actor, AdminRequest, StoreError, Term, DO_NOT_ALLOW
from .admin_host import AdminHost
from .memory import InMemoryOptionStore, InMemoryRoleStore, InMemoryTermMetaStore
from .term_query import build_terms_query

__all__ = [
    "Actor",
    "AdminHost",
    "AdminRequest",
    "DO_NOT_ALLOW",
    "InMemoryOptionStore",
    "InMemoryRoleStore",
    "InMemoryTermMetaStore",
    "StoreError",
    "Term",
    "build_terms_query",
]
