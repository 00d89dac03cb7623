# ==============================================
# In-Memory Stores
# ==============================================
#
# PURPOSE:
#   Process-local implementations of the three host stores.
#   Used by the "memory" backend and by the test-suite so the
#   whole admin flow runs without MySQL or MongoDB.
#
# NOTES:
# ------
#   update_term_meta mirrors the database-backed behavior:
#     - new row        → returns the new meta id (int)
#     - changed value  → returns True
#     - same value     → returns False
#     - bad term ID    → returns StoreError
#   Values are deep-copied in and out, as if they were serialized.
#
# ==============================================

import copy
from typing import Any, Dict, Optional, Set, Tuple

from term_locks.host.types import StoreError


def _row_key(term_id: Any, meta_key: str) -> Optional[Tuple[int, str]]:
    # IDs that are not integers match no row
    try:
        return int(term_id), meta_key
    except (TypeError, ValueError):
        return None


class InMemoryTermMetaStore:
    """Term metadata keyed by (term_id, meta_key)."""

    def __init__(self):
        self._rows: Dict[Tuple[int, str], Any] = {}
        self._ids: Dict[Tuple[int, str], int] = {}
        self._next_id = 1

    def get_term_meta(self, term_id: int, meta_key: str) -> Any:
        key = _row_key(term_id, meta_key)
        if key is None:
            return None
        value = self._rows.get(key)
        return copy.deepcopy(value)

    def update_term_meta(self, term_id: int, meta_key: str, meta_value: Any):
        key = _row_key(term_id, meta_key)
        if key is None:
            return StoreError(f"Invalid term ID {term_id!r}")
        if key not in self._rows:
            self._rows[key] = copy.deepcopy(meta_value)
            self._ids[key] = self._next_id
            self._next_id += 1
            return self._ids[key]
        if self._rows[key] == meta_value:
            return False
        self._rows[key] = copy.deepcopy(meta_value)
        return True

    def delete_term_meta(self, term_id: int, meta_key: str) -> bool:
        key = _row_key(term_id, meta_key)
        if key is None or key not in self._rows:
            return False
        del self._rows[key]
        del self._ids[key]
        return True

    def term_meta_exists(self, term_id: int, meta_key: str) -> bool:
        return _row_key(term_id, meta_key) in self._rows


class InMemoryOptionStore:
    """Named options (the schema version marker lives here)."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._options: Dict[str, Any] = dict(initial or {})

    def get_option(self, name: str, default: Any = None) -> Any:
        return self._options.get(name, default)

    def update_option(self, name: str, value: Any) -> bool:
        if self._options.get(name) == value and name in self._options:
            return False
        self._options[name] = value
        return True


class InMemoryRoleStore:
    """Role name → set of capability names."""

    def __init__(self, roles: Optional[Dict[str, Set[str]]] = None):
        self._roles: Dict[str, Set[str]] = {
            name: set(caps) for name, caps in (roles or {}).items()
        }

    def get_role(self, role_name: str) -> Optional[Set[str]]:
        caps = self._roles.get(role_name)
        return set(caps) if caps is not None else None

    def has_capability(self, role_name: str, capability: str) -> bool:
        return capability in self._roles.get(role_name, set())

    def add_capability(self, role_name: str, capability: str) -> bool:
        # Unknown roles are not created implicitly
        if role_name not in self._roles:
            return False
        self._roles[role_name].add(capability)
        return True

    def ensure_role(self, role_name: str, capabilities=()) -> None:
        self._roles.setdefault(role_name, set()).update(capabilities)
