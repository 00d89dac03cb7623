# ==============================================
# Host Types (Data Classes + Store Protocols)
# ==============================================
#
# PURPOSE:
#   The entities and store contracts the admin host supplies.
#   Terms, actors and requests belong to the host; this package
#   only annotates terms and reads the current actor.
#
# CLASSES:
# --------
# - Term (dataclass)            → term_id, taxonomy, name
# - Actor (dataclass)           → actor_id, role, is_super_admin
# - AdminRequest (dataclass)    → actor + query params + posted form
# - StoreError (Exception)      → host store failure indicator
#
# PROTOCOLS:
# ----------
# - TermMetaStore  → get/update/delete/exists keyed by (term_id, meta_key)
# - OptionStore    → get_option/update_option (schema version marker)
# - RoleStore      → get_role/has_capability/add_capability
#
# ==============================================

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Set, Union


DO_NOT_ALLOW = "do_not_allow"


@dataclass
class Term:
    """A single value within a taxonomy (category, tag, ...)."""
    term_id: int
    taxonomy: str
    name: str = ""
    term_taxonomy_id: Optional[int] = None


@dataclass
class Actor:
    """The user an admin request runs as."""
    actor_id: int
    role: str = ""
    is_super_admin: bool = False


@dataclass
class AdminRequest:
    """
    One inbound admin request.

    params is the query string (taxonomy, orderby, ...) and form is
    the posted payload. Both are flat string-keyed mappings.
    """
    actor: Actor
    taxonomy: Optional[str] = None
    screen: str = ""
    params: Dict[str, Any] = field(default_factory=dict)
    form: Dict[str, Any] = field(default_factory=dict)


class StoreError(Exception):
    """Raised (or returned) by a host store when a read/write fails."""


class TermMetaStore(Protocol):
    def get_term_meta(self, term_id: int, meta_key: str) -> Any: ...

    def update_term_meta(self, term_id: int, meta_key: str, meta_value: Any) -> Union[bool, int, StoreError]: ...

    def delete_term_meta(self, term_id: int, meta_key: str) -> bool: ...

    def term_meta_exists(self, term_id: int, meta_key: str) -> bool: ...


class OptionStore(Protocol):
    def get_option(self, name: str, default: Any = None) -> Any: ...

    def update_option(self, name: str, value: Any) -> bool: ...


class RoleStore(Protocol):
    def get_role(self, role_name: str) -> Optional[Set[str]]: ...

    def has_capability(self, role_name: str, capability: str) -> bool: ...

    def add_capability(self, role_name: str, capability: str) -> bool: ...
