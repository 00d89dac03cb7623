# ==============================================
# AdminHost
# ==============================================
#
# PURPOSE:
#   The explicit stand-in for the CMS admin runtime. Components
#   subscribe callbacks here instead of to global hooks, and a
#   test harness can fire every event directly.
#
# WHY THIS CLASS EXISTS:
#   Term storage, list tables and the capability resolver all
#   belong to the host. The meta projection and the lock policy
#   only register callbacks and answer when asked. Keeping all of
#   that behind one object means no module reaches for ambient
#   global state.
#
# CLASS: AdminHost
# ----------------
#   Stateful, holds the hook table, the stores, the actor
#   directory and (while a request runs) the current request.
#
#   Constructor:
#   ------------
#   - __init__(meta_store, options, roles, multisite=False, table_prefix="wp_")
#
#   Methods:
#   --------
#   HOOKS:
#   - add_filter / add_action(name, callback, priority=10)
#   - apply_filters(name, value, *args) -> value
#   - do_action(name, *args) -> None
#   - has_filter(name, callback=None) -> bool
#
#   REGISTRIES:
#   - register_meta(meta_key, sanitize, auth) -> bool
#   - register_taxonomy(name, show_ui=True) / get_taxonomies(**match)
#   - add_actor(actor) / get_actor(actor_id) / is_super_admin(actor_id)
#
#   REQUEST SCOPE:
#   - request(admin_request)  (context manager, fires load-{screen})
#   - current_request / current_actor
#
#   CAPABILITIES:
#   - map_meta_cap(cap, actor_id, args) -> list[str]
#   - user_can(actor, cap, *args) -> bool
#   - current_user_can(cap, *args) -> bool
#
#   TERMS:
#   - save_term(term, created=False)  → fires create_term / edit_term
#   - get_term(term_id)               → cached Term or None
#
# ==============================================

import itertools
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from term_locks.host.types import (
    DO_NOT_ALLOW,
    Actor,
    AdminRequest,
    OptionStore,
    RoleStore,
    Term,
    TermMetaStore,
)

# Meta capabilities the host maps onto a primitive before filtering.
# One level only: the primitive is not filtered again with the term id.
META_CAPS = {
    "edit_term": "manage_categories",
    "delete_term": "manage_categories",
}


class AdminHost:
    def __init__(
        self,
        meta_store: TermMetaStore,
        options: OptionStore,
        roles: RoleStore,
        multisite: bool = False,
        table_prefix: str = "wp_"
    ):
        self.meta_store = meta_store
        self.options = options
        self.roles = roles
        self.multisite = multisite
        self.table_prefix = table_prefix

        self._hooks: Dict[str, List[Tuple[int, int, Callable]]] = {}
        self._sequence = itertools.count()
        self._registered_meta: Dict[str, Dict[str, Optional[Callable]]] = {}
        self._taxonomies: Dict[str, Dict[str, Any]] = {}
        self._actors: Dict[int, Actor] = {}
        self._term_cache: Dict[int, Term] = {}
        self._request: Optional[AdminRequest] = None

        self.add_action("clean_term_cache", self._clean_term_cache)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def add_filter(self, name: str, callback: Callable, priority: int = 10) -> None:
        self._hooks.setdefault(name, []).append((priority, next(self._sequence), callback))
        self._hooks[name].sort(key=lambda entry: (entry[0], entry[1]))

    # Actions and filters share one table; actions ignore return values
    add_action = add_filter

    def has_filter(self, name: str, callback: Optional[Callable] = None) -> bool:
        entries = self._hooks.get(name, [])
        if callback is None:
            return bool(entries)
        return any(cb == callback for _, _, cb in entries)

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        for _, _, callback in list(self._hooks.get(name, [])):
            value = callback(value, *args)
        return value

    def do_action(self, name: str, *args: Any) -> None:
        for _, _, callback in list(self._hooks.get(name, [])):
            callback(*args)

    # ------------------------------------------------------------------
    # Registries
    # ------------------------------------------------------------------

    def register_meta(
        self,
        meta_key: str,
        sanitize: Optional[Callable] = None,
        auth: Optional[Callable] = None
    ) -> bool:
        """
        Register a term meta key.

        Returns:
            False if the key was already registered (nothing changes)
        """
        if meta_key in self._registered_meta:
            return False
        self._registered_meta[meta_key] = {"sanitize": sanitize, "auth": auth}
        return True

    def is_meta_registered(self, meta_key: str) -> bool:
        return meta_key in self._registered_meta

    def sanitize_meta(self, meta_key: str, meta_value: Any) -> Any:
        callbacks = self._registered_meta.get(meta_key)
        if callbacks and callbacks["sanitize"] is not None:
            return callbacks["sanitize"](meta_value, meta_key, "term")
        return meta_value

    def register_taxonomy(self, name: str, show_ui: bool = True, **attrs: Any) -> None:
        self._taxonomies[name] = {"name": name, "show_ui": show_ui, **attrs}

    def get_taxonomies(self, **match: Any) -> List[str]:
        return [
            name for name, attrs in self._taxonomies.items()
            if all(attrs.get(key) == value for key, value in match.items())
        ]

    def add_actor(self, actor: Actor) -> Actor:
        self._actors[actor.actor_id] = actor
        return actor

    def get_actor(self, actor_id: int) -> Optional[Actor]:
        return self._actors.get(actor_id)

    def is_super_admin(self, actor_id: int) -> bool:
        actor = self.get_actor(actor_id)
        return bool(actor and actor.is_super_admin)

    # ------------------------------------------------------------------
    # Request scope
    # ------------------------------------------------------------------

    @contextmanager
    def request(self, admin_request: AdminRequest) -> Iterator[AdminRequest]:
        """Make admin_request current for the duration of the block."""
        if admin_request.actor.actor_id not in self._actors:
            self.add_actor(admin_request.actor)
        previous = self._request
        self._request = admin_request
        try:
            if admin_request.screen:
                self.do_action(f"load-{admin_request.screen}")
            yield admin_request
        finally:
            self._request = previous

    @property
    def current_request(self) -> Optional[AdminRequest]:
        return self._request

    @property
    def current_actor(self) -> Optional[Actor]:
        return self._request.actor if self._request else None

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def map_meta_cap(self, cap: str, actor_id: int, args: Optional[list] = None) -> List[str]:
        args = list(args or [])
        caps = [META_CAPS.get(cap, cap)]
        return list(self.apply_filters("map_meta_cap", caps, cap, actor_id, args))

    def user_can(self, actor: Optional[Actor], cap: str, *args: Any) -> bool:
        if actor is None:
            return False
        caps = self.map_meta_cap(cap, actor.actor_id, list(args))
        if DO_NOT_ALLOW in caps:
            return False
        if actor.is_super_admin:
            return True
        return all(self.roles.has_capability(actor.role, c) for c in caps)

    def current_user_can(self, cap: str, *args: Any) -> bool:
        return self.user_can(self.current_actor, cap, *args)

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    def save_term(self, term: Term, created: bool = False) -> Term:
        """Cache term and fire create_term / edit_term for it."""
        self._term_cache[term.term_id] = term
        event = "create_term" if created else "edit_term"
        tt_id = term.term_taxonomy_id if term.term_taxonomy_id is not None else term.term_id
        self.do_action(event, term.term_id, tt_id, term.taxonomy)
        return term

    def get_term(self, term_id: int) -> Optional[Term]:
        return self._term_cache.get(term_id)

    def _clean_term_cache(self, term_id: int, taxonomy: str = "") -> None:
        self._term_cache.pop(term_id, None)
