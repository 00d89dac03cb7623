"""
==============================================
TermLocks: Main Orchestrator
==============================================

Wires configuration, stores, the admin host and the lock policy
together. This is the object the CLI (and any embedding admin
application) works with.

USAGE EXAMPLES:

1. In-memory (tests, local experiments):
    from term_locks.term_locks import TermLocks

    app = TermLocks()
    app.setup()
    app.lock(12, "category", edit=True)
    app.status(12)            # LockRecord(edit='1700000000:0', delete='')

2. MySQL + MongoDB (TERM_LOCKS_BACKEND=mysql):
    with TermLocks() as app:
        app.setup()
        rows = app.query_terms(["category"], {"orderby": "locks"})
"""

from typing import Any, Dict, List, Optional

from term_locks.config import AppConfig, get_config
from term_locks.host.admin_host import AdminHost
from term_locks.host.memory import InMemoryOptionStore, InMemoryRoleStore, InMemoryTermMetaStore
from term_locks.host.types import Actor, AdminRequest, Term
from term_locks.locks.capabilities import ADMINISTRATOR_ROLE, MANAGE_CATEGORIES, MANAGE_OPTIONS
from term_locks.locks.policy import LockPolicy
from term_locks.locks.record import LockRecord, make_lock_token
from term_locks.locks.roles import grant_manage_capability
from term_locks.storage.mongo_client import MongoClient
from term_locks.storage.mysql_client import MySQLClient

DEFAULT_TAXONOMIES = ("category", "post_tag")

DEFAULT_ROLES = {
    ADMINISTRATOR_ROLE: {MANAGE_OPTIONS, MANAGE_CATEGORIES},
    "editor": {MANAGE_CATEGORIES},
    "author": set(),
}

# Runs CLI and setup work; never subject to locks
SYSTEM_ACTOR = Actor(actor_id=0, role=ADMINISTRATOR_ROLE, is_super_admin=True)


class TermLocks:
    """
    Builds the host for the configured backend and registers the
    lock policy on it.
    """

    def __init__(self, config: Optional[AppConfig] = None, host: Optional[AdminHost] = None):
        """
        Args:
            config: Optional configuration. If None, loads from environment.
            host: Optional pre-built host (skips backend construction).
        """
        self._config = config or get_config()
        self._mysql_client: Optional[MySQLClient] = None
        self._mongo_client: Optional[MongoClient] = None

        self.host = host if host is not None else self._build_host()
        self.policy = LockPolicy(
            self.host,
            taxonomies=self._config.locks.taxonomies or None,
            meta_key=self._config.locks.meta_key,
        )
        self.policy.register()

        print(f"✓ Term locks initialized (backend: {self._config.locks.backend}, "
              f"taxonomies: {', '.join(self.policy.taxonomies) or 'none'})")

    def _build_host(self) -> AdminHost:
        locks = self._config.locks

        if locks.backend == "mysql":
            mysql = self._config.mysql
            self._mysql_client = MySQLClient(
                host=mysql.host,
                port=mysql.port,
                user=mysql.user,
                password=mysql.password,
                database=mysql.database,
                table_prefix=mysql.table_prefix
            )
            self._mysql_client.connect()
            self._mysql_client.ensure_schema()

            mongo = self._config.mongo
            self._mongo_client = MongoClient(
                host=mongo.host,
                port=mongo.port,
                database=mongo.database,
                user=mongo.user,
                password=mongo.password
            )
            self._mongo_client.connect()
            self._mongo_client.ensure_indexes()
            for role, caps in DEFAULT_ROLES.items():
                self._mongo_client.ensure_role(role, caps)

            host = AdminHost(
                self._mysql_client,
                self._mysql_client,
                self._mongo_client,
                multisite=locks.multisite,
                table_prefix=mysql.table_prefix
            )
        else:
            host = AdminHost(
                InMemoryTermMetaStore(),
                InMemoryOptionStore(),
                InMemoryRoleStore(DEFAULT_ROLES),
                multisite=locks.multisite
            )

        for taxonomy in DEFAULT_TAXONOMIES:
            host.register_taxonomy(taxonomy, show_ui=True)
        return host

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def setup(self) -> Dict[str, Any]:
        """
        Deployment step: bring the schema version marker up to date
        and make sure administrators can manage locks.

        Returns:
            {"upgraded": bool, "granted": bool}
        """
        granted = grant_manage_capability(self.host.roles)
        upgraded = self.policy.projection.maybe_upgrade_schema()
        return {"upgraded": upgraded, "granted": granted}

    def status(self, term_id: int) -> LockRecord:
        return self.policy.get_locks(term_id)

    def lock(
        self,
        term_id: int,
        taxonomy: str,
        edit: bool = False,
        delete: bool = False,
        actor: Optional[Actor] = None
    ) -> LockRecord:
        """
        Submit the edit form for a term with the two lock boxes set.

        Both False clears the record.
        """
        actor = actor or SYSTEM_ACTOR
        token = make_lock_token(actor.actor_id)
        form = {
            self.policy.projection.field_name: {
                "edit": token if edit else "",
                "delete": token if delete else "",
            }
        }
        request = AdminRequest(actor=actor, taxonomy=taxonomy, screen="term", form=form)
        with self.host.request(request):
            self.host.save_term(Term(term_id=term_id, taxonomy=taxonomy))
        return self.status(term_id)

    def unlock(self, term_id: int, taxonomy: str, actor: Optional[Actor] = None) -> LockRecord:
        return self.lock(term_id, taxonomy, edit=False, delete=False, actor=actor)

    def can(self, actor: Actor, cap: str, term_id: Optional[int] = None) -> bool:
        if term_id is None:
            return self.host.user_can(actor, cap)
        return self.host.user_can(actor, cap, term_id)

    def query_terms(self, taxonomies: List[str], args: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        if self._mysql_client is None:
            raise RuntimeError("Listing terms needs the mysql backend")
        return self._mysql_client.query_terms(self.host, taxonomies, args)

    def close(self) -> None:
        """Close any database connections."""
        if self._mysql_client is not None:
            self._mysql_client.disconnect()
        if self._mongo_client is not None:
            self._mongo_client.disconnect()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False  # Don't suppress exceptions
