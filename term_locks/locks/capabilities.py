# ==============================================
# Capability Names
# ==============================================
#
# - MANAGE_TERM_LOCKS  → synthetic cap gating the lock UI and bypassing locks
# - MANAGE_CATEGORIES  → taxonomy management primitive (edit + delete)
# - EDIT_TERM / DELETE_TERM → per-term meta capabilities
# - MANAGE_OPTIONS     → what MANAGE_TERM_LOCKS maps to on a single site
# - MANAGE_NETWORK     → what MANAGE_TERM_LOCKS maps to on multisite;
#                        no role holds it, so only super admins pass
#
# ==============================================

from term_locks.host.types import DO_NOT_ALLOW

MANAGE_TERM_LOCKS = "manage_term_locks"
MANAGE_CATEGORIES = "manage_categories"
EDIT_TERM = "edit_term"
DELETE_TERM = "delete_term"
MANAGE_OPTIONS = "manage_options"
MANAGE_NETWORK = "manage_network"

ADMINISTRATOR_ROLE = "administrator"

# Which lock sub-flags veto which capability
GUARDED_CAPS = {
    MANAGE_CATEGORIES: ("edit", "delete"),
    EDIT_TERM: ("edit",),
    DELETE_TERM: ("delete",),
}

__all__ = [
    "ADMINISTRATOR_ROLE",
    "DELETE_TERM",
    "DO_NOT_ALLOW",
    "EDIT_TERM",
    "GUARDED_CAPS",
    "MANAGE_CATEGORIES",
    "MANAGE_NETWORK",
    "MANAGE_OPTIONS",
    "MANAGE_TERM_LOCKS",
]
