# ==============================================
# Role Setup
# ==============================================
#
# PURPOSE:
#   Give the built-in administrator role the synthetic
#   "manage_term_locks" capability. Runs at install, at every
#   schema upgrade and from `term_locks setup`, so it must be
#   safe to call any number of times.
#
# ==============================================

from term_locks.host.types import RoleStore
from term_locks.locks.capabilities import ADMINISTRATOR_ROLE, MANAGE_TERM_LOCKS


def grant_manage_capability(roles: RoleStore, role_name: str = ADMINISTRATOR_ROLE) -> bool:
    """
    Add MANAGE_TERM_LOCKS to a role if it is missing.

    Args:
        roles: Role/permission store
        role_name: Role to grant (administrator by default)

    Returns:
        True if the capability was added now; False if the role
        does not exist or already had it
    """
    if roles.get_role(role_name) is None:
        print(f"⚠ Role '{role_name}' not found, '{MANAGE_TERM_LOCKS}' not granted")
        return False

    if roles.has_capability(role_name, MANAGE_TERM_LOCKS):
        return False

    added = roles.add_capability(role_name, MANAGE_TERM_LOCKS)
    if added:
        print(f"✓ Granted '{MANAGE_TERM_LOCKS}' to '{role_name}'")
    return bool(added)
