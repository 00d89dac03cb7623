# ==============================================
# TOPIC 4: LOCKS (Edit/delete locks on terms)
# ==============================================
#
# Modules:
# --------
# - capabilities.py → Capability names and which flag guards which cap
# - record.py       → LockRecord + lock token
# - roles.py        → grant_manage_capability (idempotent setup step)
# - policy.py       → LockPolicy: capability veto, row actions, name marker
#
# ==============================================

from .capabilities import MANAGE_TERM_LOCKS
from .record import LockRecord, make_lock_token
from .roles import grant_manage_capability
from .policy import LockPolicy

__all__ = [
    "LockPolicy",
    "LockRecord",
    "MANAGE_TERM_LOCKS",
    "grant_manage_capability",
    "make_lock_token",
]
