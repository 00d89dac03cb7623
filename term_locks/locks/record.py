# ==============================================
# LockRecord (Data Class)
# ==============================================
#
# PURPOSE:
#   The one entity the lock policy owns: two independent
#   sub-flags stored under a single term meta key.
#
#     edit   → truthy token = term cannot be edited
#     delete → truthy token = term cannot be deleted
#
#   A token is "<unix time>:<actor id>" from when the checkbox
#   was rendered. It only records that the box was ticked; it is
#   not a security token.
#
# INVARIANT:
#   A record with both flags falsy is "no record". to_meta()
#   returns {} for it, which makes the save path delete the row.
#
# ==============================================

import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Optional

LOCK_FLAGS = ("edit", "delete")


def make_lock_token(actor_id: int, now: Optional[float] = None) -> str:
    """Build the "<time>:<actor id>" value an unchecked lock box carries."""
    stamp = int(now if now is not None else time.time())
    return f"{stamp}:{actor_id}"


def _normalize_flag(value: Any) -> str:
    # Only scalar truthy values count; anything else is "not locked"
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, str):
        # "0" is an unchecked box, as on the posted form
        return "" if value == "0" else value
    if isinstance(value, (int, float)) and value:
        return str(value)
    return ""


@dataclass(frozen=True)
class LockRecord:
    edit: str = ""
    delete: str = ""

    @property
    def edit_locked(self) -> bool:
        return bool(self.edit)

    @property
    def delete_locked(self) -> bool:
        return bool(self.delete)

    @property
    def is_empty(self) -> bool:
        return not (self.edit or self.delete)

    def is_locked(self, flag: str) -> bool:
        if flag not in LOCK_FLAGS:
            raise ValueError(f"Unknown lock flag '{flag}'")
        return bool(getattr(self, flag))

    @classmethod
    def from_payload(cls, payload: Any) -> "LockRecord":
        """
        Validate a posted "term-locks" field (or a stored value).

        Args:
            payload: Expected to be a mapping with "edit" / "delete" keys

        Returns:
            LockRecord; anything that is not a mapping means both unlocked
        """
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            edit=_normalize_flag(payload.get("edit")),
            delete=_normalize_flag(payload.get("delete")),
        )

    # Stored values have the same shape as the posted field
    from_meta = from_payload

    def to_meta(self) -> Dict[str, str]:
        """Serialize for term meta, keeping only the flags that are set."""
        return {flag: getattr(self, flag) for flag in LOCK_FLAGS if getattr(self, flag)}
