# ==============================================
# CLI: Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Operator commands for term locks. `setup` is the deployment
#   step that grants "manage_term_locks" to administrators and
#   records the schema version; the rest inspect or change the
#   locks on a single term.
#
# COMMANDS:
# ---------
# 1. Install / upgrade:
#    python -m term_locks.cli setup
#
# 2. Show the locks on a term:
#    python -m term_locks.cli status 12
#
# 3. Lock a term from editing and/or deletion:
#    python -m term_locks.cli lock 12 --taxonomy category --edit --delete
#
# 4. Remove both locks:
#    python -m term_locks.cli unlock 12 --taxonomy category
#
# ==============================================

import argparse
import sys
from typing import List, Optional

from term_locks.host.types import Actor
from term_locks.locks.record import LockRecord
from term_locks.term_locks import SYSTEM_ACTOR, TermLocks


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="term-locks",
        description="Lock taxonomy terms against editing and deletion."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("setup", help="Grant manage_term_locks to administrators and record the schema version")

    status = sub.add_parser("status", help="Show the locks on a term")
    status.add_argument("term_id", type=int)

    lock = sub.add_parser("lock", help="Lock a term")
    lock.add_argument("term_id", type=int)
    lock.add_argument("--taxonomy", required=True)
    lock.add_argument("--edit", action="store_true", help="Prevent editing")
    lock.add_argument("--delete", action="store_true", help="Prevent deletion")
    lock.add_argument("--actor", type=int, default=SYSTEM_ACTOR.actor_id,
                      help="Actor ID recorded in the lock token")

    unlock = sub.add_parser("unlock", help="Remove both locks from a term")
    unlock.add_argument("term_id", type=int)
    unlock.add_argument("--taxonomy", required=True)

    return parser


def describe(term_id: int, record: LockRecord) -> str:
    if record.is_empty:
        return f"term {term_id}: no locks"
    parts = []
    if record.edit_locked:
        parts.append(f"edit ({record.edit})")
    if record.delete_locked:
        parts.append(f"delete ({record.delete})")
    return f"term {term_id}: locked against {', '.join(parts)}"


def main(argv: Optional[List[str]] = None, app: Optional[TermLocks] = None) -> int:
    args = build_parser().parse_args(argv)
    app = app or TermLocks()

    with app:
        if args.command == "setup":
            result = app.setup()
            print(f"✓ Setup complete (schema upgraded: {result['upgraded']}, "
                  f"capability granted: {result['granted']})")
        elif args.command == "status":
            print(describe(args.term_id, app.status(args.term_id)))
        elif args.command == "lock":
            if not (args.edit or args.delete):
                print("⚠ Nothing to lock: pass --edit and/or --delete")
                return 2
            actor = Actor(actor_id=args.actor, role=SYSTEM_ACTOR.role, is_super_admin=True)
            record = app.lock(args.term_id, args.taxonomy, edit=args.edit, delete=args.delete, actor=actor)
            print(describe(args.term_id, record))
        elif args.command == "unlock":
            record = app.unlock(args.term_id, args.taxonomy)
            print(describe(args.term_id, record))

    return 0


if __name__ == "__main__":
    sys.exit(main())
