# ==============================================
# Term Locks
# ==============================================
#
# Package Structure (4 Topics + Orchestrator):
#
# term_locks/
# ├── host/             # Topic 1: Admin host (hooks, request scope, capabilities)
# ├── storage/          # Topic 2: MySQL term meta/options + MongoDB roles
# ├── meta_ui/          # Topic 3: Project one meta key onto columns/forms/queries
# ├── locks/            # Topic 4: Edit/delete locks and the capability veto
# ├── config.py         # Configuration management
# ├── term_locks.py     # Final orchestrator class
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "1.1.0"
