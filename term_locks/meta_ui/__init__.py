# ==============================================
# TOPIC 3: META UI (One meta key → admin surfaces)
# ==============================================
#
# Modules:
# --------
# - projection.py  → TermMetaProjection: columns, form fields,
#                    quick edit, ORDER BY rewrite, save path,
#                    schema version check
#
# ==============================================

from .projection import META_VALUE, META_VALUE_NUM, NO_VALUE, TermMetaProjection

__all__ = [
    "META_VALUE",
    "META_VALUE_NUM",
    "NO_VALUE",
    "TermMetaProjection",
]
