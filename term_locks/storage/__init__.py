# ==============================================
# TOPIC 2: STORAGE (MySQL + MongoDB)
# ==============================================
#
# Database-backed implementations of the host stores.
#
# Modules:
# --------
# - mysql_client.py    → Term meta + options + terms listing (MySQL)
# - mongo_client.py    → Roles and capabilities (MongoDB)
#
# ==============================================

from .mysql_client import MySQLClient
from .mongo_client import MongoClient

__all__ = [
    "MySQLClient",
    "MongoClient",
]
