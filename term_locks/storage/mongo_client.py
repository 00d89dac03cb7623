# ==============================================
# MongoClient
# ==============================================
#
# PURPOSE:
#   Manages the MongoDB connection and backs the host's role /
#   permission store. Each role is one document:
#
#     {"name": "administrator", "capabilities": ["manage_options", ...]}
#
# WHY THIS CLASS EXISTS:
#   Roles are small, schema-free documents whose capability list
#   grows over time (e.g. when "manage_term_locks" is granted).
#   $addToSet gives an idempotent grant without read-modify-write.
#
# CLASS: MongoClient
# ------------------
#   Stateful, holds connection to MongoDB.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, user=None, password=None, collection="roles")
#
#   Methods:
#   --------
#   - connect() / disconnect()
#   - ensure_indexes() -> None          (unique index on role name)
#   - ensure_role(name, capabilities)   (create role / merge caps)
#   - get_role(name) -> set[str] | None
#   - has_capability(name, capability) -> bool
#   - add_capability(name, capability) -> bool
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoClient(...) as db:` usage.
#
# ==============================================

from typing import Iterable, Optional, Set

from pymongo import MongoClient as PyMongoClient
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError


class MongoClient:
    def __init__(self, host, port, database, user=None, password=None, collection="roles"):
        # Store connection params. Don't connect yet.
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.collection_name = collection
        self.client = None  # Will hold the actual MongoDB client connection

    def connect(self):
        # Establish connection to MongoDB.
        try:
            if self.user and self.password:
                uri = f"mongodb://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
            else:
                uri = f"mongodb://{self.host}:{self.port}/{self.database}"
            self.client = PyMongoClient(uri)
            # Test connection
            self.client.admin.command('ping')
            print("✓ Connected to MongoDB successfully.")
        except ConnectionFailure as e:
            print(f"✗ Could not connect to MongoDB: {e}")
            raise
        except OperationFailure as e:
            print(f"✗ Authentication failed: {e}")
            raise

    def disconnect(self):
        # Close connection.
        if self.client:
            self.client.close()
            self.client = None

    @property
    def roles(self):
        if not self.client:
            raise RuntimeError("Not connected to MongoDB")
        return self.client[self.database][self.collection_name]

    def ensure_indexes(self) -> None:
        self.roles.create_index("name", unique=True)

    def ensure_role(self, name: str, capabilities: Iterable[str] = ()) -> None:
        # Create the role if missing and merge in the given capabilities
        self.roles.update_one(
            {"name": name},
            {"$addToSet": {"capabilities": {"$each": list(capabilities)}}},
            upsert=True
        )

    def get_role(self, name: str) -> Optional[Set[str]]:
        document = self.roles.find_one({"name": name})
        if document is None:
            return None
        return set(document.get("capabilities", []))

    def has_capability(self, name: str, capability: str) -> bool:
        return self.roles.count_documents({"name": name, "capabilities": capability}, limit=1) > 0

    def add_capability(self, name: str, capability: str) -> bool:
        # Existing roles only; an unknown role is not created here
        try:
            result = self.roles.update_one(
                {"name": name},
                {"$addToSet": {"capabilities": capability}}
            )
        except PyMongoError as e:
            print(f"✗ MongoDB capability grant failed: {str(e)[:100]}")
            return False
        return result.matched_count > 0

    def __enter__(self):
        # For `with MongoClient(...) as db:` usage.
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
