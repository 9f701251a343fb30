"""
MongoDB Client for User Profile Storage.

Remembers per-user clinic finder state across turns:
  - Last location the user entered
  - Last option they picked
  - Their preferred (pre-set) clinic

When MongoDB is not configured or unreachable, profiles are kept in
process memory so the bot keeps working for the current session.
"""

from copy import deepcopy
from datetime import datetime, timezone
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError
import config


PROFILE_FIELDS = ("location", "option", "preferred_clinic")


def empty_profile() -> dict:
    """Create a fresh user profile."""
    return {field: None for field in PROFILE_FIELDS}


class MongoDBClient:
    """Manages MongoDB connections and user profile operations."""

    def __init__(self, uri: str | None = None):
        self.uri = uri or config.MONGODB_URI
        self.db_name = config.MONGODB_DB_NAME
        self.collection_name = config.MONGODB_COLLECTION
        self.client = None
        self.db = None
        self.collection = None
        self.connected = False
        self._local_profiles: dict[str, dict] = {}

        if self.uri:
            self._connect()

    def _connect(self):
        """Establish MongoDB connection."""
        try:
            self.client = MongoClient(
                self.uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
            )
            # Test the connection
            self.client.admin.command("ping")
            self.db = self.client[self.db_name]
            self.collection = self.db[self.collection_name]
            self.connected = True
            print(f"[MongoDB] ✅ Connected to database: {self.db_name}")
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            print(f"[MongoDB] ❌ Connection failed: {e} (using in-memory profiles)")
            self.connected = False
        except PyMongoError as e:
            # Bad URI scheme, unresolvable mongodb+srv host, bad options
            print(f"[MongoDB] ❌ Invalid configuration: {e} (using in-memory profiles)")
            self.client = None
            self.connected = False

    def get_user_profile(self, user_id: str) -> dict:
        """Return the stored profile for a user, or an empty one."""
        if not self.connected:
            return deepcopy(self._local_profiles.get(user_id, empty_profile()))

        try:
            doc = self.collection.find_one({"_id": user_id})
        except PyMongoError as e:
            print(f"[MongoDB] ❌ Failed to load profile {user_id}: {e}")
            return empty_profile()

        profile = empty_profile()
        if doc:
            for field in PROFILE_FIELDS:
                profile[field] = doc.get(field)
        return profile

    def save_user_profile(self, user_id: str, profile: dict) -> bool:
        """
        Persist a user's profile.

        Returns:
            True if the profile was stored, False if the database write failed.
        """
        data = {field: profile.get(field) for field in PROFILE_FIELDS}

        if not self.connected:
            self._local_profiles[user_id] = deepcopy(data)
            return True

        data["updated_at"] = datetime.now(timezone.utc)
        try:
            self.collection.update_one({"_id": user_id}, {"$set": data}, upsert=True)
            return True
        except PyMongoError as e:
            print(f"[MongoDB] ❌ Failed to save profile {user_id}: {e}")
            return False

    def clear_user_profile(self, user_id: str):
        """Forget everything stored for a user."""
        self._local_profiles.pop(user_id, None)
        if not self.connected:
            return
        try:
            self.collection.delete_one({"_id": user_id})
        except PyMongoError as e:
            print(f"[MongoDB] ❌ Failed to clear profile {user_id}: {e}")

    def close(self):
        """Close the MongoDB connection."""
        if self.client:
            self.client.close()
            self.connected = False
            print("[MongoDB] Connection closed.")
