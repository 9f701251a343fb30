"""Unit tests for the user profile store."""

from unittest.mock import MagicMock

from pymongo.errors import PyMongoError

import config
from database.mongo_client import MongoDBClient, empty_profile


class TestInMemoryProfiles:
    """Profiles when MongoDB is not configured."""

    def test_unknown_user_gets_empty_profile(self, db):
        assert not db.connected
        assert db.get_user_profile("user-1") == empty_profile()

    def test_save_and_load(self, db):
        assert db.save_user_profile("user-1", {"location": "-118.25|34.01", "option": 2})
        profile = db.get_user_profile("user-1")
        assert profile["location"] == "-118.25|34.01"
        assert profile["option"] == 2
        assert profile["preferred_clinic"] is None

    def test_returned_profile_is_a_copy(self, db):
        db.save_user_profile("user-1", {"preferred_clinic": {"name": "Stacy"}})
        db.get_user_profile("user-1")["preferred_clinic"]["name"] = "changed"
        assert db.get_user_profile("user-1")["preferred_clinic"]["name"] == "Stacy"

    def test_invalid_uri_falls_back_to_memory(self, monkeypatch, capsys):
        """A malformed MONGODB_URI must not crash startup."""
        monkeypatch.setattr(config, "MONGODB_URI", "http://localhost")
        db = MongoDBClient()

        assert db.connected is False
        assert "[MongoDB] ❌" in capsys.readouterr().out
        assert db.save_user_profile("user-1", {"option": 2})
        assert db.get_user_profile("user-1")["option"] == 2

    def test_clear(self, db):
        db.save_user_profile("user-1", {"option": 1})
        db.clear_user_profile("user-1")
        assert db.get_user_profile("user-1") == empty_profile()


class TestMongoProfiles:
    """Profiles against a mocked collection."""

    def _connected(self, db):
        db.connected = True
        db.collection = MagicMock()
        return db

    def test_get_reads_document(self, db):
        db = self._connected(db)
        db.collection.find_one.return_value = {
            "_id": "user-1",
            "location": "-118.25|34.01",
            "option": 1,
            "preferred_clinic": None,
            "updated_at": "ignored",
        }
        profile = db.get_user_profile("user-1")
        db.collection.find_one.assert_called_once_with({"_id": "user-1"})
        assert profile == {"location": "-118.25|34.01", "option": 1, "preferred_clinic": None}

    def test_save_upserts(self, db):
        db = self._connected(db)
        assert db.save_user_profile("user-1", {"option": 3, "unrelated": "dropped"})

        filter_doc, update_doc = db.collection.update_one.call_args.args
        assert filter_doc == {"_id": "user-1"}
        assert update_doc["$set"]["option"] == 3
        assert "unrelated" not in update_doc["$set"]
        assert "updated_at" in update_doc["$set"]
        assert db.collection.update_one.call_args.kwargs["upsert"] is True

    def test_save_failure_returns_false(self, db, capsys):
        db = self._connected(db)
        db.collection.update_one.side_effect = PyMongoError("down")
        assert db.save_user_profile("user-1", {"option": 1}) is False
        assert "[MongoDB]" in capsys.readouterr().out

    def test_get_failure_returns_empty_profile(self, db):
        db = self._connected(db)
        db.collection.find_one.side_effect = PyMongoError("down")
        assert db.get_user_profile("user-1") == empty_profile()
