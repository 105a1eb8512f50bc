"""
Tests for storage backends and transaction support
"""

import pytest

from apibank.storage import InMemoryStorage, SQLiteStorage, StorageInterface


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path) -> StorageInterface:
    if request.param == "memory":
        backend = InMemoryStorage()
    else:
        backend = SQLiteStorage(tmp_path / "test.db")
    yield backend
    backend.close()


class TestStorageOperations:
    """CRUD behaviour shared by every backend"""

    def test_save_and_load(self, storage):
        storage.save("accounts", "a1", {"id": "a1", "amount": "100.00"})
        assert storage.load("accounts", "a1") == {"id": "a1", "amount": "100.00"}
        assert storage.load("accounts", "missing") is None

    def test_save_replaces_existing_record(self, storage):
        storage.save("accounts", "a1", {"id": "a1", "amount": "100.00"})
        storage.save("accounts", "a1", {"id": "a1", "amount": "200.00"})
        assert storage.load("accounts", "a1")["amount"] == "200.00"
        assert storage.count("accounts") == 1

    def test_exists_and_delete(self, storage):
        storage.save("accounts", "a1", {"id": "a1"})
        assert storage.exists("accounts", "a1")
        assert storage.delete("accounts", "a1")
        assert not storage.exists("accounts", "a1")
        assert not storage.delete("accounts", "a1")

    def test_find_and_load_all(self, storage):
        storage.save("users", "u1", {"id": "u1", "name": "Teresa", "user_type": "account_holder"})
        storage.save("users", "u2", {"id": "u2", "name": "Marisa", "user_type": "account_holder"})
        storage.save("users", "u3", {"id": "u3", "name": "admin", "user_type": "admin"})

        assert len(storage.load_all("users")) == 3
        found = storage.find("users", {"name": "Teresa"})
        assert [r["id"] for r in found] == ["u1"]
        assert len(storage.find("users", {"user_type": "account_holder"})) == 2
        assert storage.find("users", {"name": "nobody"}) == []

    def test_clear_table(self, storage):
        storage.save("accounts", "a1", {"id": "a1"})
        storage.clear_table("accounts")
        assert storage.count("accounts") == 0

    def test_atomic_commits(self, storage):
        with storage.atomic():
            storage.save("accounts", "a1", {"id": "a1"})
        assert storage.exists("accounts", "a1")

    def test_atomic_rolls_back_on_error(self, storage):
        storage.save("accounts", "a1", {"id": "a1", "amount": "1.00"})

        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("accounts", "a1", {"id": "a1", "amount": "2.00"})
                storage.save("accounts", "a2", {"id": "a2"})
                raise RuntimeError("boom")

        assert storage.load("accounts", "a1")["amount"] == "1.00"
        assert not storage.exists("accounts", "a2")

    def test_nested_atomic_joins_outer_transaction(self, storage):
        with pytest.raises(RuntimeError):
            with storage.atomic():
                with storage.atomic():
                    storage.save("accounts", "a1", {"id": "a1"})
                storage.save("accounts", "a2", {"id": "a2"})
                raise RuntimeError("boom")

        assert not storage.exists("accounts", "a1")
        assert not storage.exists("accounts", "a2")

        with storage.atomic():
            with storage.atomic():
                storage.save("accounts", "a3", {"id": "a3"})
        assert storage.exists("accounts", "a3")


class TestInMemoryIsolation:
    """In-memory storage must not share state with callers"""

    def test_loaded_records_are_copies(self):
        storage = InMemoryStorage()
        data = {"id": "a1", "tags": ["x"]}
        storage.save("t", "a1", data)
        data["tags"].append("y")

        loaded = storage.load("t", "a1")
        assert loaded["tags"] == ["x"]
        loaded["tags"].append("z")
        assert storage.load("t", "a1")["tags"] == ["x"]


class TestSQLitePersistence:
    """SQLite data survives reconnects"""

    def test_reopen(self, tmp_path):
        path = tmp_path / "bank.db"
        first = SQLiteStorage(path)
        first.save("accounts", "a1", {"id": "a1", "amount": "5.00"})
        first.close()

        second = SQLiteStorage(path)
        assert second.load("accounts", "a1") == {"id": "a1", "amount": "5.00"}
        second.close()
