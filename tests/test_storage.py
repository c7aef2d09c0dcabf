"""
Tests for credential storage bindings.

Tests cover:
- Namespaced get/set/remove/clear on MemoryStorage and FileStorage
- Record layout under "<prefix>:<namespace>"
- Persistence across FileStorage instances
- Corrupt records and storage files
- Write failures surfacing as StorageError
"""
import orjson
import pytest

from nodelink_session.exceptions import StorageError
from nodelink_session.storage import FileStorage, MemoryStorage, create_storage


@pytest.fixture(params=["memory", "file"])
def any_storage(request, tmp_path):
    """Each test runs against both bindings."""
    if request.param == "memory":
        return MemoryStorage()
    return FileStorage(tmp_path / "store.json")


class TestNamespacedSurface:
    """Tests shared by every binding."""

    def test_get_missing(self, any_storage):
        """Test missing keys return None."""
        assert any_storage.get("ns", "salt") is None
        assert any_storage.load("ns") == {}

    def test_set_and_get(self, any_storage):
        """Test a value written is read back."""
        any_storage.set("ns", "salt", "abc")
        assert any_storage.get("ns", "salt") == "abc"
        assert any_storage.has("ns", "salt") is True

    def test_record_layout(self, any_storage):
        """Test one JSON object is stored per namespace."""
        any_storage.set("ns", "salt", "abc")
        any_storage.set("ns", "cipher", "def")
        raw = any_storage.get_item("lnc-web:ns")
        assert orjson.loads(raw) == {"salt": "abc", "cipher": "def"}

    def test_remove(self, any_storage):
        """Test remove deletes a single key."""
        any_storage.set("ns", "a", "1")
        any_storage.set("ns", "b", "2")
        any_storage.remove("ns", "a")
        assert any_storage.load("ns") == {"b": "2"}

    def test_remove_missing_is_noop(self, any_storage):
        """Test removing a missing key does nothing."""
        any_storage.remove("ns", "nothing")
        assert any_storage.load("ns") == {}

    def test_removing_last_key_drops_record(self, any_storage):
        """Test an emptied record is removed, not stored as {}."""
        any_storage.set("ns", "a", "1")
        any_storage.remove("ns", "a")
        assert any_storage.get_item("lnc-web:ns") is None

    def test_clear(self, any_storage):
        """Test clear erases one namespace only."""
        any_storage.set("ns", "a", "1")
        any_storage.set("other", "a", "2")
        any_storage.clear("ns")
        assert any_storage.load("ns") == {}
        assert any_storage.get("other", "a") == "2"

    def test_load_returns_copy(self, any_storage):
        """Test mutating a loaded record does not write through."""
        any_storage.set("ns", "a", "1")
        record = any_storage.load("ns")
        record["b"] = "2"
        assert any_storage.load("ns") == {"a": "1"}

    def test_corrupt_record(self, any_storage, caplog):
        """Test an unparsable record is treated as empty."""
        any_storage.set_item("lnc-web:ns", "{not json")
        assert any_storage.load("ns") == {}
        assert "Failed to parse record" in caplog.text

    def test_non_object_record(self, any_storage):
        """Test a record that is not an object is treated as empty."""
        any_storage.set_item("lnc-web:ns", "[1, 2]")
        assert any_storage.load("ns") == {}

    def test_custom_prefix(self):
        """Test the prefix is part of the item key."""
        storage = MemoryStorage(prefix="custom")
        storage.set("ns", "a", "1")
        assert storage.keys() == ["custom:ns"]


class TestFileStorage:
    """Tests specific to FileStorage."""

    def test_persists_across_instances(self, tmp_path):
        """Test a new instance on the same file sees earlier writes."""
        path = tmp_path / "store.json"
        FileStorage(path).set("ns", "salt", "abc")
        assert FileStorage(path).get("ns", "salt") == "abc"

    def test_creates_parent_directory(self, tmp_path):
        """Test missing parent directories are created."""
        path = tmp_path / "nested" / "dir" / "store.json"
        FileStorage(path).set("ns", "a", "1")
        assert path.exists()

    def test_no_temp_files_left(self, tmp_path):
        """Test atomic writes clean up after themselves."""
        path = tmp_path / "store.json"
        storage = FileStorage(path)
        for i in range(5):
            storage.set("ns", f"k{i}", str(i))
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    def test_file_layout(self, tmp_path):
        """Test the file maps item keys to record text."""
        path = tmp_path / "store.json"
        FileStorage(path).set("ns", "a", "1")
        data = orjson.loads(path.read_bytes())
        assert list(data) == ["lnc-web:ns"]
        assert orjson.loads(data["lnc-web:ns"]) == {"a": "1"}

    def test_corrupt_file(self, tmp_path, caplog):
        """Test a corrupt storage file reads as empty and can be rewritten."""
        path = tmp_path / "store.json"
        path.write_text("garbage")
        storage = FileStorage(path)
        assert storage.load("ns") == {}
        assert "is corrupt" in caplog.text
        storage.set("ns", "a", "1")
        assert storage.get("ns", "a") == "1"

    def test_write_failure(self, tmp_path):
        """Test OS errors on write raise StorageError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        storage = FileStorage(blocker / "store.json")
        with pytest.raises(StorageError):
            storage.set("ns", "a", "1")

    def test_read_failure(self, tmp_path):
        """Test OS errors on read raise StorageError."""
        storage = FileStorage(tmp_path)
        with pytest.raises(StorageError):
            storage.get("ns", "a")


class TestCreateStorage:
    """Tests for create_storage."""

    def test_memory_by_default(self):
        """Test no path gives MemoryStorage."""
        assert isinstance(create_storage(), MemoryStorage)

    def test_file_with_path(self, tmp_path):
        """Test a path gives FileStorage with the prefix."""
        storage = create_storage(tmp_path / "s.json", prefix="p")
        assert isinstance(storage, FileStorage)
        assert storage.storage_key("ns") == "p:ns"
