"""Tests for the in-memory file managers."""

import io
import threading
from datetime import datetime

import pytest

from file_handling.results import FailureKind
from file_handling.storage import (
    FileManager,
    InMemoryFileManager,
    InMemoryFileStore,
    InstanceInMemoryFileManager,
)
from tests.conftest import CONTAINER, FILE_DATE, FILE_ID, FILE_NAME


class TestSharedInMemoryFileManager:
    """All InMemoryFileManager instances share one store."""

    def test_instances_share_files(self):
        InMemoryFileManager().save_file(CONTAINER, FILE_NAME, b"shared", file_id=FILE_ID)

        other = InMemoryFileManager()
        assert other.get_file(CONTAINER, FILE_NAME, file_id=FILE_ID).value == b"shared"
        assert len(other.saved_files) == 1

    def test_clear_files(self):
        manager = InMemoryFileManager()
        manager.save_file(CONTAINER, FILE_NAME, b"data")
        InMemoryFileManager.clear_files()

        assert manager.saved_files == ()
        assert manager.file_exists(CONTAINER, FILE_NAME).value is False

    def test_can_access_saved_content_after_stream_is_closed(self):
        manager = InMemoryFileManager()
        stream = io.BytesIO(b"\x01\x02\x03")
        manager.save_file(CONTAINER, FILE_NAME, stream, file_id=FILE_ID)
        stream.close()

        assert manager.get_file(CONTAINER, FILE_NAME, file_id=FILE_ID).value == b"\x01\x02\x03"

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryFileManager(), FileManager)


class TestInstanceInMemoryFileManager:
    """Per-instance stores keep parallel tests apart."""

    def test_two_instances_dont_share_data(self):
        first = InstanceInMemoryFileManager()
        second = InstanceInMemoryFileManager()

        first.save_file(CONTAINER, FILE_NAME, b"data", file_id=FILE_ID)

        assert len(first.saved_files) == 1
        assert second.saved_files == ()
        assert second.get_file(CONTAINER, FILE_NAME, file_id=FILE_ID).error.kind == FailureKind.NOT_FOUND

    def test_does_not_touch_shared_store(self):
        InstanceInMemoryFileManager().save_file(CONTAINER, FILE_NAME, b"data")
        assert InMemoryFileManager().saved_files == ()

    def test_explicit_store_can_be_shared(self):
        store = InMemoryFileStore()
        InstanceInMemoryFileManager(store).save_file(CONTAINER, FILE_NAME, b"data")
        assert InstanceInMemoryFileManager(store).get_file(CONTAINER, FILE_NAME).value == b"data"

    def test_can_access_same_file_multiple_times(self):
        manager = InstanceInMemoryFileManager()
        manager.save_file(CONTAINER, FILE_NAME, b"repeat", file_id=FILE_ID)

        assert manager.get_file(CONTAINER, FILE_NAME, file_id=FILE_ID).value == b"repeat"
        assert manager.get_file(CONTAINER, FILE_NAME, file_id=FILE_ID).value == b"repeat"

    def test_content_is_copied(self):
        manager = InstanceInMemoryFileManager()
        buffer = bytearray(b"original")
        manager.save_file(CONTAINER, FILE_NAME, buffer)
        buffer[:] = b"changed!"

        assert manager.get_file(CONTAINER, FILE_NAME).value == b"original"

    def test_clear_files(self):
        manager = InstanceInMemoryFileManager()
        manager.save_file(CONTAINER, FILE_NAME, b"data")
        manager.clear_files()
        assert manager.saved_files == ()

    def test_records_describe_saved_file(self):
        manager = InstanceInMemoryFileManager()
        manager.save_file(CONTAINER, FILE_NAME, b"data", file_id=FILE_ID)

        record = manager.saved_files[0]
        assert record.container == CONTAINER
        assert record.file_name == FILE_NAME
        assert record.file_id == FILE_ID
        assert record.file_date is None
        assert record.key == f"test-files/c3/b8/{FILE_ID}_file.bin"

    def test_save_replaces_same_key(self):
        manager = InstanceInMemoryFileManager()
        manager.save_file(CONTAINER, FILE_NAME, b"first", file_id=FILE_ID)
        manager.save_file(CONTAINER, FILE_NAME, b"second", file_id=FILE_ID)

        assert len(manager.saved_files) == 1
        assert manager.get_file(CONTAINER, FILE_NAME, file_id=FILE_ID).value == b"second"

    def test_addressing_modes_are_distinct(self):
        manager = InstanceInMemoryFileManager()
        manager.save_file(CONTAINER, FILE_NAME, b"plain")
        manager.save_file(CONTAINER, FILE_NAME, b"by id", file_id=FILE_ID)
        manager.save_file(CONTAINER, FILE_NAME, b"by date", file_date=FILE_DATE)

        assert manager.get_file(CONTAINER, FILE_NAME).value == b"plain"
        assert manager.get_file(CONTAINER, FILE_NAME, file_id=FILE_ID).value == b"by id"
        assert manager.get_file(CONTAINER, FILE_NAME, file_date=FILE_DATE).value == b"by date"
        assert manager.get_file(CONTAINER, FILE_NAME, file_date=datetime(2018, 7, 19)).error.kind == \
            FailureKind.NOT_FOUND

    def test_delete(self):
        manager = InstanceInMemoryFileManager()
        manager.save_file(CONTAINER, FILE_NAME, b"data", file_date=FILE_DATE)

        assert manager.delete_file(CONTAINER, FILE_NAME, file_date=FILE_DATE).is_success
        assert manager.file_exists(CONTAINER, FILE_NAME, file_date=FILE_DATE).value is False

    def test_delete_missing_file_succeeds(self):
        manager = InstanceInMemoryFileManager()
        assert manager.delete_file(CONTAINER, FILE_NAME).is_success

    def test_invalid_container_is_rejected(self):
        manager = InstanceInMemoryFileManager()
        result = manager.save_file("Invalid", FILE_NAME, b"data")
        assert result.error.kind == FailureKind.INVALID_CONTAINER
        assert manager.saved_files == ()


class TestInMemoryFileStore:
    """Thread-safe record list."""

    def test_concurrent_saves_keep_every_record(self):
        manager = InstanceInMemoryFileManager()

        def save_many(prefix):
            for i in range(50):
                manager.save_file(CONTAINER, f"{prefix}-{i}.bin", b"x")

        threads = [threading.Thread(target=save_many, args=(f"t{n}",)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(manager.store) == 200

    def test_remove_reports_existence(self):
        manager = InstanceInMemoryFileManager()
        key = manager.save_file(CONTAINER, FILE_NAME, b"x").value
        assert manager.store.remove(key) is True
        assert manager.store.remove(key) is False

    @pytest.mark.parametrize("key", ["test-files/a", "other/b"])
    def test_find_unknown_key(self, key):
        assert InMemoryFileStore().find(key) is None
