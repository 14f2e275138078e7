"""
Tests for the run lock.
"""

import os

import pytest

from exceptions import RunLockedError
from utils.run_lock import RunLock

# Above the kernel's PID_MAX_LIMIT, so no live process can have it
DEAD_PID = 4194999


class TestRunLock:
    """Tests for lock file acquisition and release."""

    def test_acquire_writes_pid(self, tmp_path):
        lock = RunLock(str(tmp_path / "catalog.xlsx"))
        lock.acquire()

        assert lock.held is True
        assert lock.lock_path.parent == tmp_path
        assert lock.lock_path.read_text() == str(os.getpid())

        lock.release()
        assert lock.held is False
        assert not lock.lock_path.exists()

    def test_context_manager_releases_on_error(self, tmp_path):
        lock = RunLock(str(tmp_path / "catalog.xlsx"))

        with pytest.raises(ValueError):
            with lock:
                assert lock.lock_path.exists()
                raise ValueError("record loop failed")

        assert not lock.lock_path.exists()

    def test_second_run_is_rejected(self, tmp_path):
        dataset = str(tmp_path / "catalog.xlsx")

        with RunLock(dataset):
            with pytest.raises(RunLockedError) as exc_info:
                RunLock(dataset, timeout_seconds=0.1).acquire()

        error = exc_info.value
        assert error.status_code == 409
        assert error.code == "RUN_IN_PROGRESS"
        assert error.message == "Another run is in progress"

    def test_other_dataset_not_blocked(self, tmp_path):
        with RunLock(str(tmp_path / "a.xlsx")):
            with RunLock(str(tmp_path / "b.xlsx"), timeout_seconds=0.1) as other:
                assert other.held is True

    def test_stale_lock_is_cleared(self, tmp_path):
        lock = RunLock(str(tmp_path / "catalog.xlsx"), timeout_seconds=0.1)
        lock.lock_path.write_text(str(DEAD_PID))

        lock.acquire()

        assert lock.lock_path.read_text() == str(os.getpid())
        lock.release()

    def test_lock_dir_override(self, tmp_path):
        lock_dir = tmp_path / "locks"
        lock_dir.mkdir()

        with RunLock("upload-products.xlsx", lock_dir=str(lock_dir)) as lock:
            assert lock.lock_path.parent == lock_dir

    def test_release_without_acquire_is_noop(self, tmp_path):
        lock = RunLock(str(tmp_path / "catalog.xlsx"))
        lock.release()
        assert lock.held is False
