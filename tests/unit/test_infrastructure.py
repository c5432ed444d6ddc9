"""
Unit tests for the infrastructure wrappers.

The S3 client is exercised against a fake boto3 client; nothing here
talks to a real bucket.
"""

import logging
import os
import threading

import pytest

from src.core.uploads.errors import CleanupError, InputConversionError, StorageServiceError
from src.infrastructure.background.runner import BackgroundTaskRunner
from src.infrastructure.scratch.store import ScratchFileStore
from src.infrastructure.storage import client as storage_module
from src.infrastructure.storage.client import (
    MockStorageClient,
    S3StorageClient,
    StorageConfig,
    create_storage_client,
    guess_content_type,
)


# ---------------------------------------------------------------------------
# Scratch File Store Tests
# ---------------------------------------------------------------------------

class TestScratchFileStore:
    """Tests for local scratch files."""

    def test_write_creates_file_with_content(self, tmp_path):
        store = ScratchFileStore(tmp_path)

        path = store.write(b"hello", suffix="_report.txt")

        assert path.read_bytes() == b"hello"
        assert path.parent == tmp_path
        assert path.name.endswith("_report.txt")

    def test_same_suffix_gets_distinct_files(self, tmp_path):
        store = ScratchFileStore(tmp_path)

        a = store.write(b"a", suffix="_same.txt")
        b = store.write(b"b", suffix="_same.txt")

        assert a != b
        assert a.read_bytes() == b"a"
        assert b.read_bytes() == b"b"

    def test_directory_is_created(self, tmp_path):
        target = tmp_path / "nested" / "scratch"

        ScratchFileStore(target)

        assert target.is_dir()

    def test_delete_removes_file(self, tmp_path):
        store = ScratchFileStore(tmp_path)
        path = store.write(b"x")

        store.delete(path)

        assert not path.exists()

    def test_delete_missing_file_is_fine(self, tmp_path):
        ScratchFileStore(tmp_path).delete(tmp_path / "never-existed")

    def test_delete_failure_raises_cleanup_error(self, tmp_path):
        store = ScratchFileStore(tmp_path)
        directory = tmp_path / "not-a-file"
        directory.mkdir()

        with pytest.raises(CleanupError):
            store.delete(directory)

    def test_unusable_suffix_raises_input_conversion_error(self, tmp_path):
        """A NUL byte in the suffix is reported as a conversion failure."""
        store = ScratchFileStore(tmp_path)

        with pytest.raises(InputConversionError):
            store.write(b"x", suffix="\x00.txt")

        assert list(tmp_path.iterdir()) == []

    def test_write_failure_raises_input_conversion_error(self, tmp_path):
        store = ScratchFileStore(tmp_path / "gone")
        os.rmdir(tmp_path / "gone")

        with pytest.raises(InputConversionError):
            store.write(b"x")


# ---------------------------------------------------------------------------
# Background Runner Tests
# ---------------------------------------------------------------------------

class TestBackgroundTaskRunner:
    """Tests for the worker pool wrapper."""

    def test_submit_returns_future_with_result(self):
        runner = BackgroundTaskRunner(max_workers=1)
        try:
            future = runner.submit(lambda a, b: a + b, 2, 3, description="add")
            assert future.result(timeout=5) == 5
        finally:
            runner.shutdown()

    def test_tasks_run_off_the_calling_thread(self):
        runner = BackgroundTaskRunner(max_workers=1, thread_name_prefix="upload")
        try:
            name = runner.submit(lambda: threading.current_thread().name).result(timeout=5)
        finally:
            runner.shutdown()

        assert name != threading.current_thread().name
        assert name.startswith("upload")

    def test_task_exceptions_are_logged(self, caplog):
        def explode():
            raise RuntimeError("boom")

        runner = BackgroundTaskRunner(max_workers=1)
        with caplog.at_level(logging.ERROR):
            future = runner.submit(explode, description="explode")
            with pytest.raises(RuntimeError):
                future.result(timeout=5)
            runner.shutdown()

        assert any(r.getMessage() == "Background task failed" for r in caplog.records)

    def test_rejects_empty_pool(self):
        with pytest.raises(ValueError):
            BackgroundTaskRunner(max_workers=0)

    def test_submit_after_shutdown_fails(self):
        runner = BackgroundTaskRunner(max_workers=1)
        runner.shutdown()

        with pytest.raises(RuntimeError):
            runner.submit(lambda: None)


# ---------------------------------------------------------------------------
# Storage Client Tests
# ---------------------------------------------------------------------------

class FakeS3:
    """Stands in for boto3's S3 client."""

    def __init__(self, error: Exception | None = None) -> None:
        self.objects: dict[tuple[str, str], dict] = {}
        self.error = error

    def put_object(self, Bucket, Key, Body, ContentType):
        if self.error:
            raise self.error
        self.objects[(Bucket, Key)] = {"data": Body.read(), "content_type": ContentType}


@pytest.fixture
def fake_s3(monkeypatch):
    import boto3

    fake = FakeS3()
    captured = {}

    def fake_client(service_name, **kwargs):
        captured["service_name"] = service_name
        captured.update(kwargs)
        return fake

    monkeypatch.setattr(boto3, "client", fake_client)
    fake.captured = captured
    return fake


class TestS3StorageClient:
    """Tests for the boto3-backed client."""

    def test_client_is_configured_from_storage_config(self, fake_s3):
        S3StorageClient(StorageConfig(
            access_key_id="AKIA",
            secret_access_key="secret",
            endpoint_url="https://example.r2.cloudflarestorage.com",
            region="auto",
        ))

        assert fake_s3.captured["service_name"] == "s3"
        assert fake_s3.captured["endpoint_url"] == "https://example.r2.cloudflarestorage.com"
        assert fake_s3.captured["region_name"] == "auto"

    def test_put_streams_file_contents(self, fake_s3, tmp_path):
        source = tmp_path / "scratch"
        source.write_bytes(b"hello")
        client = S3StorageClient(StorageConfig("AKIA", "secret"))

        client.put_object("bucket", "report.txt_2024-05-01T12:30:45", source)

        stored = fake_s3.objects[("bucket", "report.txt_2024-05-01T12:30:45")]
        assert stored["data"] == b"hello"

    def test_put_uses_explicit_content_type(self, fake_s3, tmp_path):
        source = tmp_path / "scratch"
        source.write_bytes(b"x")
        client = S3StorageClient(StorageConfig("AKIA", "secret"))

        client.put_object("bucket", "img-42", source, content_type="image/png")

        assert fake_s3.objects[("bucket", "img-42")]["content_type"] == "image/png"

    def test_provider_errors_become_storage_service_errors(self, fake_s3, tmp_path):
        source = tmp_path / "scratch"
        source.write_bytes(b"x")
        fake_s3.error = RuntimeError("NoSuchBucket")
        client = S3StorageClient(StorageConfig("AKIA", "secret"))

        with pytest.raises(StorageServiceError, match="NoSuchBucket"):
            client.put_object("missing", "k", source)


class TestMockStorageClient:
    """Tests for the in-memory client."""

    def test_put_then_get(self, tmp_path):
        source = tmp_path / "f"
        source.write_bytes(b"data")
        client = MockStorageClient()

        client.put_object("b", "photo.jpg", source)

        assert client.get_object("b", "photo.jpg") == b"data"
        assert client.content_type("b", "photo.jpg") == "image/jpeg"

    def test_buckets_are_isolated(self, tmp_path):
        source = tmp_path / "f"
        source.write_bytes(b"data")
        client = MockStorageClient()

        client.put_object("a", "k", source)

        assert client.keys("b") == []
        with pytest.raises(StorageServiceError):
            client.get_object("b", "k")

    def test_fail_with_simulates_outage(self, tmp_path):
        source = tmp_path / "f"
        source.write_bytes(b"data")
        client = MockStorageClient(fail_with="SlowDown")

        with pytest.raises(StorageServiceError, match="SlowDown"):
            client.put_object("b", "k", source)
        assert client.keys("b") == []


class TestStorageFactory:
    def test_mock_mode_returns_mock(self):
        assert isinstance(create_storage_client(mock_mode=True), MockStorageClient)

    def test_config_required_outside_mock_mode(self):
        with pytest.raises(ValueError):
            create_storage_client()

    def test_content_type_falls_back_to_binary(self):
        assert guess_content_type("report.txt_2024-05-01T12:30:45") == storage_module.DEFAULT_CONTENT_TYPE
        assert guess_content_type("img.png") == "image/png"
