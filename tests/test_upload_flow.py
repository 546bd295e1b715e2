"""Unit tests for the chunked reader and the CSV upload state machine."""

from __future__ import annotations

import io

import pytest

from core.dashboard import DashboardStore
from core.parsers.schema_validator import ValidationConfig
from core.parsers.upload import (
    CancelToken,
    Completed,
    CsvUploadManager,
    Failed,
    Idle,
    Parsing,
    ReadProgress,
    ReadResult,
    SelectingFile,
    Uploading,
    UploadProgress,
    read_file_with_progress,
)

pytestmark = pytest.mark.unit

CSV_BYTES = b"a,b\n1,2\n"


class _BrokenStream(io.RawIOBase):
    def read(self, size: int = -1) -> bytes:
        raise OSError("disk went away")


def test_reader_yields_progress_then_one_result() -> None:
    events = list(read_file_with_progress(io.BytesIO(CSV_BYTES), len(CSV_BYTES), chunk_size=4))

    assert events[:-1] == [ReadProgress(4, 8), ReadProgress(8, 8)]
    assert [e.percent for e in events[:-1]] == [50.0, 100.0]
    assert events[-1] == ReadResult(text="a,b\n1,2\n")


def test_reader_strips_bom_and_rejects_bad_utf8() -> None:
    [*_, ok] = read_file_with_progress(io.BytesIO(b"\xef\xbb\xbfx\n1\n"), 7)
    assert ok.text == "x\n1\n"

    [*_, bad] = read_file_with_progress(io.BytesIO(b"\xff\xfe\x00"), 3)
    assert bad.error is not None
    assert bad.error.kind == "file_read_error"


def test_reader_rejects_oversized_files_before_reading() -> None:
    config = ValidationConfig(max_file_size_mb=1)
    events = list(read_file_with_progress(_BrokenStream(), 5 * 1024 * 1024, config=config))

    assert len(events) == 1
    assert events[0].error.kind == "file_too_large"


def test_reader_reports_os_errors_and_cancellation() -> None:
    [failure] = list(read_file_with_progress(_BrokenStream(), 10))
    assert failure.error.message == "Failed to read file: disk went away"

    token = CancelToken()
    token.cancel()
    [cancelled] = list(read_file_with_progress(io.BytesIO(CSV_BYTES), 8, cancel=token))
    assert cancelled.error.message == "Failed to read file: Read cancelled"


def test_read_progress_percent_handles_zero_total() -> None:
    assert ReadProgress(0, 0).percent == 100.0


def test_successful_upload_transitions_and_installs_dataset() -> None:
    store = DashboardStore()
    manager = CsvUploadManager(store, chunk_size=4)
    states: list[object] = []
    manager.subscribe(lambda progress: states.append(progress.state))

    manager.select_file()
    result = manager.handle_upload("data.csv", io.BytesIO(CSV_BYTES), len(CSV_BYTES))

    assert result.ok
    assert states == [
        SelectingFile(),
        Uploading(0.0, 0, 8),
        Uploading(50.0, 4, 8),
        Uploading(100.0, 8, 8),
        Parsing(0.0, 0),
        Parsing(100.0, 1),
        Completed(),
    ]
    assert manager.progress.filename == "data.csv"
    assert manager.progress.is_terminal
    assert store.active_dataset() is result.dataset
    assert result.dataset.active is True


def test_size_failure_short_circuits_without_reading() -> None:
    store = DashboardStore()
    manager = CsvUploadManager(store, config=ValidationConfig(max_file_size_mb=1))

    result = manager.handle_upload("big.csv", _BrokenStream(), 3 * 1024 * 1024)

    assert result.error.kind == "file_too_large"
    assert manager.state == Failed("File too large: 3 MB exceeds maximum of 1 MB")
    assert store.datasets == []


def test_parse_failure_ends_in_failed_state() -> None:
    store = DashboardStore()
    manager = CsvUploadManager(store)

    result = manager.handle_upload("dup.csv", io.BytesIO(b"a,a\n1,2\n"), 8)

    assert not result.ok
    assert isinstance(manager.state, Failed)
    assert manager.state.message == "Invalid CSV format: Duplicate header: 'a'"


def test_drop_uses_the_same_flow_and_reset_returns_to_idle() -> None:
    manager = CsvUploadManager(DashboardStore())
    assert manager.handle_drop("d.csv", io.BytesIO(CSV_BYTES), 8).ok
    assert manager.state == Completed()

    manager.reset()
    assert manager.progress == UploadProgress(state=Idle())
