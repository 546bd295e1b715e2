"""Upload state machine and chunked file reading.

The reader is a generator: it yields `ReadProgress` events any number of
times and then exactly one terminal `ReadResult`. `CsvUploadManager` drives
the reader, parses the text, installs the dataset into the dashboard store,
and publishes every state transition to its subscribers.

State flow::

    Idle -> SelectingFile -> Uploading -> Parsing -> Completed
                                 \\            \\
                                  `-> Failed    `-> Failed

`Completed` and `Failed` are terminal. Starting a new upload replaces the
state without an explicit reset.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import BinaryIO

from core.dashboard import DashboardStore
from core.parsers.csv_dataset import CsvParseResult, parse_csv_to_dataset
from core.parsers.errors import CsvError
from core.parsers.schema_validator import DEFAULT_VALIDATION_CONFIG, ValidationConfig, validate_file, validate_size

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class Idle:
    pass


@dataclass(frozen=True, slots=True)
class SelectingFile:
    pass


@dataclass(frozen=True, slots=True)
class Uploading:
    """Bytes are being read; `progress` is a 0-100 percentage."""

    progress: float
    bytes_read: int
    total_bytes: int


@dataclass(frozen=True, slots=True)
class Parsing:
    """Text is being tokenized and typed; `progress` is a 0-100 percentage."""

    progress: float
    rows_processed: int


@dataclass(frozen=True, slots=True)
class Completed:
    pass


@dataclass(frozen=True, slots=True)
class Failed:
    message: str


UploadState = Idle | SelectingFile | Uploading | Parsing | Completed | Failed
TERMINAL_STATES = (Completed, Failed)


@dataclass(frozen=True, slots=True)
class UploadProgress:
    """Snapshot published to subscribers on every transition."""

    state: UploadState
    filename: str | None = None
    file_size: int | None = None

    @property
    def is_terminal(self) -> bool:
        return isinstance(self.state, TERMINAL_STATES)


class CancelToken:
    """Cooperative cancellation flag checked between chunks."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True, slots=True)
class ReadProgress:
    bytes_read: int
    total_bytes: int

    @property
    def percent(self) -> float:
        if self.total_bytes <= 0:
            return 100.0
        return min(100.0, self.bytes_read * 100.0 / self.total_bytes)


@dataclass(frozen=True, slots=True)
class ReadResult:
    """Terminal read outcome: decoded text, or a CsvError."""

    text: str | None = None
    error: CsvError | None = None


def read_file_with_progress(
    stream: BinaryIO,
    total_bytes: int,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    config: ValidationConfig = DEFAULT_VALIDATION_CONFIG,
    cancel: CancelToken | None = None,
) -> Iterator[ReadProgress | ReadResult]:
    """Read a binary stream in chunks, reporting progress.

    Files above the configured size limit are rejected before the first read.
    Text is decoded as UTF-8 (a leading BOM is dropped).

    Args:
        stream: Readable binary stream.
        total_bytes: Declared file size, used for the limit and percentages.
        chunk_size: Bytes per read.
        config: Upload limits.
        cancel: Optional token; when set, the read stops with a failure.

    Yields:
        `ReadProgress` after every chunk, then exactly one `ReadResult`.
    """

    too_large = validate_size(total_bytes, config)
    if too_large is not None:
        yield ReadResult(error=too_large)
        return

    chunks: list[bytes] = []
    bytes_read = 0
    while True:
        if cancel is not None and cancel.cancelled:
            yield ReadResult(error=CsvError("file_read_error", "Read cancelled"))
            return
        try:
            chunk = stream.read(chunk_size)
        except OSError as exc:
            yield ReadResult(error=CsvError("file_read_error", str(exc)))
            return
        if not chunk:
            break
        chunks.append(chunk)
        bytes_read += len(chunk)
        yield ReadProgress(bytes_read=bytes_read, total_bytes=total_bytes)

    try:
        text = b"".join(chunks).decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        yield ReadResult(error=CsvError("file_read_error", f"File is not valid UTF-8 ({exc.reason})"))
        return
    yield ReadResult(text=text)


Subscriber = Callable[[UploadProgress], None]


class CsvUploadManager:
    """Drive one CSV upload at a time into a dashboard store.

    Args:
        store: Dashboard store receiving parsed datasets.
        config: Upload limits.
        chunk_size: Bytes per read.
    """

    def __init__(
        self,
        store: DashboardStore,
        *,
        config: ValidationConfig = DEFAULT_VALIDATION_CONFIG,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.store = store
        self.config = config
        self.chunk_size = chunk_size
        self.progress = UploadProgress(state=Idle())
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> UploadState:
        return self.progress.state

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def reset(self) -> None:
        self._publish(UploadProgress(state=Idle()))

    def select_file(self) -> None:
        """Enter file selection; allowed from any state."""

        self._publish(UploadProgress(state=SelectingFile()))

    def handle_upload(
        self,
        filename: str,
        stream: BinaryIO,
        size_bytes: int,
        *,
        cancel: CancelToken | None = None,
    ) -> CsvParseResult:
        """Read, parse, and install one file.

        Size and name checks fail straight to `Failed` without reading. On
        success the dataset is added to the store and made active.

        Returns:
            The parse result; `error` is set when the upload failed.
        """

        self._publish(UploadProgress(state=Uploading(0.0, 0, size_bytes), filename=filename, file_size=size_bytes))
        rejected = validate_file(size_bytes, filename, self.config)
        if rejected is not None:
            return self._fail(rejected)

        text: str | None = None
        for event in read_file_with_progress(
            stream,
            size_bytes,
            chunk_size=self.chunk_size,
            config=self.config,
            cancel=cancel,
        ):
            if isinstance(event, ReadProgress):
                self._transition(Uploading(event.percent, event.bytes_read, event.total_bytes))
            elif event.error is not None:
                return self._fail(event.error)
            else:
                text = event.text

        self._transition(Parsing(0.0, 0))
        result = parse_csv_to_dataset(text or "", filename, size_bytes, config=self.config)
        if result.error is not None or result.dataset is None:
            return self._fail(result.error or CsvError("empty_file"))

        dataset = result.dataset
        self._transition(Parsing(100.0, dataset.row_count))
        self.store.add_dataset(dataset)
        self.store.set_active_dataset(dataset.id)
        self._transition(Completed())
        logger.info("Uploaded %s: %d rows, %d fields", filename, dataset.row_count, len(dataset.fields))
        return result

    # A dropped file goes through the same flow as a picked one.
    handle_drop = handle_upload

    def _fail(self, error: CsvError) -> CsvParseResult:
        logger.info("Upload of %s failed: %s", self.progress.filename, error.message)
        self._transition(Failed(error.message))
        return CsvParseResult(error=error)

    def _transition(self, state: UploadState) -> None:
        if self.progress.is_terminal and isinstance(state, TERMINAL_STATES):
            return
        self._publish(UploadProgress(state=state, filename=self.progress.filename, file_size=self.progress.file_size))

    def _publish(self, progress: UploadProgress) -> None:
        self.progress = progress
        for subscriber in list(self._subscribers):
            subscriber(progress)
