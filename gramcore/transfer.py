"""Chunked, concurrent file upload and download over caller-supplied part transports."""

from __future__ import annotations

import contextlib
import hashlib
import io
import logging
import os
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Container, Iterator, Optional, Union

from .helpers import generate_random_long, get_flood_wait, match_error, size_to_human
from .progress import ProgressManager

log = logging.getLogger(__name__)

MAX_RETRIES = 3
DEFAULT_UPLOAD_PART_SIZE = 512 * 1024
BIG_FILE_THRESHOLD = 10 * 1024 * 1024
MAX_CHUNK_SIZE = 1024 * 1024

SavePart = Callable[[int, int, int, bytes, bool], Any]
FetchPart = Callable[[int, int], Optional[bytes]]


class WorkerPool:
    """A fixed-capacity pool of workers handed out one at a time."""

    def __init__(self, size: int) -> None:
        self._lock = threading.Lock()
        self.workers: list[Any] = []
        self._free: "queue.Queue[Any]" = queue.Queue(maxsize=max(size, 0))

    def add_worker(self, worker: Any) -> None:
        """Register a worker and mark it free straight away."""
        with self._lock:
            self.workers.append(worker)
        self._free.put(worker)

    def next(self) -> Any:
        """Block until a worker is free and return it."""
        return self._free.get()

    def free_worker(self, worker: Any) -> None:
        """Give a worker back to the pool."""
        self._free.put(worker)


@dataclass
class FileSource:
    """Something to upload: a path, bytes, a binary stream or a file object."""

    source: Any

    def size_and_name(self) -> tuple[int, str]:
        """Return the byte size and the name of the source, where they are known."""
        src = self.source
        if isinstance(src, (str, os.PathLike)):
            path = os.fspath(src)
            try:
                return os.path.getsize(path), path
            except OSError:
                return 0, ""
        if isinstance(src, (bytes, bytearray, memoryview)):
            return len(src), ""
        if isinstance(src, io.BytesIO):
            return len(src.getvalue()), ""
        if hasattr(src, "fileno"):
            try:
                size = os.fstat(src.fileno()).st_size
            except (OSError, ValueError, io.UnsupportedOperation):
                return 0, ""
            name = getattr(src, "name", "")
            return size, name if isinstance(name, str) else ""
        return 0, ""

    def name(self) -> str:
        """Return the path or file name of the source, or ''."""
        src = self.source
        if isinstance(src, (str, os.PathLike)):
            path = os.fspath(src)
            return path if os.path.exists(path) else ""
        if hasattr(src, "fileno"):
            name = getattr(src, "name", "")
            return name if isinstance(name, str) else ""
        return ""

    def reader(self) -> Optional[BinaryIO]:
        """Return a binary stream over the source, or None when it has none."""
        src = self.source
        if isinstance(src, (str, os.PathLike)):
            try:
                return open(os.fspath(src), "rb")
            except OSError:
                return None
        if isinstance(src, (bytes, bytearray, memoryview)):
            return io.BytesIO(bytes(src))
        if isinstance(src, io.BytesIO):
            return io.BytesIO(src.getvalue())
        if callable(getattr(src, "read", None)):
            return src
        return None


class Destination:
    """Random-access write target: a file on disk or a growing in-memory buffer."""

    def __init__(self, path: Optional[Union[str, os.PathLike]] = None) -> None:
        self._lock = threading.Lock()
        self._data = bytearray()
        self._file: Optional[BinaryIO] = None
        if path is not None:
            flags = os.O_CREAT | os.O_RDWR | getattr(os, "O_BINARY", 0)
            fd = os.open(os.fspath(path), flags, 0o666)
            self._file = os.fdopen(fd, "r+b")

    def write_at(self, data: bytes, offset: int) -> int:
        """Write data at the given offset and return the number of bytes written."""
        with self._lock:
            if self._file is not None:
                self._file.seek(offset)
                self._file.write(data)
                return len(data)
            end = offset + len(data)
            if end > len(self._data):
                self._data.extend(bytes(end - len(self._data)))
            self._data[offset:end] = data
        return len(data)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()

    def getvalue(self) -> bytes:
        """Return the bytes held in memory."""
        if self._file is not None:
            raise ValueError("destination writes to a file")
        with self._lock:
            return bytes(self._data)

    def __enter__(self) -> "Destination":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


@dataclass
class UploadedFile:
    """The result of an upload: enough to refer to the file in a later request."""

    id: int
    parts: int
    name: str
    md5_checksum: Optional[bytes] = None
    big: bool = False


def count_workers(parts: int) -> int:
    """Choose how many workers to use for a transfer of the given number of parts."""
    for limit, workers in ((5, 1), (10, 2), (50, 3), (100, 6), (200, 7), (400, 8), (500, 10)):
        if parts <= limit:
            return workers
    return 12


def chunk_size_calc(size: int) -> int:
    """Choose the download chunk size for a file of the given size."""
    if size < 200 * 1024 * 1024:
        return 256 * 1024
    if size < 1024 * 1024 * 1024:
        return 512 * 1024
    return 1024 * 1024


def undone_parts(done: Container[int], total_parts: int) -> list[int]:
    """Return the part indices below total_parts that are not yet done."""
    return [index for index in range(total_parts) if index not in done]


def split_parts(size: int, part_size: int) -> tuple[int, int, int]:
    """Return (full parts, bytes in the last short part, total parts)."""
    parts, over = divmod(size, part_size)
    return parts, over, parts + (1 if over > 0 else 0)


def validate_chunk_size(chunk_size: int) -> int:
    """Check that the chunk size divides 1 MiB evenly and return it."""
    if chunk_size <= 0 or chunk_size > MAX_CHUNK_SIZE or MAX_CHUNK_SIZE % chunk_size != 0:
        raise ValueError("chunk size must be a multiple of 1048576 (1MB)")
    return chunk_size


def prettify_file_name(path: str) -> str:
    """Return the last element of a path."""
    if not path:
        return "."
    separators = os.sep + (os.altsep or "")
    stripped = path.rstrip(separators)
    if not stripped:
        return os.sep
    return os.path.basename(stripped)


def _handle_flood(err: BaseException) -> bool:
    if match_error(err, "FLOOD_WAIT_") or match_error(err, "FLOOD_PREMIUM_WAIT_"):
        wait = get_flood_wait(err)
        if wait > 0:
            log.debug("flood wait %d(s), waiting...", wait)
            time.sleep(wait)
            return True
    return False


class _Counter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.value = 0

    def add(self, amount: int) -> None:
        with self._lock:
            self.value += amount


@contextlib.contextmanager
def _report_progress(
    progress: Optional[ProgressManager], size: int, counter: _Counter
) -> Iterator[None]:
    if progress is None:
        yield
        return
    progress.set_total_size(size)
    stop = threading.Event()
    ticker: Optional[threading.Thread] = None
    if progress.edit_interval > 0 and progress.edit_func is not None:
        edit = progress.edit_func

        def tick() -> None:
            while not stop.wait(progress.edit_interval):
                edit(size, counter.value)

        ticker = threading.Thread(target=tick, daemon=True)
        ticker.start()
    try:
        yield
    finally:
        stop.set()
        if ticker is not None:
            ticker.join()
    if progress.edit_func is not None:
        progress.edit_func(size, size)


def _read_part(reader: BinaryIO, length: int) -> bytes:
    chunks = []
    remaining = length
    while remaining > 0:
        chunk = reader.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    data = b"".join(chunks)
    if not data and length > 0:
        raise EOFError("unexpected end of input")
    return data


def upload_file(
    src: Any,
    save_part: SavePart,
    threads: int = 0,
    chunk_size: int = 0,
    file_name: str = "",
    progress: Optional[ProgressManager] = None,
) -> UploadedFile:
    """Upload a source in parts through save_part(file_id, part, total_parts, data, big).

    A part that fails is retried up to three times, waiting out flood limits.
    """
    if src is None:
        raise ValueError("file can not be nil")
    source = FileSource(src)
    size, name = source.size_and_name()
    reader = source.reader()
    if reader is None:
        raise ValueError("failed to convert source to a reader")

    with contextlib.ExitStack() as stack:
        if reader is not src:
            stack.callback(reader.close)
        return _upload(source, reader, size, name, save_part, threads, chunk_size, file_name, progress)


def _upload(
    source: FileSource,
    reader: BinaryIO,
    size: int,
    name: str,
    save_part: SavePart,
    threads: int,
    chunk_size: int,
    file_name: str,
    progress: Optional[ProgressManager],
) -> UploadedFile:
    part_size = chunk_size if chunk_size > 0 else DEFAULT_UPLOAD_PART_SIZE
    file_id = generate_random_long()
    big = size > BIG_FILE_THRESHOLD
    parts, over, total = split_parts(size, part_size)
    workers = threads if threads > 0 else count_workers(parts)

    log.info("file - upload: (%s) - (%d) - (%d)", source.name(), size, parts)

    counter = _Counter()
    uploaded: dict[int, bytes] = {}
    lock = threading.Lock()

    def send(index: int, data: bytes) -> bool:
        for _ in range(MAX_RETRIES):
            try:
                save_part(file_id, index, total, data, big)
            except Exception as err:  # transport errors are retried
                if not _handle_flood(err):
                    log.debug("part %d failed: %s", index, err)
                continue
            log.debug("uploaded part %d/%d in chunks of %d KB", index, total, len(data) // 1024)
            counter.add(len(data))
            with lock:
                uploaded[index] = b"" if big else data
            return True
        return False

    slots = threading.BoundedSemaphore(workers)
    with _report_progress(progress, size, counter):
        with ThreadPoolExecutor(max_workers=workers) as pool:
            for index in range(parts):
                slots.acquire()
                try:
                    data = _read_part(reader, part_size)
                except BaseException:
                    slots.release()
                    raise
                future = pool.submit(send, index, data)
                future.add_done_callback(lambda _done: slots.release())
        if over > 0:
            send(total - 1, _read_part(reader, over))

    final_name = prettify_file_name(file_name or name)
    if big:
        return UploadedFile(id=file_id, parts=total, name=final_name, big=True)
    digest = hashlib.md5(b"".join(uploaded[index] for index in sorted(uploaded))).digest()
    return UploadedFile(id=file_id, parts=total, name=final_name, md5_checksum=digest)


def download_file(
    fetch_part: FetchPart,
    size: int,
    dest: Optional[Union[str, os.PathLike]] = None,
    threads: int = 0,
    chunk_size: int = 0,
    progress: Optional[ProgressManager] = None,
) -> Union[str, bytes]:
    """Download size bytes through fetch_part(offset, limit) -> bytes or None.

    Parts are fetched concurrently and missing ones are retried until all arrive.
    Returns the destination path, or the downloaded bytes when dest is None.
    """
    part_size = chunk_size_calc(size)
    if chunk_size > 0:
        part_size = validate_chunk_size(chunk_size)

    parts, _over, total = split_parts(size, part_size)
    workers = threads if threads > 0 else count_workers(parts)

    if dest is None:
        log.warning("downloading to buffer (memory) - use with caution (memory usage)")
    label = ":mem-buffer:" if dest is None else os.fspath(dest)
    log.info("file - download: (%s) - (%s) - (%d)", label, size_to_human(size), parts)

    counter = _Counter()
    done: set[int] = set()
    lock = threading.Lock()

    with Destination(dest) as target:

        def fetch(index: int) -> None:
            offset = index * part_size
            for _ in range(MAX_RETRIES):
                try:
                    data = fetch_part(offset, part_size)
                except Exception as err:  # transport errors are retried
                    if not _handle_flood(err):
                        log.debug("part - (%d) - retrying...: %s", index, err)
                    continue
                if data is None:
                    continue
                log.debug("downloaded part %d/%d len: %dKB", index, total, len(data) // 1024)
                target.write_at(data, offset)
                counter.add(len(data))
                with lock:
                    done.add(index)
                return

        with _report_progress(progress, size, counter):
            with ThreadPoolExecutor(max_workers=max(workers, 1)) as pool:
                list(pool.map(fetch, range(parts)))
                while missing := undone_parts(done, total):
                    list(pool.map(fetch, missing))

        if dest is None:
            return target.getvalue()
    return os.fspath(dest)