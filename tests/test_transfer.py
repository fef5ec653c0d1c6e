import hashlib
import io
import threading

import pytest

from gramcore.progress import ProgressManager
from gramcore.transfer import (
    Destination,
    FileSource,
    UploadedFile,
    WorkerPool,
    chunk_size_calc,
    count_workers,
    download_file,
    prettify_file_name,
    split_parts,
    undone_parts,
    upload_file,
    validate_chunk_size,
)


class _Recorder:
    def __init__(self, fail_first=None):
        self.parts = {}
        self.calls = []
        self.lock = threading.Lock()
        self.fail_first = dict(fail_first or {})

    def __call__(self, file_id, part, total, data, big):
        with self.lock:
            self.calls.append((file_id, part, total, big))
            if self.fail_first.get(part, 0) > 0:
                self.fail_first[part] -= 1
                raise RuntimeError("FLOOD_WAIT_0")
            self.parts[part] = data


def _sample(length):
    return bytes((i * 7 + 3) % 256 for i in range(length))


def test_count_workers_boundaries_and_range():
    assert count_workers(5) == 1
    assert count_workers(6) == 2
    values = [count_workers(p) for p in range(0, 1000)]
    assert values == sorted(values)
    assert min(values) >= 1 and max(values) == 12


def test_chunk_size_calc_thresholds():
    assert chunk_size_calc(0) == 256 * 1024
    assert chunk_size_calc(200 * 1024 * 1024) == 512 * 1024
    assert chunk_size_calc(1024 * 1024 * 1024) == 1024 * 1024


@pytest.mark.parametrize("size,part", [(0, 7), (10, 3), (12, 4), (1, 100), (999, 10)])
def test_split_parts_invariants(size, part):
    parts, over, total = split_parts(size, part)
    assert parts * part + over == size
    assert 0 <= over < part
    assert total == parts + (1 if over else 0)


def test_undone_parts():
    assert undone_parts({0, 2}, 4) == [1, 3]
    assert undone_parts(set(), 0) == []
    assert undone_parts({0, 1, 2}, 3) == []


def test_validate_chunk_size():
    assert validate_chunk_size(524288) == 524288
    for bad in (3000, 2 * 1048576, 0, -4):
        with pytest.raises(ValueError):
            validate_chunk_size(bad)


def test_prettify_file_name():
    assert prettify_file_name("/tmp/x/report.pdf") == "report.pdf"
    assert prettify_file_name("") == "."
    assert prettify_file_name("dir/sub/") == "sub"


def test_worker_pool_hands_out_and_takes_back():
    pool = WorkerPool(2)
    pool.add_worker("a")
    pool.add_worker("b")
    assert pool.workers == ["a", "b"]
    first = pool.next()
    pool.free_worker(first)
    taken = {pool.next(), pool.next()}
    assert taken == {"a", "b"}


def test_file_source_bytes():
    source = FileSource(b"hello")
    assert source.size_and_name() == (5, "")
    assert source.name() == ""
    assert source.reader().read() == b"hello"


def test_file_source_path(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"abcdef")
    source = FileSource(str(path))
    assert source.size_and_name() == (6, str(path))
    assert source.name() == str(path)
    with source.reader() as reader:
        assert reader.read() == b"abcdef"


def test_file_source_missing_and_unsupported(tmp_path):
    missing = FileSource(str(tmp_path / "nope"))
    assert missing.size_and_name() == (0, "")
    assert missing.reader() is None
    assert FileSource(42).reader() is None


def test_file_source_bytesio():
    source = FileSource(io.BytesIO(b"xyz"))
    assert source.size_and_name() == (3, "")
    assert source.reader().read() == b"xyz"


def test_destination_memory_grows_and_fills_gaps():
    with Destination() as dest:
        assert dest.write_at(b"cd", 2) == 2
        dest.write_at(b"ab", 0)
        dest.write_at(b"z", 6)
        assert dest.getvalue() == b"abcd\x00\x00z"


def test_destination_file(tmp_path):
    path = tmp_path / "out.bin"
    with Destination(str(path)) as dest:
        dest.write_at(b"world", 5)
        dest.write_at(b"hello", 0)
        with pytest.raises(ValueError):
            dest.getvalue()
    assert path.read_bytes() == b"helloworld"


def test_upload_small_file_reassembles_and_hashes():
    data = _sample(25600)
    recorder = _Recorder()
    result = upload_file(data, recorder, chunk_size=4096, file_name="dir/photo.jpg")
    _, _, total = split_parts(len(data), 4096)
    assert isinstance(result, UploadedFile)
    assert result.parts == total
    assert result.big is False
    assert result.name == "photo.jpg"
    assert b"".join(recorder.parts[i] for i in sorted(recorder.parts)) == data
    assert sorted(recorder.parts) == list(range(total))
    assert result.md5_checksum == hashlib.md5(data).digest()
    assert {call[0] for call in recorder.calls} == {result.id}


def test_upload_uses_path_name(tmp_path):
    path = tmp_path / "clip.bin"
    payload = _sample(1000)
    path.write_bytes(payload)
    recorder = _Recorder()
    result = upload_file(str(path), recorder, chunk_size=300)
    assert result.name == "clip.bin"
    assert b"".join(recorder.parts[i] for i in sorted(recorder.parts)) == payload


def test_upload_retries_failed_part():
    data = _sample(5000)
    recorder = _Recorder(fail_first={2: 2})
    result = upload_file(data, recorder, chunk_size=1000, threads=2)
    assert b"".join(recorder.parts[i] for i in sorted(recorder.parts)) == data
    assert sum(1 for call in recorder.calls if call[1] == 2) == 3
    assert result.md5_checksum == hashlib.md5(data).digest()


def test_upload_big_file():
    data = bytes(10 * 1024 * 1024 + 1)
    recorder = _Recorder()
    result = upload_file(data, recorder, chunk_size=1024 * 1024)
    _, _, total = split_parts(len(data), 1024 * 1024)
    assert result.big is True
    assert result.md5_checksum is None
    assert result.parts == total
    assert all(call[3] for call in recorder.calls)
    assert {call[2] for call in recorder.calls} == {total}
    assert sum(len(part) for part in recorder.parts.values()) == len(data)


def test_upload_rejects_bad_sources():
    with pytest.raises(ValueError):
        upload_file(None, _Recorder())
    with pytest.raises(ValueError):
        upload_file(12345, _Recorder())


def test_upload_reports_progress():
    data = _sample(3000)
    calls = []
    manager = ProgressManager(0).with_edit(lambda total, current: calls.append((total, current)))
    upload_file(data, _Recorder(), chunk_size=1000, progress=manager)
    assert calls[-1] == (len(data), len(data))
    assert manager.total_size == len(data)


def test_download_to_memory():
    data = _sample(10000)
    result = download_file(lambda off, lim: data[off:off + lim], len(data), chunk_size=4096)
    assert result == data


def test_download_to_file(tmp_path):
    data = _sample(9000)
    path = tmp_path / "down.bin"
    result = download_file(lambda off, lim: data[off:off + lim], len(data), str(path), chunk_size=2048)
    assert result == str(path)
    assert path.read_bytes() == data


def test_download_retries_until_every_part_arrives():
    data = _sample(8192)
    failures = {0: 4, 4096: 1}
    lock = threading.Lock()

    def fetch(offset, limit):
        with lock:
            if failures.get(offset, 0) > 0:
                failures[offset] -= 1
                if offset == 0:
                    raise RuntimeError("network glitch")
                return None
        return data[offset:offset + limit]

    assert download_file(fetch, len(data), chunk_size=4096) == data
    assert failures == {0: 0, 4096: 0}


def test_download_rejects_bad_chunk_size():
    with pytest.raises(ValueError):
        download_file(lambda off, lim: b"", 100, chunk_size=3000)


def test_download_reports_progress():
    data = _sample(5000)
    calls = []
    manager = ProgressManager(0).with_edit(lambda total, current: calls.append((total, current)))
    download_file(lambda off, lim: data[off:off + lim], len(data), chunk_size=1024, progress=manager)
    assert calls == [(len(data), len(data))]