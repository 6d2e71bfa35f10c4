import pytest

from stashkit import filewatcher
from stashkit.localwatch import LocalWatch, install


@pytest.fixture
def hello_file(tmp_path):
    path = tmp_path / "filewatcher_tmp"
    path.write_bytes(b"hello")
    return path


def append(path, data):
    with open(path, "ab") as f:
        f.write(data)
        f.flush()


def test_watch_through_filewatcher(hello_file):
    install()
    install()
    results, closer = filewatcher.get(filewatcher.LOCAL + str(hello_file))
    try:
        assert results.get(timeout=5) == b"hello"
        append(hello_file, b" world")
        assert results.get(timeout=5) == b"hello world"
    finally:
        closer()


def test_close_ends_stream_and_frees_file(hello_file):
    watch = LocalWatch()
    results = watch.file(str(hello_file))
    assert results.get(timeout=5) == b"hello"
    watch.close()
    assert results.get(timeout=5) is None

    again = LocalWatch()
    results2 = again.file(str(hello_file))
    try:
        assert results2.get(timeout=5) == b"hello"
    finally:
        again.close()


def test_same_file_cannot_be_watched_twice(hello_file):
    first = LocalWatch()
    first.file(str(hello_file))
    try:
        with pytest.raises(ValueError, match="already watched"):
            LocalWatch().file(str(hello_file))
    finally:
        first.close()


def test_watcher_cannot_run_twice(hello_file, tmp_path):
    other = tmp_path / "other"
    other.write_bytes(b"x")
    watch = LocalWatch()
    watch.file(str(hello_file))
    try:
        with pytest.raises(RuntimeError):
            watch.file(str(other))
    finally:
        watch.close()


def test_missing_file_fails(tmp_path):
    missing = tmp_path / "missing"
    watch = LocalWatch()
    with pytest.raises(FileNotFoundError):
        watch.file(str(missing))
    missing.write_bytes(b"now here")
    results = watch.file(str(missing))
    try:
        assert results.get(timeout=5) == b"now here"
    finally:
        watch.close()


def test_rewrite_reports_new_content(hello_file):
    watch = LocalWatch()
    results = watch.file(str(hello_file))
    try:
        assert results.get(timeout=5) == b"hello"
        hello_file.write_bytes(b"replaced content")
        assert results.get(timeout=5) == b"replaced content"
    finally:
        watch.close()