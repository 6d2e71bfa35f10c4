import random
import string
import struct
import zlib

import pytest

from stashkit.diskslice import SliceReader, SliceWriter, Value

LETTERS = string.ascii_letters


def rand_bytes(rng: random.Random) -> bytes:
    return "".join(rng.choice(LETTERS) for _ in range(1000)).encode()


def compress(data: bytes) -> bytes:
    return zlib.compress(data)


def decompress(data: bytes) -> bytes:
    return zlib.decompress(data)


CASES = [
    pytest.param({}, {}, id="no options"),
    pytest.param({"intercept": decompress}, {"intercept": compress}, id="compression"),
    pytest.param({"cache_index": True}, {}, id="caching"),
]


@pytest.mark.parametrize("read_options,write_options", CASES)
def test_disk_list(tmp_path, read_options, write_options):
    rng = random.Random(1234)
    p = tmp_path / "slice"
    data = [rand_bytes(rng) for _ in range(1000)]
    w = SliceWriter(p, **write_options)
    for v in data:
        w.write(v)
    w.close()

    with SliceReader(p, **read_options) as r:
        assert len(r) == 1000
        for i, v in enumerate(data):
            assert r.read(i) == v
        seen = []
        for value in r.range(0, -1):
            assert value.value == data[value.index]
            seen.append(value.index)
        assert seen == list(range(1000))


def test_compression_stores_transformed_bytes(tmp_path):
    p = tmp_path / "slice"
    payload = b"a" * 5000
    with SliceWriter(p, intercept=compress) as w:
        w.write(payload)
    with SliceReader(p) as raw:
        assert raw.read(0) == compress(payload)
    with SliceReader(p, intercept=decompress) as r:
        assert r.read(0) == payload


def test_header_layout(tmp_path):
    p = tmp_path / "slice"
    with SliceWriter(p) as w:
        w.write(b"abc")
        w.write(b"de")
    raw = p.read_bytes()
    index_offset, num = struct.unpack("<qq", raw[:16])
    assert index_offset == 64 + 5
    assert num == 2
    assert raw[64:69] == b"abcde"
    assert struct.unpack("<qqqq", raw[69:]) == (64, 3, 67, 2)


@pytest.mark.parametrize("cache", [False, True])
def test_read_out_of_bounds(tmp_path, cache):
    p = tmp_path / "slice"
    with SliceWriter(p) as w:
        w.write(b"x")
    with SliceReader(p, cache_index=cache) as r:
        with pytest.raises(IndexError):
            r.read(1)
        with pytest.raises(IndexError):
            r.read(-1)


@pytest.mark.parametrize("cache", [False, True])
def test_empty_values_and_partial_range(tmp_path, cache):
    p = tmp_path / "slice"
    values = [b"one", b"", b"three", b"four"]
    with SliceWriter(p) as w:
        for v in values:
            w.write(v)
    with SliceReader(p, cache_index=cache) as r:
        assert [r.read(i) for i in range(4)] == values
        assert list(r.range(1, 3)) == [Value(1, b""), Value(2, b"three")]


def test_range_rejects_bad_bounds(tmp_path):
    p = tmp_path / "slice"
    with SliceWriter(p) as w:
        w.write(b"x")
    with SliceReader(p) as r:
        with pytest.raises(ValueError):
            r.range(-1, -1)
        with pytest.raises(ValueError):
            r.range(0, 2)


@pytest.mark.parametrize("cache", [False, True])
def test_empty_slice(tmp_path, cache):
    p = tmp_path / "slice"
    SliceWriter(p).close()
    with SliceReader(p, cache_index=cache) as r:
        assert len(r) == 0
        assert list(r.range()) == []


def test_write_after_close_fails(tmp_path):
    w = SliceWriter(tmp_path / "slice")
    w.close()
    with pytest.raises(ValueError):
        w.write(b"late")