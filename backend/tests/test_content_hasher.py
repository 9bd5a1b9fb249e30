"""Unit tests for single-pass stream hashing."""

import hashlib
import io
import threading

import pytest

from errors import InternalError, RequestCancelledError
from services.content_hasher import DEFAULT_CHUNK_SIZE, ContentHasher


class FailingReader(io.RawIOBase):
    """Returns one chunk, then fails like a dropped network stream."""

    def __init__(self):
        self.calls = 0

    def readable(self):
        return True

    def read(self, size=-1):
        self.calls += 1
        if self.calls == 1:
            return b"x" * 10
        raise ConnectionResetError("connection reset by peer")


class FullDiskWriter(io.BytesIO):
    def write(self, data):
        raise OSError(28, "No space left on device")


@pytest.mark.unit
class TestCopyAndHash:
    def test_hash_and_size_match_content(self):
        data = b"artifact-bytes" * 10000
        sink = io.BytesIO()

        digest = ContentHasher().copy_and_hash(io.BytesIO(data), sink)

        assert digest.sha256 == hashlib.sha256(data).hexdigest()
        assert digest.size == len(data)
        assert sink.getvalue() == data

    def test_empty_stream(self):
        digest = ContentHasher().copy_and_hash(io.BytesIO(b""), io.BytesIO())

        assert digest.size == 0
        assert digest.sha256 == hashlib.sha256(b"").hexdigest()

    def test_sha256_is_lowercase_hex(self):
        digest = ContentHasher().copy_and_hash(io.BytesIO(b"abc"), io.BytesIO())

        assert len(digest.sha256) == 64
        assert digest.sha256 == digest.sha256.lower()
        assert digest.sha256 == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    @pytest.mark.parametrize("chunk_size", [1, 7, DEFAULT_CHUNK_SIZE])
    def test_chunk_size_does_not_change_result(self, chunk_size):
        data = bytes(range(256)) * 41

        digest = ContentHasher(chunk_size=chunk_size).copy_and_hash(io.BytesIO(data), io.BytesIO())

        assert digest.sha256 == hashlib.sha256(data).hexdigest()
        assert digest.size == len(data)

    def test_rejects_non_positive_chunk_size(self):
        with pytest.raises(ValueError):
            ContentHasher(chunk_size=0)

    def test_read_failure_becomes_internal_error(self):
        with pytest.raises(InternalError):
            ContentHasher().copy_and_hash(FailingReader(), io.BytesIO())

    def test_write_failure_becomes_internal_error(self):
        with pytest.raises(InternalError) as exc_info:
            ContentHasher().copy_and_hash(io.BytesIO(b"data"), FullDiskWriter())

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()
        sink = io.BytesIO()

        with pytest.raises(RequestCancelledError):
            ContentHasher().copy_and_hash(io.BytesIO(b"data"), sink, cancel)

        assert sink.getvalue() == b""

    def test_cancelled_mid_stream(self):
        cancel = threading.Event()

        class CancellingReader(io.BytesIO):
            def read(self, size=-1):
                chunk = super().read(size)
                cancel.set()
                return chunk

        sink = io.BytesIO()
        with pytest.raises(RequestCancelledError):
            ContentHasher(chunk_size=4).copy_and_hash(CancellingReader(b"a" * 64), sink, cancel)

        # Only the chunk read before cancellation was copied
        assert sink.getvalue() == b"aaaa"
