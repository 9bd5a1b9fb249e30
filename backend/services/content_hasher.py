"""Single-pass SHA-256 hashing of a stream while it is copied to a sink."""

import hashlib
import threading
from dataclasses import dataclass
from typing import BinaryIO, Optional

from errors import InternalError, RequestCancelledError

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ContentDigest:
    sha256: str
    size: int


class ContentHasher:
    """Copies a stream of unknown length into a sink, hashing every byte once.

    Only one chunk is held in memory at a time and the source is read exactly
    once. Whatever has been written to the sink when an error is raised is
    garbage; the caller owns the sink and must discard it.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def copy_and_hash(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        cancel_event: Optional[threading.Event] = None,
    ) -> ContentDigest:
        digest = hashlib.sha256()
        size = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise RequestCancelledError()

            try:
                chunk = source.read(self.chunk_size)
            except Exception as exc:
                # Storage SDK streams raise their own exception types mid-read
                raise InternalError("failed to read artifact stream") from exc
            if not chunk:
                break

            digest.update(chunk)
            try:
                sink.write(chunk)
            except OSError as exc:
                raise InternalError("failed to buffer artifact") from exc
            size += len(chunk)

        try:
            sink.flush()
        except OSError as exc:
            raise InternalError("failed to buffer artifact") from exc

        return ContentDigest(sha256=digest.hexdigest(), size=size)
