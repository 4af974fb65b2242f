"""
Seek support for forward-only byte sources.

Wraps anything with a ``read(n)`` method (a pipe, ``sys.stdin.buffer``, a
socket file) and buffers every byte it pulls so callers can ``seek`` and
``tell`` as if the whole source were in memory. The buffer is never trimmed.
"""

import io

CHUNK_SIZE = 8192


class SeekableReader:
    def __init__(self, inner, chunk_size: int = CHUNK_SIZE):
        self.inner = inner
        self.chunk_size = chunk_size
        self.buffer = bytearray()
        self.position = 0
        self.end_reached = False

    def _fill_chunk(self) -> bool:
        """Pull one chunk from the source; False once it is exhausted."""
        chunk = self.inner.read(self.chunk_size)
        if not chunk:
            self.end_reached = True
            return False
        self.buffer.extend(chunk)
        return True

    def _fill_to(self, size: int) -> None:
        while size > len(self.buffer) and not self.end_reached:
            self._fill_chunk()

    def _drain(self) -> None:
        while not self.end_reached:
            self._fill_chunk()

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            self._drain()
            end = len(self.buffer)
        else:
            self._fill_to(self.position + size)
            end = min(self.position + size, len(self.buffer))
        data = bytes(self.buffer[self.position:end])
        self.position += len(data)
        return data

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            if offset < 0:
                raise ValueError(f"negative seek position {offset}")
            self._fill_to(offset)
            self.position = min(offset, len(self.buffer))
        elif whence == io.SEEK_CUR:
            return self.seek(max(0, self.position + offset), io.SEEK_SET)
        elif whence == io.SEEK_END:
            self._drain()
            self.position = max(0, min(len(self.buffer) + offset, len(self.buffer)))
        else:
            raise ValueError(f"invalid whence ({whence})")
        return self.position

    def tell(self) -> int:
        return self.position

    @property
    def buffer_len(self) -> int:
        return len(self.buffer)
