"""Incremental HTTP/1.1 request framer.

Accumulates socket bytes for one connection and recognizes a single complete
request: request line, headers, and a body sized by Content-Length. Anything
short of that (missing terminator, bad request line, short body) means
"wait for more bytes", never an error.

One framer per connection, one request per framer. No chunked encoding.
"""

from claude_time.pipeline.event_types import HTTPRequest

_HEADER_TERMINATOR = b"\r\n\r\n"
_CONTENT_LENGTH = "content-length:"


def parse_content_length(header_lines: list[str]) -> int:
    """First Content-Length header value. Missing, bad, or negative → 0."""
    for line in header_lines:
        if not line.lower().startswith(_CONTENT_LENGTH):
            continue
        raw = line[len(_CONTENT_LENGTH):].strip()
        try:
            length = int(raw)
        except ValueError:
            return 0
        return max(length, 0)
    return 0


class HTTPRequestFramer:
    """Reframes an arbitrary chunking of a byte stream into one HTTPRequest."""

    def __init__(self):
        self._buffer = bytearray()
        self._scan_from = 0
        # (method, path, content length, body offset) once the head parses.
        self._head: tuple[str, str, int, int] | None = None
        self._complete = False

    @property
    def buffered(self) -> int:
        """Bytes accumulated so far."""
        return len(self._buffer)

    @property
    def complete(self) -> bool:
        return self._complete

    def feed(self, chunk: bytes) -> HTTPRequest | None:
        """Append a chunk. Returns the request once, when it becomes complete."""
        if self._complete:
            return None
        self._buffer.extend(chunk)

        if self._head is None:
            self._head = self._parse_head()
            if self._head is None:
                return None

        method, path, content_length, body_start = self._head
        if len(self._buffer) - body_start < content_length:
            return None

        self._complete = True
        body = bytes(self._buffer[body_start:body_start + content_length])
        return HTTPRequest(method=method, path=path, body=body)

    def _parse_head(self) -> tuple[str, str, int, int] | None:
        """Locate the header block and parse it. None means keep waiting."""
        idx = self._buffer.find(_HEADER_TERMINATOR, self._scan_from)
        if idx < 0:
            # The terminator may straddle the next chunk boundary.
            self._scan_from = max(0, len(self._buffer) - len(_HEADER_TERMINATOR) + 1)
            return None
        self._scan_from = idx

        try:
            head = self._buffer[:idx].decode("utf-8")
        except UnicodeDecodeError:
            return None

        lines = head.split("\r\n")
        parts = lines[0].split(" ")
        if len(parts) < 2:
            return None
        return parts[0], parts[1], parse_content_length(lines[1:]), idx + len(_HEADER_TERMINATOR)
