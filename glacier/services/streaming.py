from __future__ import annotations

"""
Glacier • File streaming
========================

The byte-transfer primitive behind the delivery endpoints.

- `stream_file()` stats the file *before* any header is sent, so a missing or
  unreadable file can still become a clean 500.
- `FileStreamResponse` reads the file in chunks with anyio and reports exactly
  one `StreamOutcome` through the `on_outcome` callback:

    COMPLETED      every byte was handed to the server
    CLIENT_CLOSED  the client went away / the task was cancelled
    IO_FAILURE     reading the file failed mid-transfer (the error propagates
                   so the server aborts the connection instead of ending a
                   truncated body cleanly)

- The file handle is closed on every exit path, shielded from cancellation.
"""

import re
import stat
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, Callable, Mapping, Optional, Union
from urllib.parse import quote

import anyio
from starlette.requests import ClientDisconnect
from starlette.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from glacier.api.http_utils import sanitize_filename

DEFAULT_MIME = "application/octet-stream"
DEFAULT_CHUNK_SIZE = 64 * 1024

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


class StreamOutcome(str, Enum):
    COMPLETED = "completed"
    CLIENT_CLOSED = "client_closed"
    IO_FAILURE = "io_failure"


OutcomeCallback = Callable[[StreamOutcome, Optional[BaseException]], None]


class StreamStorageError(Exception):
    """The file backing a resource cannot be served (missing, not a file, unreadable)."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


def build_content_disposition(filename: str) -> str:
    """`attachment` disposition naming `filename`.

    ASCII names are sent as a quoted-string as-is (quotes and backslashes
    escaped). Non-ASCII names get a sanitized ASCII `filename` plus an
    RFC 5987 `filename*`.
    """
    cleaned = _CONTROL_CHARS_RE.sub("", filename)
    if cleaned.isascii():
        quoted = cleaned.replace("\\", "\\\\").replace('"', '\\"')
        return f'attachment; filename="{quoted}"'
    fallback = sanitize_filename(cleaned, fallback="download")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(cleaned, safe='')}"


class FileStreamResponse(StreamingResponse):
    """Chunked file response with an explicit transfer outcome."""

    def __init__(
        self,
        path: Union[str, Path],
        size: int,
        *,
        media_type: Optional[str] = None,
        filename: Optional[str] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        on_outcome: Optional[OutcomeCallback] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.path = Path(path)
        self.size = size
        self.attachment_filename = filename
        self.chunk_size = chunk_size
        self.outcome: Optional[StreamOutcome] = None
        self._on_outcome = on_outcome

        mime = media_type or DEFAULT_MIME
        merged = dict(headers or {})
        # Explicit header: starlette would append a charset to text/* types
        merged["content-type"] = mime
        merged["content-length"] = str(size)
        if filename is not None:
            merged["content-disposition"] = build_content_disposition(filename)

        self._chunks = self._iter_file()
        super().__init__(self._chunks, media_type=mime, headers=merged)

    def _report(self, outcome: StreamOutcome, error: Optional[BaseException] = None) -> None:
        if self.outcome is not None:
            return
        self.outcome = outcome
        if self._on_outcome is not None:
            self._on_outcome(outcome, error)

    async def _iter_file(self) -> AsyncIterator[bytes]:
        fh = None
        try:
            fh = await anyio.open_file(self.path, "rb")
            while True:
                chunk = await fh.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk
        except OSError as e:
            self._report(StreamOutcome.IO_FAILURE, e)
            raise
        else:
            self._report(StreamOutcome.COMPLETED)
        finally:
            # Still unreported here means cancellation or an early close
            self._report(StreamOutcome.CLIENT_CLOSED)
            if fh is not None:
                with anyio.CancelScope(shield=True):
                    await fh.aclose()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        except ClientDisconnect as e:
            # Starlette reports a send-side OSError the same way; a read failure stays fatal
            if self.outcome is StreamOutcome.IO_FAILURE:
                raise
            self._report(StreamOutcome.CLIENT_CLOSED, e)
        finally:
            with anyio.CancelScope(shield=True):
                await self._chunks.aclose()


async def stream_file(
    path: Union[str, Path],
    mime: Optional[str],
    filename: Optional[str] = None,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    on_outcome: Optional[OutcomeCallback] = None,
) -> FileStreamResponse:
    """Build a streaming response for `path`.

    `filename` switches the response to attachment disposition; `None` streams
    inline. Raises `StreamStorageError` when the file cannot be served.
    """
    try:
        st = await anyio.Path(path).stat()
    except FileNotFoundError:
        raise StreamStorageError(Path(path), "missing")
    except OSError:
        raise StreamStorageError(Path(path), "unreadable")
    if not stat.S_ISREG(st.st_mode):
        raise StreamStorageError(Path(path), "not a regular file")

    return FileStreamResponse(
        path,
        st.st_size,
        media_type=mime,
        filename=filename,
        chunk_size=chunk_size,
        on_outcome=on_outcome,
    )


__all__ = [
    "StreamOutcome",
    "StreamStorageError",
    "FileStreamResponse",
    "build_content_disposition",
    "stream_file",
    "DEFAULT_MIME",
]
