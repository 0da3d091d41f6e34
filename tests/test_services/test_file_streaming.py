# tests/test_services/test_file_streaming.py

import pytest
from starlette.requests import ClientDisconnect

from glacier.services.streaming import (
    DEFAULT_MIME,
    FileStreamResponse,
    StreamOutcome,
    StreamStorageError,
    build_content_disposition,
    stream_file,
)
from tests.fixtures.asgi import DroppingSend, http_scope, never_disconnects

pytestmark = pytest.mark.anyio


class OutcomeRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, outcome, error):
        self.calls.append((outcome, error))


async def _drain(response: FileStreamResponse) -> bytes:
    out = b""
    async for chunk in response.body_iterator:
        out += chunk
    return out


# ─────────────────────────────────────────────────────────────
# Content-Disposition
# ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "name,expected",
    [
        ("cut.mp4", 'attachment; filename="cut.mp4"'),
        ("My Film (final).mp4", 'attachment; filename="My Film (final).mp4"'),
        ('say "hi".mp4', 'attachment; filename="say \\"hi\\".mp4"'),
        ("a\\b.mp4", 'attachment; filename="a\\\\b.mp4"'),
        ("evil\r\nX-Injected: 1.mp4", 'attachment; filename="evilX-Injected: 1.mp4"'),
    ],
)
def test_ascii_disposition(name, expected):
    assert build_content_disposition(name) == expected


def test_non_ascii_disposition_adds_rfc5987_name():
    value = build_content_disposition("Glacière é.mp4")
    assert value.startswith('attachment; filename="Glacire_.mp4"')
    assert value.endswith("filename*=UTF-8''Glaci%C3%A8re%20%C3%A9.mp4")


# ─────────────────────────────────────────────────────────────
# stream_file
# ─────────────────────────────────────────────────────────────

async def test_stream_file_headers_inline(tmp_path):
    f = tmp_path / "blob"
    f.write_bytes(b"0123456789")

    response = await stream_file(f, "video/mp4")

    assert response.media_type == "video/mp4"
    assert response.headers["content-length"] == "10"
    assert response.headers["content-type"] == "video/mp4"
    assert "content-disposition" not in response.headers
    assert response.attachment_filename is None


async def test_stream_file_attachment_and_default_mime(tmp_path):
    f = tmp_path / "blob"
    f.write_bytes(b"x")

    response = await stream_file(f, None, "cut.mp4")

    assert response.headers["content-type"] == DEFAULT_MIME
    assert response.headers["content-disposition"] == 'attachment; filename="cut.mp4"'
    assert response.attachment_filename == "cut.mp4"


async def test_stream_file_missing(tmp_path):
    with pytest.raises(StreamStorageError) as ei:
        await stream_file(tmp_path / "nope", "image/png")
    assert ei.value.reason == "missing"
    assert ei.value.path == tmp_path / "nope"


async def test_stream_file_directory(tmp_path):
    with pytest.raises(StreamStorageError) as ei:
        await stream_file(tmp_path, "image/png")
    assert ei.value.reason == "not a regular file"


async def test_stream_file_empty_file(tmp_path):
    f = tmp_path / "empty"
    f.write_bytes(b"")
    recorder = OutcomeRecorder()

    response = await stream_file(f, "image/png", on_outcome=recorder)

    assert response.headers["content-length"] == "0"
    assert await _drain(response) == b""
    assert recorder.calls == [(StreamOutcome.COMPLETED, None)]


# ─────────────────────────────────────────────────────────────
# Outcomes
# ─────────────────────────────────────────────────────────────

async def test_completed_outcome_reported_once(tmp_path):
    data = bytes(range(256)) * 40
    f = tmp_path / "blob"
    f.write_bytes(data)
    recorder = OutcomeRecorder()

    response = await stream_file(f, "application/zip", chunk_size=1000, on_outcome=recorder)

    assert await _drain(response) == data
    assert recorder.calls == [(StreamOutcome.COMPLETED, None)]
    assert response.outcome is StreamOutcome.COMPLETED


async def test_early_close_is_client_closed(tmp_path):
    f = tmp_path / "blob"
    f.write_bytes(b"a" * 4096)
    recorder = OutcomeRecorder()

    response = await stream_file(f, "application/zip", chunk_size=1024, on_outcome=recorder)
    first = await response.body_iterator.__anext__()
    await response.body_iterator.aclose()

    assert first == b"a" * 1024
    assert recorder.calls == [(StreamOutcome.CLIENT_CLOSED, None)]


async def test_read_failure_is_io_failure_and_propagates(tmp_path):
    f = tmp_path / "blob"
    f.write_bytes(b"data")
    recorder = OutcomeRecorder()

    response = await stream_file(f, "application/zip", on_outcome=recorder)
    f.unlink()

    with pytest.raises(OSError):
        await _drain(response)

    assert len(recorder.calls) == 1
    outcome, error = recorder.calls[0]
    assert outcome is StreamOutcome.IO_FAILURE
    assert isinstance(error, FileNotFoundError)


async def test_text_mime_is_sent_verbatim(tmp_path):
    f = tmp_path / "notes"
    f.write_bytes(b"plain")

    response = await stream_file(f, "text/plain")

    assert response.headers["content-type"] == "text/plain"
    assert response.media_type == "text/plain"


# ─────────────────────────────────────────────────────────────
# ASGI entry point
# ─────────────────────────────────────────────────────────────

async def test_asgi_send_failure_is_client_closed(tmp_path):
    f = tmp_path / "blob"
    f.write_bytes(b"a" * 4096)
    recorder = OutcomeRecorder()
    send = DroppingSend(keep=1)

    response = await stream_file(f, "application/zip", chunk_size=1024, on_outcome=recorder)
    await response(http_scope(), never_disconnects, send)

    assert [outcome for outcome, _ in recorder.calls] == [StreamOutcome.CLIENT_CLOSED]
    assert response.outcome is StreamOutcome.CLIENT_CLOSED
    assert send.messages[0]["type"] == "http.response.start"
    assert [m["body"] for m in send.messages[1:]] == [b"a" * 1024]


async def test_asgi_read_failure_stays_fatal(tmp_path):
    f = tmp_path / "blob"
    f.write_bytes(b"data")
    recorder = OutcomeRecorder()
    send = DroppingSend(keep=10)

    response = await stream_file(f, "application/zip", on_outcome=recorder)
    f.unlink()

    with pytest.raises(ClientDisconnect):
        await response(http_scope(), never_disconnects, send)

    assert [outcome for outcome, _ in recorder.calls] == [StreamOutcome.IO_FAILURE]
    assert isinstance(recorder.calls[0][1], FileNotFoundError)


async def test_asgi_full_transfer_is_completed(tmp_path):
    f = tmp_path / "blob"
    f.write_bytes(b"b" * 3000)
    recorder = OutcomeRecorder()
    send = DroppingSend(keep=10)

    response = await stream_file(f, "application/zip", chunk_size=1024, on_outcome=recorder)
    await response(http_scope(), never_disconnects, send)

    assert recorder.calls == [(StreamOutcome.COMPLETED, None)]
    assert b"".join(m.get("body", b"") for m in send.messages[1:]) == b"b" * 3000
