from __future__ import annotations

import asyncio
import base64

import pytest

from src.errors import UpstreamHandshakeError
from src.upstream import UpstreamConnector
from src.knowledge.table import KNOWLEDGE
from src.session import ClientChannel, ClientRecord, SessionRegistry
from src.protocol.client import AudioChunk, StartSession, ContextUpdate, UnrecognizedFrame
from src.handlers.websocket.dispatch import HANDLERS

from tests.utils import FakeUpstream, FakeClientWebSocket, wait_until, make_settings


def _setup(settings=None, upstream: FakeUpstream | None = None, screen: str | None = "add_member"):
    upstream = upstream or FakeUpstream()
    registry = SessionRegistry(settings=settings or make_settings(), connect_fn=upstream.connect)
    client_ws = FakeClientWebSocket()
    record = registry.register_client(ClientChannel(client_ws), screen)
    return registry, record, client_ws, upstream


async def _send(registry: SessionRegistry, record: ClientRecord, frame) -> None:
    await HANDLERS[type(frame)](registry, record, frame)
    if isinstance(frame, StartSession) and record.session is not None:
        await record.session.wait_started()


async def _ready_session(registry, record, upstream):
    await _send(registry, record, StartSession())
    sock = upstream.sockets[0]
    sock.push({"setupComplete": {}})
    session = registry.get_session(record.connection_id)
    await wait_until(lambda: session.ready)
    return session, sock


@pytest.mark.asyncio
async def test_missing_config_refuses_session() -> None:
    registry, record, client_ws, upstream = _setup(make_settings(host=""))

    await _send(registry, record, StartSession())

    assert client_ws.frames[0] == {
        "type": "error",
        "message": "AI service connection details are missing.",
        "critical": True,
        "code": "configuration_error",
    }
    assert upstream.urls == []
    assert registry.session_count() == 0


@pytest.mark.asyncio
async def test_setup_frame_uses_knowledge_for_screen() -> None:
    registry, record, client_ws, upstream = _setup()

    await _send(registry, record, StartSession())

    assert client_ws.frames[0] == {"type": "status", "message": "Connecting to AI service..."}
    assert upstream.urls == ["wss://upstream.test/ws/test.BidiGenerateContent?key=test-key"]
    setup = upstream.sockets[0].sent_json()[0]["setup"]
    assert setup["model"] == "models/test-model"
    assert setup["generationConfig"] == {"responseModalities": ["TEXT", "AUDIO"]}
    assert setup["systemInstruction"]["parts"][0]["text"].startswith(KNOWLEDGE["add_member"])


@pytest.mark.asyncio
async def test_context_before_start_changes_initial_prompt() -> None:
    registry, record, _client_ws, upstream = _setup(screen=None)
    assert record.context_label == "initial"

    await _send(registry, record, ContextUpdate(context="book_class"))
    assert record.dropped_frames == 1

    await _send(registry, record, StartSession())
    setup = upstream.sockets[0].sent_json()[0]["setup"]
    assert setup["systemInstruction"]["parts"][0]["text"].startswith(KNOWLEDGE["book_class"])


@pytest.mark.asyncio
async def test_audio_before_ready_is_dropped_then_forwarded_in_order() -> None:
    registry, record, client_ws, upstream = _setup()
    await _send(registry, record, StartSession())
    sock = upstream.sockets[0]

    await _send(registry, record, AudioChunk(b"early"))
    assert len(sock.sent) == 1

    sock.push({"setupComplete": {}})
    session = registry.get_session(record.connection_id)
    await wait_until(lambda: session.ready)
    ready = client_ws.of_type("ai_ready")
    assert len(ready) == 1
    assert ready[0]["context"].startswith(KNOWLEDGE["add_member"])

    for chunk in (b"A", b"B", b"C"):
        await _send(registry, record, AudioChunk(chunk))

    forwarded = [base64.b64decode(m["realtimeInput"]["media_chunks"][0]) for m in sock.sent_json()[1:]]
    assert forwarded == [b"A", b"B", b"C"]


@pytest.mark.asyncio
async def test_audio_without_session_is_counted() -> None:
    registry, record, _client_ws, upstream = _setup()
    await _send(registry, record, AudioChunk(b"x"))
    await _send(registry, record, AudioChunk(b"y"))
    assert record.dropped_frames == 2
    assert upstream.urls == []


@pytest.mark.asyncio
async def test_upstream_error_frame_closes_session() -> None:
    registry, record, client_ws, upstream = _setup()
    session, sock = await _ready_session(registry, record, upstream)

    sock.push({"error": {"message": "quota exceeded"}})
    await wait_until(lambda: session.closed)

    assert client_ws.of_type("error")[-1] == {
        "type": "error",
        "message": "AI service error: quota exceeded",
        "critical": True,
        "code": "upstream_error",
    }
    assert sock.close_calls == [(1000, "Session terminated by server")]
    assert registry.get_session(record.connection_id) is None


@pytest.mark.asyncio
async def test_client_drop_closes_upstream_once() -> None:
    registry, record, _client_ws, upstream = _setup()
    session, sock = await _ready_session(registry, record, upstream)

    await registry.unregister_client(record.connection_id)
    assert sock.close_calls == [(1000, "Session terminated by server")]
    assert registry.client_count() == 0
    assert registry.session_count() == 0

    await session.close()
    await registry.unregister_client(record.connection_id)
    assert len(sock.close_calls) == 1


@pytest.mark.asyncio
async def test_second_start_keeps_existing_session() -> None:
    registry, record, _client_ws, upstream = _setup()
    session, _sock = await _ready_session(registry, record, upstream)

    await _send(registry, record, StartSession())
    assert registry.get_session(record.connection_id) is session
    assert len(upstream.urls) == 1


@pytest.mark.asyncio
async def test_unexpected_upstream_close_reports_and_allows_restart() -> None:
    registry, record, client_ws, upstream = _setup()
    session, sock = await _ready_session(registry, record, upstream)

    sock.push_close(1011, "internal")
    await wait_until(lambda: session.closed)

    assert client_ws.of_type("error")[-1] == {
        "type": "error",
        "message": "AI service connection closed unexpectedly. Code: 1011",
        "critical": False,
        "code": "upstream_closed",
    }
    assert client_ws.close_calls == []
    assert registry.get_session(record.connection_id) is None

    await _send(registry, record, StartSession())
    assert len(upstream.urls) == 2
    assert registry.get_session(record.connection_id) is not session


@pytest.mark.asyncio
async def test_normal_upstream_close_is_silent() -> None:
    registry, record, client_ws, upstream = _setup()
    session, sock = await _ready_session(registry, record, upstream)

    sock.push_close(1000, "bye")
    await wait_until(lambda: session.closed)
    assert client_ws.of_type("error") == []


@pytest.mark.asyncio
async def test_turn_complete_emits_tts_directive() -> None:
    registry, record, client_ws, upstream = _setup()
    _session, sock = await _ready_session(registry, record, upstream)

    sock.push({"serverContent": {"modelTurn": {"parts": [{"text": "Open "}]}}})
    sock.push({"serverContent": {"modelTurn": {"parts": [{"text": "Members."}]}, "turnComplete": True}})
    await wait_until(lambda: bool(client_ws.of_type("tts")))

    assert len(client_ws.of_type("serverContent")) == 2
    assert client_ws.of_type("tts") == [{"type": "tts", "text": "Open Members."}]


@pytest.mark.asyncio
async def test_tts_directive_can_be_disabled() -> None:
    registry, record, client_ws, upstream = _setup(make_settings(tts_directives=False))
    _session, sock = await _ready_session(registry, record, upstream)

    sock.push({"serverContent": {"modelTurn": {"parts": [{"text": "Hi"}]}, "turnComplete": True}})
    await wait_until(lambda: bool(client_ws.of_type("serverContent")))
    assert client_ws.of_type("tts") == []


@pytest.mark.asyncio
async def test_tool_calls_are_proxied_and_unknown_frames_dropped() -> None:
    registry, record, client_ws, upstream = _setup()
    _session, sock = await _ready_session(registry, record, upstream)
    before = len(client_ws.frames)

    sock.push({"usageMetadata": {"totalTokenCount": 3}})
    sock.push_raw("not json")
    sock.push({"toolCall": {"functionCalls": [{"name": "open_page"}]}})
    sock.push({"toolCallCancellation": {"ids": ["1"]}})
    await wait_until(lambda: bool(client_ws.of_type("toolCallCancellation")))

    assert client_ws.frames[before:] == [
        {"type": "toolCall", "toolCall": {"functionCalls": [{"name": "open_page"}]}},
        {"type": "toolCallCancellation", "toolCallCancellation": {"ids": ["1"]}},
    ]


@pytest.mark.asyncio
async def test_handshake_failure_reports_connection_error() -> None:
    registry, record, client_ws, _upstream = _setup(upstream=FakeUpstream(fail=OSError("connection refused")))

    await _send(registry, record, StartSession())

    assert client_ws.of_type("error") == [
        {
            "type": "error",
            "message": "AI service connection error: connection refused",
            "critical": False,
            "code": "upstream_connection_error",
        }
    ]
    assert registry.session_count() == 0


@pytest.mark.asyncio
async def test_unrecognized_client_frame_is_ignored() -> None:
    registry, record, client_ws, upstream = _setup()
    await _send(registry, record, UnrecognizedFrame(reason="bad", tag="mute"))
    assert client_ws.frames == []
    assert upstream.urls == []


@pytest.mark.asyncio
async def test_close_all_shuts_every_session() -> None:
    upstream = FakeUpstream()
    registry, first, _ws, _ = _setup(upstream=upstream)
    second = registry.register_client(ClientChannel(FakeClientWebSocket()), None)
    await _send(registry, first, StartSession())
    await _send(registry, second, StartSession())
    assert registry.session_count() == 2

    await registry.close_all()
    assert registry.session_count() == 0
    assert all(sock.closed for sock in upstream.sockets)


@pytest.mark.asyncio
async def test_upstream_open_timeout_reports_connection_error() -> None:
    registry, record, client_ws, _upstream = _setup(
        make_settings(open_timeout_s=0.05), upstream=FakeUpstream(hang=True)
    )

    await _send(registry, record, StartSession())

    errors = client_ws.of_type("error")
    assert len(errors) == 1
    assert errors[0]["code"] == "upstream_connection_error"
    assert errors[0]["critical"] is False
    assert errors[0]["message"].startswith("AI service connection error: ")
    assert registry.session_count() == 0


@pytest.mark.asyncio
async def test_connector_open_timeout_raises_handshake_error() -> None:
    upstream = FakeUpstream(hang=True)

    async def _noop_event(_event) -> None:
        return None

    async def _noop_closed(_code: int, _reason: str) -> None:
        return None

    connector = UpstreamConnector(
        settings=make_settings(open_timeout_s=0.05).upstream,
        session_id="s1",
        on_event=_noop_event,
        on_closed=_noop_closed,
        connect_fn=upstream.connect,
    )
    with pytest.raises(UpstreamHandshakeError):
        await connector.open(system_instruction="hi")
    assert connector.ready is False


@pytest.mark.asyncio
async def test_receive_loop_is_not_blocked_while_upstream_connects() -> None:
    registry, record, client_ws, upstream = _setup(
        make_settings(open_timeout_s=30.0), upstream=FakeUpstream(hang=True)
    )

    await HANDLERS[StartSession](registry, record, StartSession())
    session = record.session
    assert session is not None
    await wait_until(lambda: bool(upstream.urls))

    await asyncio.wait_for(_send(registry, record, AudioChunk(b"x")), timeout=0.5)
    assert session.ready is False

    await asyncio.wait_for(registry.unregister_client(record.connection_id), timeout=0.5)
    assert session.closed is True
    assert registry.session_count() == 0
    assert client_ws.of_type("error") == []
    assert upstream.sockets == []
