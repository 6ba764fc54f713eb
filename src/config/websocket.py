"""WebSocket protocol configuration and constants."""

from __future__ import annotations

# Client-facing endpoint (the browser client connects to the server root).
WS_ENDPOINT_PATH = "/"
WS_SCREEN_QUERY_PARAM = "screen"

# Message type tags (client -> relay)
WS_MSG_START_SESSION = "start_ai_session"
WS_MSG_CONTEXT = "context"

# Message type tags (relay -> client)
WS_MSG_AI_READY = "ai_ready"
WS_MSG_SERVER_CONTENT = "serverContent"
WS_MSG_STATUS = "status"
WS_MSG_ERROR = "error"
WS_MSG_TTS = "tts"
WS_MSG_TOOL_CALL = "toolCall"
WS_MSG_TOOL_CALL_CANCELLATION = "toolCallCancellation"

# Close codes
WS_CLOSE_NORMAL_CODE = 1000
WS_CLOSE_ABNORMAL_CODE = 1006

WS_CLOSE_SESSION_TERMINATED_REASON = "Session terminated by server"
WS_CLOSE_CLIENT_DISCONNECTED_REASON = "Client disconnected"
WS_CLOSE_CLIENT_ABORTED_REASON = "Closing connection"

# Errors (error frame `code` values)
WS_ERROR_CONFIGURATION = "configuration_error"
WS_ERROR_UPSTREAM = "upstream_error"
WS_ERROR_UPSTREAM_CONNECTION = "upstream_connection_error"
WS_ERROR_UPSTREAM_CLOSED = "upstream_closed"

__all__ = [
    "WS_ENDPOINT_PATH",
    "WS_SCREEN_QUERY_PARAM",
    "WS_MSG_START_SESSION",
    "WS_MSG_CONTEXT",
    "WS_MSG_AI_READY",
    "WS_MSG_SERVER_CONTENT",
    "WS_MSG_STATUS",
    "WS_MSG_ERROR",
    "WS_MSG_TTS",
    "WS_MSG_TOOL_CALL",
    "WS_MSG_TOOL_CALL_CANCELLATION",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_ABNORMAL_CODE",
    "WS_CLOSE_SESSION_TERMINATED_REASON",
    "WS_CLOSE_CLIENT_DISCONNECTED_REASON",
    "WS_CLOSE_CLIENT_ABORTED_REASON",
    "WS_ERROR_CONFIGURATION",
    "WS_ERROR_UPSTREAM",
    "WS_ERROR_UPSTREAM_CONNECTION",
    "WS_ERROR_UPSTREAM_CLOSED",
]
