"""Wire protocol constants shared by the relay server and client."""

from __future__ import annotations

KEY_TYPE = "type"

# Handshake
MSG_CONNECTION_READY = "connection-ready"
MSG_NEW_CONNECTION = "new-connection"
MSG_RECONNECT = "reconnect"
MSG_CONNECTED = "connected"
MSG_RECONNECTED = "reconnected"

# Pairing
MSG_SET_ROLE = "set-role"
MSG_ROLE_SET = "role-set"
MSG_PAIRED = "paired"
MSG_PARTNER_DISCONNECTED = "partner-disconnected"
MSG_PARTNER_RECONNECTED = "partner-reconnected"

# Text relay
MSG_SEND_QUESTION = "send-question"
MSG_QUESTION_RECEIVED = "question-received"
MSG_SEND_ANSWER = "send-answer"
MSG_ANSWER_RECEIVED = "answer-received"

# Audio control (binary audio travels outside JSON)
MSG_START_AUDIO = "start-audio"
MSG_AUDIO_STARTED = "audio-started"
MSG_STOP_AUDIO = "stop-audio"
MSG_AUDIO_STOPPED = "audio-stopped"
MSG_AUDIO_STREAM = "audio-stream"
MSG_AUDIO_RECEIVED = "audio-received"

# Keepalive / errors
MSG_PING = "ping"
MSG_PONG = "pong"
MSG_ERROR = "error"

ROLE_ASKER = "asker"
ROLE_HELPER = "helper"

# Binary frame: [1 byte audio type][raw PCM payload]
AUDIO_TYPE_SYSTEM = "system"
AUDIO_TYPE_MIC = "mic"
AUDIO_TYPE_BY_BYTE = {0: AUDIO_TYPE_SYSTEM, 1: AUDIO_TYPE_MIC}
AUDIO_BYTE_BY_TYPE = {name: byte for byte, name in AUDIO_TYPE_BY_BYTE.items()}

# Error strings (payload of error{error})
ERROR_INVALID_MESSAGE = "Invalid message format"
ERROR_INVALID_ROLE = 'Invalid role. Must be "asker" or "helper"'
ERROR_ASKER_NOT_FOUND = "Asker with that UID not found"
ERROR_NO_HELPER_PAIRED = "No helper paired"
ERROR_NO_ASKER_PAIRED = "No asker paired"
ERROR_HANDSHAKE_COMPLETED = "Handshake already completed"
ERROR_UNKNOWN_TYPE_PREFIX = "Unknown message type"

# Close codes
CLOSE_TRY_AGAIN_LATER_CODE = 1013
CLOSE_HANDSHAKE_TIMEOUT_CODE = 4008
CLOSE_SUPERSEDED_CODE = 4009

CLOSE_HANDSHAKE_TIMEOUT_REASON = "handshake timeout"
CLOSE_SUPERSEDED_REASON = "superseded by a newer connection"
CLOSE_AT_CAPACITY_REASON = "server at capacity"

__all__ = [
    "AUDIO_BYTE_BY_TYPE",
    "AUDIO_TYPE_BY_BYTE",
    "AUDIO_TYPE_MIC",
    "AUDIO_TYPE_SYSTEM",
    "CLOSE_AT_CAPACITY_REASON",
    "CLOSE_HANDSHAKE_TIMEOUT_CODE",
    "CLOSE_HANDSHAKE_TIMEOUT_REASON",
    "CLOSE_SUPERSEDED_CODE",
    "CLOSE_SUPERSEDED_REASON",
    "CLOSE_TRY_AGAIN_LATER_CODE",
    "ERROR_ASKER_NOT_FOUND",
    "ERROR_HANDSHAKE_COMPLETED",
    "ERROR_INVALID_MESSAGE",
    "ERROR_INVALID_ROLE",
    "ERROR_NO_ASKER_PAIRED",
    "ERROR_NO_HELPER_PAIRED",
    "ERROR_UNKNOWN_TYPE_PREFIX",
    "KEY_TYPE",
    "MSG_ANSWER_RECEIVED",
    "MSG_AUDIO_RECEIVED",
    "MSG_AUDIO_STARTED",
    "MSG_AUDIO_STOPPED",
    "MSG_AUDIO_STREAM",
    "MSG_CONNECTED",
    "MSG_CONNECTION_READY",
    "MSG_ERROR",
    "MSG_NEW_CONNECTION",
    "MSG_PAIRED",
    "MSG_PARTNER_DISCONNECTED",
    "MSG_PARTNER_RECONNECTED",
    "MSG_PING",
    "MSG_PONG",
    "MSG_QUESTION_RECEIVED",
    "MSG_RECONNECT",
    "MSG_RECONNECTED",
    "MSG_ROLE_SET",
    "MSG_SEND_ANSWER",
    "MSG_SEND_QUESTION",
    "MSG_SET_ROLE",
    "MSG_START_AUDIO",
    "MSG_STOP_AUDIO",
    "ROLE_ASKER",
    "ROLE_HELPER",
]
