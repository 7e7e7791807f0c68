"""Shared error codes, user-facing messages and speech pipeline exceptions."""

from __future__ import annotations

DEVICE_UNAVAILABLE = "DEVICE_UNAVAILABLE"
SESSION_BUSY = "SESSION_BUSY"
ENCODE_ERROR = "ENCODE_ERROR"
NETWORK_ERROR = "NETWORK_ERROR"
ASR_PROTOCOL_ERROR = "ASR_PROTOCOL_ERROR"
SERVICE_REJECTED = "SERVICE_REJECTED"
NO_MATCH = "NO_MATCH"
OK = "OK"

ERROR_MESSAGES = {
    DEVICE_UNAVAILABLE: "Microphone could not be opened.",
    SESSION_BUSY: "Previous voice command is still being processed.",
    ENCODE_ERROR: "Audio could not be encoded.",
    NETWORK_ERROR: "Speech service unreachable, please retry.",
    ASR_PROTOCOL_ERROR: "Speech service response format is invalid.",
    SERVICE_REJECTED: "Speech service could not process the audio.",
    NO_MATCH: "No command recognized.",
}

REASON_NETWORK = "network"
REASON_MALFORMED = "malformed"
REASON_REJECTED = "rejected"

_REASON_CODES = {
    REASON_NETWORK: NETWORK_ERROR,
    REASON_MALFORMED: ASR_PROTOCOL_ERROR,
    REASON_REJECTED: SERVICE_REJECTED,
}


class SpeechError(Exception):
    code = ASR_PROTOCOL_ERROR

    def __init__(self, message: str = "") -> None:
        super().__init__(message or ERROR_MESSAGES.get(self.code, self.code))
        self.message = str(self.args[0])


class DeviceUnavailableError(SpeechError):
    code = DEVICE_UNAVAILABLE


class SessionBusyError(SpeechError):
    code = SESSION_BUSY


class EncodeError(SpeechError):
    code = ENCODE_ERROR


class TranscriptionError(SpeechError):
    def __init__(self, reason: str, message: str = "") -> None:
        self.reason = reason
        self.code = _REASON_CODES.get(reason, ASR_PROTOCOL_ERROR)
        super().__init__(message)
