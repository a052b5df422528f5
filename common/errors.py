"""
Session error taxonomy.

Every error is terminal for the session: the acquisition state machine catches
SessionError once, stores its message as the session's fatal error and stops.
"""
from __future__ import annotations

from typing import Optional


class SessionError(Exception):
    """Base class for errors that end a positioning session."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class SensorPermissionError(SessionError):
    pass


class SensorTimeoutError(SessionError):
    pass


class SensorFailureError(SessionError):
    pass


class TransportError(SessionError):
    """Network or HTTP-level failure while fetching the descriptor."""


class EmptyResponseError(SessionError):
    pass


class DescriptorSyntaxError(SessionError):
    """
    Bad field count, unknown command or non-numeric field in a descriptor line.

    Attributes:
        line: the offending line (trimmed)
        token: the bad token (command or field text)
        field: name of the numeric field (lat/lon/x/z/alt), None for command errors
        line_no: 1-based line number in the descriptor text
    """

    def __init__(self, line: str, token: str, field: Optional[str] = None, line_no: int = 0):
        if field is None:
            msg = f"line {line_no} '{line}', bad text: {token}"
        else:
            msg = f"line {line_no} '{line}', bad {field}: {token}"
        super().__init__(msg)
        self.line = line
        self.token = token
        self.field = field
        self.line_no = line_no


class UnresolvedTagError(SessionError):
    def __init__(self, tag: str, line: str = ""):
        msg = f"line '{line}', bad name: {tag}" if line else f"bad name: {tag}"
        super().__init__(msg)
        self.tag = tag
        self.line = line


class InstantiationError(SessionError):
    pass


class EmptyPlacementError(SessionError):
    pass


class SceneSetupError(SessionError):
    """A required scene object (anchor, wrapper template) is missing."""
