"""Typed models for requests, responses and session messages."""

from sitecache.models.http import Request, StoredResponse
from sitecache.models.messages import (
    ForceCheckMessage,
    GetVersionMessage,
    MessageType,
    VersionInfoMessage,
    VersionUpdateMessage,
    parse_control_message,
)

__all__ = [
    "ForceCheckMessage",
    "GetVersionMessage",
    "MessageType",
    "Request",
    "StoredResponse",
    "VersionInfoMessage",
    "VersionUpdateMessage",
    "parse_control_message",
]
