"""Messages exchanged between the worker and connected sessions."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class MessageType(StrEnum):
    FORCE_CHECK = "FORCE_CHECK"
    FORCE_VERSION_CHECK = "FORCE_VERSION_CHECK"
    GET_VERSION = "GET_VERSION"
    VERSION_INFO = "VERSION_INFO"
    VERSION_UPDATE = "VERSION_UPDATE"


class ForceCheckMessage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["FORCE_CHECK", "FORCE_VERSION_CHECK"]


class GetVersionMessage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["GET_VERSION"]


class VersionInfoMessage(BaseModel):
    """Reply to ``GET_VERSION``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["VERSION_INFO"] = "VERSION_INFO"
    version: str | None = None


class VersionUpdateMessage(BaseModel):
    """Broadcast once per version transition."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["VERSION_UPDATE"] = "VERSION_UPDATE"
    version: str


ControlMessage = Annotated[
    ForceCheckMessage | GetVersionMessage,
    Field(discriminator="type"),
]

_CONTROL_ADAPTER: TypeAdapter[ForceCheckMessage | GetVersionMessage] = TypeAdapter(ControlMessage)


def parse_control_message(data: Any) -> ForceCheckMessage | GetVersionMessage | None:
    """Parse a session -> worker message; ``None`` for anything unrecognised."""
    if not isinstance(data, dict):
        return None
    try:
        return _CONTROL_ADAPTER.validate_python(data)
    except ValidationError:
        return None
