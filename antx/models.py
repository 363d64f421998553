"""Data records exchanged with an Antbox server."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

FOLDER_MIMETYPE = "application/vnd.antbox.folder"
SMART_FOLDER_MIMETYPE = "application/vnd.antbox.smartfolder"
ROOT_UUID = "--root--"


@dataclass
class Permissions:
    """Access rights of a folder for each audience."""

    group: list[str] = field(default_factory=list)
    authenticated: list[str] = field(default_factory=list)
    anonymous: list[str] = field(default_factory=list)


@dataclass
class Node:
    """A file, folder or smart folder stored in Antbox."""

    uuid: str = ""
    title: str = ""
    mimetype: str = ""
    parent: str = ""
    owner: str = ""
    group: str = ""
    size: int = 0
    created_at: str = ""
    modified_at: str = ""
    permissions: Permissions = field(default_factory=Permissions)

    def is_folder(self) -> bool:
        """True for a plain folder."""
        return self.mimetype == FOLDER_MIMETYPE

    def is_smart_folder(self) -> bool:
        """True for a smart folder, whose content is computed from filters."""
        return self.mimetype == SMART_FOLDER_MIMETYPE


@dataclass
class User:
    """An Antbox user account."""

    uuid: str = ""
    email: str = ""
    name: str = ""
    groups: list[str] = field(default_factory=list)


@dataclass
class Template:
    """A downloadable template."""

    uuid: str = ""
    mimetype: str = ""
    size: int = 0


@dataclass
class Parameter:
    """A parameter that an action or extension accepts."""

    name: str = ""
    type: str = ""
    description: str = ""
    required: bool = False
    default_value: Any = None


@dataclass
class Feature:
    """An action, extension or AI tool defined on the server."""

    uuid: str = ""
    name: str = ""
    description: str = ""
    expose_as_action: bool = False
    run_manually: bool = False
    parameters: list[Parameter] = field(default_factory=list)
    filters: Any = None


@dataclass
class Aspect:
    """A metadata aspect that can be attached to nodes."""

    uuid: str = ""
    title: str = ""


@dataclass
class Agent:
    """An AI agent defined on the server."""

    uuid: str = ""
    title: str = ""


@dataclass
class ToolCall:
    """A tool invocation requested by a model."""

    name: str = ""
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolResponse:
    """The answer a tool gave back to a model."""

    name: str = ""
    text: str = ""


@dataclass
class ChatPart:
    """One part of a chat message: text, a tool call or a tool response."""

    text: str | None = None
    tool_call: ToolCall | None = None
    tool_response: ToolResponse | None = None


@dataclass
class ChatMessage:
    """A chat message with its role ("user", "model", ...) and parts."""

    role: str = ""
    parts: list[ChatPart] = field(default_factory=list)