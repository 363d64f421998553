"""Commands that inspect, change and transfer individual nodes."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from antx.models import Node
from antx.shell import Command, Document
from antx.suggestion import (
    Suggestion,
    filesystem_suggestions,
    format_file_size,
    node_suggestions,
)

_UPLOAD_USAGE = (
    "Usage: upload [-f|-a|-i|-u <uuid>] <file-path>",
    "  -f: Upload as feature",
    "  -a: Upload as aspect",
    "  -i: Upload as AI agent",
    "  -u <uuid>: Upload with given uuid existing file",
)

_UPLOAD_FLAGS = (
    Suggestion("-f", "Upload as feature"),
    Suggestion("-a", "Upload as aspect"),
    Suggestion("-i", "Upload as AI agent"),
    Suggestion("-u", "Update existing file"),
)


class _NodeCommand(Command):
    def _print(self, *parts: Any) -> None:
        print(*parts, file=self.shell.out)

    def _field(self, label: str, value: Any) -> None:
        self._print(f"{label:<11}: {value}")


class PwdCommand(_NodeCommand):
    """Show the current location as a path."""

    name = "pwd"
    description = "Show current location as path"

    def execute(self, args: list[str]) -> None:
        try:
            path = self.shell.breadcrumb_path()
        except Exception as exc:
            self._print("Error getting breadcrumbs:", exc)
            self._print(
                f"{self.shell.current_node.uuid}  {self.shell.current_folder_name()}"
            )
            return
        self._print(path)

    def suggest(self, document: Document) -> list[Suggestion]:
        return []


class RenameCommand(_NodeCommand):
    """Change the name of a node."""

    name = "rename"
    description = "Change the name of a node"

    def execute(self, args: list[str]) -> None:
        if len(args) != 2:
            self._print("Usage: rename <uuid> <new-name>")
            return
        uuid, new_name = args
        try:
            self.shell.client.change_node_name(uuid, new_name)
        except Exception as exc:
            self._print("Error:", exc)
            return
        self._print(f"Node {uuid} renamed to '{new_name}' successfully")

    def suggest(self, document: Document) -> list[Suggestion]:
        if len(document.text_before_cursor.split(" ")) == 2:
            return node_suggestions(
                self.shell.current_nodes, document.word_before_cursor()
            )
        return []


class RmCommand(_NodeCommand):
    """Remove a node."""

    name = "rm"
    description = "Remove a node"

    def execute(self, args: list[str]) -> None:
        if not args:
            self._print("Usage: rm <uuid>")
            return
        try:
            self.shell.client.remove_node(args[0])
        except Exception as exc:
            self._print("Error:", exc)
            return
        self._print(f"Node {args[0]} removed successfully")

    def suggest(self, document: Document) -> list[Suggestion]:
        return node_suggestions(self.shell.current_nodes, document.word_before_cursor())


class StatCommand(_NodeCommand):
    """Show the properties of a node."""

    name = "stat"
    description = "Show node properties"

    def execute(self, args: list[str]) -> None:
        if not args:
            self._print("Usage: stat <uuid>")
            return
        try:
            node = self.shell.client.get_node(args[0])
        except Exception as exc:
            self._print("Error:", exc)
            return

        self._field("UUID", node.uuid)
        self._field("Title", node.title)
        self._field("Mimetype", node.mimetype)
        self._field("Parent", node.parent)
        self._field("Owner", node.owner)
        if node.group:
            self._field("Group", node.group)

        if node.mimetype.endswith("folder"):
            self._field("Permissions", "")
            audiences = (
                ("Group", node.permissions.group),
                ("Auth", node.permissions.authenticated),
                ("Anonymous", node.permissions.anonymous),
            )
            for label, rights in audiences:
                if rights:
                    self._print(f"  {label:<9}: {', '.join(rights)}")

        self._field("Size", format_file_size(node.size))
        self._field("Created at", node.created_at)
        self._field("Modified at", node.modified_at)

    def suggest(self, document: Document) -> list[Suggestion]:
        return node_suggestions(self.shell.current_nodes, document.word_before_cursor())


class WhoAmICommand(_NodeCommand):
    """Show the authenticated user."""

    name = "whoami"
    description = "Show the current authenticated user"

    def execute(self, args: list[str]) -> None:
        if args:
            self._print("Usage: whoami")
            return
        try:
            user = self.shell.client.get_current_user()
        except Exception as exc:
            self._print("Error:", exc)
            return
        self._print("Current user:")
        self._print(f"  Email : {user.email}")
        if user.name:
            self._print(f"  Name  : {user.name}")
        if user.groups:
            self._print(f"  Groups: {', '.join(user.groups)}")

    def suggest(self, document: Document) -> list[Suggestion]:
        return []


class TemplatesCommand(_NodeCommand):
    """List templates, or download one into the Downloads folder."""

    name = "templates"
    description = "List all available templates or download a specific template"

    def execute(self, args: list[str]) -> None:
        if not args:
            self._list()
            return
        self._download(args[0])

    def _list(self) -> None:
        try:
            templates = self.shell.client.list_templates()
        except Exception as exc:
            self._print("Error listing templates:", exc)
            return
        if not templates:
            self._print("No templates available.")
            return
        self._print("Available templates:")
        self._print()
        for template in templates:
            self._print(f"UUID: {template.uuid}")
            self._print(f"  Mimetype: {template.mimetype}")
            self._print(f"  Size: {template.size} bytes")
            self._print()

    def _download(self, template_uuid: str) -> None:
        try:
            data = self.shell.client.get_template(template_uuid)
        except Exception as exc:
            self._print("Error getting template:", exc)
            return
        try:
            home = Path.home()
        except RuntimeError as exc:
            self._print("Error getting home directory:", exc)
            return

        downloads = home / "Downloads"
        try:
            downloads.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._print("Error creating Downloads directory:", exc)
            return

        target = downloads / f"template_{template_uuid}.txt"
        try:
            target.write_bytes(data)
        except OSError as exc:
            self._print("Error writing template file:", exc)
            return
        self._print(f"Template downloaded to {target}")

    def suggest(self, document: Document) -> list[Suggestion]:
        if len(document.text_before_cursor.split(" ")) > 2:
            return []
        prefix = document.word_before_cursor().lower()
        try:
            templates = self.shell.client.list_templates()
        except Exception:
            return []
        return [
            Suggestion(
                template.uuid,
                f"Mimetype: {template.mimetype}, Size: {template.size} bytes",
            )
            for template in templates
            if template.uuid.lower().startswith(prefix)
        ]


class UploadKind(Enum):
    """What an uploaded file becomes on the server."""

    FILE = "file"
    FEATURE = "feature"
    ASPECT = "aspect"
    AGENT = "agent"
    WITH_METADATA = "with_metadata"


@dataclass(frozen=True)
class UploadRequest:
    """A parsed upload command line."""

    kind: UploadKind
    path: str
    uuid: str = ""


_FLAG_KINDS = {
    "-f": UploadKind.FEATURE,
    "-a": UploadKind.ASPECT,
    "-i": UploadKind.AGENT,
}


def parse_upload_args(args: list[str]) -> UploadRequest:
    """Parse upload flags and path; raise ValueError when they are incomplete."""
    kind = UploadKind.FILE
    uuid = ""
    path = ""
    index = 0
    while index < len(args):
        arg = args[index]
        if arg in _FLAG_KINDS:
            kind = _FLAG_KINDS[arg]
            index += 1
        elif arg == "-u":
            if index + 1 >= len(args):
                raise ValueError("Usage: upload -u <uuid> <file-path>")
            kind = UploadKind.WITH_METADATA
            uuid = args[index + 1]
            index += 2
        else:
            path = " ".join(args[index:])
            break

    if not path:
        raise ValueError("Error: file path is required")
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        path = path[1:-1]
    return UploadRequest(kind, path, uuid)


def _downloads_dir() -> str:
    try:
        return str(Path.home() / "Downloads")
    except RuntimeError:
        return ""


def _not_folder(node: Node) -> bool:
    return not node.is_folder()


class UploadCommand(_NodeCommand):
    """Upload a file as a node, feature, aspect or agent."""

    name = "upload"
    description = "Upload a file to a folder, feature, or aspect"

    def execute(self, args: list[str]) -> None:
        if not args:
            for line in _UPLOAD_USAGE:
                self._print(line)
            return
        try:
            request = parse_upload_args(args)
        except ValueError as exc:
            self._print(str(exc))
            return

        path = request.path
        self._print("filePath:", path)
        client = self.shell.client
        try:
            if request.kind is UploadKind.FEATURE:
                feature = client.upload_feature(path)
                message = f"Feature {path} uploaded successfully with UUID {feature.uuid}"
            elif request.kind is UploadKind.ASPECT:
                aspect = client.upload_aspect(path)
                message = f"Aspect {path} uploaded successfully with UUID {aspect.uuid}"
            elif request.kind is UploadKind.AGENT:
                agent = client.upload_agent(path)
                message = f"AI Agent {path} uploaded successfully with UUID {agent.uuid}"
            elif request.kind is UploadKind.WITH_METADATA:
                node = client.update_file(request.uuid, path)
                message = f"File {path} updated successfully for node {node.uuid}"
            else:
                title = Path(path).name or os.sep
                node = client.create_file(
                    path,
                    title,
                    "application/octet-stream",
                    self.shell.current_node.uuid,
                )
                message = f"File {path} uploaded successfully to node {node.uuid}"
        except Exception as exc:
            self._print("Error:", exc)
            return
        self._print(message)

    def suggest(self, document: Document) -> list[Suggestion]:
        words = document.text_before_cursor.split(" ")
        word = document.word_before_cursor()

        if len(words) == 2:
            if word.startswith("-"):
                return list(_UPLOAD_FLAGS)
            return filesystem_suggestions(word or _downloads_dir())

        if len(words) > 2:
            for index, arg in enumerate(words[1:]):
                if arg == "-u" and index + 2 == len(words) - 1:
                    return node_suggestions(self.shell.current_nodes, word, _not_folder)
            return filesystem_suggestions(word or _downloads_dir())

        return []