"""Completion suggestions for nodes and local files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from antx.models import FOLDER_MIMETYPE, SMART_FOLDER_MIMETYPE, Node

NodePredicate = Callable[[Node], bool]

_SIZE_UNITS = ("B", "K", "M", "G", "T", "P")


@dataclass(frozen=True)
class Suggestion:
    """A completion candidate and the text shown beside it."""

    text: str
    description: str = ""


def node_suggestions(
    nodes: Iterable[Node], word: str, predicate: NodePredicate | None = None
) -> list[Suggestion]:
    """Nodes whose title or uuid starts with word, each uuid once."""
    prefix = word.lower()
    seen: set[str] = set()
    suggestions = []
    for node in nodes:
        if predicate is not None and not predicate(node):
            continue
        if node.uuid in seen:
            continue
        if node.title.lower().startswith(prefix) or node.uuid.lower().startswith(prefix):
            suggestions.append(Suggestion(node.uuid, node.title))
            seen.add(node.uuid)
    return suggestions


def is_folder_node(node: Node) -> bool:
    """True for folders and smart folders."""
    return node.mimetype in (FOLDER_MIMETYPE, SMART_FOLDER_MIMETYPE)


def _expand_home(path: str) -> str:
    if path == "~" or path.startswith("~/"):
        try:
            home = str(Path.home())
        except RuntimeError:
            return path
        return home + path[1:]
    return path


def filesystem_suggestions(partial_path: str) -> list[Suggestion]:
    """Local files and directories that complete partial_path."""
    path = _expand_home(partial_path or ".")

    if path.endswith(os.sep):
        directory, filename = path, ""
    else:
        directory = os.path.dirname(path) or "."
        filename = os.path.basename(path)

    try:
        with os.scandir(directory) as scan:
            entries = sorted(scan, key=lambda entry: entry.name)
    except OSError:
        return []

    suggestions = []
    for entry in entries:
        name = entry.name
        if name.startswith(".") and not filename.startswith("."):
            continue
        if filename and not name.lower().startswith(filename.lower()):
            continue

        full_path = os.path.normpath(os.path.join(directory, name))
        if entry.is_dir(follow_symlinks=False):
            description = "📁 Directory"
            full_path += os.sep
        else:
            try:
                size = entry.stat(follow_symlinks=False).st_size
            except OSError:
                description = "📄 File"
            else:
                description = f"📄 File ({format_file_size(size)})"

        text = f'"{full_path}"' if " " in full_path else full_path
        suggestions.append(Suggestion(text, description))
    return suggestions


def format_file_size(size: int) -> str:
    """Size in bytes with a binary unit, such as "1.5 K"."""
    if size == 0:
        return "0 B"
    value = float(size)
    unit_index = 0
    while value >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    if unit_index == 0:
        return f"{value:.0f} {_SIZE_UNITS[0]}"
    return f"{value:.1f} {_SIZE_UNITS[unit_index]}"