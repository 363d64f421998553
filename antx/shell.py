"""The interactive shell: command dispatch, completion and cached resources."""

from __future__ import annotations

import builtins
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TextIO

from antx.models import (
    FOLDER_MIMETYPE,
    ROOT_UUID,
    Agent,
    Aspect,
    ChatMessage,
    Feature,
    Node,
    Template,
    User,
)
from antx.suggestion import Suggestion


@dataclass(frozen=True)
class Document:
    """The line being edited, the cursor position and whether Tab was pressed."""

    text: str = ""
    cursor_position: int | None = None
    tab: bool = False

    @property
    def text_before_cursor(self) -> str:
        if self.cursor_position is None:
            return self.text
        return self.text[: self.cursor_position]

    def word_before_cursor(self) -> str:
        """The text between the last space and the cursor."""
        return self.text_before_cursor.rsplit(" ", 1)[-1]


class Command(ABC):
    """A shell command with a name, a description and completion."""

    name: str = ""
    description: str = ""

    def __init__(self, shell: Shell) -> None:
        self.shell = shell

    @abstractmethod
    def execute(self, args: list[str]) -> None:
        """Run the command with its already resolved arguments."""

    def suggest(self, document: Document) -> list[Suggestion]:
        """Completion candidates for the arguments; none by default."""
        return []


class AntboxClient(Protocol):
    """The server operations the shell and its commands rely on."""

    def login(self) -> None: ...

    def get_current_user(self) -> User: ...

    def get_node(self, uuid: str) -> Node: ...

    def list_nodes(self, parent: str) -> list[Node]: ...

    def evaluate_node(self, uuid: str) -> list[Node]: ...

    def get_breadcrumbs(self, uuid: str) -> list[Node]: ...

    def remove_node(self, uuid: str) -> None: ...

    def change_node_name(self, uuid: str, new_name: str) -> None: ...

    def list_aspects(self) -> list[Aspect]: ...

    def list_actions(self) -> list[Feature]: ...

    def list_extensions(self) -> list[Feature]: ...

    def list_agents(self) -> list[Agent]: ...

    def list_templates(self) -> list[Template]: ...

    def get_template(self, uuid: str) -> bytes: ...

    def run_action(
        self, uuid: str, uuids: list[str], parameters: dict[str, Any]
    ) -> dict[str, Any]: ...

    def rag_chat(self, message: str, options: dict[str, Any]) -> list[ChatMessage]: ...

    def upload_feature(self, file_path: str) -> Feature: ...

    def upload_aspect(self, file_path: str) -> Aspect: ...

    def upload_agent(self, file_path: str) -> Agent: ...

    def update_file(self, uuid: str, file_path: str) -> Node: ...

    def create_file(
        self, file_path: str, title: str, mimetype: str, parent: str
    ) -> Node: ...


class CacheReloadError(Exception):
    """Some cached resources could not be fetched from the server."""

    def __init__(self, failed: list[str], errors: list[str]) -> None:
        super().__init__(f"{len(failed)} resources failed to load")
        self.failed = failed
        self.errors = errors


def _root_node() -> Node:
    return Node(uuid=ROOT_UUID, title="root", mimetype=FOLDER_MIMETYPE)


class Shell:
    """Holds the session state and dispatches typed lines to commands."""

    def __init__(
        self,
        client: AntboxClient,
        out: TextIO | None = None,
        read_line: Callable[[str], str] | None = None,
    ) -> None:
        self.client = client
        self.out = out if out is not None else sys.stdout
        self.read_line = read_line if read_line is not None else builtins.input
        self.commands: dict[str, Command] = {}
        self.current_node: Node = _root_node()
        self.current_nodes: list[Node] = []
        self.history: list[str] = []
        self.cached_aspects: list[Aspect] = []
        self.cached_actions: list[Feature] = []
        self.cached_extensions: list[Feature] = []
        self.cached_agents: list[Agent] = []
        self._matches: list[str] = []

    def _print(self, *parts: Any, end: str = "\n") -> None:
        print(*parts, end=end, file=self.out)

    def register(self, command: Command) -> None:
        """Make a command available under its name."""
        self.commands[command.name] = command

    def _all_commands(self, prefix: str = "") -> list[Suggestion]:
        return [
            Suggestion(name, self.commands[name].description)
            for name in sorted(self.commands)
            if name.startswith(prefix)
        ]

    def execute(self, line: str) -> None:
        """Run one typed line."""
        line = line.strip()
        name, *args = line.split(" ")
        args = [
            arg if name == "cd" and arg == ".." else self.resolve_alias(arg)
            for arg in args
        ]

        command = self.commands.get(name)
        if command is not None:
            command.execute(args)
        else:
            self._print("Unknown command: " + name)

        if line:
            self.history.append(line)
        self._print("")

    def complete(self, document: Document) -> list[Suggestion]:
        """Completion candidates for the text before the cursor."""
        text = document.text_before_cursor

        if document.tab:
            words = text.split(" ")
            name = words[0].strip()
            if not text.strip():
                return self._all_commands()
            if len(words) == 1 and not text.endswith(" "):
                return self._all_commands(name)
            command = self.commands.get(name)
            if command is not None:
                return command.suggest(document)
            return self._all_commands()

        if not text.strip():
            return []

        words = text.split(" ")
        name = words[0]

        if len(words) == 1:
            if name in self.commands:
                return []
            return [s for s in self._all_commands(name) if s.text != name]

        command = self.commands.get(name)
        if command is None:
            return []
        # A finished argument (trailing space) or repeated spaces hide the list.
        if "  " in text or text.endswith(" "):
            return []
        return command.suggest(document)

    def resolve_alias(self, arg: str) -> str:
        """Map "." to the current node and ".." to its parent."""
        if arg == ".":
            return self.current_node.uuid
        if arg == "..":
            return self.current_node.parent or ROOT_UUID
        return arg

    def current_folder_name(self) -> str:
        """Display name of the current folder."""
        if self.current_node.uuid == ROOT_UUID:
            return "root"
        return self.current_node.title

    def breadcrumb_path(self) -> str:
        """Path of the current folder built from the server's breadcrumbs."""
        titles = [
            node.title
            for node in self.client.get_breadcrumbs(self.current_node.uuid)
            if node.title
        ]
        return "/" + "/".join(titles)

    def initialize(self) -> None:
        """Start at the root folder and load the cached resources."""
        self._print("Initializing... ", end="")
        self.current_node = _root_node()
        self.history = []
        try:
            self.current_nodes = self.client.list_nodes(ROOT_UUID)
        except Exception:
            pass
        self.load_cached_data()
        self._print("✓ Ready")

    def _resources(self) -> list[tuple[str, Callable[[], list[Any]], str]]:
        return [
            ("aspects", self.client.list_aspects, "cached_aspects"),
            ("actions", self.client.list_actions, "cached_actions"),
            ("extensions", self.client.list_extensions, "cached_extensions"),
            ("agents", self.client.list_agents, "cached_agents"),
        ]

    def _fetch_resources(self) -> tuple[list[str], list[str], list[str]]:
        loaded: list[str] = []
        failed: list[str] = []
        errors: list[str] = []
        for label, fetch, attribute in self._resources():
            try:
                items = fetch()
            except Exception as exc:
                failed.append(label)
                errors.append(f"{label}: {exc}")
            else:
                setattr(self, attribute, items)
                loaded.append(f"{len(items)} {label}")
        return loaded, failed, errors

    def load_cached_data(self) -> list[str]:
        """Fetch aspects, actions, extensions and agents; return what failed."""
        _, failed, _ = self._fetch_resources()
        if failed:
            self._print(f" ✗ Failed: {', '.join(failed)}", end="")
        return failed

    def reload_cached_data(self) -> None:
        """Fetch the cached resources again, raising CacheReloadError on failures."""
        self._print("Reloading resources from server... ", end="")
        loaded, failed, errors = self._fetch_resources()
        if not failed:
            self._print(f"done ({', '.join(loaded)})")
            return
        self._print("done with errors")
        if loaded:
            self._print(f"  Successfully loaded: {', '.join(loaded)}")
        self._print(f"  Failed to load: {', '.join(failed)}")
        for message in errors:
            self._print(f"    {message}")
        raise CacheReloadError(failed, errors)

    def _show_location(self) -> None:
        try:
            path = self.breadcrumb_path()
        except Exception:
            path = self.current_folder_name()
        self._print(f"Current location: {path}\n")

    def _readline_complete(self, text: str, state: int) -> str | None:
        import readline

        if state == 0:
            buffer = readline.get_line_buffer()[: readline.get_endidx()]
            self._matches = [s.text for s in self.complete(Document(buffer, tab=True))]
        return self._matches[state] if state < len(self._matches) else None

    def _install_readline(self) -> None:
        try:
            import readline
        except ImportError:
            return
        readline.set_completer_delims(" ")
        readline.set_completer(self._readline_complete)
        readline.parse_and_bind("tab: complete")

    def run(self) -> None:
        """Initialize, then read and execute lines until end of input."""
        self.initialize()
        self._show_location()
        if "ls" in self.commands:
            self.commands["ls"].execute([])

        if self.read_line is builtins.input:
            self._install_readline()

        while True:
            try:
                line = self.read_line(f"{self.current_folder_name()} # ")
            except EOFError:
                self._print("")
                break
            except KeyboardInterrupt:
                self._print("")
                continue
            self.execute(line)