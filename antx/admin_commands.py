"""Commands that manage the shell itself: cache, sessions and status."""

from __future__ import annotations

from typing import Any

from antx import session as sessions
from antx.filters import _format_value
from antx.shell import CacheReloadError, Command, Document
from antx.suggestion import Suggestion

_RULE = "=" * 40

_RELOAD_USAGE = (
    "Usage: reload",
    "",
    "Description:",
    "  Refresh the cached lists of aspects, actions, extensions, and agents",
    "  from the server. This is useful when new resources have been added",
    "  or modified on the server since the CLI was started.",
    "",
    "Example:",
    "  reload",
)

_STATUS_USAGE = (
    "Usage: status",
    "",
    "Description:",
    "  Display statistics about cached resources loaded at startup.",
    "  Shows the number of aspects, actions, extensions, and agents",
    "  currently available for auto-completion suggestions.",
    "",
    "Example:",
    "  status",
)

_SESSIONS_USAGE = (
    "Usage: sessions <subcommand> [args]",
    "",
    "Subcommands:",
    "  list                    List all active sessions",
    "  show <session_id>       Show conversation history for a session",
    "  clear <session_id>      Clear history for a session (keeps session active)",
    "  clear all               Clear history for all sessions",
    "  remove <session_id>     Remove a session completely",
    "  remove all              Remove all sessions",
    "",
    "Examples:",
    "  sessions list",
    "  sessions show my-chat",
    "  sessions clear my-chat",
    "  sessions remove old-session",
)

_SUBCOMMANDS = (
    Suggestion("list", "List all active sessions"),
    Suggestion("show", "Show conversation history for a session"),
    Suggestion("clear", "Clear history for a session"),
    Suggestion("remove", "Remove a session completely"),
)

_MAX_SHOWN_CONTENT = 200
_RECENT_SESSIONS = 5


class _AdminCommand(Command):
    def _print(self, *parts: Any) -> None:
        print(*parts, file=self.shell.out)

    def _print_lines(self, lines: tuple[str, ...]) -> None:
        for line in lines:
            self._print(line)


def _message_count(session_id: str) -> int:
    return len(sessions.get_or_create_session(session_id).get_history())


class ReloadCommand(_AdminCommand):
    """Fetch the cached resources again from the server."""

    name = "reload"
    description = "Reload cached data from server"

    def execute(self, args: list[str]) -> None:
        if args:
            self._print_lines(_RELOAD_USAGE)
            return
        try:
            self.shell.reload_cached_data()
        except CacheReloadError as exc:
            self._print(f"Reload completed with warnings: {exc}")
            return

        shell = self.shell
        self._print("Successfully reloaded all cached data:")
        self._print(f"  - {len(shell.cached_aspects)} aspects")
        self._print(f"  - {len(shell.cached_actions)} actions")
        self._print(f"  - {len(shell.cached_extensions)} extensions")
        self._print(f"  - {len(shell.cached_agents)} agents")

    def suggest(self, document: Document) -> list[Suggestion]:
        return []


class SessionsCommand(_AdminCommand):
    """List, show, clear and remove conversation sessions."""

    name = "sessions"
    description = "Manage conversation sessions"

    def execute(self, args: list[str]) -> None:
        if not args:
            self._print_lines(_SESSIONS_USAGE)
            return

        subcommand, rest = args[0], args[1:]
        if subcommand == "list":
            self._list()
        elif subcommand == "clear":
            if not rest:
                self._print("Usage: sessions clear <session_id>")
                self._print("       sessions clear all")
            elif rest[0] == "all":
                self._clear_all()
            else:
                self._clear(rest[0])
        elif subcommand == "show":
            if not rest:
                self._print("Usage: sessions show <session_id>")
            else:
                self._show(rest[0])
        elif subcommand == "remove":
            if not rest:
                self._print("Usage: sessions remove <session_id>")
                self._print("       sessions remove all")
            elif rest[0] == "all":
                self._remove_all()
            else:
                self._remove(rest[0])
        else:
            self._print(f"Unknown subcommand: {subcommand}")
            self._print_lines(_SESSIONS_USAGE)

    def _list(self) -> None:
        ids = sessions.list_active_sessions()
        if not ids:
            self._print("No active sessions.")
            return
        self._print(f"Active sessions ({len(ids)}):")
        for session_id in ids:
            self._print(f"  {session_id} ({_message_count(session_id)} messages)")

    def _show(self, session_id: str) -> None:
        history = sessions.get_or_create_session(session_id).get_history()
        if not history:
            self._print(f"Session '{session_id}' has no conversation history.")
            return

        self._print(f"Conversation history for session '{session_id}':")
        self._print("-" * 50)
        last = len(history) - 1
        for number, message in enumerate(history, start=1):
            content = message.content
            if isinstance(content, str):
                if len(content) > _MAX_SHOWN_CONTENT:
                    content = content[:_MAX_SHOWN_CONTENT] + "..."
            else:
                content = _format_value(content)
            self._print(f"[{number}] {message.role.upper()}: {content}")
            if number - 1 < last:
                self._print()

    def _clear(self, session_id: str) -> None:
        if sessions.get_or_create_session(session_id).is_empty():
            self._print(f"Session '{session_id}' is already empty.")
            return
        sessions.clear_session(session_id)
        self._print(f"Cleared conversation history for session '{session_id}'.")

    def _clear_all(self) -> None:
        ids = sessions.list_active_sessions()
        if not ids:
            self._print("No active sessions to clear.")
            return
        cleared = 0
        for session_id in ids:
            if not sessions.is_session_empty(session_id):
                sessions.clear_session(session_id)
                cleared += 1
        self._print(f"Cleared conversation history for {cleared} session(s).")

    def _remove(self, session_id: str) -> None:
        if session_id not in sessions.list_active_sessions():
            self._print(f"Session '{session_id}' not found.")
            return
        sessions.remove_session(session_id)
        self._print(f"Removed session '{session_id}'.")

    def _remove_all(self) -> None:
        ids = sessions.list_active_sessions()
        if not ids:
            self._print("No active sessions to remove.")
            return
        for session_id in ids:
            sessions.remove_session(session_id)
        self._print(f"Removed {len(ids)} session(s).")

    def suggest(self, document: Document) -> list[Suggestion]:
        text = document.text_before_cursor
        words = text.split()
        if not words:
            return []

        arg_count = len(words) - 1
        if not text.endswith(" ") and len(words) > 1:
            arg_count = len(words) - 2

        prefix = document.word_before_cursor().lower()
        if arg_count == 0:
            return [s for s in _SUBCOMMANDS if s.text.lower().startswith(prefix)]

        if arg_count == 1 and len(words) >= 2:
            subcommand = words[1]
            if subcommand not in ("show", "clear", "remove"):
                return []
            suggestions = []
            if subcommand in ("clear", "remove") and "all".startswith(prefix):
                suggestions.append(Suggestion("all", "All sessions"))
            for session_id in sessions.list_active_sessions():
                if session_id.lower().startswith(prefix):
                    suggestions.append(
                        Suggestion(session_id, f"{_message_count(session_id)} messages")
                    )
            return suggestions

        return []


class StatusCommand(_AdminCommand):
    """Show the location, cached resources and conversation sessions."""

    name = "status"
    description = "Show cached data statistics"

    def execute(self, args: list[str]) -> None:
        if args:
            self._print_lines(_STATUS_USAGE)
            return

        shell = self.shell
        node = shell.current_node
        self._print("Current Location:")
        self._print(_RULE)
        self._print(f"  Current node: {shell.current_folder_name()} ({node.uuid})")
        if node.parent:
            self._print(f"  Parent node:  {node.parent}")
        self._print(f"  Nodes here:   {len(shell.current_nodes)}")
        self._print()

        counts = {
            "Aspects:    ": len(shell.cached_aspects),
            "Actions:    ": len(shell.cached_actions),
            "Extensions: ": len(shell.cached_extensions),
            "Agents:     ": len(shell.cached_agents),
        }
        self._print("Cached Resource Statistics:")
        self._print(_RULE)
        for label, count in counts.items():
            self._print(f"  {label}{count}")
        self._print()

        total = sum(counts.values())
        self._print(f"Total resources: {total}")

        self._print()
        self._print("Configuration:")
        self._print(_RULE)
        self._print(f"  History:     {len(shell.history)} commands saved")

        self._print_sessions()

        if total == 0:
            self._print()
            self._print("Note: No resources loaded. This might indicate:")
            self._print("  - Connection issues during startup")
            self._print("  - No resources available on the server")
            self._print("  - Authentication problems")
            self._print()
            self._print("Try running 'reload' to refresh the cache.")

    def _print_sessions(self) -> None:
        ids = sessions.list_active_sessions()
        self._print()
        self._print("Conversation Sessions:")
        self._print(_RULE)
        self._print(f"  Active sessions: {len(ids)}")

        if not ids:
            self._print("  No active conversation sessions")
            self._print("  Start a conversation using 'chat' or 'rag' with -c <session_id>")
            return

        total_messages = sum(_message_count(session_id) for session_id in ids)
        self._print(f"  Total messages:  {total_messages}")
        self._print()
        self._print("  Recent sessions:")
        for session_id in ids[:_RECENT_SESSIONS]:
            self._print(f"    {session_id} ({_message_count(session_id)} messages)")
        if len(ids) > _RECENT_SESSIONS:
            hidden = len(ids) - _RECENT_SESSIONS
            self._print(f"    ... and {hidden} more (use 'sessions list' to see all)")

    def suggest(self, document: Document) -> list[Suggestion]:
        return []