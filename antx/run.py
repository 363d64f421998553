"""The run command: execute an action on a node."""

from __future__ import annotations

from typing import Any

from antx.filters import _format_value, node_matches_filters, parse_parameters
from antx.models import Feature, Node
from antx.shell import Command, Document
from antx.suggestion import Suggestion, node_suggestions

_USAGE = (
    "Usage: run <action_uuid> <node_uuid> [param=value...]",
    "",
    "Arguments:",
    "  action_uuid: UUID of the action to run",
    "  node_uuid: UUID of the node to run the action on",
    "  param=value: Optional parameters in key=value format",
    "",
    "Examples:",
    "  run abc123 def456",
    "  run abc123 def456 format=pdf quality=high",
)

_COMMON_PARAMETERS = (
    ("format", "Output format parameter"),
    ("quality", "Quality parameter"),
    ("size", "Size parameter"),
    ("mode", "Mode parameter"),
)


class RunCommand(Command):
    """Run an action on a node with optional parameters."""

    name = "run"
    description = "Run an action on a node with optional parameters"

    def _print(self, *parts: Any) -> None:
        print(*parts, file=self.shell.out)

    def execute(self, args: list[str]) -> None:
        if len(args) < 2:
            for line in _USAGE:
                self._print(line)
            return

        action_uuid, node_uuid = args[0], args[1]
        parameters, ignored = parse_parameters(args[2:])
        for arg in ignored:
            self._print(
                f"Warning: Ignoring invalid parameter format: {arg} (expected key=value)"
            )

        try:
            result = self.shell.client.run_action(action_uuid, [node_uuid], parameters)
        except Exception as exc:
            self._print("Error running action:", exc)
            return

        self._print("Action executed successfully:")
        for key, value in result.items():
            self._print(f"  {key}: {_format_value(value)}")

    def suggest(self, document: Document) -> list[Suggestion]:
        text = document.text_before_cursor
        words = text.split()
        if not words:
            return []

        arg_count = len(words) - 1
        if not text.endswith(" ") and len(words) > 1:
            arg_count = len(words) - 2

        word = document.word_before_cursor()
        if arg_count == 0:
            return self._action_suggestions(word)
        if arg_count == 1:
            return self._node_suggestions(word, words[1])
        if len(words) >= 3:
            return self._parameter_suggestions(word, words[1])
        return []

    def _find_action(self, action_uuid: str) -> Feature | None:
        return next(
            (action for action in self.shell.cached_actions if action.uuid == action_uuid),
            None,
        )

    def _action_suggestions(self, word: str) -> list[Suggestion]:
        prefix = word.lower()
        suggestions = []
        for action in self.shell.cached_actions:
            if not (action.expose_as_action and action.run_manually):
                continue
            if action.uuid.lower().startswith(prefix) or action.name.lower().startswith(prefix):
                description = action.name
                if action.description:
                    description = f"{action.name} - {action.description}"
                suggestions.append(Suggestion(action.uuid, description))
        return suggestions

    def _node_suggestions(self, word: str, action_uuid: str) -> list[Suggestion]:
        action = self._find_action(action_uuid)
        if action is None or action.filters is None:
            return node_suggestions(self.shell.current_nodes, word)
        filters = action.filters

        def matches(node: Node) -> bool:
            return node_matches_filters(node, filters)

        return node_suggestions(self.shell.current_nodes, word, matches)

    def _parameter_suggestions(self, word: str, action_uuid: str) -> list[Suggestion]:
        current = word.strip()
        if "=" in current:
            return []
        prefix = current.lower()

        action = self._find_action(action_uuid)
        if action is not None and action.parameters:
            suggestions = []
            for param in action.parameters:
                if not param.name.lower().startswith(prefix):
                    continue
                description = f"{param.description} ({param.type})"
                if param.required:
                    description += " - Required"
                if param.default_value is not None:
                    description += f" - Default: {_format_value(param.default_value)}"
                suggestions.append(Suggestion(param.name + "=", description))
            return suggestions

        return [
            Suggestion(name + "=", description)
            for name, description in _COMMON_PARAMETERS
            if name.startswith(prefix)
        ]