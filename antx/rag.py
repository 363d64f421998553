"""The rag command: questions answered from the stored documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from antx.models import ChatMessage
from antx.shell import Command, Document
from antx.suggestion import Suggestion

_ASSISTANT = "\033[32mAssistant:\033[0m"


def last_model_text(history: Iterable[ChatMessage]) -> str:
    """Text of the latest model message that has any, or an empty string."""
    for message in reversed(list(history)):
        if message.role != "model":
            continue
        text = next((part.text for part in message.parts if part.text is not None), "")
        if text:
            return text
    return ""


def history_to_dicts(history: Iterable[ChatMessage]) -> list[dict[str, Any]]:
    """Chat history as plain mappings, as the server expects it back."""
    converted = []
    for message in history:
        parts = []
        for part in message.parts:
            mapping: dict[str, Any] = {}
            if part.text is not None:
                mapping["text"] = part.text
            if part.tool_call is not None:
                mapping["toolCall"] = {
                    "name": part.tool_call.name,
                    "args": part.tool_call.args,
                }
            if part.tool_response is not None:
                mapping["toolResponse"] = {
                    "name": part.tool_response.name,
                    "text": part.tool_response.text,
                }
            parts.append(mapping)
        converted.append({"role": message.role, "parts": parts})
    return converted


class RagCommand(Command):
    """Send a message to the RAG agent, once or in an interactive session."""

    name = "rag"
    description = "Send message to RAG agent"

    def _print(self, *parts: Any) -> None:
        print(*parts, file=self.shell.out)

    def execute(self, args: list[str]) -> None:
        use_location = False
        index = 0
        while index < len(args) and args[index] == "-l":
            use_location = True
            index += 1
        message_args = args[index:]

        if not message_args:
            self._interactive(use_location)
            return
        self.send_message(" ".join(message_args), None, use_location)

    def suggest(self, document: Document) -> list[Suggestion]:
        text = document.text_before_cursor
        words = text.split()
        if not words:
            return []
        if words[-1].startswith("-") or (len(words) <= 3 and not text.endswith(" ")):
            if "-l" in text:
                return []
            return [Suggestion("-l", "Use current location as context")]
        return []

    def _interactive(self, use_location: bool) -> None:
        self._print("Starting interactive RAG session")
        if use_location:
            self._print(f"Using location context: {self.shell.current_folder_name()}")
        self._print("Type 'exit' or press Ctrl+D to exit the session.")
        self._print()

        session = RagSession(self, use_location)
        while True:
            try:
                line = self.shell.read_line("You: ")
            except EOFError:
                self._print()
                return
            except KeyboardInterrupt:
                self._print()
                continue
            if not session.handle(line):
                return

    def send_message(
        self,
        message: str,
        history: list[dict[str, Any]] | None,
        use_location: bool,
    ) -> list[dict[str, Any]] | None:
        """Send one message and show the answer; return the new history or None."""
        options: dict[str, Any] = {}
        if use_location:
            options["parent"] = self.shell.current_node.uuid
        if history is not None:
            options["history"] = history

        loading = "Processing with RAG"
        if use_location:
            loading = f"Processing with RAG (context: {self.shell.current_folder_name()})"
        self._print(f"{loading}...")

        try:
            chat_history = self.shell.client.rag_chat(message, options)
        except Exception as exc:
            self._print("✗ Error processing RAG request")
            self._print("Error:", exc)
            return None

        self._print("✓ RAG response:")
        text = last_model_text(chat_history)
        if text:
            self._print(f"{_ASSISTANT} {text.strip(' ')}")
        else:
            self._print(f"{_ASSISTANT} (no response)")

        return history_to_dicts(chat_history) or None


@dataclass
class RagSession:
    """State of an interactive RAG conversation."""

    command: RagCommand
    use_location: bool = False
    history: list[dict[str, Any]] | None = field(default=None)

    def handle(self, line: str) -> bool:
        """Process one typed line; return False when the session should end."""
        line = line.strip()
        if line == "exit":
            print("Exiting RAG session...", file=self.command.shell.out)
            return False
        if not line:
            return True
        history = self.command.send_message(line, self.history, self.use_location)
        if history is not None:
            self.history = history
        return True