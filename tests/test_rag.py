import io

import pytest

from antx.models import ChatMessage, ChatPart, Node, ToolCall, ToolResponse
from antx.rag import RagCommand, RagSession, history_to_dicts, last_model_text
from antx.shell import Document, Shell
from antx.suggestion import Suggestion


def mock_response():
    return [ChatMessage(role="model", parts=[ChatPart(text="Mock rag response")])]


class FakeClient:
    def __init__(self, response=None, error=None):
        self.calls = []
        self.response = mock_response() if response is None else response
        self.error = error

    def rag_chat(self, message, options):
        self.calls.append((message, dict(options)))
        if self.error is not None:
            raise self.error
        return self.response


def make_shell(client, lines=None):
    prompts = []
    feed = iter(lines or [])

    def read_line(prompt):
        prompts.append(prompt)
        try:
            return next(feed)
        except StopIteration:
            raise EOFError from None

    shell = Shell(client, out=io.StringIO(), read_line=read_line)
    shell.register(RagCommand(shell))
    return shell, prompts


def test_single_message():
    client = FakeClient()
    shell, _ = make_shell(client)
    shell.execute("rag hello world")
    assert client.calls == [("hello world", {})]
    output = shell.out.getvalue()
    assert "✓ RAG response:" in output
    assert "Mock rag response" in output


def test_location_flag_sends_parent():
    client = FakeClient()
    shell, _ = make_shell(client)
    shell.current_node = Node(uuid="folder-1", title="Docs")
    shell.execute("rag -l hello")
    assert client.calls == [("hello", {"parent": "folder-1"})]
    assert "Processing with RAG (context: Docs)" in shell.out.getvalue()


def test_send_message_returns_history():
    client = FakeClient()
    shell, _ = make_shell(client)
    command = shell.commands["rag"]
    history = command.send_message("hi", [{"role": "user"}], False)
    assert history == [{"role": "model", "parts": [{"text": "Mock rag response"}]}]
    assert client.calls == [("hi", {"history": [{"role": "user"}]})]


def test_send_message_error_returns_none():
    client = FakeClient(error=RuntimeError("down"))
    shell, _ = make_shell(client)
    assert shell.commands["rag"].send_message("hi", None, False) is None
    output = shell.out.getvalue()
    assert "✗ Error processing RAG request" in output
    assert "Error: down" in output


def test_send_message_without_answer():
    client = FakeClient(response=[])
    shell, _ = make_shell(client)
    assert shell.commands["rag"].send_message("hi", None, False) is None
    assert "(no response)" in shell.out.getvalue()


def test_interactive_session_keeps_history_until_exit():
    client = FakeClient()
    shell, prompts = make_shell(client, ["one", "", "two", "exit", "never"])
    shell.execute("rag")
    assert [call[0] for call in client.calls] == ["one", "two"]
    assert "history" not in client.calls[0][1]
    assert client.calls[1][1]["history"] == [
        {"role": "model", "parts": [{"text": "Mock rag response"}]}
    ]
    assert prompts == ["You: "] * 4
    output = shell.out.getvalue()
    assert "Starting interactive RAG session" in output
    assert "Exiting RAG session..." in output


def test_interactive_session_ends_at_end_of_input():
    client = FakeClient()
    shell, prompts = make_shell(client, ["one"])
    shell.execute("rag -l")
    assert len(client.calls) == 1
    assert client.calls[0][1]["parent"] == shell.current_node.uuid
    assert len(prompts) == 2


def test_session_handle():
    client = FakeClient()
    shell, _ = make_shell(client)
    session = RagSession(shell.commands["rag"])
    assert session.handle("  ") is True
    assert client.calls == []
    assert session.handle("question") is True
    assert session.history == history_to_dicts(client.response)
    assert session.handle("exit") is False


def test_last_model_text_skips_models_without_text():
    history = [
        ChatMessage(role="model", parts=[ChatPart(text="first")]),
        ChatMessage(role="user", parts=[ChatPart(text="question")]),
        ChatMessage(role="model", parts=[ChatPart(tool_call=ToolCall("search", {}))]),
    ]
    assert last_model_text(history) == "first"
    assert last_model_text([]) == ""
    assert last_model_text(history[1:]) == ""


def test_history_to_dicts_keeps_every_part_kind():
    history = [
        ChatMessage(
            role="model",
            parts=[
                ChatPart(text="hello"),
                ChatPart(tool_call=ToolCall("search", {"q": "x"})),
                ChatPart(tool_response=ToolResponse("search", "found")),
            ],
        )
    ]
    assert history_to_dicts(history) == [
        {
            "role": "model",
            "parts": [
                {"text": "hello"},
                {"toolCall": {"name": "search", "args": {"q": "x"}}},
                {"toolResponse": {"name": "search", "text": "found"}},
            ],
        }
    ]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("rag -", [Suggestion("-l", "Use current location as context")]),
        ("rag h", [Suggestion("-l", "Use current location as context")]),
        ("rag -l -", []),
        ("rag hello ", []),
        ("rag a b c d", []),
    ],
)
def test_suggest(text, expected):
    shell, _ = make_shell(FakeClient())
    assert shell.commands["rag"].suggest(Document(text)) == expected