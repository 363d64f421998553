import io

import pytest

from antx.models import (
    FOLDER_MIMETYPE,
    ROOT_UUID,
    Agent,
    Aspect,
    Feature,
    Node,
)
from antx.shell import CacheReloadError, Command, Document, Shell
from antx.suggestion import is_folder_node, node_suggestions

COMMAND_NAMES = [
    "ls", "rm", "mkdir", "mksmart", "mv", "cd", "upload", "exec", "exit",
    "extensions", "help", "history", "pwd", "stat", "status", "find",
    "reload", "rename", "chat", "answer", "rag", "docs", "download",
    "templates", "agents", "actions", "aliases", "cp", "run",
]


class FakeClient:
    def __init__(self, failing=()):
        self.failing = set(failing)

    def _check(self, name):
        if name in self.failing:
            raise RuntimeError(f"{name} unavailable")

    def list_nodes(self, parent):
        self._check("nodes")
        return [Node(uuid="test-uuid", title="test-title", mimetype=FOLDER_MIMETYPE)]

    def get_breadcrumbs(self, uuid):
        self._check("breadcrumbs")
        return [
            Node(uuid=ROOT_UUID, title="root"),
            Node(uuid="test-uuid", title="test-title", parent=ROOT_UUID),
        ]

    def list_aspects(self):
        self._check("aspects")
        return [Aspect(uuid="aspect-uuid", title="Test Aspect")]

    def list_actions(self):
        self._check("actions")
        return [Feature(uuid="action-uuid", name="Test Action")]

    def list_extensions(self):
        self._check("extensions")
        return [Feature(uuid="extension-uuid", name="Test Extension")]

    def list_agents(self):
        self._check("agents")
        return [Agent(uuid="agent-uuid", title="Test Agent")]


class RecordingCommand(Command):
    def __init__(self, shell, name):
        super().__init__(shell)
        self.name = name
        self.description = f"{name} command"
        self.calls = []

    def execute(self, args):
        self.calls.append(list(args))


class FolderCommand(RecordingCommand):
    def suggest(self, document):
        return node_suggestions(
            self.shell.current_nodes, document.word_before_cursor(), is_folder_node
        )


class NodeCommand(RecordingCommand):
    def suggest(self, document):
        return node_suggestions(self.shell.current_nodes, document.word_before_cursor())


def make_shell(client=None):
    out = io.StringIO()
    shell = Shell(client or FakeClient(), out=out)
    for name in COMMAND_NAMES:
        if name == "cd":
            shell.register(FolderCommand(shell, name))
        elif name in ("rm", "stat", "rename"):
            shell.register(NodeCommand(shell, name))
        else:
            shell.register(RecordingCommand(shell, name))
    return shell, out


def texts(suggestions):
    return sorted(s.text for s in suggestions)


def test_word_before_cursor():
    assert Document("cd te").word_before_cursor() == "te"
    assert Document("cd ").word_before_cursor() == ""
    assert Document("ls").word_before_cursor() == "ls"
    assert Document("cd test", cursor_position=5).word_before_cursor() == "te"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("ls", []),
        ("rm", []),
        ("mk", ["mkdir", "mksmart"]),
        ("mv", []),
        ("cd", []),
        ("up", ["upload"]),
        ("ex", ["exec", "exit", "extensions"]),
        ("he", ["help"]),
        ("pw", ["pwd"]),
        ("st", ["stat", "status"]),
        ("fi", ["find"]),
        ("re", ["reload", "rename"]),
        ("ch", ["chat"]),
        ("an", ["answer"]),
        ("ra", ["rag"]),
        ("do", ["docs", "download"]),
        ("te", ["templates"]),
        ("ag", ["agents"]),
        ("ac", ["actions"]),
        ("mks", ["mksmart"]),
    ],
)
def test_command_name_suggestions(text, expected):
    shell, _ = make_shell()
    assert texts(shell.complete(Document(text))) == expected


@pytest.mark.parametrize(
    "text, count",
    [("l", 1), ("r", 5), ("m", 3), ("c", 3), ("e", 3), ("a", 4), ("h", 2)],
)
def test_command_suggestion_counts(text, count):
    shell, _ = make_shell()
    assert len(shell.complete(Document(text))) == count


def test_single_letter_suggests_ls_with_description():
    shell, _ = make_shell()
    assert shell.complete(Document("l")) == [
        shell.complete(Document("", tab=True))[COMMAND_NAMES_SORTED.index("ls")]
    ]


COMMAND_NAMES_SORTED = sorted(COMMAND_NAMES)


def test_blank_text_gives_nothing():
    shell, _ = make_shell()
    assert shell.complete(Document("   ")) == []


def test_cd_suggests_folder_uuid():
    shell, _ = make_shell()
    shell.current_nodes = [
        Node(uuid="test-uuid", title="test-title", mimetype=FOLDER_MIMETYPE)
    ]
    suggestions = shell.complete(Document("cd te"))
    assert len(suggestions) == 1
    assert suggestions[0].text == "test-uuid"
    assert "test-title" in suggestions[0].description


def test_cd_with_mixed_node_types():
    shell, _ = make_shell()
    shell.current_nodes = [
        Node(uuid="folder-uuid-1", title="documents", mimetype=FOLDER_MIMETYPE),
        Node(uuid="file-uuid-1", title="document.txt", mimetype="text/plain"),
        Node(uuid="folder-uuid-2", title="downloads", mimetype=FOLDER_MIMETYPE),
    ]
    assert texts(shell.complete(Document("cd do"))) == ["folder-uuid-1", "folder-uuid-2"]
    assert texts(shell.complete(Document("cd documents"))) == ["folder-uuid-1"]


def test_node_commands_suggest_all_nodes():
    shell, _ = make_shell()
    shell.current_nodes = [
        Node(uuid="folder-uuid", title="test-folder", mimetype=FOLDER_MIMETYPE),
        Node(uuid="file-uuid", title="test-file.txt", mimetype="text/plain"),
    ]
    for text in ("rm te", "stat te", "rename te"):
        assert texts(shell.complete(Document(text))) == ["file-uuid", "folder-uuid"]


@pytest.mark.parametrize("text", ["cd te ", "cd  te", "cd test-uuid "])
def test_finished_arguments_hide_suggestions(text):
    shell, _ = make_shell()
    shell.current_nodes = [
        Node(uuid="test-uuid", title="test-title", mimetype=FOLDER_MIMETYPE)
    ]
    assert shell.complete(Document(text)) == []


def test_unknown_command_arguments_give_nothing():
    shell, _ = make_shell()
    assert shell.complete(Document("nope te")) == []


def test_tab_on_empty_text_lists_every_command():
    shell, _ = make_shell()
    assert [s.text for s in shell.complete(Document("", tab=True))] == COMMAND_NAMES_SORTED


def test_tab_shows_exact_match():
    shell, _ = make_shell()
    assert texts(shell.complete(Document("ls", tab=True))) == ["ls"]


def test_tab_after_command_asks_the_command():
    shell, _ = make_shell()
    shell.current_nodes = [
        Node(uuid="test-uuid", title="test-title", mimetype=FOLDER_MIMETYPE)
    ]
    assert texts(shell.complete(Document("cd ", tab=True))) == ["test-uuid"]


def test_tab_on_unknown_command_lists_every_command():
    shell, _ = make_shell()
    assert len(shell.complete(Document("nope x", tab=True))) == len(COMMAND_NAMES)


def test_execute_resolves_aliases():
    shell, _ = make_shell()
    shell.current_node = Node(uuid="here-uuid", title="here", parent="up-uuid")
    shell.execute("rm . ..")
    assert shell.commands["rm"].calls == [["here-uuid", "up-uuid"]]


def test_execute_keeps_dot_dot_for_cd():
    shell, _ = make_shell()
    shell.current_node = Node(uuid="here-uuid", title="here", parent="up-uuid")
    shell.execute("cd ..")
    assert shell.commands["cd"].calls == [[".."]]


def test_execute_unknown_command_and_history():
    shell, out = make_shell()
    shell.execute("  frobnicate now ")
    assert out.getvalue() == "Unknown command: frobnicate\n\n"
    assert shell.history == ["frobnicate now"]


@pytest.mark.parametrize(
    "arg, parent, expected",
    [
        (".", "up-uuid", "here-uuid"),
        ("..", "up-uuid", "up-uuid"),
        ("..", "", ROOT_UUID),
        ("other", "up-uuid", "other"),
    ],
)
def test_resolve_alias(arg, parent, expected):
    shell, _ = make_shell()
    shell.current_node = Node(uuid="here-uuid", title="here", parent=parent)
    assert shell.resolve_alias(arg) == expected


def test_current_folder_name():
    shell, _ = make_shell()
    assert shell.current_folder_name() == "root"
    shell.current_node = Node(uuid="x", title="Invoices")
    assert shell.current_folder_name() == "Invoices"


def test_breadcrumb_path():
    shell, _ = make_shell()
    assert shell.breadcrumb_path() == "/root/test-title"


def test_breadcrumb_path_without_titles():
    class Untitled(FakeClient):
        def get_breadcrumbs(self, uuid):
            return [Node(uuid=ROOT_UUID)]

    shell, _ = make_shell(Untitled())
    assert shell.breadcrumb_path() == "/"


def test_initialize_loads_everything():
    shell, out = make_shell()
    shell.current_node = Node(uuid="elsewhere")
    shell.initialize()
    assert out.getvalue() == "Initializing... ✓ Ready\n"
    assert shell.current_node.uuid == ROOT_UUID
    assert [n.uuid for n in shell.current_nodes] == ["test-uuid"]
    assert [a.uuid for a in shell.cached_aspects] == ["aspect-uuid"]
    assert [a.uuid for a in shell.cached_actions] == ["action-uuid"]
    assert [e.uuid for e in shell.cached_extensions] == ["extension-uuid"]
    assert [a.uuid for a in shell.cached_agents] == ["agent-uuid"]


def test_initialize_reports_failures():
    shell, out = make_shell(FakeClient(failing={"nodes", "aspects", "agents"}))
    shell.initialize()
    assert out.getvalue() == "Initializing...  ✗ Failed: aspects, agents✓ Ready\n"
    assert shell.current_nodes == []
    assert len(shell.cached_actions) == 1


def test_load_cached_data_returns_failures():
    shell, _ = make_shell(FakeClient(failing={"extensions"}))
    assert shell.load_cached_data() == ["extensions"]


def test_reload_success():
    shell, out = make_shell()
    shell.reload_cached_data()
    assert out.getvalue() == (
        "Reloading resources from server... "
        "done (1 aspects, 1 actions, 1 extensions, 1 agents)\n"
    )


def test_reload_failure_raises():
    shell, out = make_shell(FakeClient(failing={"actions", "agents"}))
    with pytest.raises(CacheReloadError, match="2 resources failed to load") as info:
        shell.reload_cached_data()
    assert info.value.failed == ["actions", "agents"]
    assert info.value.errors == ["actions: actions unavailable", "agents: agents unavailable"]
    text = out.getvalue()
    assert "done with errors" in text
    assert "  Successfully loaded: 1 aspects, 1 extensions" in text
    assert "  Failed to load: actions, agents" in text
    assert len(shell.cached_aspects) == 1


def test_run_reads_until_end_of_input():
    lines = iter(["pwdx", "ls"])
    prompts = []

    def reader(prompt):
        prompts.append(prompt)
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    out = io.StringIO()
    shell = Shell(FakeClient(), out=out, read_line=reader)
    ls = RecordingCommand(shell, "ls")
    shell.register(ls)
    shell.run()

    text = out.getvalue()
    assert "Current location: /root/test-title\n\n" in text
    assert "Unknown command: pwdx" in text
    assert ls.calls == [[], []]
    assert prompts == ["root # ", "root # ", "root # "]
    assert shell.history == ["pwdx", "ls"]


def test_run_falls_back_to_folder_name():
    out = io.StringIO()

    def reader(prompt):
        raise EOFError

    shell = Shell(FakeClient(failing={"breadcrumbs"}), out=out, read_line=reader)
    shell.run()
    assert "Current location: root\n\n" in out.getvalue()