# antx

`antx` is a shell-like command line for an Antbox content server, used from
Python. A `Shell` keeps track of a current folder, dispatches typed lines to
commands that inspect, rename, remove and upload nodes, run actions, ask the
server's RAG agent and manage in-memory conversation sessions, and offers
completion for command names, node identifiers, flags and local file paths.

## Getting a shell

The shell works through a client object that talks to the server. Any object
with the methods described by the `antx.shell.AntboxClient` protocol can be
used: `login`, `get_current_user`, `get_node`, `list_nodes`, `evaluate_node`,
`get_breadcrumbs`, `remove_node`, `change_node_name`, `list_aspects`,
`list_actions`, `list_extensions`, `list_agents`, `list_templates`,
`get_template`, `run_action`, `rag_chat`, `upload_feature`, `upload_aspect`,
`upload_agent`, `update_file` and `create_file`. They return the records in
`antx.models` (`Node`, `User`, `Template`, `Feature`, `Aspect`, `Agent`,
`ChatMessage`, ...) and raise an exception on failure; the commands report
such failures as `Error: ...` lines.

```python
import sys

from antx.registry import build_shell

shell = build_shell(my_client, sys.stdout)
shell.run()
```

`build_shell` registers every built-in command (`antx.registry.default_commands`
gives one instance of each). `Shell.run` calls `Shell.initialize` (start at the
root folder, list it, load the cached aspects, actions, extensions and agents),
prints the current location, then reads lines with the prompt `<folder> # `
until end of input. When it reads from the terminal, Tab completion is wired
through `readline` where that module is available. A different line reader
can be given as `Shell(client, out, read_line=...)`.

Single lines can be run without the loop:

```python
shell.initialize()
shell.execute("pwd")
shell.execute("stat 3f2a-uuid")
shell.execute("run some-action-uuid . format=pdf quality=high")
```

An unknown name prints `Unknown command: <name>`. Every non-empty line is
added to `shell.history`.

Completions for a partly typed line come from `Shell.complete`, which takes an
`antx.shell.Document` (the text, an optional cursor position, and whether Tab
was pressed) and returns `antx.suggestion.Suggestion` values. Without Tab,
suggestions are hidden for an exactly typed command name and after a trailing
space; with Tab they are always offered.

## Commands

| Command | What it does |
| --- | --- |
| `pwd` | Show the current location as a path built from breadcrumbs |
| `stat <uuid>` | Show a node's properties, including folder permissions |
| `rename <uuid> <new-name>` | Change a node's name |
| `rm <uuid>` | Remove a node |
| `upload [-f\|-a\|-i\|-u <uuid>] <file-path>` | Upload a file into the current folder, or as a feature (`-f`), aspect (`-a`) or AI agent (`-i`), or replace the content of an existing node (`-u`) |
| `templates [uuid]` | List templates, or save one as `~/Downloads/template_<uuid>.txt` |
| `run <action_uuid> <node_uuid> [param=value...]` | Run an action on a node |
| `rag [-l] [message]` | Ask the RAG agent; `-l` uses the current folder as context; without a message an interactive conversation starts, ended by `exit` or end of input |
| `whoami` | Show the authenticated user |
| `sessions list\|show\|clear\|remove [id\|all]` | Manage conversation sessions |
| `reload` | Fetch the cached aspects, actions, extensions and agents again |
| `status` | Show the current location, cache counts, history size and sessions |

In arguments, `.` stands for the current folder and `..` for its parent.

`run` parameters given as `key=value` are typed on the way in: exactly `true`
and `false` become booleans, integers and decimals become numbers, anything
else stays text; arguments without `=` are ignored with a warning. Completion
for `run` offers actions that are exposed as actions and run manually, then
nodes matching the action's filters (`antx.filters.node_matches_filters`),
then the action's parameter names.

## Conversation sessions

Sessions are kept in memory by `antx.session.SessionManager`; the module-level
helpers such as `get_or_create_session`, `add_message_to_session`,
`get_session_history`, `clear_session`, `remove_session` and
`list_active_sessions` work on one shared manager, which the `sessions` and
`status` commands read.

```python
from antx.session import add_message_to_session, get_session_history

add_message_to_session("my-chat", "user", "Hello")
get_session_history("my-chat")
# [{'role': 'user', 'content': 'Hello'}]
```

## Helpers

- `antx.utils`: `normalize_operators("size>1000")` gives `"size > 1000"`,
  `convert_value("45.67")` gives `45.67`, `extract_single_filter`,
  `sort_nodes_for_listing` (folders first, then files, by title) and
  `format_modified_date`.
- `antx.suggestion`: `node_suggestions`, `filesystem_suggestions`,
  `is_folder_node` and `format_file_size` (`1536` gives `"1.5 K"`).
- `antx.filters`: `parse_parameters`, `evaluate_filter` and
  `node_matches_filters`.
- `antx.rag`: `last_model_text` and `history_to_dicts` for chat histories.

## What it does not do

- It has no HTTP client for the Antbox API; you supply the client object.
- It installs no console command; the shell is started from Python.
- There are no commands for moving around or changing the tree beyond those
  listed above: no `ls`, `cd`, `mkdir`, `mv`, `cp`, `find` or `download`, and
  no agent chat, extensions, users, groups or API keys commands.
- History and the current location live only in memory and are not saved
  between runs.