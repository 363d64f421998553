"""Assembly of the shell with its full set of commands."""

from __future__ import annotations

from typing import TextIO

from antx.admin_commands import ReloadCommand, SessionsCommand, StatusCommand
from antx.node_commands import (
    PwdCommand,
    RenameCommand,
    RmCommand,
    StatCommand,
    TemplatesCommand,
    UploadCommand,
    WhoAmICommand,
)
from antx.rag import RagCommand
from antx.run import RunCommand
from antx.shell import AntboxClient, Command, Shell

_COMMAND_TYPES: tuple[type[Command], ...] = (
    PwdCommand,
    RenameCommand,
    RmCommand,
    StatCommand,
    WhoAmICommand,
    TemplatesCommand,
    UploadCommand,
    RunCommand,
    RagCommand,
    ReloadCommand,
    SessionsCommand,
    StatusCommand,
)


def default_commands(shell: Shell) -> list[Command]:
    """One instance of every built-in command, bound to the shell."""
    return [command_type(shell) for command_type in _COMMAND_TYPES]


def build_shell(client: AntboxClient, out: TextIO | None = None) -> Shell:
    """A shell talking to client with every built-in command registered."""
    shell = Shell(client, out)
    for command in default_commands(shell):
        shell.register(command)
    return shell