"""Slash-command catalogue and dispatcher.

Purpose
-------
Map ``/name args`` lines onto handlers that edit the live session. Each
handler receives the session and the raw, trimmed argument string and
validates it itself; the ``ArgSpec`` tuple on a ``Command`` only feeds
``/help``.

Design
------
- ``split_command_line`` splits at the first space: the name is the token
  without the prefix, the arguments are the trimmed remainder.
- ``CommandRegistry.dispatch`` raises a single ``ReplError`` per failure;
  unknown names read ``unknown command: <name>`` and handler failures read
  ``<name>: <error>``. ``SystemExit`` from ``/exit`` is not intercepted.
- Shared argument conventions live in small ``parse_*`` helpers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Tuple

from ...base.errors import ErrorCode, ReplError
from ...base.logging import LogContext, get_logger, normalized_log_event
from ...base.models import ROLES, Message, is_valid_role
from ...base.persistence import read_context_file, write_context_file
from .cli_utils import colorize, render_context, text_wrap

if TYPE_CHECKING:  # pragma: no cover
    from .cli_shell import ReplSession

COMMAND_PREFIX = "/"
HELP_WRAP_WIDTH = 50

Handler = Callable[["ReplSession", str], None]

_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

_logger = get_logger("gptrepl.cli.commands")


@dataclass(frozen=True)
class ArgSpec:
    """Help metadata for one positional argument.

    A single choice is a free-text label (``path``); several choices are the
    accepted literal values.
    """

    choices: Tuple[str, ...]
    optional: bool = False

    def placeholder(self, colors: bool = False) -> str:
        suffix = "?" if self.optional else ""
        return "<" + "|".join(colorize(c + suffix, "magenta", colors) for c in self.choices) + ">"


@dataclass(frozen=True)
class Command:
    name: str
    handler: Handler
    description: str
    args: Tuple[ArgSpec, ...] = ()

    def usage(self, colors: bool = False) -> str:
        parts = [COMMAND_PREFIX + colorize(self.name, "cyan", colors)]
        parts.extend(a.placeholder(colors) for a in self.args)
        return " ".join(parts)


@dataclass
class CommandRegistry:
    """Name -> ``Command`` mapping; iteration is sorted by name."""

    _commands: Dict[str, Command] = field(default_factory=dict)

    def register(self, command: Command) -> None:
        if command.name in self._commands:
            raise ValueError(f"command already registered: {command.name}")
        self._commands[command.name] = command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[Command]:
        return iter(sorted(self._commands.values(), key=lambda c: c.name))

    def __len__(self) -> int:
        return len(self._commands)

    def dispatch(self, session: "ReplSession", line: str) -> None:
        """Run the command named on ``line`` against ``session``.

        Raises
        ------
        ReplError
            ``UNKNOWN_COMMAND`` for unmatched names; otherwise the handler's
            error, re-worded as ``<name>: <error>`` with its code preserved.
        """
        name, args = split_command_line(line)
        ctx = LogContext(model=session.model, command=name)
        command = self.get(name)
        if command is None:
            normalized_log_event(_logger, "command.error", ctx, phase="dispatch", error_code=ErrorCode.UNKNOWN_COMMAND.value)
            raise ReplError(code=ErrorCode.UNKNOWN_COMMAND, message=f"unknown command: {name}")
        normalized_log_event(_logger, "command.dispatch", ctx, phase="dispatch", has_args=bool(args))
        try:
            command.handler(session, args)
        except ReplError as e:
            normalized_log_event(_logger, "command.error", ctx, phase="handler", error_code=e.code.value, error=str(e))
            raise ReplError(code=e.code, message=f"{name}: {e}", path=e.path, index=e.index, raw=e) from e


def split_command_line(line: str) -> Tuple[str, str]:
    """Split ``/name rest`` into ``(name, rest)``, both trimmed."""
    head, _, rest = line.partition(" ")
    if head.startswith(COMMAND_PREFIX):
        head = head[len(COMMAND_PREFIX):]
    return head.strip(), rest.strip()


# Argument conventions ------------------------------------------------------
def parse_optional_int(args: str, default: int) -> int:
    """Return ``default`` for empty ``args``, else a base-10 32-bit integer."""
    if args == "":
        return default
    if not _INT_RE.match(args):
        raise ReplError(code=ErrorCode.PARSE, message=f'invalid integer: "{args}"')
    n = int(args, 10)
    if not _INT32_MIN <= n <= _INT32_MAX:
        raise ReplError(code=ErrorCode.PARSE, message=f'integer out of range: "{args}"')
    return n


def parse_role_and_text(args: str) -> Tuple[str, str]:
    """Split ``<role> <text>``; the text is returned trimmed."""
    if args == "":
        raise ReplError(code=ErrorCode.INVALID_ARGUMENT_COUNT, message="expected two arguments")
    role, _, text = args.partition(" ")
    return require_role(role), text.strip()


def require_role(role: str) -> str:
    if not is_valid_role(role):
        raise ReplError(code=ErrorCode.INVALID_ROLE, message=f'invalid role: "{role}"')
    return role


def require_path(args: str) -> str:
    if args == "":
        raise ReplError(
            code=ErrorCode.MISSING_ARGUMENT,
            message="exactly one argument required (path to JSON file)",
        )
    return args


def require_no_args(args: str) -> None:
    if args != "":
        raise ReplError(code=ErrorCode.INVALID_ARGUMENT_COUNT, message="expected no arguments")


def _editor_message(session: "ReplSession", role: str) -> Message:
    content = session.open_editor().strip()
    if content == "":
        raise ReplError(code=ErrorCode.INVALID_ARGUMENT, message="no content in file")
    return Message(role=role, content=content)  # type: ignore[arg-type]


# Handlers ------------------------------------------------------------------
def cmd_help(session: "ReplSession", args: str) -> None:
    if args:
        session.printer.warn("This command takes no arguments. Showing help anyways")
    for command in session.registry:
        session.printer.print(command.usage(session.colors) + "\n")
        for line in text_wrap(command.description, HELP_WRAP_WIDTH):
            session.printer.print(f"  {line}\n")


def cmd_save(session: "ReplSession", args: str) -> None:
    write_context_file(require_path(args), session.context.messages)


def cmd_replacefrom(session: "ReplSession", args: str) -> None:
    session.context.replace(read_context_file(require_path(args)))


def cmd_appendfrom(session: "ReplSession", args: str) -> None:
    session.context.extend(read_context_file(require_path(args)))


def cmd_prependfrom(session: "ReplSession", args: str) -> None:
    session.context.prepend(read_context_file(require_path(args)))


def cmd_clear(session: "ReplSession", args: str) -> None:
    require_no_args(args)
    session.context.clear()


def cmd_print(session: "ReplSession", args: str) -> None:
    if args:
        session.printer.warn("this command takes no arguments. Printing context anyways")
    session.printer.print(render_context(session.context, session.colors))


def cmd_append(session: "ReplSession", args: str) -> None:
    role, text = parse_role_and_text(args)
    if text == "":
        session.printer.warn("appending empty string to context")
    session.context.append(Message(role=role, content=text))  # type: ignore[arg-type]


def cmd_prepend(session: "ReplSession", args: str) -> None:
    role, text = parse_role_and_text(args)
    if text == "":
        session.printer.warn("prepending empty string to context")
    session.context.prepend([Message(role=role, content=text)])  # type: ignore[arg-type]


def cmd_model(session: "ReplSession", args: str) -> None:
    if args == "":
        raise ReplError(
            code=ErrorCode.INVALID_ARGUMENT_COUNT,
            message="expected exactly one argument (the identifier of the model)",
        )
    session.model = args


def cmd_pop(session: "ReplSession", args: str) -> None:
    session.context.pop_last(parse_optional_int(args, 2))


def cmd_escape(session: "ReplSession", args: str) -> None:
    session.ask(Message(role="user", content=args))


def cmd_send(session: "ReplSession", args: str) -> None:
    require_no_args(args)
    reply = session.complete()
    session.context.append(Message(role="assistant", content=reply))


def cmd_autosave(session: "ReplSession", args: str) -> None:
    session.autosave_path = args or None
    session.refresh_autosave()


def cmd_exit(session: "ReplSession", args: str) -> None:
    raise SystemExit(parse_optional_int(args, 0))


def cmd_nano(session: "ReplSession", args: str) -> None:
    role = require_role(args)
    session.context.append(_editor_message(session, role))


def cmd_ns(session: "ReplSession", args: str) -> None:
    role = require_role(args or "user")
    msg = _editor_message(session, role)
    if not session.quiet:
        session.printer.print(msg.content + "\n")
    session.ask(msg)


_ROLE_ARG = ArgSpec(ROLES)
_PATH_ARG = ArgSpec(("path",))

DEFAULT_COMMANDS: Tuple[Command, ...] = (
    Command("help", cmd_help, "Shows this help page."),
    Command("save", cmd_save, "Saves current conversation context in a JSON file.", (_PATH_ARG,)),
    Command(
        "replacefrom",
        cmd_replacefrom,
        "Replaces the current conversation context from JSON file in the same format as created by /save.",
        (_PATH_ARG,),
    ),
    Command(
        "appendfrom",
        cmd_appendfrom,
        "Appends the context from the JSON file to the current context.",
        (_PATH_ARG,),
    ),
    Command(
        "prependfrom",
        cmd_prependfrom,
        "Adds the context from the JSON file to the beginning of the current context.",
        (_PATH_ARG,),
    ),
    Command("clear", cmd_clear, "Clears the current conversation context."),
    Command("print", cmd_print, "Prints the current conversation context."),
    Command(
        "append",
        cmd_append,
        "Appends a message to the current conversation context.",
        (_ROLE_ARG, ArgSpec(("message",))),
    ),
    Command(
        "prepend",
        cmd_prepend,
        "Adds a message to the beginning of the current conversation context.",
        (_ROLE_ARG, ArgSpec(("message",))),
    ),
    Command(
        "model",
        cmd_model,
        "Switches the current model (e.g. gpt-3.5-turbo), keeping the conversation context.",
        (ArgSpec(("model-name",)),),
    ),
    Command(
        "pop",
        cmd_pop,
        "Removes the last N messages from the context. N defaults to 2, as to pop the last "
        "answer given by the model and the question that led to it.",
        (ArgSpec(("N",), optional=True),),
    ),
    Command(
        "escape",
        cmd_escape,
        "Appends the following text and sends the context to the model, storing its response "
        'in the context. Useful for sending empty strings or messages beginning with the slash "/" character.',
        (ArgSpec(("text",)),),
    ),
    Command(
        "send",
        cmd_send,
        "Sends the current context as-is to the model and stores its response in the context.",
    ),
    Command(
        "autosave",
        cmd_autosave,
        "Changes the autosave file path. Every time the context changes, it is automatically saved "
        "to this file. Run with no arguments to disable this feature. WARNING: The file will be "
        "overwritten. You may want to load it first with /replacefrom, /appendfrom or /prependfrom.",
        (ArgSpec(("path",), optional=True),),
    ),
    Command("exit", cmd_exit, "Exits the program.", (ArgSpec(("status-code",), optional=True),)),
    Command(
        "nano",
        cmd_nano,
        "Opens a nano (by default) text editor instance. You can write a multi-line prompt in it, "
        "which will be appended to the context (without sending it) once saved and closed. To use "
        "a different text editor, specify its path in the GPTREPL_TEXT_EDITOR environment variable. "
        "See also /ns, which may be more useful for interactive sessions in most cases.",
        (_ROLE_ARG,),
    ),
    Command(
        "ns",
        cmd_ns,
        'The same as running /nano and then /send. Role is set to "user" by default. Also prints '
        "the message when not in quiet mode.",
        (ArgSpec(ROLES, optional=True),),
    ),
)


def build_default_registry() -> CommandRegistry:
    registry = CommandRegistry()
    for command in DEFAULT_COMMANDS:
        registry.register(command)
    return registry


__all__: List[str] = [
    "COMMAND_PREFIX",
    "ArgSpec",
    "Command",
    "CommandRegistry",
    "DEFAULT_COMMANDS",
    "build_default_registry",
    "split_command_line",
    "parse_optional_int",
    "parse_role_and_text",
    "require_role",
    "require_path",
    "require_no_args",
]
