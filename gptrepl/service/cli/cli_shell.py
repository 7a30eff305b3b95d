"""Interactive REPL session engine.

Purpose
-------
Drive the read -> classify -> dispatch/exchange loop over a live
``ContextStore``. Presentation concerns (prompt, colors, readline history)
stay in this module; the context, persistence and completion layers know
nothing about the console.

Design
------
- ``ReplSession.step(reader)`` handles exactly one input line and returns
  ``False`` once the reader is exhausted; ``run`` loops over it.
- Plain lines are exchanges: the user message is appended, the model reply
  is streamed to the printer, and the context is updated on success only.
- The store's change hook is wired to ``refresh_autosave`` so the autosave
  mirror follows every mutation, whichever command made it.
- ``handle_shell`` assembles a session from parsed flags.
"""

from __future__ import annotations

import argparse
import contextlib
import os
from typing import Callable, List, Optional

import readline  # type: ignore[attr-defined]

from ...base.context import ContextStore
from ...base.errors import ReplError
from ...base.interfaces import CompletionClient, LineReader, UserPrinter
from ...base.logging import LogContext, get_logger, normalized_log_event
from ...base.models import Message
from ...base.persistence import read_context_file, write_context_file
from ...base.resilience.retry import RetryConfig
from ...completion import request_completion
from ...config import get_app_config
from ...config.defaults import DEFAULT_MODEL
from ...config.env import api_key_help_lines, resolve_api_key, use_mocks
from .cli_utils import ConsolePrinter, colorize, readline_colorize
from .commands import COMMAND_PREFIX, CommandRegistry, build_default_registry
from .editor import present_text_editor
from .settings import CLISettings, apply_logging, load_settings

_logger = get_logger("gptrepl.cli")

HELP_HINT_COMMAND = "/help"


class ReplSession:
    """Live session state and the per-line state machine.

    Parameters
    ----------
    client: CompletionClient
        Backend used for exchanges.
    printer: UserPrinter
        Operator output channel.
    context: ContextStore | None
        Initial transcript; an empty store when omitted. Its change hook is
        replaced with :meth:`refresh_autosave`.
    model: str
        Model id for future exchanges (``/model`` changes it).
    autosave_path: str | None
        Autosave mirror; ``None`` disables autosave.
    forgetful: bool
        When ``True``, successful plain exchanges leave the context untouched.
    commands_enabled: bool
        When ``False``, ``/`` lines are sent to the model like any other text.
    quiet: bool
        Suppress the prompt, hint and ``/ns`` echo.
    retry_config: RetryConfig | None
        Establishment retry policy.
    colors: bool
        ANSI colors for ``/help`` and ``/print``.
    editor: Callable[[], str] | None
        Returns text written by the operator in an external editor.
    """

    def __init__(
        self,
        client: CompletionClient,
        printer: UserPrinter,
        *,
        context: Optional[ContextStore] = None,
        model: str = DEFAULT_MODEL,
        autosave_path: Optional[str] = None,
        forgetful: bool = False,
        commands_enabled: bool = True,
        quiet: bool = False,
        retry_config: Optional[RetryConfig] = None,
        registry: Optional[CommandRegistry] = None,
        colors: bool = False,
        editor: Optional[Callable[[], str]] = None,
    ) -> None:
        self.client = client
        self.printer = printer
        self.context = context if context is not None else ContextStore()
        self.context.on_change = self.refresh_autosave
        self.model = model
        self.autosave_path = autosave_path
        self.forgetful = forgetful
        self.commands_enabled = commands_enabled
        self.quiet = quiet
        self.retry_config = retry_config or RetryConfig()
        self.registry = registry or build_default_registry()
        self.colors = colors
        self._editor = editor or present_text_editor

    # Autosave ---------------------------------------------------------------
    def refresh_autosave(self) -> None:
        """Mirror the context to the autosave file; failures are only reported."""
        if not self.autosave_path:
            return
        ctx = LogContext(model=self.model, path=self.autosave_path)
        try:
            write_context_file(self.autosave_path, self.context.messages)
        except ReplError as e:
            normalized_log_event(_logger, "autosave.error", ctx, phase="autosave", error_code=e.code.value)
            self.printer.error(f'failed to write to file "{self.autosave_path}": {e}')
            return
        normalized_log_event(_logger, "autosave.write", ctx, phase="autosave", messages=len(self.context))

    # Exchanges --------------------------------------------------------------
    def complete(self) -> str:
        """Send the context as-is and return the reply, echoing it live."""
        emitted: List[bool] = []

        def _echo(fragment: str) -> None:
            emitted.append(True)
            self.printer.print(fragment)

        try:
            reply = request_completion(
                self.client,
                self.context.messages,
                self.model,
                retry_config=self.retry_config,
                on_delta=_echo,
            )
        except ReplError:
            if emitted:
                self.printer.print("\n")
            raise
        self.printer.print("\n")
        return reply

    def ask(self, msg: Message) -> str:
        """Append ``msg``, run an exchange and record the reply.

        On failure the appended message is retracted and the error re-raised.
        """
        self.context.append(msg)
        try:
            reply = self.complete()
        except ReplError:
            self.context.pop_last(1)
            raise
        self.context.append(Message(role="assistant", content=reply))
        return reply

    def exchange(self, text: str) -> None:
        """Plain-line exchange; honours forgetful mode."""
        self.context.append(Message(role="user", content=text))
        try:
            reply = self.complete()
        except ReplError as e:
            self.printer.error(f"{e} (no changes done to context)")
            self.context.pop_last(1)
            return
        if self.forgetful:
            self.context.pop_last(1)
        else:
            self.context.append(Message(role="assistant", content=reply))

    def open_editor(self) -> str:
        return self._editor()

    # Loop -------------------------------------------------------------------
    def dispatch(self, line: str) -> None:
        try:
            self.registry.dispatch(self, line)
        except ReplError as e:
            self.printer.error(str(e))

    def step(self, reader: LineReader) -> bool:
        """Process one line; return ``False`` when input is exhausted.

        Any reader failure (undecodable input, a closed terminal) ends the
        session the same way end of input does.
        """
        try:
            line = reader.readline()
        except (EOFError, KeyboardInterrupt):
            return False
        except Exception as exc:
            _logger.debug("line reader failed: %s: %s", type(exc).__name__, exc)
            return False
        line = line.strip()
        if not line:
            return True
        if line.startswith(COMMAND_PREFIX) and self.commands_enabled:
            self.dispatch(line)
        else:
            self.exchange(line)
        return True

    def run(self, reader: LineReader) -> None:
        while self.step(reader):
            pass


class ConsoleLineReader:
    """``LineReader`` over ``input()`` with readline history.

    The prompt reads ``(<model>)> `` and is rebuilt on every call so
    ``/model`` takes effect immediately; quiet mode uses an empty prompt.
    """

    def __init__(
        self,
        model_fn: Callable[[], str],
        *,
        quiet: bool = False,
        colors: bool = True,
        history_path: Optional[str] = None,
    ) -> None:
        self._model_fn = model_fn
        self._quiet = quiet
        self._colors = colors
        self._history_path = history_path
        if history_path:
            os.makedirs(os.path.dirname(history_path) or ".", exist_ok=True)
            with contextlib.suppress(FileNotFoundError):
                readline.read_history_file(history_path)

    def prompt(self) -> str:
        if self._quiet:
            return ""
        c = self._colors
        return (
            readline_colorize("(", "blue", c)
            + readline_colorize(self._model_fn(), "yellow", c)
            + readline_colorize(")", "blue", c)
            + readline_colorize("> ", "cyan", c)
        )

    def readline(self) -> str:
        return input(self.prompt())

    def close(self) -> None:
        if not self._history_path:
            return
        try:
            readline.write_history_file(self._history_path)
        except OSError as exc:
            _logger.warning("failed to write history file %s: %s", self._history_path, exc)


def _load_initial_context(args: argparse.Namespace, printer: UserPrinter) -> Optional[List[Message]]:
    messages: List[Message] = []
    for path in args.ctx or ():
        try:
            messages.extend(read_context_file(path))
        except ReplError as e:
            printer.error(f"failed to load context file: {e}")
            return None
    if args.autosave and not args.autosave_prevent_load and os.path.exists(args.autosave):
        try:
            messages.extend(read_context_file(args.autosave))
        except ReplError as e:
            printer.error(f"failed to load autosave file: {e}")
            return None
    return messages


def _build_client(args: argparse.Namespace, cfg: dict, printer: UserPrinter) -> Optional[CompletionClient]:
    if use_mocks():
        from ...mock import ScriptedCompletionClient

        return ScriptedCompletionClient()
    key = resolve_api_key(args.apikey)
    if not key:
        for line in api_key_help_lines():
            printer.error(line)
        return None
    from ...openai import OpenAICompletionClient

    return OpenAICompletionClient(api_key=key, base_url=cfg.get("base_url"))


def handle_shell(
    args: argparse.Namespace,
    *,
    printer: Optional[UserPrinter] = None,
    reader: Optional[LineReader] = None,
    settings: Optional[CLISettings] = None,
) -> int:
    """Build a session from parsed flags and run it until end of input.

    Returns
    -------
    int
        ``0`` on end of input, ``1`` when startup fails. ``/exit`` raises
        ``SystemExit`` which propagates to the caller.
    """
    settings = settings or load_settings()
    apply_logging(settings)
    printer = printer or ConsolePrinter(colors=settings.ui_colors)

    initial = _load_initial_context(args, printer)
    if initial is None:
        return 1
    cfg = get_app_config({"model": args.model, "max_retries": args.maxretries})
    client = _build_client(args, cfg, printer)
    if client is None:
        return 1

    session = ReplSession(
        client,
        printer,
        context=ContextStore(initial),
        model=cfg["model"],
        autosave_path=args.autosave or None,
        forgetful=args.forgetful,
        commands_enabled=not args.nocommands,
        quiet=args.quiet,
        retry_config=RetryConfig(max_retries=cfg["max_retries"]),
        colors=settings.ui_colors,
    )
    normalized_log_event(
        _logger,
        "session.start",
        LogContext(model=session.model, path=session.autosave_path),
        phase="start",
        messages=len(session.context),
        forgetful=session.forgetful,
        commands_enabled=session.commands_enabled,
    )
    if not session.quiet and session.commands_enabled:
        printer.print(f'Enter "{colorize(HELP_HINT_COMMAND, "green", session.colors)}" for a list of commands.\n')

    owns_reader = reader is None
    if reader is None:
        reader = ConsoleLineReader(
            lambda: session.model,
            quiet=session.quiet,
            colors=settings.ui_colors,
            history_path=os.path.expanduser(settings.history_file_path) if settings.ui_readline else None,
        )
    try:
        session.run(reader)
    finally:
        if owns_reader and isinstance(reader, ConsoleLineReader):
            reader.close()
    return 0


__all__ = ["ReplSession", "ConsoleLineReader", "handle_shell"]
