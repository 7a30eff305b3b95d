"""CLI parser construction for the ``gptrepl`` command.

Flags use the single-dash long form (``-model gpt-4``); the double-dash
spelling is accepted as an alias. This module wires argument shapes only.
"""

from __future__ import annotations

import argparse


def _non_negative_int(value: str) -> int:
    try:
        n = int(value, 10)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid non-negative integer: {value!r}") from e
    if n < 0:
        raise argparse.ArgumentTypeError(f"invalid non-negative integer: {value!r}")
    return n


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level parser.

    Returns
    -------
    argparse.ArgumentParser
        Parser whose namespace carries ``ctx``, ``model``, ``apikey``,
        ``nocommands``, ``quiet``, ``forgetful``, ``maxretries``,
        ``autosave`` and ``autosave_prevent_load``. ``model`` and
        ``maxretries`` default to ``None`` so configuration files and
        environment variables can supply them.
    """
    p = argparse.ArgumentParser(
        prog="gptrepl",
        description="Chat with an OpenAI model from the terminal, editing the conversation with /commands.",
        allow_abbrev=False,
    )
    p.add_argument(
        "-ctx", "--ctx",
        action="append",
        default=[],
        metavar="PATH",
        help="Load and append a JSON context file (such as one created by /save). Can be used multiple times.",
    )
    p.add_argument("-model", "--model", default=None, help="The OpenAI model ID (default: gpt-4).")
    p.add_argument(
        "-apikey", "--apikey",
        default=None,
        help="The OpenAI API key to use. Overrides $OPENAI_API_KEY and ~/.gptrepl-key.",
    )
    p.add_argument("-nocommands", "--nocommands", action="store_true", help='Disable slash ("/") commands.')
    p.add_argument(
        "-quiet", "--quiet",
        action="store_true",
        help="Only print the model's output (errors are still printed to stderr).",
    )
    p.add_argument(
        "-forgetful", "--forgetful",
        action="store_true",
        help="Don't update the conversation context after plain exchanges. Does not affect commands such as /escape.",
    )
    p.add_argument(
        "-maxretries", "--maxretries",
        type=_non_negative_int,
        default=None,
        metavar="N",
        help="Maximum number of retries when a request cannot be sent (default: 5). Zero disables retries.",
    )
    p.add_argument(
        "-autosave", "--autosave",
        default="",
        metavar="PATH",
        help="Load PATH as a JSON context (if it exists) and save the context to it after every change. "
        "Always loaded last, after every -ctx file.",
    )
    p.add_argument(
        "-autosave-prevent-load", "--autosave-prevent-load",
        dest="autosave_prevent_load",
        action="store_true",
        help="Don't load the -autosave file at startup. Ignored without -autosave.",
    )
    return p


__all__ = ["build_parser"]
