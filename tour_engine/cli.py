"""Thin CLI router: dispatches to commands and the MCP server."""
from __future__ import annotations

import logging
import os
import sys

USAGE = """\
tours: guided product tour engine

Usage:
  tours validate            Parse and check the tour registry (.tours/tours.yaml)
  tours list [--role R]     List tours, optionally only those visible to a role
  tours status              Show completion, preferences and last action
  tours progress [--role R] Show completion progress overall and per category
  tours history [N]         Show the last N recorded actions (default 20)
  tours complete <tour>     Mark a tour as completed
  tours reset <tour>        Forget that a tour was completed
  tours reset-all           Forget all completions and first-visit markers
  tours prefs [key=value]   Show or change preferences (autoStartEnabled, showHelpButton)

Internal:
  tours mcp-server          Start MCP Server

Options:
  -v, --verbose             Debug logging to stderr
"""


def _pop_option(args: list[str], name: str) -> str | None:
    if name not in args:
        return None
    idx = args.index(name)
    if idx + 1 >= len(args):
        print(f"Option {name} needs a value", file=sys.stderr)
        sys.exit(1)
    value = args[idx + 1]
    del args[idx:idx + 2]
    return value


def main():
    args = sys.argv[1:]
    if "-v" in args or "--verbose" in args:
        args = [a for a in args if a not in ("-v", "--verbose")]
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    cwd = os.getcwd()
    command = args[0] if args else None

    if command == "validate":
        from tour_engine.commands.validate import cmd_validate
        cmd_validate(cwd)

    elif command == "list":
        from tour_engine.commands.list_tours import cmd_list
        cmd_list(cwd, role=_pop_option(args, "--role"))

    elif command == "status":
        from tour_engine.commands.status import cmd_status
        cmd_status(cwd)

    elif command == "progress":
        from tour_engine.commands.status import cmd_progress
        cmd_progress(cwd, role=_pop_option(args, "--role"))

    elif command == "history":
        from tour_engine.commands.status import cmd_history
        try:
            limit = int(args[1]) if len(args) > 1 else 20
        except ValueError:
            print(f"Invalid history limit: {args[1]}", file=sys.stderr)
            sys.exit(1)
        cmd_history(cwd, limit)

    elif command == "complete":
        if len(args) < 2:
            print("Usage: tours complete <tour-id>", file=sys.stderr)
            sys.exit(1)
        from tour_engine.commands.complete import cmd_complete
        cmd_complete(args[1], cwd)

    elif command == "reset":
        if len(args) < 2:
            print("Usage: tours reset <tour-id>", file=sys.stderr)
            sys.exit(1)
        from tour_engine.commands.reset import cmd_reset
        cmd_reset(args[1], cwd)

    elif command == "reset-all":
        from tour_engine.commands.reset import cmd_reset_all
        cmd_reset_all(cwd)

    elif command == "prefs":
        from tour_engine.commands.prefs import cmd_prefs
        cmd_prefs(args[1:], cwd)

    elif command == "mcp-server":
        from tour_engine.integrations.mcp_server import run_server
        run_server()

    elif command in ("help", "--help", "-h", None):
        print(USAGE)

    else:
        print(f"Unknown command: {command}", file=sys.stderr)
        print(USAGE)
        sys.exit(1)
