# src/taskdesk/connectors/console_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.commands import render_users
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except Exception:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _read_line(prompt: str) -> asyncio.Future[str]:
    """
    Read one line on a daemon thread.

    A thread blocked in input() cannot be interrupted, so it must not be one
    that asyncio.run() joins on shutdown (asyncio.to_thread's executor is).
    """
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[str] = loop.create_future()

    def _resolve(value: str | None, exc: BaseException | None) -> None:
        if fut.done():
            return
        if exc is not None:
            fut.set_exception(exc)
        else:
            fut.set_result(value or "")

    def _worker() -> None:
        try:
            value, exc = input(prompt), None
        except BaseException as e:  # EOFError is the expected one
            value, exc = None, e
        # The loop may already be closed if the console was cancelled.
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(_resolve, value, exc)

    threading.Thread(target=_worker, name="console-input", daemon=True).start()
    return fut


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL over the users/tasks view-models.

    input() runs on a daemon thread so in-flight HTTP calls are not blocked
    by a waiting prompt. Under asyncio.run(), Ctrl-C arrives here as
    CancelledError at the pending read; it is logged and re-raised.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")
    _print_ts(render_users(state.users.items))

    while True:
        try:
            user_input = (await _read_line(">>> ")).strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except asyncio.CancelledError:
            logger.info("Console cancelled, exiting.")
            print()
            raise

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = await command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Commands start with '/'. Use /help to list them."

        _print_ts(response)

    logger.info("Console connector finished.")
