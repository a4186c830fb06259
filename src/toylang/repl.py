"""Interactive REPL for toylang, powered by prompt_toolkit."""

from __future__ import annotations

import re
import sys
from typing import Optional

from lark.exceptions import UnexpectedCharacters
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import FileHistory, History, InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .parser import tokenize
from .repl_highlight import ToylangLexer
from .runner import exit_status, new_root_frame, repl_eval, report_error
from .runtime import init_stdlib
from .types import ExitSignal, Frame, ToyVoid, ToylangRuntimeError, ToylangSyntaxError
from .utils import debug_py_trace_enabled, history_path, set_debug_py_trace

BANNER = "Type `quit` to quit"

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}

_OPEN = {"(": ")", "[": "]", "{": "}"}
_CLOSE = set(_OPEN.values())

def open_depth(text: str) -> int:
    """Bracket depth left open at the end of *text*; strings and comments are skipped."""
    depth = 0

    try:
        for tok in tokenize(text):
            if tok in _OPEN:
                depth += 1
            elif tok in _CLOSE:
                depth = max(depth - 1, 0)
    except UnexpectedCharacters:
        # Let the parser report it on submit.
        return 0

    return depth

class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, _hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(cmd, start_position=-len(text), display_meta=desc)

def handle_slash(line: str, frame_box: list[Frame]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1].lower() if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg in ("on", "1", "true", "yes"):
            set_debug_py_trace(True)
        elif arg in ("off", "0", "false", "no"):
            set_debug_py_trace(False)
        elif arg == "":
            set_debug_py_trace(not debug_py_trace_enabled())
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        frame_box[0] = new_root_frame()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True

def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)

def _make_history() -> History:
    path = history_path()
    return FileHistory(path) if path else InMemoryHistory()

def eval_entry(text: str, frame_box: list[Frame]) -> Optional[int]:
    """Process one submitted entry. Returns an exit status when the session should end."""
    text = _normalize(text)
    if not text.strip():
        return None

    if text.strip() == "quit":
        return 0

    if handle_slash(text, frame_box):
        return None

    try:
        result, is_stmt = repl_eval(text, frame_box[0])
    except ExitSignal as sig:
        return exit_status(sig)
    except ToylangSyntaxError as exc:
        report_error(exc, "Syntax error")
        return None
    except ToylangRuntimeError as exc:
        report_error(exc)
        return None

    if not is_stmt and result is not None and not isinstance(result, ToyVoid):
        print(result)

    return None

def repl() -> int:
    """Interactive read-eval-print loop with prompt_toolkit; returns the exit status."""
    init_stdlib()
    # Mutable box so /reset can swap the frame.
    frame_box: list[Frame] = [new_root_frame()]

    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer

        if open_depth(buf.text) > 0:
            buf.insert_text("\n" + "    " * open_depth(buf.text))
            return

        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=_make_history(),
        lexer=ToylangLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print(BANNER)

    while True:
        try:
            text = session.prompt("> ")
        except EOFError:
            print()
            return 0
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        status = eval_entry(text, frame_box)
        if status is not None:
            return status
