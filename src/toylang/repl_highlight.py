"""prompt_toolkit lexer for live toylang syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from lark.exceptions import UnexpectedCharacters
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .parser import tokenize
from .types import TYPE_NAMES

# Map highlight groups -> prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "builtin": "bold ansiyellow",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "type": "bold ansiblue",
}

_KEYWORDS = frozenset({
    "let", "func", "return", "if", "elif", "else", "while",
    "print", "println", "exit", "and", "or", "as",
})
_BUILTINS = frozenset({"typeof", "length", "to_upper", "to_lower"})
_BOOLEANS = frozenset({"true", "false"})
_PUNCTUATION = frozenset("(){}[],;:")

def token_group(tok_type: str, text: str) -> str:
    """Highlight group for one lark token."""
    if text in _KEYWORDS:
        return "keyword"
    if text in _BOOLEANS:
        return "boolean"
    if text in _BUILTINS:
        return "builtin"
    if text in TYPE_NAMES:
        return "type"

    if tok_type == "NUMBER":
        return "number"
    if tok_type == "STRING":
        return "string"
    if tok_type == "COMMENT":
        return "comment"
    if tok_type == "NAME":
        return "identifier"
    if tok_type == "WS":
        return ""

    return "punctuation" if text in _PUNCTUATION else "operator"

def highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    result: StyleAndTextTuples = []
    pos = 0

    try:
        for tok in tokenize(text):
            start = tok.start_pos
            if start is None or start < pos:
                continue

            # Unstyled gap before token.
            if start > pos:
                result.append(("", text[pos:start]))

            tok_text = str(tok)
            result.append((GROUP_STYLE.get(token_group(tok.type, tok_text), ""), tok_text))
            pos = start + len(tok_text)
    except UnexpectedCharacters:
        # Unterminated string or stray character: leave the rest plain.
        pass

    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]

class ToylangLexer(Lexer):
    """prompt_toolkit Lexer that highlights toylang source using the lark lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
