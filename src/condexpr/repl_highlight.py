"""prompt_toolkit lexer for live condition syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as CondLexer
from .runtime import DEFAULT_BUILTINS, init_stdlib
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "error": "bold ansired",
}

# Token type → highlight group.
_TT_GROUP = {
    TT.IN: "keyword",
    TT.AND: "keyword",
    TT.OR: "keyword",
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.INT: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.STAR: "operator",
    TT.SLASH: "operator",
    TT.EQ: "operator",
    TT.NEQ: "operator",
    TT.LT: "operator",
    TT.LTE: "operator",
    TT.GT: "operator",
    TT.GTE: "operator",
    TT.NEG: "operator",
    TT.REGEXMATCH: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LSQB: "punctuation",
    TT.RSQB: "punctuation",
    TT.COMMA: "punctuation",
    TT.SEMI: "punctuation",
    TT.ILLEGAL: "error",
}


def _token_span(text: str, tok: Tok) -> tuple[int, int]:
    """Start/end offsets of a token within a single line."""
    start = tok.column - 1

    if tok.type == TT.STRING:
        end = start + 1 + len(tok.value)
        # Closing quote, unless the string ran to end of line
        if end < len(text) and text[end] == '"':
            end += 1
        return start, end

    return start, start + len(tok.value)


def _is_call_head(tokens: list[Tok], idx: int) -> bool:
    nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
    return nxt is not None and nxt.type == TT.LPAR and tokens[idx].value in DEFAULT_BUILTINS


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    init_stdlib()
    tokens = CondLexer(text).tokenize()

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type == TT.EOF:
            break

        start, end = _token_span(text, tok)
        if start < pos or end <= start:
            continue

        # Unstyled gap before token.
        if start > pos:
            result.append(("", text[pos:start]))

        group = _TT_GROUP.get(tok.type, "")
        if tok.type == TT.IDENT and _is_call_head(tokens, i):
            group = "function"

        result.append((GROUP_STYLE.get(group, ""), text[start:end]))
        pos = end

    # Trailing unstyled text.
    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class ConditionLexer(Lexer):
    """prompt_toolkit Lexer that highlights conditions using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
