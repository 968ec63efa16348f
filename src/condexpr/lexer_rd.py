"""
Lexer for condition expressions

Converts condition source text into a stream of tokens.

Features:
- Pull-based: next_token() yields one token at a time
- Position tracking (line, column)
- Malformed input becomes ILLEGAL tokens instead of exceptions
"""

from typing import List

from .token_types import KEYWORDS, RESERVED, TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Condition lexer.

    Never raises: characters that start no known token are emitted as
    ILLEGAL and left for the parser to report.
    """

    KEYWORDS = KEYWORDS

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('&&', TT.AND),
        ('||', TT.OR),
        ('~=', TT.REGEXMATCH),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('<', TT.LT),
        ('>', TT.GT),
        ('!', TT.NEG),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        (',', TT.COMMA),
        (';', TT.SEMI),
    ]

    WHITESPACE = (' ', '\t', '\r', '\n')

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list ending in one EOF"""
        tokens: List[Tok] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == TT.EOF:
                return tokens

    def next_token(self) -> Tok:
        """Scan and return exactly one token. EOF repeats once input is exhausted."""
        self.skip_whitespace()

        line, column = self.line, self.column
        ch = self.peek()

        if self.pos >= len(self.source):
            return Tok(TT.EOF, '', line, column)

        if ch == '"':
            return Tok(TT.STRING, self.scan_string(), line, column)

        if is_digit(ch):
            return Tok(TT.INT, self.scan_number(), line, column)

        if is_letter(ch):
            value = self.scan_identifier()
            return Tok(lookup_ident(value), value, line, column)

        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                return Tok(op_type, op_str, line, column)

        # Lone '=', '&', '|', '~' and anything unknown
        return Tok(TT.ILLEGAL, self.advance(), line, column)

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self) -> str:
        """Scan "..." verbatim; an unterminated string runs to end of input"""
        self.advance()  # opening quote
        start = self.pos
        while self.pos < len(self.source) and self.peek() != '"':
            self.advance()
        value = self.source[start:self.pos]
        if self.pos < len(self.source):
            self.advance()  # closing quote
        return value

    def scan_number(self) -> str:
        """Scan a digit run, or a 0x/0o/0b prefixed literal"""
        start = self.pos
        if self.peek() == '0' and self.peek(1) in ('x', 'X', 'o', 'O', 'b', 'B'):
            self.advance(2)
            # Validity is the parser's call; keep the whole alphanumeric run
            while self.peek().isascii() and self.peek().isalnum():
                self.advance()
            return self.source[start:self.pos]

        while is_digit(self.peek()):
            self.advance()
        return self.source[start:self.pos]

    def scan_identifier(self) -> str:
        start = self.pos
        while is_letter(self.peek()):
            self.advance()
        return self.source[start:self.pos]

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = self.source[self.pos:self.pos + n]
        for ch in result:
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(result)
        return result

    def skip_whitespace(self) -> None:
        while self.peek() in self.WHITESPACE:
            self.advance()


def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def is_letter(ch: str) -> bool:
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z') or ch == '_'


def lookup_ident(ident: str) -> TT:
    """Keyword, reserved word (ILLEGAL) or plain identifier"""
    if ident in KEYWORDS:
        return KEYWORDS[ident]
    if ident in RESERVED:
        return TT.ILLEGAL
    return TT.IDENT


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Lexer(source).tokenize()
