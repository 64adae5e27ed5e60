"""Lexer for the filter expression language."""

import re

import ply.lex as lex

from gameshop_tables.errors import FilterSyntaxError

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def _unescape(body: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


class FilterLexer:
    """Lexer for tokenizing filter expressions."""

    # Reserved keywords
    reserved = {
        "and": "AND",
        "in": "IN",
        "not": "NOT",
        "between": "BETWEEN",
        "true": "TRUE",
        "false": "FALSE",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "INTEGER",
        "FLOAT",
        "STRING",
        "LPAREN",
        "RPAREN",
        "COMMA",
        "EQ",
        "NEQ",
        "LT",
        "LTE",
        "GT",
        "GTE",
    ] + list(reserved.values())

    # Simple tokens
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_COMMA = r","
    t_EQ = r"==|="
    t_NEQ = r"!="
    t_LTE = r"<="
    t_LT = r"<"
    t_GTE = r">="
    t_GT = r">"

    # Expressions may span lines; line numbers are not tracked
    t_ignore = " \t\r\n"
    t_ignore_COMMENT = r"--[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_FLOAT(self, t: lex.LexToken) -> lex.LexToken:
        r"-?(?:\d+\.\d*(?:[eE][-+]?\d+)?|\d+[eE][-+]?\d+)"
        t.value = float(t.value)
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+"
        t.value = int(t.value)
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"|\'([^\'\\]|\\.)*\''
        t.value = _unescape(t.value[1:-1])
        return t

    def t_QUOTED_COLUMN(self, t: lex.LexToken) -> lex.LexToken:
        r"`[^`]+`"
        t.type = "IDENTIFIER"
        t.value = t.value.strip("`")
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise FilterSyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        self.lexer = lex.lex(module=self, **kwargs)

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Return every token of an expression."""
        self.lexer.input(data)
        return list(self.lexer)


def escape_if_keyword(name: str) -> str:
    """Quote a column name in backticks when it would lex as a keyword."""
    if name.lower() in FilterLexer.reserved:
        return f"`{name}`"
    return name
