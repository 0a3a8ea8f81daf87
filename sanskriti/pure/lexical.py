"""Lexical analysis for pure (canonical keyword) Lox source.

The `pure` directory contains the language core: lexing, parsing and evaluation of Lox as written with its canonical
English keywords. Keyword translation lives in the `lang` directory and must happen before source reaches the Lexer.

Tokens can be loosely defined as follows:

```
<number>     ::= <digit>+ ( "." <digit>+ )?        ; a trailing "." is a separate DOT token
<string>     ::= '"' <any char but '"'>* '"'       ; may span lines, no escape sequences
<identifier> ::= <alpha> ( <alpha> | <digit> )*    ; <alpha> is an ASCII letter or "_"
<keyword>    ::= and | class | else | false | for | fun | if | nil | or | print | return | super | this | true
               | var | while
<operator>   ::= "!=" | "==" | "<=" | ">=" | "+" | "-" | "*" | "/" | "!" | "=" | "<" | ">"
<punct>      ::= "(" | ")" | "{" | "}" | "," | "." | ";"
<comment>    ::= "//" <any char but newline>*
```
"""

import math
import string
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from sanskriti.lang.error import UnexpectedCharacterError, UnterminatedStringError


class TokenKind(Enum):
    """Token kinds. Values are the lexemes for fixed tokens, or a placeholder for literals."""
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    COMMA = ","
    DOT = "."
    SEMICOLON = ";"

    MINUS = "-"
    PLUS = "+"
    STAR = "*"
    SLASH = "/"
    BANG = "!"
    EQUAL = "="
    LESS = "<"
    GREATER = ">"

    BANG_EQUAL = "!="
    EQUAL_EQUAL = "=="
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="

    NUMBER = "<number>"
    STRING = "<string>"
    IDENTIFIER = "<identifier>"

    AND = "and"
    CLASS = "class"
    ELSE = "else"
    FALSE = "false"
    FOR = "for"
    FUN = "fun"
    IF = "if"
    NIL = "nil"
    OR = "or"
    PRINT = "print"
    RETURN = "return"
    SUPER = "super"
    THIS = "this"
    TRUE = "true"
    VAR = "var"
    WHILE = "while"

    EOF = "<eof>"


KEYWORDS = {kind.value: kind for kind in TokenKind if kind.value.isalpha()}
DOUBLE = {kind.value: kind for kind in TokenKind if len(kind.value) == 2 and not kind.value.isalpha()}
SINGLE = {kind.value: kind for kind in TokenKind if len(kind.value) == 1}


def format_number(number):
    """Display form of a number: integral values get a ".0" suffix (42 -> "42.0"), others use the digits of their
    shortest round-trip form, always in plain decimal notation (1e-05 -> "0.00001"). Infinities are integral (inf.0).
    """
    number = float(number)
    if math.isnan(number):
        return "NaN"
    elif math.isinf(number):
        return "inf.0" if number > 0 else "-inf.0"
    elif number.is_integer():
        return f"{number:.0f}.0"
    return format(Decimal(repr(number)), "f")


@dataclass(frozen=True)
class Token:
    """A classified lexeme. literal is the value of NUMBER (float) and STRING (str) tokens, otherwise None."""
    kind: TokenKind
    lexeme: str
    literal: object
    line: int
    column: int = 0

    def __str__(self):
        if self.kind is TokenKind.NUMBER:
            literal = format_number(self.literal)
        elif self.kind is TokenKind.STRING:
            literal = self.literal
        else:
            literal = "null"
        return f"{self.kind.name} {self.lexeme} {literal}"


class Lexer:
    """Lazily converts source text into Tokens. Iterating over a Lexer always starts again from the beginning of the
    source.

    Errors are yielded rather than raised, so a single bad character never ends the stream: every item is either a
    Token or a LexicalError, and the last item is always the EOF Token.
    """
    WHITESPACE = " \t\r"
    DIGITS = string.digits
    ALPHA = string.ascii_letters + "_"

    def __init__(self, source):
        self.source = source

    def __iter__(self):
        return self.scan()

    def scan(self):
        """Generator of Tokens and LexicalErrors. See module docstring for the token grammar."""
        src = self.source
        pos = 0
        line = 1
        line_start = 0  # offset of the first character on the current line

        while pos < len(src):
            char = src[pos]
            column = pos - line_start

            if char == "\n":
                pos += 1
                line += 1
                line_start = pos

            elif char in Lexer.WHITESPACE:
                pos += 1

            elif src.startswith("//", pos):
                end = src.find("\n", pos)
                pos = len(src) if end == -1 else end

            elif src[pos:pos + 2] in DOUBLE:
                yield Token(DOUBLE[src[pos:pos + 2]], src[pos:pos + 2], None, line, column)
                pos += 2

            elif char in SINGLE:
                yield Token(SINGLE[char], char, None, line, column)
                pos += 1

            elif char == "\"":
                end = src.find("\"", pos + 1)
                if end == -1:
                    yield UnterminatedStringError(line, column)  # reported on the opening quote's line
                    end = len(src) - 1

                lexeme = src[pos:end + 1]
                if lexeme.endswith("\"") and len(lexeme) > 1:
                    yield Token(TokenKind.STRING, lexeme, lexeme[1:-1], line, column)

                if "\n" in lexeme:
                    line += lexeme.count("\n")
                    line_start = pos + lexeme.rfind("\n") + 1
                pos = end + 1

            elif char in Lexer.DIGITS:
                end = self._skip(Lexer.DIGITS, pos)
                if src[end:end + 1] == "." and src[end + 1:end + 2] and src[end + 1] in Lexer.DIGITS:
                    end = self._skip(Lexer.DIGITS, end + 1)

                lexeme = src[pos:end]
                yield Token(TokenKind.NUMBER, lexeme, float(lexeme), line, column)
                pos = end

            elif char in Lexer.ALPHA:
                end = self._skip(Lexer.ALPHA + Lexer.DIGITS, pos)
                lexeme = src[pos:end]
                yield Token(KEYWORDS.get(lexeme, TokenKind.IDENTIFIER), lexeme, None, line, column)
                pos = end

            else:
                yield UnexpectedCharacterError(char, line, column)
                pos += 1

        yield Token(TokenKind.EOF, "", None, line, pos - line_start)

    def _skip(self, chars, pos):
        """Returns the offset of the first character at or after pos that isn't in chars."""
        while pos < len(self.source) and self.source[pos] in chars:
            pos += 1
        return pos
