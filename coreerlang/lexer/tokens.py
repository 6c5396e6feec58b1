"""
Token definitions for the Core Erlang lexer.

This module defines all token types of the Core Erlang text format:
- Reserved words (module, fun, case, letrec, ...)
- Literals (integers, floats, quoted atoms, characters, strings)
- Variables
- Punctuation and delimiters

It also holds the lexer configuration (reserved words and identifier
character classes), which is built once and never mutated.
"""

from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping


class TokenType(Enum):
    """
    Enumeration of all token types in Core Erlang.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of input

    # ========================================================================
    # Literals
    # ========================================================================
    INTEGER = auto()                # 42, -7, +3
    FLOAT = auto()                  # 3.14, -1.0e10
    ATOM = auto()                   # 'foo', 'hello world'
    CHARACTER = auto()              # $a, $\n
    STRING = auto()                 # "hello"

    # ========================================================================
    # Variables
    # ========================================================================
    VARIABLE = auto()               # X, _Acc, Cor@1

    # ========================================================================
    # Reserved words
    # ========================================================================
    MODULE = auto()                 # module
    ATTRIBUTES = auto()             # attributes
    END = auto()                    # end
    FUN = auto()                    # fun
    APPLY = auto()                  # apply
    CALL = auto()                   # call
    PRIMOP = auto()                 # primop
    CASE = auto()                   # case
    OF = auto()                     # of
    LET = auto()                    # let
    IN = auto()                     # in
    LETREC = auto()                 # letrec
    DO = auto()                     # do
    CATCH = auto()                  # catch
    RECEIVE = auto()                # receive
    AFTER = auto()                  # after
    TRY = auto()                    # try
    WHEN = auto()                   # when

    # ========================================================================
    # Punctuation and Delimiters
    # ========================================================================
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    LEFT_BRACKET = auto()           # [
    RIGHT_BRACKET = auto()          # ]
    LEFT_BRACE = auto()             # {
    RIGHT_BRACE = auto()            # }
    LEFT_ANGLE = auto()             # <
    RIGHT_ANGLE = auto()            # >
    COMMA = auto()                  # ,
    COLON = auto()                  # :
    SLASH = auto()                  # /
    EQUALS = auto()                 # =
    BAR = auto()                    # |
    HASH = auto()                   # #
    TILDE = auto()                  # ~
    ARROW = auto()                  # ->
    ANNOTATE = auto()               # -|
    FAT_ARROW = auto()              # =>
    ASSOC = auto()                  # :=


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source text.

    Used for error reporting and debugging information.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token of Core Erlang text.

    Contains the token type, lexeme (raw text), semantic value
    and source location for error reporting.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    value: Any                      # Decoded value (int, float, str) or None
    location: SourceLocation        # Source location

    def __str__(self) -> str:
        if self.value is not None and self.value != self.lexeme:
            return f"{self.type.name}({self.lexeme!r} -> {self.value!r})"
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")


# Reserved words. Every lowercase-start word must be one of these.
KEYWORDS: Dict[str, TokenType] = {
    "module": TokenType.MODULE,
    "attributes": TokenType.ATTRIBUTES,
    "end": TokenType.END,
    "fun": TokenType.FUN,
    "apply": TokenType.APPLY,
    "call": TokenType.CALL,
    "primop": TokenType.PRIMOP,
    "case": TokenType.CASE,
    "of": TokenType.OF,
    "let": TokenType.LET,
    "in": TokenType.IN,
    "letrec": TokenType.LETREC,
    "do": TokenType.DO,
    "catch": TokenType.CATCH,
    "receive": TokenType.RECEIVE,
    "after": TokenType.AFTER,
    "try": TokenType.TRY,
    "when": TokenType.WHEN,
}

# Operators and punctuation, longest first wins in the lexer
OPERATORS: Dict[str, TokenType] = {
    "->": TokenType.ARROW,
    "-|": TokenType.ANNOTATE,
    "=>": TokenType.FAT_ARROW,
    ":=": TokenType.ASSOC,

    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "[": TokenType.LEFT_BRACKET,
    "]": TokenType.RIGHT_BRACKET,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    "<": TokenType.LEFT_ANGLE,
    ">": TokenType.RIGHT_ANGLE,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    "/": TokenType.SLASH,
    "=": TokenType.EQUALS,
    "|": TokenType.BAR,
    "#": TokenType.HASH,
    "~": TokenType.TILDE,
}

# Human readable names used in parser diagnostics
TOKEN_DESCRIPTIONS: Dict[TokenType, str] = {
    TokenType.EOF: "end of input",
    TokenType.INTEGER: "integer",
    TokenType.FLOAT: "float",
    TokenType.ATOM: "atom",
    TokenType.CHARACTER: "character",
    TokenType.STRING: "string",
    TokenType.VARIABLE: "variable",
}
TOKEN_DESCRIPTIONS.update({tt: f"'{word}'" for word, tt in KEYWORDS.items()})
TOKEN_DESCRIPTIONS.update({tt: f"'{op}'" for op, tt in OPERATORS.items()})

# Named escape sequences: \b \d \e \f \n \r \s \t \v \" \' \\
ESCAPE_SEQUENCES: Dict[str, str] = {
    'b': '\b',
    'd': '\x7f',
    'e': '\x1b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    's': ' ',
    't': '\t',
    'v': '\v',
    '"': '"',
    "'": "'",
    '\\': '\\',
}

OCTAL_DIGITS = frozenset("01234567")


def describe(token_type: TokenType) -> str:
    """Return the diagnostic name of a token type."""
    return TOKEN_DESCRIPTIONS.get(token_type, token_type.name)


@dataclass(frozen=True)
class LexerConfig:
    """
    Lexical configuration, fixed when a lexer or parser is constructed.

    Variables start with an uppercase letter or '_' and continue with
    letters, digits and `variable_chars`. Lowercase-start words must be
    found in `reserved_words`.
    """
    reserved_words: Mapping[str, TokenType] = field(default_factory=lambda: dict(KEYWORDS))
    variable_chars: FrozenSet[str] = frozenset("@_")
    comment_char: str = "%"

    def is_variable_start(self, char: str) -> bool:
        return char == '_' or char.isupper()

    def is_name_continue(self, char: str) -> bool:
        return char.isalnum() or char in self.variable_chars

    def is_word_start(self, char: str) -> bool:
        return char.islower()


DEFAULT_CONFIG = LexerConfig()
