"""
Core Erlang Lexer Package

Implements the lexical analyzer (tokenizer) for Core Erlang text.

Key Features:
- Quoted atoms, strings and $-characters with octal, control and named escapes
- Signed integer and float literals (float preferred over integer)
- %-comments and whitespace skipping
- Reserved words fixed by a LexerConfig built once per lexer
- Source location tracking for diagnostics
"""

from .tokens import Token, TokenType, SourceLocation, LexerConfig, DEFAULT_CONFIG
from .lexer import Lexer, tokenize_string, tokenize_file
from .errors import Diagnostic, LexerError

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "LexerConfig",
    "DEFAULT_CONFIG",
    "Diagnostic",
    "LexerError",
    "tokenize_string",
    "tokenize_file",
]
