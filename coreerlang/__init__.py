"""
Core Erlang Parser

Reads the textual form of Core Erlang, the intermediate language of the
Erlang compiler, and builds an abstract syntax tree for analysis tools.

Architecture:
    coreerlang/
    ├── lexer/           # Tokenization and lexical analysis
    └── parser/          # Syntax analysis and AST generation

License: BSD-3-Clause
"""

__version__ = "0.1.0"
__license__ = "BSD-3-Clause"

from .lexer import Lexer, LexerConfig, LexerError, tokenize_string, tokenize_file
from .parser import *
from .parser import __all__ as _parser_all
from .parser.parser import parse_string as parse

__all__ = [
    "parse",
    "Lexer",
    "LexerConfig",
    "LexerError",
    "tokenize_string",
    "tokenize_file",
    "__version__",
    "__license__",
] + _parser_all
