"""
Core Erlang Lexer - turns Core Erlang text into a list of tokens.

Lexing is context free: lowercase words are always reserved words,
uppercase/underscore words are always variables, and a sign directly in
front of a digit always belongs to the number.
"""

import logging
import re
from typing import List, Optional

from .tokens import (
    Token, TokenType, SourceLocation, LexerConfig, DEFAULT_CONFIG, OPERATORS,
    ESCAPE_SEQUENCES, OCTAL_DIGITS
)
from .errors import (
    create_invalid_character_error, create_unterminated_literal_error,
    create_invalid_number_error, create_unknown_word_error, create_invalid_escape_error,
    create_invalid_char_literal_error
)

logger = logging.getLogger(__name__)


class Lexer:
    """
    Core Erlang lexical analyzer.

    Converts source text into a list of tokens terminated by EOF. The first
    lexical error aborts tokenization.
    """

    # Float is matched before integer so "1.0" never splits into 1 and ".0"
    float_pattern = re.compile(r'[+-]?\d+(?:\.\d+(?:[eE][+-]?\d+)?|[eE][+-]?\d+)')
    integer_pattern = re.compile(r'[+-]?\d+')

    def __init__(self, source: str, filename: str = "<unknown>",
                 config: Optional[LexerConfig] = None):
        """
        Initialize the lexer with source text.

        Args:
            source: Core Erlang text
            filename: Name of the input for error reporting
            config: Reserved words and identifier classes (defaults to DEFAULT_CONFIG)
        """
        self.source = source
        self.filename = filename
        self.config = config or DEFAULT_CONFIG
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens including the trailing EOF token

        Raises:
            LexerError: On the first character sequence that is not a token
        """
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens = []

        while True:
            self._skip_whitespace_and_comments()
            if self.pos >= len(self.source):
                break
            self.tokens.append(self._next_token())

        self.tokens.append(Token(TokenType.EOF, "", None, self._location()))
        logger.debug("Tokenized %s: %d tokens", self.filename, len(self.tokens))
        return self.tokens

    def _next_token(self) -> Token:
        """Read the token starting at the current position."""
        location = self._location()
        current_char = self.source[self.pos]

        # Numbers, with an optional sign glued to the first digit
        if current_char.isdigit() or (current_char in '+-' and self._peek().isdigit()):
            return self._tokenize_number(location)

        if self.config.is_variable_start(current_char):
            return self._tokenize_variable(location)

        if self.config.is_word_start(current_char):
            return self._tokenize_reserved_word(location)

        if current_char == "'":
            value = self._read_quoted("'", location)
            return Token(TokenType.ATOM, self.source[location.offset:self.pos], value, location)

        if current_char == '"':
            value = self._read_quoted('"', location)
            return Token(TokenType.STRING, self.source[location.offset:self.pos], value, location)

        if current_char == '$':
            return self._tokenize_character(location)

        # Operators and punctuation (two-character operators first)
        for op_len in (2, 1):
            potential_op = self.source[self.pos:self.pos + op_len]
            if len(potential_op) == op_len and potential_op in OPERATORS:
                self._advance_by(op_len)
                return Token(OPERATORS[potential_op], potential_op, None, location)

        raise create_invalid_character_error(current_char, location)

    def _tokenize_number(self, location: SourceLocation) -> Token:
        """Tokenize a signed or unsigned float or integer literal."""
        remaining = self.source[self.pos:]

        float_match = self.float_pattern.match(remaining)
        if float_match:
            lexeme = float_match.group(0)
            try:
                value = float(lexeme)
            except (ValueError, OverflowError):
                raise create_invalid_number_error(lexeme, location, "Cannot parse floating-point number")
            self._advance_by(len(lexeme))
            return Token(TokenType.FLOAT, lexeme, value, location)

        match = self.integer_pattern.match(remaining)
        if not match:
            raise create_invalid_number_error(remaining[:10], location, "Expected decimal digits")
        lexeme = match.group(0)
        self._advance_by(len(lexeme))
        return Token(TokenType.INTEGER, lexeme, int(lexeme, 10), location)

    def _read_name(self) -> str:
        start_pos = self.pos
        # First character is already validated by the caller
        self._advance()
        while self.pos < len(self.source) and self.config.is_name_continue(self.source[self.pos]):
            self._advance()
        return self.source[start_pos:self.pos]

    def _tokenize_variable(self, location: SourceLocation) -> Token:
        lexeme = self._read_name()
        return Token(TokenType.VARIABLE, lexeme, lexeme, location)

    def _tokenize_reserved_word(self, location: SourceLocation) -> Token:
        """Tokenize a lowercase word, which must be a reserved word."""
        lexeme = self._read_name()
        token_type = self.config.reserved_words.get(lexeme)
        if token_type is None:
            raise create_unknown_word_error(lexeme, location, self.config.reserved_words.keys())
        return Token(token_type, lexeme, None, location)

    def _read_quoted(self, quote: str, location: SourceLocation) -> str:
        """Read a quoted atom or string and return its decoded text."""
        self._advance()  # Skip opening quote
        value_parts = []

        while True:
            if self.pos >= len(self.source) or self.source[self.pos] in '\r\n':
                raise create_unterminated_literal_error(quote, location)
            char = self.source[self.pos]
            if char == quote:
                break
            if char == '\\':
                value_parts.append(self._read_escape())
            else:
                value_parts.append(char)
                self._advance()

        self._advance()  # Skip closing quote
        return ''.join(value_parts)

    def _tokenize_character(self, location: SourceLocation) -> Token:
        """Tokenize a character literal such as $a or $\\n."""
        self._advance()  # Skip '$'

        if self.pos >= len(self.source) or self.source[self.pos] in '\n\r ':
            raise create_invalid_char_literal_error(location)

        if self.source[self.pos] == '\\':
            char_value = self._read_escape()
        else:
            char_value = self.source[self.pos]
            self._advance()

        lexeme = self.source[location.offset:self.pos]
        return Token(TokenType.CHARACTER, lexeme, char_value, location)

    def _read_escape(self) -> str:
        """
        Decode the escape sequence starting at the current backslash.

        Supports \\NNN (one to three octal digits), \\^C control characters
        with C in 0x40-0x5F, and the named escapes in ESCAPE_SEQUENCES.
        """
        location = self._location()
        self._advance()  # Skip backslash

        if self.pos >= len(self.source):
            raise create_invalid_escape_error("", location)

        escape_char = self.source[self.pos]

        if escape_char in OCTAL_DIGITS:
            digits = []
            while (len(digits) < 3 and self.pos < len(self.source)
                   and self.source[self.pos] in OCTAL_DIGITS):
                digits.append(self.source[self.pos])
                self._advance()
            return chr(int(''.join(digits), 8))

        if escape_char == '^':
            control = self._peek()
            if not '\x40' <= control <= '\x5f':
                raise create_invalid_escape_error('^' + control.strip('\0'), location)
            self._advance_by(2)
            return chr(ord(control) & 0x1f)

        if escape_char in ESCAPE_SEQUENCES:
            self._advance()
            return ESCAPE_SEQUENCES[escape_char]

        raise create_invalid_escape_error(escape_char, location)

    def _skip_whitespace_and_comments(self):
        """Skip whitespace and %-comments."""
        while self.pos < len(self.source):
            char = self.source[self.pos]

            if char.isspace():
                self._advance()
                continue

            # Line comments run to the end of the line
            if char == self.config.comment_char:
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self._advance()
                continue

            break

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _advance_by(self, count: int):
        """Advance position by multiple characters."""
        for _ in range(count):
            self._advance()

    def _peek(self, offset: int = 1) -> str:
        """Peek at character ahead without advancing."""
        peek_pos = self.pos + offset
        if peek_pos < len(self.source):
            return self.source[peek_pos]
        return '\0'


def tokenize_string(source: str, filename: str = "<string>",
                    config: Optional[LexerConfig] = None) -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Core Erlang text
        filename: Filename for error reporting
        config: Optional lexer configuration

    Returns:
        List of tokens

    Raises:
        LexerError: If lexing fails
    """
    return Lexer(source, filename, config).tokenize()


def tokenize_file(filepath: str, config: Optional[LexerConfig] = None) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexerError: If lexing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize_string(source, filepath, config)
