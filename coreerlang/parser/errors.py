"""
Error handling for the Core Erlang parser.

A parse either succeeds completely or fails with a single ParseError. The
parser backtracks freely, so the error it reports is the failure found at
the furthest token reached, with every expectation at that position merged.
"""

from typing import Optional, List, Iterable

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import Diagnostic, LexerError


class ParseError(Exception):
    """
    Exception raised when the input is not a valid Core Erlang text.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        token: Optional[Token] = None,
        expected: Optional[Iterable[str]] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.token = token
        self.expected = sorted(set(expected)) if expected else []

    @property
    def location(self) -> SourceLocation:
        return self.diagnostic.location

    @property
    def line(self) -> int:
        return self.diagnostic.location.line

    @property
    def column(self) -> int:
        return self.diagnostic.location.column

    @property
    def offset(self) -> int:
        return self.diagnostic.location.offset

    def __str__(self) -> str:
        return str(self.diagnostic)


def suggest_missing_token(expected: Iterable[str]) -> List[str]:
    """Suggest what token might be missing."""
    token_suggestions = {
        "')'": "Add a closing parenthesis ')'",
        "']'": "Add a closing bracket ']'",
        "'}'": "Add a closing brace '}'",
        "'>'": "Add a closing angle bracket '>'",
        "'end'": "Add 'end' to close the module or case expression",
        "'->'": "Add an arrow '->' before the clause body",
        "'in'": "Add 'in' before the body of the let/letrec",
    }
    return [token_suggestions[item] for item in sorted(expected) if item in token_suggestions]


def format_expected(expected: Iterable[str]) -> str:
    """Render expectations as "a", "a or b", "a, b or c"."""
    items = sorted(set(expected))
    if not items:
        return "valid input"
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + " or " + items[-1]


def describe_token(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    return f"{token.type.name} ('{token.lexeme}')"


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P010": "Unexpected end of input",
    "P013": "Trailing input after module",
    "P014": "Unknown grammar rule",
    "P015": "Lexical error",
    "P016": "Nesting too deep",
}


# Helper functions for creating common parser errors

def create_unexpected_token_error(expected: Iterable[str], found: Token) -> ParseError:
    """Create an error for a token that none of the expected alternatives accepts."""
    expected = sorted(set(expected))
    expected_str = format_expected(expected)

    if found.type == TokenType.EOF:
        return create_unexpected_eof_error(expected, found)

    return ParseError(
        message=f"Expected {expected_str}, found {describe_token(found)}",
        location=found.location,
        token=found,
        expected=expected,
        code="P001",
        help_text=f"The parser expected to see {expected_str} at this position.",
        suggestions=suggest_missing_token(expected)
    )


def create_unexpected_eof_error(expected: Iterable[str], found: Token) -> ParseError:
    """Create an error for unexpected end of input."""
    expected_str = format_expected(expected)
    return ParseError(
        message=f"Unexpected end of input, expected {expected_str}",
        location=found.location,
        token=found,
        expected=expected,
        code="P010",
        help_text=f"The input ended while the parser was expecting {expected_str}.",
        suggestions=suggest_missing_token(expected)
    )


def create_trailing_input_error(found: Token) -> ParseError:
    """Create an error for tokens left after a complete parse."""
    return ParseError(
        message=f"Expected end of input, found {describe_token(found)}",
        location=found.location,
        token=found,
        expected=["end of input"],
        code="P013",
        help_text="Nothing but whitespace and comments may follow a complete parse.",
        suggestions=["Remove the trailing text", "Check for a misplaced 'end'"]
    )


def create_unknown_rule_error(rule: str, known_rules: Iterable[str],
                              location: SourceLocation) -> ParseError:
    """Create an error for a diagnostic request naming a rule that does not exist."""
    known = sorted(known_rules)
    return ParseError(
        message=f"Unknown grammar rule '{rule}'",
        location=location,
        code="P014",
        help_text=f"Known rules: {', '.join(known)}"
    )


def from_lexer_error(error: LexerError) -> ParseError:
    """Wrap a lexical error so callers only ever handle ParseError."""
    diagnostic = error.diagnostic
    return ParseError(
        message=diagnostic.message,
        location=diagnostic.location,
        code=diagnostic.code or "P015",
        help_text=diagnostic.help_text,
        suggestions=diagnostic.suggestions
    )


def create_nesting_error(token: Token) -> ParseError:
    """Create an error for input nested deeper than the parser can descend."""
    return ParseError(
        message="Input is nested too deeply to parse",
        location=token.location,
        token=token,
        code="P016",
        help_text="The expression nesting exceeds the parser's recursion limit."
    )
