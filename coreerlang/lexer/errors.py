"""
Error handling for the Core Erlang lexer.

Provides error reporting with source location information and
suggestions for the most common mistakes.
"""

from typing import Optional, List, Iterable
from dataclasses import dataclass

from .tokens import SourceLocation


@dataclass
class Diagnostic:
    """Base class for diagnostics (errors, warnings, info)."""
    message: str
    location: SourceLocation
    severity: str  # "error", "warning", "info", "hint"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        result = f"{severity_prefix}: {self.message}\n"
        result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result


class LexerError(Exception):
    """
    Exception raised when the lexer meets text it cannot tokenize.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
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

    @property
    def location(self) -> SourceLocation:
        return self.diagnostic.location

    def __str__(self) -> str:
        return str(self.diagnostic)


class ErrorRecovery:
    """Suggestion helpers used when building lexer diagnostics."""

    @staticmethod
    def suggest_keyword_corrections(invalid_word: str, keywords: Iterable[str]) -> List[str]:
        """Suggest corrections for misspelled reserved words using edit distance."""
        suggestions = []
        for keyword in keywords:
            distance = ErrorRecovery._edit_distance(invalid_word.lower(), keyword)
            if distance <= 2:  # Allow up to 2 character differences
                suggestions.append(keyword)

        return sorted(suggestions, key=lambda k: ErrorRecovery._edit_distance(invalid_word.lower(), k))[:3]

    @staticmethod
    def _edit_distance(s1: str, s2: str) -> int:
        """Calculate Levenshtein distance between two strings."""
        if len(s1) < len(s2):
            return ErrorRecovery._edit_distance(s2, s1)

        if len(s2) == 0:
            return len(s1)

        previous_row = list(range(len(s2) + 1))
        for i, c1 in enumerate(s1):
            current_row = [i + 1]
            for j, c2 in enumerate(s2):
                insertions = previous_row[j + 1] + 1
                deletions = current_row[j] + 1
                substitutions = previous_row[j] + (c1 != c2)
                current_row.append(min(insertions, deletions, substitutions))
            previous_row = current_row

        return previous_row[-1]


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Invalid character",
    "L002": "Unterminated atom or string literal",
    "L003": "Invalid numeric literal",
    "L005": "Unknown word",
    "L006": "Invalid escape sequence",
    "L009": "Invalid character literal",
}


# Helper functions for creating common errors

def create_invalid_character_error(char: str, location: SourceLocation) -> LexerError:
    """Create an error for an invalid character."""
    if char.isprintable():
        help_text = f"The character '{char}' is not valid in Core Erlang text."
    else:
        help_text = f"Non-printable character (Unicode: U+{ord(char):04X}) is not allowed."

    return LexerError(
        message=f"Invalid character: {char!r}",
        location=location,
        code="L001",
        help_text=help_text
    )


def create_unterminated_literal_error(quote: str, location: SourceLocation) -> LexerError:
    """Create an error for an atom or string missing its closing quote."""
    kind = "atom" if quote == "'" else "string"
    return LexerError(
        message=f"Unterminated {kind} literal",
        location=location,
        code="L002",
        help_text=f"Quoted {kind}s must be closed with a matching {quote} on the same line.",
        suggestions=[f"Add a closing {quote}", f"Escape embedded quotes as \\{quote}"]
    )


def create_invalid_number_error(lexeme: str, location: SourceLocation, reason: str) -> LexerError:
    """Create an error for an invalid numeric literal."""
    return LexerError(
        message=f"Invalid numeric literal: '{lexeme}'",
        location=location,
        code="L003",
        help_text=reason
    )


def create_unknown_word_error(word: str, location: SourceLocation,
                              keywords: Iterable[str]) -> LexerError:
    """Create an error for a lowercase word that is not a reserved word."""
    corrections = ErrorRecovery.suggest_keyword_corrections(word, keywords)
    suggestions = [f"Did you mean '{keyword}'?" for keyword in corrections]
    suggestions.append(f"Quote it as an atom: '{word}'")
    return LexerError(
        message=f"Unknown word: '{word}'",
        location=location,
        code="L005",
        help_text="Words starting with a lowercase letter must be reserved words; "
                  "variables start with an uppercase letter or '_'.",
        suggestions=suggestions
    )


def create_invalid_escape_error(sequence: str, location: SourceLocation) -> LexerError:
    """Create an error for an unsupported escape sequence."""
    return LexerError(
        message=f"Invalid escape sequence: '\\{sequence}'",
        location=location,
        code="L006",
        help_text="Supported escapes are \\NNN (octal), \\^C (control, C in @..._) "
                  "and \\b \\d \\e \\f \\n \\r \\s \\t \\v \\\" \\' \\\\."
    )


def create_invalid_char_literal_error(location: SourceLocation) -> LexerError:
    """Create an error for a '$' not followed by a valid character."""
    return LexerError(
        message="Invalid character literal",
        location=location,
        code="L009",
        help_text="'$' must be followed by a character other than newline or space, "
                  "or by an escape sequence."
    )
