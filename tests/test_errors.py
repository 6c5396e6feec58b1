"""
Test suite for parse error reporting.

Tests cover:
- Unexpected tokens and unexpected end of input
- Furthest-failure position and merged expectations
- Trailing input after a complete parse
- Lexical errors surfacing as parse errors
- The single-rule debugging entry points
"""

import io
import unittest
import tempfile
import sys
import os
from contextlib import redirect_stdout

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from coreerlang.parser.parser import parse_string, parse_rule, debug_rule_file
from coreerlang.parser.errors import ParseError, format_expected
from coreerlang.parser.ast_nodes import Atom, ETuple, LAtom, Let, Lit, Seq
from coreerlang.lexer.errors import LexerError


class TestParseErrors(unittest.TestCase):
    """Test cases for error diagnostics."""

    def _error(self, source: str, rule: str = None) -> ParseError:
        with self.assertRaises(ParseError) as context:
            if rule is None:
                parse_string(source)
            else:
                parse_rule(rule, source)
        return context.exception

    def test_missing_end(self):
        error = self._error("module 'm' [] attributes []")
        self.assertEqual(error.diagnostic.code, "P010")
        self.assertEqual(error.expected, ["'end'", "function definition"])
        self.assertIn("Add 'end' to close the module or case expression",
                      error.diagnostic.suggestions)

    def test_empty_input(self):
        error = self._error("")
        self.assertEqual(error.diagnostic.code, "P010")
        self.assertIn("'module'", error.expected)

    def test_unexpected_token_location(self):
        error = self._error("module 'm' [] attributes [] 'f'/1 = 42 end")
        self.assertEqual(error.diagnostic.code, "P001")
        self.assertEqual(error.line, 1)
        self.assertEqual(error.column, 37)
        self.assertEqual(error.token.lexeme, "42")

    def test_furthest_failure_wins(self):
        source = "module 'm' [] attributes []\n'f'/0 = fun () -> {1, }\nend"
        error = self._error(source)
        self.assertEqual((error.line, error.column), (2, 23))
        self.assertEqual(error.expected, ["expression"])
        self.assertIn("Expected expression", error.diagnostic.message)

    def test_expectations_are_merged(self):
        error = self._error("case X of Y -> Y", rule="sexpression")
        self.assertEqual(error.diagnostic.code, "P010")
        self.assertEqual(error.expected, ["'end'", "pattern"])

    def test_trailing_input(self):
        error = self._error("module 'm' [] attributes [] end 'x'")
        self.assertEqual(error.diagnostic.code, "P013")
        self.assertEqual(error.column, 33)
        self.assertEqual(error.expected, ["end of input"])

    def test_lexer_error_becomes_parse_error(self):
        error = self._error("module 'm' [] attributes [] endd")
        self.assertEqual(error.diagnostic.code, "L005")
        self.assertIsInstance(error.__cause__, LexerError)
        self.assertEqual(error.column, 29)

    def test_error_message_renders_location(self):
        error = self._error("module 'm' [] attributes []")
        text = str(error)
        self.assertTrue(text.startswith("ERROR: Unexpected end of input"))
        self.assertIn("<string>:1:28", text)

    def test_deep_nesting_is_reported(self):
        depth = 20000
        error = self._error("{" * depth + "}" * depth, rule="sexpression")
        self.assertEqual(error.diagnostic.code, "P016")

    def test_moderate_nesting_parses(self):
        depth = 1000
        expr = parse_rule("sexpression", "{" * depth + "}" * depth)
        self.assertIsInstance(expr, ETuple)

    def test_long_let_chain_parses(self):
        """erlc writes each sequential step of a function body as a nested let."""
        steps = 2000
        body = "".join(f"let <_{i}> = call 'erlang':'self' () in " for i in range(steps))
        source = f"module 'm' ['f'/0] attributes [] 'f'/0 = fun () -> {body}'ok' end"

        module = parse_string(source).value
        expr = module.defs[0].body.value.body.expr.value
        depth = 0
        while isinstance(expr, Let):
            depth += 1
            expr = expr.body.expr.value
        self.assertEqual(depth, steps)
        self.assertEqual(expr, Lit(LAtom(Atom("ok"))))

    def test_long_sequence_chain_parses(self):
        steps = 2000
        expr = parse_rule("sexpression", "do 'a' " * steps + "'ok'")
        depth = 0
        while isinstance(expr, Seq):
            depth += 1
            expr = expr.second.expr.value
        self.assertEqual(depth, steps)

    def test_format_expected(self):
        self.assertEqual(format_expected([]), "valid input")
        self.assertEqual(format_expected(["atom"]), "atom")
        self.assertEqual(format_expected(["b", "a", "c", "a"]), "a, b or c")


class TestRuleEntryPoints(unittest.TestCase):
    """Test cases for the single-rule debugging entry points."""

    def test_unknown_rule(self):
        with self.assertRaises(ParseError) as context:
            parse_rule("statement", "X")
        self.assertEqual(context.exception.diagnostic.code, "P014")
        self.assertIn("expression", context.exception.diagnostic.help_text)

    def test_rule_must_consume_all_input(self):
        with self.assertRaises(ParseError) as context:
            parse_rule("expression", "X Y")
        self.assertEqual(context.exception.diagnostic.code, "P013")

    def test_clause_rule(self):
        clause = parse_rule("clause", "X when 'true' -> X")
        self.assertIsNone(clause.annotations)
        self.assertIsNotNone(clause.value.guard)

    def test_fundef_rule(self):
        fundef = parse_rule("fundef", "'f'/0 = fun () -> 'ok'")
        self.assertEqual(fundef.name.value.arity, 0)

    def _write(self, text: str) -> str:
        handle, path = tempfile.mkstemp(suffix=".txt")
        with os.fdopen(handle, 'w', encoding='utf-8') as f:
            f.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_debug_rule_file_prints_tree(self):
        path = self._write("{X, 'a'}")
        output = io.StringIO()
        with redirect_stdout(output):
            result = debug_rule_file("sexpression", path)
        self.assertIsInstance(result, ETuple)
        self.assertIn("ETuple", output.getvalue())

    def test_debug_rule_file_prints_error(self):
        path = self._write("{X, }")
        output = io.StringIO()
        with redirect_stdout(output):
            result = debug_rule_file("sexpression", path)
        self.assertIsNone(result)
        self.assertIn("ERROR:", output.getvalue())
        self.assertIn(path, output.getvalue())


if __name__ == '__main__':
    unittest.main()
