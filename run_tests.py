#!/usr/bin/env python3
"""
Main test runner for the Core Erlang parser tests.
"""

import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)

SAMPLE_MODULE = """
module 'sample' ['start'/0]
    attributes []
'start'/0 =
    fun () ->
\tlet <Pid> = call 'erlang':'self' ()
\tin  receive
\t      <{'ping', From}> when 'true' ->
\t\t  call 'erlang':'!' (From, 'pong')
\t    after 'infinity' ->
\t      'ok'
end
"""


def run_smoke_test() -> bool:
    """Lex and parse a small module end to end."""

    print("🚀 Core Erlang Parser Test Suite")
    print("=" * 60)

    try:
        from coreerlang.lexer.lexer import Lexer
        from coreerlang.parser.parser import Parser
        print("✅ Lexer and parser modules imported successfully")
        print()
    except ImportError as e:
        print(f"❌ Failed to import parser modules: {e}")
        return False

    print("Testing simple parsing pipeline...")
    try:
        print("  🔧 Lexing...")
        tokens = Lexer(SAMPLE_MODULE, "sample.core").tokenize()
        print(f"     Generated {len(tokens)} tokens")

        print("  🔧 Parsing...")
        module = Parser(tokens).parse().value
        print(f"     Parsed module {module.name} with {len(module.defs)} definitions")
        print()
        print("✅ Parsing pipeline test PASSED")
        print()
    except Exception as e:
        print(f"❌ Parsing pipeline test FAILED: {e}")
        import traceback
        traceback.print_exc()
        return False

    return True


def run_unit_tests() -> bool:
    """Discover and run the unittest suites under tests/."""
    print("Running unit tests...")
    print("-" * 40)

    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"))
    result = unittest.TextTestRunner(verbosity=1).run(suite)

    print("-" * 40)
    if result.wasSuccessful():
        print(f"✅ {result.testsRun} tests passed")
    else:
        print(f"❌ {len(result.failures)} failures, {len(result.errors)} errors "
              f"in {result.testsRun} tests")
    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_smoke_test() and run_unit_tests()
    sys.exit(0 if success else 1)
