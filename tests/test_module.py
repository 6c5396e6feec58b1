"""
Test suite for whole Core Erlang modules.

Tests cover:
- The module envelope (name, exports, attributes, definitions)
- Compiler output with comments and annotations
- File based entry points
"""

import unittest
import tempfile
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

import coreerlang
from coreerlang.parser.parser import Parser, parse_string, parse_file
from coreerlang.lexer.lexer import tokenize_string
from coreerlang.parser.ast_nodes import (
    Annotated, Atom, FunName, Var, LAtom, LInt,
    CLit, CTuple, CList, ProperList,
    SingleExpr, EVar, Fun, Lambda, App, ModCall, Case, PrimOp, FunDef, Module,
)


SIMPLE_MODULE = """
module 'm' ['f'/1]
  attributes []
  'f'/1 = fun (X) -> apply 'g'/1 (X)
end
"""

COMPILER_OUTPUT = """
module 'test' ['add'/2,
               'f'/1,
               'module_info'/0,
               'module_info'/1]
    attributes [%% Line 1
\t\t'file' =
\t\t    %% Line 1
\t\t    [{[116|[101|[115|[116|[46|[101|[114|[108]]]]]]]],1}]]
'add'/2 =
    %% Line 3
    fun (_0,_1) ->
\tcall 'erlang':'+'
\t    (_0, _1)
'f'/1 =
    fun (_0) ->
\tcase _0 of
\t  <'a'> when 'true' ->
\t      'ok'
\t  ( <_1> when 'true' ->
\t\t( primop 'match_fail'
\t\t      ({'function_clause',_1})
\t\t  -| [{'function_name',{'f',1}}] )
\t    -| ['compiler_generated'] )
\tend
'module_info'/0 =
    fun () ->
\tcall 'erlang':'get_module_info'
\t    ('test')
'module_info'/1 =
    fun (_0) ->
\tcall 'erlang':'get_module_info'
\t    ('test', _0)
end
"""


def var(name):
    return Var(Annotated(name))


def single(expr):
    return SingleExpr(Annotated(expr))


class TestModule(unittest.TestCase):
    """Test cases for the module envelope."""

    def test_simple_module(self):
        result = parse_string(SIMPLE_MODULE)
        self.assertIsNone(result.annotations)

        module = result.value
        f = FunName(Atom("f"), 1)
        self.assertEqual(module.name, Atom("m"))
        self.assertEqual(module.exports, (f,))
        self.assertEqual(module.attributes, ())
        self.assertEqual(
            module.defs,
            (FunDef(Annotated(f),
                    Annotated(Lambda((var("X"),),
                                     single(App(single(Fun(FunName(Atom("g"), 1))),
                                                (single(EVar(var("X"))),)))))),))

    def test_empty_module(self):
        module = parse_string("module 'm' [] attributes [] end").value
        self.assertEqual(module, Module(Atom("m"), (), (), ()))

    def test_parse_alias(self):
        self.assertEqual(coreerlang.parse(SIMPLE_MODULE), parse_string(SIMPLE_MODULE))

    def test_parser_class(self):
        tokens = tokenize_string(SIMPLE_MODULE)
        self.assertEqual(Parser(tokens).parse(), parse_string(SIMPLE_MODULE))

    def test_attributes(self):
        module = parse_string(
            "module 'm' [] attributes ['vsn' = [1], 'author' = 'me'] end").value
        self.assertEqual(
            module.attributes,
            ((Atom("vsn"), CList(ProperList((CLit(LInt(1)),)))),
             (Atom("author"), CLit(LAtom(Atom("me"))))))

    def test_annotated_module(self):
        result = parse_string("(module 'm' [] attributes [] end -| ['generated'])")
        self.assertEqual(result.annotations, (CLit(LAtom(Atom("generated"))),))
        self.assertEqual(result.value.name, Atom("m"))

    def test_annotated_function_definition(self):
        module = parse_string(
            "module 'm' [] attributes [] "
            "('f'/0 -| ['n']) = (fun () -> 'ok' -| ['b']) end").value
        fundef = module.defs[0]
        self.assertEqual(fundef.name, Annotated(FunName(Atom("f"), 0), (CLit(LAtom(Atom("n"))),)))
        self.assertEqual(fundef.body.annotations, (CLit(LAtom(Atom("b"))),))

    def test_exports_are_not_checked_against_definitions(self):
        module = parse_string("module 'm' ['missing'/3] attributes [] end").value
        self.assertEqual(module.exports, (FunName(Atom("missing"), 3),))
        self.assertEqual(module.defs, ())


class TestCompilerOutput(unittest.TestCase):
    """Test cases for text as written by erlc +to_core."""

    def setUp(self):
        self.module = parse_string(COMPILER_OUTPUT, "test.core").value

    def test_counts(self):
        self.assertEqual(self.module.name, Atom("test"))
        self.assertEqual(len(self.module.exports), 4)
        self.assertEqual(len(self.module.attributes), 1)
        self.assertEqual(len(self.module.defs), 4)

    def test_file_attribute(self):
        name, value = self.module.attributes[0]
        self.assertEqual(name, Atom("file"))
        self.assertIsInstance(value, CList)
        self.assertIsInstance(value.value.elements[0], CTuple)

    def test_module_call(self):
        body = self.module.defs[0].body.value.body.expr.value
        self.assertIsInstance(body, ModCall)
        self.assertEqual(body.args, (single(EVar(var("_0"))), single(EVar(var("_1")))))

    def test_annotated_clause_and_body(self):
        case = self.module.defs[1].body.value.body.expr.value
        self.assertIsInstance(case, Case)
        self.assertEqual(len(case.alts), 2)

        self.assertIsNone(case.alts[0].annotations)
        generated = case.alts[1]
        self.assertEqual(generated.annotations, (CLit(LAtom(Atom("compiler_generated"))),))

        body = generated.value.body.expr
        self.assertIsInstance(body.value, PrimOp)
        self.assertEqual(
            body.annotations,
            (CTuple((CLit(LAtom(Atom("function_name"))),
                     CTuple((CLit(LAtom(Atom("f"))), CLit(LInt(1)))))),))


class TestFileEntryPoints(unittest.TestCase):
    """Test cases for parsing from files."""

    def setUp(self):
        handle, self.path = tempfile.mkstemp(suffix=".core")
        with os.fdopen(handle, 'w', encoding='utf-8') as f:
            f.write(SIMPLE_MODULE)

    def tearDown(self):
        os.remove(self.path)

    def test_parse_file(self):
        self.assertEqual(parse_file(self.path), parse_string(SIMPLE_MODULE))

    def test_tokenize_file_records_filename(self):
        tokens = coreerlang.tokenize_file(self.path)
        self.assertEqual(tokens[0].location.filename, self.path)


if __name__ == '__main__':
    unittest.main()
