"""
Core Erlang Parser Package

Implements a backtracking recursive descent parser for Core Erlang text.
Produces an immutable Abstract Syntax Tree that keeps annotations where
the grammar retains them.

Key Features:
- Ordered alternatives with full backtracking
- Optional '-|' annotations on nearly every construct
- Furthest-failure error reporting with merged expectations
- Single-rule parsing for grammar debugging
"""

from .ast_nodes import *
from .parser import Parser, parse_string, parse_file, parse_rule, debug_rule_file
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser",
    "parse_string", "parse_file", "parse_rule", "debug_rule_file",

    # AST nodes
    "Annotated", "Atom", "FunName", "Var",
    "LInt", "LFloat", "LAtom", "LChar", "LString", "LNil", "Literal",
    "ProperList", "ImproperList", "ListShape", "Map", "VarMap", "UpdateMap", "Bitstring",
    "CLit", "CTuple", "CList", "CMap", "Const",
    "SingleExpr", "MultiExpr", "Exprs", "Expr",
    "EVar", "Lit", "Fun", "ExtFun", "Lambda", "LetRec", "Let", "App", "ModCall",
    "PrimOp", "Case", "Receive", "Try", "Catch", "Seq", "ETuple", "EList", "Binary",
    "EMap", "VMap", "UMap",
    "Alias", "PVar", "PLit", "PTuple", "PList", "PBinary", "PMap", "PAlias", "Pattern",
    "KVar", "KLit", "Key", "SinglePat", "MultiPat", "Pats",
    "Alt", "TimeOut", "FunDef", "Module",

    # Error handling
    "ParseError",
]
