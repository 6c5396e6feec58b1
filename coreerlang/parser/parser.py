"""
Core Erlang Backtracking Parser

Recursive descent over the token list with ordered, fully backtracking
alternatives: each alternative runs from a saved cursor and the cursor is
restored when it fails, so a failed alternative never consumes input.
The order of the alternative tables below decides which rule wins on an
ambiguous prefix and must not be changed casually.

Almost every rule accepts an optional annotation, ``(<rule> -| [consts])``.
Rules whose annotation is part of the tree go through ``_annotated``; the
rest go through ``_annotated_bare``, which accepts the same syntax and
drops the constants.
"""

import logging
import pprint
import sys
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Set, Tuple, TypeVar

from ..lexer.tokens import Token, TokenType, LexerConfig, describe
from ..lexer.lexer import tokenize_string
from ..lexer.errors import LexerError
from .ast_nodes import (
    Annotated, Atom, FunName, Var,
    LInt, LFloat, LAtom, LChar, LString, LNil, Literal,
    ProperList, ImproperList, ListShape, Map, VarMap, UpdateMap, Bitstring,
    CLit, CTuple, CList, CMap, Const,
    SingleExpr, MultiExpr, Exprs, Expr,
    EVar, Lit, Fun, ExtFun, Lambda, LetRec, Let, App, ModCall, PrimOp,
    Case, Receive, Try, Catch, Seq, ETuple, EList, Binary, EMap, VMap, UMap,
    Alias, PVar, PLit, PTuple, PList, PBinary, PMap, PAlias, Pattern,
    KVar, KLit, Key, SinglePat, MultiPat, Pats,
    Alt, TimeOut, FunDef, Module,
)
from .errors import (
    ParseError, create_unexpected_token_error, create_trailing_input_error,
    create_unknown_rule_error, create_nesting_error, from_lexer_error
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Recursion budget for a parse. Nesting depth is bounded by the token count
# and one nesting level stays under FRAMES_PER_TOKEN frames.
MIN_RECURSION_LIMIT = 5000
FRAMES_PER_TOKEN = 24

# The parse runs on its own thread whose stack is sized for the budget.
# MAX_STACK_SIZE caps the budget so deep input fails with RecursionError
# before the thread runs out of stack.
STACK_BYTES_PER_FRAME = 2048
MIN_STACK_SIZE = 32 * 1024 * 1024
MAX_STACK_SIZE = 256 * 1024 * 1024

# threading.stack_size is process wide
_stack_size_lock = threading.Lock()

END_OF_INPUT = "end of input"


def _recursion_budget(token_count: int) -> int:
    limit = max(MIN_RECURSION_LIMIT, FRAMES_PER_TOKEN * token_count)
    return min(limit, MAX_STACK_SIZE // STACK_BYTES_PER_FRAME)


@contextmanager
def _recursion_limit(limit: int) -> Iterator[None]:
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


def _run_with_stack(function: Callable[[], T], recursion_limit: int) -> T:
    """Run `function` on a fresh thread with room for `recursion_limit` frames."""
    outcome = {}

    def target():
        try:
            with _recursion_limit(recursion_limit):
                outcome["result"] = function()
        except BaseException as error:
            outcome["error"] = error

    stack_size = min(max(recursion_limit * STACK_BYTES_PER_FRAME, MIN_STACK_SIZE), MAX_STACK_SIZE)
    with _stack_size_lock:
        previous = threading.stack_size(stack_size)
        try:
            worker = threading.Thread(target=target, name="coreerlang-parse")
            worker.start()
        finally:
            threading.stack_size(previous)
    worker.join()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]


class Parser:
    """
    Core Erlang parser.

    Builds an immutable AST from a token list. A parse either consumes the
    whole input or raises a single ParseError describing the failure at the
    furthest token reached.
    """

    # Rules reachable through parse_rule(), for interactive debugging
    RULES = {
        "module": "_module",
        "expression": "_expression",
        "sexpression": "_sexpression",
        "patterns": "_patterns",
        "pattern": "_pattern",
        "constant": "_constant",
        "literal": "_literal",
        "clause": "_clause",
        "fundef": "_fundef",
        "funname": "_fname",
        "atom": "_atom",
        "variable": "_variable",
    }

    def __init__(self, tokens: List[Token]):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: List of tokens from the lexer, ending with EOF
        """
        self.tokens = tokens
        self.current = 0

        # Furthest failure seen so far and everything expected there
        self._furthest = -1
        self._expected: Set[str] = set()

        self._init_grammar_tables()

    def _init_grammar_tables(self):
        """Build the ordered alternative tables."""

        # Ordered alternatives for a single expression. Fun references come
        # before the other 'fun' forms and before plain literals (an atom is a
        # prefix of 'name'/arity); the two map forms ending in '| M' come before
        # the plain map literal that shares their '~{' prefix.
        self.expression_alternatives: Tuple[Callable[[], Expr], ...] = (
            self._application,
            self._catch,
            self._case,
            self._let,
            self._fun_reference,
            self._external_fun,
            self._lambda,
            self._letrec,
            self._binary_expression,
            self._list_expression,
            self._literal_expression,
            self._module_call,
            self._primop,
            self._receive,
            self._sequence,
            self._try,
            self._tuple_expression,
            self._value_extend_map,
            self._pattern_update_map,
            self._map_expression,
            self._variable_expression,
        )

        # Alias before variable: a bare variable is a prefix of 'V = Pattern'
        self.pattern_alternatives: Tuple[Callable[[], Pattern], ...] = (
            self._alias_pattern,
            self._variable_pattern,
            self._literal_pattern,
            self._tuple_pattern,
            self._list_pattern,
            self._binary_pattern,
            self._map_pattern,
        )

        self.constant_alternatives: Tuple[Callable[[], Const], ...] = (
            self._literal_constant,
            self._tuple_constant,
            self._list_constant,
            self._map_constant,
        )

    # ========================================================================
    # Entry points
    # ========================================================================

    def parse(self) -> Annotated[Module]:
        """
        Parse the token list as one complete module.

        Returns:
            The module with its (possibly absent) annotation

        Raises:
            ParseError: If the tokens are not exactly one module
        """
        logger.debug("Parsing module from %d tokens", len(self.tokens))
        module = self._parse_complete(self._module)
        logger.debug("Parsed module %s: %d exports, %d attributes, %d definitions",
                     module.value.name, len(module.value.exports),
                     len(module.value.attributes), len(module.value.defs))
        return module

    def parse_rule(self, rule: str) -> Any:
        """Parse the whole token list with one named grammar rule."""
        method_name = self.RULES.get(rule)
        if method_name is None:
            raise create_unknown_rule_error(rule, self.RULES, self._peek().location)
        return self._parse_complete(getattr(self, method_name))

    def _parse_complete(self, rule: Callable[[], T]) -> T:
        self.current = 0
        self._furthest = -1
        self._expected = set()

        def parse_to_end() -> T:
            result = rule()
            if not self._check(TokenType.EOF):
                raise self._fail(END_OF_INPUT)
            return result

        try:
            return _run_with_stack(parse_to_end, _recursion_budget(len(self.tokens)))
        except ParseError:
            error = self._furthest_failure()
            logger.debug("Parse failed at %s: %s", error.location, error.diagnostic.message)
            raise error from None
        except RecursionError:
            raise create_nesting_error(self._peek()) from None

    def _furthest_failure(self) -> ParseError:
        """Build the error for the furthest position any alternative reached."""
        index = min(max(self._furthest, 0), len(self.tokens) - 1)
        token = self.tokens[index]
        if self._expected == {END_OF_INPUT}:
            return create_trailing_input_error(token)
        return create_unexpected_token_error(self._expected, token)

    # ========================================================================
    # Backtracking primitives
    # ========================================================================

    def _fail(self, *expected: str) -> ParseError:
        """Record what was expected at the current token and return the error to raise."""
        if self.current > self._furthest:
            self._furthest = self.current
            self._expected = set()
        if self.current == self._furthest:
            self._expected.update(expected)
        return create_unexpected_token_error(expected, self._peek())

    def _choice(self, description: str, alternatives) -> Any:
        """
        Return the result of the first alternative that succeeds.

        Each alternative starts from the same cursor. If none gets past the
        first token, the expectations they recorded there are replaced by
        `description`.
        """
        start = self.current
        furthest_before, expected_before = self._furthest, set(self._expected)

        for alternative in alternatives:
            try:
                return alternative()
            except ParseError:
                self.current = start

        if self._furthest == start:
            self._expected = expected_before if furthest_before == start else set()
        raise self._fail(description)

    def _optional(self, rule: Callable[[], T]) -> Optional[T]:
        start = self.current
        try:
            return rule()
        except ParseError:
            self.current = start
            return None

    def _many(self, rule: Callable[[], T]) -> List[T]:
        items = []
        while True:
            item = self._optional(rule)
            if item is None:
                return items
            items.append(item)

    def _comma_sep(self, rule: Callable[[], T]) -> List[T]:
        """Zero or more `rule` separated by commas."""
        first = self._optional(rule)
        if first is None:
            return []
        items = [first]
        while self._match(TokenType.COMMA):
            items.append(rule())
        return items

    def _comma_sep1(self, rule: Callable[[], T]) -> List[T]:
        items = [rule()]
        while self._match(TokenType.COMMA):
            items.append(rule())
        return items

    def _enclosed(self, open_type: TokenType, rule: Callable[[], T], close_type: TokenType) -> T:
        self._consume(open_type)
        value = rule()
        self._consume(close_type)
        return value

    # ========================================================================
    # Annotations
    # ========================================================================

    def _annotation(self) -> Tuple[Const, ...]:
        """-| [c1, ..., cn]"""
        self._consume(TokenType.ANNOTATE)
        consts = self._enclosed(TokenType.LEFT_BRACKET,
                                lambda: self._comma_sep(self._constant),
                                TokenType.RIGHT_BRACKET)
        return tuple(consts)

    def _annotated_form(self, rule: Callable[[], T]) -> Optional[Tuple[T, Tuple[Const, ...]]]:
        """Try '(' rule annotation ')'; on failure restore the cursor and return None."""
        if not self._check(TokenType.LEFT_PAREN):
            return None
        start = self.current
        try:
            self._advance()
            value = rule()
            consts = self._annotation()
            self._consume(TokenType.RIGHT_PAREN)
        except ParseError:
            self.current = start
            return None
        return value, consts

    def _annotated(self, rule: Callable[[], T]) -> Annotated[T]:
        """Parse `rule`, keeping its outermost annotation and dropping any inner ones."""
        form = self._annotated_form(lambda: self._annotated_bare(rule))
        if form is not None:
            return Annotated(form[0], form[1])
        return Annotated(rule())

    def _annotated_bare(self, rule: Callable[[], T]) -> T:
        """Parse `rule`, accepting and dropping any number of nested annotations."""
        form = self._annotated_form(lambda: self._annotated_bare(rule))
        if form is not None:
            return form[0]
        return rule()

    def _symbol(self, token_type: TokenType) -> Token:
        """Consume a reserved word or punctuation symbol, which may itself be annotated."""
        return self._annotated_bare(lambda: self._consume(token_type))

    # ========================================================================
    # Terminals
    # ========================================================================

    def _atom(self) -> Atom:
        return self._annotated_bare(self._atom_value)

    def _atom_value(self) -> Atom:
        return Atom(self._consume(TokenType.ATOM).value)

    def _fname(self) -> FunName:
        """'name'/arity"""
        return self._annotated_bare(self._fname_value)

    def _fname_value(self) -> FunName:
        atom = self._atom()
        self._consume(TokenType.SLASH)
        arity = self._peek()
        # Arity is an unsigned decimal, the lexer folds signs into INTEGER
        if arity.type != TokenType.INTEGER or not arity.lexeme[0].isdigit():
            raise self._fail("arity")
        self._advance()
        return FunName(atom, arity.value)

    def _literal(self) -> Literal:
        return self._annotated_bare(self._literal_value)

    def _literal_value(self) -> Literal:
        token = self._peek()

        if token.type == TokenType.FLOAT:
            self._advance()
            return LFloat(token.value)
        if token.type == TokenType.INTEGER:
            self._advance()
            return LInt(token.value)
        if token.type == TokenType.ATOM:
            self._advance()
            return LAtom(Atom(token.value))
        if token.type == TokenType.LEFT_BRACKET:
            return self._nil()
        if token.type == TokenType.CHARACTER:
            self._advance()
            return LChar(token.value)
        if token.type == TokenType.STRING:
            self._advance()
            return LString(token.value)

        raise self._fail("literal")

    def _nil(self) -> LNil:
        self._consume(TokenType.LEFT_BRACKET)
        self._consume(TokenType.RIGHT_BRACKET)
        return LNil()

    def _variable(self) -> Var:
        return Var(self._annotated(self._variable_name))

    def _variable_name(self) -> str:
        return self._consume(TokenType.VARIABLE).value

    def _variables(self) -> Tuple[Var, ...]:
        """V or <V1, ..., Vn>"""
        return self._choice("variables", (
            self._variable_sequence,
            lambda: (self._variable(),),
        ))

    def _variable_sequence(self) -> Tuple[Var, ...]:
        return self._annotated_bare(lambda: tuple(self._enclosed(
            TokenType.LEFT_ANGLE, lambda: self._comma_sep(self._variable), TokenType.RIGHT_ANGLE)))

    def _arguments(self) -> Tuple[Exprs, ...]:
        """(E1, ..., En)"""
        return tuple(self._enclosed(TokenType.LEFT_PAREN,
                                    lambda: self._comma_sep(self._expression),
                                    TokenType.RIGHT_PAREN))

    # ========================================================================
    # Shared shapes: tuples, lists, maps, binaries
    # ========================================================================

    def _tuple(self, element: Callable[[], T]) -> Tuple[T, ...]:
        """{e1, ..., en}"""
        return self._annotated_bare(lambda: tuple(self._enclosed(
            TokenType.LEFT_BRACE, lambda: self._comma_sep(element), TokenType.RIGHT_BRACE)))

    def _list(self, element: Callable[[], T]) -> ListShape:
        """[e1, ..., en] or [e1, ..., en | tail], at least one element"""
        def shape() -> ListShape:
            self._consume(TokenType.LEFT_BRACKET)
            elements = tuple(self._comma_sep1(element))
            if self._optional(lambda: self._symbol(TokenType.BAR)) is not None:
                result = ImproperList(elements, element())
            else:
                result = ProperList(elements)
            self._consume(TokenType.RIGHT_BRACKET)
            return result

        return self._annotated_bare(shape)

    def _map_pair(self, separator: TokenType, key: Callable[[], Any],
                  value: Callable[[], T]) -> Tuple[Any, T]:
        def pair() -> Tuple[Any, T]:
            k = key()
            self._symbol(separator)
            return k, value()

        return self._annotated_bare(pair)

    def _map(self, separator: TokenType, key: Callable[[], Any], value: Callable[[], T]) -> Map:
        """~{k1 <sep> v1, ...}~"""
        def pairs() -> Map:
            self._symbol(TokenType.TILDE)
            items = self._enclosed(
                TokenType.LEFT_BRACE,
                lambda: self._comma_sep(lambda: self._map_pair(separator, key, value)),
                TokenType.RIGHT_BRACE)
            self._symbol(TokenType.TILDE)
            return Map(tuple(items))

        return self._annotated_bare(pairs)

    def _existing_map(self, separator: TokenType, node_type):
        """~{k1 <sep> v1, ... | M}~ over an existing map M"""
        def parts():
            self._symbol(TokenType.TILDE)
            self._symbol(TokenType.LEFT_BRACE)
            items = self._comma_sep(
                lambda: self._map_pair(separator, self._expression, self._expression))
            self._symbol(TokenType.BAR)
            map_expr = self._sexpression()
            self._symbol(TokenType.RIGHT_BRACE)
            self._symbol(TokenType.TILDE)
            return node_type(tuple(items), map_expr)

        return self._annotated_bare(parts)

    def _binary(self, element: Callable[[], T]) -> Tuple[Bitstring, ...]:
        """#{ #<v1>(args), ... }#"""
        def segments() -> Tuple[Bitstring, ...]:
            self._symbol(TokenType.HASH)
            items = self._enclosed(TokenType.LEFT_BRACE,
                                   lambda: self._comma_sep(lambda: self._bitstring(element)),
                                   TokenType.RIGHT_BRACE)
            self._symbol(TokenType.HASH)
            return tuple(items)

        return self._annotated_bare(segments)

    def _bitstring(self, element: Callable[[], T]) -> Bitstring:
        def segment() -> Bitstring:
            self._symbol(TokenType.HASH)
            value = self._enclosed(TokenType.LEFT_ANGLE, element, TokenType.RIGHT_ANGLE)
            return Bitstring(value, self._arguments())

        return self._annotated_bare(segment)

    # ========================================================================
    # Constants
    # ========================================================================

    def _constant(self) -> Const:
        return self._annotated_bare(lambda: self._choice("constant", self.constant_alternatives))

    def _literal_constant(self) -> CLit:
        return CLit(self._literal())

    def _tuple_constant(self) -> CTuple:
        return CTuple(self._tuple(self._constant))

    def _list_constant(self) -> CList:
        return CList(self._list(self._constant))

    def _map_constant(self) -> CMap:
        return CMap(self._map(TokenType.FAT_ARROW, self._constant, self._constant))

    # ========================================================================
    # Module and function definitions
    # ========================================================================

    def _module(self) -> Annotated[Module]:
        return self._annotated(self._module_body)

    def _module_body(self) -> Module:
        """module 'name' [exports] attributes [attrs] fundefs end"""
        self._symbol(TokenType.MODULE)
        name = self._atom()
        exports = self._exports()
        attributes = self._attributes()
        defs = self._many(self._fundef)
        self._symbol(TokenType.END)
        return Module(name, exports, attributes, tuple(defs))

    def _exports(self) -> Tuple[FunName, ...]:
        return self._annotated_bare(lambda: tuple(self._enclosed(
            TokenType.LEFT_BRACKET, lambda: self._comma_sep(self._fname), TokenType.RIGHT_BRACKET)))

    def _attributes(self) -> Tuple[Tuple[Atom, Const], ...]:
        def attributes() -> Tuple[Tuple[Atom, Const], ...]:
            self._symbol(TokenType.ATTRIBUTES)
            return tuple(self._enclosed(TokenType.LEFT_BRACKET,
                                        lambda: self._comma_sep(self._attribute),
                                        TokenType.RIGHT_BRACKET))

        return self._annotated_bare(attributes)

    def _attribute(self) -> Tuple[Atom, Const]:
        def attribute() -> Tuple[Atom, Const]:
            name = self._atom()
            self._symbol(TokenType.EQUALS)
            return name, self._constant()

        return self._annotated_bare(attribute)

    def _fundef(self) -> FunDef:
        """'name'/arity = fun (...) -> Body"""
        return self._choice("function definition", (lambda: self._annotated_bare(self._fundef_value),))

    def _fundef_value(self) -> FunDef:
        name = self._annotated(self._fname)
        self._symbol(TokenType.EQUALS)
        body = self._annotated(self._lambda)
        return FunDef(name, body)

    # ========================================================================
    # Expressions
    # ========================================================================

    def _expression(self) -> Exprs:
        """A value sequence <e1, ..., en> or a single expression, in that order."""
        return self._choice("expression", (self._multi_expression, self._single_expression))

    def _multi_expression(self) -> MultiExpr:
        return MultiExpr(self._annotated(lambda: tuple(self._enclosed(
            TokenType.LEFT_ANGLE,
            lambda: self._comma_sep(lambda: self._annotated(self._sexpression)),
            TokenType.RIGHT_ANGLE))))

    def _single_expression(self) -> SingleExpr:
        return SingleExpr(self._annotated(self._sexpression))

    def _sexpression(self) -> Expr:
        return self._annotated_bare(lambda: self._choice("expression", self.expression_alternatives))

    def _application(self) -> App:
        """apply F (Args)"""
        self._symbol(TokenType.APPLY)
        function = self._expression()
        return App(function, self._arguments())

    def _catch(self) -> Catch:
        self._symbol(TokenType.CATCH)
        return Catch(self._expression())

    def _case(self) -> Case:
        """case E of Alt+ end"""
        self._symbol(TokenType.CASE)
        expr = self._expression()
        self._symbol(TokenType.OF)
        alts = [self._clause()] + self._many(self._clause)
        self._symbol(TokenType.END)
        return Case(expr, tuple(alts))

    def _let(self) -> Let:
        """let Vars = E1 in E2"""
        self._symbol(TokenType.LET)
        variables = self._variables()
        self._symbol(TokenType.EQUALS)
        bound = self._expression()
        self._symbol(TokenType.IN)
        return Let(variables, bound, self._expression())

    def _fun_reference(self) -> Fun:
        return Fun(self._fname())

    def _external_fun(self) -> ExtFun:
        """fun 'module':'name'/arity"""
        self._symbol(TokenType.FUN)
        module = self._atom()
        self._symbol(TokenType.COLON)
        return ExtFun(module, self._fname())

    def _lambda(self) -> Lambda:
        """fun (V1, ..., Vn) -> Body"""
        self._symbol(TokenType.FUN)
        variables = self._enclosed(TokenType.LEFT_PAREN,
                                   lambda: self._comma_sep(self._variable),
                                   TokenType.RIGHT_PAREN)
        self._symbol(TokenType.ARROW)
        return Lambda(tuple(variables), self._expression())

    def _letrec(self) -> LetRec:
        """letrec FunDef* in E"""
        self._symbol(TokenType.LETREC)
        defs = self._many(self._fundef)
        self._symbol(TokenType.IN)
        return LetRec(tuple(defs), self._expression())

    def _binary_expression(self) -> Binary:
        return Binary(self._binary(self._expression))

    def _list_expression(self) -> EList:
        return EList(self._list(self._expression))

    def _literal_expression(self) -> Lit:
        return Lit(self._literal())

    def _module_call(self) -> ModCall:
        """call M:F (Args)"""
        self._symbol(TokenType.CALL)
        module = self._expression()
        self._symbol(TokenType.COLON)
        function = self._expression()
        return ModCall(module, function, self._arguments())

    def _primop(self) -> PrimOp:
        """primop 'name' (Args)"""
        self._symbol(TokenType.PRIMOP)
        name = self._atom()
        return PrimOp(name, self._arguments())

    def _receive(self) -> Receive:
        """receive Alt* after E1 -> E2"""
        self._symbol(TokenType.RECEIVE)
        alts = self._many(self._clause)
        return Receive(tuple(alts), self._timeout())

    def _timeout(self) -> TimeOut:
        def timeout() -> TimeOut:
            self._symbol(TokenType.AFTER)
            expiry = self._expression()
            self._symbol(TokenType.ARROW)
            return TimeOut(expiry, self._expression())

        return self._annotated_bare(timeout)

    def _sequence(self) -> Seq:
        """do E1 E2"""
        self._symbol(TokenType.DO)
        first = self._expression()
        return Seq(first, self._expression())

    def _try(self) -> Try:
        """try E1 of Vars1 -> E2 catch Vars2 -> E3"""
        self._symbol(TokenType.TRY)
        body = self._expression()
        self._symbol(TokenType.OF)
        ok_vars = self._variables()
        self._symbol(TokenType.ARROW)
        ok_body = self._expression()
        self._symbol(TokenType.CATCH)
        catch_vars = self._variables()
        self._symbol(TokenType.ARROW)
        catch_body = self._expression()
        return Try(body, ok_vars, ok_body, catch_vars, catch_body)

    def _tuple_expression(self) -> ETuple:
        return ETuple(self._tuple(self._expression))

    def _value_extend_map(self) -> VMap:
        return VMap(self._existing_map(TokenType.FAT_ARROW, VarMap))

    def _pattern_update_map(self) -> UMap:
        return UMap(self._existing_map(TokenType.ASSOC, UpdateMap))

    def _map_expression(self) -> EMap:
        return EMap(self._map(TokenType.FAT_ARROW, self._expression, self._expression))

    def _variable_expression(self) -> EVar:
        return EVar(self._variable())

    # ========================================================================
    # Clauses and patterns
    # ========================================================================

    def _clause(self) -> Annotated[Alt]:
        return self._annotated(self._clause_value)

    def _clause_value(self) -> Alt:
        """Pats [when Guard] -> Body"""
        pats = self._patterns()
        guard = self._optional(self._guard)
        self._symbol(TokenType.ARROW)
        return Alt(pats, guard, self._expression())

    def _guard(self) -> Exprs:
        def guard() -> Exprs:
            self._symbol(TokenType.WHEN)
            return self._expression()

        return self._annotated_bare(guard)

    def _patterns(self) -> Pats:
        """A pattern sequence <p1, ..., pn> or a single pattern, in that order."""
        return self._choice("pattern", (self._multi_pattern, self._single_pattern))

    def _multi_pattern(self) -> MultiPat:
        return MultiPat(self._annotated(lambda: tuple(self._enclosed(
            TokenType.LEFT_ANGLE,
            lambda: self._comma_sep(lambda: self._annotated(self._pattern)),
            TokenType.RIGHT_ANGLE))))

    def _single_pattern(self) -> SinglePat:
        return SinglePat(self._annotated(self._pattern))

    def _pattern(self) -> Pattern:
        return self._annotated_bare(lambda: self._choice("pattern", self.pattern_alternatives))

    def _alias_pattern(self) -> PAlias:
        """V = Pattern"""
        var = self._variable()
        self._symbol(TokenType.EQUALS)
        return PAlias(Alias(var, self._pattern()))

    def _variable_pattern(self) -> PVar:
        return PVar(self._variable())

    def _literal_pattern(self) -> PLit:
        return PLit(self._literal())

    def _tuple_pattern(self) -> PTuple:
        return PTuple(self._tuple(self._pattern))

    def _list_pattern(self) -> PList:
        return PList(self._list(self._pattern))

    def _binary_pattern(self) -> PBinary:
        return PBinary(self._binary(self._pattern))

    def _map_pattern(self) -> PMap:
        return PMap(self._map(TokenType.ASSOC, self._pattern_key, self._pattern))

    def _pattern_key(self) -> Key:
        """Map pattern keys are restricted to variables and literals."""
        return self._annotated_bare(lambda: self._choice("map key", (
            lambda: KVar(self._variable()),
            lambda: KLit(self._literal()),
        )))

    # ========================================================================
    # Token utilities
    # ========================================================================

    def _peek(self) -> Token:
        """Return current token without consuming."""
        return self.tokens[self.current]

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches type without consuming."""
        return self._peek().type == token_type

    def _match(self, token_type: TokenType) -> bool:
        """Check if current token matches type and consume if so."""
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _advance(self) -> Token:
        """Consume and return current token; EOF is never consumed."""
        token = self._peek()
        if token.type != TokenType.EOF:
            self.current += 1
        return token

    def _consume(self, token_type: TokenType) -> Token:
        """Consume token of expected type or raise error."""
        if self._check(token_type):
            return self._advance()
        raise self._fail(describe(token_type))


def _tokenize(source: str, filename: str, config: Optional[LexerConfig]) -> List[Token]:
    try:
        return tokenize_string(source, filename, config)
    except LexerError as error:
        raise from_lexer_error(error) from error


def parse_string(source: str, filename: str = "<string>",
                 config: Optional[LexerConfig] = None) -> Annotated[Module]:
    """
    Parse a complete Core Erlang module from a string.

    Args:
        source: Core Erlang text
        filename: Filename for error reporting
        config: Optional lexer configuration

    Returns:
        The annotated module

    Raises:
        ParseError: If lexing or parsing fails
    """
    return Parser(_tokenize(source, filename, config)).parse()


def parse_file(filepath: str, config: Optional[LexerConfig] = None) -> Annotated[Module]:
    """
    Parse a complete Core Erlang module from a UTF-8 file.

    Raises:
        ParseError: If lexing or parsing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath, config)


def parse_rule(rule: str, source: str, filename: str = "<string>",
               config: Optional[LexerConfig] = None) -> Any:
    """
    Parse `source` with a single grammar rule, e.g. "expression" or "pattern".

    Meant for interactive debugging of the grammar. The rule must consume
    the entire input.
    """
    return Parser(_tokenize(source, filename, config)).parse_rule(rule)


def debug_rule_file(rule: str, filepath: str, config: Optional[LexerConfig] = None) -> Any:
    """Run `parse_rule` on a file and print the tree or the error."""
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    try:
        result = parse_rule(rule, source, filepath, config)
    except ParseError as error:
        print(error)
        return None

    print(pprint.pformat(result))
    return result
