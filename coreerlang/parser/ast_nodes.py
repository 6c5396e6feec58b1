"""
Abstract Syntax Tree node definitions for Core Erlang.

Every node is a frozen dataclass: trees are immutable, hashable and
compare structurally. Sequence fields are tuples. The node families
(Literal, Const, Expr, Exprs, Pattern, Pats, Key) are closed unions;
consumers dispatch on the concrete class.

Almost any node can carry an annotation, a list of constants written as
``(<node> -| [c1, ..., cn])``. Where the annotation is kept, the node is
wrapped in ``Annotated``.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, Tuple, TypeVar, Union

T = TypeVar("T")


# ============================================================================
# Annotations
# ============================================================================

@dataclass(frozen=True)
class Annotated(Generic[T]):
    """
    A node with its optional annotation.

    ``annotations is None`` means the node was written bare; an empty tuple
    means it was written as ``(<node> -| [])``. Both mean "no metadata".
    """
    value: T
    annotations: Optional[Tuple['Const', ...]] = None

    @property
    def is_annotated(self) -> bool:
        return self.annotations is not None

    @property
    def consts(self) -> Tuple['Const', ...]:
        return self.annotations if self.annotations is not None else ()


# ============================================================================
# Names
# ============================================================================

@dataclass(frozen=True)
class Atom:
    """A quoted atom; `name` holds the decoded text."""
    name: str

    def __str__(self) -> str:
        return f"'{self.name}'"


@dataclass(frozen=True)
class FunName:
    """A function reference: 'name'/arity."""
    atom: Atom
    arity: int

    def __str__(self) -> str:
        return f"{self.atom}/{self.arity}"


@dataclass(frozen=True)
class Var:
    """A variable; the name itself may carry an annotation."""
    name: Annotated[str]

    @property
    def id(self) -> str:
        return self.name.value


# ============================================================================
# Literals
# ============================================================================

@dataclass(frozen=True)
class LInt:
    value: int


@dataclass(frozen=True)
class LFloat:
    value: float


@dataclass(frozen=True)
class LAtom:
    atom: Atom


@dataclass(frozen=True)
class LChar:
    value: str


@dataclass(frozen=True)
class LString:
    value: str


@dataclass(frozen=True)
class LNil:
    """The empty list []."""


Literal = Union[LInt, LFloat, LAtom, LChar, LString, LNil]


# ============================================================================
# Shared container shapes (constants, expressions and patterns)
# ============================================================================

@dataclass(frozen=True)
class ProperList(Generic[T]):
    """[e1, ..., en], terminated by nil."""
    elements: Tuple[T, ...]


@dataclass(frozen=True)
class ImproperList(Generic[T]):
    """[e1, ..., en | tail]."""
    elements: Tuple[T, ...]
    tail: T


ListShape = Union[ProperList, ImproperList]


@dataclass(frozen=True)
class Map(Generic[T]):
    """~{k1 => v1, ...}~, a freshly built map (':=' pairs in patterns)."""
    pairs: Tuple[Tuple[Any, T], ...]


@dataclass(frozen=True)
class VarMap:
    """~{k1 => v1, ... | M}~, an existing map extended with new or overwritten keys."""
    pairs: Tuple[Tuple['Exprs', 'Exprs'], ...]
    map_expr: 'Expr'


@dataclass(frozen=True)
class UpdateMap:
    """~{k1 := v1, ... | M}~, an existing map updated on keys that must exist."""
    pairs: Tuple[Tuple['Exprs', 'Exprs'], ...]
    map_expr: 'Expr'


@dataclass(frozen=True)
class Bitstring(Generic[T]):
    """One binary segment: #<value>(size, unit, type, flags)."""
    value: T
    args: Tuple['Exprs', ...]


# ============================================================================
# Constants (module attributes and annotations)
# ============================================================================

@dataclass(frozen=True)
class CLit:
    literal: Literal


@dataclass(frozen=True)
class CTuple:
    elements: Tuple['Const', ...]


@dataclass(frozen=True)
class CList:
    value: ListShape


@dataclass(frozen=True)
class CMap:
    value: Map


Const = Union[CLit, CTuple, CList, CMap]


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class SingleExpr:
    """A single expression."""
    expr: Annotated['Expr']


@dataclass(frozen=True)
class MultiExpr:
    """A value sequence <e1, ..., en>."""
    exprs: Annotated[Tuple[Annotated['Expr'], ...]]


Exprs = Union[SingleExpr, MultiExpr]


@dataclass(frozen=True)
class EVar:
    var: Var


@dataclass(frozen=True)
class Lit:
    literal: Literal


@dataclass(frozen=True)
class Fun:
    """A local function reference: 'f'/1."""
    name: FunName


@dataclass(frozen=True)
class ExtFun:
    """An external function reference: fun 'm':'f'/1."""
    module: Atom
    name: FunName


@dataclass(frozen=True)
class Lambda:
    """fun (V1, ..., Vn) -> Body"""
    vars: Tuple[Var, ...]
    body: Exprs


@dataclass(frozen=True)
class LetRec:
    """letrec Defs in Body"""
    defs: Tuple['FunDef', ...]
    body: Exprs


@dataclass(frozen=True)
class Let:
    """let Vars = Bound in Body"""
    vars: Tuple[Var, ...]
    bound: Exprs
    body: Exprs


@dataclass(frozen=True)
class App:
    """apply F (Args)"""
    function: Exprs
    args: Tuple[Exprs, ...]


@dataclass(frozen=True)
class ModCall:
    """call M:F (Args)"""
    module: Exprs
    function: Exprs
    args: Tuple[Exprs, ...]


@dataclass(frozen=True)
class PrimOp:
    """primop 'name' (Args)"""
    name: Atom
    args: Tuple[Exprs, ...]


@dataclass(frozen=True)
class Case:
    """case E of Alts end"""
    expr: Exprs
    alts: Tuple[Annotated['Alt'], ...]


@dataclass(frozen=True)
class Receive:
    """receive Alts after Expiry -> Body"""
    alts: Tuple[Annotated['Alt'], ...]
    timeout: 'TimeOut'


@dataclass(frozen=True)
class Try:
    """try Body of OkVars -> OkBody catch CatchVars -> CatchBody"""
    body: Exprs
    ok_vars: Tuple[Var, ...]
    ok_body: Exprs
    catch_vars: Tuple[Var, ...]
    catch_body: Exprs


@dataclass(frozen=True)
class Catch:
    expr: Exprs


@dataclass(frozen=True)
class Seq:
    """do First Second: evaluates First, yields Second."""
    first: Exprs
    second: Exprs


@dataclass(frozen=True)
class ETuple:
    elements: Tuple[Exprs, ...]


@dataclass(frozen=True)
class EList:
    value: ListShape


@dataclass(frozen=True)
class Binary:
    segments: Tuple[Bitstring, ...]


@dataclass(frozen=True)
class EMap:
    value: Map


@dataclass(frozen=True)
class VMap:
    value: VarMap


@dataclass(frozen=True)
class UMap:
    value: UpdateMap


Expr = Union[EVar, Lit, Fun, ExtFun, Lambda, LetRec, Let, App, ModCall, PrimOp,
             Case, Receive, Try, Catch, Seq, ETuple, EList, Binary, EMap, VMap, UMap]


# ============================================================================
# Patterns
# ============================================================================

@dataclass(frozen=True)
class Alias:
    """V = Pattern"""
    var: Var
    pattern: 'Pattern'


@dataclass(frozen=True)
class PVar:
    var: Var


@dataclass(frozen=True)
class PLit:
    literal: Literal


@dataclass(frozen=True)
class PTuple:
    elements: Tuple['Pattern', ...]


@dataclass(frozen=True)
class PList:
    value: ListShape


@dataclass(frozen=True)
class PBinary:
    segments: Tuple[Bitstring, ...]


@dataclass(frozen=True)
class PMap:
    value: Map


@dataclass(frozen=True)
class PAlias:
    alias: Alias


Pattern = Union[PVar, PLit, PTuple, PList, PBinary, PMap, PAlias]


@dataclass(frozen=True)
class KVar:
    var: Var


@dataclass(frozen=True)
class KLit:
    literal: Literal


Key = Union[KVar, KLit]


@dataclass(frozen=True)
class SinglePat:
    pattern: Annotated[Pattern]


@dataclass(frozen=True)
class MultiPat:
    """A pattern sequence <p1, ..., pn>, matched against a value sequence."""
    patterns: Annotated[Tuple[Annotated[Pattern], ...]]


Pats = Union[SinglePat, MultiPat]


# ============================================================================
# Clauses, definitions and modules
# ============================================================================

@dataclass(frozen=True)
class Alt:
    """Pats when Guard -> Body; `guard` is None when no 'when' was written."""
    pats: Pats
    guard: Optional[Exprs]
    body: Exprs


@dataclass(frozen=True)
class TimeOut:
    """after Expiry -> Body"""
    expiry: Exprs
    body: Exprs


@dataclass(frozen=True)
class FunDef:
    name: Annotated[FunName]
    body: Annotated[Lambda]


@dataclass(frozen=True)
class Module:
    name: Atom
    exports: Tuple[FunName, ...]
    attributes: Tuple[Tuple[Atom, Const], ...]
    defs: Tuple[FunDef, ...]
