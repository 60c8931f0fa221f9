"""
Go statement and expression node model.
Closed set of node kinds produced by the Go front end and consumed by the CFG
builder and the classifiers.
"""

from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum


class NodeKind(Enum):
    """Statement and expression kinds."""
    IDENT = "Ident"
    BASIC_LIT = "BasicLit"
    BINARY = "BinaryExpr"
    UNARY = "UnaryExpr"
    CALL = "CallExpr"
    SELECTOR = "SelectorExpr"
    PAREN = "ParenExpr"
    INDEX = "IndexExpr"
    VALUE_SPEC = "ValueSpec"
    DECL = "DeclStmt"
    ASSIGN = "AssignStmt"
    RETURN = "ReturnStmt"
    EXPR_STMT = "ExprStmt"
    INC_DEC = "IncDecStmt"
    IF = "IfStmt"
    FOR = "ForStmt"
    BRANCH = "BranchStmt"
    BLOCK = "BlockStmt"
    SWITCH = "SwitchStmt"
    CASE = "CaseClause"
    UNKNOWN = "Unknown"


class Node:
    """Base class of all nodes."""
    kind = NodeKind.UNKNOWN

    @property
    def kind_name(self) -> str:
        return self.kind.value


@dataclass
class Ident(Node):
    name: str
    kind = NodeKind.IDENT


@dataclass
class BasicLit(Node):
    value: str
    kind = NodeKind.BASIC_LIT


@dataclass
class BinaryExpr(Node):
    x: Node
    op: str
    y: Node
    kind = NodeKind.BINARY


@dataclass
class UnaryExpr(Node):
    op: str
    x: Node
    kind = NodeKind.UNARY


@dataclass
class CallExpr(Node):
    fun: Node
    args: List[Node] = field(default_factory=list)
    kind = NodeKind.CALL


@dataclass
class SelectorExpr(Node):
    x: Node
    sel: str
    kind = NodeKind.SELECTOR


@dataclass
class ParenExpr(Node):
    x: Node
    kind = NodeKind.PAREN


@dataclass
class IndexExpr(Node):
    x: Node
    index: Node
    kind = NodeKind.INDEX


@dataclass
class ValueSpec(Node):
    """One `name1, name2 = v1, v2` clause of a var/const declaration."""
    names: List[str]
    values: List[Node] = field(default_factory=list)
    kind = NodeKind.VALUE_SPEC


@dataclass
class DeclStmt(Node):
    specs: List[ValueSpec] = field(default_factory=list)
    kind = NodeKind.DECL


@dataclass
class AssignStmt(Node):
    lhs: List[Node]
    tok: str
    rhs: List[Node] = field(default_factory=list)
    kind = NodeKind.ASSIGN


@dataclass
class ReturnStmt(Node):
    results: List[Node] = field(default_factory=list)
    kind = NodeKind.RETURN


@dataclass
class ExprStmt(Node):
    x: Node
    kind = NodeKind.EXPR_STMT


@dataclass
class IncDecStmt(Node):
    x: Node
    tok: str
    kind = NodeKind.INC_DEC


@dataclass
class BlockStmt(Node):
    body: List[Node] = field(default_factory=list)
    kind = NodeKind.BLOCK


@dataclass
class IfStmt(Node):
    cond: Node
    body: BlockStmt = field(default_factory=BlockStmt)
    init: Optional[Node] = None
    else_: Optional[Node] = None  # BlockStmt or IfStmt
    kind = NodeKind.IF


@dataclass
class ForStmt(Node):
    cond: Optional[Node] = None
    body: BlockStmt = field(default_factory=BlockStmt)
    init: Optional[Node] = None
    post: Optional[Node] = None
    is_range: bool = False
    range_lhs: List[Node] = field(default_factory=list)
    range_tok: str = ":="
    label: Optional[str] = None
    kind = NodeKind.FOR


@dataclass
class CaseClause(Node):
    """
    One clause of a switch or select.

    `exprs` holds the case values (type names for a type switch), `comm` the
    send/receive of a select case. A default clause has neither.
    """
    exprs: List[Node] = field(default_factory=list)
    body: List[Node] = field(default_factory=list)
    comm: Optional[Node] = None
    is_default: bool = False
    kind = NodeKind.CASE


@dataclass
class SwitchStmt(Node):
    """Expression switch, type switch (`alias := tag.(type)`) or select."""
    tag: Optional[Node] = None
    cases: List[CaseClause] = field(default_factory=list)
    init: Optional[Node] = None
    alias: Optional[str] = None
    is_type: bool = False
    is_select: bool = False
    label: Optional[str] = None
    kind = NodeKind.SWITCH


@dataclass
class BranchStmt(Node):
    tok: str  # break, continue, fallthrough or goto
    label: Optional[str] = None
    kind = NodeKind.BRANCH


@dataclass
class UnknownNode(Node):
    """Any construct outside the closed set; `syntax` is the raw parser kind."""
    syntax: str
    text: str = ""
    kind = NodeKind.UNKNOWN

    @property
    def kind_name(self) -> str:
        return self.syntax
