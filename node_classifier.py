"""
Node Classifier.
Derives a display label and the variable roles (defines, references, control
operands, computed assignments) of one statement/expression node.
"""

from typing import List, Optional
from dataclasses import dataclass, field

from go_ast import (
    Node, NodeKind, AssignStmt, BinaryExpr, BranchStmt, CallExpr, CaseClause,
    ExprStmt, ForStmt, IfStmt, IncDecStmt, ReturnStmt, SelectorExpr, SwitchStmt,
    ValueSpec,
)

NIL_MARKER = "nil"
CALL_PLACEHOLDER = "function call"

ARITHMETIC_OPS = {"+", "-", "*", "/", "%", "&", "|", "^", "<<", ">>", "&^"}


@dataclass
class NodeInfo:
    """Classification result of a single node."""
    kind: NodeKind
    label: str
    defines: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    controls: List[str] = field(default_factory=list)
    computed: List[str] = field(default_factory=list)
    diagnostic: Optional[str] = None

    def names(self) -> List[str]:
        """Every variable name the node defines or references, once, in order."""
        seen = []
        for name in self.defines + self.references:
            if name not in seen:
                seen.append(name)
        return seen


def get_value(expr: Optional[Node]) -> str:
    """Render an expression as source-like text."""
    if expr is None:
        return NIL_MARKER
    kind = expr.kind
    if kind == NodeKind.BASIC_LIT:
        return expr.value
    if kind == NodeKind.IDENT:
        return expr.name
    if kind == NodeKind.BINARY:
        return f"{get_value(expr.x)} {expr.op} {get_value(expr.y)}"
    if kind == NodeKind.UNARY:
        return f"{expr.op}{get_value(expr.x)}"
    if kind == NodeKind.PAREN:
        return f"({get_value(expr.x)})"
    if kind == NodeKind.INDEX:
        return f"{get_value(expr.x)}[{get_value(expr.index)}]"
    if kind == NodeKind.SELECTOR:
        return f"{get_value(expr.x)}.{expr.sel}"
    if kind == NodeKind.CALL:
        args = ", ".join(get_value(arg) for arg in expr.args)
        return f"{callee_name(expr)}({args})"
    return expr.kind_name


def callee_name(call: CallExpr) -> str:
    """Name of the called function, or a placeholder when not directly nameable."""
    if call.fun.kind in (NodeKind.IDENT, NodeKind.SELECTOR):
        return get_value(call.fun)
    return CALL_PLACEHOLDER


def identifiers(expr: Optional[Node]) -> List[str]:
    """
    Variable names read by an expression, in source order, without duplicates.

    Callee expressions and selector members are not variables and are skipped.
    """
    names: List[str] = []

    def visit(node: Optional[Node]):
        if node is None:
            return
        kind = node.kind
        if kind == NodeKind.IDENT:
            if node.name not in names and node.name != "_":
                names.append(node.name)
        elif kind == NodeKind.BINARY:
            visit(node.x)
            visit(node.y)
        elif kind in (NodeKind.UNARY, NodeKind.PAREN, NodeKind.SELECTOR):
            visit(node.x)
        elif kind == NodeKind.INDEX:
            visit(node.x)
            visit(node.index)
        elif kind == NodeKind.CALL:
            for arg in node.args:
                visit(arg)

    visit(expr)
    return names


def _merge(target: List[str], names: List[str]):
    for name in names:
        if name not in target:
            target.append(name)


class NodeClassifier:
    """Classify statement/expression nodes of a basic block."""

    def classify(self, node: Node) -> NodeInfo:
        """
        Classify a node.

        Every node gets a label; unrecognized kinds get a fallback label and a
        diagnostic instead of an error.

        Args:
            node: Statement or expression node from a block

        Returns:
            NodeInfo with label and variable roles
        """
        kind = node.kind

        if kind == NodeKind.VALUE_SPEC:
            return self._classify_value_specs([node])
        elif kind == NodeKind.DECL:
            return self._classify_value_specs(node.specs, NodeKind.DECL)
        elif kind == NodeKind.ASSIGN:
            return self._classify_assign(node)
        elif kind == NodeKind.RETURN:
            return self._classify_return(node)
        elif kind == NodeKind.EXPR_STMT:
            return self._classify_expr_stmt(node)
        elif kind == NodeKind.PAREN:
            return self._classify_expr_stmt(ExprStmt(x=node))
        elif kind == NodeKind.INC_DEC:
            return self._classify_inc_dec(node)
        elif kind == NodeKind.BINARY:
            return self._classify_binary(node)
        elif kind == NodeKind.CALL:
            return self._classify_call(node)
        elif kind == NodeKind.SELECTOR:
            return self._classify_selector(node)
        elif kind == NodeKind.IF:
            return self._classify_if(node)
        elif kind == NodeKind.FOR:
            return self._classify_for(node)
        elif kind == NodeKind.SWITCH:
            return self._classify_switch(node)
        elif kind == NodeKind.CASE:
            return self._classify_case(node)
        elif kind == NodeKind.BRANCH:
            return self._classify_branch(node)
        return self._unhandled(node, "(Unhandled)")

    def _unhandled(self, node: Node, prefix: str) -> NodeInfo:
        return NodeInfo(
            kind=node.kind,
            label=f"{prefix}: {node.kind_name}",
            diagnostic=f"unhandled node kind {node.kind_name}",
        )

    def _classify_value_specs(self, specs: List[ValueSpec],
                              kind: NodeKind = NodeKind.VALUE_SPEC) -> NodeInfo:
        info = NodeInfo(kind=kind, label="")
        lines = []
        for spec in specs:
            for i, name in enumerate(spec.names):
                value = spec.values[i] if i < len(spec.values) else None
                lines.append(f"{name} = {get_value(value)}")
                _merge(info.defines, [name])
                _merge(info.references, identifiers(value))
                if _is_arithmetic(value):
                    _merge(info.computed, [name])
        info.label = "\n".join(lines)
        return info

    def _classify_assign(self, stmt: AssignStmt) -> NodeInfo:
        info = NodeInfo(kind=NodeKind.ASSIGN, label="")
        compound = stmt.tok not in ("=", ":=")
        op = stmt.tok if compound else "="
        lines = []
        for i, lhs in enumerate(stmt.lhs):
            value = stmt.rhs[i] if i < len(stmt.rhs) else None
            # a, b := f() assigns every name from a single multi-value call
            if value is None and len(stmt.rhs) == 1 and stmt.rhs[0].kind == NodeKind.CALL:
                value = stmt.rhs[0]
            lines.append(f"{get_value(lhs)} {op} {get_value(value)}")
            _merge(info.references, identifiers(value))
            if lhs.kind == NodeKind.IDENT:
                if lhs.name == "_":
                    continue
                _merge(info.defines, [lhs.name])
                if compound or _is_arithmetic(value):
                    _merge(info.computed, [lhs.name])
            else:
                # p.x = v and a[i] = v read the base and the index
                _merge(info.references, identifiers(lhs))
        info.label = "\n".join(lines)
        return info

    def _classify_return(self, stmt: ReturnStmt) -> NodeInfo:
        values = ", ".join(get_value(result) for result in stmt.results)
        info = NodeInfo(kind=NodeKind.RETURN, label=f"return {values}" if values else "return")
        for result in stmt.results:
            _merge(info.references, identifiers(result))
        return info

    def _classify_expr_stmt(self, stmt: ExprStmt) -> NodeInfo:
        expr = stmt.x
        if expr.kind == NodeKind.PAREN:
            inner = expr.x
            if inner.kind == NodeKind.BINARY:
                return self._classify_binary(inner)
            return NodeInfo(
                kind=NodeKind.PAREN,
                label=f"({get_value(inner)})",
                references=identifiers(inner),
            )
        if expr.kind == NodeKind.BINARY:
            return self._classify_binary(expr)
        if expr.kind == NodeKind.CALL:
            return self._classify_call(expr)
        return self._unhandled(expr, "(Unhandled Expr)")

    def _classify_inc_dec(self, stmt: IncDecStmt) -> NodeInfo:
        target = get_value(stmt.x)
        info = NodeInfo(kind=NodeKind.INC_DEC, label=f"{target} {stmt.tok}")
        if stmt.x.kind == NodeKind.IDENT:
            info.defines.append(stmt.x.name)
            info.computed.append(stmt.x.name)
        else:
            info.references = identifiers(stmt.x)
        return info

    def _classify_binary(self, expr: BinaryExpr) -> NodeInfo:
        operands = identifiers(expr)
        return NodeInfo(
            kind=NodeKind.BINARY,
            label=f"{get_value(expr.x)} {expr.op} {get_value(expr.y)}",
            references=list(operands),
            controls=list(operands),
        )

    def _classify_call(self, expr: CallExpr) -> NodeInfo:
        return NodeInfo(kind=NodeKind.CALL, label=get_value(expr), references=identifiers(expr))

    def _classify_selector(self, expr: SelectorExpr) -> NodeInfo:
        return NodeInfo(
            kind=NodeKind.SELECTOR,
            label=f"{get_value(expr.x)}.{expr.sel}",
            references=identifiers(expr),
        )

    def _classify_if(self, stmt: IfStmt) -> NodeInfo:
        operands = identifiers(stmt.cond)
        return NodeInfo(
            kind=NodeKind.IF,
            label=f"if {get_value(stmt.cond)}",
            references=list(operands),
            controls=list(operands),
        )

    def _classify_for(self, stmt: ForStmt) -> NodeInfo:
        info = NodeInfo(kind=NodeKind.FOR, label="")
        if stmt.is_range:
            condition = f"range {get_value(stmt.cond)}"
            if stmt.range_lhs:
                names = ", ".join(get_value(lhs) for lhs in stmt.range_lhs)
                condition = f"{names} {stmt.range_tok} {condition}"
            for lhs in stmt.range_lhs:
                if lhs.kind == NodeKind.IDENT:
                    if lhs.name != "_":
                        _merge(info.defines, [lhs.name])
                else:
                    _merge(info.references, identifiers(lhs))
        elif stmt.cond is None:
            condition = "true"
        else:
            condition = get_value(stmt.cond)
        operands = identifiers(stmt.cond)
        info.label = f"for {condition}"
        _merge(info.references, operands)
        info.controls = list(operands)
        return info

    def _classify_switch(self, stmt: SwitchStmt) -> NodeInfo:
        if stmt.is_select:
            return NodeInfo(kind=NodeKind.SWITCH, label="select")
        operands = identifiers(stmt.tag)
        if stmt.is_type:
            subject = f"{get_value(stmt.tag)}.(type)"
            if stmt.alias:
                subject = f"{stmt.alias} := {subject}"
        else:
            subject = get_value(stmt.tag) if stmt.tag is not None else "true"
        info = NodeInfo(
            kind=NodeKind.SWITCH,
            label=f"switch {subject}",
            references=list(operands),
            controls=list(operands),
        )
        if stmt.alias and stmt.alias != "_":
            info.defines.append(stmt.alias)
        return info

    def _classify_case(self, clause: CaseClause) -> NodeInfo:
        if clause.is_default:
            return NodeInfo(kind=NodeKind.CASE, label="default")
        if clause.comm is not None:
            if clause.comm.kind == NodeKind.ASSIGN:
                received = self._classify_assign(clause.comm)
                return NodeInfo(
                    kind=NodeKind.CASE,
                    label=f"case {received.label}",
                    defines=received.defines,
                    references=received.references,
                )
            return NodeInfo(
                kind=NodeKind.CASE,
                label=f"case {get_value(clause.comm)}",
                references=identifiers(clause.comm),
            )
        operands = []
        for expr in clause.exprs:
            _merge(operands, identifiers(expr))
        return NodeInfo(
            kind=NodeKind.CASE,
            label="case " + ", ".join(get_value(expr) for expr in clause.exprs),
            references=list(operands),
            controls=list(operands),
        )

    def _classify_branch(self, stmt: BranchStmt) -> NodeInfo:
        if stmt.tok in ("break", "continue", "fallthrough"):
            label = f"{stmt.tok} {stmt.label}" if stmt.label else stmt.tok
            return NodeInfo(kind=NodeKind.BRANCH, label=label)
        # goto is outside the loop model
        return NodeInfo(
            kind=NodeKind.BRANCH,
            label=stmt.tok,
            diagnostic=f"unhandled branch {stmt.tok}",
        )


def _is_arithmetic(value: Optional[Node]) -> bool:
    return value is not None and value.kind == NodeKind.BINARY and value.op in ARITHMETIC_OPS
