"""
Shared fixtures: hand-built function bodies and a Go front end.
"""

import pytest

from ast_parser import ASTParser
from cfg_extractor import CFGExtractor
from go_ast import (
    AssignStmt, BasicLit, BinaryExpr, BlockStmt, BranchStmt, CaseClause, ForStmt,
    Ident, IfStmt, IncDecStmt, ReturnStmt, SwitchStmt,
)


def assign(name, value, tok="="):
    return AssignStmt(lhs=[Ident(name)], tok=tok, rhs=[value])


@pytest.fixture
def extract():
    """Build a CFG from a list of statements."""
    def _extract(body):
        return CFGExtractor().extract(body)
    return _extract


@pytest.fixture
def branch_body():
    """a = 0; b = 1; if n < 2 { return n }"""
    return [
        assign("a", BasicLit("0")),
        assign("b", BasicLit("1")),
        IfStmt(
            cond=BinaryExpr(Ident("n"), "<", BasicLit("2")),
            body=BlockStmt([ReturnStmt([Ident("n")])]),
        ),
    ]


@pytest.fixture
def loop_body():
    """
    for i := 0; i < n; i++ {
        if i == 2 { continue }
        s += i
    }
    return s
    """
    return [
        ForStmt(
            init=AssignStmt([Ident("i")], ":=", [BasicLit("0")]),
            cond=BinaryExpr(Ident("i"), "<", Ident("n")),
            post=IncDecStmt(Ident("i"), "++"),
            body=BlockStmt([
                IfStmt(
                    cond=BinaryExpr(Ident("i"), "==", BasicLit("2")),
                    body=BlockStmt([BranchStmt("continue")]),
                ),
                assign("s", Ident("i"), tok="+="),
            ]),
        ),
        ReturnStmt([Ident("s")]),
    ]


@pytest.fixture
def switch_body():
    """
    switch x {
    case 1:
        return 10
    case 2:
        return 20
    }
    return 0
    """
    return [
        SwitchStmt(tag=Ident("x"), cases=[
            CaseClause(exprs=[BasicLit("1")], body=[ReturnStmt([BasicLit("10")])]),
            CaseClause(exprs=[BasicLit("2")], body=[ReturnStmt([BasicLit("20")])]),
        ]),
        ReturnStmt([BasicLit("0")]),
    ]


@pytest.fixture
def labeled_loop_body():
    """
    outer:
    for i := 0; i < n; i++ {
        for j := 0; j < n; j++ {
            if j > i { break outer }
            s += j
        }
        s++
    }
    return s
    """
    inner = ForStmt(
        init=AssignStmt([Ident("j")], ":=", [BasicLit("0")]),
        cond=BinaryExpr(Ident("j"), "<", Ident("n")),
        post=IncDecStmt(Ident("j"), "++"),
        body=BlockStmt([
            IfStmt(
                cond=BinaryExpr(Ident("j"), ">", Ident("i")),
                body=BlockStmt([BranchStmt("break", label="outer")]),
            ),
            assign("s", Ident("j"), tok="+="),
        ]),
    )
    return [
        ForStmt(
            init=AssignStmt([Ident("i")], ":=", [BasicLit("0")]),
            cond=BinaryExpr(Ident("i"), "<", Ident("n")),
            post=IncDecStmt(Ident("i"), "++"),
            body=BlockStmt([inner, IncDecStmt(Ident("s"), "++")]),
            label="outer",
        ),
        ReturnStmt([Ident("s")]),
    ]


@pytest.fixture
def go_parser():
    return ASTParser()


@pytest.fixture
def go_body(go_parser):
    """Convert the body of the named function in a Go source string."""
    def _go_body(source, name=None):
        ast_data = go_parser.parse_string(source)
        function_node = go_parser.find_function(ast_data, name)
        assert function_node is not None
        return go_parser.get_function_body(function_node, ast_data["source"])
    return _go_body
