"""
Tests for Chepin and cyclomatic scoring.
"""

import pytest

from complexity_metrics import (
    ComplexityMetrics, RoleSets, build_role_sets, chepin, classify_complexity,
)
from dot_generator import DotGenerator
from go_ast import (
    AssignStmt, BasicLit, BinaryExpr, BlockStmt, ExprStmt, CallExpr, ForStmt,
    Ident, IfStmt, ReturnStmt,
)


def traverse(cfg):
    return DotGenerator().render(cfg).state


class TestChepin:
    """Tests for the Chepin role reconciliation and formula."""

    def test_formula(self):
        """Test Q = P + 2M + 3C + 0.5T."""
        roles = RoleSets(input={"a", "b"}, modified={"m"}, control={"c"}, unused={"u"})
        assert chepin(roles) == 2 + 2 + 3 + 0.5

    def test_empty(self):
        """Test that no variables score zero."""
        assert chepin(RoleSets()) == 0

    def test_branch_scenario(self, extract, branch_body):
        """Test roles of a = 0; b = 1; if n < 2 { return n }."""
        roles = build_role_sets(traverse(extract(branch_body)))
        assert roles.control == {"n"}
        assert roles.modified == set()
        assert roles.unused == {"a", "b"}
        assert roles.input == set()
        assert chepin(roles) == 4.0

    def test_loop_scenario(self, extract, loop_body):
        """Test that control membership wins over modification."""
        roles = build_role_sets(traverse(extract(loop_body)))
        assert roles.control == {"i", "n"}
        assert roles.modified == {"s"}
        assert roles.input == set()
        assert chepin(roles) == 8.0

    def test_input_variable(self, extract):
        """Test that a variable read twice without modification is input."""
        body = [
            AssignStmt([Ident("y")], "=", [Ident("x")]),
            ExprStmt(CallExpr(Ident("log"), [Ident("x")])),
            ReturnStmt([Ident("y")]),
        ]
        roles = build_role_sets(traverse(extract(body)))
        assert roles.input == {"x", "y"}
        assert roles.unused == set()

    def test_roles_disjoint(self, extract, loop_body, branch_body):
        """Test that input, modified and control never overlap."""
        for body in (loop_body, branch_body):
            roles = build_role_sets(traverse(extract(body)))
            assert not roles.input & roles.modified
            assert not roles.input & roles.control
            assert not roles.modified & roles.control

    def test_to_dict(self):
        """Test sorted JSON-ready role lists."""
        roles = RoleSets(input={"b", "a"}, control={"n"})
        assert roles.to_dict() == {"P": ["a", "b"], "M": [], "C": ["n"], "T": []}


class TestCyclomatic:
    """Tests for the cyclomatic score."""

    def setup_method(self):
        self.metrics = ComplexityMetrics()

    def test_linear_is_one(self, extract):
        """Test that code without branches scores 1."""
        body = [AssignStmt([Ident("x")], "=", [BasicLit("1")]), ReturnStmt([Ident("x")])]
        assert self.metrics.score(traverse(extract(body)))[1] == 1

    def test_empty_body(self, extract):
        """Test the empty body score."""
        assert self.metrics.score(traverse(extract([])))[1] == 1

    def test_branch_scenario(self, extract, branch_body):
        """Test the single decision scores 2."""
        state = traverse(extract(branch_body))
        assert self.metrics.score(state) == (4.0, 2)

    def test_each_decision_adds_one(self, extract):
        """Test that each independent conditional increments the score."""
        def conditional(name):
            return IfStmt(
                cond=BinaryExpr(Ident(name), ">", BasicLit("0")),
                body=BlockStmt([AssignStmt([Ident(name)], "=", [BasicLit("0")])]),
            )
        scores = [
            self.metrics.score(traverse(extract([conditional(f"v{i}") for i in range(count)])))[1]
            for count in range(4)
        ]
        assert scores == [1, 2, 3, 4]

    def test_loop_scenario(self, extract, loop_body):
        """Test a loop with a nested conditional scores 3."""
        assert self.metrics.score(traverse(extract(loop_body)))[1] == 3

    def test_switch_scenario(self, extract, switch_body):
        """Test that each switch case adds one and the tag is a control variable."""
        state = traverse(extract(switch_body))
        assert self.metrics.score(state) == (3.0, 3)
        assert state.controls == {"x"}

    def test_labeled_break_scenario(self, extract, labeled_loop_body):
        """Test nested loops with a labeled break score one per decision."""
        assert self.metrics.score(traverse(extract(labeled_loop_body)))[1] == 4


class TestCalculate:
    """Tests for the metrics report."""

    def test_report(self, extract, loop_body):
        """Test report contents for the loop scenario."""
        report = ComplexityMetrics().calculate(traverse(extract(loop_body)))
        assert report["chepin"] == 8.0
        assert report["cyclomatic_complexity"] == 3
        assert report["classification"] == "simple"
        assert report["roles"]["C"] == ["i", "n"]
        assert report["decision_count"] == 1
        assert report["loop_count"] == 1
        assert report["block_count"] == 8
        assert report["edge_count"] == 9

    def test_switch_report(self, extract, switch_body):
        """Test that case tests count as decisions."""
        report = ComplexityMetrics().calculate(traverse(extract(switch_body)))
        assert report["decision_count"] == 2
        assert report["switch_count"] == 1
        assert report["roles"]["C"] == ["x"]

    def test_range_variables_traced(self, extract):
        """Test that range key and value names are traced at the loop header."""
        body = [
            ForStmt(
                cond=Ident("xs"), is_range=True, range_lhs=[Ident("i"), Ident("v")],
                body=BlockStmt([AssignStmt([Ident("s")], "+=", [Ident("v")])]),
            ),
        ]
        state = traverse(extract(body))
        assert state.trace["i"] == ["block_3_node_0"]
        assert state.trace["v"] == ["block_1_node_0", "block_3_node_0"]
        roles = build_role_sets(state)
        assert roles.unused == {"i"}
        assert "v" in roles.input

    @pytest.mark.parametrize("score,band", [
        (1, "simple"), (4, "simple"), (5, "moderate"), (10, "moderate"),
        (11, "complex"), (21, "very_complex"), (51, "untestable"),
    ])
    def test_classification(self, score, band):
        """Test the risk bands."""
        assert classify_complexity(score) == band
