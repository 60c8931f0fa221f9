"""
Complexity Metrics Calculator.
Computes Chepin's information-flow metric and cyclomatic complexity from the
state gathered while rendering a CFG.
"""

from typing import Dict, List, Set, Tuple
from dataclasses import dataclass, field

from go_ast import NodeKind
from traversal import TraversalState


@dataclass
class RoleSets:
    """Chepin variable roles after reconciliation."""
    input: Set[str] = field(default_factory=set)
    modified: Set[str] = field(default_factory=set)
    control: Set[str] = field(default_factory=set)
    unused: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "P": sorted(self.input),
            "M": sorted(self.modified),
            "C": sorted(self.control),
            "T": sorted(self.unused),
        }


def build_role_sets(state: TraversalState) -> RoleSets:
    """
    Classify every traced variable into the Chepin role sets.

    Control membership removes a name from input and modified, modified
    membership removes it from input, and an input variable seen at a single
    node is unused.
    """
    control = set(state.controls)
    modified = set(state.modified) - control
    inputs = set(state.trace) - control - modified
    unused = {name for name in inputs if len(state.trace[name]) == 1}
    inputs -= unused
    return RoleSets(input=inputs, modified=modified, control=control, unused=unused)


def chepin(roles: RoleSets) -> float:
    """Q = P + 2M + 3C + 0.5T"""
    return (len(roles.input) + 2 * len(roles.modified) + 3 * len(roles.control)
            + 0.5 * len(roles.unused))


def cyclomatic(state: TraversalState) -> int:
    """E - N + 2 over the live blocks counted during the traversal."""
    return state.live_edges - state.live_blocks + 2


class ComplexityMetrics:
    """Calculate complexity metrics from a traversal state."""

    def score(self, state: TraversalState) -> Tuple[float, int]:
        """
        Compute both complexity scores.

        Args:
            state: State filled by DotGenerator.render

        Returns:
            Tuple of (chepin, cyclomatic)
        """
        return chepin(build_role_sets(state)), cyclomatic(state)

    def calculate(self, state: TraversalState) -> Dict:
        """
        Calculate complexity metrics.

        Args:
            state: State filled by DotGenerator.render

        Returns:
            Dictionary of metrics
        """
        roles = build_role_sets(state)
        metrics = {}

        metrics["chepin"] = chepin(roles)
        metrics["roles"] = roles.to_dict()

        complexity = cyclomatic(state)
        metrics["cyclomatic_complexity"] = complexity
        metrics["classification"] = classify_complexity(complexity)
        metrics["edge_count"] = state.live_edges
        metrics["block_count"] = state.live_blocks

        # Statement counts
        metrics["node_count"] = len(state.nodes)
        metrics["decision_count"] = state.count(NodeKind.IF) + state.count(NodeKind.CASE)
        metrics["switch_count"] = state.count(NodeKind.SWITCH)
        metrics["loop_count"] = state.count(NodeKind.FOR)

        return metrics


def classify_complexity(complexity: int) -> str:
    """McCabe risk band of a cyclomatic score."""
    if complexity <= 4:
        return "simple"
    elif complexity <= 10:
        return "moderate"
    elif complexity <= 20:
        return "complex"
    elif complexity <= 50:
        return "very_complex"
    return "untestable"
