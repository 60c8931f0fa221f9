"""
Edge Classifier.
Assigns a semantic role, color, label and anchor node to a control-flow edge.
"""

from typing import Optional, Tuple
from dataclasses import dataclass
from enum import Enum

from cfg_extractor import Block, EdgeKind, Successor
from go_ast import Node, NodeKind


class EdgeRole(Enum):
    """Semantic role of a rendered control edge."""
    THEN = "then"
    ELSE = "else"
    LOOP_BODY = "loop-body"
    LOOP_EXIT = "loop-exit"
    FALLTHROUGH = "fallthrough"
    BREAK = "break"
    CONTINUE = "continue"


ROLE_BY_KIND = {
    EdgeKind.THEN: EdgeRole.THEN,
    EdgeKind.ELSE: EdgeRole.ELSE,
    EdgeKind.LOOP_BODY: EdgeRole.LOOP_BODY,
    EdgeKind.LOOP_EXIT: EdgeRole.LOOP_EXIT,
    EdgeKind.UNCONDITIONAL: EdgeRole.FALLTHROUGH,
}

# Block summaries carrying one of these tags are decision branch/join points
DECISION_TAGS = ("(IfThen)", "(IfElse)", "(IfDone)", "(For", "(Switch", "(Select")


@dataclass(frozen=True)
class ClassifiedEdge:
    role: EdgeRole
    anchor: str
    color: Optional[str] = None
    label: Optional[str] = None
    decorated: bool = False


def block_id(block: Block) -> str:
    return f"block_{block.index}"


def node_id(block: Block, position: int) -> str:
    return f"block_{block.index}_node_{position}"


def find_next_block_with_nodes(start: Block) -> Optional[Block]:
    """
    Breadth-first search from `start` (inclusive) for the nearest block that
    has at least one statement node.

    Args:
        start: Block to start from

    Returns:
        First block with nodes, or None when every reachable block is empty
    """
    visited = {start.index}
    queue = [start]
    while queue:
        current = queue.pop(0)
        if current.nodes:
            return current
        for succ in current.succs:
            if succ.target.index not in visited:
                visited.add(succ.target.index)
                queue.append(succ.target)
    return None


def find_loop_header(start: Block) -> Optional[Tuple[Block, int]]:
    """Nearest block (BFS from `start`) holding a for node, with its position."""
    visited = {start.index}
    queue = [start]
    while queue:
        current = queue.pop(0)
        for position, node in enumerate(current.nodes):
            if node.kind == NodeKind.FOR:
                return current, position
        for succ in current.succs:
            if succ.target.index not in visited:
                visited.add(succ.target.index)
                queue.append(succ.target)
    return None


def is_decision_summary(summary: str) -> bool:
    return any(tag in summary for tag in DECISION_TAGS)


class EdgeClassifier:
    """Classify block-to-block edges for rendering."""

    def __init__(self, affirmative_color: str = "yellow", negative_color: str = "red",
                 neutral_color: str = "black"):
        """
        Initialize edge classifier.

        Args:
            affirmative_color: Color of then/loop-body edges
            negative_color: Color of else/loop-exit edges
            neutral_color: Color of every other block transition
        """
        self.colors = {
            EdgeKind.THEN: affirmative_color,
            EdgeKind.LOOP_BODY: affirmative_color,
            EdgeKind.ELSE: negative_color,
            EdgeKind.LOOP_EXIT: negative_color,
        }
        self.neutral_color = neutral_color

    def classify(self, source_last_node: Optional[Node], edge: Successor) -> ClassifiedEdge:
        """
        Classify an edge leaving a block.

        Args:
            source_last_node: Last statement node of the source block
            edge: Successor edge of the source block

        Returns:
            ClassifiedEdge with role, anchor, color and label
        """
        if (source_last_node is not None and source_last_node.kind == NodeKind.BRANCH
                and source_last_node.tok in ("break", "continue")):
            return self._classify_branch(source_last_node.tok, edge)

        color = self.colors.get(edge.kind, self.neutral_color)
        role = ROLE_BY_KIND[edge.kind]
        anchor_block = find_next_block_with_nodes(edge.target)
        if anchor_block is None:
            return ClassifiedEdge(role=role, anchor=block_id(edge.target), color=color)

        label = None
        if is_decision_summary(anchor_block.summary):
            label = anchor_block.summary
        return ClassifiedEdge(
            role=role,
            anchor=node_id(anchor_block, 0),
            color=color,
            label=label,
            decorated=label is not None,
        )

    def _classify_branch(self, tok: str, edge: Successor) -> ClassifiedEdge:
        """Route continue to its loop header and break to the end of the statement it leaves."""
        if tok == "continue":
            header = find_loop_header(edge.target)
            if header is not None:
                block, position = header
                return ClassifiedEdge(EdgeRole.CONTINUE, node_id(block, position), label=tok)
            role = EdgeRole.CONTINUE
        else:
            role = EdgeRole.BREAK
        anchor_block = find_next_block_with_nodes(edge.target)
        anchor = node_id(anchor_block, 0) if anchor_block else block_id(edge.target)
        return ClassifiedEdge(role, anchor, label=tok)
