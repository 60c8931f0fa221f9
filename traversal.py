"""
Per-traversal state shared by the graph renderer and the complexity scorer.
"""

from typing import Dict, List, Set
from dataclasses import dataclass, field

from go_ast import NodeKind
from node_classifier import NodeInfo


@dataclass
class ClassifiedNode:
    node_id: str
    info: NodeInfo


@dataclass
class TraversalState:
    """
    Everything gathered while walking the live blocks of one function.

    A state belongs to exactly one traversal; create a new one per function.
    """
    trace: Dict[str, List[str]] = field(default_factory=dict)
    modified: Set[str] = field(default_factory=set)
    controls: Set[str] = field(default_factory=set)
    nodes: List[ClassifiedNode] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)
    live_blocks: int = 0
    live_edges: int = 0

    def record(self, node_id: str, info: NodeInfo):
        """Record a classified node and the variable roles it contributes."""
        self.nodes.append(ClassifiedNode(node_id, info))
        for name in info.names():
            self.trace.setdefault(name, []).append(node_id)
        self.modified.update(info.computed)
        self.controls.update(info.controls)
        if info.diagnostic:
            self.diagnostics.append(f"{node_id}: {info.diagnostic}")

    def record_block(self, succ_count: int):
        self.live_blocks += 1
        self.live_edges += succ_count

    def count(self, kind: NodeKind) -> int:
        return sum(1 for node in self.nodes if node.info.kind == kind)
