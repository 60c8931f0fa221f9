"""
Graphviz DOT generator.
Walks the live blocks of a CFG once, labels every statement node, draws the
classified control edges and the def/use trace edges of each variable.
"""

import re
from typing import List, Optional
from dataclasses import dataclass, field

from cfg_extractor import CFG, Block, BlockKind
from edge_classifier import ClassifiedEdge, EdgeClassifier, node_id
from go_ast import NodeKind
from node_classifier import NodeClassifier
from traversal import TraversalState

# Edge labels are built from block summaries ("block 3 (IfThen)"); only the
# kind tag is kept in the finished document.
BLOCK_PREFIX_RE = re.compile(r'label="block \d+ ([^"]+)"')


@dataclass
class DotStyle:
    """Colors and fonts of the rendered document."""
    affirmative_color: str = "yellow"
    negative_color: str = "red"
    neutral_color: str = "black"
    decision_fontsize: int = 14
    trace_fontsize: int = 26
    trace_style: str = "dashed"


def escape_label(text: str) -> str:
    """Escape a label for use inside a double-quoted DOT string."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class DotDocument:
    """Append-only builder for one DOT digraph."""

    def __init__(self, name: str = "G"):
        self.name = name
        self._lines: List[str] = []

    def node(self, node_id: str, label: str):
        self._lines.append(f'  {node_id} [label="{escape_label(label)}"];')

    def edge(self, src: str, dst: str, attrs: Optional[List[str]] = None):
        if attrs:
            self._lines.append(f"  {src} -> {dst} [{' '.join(attrs)}];")
        else:
            self._lines.append(f"  {src} -> {dst};")

    def finish(self) -> str:
        """Return the finished document text."""
        body = "".join(line + "\n" for line in self._lines)
        body = BLOCK_PREFIX_RE.sub(r'label="\1"', body)
        return f"digraph {self.name} {{\n{body}}}\n"


@dataclass
class RenderResult:
    document: str
    state: TraversalState
    edges: List[ClassifiedEdge] = field(default_factory=list)


class DotGenerator:
    """Render a CFG as an annotated Graphviz document."""

    def __init__(self, style: Optional[DotStyle] = None):
        """
        Initialize DOT generator.

        Args:
            style: Colors and fonts (default: DotStyle())
        """
        self.style = style or DotStyle()
        self.node_classifier = NodeClassifier()
        self.edge_classifier = EdgeClassifier(
            affirmative_color=self.style.affirmative_color,
            negative_color=self.style.negative_color,
            neutral_color=self.style.neutral_color,
        )

    def render(self, cfg: CFG, state: Optional[TraversalState] = None) -> RenderResult:
        """
        Render the live blocks of a CFG.

        Args:
            cfg: Control flow graph of one function
            state: Traversal state to fill (default: a fresh one)

        Returns:
            RenderResult with the document and the filled traversal state
        """
        state = state if state is not None else TraversalState()
        doc = DotDocument()
        edges: List[ClassifiedEdge] = []

        for block in sorted(cfg.live_blocks(), key=lambda b: b.index):
            state.record_block(len(block.succs))
            self._render_block(block, doc, state, edges)

        self._render_trace(doc, state)
        return RenderResult(document=doc.finish(), state=state, edges=edges)

    def _render_block(self, block: Block, doc: DotDocument, state: TraversalState,
                      edges: List[ClassifiedEdge]):
        prev_id = None
        for position, node in enumerate(block.nodes):
            current_id = node_id(block, position)
            info = self.node_classifier.classify(node)
            doc.node(current_id, info.label)
            state.record(current_id, info)
            if prev_id is not None:
                doc.edge(prev_id, current_id)
            prev_id = current_id

        if prev_id is None:
            # Router blocks are reconciled through the lookahead of their predecessors
            return

        last = block.nodes[-1]
        self._check_branch_arity(block, prev_id, state)
        for succ in block.succs:
            # Exit edges count toward E but are not drawn
            if succ.target.kind == BlockKind.EXIT:
                continue
            classified = self.edge_classifier.classify(last, succ)
            edges.append(classified)
            doc.edge(prev_id, classified.anchor, self._edge_attrs(classified))

    def _check_branch_arity(self, block: Block, last_id: str, state: TraversalState):
        last = block.nodes[-1]
        expected = 0
        if last.kind in (NodeKind.IF, NodeKind.CASE):
            expected = 2
        elif last.kind == NodeKind.FOR:
            expected = 2 if (last.cond is not None or last.is_range) else 1
        if len(block.succs) < expected:
            state.diagnostics.append(
                f"{last_id}: expected {expected} successors, found {len(block.succs)}"
            )

    def _edge_attrs(self, edge: ClassifiedEdge) -> List[str]:
        attrs = []
        if edge.color:
            attrs.append(f'color="{edge.color}"')
        if edge.label:
            attrs.append(f'label="{escape_label(edge.label)}"')
        if edge.decorated:
            attrs.append(f"fontsize={self.style.decision_fontsize}")
            attrs.append("decorate=true")
        return attrs

    def _render_trace(self, doc: DotDocument, state: TraversalState):
        """One edge per consecutive pair of occurrences of each variable."""
        for name, occurrences in state.trace.items():
            for previous, current in zip(occurrences, occurrences[1:]):
                doc.edge(previous, current, [
                    f'label="{escape_label(name)}"',
                    f"style={self.style.trace_style}",
                    f"fontsize={self.style.trace_fontsize}",
                ])
