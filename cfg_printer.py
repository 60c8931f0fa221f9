"""
Plain-text dump of a CFG: every block, its statement labels and successors.
"""

from typing import List

from cfg_extractor import CFG, EdgeKind
from node_classifier import NodeClassifier


def format_cfg(cfg: CFG, include_dead: bool = True) -> str:
    """
    Format a CFG block by block.

    Args:
        cfg: Control flow graph
        include_dead: Also list blocks unreachable from the entry

    Returns:
        Text with one "Block:" section per block
    """
    classifier = NodeClassifier()
    lines: List[str] = []

    for block in cfg.blocks:
        if not block.live and not include_dead:
            continue
        header = f"Block: {block.summary}"
        if not block.live:
            header += " [dead]"
        lines.append(header)

        for node in block.nodes:
            info = classifier.classify(node)
            for part in info.label.split("\n"):
                lines.append(f" -> Node: {part}")

        for succ in block.succs:
            line = f" -> Successor: {succ.target.summary}"
            if succ.kind != EdgeKind.UNCONDITIONAL:
                line += f" [{succ.kind.value}]"
            lines.append(line)

    return "\n".join(lines) + ("\n" if lines else "")
