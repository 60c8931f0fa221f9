"""
Validation Gates for CFG and DOT.
Compiler-style structural checks before and after rendering.
"""

from typing import List, Tuple
import re

from cfg_extractor import CFG, BlockKind


class ValidationError(Exception):
    """Base validation error."""
    pass


class CFGValidationError(ValidationError):
    """CFG validation error."""
    pass


class DotSyntaxError(ValidationError):
    """DOT syntax error."""
    pass


NODE_RE = re.compile(r'^\s*([A-Za-z_][A-Za-z0-9_]*) \[label="(?:[^"\\]|\\.)*"\];$')
EDGE_RE = re.compile(
    r'^\s*([A-Za-z_][A-Za-z0-9_]*) -> ([A-Za-z_][A-Za-z0-9_]*)'
    r'(?: \[(?:[^"\]]|"(?:[^"\\]|\\.)*")*\])?;$'
)
PLACEHOLDER_RE = re.compile(r'^block_\d+$')


class Validator:
    """Validation gates for CFG and DOT."""

    def validate_cfg(self, cfg: CFG) -> Tuple[bool, List[str]]:
        """
        Validate a CFG before traversal.

        Args:
            cfg: Control flow graph

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not cfg.blocks:
            errors.append("CFG has no blocks")
            return False, errors

        # Block indices are positions
        for position, block in enumerate(cfg.blocks):
            if block.index != position:
                errors.append(f"Block at position {position} has index {block.index}")

        # Successors reference blocks of this graph
        known = {id(block) for block in cfg.blocks}
        for block in cfg.blocks:
            for succ in block.succs:
                if id(succ.target) not in known:
                    errors.append(
                        f"Block {block.index} references unknown successor {succ.target.index}"
                    )

        if not cfg.blocks[0].live:
            errors.append("Entry block is not live")

        # Exit block
        exits = [b for b in cfg.blocks if b.kind == BlockKind.EXIT]
        if len(exits) > 1:
            errors.append(f"Expected at most one exit block, found {len(exits)}")
        for exit_block in exits:
            if exit_block.succs:
                errors.append(f"Exit block {exit_block.index} has successors")

        return len(errors) == 0, errors

    def validate_dot(self, document: str) -> Tuple[bool, List[str]]:
        """
        Validate a rendered DOT document.

        Args:
            document: DOT text

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not document or not document.strip():
            errors.append("DOT document is empty")
            return False, errors

        lines = document.rstrip("\n").split("\n")
        if not re.match(r'^digraph [A-Za-z_][A-Za-z0-9_]* \{$', lines[0]):
            errors.append("DOT document must start with 'digraph <name> {'")
        if lines[-1] != "}":
            errors.append("DOT document must end with '}'")

        declared = set()
        edges = []
        for number, line in enumerate(lines[1:-1], start=2):
            node_match = NODE_RE.match(line)
            if node_match:
                node_id = node_match.group(1)
                if node_id in declared:
                    errors.append(f"Duplicate node definition: {node_id} (line {number})")
                declared.add(node_id)
                continue
            edge_match = EDGE_RE.match(line)
            if edge_match:
                edges.append((number, edge_match.group(1), edge_match.group(2)))
                continue
            errors.append(f"Unparseable statement on line {number}: {line.strip()}")

        # Edge endpoints are declared nodes or block placeholders
        for number, src, dst in edges:
            if src not in declared:
                errors.append(f"Edge from undefined node: {src} (line {number})")
            if dst not in declared and not PLACEHOLDER_RE.match(dst):
                errors.append(f"Edge to undefined node: {dst} (line {number})")

        return len(errors) == 0, errors
