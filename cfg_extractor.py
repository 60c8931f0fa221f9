"""
Control Flow Graph (CFG) extraction from a Go function body.
Partitions statements into basic blocks, wires successors and marks liveness.
"""

from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum

from go_ast import Node, NodeKind, BranchStmt, ForStmt, IfStmt, SwitchStmt


class BlockKind(Enum):
    """Construct a basic block was created for."""
    BODY = "Body"
    IF_THEN = "IfThen"
    IF_ELSE = "IfElse"
    IF_DONE = "IfDone"
    FOR_BODY = "ForBody"
    FOR_DONE = "ForDone"
    FOR_LOOP = "ForLoop"
    FOR_POST = "ForPost"
    SWITCH_CASE_BODY = "SwitchCaseBody"
    SWITCH_NEXT_CASE = "SwitchNextCase"
    SWITCH_DONE = "SwitchDone"
    SELECT_CASE_BODY = "SelectCaseBody"
    SELECT_NEXT_CASE = "SelectNextCase"
    SELECT_DONE = "SelectDone"
    UNREACHABLE = "Unreachable"
    EXIT = "Exit"


SWITCH_BLOCKS = (BlockKind.SWITCH_CASE_BODY, BlockKind.SWITCH_NEXT_CASE, BlockKind.SWITCH_DONE)
SELECT_BLOCKS = (BlockKind.SELECT_CASE_BODY, BlockKind.SELECT_NEXT_CASE, BlockKind.SELECT_DONE)


class EdgeKind(Enum):
    """Structural kind of a control-flow edge."""
    UNCONDITIONAL = "unconditional"
    THEN = "then"
    ELSE = "else"
    LOOP_BODY = "loop-body"
    LOOP_EXIT = "loop-exit"


@dataclass(eq=False)
class Block:
    """Basic block representation."""
    index: int
    kind: BlockKind = BlockKind.BODY
    nodes: List[Node] = field(default_factory=list)
    succs: List["Successor"] = field(default_factory=list)
    live: bool = False

    @property
    def summary(self) -> str:
        return f"block {self.index} ({self.kind.value})"


@dataclass(eq=False)
class Successor:
    """Outgoing edge of a block."""
    target: Block
    kind: EdgeKind = EdgeKind.UNCONDITIONAL


@dataclass
class CFG:
    """Blocks of one function; block 0 is the entry."""
    blocks: List[Block] = field(default_factory=list)

    @property
    def entry(self) -> Optional[Block]:
        return self.blocks[0] if self.blocks else None

    def live_blocks(self) -> List[Block]:
        return [b for b in self.blocks if b.live]


@dataclass
class _Targets:
    """Jump targets of an enclosing loop or switch; switches have no continue target."""
    break_to: Block
    continue_to: Optional[Block] = None
    label: Optional[str] = None


class CFGExtractor:
    """Build a basic-block CFG from a converted Go function body."""

    def __init__(self):
        """Initialize CFG extractor."""
        self.blocks: List[Block] = []
        self.current: Optional[Block] = None
        self.targets: List[_Targets] = []
        self.returns: List[Block] = []
        self.fallthrough: List[Optional[Block]] = []

    def _new_block(self, kind: BlockKind) -> Block:
        block = Block(index=len(self.blocks), kind=kind)
        self.blocks.append(block)
        return block

    def extract(self, body: List[Node]) -> CFG:
        """
        Extract CFG from a function body.

        Args:
            body: Statements of the function body (go_ast nodes)

        Returns:
            CFG with liveness computed
        """
        self.blocks = []
        self.targets = []
        self.returns = []
        self.fallthrough = []
        self.current = self._new_block(BlockKind.BODY)

        self._process_statement_list(body)

        # Falling off the end of the body is an implicit return
        self.returns.append(self.current)
        exit_block = self._new_block(BlockKind.EXIT)
        for block in self.returns:
            block.succs.append(Successor(exit_block))

        cfg = CFG(blocks=self.blocks)
        self._mark_live(cfg)
        return cfg

    def _mark_live(self, cfg: CFG):
        """Breadth-first reachability from the entry block."""
        if not cfg.blocks:
            return
        queue = [cfg.blocks[0]]
        cfg.blocks[0].live = True
        while queue:
            block = queue.pop(0)
            for succ in block.succs:
                if not succ.target.live:
                    succ.target.live = True
                    queue.append(succ.target)

    def _add(self, node: Node):
        self.current.nodes.append(node)

    def _jump(self, target: Block, kind: EdgeKind = EdgeKind.UNCONDITIONAL):
        self.current.succs.append(Successor(target, kind))

    def _process_statement_list(self, statements: List[Node]):
        for stmt in statements:
            self._process_statement(stmt)

    def _process_statement(self, stmt: Node):
        """Process individual statement."""
        kind = stmt.kind

        if kind == NodeKind.DECL:
            # Each var/const spec is a node of its own
            for spec in stmt.specs:
                self._add(spec)
        elif kind == NodeKind.RETURN:
            self._add(stmt)
            self.returns.append(self.current)
            self.current = self._new_block(BlockKind.UNREACHABLE)
        elif kind == NodeKind.BLOCK:
            self._process_statement_list(stmt.body)
        elif kind == NodeKind.IF:
            self._process_if(stmt)
        elif kind == NodeKind.FOR:
            self._process_for(stmt)
        elif kind == NodeKind.SWITCH:
            self._process_switch(stmt)
        elif kind == NodeKind.BRANCH:
            self._process_branch(stmt)
        else:
            self._add(stmt)

    def _process_if(self, stmt: IfStmt):
        """Process if statement."""
        if stmt.init is not None:
            self._process_statement(stmt.init)

        then_block = self._new_block(BlockKind.IF_THEN)
        done = self._new_block(BlockKind.IF_DONE)
        else_block = done
        if stmt.else_ is not None:
            else_block = self._new_block(BlockKind.IF_ELSE)

        self._add(stmt)
        self._jump(then_block, EdgeKind.THEN)
        self._jump(else_block, EdgeKind.ELSE)

        self.current = then_block
        self._process_statement(stmt.body)
        self._jump(done)

        if stmt.else_ is not None:
            self.current = else_block
            self._process_statement(stmt.else_)
            self._jump(done)

        self.current = done

    def _process_for(self, stmt: ForStmt):
        """Process for loop (three-clause, condition-only, infinite and range)."""
        if stmt.init is not None:
            self._process_statement(stmt.init)

        body = self._new_block(BlockKind.FOR_BODY)
        done = self._new_block(BlockKind.FOR_DONE)
        loop = self._new_block(BlockKind.FOR_LOOP)
        cont = loop
        if stmt.post is not None:
            cont = self._new_block(BlockKind.FOR_POST)

        self._jump(loop)
        self.current = loop
        self._add(stmt)
        self._jump(body, EdgeKind.LOOP_BODY)
        if stmt.cond is not None or stmt.is_range:
            self._jump(done, EdgeKind.LOOP_EXIT)

        self.targets.append(_Targets(break_to=done, continue_to=cont, label=stmt.label))
        self.current = body
        self._process_statement(stmt.body)
        self.targets.pop()
        self._jump(cont)

        if stmt.post is not None:
            self.current = cont
            self._process_statement(stmt.post)
            self._jump(loop)

        self.current = done

    def _process_switch(self, stmt: SwitchStmt):
        """
        Process switch, type switch and select.

        Case tests form a chain: each test jumps to its body on `then` and to
        the next test on `else`; the last test falls to the default clause, or
        past the statement when there is none.
        """
        if stmt.init is not None:
            self._process_statement(stmt.init)

        if stmt.is_select:
            body_kind, next_kind, done_kind = SELECT_BLOCKS
        else:
            body_kind, next_kind, done_kind = SWITCH_BLOCKS

        self._add(stmt)
        done = self._new_block(done_kind)
        bodies = [self._new_block(body_kind) for _ in stmt.cases]

        default_body = done
        tests = []
        for case, body in zip(stmt.cases, bodies):
            if case.is_default:
                default_body = body
            else:
                tests.append((case, body))

        if not tests:
            self._jump(default_body)
        for position, (case, body) in enumerate(tests):
            self._add(case)
            self._jump(body, EdgeKind.THEN)
            if position == len(tests) - 1:
                self._jump(default_body, EdgeKind.ELSE)
            else:
                next_test = self._new_block(next_kind)
                self._jump(next_test, EdgeKind.ELSE)
                self.current = next_test

        self.targets.append(_Targets(break_to=done, label=stmt.label))
        for position, (case, body) in enumerate(zip(stmt.cases, bodies)):
            following = bodies[position + 1] if position + 1 < len(bodies) else None
            self.fallthrough.append(following)
            self.current = body
            self._process_statement_list(case.body)
            self._jump(done)
            self.fallthrough.pop()
        self.targets.pop()

        self.current = done

    def _branch_target(self, stmt: BranchStmt) -> Optional[Block]:
        """Jump target of break/continue/fallthrough, None when unresolved."""
        if stmt.tok == "fallthrough":
            return self.fallthrough[-1] if self.fallthrough else None
        for targets in reversed(self.targets):
            if stmt.label is not None:
                if targets.label != stmt.label:
                    continue
                return targets.break_to if stmt.tok == "break" else targets.continue_to
            if stmt.tok == "break":
                return targets.break_to
            if stmt.tok == "continue" and targets.continue_to is not None:
                return targets.continue_to
        return None

    def _process_branch(self, stmt: BranchStmt):
        """Process break/continue/fallthrough; goto has no modeled target."""
        self._add(stmt)
        target = None
        if stmt.tok in ("break", "continue", "fallthrough"):
            target = self._branch_target(stmt)
        if target is not None:
            self._jump(target)
        self.current = self._new_block(BlockKind.UNREACHABLE)
