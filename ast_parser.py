"""
AST Parser using Tree-sitter for Go function extraction.
Parses Go source, locates functions and methods, and converts function bodies
into go_ast nodes.
"""

from typing import List, Optional

import tree_sitter_go as tsgo
from tree_sitter import Language, Parser

from go_ast import (
    Node, NodeKind, AssignStmt, BasicLit, BinaryExpr, BlockStmt, BranchStmt,
    CallExpr, CaseClause, DeclStmt, ExprStmt, ForStmt, Ident, IfStmt, IncDecStmt,
    IndexExpr, ParenExpr, ReturnStmt, SelectorExpr, SwitchStmt, UnaryExpr,
    UnknownNode, ValueSpec,
)

LITERAL_TYPES = {
    'int_literal', 'float_literal', 'imaginary_literal', 'rune_literal',
    'interpreted_string_literal', 'raw_string_literal',
    'true', 'false', 'nil', 'iota',
}

FUNCTION_TYPES = ('function_declaration', 'method_declaration')

BRANCH_TYPES = ('break_statement', 'continue_statement', 'fallthrough_statement', 'goto_statement')


class ASTParser:
    """Deterministic Go AST parser using Tree-sitter."""

    def __init__(self):
        """Initialize Tree-sitter Go parser."""
        self.language = Language(tsgo.language())
        self.parser = Parser(self.language)

    def parse_file(self, file_path: str) -> dict:
        """
        Parse Go file and return AST.

        Args:
            file_path: Path to Go source file

        Returns:
            Dictionary with 'tree', 'source' and 'file_path' keys
        """
        with open(file_path, 'r', encoding='utf-8') as f:
            source_code = f.read()

        ast_data = self.parse_string(source_code)
        ast_data['file_path'] = file_path
        return ast_data

    def parse_string(self, source_code: str) -> dict:
        """
        Parse Go source code string and return AST.

        Args:
            source_code: Go source code string

        Returns:
            Dictionary with 'tree', 'source' and 'file_path' keys
        """
        source = bytes(source_code, 'utf8')
        tree = self.parser.parse(source)
        return {
            'tree': tree,
            'source': source,
            'file_path': None
        }

    def _function_name(self, node, source: bytes) -> Optional[str]:
        """Function name, qualified as Receiver.Method for methods."""
        name_node = node.child_by_field_name('name')
        if name_node is None:
            return None
        name = _text(name_node, source)

        if node.type == 'method_declaration':
            receiver = node.child_by_field_name('receiver')
            receiver_type = None
            if receiver is not None:
                for param in receiver.named_children:
                    type_node = param.child_by_field_name('type')
                    if type_node is not None:
                        receiver_type = _text(type_node, source).lstrip('*').split('[')[0]
                        break
            if receiver_type:
                return f"{receiver_type}.{name}"
        return name

    def _functions(self, ast_data: dict):
        source = ast_data['source']
        for node in ast_data['tree'].root_node.named_children:
            if node.type in FUNCTION_TYPES:
                name = self._function_name(node, source)
                if name:
                    yield name, node

    def find_function(self, ast_data: dict, function_name: str = None) -> Optional[dict]:
        """
        Find function definition in AST.

        Supports both simple names and receiver-qualified method names:
        - Simple: "complexFunction"
        - Qualified: "Server.Handle"

        Args:
            ast_data: AST data from parse_file or parse_string
            function_name: Optional function name to find (first function when None)

        Returns:
            Dictionary with 'node', 'name' and 'source' keys, or None
        """
        source = ast_data['source']
        fallback = None
        for full_name, node in self._functions(ast_data):
            short_name = full_name.split('.')[-1]
            if function_name is None or full_name == function_name:
                return {
                    'node': node,
                    'name': full_name,
                    'source': _text(node, source),
                }
            # A plain method name matches any receiver
            if fallback is None and '.' not in function_name and short_name == function_name:
                fallback = {
                    'node': node,
                    'name': full_name,
                    'source': _text(node, source),
                }
        return fallback

    def list_functions(self, ast_data: dict) -> list:
        """
        List all functions in the AST.

        Args:
            ast_data: AST data from parse_file or parse_string

        Returns:
            List of function names (receiver-qualified for methods)
        """
        return [name for name, _ in self._functions(ast_data)]

    def get_function_body(self, function_node: dict, source: bytes) -> Optional[List[Node]]:
        """
        Extract and convert a function body.

        Args:
            function_node: Function node dictionary from find_function
            source: Source bytes of the parsed file

        Returns:
            List of go_ast statements, or None for body-less declarations
        """
        body = function_node['node'].child_by_field_name('body')
        if body is None:
            return None
        return GoConverter(source).statements(body)


def _text(node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode('utf8')


class GoConverter:
    """Convert tree-sitter-go syntax nodes into go_ast nodes."""

    def __init__(self, source: bytes):
        self.source = source

    def text(self, node) -> str:
        return _text(node, self.source)

    def statements(self, block, skip=()) -> List[Node]:
        """Statements of a block, flattening tree-sitter's statement_list."""
        result = []
        for child in block.named_children:
            if any(child == other for other in skip):
                continue
            if child.type == 'statement_list':
                result.extend(self.statements(child))
            elif child.type in ('comment', 'empty_statement'):
                continue
            else:
                result.append(self.statement(child))
        return result

    def statement(self, node) -> Node:
        """Convert one statement node."""
        node_type = node.type

        if node_type == 'short_var_declaration':
            return AssignStmt(
                lhs=self.expressions(node.child_by_field_name('left')),
                tok=':=',
                rhs=self.expressions(node.child_by_field_name('right')),
            )
        elif node_type == 'assignment_statement':
            return AssignStmt(
                lhs=self.expressions(node.child_by_field_name('left')),
                tok=self._operator(node, '='),
                rhs=self.expressions(node.child_by_field_name('right')),
            )
        elif node_type in ('var_declaration', 'const_declaration'):
            return DeclStmt(specs=self._value_specs(node))
        elif node_type == 'return_statement':
            results = []
            for child in node.named_children:
                if child.type == 'expression_list':
                    results = self.expressions(child)
            return ReturnStmt(results=results)
        elif node_type == 'expression_statement':
            return ExprStmt(x=self.expression(node.named_children[0]))
        elif node_type in ('inc_statement', 'dec_statement'):
            tok = '++' if node_type == 'inc_statement' else '--'
            return IncDecStmt(x=self.expression(node.named_children[0]), tok=tok)
        elif node_type == 'if_statement':
            return self._if(node)
        elif node_type == 'for_statement':
            return self._for(node)
        elif node_type in BRANCH_TYPES:
            label = None
            for child in node.named_children:
                if child.type == 'label_name':
                    label = self.text(child)
            return BranchStmt(tok=node_type.split('_')[0], label=label)
        elif node_type == 'block':
            return BlockStmt(body=self.statements(node))
        elif node_type == 'expression_switch_statement':
            return self._switch(node)
        elif node_type == 'type_switch_statement':
            return self._type_switch(node)
        elif node_type == 'select_statement':
            return self._select(node)
        elif node_type == 'labeled_statement':
            label = None
            for child in node.named_children:
                if child.type == 'label_name':
                    label = self.text(child)
                    continue
                stmt = self.statement(child)
                # break/continue name the labeled loop or switch
                if stmt.kind in (NodeKind.FOR, NodeKind.SWITCH):
                    stmt.label = label
                return stmt
        return UnknownNode(syntax=node_type, text=self.text(node))

    def _operator(self, node, default: str) -> str:
        operator = node.child_by_field_name('operator')
        if operator is not None:
            return operator.type
        for child in node.children:
            if not child.is_named:
                return child.type
        return default

    def _value_specs(self, node) -> List[ValueSpec]:
        specs = []
        for child in node.named_children:
            if child.type in ('var_spec', 'const_spec'):
                names = [self.text(n) for n in child.children_by_field_name('name')]
                values = self.expressions(child.child_by_field_name('value'))
                specs.append(ValueSpec(names=names, values=values))
            elif child.type in ('var_spec_list', 'const_spec_list'):
                specs.extend(self._value_specs(child))
        return specs

    def _block(self, node) -> BlockStmt:
        if node is None:
            return BlockStmt()
        return BlockStmt(body=self.statements(node))

    def _if(self, node) -> IfStmt:
        init = node.child_by_field_name('initializer')
        alternative = node.child_by_field_name('alternative')
        else_ = None
        if alternative is not None:
            if alternative.type == 'if_statement':
                else_ = self._if(alternative)
            else:
                else_ = self._block(alternative)
        return IfStmt(
            cond=self.expression(node.child_by_field_name('condition')),
            body=self._block(node.child_by_field_name('consequence')),
            init=self.statement(init) if init is not None else None,
            else_=else_,
        )

    def _for(self, node) -> ForStmt:
        body = node.child_by_field_name('body')
        stmt = ForStmt(body=self._block(body))
        for child in node.named_children:
            if child.type in ('block', 'comment'):
                continue
            if child.type == 'for_clause':
                init = child.child_by_field_name('initializer')
                cond = child.child_by_field_name('condition')
                post = child.child_by_field_name('update')
                stmt.init = self.statement(init) if init is not None else None
                stmt.cond = self.expression(cond) if cond is not None else None
                stmt.post = self.statement(post) if post is not None else None
            elif child.type == 'range_clause':
                stmt.cond = self.expression(child.child_by_field_name('right'))
                stmt.is_range = True
                stmt.range_lhs = self.expressions(child.child_by_field_name('left'))
                for token in child.children:
                    if token.type in ('=', ':='):
                        stmt.range_tok = token.type
            else:
                stmt.cond = self.expression(child)
        return stmt

    def _switch(self, node) -> SwitchStmt:
        init = node.child_by_field_name('initializer')
        stmt = SwitchStmt(
            tag=self.expression(node.child_by_field_name('value')),
            init=self.statement(init) if init is not None else None,
        )
        for child in node.named_children:
            if child.type == 'expression_case':
                values = child.child_by_field_name('value')
                stmt.cases.append(CaseClause(
                    exprs=self.expressions(values),
                    body=self.statements(child, skip=(values,)),
                ))
            elif child.type == 'default_case':
                stmt.cases.append(CaseClause(body=self.statements(child), is_default=True))
        return stmt

    def _type_switch(self, node) -> SwitchStmt:
        init = node.child_by_field_name('initializer')
        alias = node.child_by_field_name('alias')
        stmt = SwitchStmt(
            tag=self.expression(node.child_by_field_name('value')),
            init=self.statement(init) if init is not None else None,
            alias=self.text(alias) if alias is not None else None,
            is_type=True,
        )
        for child in node.named_children:
            if child.type == 'type_case':
                types = child.children_by_field_name('type')
                stmt.cases.append(CaseClause(
                    exprs=[BasicLit(value=self.text(t)) for t in types],
                    body=self.statements(child, skip=types),
                ))
            elif child.type == 'default_case':
                stmt.cases.append(CaseClause(body=self.statements(child), is_default=True))
        return stmt

    def _select(self, node) -> SwitchStmt:
        stmt = SwitchStmt(is_select=True)
        for child in node.named_children:
            if child.type == 'communication_case':
                comm = child.child_by_field_name('communication')
                stmt.cases.append(CaseClause(
                    comm=self._communication(comm),
                    body=self.statements(child, skip=(comm,)),
                ))
            elif child.type == 'default_case':
                stmt.cases.append(CaseClause(body=self.statements(child), is_default=True))
        return stmt

    def _communication(self, node) -> Node:
        """Send (`ch <- v`) or receive (`v := <-ch`, `<-ch`) of a select case."""
        if node.type == 'send_statement':
            return BinaryExpr(
                x=self.expression(node.child_by_field_name('channel')),
                op='<-',
                y=self.expression(node.child_by_field_name('value')),
            )
        if node.type == 'receive_statement':
            right = self.expression(node.child_by_field_name('right'))
            left = node.child_by_field_name('left')
            if left is None:
                return right
            tok = '='
            for token in node.children:
                if token.type in ('=', ':='):
                    tok = token.type
            return AssignStmt(lhs=self.expressions(left), tok=tok, rhs=[right])
        return self.expression(node)

    def expressions(self, node) -> List[Node]:
        """Convert an expression_list (or a single expression)."""
        if node is None:
            return []
        if node.type != 'expression_list':
            return [self.expression(node)]
        return [self.expression(c) for c in node.named_children if c.type != 'comment']

    def expression(self, node) -> Optional[Node]:
        """Convert one expression node."""
        if node is None:
            return None
        node_type = node.type

        if node_type in ('identifier', 'field_identifier'):
            return Ident(name=self.text(node))
        elif node_type in LITERAL_TYPES:
            return BasicLit(value=self.text(node))
        elif node_type == 'binary_expression':
            return BinaryExpr(
                x=self.expression(node.child_by_field_name('left')),
                op=self._operator(node, '?'),
                y=self.expression(node.child_by_field_name('right')),
            )
        elif node_type == 'unary_expression':
            return UnaryExpr(
                op=self._operator(node, '?'),
                x=self.expression(node.child_by_field_name('operand')),
            )
        elif node_type == 'call_expression':
            arguments = node.child_by_field_name('arguments')
            args = []
            if arguments is not None:
                args = [self.expression(a) for a in arguments.named_children if a.type != 'comment']
            return CallExpr(fun=self.expression(node.child_by_field_name('function')), args=args)
        elif node_type == 'selector_expression':
            return SelectorExpr(
                x=self.expression(node.child_by_field_name('operand')),
                sel=self.text(node.child_by_field_name('field')),
            )
        elif node_type == 'parenthesized_expression':
            return ParenExpr(x=self.expression(node.named_children[0]))
        elif node_type == 'index_expression':
            return IndexExpr(
                x=self.expression(node.child_by_field_name('operand')),
                index=self.expression(node.child_by_field_name('index')),
            )
        return UnknownNode(syntax=node_type, text=self.text(node))
