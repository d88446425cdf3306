"""Table-driven traversal of ESTree trees.

Every node is visited under a dispatch key: its own `type`, or a group
name chosen by the parent (an Identifier is an `Expression` when read and a
`Pattern` when bound). Group walkers re-dispatch to a more specific key, so
hooks for the general key fire before (and exit after) hooks for the
specific one.

Visitors map hook names to callables:

- `"<Key>Before"(node, state, visit)` runs on entry. Returning False skips
  the subtree and the exit hooks; returning None or True descends with the
  same state; any other value becomes the state for descent and exit.
- `"<Key>"(node, state)` runs on exit.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Callable

from .errors import UnsupportedConstructError

logger = logging.getLogger(__name__)

ASTNode = dict[str, object]
Visit = Callable[..., None]

STATEMENT = "Statement"
DECLARATION = "Declaration"
DIRECTIVE = "Directive"
EXPRESSION = "Expression"
PATTERN = "Pattern"
VARIABLE_PATTERN = "VariablePattern"
MEMBER_PATTERN = "MemberPattern"
FUNCTION = "Function"
FUNCTION_BODY = "FunctionBody"
CLASS = "Class"
FOR_INIT = "ForInit"

DECLARATION_TYPES: frozenset[str] = frozenset(
    {"FunctionDeclaration", "VariableDeclaration", "ClassDeclaration"}
)


def is_directive(stmt: ASTNode) -> bool:
    """Whether stmt is a string-literal expression statement."""
    if stmt.get("type") != "ExpressionStatement":
        return False
    expr = stmt.get("expression")
    return (
        isinstance(expr, dict) and expr.get("type") == "Literal" and isinstance(expr.get("value"), str)
    )


def is_declaration(node: ASTNode) -> bool:
    return bool(node.get("id")) or node.get("type") == "VariableDeclaration"


def statement_group(stmt: ASTNode) -> str:
    """Group for a node in statement position."""
    if stmt.get("type") in DECLARATION_TYPES:
        return DECLARATION
    return STATEMENT


def _get_hook(visitors: object, name: str) -> Callable | None:
    if isinstance(visitors, Mapping):
        return visitors.get(name)
    return getattr(visitors, name, None)


def _get_ancestors(state: object) -> list | None:
    if isinstance(state, Mapping):
        ancestors = state.get("ancestors")
    else:
        ancestors = getattr(state, "ancestors", None)
    if isinstance(ancestors, list):
        return ancestors
    return None


def walk(tree: ASTNode, state: object, visitors: object) -> None:
    """Walk tree depth-first, calling the matching visitor hooks."""
    ancestors = _get_ancestors(state)

    def visit(node: ASTNode, state: object, group: str | None = None) -> None:
        key = group or node["type"]
        # groups revisit the same node, which is only pushed once
        pushed = ancestors is not None and (not ancestors or ancestors[-1] is not node)
        if pushed:
            ancestors.append(node)
        try:
            before = _get_hook(visitors, key + "Before")
            if before is not None:
                result = before(node, state, visit)
                if result is False:
                    return
                if result is not None and result is not True:
                    state = result
            walker = _WALKERS.get(key)
            if walker is None:
                logger.debug("no walker for %s", key)
                raise UnsupportedConstructError("Unhandled AST node type '" + key + "'", node)
            walker(node, state, visit)
            after = _get_hook(visitors, key)
            if after is not None:
                after(node, state)
        finally:
            if pushed:
                ancestors.pop()

    visit(tree, state)


# ---------------------------------------------------------------------------
# Walkers
# ---------------------------------------------------------------------------


def _ignore(node: ASTNode, state: object, visit: Visit) -> None:
    pass


def _revisit(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node, state)


def _walk_body(node: ASTNode, state: object, visit: Visit) -> None:
    # leading string-literal statements form the directive prologue
    check_directive = True
    for stmt in node["body"]:
        if check_directive:
            check_directive = is_directive(stmt)
        if check_directive:
            visit(stmt, state, DIRECTIVE)
        else:
            visit(stmt, state, statement_group(stmt))


def _walk_statements(stmts: list, state: object, visit: Visit) -> None:
    for stmt in stmts:
        visit(stmt, state, statement_group(stmt))


def _walk_directive(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node, state, STATEMENT)


def _walk_statement(node: ASTNode, state: object, visit: Visit) -> None:
    if node.get("type") in DECLARATION_TYPES:
        visit(node, state, DECLARATION)
    else:
        visit(node, state)


# imports and exports


def _walk_import_declaration(node: ASTNode, state: object, visit: Visit) -> None:
    for spec in node["specifiers"]:
        visit(spec, state)
    visit(node["source"], state, EXPRESSION)


def _walk_import_specifier(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["local"], state, PATTERN)
    visit(node["imported"], state, PATTERN)


def _walk_import_local(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["local"], state, PATTERN)


def _walk_export_named(node: ASTNode, state: object, visit: Visit) -> None:
    if node.get("declaration"):
        visit(node["declaration"], state, DECLARATION)
    for spec in node.get("specifiers") or []:
        visit(spec, state)
    if node.get("source"):
        visit(node["source"], state, EXPRESSION)


def _walk_export_specifier(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["local"], state, PATTERN)
    visit(node["exported"], state, PATTERN)


def _walk_export_default(node: ASTNode, state: object, visit: Visit) -> None:
    decl = node["declaration"]
    visit(decl, state, DECLARATION if is_declaration(decl) else EXPRESSION)


def _walk_export_all(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["source"], state, EXPRESSION)


# declarations


def _walk_variable_declaration(node: ASTNode, state: object, visit: Visit) -> None:
    for decl in node["declarations"]:
        visit(decl, state)


def _walk_variable_declarator(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["id"], state, PATTERN)
    if node.get("init"):
        visit(node["init"], state, EXPRESSION)


def _walk_function(node: ASTNode, state: object, visit: Visit) -> None:
    if node.get("id"):
        visit(node["id"], state, PATTERN)
    for param in node["params"]:
        visit(param, state, PATTERN)
    if node.get("expression") or node["body"]["type"] != "BlockStatement":
        visit(node["body"], state, EXPRESSION)
    else:
        visit(node["body"], state, FUNCTION_BODY)


def _to_function(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node, state, FUNCTION)


def _walk_class(node: ASTNode, state: object, visit: Visit) -> None:
    if node.get("id"):
        visit(node["id"], state, PATTERN)
    if node.get("superClass"):
        visit(node["superClass"], state, EXPRESSION)
    visit(node["body"], state)


def _to_class(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node, state, CLASS)


def _walk_class_body(node: ASTNode, state: object, visit: Visit) -> None:
    for definition in node["body"]:
        visit(definition, state)


def _walk_property(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["key"], state, EXPRESSION if node.get("computed") else PATTERN)
    visit(node["value"], state, EXPRESSION)


# statements


def _walk_expression_statement(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["expression"], state, EXPRESSION)


def _walk_block(node: ASTNode, state: object, visit: Visit) -> None:
    _walk_statements(node["body"], state, visit)


def _walk_with(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["object"], state, EXPRESSION)
    visit(node["body"], state, STATEMENT)


def _walk_argument(node: ASTNode, state: object, visit: Visit) -> None:
    if node.get("argument"):
        visit(node["argument"], state, EXPRESSION)


def _walk_labeled(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["body"], state, statement_group(node["body"]))


def _walk_if(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["test"], state, EXPRESSION)
    visit(node["consequent"], state, STATEMENT)
    if node.get("alternate"):
        visit(node["alternate"], state, STATEMENT)


def _walk_switch(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["discriminant"], state, EXPRESSION)
    for case in node["cases"]:
        visit(case, state)


def _walk_switch_case(node: ASTNode, state: object, visit: Visit) -> None:
    if node.get("test"):
        visit(node["test"], state, EXPRESSION)
    _walk_statements(node["consequent"], state, visit)


def _walk_throw(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["argument"], state, EXPRESSION)


def _walk_try(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["block"], state, STATEMENT)
    if node.get("handler"):
        visit(node["handler"], state)
    if node.get("finalizer"):
        visit(node["finalizer"], state, STATEMENT)


def _walk_catch(node: ASTNode, state: object, visit: Visit) -> None:
    if node.get("param"):
        visit(node["param"], state, PATTERN)
    visit(node["body"], state, STATEMENT)


def _walk_while(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["test"], state, EXPRESSION)
    visit(node["body"], state, STATEMENT)


def _walk_do_while(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["body"], state, STATEMENT)
    visit(node["test"], state, EXPRESSION)


def _walk_for(node: ASTNode, state: object, visit: Visit) -> None:
    if node.get("init"):
        visit(node["init"], state, FOR_INIT)
    if node.get("test"):
        visit(node["test"], state, EXPRESSION)
    if node.get("update"):
        visit(node["update"], state, EXPRESSION)
    visit(node["body"], state, STATEMENT)


def _walk_for_in(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["left"], state, FOR_INIT)
    visit(node["right"], state, EXPRESSION)
    visit(node["body"], state, STATEMENT)


def _walk_for_init(node: ASTNode, state: object, visit: Visit) -> None:
    if node.get("type") == "VariableDeclaration":
        visit(node, state, DECLARATION)
    else:
        visit(node, state, EXPRESSION)


# expressions


def _walk_array(node: ASTNode, state: object, visit: Visit) -> None:
    for element in node["elements"]:
        if element:
            visit(element, state, EXPRESSION)


def _walk_object(node: ASTNode, state: object, visit: Visit) -> None:
    for prop in node["properties"]:
        visit(prop, state)


def _walk_unary(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["argument"], state, EXPRESSION)


def _walk_binary(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["left"], state, EXPRESSION)
    visit(node["right"], state, EXPRESSION)


def _walk_assignment(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["left"], state, PATTERN)
    visit(node["right"], state, EXPRESSION)


def _walk_member(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["object"], state, EXPRESSION)
    visit(node["property"], state, EXPRESSION if node.get("computed") else PATTERN)


def _walk_conditional(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["test"], state, EXPRESSION)
    visit(node["consequent"], state, EXPRESSION)
    visit(node["alternate"], state, EXPRESSION)


def _walk_call(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["callee"], state, EXPRESSION)
    for arg in node.get("arguments") or []:
        visit(arg, state, EXPRESSION)


def _walk_sequence(node: ASTNode, state: object, visit: Visit) -> None:
    for expr in node["expressions"]:
        visit(expr, state, EXPRESSION)


def _walk_template(node: ASTNode, state: object, visit: Visit) -> None:
    for quasi in node["quasis"]:
        visit(quasi, state)
    for expr in node["expressions"]:
        visit(expr, state, EXPRESSION)


def _walk_tagged_template(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["tag"], state, EXPRESSION)
    visit(node["quasi"], state, EXPRESSION)


# patterns


def _walk_pattern(node: ASTNode, state: object, visit: Visit) -> None:
    node_type = node.get("type")
    if node_type == "Identifier":
        visit(node, state, VARIABLE_PATTERN)
    elif node_type == "MemberExpression":
        visit(node, state, MEMBER_PATTERN)
    else:
        visit(node, state)


def _walk_array_pattern(node: ASTNode, state: object, visit: Visit) -> None:
    for element in node["elements"]:
        if element:
            visit(element, state, PATTERN)


def _walk_object_pattern(node: ASTNode, state: object, visit: Visit) -> None:
    for prop in node["properties"]:
        if prop["type"] == "Property":
            visit(prop["key"], state, EXPRESSION if prop.get("computed") else PATTERN)
            visit(prop["value"], state, PATTERN)
        elif prop["type"] == "RestElement":
            visit(prop["argument"], state, PATTERN)


def _walk_rest(node: ASTNode, state: object, visit: Visit) -> None:
    visit(node["argument"], state, PATTERN)


_WALKERS: dict[str, Callable[[ASTNode, object, Visit], None]] = {
    "Program": _walk_body,
    DIRECTIVE: _walk_directive,
    STATEMENT: _walk_statement,
    DECLARATION: _revisit,
    FUNCTION: _walk_function,
    FUNCTION_BODY: _walk_body,
    CLASS: _walk_class,
    FOR_INIT: _walk_for_init,
    EXPRESSION: _revisit,
    PATTERN: _walk_pattern,
    VARIABLE_PATTERN: _revisit,
    MEMBER_PATTERN: _revisit,
    # modules
    "ImportDeclaration": _walk_import_declaration,
    "ImportSpecifier": _walk_import_specifier,
    "ImportDefaultSpecifier": _walk_import_local,
    "ImportNamespaceSpecifier": _walk_import_local,
    "ExportNamedDeclaration": _walk_export_named,
    "ExportSpecifier": _walk_export_specifier,
    "ExportDefaultDeclaration": _walk_export_default,
    "ExportAllDeclaration": _walk_export_all,
    # declarations
    "VariableDeclaration": _walk_variable_declaration,
    "VariableDeclarator": _walk_variable_declarator,
    "FunctionDeclaration": _to_function,
    "FunctionExpression": _to_function,
    "ArrowFunctionExpression": _to_function,
    "ClassDeclaration": _to_class,
    "ClassExpression": _to_class,
    "ClassBody": _walk_class_body,
    "MethodDefinition": _walk_property,
    "Property": _walk_property,
    # statements
    "EmptyStatement": _ignore,
    "DebuggerStatement": _ignore,
    "BreakStatement": _ignore,
    "ContinueStatement": _ignore,
    "ExpressionStatement": _walk_expression_statement,
    "ParenthesizedExpression": _walk_expression_statement,
    "BlockStatement": _walk_block,
    "WithStatement": _walk_with,
    "ReturnStatement": _walk_argument,
    "LabeledStatement": _walk_labeled,
    "IfStatement": _walk_if,
    "SwitchStatement": _walk_switch,
    "SwitchCase": _walk_switch_case,
    "ThrowStatement": _walk_throw,
    "TryStatement": _walk_try,
    "CatchClause": _walk_catch,
    "WhileStatement": _walk_while,
    "DoWhileStatement": _walk_do_while,
    "ForStatement": _walk_for,
    "ForInStatement": _walk_for_in,
    "ForOfStatement": _walk_for_in,
    # expressions
    "ThisExpression": _ignore,
    "Super": _ignore,
    "MetaProperty": _ignore,
    "ArrayExpression": _walk_array,
    "ObjectExpression": _walk_object,
    "UnaryExpression": _walk_unary,
    "UpdateExpression": _walk_unary,
    "SpreadElement": _walk_unary,
    "YieldExpression": _walk_argument,
    "AwaitExpression": _walk_argument,
    "BinaryExpression": _walk_binary,
    "LogicalExpression": _walk_binary,
    "AssignmentExpression": _walk_assignment,
    "AssignmentPattern": _walk_assignment,
    "MemberExpression": _walk_member,
    "ConditionalExpression": _walk_conditional,
    "CallExpression": _walk_call,
    "NewExpression": _walk_call,
    "SequenceExpression": _walk_sequence,
    "TemplateLiteral": _walk_template,
    "TemplateElement": _ignore,
    "TaggedTemplateExpression": _walk_tagged_template,
    # patterns
    "Identifier": _ignore,
    "Literal": _ignore,
    "ArrayPattern": _walk_array_pattern,
    "ObjectPattern": _walk_object_pattern,
    "RestElement": _walk_rest,
}
