"""Abstract interpretation of ESTree trees.

One bottom-up pass infers types, folds constants and records bindings in a
Scope graph. Each handler returns an analysis result dict (or None when
nothing is known) with these optional keys:

- "type": the inferred type, see `estree_analyzer.types`
- "value": the constant value, present only when fully determined
- "thrown": analysis of a value the construct is known to throw
- "async", "generator": flags on function results
- "members": property name -> analysis result, approximating object shape

Identifier references return the scope member dict itself, so facts learned
later (used as an object, called as a function) land on the binding.
"""

from __future__ import annotations

import logging
from typing import Callable

from . import jsvalues
from .errors import UnsupportedConstructError
from .jsvalues import JSThrow, UNDEFINED
from .scope import Scope
from .types import array_of, has_kind, is_falsy, is_not_assignable, is_truthy, kind_of, union

logger = logging.getLogger(__name__)

ASTNode = dict[str, object]
Info = dict[str, object]

# declaration contexts passed to identifiers and patterns
VAR = "var"
LET = "let"
CONST = "const"
PARAM = "param"
CATCH = "catch"
IMPORT = "import"

_UNARY_TYPES: dict[str, str] = {
    "-": "number",
    "+": "number",
    "~": "number",
    "!": "boolean",
    "delete": "boolean",
    "typeof": "string",
    "void": "undefined",
}

_BINARY_TYPES: dict[str, str] = {
    "==": "boolean",
    "!=": "boolean",
    "===": "boolean",
    "!==": "boolean",
    "<": "boolean",
    "<=": "boolean",
    ">": "boolean",
    ">=": "boolean",
    "in": "boolean",
    "instanceof": "boolean",
    "<<": "number",
    ">>": "number",
    ">>>": "number",
    "-": "number",
    "*": "number",
    "**": "number",
    "/": "number",
    "%": "number",
    "|": "number",
    "^": "number",
    "&": "number",
}

_THROWN_TYPE_ERROR: Info = {"type": "object"}

# JS numbers are IEEE doubles; integral literals fold as Python ints
_MAX_EXACT_INT = 2**53


def analyze(tree: ASTNode, root_scope: Scope | None = None) -> Info | None:
    """Analyze tree, populating root_scope (a fresh global scope by default)."""
    if root_scope is None:
        root_scope = Scope()
    return _visit(tree, root_scope)


def _visit(node: ASTNode, scope: Scope, decl: str | None = None) -> Info | None:
    handler = _HANDLERS.get(node["type"])
    if handler is None:
        logger.debug("no analysis for %s", node["type"])
        raise UnsupportedConstructError("Unhandled AST node type '" + node["type"] + "'", node)
    return handler(node, scope, decl)


def _has_value(info: Info | None) -> bool:
    return info is not None and "value" in info


def _union_info(a: Info | None, b: Info | None) -> Info | None:
    if a is None or b is None:
        return None
    result: Info = {}
    if a.get("type") is not None and b.get("type") is not None:
        result["type"] = union(a["type"], b["type"])
    return result


def _fold(result: Info, fn: Callable, *args: object) -> None:
    try:
        result["value"] = fn(*args)
    except JSThrow as e:
        logger.debug("folding throws %s", e)
        result["thrown"] = dict(_THROWN_TYPE_ERROR)


def _declare(node: ASTNode, scope: Scope) -> Info:
    ident = node.get("id")
    if not ident:
        return {}
    name = ident["name"]
    return scope.add_own_member(name, {"name": name})


def _is_use_strict(stmt: ASTNode) -> bool:
    if stmt.get("type") != "ExpressionStatement":
        return False
    expr = stmt["expression"]
    return expr.get("type") == "Literal" and expr.get("value") == "use strict"


def _analyze_body(node: ASTNode, scope: Scope) -> None:
    process_directives = scope.is_top_level()
    for stmt in node["body"]:
        if process_directives:
            if _is_use_strict(stmt):
                logger.debug("strict mode enabled")
                scope.use_strict()
                continue
            process_directives = False
        _visit(stmt, scope)


def _analyze_function(node: ASTNode, scope: Scope, result: Info) -> Info:
    result["type"] = "function"
    if node.get("async"):
        result["async"] = True
    if node.get("generator"):
        result["generator"] = True
    scope = scope.create_nested().set_top_level()
    for param in node["params"]:
        _visit(param, scope, PARAM)
    body = node["body"]
    if body["type"] == "BlockStatement":
        _analyze_body(body, scope)
    else:
        _visit(body, scope)
    return result


def _analyze_class(node: ASTNode, scope: Scope) -> None:
    if node.get("superClass"):
        _visit(node["superClass"], scope)
    scope = scope.create_nested()
    for definition in node["body"]["body"]:
        if definition.get("computed"):
            _visit(definition["key"], scope)
        _visit(definition["value"], scope)


def _literal_value(node: ASTNode) -> object:
    value = node.get("value")
    if isinstance(value, float) and value.is_integer() and abs(value) <= _MAX_EXACT_INT:
        return int(value)
    return value


def _property_key(prop: ASTNode, scope: Scope) -> tuple[bool, object]:
    """(known, key) for an object literal property."""
    key = prop["key"]
    if prop.get("computed"):
        info = _visit(key, scope)
        if not _has_value(info):
            return False, None
        try:
            return True, jsvalues.to_property_key(info["value"])
        except JSThrow:
            return False, None
    if key["type"] == "Identifier":
        return True, key["name"]
    return True, jsvalues.to_string(_literal_value(key))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _identifier(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    name = node["name"]
    ref = None
    if decl is None:
        ref = scope.find_member(name)
    if ref is None:
        if decl == VAR:
            target = scope.get_top_level()
        elif decl is None:
            # undeclared references become globals
            logger.debug("implicit global %s", name)
            target = scope.get_root()
        else:
            target = scope
        ref = target.add_own_member(name, {"name": name})
    return ref


def _literal(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    if node.get("regex"):
        return {"type": "object"}
    value = _literal_value(node)
    return {"type": kind_of(value), "value": value}


def _template_literal(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    values: list | None = []
    for expr in node["expressions"]:
        info = _visit(expr, scope)
        if values is not None and _has_value(info):
            values.append(info["value"])
        else:
            values = None
    result: Info = {"type": "string"}
    quasis = node["quasis"]
    cooked = [q["value"].get("cooked") for q in quasis]
    if values is not None and None not in cooked:
        try:
            text = cooked[0]
            for i, value in enumerate(values):
                text += jsvalues.to_string(value) + cooked[i + 1]
        except JSThrow:
            result["thrown"] = dict(_THROWN_TYPE_ERROR)
        else:
            result["value"] = text
    return result


def _tagged_template(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _visit(node["tag"], scope)
    _visit(node["quasi"], scope)


def _program(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _analyze_body(node, scope)


def _expression_statement(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    return _visit(node["expression"], scope)


def _block(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _analyze_body(node, scope.create_nested())


def _ignore(node: ASTNode, scope: Scope, decl: str | None) -> None:
    pass


def _with(node: ASTNode, scope: Scope, decl: str | None) -> None:
    logger.debug("rejecting with statement")
    raise UnsupportedConstructError("'with' statement not supported", node)


def _argument(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    if node.get("argument"):
        return _visit(node["argument"], scope)
    return None


def _labeled(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    return _visit(node["body"], scope)


def _if(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _visit(node["test"], scope)
    _visit(node["consequent"], scope)
    if node.get("alternate"):
        _visit(node["alternate"], scope)


def _switch(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _visit(node["discriminant"], scope)
    for case in node["cases"]:
        if case.get("test"):
            _visit(case["test"], scope)
        for stmt in case["consequent"]:
            _visit(stmt, scope)


def _throw(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    return {"thrown": _visit(node["argument"], scope)}


def _try(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _visit(node["block"], scope)
    handler = node.get("handler")
    if handler:
        handler_scope = scope.create_nested()
        if handler.get("param"):
            _visit(handler["param"], handler_scope, CATCH)
        _analyze_body(handler["body"], handler_scope)
    if node.get("finalizer"):
        _visit(node["finalizer"], scope)


def _loop(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _visit(node["test"], scope)
    _visit(node["body"], scope)


def _for(node: ASTNode, scope: Scope, decl: str | None) -> None:
    scope = scope.create_nested()
    for key in ("init", "test", "update"):
        if node.get(key):
            _visit(node[key], scope)
    _visit(node["body"], scope)


def _for_in(node: ASTNode, scope: Scope, decl: str | None) -> None:
    scope = scope.create_nested()
    _visit(node["left"], scope)
    _visit(node["right"], scope)
    _visit(node["body"], scope)


def _function_declaration(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    return _analyze_function(node, scope, _declare(node, scope))


def _function_expression(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    return _analyze_function(node, scope, {})


def _variable_declaration(node: ASTNode, scope: Scope, decl: str | None) -> None:
    kind = node.get("kind") or VAR
    for declarator in node["declarations"]:
        var_info = _visit(declarator["id"], scope, kind)
        if var_info is not None and kind == CONST:
            var_info["constant"] = True
        if declarator.get("init"):
            init_info = _visit(declarator["init"], scope)
            if var_info is not None and init_info is not None:
                for key, value in init_info.items():
                    if key not in ("name", "constant"):
                        var_info[key] = value


def _class_declaration(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    result = _declare(node, scope)
    result["type"] = "function"
    _analyze_class(node, scope)
    return result


def _class_expression(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    _analyze_class(node, scope)
    return {"type": "function"}


def _this(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    result: Info = {"type": "object"}
    this_ref = scope.get_this()
    if this_ref is not None:
        result["members"] = this_ref
    return result


def _super(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    return {"type": "object"}


def _meta_property(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    if node["meta"]["name"] == "new" and node["property"]["name"] == "target":
        return {"type": "function"}
    return None


def _array_expression(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    elem_type = None
    types_known = True
    values: list | None = []
    for element in node["elements"]:
        if element is None:
            info: Info | None = {"type": "undefined", "value": UNDEFINED}
        else:
            info = _visit(element, scope)
        if types_known and info is not None and info.get("type") is not None:
            elem_type = info["type"] if elem_type is None else union(elem_type, info["type"])
        else:
            types_known = False
            elem_type = None
        if values is not None and _has_value(info):
            values.append(info["value"])
        else:
            values = None
    result: Info = {"type": array_of(elem_type)}
    if values is not None:
        result["value"] = values
    return result


def _array_pattern(node: ASTNode, scope: Scope, decl: str | None) -> None:
    for element in node["elements"]:
        if element:
            _visit(element, scope, decl)


def _object_expression(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    value: dict | None = {}
    for prop in node["properties"]:
        if prop["type"] != "Property":
            _visit(prop, scope)
            value = None
            continue
        known, key = _property_key(prop, scope)
        value_info = _visit(prop["value"], scope)
        if value is not None and known and prop.get("kind") == "init" and _has_value(value_info):
            value[key] = value_info["value"]
        else:
            value = None
    result: Info = {"type": "object"}
    if value is not None:
        result["value"] = value
    return result


def _object_pattern(node: ASTNode, scope: Scope, decl: str | None) -> None:
    for prop in node["properties"]:
        if prop["type"] == "Property":
            if prop.get("computed"):
                _visit(prop["key"], scope)
            _visit(prop["value"], scope, decl)
        else:
            _visit(prop, scope, decl)


def _spread(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _visit(node["argument"], scope)


def _rest(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _visit(node["argument"], scope, decl)


def _unary(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    info = _visit(node["argument"], scope)
    op = node["operator"]
    result: Info = {}
    result_type = _UNARY_TYPES.get(op)
    if result_type is None:
        return result
    result["type"] = result_type
    if op == "void":
        result["value"] = UNDEFINED
    elif _has_value(info):
        _fold(result, jsvalues.UNARY_OPERATORS[op], info["value"])
    return result


def _update_value(v: object, op: str, prefix: bool) -> int | float:
    n = jsvalues.to_number(v)
    if not prefix:
        return n
    return jsvalues.add(n, 1) if op == "++" else jsvalues.subtract(n, 1)


def _update(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    info = _visit(node["argument"], scope)
    result: Info = {"type": "number"}
    if _has_value(info):
        _fold(result, _update_value, info["value"], node["operator"], bool(node.get("prefix")))
    return result


def _plus_type(left: Info | None, right: Info | None) -> str | None:
    left_type = left.get("type") if left is not None else None
    right_type = right.get("type") if right is not None else None
    if left_type == "string" or right_type == "string":
        return "string"
    if is_not_assignable(left_type, "string") and is_not_assignable(right_type, "string"):
        return "number"
    return None


def _binary(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    left = _visit(node["left"], scope)
    right = _visit(node["right"], scope)
    op = node["operator"]
    if op == "+":
        result_type = _plus_type(left, right)
    else:
        result_type = _BINARY_TYPES.get(op)
    if result_type is None:
        return None
    result: Info = {"type": result_type}
    if _has_value(left) and _has_value(right):
        _fold(result, jsvalues.BINARY_OPERATORS[op], left["value"], right["value"])
        if op == "+" and "value" in result:
            result["type"] = kind_of(result["value"])
    return result


def _assignment(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    result = _visit(node["right"], scope)
    _visit(node["left"], scope)
    if node["operator"] != "=":
        return {"type": "number"}
    return result


def _assignment_pattern(node: ASTNode, scope: Scope, decl: str | None) -> None:
    _visit(node["right"], scope)
    _visit(node["left"], scope, decl)


def _short_circuits(op: str, left: Info) -> bool:
    if op == "||":
        if "value" in left:
            return jsvalues.truthy(left["value"])
        return is_truthy(left.get("type"))
    if op == "&&":
        if "value" in left:
            return not jsvalues.truthy(left["value"])
        return is_falsy(left.get("type"))
    if "value" in left:
        return left["value"] is not None and left["value"] is not UNDEFINED
    return False


def _logical_value(op: str, left: object, right: object) -> object:
    if op == "||":
        return left if jsvalues.truthy(left) else right
    if op == "&&":
        return right if jsvalues.truthy(left) else left
    return right if left is None or left is UNDEFINED else left


def _logical(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    left = _visit(node["left"], scope)
    right = _visit(node["right"], scope)
    op = node["operator"]
    if left is not None and _short_circuits(op, left):
        return left
    result = _union_info(left, right)
    if result is not None and _has_value(left) and _has_value(right):
        result["value"] = _logical_value(op, left["value"], right["value"])
    return result


def _member(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    member_info = None
    obj_info = _visit(node["object"], scope)
    if obj_info is None:
        obj_info = {}
    # an object unless already known to be an array
    obj_type = obj_info.get("type")
    if not obj_type:
        obj_info["type"] = "object"
    elif not has_kind(obj_type, "array"):
        obj_info["type"] = union(obj_type, "object")

    prop_known = False
    prop_value = None
    if not node.get("computed"):
        prop_known = True
        prop_value = node["property"]["name"]
        members = obj_info.get("members")
        if members is None:
            members = obj_info["members"] = {}
        member_info = _visit(node["property"], Scope.with_members(members))
    else:
        prop_info = _visit(node["property"], scope)
        if _has_value(prop_info):
            prop_known = True
            prop_value = prop_info["value"]

    if prop_known and "value" in obj_info:
        try:
            value = jsvalues.get_property(obj_info["value"], prop_value)
        except JSThrow as e:
            logger.debug("member access throws %s", e)
            return {"thrown": dict(_THROWN_TYPE_ERROR)}
        except KeyError:
            return member_info
        member_info = {"type": kind_of(value), "value": value}
    return member_info


def _conditional(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    test = _visit(node["test"], scope)
    consequent = _visit(node["consequent"], scope)
    alternate = _visit(node["alternate"], scope)
    if _has_value(test):
        return consequent if jsvalues.truthy(test["value"]) else alternate
    return _union_info(consequent, alternate)


def _call(node: ASTNode, scope: Scope, decl: str | None) -> None:
    callee = _visit(node["callee"], scope)
    if callee is not None:
        callee["type"] = "function"
    for arg in node["arguments"]:
        _visit(arg, scope)


def _new(node: ASTNode, scope: Scope, decl: str | None) -> Info:
    _call(node, scope, decl)
    return {"type": "object"}


def _sequence(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    last = None
    for expr in node["expressions"]:
        last = _visit(expr, scope)
    return last


def _import_declaration(node: ASTNode, scope: Scope, decl: str | None) -> None:
    for spec in node["specifiers"]:
        binding = _visit(spec["local"], scope, IMPORT)
        binding["constant"] = True


def _export_named(node: ASTNode, scope: Scope, decl: str | None) -> None:
    if node.get("declaration"):
        _visit(node["declaration"], scope)
    elif not node.get("source"):
        for spec in node["specifiers"]:
            _visit(spec["local"], scope)


def _export_default(node: ASTNode, scope: Scope, decl: str | None) -> Info | None:
    declaration = node["declaration"]
    if declaration["type"] in ("FunctionDeclaration", "ClassDeclaration") and not declaration.get("id"):
        if declaration["type"] == "FunctionDeclaration":
            return _function_expression(declaration, scope, None)
        return _class_expression(declaration, scope, None)
    return _visit(declaration, scope)


_HANDLERS: dict[str, Callable[[ASTNode, Scope, str | None], Info | None]] = {
    "Identifier": _identifier,
    "Literal": _literal,
    "TemplateLiteral": _template_literal,
    "TaggedTemplateExpression": _tagged_template,
    "Program": _program,
    "ExpressionStatement": _expression_statement,
    "ParenthesizedExpression": _expression_statement,
    "BlockStatement": _block,
    "EmptyStatement": _ignore,
    "DebuggerStatement": _ignore,
    "BreakStatement": _ignore,
    "ContinueStatement": _ignore,
    "WithStatement": _with,
    "ReturnStatement": _argument,
    "YieldExpression": _argument,
    "LabeledStatement": _labeled,
    "IfStatement": _if,
    "SwitchStatement": _switch,
    "ThrowStatement": _throw,
    "TryStatement": _try,
    "WhileStatement": _loop,
    "DoWhileStatement": _loop,
    "ForStatement": _for,
    "ForInStatement": _for_in,
    "ForOfStatement": _for_in,
    "FunctionDeclaration": _function_declaration,
    "FunctionExpression": _function_expression,
    "ArrowFunctionExpression": _function_expression,
    "VariableDeclaration": _variable_declaration,
    "ClassDeclaration": _class_declaration,
    "ClassExpression": _class_expression,
    "ThisExpression": _this,
    "Super": _super,
    "MetaProperty": _meta_property,
    "ArrayExpression": _array_expression,
    "ArrayPattern": _array_pattern,
    "ObjectExpression": _object_expression,
    "ObjectPattern": _object_pattern,
    "SpreadElement": _spread,
    "RestElement": _rest,
    "AwaitExpression": _spread,
    "UnaryExpression": _unary,
    "UpdateExpression": _update,
    "BinaryExpression": _binary,
    "AssignmentExpression": _assignment,
    "AssignmentPattern": _assignment_pattern,
    "LogicalExpression": _logical,
    "MemberExpression": _member,
    "ConditionalExpression": _conditional,
    "CallExpression": _call,
    "NewExpression": _new,
    "SequenceExpression": _sequence,
    "ImportDeclaration": _import_declaration,
    "ExportNamedDeclaration": _export_named,
    "ExportDefaultDeclaration": _export_default,
    "ExportAllDeclaration": _ignore,
}
