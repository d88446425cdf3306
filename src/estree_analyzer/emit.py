"""Regenerate JavaScript source text from ESTree trees.

The formatter walks the tree with an immutable context carrying the
loosest operator precedence the current position accepts unparenthesized,
whether the position is inside a comma list or an expression (where a
block must not end the line), and whether the next token starts an
expression statement (where `{`, `function` and `class` need parentheses).
Tokens go to an Emitter, which does all line breaking.
"""

from __future__ import annotations

import dataclasses
import io
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum

from . import jsvalues
from .emitter import Emitter, FormatOptions
from .walk import ASTNode, Visit, statement_group, walk

logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    MEMBER_CALL = 1  # x.y x[y] x(...) new x(...)
    NO_ARG_NEW = 2  # new x
    POSTFIX = 3  # x++ x--
    PREFIX = 4  # !x ~x +x -x ++x --x typeof x void x delete x await x
    EXPONENT = 5  # x ** y
    MULTIPLY = 6
    ADD = 7
    SHIFT = 8
    COMPARE = 9  # < <= > >= in instanceof
    EQUAL = 10
    BIT_AND = 11
    BIT_XOR = 12
    BIT_OR = 13
    LOGICAL_AND = 14
    LOGICAL_OR = 15
    CONDITIONAL = 16
    ASSIGNMENT = 17  # also arrow functions
    YIELD = 18
    SEQUENCE = 19


BINARY_PRECEDENCE: dict[str, Precedence] = {
    "**": Precedence.EXPONENT,
    "*": Precedence.MULTIPLY,
    "/": Precedence.MULTIPLY,
    "%": Precedence.MULTIPLY,
    "+": Precedence.ADD,
    "-": Precedence.ADD,
    "<<": Precedence.SHIFT,
    ">>": Precedence.SHIFT,
    ">>>": Precedence.SHIFT,
    "<": Precedence.COMPARE,
    "<=": Precedence.COMPARE,
    ">": Precedence.COMPARE,
    ">=": Precedence.COMPARE,
    "in": Precedence.COMPARE,
    "instanceof": Precedence.COMPARE,
    "==": Precedence.EQUAL,
    "!=": Precedence.EQUAL,
    "===": Precedence.EQUAL,
    "!==": Precedence.EQUAL,
    "&": Precedence.BIT_AND,
    "^": Precedence.BIT_XOR,
    "|": Precedence.BIT_OR,
    "&&": Precedence.LOGICAL_AND,
    "||": Precedence.LOGICAL_OR,
    "??": Precedence.LOGICAL_OR,
    "=": Precedence.ASSIGNMENT,
    "+=": Precedence.ASSIGNMENT,
    "-=": Precedence.ASSIGNMENT,
    "**=": Precedence.ASSIGNMENT,
    "*=": Precedence.ASSIGNMENT,
    "/=": Precedence.ASSIGNMENT,
    "%=": Precedence.ASSIGNMENT,
    "<<=": Precedence.ASSIGNMENT,
    ">>=": Precedence.ASSIGNMENT,
    ">>>=": Precedence.ASSIGNMENT,
    "&=": Precedence.ASSIGNMENT,
    "^=": Precedence.ASSIGNMENT,
    "|=": Precedence.ASSIGNMENT,
}

SAME_LINE_STATEMENTS: frozenset[str] = frozenset(
    {"BreakStatement", "ContinueStatement", "ReturnStatement", "ThrowStatement"}
)


@dataclass(frozen=True)
class _Context:
    precedence: int | None = None
    in_list: bool = False
    leading: bool = False
    for_init: bool = False


_FRESH = _Context()
_LIST = _Context(precedence=Precedence.SEQUENCE - 1, in_list=True)
_EMBEDDED = _Context(in_list=True)
# parenthesizes any operator expression
_GROUPED = _Context(precedence=0)


def _needs_parens(precedence: int, ctx: _Context) -> bool:
    return ctx.precedence is not None and precedence > ctx.precedence


def _literal_text(node: ASTNode) -> str:
    raw = node.get("raw")
    if raw:
        return raw
    regex = node.get("regex")
    if regex:
        return "/" + regex["pattern"] + "/" + regex["flags"]
    value = node.get("value")
    if jsvalues.is_number(value):
        return jsvalues.number_to_string(value)
    return json.dumps(value)


def _sign_clash(op: str, arg: ASTNode) -> bool:
    # `- -x` must not print as `--x`
    if op not in ("+", "-"):
        return False
    if arg.get("type") not in ("UnaryExpression", "UpdateExpression") or not arg.get("prefix"):
        return False
    return arg["operator"].startswith(op)


def _mixes_nullish(op: str, operand: ASTNode) -> bool:
    # `??` cannot share an unparenthesized operand with `||` or `&&`
    if op not in ("||", "&&", "??") or operand.get("type") != "LogicalExpression":
        return False
    return (op == "??") != (operand["operator"] == "??")


def _contains_call(node: ASTNode) -> bool:
    while True:
        node_type = node.get("type")
        if node_type == "CallExpression":
            return True
        if node_type == "MemberExpression":
            node = node["object"]
        elif node_type == "TaggedTemplateExpression":
            node = node["tag"]
        else:
            return False


class _Formatter:
    def __init__(self, options: FormatOptions):
        self.out = Emitter(options)
        self.hooks = {
            # modules
            "ImportDeclarationBefore": self._import_declaration,
            "ImportSpecifierBefore": self._import_specifier,
            "ImportDefaultSpecifierBefore": self._import_default_specifier,
            "ImportNamespaceSpecifierBefore": self._import_namespace_specifier,
            "ExportNamedDeclarationBefore": self._export_named,
            "ExportSpecifierBefore": self._export_specifier,
            "ExportDefaultDeclarationBefore": self._export_default,
            "ExportAllDeclarationBefore": self._export_all,
            # declarations
            "VariableDeclarationBefore": self._variable_declaration,
            "FunctionBefore": self._function,
            "ClassBefore": self._class,
            "MethodDefinitionBefore": self._method_definition,
            "PropertyBefore": self._property,
            # statements
            "EmptyStatement": self._empty_statement,
            "DebuggerStatement": self._debugger_statement,
            "BreakStatementBefore": self._jump,
            "ContinueStatementBefore": self._jump,
            "ExpressionStatementBefore": self._expression_statement_before,
            "ExpressionStatement": self._expression_statement,
            "BlockStatementBefore": self._block,
            "WithStatementBefore": self._with,
            "ReturnStatementBefore": self._return,
            "LabeledStatementBefore": self._labeled,
            "IfStatementBefore": self._if,
            "SwitchStatementBefore": self._switch,
            "SwitchCaseBefore": self._switch_case,
            "ThrowStatementBefore": self._throw,
            "TryStatementBefore": self._try,
            "WhileStatementBefore": self._while,
            "DoWhileStatementBefore": self._do_while,
            "ForStatementBefore": self._for,
            "ForInStatementBefore": self._for_in,
            "ForOfStatementBefore": self._for_in,
            # expressions
            "ThisExpression": self._this,
            "Super": self._super,
            "MetaProperty": self._meta_property,
            "ArrayExpressionBefore": self._array,
            "ArrayPatternBefore": self._array,
            "ObjectExpressionBefore": self._object,
            "ObjectPatternBefore": self._object,
            "UnaryExpressionBefore": self._unary,
            "UpdateExpressionBefore": self._unary,
            "BinaryExpressionBefore": self._binary,
            "LogicalExpressionBefore": self._binary,
            "AssignmentExpressionBefore": self._binary,
            "AssignmentPatternBefore": self._assignment_pattern,
            "MemberExpressionBefore": self._member,
            "ConditionalExpressionBefore": self._conditional,
            "CallExpressionBefore": self._call,
            "NewExpressionBefore": self._new,
            "SpreadElementBefore": self._ellipsis,
            "RestElementBefore": self._ellipsis,
            "SequenceExpressionBefore": self._sequence,
            "YieldExpressionBefore": self._yield,
            "AwaitExpressionBefore": self._await,
            "ParenthesizedExpressionBefore": self._parenthesized,
            "TemplateLiteralBefore": self._template_literal,
            "TaggedTemplateExpressionBefore": self._tagged_template,
            # patterns
            "Identifier": self._identifier,
            "Literal": self._literal,
        }

    def run(self, tree: ASTNode) -> None:
        walk(tree, _FRESH, self.hooks)
        self.out.flush()

    # helpers

    def _emit_guard(self, keyword: str, node: ASTNode, visit: Visit) -> None:
        self.out.emit(keyword)
        self.out.emit_space()
        self.out.emit_leading("(")
        visit(node, _FRESH)
        self.out.emit_trailing(")")

    def _emit_nested(self, node: ASTNode, visit: Visit, more: bool = False) -> None:
        """Emit a loop or branch body; more means a keyword follows it."""
        if node["type"] != "BlockStatement":
            self.out.newline()
            self.out.inc_indent()
            visit(node, _FRESH, statement_group(node))
            self.out.dec_indent()
        else:
            self.out.emit_space()
            visit(node, _EMBEDDED if more else _FRESH)
            if more:
                self.out.emit_space()

    def _emit_list(self, nodes: list, visit: Visit, leading: bool = False) -> None:
        """Emit a comma list; leading marks the first item as starting a statement."""
        ctx = dataclasses.replace(_LIST, leading=True) if leading else _LIST
        first = True
        for node in nodes:
            if not first:
                self.out.emit_trailing(",")
                self.out.emit_space()
            first = False
            visit(node, ctx)
            ctx = _LIST

    def _emit_key(self, node: ASTNode, visit: Visit) -> None:
        if node.get("computed"):
            self.out.emit_leading("[")
            visit(node["key"], _LIST)
            self.out.emit_trailing("]")
        else:
            visit(node["key"], _FRESH)

    def _emit_method(self, func: ASTNode, visit: Visit, body_ctx: _Context) -> None:
        self.out.emit_trailing("(")
        self._emit_list(func["params"], visit)
        self.out.emit_trailing(")")
        self.out.emit_space()
        visit(func["body"], body_ctx)

    def _end_statement(self) -> None:
        self.out.emit_semi()
        self.out.newline()

    # modules

    def _import_declaration(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        out.emit_leading("import")
        out.emit_space()
        specifiers = node["specifiers"]
        if specifiers:
            first = True
            got_named = False
            for spec in specifiers:
                if not first:
                    out.emit_trailing(",")
                    out.emit_space()
                first = False
                if spec["type"] == "ImportSpecifier" and not got_named:
                    got_named = True
                    out.emit_leading("{")
                    out.emit_space()
                visit(spec, ctx)
            if got_named:
                out.emit_space()
                out.emit_trailing("}")
            out.emit_space()
            out.emit_leading("from")
            out.emit_space()
        visit(node["source"], _FRESH)
        self._end_statement()
        return False

    def _emit_renamed(self, name: str, alias: str) -> None:
        self.out.emit(name)
        if alias != name:
            self.out.emit_space()
            self.out.emit_leading("as")
            self.out.emit_space()
            self.out.emit(alias)

    def _import_specifier(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self._emit_renamed(node["imported"]["name"], node["local"]["name"])
        return False

    def _import_default_specifier(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self.out.emit(node["local"]["name"])
        return False

    def _import_namespace_specifier(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self.out.emit_leading("*")
        self.out.emit_space()
        self.out.emit_leading("as")
        self.out.emit_space()
        self.out.emit(node["local"]["name"])
        return False

    def _export_named(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        out.emit_leading("export")
        out.emit_space()
        if node.get("declaration"):
            visit(node["declaration"], _FRESH)
            return False
        out.emit_leading("{")
        specifiers = node["specifiers"]
        if specifiers:
            out.emit_space()
            self._emit_list(specifiers, visit)
            out.emit_space()
        out.emit_trailing("}")
        if node.get("source"):
            out.emit_space()
            out.emit_leading("from")
            out.emit_space()
            visit(node["source"], _FRESH)
        self._end_statement()
        return False

    def _export_specifier(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self._emit_renamed(node["local"]["name"], node["exported"]["name"])
        return False

    def _export_default(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self.out.emit_leading("export")
        self.out.emit_space()
        self.out.emit_leading("default")
        self.out.emit_space()
        declaration = node["declaration"]
        if declaration["type"].endswith("Declaration"):
            visit(declaration, _FRESH)
        else:
            visit(declaration, _Context(precedence=Precedence.ASSIGNMENT, leading=True))
            self._end_statement()
        return False

    def _export_all(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self.out.emit_leading("export")
        self.out.emit_space()
        self.out.emit("*")
        self.out.emit_space()
        self.out.emit_leading("from")
        self.out.emit_space()
        visit(node["source"], _FRESH)
        self._end_statement()
        return False

    # declarations

    def _variable_declaration(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        out.emit_leading(node["kind"])
        out.emit_space()
        first = True
        for decl in node["declarations"]:
            if not first:
                out.emit_trailing(",")
                out.emit_space()
            first = False
            visit(decl["id"], _LIST)
            if decl.get("init"):
                out.emit_binary_op("=")
                visit(decl["init"], _LIST)
        if not ctx.for_init:
            self._end_statement()
        return False

    def _function(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        node_type = node["type"]
        arrow = node_type == "ArrowFunctionExpression"
        if arrow:
            parens = _needs_parens(Precedence.ASSIGNMENT, ctx)
        else:
            parens = node_type == "FunctionExpression" and ctx.leading
        if parens:
            out.emit_leading("(")
        params = node["params"]
        params_parens = not arrow or len(params) != 1 or params[0]["type"] != "Identifier"
        if node.get("async"):
            out.emit_leading("async")
            out.emit_space()
        if not arrow:
            out.emit_leading("function")
            if node.get("generator"):
                out.emit_leading("*")
            out.emit_space()
            if node.get("id"):
                visit(node["id"], _FRESH)
            out.emit_trailing("(")
        elif params_parens:
            out.emit_leading("(")
        self._emit_list(params, visit)
        if params_parens:
            out.emit_trailing(")")
        out.emit_space()
        if arrow:
            out.emit_trailing("=>")
            out.emit_space()
        body = node["body"]
        if body["type"] != "BlockStatement":
            visit(body, _Context(precedence=Precedence.ASSIGNMENT, leading=True))
        elif node_type == "FunctionDeclaration":
            visit(body, _FRESH)
        else:
            visit(body, _EMBEDDED)
        if parens:
            out.emit_trailing(")")
        return False

    def _class(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        declaration = node["type"] == "ClassDeclaration"
        parens = not declaration and ctx.leading
        if parens:
            out.emit_leading("(")
        out.emit("class")
        if node.get("id"):
            out.emit_space()
            visit(node["id"], _FRESH)
        if node.get("superClass"):
            out.emit_space()
            out.emit_leading("extends")
            out.emit_space()
            visit(node["superClass"], _Context(precedence=Precedence.NO_ARG_NEW))
        out.emit_space()
        out.emit_trailing("{")
        definitions = node["body"]["body"]
        if definitions:
            out.newline()
            out.inc_indent()
            for definition in definitions:
                visit(definition, _FRESH)
            out.dec_indent()
        out.emit_trailing("}")
        if parens:
            out.emit_trailing(")")
        if declaration:
            out.newline()
        return False

    def _method_definition(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        func = node["value"]
        if node.get("static"):
            out.emit_leading("static")
            out.emit_space()
        if func.get("async"):
            out.emit_leading("async")
            out.emit_space()
        if node.get("kind") in ("get", "set"):
            out.emit_leading(node["kind"])
            out.emit_space()
        if func.get("generator"):
            out.emit_leading("*")
        self._emit_key(node, visit)
        self._emit_method(func, visit, _FRESH)
        return False

    def _property(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        value = node["value"]
        kind = node.get("kind")
        if node.get("method") or kind in ("get", "set"):
            if value.get("async"):
                out.emit_leading("async")
                out.emit_space()
            if kind in ("get", "set"):
                out.emit_leading(kind)
                out.emit_space()
            if value.get("generator"):
                out.emit_leading("*")
            self._emit_key(node, visit)
            self._emit_method(value, visit, _EMBEDDED)
        elif node.get("shorthand"):
            if value["type"] == "AssignmentPattern":
                visit(value, _LIST)
            else:
                self._emit_key(node, visit)
        else:
            self._emit_key(node, visit)
            out.emit_trailing(":")
            out.emit_space()
            visit(value, _LIST)
        return False

    # statements

    def _empty_statement(self, node: ASTNode, ctx: _Context) -> None:
        self._end_statement()

    def _debugger_statement(self, node: ASTNode, ctx: _Context) -> None:
        self.out.emit("debugger")
        self._end_statement()

    def _jump(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self.out.emit("break" if node["type"] == "BreakStatement" else "continue")
        if node.get("label"):
            self.out.emit_space()
            visit(node["label"], _FRESH)
        self._end_statement()
        return False

    def _expression_statement_before(self, node: ASTNode, ctx: _Context, visit: Visit) -> _Context:
        # an expression statement must not start with `{`, `function` or `class`
        return _Context(leading=True)

    def _expression_statement(self, node: ASTNode, ctx: _Context) -> None:
        self._end_statement()

    def _block(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        out.emit_trailing("{")
        body = node["body"]
        if body:
            out.newline()
            out.inc_indent()
            for stmt in body:
                visit(stmt, _FRESH, statement_group(stmt))
            out.dec_indent()
        out.emit_trailing("}")
        if not ctx.in_list:
            out.newline()
        return False

    def _with(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self._emit_guard("with", node["object"], visit)
        self._emit_nested(node["body"], visit)
        return False

    def _return(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self.out.emit("return")
        if node.get("argument"):
            self.out.emit_space()
            visit(node["argument"], _FRESH)
        self._end_statement()
        return False

    def _labeled(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        visit(node["label"], _FRESH)
        self.out.emit_trailing(":")
        self.out.emit_space()
        visit(node["body"], _FRESH, statement_group(node["body"]))
        return False

    def _if(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self._emit_guard("if", node["test"], visit)
        consequent = node["consequent"]
        alternate = node.get("alternate")
        if not alternate and consequent["type"] in SAME_LINE_STATEMENTS:
            self.out.emit_space()
            visit(consequent, _FRESH)
        else:
            self._emit_nested(consequent, visit, more=alternate is not None)
        if alternate:
            self.out.emit("else")
            if alternate["type"] == "IfStatement":
                self.out.emit_space()
                visit(alternate, _FRESH)
            else:
                self._emit_nested(alternate, visit)
        return False

    def _switch(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        self._emit_guard("switch", node["discriminant"], visit)
        out.emit_space()
        out.emit_trailing("{")
        out.newline()
        out.inc_indent()
        for case in node["cases"]:
            visit(case, _FRESH)
        out.dec_indent()
        out.emit_trailing("}")
        out.newline()
        return False

    def _switch_case(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        if node.get("test"):
            out.emit("case")
            out.emit_space()
            visit(node["test"], _FRESH)
        else:
            out.emit("default")
        out.emit_trailing(":")
        consequent = node["consequent"]
        if len(consequent) == 1 and consequent[0]["type"] == "BlockStatement":
            out.emit_space()
            visit(consequent[0], _FRESH)
        else:
            out.newline()
            out.inc_indent()
            for stmt in consequent:
                visit(stmt, _FRESH, statement_group(stmt))
            out.dec_indent()
        return False

    def _throw(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self.out.emit("throw")
        self.out.emit_space()
        visit(node["argument"], _FRESH)
        self._end_statement()
        return False

    def _try(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        handler = node.get("handler")
        finalizer = node.get("finalizer")
        out.emit("try")
        out.emit_space()
        visit(node["block"], _EMBEDDED)
        if handler:
            out.emit_space()
            out.emit("catch")
            out.emit_space()
            if handler.get("param"):
                out.emit_leading("(")
                visit(handler["param"], _FRESH)
                out.emit_trailing(")")
                out.emit_space()
            visit(handler["body"], _EMBEDDED if finalizer else _FRESH)
        if finalizer:
            out.emit_space()
            out.emit("finally")
            out.emit_space()
            visit(finalizer, _FRESH)
        return False

    def _while(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self._emit_guard("while", node["test"], visit)
        self._emit_nested(node["body"], visit)
        return False

    def _do_while(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self.out.emit("do")
        self._emit_nested(node["body"], visit, more=True)
        self._emit_guard("while", node["test"], visit)
        self._end_statement()
        return False

    def _for(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        out.emit("for")
        out.emit_space()
        out.emit_leading("(")
        if node.get("init"):
            visit(node["init"], _Context(for_init=True))
        out.emit_semi()
        if node.get("test"):
            out.emit_space()
            visit(node["test"], _FRESH)
        out.emit_semi()
        if node.get("update"):
            out.emit_space()
            visit(node["update"], _FRESH)
        out.emit_trailing(")")
        self._emit_nested(node["body"], visit)
        return False

    def _for_in(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        out.emit("for")
        out.emit_space()
        if node.get("await"):
            out.emit("await")
            out.emit_space()
        out.emit_leading("(")
        visit(node["left"], _Context(for_init=True))
        out.emit_binary_op("in" if node["type"] == "ForInStatement" else "of")
        visit(node["right"], _FRESH)
        out.emit_trailing(")")
        self._emit_nested(node["body"], visit)
        return False

    # expressions

    def _this(self, node: ASTNode, ctx: _Context) -> None:
        self.out.emit("this")

    def _super(self, node: ASTNode, ctx: _Context) -> None:
        self.out.emit("super")

    def _meta_property(self, node: ASTNode, ctx: _Context) -> None:
        self.out.emit(node["meta"]["name"])
        self.out.emit_leading(".")
        self.out.emit(node["property"]["name"])

    def _array(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        out.emit_leading("[")
        elements = node["elements"]
        first = True
        for element in elements:
            if not first:
                out.emit_trailing(",")
                out.emit_space()
            first = False
            if element:
                visit(element, _LIST)
        # a trailing hole needs its own comma
        if elements and elements[-1] is None:
            out.emit_trailing(",")
        out.emit_trailing("]")
        return False

    def _object(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        parens = node["type"] == "ObjectExpression" and ctx.leading
        if parens:
            out.emit_leading("(")
        out.emit_leading("{")
        if node["properties"]:
            out.emit_space()
            self._emit_list(node["properties"], visit)
            out.emit_space()
        out.emit_trailing("}")
        if parens:
            out.emit_trailing(")")
        return False

    def _unary(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        prefix = bool(node.get("prefix"))
        precedence = Precedence.PREFIX if prefix else Precedence.POSTFIX
        parens = _needs_parens(precedence, ctx)
        if parens:
            out.emit_leading("(")
        op = node["operator"]
        argument = node["argument"]
        if prefix:
            out.emit_leading(op)
            if op.isalpha() or _sign_clash(op, argument):
                out.emit_space()
            visit(argument, _Context(precedence=precedence))
        else:
            visit(argument, _Context(precedence=precedence, leading=ctx.leading and not parens))
            out.emit_trailing(op)
        if parens:
            out.emit_trailing(")")
        return False

    def _binary(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        op = node["operator"]
        precedence = BINARY_PRECEDENCE[op]
        right_assoc = precedence in (Precedence.EXPONENT, Precedence.ASSIGNMENT)
        left = node["left"]
        parens = _needs_parens(precedence, ctx) or left["type"] == "ObjectPattern"
        if parens:
            out.emit_leading("(")
        left_precedence = precedence - 1 if right_assoc else precedence
        if precedence == Precedence.EXPONENT:
            # a prefix operand of ** must be parenthesized
            left_precedence = Precedence.POSTFIX
        if _mixes_nullish(op, left):
            visit(left, _GROUPED)
        else:
            visit(left, _Context(precedence=left_precedence, leading=ctx.leading and not parens))
        out.emit_binary_op(op)
        right = node["right"]
        right_precedence = precedence if right_assoc else precedence - 1
        right_ctx = _Context(precedence=right_precedence)
        visit(right, _GROUPED if _mixes_nullish(op, right) else right_ctx)
        if parens:
            out.emit_trailing(")")
        return False

    def _assignment_pattern(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        visit(node["left"], ctx)
        self.out.emit_binary_op("=")
        visit(node["right"], _Context(precedence=Precedence.ASSIGNMENT))
        return False

    def _member(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        obj = node["object"]
        # `1.x` would read the dot as a decimal point
        numeric = obj["type"] == "Literal" and jsvalues.is_number(obj.get("value"))
        if numeric:
            out.emit_leading("(")
            visit(obj, _FRESH)
            out.emit_trailing(")")
        else:
            visit(obj, _Context(precedence=Precedence.MEMBER_CALL, leading=ctx.leading))
        if node.get("computed"):
            out.emit_leading("[")
            visit(node["property"], _FRESH)
            out.emit_trailing("]")
        else:
            out.emit_leading(".")
            visit(node["property"], _FRESH)
        return False

    def _conditional(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        precedence = Precedence.CONDITIONAL
        parens = _needs_parens(precedence, ctx)
        if parens:
            out.emit_leading("(")
        visit(node["test"], _Context(precedence=precedence - 1, leading=ctx.leading and not parens))
        out.emit_binary_op("?")
        branch = _Context(precedence=precedence)
        visit(node["consequent"], branch)
        out.emit_binary_op(":")
        visit(node["alternate"], branch)
        if parens:
            out.emit_trailing(")")
        return False

    def _call(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        visit(node["callee"], _Context(precedence=Precedence.MEMBER_CALL, leading=ctx.leading))
        self.out.emit_trailing("(")
        self._emit_list(node["arguments"], visit)
        self.out.emit_trailing(")")
        return False

    def _new(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        out.emit("new")
        out.emit_space()
        callee = node["callee"]
        # a call inside the callee would take the argument list
        parens = _contains_call(callee)
        if parens:
            out.emit_leading("(")
        visit(callee, _Context(precedence=Precedence.MEMBER_CALL))
        if parens:
            out.emit_trailing(")")
        out.emit_trailing("(")
        self._emit_list(node["arguments"], visit)
        out.emit_trailing(")")
        return False

    def _ellipsis(self, node: ASTNode, ctx: _Context, visit: Visit) -> None:
        self.out.emit_leading("...")

    def _sequence(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        parens = _needs_parens(Precedence.SEQUENCE, ctx)
        if parens:
            self.out.emit_leading("(")
        self._emit_list(node["expressions"], visit, leading=ctx.leading and not parens)
        if parens:
            self.out.emit_trailing(")")
        return False

    def _yield(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        precedence = Precedence.YIELD
        parens = _needs_parens(precedence, ctx)
        if parens:
            out.emit_leading("(")
        out.emit("yield")
        if node.get("delegate"):
            out.emit_trailing("*")
        if node.get("argument"):
            out.emit_space()
            visit(node["argument"], _Context(precedence=precedence))
        if parens:
            out.emit_trailing(")")
        return False

    def _await(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        out = self.out
        precedence = Precedence.PREFIX
        parens = _needs_parens(precedence, ctx)
        if parens:
            out.emit_leading("(")
        out.emit("await")
        out.emit_space()
        visit(node["argument"], _Context(precedence=precedence))
        if parens:
            out.emit_trailing(")")
        return False

    def _parenthesized(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        self.out.emit_leading("(")
        visit(node["expression"], _FRESH)
        self.out.emit_trailing(")")
        return False

    def _template_literal(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        quasis = node["quasis"]
        token = "`"
        for i, expr in enumerate(node["expressions"]):
            token += quasis[i]["value"]["raw"] + "${"
            self.out.emit(token)
            visit(expr, _FRESH)
            token = "}"
        token += quasis[-1]["value"]["raw"] + "`"
        self.out.emit(token)
        return False

    def _tagged_template(self, node: ASTNode, ctx: _Context, visit: Visit) -> bool:
        visit(node["tag"], _Context(precedence=Precedence.MEMBER_CALL, leading=ctx.leading))
        visit(node["quasi"], _FRESH)
        return False

    # patterns

    def _identifier(self, node: ASTNode, ctx: _Context) -> None:
        self.out.emit(node["name"])

    def _literal(self, node: ASTNode, ctx: _Context) -> None:
        self.out.emit(_literal_text(node))


def _resolve_options(options: FormatOptions | Mapping | None, overrides: dict) -> FormatOptions:
    if options is None:
        resolved = FormatOptions()
    elif isinstance(options, FormatOptions):
        resolved = options
    else:
        resolved = FormatOptions(**dict(options))
    if overrides:
        resolved = dataclasses.replace(resolved, **overrides)
    return resolved


def format(tree: ASTNode, options: FormatOptions | Mapping | None = None, **overrides: object) -> None:
    """Write tree as JavaScript source through options.write.

    options is a FormatOptions or a mapping of its fields; keyword
    arguments override individual fields.
    """
    resolved = _resolve_options(options, overrides)
    logger.debug("formatting %s", tree.get("type"))
    _Formatter(resolved).run(tree)
    logger.debug("formatting done")


def to_source(tree: ASTNode, options: FormatOptions | Mapping | None = None, **overrides: object) -> str:
    """Format tree into a string."""
    buf = io.StringIO()
    overrides["write"] = buf.write
    format(tree, options, **overrides)
    return buf.getvalue()
