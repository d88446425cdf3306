"""Tests for the abstract interpreter."""

import math

import pytest

from estree_analyzer import DuplicateDeclarationError, Scope, UnsupportedConstructError, analyze
from estree_analyzer.jsvalues import UNDEFINED


def test_demo_results(parse_expression):
    analysis = analyze(parse_expression("'1 + 2 * 3 = ' + (1 + 2 * 3)"))
    assert analysis == {"type": "string", "value": "1 + 2 * 3 = 7"}

    scope = Scope()
    analyze(parse_expression("obj && obj.nested && obj.nested.prop"), scope)
    assert scope.members == {
        "obj": {
            "name": "obj",
            "type": "object",
            "members": {
                "nested": {
                    "name": "nested",
                    "type": "object",
                    "members": {"prop": {"name": "prop"}},
                }
            },
        }
    }


def test_evaluates_constant_expressions(parse_expression):
    analysis = analyze(
        parse_expression("({ a: 1 + 2 * 3 - 'hello'.length })[\"a\"] ^ [1, 2, 3][2] + 'yes'")
    )
    assert analysis["type"] == "number"
    assert analysis["value"] == 2


def test_evaluates_template_literals(parse_expression):
    analysis = analyze(parse_expression('`a${1 + 2}b${"c" || "d"}${null && "e"}f${1 ? 2 : 3}`'))
    assert analysis["type"] == "string"
    assert analysis["value"] == "a3bcnullf2"


def test_adds_names_to_scope(parse_expression):
    scope = Scope()
    analyze(parse_expression("it.stuff && `${it.stuff.things.join()}` || 'nothing'"), scope)
    assert scope.resolve("it")["type"] == "object"
    assert scope.resolve("it.stuff")["type"] == "object"
    assert scope.resolve("it.stuff.things")["type"] == "object"
    assert scope.resolve("it.stuff.things.join") is not None
    assert scope.resolve("it.stuff.things.join")["type"] == "function"


def test_array_element_union(parse_expression):
    analysis = analyze(parse_expression('[1, "b", true]'))
    assert analysis["type"]["kind"] == "array"
    assert sorted(analysis["type"]["elements"]) == ["boolean", "number", "string"]
    assert analysis["value"] == [1, "b", True]


def test_array_holes_are_undefined(parse_expression):
    analysis = analyze(parse_expression("[1, , 2]"))
    assert analysis["value"] == [1, UNDEFINED, 2]
    assert analysis["type"] == {"kind": "array", "elements": ["number", "undefined"]}


def test_short_circuits_or(parse_expression):
    assert analyze(parse_expression("(x => 42) || []"))["type"] == "function"


def test_short_circuits_and(parse_expression):
    assert analyze(parse_expression("null && x"))["type"] == "null"


def test_logical_union(parse_expression):
    analysis = analyze(parse_expression("!x || []"))
    assert sorted(analysis["type"]) == ["array", "boolean"]
    assert "value" not in analysis


def test_conditional_union(parse_expression):
    analysis = analyze(parse_expression('x > 100 ? x - 100 : "too small"'))
    assert sorted(analysis["type"]) == ["number", "string"]


def test_array_unions(parse_expression):
    analysis = analyze(parse_expression('x ? [1, 2, null] : [3, "four"]'))
    assert analysis["type"] == [
        {"kind": "array", "elements": ["number", "null"]},
        {"kind": "array", "elements": ["number", "string"]},
    ]


def test_array_destructuring(parse_expression):
    scope = Scope()
    analysis = analyze(parse_expression("([a, b, c] = [1, 2, 3])"), scope)
    assert analysis["type"] == {"kind": "array", "elements": "number"}
    assert analysis["value"] == [1, 2, 3]
    assert set(scope.members) == {"a", "b", "c"}


def test_object_destructuring(parse_expression):
    scope = Scope()
    analysis = analyze(parse_expression("({ a, b, c } = { a: 1, b: 2, c: 3 })"), scope)
    assert analysis["type"] == "object"
    assert analysis["value"] == {"a": 1, "b": 2, "c": 3}
    assert set(scope.members) == {"a", "b", "c"}


def test_computed_object_keys(parse_expression):
    analysis = analyze(parse_expression("({ ['a' + 1]: 2, 3: 4 })"))
    assert analysis["value"] == {"a1": 2, "3": 4}


def test_unknown_object_values(parse_expression):
    assert "value" not in analyze(parse_expression("({ a: x })"))
    assert "value" not in analyze(parse_expression("({ get a() { return 1; } })"))


# declarations


def test_variable_declarations(parse_script):
    scope = Scope()
    assert analyze(parse_script("var x = 1; let y = 'a'; const z = true;"), scope) is None
    assert scope.members == {
        "x": {"name": "x", "type": "number", "value": 1},
        "y": {"name": "y", "type": "string", "value": "a"},
        "z": {"name": "z", "constant": True, "type": "boolean", "value": True},
    }


def test_var_hoists_to_function_scope(parse_script):
    scope = Scope()
    analyze(parse_script("{ var v = 1; let w = 2; } function f(a) { var q = a; }"), scope)
    assert set(scope.members) == {"v", "f"}
    assert scope.members["f"] == {"name": "f", "type": "function"}


def test_undeclared_assignment_creates_global(parse_script):
    scope = Scope()
    analyze(parse_script("function f() { g = 1; }"), scope)
    assert set(scope.members) == {"f", "g"}


def test_duplicate_declaration(parse_script):
    with pytest.raises(DuplicateDeclarationError) as exc_info:
        analyze(parse_script("var a = 1; var a = 2;"))
    assert exc_info.value.name == "a"
    assert str(exc_info.value) == "'a' already defined"


def test_catch_parameter_is_local(parse_script):
    scope = Scope()
    analyze(parse_script("try { t(); } catch (e) { e.x; } finally { u(); }"), scope)
    assert set(scope.members) == {"t", "u"}
    assert scope.members["t"]["type"] == "function"


def test_class_declaration(parse_script):
    scope = Scope()
    analyze(parse_script("class A extends B { m() { return 1; } }"), scope)
    assert scope.members["A"] == {"name": "A", "type": "function"}
    assert "m" not in scope.members
    assert "B" in scope.members


def test_strict_directive(parse_script):
    scope = Scope()
    analyze(parse_script("'use strict'; x = 1;"), scope)
    assert scope.is_strict()

    scope = Scope()
    analyze(parse_script("x = 1; 'use strict';"), scope)
    assert not scope.is_strict()


def test_this_members():
    this_ref: dict = {}
    scope = Scope(this_ref)
    tree = {
        "type": "AssignmentExpression",
        "operator": "=",
        "left": {
            "type": "MemberExpression",
            "computed": False,
            "object": {"type": "ThisExpression"},
            "property": {"type": "Identifier", "name": "a"},
        },
        "right": {"type": "Literal", "value": 1, "raw": "1"},
    }
    assert analyze(tree, scope) == {"type": "number", "value": 1}
    assert this_ref == {"a": {"name": "a"}}


def test_modules(parse_module):
    scope = Scope()
    analyze(parse_module("import a, { b } from 'm'; export { a }; export const c = 1;"), scope)
    assert scope.members["a"] == {"name": "a", "constant": True}
    assert scope.members["b"] == {"name": "b", "constant": True}
    assert scope.members["c"]["value"] == 1


def test_export_default_anonymous(parse_module):
    tree = parse_module("export default function () {}")
    assert analyze(tree["body"][0]) == {"type": "function"}
    tree = parse_module("export default class {}")
    assert analyze(tree["body"][0]) == {"type": "function"}


# expressions


def test_functions(parse_expression):
    assert analyze(parse_expression("(function* () {})")) == {"type": "function", "generator": True}
    assert analyze(parse_expression("(async () => 1)")) == {"type": "function", "async": True}


def test_unary_operators(parse_expression):
    assert analyze(parse_expression("typeof 'x'")) == {"type": "string", "value": "string"}
    assert analyze(parse_expression("void x")) == {"type": "undefined", "value": UNDEFINED}
    assert analyze(parse_expression("-'3'")) == {"type": "number", "value": -3}
    assert analyze(parse_expression("~5")) == {"type": "number", "value": -6}
    assert analyze(parse_expression("!''")) == {"type": "boolean", "value": True}
    assert analyze(parse_expression("-x")) == {"type": "number"}


def test_update_operators(parse_script, parse_expression):
    scope = Scope()
    analyze(parse_script("let x = '5';"), scope)
    assert analyze(parse_expression("x++"), scope) == {"type": "number", "value": 5}
    assert analyze(parse_expression("++x"), scope) == {"type": "number", "value": 6}
    assert analyze(parse_expression("--x"), scope) == {"type": "number", "value": 4}


def test_binary_operators(parse_expression):
    assert analyze(parse_expression("'5' * '2'")) == {"type": "number", "value": 10}
    assert analyze(parse_expression("1 + true")) == {"type": "number", "value": 2}
    assert analyze(parse_expression("1 == '1'")) == {"type": "boolean", "value": True}
    assert analyze(parse_expression("1 === '1'")) == {"type": "boolean", "value": False}
    assert analyze(parse_expression("-1 >>> 28")) == {"type": "number", "value": 15}
    assert analyze(parse_expression("7 % -3")) == {"type": "number", "value": 1}
    assert math.isinf(analyze(parse_expression("1 / 0"))["value"])
    assert math.isnan(analyze(parse_expression("0 / 0"))["value"])
    assert analyze(parse_expression("x + 1")) is None
    assert analyze(parse_expression("x + 'a'")) == {"type": "string"}


def test_negative_zero_is_preserved(parse_expression):
    assert analyze(parse_expression("1 / -0"))["value"] == -math.inf
    assert analyze(parse_expression("1 / (0 * -1)"))["value"] == -math.inf
    assert analyze(parse_expression("1 / (-4 % 2)"))["value"] == -math.inf
    assert analyze(parse_expression("1 / (0 / -5)"))["value"] == -math.inf
    assert analyze(parse_expression("1 / - -0"))["value"] == math.inf
    assert analyze(parse_expression("'' + -0")) == {"type": "string", "value": "0"}


def test_compound_assignment(parse_expression):
    assert analyze(parse_expression("x += 1")) == {"type": "number"}


def test_sequence(parse_expression):
    assert analyze(parse_expression("(1, 'a')")) == {"type": "string", "value": "a"}


def test_calls(parse_expression):
    scope = Scope()
    assert analyze(parse_expression("new Foo(bar())"), scope) == {"type": "object"}
    assert scope.members["Foo"]["type"] == "function"
    assert scope.members["bar"]["type"] == "function"


def test_regex_literal(parse_expression):
    assert analyze(parse_expression("/a/g")) == {"type": "object"}


def test_constant_member_access(parse_expression):
    assert analyze(parse_expression("'abc'[1]")) == {"type": "string", "value": "b"}
    assert analyze(parse_expression("[1, 2].length")) == {"type": "number", "value": 2}
    assert analyze(parse_expression("({ a: 1 }).a")) == {"type": "number", "value": 1}


def test_inherited_members_are_not_folded(parse_expression):
    assert analyze(parse_expression("'abc'.toUpperCase")) == {"name": "toUpperCase"}
    assert "value" not in analyze(parse_expression("({ a: 1 }).toString"))
    assert analyze(parse_expression("[1, 2][5]")) is None
    assert "value" not in analyze(parse_expression("'abc'.toUpperCase || 1"))
    assert analyze(parse_expression("[1, 2].map ? 'fn' : 'none'")) == {"type": "string"}


def test_modeled_throws(parse_expression, parse_script):
    assert analyze(parse_expression("null.x")) == {"thrown": {"type": "object"}}
    assert analyze(parse_expression("'a' in 'abc'")) == {
        "type": "boolean",
        "thrown": {"type": "object"},
    }
    assert analyze(parse_expression("1 instanceof 2")) == {
        "type": "boolean",
        "thrown": {"type": "object"},
    }
    assert analyze(parse_script("throw 1")["body"][0]) == {
        "thrown": {"type": "number", "value": 1}
    }


def test_with_is_unsupported(parse_script):
    with pytest.raises(UnsupportedConstructError):
        analyze(parse_script("with (o) { x; }"))


def test_unknown_node_type():
    with pytest.raises(UnsupportedConstructError) as exc_info:
        analyze({"type": "JSXElement"})
    assert exc_info.value.msg == "Unhandled AST node type 'JSXElement'"
