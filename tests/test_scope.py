"""Tests for Scope."""

import pytest

from estree_analyzer import DuplicateDeclarationError, Scope


def test_root_scope_defaults():
    scope = Scope()
    assert scope.get_parent() is None
    assert scope.get_root() is scope
    assert scope.is_top_level()
    assert not scope.is_strict()
    assert scope.get_this() is None
    assert scope.get_own_members() == []
    assert repr(scope) == "Scope[]"


def test_nested_scopes():
    this_ref = {"x": {}}
    root = Scope(this_ref)
    child = root.create_nested()
    grandchild = child.create_nested()
    assert child.get_parent() is root
    assert grandchild.get_root() is root
    assert not child.is_top_level()
    assert grandchild.get_top_level() is root
    assert child.get_this() is this_ref


def test_set_top_level():
    root = Scope()
    fn = root.create_nested().set_top_level()
    block = fn.create_nested()
    assert fn.is_top_level()
    assert block.get_top_level() is fn


def test_strict_mode_hides_this_in_nested_scopes():
    this_ref = {}
    root = Scope(this_ref, True)
    assert root.get_this() is this_ref
    child = root.create_nested()
    assert child.is_strict()
    assert child.get_this() is None

    sloppy = Scope(this_ref).create_nested()
    assert sloppy.use_strict() is sloppy
    assert sloppy.get_this() is None


def test_members():
    scope = Scope()
    a = scope.add_own_member("a")
    assert a == {}
    scope.add_own_member("b", 2)
    assert scope.get_own_member("a") is a
    assert scope.get_own_member("c") is None
    assert scope.get_own_members() == ["a", "b"]
    assert repr(scope) == "Scope[a, b]"


def test_duplicate_member():
    scope = Scope()
    scope.add_own_member("a")
    with pytest.raises(DuplicateDeclarationError) as exc_info:
        scope.add_own_member("a")
    assert exc_info.value.msg == "'a' already defined"
    # shadowing in a nested scope is fine
    scope.create_nested().add_own_member("a")


def test_find_member():
    root = Scope()
    outer = root.add_own_member("x", {"v": 1})
    child = root.create_nested()
    assert child.find_member("x") is outer
    inner = child.add_own_member("x", {"v": 2})
    assert child.find_member("x") is inner
    assert root.find_member("x") is outer
    assert child.find_member("y") is None


def test_find_member_falsy_data():
    root = Scope()
    root.add_own_member("zero", 0)
    assert root.create_nested().find_member("zero") == 0


def test_with_members():
    members = {"a": {"name": "a"}}
    scope = Scope.with_members(members)
    assert scope.members is members
    assert not scope.is_top_level()
    assert scope.get_root() is scope
    assert scope.find_member("a") is members["a"]


def test_resolve():
    scope = Scope()
    scope.add_own_member("a", {"members": {"b": {"members": {"c": {"name": "c"}}}}})
    assert scope.resolve("a.b.c") == {"name": "c"}
    assert scope.resolve(["a", "b", "c"]) == {"name": "c"}
    assert scope.resolve("a.x.c") is None
    assert scope.resolve("a.b.c.d") is None
    assert scope.resolve("z") is None
    assert scope.create_nested().resolve("a.b")["members"]["c"] == {"name": "c"}
