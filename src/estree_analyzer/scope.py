"""Lexical naming scopes built during analysis."""

from __future__ import annotations

import logging

from .errors import DuplicateDeclarationError

logger = logging.getLogger(__name__)

_MISSING = object()


class Scope:
    """A JavaScript variable scope.

    Scopes form a tree through `parent`. A top-level scope (the global
    scope or a function scope) is where `var` bindings are hoisted to.
    `members` maps names declared directly in this scope to their data,
    usually an analysis result dict.
    """

    def __init__(
        self,
        this_ref: object = None,
        strict: bool = False,
        parent: Scope | None = None,
        top_level: bool | None = None,
        members: dict[str, object] | None = None,
    ):
        self.parent = parent
        self.strict = strict
        self.this_ref = this_ref
        self.top_level = parent is None if top_level is None else top_level
        self.members: dict[str, object] = {} if members is None else members

    @classmethod
    def with_members(cls, members: dict[str, object]) -> Scope:
        """A non-strict, non-top-level root scope wrapping members."""
        return cls(None, False, None, False, members)

    def create_nested(self) -> Scope:
        """A child scope inheriting `this` and strictness, not top-level."""
        return Scope(self.this_ref, self.strict, self, False)

    def get_parent(self) -> Scope | None:
        return self.parent

    def get_root(self) -> Scope:
        scope = self
        while scope.parent is not None:
            scope = scope.parent
        return scope

    def is_strict(self) -> bool:
        return self.strict

    def use_strict(self) -> Scope:
        """Enable strict mode, which hides `this` in non-root scopes."""
        self.strict = True
        return self

    def is_top_level(self) -> bool:
        return self.top_level

    def get_top_level(self) -> Scope:
        """Nearest top-level scope, this one included, else the root."""
        scope = self
        while not scope.top_level and scope.parent is not None:
            scope = scope.parent
        return scope

    def set_top_level(self) -> Scope:
        self.top_level = True
        return self

    def get_this(self) -> object:
        if self.parent is None or not self.strict:
            return self.this_ref
        return None

    def get_own_member(self, name: str) -> object:
        return self.members.get(name)

    def get_own_members(self) -> list[str]:
        return list(self.members)

    def add_own_member(self, name: str, value: object = _MISSING) -> object:
        """Declare name in this scope; the data defaults to a new dict."""
        if name in self.members:
            logger.debug("duplicate declaration of %s", name)
            raise DuplicateDeclarationError(name)
        if value is _MISSING:
            value = {}
        self.members[name] = value
        return value

    def find_member(self, name: str) -> object:
        """Data for name in the nearest scope declaring it, or None."""
        scope: Scope | None = self
        while scope is not None:
            member = scope.get_own_member(name)
            if member is not None:
                return member
            scope = scope.parent
        return None

    def resolve(self, qname: str | list[str]) -> object:
        """Resolve a dotted name like "a.b.c" or a list of segments.

        The first segment is looked up with find_member, each later one in
        the previous result's "members" dict. Returns None as soon as a
        segment is missing.
        """
        parts = list(qname) if isinstance(qname, (list, tuple)) else qname.split(".")
        if not parts:
            return None
        member = self.find_member(parts[0])
        for part in parts[1:]:
            if not isinstance(member, dict):
                return None
            members = member.get("members")
            if not isinstance(members, dict):
                return None
            member = members.get(part)
        return member

    def __repr__(self) -> str:
        return "Scope[" + ", ".join(self.get_own_members()) + "]"
