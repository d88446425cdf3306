"""Errors raised by the walker, analyzer, scope and formatter."""

from __future__ import annotations


class AnalyzerError(Exception):
    """Base error for estree_analyzer."""

    def __init__(self, msg: str, node: dict | None = None):
        super().__init__(msg)
        self.msg = msg
        self.node = node


class UnsupportedConstructError(AnalyzerError):
    """No handler for a node kind or dispatch group, or a rejected construct."""


class DuplicateDeclarationError(AnalyzerError):
    """A name was declared twice directly within one scope."""

    def __init__(self, name: str):
        super().__init__("'" + name + "' already defined")
        self.name = name
