"""Pytest configuration: ESTree trees parsed with esprima."""

import esprima
import pytest


def _parse_script(source: str) -> dict:
    return esprima.parseScript(source).toDict()


def _parse_module(source: str) -> dict:
    return esprima.parseModule(source).toDict()


def _parse_expression(source: str) -> dict:
    """Tree of the first expression statement in source."""
    return _parse_script(source)["body"][0]["expression"]


@pytest.fixture
def parse_script():
    return _parse_script


@pytest.fixture
def parse_module():
    return _parse_module


@pytest.fixture
def parse_expression():
    return _parse_expression
