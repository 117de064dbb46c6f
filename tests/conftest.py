"""Shared test fixtures for trackscan tests."""

import textwrap
from pathlib import Path

import pytest

from trackscan.detection.constants import ConstantResolver, ScopeIndex
from trackscan.detection.matcher import CallSiteMatcher
from trackscan.detection.nodes import node_text
from trackscan.detection.signatures import load_signatures
from trackscan.scanning.treesitter_parser import TreeSitterParser
from trackscan.scanning.walker import SourceWalker

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _make_walker(custom_functions=(), config=None) -> SourceWalker:
    """Walker over the built-in providers plus the given custom signatures."""
    return SourceWalker(CallSiteMatcher(signatures=load_signatures(custom_functions)), config)


def iter_calls(root):
    """Call expressions in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "call_expression":
            yield node
        stack.extend(reversed(node.children))


def _find_call(root, callee_text: str):
    """First call whose callee source text is ``callee_text``."""
    for node in iter_calls(root):
        if node_text(node.child_by_field_name("function")) == callee_text:
            return node
    raise AssertionError(f"no call to {callee_text!r} in source")


@pytest.fixture
def make_walker():
    """Factory for walkers with optional custom signatures and config."""
    return _make_walker


@pytest.fixture
def find_call():
    """Locate the first call to a given callee in a parsed tree."""
    return _find_call


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def parse():
    """Parse dedented source and return the root node."""
    parser = TreeSitterParser()

    def _parse(code: str, language: str = "javascript"):
        tree = parser.parse(textwrap.dedent(code).encode(), language)
        assert tree is not None, f"{language} grammar not installed"
        assert not tree.root_node.has_error, "fixture source has syntax errors"
        return tree.root_node

    return _parse


@pytest.fixture
def resolver() -> ConstantResolver:
    return ConstantResolver(ScopeIndex())


@pytest.fixture
def scan_source():
    """Run the walker over one in-memory file and return its call sites."""

    def _scan(code: str, path: str = "src/app.js", custom_functions=()):
        result = _make_walker(custom_functions).analyze_source(textwrap.dedent(code), path)
        assert not result.warnings, result.warnings
        return result.call_sites

    return _scan
