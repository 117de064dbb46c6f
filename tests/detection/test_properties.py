"""Tests for property schema inference."""

import pytest

from trackscan.scanning.treesitter_parser import TREE_SITTER_AVAILABLE


@pytest.fixture
def props(scan_source):
    """Properties of the single tracking call in ``code``."""

    def _props(code, path="src/app.js"):
        sites = scan_source(code, path=path)
        assert len(sites) == 1
        return sites[0].properties

    return _props


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestLiteralTypes:
    def test_scalars(self, props):
        result = props(
            """
            analytics.track('e', {
              s: 'x', t: `y`, n: 1.5, neg: -3, b: true, f: false, nil: null, u: undefined,
            });
            """
        )
        types = {name: schema.type for name, schema in result.items()}
        assert types == {
            "s": "string",
            "t": "string",
            "n": "number",
            "neg": "number",
            "b": "boolean",
            "f": "boolean",
            "nil": "null",
            "u": "undefined",
        }

    def test_expressions(self, props):
        result = props(
            """
            analytics.track('e', {
              negated: !ready,
              kind: typeof value,
              total: items.reduce((a, b) => a + b, 0),
              cb: () => {},
              fn: function () {},
              sum: a + b,
            });
            """
        )
        assert result["negated"].type == "boolean"
        assert result["kind"].type == "string"
        assert result["total"].type == "any"
        assert result["cb"].type == "function"
        assert result["fn"].type == "function"
        assert result["sum"].type == "any"

    def test_key_order_is_source_order(self, props):
        result = props("analytics.track('e', { z: 1, a: 2, m: 3 });")
        assert list(result) == ["z", "a", "m"]


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestStructuredTypes:
    def test_nested_object(self, props):
        result = props("analytics.track('e', { address: { city: 'SF', zip: 94105 } });")
        address = result["address"]
        assert address.type == "object"
        assert address.properties["city"].type == "string"
        assert address.properties["zip"].type == "number"

    def test_array_items_follow_first_element(self, props):
        result = props("analytics.track('e', { tags: ['a', 'b'], rows: [{ id: 1 }], none: [] });")
        assert result["tags"].type == "array"
        assert result["tags"].items.type == "string"
        assert result["rows"].items.type == "object"
        assert result["none"].items.type == "any"

    def test_to_dict_shape(self, props):
        result = props("analytics.track('e', { address: { city: 'SF' }, tags: ['a'] });")
        assert result["address"].to_dict() == {
            "type": "object",
            "properties": {"city": {"type": "string"}},
        }
        assert result["tags"].to_dict() == {"type": "array", "items": {"type": "string"}}


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestReferences:
    def test_identifiers(self, props):
        result = props(
            """
            const PLAN = 'pro';
            const COUNT = 5;
            function go(userId) {
              analytics.track('e', { plan: PLAN, count: COUNT, user: userId, other: unknown });
            }
            """
        )
        assert result["plan"].type == "string"
        assert result["count"].type == "number"
        assert result["user"].type == "any"
        assert result["other"].type == "any"

    def test_shorthand(self, props):
        result = props(
            """
            const blah = 5;
            posthog.capture('e', { blah, missing });
            """
        )
        assert result["blah"].type == "number"
        assert result["missing"].type == "any"

    def test_properties_from_constant_object(self, props):
        result = props(
            """
            const payload = { plan: 'pro' };
            analytics.track('e', payload);
            """
        )
        assert result["plan"].type == "string"

    def test_spread_of_constant_object(self, props):
        result = props(
            """
            const BASE = { platform: 'web', plan: 'free' };
            analytics.track('e', { ...BASE, plan: 3 });
            """
        )
        assert list(result) == ["platform", "plan"]
        assert result["plan"].type == "number"

    def test_unknown_spread_and_computed_keys_are_skipped(self, props):
        result = props("analytics.track('e', { ...rest, [key]: 1, ok: 'x' });")
        assert list(result) == ["ok"]

    def test_non_object_properties_argument(self, props):
        assert props("analytics.track('e', buildProps());") == {}

    def test_typescript_wrappers(self, props):
        result = props(
            "analytics.track('e', { id: user!.id, n: (1 as number), s: 'x' as const });",
            path="src/app.ts",
        )
        assert result["n"].type == "number"
        assert result["s"].type == "string"
        assert result["id"].type == "any"
