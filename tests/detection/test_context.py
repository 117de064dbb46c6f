"""Tests for enclosing function names."""

import pytest

from trackscan.scanning.treesitter_parser import TREE_SITTER_AVAILABLE


@pytest.fixture
def function_of(scan_source):
    def _function_of(code, path="src/app.js"):
        sites = scan_source(code, path=path)
        assert len(sites) == 1
        return sites[0].function

    return _function_of


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestFunctionNames:
    def test_function_declaration(self, function_of):
        assert function_of("function checkout() { analytics.track('e'); }") == "checkout"

    def test_arrow_assigned_to_const(self, function_of):
        assert function_of("export const checkout = async () => { analytics.track('e'); };") == "checkout"

    def test_function_expression_assigned(self, function_of):
        assert function_of("const checkout3 = function () { analytics.track('e'); };") == "checkout3"

    def test_class_method(self, function_of):
        assert function_of("class A { trackSnowplow() { analytics.track('e'); } }") == "trackSnowplow"

    def test_class_field_arrow(self, function_of):
        assert function_of("class A { handleOpen = () => { analytics.track('e'); }; }") == "handleOpen"

    def test_object_pair_and_method(self, function_of):
        assert function_of("const o = { send: () => analytics.track('e') };") == "send"
        assert function_of("const o = { send() { analytics.track('e'); } };") == "send"

    def test_innermost_named_function_wins(self, function_of):
        code = """
            function outer() {
              function inner() {
                analytics.track('e');
              }
            }
        """
        assert function_of(code) == "inner"

    def test_anonymous_callback_uses_enclosing_name(self, function_of):
        code = """
            function load(items) {
              items.forEach((item) => analytics.track('e'));
            }
        """
        assert function_of(code) == "load"

    def test_module_level_has_no_function(self, function_of):
        assert function_of("analytics.track('e');") is None


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestReactHooks:
    def test_hook_inside_component(self, function_of):
        code = """
            function PrePaymentDashboard() {
              useEffect(() => {
                analytics.track('ViewedEligibilityResults');
              }, []);
              return null;
            }
        """
        assert function_of(code) == "PrePaymentDashboard.useEffect"

    def test_hook_inside_arrow_component(self, function_of):
        code = """
            const Dashboard = () => {
              const onClick = useCallback(() => analytics.track('clicked'), []);
              return <button onClick={onClick} />;
            };
        """
        assert function_of(code, path="src/Dashboard.jsx") == "Dashboard.useCallback"

    def test_hook_at_module_level(self, function_of):
        assert function_of("useEffect(() => { analytics.track('e'); });") == "useEffect"

    def test_named_callback_inside_hook(self, function_of):
        code = """
            function Page() {
              useEffect(() => {
                function report() {
                  analytics.track('e');
                }
                report();
              }, []);
            }
        """
        assert function_of(code) == "report"
