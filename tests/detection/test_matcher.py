"""Tests for call-site classification."""

import pytest

from trackscan.detection.matcher import CallSiteMatcher
from trackscan.scanning.treesitter_parser import TREE_SITTER_AVAILABLE


def only(call_sites):
    assert len(call_sites) == 1, call_sites
    return call_sites[0]


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestBuiltinProviders:
    """Every provider's canonical shape with a literal event name."""

    @pytest.mark.parametrize(
        "code,provider",
        [
            ("gtag('event', 'purchase', { value: 1 });", "googleanalytics"),
            ("analytics.track('purchase', { value: 1 });", "segment"),
            ("mixpanel.track('purchase', { value: 1 });", "mixpanel"),
            ("amplitude.track('purchase', { value: 1 });", "amplitude"),
            ("rudderanalytics.track('purchase', { value: 1 });", "rudderstack"),
            (
                "mParticle.logEvent('purchase', mParticle.EventType.Transaction, { value: 1 });",
                "mparticle",
            ),
            ("posthog.capture('purchase', { value: 1 });", "posthog"),
            ("pendo.track('purchase', { value: 1 });", "pendo"),
            ("heap.track('purchase', { value: 1 });", "heap"),
            ("datadogRum.addAction('purchase', { value: 1 });", "datadog"),
            ("tracker.track(buildStructEvent({ action: 'purchase', value: 1 }));", "snowplow"),
        ],
    )
    def test_canonical_shape(self, scan_source, code, provider):
        site = only(scan_source(code))
        assert site.event_name == "purchase"
        assert site.source == provider
        assert site.properties["value"].type == "number"

    def test_properties_are_optional(self, scan_source):
        site = only(scan_source("analytics.track('page_viewed');"))
        assert site.properties == {}

    def test_gtag_requires_event_command(self, scan_source):
        assert scan_source("gtag('config', 'G-123', { send_page_view: false });") == []
        assert scan_source("gtag('event');") == []

    def test_mparticle_ignores_event_type_argument(self, scan_source):
        site = only(scan_source("mparticle.logEvent('buy', mparticle.EventType.Other, { sku: 'a' });"))
        assert list(site.properties) == ["sku"]

    def test_snowplow_action_is_not_a_property(self, scan_source):
        site = only(
            scan_source(
                """
                tracker.track(buildStructEvent({
                  action: 'someevent',
                  category: 'purchase',
                  value: this.value,
                }));
                """
            )
        )
        assert site.event_name == "someevent"
        assert set(site.properties) == {"category", "value"}
        assert site.properties["value"].type == "any"

    def test_snowplow_struct_event_via_constant(self, scan_source):
        site = only(
            scan_source(
                """
                const ev = buildStructEvent({ action: 'viewed', category: 'page' });
                tracker.track(ev);
                """
            )
        )
        assert site.event_name == "viewed"

    def test_snowplow_needs_struct_event(self, scan_source):
        assert scan_source("tracker.track('plain', { a: 1 });") == []


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestMemberNesting:
    def test_window_prefixed_provider(self, scan_source):
        site = only(scan_source("window.DD_RUM.addAction('user_login', { success: true });"))
        assert site.source == "datadog"
        assert site.properties["success"].type == "boolean"

    def test_this_prefixed_provider(self, scan_source):
        site = only(scan_source("class A { go() { this.analytics.track('went'); } }"))
        assert site.source == "segment"

    def test_deeper_chains_never_match(self, scan_source):
        assert scan_source("app.services.analytics.track('x');") == []
        assert scan_source("getClient().analytics.track('x');") == []

    def test_unknown_object(self, scan_source):
        assert scan_source("logger.track('x');") == []

    def test_computed_method_never_matches(self, scan_source):
        assert scan_source("analytics['track']('x');") == []


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestEventNames:
    def test_constant_event_name(self, scan_source):
        site = only(
            scan_source(
                """
                const EVENTS = Object.freeze({ SIGN_UP: 'signed_up' });
                analytics.track(EVENTS.SIGN_UP);
                """
            )
        )
        assert site.event_name == "signed_up"

    def test_unresolved_event_name_drops_call(self, scan_source):
        code = """
            analytics.track(getName(), { a: 1 });
            analytics.track(`page_${name}`);
            analytics.track(EVENTS[key]);
        """
        assert scan_source(code) == []

    def test_empty_event_name_drops_call(self, scan_source):
        assert scan_source("analytics.track('');") == []


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestDataLayer:
    @pytest.mark.parametrize(
        "target", ["dataLayer", "window.dataLayer"]
    )
    def test_push(self, scan_source, target):
        site = only(scan_source(f"{target}.push({{ event: 'x', a: 1 }});"))
        assert site.event_name == "x"
        assert site.source == "gtm"
        assert list(site.properties) == ["a"]
        assert site.properties["a"].type == "number"

    def test_quoted_keys(self, scan_source):
        site = only(scan_source("dataLayer.push({ 'event': 'formSubmission', 'formId': 'contact' });"))
        assert site.event_name == "formSubmission"
        assert site.properties["formId"].type == "string"

    def test_push_via_constant_object(self, scan_source):
        site = only(
            scan_source(
                """
                const payload = { event: 'signup', plan: 'pro' };
                dataLayer.push(payload);
                """
            )
        )
        assert site.event_name == "signup"

    def test_push_without_event_key(self, scan_source):
        assert scan_source("dataLayer.push({ ecommerce: null });") == []

    def test_other_arrays_are_not_data_layers(self, scan_source):
        assert scan_source("items.push({ event: 'x' });") == []


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestCustomSignatures:
    def test_structured_signature(self, scan_source):
        signature = {
            "functionName": "CustomModule.track",
            "parameters": [
                {"name": "userId"},
                {"name": "eventName", "isEventName": True},
                {"name": "props", "isProperties": True},
            ],
        }
        site = only(
            scan_source(
                "CustomModule.track('u1', 'custom_event', { foo: 'bar' });",
                custom_functions=[signature],
            )
        )
        assert site.event_name == "custom_event"
        assert site.source == "custom"
        assert site.properties["foo"].type == "string"

    def test_bare_name(self, scan_source):
        site = only(scan_source("trackEvent('clicked', { id: 3 });", custom_functions=["trackEvent"]))
        assert site.event_name == "clicked"
        assert site.properties["id"].type == "number"

    def test_extra_parameters_become_properties(self, scan_source):
        site = only(
            scan_source(
                "track4('user202', 'custom_event4', { city: 'SF' }, { foo: 'bar' }, 'a@b.c');",
                custom_functions=["track4(userId, EVENT_NAME, userAddress, PROPERTIES, userEmail)"],
            )
        )
        assert list(site.properties) == ["userId", "userAddress", "userEmail", "foo"]
        assert site.properties["userId"].type == "string"
        assert site.properties["userAddress"].type == "object"
        assert site.properties["userAddress"].properties["city"].type == "string"

    def test_missing_trailing_arguments(self, scan_source):
        site = only(
            scan_source(
                "send('only_event');",
                custom_functions=["send(EVENT_NAME, PROPERTIES, userEmail)"],
            )
        )
        assert site.properties == {}

    def test_missing_event_argument(self, scan_source):
        assert scan_source("send('u1');", custom_functions=["send(userId, EVENT_NAME)"]) == []

    def test_custom_signature_wins_over_provider(self, scan_source):
        site = only(
            scan_source(
                "analytics.track('user', 'event_name');",
                custom_functions=["analytics.track(userId, EVENT_NAME)"],
            )
        )
        assert site.source == "custom"
        assert site.event_name == "event_name"

    def test_chain_must_match_exactly(self, scan_source):
        assert scan_source("Other.track('x');", custom_functions=["CustomModule.track"]) == []
        assert scan_source("a.CustomModule.track('x');", custom_functions=["CustomModule.track"]) == []


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
class TestMatcherDirect:
    def test_non_call_node(self, parse, resolver):
        root = parse("const a = 1;")
        assert CallSiteMatcher().match(root, resolver) is None

    def test_uses_default_registry(self):
        matcher = CallSiteMatcher()
        assert matcher.registry.get("segment") is not None
        assert matcher.signatures == ()
