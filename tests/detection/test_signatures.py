"""Tests for custom function signatures."""

import pytest

from trackscan.detection.signatures import (
    CustomFunctionSignature,
    SignatureParameter,
    load_signatures,
    parse_signature,
    signature_from_mapping,
)
from trackscan.exceptions import ConfigurationError, InvalidSignatureError


class TestParseSignature:
    """Compact string form."""

    def test_bare_name_defaults(self):
        sig = parse_signature("trackEvent")
        assert sig.function_name == "trackEvent"
        assert sig.event_index == 0
        assert sig.properties_index == 1
        assert sig.extra_parameters == []

    def test_extra_parameters(self):
        sig = parse_signature("CustomModule.track(userId, EVENT_NAME, PROPERTIES)")
        assert sig.name_parts == ("CustomModule", "track")
        assert sig.event_index == 1
        assert sig.properties_index == 2
        assert sig.extra_parameters == [(0, "userId")]

    def test_tokens_are_case_insensitive(self):
        sig = parse_signature("send(event_name, properties)")
        assert sig.event_index == 0
        assert sig.properties_index == 1

    def test_properties_optional(self):
        sig = parse_signature("trackView(EVENT_NAME)")
        assert sig.properties_index is None

    def test_whitespace_tolerated(self):
        sig = parse_signature("  track ( EVENT_NAME , PROPERTIES , email )  ")
        assert sig.extra_parameters == [(2, "email")]

    def test_str_renders_compact_form(self):
        text = "a.b(userId, EVENT_NAME, PROPERTIES)"
        assert str(parse_signature(text)) == text

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "track(",
            "1track",
            "a..b",
            "track(userId, PROPERTIES)",
            "track(EVENT_NAME, EVENT_NAME)",
            "track(EVENT_NAME, PROPERTIES, PROPERTIES)",
        ],
    )
    def test_invalid_signatures(self, text):
        with pytest.raises(InvalidSignatureError):
            parse_signature(text)

    def test_error_is_configuration_error(self):
        assert issubclass(InvalidSignatureError, ConfigurationError)


class TestSignatureFromMapping:
    """Structured form."""

    def test_camel_case_keys(self):
        sig = signature_from_mapping(
            {
                "functionName": "CustomModule.track",
                "parameters": [
                    {"name": "userId"},
                    {"name": "eventName", "isEventName": True},
                    {"name": "props", "isProperties": True},
                ],
            }
        )
        assert sig.function_name == "CustomModule.track"
        assert sig.event_index == 1
        assert sig.properties_index == 2

    def test_snake_case_keys(self):
        sig = signature_from_mapping(
            {
                "function_name": "track",
                "parameters": [{"name": "name", "is_event_name": True}],
            }
        )
        assert sig.event_index == 0
        assert sig.properties_index is None

    def test_name_only_mapping(self):
        sig = signature_from_mapping({"function_name": "trackEvent"})
        assert sig.properties_index == 1

    def test_missing_function_name(self):
        with pytest.raises(InvalidSignatureError):
            signature_from_mapping({"parameters": []})

    def test_no_event_parameter(self):
        with pytest.raises(InvalidSignatureError):
            signature_from_mapping({"function_name": "track", "parameters": [{"name": "x"}]})

    def test_parameter_cannot_be_both(self):
        with pytest.raises(InvalidSignatureError):
            CustomFunctionSignature(
                "track", (SignatureParameter("x", is_event_name=True, is_properties=True),)
            )


class TestLoadSignatures:
    def test_mixed_inputs(self):
        ready = parse_signature("a")
        sigs = load_signatures([ready, "b(EVENT_NAME)", {"functionName": "c"}])
        assert [s.function_name for s in sigs] == ["a", "b", "c"]
        assert sigs[0] is ready

    def test_empty(self):
        assert load_signatures(None) == ()
        assert load_signatures([]) == ()

    def test_rejects_other_types(self):
        with pytest.raises(InvalidSignatureError):
            load_signatures([42])
