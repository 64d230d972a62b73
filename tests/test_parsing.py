"""Tests for model output parsing."""

import json

from remedy_ux.pipeline.parsing import parse_ai_response
from remedy_ux.pipeline.schemas import UXModeKind

PAYLOAD = {
    "intent_detection": {"primary_intent": "Explain", "risk_level": "low", "reasoning": "r"},
    "ux_mode": {"mode": "informational", "reason": "r"},
    "response_content": {"summary": "Hello"},
}


class TestParseAIResponse:
    def test_plain_json(self):
        response = parse_ai_response(json.dumps(PAYLOAD))
        assert response is not None
        assert response.ux_mode.mode == UXModeKind.INFORMATIONAL
        assert response.response_content.summary == "Hello"

    def test_fenced_json(self):
        raw = "```json\n" + json.dumps(PAYLOAD, indent=2) + "\n```"
        response = parse_ai_response(raw)
        assert response is not None
        assert response.intent_detection.primary_intent == "Explain"

    def test_json_wrapped_in_prose(self):
        raw = "Here is the result:\n" + json.dumps(PAYLOAD) + "\nHope that helps."
        response = parse_ai_response(raw)
        assert response is not None

    def test_trailing_comma_repaired(self):
        raw = json.dumps(PAYLOAD)[:-1] + ",}"
        response = parse_ai_response(raw)
        assert response is not None
        assert response.response_content.summary == "Hello"

    def test_null_optional_subfields_kept(self):
        data = {
            "intent_detection": {
                "primary_intent": "Triage (Urgent)",
                "secondary_intents": None,
                "risk_level": "high",
                "reasoning": None,
            },
            "ux_mode": {"mode": "emergency", "reason": None},
            "response_content": {
                "safety_alert": {"level": "emergency", "message": "Call 911."},
                "cta": {"primary": "Call emergency services"},
            },
        }
        response = parse_ai_response(json.dumps(data))
        assert response is not None
        assert response.ux_mode.mode == UXModeKind.EMERGENCY
        assert response.intent_detection.secondary_intents == []
        assert response.intent_detection.reasoning == ""
        assert response.ux_mode.reason == ""

    def test_empty_text(self):
        assert parse_ai_response("") is None
        assert parse_ai_response("   \n") is None

    def test_missing_required_fields(self):
        assert parse_ai_response(json.dumps({"response_content": {"summary": "x"}})) is None

    def test_non_object(self):
        assert parse_ai_response("[1, 2, 3]") is None

    def test_failure_is_logged(self, caplog):
        caplog.set_level("WARNING")
        assert parse_ai_response(json.dumps({"ux_mode": {"mode": "informational"}})) is None
        assert "failed validation" in caplog.text
