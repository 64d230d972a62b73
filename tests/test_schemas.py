"""Tests for the model payload contract."""

import pytest
from pydantic import ValidationError

from remedy_ux.pipeline.schemas import (
    AIResponse,
    PrimaryIntent,
    ResponseContent,
    SafetyLevel,
    Source,
    UXModeKind,
)


def _payload(content=None, **overrides) -> dict:
    data = {
        "intent_detection": {"primary_intent": "Explain", "risk_level": "low", "reasoning": ""},
        "ux_mode": {"mode": "informational", "reason": ""},
        "response_content": content if content is not None else {},
    }
    data.update(overrides)
    return data


class TestAIResponse:
    def test_minimal_payload(self):
        response = AIResponse.model_validate(_payload())
        assert response.ux_mode.mode == UXModeKind.INFORMATIONAL
        assert response.response_content == ResponseContent()

    def test_missing_content_is_empty(self):
        data = _payload()
        del data["response_content"]
        response = AIResponse.model_validate(data)
        assert response.response_content.summary is None

    def test_null_content_is_empty(self):
        response = AIResponse.model_validate(_payload(response_content=None))
        assert response.response_content == ResponseContent()

    def test_structured_response_alias(self):
        data = _payload()
        del data["response_content"]
        data["structured_response"] = {"summary": "Hello"}
        response = AIResponse.model_validate(data)
        assert response.response_content.summary == "Hello"

    def test_missing_ux_mode_raises(self):
        data = _payload()
        del data["ux_mode"]
        with pytest.raises(ValidationError):
            AIResponse.model_validate(data)

    def test_null_secondary_intents_read_as_empty(self):
        response = AIResponse.model_validate(
            _payload(
                intent_detection={
                    "primary_intent": "Explain",
                    "secondary_intents": None,
                    "risk_level": "low",
                }
            )
        )
        assert response.intent_detection.secondary_intents == []

    def test_non_string_secondary_intents_dropped(self):
        response = AIResponse.model_validate(
            _payload(
                intent_detection={
                    "primary_intent": "Explain",
                    "secondary_intents": ["Medication Guidance", 3, None],
                    "risk_level": "low",
                }
            )
        )
        assert response.intent_detection.secondary_intents == ["Medication Guidance"]

    def test_null_reasoning_reads_as_empty(self):
        response = AIResponse.model_validate(
            _payload(
                intent_detection={"primary_intent": "Explain", "risk_level": "low", "reasoning": None}
            )
        )
        assert response.intent_detection.reasoning == ""

    def test_null_mode_reason_reads_as_empty(self):
        response = AIResponse.model_validate(
            _payload(ux_mode={"mode": "emergency", "reason": None})
        )
        assert response.ux_mode.mode == UXModeKind.EMERGENCY
        assert response.ux_mode.reason == ""

    def test_unknown_mode_raises(self):
        with pytest.raises(ValidationError):
            AIResponse.model_validate(_payload(ux_mode={"mode": "panic", "reason": ""}))


class TestIntent:
    @pytest.mark.parametrize("label", [intent.value for intent in PrimaryIntent])
    def test_known_labels_resolve(self, label):
        response = AIResponse.model_validate(
            _payload(intent_detection={"primary_intent": label, "risk_level": "low"})
        )
        assert response.intent_detection.intent is PrimaryIntent(label)

    def test_unknown_label_is_none(self):
        response = AIResponse.model_validate(
            _payload(intent_detection={"primary_intent": "Urgent triage", "risk_level": "high"})
        )
        assert response.intent_detection.intent is None
        assert response.intent_detection.primary_intent == "Urgent triage"


class TestLenientContent:
    def test_malformed_alert_dropped(self):
        content = ResponseContent.model_validate(
            {"summary": "Text", "safety_alert": {"level": "severe", "message": "x"}}
        )
        assert content.safety_alert is None
        assert content.summary == "Text"

    def test_malformed_blocks_dropped_independently(self):
        content = ResponseContent.model_validate(
            {
                "clarifying_question": {"question": "Which?"},
                "checklist": "do things",
                "cta": {"secondary": "Later"},
                "safety_alert": {"level": "caution", "message": "Careful"},
            }
        )
        assert content.clarifying_question is None
        assert content.checklist is None
        assert content.cta is None
        assert content.safety_alert.level == SafetyLevel.CAUTION

    def test_blank_summary_is_absent(self):
        assert ResponseContent.model_validate({"summary": "   "}).summary is None
        assert ResponseContent.model_validate({"summary": 42}).summary is None

    def test_blank_secondary_is_absent(self):
        content = ResponseContent.model_validate({"cta": {"primary": "Go", "secondary": ""}})
        assert content.cta.secondary is None

    def test_invalid_sources_skipped(self):
        content = ResponseContent.model_validate(
            {
                "sources": [
                    {"title": "Good", "site_name": "mayo", "url": "https://a"},
                    {"title": "No url"},
                    "not a source",
                ]
            }
        )
        assert [source.title for source in content.sources] == ["Good"]

    def test_all_invalid_sources_is_absent(self):
        assert ResponseContent.model_validate({"sources": [{"title": "x"}]}).sources is None
        assert ResponseContent.model_validate({"sources": "nope"}).sources is None

    def test_extra_keys_ignored(self):
        content = ResponseContent.model_validate({"summary": "Text", "mood": "calm"})
        assert content.summary == "Text"


class TestSource:
    def test_legacy_aliases(self):
        source = Source.model_validate({"name": "CDC", "url": "https://cdc.gov", "note": "Flu"})
        assert source.title == "CDC"
        assert source.description == "Flu"

    def test_null_site_name_reads_as_empty(self):
        source = Source.model_validate({"title": "T", "site_name": None, "url": "https://x"})
        assert source.site_name == ""

    def test_title_wins_over_name(self):
        source = Source.model_validate(
            {"title": "Real", "name": "Legacy", "site_name": "x", "url": "https://x"}
        )
        assert source.title == "Real"
