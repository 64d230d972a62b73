"""Data contract for the model payload consumed by the rules engine.

The model output is loosely structured. Required top-level objects are
validated strictly; optional content blocks are validated one by one and a
block that does not fit its schema is treated as absent instead of failing
the whole payload.
"""

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


class UXModeKind(str, Enum):
    INFORMATIONAL = "informational"
    CLARIFICATION = "clarification"
    EMERGENCY = "emergency"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SafetyLevel(str, Enum):
    INFORMATIONAL = "informational"
    CAUTION = "caution"
    EMERGENCY = "emergency"


class PrimaryIntent(str, Enum):
    """Intent labels the model is instructed to emit verbatim."""

    TRIAGE_URGENT = "Triage (Urgent)"
    MEDICATION_GUIDANCE = "Medication Guidance"
    EXPLAIN = "Explain"
    NAVIGATE_CARE_SYSTEM = "Navigate the Care System"
    PLANNING_PREVENTION = "Planning & Prevention"
    CHRONIC_CONDITION_MANAGEMENT = "Chronic Condition Management"
    OFF_TOPIC = "Off-Topic"


class ComponentType(str, Enum):
    SUMMARY = "summary"
    SAFETY_ALERT = "safety_alert"
    CLARIFYING_QUESTION = "clarifying_question"
    CHECKLIST = "checklist"
    CTA = "cta"
    SOURCES = "sources"
    RETURN_TO_CONVERSATION = "return_to_conversation"


def _text_or_empty(value: Any) -> Any:
    # Free-text explanations are optional; null or non-text reads as empty.
    return value if isinstance(value, str) else ""


class ContractModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class IntentDetection(ContractModel):
    primary_intent: str
    secondary_intents: list[str] = Field(default_factory=list)
    risk_level: RiskLevel
    reasoning: str = ""

    @field_validator("secondary_intents", mode="before")
    @classmethod
    def _loose_secondary_intents(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, str)]

    @field_validator("reasoning", mode="before")
    @classmethod
    def _loose_reasoning(cls, value: Any) -> Any:
        return _text_or_empty(value)

    @property
    def intent(self) -> Optional[PrimaryIntent]:
        """Resolve the free-text label to a known intent, or None."""
        try:
            return PrimaryIntent(self.primary_intent)
        except ValueError:
            return None


class UXMode(ContractModel):
    mode: UXModeKind
    reason: str = ""

    @field_validator("reason", mode="before")
    @classmethod
    def _loose_reason(cls, value: Any) -> Any:
        return _text_or_empty(value)


class SafetyAlert(ContractModel):
    level: SafetyLevel
    title: Optional[str] = None
    message: str


class ClarifyingQuestion(ContractModel):
    question: str
    options: list[str]
    allows_exit: Optional[bool] = None


class Checklist(ContractModel):
    heading: str
    items: list[str]


class CTA(ContractModel):
    primary: str
    secondary: Optional[str] = None

    @field_validator("secondary", mode="before")
    @classmethod
    def _blank_secondary(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Source(ContractModel):
    title: str
    site_name: str = ""
    url: str
    description: Optional[str] = None
    image_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _apply_legacy_aliases(cls, data: Any) -> Any:
        # Older payloads used name/note.
        if isinstance(data, dict):
            data = dict(data)
            if not data.get("title") and data.get("name"):
                data["title"] = data["name"]
            if not data.get("description") and data.get("note"):
                data["description"] = data["note"]
            if not isinstance(data.get("site_name"), str):
                data["site_name"] = ""
        return data


class ResponseContent(ContractModel):
    summary: Optional[str] = None
    safety_alert: Optional[SafetyAlert] = None
    clarifying_question: Optional[ClarifyingQuestion] = None
    checklist: Optional[Checklist] = None
    cta: Optional[CTA] = None
    sources: Optional[list[Source]] = None

    @field_validator("summary", mode="before")
    @classmethod
    def _blank_summary(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            return None
        return value

    @field_validator("safety_alert", "clarifying_question", "checklist", "cta", mode="wrap")
    @classmethod
    def _drop_malformed_block(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(value)
        except ValidationError as exc:
            logger.debug(
                "Dropping malformed content block",
                extra={"block": info.field_name, "errors": exc.error_count()},
            )
            return None

    @field_validator("sources", mode="before")
    @classmethod
    def _drop_malformed_sources(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return None
        kept: list[Source] = []
        for item in value:
            try:
                kept.append(Source.model_validate(item))
            except ValidationError:
                logger.debug("Dropping malformed source entry")
        return kept or None


class AIResponse(ContractModel):
    """One parsed model response: classification, UX mode and raw content."""

    intent_detection: IntentDetection
    ux_mode: UXMode
    response_content: ResponseContent = Field(default_factory=ResponseContent)

    @model_validator(mode="before")
    @classmethod
    def _accept_structured_response(cls, data: Any) -> Any:
        if isinstance(data, dict) and "response_content" not in data:
            if "structured_response" in data:
                data = dict(data)
                data["response_content"] = data.pop("structured_response")
        return data

    @field_validator("response_content", mode="before")
    @classmethod
    def _missing_content(cls, value: Any) -> Any:
        if not isinstance(value, (dict, ResponseContent)):
            return {}
        return value
