"""Shared pipeline result models."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union

from pydantic import BaseModel

from remedy_ux.pipeline.schemas import CTA, Checklist, ClarifyingQuestion, ComponentType, SafetyAlert, Source


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_dump(item) for item in value]
    return value


class _Component:
    __slots__ = ()

    type: ClassVar[ComponentType]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "content": _dump(self.content)}


@dataclass(slots=True, frozen=True)
class SummaryComponent(_Component):
    type: ClassVar[ComponentType] = ComponentType.SUMMARY
    content: str


@dataclass(slots=True, frozen=True)
class SafetyAlertComponent(_Component):
    type: ClassVar[ComponentType] = ComponentType.SAFETY_ALERT
    content: SafetyAlert


@dataclass(slots=True, frozen=True)
class ClarifyingQuestionComponent(_Component):
    type: ClassVar[ComponentType] = ComponentType.CLARIFYING_QUESTION
    content: ClarifyingQuestion


@dataclass(slots=True, frozen=True)
class ChecklistComponent(_Component):
    type: ClassVar[ComponentType] = ComponentType.CHECKLIST
    content: Checklist


@dataclass(slots=True, frozen=True)
class CTAComponent(_Component):
    type: ClassVar[ComponentType] = ComponentType.CTA
    content: CTA


@dataclass(slots=True, frozen=True)
class SourcesComponent(_Component):
    type: ClassVar[ComponentType] = ComponentType.SOURCES
    content: tuple[Source, ...]


@dataclass(slots=True, frozen=True)
class ReturnToConversationComponent(_Component):
    type: ClassVar[ComponentType] = ComponentType.RETURN_TO_CONVERSATION
    content: None = None


UIComponent = Union[
    SummaryComponent,
    SafetyAlertComponent,
    ClarifyingQuestionComponent,
    ChecklistComponent,
    CTAComponent,
    SourcesComponent,
    ReturnToConversationComponent,
]


@dataclass(slots=True)
class Guardrails:
    """What the caller and UI may do next, plus the audit trail for one assembly."""

    triage_required: bool
    free_text_allowed: bool
    follow_up_questions_allowed: bool
    escalation_required: bool
    allowed_components: list[str] = field(default_factory=list)
    blocked_components: list[str] = field(default_factory=list)
    applied_rules: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ExitState:
    waiting_for_structured_input: bool
    returns_to_free_text: bool


@dataclass(slots=True)
class FinalUI:
    components: list[UIComponent] = field(default_factory=list)

    def types(self) -> list[str]:
        return [component.type.value for component in self.components]

    def find(self, component_type: ComponentType) -> Optional[UIComponent]:
        for component in self.components:
            if component.type == component_type:
                return component
        return None


@dataclass(slots=True)
class BuildResult:
    """Response produced by the rules engine."""

    final_ui: FinalUI
    guardrails: Guardrails
    exit_state: ExitState

    def to_dict(self) -> dict[str, Any]:
        guardrails = self.guardrails
        return {
            "final_ui": {"components": [c.to_dict() for c in self.final_ui.components]},
            "guardrails": {
                "triage_required": guardrails.triage_required,
                "free_text_allowed": guardrails.free_text_allowed,
                "follow_up_questions_allowed": guardrails.follow_up_questions_allowed,
                "escalation_required": guardrails.escalation_required,
                "allowed_components": list(guardrails.allowed_components),
                "blocked_components": list(guardrails.blocked_components),
                "applied_rules": list(guardrails.applied_rules),
            },
            "exit_state": {
                "waiting_for_structured_input": self.exit_state.waiting_for_structured_input,
                "returns_to_free_text": self.exit_state.returns_to_free_text,
            },
        }
