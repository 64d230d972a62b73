"""Deterministic assembly of the final UI from a model response.

The model decides intent, risk and content. This module decides what the
user actually sees: which blocks are placed, in what order, and what the
UI may accept next. Every suppression or truncation is written to the
applied rules of the result.

Stacking order:
    1. safety_alert (caution/emergency)
    2. summary (not in emergency mode)
    3. safety_alert (informational)
    4. clarifying_question
    5. checklist (not with a clarifying question)
    6. cta
    7. sources (not with a clarifying question)
    8. return_to_conversation (feature flag)
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from remedy_ux.config import Settings, get_settings
from remedy_ux.pipeline.schemas import (
    CTA,
    AIResponse,
    ComponentType,
    PrimaryIntent,
    ResponseContent,
    RiskLevel,
    SafetyLevel,
    UXModeKind,
)
from remedy_ux.pipeline.types import (
    BuildResult,
    ChecklistComponent,
    ClarifyingQuestionComponent,
    CTAComponent,
    ExitState,
    FinalUI,
    Guardrails,
    ReturnToConversationComponent,
    SafetyAlertComponent,
    SourcesComponent,
    SummaryComponent,
    UIComponent,
)

logger = logging.getLogger(__name__)

# Constants
CLARIFYING_LIMIT = 2
CHECKLIST_MIN_ITEMS = 2
CHECKLIST_MAX_ITEMS = 5
SOURCES_MAX = 4

_TOP_ALERT_LEVELS = {SafetyLevel.CAUTION, SafetyLevel.EMERGENCY}


@dataclass(slots=True, frozen=True)
class ModeFlags:
    is_emergency: bool
    is_triage: bool
    clarifying_limit_exceeded: bool
    has_clarifying_question: bool
    suppress_non_essential: bool

    @classmethod
    def derive(cls, response: AIResponse, clarifying_count: int) -> "ModeFlags":
        is_emergency = response.ux_mode.mode == UXModeKind.EMERGENCY
        limit_exceeded = clarifying_count >= CLARIFYING_LIMIT
        question = response.response_content.clarifying_question
        return cls(
            is_emergency=is_emergency,
            is_triage=response.intent_detection.intent is PrimaryIntent.TRIAGE_URGENT,
            clarifying_limit_exceeded=limit_exceeded,
            has_clarifying_question=question is not None and not limit_exceeded,
            suppress_non_essential=is_emergency,
        )


@dataclass(slots=True)
class _Assembly:
    components: list[UIComponent] = field(default_factory=list)
    blocked: list[str] = field(default_factory=list)
    rules: list[str] = field(default_factory=list)

    def place(self, component: UIComponent, rule: Optional[str] = None) -> None:
        self.components.append(component)
        if rule:
            self.rules.append(rule)

    def block(self, component_type: ComponentType, rule: Optional[str] = None) -> None:
        self.blocked.append(component_type.value)
        if rule:
            self.rules.append(rule)


class RulesEngine:
    """Applies stacking, suppression and exclusivity rules in a fixed order."""

    def __init__(self, return_to_conversation_enabled: bool = False) -> None:
        self.return_to_conversation_enabled = return_to_conversation_enabled

    @classmethod
    def from_settings(cls, settings: Settings) -> "RulesEngine":
        return cls(return_to_conversation_enabled=settings.enable_return_to_conversation)

    def assemble(
        self,
        response: Union[AIResponse, Mapping[str, Any]],
        clarifying_count: int = 0,
    ) -> BuildResult:
        """Build the final UI for one model response.

        Args:
            response: Parsed model response, or a mapping to validate as one.
            clarifying_count: Clarifying questions already asked in a row in
                this conversation.

        Returns:
            BuildResult with ordered components, guardrails and exit state.
        """
        if not isinstance(response, AIResponse):
            response = AIResponse.model_validate(response)

        content = response.response_content
        flags = ModeFlags.derive(response, clarifying_count)
        assembly = _Assembly()

        if content.clarifying_question is not None and flags.clarifying_limit_exceeded:
            assembly.rules.append(
                f"Clarifying question stripped: limit exceeded ({CLARIFYING_LIMIT}/{CLARIFYING_LIMIT})"
            )
        if flags.suppress_non_essential:
            assembly.rules.append("Emergency mode: suppressing non-essential UI")

        self._place_top_alert(content, assembly)
        self._place_summary(content, flags, assembly)
        self._place_informational_alert(content, assembly)
        self._place_clarifying_question(content, flags, assembly)
        self._place_checklist(content, flags, assembly)
        self._place_cta(content, flags, assembly)
        self._place_sources(content, flags, assembly)
        self._place_return_to_conversation(content, flags, assembly)

        final_ui = FinalUI(components=assembly.components)
        guardrails = Guardrails(
            triage_required=flags.is_triage,
            free_text_allowed=not flags.has_clarifying_question,
            follow_up_questions_allowed=not flags.is_emergency,
            escalation_required=(
                flags.is_emergency or response.intent_detection.risk_level == RiskLevel.HIGH
            ),
            allowed_components=final_ui.types(),
            blocked_components=assembly.blocked,
            applied_rules=assembly.rules,
        )
        question = content.clarifying_question
        exit_state = ExitState(
            waiting_for_structured_input=(
                flags.has_clarifying_question and not flags.suppress_non_essential
            ),
            returns_to_free_text=(
                not flags.has_clarifying_question
                or (question is not None and question.allows_exit is True)
            ),
        )

        logger.debug(
            "Assembled final UI",
            extra={
                "mode": response.ux_mode.mode.value,
                "placed": guardrails.allowed_components,
                "blocked": guardrails.blocked_components,
            },
        )
        return BuildResult(final_ui=final_ui, guardrails=guardrails, exit_state=exit_state)

    def _place_top_alert(self, content: ResponseContent, assembly: _Assembly) -> None:
        alert = content.safety_alert
        if alert is not None and alert.level in _TOP_ALERT_LEVELS:
            assembly.place(
                SafetyAlertComponent(alert),
                f"Safety alert ({alert.level.value}) placed at top",
            )

    def _place_summary(
        self, content: ResponseContent, flags: ModeFlags, assembly: _Assembly
    ) -> None:
        if content.summary is None:
            return
        if flags.is_emergency:
            assembly.block(ComponentType.SUMMARY, "Summary blocked: emergency mode")
        else:
            assembly.place(SummaryComponent(content.summary))

    def _place_informational_alert(self, content: ResponseContent, assembly: _Assembly) -> None:
        alert = content.safety_alert
        if alert is not None and alert.level == SafetyLevel.INFORMATIONAL:
            assembly.place(SafetyAlertComponent(alert), "Informational alert placed below summary")

    def _place_clarifying_question(
        self, content: ResponseContent, flags: ModeFlags, assembly: _Assembly
    ) -> None:
        question = content.clarifying_question
        if question is None:
            return
        if flags.has_clarifying_question and not flags.suppress_non_essential:
            assembly.place(ClarifyingQuestionComponent(question), "Clarifying question included")
        elif flags.suppress_non_essential:
            assembly.block(
                ComponentType.CLARIFYING_QUESTION,
                "Clarifying question suppressed (emergency mode)",
            )
        else:
            # Limit already recorded when the flags were derived.
            assembly.block(ComponentType.CLARIFYING_QUESTION)

    def _place_checklist(
        self, content: ResponseContent, flags: ModeFlags, assembly: _Assembly
    ) -> None:
        checklist = content.checklist
        if checklist is None:
            return
        if flags.suppress_non_essential:
            assembly.block(ComponentType.CHECKLIST, "Checklist suppressed (emergency mode)")
            return
        if flags.has_clarifying_question:
            assembly.block(ComponentType.CHECKLIST, "Checklist blocked: clarifying question present")
            return

        items = checklist.items[:CHECKLIST_MAX_ITEMS]
        if len(checklist.items) > CHECKLIST_MAX_ITEMS:
            assembly.rules.append(
                f"Checklist truncated to {CHECKLIST_MAX_ITEMS} items ({len(checklist.items)} provided)"
            )
        if len(items) < CHECKLIST_MIN_ITEMS:
            assembly.block(
                ComponentType.CHECKLIST,
                f"Checklist dropped: {len(items)} item(s), minimum is {CHECKLIST_MIN_ITEMS}",
            )
            return
        assembly.place(
            ChecklistComponent(checklist.model_copy(update={"items": items})),
            f"Checklist included ({len(items)} items)",
        )

    def _place_cta(self, content: ResponseContent, flags: ModeFlags, assembly: _Assembly) -> None:
        cta = content.cta
        if cta is None:
            return
        if flags.has_clarifying_question:
            assembly.block(ComponentType.CTA, "CTA blocked: clarifying question present")
            return
        if flags.is_emergency:
            # Exactly one action in an emergency, whatever the triage state.
            assembly.place(
                CTAComponent(CTA(primary=cta.primary)),
                "CTA included: emergency mode (primary only)",
            )
            return

        if cta.secondary and not flags.is_triage:
            assembly.place(
                CTAComponent(CTA(primary=cta.primary, secondary=cta.secondary)),
                "CTA included with secondary action",
            )
        elif cta.secondary:
            assembly.place(
                CTAComponent(CTA(primary=cta.primary)),
                "Secondary CTA blocked: triage mode",
            )
        else:
            assembly.place(CTAComponent(CTA(primary=cta.primary)), "CTA included (primary only)")

    def _place_sources(
        self, content: ResponseContent, flags: ModeFlags, assembly: _Assembly
    ) -> None:
        sources = content.sources
        if not sources:
            return
        if flags.suppress_non_essential:
            assembly.block(ComponentType.SOURCES, "Sources suppressed (emergency mode)")
            return
        if flags.has_clarifying_question:
            assembly.block(ComponentType.SOURCES, "Sources blocked: clarifying question present")
            return

        kept = tuple(sources[:SOURCES_MAX])
        if len(sources) > SOURCES_MAX:
            assembly.rules.append(f"Sources truncated to {SOURCES_MAX} ({len(sources)} provided)")
        if not kept:
            assembly.block(ComponentType.SOURCES, "Sources dropped: none left after truncation")
            return
        assembly.place(SourcesComponent(kept), f"Sources included ({len(kept)})")

    def _place_return_to_conversation(
        self, content: ResponseContent, flags: ModeFlags, assembly: _Assembly
    ) -> None:
        if not self.return_to_conversation_enabled:
            return
        question = content.clarifying_question
        if (
            flags.has_clarifying_question
            and question is not None
            and question.allows_exit
            and not flags.suppress_non_essential
        ):
            assembly.place(
                ReturnToConversationComponent(),
                "Return to conversation option included",
            )


def assemble(
    response: Union[AIResponse, Mapping[str, Any]],
    clarifying_count: int = 0,
) -> BuildResult:
    """Assemble with the engine configured from application settings."""
    return RulesEngine.from_settings(get_settings()).assemble(response, clarifying_count)
