"""Fixed scenario table used to score the rules engine end to end.

Covers every UX mode, the known intents, alert placement and severity,
the clarifying question cap, CTA constraints and hybrid questions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from remedy_ux.pipeline.schemas import ComponentType, RiskLevel, SafetyLevel, UXModeKind


class _Unset(Enum):
    TOKEN = "unset"

    def __repr__(self) -> str:
        return "UNSET"


# Expectation not declared; distinct from None, which means "no alert".
UNSET = _Unset.TOKEN


class AlertPosition(str, Enum):
    TOP = "top"
    BELOW_SUMMARY = "below_summary"


@dataclass(slots=True, frozen=True)
class Expectation:
    ux_mode: UXModeKind
    risk_level: RiskLevel
    primary_intent: str
    required_components: tuple[ComponentType, ...]
    free_text_allowed: bool
    forbidden_components: Optional[tuple[ComponentType, ...]] = None
    safety_alert_level: Union[SafetyLevel, None, _Unset] = UNSET
    safety_alert_position: Optional[AlertPosition] = None
    notes: str = ""

    @property
    def checks_safety_alert(self) -> bool:
        return self.safety_alert_level is not UNSET


@dataclass(slots=True, frozen=True)
class Scenario:
    id: int
    name: str
    category: str
    input: str
    description: str
    expectations: Expectation


SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        id=1,
        name="Pure Informational",
        category="Informational Mode",
        input="Why do I feel tired in the afternoon?",
        description="Basic explanation, no action needed. Low risk should stay calm and light.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.LOW,
            primary_intent="Explain",
            required_components=(ComponentType.SUMMARY, ComponentType.SAFETY_ALERT),
            safety_alert_level=SafetyLevel.INFORMATIONAL,
            safety_alert_position=AlertPosition.BELOW_SUMMARY,
            free_text_allowed=True,
            notes="Baseline: conversational with a subtle safety reminder",
        ),
    ),
    Scenario(
        id=2,
        name="Light Safety Note",
        category="Informational Mode",
        input="Is it normal to feel dizzy when standing up?",
        description="Explanation with mild safety awareness. Watch-for alert placement.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.LOW,
            primary_intent="Explain",
            required_components=(ComponentType.SUMMARY,),
            safety_alert_level=SafetyLevel.INFORMATIONAL,
            safety_alert_position=AlertPosition.BELOW_SUMMARY,
            free_text_allowed=True,
            notes="Alert stays subtle, not escalated",
        ),
    ),
    Scenario(
        id=3,
        name="Medication Safety",
        category="Medication Guidance",
        input="Can I take ibuprofen while breastfeeding?",
        description="Medication safety without dosing. Pharmacist routing and restraint.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.MEDIUM,
            primary_intent="Medication Guidance",
            required_components=(
                ComponentType.SUMMARY,
                ComponentType.SAFETY_ALERT,
                ComponentType.CTA,
                ComponentType.SOURCES,
            ),
            safety_alert_level=SafetyLevel.INFORMATIONAL,
            free_text_allowed=True,
            notes="No dosing advice; CTA routes to a pharmacist",
        ),
    ),
    Scenario(
        id=4,
        name="Medication Contraindication",
        category="Medication Guidance",
        input="Is ibuprofen safe if I have stomach ulcers?",
        description="Medication with a risk factor. Alert severity escalation.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.MEDIUM,
            primary_intent="Medication Guidance",
            required_components=(
                ComponentType.SUMMARY,
                ComponentType.SAFETY_ALERT,
                ComponentType.CTA,
            ),
            safety_alert_level=SafetyLevel.CAUTION,
            safety_alert_position=AlertPosition.TOP,
            free_text_allowed=True,
            notes="Alert has a title and sits at the top",
        ),
    ),
    Scenario(
        id=5,
        name="Ambiguous Risk",
        category="Clarification Mode",
        input="I get chest pain sometimes. Should I worry?",
        description="Unclear symptoms that could be serious. Clarification flow activation.",
        expectations=Expectation(
            ux_mode=UXModeKind.CLARIFICATION,
            risk_level=RiskLevel.MEDIUM,
            primary_intent="Triage (Urgent)",
            required_components=(ComponentType.CLARIFYING_QUESTION, ComponentType.SAFETY_ALERT),
            safety_alert_level=SafetyLevel.CAUTION,
            safety_alert_position=AlertPosition.TOP,
            free_text_allowed=False,
            notes="Asks instead of guessing",
        ),
    ),
    Scenario(
        id=6,
        name="Clarification Loop Cap",
        category="Clarification Mode",
        input="I don't feel right lately.",
        description="Vague symptom with missing details. Clarification limits and exit options.",
        expectations=Expectation(
            ux_mode=UXModeKind.CLARIFICATION,
            risk_level=RiskLevel.LOW,
            primary_intent="Triage (Urgent)",
            required_components=(ComponentType.CLARIFYING_QUESTION,),
            free_text_allowed=False,
            notes="Offers an exit option and avoids loops",
        ),
    ),
    Scenario(
        id=7,
        name="Emergency Triage",
        category="Emergency Mode",
        input="I can't breathe and my chest hurts.",
        description="Clear emergency symptoms. Hard-stop escalation.",
        expectations=Expectation(
            ux_mode=UXModeKind.EMERGENCY,
            risk_level=RiskLevel.HIGH,
            primary_intent="Triage (Urgent)",
            required_components=(ComponentType.SAFETY_ALERT, ComponentType.CTA),
            forbidden_components=(ComponentType.CHECKLIST, ComponentType.CLARIFYING_QUESTION),
            safety_alert_level=SafetyLevel.EMERGENCY,
            safety_alert_position=AlertPosition.TOP,
            free_text_allowed=False,
            notes="CTA only, escalation focused, nothing else",
        ),
    ),
    Scenario(
        id=8,
        name="Navigation Intent",
        category="Navigation",
        input=(
            "I have a mild ear infection. Should I go to urgent care or wait for a "
            "doctor appointment?"
        ),
        description="Where to go for care with clear context. Decisive, efficient routing.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.LOW,
            primary_intent="Navigate the Care System",
            required_components=(
                ComponentType.SUMMARY,
                ComponentType.SAFETY_ALERT,
                ComponentType.CTA,
            ),
            safety_alert_level=SafetyLevel.INFORMATIONAL,
            free_text_allowed=True,
            notes="Decisive, not a health article",
        ),
    ),
    Scenario(
        id=9,
        name="Planning & Prevention",
        category="Prevention",
        input="How can I avoid getting sick this winter?",
        description="Preventive guidance. Non-medicalized wellness response.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.LOW,
            primary_intent="Planning & Prevention",
            required_components=(
                ComponentType.SUMMARY,
                ComponentType.CHECKLIST,
                ComponentType.SAFETY_ALERT,
            ),
            safety_alert_level=SafetyLevel.INFORMATIONAL,
            free_text_allowed=True,
            notes="Supportive tone with a subtle safety reminder",
        ),
    ),
    Scenario(
        id=10,
        name="Chronic Management",
        category="Chronic Care",
        input="I have diabetes and my blood sugar has been higher this week.",
        description="Known ongoing condition. Steady, non-alarmist tone.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.LOW,
            primary_intent="Chronic Condition Management",
            required_components=(ComponentType.SUMMARY, ComponentType.SAFETY_ALERT),
            safety_alert_level=SafetyLevel.INFORMATIONAL,
            free_text_allowed=True,
            notes="Steady and familiar, not alarmist",
        ),
    ),
    Scenario(
        id=11,
        name="Hybrid Question",
        category="Stress Test",
        input="Why does Ozempic make me nauseous and what should I do?",
        description="Mixed intent stress test across the whole assembly.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.LOW,
            primary_intent="Medication Guidance",
            required_components=(
                ComponentType.SUMMARY,
                ComponentType.SAFETY_ALERT,
                ComponentType.CHECKLIST,
                ComponentType.SOURCES,
            ),
            safety_alert_level=SafetyLevel.INFORMATIONAL,
            free_text_allowed=True,
            notes="Explain + medication + action",
        ),
    ),
    Scenario(
        id=12,
        name="Off-Topic Question",
        category="Stress Test",
        input="What's the capital of France?",
        description="Clearly non-health question. Graceful off-topic handling.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.LOW,
            primary_intent="Off-Topic",
            required_components=(ComponentType.SUMMARY,),
            forbidden_components=(
                ComponentType.SAFETY_ALERT,
                ComponentType.CHECKLIST,
                ComponentType.CTA,
                ComponentType.SOURCES,
            ),
            free_text_allowed=True,
            notes="Politely declines and redirects to health topics",
        ),
    ),
    Scenario(
        id=13,
        name="Health-Frameable Question",
        category="Stress Test",
        input="How can I be more productive at work?",
        description="Non-health question framed from a wellness perspective.",
        expectations=Expectation(
            ux_mode=UXModeKind.INFORMATIONAL,
            risk_level=RiskLevel.LOW,
            primary_intent="Planning & Prevention",
            required_components=(ComponentType.SUMMARY, ComponentType.SAFETY_ALERT),
            safety_alert_level=SafetyLevel.INFORMATIONAL,
            free_text_allowed=True,
            notes="Frames around stress, sleep, mental wellness",
        ),
    ),
)

_BY_ID = {scenario.id: scenario for scenario in SCENARIOS}


def get_scenario(scenario_id: int) -> Scenario:
    """Look up a scenario by id. Raises KeyError for unknown ids."""
    return _BY_ID[scenario_id]
