"""Score an assembled response against a scenario's expectations."""

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from remedy_ux.harness.scenarios import SCENARIOS, Expectation, Scenario
from remedy_ux.pipeline.schemas import AIResponse, ComponentType, RiskLevel, SafetyLevel
from remedy_ux.pipeline.types import BuildResult

_ADJACENT_RISKS = {RiskLevel.LOW.value, RiskLevel.MEDIUM.value}


class Verdict(str, Enum):
    PASS = "pass"
    PARTIAL = "partial"
    FAIL = "fail"
    PENDING = "pending"


@dataclass(slots=True)
class FieldCheck:
    expected: Any
    actual: Any
    result: Verdict

    def to_dict(self) -> dict[str, Any]:
        return {"expected": self.expected, "actual": self.actual, "result": self.result.value}


@dataclass(slots=True)
class RequiredComponentsCheck:
    expected: list[str]
    actual: list[str]
    missing: list[str]
    result: Verdict

    def to_dict(self) -> dict[str, Any]:
        return {
            "expected": self.expected,
            "actual": self.actual,
            "missing": self.missing,
            "result": self.result.value,
        }


@dataclass(slots=True)
class ForbiddenComponentsCheck:
    expected: list[str]
    found: list[str]
    result: Verdict

    def to_dict(self) -> dict[str, Any]:
        return {"expected": self.expected, "found": self.found, "result": self.result.value}


@dataclass(slots=True)
class Evaluation:
    """Per-field verdicts for one scenario plus the aggregate."""

    test_id: int
    overall: Verdict
    ux_mode: FieldCheck
    risk_level: FieldCheck
    primary_intent: FieldCheck
    required_components: RequiredComponentsCheck
    free_text_allowed: FieldCheck
    forbidden_components: Optional[ForbiddenComponentsCheck] = None
    safety_alert: Optional[FieldCheck] = None

    def verdicts(self) -> list[Verdict]:
        results = [
            self.ux_mode.result,
            self.risk_level.result,
            self.primary_intent.result,
            self.required_components.result,
            self.free_text_allowed.result,
        ]
        if self.forbidden_components is not None:
            results.append(self.forbidden_components.result)
        if self.safety_alert is not None:
            results.append(self.safety_alert.result)
        return results

    def to_dict(self) -> dict[str, Any]:
        details: dict[str, Any] = {
            "ux_mode": self.ux_mode.to_dict(),
            "risk_level": self.risk_level.to_dict(),
            "primary_intent": self.primary_intent.to_dict(),
            "required_components": self.required_components.to_dict(),
        }
        if self.forbidden_components is not None:
            details["forbidden_components"] = self.forbidden_components.to_dict()
        if self.safety_alert is not None:
            details["safety_alert"] = self.safety_alert.to_dict()
        details["free_text_allowed"] = self.free_text_allowed.to_dict()
        return {"testId": self.test_id, "overall": self.overall.value, "details": details}


def first_word_match(expected: str, actual: Optional[str]) -> bool:
    """Loose intent match: either label's first word appears in the other.

    Model wording drifts ("Medication guidance" vs "Medication Guidance
    (OTC)"), so byte equality is too strict for scoring.
    """
    if not actual or not actual.strip() or not expected.strip():
        return False
    expected_text = expected.lower()
    actual_text = actual.lower()
    return expected_text.split()[0] in actual_text or actual_text.split()[0] in expected_text


def aggregate(verdicts: list[Verdict]) -> Verdict:
    if all(verdict == Verdict.PASS for verdict in verdicts):
        return Verdict.PASS
    failures = sum(1 for verdict in verdicts if verdict == Verdict.FAIL)
    if failures > len(verdicts) / 2:
        return Verdict.FAIL
    return Verdict.PARTIAL


def _values(components: Iterable[ComponentType]) -> list[str]:
    return [component.value for component in components]


def _level_value(level: Optional[SafetyLevel]) -> Optional[str]:
    return level.value if level is not None else None


def _check_risk(expected: RiskLevel, actual: Optional[str]) -> Verdict:
    if actual == expected.value:
        return Verdict.PASS
    if isinstance(actual, str) and actual in _ADJACENT_RISKS and expected.value in _ADJACENT_RISKS:
        return Verdict.PARTIAL
    return Verdict.FAIL


def _check_required(expected: list[str], actual: list[str]) -> tuple[list[str], Verdict]:
    missing = [component for component in expected if component not in actual]
    if not missing:
        return missing, Verdict.PASS
    if len(missing) < len(expected) / 2:
        return missing, Verdict.PARTIAL
    return missing, Verdict.FAIL


def _check_safety_alert(expected: Optional[SafetyLevel], actual: Optional[str]) -> Verdict:
    if expected is None:
        if actual is None:
            return Verdict.PASS
        # A leaked informational note is tolerable, an escalated alert is not.
        return Verdict.PARTIAL if actual == SafetyLevel.INFORMATIONAL.value else Verdict.FAIL
    if expected == SafetyLevel.INFORMATIONAL:
        return Verdict.PASS if actual == SafetyLevel.INFORMATIONAL.value else Verdict.PARTIAL
    if actual == expected.value:
        return Verdict.PASS
    return Verdict.PARTIAL if actual else Verdict.FAIL


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


def _component_types(payload: Mapping[str, Any]) -> list[str]:
    components = _section(payload, "final_ui").get("components") or []
    return [c.get("type") for c in components if isinstance(c, Mapping)]


def _actual_safety_level(payload: Mapping[str, Any]) -> Optional[str]:
    alert = _section(payload, "response_content").get("safety_alert")
    if isinstance(alert, Mapping) and alert.get("level"):
        return alert["level"]
    for component in _section(payload, "final_ui").get("components") or []:
        if isinstance(component, Mapping) and component.get("type") == ComponentType.SAFETY_ALERT.value:
            content = component.get("content")
            if isinstance(content, Mapping):
                return content.get("level") or None
            return None
    return None


def _failed_evaluation(scenario: Scenario) -> Evaluation:
    expectations = scenario.expectations
    required = _values(expectations.required_components)
    forbidden = None
    if expectations.forbidden_components is not None:
        forbidden = ForbiddenComponentsCheck(
            expected=_values(expectations.forbidden_components), found=[], result=Verdict.FAIL
        )
    safety = None
    if expectations.checks_safety_alert:
        safety = FieldCheck(_level_value(expectations.safety_alert_level), None, Verdict.FAIL)
    return Evaluation(
        test_id=scenario.id,
        overall=Verdict.FAIL,
        ux_mode=FieldCheck(expectations.ux_mode.value, None, Verdict.FAIL),
        risk_level=FieldCheck(expectations.risk_level.value, None, Verdict.FAIL),
        primary_intent=FieldCheck(expectations.primary_intent, None, Verdict.FAIL),
        required_components=RequiredComponentsCheck(
            expected=required, actual=[], missing=list(required), result=Verdict.FAIL
        ),
        free_text_allowed=FieldCheck(expectations.free_text_allowed, True, Verdict.FAIL),
        forbidden_components=forbidden,
        safety_alert=safety,
    )


def evaluate_test(
    scenario: Scenario, response: Union[Mapping[str, Any], BuildResult, None]
) -> Evaluation:
    """Score one response payload against a scenario.

    Args:
        scenario: Scenario whose expectations apply.
        response: Merged payload (see ``evaluation_payload``), a bare
            BuildResult, or None when the model call or parse failed. A
            bare BuildResult carries no mode, risk or intent, so those
            fields score against missing values.

    Returns:
        Evaluation with a verdict per field and an overall verdict.
    """
    expectations: Expectation = scenario.expectations
    if response is None:
        return _failed_evaluation(scenario)
    if isinstance(response, BuildResult):
        response = response.to_dict()

    actual_mode = _section(response, "ux_mode").get("mode") or None
    intent_detection = _section(response, "intent_detection")
    actual_risk = intent_detection.get("risk_level") or None
    actual_intent = intent_detection.get("primary_intent") or None
    actual_components = _component_types(response)
    actual_free_text = not _section(response, "exit_state").get("waiting_for_structured_input", False)

    required = _values(expectations.required_components)
    missing, required_result = _check_required(required, actual_components)

    forbidden = None
    if expectations.forbidden_components is not None:
        expected_forbidden = _values(expectations.forbidden_components)
        found = [c for c in expected_forbidden if c in actual_components]
        forbidden = ForbiddenComponentsCheck(
            expected=expected_forbidden,
            found=found,
            result=Verdict.FAIL if found else Verdict.PASS,
        )

    safety = None
    if expectations.checks_safety_alert:
        actual_level = _actual_safety_level(response)
        safety = FieldCheck(
            expected=_level_value(expectations.safety_alert_level),
            actual=actual_level,
            result=_check_safety_alert(expectations.safety_alert_level, actual_level),
        )

    evaluation = Evaluation(
        test_id=scenario.id,
        overall=Verdict.PENDING,
        ux_mode=FieldCheck(
            expectations.ux_mode.value,
            actual_mode,
            Verdict.PASS if actual_mode == expectations.ux_mode.value else Verdict.FAIL,
        ),
        risk_level=FieldCheck(
            expectations.risk_level.value,
            actual_risk,
            _check_risk(expectations.risk_level, actual_risk),
        ),
        primary_intent=FieldCheck(
            expectations.primary_intent,
            actual_intent,
            Verdict.PASS
            if first_word_match(expectations.primary_intent, actual_intent)
            else Verdict.PARTIAL,
        ),
        required_components=RequiredComponentsCheck(
            expected=required, actual=actual_components, missing=missing, result=required_result
        ),
        free_text_allowed=FieldCheck(
            expectations.free_text_allowed,
            actual_free_text,
            Verdict.PASS if actual_free_text == expectations.free_text_allowed else Verdict.FAIL,
        ),
        forbidden_components=forbidden,
        safety_alert=safety,
    )
    evaluation.overall = aggregate(evaluation.verdicts())
    return evaluation


def evaluation_payload(response: AIResponse, result: BuildResult) -> dict[str, Any]:
    """Merge a model response and its assembly into the shape the evaluator reads."""
    return {
        "intent_detection": response.intent_detection.model_dump(mode="json"),
        "ux_mode": response.ux_mode.model_dump(mode="json"),
        "response_content": response.response_content.model_dump(mode="json", exclude_none=True),
        **result.to_dict(),
    }


def evaluate_suite(
    responses: Mapping[int, Optional[Mapping[str, Any]]],
    scenarios: Iterable[Scenario] = SCENARIOS,
) -> dict[int, Verdict]:
    """Overall verdict per scenario; scenarios without a response stay pending."""
    verdicts: dict[int, Verdict] = {}
    for scenario in scenarios:
        if scenario.id not in responses:
            verdicts[scenario.id] = Verdict.PENDING
            continue
        verdicts[scenario.id] = evaluate_test(scenario, responses[scenario.id]).overall
    return verdicts


def summarize(verdicts: Iterable[Verdict]) -> dict[str, int]:
    counts = Counter(verdicts)
    return {verdict.value: counts.get(verdict, 0) for verdict in Verdict}
