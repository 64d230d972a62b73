"""Tests for the scenario table."""

import pytest

from remedy_ux.harness.scenarios import SCENARIOS, UNSET, get_scenario
from remedy_ux.pipeline.schemas import ComponentType, PrimaryIntent, SafetyLevel, UXModeKind


class TestScenarioTable:
    def test_ids_are_sequential_and_unique(self):
        assert [scenario.id for scenario in SCENARIOS] == list(range(1, 14))

    def test_lookup(self):
        assert get_scenario(7).name == "Emergency Triage"

    def test_unknown_id_raises(self):
        with pytest.raises(KeyError):
            get_scenario(42)

    def test_intents_are_known_labels(self):
        known = {intent.value for intent in PrimaryIntent}
        for scenario in SCENARIOS:
            assert scenario.expectations.primary_intent in known

    def test_every_mode_covered(self):
        modes = {scenario.expectations.ux_mode for scenario in SCENARIOS}
        assert modes == set(UXModeKind)

    def test_required_and_forbidden_disjoint(self):
        for scenario in SCENARIOS:
            expectations = scenario.expectations
            forbidden = set(expectations.forbidden_components or ())
            assert not forbidden & set(expectations.required_components)

    def test_clarification_scenarios_expect_no_free_text(self):
        for scenario in SCENARIOS:
            if scenario.expectations.ux_mode == UXModeKind.CLARIFICATION:
                assert ComponentType.CLARIFYING_QUESTION in scenario.expectations.required_components
                assert scenario.expectations.free_text_allowed is False

    def test_emergency_scenario_forbids_distractions(self):
        expectations = get_scenario(7).expectations
        assert expectations.safety_alert_level == SafetyLevel.EMERGENCY
        assert ComponentType.CHECKLIST in expectations.forbidden_components
        assert ComponentType.CLARIFYING_QUESTION in expectations.forbidden_components

    def test_undeclared_alert_level_is_unset(self):
        assert get_scenario(6).expectations.safety_alert_level is UNSET
        assert get_scenario(6).expectations.checks_safety_alert is False
        assert get_scenario(1).expectations.checks_safety_alert is True
