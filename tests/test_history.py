"""Tests for conversation history helpers."""

from remedy_ux.pipeline.history import count_clarifying_turns


def _assistant(mode):
    return {"role": "assistant", "content": "", "structured": {"ux_mode": {"mode": mode}}}


def _user(text="ok"):
    return {"role": "user", "content": text}


class TestCountClarifyingTurns:
    def test_empty_history(self):
        assert count_clarifying_turns([]) == 0

    def test_trailing_clarifications_counted(self):
        history = [
            _user(),
            _assistant("clarification"),
            _user(),
            _assistant("clarification"),
            _user(),
        ]
        assert count_clarifying_turns(history) == 2

    def test_streak_broken_by_other_mode(self):
        history = [
            _assistant("clarification"),
            _user(),
            _assistant("informational"),
            _user(),
            _assistant("clarification"),
            _user(),
        ]
        assert count_clarifying_turns(history) == 1

    def test_unstructured_assistant_turn_breaks_streak(self):
        history = [
            _assistant("clarification"),
            {"role": "assistant", "content": "Sorry, something went wrong.", "structured": None},
            _user(),
        ]
        assert count_clarifying_turns(history) == 0

    def test_string_mode_accepted(self):
        history = [{"role": "assistant", "structured": {"ux_mode": "clarification"}}]
        assert count_clarifying_turns(history) == 1

    def test_user_only_history(self):
        assert count_clarifying_turns([_user(), _user()]) == 0

    def test_accepts_generator(self):
        history = (m for m in [_assistant("clarification"), _user()])
        assert count_clarifying_turns(history) == 1
