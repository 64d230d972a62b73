"""Conversation history helpers."""

from collections.abc import Iterable, Mapping
from typing import Any, Optional

from remedy_ux.pipeline.schemas import UXModeKind


def _turn_mode(message: Mapping[str, Any]) -> Optional[str]:
    structured = message.get("structured")
    if not isinstance(structured, Mapping):
        return None
    ux_mode = structured.get("ux_mode")
    if isinstance(ux_mode, Mapping):
        return ux_mode.get("mode")
    if isinstance(ux_mode, str):
        return ux_mode
    return None


def count_clarifying_turns(history: Iterable[Mapping[str, Any]]) -> int:
    """Count consecutive clarification turns at the end of a conversation.

    Args:
        history: Chat messages, oldest first. Assistant turns carry the
            structured payload under ``structured.ux_mode``.

    Returns:
        Number of trailing assistant turns in clarification mode. User
        turns in between do not break the streak.
    """
    count = 0
    for message in reversed(list(history)):
        if message.get("role") != "assistant":
            continue
        if _turn_mode(message) != UXModeKind.CLARIFICATION.value:
            break
        count += 1
    return count
