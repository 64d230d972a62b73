"""Turn raw model text into a validated AIResponse."""

import json
import logging
import re
from typing import Optional

from json_repair import repair_json
from pydantic import ValidationError

from remedy_ux.pipeline.schemas import AIResponse

logger = logging.getLogger(__name__)

# First JSON object in the text, greedy to the last closing brace.
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
PREVIEW_MAX_LENGTH = 200


def _strip_markdown(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned


def _extract_json_object(text: str) -> str:
    match = _JSON_OBJECT_RE.search(text)
    if match:
        return match.group()
    return text


def parse_ai_response(raw: str) -> Optional[AIResponse]:
    """Parse model output into an AIResponse.

    Args:
        raw: Model text, possibly fenced or wrapped in prose.

    Returns:
        AIResponse if the text holds a usable payload, None otherwise.
    """
    if not raw or not raw.strip():
        logger.warning("Empty model response")
        return None

    cleaned = _extract_json_object(_strip_markdown(raw))
    repaired = repair_json(cleaned, return_objects=False)

    try:
        data = json.loads(repaired)
    except json.JSONDecodeError as exc:
        logger.warning(
            "Model response is not valid JSON: %s",
            exc,
            extra={"preview": raw[:PREVIEW_MAX_LENGTH]},
        )
        return None

    if not isinstance(data, dict):
        logger.warning("Model response is not a JSON object: %s", type(data).__name__)
        return None

    try:
        return AIResponse.model_validate(data)
    except ValidationError as exc:
        logger.warning(
            "Model response failed validation: %d error(s)",
            exc.error_count(),
            extra={"preview": raw[:PREVIEW_MAX_LENGTH]},
        )
        return None
