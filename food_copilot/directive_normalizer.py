"""
Directive Normalizer

Leaf-level repair of raw generator output. Nested collection props
(ingredient rows, suggestions, steps, sources, impacts) sometimes arrive as
JSON-encoded strings, or as lists of JSON-encoded objects. This stage parses
them back into structures and drops any field that fails to parse.

The normalizer is total: it never raises, whatever the input.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from food_copilot.contracts.directive_schema import (
    NESTED_COLLECTION_FIELDS,
    resolve_kind,
)

logger = logging.getLogger(__name__)

_DROP = object()


def _parse_json_text(text: str) -> Any:
    """json.loads or _DROP."""
    try:
        return json.loads(text)
    except (ValueError, TypeError, RecursionError):
        return _DROP


def extract_json_text(text: str) -> str:
    """
    Pull the JSON payload out of model text that may carry <think> blocks
    or markdown fences around it.
    """
    text = text.strip()
    if "<think>" in text:
        text = text.split("</think>")[-1].strip()

    if "```json" in text:
        start = text.find("```json") + 7
        end = text.find("```", start)
        if end > start:
            return text[start:end].strip()

    if "```" in text:
        start = text.find("```") + 3
        end = text.find("```", start)
        if end > start:
            return text[start:end].strip()

    start_brace = text.find('{')
    start_bracket = text.find('[')

    start = -1
    end = -1
    if start_brace != -1 and (start_bracket == -1 or start_brace < start_bracket):
        start = start_brace
        end = text.rfind('}') + 1
    elif start_bracket != -1:
        start = start_bracket
        end = text.rfind(']') + 1

    if start != -1 and end > start:
        return text[start:end].strip()

    return text


def extract_candidates(payload: Any) -> List[Any]:
    """
    Accepts the generator envelope {"uiComponents": [...]}, a bare list,
    or model text encoding either. Anything else yields an empty list.
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")

    if isinstance(payload, str):
        parsed = _parse_json_text(extract_json_text(payload))
        if parsed is _DROP:
            logger.warning("[NORMALIZER] Generator text is not JSON; no candidates")
            return []
        payload = parsed

    if isinstance(payload, dict):
        payload = payload.get("uiComponents")

    if isinstance(payload, (list, tuple)):
        return list(payload)

    logger.warning(f"[NORMALIZER] Unexpected payload type {type(payload).__name__}; no candidates")
    return []


class DirectiveNormalizer:
    """Parse-or-drop repair of the nested collection fields of each candidate."""

    def normalize_directive(self, candidate: Any) -> Dict[str, Any]:
        """
        Returns {"component": str, "props": dict}. Candidates that are not
        records come back with an empty component so the validator drops them.
        """
        if not isinstance(candidate, dict):
            return {"component": "", "props": {}}

        component = candidate.get("component")
        if not isinstance(component, str):
            component = ""

        props = candidate.get("props")
        if isinstance(props, str):
            props = _parse_json_text(props)
        if not isinstance(props, dict):
            return {"component": component, "props": {}}

        props = dict(props)
        kind = resolve_kind(component)
        nested = NESTED_COLLECTION_FIELDS.get(kind, {}) if kind else {}

        for field_name, elements_are_records in nested.items():
            if field_name not in props:
                continue
            value = self._normalize_collection(props[field_name], elements_are_records)
            if value is _DROP:
                logger.debug(f"[NORMALIZER] Dropped malformed field {component}.{field_name}")
                del props[field_name]
            else:
                props[field_name] = value

        return {"component": component, "props": props}

    def _normalize_collection(self, value: Any, elements_are_records: bool) -> Any:
        if isinstance(value, str):
            value = _parse_json_text(value)
            if value is _DROP:
                return _DROP

        if not isinstance(value, list):
            return _DROP

        if not elements_are_records:
            return list(value)

        normalized = []
        for element in value:
            if isinstance(element, str):
                element = _parse_json_text(element)
            if not isinstance(element, dict):
                return _DROP
            normalized.append(element)
        return normalized


_default_normalizer = DirectiveNormalizer()


def normalize_sequence(raw: Any, normalizer: Optional[DirectiveNormalizer] = None) -> List[Dict[str, Any]]:
    """Normalize every candidate of a raw sequence (or generator envelope)."""
    normalizer = normalizer or _default_normalizer
    candidates = extract_candidates(raw)
    normalized = [normalizer.normalize_directive(c) for c in candidates]
    logger.info(f"[NORMALIZER] Normalized {len(normalized)} candidate directives")
    return normalized
