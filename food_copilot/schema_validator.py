"""
Schema Validator

Per-kind structural validation of normalized candidates. Fail-closed:
a directive that violates any part of its contract is dropped whole,
never forwarded partially. Unknown kinds are dropped as well.

Each kind owns one validator function returning the cleaned props
(contract fields only). Validators raise DirectiveValidationError;
validate_sequence() turns that into a silent drop plus a DEBUG log line.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from food_copilot.contracts.directive_schema import (
    Authority,
    BadgeVariant,
    Directive,
    DirectiveKind,
    DirectiveSequence,
    IngredientStatus,
    Sentiment,
    Severity,
    VerdictStatus,
    resolve_kind,
)
from food_copilot.utils.error_handling import DirectiveValidationError

logger = logging.getLogger(__name__)

MIN_EXPLANATION_CHARS = 30
MAX_SUGGESTIONS = 3
MIN_EVIDENCE_CONFIDENCE = 70
MAX_EVIDENCE_CONFIDENCE = 100

SEVERITIES = {s.value for s in Severity}
INGREDIENT_STATUSES = {s.value for s in IngredientStatus}
VERDICT_STATUSES = {s.value for s in VerdictStatus}
SENTIMENTS = {s.value for s in Sentiment}
BADGE_VARIANTS = {v.value for v in BadgeVariant}
AUTHORITIES = {a.value for a in Authority}
NOVA_LEVELS = (1, 2, 3, 4)


# ─────────────────────────────────────────────────────────────────────────────
# FIELD CHECKS
# ─────────────────────────────────────────────────────────────────────────────

def _fail(kind: DirectiveKind, reason: str):
    raise DirectiveValidationError(kind.value, reason)


def _str(kind: DirectiveKind, record: Mapping, key: str, non_empty: bool = False) -> str:
    value = record.get(key)
    if not isinstance(value, str):
        _fail(kind, f"'{key}' must be a string")
    if non_empty and not value.strip():
        _fail(kind, f"'{key}' must not be empty")
    return value


def _optional_str(kind: DirectiveKind, record: Mapping, key: str, default: Optional[str] = None) -> Optional[str]:
    if record.get(key) is None:
        return default
    return _str(kind, record, key)


def _enum(kind: DirectiveKind, record: Mapping, key: str, allowed: set) -> str:
    value = record.get(key)
    if not isinstance(value, str) or value not in allowed:
        _fail(kind, f"'{key}' must be one of {sorted(allowed)}, got {value!r}")
    return value


def _is_number(value: Any) -> bool:
    # bool is an int subclass; "true" is never a quantity
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int beyond float range, e.g. a 400-digit JSON literal
        return False


def _number(
    kind: DirectiveKind,
    record: Mapping,
    key: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> float:
    value = record.get(key)
    if not _is_number(value):
        _fail(kind, f"'{key}' must be a number, got {value!r}")
    if minimum is not None and value < minimum:
        _fail(kind, f"'{key}' below {minimum}: {value}")
    if maximum is not None and value > maximum:
        _fail(kind, f"'{key}' above {maximum}: {value}")
    return value


def _records(kind: DirectiveKind, props: Mapping, key: str, allow_empty: bool = False) -> List[Mapping]:
    value = props.get(key)
    if not isinstance(value, (list, tuple)):
        _fail(kind, f"'{key}' must be a list")
    if not value and not allow_empty:
        _fail(kind, f"'{key}' must not be empty")
    for i, element in enumerate(value):
        if not isinstance(element, Mapping):
            _fail(kind, f"'{key}[{i}]' must be an object")
    return list(value)


# ─────────────────────────────────────────────────────────────────────────────
# PER-KIND CONTRACTS
# ─────────────────────────────────────────────────────────────────────────────

def validate_risk_warning(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.RISK_WARNING
    return {
        "title": _str(k, props, "title", non_empty=True),
        "severity": _enum(k, props, "severity", SEVERITIES),
        "reasoning": _str(k, props, "reasoning", non_empty=True),
        "source": _str(k, props, "source"),
    }


def validate_positive_badge(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.POSITIVE_BADGE
    variant = BadgeVariant.SUCCESS.value
    if props.get("variant") is not None:
        variant = _enum(k, props, "variant", BADGE_VARIANTS)
    return {
        "message": _str(k, props, "message", non_empty=True),
        "variant": variant,
    }


def validate_ingredient_table(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.INGREDIENT_TABLE
    items = []
    for item in _records(k, props, "items"):
        items.append({
            "label": _str(k, item, "label", non_empty=True),
            "value": _str(k, item, "value"),
            "status": _enum(k, item, "status", INGREDIENT_STATUSES),
        })
    return {"items": items}


def validate_science_explainer(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.SCIENCE_EXPLAINER
    # The generator is prompted with the historical spelling "explaination"
    record = props
    if "explanation" not in props and "explaination" in props:
        record = {"explanation": props.get("explaination")}

    explanation = record.get("explanation")
    if not isinstance(explanation, str):
        _fail(k, "'explanation' must be a plain string paragraph")
    text = explanation.strip()
    if len(text) < MIN_EXPLANATION_CHARS:
        _fail(k, f"'explanation' shorter than {MIN_EXPLANATION_CHARS} chars")
    if "\n\n" in text.replace("\r\n", "\n"):
        _fail(k, "'explanation' must be a single paragraph")
    return {
        "title": _str(k, props, "title"),
        "explanation": text,
    }


def validate_alternative_suggestions(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.ALTERNATIVE_SUGGESTIONS
    rows = _records(k, props, "suggestions")
    if len(rows) > MAX_SUGGESTIONS:
        _fail(k, f"at most {MAX_SUGGESTIONS} suggestions allowed, got {len(rows)}")
    suggestions = []
    for row in rows:
        suggestion = {"title": _str(k, row, "title", non_empty=True)}
        reason = _optional_str(k, row, "reason")
        link = _optional_str(k, row, "link")
        if reason is not None:
            suggestion["reason"] = reason
        if link is not None:
            suggestion["link"] = link
        suggestions.append(suggestion)
    return {"suggestions": suggestions}


def validate_processing_meter(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.PROCESSING_METER
    level = props.get("level")
    if not _is_number(level) or level not in NOVA_LEVELS:
        _fail(k, f"'level' must be one of {NOVA_LEVELS}, got {level!r}")
    return {
        "level": int(level),
        "title": _str(k, props, "title"),
        "description": _str(k, props, "description"),
    }


def validate_macro_distribution(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.MACRO_DISTRIBUTION
    return {
        "carbs": _number(k, props, "carbs", 0, 100),
        "protein": _number(k, props, "protein", 0, 100),
        "fat": _number(k, props, "fat", 0, 100),
        "calories": _number(k, props, "calories", 0),
    }


def validate_follow_up_questions(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.FOLLOW_UP_QUESTIONS
    questions = props.get("questions")
    if not isinstance(questions, (list, tuple)) or not questions:
        _fail(k, "'questions' must be a non-empty list")
    for q in questions:
        if not isinstance(q, str) or not q.strip():
            _fail(k, "every question must be a non-empty string")
    return {"questions": list(questions)}


def validate_comparison(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.COMPARISON
    return {
        "nutrient": _str(k, props, "nutrient"),
        "currentValue": _str(k, props, "currentValue"),
        "comparisonText": _str(k, props, "comparisonText"),
        "sentiment": _enum(k, props, "sentiment", SENTIMENTS),
    }


def validate_quick_verdict(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.QUICK_VERDICT
    verdict = {
        "status": _enum(k, props, "status", VERDICT_STATUSES),
        "title": _str(k, props, "title", non_empty=True),
        "explanation": _str(k, props, "explanation", non_empty=True),
    }
    nuance = _optional_str(k, props, "nuanceTag")
    if nuance is not None:
        verdict["nuanceTag"] = nuance
    return verdict


def _dietary_items(k: DirectiveKind, props: Mapping, key: str) -> List[Dict[str, str]]:
    if props.get(key) is None:
        return []
    return [
        {"name": _str(k, row, "name", non_empty=True), "reason": _str(k, row, "reason")}
        for row in _records(k, props, key, allow_empty=True)
    ]


def validate_dos_and_donts(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.DOS_AND_DONTS
    condition = _str(k, props, "condition", non_empty=True)
    recommended = _dietary_items(k, props, "recommended")
    avoid = _dietary_items(k, props, "avoid")
    if not recommended and not avoid:
        _fail(k, "needs at least one recommended or avoid entry")
    return {"condition": condition, "recommended": recommended, "avoid": avoid}


def validate_methodology_steps(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.METHODOLOGY_STEPS
    steps = []
    for row in _records(k, props, "steps"):
        step = {
            "action": _str(k, row, "action", non_empty=True),
            "detail": _str(k, row, "detail"),
        }
        tip = _optional_str(k, row, "tip")
        if tip is not None:
            step["tip"] = tip
        steps.append(step)
    return {"title": _str(k, props, "title", non_empty=True), "steps": steps}


def validate_nutrition_score(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.NUTRITION_SCORE
    score = {"score": _number(k, props, "score", 0, 100)}
    for key in ("subtitle", "feedback"):
        value = _optional_str(k, props, key)
        if value is not None:
            score[key] = value
    return score


def validate_evidence_sources(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.EVIDENCE_SOURCES
    sources = []
    for row in _records(k, props, "sources"):
        sources.append({
            "title": _str(k, row, "title", non_empty=True),
            "authority": _enum(k, row, "authority", AUTHORITIES),
            "description": _str(k, row, "description", non_empty=True),
            "confidence": _number(k, row, "confidence", MIN_EVIDENCE_CONFIDENCE, MAX_EVIDENCE_CONFIDENCE),
        })
    return {"sources": sources}


def validate_long_term_impact(props: Mapping) -> Dict[str, Any]:
    k = DirectiveKind.LONG_TERM_IMPACT
    impacts = []
    for row in _records(k, props, "impacts"):
        explanation = _str(k, row, "explanation")
        if len(explanation.strip()) < MIN_EXPLANATION_CHARS:
            _fail(k, f"impact explanation shorter than {MIN_EXPLANATION_CHARS} chars")
        impacts.append({
            "effect": _str(k, row, "effect", non_empty=True),
            "explanation": explanation.strip(),
            "severity": _enum(k, row, "severity", SEVERITIES),
        })
    return {
        "title": _optional_str(k, props, "title", default="Long-Term Health Impact"),
        "impacts": impacts,
        "timeframe": _str(k, props, "timeframe"),
    }


KIND_VALIDATORS: Dict[DirectiveKind, Callable[[Mapping], Dict[str, Any]]] = {
    DirectiveKind.RISK_WARNING: validate_risk_warning,
    DirectiveKind.POSITIVE_BADGE: validate_positive_badge,
    DirectiveKind.INGREDIENT_TABLE: validate_ingredient_table,
    DirectiveKind.SCIENCE_EXPLAINER: validate_science_explainer,
    DirectiveKind.ALTERNATIVE_SUGGESTIONS: validate_alternative_suggestions,
    DirectiveKind.PROCESSING_METER: validate_processing_meter,
    DirectiveKind.MACRO_DISTRIBUTION: validate_macro_distribution,
    DirectiveKind.FOLLOW_UP_QUESTIONS: validate_follow_up_questions,
    DirectiveKind.COMPARISON: validate_comparison,
    DirectiveKind.QUICK_VERDICT: validate_quick_verdict,
    DirectiveKind.DOS_AND_DONTS: validate_dos_and_donts,
    DirectiveKind.METHODOLOGY_STEPS: validate_methodology_steps,
    DirectiveKind.NUTRITION_SCORE: validate_nutrition_score,
    DirectiveKind.EVIDENCE_SOURCES: validate_evidence_sources,
    DirectiveKind.LONG_TERM_IMPACT: validate_long_term_impact,
}


def validate_directive(candidate: Any) -> Optional[Directive]:
    """Validated Directive, or None when the candidate must be dropped."""
    if not isinstance(candidate, Mapping):
        logger.debug("[VALIDATOR] Dropped non-record candidate")
        return None

    kind = resolve_kind(candidate.get("component"))
    if kind is None:
        logger.debug(f"[VALIDATOR] Dropped unknown kind {candidate.get('component')!r}")
        return None

    props = candidate.get("props")
    if not isinstance(props, Mapping):
        logger.debug(f"[VALIDATOR] Dropped {kind.value}: props is not an object")
        return None

    try:
        cleaned = KIND_VALIDATORS[kind](props)
    except DirectiveValidationError as e:
        logger.debug(f"[VALIDATOR] Dropped {e}")
        return None

    return Directive(kind=kind, props=cleaned)


def validate_sequence(candidates: List[Any]) -> Tuple[DirectiveSequence, int]:
    """
    Returns (validated subsequence, number of dropped candidates).
    Relative order of surviving directives is preserved.
    """
    validated = []
    for candidate in candidates:
        directive = validate_directive(candidate)
        if directive is not None:
            validated.append(directive)

    dropped = len(candidates) - len(validated)
    if dropped:
        logger.info(f"[VALIDATOR] Dropped {dropped}/{len(candidates)} directives failing their contract")
    return tuple(validated), dropped
