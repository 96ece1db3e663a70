import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from food_copilot.contracts.directive_schema import (
    Directive,
    DirectiveKind,
    DirectiveSequence,
    IngredientStatus,
    Sentiment,
)
from food_copilot.risk_engine import has_detectable_issue, macro_shares

logger = logging.getLogger(__name__)

BASE_SCORE = 100
WARNING_CAP = 49
MAX_RATIONALE = 3

HIGH_CARB_SHARE_PCT = 60
LOW_PROTEIN_SHARE_PCT = 10
BAD_INGREDIENT_PENALTY = 8
BAD_INGREDIENT_MAX_PENALTY = 30


@dataclass(frozen=True)
class ScoreResult:
    """
    Derived suitability view of a finalized sequence.
    Recomputed on demand, never stored with the directives.
    """
    score: int
    rationale: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "rationale": list(self.rationale)}


def _deductions(directive: Directive) -> List[Tuple[int, str]]:
    kind = directive.kind
    found: List[Tuple[int, str]] = []

    if kind == DirectiveKind.MACRO_DISTRIBUTION:
        if not any(directive.get(k, 0) for k in ("carbs", "protein", "fat")):
            # no macro data to judge
            return found
        carbs_pct, protein_pct, _ = macro_shares(directive)
        if carbs_pct > HIGH_CARB_SHARE_PCT:
            found.append((20, "High carbohydrate ratio — consider lower-carb alternatives."))
        if protein_pct < LOW_PROTEIN_SHARE_PCT:
            found.append((10, "Low protein — add a lean protein source."))

    elif kind == DirectiveKind.PROCESSING_METER:
        level = directive.get("level", 1)
        if level >= 4:
            found.append((30, "Ultra-processed ingredients detected — limit frequency."))
        elif level == 3:
            found.append((10, "Moderately processed — prefer fresher alternatives when possible."))

    elif kind == DirectiveKind.INGREDIENT_TABLE:
        bad = [i["label"] for i in directive.get("items", ()) if i["status"] == IngredientStatus.BAD.value]
        if bad:
            penalty = min(BAD_INGREDIENT_MAX_PENALTY, len(bad) * BAD_INGREDIENT_PENALTY)
            found.append((penalty, f"Contains concerning ingredients: {', '.join(bad[:3])}."))

    elif kind == DirectiveKind.RISK_WARNING:
        found.append((15, directive.get("reasoning") or "Warning flagged by analysis."))

    elif kind == DirectiveKind.COMPARISON and directive.get("sentiment") == Sentiment.NEGATIVE.value:
        found.append((8, f"Compared unfavorably for {directive.get('nutrient') or 'a key nutrient'}."))

    return found


def compute_nutrition_score(sequence: DirectiveSequence) -> ScoreResult:
    """
    Heuristic 0-100 score, independent of any score the generator claims.
    Capped below 50 whenever a warning is shown or an issue rule fires, so
    the score can never contradict the warning state.
    """
    score = BASE_SCORE
    rationale: List[str] = []

    for directive in sequence:
        for penalty, reason in _deductions(directive):
            score -= penalty
            rationale.append(reason)

    score = max(0, min(BASE_SCORE, score))

    has_warning = any(d.kind == DirectiveKind.RISK_WARNING for d in sequence)
    if has_warning or has_detectable_issue(sequence):
        score = min(score, WARNING_CAP)

    logger.info(f"[SCORER] score={score} deductions={len(rationale)} warning={has_warning}")
    return ScoreResult(score=int(score), rationale=tuple(rationale[:MAX_RATIONALE]))


def score_directive(result: ScoreResult) -> Directive:
    """A renderable nutrition-score directive for a computed result."""
    return Directive(
        kind=DirectiveKind.NUTRITION_SCORE,
        props={
            "score": result.score,
            "subtitle": "A quick heuristic of overall healthiness",
            "feedback": " ".join(result.rationale) or "No concerns detected.",
        },
    )
