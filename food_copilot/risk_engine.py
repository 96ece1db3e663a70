import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from food_copilot.contracts.directive_schema import (
    SEVERITY_RANK,
    Directive,
    DirectiveKind,
    DirectiveSequence,
    IngredientStatus,
    Sentiment,
    Severity,
)
from food_copilot.contracts.risk_policy import IssueRule, RemediationPolicy
from food_copilot.policies.remediation_policy_v1 import COPILOT_REMEDIATION_V1

logger = logging.getLogger(__name__)

HIGH_CARB_RATIO_PCT = 55
ULTRA_PROCESSED_LEVEL = 4
MAX_REASONING_ISSUES = 3

SYNTHESIZED_WARNING_TITLE = "Potential Health Concerns"
SYNTHESIZED_WARNING_SOURCE = "Auto-checker"

_SODIUM_PATTERN = re.compile(r"sodium|salt", re.IGNORECASE)


def macro_shares(directive: Directive) -> Tuple[float, float, float]:
    """Carb/protein/fat shares (percent) of a macro-distribution directive."""
    carbs = directive.get("carbs", 0)
    protein = directive.get("protein", 0)
    fat = directive.get("fat", 0)
    total = (carbs + protein + fat) or 1
    return carbs / total * 100, protein / total * 100, fat / total * 100


# ─────────────────────────────────────────────────────────────────────────────
# DETECTION RULES
# ─────────────────────────────────────────────────────────────────────────────

def _bad_ingredients(d: Directive) -> List[str]:
    if d.kind != DirectiveKind.INGREDIENT_TABLE:
        return []
    return [item["label"] for item in d.get("items", ()) if item["status"] == IngredientStatus.BAD.value]


def _high_carb_ratio(d: Directive) -> List[str]:
    if d.kind != DirectiveKind.MACRO_DISTRIBUTION:
        return []
    carbs_pct, _, _ = macro_shares(d)
    return ["High carbohydrate ratio"] if carbs_pct > HIGH_CARB_RATIO_PCT else []


def _ultra_processed(d: Directive) -> List[str]:
    if d.kind != DirectiveKind.PROCESSING_METER:
        return []
    level = d.get("level", 0)
    return [f"Ultra-processed (NOVA {level})"] if level >= ULTRA_PROCESSED_LEVEL else []


def _negative_comparison(d: Directive) -> List[str]:
    if d.kind != DirectiveKind.COMPARISON or d.get("sentiment") != Sentiment.NEGATIVE.value:
        return []
    return [d.get("nutrient") or "Unfavorable comparison"]


def _sodium_mention(d: Directive) -> List[str]:
    if d.kind != DirectiveKind.INGREDIENT_TABLE:
        return []
    if any(_SODIUM_PATTERN.search(item["label"]) for item in d.get("items", ())):
        return ["High sodium"]
    return []


# Evaluated in this order for every directive, in sequence order
ISSUE_RULES: Tuple[IssueRule, ...] = (
    IssueRule("BAD_INGREDIENT", "Ingredient rows flagged bad contribute their label", _bad_ingredients),
    IssueRule("HIGH_CARB_RATIO", "Carbohydrate share above 55% of macros", _high_carb_ratio),
    IssueRule("ULTRA_PROCESSED", "NOVA level 4 processing", _ultra_processed),
    IssueRule("NEGATIVE_COMPARISON", "Comparison with negative sentiment", _negative_comparison),
    IssueRule("SODIUM_MENTION", "Ingredient rows mentioning sodium or salt", _sodium_mention),
)


def detect_issues(sequence: DirectiveSequence) -> Tuple[str, ...]:
    """Deduplicated issue tags, first-seen order."""
    issues: Dict[str, None] = {}
    for directive in sequence:
        for rule in ISSUE_RULES:
            for issue in rule.detect(directive):
                issues.setdefault(issue, None)
    return tuple(issues)


def has_detectable_issue(sequence: DirectiveSequence) -> bool:
    return any(rule.detect(d) for d in sequence for rule in ISSUE_RULES)


# ─────────────────────────────────────────────────────────────────────────────
# SYNTHESIS
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class SynthesisResult:
    sequence: DirectiveSequence
    issues: Tuple[str, ...] = ()
    synthesized_warning: bool = False
    synthesized_alternatives: bool = False
    removed_badges: int = 0
    merged_warnings: int = 0


class RiskSynthesisEngine:
    """
    Cross-directive policy layer.

    Rules:
    - Detected issues without a warning → synthesize one
    - Several generator warnings → merge into one
    - Any warning → no positive badge survives
    - Any warning without alternatives → synthesize remediation
    """

    def __init__(self, policy: Optional[RemediationPolicy] = None):
        self.policy = policy or COPILOT_REMEDIATION_V1
        self.policy.validate()

    def apply(self, sequence: DirectiveSequence) -> SynthesisResult:
        sequence = tuple(sequence)
        issues = detect_issues(sequence)
        warnings = [d for d in sequence if d.kind == DirectiveKind.RISK_WARNING]

        if not warnings and not issues:
            return SynthesisResult(sequence=sequence)

        if issues:
            logger.info(f"[RISK_SYNTHESIS] Detected {len(issues)} issues: {', '.join(issues)}")

        result = SynthesisResult(sequence=sequence, issues=issues)
        body = list(sequence)
        head: List[Directive] = []

        if len(warnings) > 1:
            merged = self._merge_warnings(warnings)
            # merged warning takes the slot of the first one
            merged_body: List[Directive] = []
            for d in body:
                if d.kind != DirectiveKind.RISK_WARNING:
                    merged_body.append(d)
                elif merged is not None:
                    merged_body.append(merged)
                    merged = None
            body = merged_body
            result.merged_warnings = len(warnings)
            logger.warning(f"[RISK_SYNTHESIS] Merged {len(warnings)} risk warnings into one")
        elif not warnings:
            head.append(self.build_warning(issues))
            result.synthesized_warning = True
            logger.warning("[RISK_SYNTHESIS] Generator omitted a risk warning; synthesized one")

        before = len(body)
        body = [d for d in body if d.kind != DirectiveKind.POSITIVE_BADGE]
        result.removed_badges = before - len(body)
        if result.removed_badges:
            logger.info(f"[RISK_SYNTHESIS] Removed {result.removed_badges} positive badge(s) contradicting the warning")

        if not any(d.kind == DirectiveKind.ALTERNATIVE_SUGGESTIONS for d in body):
            head.append(self.build_alternatives(issues))
            result.synthesized_alternatives = True
            logger.info("[RISK_SYNTHESIS] Synthesized alternative suggestions")

        result.sequence = tuple(head + body)
        return result

    def build_warning(self, issues: Tuple[str, ...]) -> Directive:
        if issues:
            reasoning = f"Detected potential concerns: {', '.join(issues[:MAX_REASONING_ISSUES])}."
        else:
            reasoning = "Potential health concerns detected."
        return Directive(
            kind=DirectiveKind.RISK_WARNING,
            props={
                "title": SYNTHESIZED_WARNING_TITLE,
                "severity": Severity.HIGH.value,
                "reasoning": reasoning,
                "source": SYNTHESIZED_WARNING_SOURCE,
            },
        )

    def build_alternatives(self, issues: Tuple[str, ...]) -> Directive:
        return Directive(
            kind=DirectiveKind.ALTERNATIVE_SUGGESTIONS,
            props={
                "suggestions": [
                    {"title": title, "reason": reason}
                    for title, reason in self.select_remediations(issues)
                ]
            },
        )

    def select_remediations(self, issues: Tuple[str, ...]) -> List[Tuple[str, str]]:
        """
        Round-robin over matched categories so every matched category is
        represented before any contributes a second idea.
        """
        matched = [
            list(rule.suggestions)
            for rule in self.policy.get_rules()
            if any(rule.matches(issue) for issue in issues)
        ]
        if not matched:
            return list(self.policy.fallback[:self.policy.max_suggestions])

        picked: List[Tuple[str, str]] = []
        depth = 0
        while len(picked) < self.policy.max_suggestions and any(depth < len(m) for m in matched):
            for ideas in matched:
                if depth < len(ideas) and len(picked) < self.policy.max_suggestions:
                    picked.append(ideas[depth])
            depth += 1
        return picked

    def _merge_warnings(self, warnings: List[Directive]) -> Directive:
        first = warnings[0]
        severity = max((w.get("severity") for w in warnings), key=lambda s: SEVERITY_RANK[s])
        reasoning = " ".join(w.get("reasoning").strip() for w in warnings)
        sources: Dict[str, None] = {}
        for w in warnings:
            if w.get("source", "").strip():
                sources.setdefault(w.get("source").strip(), None)
        return Directive(
            kind=DirectiveKind.RISK_WARNING,
            props={
                "title": first.get("title"),
                "severity": severity,
                "reasoning": reasoning,
                "source": "; ".join(sources),
            },
        )
