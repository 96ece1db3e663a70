"""
Directive Schema v1.0
Defines the closed catalog of UI directives the generator may emit.

A directive is one {component, props} unit. The generator is prompted with
component names (e.g. "WarningCard"); internally every directive is keyed by
its canonical kind tag (e.g. "risk-warning").
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
from dataclasses import dataclass, field

from food_copilot.utils.freezer import FrozenDict, deep_freeze, thaw


class DirectiveKind(str, Enum):
    RISK_WARNING = "risk-warning"
    POSITIVE_BADGE = "positive-badge"
    INGREDIENT_TABLE = "ingredient-table"
    SCIENCE_EXPLAINER = "science-explainer"
    ALTERNATIVE_SUGGESTIONS = "alternative-suggestions"
    PROCESSING_METER = "processing-meter"
    MACRO_DISTRIBUTION = "macro-distribution"
    FOLLOW_UP_QUESTIONS = "follow-up-questions"
    COMPARISON = "comparison"
    QUICK_VERDICT = "quick-verdict"
    DOS_AND_DONTS = "dos-and-donts"
    METHODOLOGY_STEPS = "methodology-steps"
    NUTRITION_SCORE = "nutrition-score"
    EVIDENCE_SOURCES = "evidence-sources"
    LONG_TERM_IMPACT = "long-term-impact"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IngredientStatus(str, Enum):
    GOOD = "good"
    BAD = "bad"


class VerdictStatus(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    AVOID = "avoid"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class BadgeVariant(str, Enum):
    SUCCESS = "success"
    INFO = "info"


class Authority(str, Enum):
    WHO = "WHO"
    FDA = "FDA"
    ICMR = "ICMR"
    NIH = "NIH"
    PEER_REVIEWED = "Peer-Reviewed"


# Severity ranking used when merging warnings (higher wins)
SEVERITY_RANK: Dict[str, int] = {
    Severity.LOW.value: 0,
    Severity.MEDIUM.value: 1,
    Severity.HIGH.value: 2,
}

# Component names the generator is prompted with
WIRE_ALIASES: Dict[str, DirectiveKind] = {
    "WarningCard": DirectiveKind.RISK_WARNING,
    "HealthBadge": DirectiveKind.POSITIVE_BADGE,
    "IngredientTable": DirectiveKind.INGREDIENT_TABLE,
    "ScienceExplainer": DirectiveKind.SCIENCE_EXPLAINER,
    "AlternativeSuggestionCard": DirectiveKind.ALTERNATIVE_SUGGESTIONS,
    "ProcessingMeter": DirectiveKind.PROCESSING_METER,
    "MacroDistribution": DirectiveKind.MACRO_DISTRIBUTION,
    "SmartFollowUp": DirectiveKind.FOLLOW_UP_QUESTIONS,
    "ComparisonCard": DirectiveKind.COMPARISON,
    "QuickVerdict": DirectiveKind.QUICK_VERDICT,
    "DosAndDontsGrid": DirectiveKind.DOS_AND_DONTS,
    "MethodologyStepper": DirectiveKind.METHODOLOGY_STEPS,
    "NutritionScore": DirectiveKind.NUTRITION_SCORE,
    "EvidenceSources": DirectiveKind.EVIDENCE_SOURCES,
    "LongTermImpactCard": DirectiveKind.LONG_TERM_IMPACT,
}

# Props that hold a list of records and may arrive as JSON text.
# Value is True when list elements are objects (and may themselves be JSON text).
NESTED_COLLECTION_FIELDS: Dict[DirectiveKind, Dict[str, bool]] = {
    DirectiveKind.INGREDIENT_TABLE: {"items": True},
    DirectiveKind.ALTERNATIVE_SUGGESTIONS: {"suggestions": True},
    DirectiveKind.DOS_AND_DONTS: {"recommended": True, "avoid": True},
    DirectiveKind.METHODOLOGY_STEPS: {"steps": True},
    DirectiveKind.EVIDENCE_SOURCES: {"sources": True},
    DirectiveKind.LONG_TERM_IMPACT: {"impacts": True},
    DirectiveKind.FOLLOW_UP_QUESTIONS: {"questions": False},
}


def resolve_kind(component: Any) -> Optional[DirectiveKind]:
    """Map a canonical tag or a wire alias to its DirectiveKind; None if outside the catalog."""
    if isinstance(component, DirectiveKind):
        return component
    if not isinstance(component, str):
        return None
    name = component.strip()
    if name in WIRE_ALIASES:
        return WIRE_ALIASES[name]
    try:
        return DirectiveKind(name)
    except ValueError:
        return None


@dataclass(frozen=True)
class Directive:
    kind: DirectiveKind
    props: Mapping[str, Any] = field(default_factory=FrozenDict)

    def __post_init__(self):
        if not isinstance(self.props, FrozenDict):
            object.__setattr__(self, "props", deep_freeze(dict(self.props)))

    def get(self, key: str, default: Any = None) -> Any:
        return self.props.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.kind.value,
            "props": thaw(self.props),
        }


DirectiveSequence = Tuple[Directive, ...]


def sequence_to_dicts(sequence: DirectiveSequence) -> list:
    return [d.to_dict() for d in sequence]
