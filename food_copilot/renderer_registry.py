"""
Renderer Registry (static lookup)

Maps each directive kind to the display widget that renders it. The
renderer does no validation of its own; unknown kinds are skipped.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import logging

from food_copilot.contracts.directive_schema import Directive, DirectiveKind, resolve_kind
from food_copilot.utils.freezer import thaw

logger = logging.getLogger(__name__)

# CANONICAL WIDGET REGISTRY
WIDGET_REGISTRY: Dict[DirectiveKind, str] = {
    DirectiveKind.RISK_WARNING: "WarningCard",
    DirectiveKind.POSITIVE_BADGE: "HealthBadge",
    DirectiveKind.INGREDIENT_TABLE: "IngredientTable",
    DirectiveKind.SCIENCE_EXPLAINER: "ScienceExplainer",
    DirectiveKind.ALTERNATIVE_SUGGESTIONS: "AlternativeSuggestionCard",
    DirectiveKind.PROCESSING_METER: "ProcessingMeter",
    DirectiveKind.MACRO_DISTRIBUTION: "MacroDistribution",
    DirectiveKind.FOLLOW_UP_QUESTIONS: "SmartFollowUp",
    DirectiveKind.COMPARISON: "ComparisonCard",
    DirectiveKind.QUICK_VERDICT: "QuickVerdict",
    DirectiveKind.DOS_AND_DONTS: "DosAndDontsGrid",
    DirectiveKind.METHODOLOGY_STEPS: "MethodologyStepper",
    DirectiveKind.NUTRITION_SCORE: "NutritionScore",
    DirectiveKind.EVIDENCE_SOURCES: "EvidenceSources",
    DirectiveKind.LONG_TERM_IMPACT: "LongTermImpactCard",
}


@dataclass(frozen=True)
class RenderedWidget:
    widget: str
    props: Mapping[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"widget": self.widget, "props": thaw(self.props)}


def get_widget(kind: Any) -> Optional[str]:
    resolved = resolve_kind(kind)
    return WIDGET_REGISTRY.get(resolved) if resolved else None


def render(items: Iterable[Union[Directive, Mapping[str, Any]]]) -> List[RenderedWidget]:
    """
    Lookup-and-render over a finalized sequence (Directive objects or their
    wire dicts). Never raises on unknown kinds or odd entries.
    """
    rendered = []
    for item in items:
        if isinstance(item, Directive):
            kind, props = item.kind, item.props
        elif isinstance(item, Mapping):
            kind, props = item.get("component"), item.get("props")
        else:
            continue

        widget = get_widget(kind)
        if widget is None:
            logger.debug(f"Skipping unknown component {kind!r}")
            continue
        rendered.append(RenderedWidget(widget=widget, props=props if isinstance(props, Mapping) else {}))
    return rendered
