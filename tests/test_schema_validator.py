import unittest

import pytest

from food_copilot.contracts.directive_schema import DirectiveKind
from food_copilot.schema_validator import validate_directive, validate_sequence

EXPLANATION = "Refined flour is digested quickly, so blood sugar rises sharply after eating."


def _impact(**overrides):
    impact = {
        "effect": "Insulin resistance",
        "explanation": "Frequent sugar spikes make cells respond less to insulin over time.",
        "severity": "medium",
    }
    impact.update(overrides)
    return impact


def _source(**overrides):
    source = {
        "title": "Sugar intake guideline",
        "authority": "WHO",
        "description": "Free sugars should stay below 10% of energy intake.",
        "confidence": 90,
    }
    source.update(overrides)
    return source


VALID = [
    ("WarningCard", {"title": "High sugar", "severity": "high", "reasoning": "Spikes glucose.", "source": "ADA"}),
    ("HealthBadge", {"message": "Keto Friendly", "variant": "info"}),
    ("IngredientTable", {"items": [{"label": "Sugar", "value": "20g", "status": "bad"}]}),
    ("ScienceExplainer", {"title": "Glycemic load", "explaination": EXPLANATION}),
    ("AlternativeSuggestionCard", {"suggestions": [{"title": "Oats", "reason": "Fiber", "link": ""}]}),
    ("ProcessingMeter", {"level": 3, "title": "Processed", "description": "Canned"}),
    ("MacroDistribution", {"carbs": 50, "protein": 20.5, "fat": 29.5, "calories": 350}),
    ("SmartFollowUp", {"questions": ["Is this keto?"]}),
    ("ComparisonCard", {"nutrient": "Sugar", "currentValue": "20g", "comparisonText": "5 cubes", "sentiment": "negative"}),
    ("QuickVerdict", {"status": "caution", "title": "Limit it", "explanation": "Moderate portions only.", "nuanceTag": "Diabetes"}),
    ("DosAndDontsGrid", {"condition": "PCOS", "recommended": [{"name": "Lentils", "reason": "Protein"}], "avoid": []}),
    ("MethodologyStepper", {"title": "Reduce starch", "steps": [{"action": "Rinse", "detail": "Cold water", "tip": "Twice"}]}),
    ("NutritionScore", {"score": 72, "subtitle": "Decent", "feedback": "Fine"}),
    ("EvidenceSources", {"sources": [_source()]}),
    ("LongTermImpactCard", {"impacts": [_impact()], "timeframe": "Over months"}),
]


@pytest.mark.parametrize("component,props", VALID, ids=[c for c, _ in VALID])
def test_valid_directives_pass(component, props):
    directive = validate_directive({"component": component, "props": props})
    assert directive is not None
    assert directive.kind.value == directive.to_dict()["component"]


INVALID = [
    ("WarningCard", {"title": "X", "severity": "critical", "reasoning": "r", "source": "s"}),
    ("WarningCard", {"title": "X", "severity": "high", "reasoning": "", "source": "s"}),
    ("HealthBadge", {"message": "Vegan", "variant": "danger"}),
    ("IngredientTable", {"items": []}),
    ("IngredientTable", {"items": [{"label": "Sugar", "value": "20g", "status": "ok"}]}),
    ("ScienceExplainer", {"title": "T", "explanation": "Too short."}),
    ("ScienceExplainer", {"title": "T", "explanation": ["Step one is a list.", "Step two is a list too."]}),
    ("ScienceExplainer", {"title": "T", "explanation": EXPLANATION + "\n\n" + EXPLANATION}),
    ("ScienceExplainer", {"title": "T", "explanation": {"text": EXPLANATION}}),
    ("AlternativeSuggestionCard", {"suggestions": [{"title": t} for t in "abcd"]}),
    ("AlternativeSuggestionCard", {"suggestions": [{"reason": "no title"}]}),
    ("ProcessingMeter", {"level": 5, "title": "", "description": ""}),
    ("ProcessingMeter", {"level": True, "title": "", "description": ""}),
    ("ProcessingMeter", {"level": "4", "title": "", "description": ""}),
    ("MacroDistribution", {"carbs": 50, "protein": 20, "fat": 30, "calories": -1}),
    ("MacroDistribution", {"carbs": 150, "protein": 20, "fat": 30, "calories": 100}),
    ("MacroDistribution", {"carbs": "50", "protein": 20, "fat": 30, "calories": 100}),
    ("MacroDistribution", {"carbs": float("nan"), "protein": 20, "fat": 30, "calories": 100}),
    ("MacroDistribution", {"carbs": 50, "protein": 20, "fat": 30, "calories": int("9" * 400)}),
    ("SmartFollowUp", {"questions": []}),
    ("SmartFollowUp", {"questions": ["ok", 3]}),
    ("ComparisonCard", {"nutrient": "Sugar", "currentValue": "20g", "comparisonText": "x", "sentiment": "bad"}),
    ("QuickVerdict", {"status": "maybe", "title": "T", "explanation": "E"}),
    ("DosAndDontsGrid", {"condition": "PCOS", "recommended": [], "avoid": []}),
    ("MethodologyStepper", {"title": "T", "steps": []}),
    ("NutritionScore", {"score": 120}),
    ("EvidenceSources", {"sources": [_source(confidence=69)]}),
    ("EvidenceSources", {"sources": [_source(authority="Blog")]}),
    ("EvidenceSources", {"sources": []}),
    ("LongTermImpactCard", {"impacts": [_impact(severity="extreme")], "timeframe": "Years"}),
    ("LongTermImpactCard", {"impacts": [_impact(explanation="short")], "timeframe": "Years"}),
]


@pytest.mark.parametrize("component,props", INVALID)
def test_contract_violations_drop_whole_directive(component, props):
    assert validate_directive({"component": component, "props": props}) is None


class TestSchemaValidator(unittest.TestCase):
    def test_empty_impacts_dropped(self):
        """A long-term impact card with no impacts is dropped, not rendered empty."""
        result = validate_directive({
            "component": "long-term-impact",
            "props": {"title": "Long-Term", "impacts": [], "timeframe": "Over years"},
        })
        self.assertIsNone(result)

    def test_confidence_must_be_numeric(self):
        """Evidence confidence given as a word is dropped whole."""
        result = validate_directive({
            "component": "evidence-sources",
            "props": {"sources": [_source(), _source(confidence="high")]},
        })
        self.assertIsNone(result)

    def test_confidence_bounds_inclusive(self):
        """Confidence 70 and 100 are both accepted."""
        result = validate_directive({
            "component": "evidence-sources",
            "props": {"sources": [_source(confidence=70), _source(confidence=100)]},
        })
        self.assertIsNotNone(result)

    def test_unknown_kind_dropped(self):
        """Components outside the catalog never reach the renderer."""
        self.assertIsNone(validate_directive({"component": "Carousel", "props": {}}))
        self.assertIsNone(validate_directive({"props": {}}))
        self.assertIsNone(validate_directive("WarningCard"))

    def test_extra_props_stripped(self):
        """Only contract fields survive validation."""
        result = validate_directive({
            "component": "HealthBadge",
            "props": {"message": "Vegan", "variant": "success", "onClick": "alert(1)"},
        })
        self.assertEqual(dict(result.props), {"message": "Vegan", "variant": "success"})

    def test_defaults_applied(self):
        """Badge variant and impact title have defaults."""
        badge = validate_directive({"component": "HealthBadge", "props": {"message": "Vegan"}})
        self.assertEqual(badge.get("variant"), "success")

        card = validate_directive({
            "component": "LongTermImpactCard",
            "props": {"impacts": [_impact()], "timeframe": "Years"},
        })
        self.assertEqual(card.get("title"), "Long-Term Health Impact")

    def test_explanation_spelling_normalized(self):
        """The prompted spelling is accepted and emitted under 'explanation'."""
        result = validate_directive({
            "component": "ScienceExplainer",
            "props": {"title": "Starch", "explaination": "  " + EXPLANATION + "  "},
        })
        self.assertEqual(result.get("explanation"), EXPLANATION)
        self.assertNotIn("explaination", result.props)

    def test_processing_level_cast_to_int(self):
        result = validate_directive({
            "component": "ProcessingMeter",
            "props": {"level": 4.0, "title": "", "description": ""},
        })
        self.assertEqual(result.get("level"), 4)
        self.assertIsInstance(result.get("level"), int)

    def test_canonical_kind_accepted(self):
        result = validate_directive({
            "component": "risk-warning",
            "props": {"title": "T", "severity": "low", "reasoning": "R", "source": ""},
        })
        self.assertEqual(result.kind, DirectiveKind.RISK_WARNING)

    def test_validated_props_are_read_only(self):
        """Validated directives cannot be edited in place."""
        result = validate_directive({
            "component": "IngredientTable",
            "props": {"items": [{"label": "Salt", "value": "2g", "status": "bad"}]},
        })
        with self.assertRaises(TypeError):
            result.props["items"] = []
        with self.assertRaises(TypeError):
            result.props["items"][0]["status"] = "good"

    def test_validate_sequence_preserves_order_and_counts_drops(self):
        candidates = [
            {"component": "HealthBadge", "props": {"message": "Vegan"}},
            {"component": "Carousel", "props": {}},
            {"component": "SmartFollowUp", "props": {"questions": ["Why?"]}},
            None,
        ]
        sequence, dropped = validate_sequence(candidates)
        self.assertEqual(
            [d.kind for d in sequence],
            [DirectiveKind.POSITIVE_BADGE, DirectiveKind.FOLLOW_UP_QUESTIONS],
        )
        self.assertEqual(dropped, 2)


if __name__ == '__main__':
    unittest.main()
