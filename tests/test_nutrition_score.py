import pytest

from food_copilot.contracts.directive_schema import Directive, DirectiveKind
from food_copilot.nutrition_score import WARNING_CAP, compute_nutrition_score, score_directive
from food_copilot.schema_validator import validate_directive


def macros(carbs, protein, fat, calories=400):
    return Directive(
        kind=DirectiveKind.MACRO_DISTRIBUTION,
        props={"carbs": carbs, "protein": protein, "fat": fat, "calories": calories},
    )


def meter(level):
    return Directive(kind=DirectiveKind.PROCESSING_METER, props={"level": level, "title": "", "description": ""})


def ingredients(*statuses):
    return Directive(
        kind=DirectiveKind.INGREDIENT_TABLE,
        props={"items": [{"label": f"item{i}", "value": "", "status": s} for i, s in enumerate(statuses)]},
    )


def warning(reasoning="Too much sugar."):
    return Directive(
        kind=DirectiveKind.RISK_WARNING,
        props={"title": "T", "severity": "high", "reasoning": reasoning, "source": ""},
    )


def comparison(sentiment):
    return Directive(kind=DirectiveKind.COMPARISON, props={
        "nutrient": "Sugar", "currentValue": "20g", "comparisonText": "5 cubes", "sentiment": sentiment,
    })


def test_empty_sequence_scores_full():
    result = compute_nutrition_score(())
    assert result.score == 100
    assert result.rationale == ()


def test_high_carb_macro_scores_below_fifty():
    result = compute_nutrition_score((macros(70, 10, 20),))
    assert result.score < 50
    assert result.rationale[0].startswith("High carbohydrate ratio")


def test_low_protein_share_deducts_without_cap():
    result = compute_nutrition_score((macros(50, 5, 45),))
    assert result.score == 90


def test_empty_macros_not_judged():
    """All-zero macros carry no data, so no low-protein deduction."""
    result = compute_nutrition_score((macros(0, 0, 0, 0),))
    assert result.score == 100
    assert result.rationale == ()


def test_moderate_processing_deducts_without_cap():
    assert compute_nutrition_score((meter(3),)).score == 90


@pytest.mark.parametrize("sequence", [
    (meter(4),),
    (ingredients("bad"),),
    (comparison("negative"),),
    (warning(),),
])
def test_warning_or_issue_caps_score(sequence):
    assert compute_nutrition_score(sequence).score <= WARNING_CAP


def test_bad_ingredient_penalty_is_bounded():
    one = compute_nutrition_score((ingredients("good", "good"),))
    assert one.score == 100
    many = compute_nutrition_score((ingredients(*["bad"] * 10),))
    assert many.rationale[0].startswith("Contains concerning ingredients")
    assert many.score == WARNING_CAP


def test_positive_comparison_does_not_deduct():
    assert compute_nutrition_score((comparison("positive"),)).score == 100


def test_score_clamped_at_zero():
    sequence = (warning(), meter(4), ingredients(*["bad"] * 5), macros(95, 2, 3), comparison("negative"))
    result = compute_nutrition_score(sequence)
    assert result.score == 0
    assert len(result.rationale) == 3


def test_warning_reasoning_used_as_rationale():
    result = compute_nutrition_score((warning("Contains peanuts."),))
    assert result.rationale == ("Contains peanuts.",)


def test_score_directive_passes_its_own_contract():
    directive = score_directive(compute_nutrition_score((meter(3),)))
    validated = validate_directive(directive.to_dict())
    assert validated is not None
    assert validated.get("score") == 90
