import json

import pytest

from food_copilot.directive_normalizer import (
    DirectiveNormalizer,
    extract_candidates,
    extract_json_text,
    normalize_sequence,
)


@pytest.fixture
def normalizer():
    return DirectiveNormalizer()


def test_stringified_collection_is_parsed(normalizer):
    rows = [{"label": "Sugar", "value": "20g", "status": "bad"}]
    out = normalizer.normalize_directive(
        {"component": "IngredientTable", "props": {"items": json.dumps(rows)}}
    )
    assert out["component"] == "IngredientTable"
    assert out["props"]["items"] == rows


def test_stringified_elements_are_parsed(normalizer):
    out = normalizer.normalize_directive({
        "component": "alternative-suggestions",
        "props": {"suggestions": [
            json.dumps({"title": "Brown rice", "reason": "More fiber"}),
            {"title": "Quinoa"},
        ]},
    })
    assert out["props"]["suggestions"] == [
        {"title": "Brown rice", "reason": "More fiber"},
        {"title": "Quinoa"},
    ]


def test_unparsable_field_is_dropped(normalizer):
    out = normalizer.normalize_directive({
        "component": "LongTermImpactCard",
        "props": {"impacts": "[{\"effect\": ", "timeframe": "months"},
    })
    assert "impacts" not in out["props"]
    assert out["props"]["timeframe"] == "months"


def test_malformed_element_drops_whole_field(normalizer):
    out = normalizer.normalize_directive({
        "component": "MethodologyStepper",
        "props": {"title": "Rinse", "steps": [{"action": "Soak"}, "{not json"]},
    })
    assert "steps" not in out["props"]


def test_non_record_element_drops_whole_field(normalizer):
    out = normalizer.normalize_directive({
        "component": "EvidenceSources",
        "props": {"sources": [42]},
    })
    assert "sources" not in out["props"]


def test_plain_string_fields_are_untouched(normalizer):
    text = "Starch [gelatinizes] when heated, which raises the glycemic response."
    out = normalizer.normalize_directive({
        "component": "ScienceExplainer",
        "props": {"title": "Starch", "explaination": text},
    })
    assert out["props"]["explaination"] == text


def test_question_strings_are_not_parsed_as_records(normalizer):
    out = normalizer.normalize_directive({
        "component": "SmartFollowUp",
        "props": {"questions": ["Is this keto?", "{maybe}"]},
    })
    assert out["props"]["questions"] == ["Is this keto?", "{maybe}"]


def test_stringified_question_list_is_parsed(normalizer):
    out = normalizer.normalize_directive({
        "component": "SmartFollowUp",
        "props": {"questions": '["Is this keto?"]'},
    })
    assert out["props"]["questions"] == ["Is this keto?"]


def test_props_as_json_text(normalizer):
    out = normalizer.normalize_directive({
        "component": "HealthBadge",
        "props": '{"message": "Keto Friendly"}',
    })
    assert out["props"] == {"message": "Keto Friendly"}


def test_unknown_kind_passes_through_unchanged(normalizer):
    out = normalizer.normalize_directive({"component": "Carousel", "props": {"items": "[oops"}})
    assert out == {"component": "Carousel", "props": {"items": "[oops"}}


@pytest.mark.parametrize("candidate", [
    None,
    42,
    "WarningCard",
    ["a", "b"],
    {"component": 5, "props": {}},
    {"component": "WarningCard", "props": "not json"},
    {"component": "IngredientTable", "props": {"items": "[" * 5000}},
])
def test_normalizer_is_total(normalizer, candidate):
    out = normalizer.normalize_directive(candidate)
    assert isinstance(out["component"], str)
    assert isinstance(out["props"], dict)


def test_input_is_not_mutated(normalizer):
    props = {"items": '[{"label": "Salt", "value": "2g", "status": "bad"}]'}
    normalizer.normalize_directive({"component": "IngredientTable", "props": props})
    assert isinstance(props["items"], str)


def test_extract_json_text_strips_fences_and_think_blocks():
    text = "<think>plan</think>\nHere you go:\n```json\n{\"uiComponents\": []}\n```"
    assert extract_json_text(text) == '{"uiComponents": []}'


def test_extract_json_text_takes_brace_span():
    assert extract_json_text('Sure! {"a": 1} hope it helps') == '{"a": 1}'


def test_extract_candidates_shapes():
    item = {"component": "WarningCard", "props": {}}
    assert extract_candidates({"uiComponents": [item]}) == [item]
    assert extract_candidates([item]) == [item]
    assert extract_candidates(json.dumps({"uiComponents": [item]})) == [item]
    assert extract_candidates(json.dumps({"uiComponents": [item]}).encode()) == [item]


@pytest.mark.parametrize("payload", [None, 3.5, "no json here", {"uiComponents": "x"}, {"other": []}])
def test_extract_candidates_garbage_yields_nothing(payload):
    assert extract_candidates(payload) == []


def test_normalize_sequence_keeps_order():
    raw = {"uiComponents": [
        {"component": "HealthBadge", "props": {"message": "Vegan"}},
        {"component": "WarningCard", "props": {}},
    ]}
    out = normalize_sequence(raw)
    assert [c["component"] for c in out] == ["HealthBadge", "WarningCard"]
