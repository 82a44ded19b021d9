import copy
import inspect
import math
import re

import pytest

from esg_engine.calculations import e1_insights
from esg_engine.calculations.modules import (
    climate_disclosures, climate_targets, credits, environment, esrs2, governance, materiality, scope1, scope2,
    scope3_activities, scope3_lines, social,
)
from esg_engine.calculations.run_module import (
    CALCULATORS, MODULE_IDS, UnknownModuleError, aggregate_results, create_default_result, module_title,
    run_module,
)

SOURCES = [
    e1_insights, climate_disclosures, climate_targets, credits, environment, esrs2, governance, materiality,
    scope1, scope2, scope3_activities, scope3_lines, social,
]
# Every field name any calculator reads, so malformed records hit real code paths
FIELD_NAMES = sorted({
    name
    for module in SOURCES
    for name in re.findall(r'(?:\.get\(|rows\(\w+, |_entries\(\w+, )"(\w+)"', inspect.getsource(module))
})
CONTEXT_SECTIONS = ("E1Context", "E1Targets")
QUALITATIVE_MODULES = ("SBM", "GOV", "IRO", "MR", "D1")


def _record(value):
    return {name: copy.deepcopy(value) for name in FIELD_NAMES}


MALFORMED_VALUES = [
    "abc",
    "",
    -5,
    -0.0,
    1e308,
    float("nan"),
    float("inf"),
    True,
    None,
    {},
    [None, "junk", 7, {"unexpected": "row"}],
    [_record(-5), _record("abc"), _record(float("nan"))],
]


def _malformed_input(value):
    record = _record(value)
    return {section: record for section in MODULE_IDS + CONTEXT_SECTIONS}


def test_catalogue_order_and_titles():
    assert MODULE_IDS[:4] == ("A1", "A2", "A3", "A4")
    assert MODULE_IDS[-3:] == ("G1", "D1", "D2")
    assert len(MODULE_IDS) == len(set(MODULE_IDS)) == 50
    assert module_title("B7") == "B7 – Dokumenteret vedvarende el"
    assert module_title("D2") == "D2 – Dobbelt væsentlighed & CSRD-gaps"


def test_only_emission_modules_apply_insights_themselves():
    flagged = {module_id for module_id, calculator in CALCULATORS.items() if calculator.applies_insights}
    assert flagged == set(e1_insights.SCOPE_BY_MODULE)


def test_unknown_module_raises():
    with pytest.raises(UnknownModuleError):
        run_module("Z9", {})
    with pytest.raises(ValueError):
        module_title("a1")


@pytest.mark.parametrize("module_id", MODULE_IDS)
def test_empty_input_scores_zero(module_id):
    for input_data in ({}, {module_id: {}}, {module_id: None}):
        result = run_module(module_id, input_data)

        assert result["value"] == 0
        assert math.copysign(1, result["value"]) == 1
        assert isinstance(result["unit"], str)
        if module_id in QUALITATIVE_MODULES:
            assert result["warnings"] == []


@pytest.mark.parametrize("module_id", MODULE_IDS)
@pytest.mark.parametrize("value", MALFORMED_VALUES, ids=repr)
def test_malformed_input_yields_finite_value(module_id, value):
    result = run_module(module_id, _malformed_input(value))

    assert isinstance(result["value"], (int, float))
    assert math.isfinite(result["value"])
    assert all(isinstance(line, str) for line in result["trace"])
    assert all(isinstance(line, str) for line in result["warnings"])


@pytest.mark.parametrize("module_id", MODULE_IDS)
def test_calculators_are_deterministic_and_leave_input_untouched(module_id):
    input_data = _malformed_input([_record(12), _record("3.5")])
    snapshot = copy.deepcopy(input_data)

    first = run_module(module_id, input_data)
    second = run_module(module_id, input_data)

    assert first == second
    assert input_data == snapshot


@pytest.mark.parametrize("module_id", ["B7", "B8", "B9", "B10", "B11"])
def test_credit_modules_never_report_negative_zero(module_id):
    result = run_module(module_id, {module_id: {"documentationQualityPercent": 0}})

    assert result["value"] == 0
    assert math.copysign(1, result["value"]) == 1


def test_insight_overlay_is_idempotent():
    input_data = {
        "E1Context": {"netRevenueDkk": 10_000_000, "previousYearScope1Tonnes": 2},
        "A2": {"vehicleConsumptions": [{"fuelType": "diesel", "unit": "liter", "quantity": 1000}]},
    }
    once = run_module("A2", input_data)
    twice = e1_insights.with_e1_insights("A2", input_data, once)

    assert twice["value"] == once["value"]
    assert twice["intensities"] == once["intensities"]
    assert twice["trend"] == once["trend"]


def test_aggregate_results_covers_every_module_in_order():
    results = aggregate_results({})

    assert [entry["moduleId"] for entry in results] == list(MODULE_IDS)
    assert all(entry["title"] == CALCULATORS[entry["moduleId"]].title for entry in results)
    assert all(entry["result"]["value"] == 0 for entry in results)


def test_create_default_result():
    assert create_default_result("B2", {"B2": 42}) == {
        "value": 42,
        "unit": "point",
        "assumptions": ["Standardfaktor: 1"],
        "trace": ["Input(B2)=42"],
        "warnings": [],
    }


def test_create_default_result_coerces_raw_values():
    assert create_default_result("X", {})["trace"] == ["Input(X)="]
    assert create_default_result("X", {})["value"] == 0
    assert create_default_result("X", {"X": "7.5"})["value"] == 7.5
    assert create_default_result("X", {"X": "abc"})["value"] == 0
    assert create_default_result("X", {"X": True})["trace"] == ["Input(X)=true"]
