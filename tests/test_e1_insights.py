from esg_engine.calculations.e1_insights import derive_status, with_e1_insights
from esg_engine.calculations.modules.scope2 import run_b1
from esg_engine.calculations.run_module import run_module


def _context_input():
    return {
        "E1Context": {
            "netRevenueDkk": 50_000_000,
            "productionVolume": 10_000,
            "productionUnit": "stk.",
            "employeesFte": 200,
            "totalEnergyConsumptionKwh": 180_000,
            "energyMixLines": [
                {"energyType": "electricity", "consumptionKwh": 120_000, "sharePercent": 66,
                 "documentationQualityPercent": 95},
                {"energyType": "districtHeat", "consumptionKwh": 60_000, "sharePercent": 34,
                 "documentationQualityPercent": 80},
            ],
            "previousYearScope1Tonnes": None,
            "previousYearScope2Tonnes": 35,
            "previousYearScope3Tonnes": None,
        },
        "E1Targets": {
            "targets": [
                {"id": "scope2-main", "name": "Scope 2 reduktion", "scope": "scope2", "targetYear": 2026,
                 "targetValueTonnes": 20, "baselineYear": 2023, "baselineValueTonnes": 40,
                 "owner": "Energiansvarlig", "status": "lagging", "description": None},
            ]
        },
        "B1": {"electricityConsumptionKwh": 80_000, "emissionFactorKgPerKwh": 0.233, "renewableSharePercent": 20},
    }


def test_scope_module_gets_intensities_trend_and_target_progress():
    result = run_b1(_context_input())

    bases = [entry["basis"] for entry in result["intensities"]]
    assert {"netRevenue", "production", "energy"} <= set(bases)
    assert result["trend"]["previousValue"] == 35
    assert result["trend"]["unit"] == result["unit"]
    assert result["targetProgress"]["scope"] == "scope2"
    assert result["targetProgress"]["owner"] == "Energiansvarlig"
    assert result["energyMix"]
    assert any(line.startswith("targetProgress.status=") for line in result["trace"])
    assert not any(
        fact["conceptKey"] == "E1IntensityLocationBasedPerNetRevenue" for fact in result.get("esrsFacts", [])
    )


def test_overlay_keeps_value_and_is_noop_without_context():
    bare = run_b1({"B1": {"electricityConsumptionKwh": 80_000, "emissionFactorKgPerKwh": 0.233}})
    enriched = run_b1(_context_input())

    assert enriched["value"] == run_b1({**_context_input(), "E1Context": {}, "E1Targets": {}})["value"]
    for key in ("intensities", "trend", "targetProgress", "energyMix"):
        assert key not in bare


def test_overlay_ignores_modules_outside_scope_1_2_3():
    result = {"value": 12, "unit": "point", "assumptions": [], "trace": [], "warnings": []}
    assert with_e1_insights("S1", _context_input(), result) is result


def test_dispatcher_does_not_apply_overlay_twice():
    input_data = _context_input()
    result = run_module("B1", input_data)

    assert result == run_b1(input_data)
    assert sum(1 for line in result["trace"] if line.startswith("targetProgress.status=")) == 1


def test_derive_status_thresholds():
    assert derive_status(None) is None
    assert derive_status(95) == "onTrack"
    assert derive_status(60) == "lagging"
    assert derive_status(10) == "atRisk"


def test_overlay_applied_twice_leaves_result_unchanged():
    input_data = {
        "E1Context": {"netRevenueDkk": 10_000_000, "previousYearScope1Tonnes": 2},
        "A1": {"fuelConsumptions": [{"fuelType": "naturgas", "unit": "Nm³", "quantity": 1000}]},
    }
    once = run_module("A1", input_data)
    twice = with_e1_insights("A1", input_data, once)

    assert twice == once
    assert sum(1 for line in twice["trace"] if line.startswith("intensity.")) == 1


def test_blank_target_scope_does_not_match_as_combined():
    input_data = _context_input()
    input_data["E1Targets"]["targets"] = [
        {"id": "blank-scope", "scope": "", "targetValueTonnes": 10, "baselineValueTonnes": 40},
    ]

    assert "targetProgress" not in run_b1(input_data)


def test_missing_target_scope_falls_back_to_combined():
    input_data = _context_input()
    input_data["E1Targets"]["targets"] = [
        {"id": "group", "scope": None, "targetValueTonnes": 10, "baselineValueTonnes": 40},
    ]

    result = run_b1(input_data)

    assert result["targetProgress"]["scope"] == "combined"
    assert result["targetProgress"]["targetId"] == "group"
