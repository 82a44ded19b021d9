import pytest

from esg_engine.calculations.modules.credits import run_b7
from esg_engine.calculations.modules.scope2 import run_b1, run_b2


def test_b1_net_emissions_with_renewable_reduction():
    result = run_b1({
        "B1": {"electricityConsumptionKwh": 120000, "emissionFactorKgPerKwh": 0.233, "renewableSharePercent": 40}
    })

    assert result["value"] == 17.894
    assert result["unit"] == "t CO2e"
    assert result["warnings"] == []
    assert "renewableReductionKg=10065.6" in result["trace"]


def test_b1_negative_and_missing_values():
    result = run_b1({
        "B1": {"electricityConsumptionKwh": -10, "emissionFactorKgPerKwh": None, "renewableSharePercent": 140}
    })

    assert result["value"] == 0
    assert "renewableSharePercent=100" in result["trace"]
    assert result["warnings"] == [
        "Feltet electricityConsumptionKwh kan ikke være negativt. 0 anvendes i stedet.",
        "Feltet emissionFactorKgPerKwh mangler og behandles som 0.",
        "Andelen af vedvarende energi er begrænset til 100%.",
    ]


def test_b2_deducts_recovered_heat():
    result = run_b2({
        "B2": {"heatConsumptionKwh": 80000, "recoveredHeatKwh": 5000, "emissionFactorKgPerKwh": 0.12,
               "renewableSharePercent": 30}
    })

    assert result["value"] == 6.705
    assert result["warnings"] == []
    assert "netHeatConsumptionKwh=75000" in result["trace"]


def test_b2_recovery_above_consumption():
    result = run_b2({
        "B2": {"heatConsumptionKwh": 10000, "recoveredHeatKwh": 12500, "emissionFactorKgPerKwh": -0.1,
               "renewableSharePercent": 150}
    })

    assert result["value"] == 0
    assert "emissionFactorKgPerKwh=0" in result["trace"]
    assert result["warnings"] == [
        "Feltet emissionFactorKgPerKwh kan ikke være negativt. 0 anvendes i stedet.",
        "Andelen af vedvarende energi er begrænset til 100%.",
        "Genindvundet varme overstiger det registrerede forbrug. Nettoforbruget sættes til 0.",
    ]


def test_b7_documented_renewable_reduction_is_negative():
    result = run_b7({
        "B7": {"documentedRenewableKwh": 12000, "residualEmissionFactorKgPerKwh": 0.233,
               "documentationQualityPercent": 90}
    })

    assert result["value"] == -2.391
    assert "qualityAdjustedKwh=10260" in result["trace"]
    assert result["warnings"] == []


def test_b7_invalid_documentation():
    result = run_b7({
        "B7": {"documentedRenewableKwh": -100, "residualEmissionFactorKgPerKwh": None,
               "documentationQualityPercent": 150}
    })

    assert result["value"] == 0
    assert "documentationQualityPercent=100" in result["trace"]
    assert result["warnings"] == [
        "Feltet documentedRenewableKwh kan ikke være negativt. 0 anvendes i stedet.",
        "Feltet residualEmissionFactorKgPerKwh mangler og behandles som 0.",
        "Dokumentationskvalitet er begrænset til 100%.",
    ]


def test_b7_low_documentation_quality():
    result = run_b7({
        "B7": {"documentedRenewableKwh": 5000, "residualEmissionFactorKgPerKwh": 0.2,
               "documentationQualityPercent": 5}
    })

    assert result["value"] == pytest.approx(-0.048, abs=0.001)
    assert result["warnings"] == ["Dokumentationskvalitet under 10% kan blive udfordret i revision."]
