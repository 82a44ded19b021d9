import json

import pytest

from esg_engine.calculations.modules.climate_disclosures import (
    run_e1_carbon_price, run_e1_decarbonisation_drivers, run_e1_risk_geography, run_e1_scenarios,
)
from esg_engine.calculations.modules.climate_targets import run_e1_targets


def _facts(result):
    return {fact["conceptKey"]: fact["value"] for fact in result.get("esrsFacts", [])}


def _metrics(result):
    return {metric["label"]: metric["value"] for metric in result.get("metrics", [])}


@pytest.fixture
def targets_input():
    return {
        "E1Context": {
            "totalEnergyConsumptionKwh": 1_950_000,
            "energyProductionKwh": 250_000,
            "renewableEnergyProductionKwh": 180_000,
            "energyMixLines": [
                {"energyType": "electricity", "consumptionKwh": 1_500_000, "documentationQualityPercent": 80,
                 "sharePercent": 70},
                {"energyType": "biogas", "consumptionKwh": 300_000, "documentationQualityPercent": 90,
                 "sharePercent": 15},
                {"energyType": "diesel", "consumptionKwh": 150_000, "documentationQualityPercent": 60,
                 "sharePercent": 15},
            ],
        },
        "E1Targets": {
            "targets": [
                {"id": "scope1-main", "name": "Scope 1 reduktion", "scope": "scope1", "targetYear": 2027,
                 "targetValueTonnes": 45, "baselineYear": 2022, "baselineValueTonnes": 70, "owner": "Operations",
                 "status": "lagging", "description": "Effektivisering af procesvarme og udskiftning af kedler.",
                 "milestones": [{"label": "Energikortlægning", "dueYear": 2024},
                                {"label": "Nye brændere", "dueYear": 2025}]},
                {"id": None, "name": None, "scope": "scope3", "targetYear": 2030, "targetValueTonnes": 120,
                 "baselineYear": 2023, "baselineValueTonnes": 200, "owner": "Supply Chain", "status": "onTrack",
                 "description": "Inddragelse af leverandører i reduktionsprogram.",
                 "milestones": [{"label": "Supplier engagement", "dueYear": 2026}]},
            ],
            "actions": [
                {"title": "Udskifte gaskedler", "description": "Konvertering til varmepumpe i hovedfabrikken.",
                 "owner": "Teknisk chef", "dueQuarter": "2025-Q4", "status": "inProgress"},
                {"title": "CO₂-krav til leverandører", "description": "Indarbejd klimakrav i leverandørkontrakter.",
                 "owner": "Indkøb", "dueQuarter": "2024-Q3", "status": "planned"},
            ],
        },
    }


@pytest.fixture
def disclosures_input():
    return {
        "E1Scenarios": {
            "scenarios": [
                {"name": "IEA NZE", "provider": "IEA", "scenarioType": "netZero15", "timeHorizon": "longTerm",
                 "coveragePercent": 85, "description": "Globalt 1,5°C scenarie anvendt til stress-test."},
                {"name": "Regional transition", "provider": "Internt analyse-team", "scenarioType": "stressTest",
                 "timeHorizon": "mediumTerm", "coveragePercent": 40,
                 "description": "Regional transition med høje CO₂-priser."},
            ],
            "scenarioNarrative": "Scenarierne informerer klimarisiko og valideres årligt af bestyrelsen.",
        },
        "E1CarbonPrice": {
            "carbonPrices": [
                {"scheme": "Investeringsscreening", "scope": "combined", "priceDkkPerTonne": 900,
                 "coveragePercent": 60, "appliesToCapex": True, "appliesToOpex": False,
                 "appliesToInvestmentDecisions": True, "alignedWithFinancialStatements": True},
                {"scheme": "Produktprissætning", "scope": "scope3", "priceDkkPerTonne": 450,
                 "coveragePercent": 35, "appliesToCapex": False, "appliesToOpex": True,
                 "appliesToInvestmentDecisions": False, "alignedWithFinancialStatements": False},
            ],
            "methodologyNarrative": "CO₂-priserne valideres mod EU ETS og NGFS scenarier.",
        },
        "E1RiskGeography": {
            "riskRegions": [
                {"geography": "Sydøstasien", "riskType": "acutePhysical", "timeHorizon": "shortTerm",
                 "assetsAtRiskDkk": 120_000_000, "revenueAtRiskDkk": 45_000_000},
                {"geography": "Europa", "riskType": "transition", "timeHorizon": "mediumTerm",
                 "assetsAtRiskDkk": 80_000_000, "revenueAtRiskDkk": 65_000_000},
            ],
        },
        "E1DecarbonisationDrivers": {
            "drivers": [
                {"lever": "energyEfficiency", "name": "LED og varmegenvinding", "expectedReductionTonnes": 1200,
                 "investmentNeedDkk": 5_500_000, "startYear": 2025},
                {"lever": "renewableEnergy", "name": "PPA 25 MW", "expectedReductionTonnes": 3400,
                 "investmentNeedDkk": 12_000_000, "startYear": 2026},
            ],
        },
    }


def test_e1_targets_summarises_targets_actions_and_energy(targets_input):
    result = run_e1_targets(targets_input)

    assert result["value"] == 2
    assert result["unit"] == "mål"
    assert result["targetsOverview"][0]["id"] == "scope1-1"
    assert result["targetsOverview"][0]["scope"] == "scope1"
    assert len(result["plannedActions"]) == 2
    assert len(result["energyMix"]) == 3
    assert "targets.onTrack=1" in result["trace"]
    assert "targets.lagging=1" in result["trace"]
    assert result["warnings"] == []

    metrics = _metrics(result)
    assert metrics["Samlet energiforbrug"] == 1_950_000
    assert metrics["Vedvarende energiandel"] == 9.2
    assert metrics["Ikke-vedvarende energiandel"] == 90.8

    facts = _facts(result)
    assert facts["E1TargetsPresent"] is True
    assert "Scope 1 reduktion" in facts["E1TargetsNarrative"]
    assert facts["E1EnergyConsumptionRenewableKwh"] == 180_000
    assert facts["E1EnergyConsumptionNonRenewableKwh"] == 1_770_000
    assert facts["E1EnergyNonRenewableProductionKwh"] == 70_000

    energy_table = next(table for table in result["tables"] if table["id"] == "e1-energy-mix")
    assert any(row["energyType"] == "Elektricitet" and row["sharePercent"] == 70 for row in energy_table["rows"])


def test_e1_scenarios(disclosures_input):
    result = run_e1_scenarios(disclosures_input)

    assert result["value"] == 2
    assert result["unit"] == "scenarier"
    assert len(result["scenarios"]) == 2
    assert _metrics(result)["Gennemsnitlig dækningsgrad"] == 62.5
    assert _facts(result)["E1ScenariosDiverseRange"] is True


def test_e1_carbon_price(disclosures_input):
    result = run_e1_carbon_price(disclosures_input)

    assert result["value"] == 2
    metrics = _metrics(result)
    assert metrics["Gennemsnitlig CO₂-pris"] == 675
    assert metrics["Gennemsnitlig dækningsgrad"] == 47.5
    assert _facts(result)["E1CarbonPriceAlignment"] is True
    assert result["carbonPriceSchemes"][0]["scheme"] == "Investeringsscreening"
    assert result["carbonPriceSchemes"][0]["scope"] == "combined"


def test_e1_risk_geography(disclosures_input):
    result = run_e1_risk_geography(disclosures_input)

    assert result["value"] == 2
    assert _metrics(result)["Aktiver eksponeret for fysisk risiko"] == 120_000_000
    facts = _facts(result)
    assert facts["E1RiskPhysicalAssets"] == 120_000_000
    assert facts["E1RiskTransitionRevenue"] == 65_000_000


def test_e1_decarbonisation_drivers(disclosures_input):
    result = run_e1_decarbonisation_drivers(disclosures_input)

    assert result["value"] == 4600
    assert result["unit"] == "tCO₂e"
    metrics = _metrics(result)
    assert metrics["Antal drivere"] == 2
    assert metrics["Estimeret investering"] == 17_500_000
    assert result["decarbonisationDrivers"][0]["lever"] == "energyEfficiency"
    assert "energyEfficiency" in _facts(result)["E1DecarbonisationLeverTypes"]
    assert result["esrsTables"][0]["conceptKey"] == "E1DecarbonisationTable"


def test_e1_targets_drops_infinite_tonnes(targets_input):
    target = targets_input["E1Targets"]["targets"][0]
    target["targetValueTonnes"] = float("inf")
    target["baselineValueTonnes"] = float("-inf")

    result = run_e1_targets(targets_input)

    overview = result["targetsOverview"][0]
    assert overview["targetValueTonnes"] is None
    assert overview["baselineValueTonnes"] is None
    assert "target[0].targetValueTonnes=Infinity" not in result["trace"]
    json.dumps(result, allow_nan=False)
