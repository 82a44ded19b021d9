from esg_engine.calculations.modules.environment import (
    run_e2_water, run_e3_pollution, run_e4_biodiversity, run_e5_resources,
)


def _facts(result):
    return {fact["conceptKey"]: fact["value"] for fact in result.get("esrsFacts", [])}


def test_e2_water_stress_index():
    result = run_e2_water({
        "E2Water": {
            "totalWithdrawalM3": 5000,
            "withdrawalInStressRegionsM3": 2500,
            "dischargeM3": 3000,
            "reusePercent": 10,
            "dataQualityPercent": 80,
        }
    })

    assert result["value"] == 60
    assert result["unit"] == "vandstressindeks"
    assert "weightedRisk=0.6000" in result["trace"]
    assert (
        "Mere end 40 % af vandudtaget (50.0 %) foregår i vandstressede områder – prioriter risikoplaner."
        in result["warnings"]
    )
    assert "Ingen dokumenteret genbrug af vand. Overvej recirkulation eller sekundære kilder." not in result["warnings"]
    facts = _facts(result)
    assert facts["E2TotalWaterWithdrawalM3"] == 5000
    assert facts["E2WaterStressSharePercent"] == 50


def test_e2_water_without_withdrawal():
    result = run_e2_water({})

    assert result["value"] == 0
    assert "Intet vandforbrug registreret. Indtast forbrug for at beregne vandstress." in result["warnings"]


def test_e3_pollution_penalises_exceedances_and_incidents():
    result = run_e3_pollution({
        "E3Pollution": {
            "airEmissionsTonnes": 80,
            "airEmissionLimitTonnes": 50,
            "waterDischargesTonnes": 10,
            "waterDischargeLimitTonnes": None,
            "soilEmissionsTonnes": 2,
            "soilEmissionLimitTonnes": 5,
            "reportableIncidents": 2,
            "documentationQualityPercent": 60,
        }
    })

    assert result["value"] == 32
    assert "totalExceedPercent=60.00" in result["trace"]
    assert "Luft: Udledningen på 80.00 t overstiger grænsen på 50.00 t med 60.00 %." in result["warnings"]
    assert (
        "Vand: Ingen gyldig grænse angivet. Standardgrænsen på 20 t anvendes i beregningen." in result["warnings"]
    )
    assert (
        "Der er registreret 2 hændelse(r) med rapporteringspligt. Sikr opfølgning og root-cause analyse."
        in result["warnings"]
    )
    assert _facts(result)["E3ReportableIncidentsCount"] == 2
    mediums = next(table for table in result["esrsTables"] if table["conceptKey"] == "E3MediumsTable")
    assert any(row["medium"] == "air" and row["exceedPercent"] == 60 for row in mediums["rows"])


def test_e4_biodiversity_restoration_mitigates_risk():
    result = run_e4_biodiversity({
        "E4Biodiversity": {
            "sitesInOrNearProtectedAreas": 3,
            "protectedAreaHectares": 40,
            "restorationHectares": 10,
            "significantIncidents": 1,
            "documentationQualityPercent": 65,
        }
    })

    assert result["value"] == 41
    assert "restorationRatio=0.2500" in result["trace"]
    assert (
        "3 lokalitet(er) ligger i eller tæt på beskyttede områder. Iværksæt biodiversitetsplaner."
        in result["warnings"]
    )
    facts = _facts(result)
    assert facts["E4SitesInProtectedAreasCount"] == 3
    assert facts["E4RestorationHectares"] == 10


def test_e5_resources_index_and_critical_materials():
    result = run_e5_resources({
        "E5Resources": {
            "primaryMaterialConsumptionTonnes": 800,
            "secondaryMaterialConsumptionTonnes": 300,
            "recycledContentPercent": 35,
            "renewableMaterialSharePercent": 20,
            "criticalMaterialsSharePercent": 45,
            "circularityTargetPercent": 50,
            "documentationQualityPercent": 60,
        }
    })

    assert result["value"] == 63.5
    assert "riskIndex=0.6350" in result["trace"]
    assert (
        "Høj andel kritiske materialer (>30 %). Overvej substitution eller leverandørdiversificering."
        in result["warnings"]
    )
    assert (
        "Genanvendt andel er 15.0 procentpoint under målsætningen. Planlæg nye cirkulære initiativer."
        in result["warnings"]
    )
    assert "Ressourceindekset overstiger 55 point – prioriter cirkularitet i handlingsplanen." in result["warnings"]
    assert _facts(result)["E5CriticalMaterialsSharePercent"] == 45
