from esg_engine.calculations.modules.scope1 import run_a1, run_a2, run_a3, run_a4


def test_a1_sums_fuels_with_default_factors():
    result = run_a1({
        "A1": {
            "fuelConsumptions": [
                {"fuelType": "naturgas", "unit": "Nm³", "quantity": 1200,
                 "emissionFactorKgPerUnit": None, "documentationQualityPercent": 85},
                {"fuelType": "diesel", "unit": "liter", "quantity": 500,
                 "emissionFactorKgPerUnit": 2.68, "documentationQualityPercent": 55},
            ]
        }
    })

    assert result["value"] == 3.8
    assert result["unit"] == "t CO2e"
    assert "totalEmissionsKg=3800" in result["trace"]
    assert "Standardfaktor for Naturgas: 2.05 kg CO2e/Nm³." in result["assumptions"]
    assert "Emissionsfaktor mangler på linje 1. Standardfaktor for Naturgas anvendes." in result["warnings"]
    assert (
        "Dokumentationskvalitet for Diesel er kun 55%. Overvej at forbedre dokumentation eller anvende "
        "konservative antagelser." in result["warnings"]
    )


def test_a2_sums_mobile_sources_and_fleet_intensity():
    result = run_a2({
        "A2": {
            "vehicleConsumptions": [
                {"fuelType": "diesel", "unit": "liter", "quantity": 1500, "emissionFactorKgPerUnit": None,
                 "distanceKm": 42000, "documentationQualityPercent": 58},
                {"fuelType": "biodiesel", "unit": "liter", "quantity": 600, "emissionFactorKgPerUnit": 1.2,
                 "distanceKm": None, "documentationQualityPercent": 90},
            ]
        }
    })

    assert result["value"] == 4.74
    assert "totalEmissionsKg=4740" in result["trace"]
    assert "fleetEmissionsKgPerKm=0.11285714285714285" in result["trace"]
    assert "Standardfaktor for Diesel: 2.68 kg CO2e/liter." in result["assumptions"]
    assert "Emissionsfaktor mangler på linje 1. Standardfaktor for Diesel anvendes." in result["warnings"]


def test_a2_filters_invalid_rows():
    result = run_a2({
        "A2": {
            "vehicleConsumptions": [
                {"fuelType": "ukendt", "unit": "gallon", "quantity": -10, "emissionFactorKgPerUnit": -1,
                 "distanceKm": -500, "documentationQualityPercent": 150},
            ]
        }
    })

    assert result["value"] == 0
    assert result["trace"] == ["totalEmissionsKg=0", "totalEmissionsTonnes=0", "totalDistanceKm=0"]
    assert result["warnings"] == [
        "Ukendt brændstoftype på linje 1. Standard (Diesel) anvendes.",
        "Ugyldig enhed på linje 1. liter anvendes i stedet.",
        "Mængden på linje 1 kan ikke være negativ. 0 anvendes i stedet.",
        "Emissionsfaktoren på linje 1 kan ikke være negativ. 0 anvendes i stedet.",
        "Distance kan ikke være negativ på linje 1. 0 km anvendes i stedet.",
        "Dokumentationskvalitet på linje 1 er begrænset til 100%.",
        "Ingen gyldige mobile linjer kunne beregnes. Kontrollér indtastningerne.",
    ]


def test_a3_process_emissions():
    result = run_a3({
        "A3": {
            "processLines": [
                {"processType": "cementClinker", "outputQuantityTon": 1000, "emissionFactorKgPerTon": None,
                 "documentationQualityPercent": 78},
                {"processType": "aluminiumSmelting", "outputQuantityTon": 200, "emissionFactorKgPerTon": 1700,
                 "documentationQualityPercent": 55},
            ]
        }
    })

    assert result["value"] == 850
    assert "totalEmissionsKg=850000" in result["trace"]
    assert "Standardfaktor for Cementklinker (CaCO₃ → CaO): 510 kg CO2e/ton." in result["assumptions"]


def test_a3_filters_invalid_process_lines():
    result = run_a3({
        "A3": {
            "processLines": [
                {"processType": "ukendt", "outputQuantityTon": -4, "emissionFactorKgPerTon": -10,
                 "documentationQualityPercent": 140},
            ]
        }
    })

    assert result["value"] == 0
    assert result["trace"] == ["totalEmissionsKg=0", "totalEmissionsTonnes=0"]
    assert result["warnings"][0] == "Ukendt proces på linje 1. Standard (Cementklinker (CaCO₃ → CaO)) anvendes."
    assert result["warnings"][-1] == "Ingen gyldige proceslinjer kunne beregnes. Kontrollér indtastningerne."


def test_a4_leakage_with_defaults():
    result = run_a4({
        "A4": {
            "refrigerantLines": [
                {"refrigerantType": "hfc134a", "systemChargeKg": 200, "leakagePercent": None, "gwp100": None,
                 "documentationQualityPercent": 82},
                {"refrigerantType": "sf6", "systemChargeKg": 50, "leakagePercent": 5, "gwp100": 23000,
                 "documentationQualityPercent": 40},
            ]
        }
    })

    assert result["value"] == 86.1
    assert "totalEmissionsKg=86100" in result["trace"]
    assert "Standard lækageandel for HFC-134a (R-134a): 10%." in result["assumptions"]
    assert "Standard GWP100 for HFC-134a (R-134a): 1430." in result["assumptions"]
    assert "Lækageandel mangler på linje 1. Standard på 10% anvendes." in result["warnings"]
    assert "GWP100 mangler på linje 1. Standardværdi for HFC-134a (R-134a) anvendes." in result["warnings"]
