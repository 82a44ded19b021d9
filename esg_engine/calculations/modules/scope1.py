"""
A1-A4: Scope 1 direct emissions

Row-based calculators, one row per fuel, vehicle fuel, process or
refrigerant line:
- A1 stationary combustion (quantity x emission factor)
- A2 mobile combustion, with optional distance for fleet intensity
- A3 process emissions (output tonnes x factor)
- A4 fugitive refrigerant emissions (charge x leakage share x GWP100)

Rows without any numeric input are skipped silently. Rows whose drivers end
up at zero are dropped, and a "no valid lines" warning is raised when rows
were filled in but none survived.
"""

from esg_engine.calculations.e1_insights import with_e1_insights
from esg_engine.calculations.factors import FACTORS
from esg_engine.calculations.formatting import format_number, round_to
from esg_engine.calculations.results import build_result
from esg_engine.calculations.sanitize import as_number, has_any_field, resolve_choice, rows, section

A1_FUEL_CONFIGURATIONS = {
    "naturgas": {"label": "Naturgas", "default_unit": "Nm³", "default_factor": 2.05},
    "diesel": {"label": "Diesel", "default_unit": "liter", "default_factor": 2.68},
    "fyringsolie": {"label": "Fyringsolie", "default_unit": "liter", "default_factor": 2.96},
    "biogas": {"label": "Biogas", "default_unit": "Nm³", "default_factor": 0.1},
}

A2_FUEL_CONFIGURATIONS = {
    "benzin": {"label": "Benzin", "default_unit": "liter", "default_factor": 2.31},
    "diesel": {"label": "Diesel", "default_unit": "liter", "default_factor": 2.68},
    "biodiesel": {"label": "Biodiesel (B100)", "default_unit": "liter", "default_factor": 1.2},
    "cng": {"label": "CNG (komprimeret naturgas)", "default_unit": "kg", "default_factor": 2.75},
}

A3_PROCESS_CONFIGURATIONS = {
    "cementClinker": {"label": "Cementklinker (CaCO₃ → CaO)", "default_factor": 510},
    "limeCalcination": {"label": "Kalkudbrænding (CaCO₃ → CaO)", "default_factor": 785},
    "ammoniaProduction": {"label": "Ammoniakproduktion (Haber-Bosch)", "default_factor": 1800},
    "aluminiumSmelting": {"label": "Primær aluminiumselektrolyse", "default_factor": 1600},
}

A4_REFRIGERANT_CONFIGURATIONS = {
    "hfc134a": {"label": "HFC-134a (R-134a)", "default_gwp100": 1430},
    "hfc125": {"label": "HFC-125 (R-125)", "default_gwp100": 3500},
    "hfc32": {"label": "HFC-32 (R-32)", "default_gwp100": 675},
    "r410a": {"label": "R410A (HFC-blanding)", "default_gwp100": 2088},
    "r407c": {"label": "R407C (HFC-blanding)", "default_gwp100": 1774},
    "sf6": {"label": "SF₆ (svovlhexafluorid)", "default_gwp100": 23500},
}

_DOCUMENTATION_ADVICE = "Overvej at forbedre dokumentation eller anvende konservative antagelser."
_LEAKAGE_ADVICE = "Overvej at forbedre lækagekontrol, logning eller anvende konservative antagelser."


def run_a1(input_data):
    return _run_fuel_lines(
        "A1",
        input_data,
        rows_key="fuelConsumptions",
        configurations=A1_FUEL_CONFIGURATIONS,
        default_type="naturgas",
        units=("liter", "Nm³", "kg"),
        assumptions=[
            "Emissioner beregnes pr. brændsel som mængde × emissionsfaktor.",
            f"Konvertering fra kg til ton: {format_number(FACTORS['a1']['kg_to_tonnes'])}.",
        ],
        no_lines_warning="Ingen gyldige brændselslinjer kunne beregnes. Kontrollér indtastningerne.",
    )


def run_a2(input_data):
    return _run_fuel_lines(
        "A2",
        input_data,
        rows_key="vehicleConsumptions",
        configurations=A2_FUEL_CONFIGURATIONS,
        default_type="diesel",
        units=("liter", "kg"),
        assumptions=[
            "Emissioner beregnes pr. brændsel som mængde × emissionsfaktor.",
            "Angivne kilometer bruges til at følge intensitet og påvirker ikke udledningen direkte.",
            f"Konvertering fra kg til ton: {format_number(FACTORS['a2']['kg_to_tonnes'])}.",
        ],
        no_lines_warning="Ingen gyldige mobile linjer kunne beregnes. Kontrollér indtastningerne.",
        track_distance=True,
    )


def _run_fuel_lines(module_id, input_data, rows_key, configurations, default_type, units,
                    assumptions, no_lines_warning, track_distance=False):
    factors = FACTORS[module_id.lower()]
    warnings = []
    raw_rows = rows(section(input_data, module_id), rows_key)

    signal_fields = ["quantity", "emissionFactorKgPerUnit", "documentationQualityPercent"]
    if track_distance:
        signal_fields.insert(2, "distanceKm")
    emit_missing = any(has_any_field(row, signal_fields) for row in raw_rows)

    lines = []
    for index, row in enumerate(raw_rows):
        if not has_any_field(row, signal_fields):
            continue
        line_no = index + 1

        fuel_type, known = resolve_choice(row.get("fuelType"), configurations, default_type)
        if not known:
            warnings.append(
                f"Ukendt brændstoftype på linje {line_no}. "
                f"Standard ({configurations[fuel_type]['label']}) anvendes."
            )
        config = configurations[fuel_type]

        unit = row.get("unit")
        if unit not in units:
            unit = config["default_unit"]
            warnings.append(f"Ugyldig enhed på linje {line_no}. {unit} anvendes i stedet.")

        quantity = _row_quantity(
            row.get("quantity"), warnings, emit_missing,
            missing=f"Mængde mangler på linje {line_no} og behandles som 0.",
            negative=f"Mængden på linje {line_no} kan ikke være negativ. 0 anvendes i stedet.",
        )
        emission_factor = _row_emission_factor(
            row.get("emissionFactorKgPerUnit"), config, line_no, warnings, assumptions, emit_missing,
            factor_unit=config["default_unit"],
        )
        distance = 0
        if track_distance:
            distance = _row_quantity(
                row.get("distanceKm"), warnings, False,
                negative=f"Distance kan ikke være negativ på linje {line_no}. 0 km anvendes i stedet.",
            )
        quality = _row_quality(row.get("documentationQualityPercent"), factors, line_no, warnings, emit_missing)

        if quantity > 0 and emission_factor > 0:
            lines.append({
                "fuelType": fuel_type,
                "unit": unit,
                "quantity": quantity,
                "emissionFactorKgPerUnit": emission_factor,
                "distanceKm": distance,
                "documentationQualityPercent": quality,
            })

    if not lines and emit_missing:
        warnings.append(no_lines_warning)

    total_kg = 0
    total_distance = 0
    trace = []
    for index, line in enumerate(lines):
        emissions_kg = line["quantity"] * line["emissionFactorKgPerUnit"]
        total_kg += emissions_kg
        total_distance += line["distanceKm"]

        prefix = f"entry[{index}]."
        trace.append(f"{prefix}fuelType={line['fuelType']}")
        trace.append(f"{prefix}unit={line['unit']}")
        trace.append(f"{prefix}quantity={format_number(line['quantity'])}")
        trace.append(f"{prefix}emissionFactorKgPerUnit={format_number(line['emissionFactorKgPerUnit'])}")
        if track_distance:
            trace.append(f"{prefix}distanceKm={format_number(line['distanceKm'])}")
        trace.append(f"{prefix}documentationQualityPercent={format_number(line['documentationQualityPercent'])}")
        trace.append(f"{prefix}emissionsKg={format_number(emissions_kg)}")
        trace.append(f"{prefix}emissionsTonnes={format_number(emissions_kg * factors['kg_to_tonnes'])}")
        if track_distance and line["distanceKm"] > 0:
            trace.append(f"{prefix}emissionsKgPerKm={format_number(emissions_kg / line['distanceKm'])}")

        _low_quality_warning(
            configurations[line["fuelType"]]["label"], line["documentationQualityPercent"],
            factors, warnings, _DOCUMENTATION_ADVICE,
        )

    total_tonnes = total_kg * factors["kg_to_tonnes"]
    trace.append(f"totalEmissionsKg={format_number(total_kg)}")
    trace.append(f"totalEmissionsTonnes={format_number(total_tonnes)}")
    if track_distance:
        trace.append(f"totalDistanceKm={format_number(total_distance)}")
        if total_distance > 0:
            trace.append(f"fleetEmissionsKgPerKm={format_number(total_kg / total_distance)}")

    result = build_result(
        round_to(total_tonnes, factors["result_precision"]), factors["unit"], assumptions, trace, warnings
    )
    return with_e1_insights(module_id, input_data, result)


def run_a3(input_data):
    factors = FACTORS["a3"]
    warnings = []
    assumptions = [
        "Emissioner beregnes pr. proces som outputmængde × emissionsfaktor.",
        f"Konvertering fra kg til ton: {format_number(factors['kg_to_tonnes'])}.",
    ]
    raw_rows = rows(section(input_data, "A3"), "processLines")
    signal_fields = ("outputQuantityTon", "emissionFactorKgPerTon", "documentationQualityPercent")
    emit_missing = any(has_any_field(row, signal_fields) for row in raw_rows)

    lines = []
    for index, row in enumerate(raw_rows):
        if not has_any_field(row, signal_fields):
            continue
        line_no = index + 1

        process_type, known = resolve_choice(row.get("processType"), A3_PROCESS_CONFIGURATIONS, "cementClinker")
        if not known:
            warnings.append(
                f"Ukendt proces på linje {line_no}. "
                f"Standard ({A3_PROCESS_CONFIGURATIONS[process_type]['label']}) anvendes."
            )
        config = A3_PROCESS_CONFIGURATIONS[process_type]

        output = _row_quantity(
            row.get("outputQuantityTon"), warnings, emit_missing,
            missing=f"Outputmængde mangler på linje {line_no} og behandles som 0.",
            negative=f"Outputmængden på linje {line_no} kan ikke være negativ. 0 anvendes i stedet.",
        )
        emission_factor = _row_emission_factor(
            row.get("emissionFactorKgPerTon"), config, line_no, warnings, assumptions, emit_missing,
            factor_unit="ton",
        )
        quality = _row_quality(row.get("documentationQualityPercent"), factors, line_no, warnings, emit_missing)

        if output > 0 and emission_factor > 0:
            lines.append((process_type, output, emission_factor, quality))

    if not lines and emit_missing:
        warnings.append("Ingen gyldige proceslinjer kunne beregnes. Kontrollér indtastningerne.")

    total_kg = 0
    trace = []
    for index, (process_type, output, emission_factor, quality) in enumerate(lines):
        emissions_kg = output * emission_factor
        total_kg += emissions_kg
        prefix = f"entry[{index}]."
        trace.extend([
            f"{prefix}processType={process_type}",
            f"{prefix}outputQuantityTon={format_number(output)}",
            f"{prefix}emissionFactorKgPerTon={format_number(emission_factor)}",
            f"{prefix}documentationQualityPercent={format_number(quality)}",
            f"{prefix}emissionsKg={format_number(emissions_kg)}",
            f"{prefix}emissionsTonnes={format_number(emissions_kg * factors['kg_to_tonnes'])}",
        ])
        _low_quality_warning(
            A3_PROCESS_CONFIGURATIONS[process_type]["label"], quality, factors, warnings, _DOCUMENTATION_ADVICE
        )

    total_tonnes = total_kg * factors["kg_to_tonnes"]
    trace.append(f"totalEmissionsKg={format_number(total_kg)}")
    trace.append(f"totalEmissionsTonnes={format_number(total_tonnes)}")

    result = build_result(
        round_to(total_tonnes, factors["result_precision"]), factors["unit"], assumptions, trace, warnings
    )
    return with_e1_insights("A3", input_data, result)


def run_a4(input_data):
    factors = FACTORS["a4"]
    warnings = []
    assumptions = [
        "Emissioner beregnes pr. kølemiddellinje som fyldning × lækageandel × GWP100.",
        f"Konvertering fra kg til ton: {format_number(factors['kg_to_tonnes'])}.",
    ]
    raw_rows = rows(section(input_data, "A4"), "refrigerantLines")
    signal_fields = ("systemChargeKg", "leakagePercent", "gwp100", "documentationQualityPercent")
    emit_missing = any(has_any_field(row, signal_fields) for row in raw_rows)

    lines = []
    for index, row in enumerate(raw_rows):
        if not has_any_field(row, signal_fields):
            continue
        line_no = index + 1

        refrigerant, known = resolve_choice(row.get("refrigerantType"), A4_REFRIGERANT_CONFIGURATIONS, "hfc134a")
        if not known:
            warnings.append(
                f"Ukendt kølemiddel på linje {line_no}. "
                f"Standard ({A4_REFRIGERANT_CONFIGURATIONS[refrigerant]['label']}) anvendes."
            )
        config = A4_REFRIGERANT_CONFIGURATIONS[refrigerant]
        label = config["label"]

        charge = _row_quantity(
            row.get("systemChargeKg"), warnings, emit_missing,
            missing=f"Fyldning mangler på linje {line_no} og behandles som 0.",
            negative=f"Fyldningen på linje {line_no} kan ikke være negativ. 0 kg anvendes i stedet.",
        )

        leakage = as_number(row.get("leakagePercent"))
        if leakage is None:
            leakage = factors["default_leakage_percent"]
            _add_assumption(assumptions, f"Standard lækageandel for {label}: {format_number(leakage)}%.")
            if emit_missing:
                warnings.append(
                    f"Lækageandel mangler på linje {line_no}. Standard på {format_number(leakage)}% anvendes."
                )
        elif leakage < 0:
            warnings.append(f"Lækageandelen på linje {line_no} kan ikke være negativ. 0% anvendes i stedet.")
            leakage = 0
        elif leakage > 100:
            warnings.append(f"Lækageandelen på linje {line_no} er begrænset til 100%.")
            leakage = 100

        gwp = as_number(row.get("gwp100"))
        if gwp is None:
            gwp = config["default_gwp100"]
            _add_assumption(assumptions, f"Standard GWP100 for {label}: {format_number(gwp)}.")
            if emit_missing:
                warnings.append(f"GWP100 mangler på linje {line_no}. Standardværdi for {label} anvendes.")
        elif gwp < 0:
            warnings.append(f"GWP100 på linje {line_no} kan ikke være negativ. 0 anvendes i stedet.")
            gwp = 0

        quality = _row_quality(row.get("documentationQualityPercent"), factors, line_no, warnings, emit_missing)

        if charge > 0 and leakage > 0 and gwp > 0:
            lines.append((refrigerant, charge, leakage, gwp, quality))

    if not lines and emit_missing:
        warnings.append("Ingen gyldige kølemiddellinjer kunne beregnes. Kontrollér indtastningerne.")

    total_kg = 0
    trace = []
    for index, (refrigerant, charge, leakage, gwp, quality) in enumerate(lines):
        leaked_mass = charge * (leakage * factors["percent_to_ratio"])
        emissions_kg = leaked_mass * gwp
        total_kg += emissions_kg
        prefix = f"entry[{index}]."
        trace.extend([
            f"{prefix}refrigerantType={refrigerant}",
            f"{prefix}systemChargeKg={format_number(charge)}",
            f"{prefix}leakagePercent={format_number(leakage)}",
            f"{prefix}gwp100={format_number(gwp)}",
            f"{prefix}leakedMassKg={format_number(leaked_mass)}",
            f"{prefix}emissionsKg={format_number(emissions_kg)}",
            f"{prefix}emissionsTonnes={format_number(emissions_kg * factors['kg_to_tonnes'])}",
        ])
        _low_quality_warning(
            A4_REFRIGERANT_CONFIGURATIONS[refrigerant]["label"], quality, factors, warnings, _LEAKAGE_ADVICE
        )

    total_tonnes = total_kg * factors["kg_to_tonnes"]
    trace.append(f"totalEmissionsKg={format_number(total_kg)}")
    trace.append(f"totalEmissionsTonnes={format_number(total_tonnes)}")

    result = build_result(
        round_to(total_tonnes, factors["result_precision"]), factors["unit"], assumptions, trace, warnings
    )
    return with_e1_insights("A4", input_data, result)


def _row_quantity(value, warnings, emit_missing, missing=None, negative=None):
    number = as_number(value)
    if number is None:
        if emit_missing and missing:
            warnings.append(missing)
        return 0
    if number < 0:
        warnings.append(negative)
        return 0
    return number


def _row_emission_factor(value, config, line_no, warnings, assumptions, emit_missing, factor_unit):
    number = as_number(value)
    if number is None:
        fallback = config["default_factor"]
        _add_assumption(
            assumptions,
            f"Standardfaktor for {config['label']}: {format_number(fallback)} kg CO2e/{factor_unit}.",
        )
        if emit_missing:
            warnings.append(
                f"Emissionsfaktor mangler på linje {line_no}. Standardfaktor for {config['label']} anvendes."
            )
        return fallback
    if number < 0:
        warnings.append(f"Emissionsfaktoren på linje {line_no} kan ikke være negativ. 0 anvendes i stedet.")
        return 0
    return number


def _row_quality(value, factors, line_no, warnings, emit_missing):
    default = factors["default_documentation_quality_percent"]
    number = as_number(value)
    if number is None:
        if emit_missing:
            warnings.append(f"Dokumentationskvalitet mangler på linje {line_no}. Antager {default}%.")
        return default
    if number < 0:
        warnings.append(f"Dokumentationskvalitet på linje {line_no} kan ikke være negativ. 0% anvendes i stedet.")
        return 0
    if number > 100:
        warnings.append(f"Dokumentationskvalitet på linje {line_no} er begrænset til 100%.")
        return 100
    return number


def _low_quality_warning(label, quality, factors, warnings, advice):
    if quality < factors["low_documentation_quality_threshold_percent"]:
        warnings.append(f"Dokumentationskvalitet for {label} er kun {format_number(quality)}%. {advice}")


def _add_assumption(assumptions, message):
    if message not in assumptions:
        assumptions.append(message)
