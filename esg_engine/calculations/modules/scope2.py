"""
B1-B6: Scope 2 purchased energy

Single-record calculators following the same reduction chain:
gross = net consumption x emission factor,
reduction = gross x renewable share x mitigation rate,
net = max(0, gross - reduction).

B2-B5 first deduct recovered energy from the metered consumption; B6 derives
the loss energy from supplied electricity and the grid-loss percentage.
"""

from esg_engine.calculations.e1_insights import with_e1_insights
from esg_engine.calculations.factors import FACTORS
from esg_engine.calculations.formatting import format_number, percent_label, round_to
from esg_engine.calculations.results import build_result, trace_lines
from esg_engine.calculations.sanitize import clamp_number, field_number, has_any_value, section

_RECOVERED_ENERGY_MODULES = {
    "B2": {
        "consumption_field": "heatConsumptionKwh",
        "recovered_field": "recoveredHeatKwh",
        "net_trace": "netHeatConsumptionKwh",
        "recovery_label": "Fradrag for genindvundet varme",
        "renewable_label": "Reduktion for vedvarende varme",
        "overflow_warning": "Genindvundet varme overstiger det registrerede forbrug. Nettoforbruget sættes til 0.",
    },
    "B3": {
        "consumption_field": "coolingConsumptionKwh",
        "recovered_field": "recoveredCoolingKwh",
        "net_trace": "netCoolingConsumptionKwh",
        "recovery_label": "Fradrag for frikøling eller genindvundet kulde",
        "renewable_label": "Reduktion for vedvarende køling",
        "overflow_warning": "Genindvundet køling overstiger det registrerede forbrug. Nettoforbruget sættes til 0.",
    },
    "B4": {
        "consumption_field": "steamConsumptionKwh",
        "recovered_field": "recoveredSteamKwh",
        "net_trace": "netSteamConsumptionKwh",
        "recovery_label": "Fradrag for genindvundet damp",
        "renewable_label": "Reduktion for vedvarende damp",
        "overflow_warning": "Genindvundet damp overstiger det registrerede forbrug. Nettoforbruget sættes til 0.",
    },
    "B5": {
        "consumption_field": "otherEnergyConsumptionKwh",
        "recovered_field": "recoveredEnergyKwh",
        "net_trace": "netOtherEnergyConsumptionKwh",
        "recovery_label": "Fradrag for genindvundet energi",
        "renewable_label": "Reduktion for vedvarende energi",
        "overflow_warning": "Genindvundet energi overstiger det registrerede forbrug. Nettoforbruget sættes til 0.",
    },
}


def renewable_share(value, maximum, warnings, emit_missing):
    return clamp_number(
        value,
        warnings,
        emit_missing,
        maximum=maximum,
        missing="Andelen af vedvarende energi mangler og behandles som 0%.",
        negative="Andelen af vedvarende energi kan ikke være negativ. 0% anvendes.",
        capped=f"Andelen af vedvarende energi er begrænset til {format_number(maximum)}%.",
    )


def _conversion_assumption(factors):
    return f"Konvertering fra kg til ton: {format_number(factors['kg_to_tonnes'])}"


def _renewable_reduction(gross_kg, share_percent, factors):
    return gross_kg * share_percent * factors["percent_to_ratio"] * factors["renewable_mitigation_rate"]


def run_b1(input_data):
    factors = FACTORS["b1"]
    warnings = []
    assumptions = [
        f"Reduktion for vedvarende energi: {percent_label(factors['renewable_mitigation_rate'])}%",
        _conversion_assumption(factors),
    ]

    raw = section(input_data, "B1")
    emit_missing = has_any_value(raw)
    consumption = field_number(raw, "electricityConsumptionKwh", warnings, emit_missing)
    emission_factor = field_number(raw, "emissionFactorKgPerKwh", warnings, emit_missing)
    share = renewable_share(
        raw.get("renewableSharePercent"), factors["maximum_renewable_share_percent"], warnings, emit_missing
    )

    gross_kg = consumption * emission_factor
    reduction_kg = _renewable_reduction(gross_kg, share, factors)
    net_kg = max(0, gross_kg - reduction_kg)
    net_tonnes = net_kg * factors["kg_to_tonnes"]

    trace = trace_lines([
        ("electricityConsumptionKwh", consumption),
        ("emissionFactorKgPerKwh", emission_factor),
        ("renewableSharePercent", share),
        ("grossEmissionsKg", gross_kg),
        ("renewableReductionKg", reduction_kg),
        ("netEmissionsKg", net_kg),
        ("netEmissionsTonnes", net_tonnes),
    ])
    result = build_result(
        round_to(net_tonnes, factors["result_precision"]), factors["unit"], assumptions, trace, warnings
    )
    return with_e1_insights("B1", input_data, result)


def _run_recovered_energy(module_id, input_data):
    config = _RECOVERED_ENERGY_MODULES[module_id]
    factors = FACTORS[module_id.lower()]
    warnings = []
    assumptions = [
        f"{config['recovery_label']}: {percent_label(factors['recovery_credit_rate'])}%",
        f"{config['renewable_label']}: {percent_label(factors['renewable_mitigation_rate'])}%",
        _conversion_assumption(factors),
    ]

    raw = section(input_data, module_id)
    emit_missing = has_any_value(raw)
    consumption = field_number(raw, config["consumption_field"], warnings, emit_missing)
    recovered = field_number(raw, config["recovered_field"], warnings, emit_missing)
    emission_factor = field_number(raw, "emissionFactorKgPerKwh", warnings, emit_missing)
    share = renewable_share(
        raw.get("renewableSharePercent"), factors["maximum_renewable_share_percent"], warnings, emit_missing
    )

    net_consumption = max(0, consumption - recovered * factors["recovery_credit_rate"])
    if recovered > consumption:
        warnings.append(config["overflow_warning"])

    gross_kg = net_consumption * emission_factor
    reduction_kg = _renewable_reduction(gross_kg, share, factors)
    net_kg = max(0, gross_kg - reduction_kg)
    net_tonnes = net_kg * factors["kg_to_tonnes"]

    trace = trace_lines([
        (config["consumption_field"], consumption),
        (config["recovered_field"], recovered),
        (config["net_trace"], net_consumption),
        ("emissionFactorKgPerKwh", emission_factor),
        ("renewableSharePercent", share),
        ("grossEmissionsKg", gross_kg),
        ("renewableReductionKg", reduction_kg),
        ("netEmissionsTonnes", net_tonnes),
    ])
    result = build_result(
        round_to(net_tonnes, factors["result_precision"]), factors["unit"], assumptions, trace, warnings
    )
    return with_e1_insights(module_id, input_data, result)


def run_b2(input_data):
    return _run_recovered_energy("B2", input_data)


def run_b3(input_data):
    return _run_recovered_energy("B3", input_data)


def run_b4(input_data):
    return _run_recovered_energy("B4", input_data)


def run_b5(input_data):
    return _run_recovered_energy("B5", input_data)


def run_b6(input_data):
    factors = FACTORS["b6"]
    warnings = []
    assumptions = [
        "Nettab beregnes som leveret el multipliceret med nettab i procent.",
        f"Reduktion for vedvarende dækning af tab: {percent_label(factors['renewable_mitigation_rate'])}%",
        _conversion_assumption(factors),
    ]

    raw = section(input_data, "B6")
    emit_missing = has_any_value(raw)
    supplied = field_number(raw, "electricitySuppliedKwh", warnings, emit_missing)
    maximum_loss = factors["maximum_grid_loss_percent"]
    grid_loss = clamp_number(
        raw.get("gridLossPercent"),
        warnings,
        emit_missing,
        maximum=maximum_loss,
        missing="Nettab i elnettet mangler og behandles som 0%.",
        negative="Nettab i elnettet kan ikke være negativt. 0% anvendes.",
        capped=f"Nettab i elnettet er begrænset til {format_number(maximum_loss)}%.",
    )
    emission_factor = field_number(raw, "emissionFactorKgPerKwh", warnings, emit_missing)
    share = renewable_share(
        raw.get("renewableSharePercent"), factors["maximum_renewable_share_percent"], warnings, emit_missing
    )

    loss_kwh = supplied * grid_loss * factors["percent_to_ratio"]
    gross_kg = loss_kwh * emission_factor
    reduction_kg = _renewable_reduction(gross_kg, share, factors)
    net_kg = max(0, gross_kg - reduction_kg)
    net_tonnes = net_kg * factors["kg_to_tonnes"]

    trace = trace_lines([
        ("electricitySuppliedKwh", supplied),
        ("gridLossPercent", grid_loss),
        ("lossEnergyKwh", loss_kwh),
        ("emissionFactorKgPerKwh", emission_factor),
        ("renewableSharePercent", share),
        ("grossEmissionsKg", gross_kg),
        ("renewableReductionKg", reduction_kg),
        ("netEmissionsTonnes", net_tonnes),
    ])
    result = build_result(
        round_to(net_tonnes, factors["result_precision"]), factors["unit"], assumptions, trace, warnings
    )
    return with_e1_insights("B6", input_data, result)
