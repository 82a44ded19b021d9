"""
B7-B11: renewable electricity instruments

Each module turns a documented renewable instrument into a Scope 2
reduction, reported as negative tonnes:
- B7 documented renewable electricity (guarantees of origin)
- B8 on-site production consumed internally
- B9 physical PPA, net of grid losses
- B10 virtual PPA, scaled by the financial settlement share
- B11 time-matched certificates, scaled by the hourly correlation

The reduction is always adjusted by documentation quality; quality, settlement
and correlation below their audit minimum raise an advisory warning.
"""

from esg_engine.calculations.e1_insights import with_e1_insights
from esg_engine.calculations.factors import FACTORS
from esg_engine.calculations.formatting import format_number, percent_label, round_to
from esg_engine.calculations.results import build_result, trace_lines
from esg_engine.calculations.sanitize import as_number, clamp_number, field_number, has_any_value, section

ZERO_QUALITY_WARNING = "Dokumentationskvalitet på 0% betyder, at ingen reduktion kan bogføres."
OVER_DELIVERY_WARNING = "Forbrugsdata overstiger PPA-leverancen. Overskydende mængde ignoreres."


def instrument_percent(value, subject, maximum, warnings, emit_missing,
                       minimum_effective=None, advise_at_zero=False):
    """Clamp a 0-100 instrument percentage and flag values below the audit minimum."""
    number = clamp_number(
        value,
        warnings,
        emit_missing,
        maximum=maximum,
        missing=f"{subject} mangler og behandles som 0%.",
        negative=f"{subject} kan ikke være negativ. 0% anvendes.",
        capped=f"{subject} er begrænset til {format_number(maximum)}%.",
    )
    raw = as_number(value)
    accepted = raw is not None and 0 <= raw <= maximum
    if accepted and minimum_effective is not None and number < minimum_effective:
        if advise_at_zero or number > 0:
            warnings.append(
                f"{subject} under {format_number(minimum_effective)}% kan blive udfordret i revision."
            )
    return number


def _quality_weighted(kwh, quality_percent, factors):
    return kwh * quality_percent * factors["percent_to_ratio"] * factors["quality_mitigation_rate"]


def _quality_assumption(factors):
    return f"Dokumentationskvalitet vægtes med {percent_label(factors['quality_mitigation_rate'])}% effektivitet."


def _conversion_assumption(factors):
    return f"Konvertering fra kg til ton: {format_number(factors['kg_to_tonnes'])}"


def _credit_result(module_id, input_data, factors, quality_adjusted_kwh, residual_factor,
                   assumptions, leading_trace, warnings):
    gross_kg = quality_adjusted_kwh * residual_factor
    gross_tonnes = gross_kg * factors["kg_to_tonnes"]
    trace = trace_lines(leading_trace + [
        ("qualityAdjustedKwh", quality_adjusted_kwh),
        ("residualEmissionFactorKgPerKwh", residual_factor),
        ("grossReductionKg", gross_kg),
        ("grossReductionTonnes", gross_tonnes),
    ])
    value = round_to(-gross_tonnes, factors["result_precision"])
    result = build_result(value, factors["unit"], assumptions, trace, warnings)
    return with_e1_insights(module_id, input_data, result)


def run_b7(input_data):
    factors = FACTORS["b7"]
    warnings = []
    assumptions = [
        "Reduktion beregnes som dokumenteret vedvarende el multipliceret med residualfaktor.",
        _quality_assumption(factors),
        _conversion_assumption(factors),
    ]

    raw = section(input_data, "B7")
    emit_missing = has_any_value(raw)
    renewable_kwh = field_number(raw, "documentedRenewableKwh", warnings, emit_missing)
    residual = field_number(raw, "residualEmissionFactorKgPerKwh", warnings, emit_missing)
    quality = instrument_percent(
        raw.get("documentationQualityPercent"), "Dokumentationskvalitet",
        factors["maximum_documentation_percent"], warnings, emit_missing,
        minimum_effective=factors["minimum_effective_quality_percent"], advise_at_zero=True,
    )

    quality_adjusted = _quality_weighted(renewable_kwh, quality, factors)
    if quality == 0 and renewable_kwh > 0:
        warnings.append(ZERO_QUALITY_WARNING)

    return _credit_result(
        "B7", input_data, factors, quality_adjusted, residual, assumptions,
        [("documentedRenewableKwh", renewable_kwh), ("documentationQualityPercent", quality)],
        warnings,
    )


def run_b8(input_data):
    factors = FACTORS["b8"]
    warnings = []
    assumptions = [
        "Kun den egenproducerede el der forbruges internt reducerer Scope 2-udledningerne.",
        _quality_assumption(factors),
        _conversion_assumption(factors),
    ]

    raw = section(input_data, "B8")
    emit_missing = has_any_value(raw)
    on_site = field_number(raw, "onSiteRenewableKwh", warnings, emit_missing)
    exported = field_number(raw, "exportedRenewableKwh", warnings, emit_missing)
    residual = field_number(raw, "residualEmissionFactorKgPerKwh", warnings, emit_missing)
    quality = instrument_percent(
        raw.get("documentationQualityPercent"), "Dokumentationskvalitet",
        factors["maximum_documentation_percent"], warnings, emit_missing,
    )

    if exported > on_site:
        warnings.append("Eksporteret vedvarende el overstiger produktionen. Nettoreduktionen sættes til 0.")
    net_self_consumption = max(0, on_site - exported)
    if quality == 0 and net_self_consumption > 0:
        warnings.append(ZERO_QUALITY_WARNING)

    quality_adjusted = _quality_weighted(net_self_consumption, quality, factors)
    minimum = factors["minimum_effective_quality_percent"]
    if 0 < quality < minimum:
        warnings.append(f"Dokumentationskvalitet under {format_number(minimum)}% kan blive udfordret i revision.")

    return _credit_result(
        "B8", input_data, factors, quality_adjusted, residual, assumptions,
        [
            ("onSiteRenewableKwh", on_site),
            ("exportedRenewableKwh", exported),
            ("netSelfConsumptionKwh", net_self_consumption),
            ("documentationQualityPercent", quality),
        ],
        warnings,
    )


def run_b9(input_data):
    factors = FACTORS["b9"]
    warnings = []
    maximum_loss = factors["maximum_grid_loss_percent"]
    assumptions = [
        "Kun den PPA-leverede energi der matcher virksomhedens forbrug medregnes som reduktion.",
        f"Nettab over nettet fratrækkes lineært baseret på oplyst procent (maks {format_number(maximum_loss)}%).",
        _quality_assumption(factors),
        _conversion_assumption(factors),
    ]

    raw = section(input_data, "B9")
    emit_missing = has_any_value(raw)
    delivered = field_number(raw, "ppaDeliveredKwh", warnings, emit_missing)
    matched_consumption = field_number(raw, "matchedConsumptionKwh", warnings, emit_missing)
    grid_loss = clamp_number(
        raw.get("gridLossPercent"),
        warnings,
        emit_missing,
        maximum=maximum_loss,
        missing="Nettab mangler og behandles som 0%.",
        negative="Nettab kan ikke være negativt. 0% anvendes.",
        capped=f"Nettab er begrænset til {format_number(maximum_loss)}%.",
    )
    residual = field_number(raw, "residualEmissionFactorKgPerKwh", warnings, emit_missing)
    quality = instrument_percent(
        raw.get("documentationQualityPercent"), "Dokumentationskvalitet",
        factors["maximum_documentation_percent"], warnings, emit_missing,
        minimum_effective=factors["minimum_effective_quality_percent"], advise_at_zero=True,
    )

    matched_kwh = min(delivered, matched_consumption)
    if matched_consumption > delivered:
        warnings.append(OVER_DELIVERY_WARNING)
    loss_factor = max(0, 1 - grid_loss * factors["percent_to_ratio"])
    net_matched = matched_kwh * loss_factor
    if quality == 0 and net_matched > 0:
        warnings.append(ZERO_QUALITY_WARNING)

    quality_adjusted = _quality_weighted(net_matched, quality, factors)
    return _credit_result(
        "B9", input_data, factors, quality_adjusted, residual, assumptions,
        [
            ("ppaDeliveredKwh", delivered),
            ("matchedConsumptionKwh", matched_consumption),
            ("gridLossPercent", grid_loss),
            ("lossFactor", loss_factor),
            ("netMatchedKwh", net_matched),
            ("documentationQualityPercent", quality),
        ],
        warnings,
    )


def run_b10(input_data):
    factors = FACTORS["b10"]
    warnings = []
    maximum_settlement = factors["maximum_settlement_percent"]
    assumptions = [
        "Kun kontrakteret energi der kan matches med dokumenteret forbrug medregnes som reduktion.",
        "Finansiel dækning reduceres lineært efter angivet settlement-procent "
        f"(maks {format_number(maximum_settlement)}%).",
        _quality_assumption(factors),
        _conversion_assumption(factors),
    ]

    raw = section(input_data, "B10")
    emit_missing = has_any_value(raw)
    settled = field_number(raw, "ppaSettledKwh", warnings, emit_missing)
    matched_consumption = field_number(raw, "matchedConsumptionKwh", warnings, emit_missing)
    settlement = instrument_percent(
        raw.get("marketSettlementPercent"), "Finansiel dækning", maximum_settlement, warnings, emit_missing,
        minimum_effective=factors["minimum_effective_settlement_percent"],
    )
    residual = field_number(raw, "residualEmissionFactorKgPerKwh", warnings, emit_missing)
    quality = instrument_percent(
        raw.get("documentationQualityPercent"), "Dokumentationskvalitet",
        factors["maximum_documentation_percent"], warnings, emit_missing,
        minimum_effective=factors["minimum_effective_quality_percent"],
    )

    matched_kwh = min(settled, matched_consumption)
    if matched_consumption > settled:
        warnings.append(OVER_DELIVERY_WARNING)
    settlement_ratio = settlement * factors["percent_to_ratio"]
    settlement_adjusted = matched_kwh * settlement_ratio
    if settlement == 0 and matched_kwh > 0:
        warnings.append("Finansiel dækning på 0% betyder, at ingen reduktion kan bogføres.")

    quality_adjusted = _quality_weighted(settlement_adjusted, quality, factors)
    if quality == 0 and settlement_adjusted > 0:
        warnings.append(ZERO_QUALITY_WARNING)

    return _credit_result(
        "B10", input_data, factors, quality_adjusted, residual, assumptions,
        [
            ("ppaSettledKwh", settled),
            ("matchedConsumptionKwh", matched_consumption),
            ("marketSettlementPercent", settlement),
            ("settlementRatio", settlement_ratio),
            ("settlementAdjustedKwh", settlement_adjusted),
            ("documentationQualityPercent", quality),
        ],
        warnings,
    )


def run_b11(input_data):
    factors = FACTORS["b11"]
    warnings = []
    maximum_correlation = factors["maximum_time_correlation_percent"]
    assumptions = [
        "Kun certifikater der matcher dokumenteret forbrug medregnes i reduktionen.",
        "Timekorrelation reduceres lineært efter den angivne procent "
        f"(maks {format_number(maximum_correlation)}%).",
        f"Time-match effektivitet vægtes med {percent_label(factors['time_matching_mitigation_rate'])}%.",
        _quality_assumption(factors),
        _conversion_assumption(factors),
    ]

    raw = section(input_data, "B11")
    emit_missing = has_any_value(raw)
    certificates = field_number(raw, "certificatesRetiredKwh", warnings, emit_missing)
    matched_consumption = field_number(raw, "matchedConsumptionKwh", warnings, emit_missing)
    correlation = instrument_percent(
        raw.get("timeCorrelationPercent"), "Timekorrelation", maximum_correlation, warnings, emit_missing,
        minimum_effective=factors["minimum_effective_time_correlation_percent"],
    )
    residual = field_number(raw, "residualEmissionFactorKgPerKwh", warnings, emit_missing)
    quality = instrument_percent(
        raw.get("documentationQualityPercent"), "Dokumentationskvalitet",
        factors["maximum_documentation_percent"], warnings, emit_missing,
        minimum_effective=factors["minimum_effective_quality_percent"],
    )

    matched_kwh = min(certificates, matched_consumption)
    if matched_consumption > certificates:
        warnings.append("Forbrugsdata overstiger certificeret mængde. Overskydende energi ignoreres.")
    correlation_ratio = correlation * factors["percent_to_ratio"]
    time_adjusted = matched_kwh * correlation_ratio * factors["time_matching_mitigation_rate"]
    if correlation == 0 and matched_kwh > 0:
        warnings.append("Timekorrelation på 0% betyder, at ingen reduktion kan bogføres.")

    quality_adjusted = _quality_weighted(time_adjusted, quality, factors)
    if quality == 0 and time_adjusted > 0:
        warnings.append(ZERO_QUALITY_WARNING)

    return _credit_result(
        "B11", input_data, factors, quality_adjusted, residual, assumptions,
        [
            ("certificatesRetiredKwh", certificates),
            ("matchedConsumptionKwh", matched_consumption),
            ("timeCorrelationPercent", correlation),
            ("timeCorrelationRatio", correlation_ratio),
            ("timeAdjustedKwh", time_adjusted),
            ("documentationQualityPercent", quality),
        ],
        warnings,
    )
