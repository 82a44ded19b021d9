"""
E1 insight overlay

Enriches Scope 1/2/3 module results with organisation-wide E1 context:
- intensities per revenue, production volume, FTE and total energy
- year-over-year trend against the previous year's scope total
- progress against the best matching E1 climate target
- the normalised energy mix

The overlay only adds fields; it never changes `value` and never removes
anything the calculator already produced.
"""

from esg_engine.calculations.formatting import format_number, round_scaled
from esg_engine.calculations.sanitize import as_number, section, text_value

SCOPE_BY_MODULE = {
    **{f"A{n}": "scope1" for n in range(1, 5)},
    **{f"B{n}": "scope2" for n in range(1, 12)},
    **{f"C{n}": "scope3" for n in range(1, 16)},
}

PREVIOUS_YEAR_FIELD = {
    "scope1": "previousYearScope1Tonnes",
    "scope2": "previousYearScope2Tonnes",
    "scope3": "previousYearScope3Tonnes",
}

ENERGY_MIX_TYPES = ("electricity", "districtHeat", "steam", "cooling", "biogas", "diesel", "other")
INSIGHT_FIELDS = ("intensities", "trend", "targetProgress", "energyMix")


def with_e1_insights(module_id, input_data, result):
    scope = SCOPE_BY_MODULE.get(module_id)
    if not scope:
        return result
    # Already enriched, by the calculator or an earlier pass
    if any(field in result for field in INSIGHT_FIELDS):
        return result

    context = section(input_data, "E1Context")
    targets_input = section(input_data, "E1Targets")

    trace = list(result["trace"])
    intensities = []
    esrs_facts = list(result.get("esrsFacts") or [])

    energy_mix = _resolve_energy_mix(context)
    target_progress = _resolve_target_progress(module_id, scope, targets_input, result["value"], trace)
    trend = _resolve_trend(scope, context, result["value"], result["unit"], trace)

    revenue = _positive_number(context.get("netRevenueDkk"))
    if revenue:
        intensity = round_scaled(result["value"] / (revenue / 1_000_000), 3)
        intensities.append({
            "basis": "netRevenue",
            "label": "tCO2e pr. mio. DKK nettoomsætning",
            "unit": "tCO2e/mio. DKK",
            "value": intensity,
            "denominatorValue": revenue,
            "denominatorUnit": "DKK",
        })
        trace.append(f"intensity.revenuePerMillion={format_number(intensity)}")

    production = _positive_number(context.get("productionVolume"))
    production_unit = text_value(context.get("productionUnit")) or "enhed"
    if production:
        intensity = round_scaled(result["value"] / production, 3)
        intensities.append({
            "basis": "production",
            "label": f"tCO2e pr. {production_unit}",
            "unit": f"tCO2e/{production_unit}",
            "value": intensity,
            "denominatorValue": production,
            "denominatorUnit": production_unit,
        })
        trace.append(f"intensity.production={format_number(intensity)}")

    employees = _positive_number(context.get("employeesFte"))
    if employees:
        intensity = round_scaled(result["value"] / employees, 3)
        intensities.append({
            "basis": "employees",
            "label": "tCO2e pr. FTE",
            "unit": "tCO2e/FTE",
            "value": intensity,
            "denominatorValue": employees,
            "denominatorUnit": "FTE",
        })
        trace.append(f"intensity.employees={format_number(intensity)}")

    energy = _positive_number(context.get("totalEnergyConsumptionKwh"))
    if energy:
        intensity = round_scaled(result["value"] / energy, 6)
        intensities.append({
            "basis": "energy",
            "label": "tCO2e pr. kWh samlet energi",
            "unit": "tCO2e/kWh",
            "value": intensity,
            "denominatorValue": energy,
            "denominatorUnit": "kWh",
        })
        trace.append(f"intensity.energy={format_number(intensity)}")

    enriched = dict(result)
    enriched["trace"] = trace
    if intensities:
        enriched["intensities"] = intensities
    if trend:
        enriched["trend"] = trend
    if target_progress:
        enriched["targetProgress"] = target_progress
    if energy_mix:
        enriched["energyMix"] = energy_mix
    if esrs_facts:
        enriched["esrsFacts"] = esrs_facts
    return enriched


def _resolve_trend(scope, context, current_value, unit, trace):
    previous = _positive_number(context.get(PREVIOUS_YEAR_FIELD[scope]))
    if previous is None:
        return None

    absolute_change = round_scaled(current_value - previous, 3)
    percent_change = (
        round_scaled((current_value - previous) / previous * 100, 1) if previous > 0 else None
    )
    trace.append(f"trend.previous={format_number(previous)}")
    trace.append(f"trend.absoluteChange={format_number(absolute_change)}")
    if percent_change is not None:
        trace.append(f"trend.percentChange={format_number(percent_change)}")

    return {
        "label": "Udvikling mod foregående år",
        "previousValue": previous,
        "currentValue": current_value,
        "absoluteChange": absolute_change,
        "percentChange": percent_change,
        "unit": unit,
    }


def _resolve_energy_mix(context):
    raw_lines = context.get("energyMixLines")
    if not isinstance(raw_lines, list) or not raw_lines:
        return []

    lines = []
    for line in raw_lines:
        if not isinstance(line, dict):
            continue
        energy_type = line.get("energyType")
        if energy_type not in ENERGY_MIX_TYPES:
            energy_type = "other"
        consumption = _positive_number(line.get("consumptionKwh")) or 0
        if consumption <= 0:
            continue
        lines.append({
            "energyType": energy_type,
            "consumption": consumption,
            "share": _clamp_percent(line.get("sharePercent")),
            "documentationQualityPercent": _clamp_percent(line.get("documentationQualityPercent")),
        })

    total = sum(line["consumption"] for line in lines)
    if total == 0:
        return []

    mix = []
    for line in lines:
        if line["share"] is not None:
            share = round_scaled(line["share"], 1)
        else:
            share = round_scaled(line["consumption"] / total * 100, 1)
        mix.append({
            "energyType": line["energyType"],
            "consumptionKwh": round_scaled(line["consumption"], 3),
            "sharePercent": share,
            "documentationQualityPercent": line["documentationQualityPercent"],
        })
    return mix


def _resolve_target_progress(module_id, scope, targets_input, current_value, trace):
    raw_targets = targets_input.get("targets")
    if not isinstance(raw_targets, list) or not raw_targets:
        return None

    targets = [
        target
        for target in (normalise_target(raw, index) for index, raw in enumerate(raw_targets))
        if target is not None
    ]
    match = next((t for t in targets if t["scope"] == scope), None)
    if match is None:
        match = next((t for t in targets if t["scope"] == "combined"), None)
    if match is None:
        return None

    target_value = match["targetValueTonnes"]
    baseline_value = match["baselineValueTonnes"]
    variance = round_scaled(current_value - target_value, 3) if target_value is not None else None

    progress = None
    if baseline_value is not None and target_value is not None and baseline_value != target_value:
        progress = round_scaled(
            (baseline_value - current_value) / (baseline_value - target_value) * 100, 1
        )

    status = match["status"] if match["status"] is not None else derive_status(progress)

    trace.append(f"targetProgress.module={module_id}")
    trace.append(f"targetProgress.targetId={match['id']}")
    if variance is not None:
        trace.append(f"targetProgress.varianceTonnes={format_number(variance)}")
    if progress is not None:
        trace.append(f"targetProgress.progressPercent={format_number(progress)}")
    if status:
        trace.append(f"targetProgress.status={status}")

    return {
        "targetId": match["id"],
        "name": match["name"],
        "scope": match["scope"],
        "targetYear": match["targetYear"],
        "targetValueTonnes": target_value,
        "currentValueTonnes": round_scaled(current_value, 3),
        "varianceTonnes": variance,
        "progressPercent": progress,
        "status": status,
        "owner": match["owner"],
    }


def normalise_target(target, index):
    """Target line with trimmed strings and non-negative numbers, or None."""
    if not isinstance(target, dict):
        return None

    scope = target.get("scope")
    if scope is None:
        scope = "combined"
    status = target.get("status")
    milestones = []
    if isinstance(target.get("milestones"), list):
        for milestone in target["milestones"]:
            milestone = milestone if isinstance(milestone, dict) else {}
            milestones.append({
                "label": text_value(milestone.get("label")),
                "dueYear": _positive_number(milestone.get("dueYear")),
            })

    return {
        "id": text_value(target.get("id")) or f"{scope}-{index + 1}",
        "name": text_value(target.get("name")) or f"Mål {index + 1}",
        "scope": scope,
        "targetYear": _positive_number(target.get("targetYear")),
        "targetValueTonnes": _positive_number(target.get("targetValueTonnes")),
        "baselineYear": _positive_number(target.get("baselineYear")),
        "baselineValueTonnes": _positive_number(target.get("baselineValueTonnes")),
        "owner": text_value(target.get("owner")),
        "status": status if isinstance(status, str) else None,
        "description": text_value(target.get("description")),
        "milestones": milestones,
    }


def derive_status(progress_percent):
    if progress_percent is None:
        return None
    if progress_percent >= 90:
        return "onTrack"
    if progress_percent >= 60:
        return "lagging"
    return "atRisk"


def _positive_number(value):
    number = as_number(value)
    if number is None or number < 0:
        return None
    return number


def _clamp_percent(value):
    number = as_number(value)
    if number is None:
        return None
    return max(0, min(100, number))
