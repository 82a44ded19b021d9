"""
E1Targets: climate targets, planned actions and the energy profile

`value` is the number of targets. The energy part combines E1Context
(total consumption, own production, energy mix lines) into renewable and
non-renewable shares plus a consumption-weighted documentation quality.
"""

import math
import re

from esg_engine.calculations.e1_insights import ENERGY_MIX_TYPES
from esg_engine.calculations.formatting import format_number, round_scaled
from esg_engine.calculations.results import build_result
from esg_engine.calculations.sanitize import rows, section, text_value

TARGET_SCOPES = ("scope1", "scope2", "scope3", "combined")
TARGET_STATUSES = ("onTrack", "lagging", "atRisk")
ACTION_STATUSES = ("planned", "inProgress", "delayed", "completed")

ENERGY_TYPE_LABELS = {
    "electricity": "Elektricitet",
    "districtHeat": "Fjernvarme",
    "steam": "Damp",
    "cooling": "Køling",
    "biogas": "Biogas",
    "diesel": "Diesel",
    "other": "Andet",
}

# relative gap between context total and mix sum before warning
MIX_DEVIATION_TOLERANCE = 0.25

_QUARTER = re.compile(r"^(\d{4})-Q([1-4])$")


def _number(value):
    """Only real numbers count here; numeric strings are ignored."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return value


def _non_negative(value):
    number = _number(value)
    return None if number is None or number < 0 else number


def _bounded(value, minimum, maximum):
    number = _number(value)
    return None if number is None or number < minimum or number > maximum else number


def _percent(value):
    number = _number(value)
    return None if number is None else max(0, min(100, number))


def _choice(value, options):
    return value if isinstance(value, str) and value in options else None


def _quarter(value):
    if not isinstance(value, str):
        return None
    match = _QUARTER.match(value.strip())
    return f"{match.group(1)}-Q{match.group(2)}" if match else None


def danish_number(value):
    """12345.5 -> '12.345,5' (max three decimals)."""
    text = f"{abs(value):,.3f}".rstrip("0").rstrip(".")
    text = text.translate(str.maketrans({",": ".", ".": ","}))
    return f"-{text}" if value < 0 else text


def _normalise_target(target, index, warnings, trace):
    scope = _choice(target.get("scope"), TARGET_SCOPES)
    if scope is None:
        scope = "combined"
        warnings.append(f"Ukendt scope på mål {index + 1}. Standard ({scope}) anvendes.")

    status = _choice(target.get("status"), TARGET_STATUSES)
    target_id = f"{scope}-{index + 1}"
    summary = {
        "id": target_id,
        "name": text_value(target.get("name")) or f"Mål {index + 1}",
        "scope": scope,
        "targetYear": _bounded(target.get("targetYear"), 2000, 2100),
        "targetValueTonnes": _non_negative(target.get("targetValueTonnes")),
        "baselineYear": _bounded(target.get("baselineYear"), 1990, 2100),
        "baselineValueTonnes": _non_negative(target.get("baselineValueTonnes")),
        "owner": text_value(target.get("owner")),
        "status": status,
        "description": text_value(target.get("description")),
        "milestones": [],
    }
    if status is None and target.get("status") is not None:
        warnings.append(f"Status på mål {index + 1} er ugyldig og ignoreres.")

    for milestone in rows(target, "milestones"):
        milestone = milestone if isinstance(milestone, dict) else {}
        summary["milestones"].append({
            "label": text_value(milestone.get("label")),
            "dueYear": _bounded(milestone.get("dueYear"), 2000, 2100),
        })

    trace.append(f"target[{index}].scope={scope}")
    trace.append(f"target[{index}].id={target_id}")
    if summary["targetYear"] is not None:
        trace.append(f"target[{index}].targetYear={format_number(summary['targetYear'])}")
    if summary["targetValueTonnes"] is not None:
        trace.append(f"target[{index}].targetValueTonnes={format_number(summary['targetValueTonnes'])}")
    return summary


def _normalise_action(action, index, warnings, trace):
    title = text_value(action.get("title"))
    description = text_value(action.get("description"))
    due_quarter = _quarter(action.get("dueQuarter"))
    if due_quarter is None and action.get("dueQuarter"):
        warnings.append(f"Due-date på handling {index + 1} bruger ikke formatet ÅÅÅÅ-QX og ignoreres.")

    status = _choice(action.get("status"), ACTION_STATUSES)
    if status is None and action.get("status") is not None:
        warnings.append(f"Status på handling {index + 1} er ugyldig og ignoreres.")

    if not title and not description:
        return None

    trace.append(f"action[{index}].status={status or 'ukendt'}")
    return {
        "title": title,
        "description": description,
        "owner": text_value(action.get("owner")),
        "dueQuarter": due_quarter,
        "status": status,
    }


def _normalise_energy_mix(raw_lines, trace):
    lines = []
    for index, line in enumerate(raw_lines):
        line = line if isinstance(line, dict) else {}
        consumption = _non_negative(line.get("consumptionKwh"))
        if not consumption:
            trace.append(f"energyMix[{index}].consumption=0")
            continue
        energy_type = line.get("energyType")
        lines.append({
            "energyType": energy_type if energy_type in ENERGY_MIX_TYPES else "other",
            "consumption": consumption,
            "share": _percent(line.get("sharePercent")),
            "documentationQualityPercent": _percent(line.get("documentationQualityPercent")),
        })

    total = sum(line["consumption"] for line in lines)
    if total == 0:
        return []

    entries = []
    for index, line in enumerate(lines):
        if line["share"] is not None:
            share = round_scaled(line["share"], 1)
        else:
            share = round_scaled(line["consumption"] / total * 100, 1)
        trace.append(f"energyMix[{index}].sharePercent={format_number(share)}")
        entries.append({
            "energyType": line["energyType"],
            "consumptionKwh": line["consumption"],
            "sharePercent": share,
            "documentationQualityPercent": line["documentationQualityPercent"],
        })
    return entries


def _total_energy_consumption(context, energy_mix, warnings, trace):
    context_total = _non_negative(context.get("totalEnergyConsumptionKwh"))
    mix_sum = sum(entry["consumptionKwh"] for entry in energy_mix)

    if (
        context_total is not None
        and mix_sum > 0
        and abs(context_total - mix_sum) / max(context_total, 1) > MIX_DEVIATION_TOLERANCE
    ):
        warnings.append("Energimix afviger væsentligt fra angivet totalforbrug. Vurder datakvaliteten.")

    if context_total is not None:
        return context_total
    if mix_sum > 0:
        trace.append("energy.totalFromMix=true")
        return mix_sum
    return None


def _documentation_quality(energy_mix):
    weighted = 0
    weight = 0
    for entry in energy_mix:
        if entry["documentationQualityPercent"] is None:
            continue
        weighted += entry["documentationQualityPercent"] * entry["consumptionKwh"]
        weight += entry["consumptionKwh"]
    if weight == 0:
        return None
    return round_scaled(weighted / weight, 1)


def _describe_target(target):
    segments = [f"{target['name']} ({target['scope']})"]
    if target["targetValueTonnes"] is not None and target["targetYear"] is not None:
        segments.append(
            f"mål {format_number(target['targetValueTonnes'])} t i {format_number(target['targetYear'])}"
        )
    if target["baselineValueTonnes"] is not None and target["baselineYear"] is not None:
        segments.append(
            f"baseline {format_number(target['baselineValueTonnes'])} t i {format_number(target['baselineYear'])}"
        )
    if target["status"]:
        segments.append(f"status: {target['status']}")
    if target["description"]:
        segments.append(target["description"])
    return " – ".join(segments).strip() or None


def _describe_action(action):
    segments = [action["title"] or "Handling"]
    if action["status"]:
        segments.append(f"status: {action['status']}")
    if action["dueQuarter"]:
        segments.append(f"deadline {action['dueQuarter']}")
    if action["description"]:
        segments.append(action["description"])
    return " – ".join(segments).strip() or None


def _milestone_summary(milestones):
    parts = []
    for milestone in milestones:
        label = milestone["label"] or ""
        year = format_number(milestone["dueYear"]) if milestone["dueYear"] is not None else ""
        if label and year:
            parts.append(f"{label} ({year})")
        elif label or year:
            parts.append(label or year)
    return "; ".join(parts) or None


def _or_na(value):
    return "n/a" if value is None else format_number(value)


def run_e1_targets(input_data):
    raw = section(input_data, "E1Targets")
    context = section(input_data, "E1Context")
    assumptions = [
        "Målene anvendes til at vurdere ESRS E1-krav for reduktion og energistyring.",
        "Status beregnes ud fra angivet baseline, mål og subjektiv status, hvis tilgængelig.",
    ]
    warnings = []
    trace = []

    targets = [
        _normalise_target(target, index, warnings, trace)
        for index, target in enumerate(rows(raw, "targets"))
        if isinstance(target, dict)
    ]
    actions = []
    for index, action in enumerate(rows(raw, "actions")):
        if isinstance(action, dict):
            normalised = _normalise_action(action, index, warnings, trace)
            if normalised is not None:
                actions.append(normalised)

    energy_mix = _normalise_energy_mix(rows(context, "energyMixLines"), trace)
    total_energy = _total_energy_consumption(context, energy_mix, warnings, trace)
    renewable_production = _non_negative(context.get("renewableEnergyProductionKwh"))
    energy_production = _non_negative(context.get("energyProductionKwh"))

    renewable_consumption = renewable_production
    if total_energy is not None and renewable_consumption is not None and renewable_consumption > total_energy:
        warnings.append("Vedvarende egenproduktion overstiger totalforbrug. Afkortes til totalforbrug.")
        renewable_consumption = total_energy

    non_renewable_consumption = None
    if total_energy is not None and renewable_consumption is not None:
        non_renewable_consumption = max(total_energy - renewable_consumption, 0)

    renewable_share = None
    if total_energy and renewable_consumption is not None:
        renewable_share = round_scaled(renewable_consumption / total_energy * 100, 1)
    non_renewable_share = None
    if renewable_share is not None:
        non_renewable_share = round_scaled(max(100 - renewable_share, 0), 1)
    elif total_energy and non_renewable_consumption is not None:
        non_renewable_share = round_scaled(non_renewable_consumption / total_energy * 100, 1)

    non_renewable_production = None
    if energy_production is not None:
        non_renewable_production = (
            max(energy_production - renewable_production, 0)
            if renewable_production is not None
            else energy_production
        )

    documentation_quality = _documentation_quality(energy_mix) if energy_mix else None

    for key, amount in (
        ("energy.totalConsumptionKwh", total_energy),
        ("energy.renewableSharePercent", renewable_share),
        ("energy.nonRenewableSharePercent", non_renewable_share),
        ("energy.documentationQualityPercent", documentation_quality),
    ):
        if amount is not None:
            trace.append(f"{key}={format_number(amount)}")
    if energy_mix:
        trace.append(f"energyMix.lines={len(energy_mix)}")

    statuses = [target["status"] for target in targets]
    trace.append(f"targets.count={len(targets)}")
    trace.append(f"targets.onTrack={statuses.count('onTrack')}")
    trace.append(f"targets.lagging={statuses.count('lagging')}")
    trace.append(f"targets.atRisk={statuses.count('atRisk')}")
    trace.append(f"actions.count={len(actions)}")

    narratives = [
        {"label": target["name"], "content": target["description"]}
        for target in targets if target["description"]
    ] + [
        {"label": action["title"] or "Handling", "content": action["description"]}
        for action in actions if action["description"]
    ]
    responsibilities = [
        {"subject": target["name"], "owner": target["owner"], "role": f"Mål ({target['scope']})"}
        for target in targets if target["owner"]
    ] + [
        {"subject": action["title"] or "Handling", "owner": action["owner"], "role": "Klimahandling"}
        for action in actions if action["owner"]
    ]
    notes = [
        {
            "label": f"{target['name']} ({target['scope']})",
            "detail": (
                f"Baseline {_or_na(target['baselineYear'])}: {_or_na(target['baselineValueTonnes'])} t · "
                f"Mål {_or_na(target['targetYear'])}: {_or_na(target['targetValueTonnes'])} t · "
                f"Status: {target['status'] or 'ukendt'}"
            ),
        }
        for target in targets
    ] + [
        {
            "label": action["title"] or f"Handling {index + 1}",
            "detail": f"Deadline: {action['dueQuarter'] or 'ukendt'} · Status: {action['status'] or 'ukendt'}",
        }
        for index, action in enumerate(actions)
    ]

    metrics = []
    if total_energy is not None:
        metrics.append({"label": "Samlet energiforbrug", "value": round_scaled(total_energy, 0), "unit": "kWh"})
    if renewable_share is not None:
        metrics.append({"label": "Vedvarende energiandel", "value": renewable_share, "unit": "%"})
    if non_renewable_share is not None:
        metrics.append({"label": "Ikke-vedvarende energiandel", "value": non_renewable_share, "unit": "%"})
    if documentation_quality is not None:
        metrics.append({"label": "Dokumentationskvalitet", "value": documentation_quality, "unit": "%"})

    esrs_facts = [{"conceptKey": "E1TargetsPresent", "value": bool(targets)}]
    for concept, amount, unit_id, decimals in (
        ("E1EnergyConsumptionTotalKwh", total_energy, "kWh", 0),
        ("E1EnergyConsumptionRenewableKwh", renewable_consumption, "kWh", 0),
        ("E1EnergyConsumptionNonRenewableKwh", non_renewable_consumption, "kWh", 0),
        ("E1EnergyRenewableSharePercent", renewable_share, "percent", 1),
        ("E1EnergyNonRenewableSharePercent", non_renewable_share, "percent", 1),
        ("E1EnergyRenewableProductionKwh", renewable_production, "kWh", 0),
        ("E1EnergyNonRenewableProductionKwh", non_renewable_production, "kWh", 0),
    ):
        if amount is not None:
            esrs_facts.append({"conceptKey": concept, "value": amount, "unitId": unit_id, "decimals": decimals})

    narrative_lines = [line for line in map(_describe_target, targets) if line] + [
        line for line in map(_describe_action, actions) if line
    ]
    if narrative_lines:
        esrs_facts.append({"conceptKey": "E1TargetsNarrative", "value": "\n".join(narrative_lines)})

    esrs_tables = []
    if targets:
        esrs_tables.append({
            "conceptKey": "E1TargetsTable",
            "rows": [
                {
                    "scope": target["scope"],
                    "name": target["name"],
                    "targetYear": target["targetYear"],
                    "targetValueTonnes": target["targetValueTonnes"],
                    "baselineYear": target["baselineYear"],
                    "baselineValueTonnes": target["baselineValueTonnes"],
                    "owner": target["owner"],
                    "status": target["status"],
                    "description": target["description"],
                    "milestones": _milestone_summary(target["milestones"]),
                }
                for target in targets
            ],
        })

    tables = []
    if energy_mix:
        esrs_tables.append({
            "conceptKey": "E1EnergyMixTable",
            "rows": [dict(entry) for entry in energy_mix],
        })
        tables.append({
            "id": "e1-energy-mix",
            "title": "Energimix",
            "summary": (
                f"Samlet energiforbrug: {danish_number(total_energy)} kWh" if total_energy is not None else None
            ),
            "columns": [
                {"key": "energyType", "label": "Energitype"},
                {"key": "consumptionKwh", "label": "Forbrug (kWh)", "align": "end"},
                {"key": "sharePercent", "label": "Andel (%)", "align": "end", "format": "percent"},
                {"key": "documentationQualityPercent", "label": "Dokumentationskvalitet (%)", "align": "end",
                 "format": "percent"},
            ],
            "rows": [
                {
                    "energyType": ENERGY_TYPE_LABELS.get(entry["energyType"], entry["energyType"]),
                    "consumptionKwh": round_scaled(entry["consumptionKwh"], 0),
                    "sharePercent": entry["sharePercent"],
                    "documentationQualityPercent": entry["documentationQualityPercent"],
                }
                for entry in energy_mix
            ],
        })

    return build_result(
        len(targets), "mål", assumptions, trace, warnings,
        metrics=metrics or None,
        tables=tables or None,
        energyMix=energy_mix or None,
        targetsOverview=targets,
        plannedActions=actions,
        narratives=narratives,
        responsibilities=responsibilities,
        notes=notes,
        esrsFacts=esrs_facts,
        esrsTables=esrs_tables or None,
    )
