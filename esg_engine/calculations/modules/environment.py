"""
E2-E5: environmental risk indices

Each module turns a handful of volumes and shares into a weighted 0-100
index (higher means more exposure, except E3 where 100 is full
compliance) and flags the inputs that drive the score.
"""

from esg_engine.calculations.factors import FACTORS
from esg_engine.calculations.formatting import format_number, js_round, round_to, to_fixed
from esg_engine.calculations.results import build_result
from esg_engine.calculations.sanitize import as_number, is_blank, section

E3_MEDIUMS = (
    ("air", "Luft", "airEmissionsTonnes", "airEmissionLimitTonnes"),
    ("water", "Vand", "waterDischargesTonnes", "waterDischargeLimitTonnes"),
    ("soil", "Jord", "soilEmissionsTonnes", "soilEmissionLimitTonnes"),
)


def _amount(value):
    number = as_number(value)
    return 0 if number is None else max(0, number)


def _count(value):
    number = as_number(value)
    return 0 if number is None else max(0, js_round(number))


def _percent(value, fallback):
    number = as_number(value)
    if number is None:
        number = fallback
    return min(max(number, 0), 100)


def _numeric_fact(facts, key, value, unit_id, decimals):
    facts.append({"conceptKey": key, "value": value, "unitId": unit_id, "decimals": decimals})


def run_e2_water(input_data):
    factors = FACTORS["e2_water"]
    raw = section(input_data, "E2Water")

    total = _amount(raw.get("totalWithdrawalM3"))
    stress_raw = _amount(raw.get("withdrawalInStressRegionsM3"))
    discharge_raw = _amount(raw.get("dischargeM3"))
    reuse_percent = _percent(raw.get("reusePercent"), factors["default_reuse_percent"])
    reuse_ratio = reuse_percent / 100
    data_quality = _percent(raw.get("dataQualityPercent"), 100)

    warnings = []
    assumptions = [
        "Vandstressindeks beregnes som vægtet sum: 50 % stress, 30 % genbrug og 20 % udledning.",
        "Manglende data for genbrug behandles som 0 % genbrug.",
    ]

    minimum = factors["minimum_reportable_withdrawal_m3"]
    if total < minimum:
        if total == 0:
            warnings.append("Intet vandforbrug registreret. Indtast forbrug for at beregne vandstress.")
        else:
            warnings.append(
                f"Det registrerede vandforbrug ({to_fixed(total, 1)} m³) er lavere end minimumsgrænsen på "
                f"{minimum} m³ og afrundes til nul."
            )
        return build_result(0, factors["unit"], assumptions, [f"totalWithdrawalM3={to_fixed(total, 1)}"], warnings)

    stress = stress_raw
    if stress > total:
        warnings.append("Vandudtag i stressede områder overstiger det totale vandforbrug. Værdien begrænses til totalen.")
        stress = total
    discharge = discharge_raw
    if discharge > total:
        warnings.append("Udledt vand overstiger total udtag. Værdien begrænses til totalen for beregning.")
        discharge = total

    stress_share = stress / total
    discharge_ratio = discharge / total
    stress_share_percent = to_fixed(stress_share * 100, 1)
    stress_threshold_percent = to_fixed(factors["stress_warning_threshold"] * 100, 0)

    total_weight = factors["stress_weight"] + factors["reuse_weight"] + factors["discharge_weight"]
    weighted_risk = (
        stress_share * factors["stress_weight"]
        + (1 - reuse_ratio) * factors["reuse_weight"]
        + (1 - discharge_ratio) * factors["discharge_weight"]
    ) / total_weight
    value = round_to(weighted_risk * 100, factors["result_precision"])

    trace = [
        f"totalWithdrawalM3={to_fixed(total, 2)}",
        f"stressWithdrawalM3={to_fixed(stress, 2)}",
        f"stressShare={to_fixed(stress_share, 4)}",
        f"stressSharePercent={stress_share_percent}",
        f"dischargeM3={to_fixed(discharge, 2)}",
        f"dischargeRatio={to_fixed(discharge_ratio, 4)}",
        f"reusePercent={to_fixed(reuse_percent, 2)}",
        f"reuseRatio={to_fixed(reuse_ratio, 4)}",
        f"weightedRisk={to_fixed(weighted_risk, 4)}",
    ]

    if stress_share > factors["stress_warning_threshold"]:
        warnings.append(
            f"Mere end {stress_threshold_percent} % af vandudtaget ({stress_share_percent} %) foregår i "
            "vandstressede områder – prioriter risikoplaner."
        )
    if reuse_percent == 0:
        warnings.append("Ingen dokumenteret genbrug af vand. Overvej recirkulation eller sekundære kilder.")
    threshold = factors["low_data_quality_threshold_percent"]
    if data_quality < threshold:
        warnings.append(
            f"Dokumentationskvaliteten ({to_fixed(data_quality, 0)} %) ligger under anbefalingen på {threshold} %. "
            "Forbedr datagrundlaget for vandforbrug."
        )
    trace.append(f"dataQualityPercent={to_fixed(data_quality, 2)}")

    facts = []
    _numeric_fact(facts, "E2TotalWaterWithdrawalM3", total, "m3", 0)
    _numeric_fact(facts, "E2WaterWithdrawalInStressRegionsM3", stress, "m3", 0)
    _numeric_fact(facts, "E2WaterDischargeM3", discharge, "m3", 0)
    _numeric_fact(facts, "E2WaterReusePercent", reuse_percent, "percent", 1)
    _numeric_fact(facts, "E2WaterStressSharePercent", stress_share * 100, "percent", 1)
    _numeric_fact(facts, "E2WaterDischargeRatioPercent", discharge_ratio * 100, "percent", 1)
    _numeric_fact(facts, "E2WaterDataQualityPercent", data_quality, "percent", 1)

    return build_result(value, factors["unit"], assumptions, trace, warnings, esrsFacts=facts)


def _resolve_limit(value, medium, label, factors, warnings):
    fallback = factors["default_limits_tonnes"][medium]
    number = as_number(value)
    if number is None or number <= 0:
        warnings.append(
            f"{label}: Ingen gyldig grænse angivet. Standardgrænsen på {fallback} t anvendes i beregningen."
        )
        return fallback
    return number


def _exceed_percent(quantity, limit):
    return 0 if limit == 0 else max(0, (quantity - limit) / limit * 100)


def run_e3_pollution(input_data):
    factors = FACTORS["e3_pollution"]
    raw = section(input_data, "E3Pollution")
    warnings = []
    trace = []
    assumptions = [
        "Overholdelsesscoren starter på 100 og reduceres med 0,9 point pr. procent overskridelse af "
        "myndighedsgrænser.",
        "Hver rapporterbar hændelse reducerer scoringen med 7 point.",
        "Standardgrænser anvendes, hvis ingen grænseværdi er angivet: luft 50 t, vand 20 t og jord 5 t.",
    ]

    mediums = []
    for key, label, quantity_field, limit_field in E3_MEDIUMS:
        mediums.append({
            "key": key,
            "label": label,
            "quantity": _amount(raw.get(quantity_field)),
            "limit": _resolve_limit(raw.get(limit_field), key, label, factors, warnings),
        })
    incidents = _count(raw.get("reportableIncidents"))
    data_quality = _percent(raw.get("documentationQualityPercent"), 100)

    total_exceed = 0
    for medium in mediums:
        quantity, limit = medium["quantity"], medium["limit"]
        exceed = _exceed_percent(quantity, limit)
        exceed_rounded = round_to(exceed, 2)
        total_exceed += exceed
        if exceed > 0:
            warnings.append(
                f"{medium['label']}: Udledningen på {to_fixed(quantity, 2)} t overstiger grænsen på "
                f"{to_fixed(limit, 2)} t med {to_fixed(exceed_rounded, 2)} %."
            )
        if quantity == 0:
            warnings.append(f"{medium['label']}: Ingen udledninger registreret. Bekræft at data dækker hele året.")
        trace.append(
            f"{medium['key']}|quantityTonnes={to_fixed(quantity, 3)}|limitTonnes={to_fixed(limit, 3)}"
            f"|exceedPercent={to_fixed(exceed_rounded, 2)}"
        )

    if incidents > 0:
        warnings.append(
            f"Der er registreret {incidents} hændelse(r) med rapporteringspligt. "
            "Sikr opfølgning og root-cause analyse."
        )
    threshold = factors["documentation_warning_threshold_percent"]
    if data_quality < threshold:
        warnings.append(
            f"Dokumentationskvalitet på {to_fixed(data_quality, 0)} % er under anbefalingen på {threshold} %. "
            "Opdater emissionstal med mere robuste kilder."
        )

    exceed_penalty = total_exceed * factors["exceed_penalty_per_percent"]
    incident_penalty = incidents * factors["incident_penalty"]
    total_penalty = exceed_penalty + incident_penalty
    score = max(0, factors["base_score"] - total_penalty)
    # A blank form is not evidence of compliance
    value = 0 if is_blank(raw) else round_to(score, factors["result_precision"])

    trace += [
        f"totalExceedPercent={to_fixed(total_exceed, 2)}",
        f"penaltyExceedance={to_fixed(exceed_penalty, 2)}",
        f"penaltyIncidents={to_fixed(incident_penalty, 2)}",
        f"totalPenalty={to_fixed(total_penalty, 2)}",
        f"incidents={incidents}",
        f"dataQualityPercent={to_fixed(data_quality, 2)}",
    ]

    facts = []
    medium_rows = []
    for medium in mediums:
        name = medium["key"].capitalize()
        exceed = _exceed_percent(medium["quantity"], medium["limit"])
        _numeric_fact(facts, f"E3{name}EmissionsTonnes", medium["quantity"], "tonne", 2)
        _numeric_fact(facts, f"E3{name}LimitTonnes", medium["limit"], "tonne", 2)
        _numeric_fact(facts, f"E3{name}ExceedPercent", exceed, "percent", 2)
        medium_rows.append({
            "medium": medium["key"],
            "quantityTonnes": round_to(medium["quantity"], 3),
            "limitTonnes": round_to(medium["limit"], 3),
            "exceedPercent": round_to(exceed, 2),
        })
    _numeric_fact(facts, "E3ReportableIncidentsCount", incidents, "pure", 0)
    _numeric_fact(facts, "E3DocumentationQualityPercent", data_quality, "percent", 1)

    return build_result(
        value, factors["unit"], assumptions, trace, warnings,
        esrsFacts=facts,
        esrsTables=[{"conceptKey": "E3MediumsTable", "rows": medium_rows}],
    )


def run_e4_biodiversity(input_data):
    factors = FACTORS["e4_biodiversity"]
    raw = section(input_data, "E4Biodiversity")

    sites = _count(raw.get("sitesInOrNearProtectedAreas"))
    impacted = _amount(raw.get("protectedAreaHectares"))
    restored = _amount(raw.get("restorationHectares"))
    incidents = _count(raw.get("significantIncidents"))
    data_quality = _percent(raw.get("documentationQualityPercent"), 100)

    assumptions = [
        "Risikoindekset beregnes med vægte: lokaliteter 30 %, påvirket areal 40 % og hændelser 30 %.",
        "Restaurering reducerer risikoen med op til 60 % afhængigt af forholdet mellem restaureret og påvirket areal.",
    ]
    warnings = []

    site_score = min(sites / factors["site_normalization_count"], 1) * factors["site_weight"]
    area_score = min(impacted / factors["area_normalization_hectares"], 1) * factors["area_weight"]
    incident_score = min(incidents / factors["incident_normalization_count"], 1) * factors["incident_weight"]
    restoration_ratio = 0 if impacted == 0 else min(restored / impacted, 1)
    restoration_mitigation = restoration_ratio * factors["restoration_mitigation_rate"]

    total_weight = factors["site_weight"] + factors["area_weight"] + factors["incident_weight"]
    raw_risk = max(0, site_score + area_score + incident_score - restoration_mitigation)
    value = 0 if is_blank(raw) else round_to(raw_risk / total_weight * 100, factors["result_precision"])

    trace = [
        f"sites={sites}",
        f"impactedAreaHa={to_fixed(impacted, 2)}",
        f"restoredAreaHa={to_fixed(restored, 2)}",
        f"incidents={incidents}",
        f"siteScore={to_fixed(site_score, 4)}",
        f"areaScore={to_fixed(area_score, 4)}",
        f"incidentScore={to_fixed(incident_score, 4)}",
        f"restorationRatio={to_fixed(restoration_ratio, 4)}",
        f"restorationMitigation={to_fixed(restoration_mitigation, 4)}",
        f"rawRisk={to_fixed(raw_risk, 4)}",
    ]

    if sites > 0:
        warnings.append(f"{sites} lokalitet(er) ligger i eller tæt på beskyttede områder. Iværksæt biodiversitetsplaner.")
    if impacted > 0 and restored == 0:
        warnings.append(
            f"Der er registreret {to_fixed(impacted, 1)} ha påvirket natur uden dokumenteret restaurering. "
            "Prioritér afbødende tiltag."
        )
    if restoration_ratio >= 0.8 and impacted > 0:
        warnings.append("Restaurering dækker størstedelen af det påvirkede areal – dokumentér effekten for assurance.")
    if incidents > 0:
        warnings.append(
            f"{incidents} væsentlig(e) biodiversitetshændelse(r) registreret. Gennemfør årsagsanalyse og forebyggelse."
        )
    if value > factors["risk_attention_threshold"]:
        warnings.append("Biodiversitetsrisikoen overstiger 60 point – rapportér handlingsplan til ledelsen.")
    threshold = factors["data_quality_warning_percent"]
    if data_quality < threshold:
        warnings.append(
            f"Dokumentationskvalitet på {to_fixed(data_quality, 0)} % er under anbefalet niveau på {threshold} %. "
            "Suppler feltdata eller tredjepartsverifikation."
        )
    trace.append(f"dataQualityPercent={to_fixed(data_quality, 2)}")

    facts = []
    _numeric_fact(facts, "E4SitesInProtectedAreasCount", sites, "pure", 0)
    _numeric_fact(facts, "E4ProtectedAreaHectares", impacted, "hectare", 2)
    _numeric_fact(facts, "E4RestorationHectares", restored, "hectare", 2)
    _numeric_fact(facts, "E4SignificantIncidentsCount", incidents, "pure", 0)
    _numeric_fact(facts, "E4RestorationRatioPercent", restoration_ratio * 100, "percent", 1)
    _numeric_fact(facts, "E4DocumentationQualityPercent", data_quality, "percent", 1)

    return build_result(value, factors["unit"], assumptions, trace, warnings, esrsFacts=facts)


def run_e5_resources(input_data):
    factors = FACTORS["e5_resources"]
    raw = section(input_data, "E5Resources")

    primary = _amount(raw.get("primaryMaterialConsumptionTonnes"))
    secondary = _amount(raw.get("secondaryMaterialConsumptionTonnes"))
    recycled = _percent(raw.get("recycledContentPercent"), 0)
    renewable = _percent(raw.get("renewableMaterialSharePercent"), 0)
    critical = _percent(raw.get("criticalMaterialsSharePercent"), 0)
    target = _percent(raw.get("circularityTargetPercent"), 0)
    data_quality = _percent(raw.get("documentationQualityPercent"), 100)

    assumptions = [
        "Ressourceindekset anvender vægte: primært forbrug 35 %, kritiske materialer 20 %, genanvendelse 20 %, "
        "fornybare materialer 15 %, målopfyldelse 10 %.",
        "Primært forbrug normaliseres til 1.000 ton om året. Genanvendt og fornybar andel måles i procent.",
    ]
    warnings = []

    primary_intensity = min(primary / factors["primary_normalization_tonnes"], 1)
    primary_score = primary_intensity * factors["primary_weight"]
    critical_score = critical / 100 * factors["critical_weight"]
    recycled_score = (1 - recycled / 100) * factors["recycled_weight"]
    renewable_score = (1 - renewable / 100) * factors["renewable_weight"]
    target_gap = max(0, target - recycled)
    target_score = target_gap / 100 * factors["target_weight"]

    total_weight = (
        factors["primary_weight"]
        + factors["critical_weight"]
        + factors["recycled_weight"]
        + factors["renewable_weight"]
        + factors["target_weight"]
    )
    risk_index = (primary_score + critical_score + recycled_score + renewable_score + target_score) / total_weight
    value = 0 if is_blank(raw) else round_to(risk_index * 100, factors["result_precision"])

    trace = [
        f"primaryConsumptionTonnes={to_fixed(primary, 2)}",
        f"secondaryConsumptionTonnes={to_fixed(secondary, 2)}",
        f"primaryIntensity={to_fixed(primary_intensity, 4)}",
        f"recycledPercent={to_fixed(recycled, 2)}",
        f"renewableSharePercent={to_fixed(renewable, 2)}",
        f"criticalSharePercent={to_fixed(critical, 2)}",
        f"circularityTargetPercent={to_fixed(target, 2)}",
        f"targetGapPercent={to_fixed(target_gap, 2)}",
        f"riskIndex={to_fixed(risk_index, 4)}",
    ]

    if secondary > primary:
        warnings.append("Sekundært materialeforbrug overstiger primært forbrug. Bekræft datasæt og enheder.")
    if critical > 30:
        warnings.append("Høj andel kritiske materialer (>30 %). Overvej substitution eller leverandørdiversificering.")
    if recycled < target:
        warnings.append(
            f"Genanvendt andel er {to_fixed(target - recycled, 1)} procentpoint under målsætningen. "
            "Planlæg nye cirkulære initiativer."
        )
    if value > factors["circularity_attention_threshold"]:
        warnings.append("Ressourceindekset overstiger 55 point – prioriter cirkularitet i handlingsplanen.")
    threshold = factors["documentation_warning_threshold_percent"]
    if data_quality < threshold:
        warnings.append(
            f"Dokumentationskvalitet på {to_fixed(data_quality, 0)} % er under anbefalingen på {threshold} %. "
            "Indhent leverandørdata eller tredjepartsattester."
        )
    if primary == 0 and recycled == 0 and renewable == 0:
        warnings.append("Ingen ressourceforbrug registreret. Angiv data for at opgøre cirkularitet.")
    trace.append(f"dataQualityPercent={to_fixed(data_quality, 2)}")

    facts = []
    _numeric_fact(facts, "E5PrimaryMaterialConsumptionTonnes", primary, "tonne", 2)
    _numeric_fact(facts, "E5SecondaryMaterialConsumptionTonnes", secondary, "tonne", 2)
    _numeric_fact(facts, "E5RecycledContentPercent", recycled, "percent", 1)
    _numeric_fact(facts, "E5RenewableMaterialSharePercent", renewable, "percent", 1)
    _numeric_fact(facts, "E5CriticalMaterialsSharePercent", critical, "percent", 1)
    _numeric_fact(facts, "E5CircularityTargetPercent", target, "percent", 1)
    _numeric_fact(facts, "E5TargetGapPercent", target_gap, "percent", 1)
    _numeric_fact(facts, "E5DocumentationQualityPercent", data_quality, "percent", 1)

    return build_result(value, factors["unit"], assumptions, trace, warnings, esrsFacts=facts)
