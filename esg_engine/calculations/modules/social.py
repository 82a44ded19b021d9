"""
S1-S4: social standards

Each module scores a social topic on a 0-100 scale:
- S1: own workforce, headcount breakdowns and working conditions
- S2: workers in the value chain
- S3: affected communities
- S4: consumers and end-users

S2-S4 share the incident model: every registered incident costs part of
the incident weight, scaled by severity, remediation status and how many
people it touches. A section with no values at all scores 0.
"""

import math

from esg_engine.calculations.factors import FACTORS
from esg_engine.calculations.formatting import format_number, round_to, to_fixed
from esg_engine.calculations.results import build_result
from esg_engine.calculations.sanitize import (
    as_number,
    clamp_ratio,
    coerce_boolean,
    is_blank,
    rows,
    section,
    text_value,
)

SEVERITY_LEVELS = ("low", "medium", "high")
REMEDIATION_STATUSES = ("notStarted", "inProgress", "completed")

EMPLOYMENT_CONTRACT_LABELS = {
    "permanentEmployees": "Fastansatte",
    "temporaryEmployees": "Tidsbegrænsede ansatte",
    "nonEmployeeWorkers": "Andre arbejdstagere (ikke-ansatte)",
    "apprentices": "Lærlinge/trainees",
    "other": "Øvrige",
}

EMPLOYMENT_STATUS_LABELS = {
    "fullTime": "Fuldtid",
    "partTime": "Deltid",
    "seasonal": "Sæsonansatte",
    "other": "Øvrige",
}


def _percent(value, minimum=0, maximum=100):
    number = as_number(value)
    if number is None:
        return None
    return max(minimum, min(maximum, number))


def _count(value):
    number = as_number(value)
    if number is None:
        return None
    return max(0, math.floor(number))


def _non_negative(value, decimals=0):
    number = as_number(value)
    if number is None:
        return None
    rounded = round_to(max(0, number), decimals)
    return int(rounded) if decimals == 0 else rounded


def _ratio(percent):
    if percent is None:
        return 0
    return clamp_ratio(percent / 100)


def _average(values):
    valid = [value for value in values if value is not None]
    if not valid:
        return None
    return round_to(sum(valid) / len(valid), 1)


def _label(text):
    return text.replace("|", "/").replace("\n", " ").strip()


def _choice(value, options):
    return value if isinstance(value, str) and value in options else None


def _numeric_fact(facts, key, value, unit_id, decimals):
    if value is None:
        return
    facts.append({"conceptKey": key, "value": value, "unitId": unit_id, "decimals": decimals})


def _text_fact(facts, key, text):
    if text:
        facts.append({"conceptKey": key, "value": text})


def _metric(metrics, label, value, unit, context=None):
    if value is None:
        return
    metric = {"label": label, "value": value, "unit": unit}
    if context:
        metric["context"] = context
    metrics.append(metric)


def _score(total, factors, blank):
    if blank:
        return 0
    return round_to(clamp_ratio(total) * 100, factors["result_precision"])


def _narrative(raw, key):
    return text_value(raw.get(key)) or ""


# Incidents shared by S2, S3 and S4


def _incident_rows(raw, key, subject, place, count):
    """Normalise incident rows; `subject` and `place` are free-text fields."""
    incidents = []
    for index, row in enumerate(rows(raw, key)):
        if not isinstance(row, dict):
            continue
        incidents.append({
            "index": index,
            subject: text_value(row.get(subject)),
            place: text_value(row.get(place)),
            "type": text_value(row.get("issueType") or row.get("impactType")),
            count: _count(row.get(count)),
            "severityLevel": _choice(row.get("severityLevel"), SEVERITY_LEVELS),
            "remediationStatus": _choice(row.get("remediationStatus"), REMEDIATION_STATUSES),
            "description": text_value(row.get("description")),
        })
    return incidents


def _incident_weight(incident, factors):
    severity = incident["severityLevel"] or "medium"
    status = incident["remediationStatus"]
    if status == "completed":
        multiplier = factors["resolved_mitigation"]
    elif status == "inProgress":
        multiplier = factors["in_progress_mitigation"]
    else:
        multiplier = 1
    return factors["severity_weights"][severity] * multiplier


def _incident_table_rows(incidents, subject, place, type_key, count):
    return [
        {
            subject: incident[subject],
            place: incident[place],
            type_key: incident["type"],
            count: incident[count],
            "severityLevel": incident["severityLevel"],
            "remediationStatus": incident["remediationStatus"],
            "description": incident["description"],
        }
        for incident in incidents
    ]


def _incident_columns(subject, place, type_key, count, count_label):
    return [
        {"key": subject[0], "label": subject[1]},
        {"key": place[0], "label": place[1]},
        {"key": type_key[0], "label": type_key[1]},
        {"key": count, "label": count_label, "align": "end", "format": "number"},
        {"key": "severityLevel", "label": "Alvorlighed"},
        {"key": "remediationStatus", "label": "Status"},
        {"key": "description", "label": "Beskrivelse"},
    ]


def _incident_trace(prefix, incident, name, count_key, count_label):
    return (
        f"{prefix}[{incident['index']}]={_label(name)}"
        f"|type={format_number(incident['type'])}"
        f"|severity={format_number(incident['severityLevel'])}"
        f"|status={format_number(incident['remediationStatus'])}"
        f"|{count_label}={format_number(incident[count_key])}"
    )


# S1


def _segments(raw):
    segments = []
    for index, row in enumerate(rows(raw, "headcountBreakdown")):
        if not isinstance(row, dict):
            continue
        segment = text_value(row.get("segment"))
        headcount = as_number(row.get("headcount")) or 0
        if segment is None or headcount <= 0:
            continue
        segments.append({
            "index": index,
            "segment": segment,
            "headcount": headcount,
            "femalePercent": _percent(row.get("femalePercent")),
            "labourRightsCoverage": _percent(row.get("collectiveAgreementCoveragePercent")),
        })
    return segments


def _breakdown(raw, key, kind_key, labels, with_female):
    entries = []
    for index, row in enumerate(rows(raw, key)):
        if not isinstance(row, dict):
            continue
        kind = _choice(row.get(kind_key), labels)
        if kind is None:
            continue
        headcount = _non_negative(row.get("headcount"), 1) or 0
        fte = _non_negative(row.get("fte"), 2) or 0
        if headcount <= 0 and fte <= 0:
            continue
        entry = {"index": index, kind_key: kind, "headcount": headcount, "fte": fte}
        if with_female:
            entry["femalePercent"] = _percent(row.get("femalePercent"))
        entries.append(entry)
    return entries


def _reported_percent(value, key, trace, warnings, missing, threshold=None, below=None):
    """Trace a reported percentage and warn when it is missing or under `threshold`."""
    if value is None:
        warnings.append(missing)
        return
    trace.append(f"{key}={format_number(value)}")
    if threshold is not None and value < threshold:
        warnings.append(below.format(value=format_number(value)))


def _pay_gap(value, key, trace, warnings, limit, missing, above):
    if value is None:
        warnings.append(missing)
        return
    trace.append(f"{key}={format_number(value)}")
    if abs(value) > limit:
        warnings.append(above.format(value=format_number(value)))


def run_s1(input_data):
    factors = FACTORS["s1"]
    raw = section(input_data, "S1")
    segments = _segments(raw)
    contracts = _breakdown(raw, "employmentContractBreakdown", "contractType", EMPLOYMENT_CONTRACT_LABELS, True)
    statuses = _breakdown(raw, "employmentStatusBreakdown", "status", EMPLOYMENT_STATUS_LABELS, False)

    trace = []
    warnings = []
    assumptions = [
        "Scoren vægter total headcount (35 %), segmentfordeling (35 %), datadækning (20 %) og faglig repræsentation (10 %).",
        "Datadækning og arbejdsrettigheder vurderes proportionelt ud fra angivne procenttal (0-100%).",
    ]

    total_headcount = as_number(raw.get("totalHeadcount"))
    total_fte = as_number(raw.get("totalFte"))
    coverage = _percent(raw.get("dataCoveragePercent"))
    fte_coverage = _percent(raw.get("fteCoveragePercent"))
    weekly_hours = _percent(raw.get("averageWeeklyHours"), 0, 80)
    if weekly_hours is not None:
        weekly_hours = round_to(weekly_hours, 1)
    collective = coerce_boolean(raw.get("hasCollectiveBargainingAgreements"))
    pay_gap = _percent(raw.get("genderPayGapPercent"), -100, 100)
    pay_gap_management = _percent(raw.get("genderPayGapPercentManagement"), -100, 100)
    pay_gap_operations = _percent(raw.get("genderPayGapPercentOperations"), -100, 100)
    absenteeism = _percent(raw.get("absenteeismRatePercent"))
    ltifr = _non_negative(raw.get("lostTimeInjuryFrequencyRate"), 3)
    accidents = _non_negative(raw.get("workRelatedAccidentsCount"))
    fatalities = _non_negative(raw.get("workRelatedFatalitiesCount"))
    training_hours = _non_negative(raw.get("averageTrainingHoursPerEmployee"), 1)
    training_coverage = _percent(raw.get("trainingCoveragePercent"))
    social_protection = _percent(raw.get("socialProtectionCoveragePercent"))
    health_care = _percent(raw.get("healthCareCoveragePercent"))
    pension = _percent(raw.get("pensionPlanCoveragePercent"))

    if total_headcount is None or total_headcount <= 0:
        warnings.append("Total headcount mangler. Udfyld samlet medarbejdertal for at forbedre scoringen.")
    else:
        trace.append(f"totalHeadcount={format_number(total_headcount)}")
    if total_fte is None or total_fte <= 0:
        warnings.append("Total FTE mangler. Angiv fuldtidsekvivalenter for at opfylde ESRS S1-6.")
    else:
        trace.append(f"totalFte={format_number(total_fte)}")

    _reported_percent(
        coverage, "dataCoveragePercent", trace, warnings,
        "Datadækning i procent er ikke angivet. Feltet bruges til at validere CSRD-kravet om fuld arbejdsstyrkedækning.",
        factors["coverage_warning_threshold_percent"],
        "Datadækningen er kun {value}% – CSRD kræver dokumenteret dækning tæt på 100%.",
    )
    _reported_percent(
        fte_coverage, "fteCoveragePercent", trace, warnings,
        "Datadækning for FTE er ikke angivet. Feltet dokumenterer ESRS S1-6 krav om fuldt overblik.",
        factors["fte_coverage_warning_threshold_percent"],
        "FTE-dækningen er kun {value}% – udvid kilderne for at opfylde ESRS S1-6.",
    )

    if segments:
        trace.append(f"segments={len(segments)}")
    else:
        warnings.append(
            "Ingen segmentfordeling registreret. Tilføj segmenter (fx lande, funktioner) for at dokumentere headcount."
        )
        trace.append("segments=0")
    if contracts:
        trace.append(f"employmentContracts={len(contracts)}")
    else:
        warnings.append(
            "Ingen ansættelsesformer registreret. Fordel medarbejdere på faste, tidsbegrænsede mv. for ESRS S1-6."
        )
        trace.append("employmentContracts=0")
    if statuses:
        trace.append(f"employmentStatuses={len(statuses)}")
    else:
        warnings.append("Ingen opdeling på fuldtid/deltid registreret. Tilføj beskæftigelsesstatusser for ESRS S1-7.")
        trace.append("employmentStatuses=0")

    labour_rights = _average([row["labourRightsCoverage"] for row in segments])
    average_female = _average([row["femalePercent"] for row in segments])
    segment_headcount = sum(row["headcount"] for row in segments)
    female_headcount = sum(
        round_to(row["femalePercent"] / 100 * row["headcount"], 1)
        for row in segments
        if row["femalePercent"] is not None
    )
    contract_headcount = sum(row["headcount"] for row in contracts)
    contract_fte = sum(row["fte"] for row in contracts)
    status_headcount = sum(row["headcount"] for row in statuses)
    status_fte = sum(row["fte"] for row in statuses)

    if labour_rights is None:
        warnings.append("Dækning af kollektive aftaler eller medarbejderrepræsentation er ikke angivet.")
    else:
        trace.append(f"avgLabourRightsCoverage={format_number(labour_rights)}")
        if labour_rights < factors["labour_rights_warning_threshold_percent"]:
            warnings.append(
                f"Faglig repræsentation/dækningsgrad er kun {format_number(labour_rights)}% – vurder behov for "
                "kollektive aftaler og arbejdsmiljøudvalg."
            )

    if collective is None:
        warnings.append("Marker om medarbejderne er dækket af kollektive overenskomster for at understøtte ESRS S1-7.")
    else:
        trace.append(f"collectiveAgreements={'yes' if collective else 'no'}")
        if not collective:
            warnings.append(
                "Der er angivet at ingen kollektive overenskomster dækker medarbejderne – forvent opfølgning i "
                "handlingsplaner."
            )

    if total_headcount is not None:
        tolerance = max(1, total_headcount * 0.02)
        if contract_headcount > 0 and abs(total_headcount - contract_headcount) > tolerance:
            warnings.append(
                f"Ansættelsesformernes headcount ({format_number(contract_headcount)}) stemmer ikke overens med "
                f"total headcount ({format_number(total_headcount)}). Kontrollér opgørelsen."
            )
    if total_fte is not None and contract_fte > 0 and abs(total_fte - contract_fte) > 0.5:
        warnings.append(
            f"Ansættelsesformernes FTE ({to_fixed(contract_fte, 2)}) stemmer ikke overens med total FTE "
            f"({format_number(total_fte)}). Juster fordeling eller total."
        )
    if total_headcount is not None:
        tolerance = max(1, total_headcount * 0.02)
        if status_headcount > 0 and abs(total_headcount - status_headcount) > tolerance:
            warnings.append(
                f"Statusfordelingens headcount ({format_number(status_headcount)}) matcher ikke total headcount "
                f"({format_number(total_headcount)})."
            )
    if total_fte is not None and status_fte > 0 and abs(total_fte - status_fte) > 0.5:
        warnings.append(
            f"Statusfordelingens FTE ({to_fixed(status_fte, 2)}) matcher ikke total FTE ({format_number(total_fte)})."
        )

    for row in segments:
        female = row["femalePercent"]
        if female is not None and (female < 20 or female > 80):
            warnings.append(
                f'Segmentet "{row["segment"]}" har en kønsfordeling på {format_number(female)}% kvinder – markér '
                "indsats i S2 for at adressere ubalancer."
            )
        trace.append(
            f"segment[{row['index']}]={_label(row['segment'])}|headcount={format_number(row['headcount'])}"
            f"|female={format_number(female)}|labour={format_number(row['labourRightsCoverage'])}"
        )
    for row in contracts:
        female = row["femalePercent"]
        if female is not None and (female < 20 or female > 80):
            warnings.append(
                f"{EMPLOYMENT_CONTRACT_LABELS[row['contractType']]} har en kønsfordeling på {format_number(female)}% "
                "kvinder – vurder ligeløn og rekruttering."
            )
        trace.append(
            f"employmentContract[{row['index']}]={row['contractType']}|headcount={format_number(row['headcount'])}"
            f"|fte={format_number(row['fte'])}|female={format_number(female)}"
        )
    for row in statuses:
        trace.append(
            f"employmentStatus[{row['index']}]={row['status']}|headcount={format_number(row['headcount'])}"
            f"|fte={format_number(row['fte'])}"
        )

    gap_limit = factors["gender_pay_gap_warning_percent"]
    _pay_gap(
        pay_gap, "genderPayGapPercent", trace, warnings, gap_limit,
        "Løngab (samlet) er ikke angivet. ESRS S1 kræver kønsopdelt aflønning.",
        "Samlet løngab er {value}% – adresser ligelønspolitikker og handlingsplaner.",
    )
    _pay_gap(
        pay_gap_management, "genderPayGapPercentManagement", trace, warnings, gap_limit,
        "Løngab for ledelse er ikke angivet.",
        "Løngab i ledelseslag er {value}% – vurder målrettede initiativer.",
    )
    _pay_gap(
        pay_gap_operations, "genderPayGapPercentOperations", trace, warnings, gap_limit,
        "Løngab for øvrige medarbejdere er ikke angivet.",
        "Løngab blandt øvrige medarbejdere er {value}% – dokumentér korrigerende handlinger.",
    )

    if absenteeism is None:
        warnings.append("Fraværsrate mangler. Oplys procent for at dække ESRS S1-8.")
    else:
        trace.append(f"absenteeismRatePercent={format_number(absenteeism)}")
        if absenteeism > factors["absenteeism_warning_threshold_percent"]:
            warnings.append(f"Fraværsraten er {format_number(absenteeism)}% – undersøg årsager og forbedringstiltag.")
    if ltifr is None:
        warnings.append("LTIFR er ikke angivet. Arbejdsmiljødata er påkrævet under ESRS S1-8.")
    else:
        trace.append(f"lostTimeInjuryFrequencyRate={format_number(ltifr)}")
        if ltifr > factors["lost_time_injury_warning_threshold"]:
            warnings.append(f"LTIFR er {format_number(ltifr)} – styrk sikkerhedstræning og rapportering.")
    if accidents is None:
        warnings.append("Angiv antal arbejdsrelaterede ulykker for at opfylde ESRS S1-8.")
    else:
        trace.append(f"workRelatedAccidents={accidents}")
        if accidents > 0:
            warnings.append(f"Registrerede arbejdsulykker: {accidents}. Dokumentér forebyggelse.")
    if fatalities is None:
        warnings.append("Angiv antal arbejdsrelaterede dødsfald (0 hvis ingen).")
    else:
        trace.append(f"workRelatedFatalities={fatalities}")
        if fatalities > 0:
            warnings.append(
                "Der er registreret arbejdsrelaterede dødsfald – redegør for remediering og støtte til pårørende."
            )
    if training_hours is None:
        warnings.append(
            "Gennemsnitlige træningstimer pr. medarbejder er ikke angivet. ESRS S1 kræver rapportering af "
            "kompetenceudvikling."
        )
    else:
        trace.append(f"trainingHours={format_number(training_hours)}")
        if training_hours < factors["training_hours_minimum"]:
            warnings.append(
                f"Træningstimer pr. medarbejder er {format_number(training_hours)} – vurder behov for flere "
                "efteruddannelsesinitiativer."
            )

    _reported_percent(
        training_coverage, "trainingCoveragePercent", trace, warnings,
        "Andel af medarbejdere med træning er ikke angivet.",
        factors["training_coverage_warning_threshold_percent"],
        "Kun {value}% af medarbejderne modtog træning – udvid programmerne.",
    )
    _reported_percent(
        social_protection, "socialProtectionCoveragePercent", trace, warnings,
        "Dækning af social beskyttelse er ikke angivet.",
        factors["social_protection_warning_threshold_percent"],
        "Social beskyttelse dækker kun {value}% – vurder forbedringer af ydelserne.",
    )
    _reported_percent(
        health_care, "healthCareCoveragePercent", trace, warnings,
        "Dækning af sundhedsordninger er ikke angivet.",
        factors["benefit_coverage_warning_threshold_percent"],
        "Sundhedsordninger dækker {value}% – vurder forbedringer.",
    )
    _reported_percent(
        pension, "pensionPlanCoveragePercent", trace, warnings,
        "Dækning af pensionsordninger er ikke angivet.",
        factors["benefit_coverage_warning_threshold_percent"],
        "Pensionsordninger dækker {value}% – dokumentér plan for udvidelse.",
    )

    total_score = (
        (factors["total_headcount_weight"] if total_headcount is not None and total_headcount > 0 else 0)
        + factors["breakdown_weight"] * min(1, len(segments) / factors["min_segments_for_full_score"])
        + factors["coverage_weight"] * _ratio(coverage)
        + factors["labour_rights_weight"] * _ratio(labour_rights)
    )
    value = _score(total_score, factors, is_blank(raw))

    facts = []
    _numeric_fact(facts, "S1TotalHeadcount", total_headcount, "pure", 0)
    _numeric_fact(facts, "S1TotalFte", total_fte, "pure", 1)
    _numeric_fact(facts, "S1DataCoveragePercent", coverage, "percent", 1)
    _numeric_fact(facts, "S1FteCoveragePercent", fte_coverage, "percent", 1)
    _numeric_fact(facts, "S1CollectiveAgreementCoveragePercent", labour_rights, "percent", 1)
    _numeric_fact(facts, "S1AverageFemalePercent", average_female, "percent", 1)
    if collective is not None:
        facts.append({"conceptKey": "S1HasCollectiveAgreements", "value": collective})
    _numeric_fact(facts, "S1GenderPayGapPercentTotal", pay_gap, "percent", 1)
    _numeric_fact(facts, "S1GenderPayGapPercentManagement", pay_gap_management, "percent", 1)
    _numeric_fact(facts, "S1GenderPayGapPercentOperations", pay_gap_operations, "percent", 1)
    _numeric_fact(facts, "S1AbsenteeismRatePercent", absenteeism, "percent", 1)
    _numeric_fact(facts, "S1LostTimeInjuryFrequencyRate", ltifr, "pure", 3)
    _numeric_fact(facts, "S1WorkRelatedAccidentsCount", accidents, "pure", 0)
    _numeric_fact(facts, "S1WorkRelatedFatalitiesCount", fatalities, "pure", 0)
    _numeric_fact(facts, "S1AverageTrainingHoursPerEmployee", training_hours, "hour", 1)
    _numeric_fact(facts, "S1TrainingCoveragePercent", training_coverage, "percent", 1)
    _numeric_fact(facts, "S1SocialProtectionCoveragePercent", social_protection, "percent", 1)
    _numeric_fact(facts, "S1HealthCareCoveragePercent", health_care, "percent", 1)
    _numeric_fact(facts, "S1PensionPlanCoveragePercent", pension, "percent", 1)
    _numeric_fact(facts, "S1AverageWeeklyHours", weekly_hours, "hour", 1)
    if segments and segment_headcount > 0:
        _numeric_fact(facts, "S1SegmentHeadcountTotal", segment_headcount, "pure", 0)
        if female_headcount > 0:
            _numeric_fact(facts, "S1SegmentFemaleHeadcountEstimate", round_to(female_headcount, 1), "pure", 1)
    if contracts and contract_headcount > 0:
        _numeric_fact(facts, "S1EmploymentContractHeadcountTotal", contract_headcount, "pure", 0)
        _numeric_fact(facts, "S1EmploymentContractFteTotal", round_to(contract_fte, 2), "pure", 2)
    if statuses and status_headcount > 0:
        _numeric_fact(facts, "S1EmploymentStatusHeadcountTotal", status_headcount, "pure", 0)
        _numeric_fact(facts, "S1EmploymentStatusFteTotal", round_to(status_fte, 2), "pure", 2)

    segment_rows = [
        {
            "segment": row["segment"],
            "headcount": row["headcount"],
            "femalePercent": row["femalePercent"],
            "collectiveAgreementCoveragePercent": row["labourRightsCoverage"],
        }
        for row in segments
    ]
    contract_rows = [
        {
            "contractType": EMPLOYMENT_CONTRACT_LABELS[row["contractType"]],
            "headcount": row["headcount"],
            "fte": round_to(row["fte"], 2),
            "femalePercent": row["femalePercent"],
        }
        for row in contracts
    ]
    status_rows = [
        {
            "status": EMPLOYMENT_STATUS_LABELS[row["status"]],
            "headcount": row["headcount"],
            "fte": round_to(row["fte"], 2),
        }
        for row in statuses
    ]

    esrs_tables = []
    if segment_rows:
        esrs_tables.append({"conceptKey": "S1HeadcountBreakdownTable", "rows": segment_rows})
    if contract_rows:
        esrs_tables.append({"conceptKey": "S1EmploymentContractBreakdownTable", "rows": contract_rows})
    if status_rows:
        esrs_tables.append({"conceptKey": "S1EmploymentStatusBreakdownTable", "rows": status_rows})

    metrics = []
    _metric(metrics, "Total headcount", total_headcount, "personer")
    _metric(metrics, "Total FTE", total_fte, "FTE")
    if segment_headcount > 0 and (total_headcount is None or abs(total_headcount - segment_headcount) > 1):
        _metric(metrics, "Headcount i segmenter", segment_headcount, "personer", "Sum af registrerede segmenter")
    if contract_headcount > 0:
        _metric(metrics, "Headcount fordelt på ansættelsesformer", contract_headcount, "personer")
    if contract_fte > 0:
        _metric(metrics, "FTE fordelt på ansættelsesformer", round_to(contract_fte, 2), "FTE")
    _metric(metrics, "Gennemsnitlig andel kvinder", average_female, "%")
    if female_headcount > 0:
        _metric(
            metrics, "Estimeret antal kvinder", int(round_to(female_headcount, 0)), "personer",
            "Beregnet ud fra segmentfordeling",
        )
    _metric(metrics, "Dækning af kollektive aftaler", labour_rights, "%")
    _metric(metrics, "Datadækning", coverage, "%")
    _metric(metrics, "FTE-dækning", fte_coverage, "%")
    _metric(metrics, "Løngab (samlet)", pay_gap, "%")
    _metric(metrics, "Løngab (ledelse)", pay_gap_management, "%")
    _metric(metrics, "Løngab (øvrige)", pay_gap_operations, "%")
    _metric(metrics, "Fraværsrate", absenteeism, "%")
    _metric(metrics, "LTIFR", ltifr, "ulykker/1M timer")
    _metric(metrics, "Arbejdsulykker", accidents, "hændelser")
    _metric(metrics, "Arbejdsrelaterede dødsfald", fatalities, "hændelser")
    _metric(metrics, "Træningstimer pr. medarbejder", training_hours, "timer")
    _metric(metrics, "Træningsdækning", training_coverage, "%")
    _metric(metrics, "Social beskyttelse", social_protection, "%")
    _metric(metrics, "Sundhedsordninger", health_care, "%")
    _metric(metrics, "Pensionsordninger", pension, "%")
    _metric(metrics, "Gns. ugentlige arbejdstimer", weekly_hours, "timer")

    tables = []
    if segment_rows:
        tables.append({
            "id": "s1-headcount-breakdown",
            "title": "Headcount pr. segment",
            "summary": "Segmenteret headcount med kønsfordeling og faglig repræsentation.",
            "columns": [
                {"key": "segment", "label": "Segment"},
                {"key": "headcount", "label": "Headcount", "align": "end", "format": "number"},
                {"key": "femalePercent", "label": "Kvinder (%)", "align": "end", "format": "percent"},
                {"key": "collectiveAgreementCoveragePercent", "label": "Kollektive aftaler (%)",
                 "align": "end", "format": "percent"},
            ],
            "rows": segment_rows,
        })
    if contract_rows:
        tables.append({
            "id": "s1-employment-contracts",
            "title": "Ansættelsesformer",
            "summary": "Fordeling af headcount og FTE på faste, tidsbegrænsede og øvrige kategorier.",
            "columns": [
                {"key": "contractType", "label": "Ansættelsesform"},
                {"key": "headcount", "label": "Headcount", "align": "end", "format": "number"},
                {"key": "fte", "label": "FTE", "align": "end", "format": "number"},
                {"key": "femalePercent", "label": "Kvinder (%)", "align": "end", "format": "percent"},
            ],
            "rows": contract_rows,
        })
    if status_rows:
        tables.append({
            "id": "s1-employment-status",
            "title": "Beskæftigelsesstatus",
            "summary": "Fuldtid/deltid og øvrige statusser med headcount og FTE.",
            "columns": [
                {"key": "status", "label": "Status"},
                {"key": "headcount", "label": "Headcount", "align": "end", "format": "number"},
                {"key": "fte", "label": "FTE", "align": "end", "format": "number"},
            ],
            "rows": status_rows,
        })

    workforce_narrative = _narrative(raw, "workforceNarrative")
    narratives = [{"label": "Arbejdsstyrkens udvikling", "content": workforce_narrative}] if workforce_narrative else None

    return build_result(
        value,
        factors["unit"],
        assumptions,
        trace,
        warnings,
        metrics=metrics or None,
        narratives=narratives,
        tables=tables or None,
        esrsFacts=facts or None,
        esrsTables=esrs_tables or None,
    )


# S2


def _s2_coverage(raw, factors, trace, warnings):
    percent = _percent(raw.get("valueChainCoveragePercent"))
    if percent is None:
        warnings.append("Angiv værdikædedækning i procent – feltet er nødvendigt for ESRS S2 datapunkt S2-2.2.")
        return 0
    trace.append(f"valueChainCoveragePercent={format_number(percent)}")
    threshold = factors["coverage_warning_threshold_percent"]
    if percent < threshold:
        warnings.append(
            f"Værdikædedækningen er {format_number(percent)}% – gennemfør flere risikovurderinger for højere "
            f"compliance (mål ≥ {threshold}%)."
        )
    return _ratio(percent)


def _s2_protection(raw, factors, trace, warnings):
    living_wage = _percent(raw.get("livingWageCoveragePercent"))
    bargaining = _percent(raw.get("collectiveBargainingCoveragePercent"))
    scores = []
    if living_wage is None:
        warnings.append("Angiv andelen af værdikædearbejdere med leve- eller mindsteløn.")
    else:
        trace.append(f"livingWageCoveragePercent={format_number(living_wage)}")
        if living_wage < factors["living_wage_warning_threshold_percent"]:
            warnings.append(
                f"Kun {format_number(living_wage)}% af værdikædearbejderne er dækket af leve-/mindsteløn. Forbedr "
                "lønkrav i kontrakter (ESRS S2 datapunkt S2-5)."
            )
        scores.append(_ratio(living_wage))
    if bargaining is None:
        warnings.append("Angiv dækning af kollektive aftaler og organisationsfrihed for leverandørarbejdere.")
    else:
        trace.append(f"collectiveBargainingCoveragePercent={format_number(bargaining)}")
        if bargaining < factors["bargaining_warning_threshold_percent"]:
            warnings.append(
                f"Andelen med kollektive aftaler eller repræsentation er {format_number(bargaining)}% – styrk "
                "organisationsfriheden (ESRS S2 datapunkt S2-5)."
            )
        scores.append(_ratio(bargaining))
    if not scores:
        return 0
    return sum(scores) / len(scores)


def _s2_audits(raw, factors, trace, warnings):
    percent = _percent(raw.get("socialAuditsCompletedPercent"))
    if percent is None:
        warnings.append(
            "Angiv hvor stor en andel af planlagte sociale audits der er gennemført (ESRS S2 datapunkt S2-2.3)."
        )
        return 0
    trace.append(f"socialAuditsCompletedPercent={format_number(percent)}")
    if percent < factors["audit_warning_threshold_percent"]:
        warnings.append(
            f"Kun {format_number(percent)}% af sociale audits er gennemført. Øg auditfrekvensen for "
            "højrisikoleverandører."
        )
    return _ratio(percent)


def _s2_mechanism(mechanism, factors, warnings):
    if mechanism is None:
        warnings.append("Angiv om leverandørarbejdere har adgang til klagemekanismer (ESRS S2 datapunkt S2-5).")
        return factors["mechanism_unknown_score"]
    if not mechanism:
        warnings.append(
            "Ingen klagemekanisme for leverandørarbejdere. Etabler hotline eller samarbejde med fagforeninger."
        )
        return 0
    return 1


def _s2_incident_scale(workers_affected, total_workers, fallback):
    if workers_affected is not None:
        if total_workers is not None and total_workers > 0:
            return min(1, workers_affected / total_workers)
        return min(1, workers_affected / 500)
    if total_workers is not None and total_workers > 0:
        return min(1, fallback * max(1, total_workers / 500))
    return fallback


def _s2_incident_penalty(incidents, total_workers, factors, trace, warnings):
    penalty = 0
    for incident in incidents:
        workers = incident["workersAffected"]
        scale = _s2_incident_scale(workers, total_workers, factors["default_incident_scale"])
        penalty += _incident_weight(incident, factors) * scale
        supplier = incident["supplier"]
        if incident["severityLevel"] == "high" and incident["remediationStatus"] != "completed":
            warnings.append(
                f'Højrisiko-hændelsen "{_label(supplier or incident["country"] or "Ukendt")}" er ikke fuldt afhjulpet.'
            )
        if incident["remediationStatus"] is None:
            warnings.append(f"Angiv remedieringsstatus for hændelsen på {_label(supplier or 'leverandør')}.")
        if workers is not None and total_workers is not None and total_workers > 0:
            share = workers / total_workers * 100
            if share >= 10:
                warnings.append(
                    f"{workers} arbejdstagere påvirket hos {_label(supplier or 'leverandør')} – dokumentér "
                    "kompensation og opfølgning."
                )
            trace.append(f"incidentShare[{incident['index']}]={to_fixed(share, 1)}")
        trace.append(_incident_trace(
            "incident", incident, supplier or incident["country"] or "ukendt", "workersAffected", "workers",
        ))
    return penalty


def run_s2(input_data):
    factors = FACTORS["s2"]
    raw = section(input_data, "S2")
    incidents = _incident_rows(raw, "incidents", "supplier", "country", "workersAffected")

    trace = []
    warnings = []
    assumptions = [
        "Scoren vægter værdikædedækning (35 %), arbejdstagerbeskyttelse (25 %), audits (15 %) og klagemekanismer (15 %).",
        "Alvorlige hændelser reducerer score afhængigt af antal berørte arbejdstagere og status på remediering.",
    ]

    workers_total = _count(raw.get("valueChainWorkersCount"))
    workers_at_risk = _count(raw.get("workersAtRiskCount"))
    coverage = _percent(raw.get("valueChainCoveragePercent"))
    high_risk_suppliers = _percent(raw.get("highRiskSupplierSharePercent"))
    living_wage = _percent(raw.get("livingWageCoveragePercent"))
    bargaining = _percent(raw.get("collectiveBargainingCoveragePercent"))
    audits = _percent(raw.get("socialAuditsCompletedPercent"))
    grievances_open = _count(raw.get("grievancesOpenCount"))
    mechanism = coerce_boolean(raw.get("grievanceMechanismForWorkers"))

    coverage_score = _s2_coverage(raw, factors, trace, warnings)
    protection_score = _s2_protection(raw, factors, trace, warnings)
    audit_score = _s2_audits(raw, factors, trace, warnings)
    mechanism_score = _s2_mechanism(mechanism, factors, warnings)
    incident_penalty = _s2_incident_penalty(incidents, workers_total, factors, trace, warnings)

    grievance_penalty = 0
    if grievances_open is not None:
        trace.append(f"grievancesOpenCount={grievances_open}")
        if grievances_open > 0:
            warnings.append(
                f"{grievances_open} klager fra leverandørarbejdere er åbne. Følg op og luk dem for at undgå "
                "ESRS S2 advarsler."
            )
        grievance_penalty = grievances_open * factors["open_grievance_penalty_per_case"]

    base_score = (
        factors["coverage_weight"] * coverage_score
        + factors["protection_weight"] * protection_score
        + factors["audit_weight"] * audit_score
        + factors["grievance_weight"] * mechanism_score
    )
    incident_score = factors["incident_weight"] * (1 - min(1, incident_penalty + grievance_penalty))
    value = _score(base_score + incident_score, factors, is_blank(raw))

    if not incidents:
        trace.append("incidents=0")
        if (workers_at_risk or 0) > 0:
            warnings.append(
                "Ingen hændelser registreret, men der er angivet risikofyldte arbejdstagere. Verificér screeningen."
            )

    dialogue = _narrative(raw, "socialDialogueNarrative")
    remediation = _narrative(raw, "remediationNarrative")
    if len(dialogue) < 40:
        warnings.append("Tilføj narrativ om dialog og træning af leverandørarbejdere (ESRS S2 §21-23).")
    if len(remediation) < 40:
        warnings.append("Tilføj narrativ om afhjælpning og kompensation til leverandørarbejdere (ESRS S2 §28).")

    workers_affected = sum(incident["workersAffected"] or 0 for incident in incidents)

    facts = []
    _numeric_fact(facts, "S2ValueChainWorkersCount", workers_total, "pure", 0)
    _numeric_fact(facts, "S2WorkersAtRiskCount", workers_at_risk, "pure", 0)
    _numeric_fact(facts, "S2ValueChainCoveragePercent", coverage, "percent", 1)
    _numeric_fact(facts, "S2HighRiskSupplierSharePercent", high_risk_suppliers, "percent", 1)
    _numeric_fact(facts, "S2LivingWageCoveragePercent", living_wage, "percent", 1)
    _numeric_fact(facts, "S2CollectiveBargainingCoveragePercent", bargaining, "percent", 1)
    _numeric_fact(facts, "S2SocialAuditsCompletedPercent", audits, "percent", 1)
    _numeric_fact(facts, "S2GrievancesOpenCount", grievances_open, "pure", 0)
    if mechanism is not None:
        facts.append({"conceptKey": "S2GrievanceMechanismForWorkers", "value": mechanism, "unitId": None})
    _numeric_fact(facts, "S2IncidentsCount", len(incidents), "pure", 0)
    _numeric_fact(facts, "S2WorkersAffectedTotal", workers_affected, "pure", 0)
    _text_fact(facts, "S2SocialDialogueNarrative", dialogue)
    _text_fact(facts, "S2RemediationNarrative", remediation)

    incident_rows = _incident_table_rows(incidents, "supplier", "country", "issueType", "workersAffected")

    metrics = []
    _metric(metrics, "Arbejdstagere i værdikæden", workers_total, "personer")
    _metric(metrics, "Arbejdstagere i risikogrupper", workers_at_risk, "personer")
    _metric(metrics, "Screening af værdikæden", coverage, "%")
    _metric(metrics, "Højrisikoleverandører", high_risk_suppliers, "%")
    _metric(metrics, "Dækning af leve-/mindsteløn", living_wage, "%")
    _metric(metrics, "Kollektive aftaler", bargaining, "%")
    _metric(metrics, "Gennemførte sociale audits", audits, "%")
    _metric(metrics, "Åbne klager", grievances_open, "sager")
    if incidents:
        _metric(metrics, "Registrerede hændelser", len(incidents), "sager")
        _metric(metrics, "Berørte arbejdstagere", workers_affected, "personer")

    tables = None
    esrs_tables = None
    if incidents:
        tables = [{
            "id": "s2-incident-list",
            "title": "Hændelser i værdikæden",
            "summary": "Registrerede hændelser fordelt på leverandører, type og status.",
            "columns": _incident_columns(
                ("supplier", "Leverandør"), ("country", "Land"), ("issueType", "Issue-type"),
                "workersAffected", "Berørte",
            ),
            "rows": incident_rows,
        }]
        esrs_tables = [{"conceptKey": "S2IncidentsTable", "rows": incident_rows}]

    narratives = []
    if dialogue:
        narratives.append({"label": "Social dialog og træning", "content": dialogue})
    if remediation:
        narratives.append({"label": "Afhjælpning og kompensation", "content": remediation})

    return build_result(
        value,
        factors["unit"],
        assumptions,
        trace,
        warnings,
        metrics=metrics or None,
        narratives=narratives or None,
        tables=tables,
        esrsFacts=facts or None,
        esrsTables=esrs_tables,
    )


# S3


def _s3_narrative_score(text, warnings):
    if not text:
        warnings.append("Tilføj narrativ dialog med lokalsamfund og dokumentér processer (ESRS S3 §21).")
        return 0.3
    if len(text) < 80:
        warnings.append("Narrativet for lokalsamfund er meget kort – uddybt beskrivelse anbefales.")
        return 0.6
    return min(1, len(text) / 400)


def _s3_impact_scale(households, communities, fallback):
    if households is not None:
        return min(1, households / 500)
    if communities is not None and communities > 0:
        return min(1, fallback * max(1, communities / 5))
    return fallback


def _s3_incident_penalty(impacts, communities, factors, trace, warnings):
    penalty = 0
    for impact in impacts:
        households = impact["householdsAffected"]
        scale = _s3_impact_scale(households, communities, factors["default_incident_scale"])
        penalty += _incident_weight(impact, factors) * scale
        community = _label(impact["community"] or "lokalsamfund")
        if impact["severityLevel"] == "high" and impact["remediationStatus"] != "completed":
            warnings.append(f"Højrisiko-påvirkningen ved {community} er ikke fuldt afhjulpet.")
        if impact["remediationStatus"] is None:
            warnings.append(f"Angiv remedieringsstatus for påvirkningen ved {community}.")
        if households is not None:
            trace.append(f"householdsAffected[{impact['index']}]={households}")
            if households >= 50:
                warnings.append(
                    f"{households} husholdninger berørt i {community} – dokumentér kompenserende handlinger."
                )
        trace.append(_incident_trace(
            "impact", impact, impact["community"] or impact["geography"] or "ukendt",
            "householdsAffected", "households",
        ))
    return penalty


def run_s3(input_data):
    factors = FACTORS["s3"]
    raw = section(input_data, "S3")
    impacts = _incident_rows(raw, "incidents", "community", "geography", "householdsAffected")

    trace = []
    warnings = []
    assumptions = [
        "Scoren vægter dækning af konsekvensanalyser (35 %), andel højrisiko-lokalsamfund (20 %), håndtering af "
        "klager (15 %) og engagement/narrativ (15 %).",
        "Registrerede impacts reducerer score afhængigt af alvorlighed, antal husholdninger og status på remediering.",
    ]

    communities = _count(raw.get("communitiesIdentifiedCount"))
    assessments = _percent(raw.get("impactAssessmentsCoveragePercent"))
    high_risk_share = _percent(raw.get("highRiskCommunitySharePercent"))
    grievances_open = _count(raw.get("grievancesOpenCount"))
    engagement = _narrative(raw, "engagementNarrative")
    remedy = _narrative(raw, "remedyNarrative")

    if assessments is None:
        warnings.append("Angiv andel af aktiviteter med lokalsamfundsvurderinger (ESRS S3 datapunkt S3-2).")
        assessment_score = 0
    else:
        trace.append(f"impactAssessmentsCoveragePercent={format_number(assessments)}")
        if assessments < factors["assessment_warning_threshold_percent"]:
            warnings.append(
                f"Konsekvensanalyser dækker kun {format_number(assessments)}% af aktiviteterne – øg dækningen "
                "for at reducere risiko."
            )
        assessment_score = _ratio(assessments)

    if high_risk_share is None:
        warnings.append("Angiv andelen af lokalsamfund klassificeret som højrisiko.")
        high_risk_score = 0.5
    else:
        trace.append(f"highRiskCommunitySharePercent={format_number(high_risk_share)}")
        if high_risk_share > factors["high_risk_warning_threshold_percent"]:
            warnings.append(
                f"Højrisiko-lokalsamfund udgør {format_number(high_risk_share)}% – styrk due diligence og engagement."
            )
        high_risk_score = max(0, 1 - _ratio(high_risk_share))

    if grievances_open is None:
        grievance_score = 1
    else:
        trace.append(f"grievancesOpenCount={grievances_open}")
        if grievances_open > 0:
            warnings.append(f"{grievances_open} klager fra lokalsamfund er åbne – dokumentér plan for lukning.")
        grievance_score = max(0, 1 - grievances_open * factors["open_grievance_penalty_per_case"])

    engagement_score = _s3_narrative_score(engagement, warnings)
    incident_penalty = _s3_incident_penalty(impacts, communities, factors, trace, warnings)

    base_score = (
        factors["assessment_weight"] * assessment_score
        + factors["high_risk_weight"] * high_risk_score
        + factors["grievance_weight"] * grievance_score
        + factors["engagement_weight"] * engagement_score
    )
    incident_score = factors["incident_weight"] * (1 - min(1, incident_penalty))
    value = _score(base_score + incident_score, factors, is_blank(raw))

    if not impacts:
        trace.append("impacts=0")
        if (high_risk_share or 0) > 0:
            warnings.append(
                "Ingen påvirkninger er registreret, men der er angivet højrisiko-lokalsamfund. Bekræft "
                "konsekvensanalysen."
            )
    if len(remedy) < 60:
        warnings.append("Tilføj narrativ om afhjælpning og samarbejde med lokalsamfund (ESRS S3 §23-27).")

    households_total = sum(impact["householdsAffected"] or 0 for impact in impacts)

    facts = []
    _numeric_fact(facts, "S3CommunitiesIdentifiedCount", communities, "pure", 0)
    _numeric_fact(facts, "S3ImpactAssessmentsCoveragePercent", assessments, "percent", 1)
    _numeric_fact(facts, "S3HighRiskCommunitySharePercent", high_risk_share, "percent", 1)
    _numeric_fact(facts, "S3GrievancesOpenCount", grievances_open, "pure", 0)
    _numeric_fact(facts, "S3ImpactsCount", len(impacts), "pure", 0)
    _numeric_fact(facts, "S3HouseholdsAffectedTotal", households_total, "pure", 0)
    _text_fact(facts, "S3EngagementNarrative", engagement)
    _text_fact(facts, "S3RemedyNarrative", remedy)

    impact_rows = _incident_table_rows(impacts, "community", "geography", "impactType", "householdsAffected")

    metrics = []
    _metric(metrics, "Identificerede lokalsamfund", communities, "stk.")
    _metric(metrics, "Konsekvensanalyser dækket", assessments, "%")
    _metric(metrics, "Højrisiko-lokalsamfund", high_risk_share, "%")
    _metric(metrics, "Åbne lokalsamfundsklager", grievances_open, "sager")
    if impacts:
        _metric(metrics, "Registrerede impacts", len(impacts), "sager")
        _metric(metrics, "Berørte husholdninger", households_total, "husholdninger")

    tables = None
    esrs_tables = None
    if impacts:
        tables = [{
            "id": "s3-community-impacts",
            "title": "Hændelser i lokalsamfund",
            "summary": "Oversigt over påvirkninger, berørte områder og status for afhjælpning.",
            "columns": _incident_columns(
                ("community", "Lokalsamfund"), ("geography", "Geografi"), ("impactType", "Impact-type"),
                "householdsAffected", "Husholdninger",
            ),
            "rows": impact_rows,
        }]
        esrs_tables = [{"conceptKey": "S3CommunityImpactsTable", "rows": impact_rows}]

    narratives = []
    if engagement:
        narratives.append({"label": "Engagement og samarbejde", "content": engagement})
    if remedy:
        narratives.append({"label": "Afhjælpning og kompensation", "content": remedy})

    return build_result(
        value,
        factors["unit"],
        assumptions,
        trace,
        warnings,
        metrics=metrics or None,
        narratives=narratives or None,
        tables=tables,
        esrsFacts=facts or None,
        esrsTables=esrs_tables,
    )


# S4


def _s4_incident_penalty(issues, factors, trace, warnings):
    penalty = 0
    for issue in issues:
        users = issue["usersAffected"]
        scale = factors["default_incident_scale"] if users is None else min(1, users / 1000)
        penalty += _incident_weight(issue, factors) * scale
        product = _label(issue["productOrService"] or "produkt")
        if issue["severityLevel"] == "high" and issue["remediationStatus"] != "completed":
            warnings.append(f"Højrisiko-hændelsen for {product} er ikke fuldt afhjulpet.")
        if issue["remediationStatus"] is None:
            warnings.append(f"Angiv remedieringsstatus for hændelsen på {product}.")
        if users is not None:
            trace.append(f"usersAffected[{issue['index']}]={users}")
            if users >= 500:
                warnings.append(f"{users} brugere påvirket af {product} – beskriv tilbagekaldelse og kompensation.")
        trace.append(_incident_trace(
            "issue", issue, issue["productOrService"] or issue["market"] or "ukendt", "usersAffected", "users",
        ))
    return penalty


def run_s4(input_data):
    factors = FACTORS["s4"]
    raw = section(input_data, "S4")
    issues = _incident_rows(raw, "issues", "productOrService", "market", "usersAffected")

    trace = []
    warnings = []
    assumptions = [
        "Scoren vægter risikovurdering af produkter (30 %), klagehåndtering (20 %), klagemekanismer (10 %) og "
        "databeskyttelse (15 %).",
        "Indberettede hændelser reducerer scoren efter alvorlighed, antal berørte brugere og status på afhjælpning.",
    ]

    assessed = _percent(raw.get("productsAssessedPercent"))
    severe = _count(raw.get("severeIncidentsCount"))
    recalls = _count(raw.get("recallsCount"))
    resolved = _percent(raw.get("complaintsResolvedPercent"))
    breaches = _count(raw.get("dataBreachesCount"))
    mechanism = coerce_boolean(raw.get("grievanceMechanismInPlace"))
    escalation_days = as_number(raw.get("escalationTimeframeDays"))

    if assessed is None:
        warnings.append("Angiv andel af produkter/tjenester med risikovurdering (ESRS S4 datapunkt S4-2).")
        coverage_score = 0
    else:
        trace.append(f"productsAssessedPercent={format_number(assessed)}")
        if assessed < factors["products_coverage_warning_percent"]:
            warnings.append(
                f"Kun {format_number(assessed)}% af produkterne er risikovurderet – udvid processerne for at dække "
                "hele porteføljen."
            )
        coverage_score = _ratio(assessed)

    if resolved is None:
        warnings.append("Angiv hvor stor en andel af klager der løses inden for SLA.")
        complaints_score = 0.5
    else:
        trace.append(f"complaintsResolvedPercent={format_number(resolved)}")
        if resolved < factors["complaint_resolution_warning_percent"]:
            warnings.append(
                f"Kun {format_number(resolved)}% af klagerne løses rettidigt – styrk kundeserviceprocesser."
            )
        complaints_score = _ratio(resolved)

    if mechanism is None:
        warnings.append("Angiv om der findes klagemekanisme for forbrugere/slutbrugere.")
        mechanism_score = 0.5
    elif not mechanism:
        warnings.append("Ingen klagemekanisme markeret. Etabler hotline eller digitale kontaktpunkter.")
        mechanism_score = 0
    else:
        limit = factors["escalation_warning_days"]
        if escalation_days is not None and escalation_days > limit:
            warnings.append(
                f"Behandlingstiden for klager er {format_number(escalation_days)} dage – reducer til under "
                f"{limit} dage."
            )
        mechanism_score = 1

    if breaches is None:
        warnings.append("Angiv antal registrerede brud på datasikkerhed (ESRS S4 datapunkt S4-4).")
        data_protection_score = 0.6
    else:
        trace.append(f"dataBreachesCount={breaches}")
        if breaches > 0:
            warnings.append(
                f"{breaches} brud på datasikkerhed registreret – gennemgå kontroller og underret relevante "
                "myndigheder."
            )
        data_protection_score = max(0, 1 - breaches * 0.15)

    incident_penalty = _s4_incident_penalty(issues, factors, trace, warnings)

    severe_count = severe or 0
    recall_count = recalls or 0
    trace.append(f"severeIncidentsCount={severe_count}")
    trace.append(f"recallsCount={recall_count}")
    if severe_count > 0:
        warnings.append(f"{severe_count} alvorlige hændelser rapporteret – offentliggør detaljer og kompensation.")
    if recall_count > 0:
        warnings.append(
            f"{recall_count} produkt-/service-recalls registreret. Sikr dokumentation for forløb og kommunikation."
        )
    additional_penalty = severe_count * factors["default_incident_scale"] * 2 + recall_count * 0.05

    base_score = (
        factors["coverage_weight"] * coverage_score
        + factors["complaint_resolution_weight"] * complaints_score
        + factors["mechanism_weight"] * mechanism_score
        + factors["data_protection_weight"] * data_protection_score
    )
    incident_score = factors["incident_weight"] * (1 - min(1, incident_penalty + additional_penalty))
    value = _score(base_score + incident_score, factors, is_blank(raw))

    if not issues:
        trace.append("issues=0")
        if severe_count > 0:
            warnings.append(
                "Der er registreret alvorlige hændelser, men ingen detaljeret liste. Udfyld S4 impacts-tabellen."
            )

    vulnerable = _narrative(raw, "vulnerableUsersNarrative")
    engagement = _narrative(raw, "consumerEngagementNarrative")
    if len(vulnerable) < 80:
        warnings.append(
            "Tilføj narrativ om støtte til udsatte brugergrupper og adgang til produkter (ESRS S4 §18)."
        )
    if len(engagement) < 80:
        warnings.append("Tilføj narrativ om forbrugerkommunikation, uddannelse og samarbejde (ESRS S4 §22).")

    users_total = sum(issue["usersAffected"] or 0 for issue in issues)

    facts = []
    _numeric_fact(facts, "S4ProductsAssessedPercent", assessed, "percent", 1)
    _numeric_fact(facts, "S4SevereIncidentsCount", severe, "pure", 0)
    _numeric_fact(facts, "S4RecallsCount", recalls, "pure", 0)
    _numeric_fact(facts, "S4ComplaintsResolvedPercent", resolved, "percent", 1)
    _numeric_fact(facts, "S4DataBreachesCount", breaches, "pure", 0)
    if mechanism is not None:
        facts.append({"conceptKey": "S4GrievanceMechanismInPlace", "value": mechanism, "unitId": None})
    _numeric_fact(facts, "S4EscalationTimeframeDays", escalation_days, "day", 0)
    _numeric_fact(facts, "S4IssuesCount", len(issues), "pure", 0)
    _numeric_fact(facts, "S4UsersAffectedTotal", users_total, "pure", 0)
    _text_fact(facts, "S4VulnerableUsersNarrative", vulnerable)
    _text_fact(facts, "S4ConsumerEngagementNarrative", engagement)

    issue_rows = _incident_table_rows(issues, "productOrService", "market", "issueType", "usersAffected")

    metrics = []
    _metric(metrics, "Risikovurderede produkter", assessed, "%")
    _metric(metrics, "Klager løst inden SLA", resolved, "%")
    if mechanism is not None:
        metrics.append({"label": "Klagemekanisme etableret", "value": "Ja" if mechanism else "Nej"})
    _metric(metrics, "Eskaleringsfrist", escalation_days, "dage")
    _metric(metrics, "Datasikkerhedsbrud", breaches, "sager")
    _metric(metrics, "Alvorlige hændelser", severe, "sager")
    _metric(metrics, "Tilbagekaldelser", recalls, "sager")
    if issues:
        _metric(metrics, "Registrerede issues", len(issues), "sager")
        _metric(metrics, "Berørte brugere", users_total, "personer")

    tables = None
    esrs_tables = None
    if issues:
        tables = [{
            "id": "s4-issues",
            "title": "Hændelser for forbrugere og slutbrugere",
            "summary": "Liste over produkt-/service-relaterede issues og status for afhjælpning.",
            "columns": _incident_columns(
                ("productOrService", "Produkt/tjeneste"), ("market", "Marked"), ("issueType", "Issue-type"),
                "usersAffected", "Berørte",
            ),
            "rows": issue_rows,
        }]
        esrs_tables = [{"conceptKey": "S4ConsumerIssuesTable", "rows": issue_rows}]

    narratives = []
    if vulnerable:
        narratives.append({"label": "Indsatser for udsatte brugere", "content": vulnerable})
    if engagement:
        narratives.append({"label": "Forbrugerengagement", "content": engagement})

    return build_result(
        value,
        factors["unit"],
        assumptions,
        trace,
        warnings,
        metrics=metrics or None,
        narratives=narratives or None,
        tables=tables,
        esrsFacts=facts or None,
        esrsTables=esrs_tables,
    )
