"""
ESRS 2 qualitative modules

Narrative and checklist evaluators for the general disclosures:
- D1: method and governance, scored as fulfilled requirements
- SBM: strategy and business model, scored 0-100 on documented elements
- GOV: governance roles and controls, scored 0-100
- IRO: process for impacts, risks and opportunities, scored 0-100
- MR: metrics and targets, scored as fulfilled requirements

A module section that carries no values at all short-circuits to 0 with a
single "fill in the fields" assumption and no warnings.
"""

import math

from esg_engine.calculations.formatting import format_number, js_round
from esg_engine.calculations.results import build_result
from esg_engine.calculations.sanitize import is_blank, section, text_value

D1_CORE_TEXT_LENGTH = 200
D1_SUPPORTING_TEXT_LENGTH = 150
SBM_DETAIL_LENGTH = 120
GOV_DETAIL_LENGTH = 100
IRO_DETAIL_LENGTH = 120
MR_DETAIL_LENGTH = 200

BOUNDARY_OPTIONS = ("equityShare", "financialControl", "operationalControl")
SCOPE2_METHOD_OPTIONS = ("locationBased", "marketBased")
DATA_QUALITY_OPTIONS = ("primary", "secondary", "proxy")

TIME_HORIZON_LABELS = {
    "shortTerm": "kort sigt",
    "mediumTerm": "mellemsigt",
    "longTerm": "lang sigt",
}

TRANSITION_STATUSES = ("planned", "inProgress", "lagging", "completed", "notStarted")
FINANCIAL_EFFECT_TYPES = ("capex", "opex", "revenues", "costs", "impairments", "other")
REMOVAL_TYPES = ("inHouse", "valueChain", "carbonCredits", "other")

SBM_FIELDS = (
    ("businessModelNarrative", "Forretningsmodel",
     "Beskriv forretningsmodellen og centrale aktiviteter for ESRS 2 SBM."),
    ("valueChainNarrative", "Værdikæde og afhængigheder",
     "Angiv hvordan væsentlige ressourcer og partnere påvirker bæredygtighedsprofilen."),
    ("sustainabilityStrategyNarrative", "Strategisk integration af bæredygtighed",
     "Forklar hvordan bæredygtighed indgår i strategi og governance."),
    ("resilienceNarrative", "Robusthed og scenarier",
     "Uddyb analyser af modstandsdygtighed over for klima- og overgangsrisici."),
    ("transitionPlanNarrative", "Overgangsplan",
     "Angiv hvordan virksomheden planlægger at nå klimamål og overholde ESRS E1."),
    ("stakeholderNarrative", "Interessentdialog",
     "Beskriv hvordan væsentlige interessenter inddrages i strategien."),
)

GOV_FIELDS = (
    ("oversightNarrative", "Bestyrelsens tilsyn",
     "Beskriv bestyrelsens rolle i ESG-styring for ESRS 2 GOV."),
    ("managementNarrative", "Direktionens roller",
     "Forklar hvordan direktionen driver ESG-dagsordenen."),
    ("competenceNarrative", "ESG-kompetencer",
     "Dokumentér træning og kompetenceopbygning for ledelsen."),
    ("reportingNarrative", "Rapporteringsproces",
     "Beskriv kontrolmiljø og rapporteringscyklus for ESG-data."),
    ("assuranceNarrative", "Sikkerhed og assurance",
     "Angiv omfang af intern/ekstern assurance på ESG-rapporteringen."),
    ("incentiveNarrative", "Incitamenter",
     "Forklar hvordan incitamentsstruktur knyttes til ESG-mål."),
)

IRO_FIELDS = (
    ("processNarrative", "Identifikationsproces",
     "Beskriv processen for at identificere væsentlige impacts, risici og muligheder."),
    ("integrationNarrative", "Integration i styring",
     "Forklar hvordan resultater integreres i beslutninger og styring."),
    ("stakeholderNarrative", "Interessentinddragelse",
     "Dokumentér hvordan interessenter bidrager til analyserne."),
    ("dueDiligenceNarrative", "Due diligence",
     "Beskriv due diligence-processer for værdikæden."),
    ("escalationNarrative", "Eskalering og opfølgning",
     "Forklar hvordan alvorlige impacts eskaleres til ledelsen."),
    ("monitoringNarrative", "Overvågning og KPI’er",
     "Dokumentér opfølgning og KPI’er for risici og muligheder."),
)

MR_FIELDS = (
    ("intensityNarrative", "Intensiteter og udvikling",
     "Beskriv udviklingen i intensiteter for ESRS 2 MR."),
    ("targetNarrative", "Mål og status",
     "Forklar fremdrift på klimamål og væsentlige KPI’er."),
    ("dataQualityNarrative", "Datakvalitet",
     "Dokumentér kvalitet og kontroller for nøgletal."),
    ("assuranceNarrative", "Assurance",
     "Angiv scope for intern og ekstern assurance."),
)


# Shared helpers


def _empty_result(module_id, unit, subject):
    return build_result(
        0,
        unit,
        [f"Udfyld {module_id}-felterne for at dokumentere {subject} efter ESRS 2."],
        [],
        [],
    )


def _plain_text(value):
    return value.strip() if isinstance(value, str) else ""


def _number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def _year(value):
    number = _number(value)
    if number is None or number < 1990 or number > 2100:
        return None
    return int(number)


def _choice(value, options):
    return value if isinstance(value, str) and value in options else None


def _flag(value):
    return value if isinstance(value, bool) else None


def _entries(raw, key):
    value = raw.get(key) if isinstance(raw, dict) else None
    if not isinstance(value, list):
        return []
    return [entry if isinstance(entry, dict) else {} for entry in value]


def _joined(parts, separator=" · "):
    return separator.join(part for part in parts if part)


def _bulleted(title, lines):
    return f"{title}:\n- " + "\n- ".join(lines)


def _score_narratives(raw, fields, min_length, short_warning, trace, warnings, narratives):
    """Trace, warn and collect the fixed narrative fields of a score module."""
    values = {}
    for key, label, warning in fields:
        value = text_value(raw.get(key))
        trace.append(f"{key}Length={len(value) if value else 0}")
        if not value:
            warnings.append(warning)
            continue
        narratives.append({"label": label, "content": value})
        values[key] = value
        if len(value) < min_length:
            warnings.append(short_warning.format(label=label))
    return values


def _score(completed, total):
    return js_round(completed / total * 100) if total > 0 else 0


def _responsibility_table(concept_key, responsibilities):
    if not responsibilities:
        return None
    return {
        "conceptKey": concept_key,
        "rows": [
            {"subject": entry["subject"], "owner": entry["owner"], "role": entry.get("role")}
            for entry in responsibilities
        ],
    }


def _transition_measure(measure):
    return {
        "initiative": text_value(measure.get("initiative")),
        "status": _choice(measure.get("status"), TRANSITION_STATUSES),
        "milestoneYear": _year(measure.get("milestoneYear")),
        "investmentNeedDkk": _number(measure.get("investmentNeedDkk")),
        "responsible": text_value(measure.get("responsible")),
        "description": text_value(measure.get("description")),
    }


def _transition_details(measure):
    return [
        f"Status: {measure['status']}" if measure["status"] else None,
        f"Milepæl: {measure['milestoneYear']}" if measure["milestoneYear"] is not None else None,
        f"Investering: {format_number(measure['investmentNeedDkk'])} DKK"
        if measure["investmentNeedDkk"] is not None else None,
    ]


class _Requirements:
    """Ordered pass/fail checklist shared by D1 and MR."""

    def __init__(self, trace, warnings):
        self.trace = trace
        self.warnings = warnings
        self.items = []

    def add(self, requirement_id, label, passes, success_detail, failure_detail, extra_warnings=()):
        self.items.append({
            "id": requirement_id,
            "label": label,
            "passes": passes,
            "detail": success_detail if passes else failure_detail,
        })
        self.trace.append(f"requirement:{requirement_id}={'pass' if passes else 'fail'}")
        if not passes:
            self.warnings.append(failure_detail)
        self.warnings.extend(extra_warnings)

    @property
    def passed(self):
        return sum(1 for item in self.items if item["passes"])

    def metrics(self):
        return [
            {
                "label": item["label"],
                "value": "Opfyldt" if item["passes"] else "Mangler",
                "context": item["detail"],
            }
            for item in self.items
        ]


# D1


def _detailed(entries, minimum):
    return [value for _, value in entries if len(value) >= minimum]


def _has_kpi_data(line):
    return (
        any(_plain_text(line.get(key)) for key in ("name", "kpi", "unit", "comments"))
        or any(line.get(key) is not None for key in ("baselineYear", "baselineValue", "targetYear", "targetValue"))
    )


def _scope3_requirement(screening_completed, coverage, horizons):
    """Return (passes, detail, warnings) for the Scope 3 screening check."""
    if screening_completed is not True:
        return False, "Markér at Scope 3 screeningen er gennemført.", []
    if coverage is None:
        return False, "Angiv værdikædedækning for Scope 3 screeningen.", []
    if coverage == "ownOperations":
        return False, "Udvid Scope 3 screeningen til upstream og downstream led.", []
    if coverage in ("upstreamOnly", "downstreamOnly"):
        return False, "Dæk både upstream og downstream i Scope 3 screeningen.", []
    if "mediumTerm" not in horizons or "longTerm" not in horizons:
        missing = " og ".join(
            label for horizon, label in TIME_HORIZON_LABELS.items() if horizon not in horizons
        )
        return False, f"Tilføj analyser for {missing} i Scope 3 screeningen.", []

    covered = ", ".join(TIME_HORIZON_LABELS[horizon] for horizon in horizons)
    warnings = []
    if coverage == "upstreamAndDownstream":
        warnings.append("Dokumentér fuld værdikædedækning for at matche ESRS bedste praksis.")
    return True, f"Screeningen dækker {coverage} og analyserer {covered}.", warnings


def _narrative_requirement(label, value, empty_message, short_message, minimum):
    if not value:
        return False, empty_message
    if len(value) < minimum:
        return False, short_message
    return True, f"Narrativet for {label} er udfyldt med {len(value)} tegn."


def _strategy_requirement(summary, entries):
    if len(summary) < D1_CORE_TEXT_LENGTH:
        return False, f"Beskriv strategi og politikker (mindst {D1_CORE_TEXT_LENGTH} tegn)."
    detailed = _detailed(entries, D1_SUPPORTING_TEXT_LENGTH)
    if len(detailed) < 3:
        return False, "Uddyb hvordan bæredygtighed integreres i forretningsmodel, robusthed og stakeholderinddragelse."
    return True, f"Strategien dækker {len(detailed)} nøgleelementer med tilstrækkelig dybde."


def _governance_requirement(entries, has_committee):
    warnings = []
    if has_committee is False:
        warnings.append("Dokumentér hvordan bestyrelsen følger op uden et dedikeret ESG-udvalg.")
    if has_committee is None:
        return False, "Angiv om der er et ESG-/bæredygtighedsudvalg og dets mandat.", warnings
    if len(_detailed(entries, D1_SUPPORTING_TEXT_LENGTH)) < 4:
        return False, "Uddyb bestyrelsens tilsyn, ledelsesroller, incitamenter og politikker.", warnings
    return True, "Governance-roller og kontrolmiljø er beskrevet i mindst fire dimensioner.", warnings


def _impacts_requirement(entries):
    detailed = _detailed(entries, D1_SUPPORTING_TEXT_LENGTH)
    if len(detailed) < 3:
        return False, "Uddyb processen for identificering, prioritering og håndtering af impacts/risici/muligheder."
    return True, f"Procesbeskrivelsen dækker {len(detailed)} hovedtrin."


def _targets_requirement(entries, quantitative_targets, kpis):
    quantified = [
        kpi for kpi in kpis
        if (kpi.get("baselineYear") is not None or kpi.get("baselineValue") is not None)
        and (kpi.get("targetYear") is not None or kpi.get("targetValue") is not None)
    ]
    warnings = []
    if quantitative_targets is False:
        warnings.append("Bekræft kvantitative mål for væsentlige impacts og risici.")
    if quantitative_targets is None:
        return False, "Angiv om organisationen arbejder med kvantitative mål.", warnings
    if len(_detailed(entries, D1_SUPPORTING_TEXT_LENGTH)) < 2:
        return False, "Uddyb governance-forankring og fremdrift for målene.", warnings
    if quantitative_targets is True and not quantified:
        return False, "Tilføj mindst én KPI med baseline og mål for at dokumentere opfølgning.", warnings
    return True, f"Kvantitative mål er bekræftet og {len(quantified)} KPI’er har baseline/mål.", warnings


def _narrative_entries(record, keys):
    return [(key, _plain_text(record.get(key))) for key in keys]


def _lengths(entries):
    return ",".join(f"{key}:{len(value)}" for key, value in entries)


def _narrative_rows(entries):
    return [{"key": key, "value": value} for key, value in entries if value]


def run_d1(input_data):
    raw = section(input_data, "D1")
    strategy = section(raw, "strategy")
    governance = section(raw, "governance")
    impacts = section(raw, "impactsRisksOpportunities")
    targets = section(raw, "targetsAndKpis")

    boundary = _choice(raw.get("organizationalBoundary"), BOUNDARY_OPTIONS)
    scope2_method = _choice(raw.get("scope2Method"), SCOPE2_METHOD_OPTIONS)
    screening_completed = _flag(raw.get("scope3ScreeningCompleted"))
    data_quality = _choice(raw.get("dataQuality"), DATA_QUALITY_OPTIONS)
    materiality = _plain_text(raw.get("materialityAssessmentDescription"))
    strategy_summary = _plain_text(raw.get("strategyDescription"))

    strategy_entries = _narrative_entries(
        strategy, ("businessModelSummary", "sustainabilityIntegration", "resilienceDescription", "stakeholderEngagement")
    )
    governance_entries = _narrative_entries(
        governance, ("oversight", "managementRoles", "esgExpertise", "incentives", "policies")
    )
    impacts_entries = _narrative_entries(
        impacts, ("processDescription", "prioritisationCriteria", "integrationIntoManagement", "mitigationActions")
    )
    target_entries = _narrative_entries(targets, ("governanceIntegration", "progressDescription"))

    coverage = text_value(impacts.get("valueChainCoverage"))
    raw_horizons = impacts.get("timeHorizons")
    horizons = [
        horizon for horizon in (raw_horizons if isinstance(raw_horizons, list) else [])
        if isinstance(horizon, str) and horizon in TIME_HORIZON_LABELS
    ]
    unique_horizons = list(dict.fromkeys(horizons))
    has_committee = _flag(governance.get("hasEsgCommittee"))
    quantitative_targets = _flag(targets.get("hasQuantitativeTargets"))
    kpis = [line for line in _entries(targets, "kpis") if _has_kpi_data(line)]

    has_any_input = (
        any(value is not None for value in (boundary, scope2_method, screening_completed, data_quality))
        or bool(materiality)
        or bool(strategy_summary)
        or any(value for _, value in strategy_entries)
        or any(value for _, value in governance_entries)
        or has_committee is not None
        or any(value for _, value in impacts_entries)
        or coverage is not None
        or bool(horizons)
        or any(value for _, value in target_entries)
        or quantitative_targets is not None
        or bool(kpis)
    )

    trace = [
        f"organizationalBoundary={format_number(boundary)}",
        f"scope2Method={format_number(scope2_method)}",
        f"scope3ScreeningCompleted={format_number(screening_completed)}",
        f"dataQuality={format_number(data_quality)}",
        f"materialityLength={len(materiality)}",
        f"strategySummaryLength={len(strategy_summary)}",
        f"strategyDetailLengths={_lengths(strategy_entries)}",
        f"governanceDetailLengths={_lengths(governance_entries)}",
        f"impactsDetailLengths={_lengths(impacts_entries)}",
        f"valueChainCoverage={format_number(coverage)}",
        f"timeHorizons={'|'.join(horizons) if horizons else 'none'}",
        f"quantitativeTargets={format_number(quantitative_targets)}",
        f"kpiCount={len(kpis)}",
    ]

    if not has_any_input:
        return build_result(
            0,
            "opfyldte krav",
            ["Udfyld D1-felterne for at validere governance-oplysningerne mod ESRS-krav."],
            trace,
            [],
        )

    warnings = []
    requirements = _Requirements(trace, warnings)

    method_warnings = []
    if data_quality == "proxy":
        method_warnings.append("Proxy-data er svag dokumentation – planlæg overgang til primære eller sekundære kilder.")
    if boundary == "equityShare":
        method_warnings.append("Overvej operational control for at afspejle styringsmuligheder i D1-rapporteringen.")
    requirements.add(
        "methodology",
        "Metodegrundlag er dokumenteret",
        boundary is not None and scope2_method is not None and data_quality is not None,
        f"Afgrænsning: {format_number(boundary)}; Scope 2 metode: {format_number(scope2_method)}; "
        f"datakvalitet: {format_number(data_quality)}.",
        "Angiv organisatorisk afgrænsning, primær Scope 2 metode og dominerende datakvalitet.",
        method_warnings,
    )

    passes, detail, extra = _scope3_requirement(screening_completed, coverage, unique_horizons)
    requirements.add(
        "scope3Coverage", "Scope 3 screening dækker værdikæden og tidshorisonter",
        passes, detail, detail, extra,
    )

    passes, detail = _narrative_requirement(
        "materialitet",
        materiality,
        "Beskriv væsentlighedsvurderingen og dens resultater.",
        f"Uddyb væsentlighedsvurderingen (mindst {D1_CORE_TEXT_LENGTH} tegn).",
        D1_CORE_TEXT_LENGTH,
    )
    requirements.add("materiality", "Væsentlighedsvurderingen er beskrevet", passes, detail, detail)

    passes, detail = _strategy_requirement(strategy_summary, strategy_entries)
    requirements.add("strategy", "Strategi og integration er dokumenteret", passes, detail, detail)

    passes, detail, extra = _governance_requirement(governance_entries, has_committee)
    requirements.add("governance", "Governance-roller og tilsyn er beskrevet", passes, detail, detail, extra)

    passes, detail = _impacts_requirement(impacts_entries)
    requirements.add(
        "impactsProcess", "Proces for impacts, risici og muligheder er beskrevet", passes, detail, detail
    )

    passes, detail, extra = _targets_requirement(target_entries, quantitative_targets, kpis)
    requirements.add("targets", "Mål, opfølgning og KPI’er er dokumenteret", passes, detail, detail, extra)

    assumptions = [
        f"Evalueringen tester {len(requirements.items)} krav fra ESRS 2 D1 (opfyldt/ikke opfyldt).",
        f"Narrativer vurderes som fyldestgørende ved {D1_CORE_TEXT_LENGTH} tegn for kernefelter og "
        f"{D1_SUPPORTING_TEXT_LENGTH} tegn for understøttende detaljer.",
        "Scope 3-kravet kræver fuldført screening, værdikædedækning og analyser på mellemsigt og lang sigt.",
        "KPI-kravet opfyldes først når mindst én KPI har baseline og mål sammen med kvalitative beskrivelser.",
    ]

    facts = []
    for key, value in (
        ("D1OrganizationalBoundary", boundary),
        ("D1Scope2Method", scope2_method),
        ("D1Scope3ScreeningCompleted", screening_completed),
        ("D1DataQuality", data_quality),
        ("D1MaterialityAssessmentDescription", materiality),
        ("D1StrategySummary", strategy_summary),
        ("D1ValueChainCoverage", coverage),
        ("D1QuantitativeTargets", quantitative_targets),
    ):
        if isinstance(value, bool):
            facts.append({"conceptKey": key, "value": value, "unitId": None})
        elif isinstance(value, str) and value.strip():
            facts.append({"conceptKey": key, "value": value.strip(), "unitId": None})
    facts.append({"conceptKey": "D1TimeHorizonsCoveredCount", "value": len(unique_horizons), "unitId": "pure", "decimals": 0})
    facts.append({"conceptKey": "D1KpiCount", "value": len(kpis), "unitId": "pure", "decimals": 0})
    if isinstance(has_committee, bool):
        facts.append({"conceptKey": "D1HasEsgCommittee", "value": has_committee, "unitId": None})

    tables = []
    for concept_key, entries in (
        ("D1StrategyNarrativesTable", strategy_entries),
        ("D1GovernanceNarrativesTable", governance_entries),
        ("D1ImpactsProcessTable", impacts_entries),
        ("D1TargetsNarrativesTable", target_entries),
    ):
        table_rows = _narrative_rows(entries)
        if table_rows:
            tables.append({"conceptKey": concept_key, "rows": table_rows})
    if kpis:
        tables.append({
            "conceptKey": "D1KpiOverviewTable",
            "rows": [
                {
                    "name": _plain_text(kpi.get("name")),
                    "kpi": _plain_text(kpi.get("kpi")),
                    "unit": _plain_text(kpi.get("unit")),
                    "baselineYear": _number(kpi.get("baselineYear")),
                    "baselineValue": _number(kpi.get("baselineValue")),
                    "targetYear": _number(kpi.get("targetYear")),
                    "targetValue": _number(kpi.get("targetValue")),
                    "comments": _plain_text(kpi.get("comments")),
                }
                for kpi in kpis
            ],
        })

    return build_result(
        requirements.passed,
        "opfyldte krav",
        assumptions,
        trace,
        warnings,
        metrics=requirements.metrics(),
        esrsFacts=facts or None,
        esrsTables=tables or None,
    )


# SBM


def run_sbm(input_data):
    raw = section(input_data, "SBM")
    if is_blank(raw):
        return _empty_result("SBM", "score", "strategi og forretningsmodel")

    trace = []
    warnings = []
    narratives = []
    notes = []
    responsibilities = []
    dependency_summaries = []
    opportunity_summaries = []
    transition_summaries = []

    values = _score_narratives(
        raw, SBM_FIELDS, SBM_DETAIL_LENGTH,
        'Overvej at uddybe sektionen "{label}" for at opfylde ESRS-kravene.',
        trace, warnings, narratives,
    )
    total = len(SBM_FIELDS)
    completed = len(values)

    for index, entry in enumerate(_entries(raw, "dependencies")):
        dependency = text_value(entry.get("dependency"))
        impact = text_value(entry.get("impact"))
        mitigation = text_value(entry.get("mitigation"))
        responsible = text_value(entry.get("responsible"))
        if not (dependency or impact or mitigation or responsible):
            continue

        total += 1
        trace.append(f"dependency[{index}]={dependency or 'ukendt'}")
        detail = _joined([impact, mitigation])
        if detail:
            completed += 1
        else:
            warnings.append(f"Uddyb påvirkning eller afbødning for afhængighed {index + 1}.")

        subject = dependency or f"Afhængighed {index + 1}"
        notes.append({"label": subject, "detail": detail or "Ingen detaljer angivet."})
        summary = _joined([dependency, detail], ": ")
        if summary:
            dependency_summaries.append(summary)
        if responsible:
            responsibilities.append({"subject": subject, "owner": responsible, "role": "Ansvarlig for opfølgning"})

    for index, entry in enumerate(_entries(raw, "opportunities")):
        title = text_value(entry.get("title")) or f"Mulighed {index + 1}"
        description = text_value(entry.get("description"))
        timeframe = text_value(entry.get("timeframe"))
        owner = text_value(entry.get("owner"))

        total += 1
        if not description:
            warnings.append(f'Tilføj beskrivelse af mulighed "{title}" for at dokumentere vurderingen.')
            continue

        content = f"{description} (Tidsramme: {timeframe})" if timeframe else description
        narratives.append({"label": title, "content": content})
        completed += 1
        opportunity_summaries.append(_joined([
            f"{title}: {description}",
            f"Tidsramme: {timeframe}" if timeframe else None,
            f"Ansvarlig: {owner}" if owner else None,
        ]))
        if owner:
            responsibilities.append({"subject": title, "owner": owner, "role": "Mulighedsansvarlig"})

    transition_measures = []
    for index, entry in enumerate(_entries(raw, "transitionPlanMeasures")):
        measure = _transition_measure(entry)
        if all(value is None for value in measure.values()):
            continue

        trace.append(f"transition[{index}]={measure['initiative'] or 'ukendt'}")
        total += 1
        completed += 1

        subject = measure["initiative"] or f"Tiltag {index + 1}"
        if measure["responsible"]:
            responsibilities.append({"subject": subject, "owner": measure["responsible"], "role": "Overgangstiltag"})
        details = _transition_details(measure)
        notes.append({"label": subject, "detail": _joined(details)})
        transition_summaries.append(_joined([subject] + details))
        transition_measures.append(measure)

    score = _score(completed, total)

    facts = []
    business_parts = []
    if "businessModelNarrative" in values:
        business_parts.append(f"Forretningsmodel:\n{values['businessModelNarrative']}")
    if "valueChainNarrative" in values:
        business_parts.append(f"Værdikæde:\n{values['valueChainNarrative']}")
    if dependency_summaries:
        business_parts.append(_bulleted("Afhængigheder", dependency_summaries))
    if business_parts:
        facts.append({"conceptKey": "SBMBusinessModelNarrative", "value": "\n\n".join(business_parts)})

    strategy_parts = []
    if "sustainabilityStrategyNarrative" in values:
        strategy_parts.append(values["sustainabilityStrategyNarrative"])
    if opportunity_summaries:
        strategy_parts.append(_bulleted("Muligheder", opportunity_summaries))
    strategy_parts.append(f"Intern vurdering: {score}% af kravene er dokumenteret.")
    facts.append({"conceptKey": "SBMStrategyNarrative", "value": "\n\n".join(strategy_parts)})

    if "resilienceNarrative" in values:
        facts.append({"conceptKey": "SBMResilienceNarrative", "value": values["resilienceNarrative"]})

    transition_parts = []
    if "transitionPlanNarrative" in values:
        transition_parts.append(values["transitionPlanNarrative"])
    if transition_summaries:
        transition_parts.append(_bulleted("Overgangstiltag", transition_summaries))
    if transition_parts:
        facts.append({"conceptKey": "SBMTransitionPlanNarrative", "value": "\n\n".join(transition_parts)})

    if "stakeholderNarrative" in values:
        facts.append({"conceptKey": "SBMStakeholderNarrative", "value": values["stakeholderNarrative"]})

    table = _responsibility_table("SBMResponsibilitiesTable", responsibilities)

    return build_result(
        score,
        "score",
        [
            "ESRS 2 SBM kræver beskrivelser af forretningsmodellen, værdikæden og klimaresiliens.",
            "Scoren beregnes som udfyldte tekstfelter og overgangstiltag i forhold til samlede felter.",
        ],
        trace,
        warnings,
        narratives=narratives,
        notes=notes,
        responsibilities=responsibilities,
        transitionMeasures=transition_measures,
        esrsFacts=facts,
        esrsTables=[table] if table else None,
    )


# GOV


def run_gov(input_data):
    raw = section(input_data, "GOV")
    if is_blank(raw):
        return _empty_result("GOV", "score", "governance og organisation")

    trace = []
    warnings = []
    narratives = []
    notes = []
    responsibilities = []
    oversight_summaries = []
    control_summaries = []
    incentive_summaries = []

    values = _score_narratives(
        raw, GOV_FIELDS, GOV_DETAIL_LENGTH,
        'Uddyb sektionen "{label}" for at opfylde ESRS 2 GOV.',
        trace, warnings, narratives,
    )
    total = len(GOV_FIELDS)
    completed = len(values)

    for index, entry in enumerate(_entries(raw, "oversightBodies")):
        body = text_value(entry.get("body"))
        mandate = text_value(entry.get("mandate"))
        chair = text_value(entry.get("chair"))
        frequency = text_value(entry.get("meetingFrequency"))
        if not (body or mandate or chair or frequency):
            continue

        total += 1
        trace.append(f"oversight[{index}]={body or 'ukendt'}")
        frequency_text = f"Mødefrekvens: {frequency}" if frequency else None
        detail = _joined([mandate, frequency_text])
        if detail:
            completed += 1
        else:
            warnings.append(f"Tilføj mandat eller mødefrekvens for governance-organ {index + 1}.")

        subject = body or f"Governance-organ {index + 1}"
        notes.append({"label": subject, "detail": detail or "Ingen detaljer angivet."})
        oversight_summaries.append(_joined([subject, mandate, frequency_text, f"Formand: {chair}" if chair else None]))
        if chair:
            responsibilities.append({"subject": subject, "owner": chair, "role": "Formand"})

    for index, entry in enumerate(_entries(raw, "controlProcesses")):
        process = text_value(entry.get("process"))
        description = text_value(entry.get("description"))
        owner = text_value(entry.get("owner"))
        if not (process or description or owner):
            continue

        total += 1
        trace.append(f"control[{index}]={process or 'ukendt'}")
        if description:
            completed += 1
        else:
            warnings.append(f"Kontrolproces {index + 1} mangler beskrivelse.")

        subject = process or f"Kontrol {index + 1}"
        notes.append({"label": subject, "detail": description or "Ingen detaljer angivet."})
        control_summaries.append(_joined([subject, description, f"Ansvarlig: {owner}" if owner else None]))
        if owner:
            responsibilities.append({"subject": subject, "owner": owner, "role": "Procesansvarlig"})

    for index, entry in enumerate(_entries(raw, "incentiveStructures")):
        role = text_value(entry.get("role"))
        incentive = text_value(entry.get("incentive"))
        metric = text_value(entry.get("metric"))
        if not (role or incentive or metric):
            continue

        total += 1
        trace.append(f"incentive[{index}]={role or 'ukendt'}")
        if incentive:
            completed += 1
        else:
            warnings.append(f"Incitament {index + 1} mangler beskrivelse af kobling til ESG.")

        subject = role or f"Incitament {index + 1}"
        metric_text = f"KPI: {metric}" if metric else None
        notes.append({"label": subject, "detail": _joined([incentive, metric_text]) or "Ingen detaljer angivet."})
        incentive_summaries.append(_joined([subject, incentive, metric_text]))
        if role and incentive:
            responsibilities.append({"subject": role, "owner": role, "role": "Incitament"})

    score = _score(completed, total)

    facts = []
    oversight_parts = []
    if "oversightNarrative" in values:
        oversight_parts.append(values["oversightNarrative"])
    if oversight_summaries:
        oversight_parts.append(_bulleted("Governance-organer", oversight_summaries))
    oversight_parts.append(f"Intern vurdering: {score}% af governance-kravene er dokumenteret.")
    facts.append({"conceptKey": "GOVOversightNarrative", "value": "\n\n".join(oversight_parts)})

    management_parts = []
    if "managementNarrative" in values:
        management_parts.append(values["managementNarrative"])
    if control_summaries:
        management_parts.append(_bulleted("Kontrolprocesser", control_summaries))
    if management_parts:
        facts.append({"conceptKey": "GOVManagementNarrative", "value": "\n\n".join(management_parts)})

    if "competenceNarrative" in values:
        facts.append({"conceptKey": "GOVCompetenceNarrative", "value": values["competenceNarrative"]})

    reporting_parts = [values[key] for key in ("reportingNarrative", "assuranceNarrative") if key in values]
    if reporting_parts:
        facts.append({"conceptKey": "GOVReportingNarrative", "value": "\n\n".join(reporting_parts)})

    incentive_parts = []
    if "incentiveNarrative" in values:
        incentive_parts.append(values["incentiveNarrative"])
    if incentive_summaries:
        incentive_parts.append(_bulleted("Incitamentsstrukturer", incentive_summaries))
    if incentive_parts:
        facts.append({"conceptKey": "GOVIncentiveNarrative", "value": "\n\n".join(incentive_parts)})

    table = _responsibility_table("GOVResponsibilitiesTable", responsibilities)

    return build_result(
        score,
        "score",
        [
            "ESRS 2 GOV kræver dokumentation af ledelsens tilsyn, roller og incitamenter.",
            "Scoren beregnes som forholdet mellem udfyldte beskrivelser og registrerede governance-elementer.",
        ],
        trace,
        warnings,
        narratives=narratives,
        notes=notes,
        responsibilities=responsibilities,
        esrsFacts=facts,
        esrsTables=[table] if table else None,
    )


# IRO


def run_iro(input_data):
    raw = section(input_data, "IRO")
    if is_blank(raw):
        return _empty_result("IRO", "score", "impacts, risici og muligheder")

    trace = []
    warnings = []
    narratives = []
    notes = []
    responsibilities = []
    process_summaries = []
    response_summaries = []
    table_rows = []

    values = _score_narratives(
        raw, IRO_FIELDS, IRO_DETAIL_LENGTH,
        'Uddyb processen i "{label}" for at opfylde ESRS 2 IRO.',
        trace, warnings, narratives,
    )
    total = len(IRO_FIELDS)
    completed = len(values)

    for index, entry in enumerate(_entries(raw, "riskProcesses")):
        step = text_value(entry.get("step"))
        description = text_value(entry.get("description"))
        frequency = text_value(entry.get("frequency"))
        owner = text_value(entry.get("owner"))
        if not (step or description or frequency or owner):
            continue

        total += 1
        trace.append(f"riskProcess[{index}]={step or 'ukendt'}")
        if description:
            completed += 1
        else:
            warnings.append(f"Proces {index + 1} mangler beskrivelse af fremgangsmåde.")

        subject = step or f"Proces {index + 1}"
        frequency_text = f"Frekvens: {frequency}" if frequency else None
        notes.append({"label": subject, "detail": _joined([description, frequency_text]) or "Ingen detaljer angivet."})
        process_summaries.append(
            _joined([subject, description, frequency_text, f"Ansvarlig: {owner}" if owner else None])
        )
        table_rows.append({
            "type": "Proces",
            "subject": subject,
            "description": description,
            "frequency": frequency,
            "owner": owner,
        })
        if owner:
            responsibilities.append({"subject": subject, "owner": owner, "role": "Procesansvarlig"})

    response_rows = []
    for index, entry in enumerate(_entries(raw, "impactResponses")):
        topic = text_value(entry.get("topic"))
        severity = text_value(entry.get("severity"))
        response = text_value(entry.get("response"))
        status = text_value(entry.get("status"))
        responsible = text_value(entry.get("responsible"))
        if not (topic or severity or response or status or responsible):
            continue

        total += 1
        trace.append(f"impactResponse[{index}]={topic or 'ukendt'}")
        if response:
            completed += 1
        else:
            warnings.append(f"Angiv afværge- eller handlingsplan for impact {index + 1}.")

        subject = topic or f"Impact {index + 1}"
        severity_text = f"Alvorlighed: {severity}" if severity else None
        status_text = f"Status: {status}" if status else None
        notes.append({
            "label": subject,
            "detail": _joined([severity_text, status_text, response]) or "Ingen detaljer angivet.",
        })
        response_summaries.append(_joined([
            subject, severity_text, status_text, response,
            f"Ansvarlig: {responsible}" if responsible else None,
        ]))
        response_rows.append({
            "type": "Impact",
            "subject": subject,
            "severity": severity,
            "status": status,
            "response": response,
            "owner": responsible,
        })
        if responsible:
            responsibilities.append({"subject": subject, "owner": responsible, "role": "Ansvarlig"})

    score = _score(completed, total)

    facts = []
    process_parts = []
    if "processNarrative" in values:
        process_parts.append(values["processNarrative"])
    if process_summaries:
        process_parts.append(_bulleted("Procesoversigt", process_summaries))
    process_parts.append(f"Intern vurdering: {score}% af kravene er dokumenteret.")
    facts.append({"conceptKey": "IROProcessNarrative", "value": "\n\n".join(process_parts)})

    integration_parts = [values[key] for key in ("integrationNarrative", "escalationNarrative") if key in values]
    if integration_parts:
        facts.append({"conceptKey": "IROIntegrationNarrative", "value": "\n\n".join(integration_parts)})
    if "stakeholderNarrative" in values:
        facts.append({"conceptKey": "IROStakeholderNarrative", "value": values["stakeholderNarrative"]})
    if "dueDiligenceNarrative" in values:
        facts.append({"conceptKey": "IRODueDiligenceNarrative", "value": values["dueDiligenceNarrative"]})

    monitoring_parts = []
    if "monitoringNarrative" in values:
        monitoring_parts.append(values["monitoringNarrative"])
    if response_summaries:
        monitoring_parts.append(_bulleted("Responsoversigt", response_summaries))
    if monitoring_parts:
        facts.append({"conceptKey": "IROMonitoringNarrative", "value": "\n\n".join(monitoring_parts)})

    table_rows += response_rows
    tables = [{"conceptKey": "IROActionsTable", "rows": table_rows}] if table_rows else None

    return build_result(
        score,
        "score",
        [
            "ESRS 2 IRO kræver beskrivelser af processer for at identificere impacts, risici og muligheder.",
            "Scoren afspejler hvor mange processer og svar der er dokumenteret i forhold til registrerede elementer.",
        ],
        trace,
        warnings,
        narratives=narratives,
        notes=notes,
        responsibilities=responsibilities,
        esrsFacts=facts,
        esrsTables=tables,
    )


# MR


def _collect_transition_measures(raw, context, trace, warnings):
    items = []
    detailed = 0
    for index, entry in enumerate(_entries(context, "transitionPlanMeasures")):
        measure = _transition_measure(entry)
        if all(value is None for value in measure.values()):
            continue
        trace.append(f"transitionPlan[{index}]={measure['initiative'] or 'ukendt'}")
        has_detail = (
            measure["description"] is not None
            or measure["status"] is not None
            or measure["milestoneYear"] is not None
            or measure["investmentNeedDkk"] is not None
        )
        if has_detail:
            detailed += 1
        else:
            warnings.append(f"Uddyb overgangstiltag {index + 1} med status eller milepæl.")
        items.append(measure)

    if not items and text_value(raw.get("transitionPlanNarrative")):
        warnings.append("Overvej at registrere konkrete overgangstiltag under overgangsplanen.")
    return items, detailed


def _collect_financial_effects(raw, context, trace, warnings):
    items = []
    detailed = 0
    sources = _entries(context, "financialEffects") + _entries(raw, "financialEffects")
    for index, entry in enumerate(sources):
        label = text_value(entry.get("label")) or f"Finansiel effekt {index + 1}"
        amount = _number(entry.get("amountDkk"))
        description = text_value(entry.get("description"))
        trace.append(f"financialEffect[{index}]={label}")
        if amount is not None or description is not None:
            detailed += 1
        else:
            warnings.append(f"Angiv beløb eller beskrivelse for {label}.")
        items.append({
            "label": label,
            "type": _choice(entry.get("type"), FINANCIAL_EFFECT_TYPES),
            "amountDkk": amount,
            "timeframe": text_value(entry.get("timeframe")),
            "description": description,
        })
    return items, detailed


def _collect_removal_projects(context, trace, warnings):
    items = []
    detailed = 0
    for index, entry in enumerate(_entries(context, "ghgRemovalProjects")):
        name = text_value(entry.get("projectName"))
        financed = entry.get("financedThroughCredits")
        project = {
            "projectName": name or f"Removal projekt {index + 1}",
            "removalType": _choice(entry.get("removalType"), REMOVAL_TYPES),
            "annualRemovalTonnes": _number(entry.get("annualRemovalTonnes")),
            "storageDescription": text_value(entry.get("storageDescription")),
            "qualityStandard": text_value(entry.get("qualityStandard")),
            "permanenceYears": _number(entry.get("permanenceYears")),
            "financedThroughCredits": financed if isinstance(financed, bool) else None,
            "responsible": text_value(entry.get("responsible")),
        }
        if name is None and all(value is None for key, value in project.items() if key != "projectName"):
            continue

        trace.append(f"removalProject[{index}]={project['projectName']}")
        has_detail = (
            project["annualRemovalTonnes"] is not None
            or project["storageDescription"] is not None
            or project["qualityStandard"] is not None
        )
        if has_detail:
            detailed += 1
        else:
            warnings.append(f"Tilføj kvantificerede data for removal-projekt {index + 1}.")
        items.append(project)
    return items, detailed


def _metric_reading(prefix, year, value, unit, require_value):
    if year is None or (require_value and value is None):
        return None
    shown = format_number(value) if value is not None else "ukendt"
    return f"{prefix} {year}: {shown} {unit or ''}".strip()


def _structured_requirement(narrative, label, detailed_count, total, texts):
    """Pass/fail plus detail for a requirement met by a narrative or structured rows."""
    long_enough = narrative is not None and len(narrative) >= MR_DETAIL_LENGTH
    passes = long_enough or detailed_count > 0
    if narrative is not None and len(narrative) < MR_DETAIL_LENGTH and total == 0:
        failure = texts["short"]
    elif total > 0 and detailed_count == 0:
        failure = texts["undetailed"]
    else:
        failure = texts["missing"]
    if detailed_count > 0:
        success = texts["detailed"].format(count=detailed_count)
    elif narrative is not None:
        success = f"Narrativet om {label} er udfyldt med {len(narrative)} tegn."
    else:
        success = ""
    return passes, success, failure


def _has_context_collections(context):
    return any(
        not is_blank(context.get(key))
        for key in ("transitionPlanMeasures", "financialEffects", "ghgRemovalProjects")
    )


def run_mr(input_data):
    raw = section(input_data, "MR")
    context = section(input_data, "E1Context")
    if is_blank(raw) and not _has_context_collections(context):
        return _empty_result("MR", "opfyldte krav", "metrics og mål")

    trace = []
    warnings = []
    narratives = []
    notes = []
    requirements = _Requirements(trace, warnings)
    values = {}

    for key, label, missing_message in MR_FIELDS:
        value = text_value(raw.get(key))
        trace.append(f"{key}Length={len(value) if value else 0}")
        if value:
            narratives.append({"label": label, "content": value})
            values[key] = value
        passes = value is not None and len(value) >= MR_DETAIL_LENGTH
        failure = missing_message if value is None else f'Uddyb "{label}" (mindst {MR_DETAIL_LENGTH} tegn).'
        success = f"Narrativet er udfyldt med {len(value)} tegn." if passes else ""
        requirements.add(key, f"{label} er beskrevet", passes, success, failure)

    transition_narrative = text_value(raw.get("transitionPlanNarrative"))
    trace.append(f"transitionPlanNarrativeLength={len(transition_narrative) if transition_narrative else 0}")
    if transition_narrative:
        narratives.append({"label": "Overgangsplan", "content": transition_narrative})

    financial_narrative = text_value(raw.get("financialEffectNarrative"))
    trace.append(f"financialEffectNarrativeLength={len(financial_narrative) if financial_narrative else 0}")
    if financial_narrative:
        narratives.append({"label": "Finansielle effekter", "content": financial_narrative})

    for index, entry in enumerate(_entries(raw, "keyNarratives")):
        title = text_value(entry.get("title")) or f"Narrativ {index + 1}"
        content = text_value(entry.get("content"))
        if not content:
            warnings.append(f"Narrativ {index + 1} mangler indhold.")
            continue
        narratives.append({"label": title, "content": content})

    measures, detailed_measures = _collect_transition_measures(raw, context, trace, warnings)
    effects, detailed_effects = _collect_financial_effects(raw, context, trace, warnings)
    projects, detailed_projects = _collect_removal_projects(context, trace, warnings)

    passes, success, failure = _structured_requirement(
        transition_narrative, "overgangsplanen", detailed_measures, len(measures),
        {
            "short": f"Uddyb overgangsplanen (mindst {MR_DETAIL_LENGTH} tegn) eller registrer konkrete tiltag.",
            "undetailed": "Uddyb registrerede overgangstiltag med status, milepæl eller investering.",
            "missing": "Beskriv overgangsplanen eller registrer konkrete tiltag.",
            "detailed": "{count} overgangstiltag er dokumenteret med status eller milepæle.",
        },
    )
    requirements.add("transitionPlan", "Overgangsplanen er dokumenteret", passes, success, failure)

    passes, success, failure = _structured_requirement(
        financial_narrative, "finansielle effekter", detailed_effects, len(effects),
        {
            "short": f"Uddyb finansielle effekter (mindst {MR_DETAIL_LENGTH} tegn) eller registrer beløb/beskrivelser.",
            "undetailed": "Angiv beløb eller uddybelse for de registrerede finansielle effekter.",
            "missing": "Beskriv finansielle effekter eller registrer konkrete beløb.",
            "detailed": "{count} finansielle effekter har beløb eller detaljer.",
        },
    )
    requirements.add("financialEffects", "Finansielle effekter er dokumenteret", passes, success, failure)

    metric_entries = _entries(raw, "metrics")
    metrics_with_data = 0
    metric_summaries = []
    for index, metric in enumerate(metric_entries):
        name = text_value(metric.get("name")) or f"Metric {index + 1}"
        unit = text_value(metric.get("unit"))
        baseline_year = _year(metric.get("baselineYear"))
        baseline_value = _number(metric.get("baselineValue"))
        current_year = _year(metric.get("currentYear"))
        current_value = _number(metric.get("currentValue"))
        target_year = _year(metric.get("targetYear"))
        target_value = _number(metric.get("targetValue"))
        status = _choice(metric.get("status"), TRANSITION_STATUSES)
        owner = text_value(metric.get("owner"))
        description = text_value(metric.get("description"))

        trace.append(f"metric[{index}]={name}")
        has_data = (
            (baseline_year is not None and baseline_value is not None)
            or (current_year is not None and current_value is not None)
            or (target_year is not None and target_value is not None)
            or description is not None
        )
        if has_data:
            metrics_with_data += 1
        else:
            warnings.append(f"Tilføj aktuelle værdier eller mål for {name}.")

        status_text = f"Status: {status}" if status else None
        notes.append({
            "label": name,
            "detail": _joined([
                _metric_reading("Baseline", baseline_year, baseline_value, unit, False),
                _metric_reading("Seneste", current_year, current_value, unit, False),
                _metric_reading("Mål", target_year, target_value, unit, False),
                status_text,
                description,
            ]),
        })
        metric_summaries.append(_joined([
            name,
            _metric_reading("Baseline", baseline_year, baseline_value, unit, True),
            _metric_reading("Seneste", current_year, current_value, unit, True),
            _metric_reading("Mål", target_year, target_value, unit, True),
            status_text,
            f"Ansvarlig: {owner}" if owner else None,
        ]))
        if owner:
            notes.append({"label": f"{name} – ansvarlig", "detail": owner})

    requirements.add(
        "metrics",
        "Klimametrics er dokumenteret",
        metrics_with_data > 0,
        f"{metrics_with_data} metrics har baseline, status eller mål.",
        "Tilføj mindst én klimarelateret metric med baseline og mål eller aktuel status.",
    )

    requirements.add(
        "removalProjects",
        "GHG-removal projekter er dokumenteret",
        detailed_projects == len(projects),
        "Ingen removal-projekter registreret i ESRS E1 Context."
        if not projects else "Alle removal-projekter er kvantificeret.",
        "Tilføj kvantificerede data for removal-projekterne.",
    )

    facts = []
    if "intensityNarrative" in values:
        facts.append({"conceptKey": "MRIntensityNarrative", "value": values["intensityNarrative"]})

    target_parts = []
    if "targetNarrative" in values:
        target_parts.append(values["targetNarrative"])
    if metric_summaries:
        target_parts.append(_bulleted("Nøgletal", metric_summaries))
    if target_parts:
        facts.append({"conceptKey": "MRTargetsNarrative", "value": "\n\n".join(target_parts)})

    if "assuranceNarrative" in values:
        facts.append({"conceptKey": "MRAssuranceNarrative", "value": values["assuranceNarrative"]})

    transition_parts = [transition_narrative] if transition_narrative else []
    if measures:
        transition_parts.append(_bulleted("Overgangstiltag", [
            _joined(
                [measure["initiative"] or f"Tiltag {index + 1}"]
                + _transition_details(measure)
                + [f"Ansvarlig: {measure['responsible']}" if measure["responsible"] else None]
            )
            for index, measure in enumerate(measures)
        ]))
    if transition_parts:
        facts.append({"conceptKey": "MRTransitionPlanNarrative", "value": "\n\n".join(transition_parts)})

    financial_parts = [financial_narrative] if financial_narrative else []
    if effects:
        financial_parts.append(_bulleted("Finansielle effekter", [
            _joined([
                effect["label"],
                f"Type: {effect['type']}" if effect["type"] else None,
                f"Beløb: {format_number(effect['amountDkk'])} DKK" if effect["amountDkk"] is not None else None,
                f"Tidsramme: {effect['timeframe']}" if effect["timeframe"] else None,
                effect["description"],
            ])
            for effect in effects
        ]))
    if financial_parts:
        facts.append({"conceptKey": "MRFinancialEffectsNarrative", "value": "\n\n".join(financial_parts)})

    metrics_parts = [f"Registrerede metrics med data: {metrics_with_data} af {len(metric_entries)}"]
    if metric_summaries:
        metrics_parts.append(_bulleted("Oversigt", metric_summaries))
    facts.append({"conceptKey": "MRMetricsNarrative", "value": "\n\n".join(metrics_parts)})

    quality_parts = [values["dataQualityNarrative"]] if "dataQualityNarrative" in values else []
    if projects:
        quality_parts.append(_bulleted("Removal projekter", [_removal_summary(project) for project in projects]))
    if quality_parts:
        facts.append({"conceptKey": "MRDataQualityNarrative", "value": "\n\n".join(quality_parts)})

    tables = []
    if measures:
        tables.append({
            "conceptKey": "MRTransitionMeasuresTable",
            "rows": [
                dict(measure, initiative=measure["initiative"] or f"Tiltag {index + 1}")
                for index, measure in enumerate(measures)
            ],
        })
    if effects:
        tables.append({"conceptKey": "MRFinancialEffectsTable", "rows": [dict(effect) for effect in effects]})
    if projects:
        tables.append({"conceptKey": "MRRemovalProjectsTable", "rows": [dict(project) for project in projects]})
    tables.append({
        "conceptKey": "MRRequirementsTable",
        "rows": [dict(item) for item in requirements.items],
    })

    return build_result(
        requirements.passed,
        "opfyldte krav",
        [
            f"Evalueringen tester {len(requirements.items)} krav fra ESRS 2 MR med binære resultater "
            "(opfyldt/ikke opfyldt).",
            f"Narrativer skal være på mindst {MR_DETAIL_LENGTH} tegn for at tælle som dokumenteret.",
            "Mindst én klimarelateret metric skal have baseline og mål eller aktuel status.",
            "Overgangstiltag, finansielle effekter og removals kan dokumenteres via narrativ eller "
            "strukturerede felter.",
        ],
        trace,
        warnings,
        narratives=narratives,
        notes=notes,
        transitionMeasures=measures,
        financialEffects=effects,
        removalProjects=projects,
        metrics=requirements.metrics(),
        esrsFacts=facts,
        esrsTables=tables,
    )


def _removal_summary(project):
    financed = project["financedThroughCredits"]
    return _joined([
        project["projectName"],
        f"Type: {project['removalType']}" if project["removalType"] else None,
        f"Årlig removal: {format_number(project['annualRemovalTonnes'])} t"
        if project["annualRemovalTonnes"] is not None else None,
        project["storageDescription"],
        f"Standard: {project['qualityStandard']}" if project["qualityStandard"] else None,
        f"Permanens: {format_number(project['permanenceYears'])} år" if project["permanenceYears"] is not None else None,
        f"Finansieret via kreditter: {'ja' if financed else 'nej'}" if financed is not None else None,
        f"Ansvarlig: {project['responsible']}" if project["responsible"] else None,
    ])
