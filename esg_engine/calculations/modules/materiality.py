"""
D2: double materiality and CSRD gap status

Every material topic is scored on up to three dimensions:
- impact: severity x likelihood, adjusted for impact type and remediation
- financial: self-assessed 0-5 score, normalised to 0-100
- timeline: short term weighs the most

The combined score is the mean of the present dimensions, penalised when
the financial score is missing without an approved exception. The module
value is the mean combined score of all valid topics.
"""

from esg_engine.calculations.factors import FACTORS
from esg_engine.calculations.formatting import round_scaled, to_fixed
from esg_engine.calculations.results import build_result
from esg_engine.calculations.sanitize import as_number, rows, section, text_value

MAX_FINANCIAL_SCORE = 5
UNKNOWN_LABEL = "Ikke angivet"

IMPACT_TYPE_LABELS = {
    "actual": "Faktisk påvirkning",
    "potential": "Potentiel påvirkning",
}

SEVERITY_LABELS = {
    "minor": "Begrænset alvor",
    "moderate": "Middel alvor",
    "major": "Væsentlig alvor",
    "severe": "Kritisk alvor",
}

LIKELIHOOD_LABELS = {
    "rare": "Sjælden",
    "unlikely": "Usandsynlig",
    "possible": "Mulig",
    "likely": "Sandsynlig",
    "veryLikely": "Meget sandsynlig",
}

VALUE_CHAIN_LABELS = {
    "ownOperations": "Egne aktiviteter",
    "upstream": "Upstream",
    "downstream": "Downstream",
    "unknown": UNKNOWN_LABEL,
}

REMEDIATION_LABELS = {
    "none": "Ingen afhjælpning",
    "planned": "Planlagt indsats",
    "inPlace": "Afhjælpning implementeret",
}

PRIORITY_ACTIONS = {
    "opportunity": "Udnyt mulighed",
    "both": "Håndtér risiko/mulighed",
}

PRIORITISATION_CRITERIA = [
    {
        "title": "Impact-matrix",
        "description": "Alvor/omfang multipliceret med sandsynlighed, justeret for påvirkningstype og eksisterende "
                       "afhjælpning.",
    },
    {
        "title": "Finansielle effekter",
        "description": "Selvangivet finansiel score (0-5) omregnet til procentvis betydning.",
    },
    {
        "title": "Tidslinje",
        "description": "Kort sigt vægter højest, løbende og lange tidshorisonter reducerer scoren moderat.",
    },
]


class MaterialTopic:
    """One scored material topic."""

    def __init__(self, index, name, **fields):
        self.index = index
        self.name = name
        for key, value in fields.items():
            setattr(self, key, value)

    def band(self, factors):
        if not self.eligible:
            return "monitor"
        if self.combined >= factors["priority_threshold"]:
            return "priority"
        if self.combined >= factors["attention_threshold"]:
            return "attention"
        return "monitor"

    def to_row(self, factors):
        return {
            "name": self.name,
            "impactType": self.impact_type,
            "severity": self.severity,
            "likelihood": self.likelihood,
            "impactScore": self.impact_score,
            "financialScore": self.financial_score,
            "timelineScore": self.timeline_score,
            "combinedScore": self.combined,
            "riskType": self.risk_type,
            "timeline": self.timeline,
            "valueChainSegment": self.value_chain,
            "remediationStatus": self.remediation,
            "responsible": self.responsible,
            "csrdGapStatus": self.gap_status,
            "missingFinancial": self.missing_financial,
            "missingTimeline": self.timeline_score is None,
            "financialOverrideApproved": self.override_approved,
            "financialOverrideJustification": self.override_justification,
            "eligibleForPrioritisation": self.eligible,
            "priorityBand": self.band(factors),
        }

    def to_summary(self, factors):
        return {
            "name": self.name,
            "description": self.description,
            "riskType": self.risk_type,
            "impactType": self.impact_type,
            "severity": self.severity,
            "likelihood": self.likelihood,
            "impactScore": self.impact_score,
            "financialScore": self.financial_score,
            "timelineScore": self.timeline_score,
            "combinedScore": self.combined,
            "timeline": self.timeline,
            "valueChainSegment": self.value_chain,
            "responsible": self.responsible,
            "csrdGapStatus": self.gap_status,
            "remediationStatus": self.remediation,
            "eligibleForPrioritisation": self.eligible,
            "priorityBand": self.band(factors),
        }


def _key(value, options):
    return value if isinstance(value, str) and value in options else None


def _financial_score(value):
    number = as_number(value)
    if number is None or number < 0 or number > MAX_FINANCIAL_SCORE:
        return None
    return number


def _trace_name(name):
    return "_".join(name.split())


def _fixed(value):
    return "null" if value is None else to_fixed(value, 1)


def _score_topic(index, topic, factors, warnings, trace):
    """Score one topic row, or return None when it cannot be scored."""
    name = text_value(topic.get("title"))
    if name is None:
        warnings.append(f"Emne {index + 1} mangler titel og indgår ikke i beregningen.")
        trace.append(f"topic[{index}]=skipped|reason=no-title")
        return None
    severity = _key(topic.get("severity"), factors["severity_weights"])
    if severity is None:
        warnings.append(f'Emnet "{name}" mangler registreret alvor/omfang og indgår ikke i beregningen.')
        trace.append(f"topic[{index}]=skipped|reason=no-severity|name={_trace_name(name)}")
        return None
    likelihood = _key(topic.get("likelihood"), factors["likelihood_weights"])
    if likelihood is None:
        warnings.append(f'Emnet "{name}" mangler sandsynlighed og indgår ikke i beregningen.')
        trace.append(f"topic[{index}]=skipped|reason=no-likelihood|name={_trace_name(name)}")
        return None

    severity_weights = factors["severity_weights"]
    likelihood_weights = factors["likelihood_weights"]
    timeline_weights = factors["timeline_weights"]
    max_matrix = max(severity_weights.values()) * max(likelihood_weights.values())

    impact_type = _key(topic.get("impactType"), factors["impact_type_modifiers"])
    if impact_type is None:
        warnings.append(f'Påvirkningstype mangler for "{name}" – antager faktisk påvirkning.')
        impact_type = "actual"
    remediation = _key(topic.get("remediationStatus"), factors["remediation_modifiers"])
    if remediation is None:
        warnings.append(f'Afhjælpning er ikke registreret for "{name}" – antager ingen afhjælpning.')
        remediation = "none"

    impact = (
        severity_weights[severity] * likelihood_weights[likelihood] / max_matrix
        * factors["impact_type_modifiers"][impact_type]
        * factors["remediation_modifiers"][remediation]
    )

    financial_raw = _financial_score(topic.get("financialScore"))
    financial = None if financial_raw is None else financial_raw / MAX_FINANCIAL_SCORE
    missing_financial = financial is None

    justification = topic.get("financialExceptionJustification")
    justification = justification.strip() if isinstance(justification, str) else None
    minimum_length = factors["financial_override_justification_min_length"]
    toggled = topic.get("financialExceptionApproved") is True
    justified = justification is not None and len(justification) >= minimum_length
    override = toggled and justified

    if missing_financial:
        warnings.append(
            f'Finansiel score mangler for "{name}". Udfyld 0-5 eller registrér en begrundet undtagelse for at '
            "fastholde prioriteten."
        )
    if toggled and not justified:
        warnings.append(
            f'Undtagelse for manglende finansiel score på "{name}" kræver en begrundelse på mindst '
            f"{minimum_length} tegn."
        )
    if not toggled and justification:
        warnings.append(
            f'Begrundelse er angivet for finansiel undtagelse på "{name}", men afkrydsning mangler. Bekræft '
            "undtagelsen eller udfyld en score."
        )
    if missing_financial and override:
        warnings.append(f'Finansiel undtagelse er bekræftet for "{name}". Scoren markeres som dokumenteret uden tal.')

    timeline = _key(topic.get("timeline"), timeline_weights)
    timeline_dimension = None
    if timeline is not None:
        timeline_dimension = timeline_weights[timeline] / max(timeline_weights.values())

    present = [impact] + [dimension for dimension in (financial, timeline_dimension) if dimension is not None]
    combined = sum(present) / len(present)
    if missing_financial and not override:
        combined *= factors["missing_financial_penalty"]

    scored = MaterialTopic(
        index,
        name,
        description=text_value(topic.get("description")),
        impact_type=impact_type,
        severity=severity,
        likelihood=likelihood,
        value_chain=text_value(topic.get("valueChainSegment")),
        remediation=remediation,
        risk_type=text_value(topic.get("riskType")),
        timeline=timeline,
        responsible=text_value(topic.get("responsible")),
        gap_status=text_value(topic.get("csrdGapStatus")),
        impact_score=round_scaled(impact * 100, 1),
        financial_score=None if financial is None else round_scaled(financial * 100, 1),
        timeline_score=None if timeline_dimension is None else round_scaled(timeline_dimension * 100, 1),
        combined=round_scaled(combined * 100, 1),
        missing_financial=missing_financial,
        override_approved=override,
        override_justification=justification if override else None,
        eligible=not missing_financial or override,
    )

    override_trace = "approved" if override else "pending" if toggled else "none"
    trace.append(
        f"topic[{index}]={_trace_name(name)}|severity={severity}|likelihood={likelihood}"
        f"|impact={_fixed(scored.impact_score)}|financial={_fixed(scored.financial_score)}"
        f"|timelineScore={_fixed(scored.timeline_score)}|combined={_fixed(scored.combined)}"
        f"|riskType={scored.risk_type or 'null'}|timeline={timeline or 'null'}"
        f"|gap={scored.gap_status or 'null'}|financialOverride={override_trace}"
        f"|eligible={'yes' if scored.eligible else 'no'}"
    )
    return scored


def _listing(topics, limit):
    return ", ".join(f"{topic.name} ({to_fixed(topic.combined, 1)})" for topic in topics[:limit])


def _grouped(counts, labels):
    entries = [
        {"key": key, "label": labels.get(key, UNKNOWN_LABEL), "topics": count}
        for key, count in counts.items()
    ]
    return sorted(entries, key=lambda entry: -entry["topics"])


def _count_into(counts, key):
    counts[key] = counts.get(key, 0) + 1


def run_d2(input_data):
    factors = FACTORS["d2"]
    raw = section(input_data, "D2")
    topics = rows(raw, "materialTopics")

    assumptions = [
        "Alvor/omfang multipliceres med sandsynlighed og justeres for påvirkningstype samt eksisterende afhjælpning.",
        "Finansielle scorer normaliseres fra 0-5 til 0-100 og indgår kun, når de er udfyldt.",
        "Tidslinjer vægter kort sigt højest; samlet prioritet er gennemsnittet af de tilgængelige dimensioner.",
    ]
    trace = [f"inputTopics={len(topics)}"]
    warnings = []

    if not topics:
        warnings.append("Ingen væsentlige emner registreret. Tilføj materialitetsemner for at beregne prioritet.")
        return build_result(0, factors["unit"], assumptions, trace, warnings)

    assumptions.append(
        f"Manglende finansielle scorer reducerer kombinationsscoren med faktor {factors['missing_financial_penalty']}, "
        "medmindre en begrundet undtagelse er bekræftet."
    )

    scored = []
    matrix_counts = {}
    impact_type_counts = {}
    value_chain_counts = {}
    remediation_counts = {}
    for index, topic in enumerate(topics):
        result = _score_topic(index, topic if isinstance(topic, dict) else {}, factors, warnings, trace)
        if result is None:
            continue
        scored.append(result)
        _count_into(matrix_counts, (result.severity, result.likelihood))
        _count_into(impact_type_counts, result.impact_type)
        _count_into(value_chain_counts, result.value_chain or "unknown")
        _count_into(remediation_counts, result.remediation)

    if not scored:
        warnings.append("Ingen gyldige emner med scorer kunne beregnes. Kontrollér inputtene.")
        trace.append("validTopics=0")
        return build_result(0, factors["unit"], assumptions, trace, warnings)

    average = sum(topic.combined for topic in scored) / len(scored)
    value = round_scaled(average, factors["result_precision"])

    by_score = sorted(scored, key=lambda topic: -topic.combined)
    prioritised = [topic for topic in by_score if topic.band(factors) == "priority"]
    attention = [topic for topic in by_score if topic.band(factors) == "attention"]

    limit = factors["summary_limit"]
    if prioritised:
        assumptions.append(f"Top prioriterede emner: {_listing(prioritised, limit)}.")
    else:
        assumptions.append(f"Ingen emner overstiger prioritetstærsklen på {factors['priority_threshold']}.")
    if attention:
        assumptions.append(f"Emner tæt på prioritet: {_listing(attention, limit)}.")

    for topic in prioritised:
        action = PRIORITY_ACTIONS.get(topic.risk_type, "Håndtér risiko")
        warnings.append(f"Prioriteret emne: {topic.name} (score {to_fixed(topic.combined, 1)}) – {action}.")
        if topic.gap_status in factors["gap_warning_statuses"]:
            warnings.append(f"CSRD-gap mangler for {topic.name}. Fastlæg dokumentation og kontroller krav.")
        if factors["timeline_warning_for_priority"] and topic.timeline_score is None:
            warnings.append(f"Angiv tidslinje for {topic.name}, så handling kan planlægges.")
        if factors["responsible_warning_for_priority"] and not topic.responsible:
            warnings.append(f"Tildel ansvarlig for {topic.name} for at sikre opfølgning.")

    trace.append(f"validTopics={len(scored)}")
    trace.append(f"averageCompositeScore={to_fixed(average, 2)}")
    trace.append(f"prioritised={len(prioritised)}")
    trace.append(f"attention={len(attention)}")

    narratives = [{"label": topic.name, "content": topic.description} for topic in scored if topic.description]
    responsibilities = [
        {"subject": topic.name, "owner": topic.responsible, "role": "Materialitet"}
        for topic in scored
        if topic.responsible
    ]
    notes = [
        {
            "label": topic.name,
            "detail": " · ".join([
                f"Impact-type: {IMPACT_TYPE_LABELS[topic.impact_type]}",
                f"Alvor: {SEVERITY_LABELS.get(topic.severity, topic.severity)}",
                f"Sandsynlighed: {LIKELIHOOD_LABELS.get(topic.likelihood, topic.likelihood)}",
                f"Værdikæde: {VALUE_CHAIN_LABELS.get(topic.value_chain, UNKNOWN_LABEL)}",
                f"Afhjælpning: {REMEDIATION_LABELS[topic.remediation]}",
            ]),
        }
        for topic in scored
    ]
    gap_alerts = [topic.name for topic in scored if topic.gap_status == "missing"]
    average_score = round_scaled(average, 1)

    facts = [
        {"conceptKey": "D2ValidTopicsCount", "value": len(scored), "unitId": "pure", "decimals": 0},
        {"conceptKey": "D2PrioritisedTopicsCount", "value": len(prioritised), "unitId": "pure", "decimals": 0},
        {"conceptKey": "D2AttentionTopicsCount", "value": len(attention), "unitId": "pure", "decimals": 0},
        {"conceptKey": "D2GapAlertsCount", "value": len(gap_alerts), "unitId": "pure", "decimals": 0},
        {"conceptKey": "D2AverageWeightedScore", "value": average_score, "unitId": "percent", "decimals": 1},
    ]
    esrs_tables = [{"conceptKey": "D2MaterialTopicsTable", "rows": [topic.to_row(factors) for topic in scored]}]
    if gap_alerts:
        esrs_tables.append({"conceptKey": "D2GapAlertsTable", "rows": [{"topic": name} for name in gap_alerts]})

    severity_weights = factors["severity_weights"]
    likelihood_weights = factors["likelihood_weights"]
    impact_matrix = sorted(
        (
            {"severity": severity, "likelihood": likelihood, "topics": count}
            for (severity, likelihood), count in matrix_counts.items()
        ),
        key=lambda cell: (-severity_weights[cell["severity"]], -likelihood_weights[cell["likelihood"]]),
    )

    double_materiality = {
        "overview": {
            "totalTopics": len(scored),
            "prioritisedTopics": len(prioritised),
            "attentionTopics": len(attention),
            "gapAlerts": len(gap_alerts),
            "averageScore": average_score,
        },
        "prioritisationCriteria": [dict(criterion) for criterion in PRIORITISATION_CRITERIA],
        "tables": {
            "topics": [topic.to_summary(factors) for topic in by_score[:limit]],
            "gapAlerts": gap_alerts,
            "impactMatrix": impact_matrix,
        },
        "dueDiligence": {
            "impactTypes": _grouped(impact_type_counts, IMPACT_TYPE_LABELS),
            "valueChain": _grouped(value_chain_counts, VALUE_CHAIN_LABELS),
            "remediation": _grouped(remediation_counts, REMEDIATION_LABELS),
        },
    }

    return build_result(
        value,
        factors["unit"],
        assumptions,
        trace,
        warnings,
        narratives=narratives,
        responsibilities=responsibilities,
        notes=notes,
        doubleMateriality=double_materiality,
        esrsFacts=facts,
        esrsTables=esrs_tables,
    )
