"""
G1: governance policies and targets

Scores policy maturity (40 %), target progress (40 %) and board oversight
(20 %) on a 0-100 scale. Both collections only reach full weight once they
hold the configured minimum number of rows.
"""

from esg_engine.calculations.factors import FACTORS
from esg_engine.calculations.formatting import format_number, js_round, round_to
from esg_engine.calculations.results import build_result
from esg_engine.calculations.sanitize import as_number, coerce_boolean, clamp_ratio, is_blank, rows, section, text_value


def _year(value):
    number = as_number(value)
    if number is None:
        return None
    year = js_round(number)
    if year < 1990 or year > 2100:
        return None
    return year


def _label(text):
    return text.replace("|", "/").replace("\n", " ")


def _policies(raw):
    policies = []
    for index, row in enumerate(rows(raw, "policies")):
        if not isinstance(row, dict):
            continue
        topic = text_value(row.get("topic"))
        if topic is None:
            continue
        status = row.get("status")
        policies.append({
            "index": index,
            "topic": topic,
            "status": status if isinstance(status, str) and status else None,
            "owner": text_value(row.get("owner")),
            "lastReviewed": text_value(row.get("lastReviewed")),
        })
    return policies


def _targets(raw):
    targets = []
    for index, row in enumerate(rows(raw, "targets")):
        if not isinstance(row, dict):
            continue
        topic = text_value(row.get("topic"))
        if topic is None:
            continue
        status = row.get("status")
        targets.append({
            "index": index,
            "topic": topic,
            "baselineYear": _year(row.get("baselineYear")),
            "targetYear": _year(row.get("targetYear")),
            "targetValue": as_number(row.get("targetValue")),
            "unit": text_value(row.get("unit")),
            "status": status if isinstance(status, str) and status else None,
        })
    return targets


def _average(scores):
    if not scores:
        return None
    return sum(scores) / len(scores)


def _collection_score(average, count, threshold):
    if average is None or count == 0:
        return 0
    coverage = min(1, count / max(1, threshold))
    return clamp_ratio(average * coverage)


def _policy_score(policy, status_scores, warnings):
    topic = policy["topic"]
    if policy["status"] is None:
        warnings.append(f'Status mangler for politikken "{topic}".')
        return 0
    if policy["status"] not in status_scores:
        warnings.append(f'Ukendt politikstatus for "{topic}". Opdater input.')
        return 0
    if policy["owner"] is None:
        warnings.append(f'Angiv ejer/ansvarlig for politikken "{topic}".')
    return status_scores[policy["status"]]


def _target_score(target, status_scores, warnings):
    topic = target["topic"]
    if target["status"] is None:
        warnings.append(f'Status mangler for target "{topic}".')
        return 0
    if target["status"] not in status_scores:
        warnings.append(f'Ukendt targetstatus for "{topic}".')
        return 0
    baseline, target_year = target["baselineYear"], target["targetYear"]
    if baseline is not None and target_year is not None and target_year <= baseline:
        warnings.append(
            f'Target "{topic}" har målår {target_year} før baseline {baseline}. Kontrollér.'
        )
    return status_scores[target["status"]]


def _oversight_score(oversight, warnings):
    if oversight is None:
        warnings.append("Angiv om bestyrelsen fører tilsyn med ESG/CSRD. Det er et eksplicit ESRS G1-krav.")
        return 0.5
    if not oversight:
        warnings.append("Bestyrelsen fører ikke tilsyn med ESG – etabler governance struktur for compliance.")
        return 0
    return 1


def run_g1(input_data):
    factors = FACTORS["g1"]
    raw = section(input_data, "G1")
    policies = _policies(raw)
    targets = _targets(raw)

    trace = []
    warnings = []
    assumptions = [
        "Scoren vægter politikker (40 %), mål/targets (40 %) og bestyrelsestilsyn (20 %).",
        "Politikstatus oversættes til en 0-1 skala: approved (1.0), inReview (0.7), draft (0.4), retired (0.2), "
        "missing (0).",
        "Targetstatus oversættes til en 0-1 skala: onTrack (1.0), lagging (0.6), offTrack (0.2), notStarted (0.1).",
    ]

    if not policies:
        warnings.append(
            "Ingen governance-politikker registreret. Tilføj mindst ESG-, etik- eller menneskerettighedspolitikker."
        )
        trace.append("policies=0")
    if not targets:
        warnings.append("Ingen governance- eller ESG-targets registreret. Angiv kvantitative mål for compliance.")
        trace.append("targets=0")

    policy_average = _average(
        [_policy_score(policy, factors["policy_status_scores"], warnings) for policy in policies]
    )
    target_average = _average(
        [_target_score(target, factors["target_status_scores"], warnings) for target in targets]
    )
    oversight = coerce_boolean(raw.get("boardOversight"))
    oversight_score = _oversight_score(oversight, warnings)

    total = (
        factors["policy_weight"]
        * _collection_score(policy_average, len(policies), factors["min_policies_for_full_score"])
        + factors["target_weight"]
        * _collection_score(target_average, len(targets), factors["min_targets_for_full_score"])
        + factors["oversight_weight"] * oversight_score
    )
    value = 0 if is_blank(raw) else round_to(clamp_ratio(total) * 100, factors["result_precision"])

    for policy in policies:
        trace.append(
            f"policy[{policy['index']}]={_label(policy['topic'])}|status={format_number(policy['status'])}"
            f"|owner={format_number(policy['owner'])}"
        )
    for target in targets:
        trace.append(
            f"target[{target['index']}]={_label(target['topic'])}|status={format_number(target['status'])}"
            f"|baseline={format_number(target['baselineYear'])}|targetYear={format_number(target['targetYear'])}"
        )

    narrative = text_value(raw.get("governanceNarrative")) or ""
    if len(narrative) < 40:
        warnings.append(
            "Tilføj narrativ om governance-strukturen for at dokumentere roller, incitamenter og tilsyn."
        )

    facts = [
        {"conceptKey": "G1PolicyCount", "value": len(policies), "unitId": "pure", "decimals": 0},
        {"conceptKey": "G1TargetCount", "value": len(targets), "unitId": "pure", "decimals": 0},
    ]
    if policy_average is not None:
        facts.append({"conceptKey": "G1PolicyAverageScore", "value": policy_average * 100,
                      "unitId": "percent", "decimals": 1})
    if target_average is not None:
        facts.append({"conceptKey": "G1TargetAverageScore", "value": target_average * 100,
                      "unitId": "percent", "decimals": 1})
    facts.append({"conceptKey": "G1OversightScore", "value": oversight_score * 100, "unitId": "percent", "decimals": 1})
    if oversight is not None:
        facts.append({"conceptKey": "G1BoardOversight", "value": oversight, "unitId": None})
    if narrative:
        facts.append({"conceptKey": "G1GovernanceNarrative", "value": narrative})

    esrs_tables = []
    if policies:
        esrs_tables.append({
            "conceptKey": "G1PoliciesTable",
            "rows": [
                {
                    "topic": policy["topic"],
                    "status": policy["status"],
                    "owner": policy["owner"],
                    "lastReviewed": policy["lastReviewed"],
                }
                for policy in policies
            ],
        })
    if targets:
        esrs_tables.append({
            "conceptKey": "G1TargetsTable",
            "rows": [
                {
                    "topic": target["topic"],
                    "baselineYear": target["baselineYear"],
                    "targetYear": target["targetYear"],
                    "targetValue": target["targetValue"],
                    "unit": target["unit"],
                    "status": target["status"],
                }
                for target in targets
            ],
        })

    return build_result(
        value,
        factors["unit"],
        assumptions,
        trace,
        warnings,
        esrsFacts=facts,
        esrsTables=esrs_tables or None,
    )
