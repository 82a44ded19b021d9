"""
E1 narrative disclosures

List-based E1 modules that collect entries rather than compute emissions:
- E1Scenarios: climate scenarios used in the risk assessment
- E1CarbonPrice: internal carbon price schemes
- E1RiskGeography: assets and revenue exposed per geography
- E1DecarbonisationDrivers: levers with expected reductions

Entries with nothing filled in are dropped silently. `value` is the number
of entries, except for the drivers module which reports the total expected
reduction.
"""

from esg_engine.calculations.formatting import format_number, js_round, round_scaled
from esg_engine.calculations.results import build_result
from esg_engine.calculations.sanitize import (
    bounded_percent,
    coerce_boolean,
    coerce_year,
    floor_zero,
    rows,
    section,
    text_value,
)

SCENARIO_TYPES = ("netZero15", "wellBelow2", "currentPolicies", "stressTest", "custom")
TIME_HORIZONS = ("shortTerm", "mediumTerm", "longTerm")

TARGET_SCOPES = ("scope1", "scope2", "scope3", "combined")
SCOPE_LABELS = {
    "scope1": "Scope 1",
    "scope2": "Scope 2",
    "scope3": "Scope 3",
    "combined": "Samlet (scope 1-3)",
}

PHYSICAL_RISK_TYPES = ("acutePhysical", "chronicPhysical")
TRANSITION_RISK_TYPE = "transition"

DRIVER_TYPES = (
    "energyEfficiency",
    "renewableEnergy",
    "processInnovation",
    "fuelSwitching",
    "carbonCapture",
    "valueChainEngagement",
    "other",
)


def _choice(value, options):
    return value if isinstance(value, str) and value in options else None


def _average(values, decimals):
    if not values:
        return None
    return round_scaled(sum(values) / len(values), decimals)


def _boolean_cell(value):
    if value is None:
        return None
    return "Ja" if value else "Nej"


def _joined_names(entries):
    return ", ".join(entry["name"] for entry in entries if entry["name"])


def run_e1_scenarios(input_data):
    raw = section(input_data, "E1Scenarios")
    warnings = []
    trace = []
    assumptions = [
        "Scenarier anvendes til at dokumentere klimarisikovurderinger i henhold til ESRS E1.",
        "Manglende værdier tolkes som 0 eller ukendt afhængigt af feltet.",
    ]

    scenarios = []
    for index, entry in enumerate(rows(raw, "scenarios")):
        if not isinstance(entry, dict):
            continue
        name = text_value(entry.get("name"))
        provider = text_value(entry.get("provider"))
        scenario_type = _choice(entry.get("scenarioType"), SCENARIO_TYPES)
        if scenario_type is None and entry.get("scenarioType") is not None:
            warnings.append(f"Ukendt scenarietype på række {index + 1}. Værdien ignoreres.")

        time_horizon = text_value(entry.get("timeHorizon"))
        if time_horizon and time_horizon not in TIME_HORIZONS:
            warnings.append(f"Ukendt tidshorisont på scenarie {index + 1}. Angivet værdi beholdes som tekst.")

        coverage = bounded_percent(entry.get("coveragePercent"))
        description = text_value(entry.get("description"))
        if not name and not provider and not scenario_type and coverage is None and not description:
            continue

        trace.append(f"scenario[{index}].type={scenario_type or 'ukendt'}")
        if coverage is not None:
            trace.append(f"scenario[{index}].coverage={format_number(coverage)}")
        scenarios.append({
            "name": name,
            "provider": provider,
            "scenarioType": scenario_type,
            "timeHorizon": time_horizon,
            "coveragePercent": coverage,
            "description": description,
        })

    trace.append(f"scenarios.count={len(scenarios)}")

    average_coverage = _average(
        [s["coveragePercent"] for s in scenarios if s["coveragePercent"] is not None], 1
    )
    metrics = []
    if average_coverage is not None:
        trace.append(f"scenarios.averageCoverage={format_number(average_coverage)}")
        metrics.append({"label": "Gennemsnitlig dækningsgrad", "value": average_coverage, "unit": "%"})

    tables = []
    if scenarios:
        tables.append({
            "id": "e1-scenarios",
            "title": "Klimascenarier",
            "columns": [
                {"key": "name", "label": "Scenarie"},
                {"key": "provider", "label": "Udbyder"},
                {"key": "scenarioType", "label": "Type"},
                {"key": "timeHorizon", "label": "Horisont"},
                {"key": "coveragePercent", "label": "Dækning (%)", "align": "end", "format": "percent"},
                {"key": "description", "label": "Beskrivelse"},
            ],
            "rows": [
                {
                    "name": s["name"] or "Scenarie",
                    "provider": s["provider"] or "Ukendt",
                    "scenarioType": s["scenarioType"] or "ukendt",
                    "timeHorizon": s["timeHorizon"] or "ukendt",
                    "coveragePercent": s["coveragePercent"],
                    "description": s["description"],
                }
                for s in scenarios
            ],
        })

    narrative = text_value(raw.get("scenarioNarrative"))
    narratives = []
    if narrative:
        trace.append("scenarioNarrative.present=true")
        narratives.append({"label": "Anvendelse af scenarieanalyse", "content": narrative})

    scenario_types = {s["scenarioType"] for s in scenarios if s["scenarioType"]}
    trace.append(f"scenarioTypes.distinct={len(scenario_types)}")

    esrs_facts = [{"conceptKey": "E1ScenariosDiverseRange", "value": len(scenario_types) >= 2}]
    fallback = narrative or _joined_names(scenarios)
    if fallback:
        esrs_facts.append({"conceptKey": "E1ScenariosNarrative", "value": fallback})

    return build_result(
        len(scenarios), "scenarier", assumptions, trace, warnings,
        scenarios=scenarios,
        metrics=metrics or None,
        tables=tables or None,
        narratives=narratives or None,
        esrsFacts=esrs_facts,
    )


def run_e1_carbon_price(input_data):
    raw = section(input_data, "E1CarbonPrice")
    warnings = []
    trace = []
    assumptions = [
        "Interne CO₂-priser anvendes til investerings- og risikobeslutninger jf. ESRS E1-5.",
        "Manglende beløb tolkes som 0 DKK og udelades fra gennemsnit.",
    ]

    schemes = []
    for index, entry in enumerate(rows(raw, "carbonPrices")):
        if not isinstance(entry, dict):
            continue
        scheme_name = text_value(entry.get("scheme"))
        scope = _choice(entry.get("scope"), TARGET_SCOPES)
        if scope is None and entry.get("scope") is not None:
            warnings.append(f"Ugyldigt scope på CO₂-pris {index + 1}. Værdien ignoreres.")

        scheme = {
            "scheme": scheme_name,
            "scope": scope,
            "priceDkkPerTonne": floor_zero(entry.get("priceDkkPerTonne")),
            "coveragePercent": bounded_percent(entry.get("coveragePercent")),
            "appliesToCapex": coerce_boolean(entry.get("appliesToCapex")),
            "appliesToOpex": coerce_boolean(entry.get("appliesToOpex")),
            "appliesToInvestmentDecisions": coerce_boolean(entry.get("appliesToInvestmentDecisions")),
            "alignedWithFinancialStatements": coerce_boolean(entry.get("alignedWithFinancialStatements")),
            "description": text_value(entry.get("description")),
        }
        if all(value is None for value in scheme.values()):
            continue

        if scheme["priceDkkPerTonne"] is not None:
            trace.append(f"carbonPrice[{index}].price={format_number(scheme['priceDkkPerTonne'])}")
        if scheme["coveragePercent"] is not None:
            trace.append(f"carbonPrice[{index}].coverage={format_number(scheme['coveragePercent'])}")
        schemes.append(scheme)

    trace.append(f"carbonPrice.count={len(schemes)}")

    average_price = _average([s["priceDkkPerTonne"] for s in schemes if s["priceDkkPerTonne"] is not None], 0)
    average_coverage = _average([s["coveragePercent"] for s in schemes if s["coveragePercent"] is not None], 1)

    metrics = []
    if average_price is not None:
        trace.append(f"carbonPrice.average={format_number(average_price)}")
        metrics.append({"label": "Gennemsnitlig CO₂-pris", "value": average_price, "unit": "DKK/tCO₂e"})
    if average_coverage is not None:
        trace.append(f"carbonPrice.coverage={format_number(average_coverage)}")
        metrics.append({"label": "Gennemsnitlig dækningsgrad", "value": average_coverage, "unit": "%"})

    tables = []
    if schemes:
        tables.append({
            "id": "e1-carbon-price",
            "title": "Interne CO₂-priser",
            "columns": [
                {"key": "scheme", "label": "Ordning"},
                {"key": "scope", "label": "Scope"},
                {"key": "priceDkkPerTonne", "label": "Pris (DKK/t)", "align": "end", "format": "number"},
                {"key": "coveragePercent", "label": "Dækning (%)", "align": "end", "format": "percent"},
                {"key": "appliesToCapex", "label": "Capex", "align": "center"},
                {"key": "appliesToOpex", "label": "Opex", "align": "center"},
                {"key": "appliesToInvestmentDecisions", "label": "Investering", "align": "center"},
                {"key": "alignedWithFinancialStatements", "label": "Afstemt regnskab", "align": "center"},
                {"key": "description", "label": "Noter"},
            ],
            "rows": [
                {
                    "scheme": s["scheme"] or "Ordning",
                    "scope": SCOPE_LABELS[s["scope"]] if s["scope"] else "Ukendt",
                    "priceDkkPerTonne": s["priceDkkPerTonne"],
                    "coveragePercent": s["coveragePercent"],
                    "appliesToCapex": _boolean_cell(s["appliesToCapex"]),
                    "appliesToOpex": _boolean_cell(s["appliesToOpex"]),
                    "appliesToInvestmentDecisions": _boolean_cell(s["appliesToInvestmentDecisions"]),
                    "alignedWithFinancialStatements": _boolean_cell(s["alignedWithFinancialStatements"]),
                    "description": s["description"],
                }
                for s in schemes
            ],
        })

    narrative = text_value(raw.get("methodologyNarrative"))
    narratives = [{"label": "Metode til intern CO₂-prissætning", "content": narrative}] if narrative else []

    esrs_facts = []
    if average_price is not None:
        esrs_facts.append({"conceptKey": "E1CarbonPriceAmount", "value": average_price, "unitId": "DKK", "decimals": 0})
    if schemes:
        aligned = any(s["alignedWithFinancialStatements"] is True for s in schemes)
        esrs_facts.append({"conceptKey": "E1CarbonPriceAlignment", "value": aligned})
    if narrative:
        esrs_facts.append({"conceptKey": "E1CarbonPriceNarrative", "value": narrative})

    return build_result(
        len(schemes), "ordninger", assumptions, trace, warnings,
        carbonPriceSchemes=schemes,
        metrics=metrics or None,
        tables=tables or None,
        narratives=narratives or None,
        esrsFacts=esrs_facts or None,
    )


def run_e1_risk_geography(input_data):
    raw = section(input_data, "E1RiskGeography")
    warnings = []
    trace = []
    assumptions = [
        "Geografisk risikovurdering kombinerer fysisk og transitionseksponeringer jf. ESRS E1-9.",
        "Beløb angives i DKK og antages at være positive værdier.",
    ]

    regions = []
    for index, entry in enumerate(rows(raw, "riskRegions")):
        if not isinstance(entry, dict):
            continue
        geography = text_value(entry.get("geography"))
        risk_type = _choice(entry.get("riskType"), PHYSICAL_RISK_TYPES + (TRANSITION_RISK_TYPE,))
        if risk_type is None and entry.get("riskType") is not None:
            warnings.append(f"Ukendt risikotype på geografi {index + 1}. Værdien ignoreres.")
        time_horizon = text_value(entry.get("timeHorizon"))
        assets = floor_zero(entry.get("assetsAtRiskDkk"))
        revenue = floor_zero(entry.get("revenueAtRiskDkk"))
        narrative = text_value(entry.get("exposureNarrative"))

        if not geography and not risk_type and assets is None and revenue is None and not narrative:
            continue

        if assets is not None:
            trace.append(f"riskGeography[{index}].assets={format_number(assets)}")
        if revenue is not None:
            trace.append(f"riskGeography[{index}].revenue={format_number(revenue)}")
        regions.append({
            "geography": geography,
            "riskType": risk_type,
            "timeHorizon": time_horizon,
            "assetsAtRiskDkk": assets,
            "revenueAtRiskDkk": revenue,
            "exposureNarrative": narrative,
        })

    trace.append(f"riskGeography.count={len(regions)}")

    def exposure(field, risk_types):
        return sum((r[field] or 0) for r in regions if r["riskType"] in risk_types)

    physical_assets = exposure("assetsAtRiskDkk", PHYSICAL_RISK_TYPES)
    transition_assets = exposure("assetsAtRiskDkk", (TRANSITION_RISK_TYPE,))
    physical_revenue = exposure("revenueAtRiskDkk", PHYSICAL_RISK_TYPES)
    transition_revenue = exposure("revenueAtRiskDkk", (TRANSITION_RISK_TYPE,))

    for key, amount in (
        ("physicalAssets", physical_assets),
        ("transitionAssets", transition_assets),
        ("physicalRevenue", physical_revenue),
        ("transitionRevenue", transition_revenue),
    ):
        if amount > 0:
            trace.append(f"riskGeography.{key}={format_number(amount)}")

    metrics = []
    if physical_assets > 0:
        metrics.append({"label": "Aktiver eksponeret for fysisk risiko", "value": js_round(physical_assets),
                        "unit": "DKK"})
    if transition_assets > 0:
        metrics.append({"label": "Aktiver eksponeret for transitionrisiko", "value": js_round(transition_assets),
                        "unit": "DKK"})
    if physical_revenue > 0 or transition_revenue > 0:
        metrics.append({"label": "Nettoomsætning i risikoområder",
                        "value": js_round(physical_revenue + transition_revenue), "unit": "DKK"})

    tables = []
    if regions:
        tables.append({
            "id": "e1-risk-geography",
            "title": "Risikogeografi",
            "columns": [
                {"key": "geography", "label": "Geografi"},
                {"key": "riskType", "label": "Risikotype"},
                {"key": "timeHorizon", "label": "Horisont"},
                {"key": "assetsAtRiskDkk", "label": "Aktiver (DKK)", "align": "end", "format": "number"},
                {"key": "revenueAtRiskDkk", "label": "Nettoomsætning (DKK)", "align": "end", "format": "number"},
                {"key": "exposureNarrative", "label": "Noter"},
            ],
            "rows": [
                {
                    "geography": r["geography"] or "Geografi",
                    "riskType": r["riskType"] or "ukendt",
                    "timeHorizon": r["timeHorizon"] or "ukendt",
                    "assetsAtRiskDkk": r["assetsAtRiskDkk"],
                    "revenueAtRiskDkk": r["revenueAtRiskDkk"],
                    "exposureNarrative": r["exposureNarrative"],
                }
                for r in regions
            ],
        })

    narrative = text_value(raw.get("assessmentNarrative"))
    narratives = [{"label": "Vurdering af klimarisici", "content": narrative}] if narrative else []

    esrs_facts = []
    for concept, amount in (
        ("E1RiskPhysicalAssets", physical_assets),
        ("E1RiskPhysicalRevenue", physical_revenue),
        ("E1RiskTransitionAssets", transition_assets),
        ("E1RiskTransitionRevenue", transition_revenue),
    ):
        if amount > 0:
            esrs_facts.append({"conceptKey": concept, "value": amount, "unitId": "DKK", "decimals": 0})
    if narrative:
        esrs_facts.append({"conceptKey": "E1RiskNarrative", "value": narrative})

    return build_result(
        len(regions), "geografier", assumptions, trace, warnings,
        riskGeographies=regions,
        metrics=metrics or None,
        tables=tables or None,
        narratives=narratives or None,
        esrsFacts=esrs_facts or None,
    )


def run_e1_decarbonisation_drivers(input_data):
    raw = section(input_data, "E1DecarbonisationDrivers")
    warnings = []
    trace = []
    assumptions = [
        "Drivere kobles til klimamål og beregnes som forventede reduktioner i tCO₂e.",
        "Manglende reduktionstal antages som 0 tCO₂e.",
    ]

    drivers = []
    for index, entry in enumerate(rows(raw, "drivers")):
        if not isinstance(entry, dict):
            continue
        lever = _choice(entry.get("lever"), DRIVER_TYPES)
        if lever is None and entry.get("lever") is not None:
            warnings.append(f"Ukendt driver-type på række {index + 1}.")
        driver = {
            "lever": lever,
            "name": text_value(entry.get("name")),
            "description": text_value(entry.get("description")),
            "expectedReductionTonnes": floor_zero(entry.get("expectedReductionTonnes")),
            "investmentNeedDkk": floor_zero(entry.get("investmentNeedDkk")),
            "startYear": coerce_year(entry.get("startYear")),
        }
        if all(value is None for value in driver.values()):
            continue

        if driver["expectedReductionTonnes"] is not None:
            trace.append(f"decarbonisation[{index}].reduction={format_number(driver['expectedReductionTonnes'])}")
        if driver["investmentNeedDkk"] is not None:
            trace.append(f"decarbonisation[{index}].investment={format_number(driver['investmentNeedDkk'])}")
        drivers.append(driver)

    total_reduction = round_scaled(sum(d["expectedReductionTonnes"] or 0 for d in drivers), 1)
    total_investment = round_scaled(sum(d["investmentNeedDkk"] or 0 for d in drivers), 0)

    trace.append(f"decarbonisation.count={len(drivers)}")
    trace.append(f"decarbonisation.totalReduction={format_number(total_reduction)}")
    trace.append(f"decarbonisation.totalInvestment={format_number(total_investment)}")

    metrics = []
    if drivers:
        metrics.append({"label": "Antal drivere", "value": len(drivers)})
    if total_reduction > 0:
        metrics.append({"label": "Forventet reduktion", "value": total_reduction, "unit": "tCO₂e"})
    if total_investment > 0:
        metrics.append({"label": "Estimeret investering", "value": total_investment, "unit": "DKK"})

    tables = []
    esrs_tables = []
    if drivers:
        tables.append({
            "id": "e1-decarbonisation-drivers",
            "title": "Decarboniseringsdrivere",
            "columns": [
                {"key": "lever", "label": "Driver"},
                {"key": "name", "label": "Initiativ"},
                {"key": "expectedReductionTonnes", "label": "Reduktion (tCO₂e)", "align": "end", "format": "number"},
                {"key": "investmentNeedDkk", "label": "Investering (DKK)", "align": "end", "format": "number"},
                {"key": "startYear", "label": "Startår", "align": "end", "format": "number"},
                {"key": "description", "label": "Noter"},
            ],
            "rows": [
                {
                    "lever": d["lever"] or "ukendt",
                    "name": d["name"] or "Initiativ",
                    "expectedReductionTonnes": d["expectedReductionTonnes"],
                    "investmentNeedDkk": d["investmentNeedDkk"],
                    "startYear": d["startYear"],
                    "description": d["description"],
                }
                for d in drivers
            ],
        })
        esrs_tables.append({
            "conceptKey": "E1DecarbonisationTable",
            "rows": [
                {
                    "lever": d["lever"] or "other",
                    "name": d["name"],
                    "expectedReductionTonnes": d["expectedReductionTonnes"],
                    "investmentNeedDkk": d["investmentNeedDkk"],
                    "startYear": d["startYear"],
                }
                for d in drivers
            ],
        })

    narrative = text_value(raw.get("summaryNarrative"))
    narratives = [{"label": "Sammenfatning af drivere", "content": narrative}] if narrative else []

    levers = []
    for driver in drivers:
        if driver["lever"] and driver["lever"] not in levers:
            levers.append(driver["lever"])

    esrs_facts = []
    if levers:
        esrs_facts.append({"conceptKey": "E1DecarbonisationLeverTypes", "value": "|".join(levers)})
    fallback = narrative or _joined_names(drivers)
    if fallback:
        esrs_facts.append({"conceptKey": "E1DecarbonisationNarrative", "value": fallback})

    return build_result(
        total_reduction if drivers else 0, "tCO₂e", assumptions, trace, warnings,
        decarbonisationDrivers=drivers,
        metrics=metrics or None,
        tables=tables or None,
        narratives=narratives or None,
        esrsFacts=esrs_facts or None,
        esrsTables=esrs_tables or None,
    )
