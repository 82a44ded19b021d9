"""
Module dispatcher and report aggregation

- MODULE_IDS: canonical module order used by full reports
- run_module: run one calculator and apply the E1 insight overlay when the
  calculator does not apply it itself
- aggregate_results: every module, in canonical order, with its title
- create_default_result: identity fallback for modules without bespoke logic
"""

import logging
from collections import namedtuple

from esg_engine.calculations.e1_insights import with_e1_insights
from esg_engine.calculations.factors import DEFAULT_FACTOR
from esg_engine.calculations.formatting import format_number
from esg_engine.calculations.modules import (
    climate_disclosures,
    climate_targets,
    credits,
    environment,
    esrs2,
    governance,
    materiality,
    scope1,
    scope2,
    scope3_activities,
    scope3_lines,
    social,
)
from esg_engine.calculations.sanitize import coerce_number

logger = logging.getLogger(__name__)

# `applies_insights` marks calculators that already run the E1 overlay.
Calculator = namedtuple("Calculator", ["title", "run", "applies_insights"])

CALCULATORS = {
    "A1": Calculator("A1 – Scope 1 stationære forbrændingskilder", scope1.run_a1, True),
    "A2": Calculator("A2 – Scope 1 mobile forbrændingskilder", scope1.run_a2, True),
    "A3": Calculator("A3 – Scope 1 procesemissioner", scope1.run_a3, True),
    "A4": Calculator("A4 – Scope 1 flugtige emissioner", scope1.run_a4, True),
    "B1": Calculator("B1 – Scope 2 elforbrug", scope2.run_b1, True),
    "B2": Calculator("B2 – Scope 2 varmeforbrug", scope2.run_b2, True),
    "B3": Calculator("B3 – Scope 2 køleforbrug", scope2.run_b3, True),
    "B4": Calculator("B4 – Scope 2 dampforbrug", scope2.run_b4, True),
    "B5": Calculator("B5 – Scope 2 øvrige energileverancer", scope2.run_b5, True),
    "B6": Calculator("B6 – Scope 2 nettab i elnettet", scope2.run_b6, True),
    "B7": Calculator("B7 – Dokumenteret vedvarende el", credits.run_b7, True),
    "B8": Calculator("B8 – Egenproduceret vedvarende el", credits.run_b8, True),
    "B9": Calculator("B9 – Fysisk PPA for vedvarende el", credits.run_b9, True),
    "B10": Calculator("B10 – Virtuel PPA for vedvarende el", credits.run_b10, True),
    "B11": Calculator("B11 – Time-matchede certifikater for vedvarende el", credits.run_b11, True),
    "C1": Calculator("C1 – Medarbejderpendling", scope3_activities.run_c1, True),
    "C2": Calculator("C2 – Forretningsrejser", scope3_activities.run_c2, True),
    "C3": Calculator("C3 – Brændstof- og energirelaterede aktiviteter", scope3_activities.run_c3, True),
    "C4": Calculator("C4 – Transport og distribution (upstream)", scope3_activities.run_c4, True),
    "C5": Calculator("C5 – Affald fra drift (upstream)", scope3_activities.run_c5, True),
    "C6": Calculator("C6 – Udlejede aktiver (upstream)", scope3_activities.run_c6, True),
    "C7": Calculator("C7 – Transport og distribution (downstream)", scope3_activities.run_c7, True),
    "C8": Calculator("C8 – Udlejede aktiver (downstream)", scope3_activities.run_c8, True),
    "C9": Calculator("C9 – Forarbejdning af solgte produkter", scope3_activities.run_c9, True),
    "C10": Calculator("C10 – Upstream leasede aktiver", scope3_lines.run_c10, True),
    "C11": Calculator("C11 – Downstream leasede aktiver", scope3_lines.run_c11, True),
    "C12": Calculator("C12 – Franchising og downstream services", scope3_lines.run_c12, True),
    "C13": Calculator("C13 – Investeringer og finansielle aktiviteter", scope3_lines.run_c13, True),
    "C14": Calculator("C14 – Behandling af solgte produkter", scope3_lines.run_c14, True),
    "C15": Calculator("C15 – Øvrige kategorioplysninger", scope3_lines.run_c15, True),
    "E1Scenarios": Calculator("E1 – Klimascenarier", climate_disclosures.run_e1_scenarios, False),
    "E1CarbonPrice": Calculator("E1 – Interne CO₂-priser", climate_disclosures.run_e1_carbon_price, False),
    "E1RiskGeography": Calculator("E1 – Risikogeografi", climate_disclosures.run_e1_risk_geography, False),
    "E1DecarbonisationDrivers": Calculator(
        "E1 – Decarboniseringsdrivere", climate_disclosures.run_e1_decarbonisation_drivers, False
    ),
    "E1Targets": Calculator("E1 – Klimamål og handlinger", climate_targets.run_e1_targets, False),
    "E2Water": Calculator("E2 – Vandforbrug og vandstress", environment.run_e2_water, False),
    "E3Pollution": Calculator("E3 – Emissioner til luft, vand og jord", environment.run_e3_pollution, False),
    "E4Biodiversity": Calculator("E4 – Påvirkning af biodiversitet", environment.run_e4_biodiversity, False),
    "E5Resources": Calculator("E5 – Ressourcer og materialeforbrug", environment.run_e5_resources, False),
    "SBM": Calculator("ESRS 2 – Strategi og forretningsmodel (SBM)", esrs2.run_sbm, False),
    "GOV": Calculator("ESRS 2 – Governance (GOV)", esrs2.run_gov, False),
    "IRO": Calculator("ESRS 2 – Impacts, risici og muligheder (IRO)", esrs2.run_iro, False),
    "MR": Calculator("ESRS 2 – Metrics og targets (MR)", esrs2.run_mr, False),
    "S1": Calculator("S1 – Arbejdsstyrke & headcount", social.run_s1, False),
    "S2": Calculator("S2 – Værdikædearbejdere", social.run_s2, False),
    "S3": Calculator("S3 – Lokalsamfund og påvirkninger", social.run_s3, False),
    "S4": Calculator("S4 – Forbrugere og slutbrugere", social.run_s4, False),
    "G1": Calculator("G1 – Governance-politikker & targets", governance.run_g1, False),
    "D1": Calculator("D1 – Metode & governance", esrs2.run_d1, False),
    "D2": Calculator("D2 – Dobbelt væsentlighed & CSRD-gaps", materiality.run_d2, False),
}

MODULE_IDS = tuple(CALCULATORS)


class UnknownModuleError(ValueError):
    def __init__(self, module_id):
        super().__init__(f"Unknown module id: {module_id!r}")
        self.module_id = module_id


def module_title(module_id):
    return _calculator(module_id).title


def _calculator(module_id):
    calculator = CALCULATORS.get(module_id)
    if calculator is None:
        raise UnknownModuleError(module_id)
    return calculator


def run_module(module_id, input_data):
    calculator = _calculator(module_id)
    result = calculator.run(input_data or {})
    if calculator.applies_insights:
        return result
    return with_e1_insights(module_id, input_data or {}, result)


def aggregate_results(input_data):
    """Run every module in canonical order."""
    results = []
    for module_id in MODULE_IDS:
        results.append({
            "moduleId": module_id,
            "title": CALCULATORS[module_id].title,
            "result": run_module(module_id, input_data),
        })
    logger.info("Aggregated %d module results", len(results))
    return results


def _render_raw(raw):
    if raw is None:
        return ""
    return format_number(raw)


def create_default_result(module_id, input_data):
    """Identity calculator: the raw module field times the default factor."""
    raw = input_data.get(module_id) if isinstance(input_data, dict) else None
    number = coerce_number(0 if raw is None else raw)
    return {
        "value": 0 if number is None else number * DEFAULT_FACTOR,
        "unit": "point",
        "assumptions": [f"Standardfaktor: {DEFAULT_FACTOR}"],
        "trace": [f"Input({module_id})={_render_raw(raw)}"],
        "warnings": [],
    }
