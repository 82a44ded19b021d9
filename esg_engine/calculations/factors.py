"""
Factor tables for the module calculators

Static constants loaded once at import time and never mutated:
- conversion rates (kg to tonnes, percent to ratio)
- mitigation rates and caps for the Scope 1/2/3 emission modules
- scoring weights and warning thresholds for the E, S, G and D modules
- result precision and unit label per module
"""

DEFAULT_FACTOR = 1

KG_TO_TONNES = 0.001
PERCENT_TO_RATIO = 0.01
EMISSIONS_UNIT = "t CO2e"


def _emission_module(**extra):
    base = {
        "kg_to_tonnes": KG_TO_TONNES,
        "percent_to_ratio": PERCENT_TO_RATIO,
        "result_precision": 3,
        "unit": EMISSIONS_UNIT,
    }
    base.update(extra)
    return base


_DOCUMENTED_ROWS = {
    "default_documentation_quality_percent": 100,
    "low_documentation_quality_threshold_percent": 60,
}

_LEASED_ASSETS = {
    "default_electricity_intensity_kwh_per_sqm": 95,
    "default_heat_intensity_kwh_per_sqm": 80,
    "default_electricity_emission_factor_kg_per_kwh": 0.18,
    "default_heat_emission_factor_kg_per_kwh": 0.07,
    **_DOCUMENTED_ROWS,
}


FACTORS = {
    # Scope 1
    "a1": _emission_module(**_DOCUMENTED_ROWS),
    "a2": _emission_module(**_DOCUMENTED_ROWS),
    "a3": _emission_module(**_DOCUMENTED_ROWS),
    "a4": _emission_module(default_leakage_percent=10, **_DOCUMENTED_ROWS),
    # Scope 2
    "b1": _emission_module(renewable_mitigation_rate=0.9, maximum_renewable_share_percent=100),
    "b2": _emission_module(renewable_mitigation_rate=0.85, maximum_renewable_share_percent=100, recovery_credit_rate=1),
    "b3": _emission_module(renewable_mitigation_rate=0.9, maximum_renewable_share_percent=100, recovery_credit_rate=1),
    "b4": _emission_module(renewable_mitigation_rate=0.85, maximum_renewable_share_percent=100, recovery_credit_rate=1),
    "b5": _emission_module(renewable_mitigation_rate=0.8, maximum_renewable_share_percent=100, recovery_credit_rate=1),
    "b6": _emission_module(renewable_mitigation_rate=0.9, maximum_renewable_share_percent=100, maximum_grid_loss_percent=20),
    # Renewable instruments (credits)
    "b7": _emission_module(
        quality_mitigation_rate=0.95,
        maximum_documentation_percent=100,
        minimum_effective_quality_percent=10,
    ),
    "b8": _emission_module(
        quality_mitigation_rate=0.9,
        maximum_documentation_percent=100,
        minimum_effective_quality_percent=15,
    ),
    "b9": _emission_module(
        quality_mitigation_rate=0.92,
        maximum_documentation_percent=100,
        minimum_effective_quality_percent=20,
        maximum_grid_loss_percent=15,
    ),
    "b10": _emission_module(
        quality_mitigation_rate=0.88,
        maximum_documentation_percent=100,
        minimum_effective_quality_percent=25,
        maximum_settlement_percent=100,
        minimum_effective_settlement_percent=20,
    ),
    "b11": _emission_module(
        quality_mitigation_rate=0.85,
        time_matching_mitigation_rate=0.9,
        maximum_documentation_percent=100,
        minimum_effective_quality_percent=30,
        maximum_time_correlation_percent=100,
        minimum_effective_time_correlation_percent=50,
    ),
    # Scope 3
    "c1": _emission_module(maximum_days_per_week=7, maximum_weeks_per_year=52, default_weeks_per_year=46),
    "c2": _emission_module(default_hotel_emission_factor_kg_per_night=15),
    "c3": _emission_module(
        renewable_mitigation_rate=0.8,
        maximum_transmission_loss_percent=20,
        maximum_renewable_share_percent=100,
    ),
    "c4": _emission_module(
        consolidation_mitigation_rate=0.6,
        low_carbon_mitigation_rate=0.75,
        maximum_consolidation_percent=50,
        maximum_low_carbon_share_percent=100,
    ),
    "c5": _emission_module(
        recycling_mitigation_rate=0.7,
        reuse_mitigation_rate=0.8,
        maximum_recycling_recovery_percent=90,
        maximum_reuse_share_percent=60,
    ),
    "c6": _emission_module(
        electricity_renewable_mitigation_rate=0.75,
        heat_renewable_mitigation_rate=0.6,
        maximum_occupancy_percent=100,
        maximum_shared_services_percent=50,
        maximum_renewable_share_percent=100,
    ),
    "c7": _emission_module(
        low_emission_vehicle_mitigation_rate=0.7,
        renewable_warehousing_mitigation_rate=0.85,
    ),
    "c8": _emission_module(
        efficiency_mitigation_rate=0.9,
        renewable_mitigation_rate=0.85,
        default_occupancy_percent=100,
        default_landlord_share_percent=100,
        maximum_efficiency_percent=70,
        maximum_renewable_share_percent=100,
    ),
    "c9": _emission_module(
        efficiency_mitigation_rate=0.85,
        secondary_material_mitigation_rate=0.6,
        renewable_mitigation_rate=0.9,
        maximum_efficiency_percent=60,
        maximum_secondary_material_percent=80,
        maximum_renewable_share_percent=100,
    ),
    "c10": _emission_module(**_LEASED_ASSETS),
    "c11": _emission_module(**_LEASED_ASSETS),
    "c12": _emission_module(**_DOCUMENTED_ROWS),
    "c13": _emission_module(**_DOCUMENTED_ROWS),
    "c14": _emission_module(**_DOCUMENTED_ROWS),
    "c15": _emission_module(**_DOCUMENTED_ROWS),
    # Environment
    "e2_water": {
        "unit": "vandstressindeks",
        "result_precision": 1,
        "stress_weight": 0.5,
        "reuse_weight": 0.3,
        "discharge_weight": 0.2,
        "stress_warning_threshold": 0.4,
        "default_reuse_percent": 0,
        "low_data_quality_threshold_percent": 70,
        "minimum_reportable_withdrawal_m3": 10,
    },
    "e3_pollution": {
        "unit": "compliance-score",
        "result_precision": 1,
        "base_score": 100,
        "exceed_penalty_per_percent": 0.9,
        "incident_penalty": 7,
        "default_limits_tonnes": {"air": 50, "water": 20, "soil": 5},
        "documentation_warning_threshold_percent": 70,
    },
    "e4_biodiversity": {
        "unit": "biodiversitetsrisiko",
        "result_precision": 1,
        "site_weight": 0.3,
        "area_weight": 0.4,
        "incident_weight": 0.3,
        "site_normalization_count": 5,
        "area_normalization_hectares": 50,
        "incident_normalization_count": 5,
        "restoration_mitigation_rate": 0.6,
        "risk_attention_threshold": 60,
        "data_quality_warning_percent": 70,
    },
    "e5_resources": {
        "unit": "ressourceindeks",
        "result_precision": 1,
        "primary_weight": 0.35,
        "critical_weight": 0.2,
        "recycled_weight": 0.2,
        "renewable_weight": 0.15,
        "target_weight": 0.1,
        "primary_normalization_tonnes": 1000,
        "circularity_attention_threshold": 55,
        "documentation_warning_threshold_percent": 70,
    },
    # Method and materiality
    "d1": {
        "unit": "governance score",
        "max_score": 100,
        "result_precision": 1,
        "partial_text_length": 120,
        "detailed_text_length": 240,
    },
    "d2": {
        "unit": "prioritets-score (0-100)",
        "max_score": 100,
        "result_precision": 1,
        "priority_threshold": 70,
        "attention_threshold": 50,
        "summary_limit": 3,
        "gap_warning_statuses": ("missing",),
        "timeline_warning_for_priority": True,
        "responsible_warning_for_priority": True,
        "missing_financial_penalty": 0.6,
        "financial_override_justification_min_length": 20,
        "severity_weights": {"minor": 1, "moderate": 3, "major": 4, "severe": 5},
        "likelihood_weights": {"rare": 1, "unlikely": 2, "possible": 3, "likely": 4, "veryLikely": 5},
        "impact_type_modifiers": {"actual": 1, "potential": 0.85},
        "remediation_modifiers": {"none": 1, "planned": 0.9, "inPlace": 0.75},
        "timeline_weights": {"shortTerm": 1, "mediumTerm": 0.85, "longTerm": 0.7, "ongoing": 0.9},
    },
    # Social
    "s1": {
        "unit": "social score",
        "result_precision": 1,
        "total_headcount_weight": 0.35,
        "breakdown_weight": 0.35,
        "coverage_weight": 0.2,
        "labour_rights_weight": 0.1,
        "min_segments_for_full_score": 4,
        "coverage_warning_threshold_percent": 70,
        "labour_rights_warning_threshold_percent": 60,
        "fte_coverage_warning_threshold_percent": 75,
        "gender_pay_gap_warning_percent": 5,
        "absenteeism_warning_threshold_percent": 5,
        "lost_time_injury_warning_threshold": 2,
        "training_hours_minimum": 8,
        "social_protection_warning_threshold_percent": 75,
        "training_coverage_warning_threshold_percent": 70,
        "benefit_coverage_warning_threshold_percent": 60,
    },
    "s2": {
        "unit": "social score",
        "result_precision": 1,
        "coverage_weight": 0.35,
        "protection_weight": 0.25,
        "audit_weight": 0.15,
        "grievance_weight": 0.15,
        "incident_weight": 0.1,
        "severity_weights": {"high": 1, "medium": 0.6, "low": 0.3},
        "resolved_mitigation": 0.4,
        "in_progress_mitigation": 0.7,
        "default_incident_scale": 0.05,
        "open_grievance_penalty_per_case": 0.03,
        "mechanism_unknown_score": 0.5,
        "coverage_warning_threshold_percent": 70,
        "living_wage_warning_threshold_percent": 60,
        "bargaining_warning_threshold_percent": 50,
        "audit_warning_threshold_percent": 60,
    },
    "s3": {
        "unit": "social score",
        "result_precision": 1,
        "assessment_weight": 0.35,
        "high_risk_weight": 0.2,
        "grievance_weight": 0.15,
        "engagement_weight": 0.15,
        "incident_weight": 0.15,
        "severity_weights": {"high": 1.1, "medium": 0.6, "low": 0.3},
        "resolved_mitigation": 0.4,
        "in_progress_mitigation": 0.7,
        "default_incident_scale": 0.04,
        "open_grievance_penalty_per_case": 0.04,
        "assessment_warning_threshold_percent": 60,
        "high_risk_warning_threshold_percent": 30,
    },
    "s4": {
        "unit": "social score",
        "result_precision": 1,
        "coverage_weight": 0.3,
        "complaint_resolution_weight": 0.2,
        "mechanism_weight": 0.1,
        "incident_weight": 0.25,
        "data_protection_weight": 0.15,
        "severity_weights": {"high": 1, "medium": 0.5, "low": 0.2},
        "resolved_mitigation": 0.4,
        "in_progress_mitigation": 0.7,
        "default_incident_scale": 0.03,
        "complaint_resolution_warning_percent": 70,
        "escalation_warning_days": 30,
        "products_coverage_warning_percent": 60,
    },
    # Governance
    "g1": {
        "unit": "governance score",
        "result_precision": 1,
        "policy_weight": 0.4,
        "target_weight": 0.4,
        "oversight_weight": 0.2,
        "policy_status_scores": {"approved": 1, "inReview": 0.7, "draft": 0.4, "missing": 0, "retired": 0.2},
        "target_status_scores": {"onTrack": 1, "lagging": 0.6, "offTrack": 0.2, "notStarted": 0.1},
        "min_policies_for_full_score": 5,
        "min_targets_for_full_score": 5,
    },
}
