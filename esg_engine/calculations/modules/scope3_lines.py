"""
C10-C15: Scope 3 line-item categories

Every calculator walks a list of rows through the same pipeline:
- rows with no filled-in field are skipped without a warning
- the row's category is resolved and its numbers sanitised
- the emission factor comes from a fixed table keyed by category
- rows that contribute nothing are dropped with a warning
- emissions = quantity x factor, summed and converted to tonnes

C10/C11 derive energy from floor area when no consumption is reported.
"""

from esg_engine.calculations.e1_insights import with_e1_insights
from esg_engine.calculations.factors import FACTORS
from esg_engine.calculations.formatting import format_number, round_to
from esg_engine.calculations.results import build_result
from esg_engine.calculations.sanitize import as_number, has_any_field, rows, section, text_value

LEASED_ASSET_ENERGY_TYPES = {
    "electricity": {"label": "Elektricitet", "intensity": "default_electricity_intensity_kwh_per_sqm",
                    "factor": "default_electricity_emission_factor_kg_per_kwh"},
    "heat": {"label": "Varme", "intensity": "default_heat_intensity_kwh_per_sqm",
             "factor": "default_heat_emission_factor_kg_per_kwh"},
}

C12_EMISSION_FACTORS = {
    "retailRevenue": {"label": "Detailhandel – omsætning", "basis": "revenue", "factor": 0.00035},
    "foodServiceRevenue": {"label": "Fødevare- og servicefranchises – omsætning", "basis": "revenue",
                           "factor": 0.00052},
    "hospitalityRevenue": {"label": "Hotel & oplevelse – omsætning", "basis": "revenue", "factor": 0.00042},
    "genericRevenue": {"label": "Anden franchise – omsætning", "basis": "revenue", "factor": 0.0003},
    "electricityEnergy": {"label": "Elektricitet – energiforbrug", "basis": "energy", "factor": 0.18},
    "districtHeatEnergy": {"label": "Fjernvarme – energiforbrug", "basis": "energy", "factor": 0.07},
    "mixedEnergy": {"label": "Branchemix – energiforbrug", "basis": "energy", "factor": 0.12},
}
C12_DEFAULT_FACTOR_BY_BASIS = {"revenue": "retailRevenue", "energy": "electricityEnergy"}

C13_EMISSION_FACTORS = {
    "listedEquity": {"label": "Børsnoterede aktier", "factor": 0.00028},
    "corporateBonds": {"label": "Virksomhedsobligationer", "factor": 0.00019},
    "sovereignBonds": {"label": "Statsobligationer", "factor": 0.00012},
    "privateEquity": {"label": "Unoteret kapital (private equity)", "factor": 0.00045},
    "realEstate": {"label": "Ejendomsinvesteringer", "factor": 0.00036},
    "infrastructure": {"label": "Infrastrukturfonde", "factor": 0.0004},
    "diversifiedPortfolio": {"label": "Diversificeret portefølje", "factor": 0.00025},
}
C13_DEFAULT_FACTOR = "listedEquity"

C14_TREATMENT_TYPES = ("recycling", "incineration", "landfill")
C14_EMISSION_FACTORS = {
    "recyclingConservative": {"label": "Genanvendelse – blandet fraktion", "treatment": "recycling", "factor": 200},
    "recyclingOptimised": {"label": "Genanvendelse – høj kvalitet", "treatment": "recycling", "factor": 120},
    "incinerationEnergyRecovery": {"label": "Forbrænding med energiudnyttelse", "treatment": "incineration",
                                   "factor": 650},
    "incinerationNoRecovery": {"label": "Forbrænding uden energiudnyttelse", "treatment": "incineration",
                               "factor": 900},
    "landfillManaged": {"label": "Deponi – kontrolleret anlæg", "treatment": "landfill", "factor": 1000},
    "landfillUnmanaged": {"label": "Deponi – ukontrolleret anlæg", "treatment": "landfill", "factor": 1400},
}
C14_DEFAULT_FACTOR_BY_TREATMENT = {
    "recycling": "recyclingConservative",
    "incineration": "incinerationEnergyRecovery",
    "landfill": "landfillManaged",
}

C15_CATEGORY_LABELS = {
    "1": "Kategori 1 – Indkøbte varer og services",
    "2": "Kategori 2 – Kapitalgoder",
    "3": "Kategori 3 – Brændstof- og energirelaterede emissioner (upstream)",
    "4": "Kategori 4 – Upstream transport og distribution",
    "5": "Kategori 5 – Affald fra drift",
    "6": "Kategori 6 – Forretningsrejser",
    "7": "Kategori 7 – Medarbejderpendling",
    "8": "Kategori 8 – Upstream leasede aktiver",
    "9": "Kategori 9 – Downstream transport og distribution",
    "10": "Kategori 10 – Forarbejdning af solgte produkter",
    "11": "Kategori 11 – Brug af solgte produkter",
    "12": "Kategori 12 – End-of-life for solgte produkter",
    "13": "Kategori 13 – Downstream leasede aktiver",
    "14": "Kategori 14 – Franchises",
    "15": "Kategori 15 – Investeringer",
}
C15_EMISSION_FACTORS = {
    "category1Spend": {"label": "Spend-baseret screening", "category": "1", "factor": 0.28},
    "category2Spend": {"label": "Spend-baseret screening", "category": "2", "factor": 0.22},
    "category3Energy": {"label": "Energiintensitet (upstream)", "category": "3", "factor": 0.16},
    "category4Logistics": {"label": "Logistik-intensitet", "category": "4", "factor": 0.12},
    "category5Waste": {"label": "Affaldsbehandling", "category": "5", "factor": 320},
    "category6Travel": {"label": "Rejseaktivitet", "category": "6", "factor": 0.15},
    "category7Commuting": {"label": "Pendling", "category": "7", "factor": 0.12},
    "category8LeasedAssets": {"label": "Leasede aktiver – energi", "category": "8", "factor": 0.18},
    "category9DownstreamTransport": {"label": "Transport (downstream)", "category": "9", "factor": 0.11},
    "category10Processing": {"label": "Forarbejdning", "category": "10", "factor": 410},
    "category11UsePhase": {"label": "Brugsfase", "category": "11", "factor": 120},
    "category12EndOfLife": {"label": "End-of-life", "category": "12", "factor": 540},
    "category13LeasedAssetsDownstream": {"label": "Leasede aktiver (downstream)", "category": "13",
                                         "factor": 0.17},
    "category14Franchises": {"label": "Franchiseaktivitet", "category": "14", "factor": 0.24},
    "category15Investments": {"label": "Investeringer", "category": "15", "factor": 0.35},
}
C15_DEFAULT_FACTOR_BY_CATEGORY = {
    config["category"]: key for key, config in C15_EMISSION_FACTORS.items()
}


def _conversion_assumption(factors):
    return f"Konvertering fra kg til ton: {format_number(factors['kg_to_tonnes'])}."


def _known_key(value, table):
    return isinstance(value, str) and value in table


def _row_amount(value, field, line_no, warnings, emit_missing):
    number = as_number(value)
    if number is None:
        if emit_missing:
            warnings.append(f"Feltet {field} mangler på linje {line_no} og behandles som 0.")
        return 0
    if number < 0:
        warnings.append(f"Feltet {field} kan ikke være negativt på linje {line_no}. 0 anvendes i stedet.")
        return 0
    return number


def _documentation_quality(value, line_no, factors, warnings, emit_missing=True,
                           negative_fallback="0% anvendes i stedet.", flag_invalid=False):
    default = factors["default_documentation_quality_percent"]
    number = as_number(value)
    if number is None:
        if value is not None and flag_invalid:
            warnings.append(f"Dokumentationskvalitet er ugyldig på linje {line_no}. Standard ({default}%) anvendes.")
        elif emit_missing:
            warnings.append(f"Dokumentationskvalitet mangler på linje {line_no}. Standard ({default}%) anvendes.")
        return default
    if number < 0:
        warnings.append(f"Dokumentationskvalitet kan ikke være negativ på linje {line_no}. {negative_fallback}")
        return 0
    if number > 100:
        warnings.append(f"Dokumentationskvalitet er begrænset til 100% på linje {line_no}.")
        return 100
    return number


def _run_lines(module_id, input_data, rows_key, signal_fields, normalise, describe,
               assumptions, no_lines_warning, advice="Overvej at forbedre grundlaget."):
    """Shared row pipeline.

    `normalise(row, line_no, warnings, emit_missing)` returns a sanitised
    line or None; `describe(line)` returns (trace pairs, emissions kg,
    documentation label).
    """
    factors = FACTORS[module_id.lower()]
    warnings = []
    raw_rows = rows(section(input_data, module_id), rows_key)
    emit_missing = any(has_any_field(row, signal_fields) for row in raw_rows)

    lines = []
    for index, row in enumerate(raw_rows):
        if not has_any_field(row, signal_fields):
            continue
        line = normalise(row, index + 1, warnings, emit_missing)
        if line is not None:
            lines.append(line)

    if not lines and emit_missing:
        warnings.append(no_lines_warning)

    total_kg = 0
    trace = []
    for index, line in enumerate(lines):
        pairs, emissions_kg, label = describe(line)
        total_kg += emissions_kg
        prefix = f"line[{index}]."
        for key, value in pairs:
            trace.append(f"{prefix}{key}={format_number(value)}")
        trace.append(f"{prefix}emissionsKg={format_number(emissions_kg)}")
        trace.append(f"{prefix}emissionsTonnes={format_number(emissions_kg * factors['kg_to_tonnes'])}")

        quality = line["documentationQualityPercent"]
        if quality < factors["low_documentation_quality_threshold_percent"]:
            warnings.append(
                f"Dokumentationskvalitet for {label} på linje {index + 1} er kun {format_number(quality)}%. {advice}"
            )

    total_tonnes = total_kg * factors["kg_to_tonnes"]
    trace.append(f"totalEmissionsKg={format_number(total_kg)}")
    trace.append(f"totalEmissionsTonnes={format_number(total_tonnes)}")

    result = build_result(
        round_to(total_tonnes, factors["result_precision"]), factors["unit"], assumptions, trace, warnings
    )
    return with_e1_insights(module_id, input_data, result)


def _run_leased_assets(module_id, input_data):
    factors = FACTORS[module_id.lower()]
    electricity = LEASED_ASSET_ENERGY_TYPES["electricity"]
    heat = LEASED_ASSET_ENERGY_TYPES["heat"]
    assumptions = [
        "Manglende energiforbrug omregnes fra areal med "
        f"{format_number(factors[electricity['intensity']])} kWh/m² for el og "
        f"{format_number(factors[heat['intensity']])} kWh/m² for varme.",
        "Hvis emissionsfaktor mangler, anvendes standardværdier: el "
        f"{format_number(factors[electricity['factor']])} kg CO2e/kWh og varme "
        f"{format_number(factors[heat['factor']])} kg CO2e/kWh.",
        _conversion_assumption(factors),
    ]

    def normalise(row, line_no, warnings, emit_missing):
        energy_type = row.get("energyType")
        if not _known_key(energy_type, LEASED_ASSET_ENERGY_TYPES):
            energy_type = "electricity"
            warnings.append(
                f"Ukendt energitype på linje {line_no}. "
                f"Standard ({LEASED_ASSET_ENERGY_TYPES[energy_type]['label']}) anvendes."
            )
        config = LEASED_ASSET_ENERGY_TYPES[energy_type]

        floor_area = _row_amount(row.get("floorAreaSqm"), "floorAreaSqm", line_no, warnings, emit_missing)
        energy = _row_amount(
            row.get("energyConsumptionKwh"), "energyConsumptionKwh", line_no, warnings, emit_missing
        )

        emission_factor = as_number(row.get("emissionFactorKgPerKwh"))
        if emission_factor is None:
            if emit_missing:
                warnings.append(
                    f"Emissionsfaktor mangler på linje {line_no}. Standardfaktor for {config['label']} anvendes."
                )
            emission_factor = factors[config["factor"]]
        elif emission_factor < 0:
            warnings.append(f"Emissionsfaktoren kan ikke være negativ på linje {line_no}. 0 anvendes i stedet.")
            emission_factor = 0

        quality = _documentation_quality(row.get("documentationQualityPercent"), line_no, factors, warnings,
                                         emit_missing)

        if floor_area == 0 and energy == 0:
            warnings.append(f"Linje {line_no} mangler både areal og energiforbrug og udelades fra beregningen.")
            return None
        return {
            "energyType": energy_type,
            "floorAreaSqm": floor_area,
            "energyConsumptionKwh": energy,
            "emissionFactorKgPerKwh": emission_factor,
            "documentationQualityPercent": quality,
        }

    def describe(line):
        config = LEASED_ASSET_ENERGY_TYPES[line["energyType"]]
        reported = line["energyConsumptionKwh"] > 0
        derived_kwh = line["floorAreaSqm"] * factors[config["intensity"]]
        energy_kwh = line["energyConsumptionKwh"] if reported else derived_kwh
        pairs = [
            ("energyType", line["energyType"]),
            ("floorAreaSqm", line["floorAreaSqm"]),
            ("energyConsumptionKwh", line["energyConsumptionKwh"]),
            ("emissionFactorKgPerKwh", line["emissionFactorKgPerKwh"]),
            ("documentationQualityPercent", line["documentationQualityPercent"]),
            ("energyBasis", "reported" if reported else "areaDerived"),
            ("derivedEnergyKwh", derived_kwh),
            ("effectiveEnergyKwh", energy_kwh),
        ]
        return pairs, energy_kwh * line["emissionFactorKgPerKwh"], config["label"]

    return _run_lines(
        module_id,
        input_data,
        rows_key="leasedAssetLines",
        signal_fields=("floorAreaSqm", "energyConsumptionKwh", "emissionFactorKgPerKwh",
                       "documentationQualityPercent"),
        normalise=normalise,
        describe=describe,
        assumptions=assumptions,
        no_lines_warning="Ingen gyldige leasede aktiver kunne beregnes. Kontrollér indtastningerne.",
    )


def run_c10(input_data):
    return _run_leased_assets("C10", input_data)


def run_c11(input_data):
    return _run_leased_assets("C11", input_data)


def run_c12(input_data):
    factors = FACTORS["c12"]
    revenue_default = C12_EMISSION_FACTORS[C12_DEFAULT_FACTOR_BY_BASIS["revenue"]]["label"]
    energy_default = C12_EMISSION_FACTORS[C12_DEFAULT_FACTOR_BY_BASIS["energy"]]["label"]
    assumptions = [
        "Omsætning multipliceres med branchefaktoren (kg CO2e/DKK), og energiforbrug multipliceres med "
        "kWh-faktoren for den valgte basis.",
        "Manglende emissionsfaktor erstattes af standardværdien for basis "
        f"(omsætning: {revenue_default}, energi: {energy_default}).",
        f"Manglende dokumentationskvalitet sættes til {factors['default_documentation_quality_percent']}%.",
        _conversion_assumption(factors),
    ]

    def normalise(row, line_no, warnings, emit_missing):
        basis = row.get("activityBasis")
        if basis not in ("revenue", "energy"):
            basis = "revenue"
            warnings.append(f"Ukendt aktivitetsbasis på linje {line_no}. Omsætning anvendes som standard.")

        revenue = _row_amount(row.get("revenueDkk"), "revenueDkk", line_no, warnings, emit_missing)
        energy = _row_amount(row.get("energyConsumptionKwh"), "energyConsumptionKwh", line_no, warnings,
                             emit_missing)
        metric = revenue if basis == "revenue" else energy
        if metric == 0:
            missing_driver = "omsætning" if basis == "revenue" else "energiforbrug"
            warnings.append(f"Linje {line_no} mangler {missing_driver} og udelades fra beregningen.")
            return None

        fallback_key = C12_DEFAULT_FACTOR_BY_BASIS[basis]
        fallback_label = C12_EMISSION_FACTORS[fallback_key]["label"]
        key = row.get("emissionFactorKey")
        if key is None:
            warnings.append(f"Emissionsfaktor mangler på linje {line_no}. Standardfaktor for {fallback_label} anvendes.")
            key = fallback_key
        elif not _known_key(key, C12_EMISSION_FACTORS) or C12_EMISSION_FACTORS[key]["basis"] != basis:
            basis_label = "omsætning" if basis == "revenue" else "energiforbrug"
            warnings.append(
                f"Emissionsfaktor på linje {line_no} passer ikke til {basis_label}. Standard ({fallback_label}) anvendes."
            )
            key = fallback_key

        quality = _documentation_quality(row.get("documentationQualityPercent"), line_no, factors, warnings,
                                         emit_missing, negative_fallback="0% anvendes.")
        return {
            "activityBasis": basis,
            "metricValue": metric,
            "emissionFactorKey": key,
            "documentationQualityPercent": quality,
        }

    def describe(line):
        config = C12_EMISSION_FACTORS[line["emissionFactorKey"]]
        pairs = [
            ("activityBasis", line["activityBasis"]),
            ("metricValue", line["metricValue"]),
            ("emissionFactorKey", line["emissionFactorKey"]),
            ("emissionFactorValue", config["factor"]),
            ("documentationQualityPercent", line["documentationQualityPercent"]),
        ]
        return pairs, line["metricValue"] * config["factor"], config["label"]

    return _run_lines(
        "C12",
        input_data,
        rows_key="franchiseLines",
        signal_fields=("revenueDkk", "energyConsumptionKwh", "emissionFactorKey", "documentationQualityPercent"),
        normalise=normalise,
        describe=describe,
        assumptions=assumptions,
        no_lines_warning="Ingen gyldige franchiselinjer kunne beregnes. Kontrollér indtastningerne.",
    )


def run_c13(input_data):
    factors = FACTORS["c13"]
    fallback = C13_EMISSION_FACTORS[C13_DEFAULT_FACTOR]
    assumptions = [
        "Investeringer multipliceres med emissionsintensiteten (kg CO2e/DKK) for at beregne porteføljens emissioner.",
        f"Manglende emissionsfaktor erstattes af standarden {fallback['label']}.",
        f"Manglende dokumentationskvalitet sættes til {factors['default_documentation_quality_percent']}%.",
        _conversion_assumption(factors),
    ]

    def normalise(row, line_no, warnings, emit_missing):
        amount = _row_amount(row.get("investedAmountDkk"), "investedAmountDkk", line_no, warnings, emit_missing)
        if amount == 0:
            warnings.append(f"Linje {line_no} mangler investeret beløb og udelades fra beregningen.")
            return None

        key = row.get("emissionFactorKey")
        if key is None:
            if emit_missing:
                warnings.append(f"Emissionsfaktor mangler på linje {line_no}. Standard ({fallback['label']}) anvendes.")
            key = C13_DEFAULT_FACTOR
        elif not _known_key(key, C13_EMISSION_FACTORS):
            warnings.append(f"Ukendt emissionsfaktor på linje {line_no}. Standard ({fallback['label']}) anvendes.")
            key = C13_DEFAULT_FACTOR

        quality = _documentation_quality(row.get("documentationQualityPercent"), line_no, factors, warnings,
                                         emit_missing, negative_fallback="0 anvendes i stedet.", flag_invalid=True)
        return {"investedAmountDkk": amount, "emissionFactorKey": key, "documentationQualityPercent": quality}

    def describe(line):
        config = C13_EMISSION_FACTORS[line["emissionFactorKey"]]
        pairs = [
            ("investedAmountDkk", line["investedAmountDkk"]),
            ("emissionFactorKey", line["emissionFactorKey"]),
            ("emissionFactorValue", config["factor"]),
            ("documentationQualityPercent", line["documentationQualityPercent"]),
        ]
        return pairs, line["investedAmountDkk"] * config["factor"], config["label"]

    return _run_lines(
        "C13",
        input_data,
        rows_key="investmentLines",
        signal_fields=("investedAmountDkk", "emissionFactorKey", "documentationQualityPercent"),
        normalise=normalise,
        describe=describe,
        assumptions=assumptions,
        no_lines_warning="Ingen gyldige investeringslinjer kunne beregnes. Kontrollér indtastningerne.",
    )


def run_c14(input_data):
    factors = FACTORS["c14"]
    assumptions = [
        "Behandling af solgte produkter beregnes ved at multiplicere tonnage med den valgte behandlingsfaktor "
        "(kg CO2e/ton).",
        "Manglende eller ugyldig behandlingsform antages som genanvendelse.",
        "Manglende emissionsfaktor erstattes af standarden for den valgte behandlingsform.",
        f"Manglende dokumentationskvalitet sættes til {factors['default_documentation_quality_percent']}%.",
        _conversion_assumption(factors),
    ]

    def normalise(row, line_no, warnings, emit_missing):
        treatment = row.get("treatmentType")
        if treatment not in C14_TREATMENT_TYPES:
            if treatment is not None:
                warnings.append(f"Ukendt behandlingstype på linje {line_no}. Genanvendelse anvendes som standard.")
            treatment = "recycling"

        tonnage = _row_amount(row.get("tonnesTreated"), "tonnesTreated", line_no, warnings, emit_missing)
        if tonnage == 0:
            warnings.append(f"Linje {line_no} mangler tonnage og udelades fra beregningen.")
            return None

        fallback_key = C14_DEFAULT_FACTOR_BY_TREATMENT[treatment]
        fallback_label = C14_EMISSION_FACTORS[fallback_key]["label"]
        key = row.get("emissionFactorKey")
        if key is None:
            if emit_missing:
                warnings.append(f"Emissionsfaktor mangler på linje {line_no}. Standard ({fallback_label}) anvendes.")
            key = fallback_key
        elif not _known_key(key, C14_EMISSION_FACTORS):
            warnings.append(f"Ukendt emissionsfaktor på linje {line_no}. Standard ({fallback_label}) anvendes.")
            key = fallback_key
        elif C14_EMISSION_FACTORS[key]["treatment"] != treatment:
            warnings.append(
                f"Valgt emissionsfaktor passer ikke til behandlingen på linje {line_no}. "
                f"Standard ({fallback_label}) anvendes."
            )
            key = fallback_key

        quality = _documentation_quality(row.get("documentationQualityPercent"), line_no, factors, warnings,
                                         emit_missing, negative_fallback="0% anvendes.")
        return {
            "treatedTonnage": tonnage,
            "treatmentType": treatment,
            "emissionFactorKey": key,
            "documentationQualityPercent": quality,
        }

    def describe(line):
        config = C14_EMISSION_FACTORS[line["emissionFactorKey"]]
        pairs = [
            ("treatedTonnage", line["treatedTonnage"]),
            ("treatmentType", line["treatmentType"]),
            ("emissionFactorKey", line["emissionFactorKey"]),
            ("emissionFactorValue", config["factor"]),
            ("documentationQualityPercent", line["documentationQualityPercent"]),
        ]
        return pairs, line["treatedTonnage"] * config["factor"], config["label"]

    return _run_lines(
        "C14",
        input_data,
        rows_key="treatmentLines",
        signal_fields=("tonnesTreated", "treatmentType", "emissionFactorKey", "documentationQualityPercent"),
        normalise=normalise,
        describe=describe,
        assumptions=assumptions,
        no_lines_warning="Ingen gyldige behandlingslinjer kunne beregnes. Kontrollér indtastningerne.",
    )


def _clip_text(value, max_length):
    text = text_value(value)
    return text[:max_length] if text else None


def run_c15(input_data):
    factors = FACTORS["c15"]
    assumptions = [
        "Screening af øvrige Scope 3-kategorier beregnes ved at multiplicere de estimerede mængder med "
        "valgte emissionsfaktorer.",
        f"Hvis kategori mangler, anvendes {C15_CATEGORY_LABELS['1']}.",
        "Manglende emissionsfaktor erstattes af standardværdien for kategorien.",
        f"Manglende dokumentationskvalitet sættes til {factors['default_documentation_quality_percent']}%.",
        _conversion_assumption(factors),
    ]

    def normalise(row, line_no, warnings, emit_missing):
        category = row.get("category")
        if not _known_key(category, C15_CATEGORY_LABELS):
            if category is not None:
                warnings.append(
                    f"Ukendt kategori på linje {line_no}. {C15_CATEGORY_LABELS['1']} anvendes som standard."
                )
            category = "1"
        category_label = C15_CATEGORY_LABELS[category]

        raw_quantity = row.get("estimatedQuantity")
        quantity = as_number(raw_quantity)
        if raw_quantity is None:
            quantity = 0
        elif quantity is None:
            warnings.append(f"Estimeret mængde er ugyldig på linje {line_no}. 0 anvendes i stedet.")
            quantity = 0
        elif quantity < 0:
            warnings.append(f"Estimeret mængde kan ikke være negativ på linje {line_no}. 0 anvendes i stedet.")
            quantity = 0

        key = row.get("emissionFactorKey")
        if not _known_key(key, C15_EMISSION_FACTORS):
            if key is not None:
                warnings.append(
                    f"Ugyldig emissionsfaktor valgt på linje {line_no}. Standard for {category_label} anvendes."
                )
            elif emit_missing:
                warnings.append(
                    f"Emissionsfaktor mangler på linje {line_no}. Standardfaktor for {category_label} anvendes."
                )
            key = C15_DEFAULT_FACTOR_BY_CATEGORY[category]

        quality = _documentation_quality(row.get("documentationQualityPercent"), line_no, factors, warnings,
                                         flag_invalid=True)
        return {
            "category": category,
            "description": _clip_text(row.get("description"), 240),
            "quantityUnit": _clip_text(row.get("quantityUnit"), 32),
            "estimatedQuantity": quantity,
            "emissionFactorKey": key,
            "documentationQualityPercent": quality,
        }

    def describe(line):
        config = C15_EMISSION_FACTORS[line["emissionFactorKey"]]
        pairs = [
            ("category", line["category"]),
            ("description", line["description"] or ""),
            ("quantityUnit", line["quantityUnit"] or ""),
            ("estimatedQuantity", line["estimatedQuantity"]),
            ("emissionFactorKey", line["emissionFactorKey"]),
            ("emissionFactorValue", config["factor"]),
            ("documentationQualityPercent", line["documentationQualityPercent"]),
        ]
        return pairs, line["estimatedQuantity"] * config["factor"], C15_CATEGORY_LABELS[config["category"]]

    return _run_lines(
        "C15",
        input_data,
        rows_key="screeningLines",
        signal_fields=("category", "description", "quantityUnit", "estimatedQuantity", "emissionFactorKey",
                       "documentationQualityPercent"),
        normalise=normalise,
        describe=describe,
        assumptions=assumptions,
        no_lines_warning="Ingen gyldige screeninglinjer kunne beregnes. Kontrollér indtastningerne.",
        advice="Overvej at forbedre datagrundlaget.",
    )
