"""
C1-C9: Scope 3 activity-based categories

Single-record calculators where activity data is multiplied by emission
factors and reduced by documented mitigation shares:
- C1 employee commuting
- C2 business travel and hotel nights
- C3 fuel- and energy-related upstream activities
- C4 upstream transport, C7 downstream transport and warehousing
- C5 operational waste
- C6 upstream leased premises, C8 downstream leased premises
- C9 processing of sold products

Mitigation ratios are clamped to [0, 1] so no reduction can turn an
emission negative.
"""

from esg_engine.calculations.e1_insights import with_e1_insights
from esg_engine.calculations.factors import FACTORS
from esg_engine.calculations.formatting import format_number, round_to, to_fixed
from esg_engine.calculations.results import build_result, trace_line, trace_lines
from esg_engine.calculations.sanitize import (
    MISSING_FIELD,
    NEGATIVE_FIELD,
    NEGATIVE_PERCENT_FIELD,
    CAPPED_PERCENT_FIELD,
    clamp_number,
    clamp_ratio,
    field_number,
    field_percent,
    has_any_value,
    section,
)

_TRANSPORT_MODES = ("road", "rail", "sea", "air")


def _conversion_assumption(factors):
    return f"Konvertering fra kg til ton: {format_number(factors['kg_to_tonnes'])}"


def _finish(module_id, input_data, factors, tonnes, assumptions, trace, warnings):
    result = build_result(
        round_to(tonnes, factors["result_precision"]), factors["unit"], assumptions, trace, warnings
    )
    return with_e1_insights(module_id, input_data, result)


def _percent_with_default(raw, field, default, warnings, emit_missing, missing):
    return clamp_number(
        raw.get(field),
        warnings,
        emit_missing,
        default=default,
        maximum=100,
        missing=missing,
        negative=NEGATIVE_PERCENT_FIELD.format(field=field),
        capped=CAPPED_PERCENT_FIELD.format(field=field, maximum=100),
    )


def run_c1(input_data):
    factors = FACTORS["c1"]
    warnings = []
    raw = section(input_data, "C1")
    emit_missing = has_any_value(raw)

    employees = field_number(raw, "employeesCovered", warnings, emit_missing)
    distance = field_number(raw, "averageCommuteDistanceKm", warnings, emit_missing)
    max_days = factors["maximum_days_per_week"]
    days = clamp_number(
        raw.get("commutingDaysPerWeek"),
        warnings,
        emit_missing,
        maximum=max_days,
        missing=MISSING_FIELD.format(field="commutingDaysPerWeek"),
        negative=NEGATIVE_FIELD.format(field="commutingDaysPerWeek"),
        capped=f"Feltet commutingDaysPerWeek er begrænset til {format_number(max_days)}.",
    )
    default_weeks = factors["default_weeks_per_year"]
    max_weeks = factors["maximum_weeks_per_year"]
    weeks = clamp_number(
        raw.get("weeksPerYear"),
        warnings,
        emit_missing,
        default=default_weeks,
        maximum=max_weeks,
        missing=f"Antager {default_weeks} arbejdsuger om året, da feltet weeksPerYear mangler.",
        negative=NEGATIVE_FIELD.format(field="weeksPerYear"),
        capped=f"Feltet weeksPerYear er begrænset til {max_weeks} uger.",
    )
    remote_share = field_percent(raw, "remoteWorkSharePercent", 100, warnings, emit_missing)
    emission_factor = field_number(raw, "emissionFactorKgPerKm", warnings, emit_missing)

    remote_ratio = clamp_ratio(remote_share * factors["percent_to_ratio"])
    days_per_employee = days * weeks
    effective_days = days_per_employee * (1 - remote_ratio)
    total_days = employees * effective_days
    total_distance = total_days * distance
    emissions_kg = total_distance * emission_factor
    emissions_tonnes = emissions_kg * factors["kg_to_tonnes"]

    assumptions = [
        f"Pendling beregnes ud fra {format_number(weeks)} arbejdsuger om året.",
        _conversion_assumption(factors),
    ]
    trace = trace_lines([
        ("employeesCovered", employees),
        ("averageCommuteDistanceKm", distance),
        ("commutingDaysPerWeek", days),
        ("weeksPerYear", weeks),
        ("remoteWorkSharePercent", remote_share),
        ("emissionFactorKgPerKm", emission_factor),
        ("totalCommuteDays", total_days),
        ("totalDistanceKm", total_distance),
        ("emissionsKg", emissions_kg),
        ("emissionsTonnes", emissions_tonnes),
    ])
    return _finish("C1", input_data, factors, emissions_tonnes, assumptions, trace, warnings)


def run_c2(input_data):
    factors = FACTORS["c2"]
    warnings = []
    raw = section(input_data, "C2")
    emit_missing = has_any_value(raw)

    values = {}
    for mode in ("air", "rail", "road"):
        values[f"{mode}TravelDistanceKm"] = field_number(raw, f"{mode}TravelDistanceKm", warnings, emit_missing)
        values[f"{mode}EmissionFactorKgPerKm"] = field_number(
            raw, f"{mode}EmissionFactorKgPerKm", warnings, emit_missing
        )
    values["hotelNights"] = field_number(raw, "hotelNights", warnings, emit_missing)
    default_hotel = factors["default_hotel_emission_factor_kg_per_night"]
    values["hotelEmissionFactorKgPerNight"] = clamp_number(
        raw.get("hotelEmissionFactorKgPerNight"),
        warnings,
        emit_missing,
        default=default_hotel,
        missing=f"Feltet hotelEmissionFactorKgPerNight mangler. Standardfaktoren {default_hotel} anvendes.",
        negative=NEGATIVE_FIELD.format(field="hotelEmissionFactorKgPerNight"),
    )
    values["virtualMeetingSharePercent"] = field_percent(
        raw, "virtualMeetingSharePercent", 100, warnings, emit_missing
    )

    travel_kg = (
        values["airTravelDistanceKm"] * values["airEmissionFactorKgPerKm"]
        + values["railTravelDistanceKm"] * values["railEmissionFactorKgPerKm"]
        + values["roadTravelDistanceKm"] * values["roadEmissionFactorKgPerKm"]
    )
    virtual_ratio = clamp_ratio(values["virtualMeetingSharePercent"] * factors["percent_to_ratio"])
    adjusted_travel_kg = travel_kg * (1 - virtual_ratio)
    accommodation_kg = values["hotelNights"] * values["hotelEmissionFactorKgPerNight"]
    total_kg = adjusted_travel_kg + accommodation_kg
    emissions_tonnes = total_kg * factors["kg_to_tonnes"]

    assumptions = [
        "Virtuelle møder reducerer rejseemissioner med "
        f"{format_number(values['virtualMeetingSharePercent'])}% af transportandelen.",
        "Hotelovernatninger anvender en emissionsfaktor på "
        f"{format_number(values['hotelEmissionFactorKgPerNight'])} kg CO2e pr. nat.",
        _conversion_assumption(factors),
    ]
    trace = trace_lines(list(values.items()) + [
        ("travelEmissionsKg", travel_kg),
        ("virtualReductionRatio", virtual_ratio),
        ("adjustedTravelEmissionsKg", adjusted_travel_kg),
        ("accommodationEmissionsKg", accommodation_kg),
        ("totalEmissionsKg", total_kg),
        ("emissionsTonnes", emissions_tonnes),
    ])
    return _finish("C2", input_data, factors, emissions_tonnes, assumptions, trace, warnings)


def run_c3(input_data):
    factors = FACTORS["c3"]
    warnings = []
    raw = section(input_data, "C3")
    emit_missing = has_any_value(raw)

    electricity = field_number(raw, "purchasedElectricityKwh", warnings, emit_missing)
    electricity_factor = field_number(raw, "electricityUpstreamEmissionFactorKgPerKwh", warnings, emit_missing)
    transmission_loss = field_percent(
        raw, "transmissionLossPercent", factors["maximum_transmission_loss_percent"], warnings, emit_missing
    )
    renewable_share = field_percent(
        raw, "renewableSharePercent", factors["maximum_renewable_share_percent"], warnings, emit_missing
    )
    fuel = field_number(raw, "fuelConsumptionKwh", warnings, emit_missing)
    fuel_factor = field_number(raw, "fuelUpstreamEmissionFactorKgPerKwh", warnings, emit_missing)

    loss_multiplier = 1 + transmission_loss * factors["percent_to_ratio"]
    renewable_ratio = renewable_share * factors["percent_to_ratio"] * factors["renewable_mitigation_rate"]
    renewable_multiplier = max(0, 1 - min(renewable_ratio, 1))
    electricity_kg = electricity * electricity_factor * loss_multiplier * renewable_multiplier
    fuel_kg = fuel * fuel_factor
    total_kg = electricity_kg + fuel_kg
    emissions_tonnes = total_kg * factors["kg_to_tonnes"]

    assumptions = [
        f"Transmissions- og distributionsspild øger el-delen med {format_number(transmission_loss)}%.",
        "Den vedvarende andel reducerer el-delen med faktor "
        f"{format_number(factors['renewable_mitigation_rate'])} af {format_number(renewable_share)}%.",
        _conversion_assumption(factors),
    ]
    trace = trace_lines([
        ("purchasedElectricityKwh", electricity),
        ("electricityUpstreamEmissionFactorKgPerKwh", electricity_factor),
        ("transmissionLossPercent", transmission_loss),
        ("renewableSharePercent", renewable_share),
        ("fuelConsumptionKwh", fuel),
        ("fuelUpstreamEmissionFactorKgPerKwh", fuel_factor),
        ("lossMultiplier", loss_multiplier),
        ("renewableMitigationMultiplier", renewable_multiplier),
        ("electricityUpstreamKg", electricity_kg),
        ("fuelUpstreamKg", fuel_kg),
        ("totalEmissionsKg", total_kg),
        ("emissionsTonnes", emissions_tonnes),
    ])
    return _finish("C3", input_data, factors, emissions_tonnes, assumptions, trace, warnings)


def _modal_transport(raw, warnings, emit_missing):
    """Sanitised tonne-km and factor per transport mode, in form order."""
    values = {}
    for mode in _TRANSPORT_MODES:
        values[f"{mode}TonnesKm"] = field_number(raw, f"{mode}TonnesKm", warnings, emit_missing)
        values[f"{mode}EmissionFactorKgPerTonneKm"] = field_number(
            raw, f"{mode}EmissionFactorKgPerTonneKm", warnings, emit_missing
        )
    return values


def _mode_emissions(values, mode):
    return values[f"{mode}TonnesKm"] * values[f"{mode}EmissionFactorKgPerTonneKm"]


def run_c4(input_data):
    factors = FACTORS["c4"]
    warnings = []
    raw = section(input_data, "C4")
    emit_missing = has_any_value(raw)

    values = _modal_transport(raw, warnings, emit_missing)
    values["consolidationEfficiencyPercent"] = field_percent(
        raw, "consolidationEfficiencyPercent", factors["maximum_consolidation_percent"], warnings, emit_missing
    )
    values["lowCarbonSharePercent"] = field_percent(
        raw, "lowCarbonSharePercent", factors["maximum_low_carbon_share_percent"], warnings, emit_missing
    )

    modal_kg = (
        _mode_emissions(values, "road")
        + _mode_emissions(values, "rail")
        + _mode_emissions(values, "sea")
        + _mode_emissions(values, "air")
    )
    consolidation_ratio = (
        values["consolidationEfficiencyPercent"] * factors["percent_to_ratio"]
        * factors["consolidation_mitigation_rate"]
    )
    low_carbon_ratio = (
        values["lowCarbonSharePercent"] * factors["percent_to_ratio"] * factors["low_carbon_mitigation_rate"]
    )
    mitigation_multiplier = max(0, 1 - min(consolidation_ratio + low_carbon_ratio, 1))
    adjusted_kg = modal_kg * mitigation_multiplier
    emissions_tonnes = adjusted_kg * factors["kg_to_tonnes"]

    assumptions = [
        "Reduktion fra konsolidering anvender faktor "
        f"{format_number(factors['consolidation_mitigation_rate'])} af effektiviseringsprocenten.",
        "Lavemissionsløsninger reducerer med faktor "
        f"{format_number(factors['low_carbon_mitigation_rate'])} af den dokumenterede andel.",
        _conversion_assumption(factors),
    ]
    trace = trace_lines(list(values.items()) + [("totalModalEmissionsKg", modal_kg)])
    trace += [
        f"consolidationMitigationRatio={to_fixed(consolidation_ratio, 6)}",
        f"lowCarbonMitigationRatio={to_fixed(low_carbon_ratio, 6)}",
        f"mitigationMultiplier={to_fixed(mitigation_multiplier, 6)}",
        trace_line("adjustedEmissionsKg", adjusted_kg),
        trace_line("emissionsTonnes", emissions_tonnes),
    ]
    return _finish("C4", input_data, factors, emissions_tonnes, assumptions, trace, warnings)


def run_c5(input_data):
    factors = FACTORS["c5"]
    warnings = []
    raw = section(input_data, "C5")
    emit_missing = has_any_value(raw)

    streams = ("landfill", "incineration", "composting", "recycling")
    values = {}
    for stream in streams:
        values[f"{stream}WasteTonnes"] = field_number(raw, f"{stream}WasteTonnes", warnings, emit_missing)
        values[f"{stream}EmissionFactorKgPerTonne"] = field_number(
            raw, f"{stream}EmissionFactorKgPerTonne", warnings, emit_missing
        )
    values["recyclingRecoveryPercent"] = field_percent(
        raw, "recyclingRecoveryPercent", factors["maximum_recycling_recovery_percent"], warnings, emit_missing
    )
    values["reuseSharePercent"] = field_percent(
        raw, "reuseSharePercent", factors["maximum_reuse_share_percent"], warnings, emit_missing
    )

    stream_kg = {
        stream: values[f"{stream}WasteTonnes"] * values[f"{stream}EmissionFactorKgPerTonne"]
        for stream in streams
    }
    gross_kg = stream_kg["landfill"] + stream_kg["incineration"] + stream_kg["composting"] + stream_kg["recycling"]
    recycling_ratio = (
        values["recyclingRecoveryPercent"] * factors["percent_to_ratio"] * factors["recycling_mitigation_rate"]
    )
    reuse_ratio = values["reuseSharePercent"] * factors["percent_to_ratio"] * factors["reuse_mitigation_rate"]
    mitigation_multiplier = max(0, 1 - min(recycling_ratio + reuse_ratio, 1))
    adjusted_kg = gross_kg * mitigation_multiplier
    emissions_tonnes = adjusted_kg * factors["kg_to_tonnes"]

    assumptions = [
        "Genanvendelses-kreditter reducerer emissioner med faktor "
        f"{format_number(factors['recycling_mitigation_rate'])} af dokumenteret genvinding.",
        "Genbrug og donation reducerer emissioner med faktor "
        f"{format_number(factors['reuse_mitigation_rate'])} af andelen der afledes.",
        _conversion_assumption(factors),
    ]
    trace = trace_lines(
        list(values.items())
        + [(f"{stream}EmissionsKg", stream_kg[stream]) for stream in streams]
        + [("grossEmissionsKg", gross_kg)]
    )
    trace += [
        f"recyclingMitigationRatio={to_fixed(recycling_ratio, 6)}",
        f"reuseMitigationRatio={to_fixed(reuse_ratio, 6)}",
        f"mitigationMultiplier={to_fixed(mitigation_multiplier, 6)}",
        trace_line("adjustedEmissionsKg", adjusted_kg),
        trace_line("emissionsTonnes", emissions_tonnes),
    ]
    return _finish("C5", input_data, factors, emissions_tonnes, assumptions, trace, warnings)


def run_c6(input_data):
    factors = FACTORS["c6"]
    warnings = []
    raw = section(input_data, "C6")
    emit_missing = has_any_value(raw)

    floor_area = field_number(raw, "leasedFloorAreaSqm", warnings, emit_missing)
    electricity_intensity = field_number(raw, "electricityIntensityKwhPerSqm", warnings, emit_missing)
    heat_intensity = field_number(raw, "heatIntensityKwhPerSqm", warnings, emit_missing)
    occupancy = _percent_with_default(
        raw, "occupancySharePercent", factors["maximum_occupancy_percent"], warnings, emit_missing,
        missing="Feltet occupancySharePercent mangler. Antager 100% lejerandel.",
    )
    shared_services = field_percent(
        raw, "sharedServicesAllocationPercent", factors["maximum_shared_services_percent"], warnings, emit_missing
    )
    electricity_factor = field_number(raw, "electricityEmissionFactorKgPerKwh", warnings, emit_missing)
    heat_factor = field_number(raw, "heatEmissionFactorKgPerKwh", warnings, emit_missing)
    renewable_electricity = field_percent(
        raw, "renewableElectricitySharePercent", factors["maximum_renewable_share_percent"], warnings, emit_missing
    )
    renewable_heat = field_percent(
        raw, "renewableHeatSharePercent", factors["maximum_renewable_share_percent"], warnings, emit_missing
    )

    occupancy_ratio = occupancy * factors["percent_to_ratio"]
    shared_ratio = shared_services * factors["percent_to_ratio"]
    allocation_ratio = clamp_ratio(occupancy_ratio - shared_ratio)
    electricity_demand = floor_area * electricity_intensity
    heat_demand = floor_area * heat_intensity
    allocated_electricity = electricity_demand * allocation_ratio
    allocated_heat = heat_demand * allocation_ratio
    electricity_mitigation = clamp_ratio(
        renewable_electricity * factors["percent_to_ratio"] * factors["electricity_renewable_mitigation_rate"]
    )
    heat_mitigation = clamp_ratio(
        renewable_heat * factors["percent_to_ratio"] * factors["heat_renewable_mitigation_rate"]
    )
    electricity_kg = allocated_electricity * electricity_factor * (1 - electricity_mitigation)
    heat_kg = allocated_heat * heat_factor * (1 - heat_mitigation)
    total_kg = electricity_kg + heat_kg
    emissions_tonnes = total_kg * factors["kg_to_tonnes"]

    assumptions = [
        f"Energiforbruget fordeles efter {format_number(occupancy)}% lejerandel fratrukket "
        f"{format_number(shared_services)}% fælles services.",
        "Dokumenteret vedvarende el reducerer emissioner med faktor "
        f"{format_number(factors['electricity_renewable_mitigation_rate'])} af den angivne andel.",
        "Dokumenteret vedvarende varme reducerer emissioner med faktor "
        f"{format_number(factors['heat_renewable_mitigation_rate'])} af den angivne andel.",
        _conversion_assumption(factors),
    ]
    trace = trace_lines([
        ("leasedFloorAreaSqm", floor_area),
        ("electricityIntensityKwhPerSqm", electricity_intensity),
        ("heatIntensityKwhPerSqm", heat_intensity),
        ("occupancySharePercent", occupancy),
        ("sharedServicesAllocationPercent", shared_services),
        ("electricityEmissionFactorKgPerKwh", electricity_factor),
        ("heatEmissionFactorKgPerKwh", heat_factor),
        ("renewableElectricitySharePercent", renewable_electricity),
        ("renewableHeatSharePercent", renewable_heat),
        ("electricityDemandKwh", electricity_demand),
        ("heatDemandKwh", heat_demand),
    ])
    trace += [
        f"effectiveAllocationRatio={to_fixed(allocation_ratio, 6)}",
        trace_line("allocatedElectricityKwh", allocated_electricity),
        trace_line("allocatedHeatKwh", allocated_heat),
        f"electricityMitigation={to_fixed(electricity_mitigation, 6)}",
        f"heatMitigation={to_fixed(heat_mitigation, 6)}",
        trace_line("electricityEmissionsKg", electricity_kg),
        trace_line("heatEmissionsKg", heat_kg),
        trace_line("totalEmissionsKg", total_kg),
        trace_line("emissionsTonnes", emissions_tonnes),
    ]
    return _finish("C6", input_data, factors, emissions_tonnes, assumptions, trace, warnings)


def run_c7(input_data):
    factors = FACTORS["c7"]
    warnings = []
    raw = section(input_data, "C7")
    emit_missing = has_any_value(raw)

    values = _modal_transport(raw, warnings, emit_missing)
    values["warehousingEnergyKwh"] = field_number(raw, "warehousingEnergyKwh", warnings, emit_missing)
    values["warehousingEmissionFactorKgPerKwh"] = field_number(
        raw, "warehousingEmissionFactorKgPerKwh", warnings, emit_missing
    )
    values["lowEmissionVehicleSharePercent"] = field_percent(
        raw, "lowEmissionVehicleSharePercent", 100, warnings, emit_missing
    )
    values["renewableWarehousingSharePercent"] = field_percent(
        raw, "renewableWarehousingSharePercent", 100, warnings, emit_missing
    )

    road_kg = _mode_emissions(values, "road")
    rail_kg = _mode_emissions(values, "rail")
    sea_kg = _mode_emissions(values, "sea")
    air_kg = _mode_emissions(values, "air")
    road_mitigation = clamp_ratio(
        values["lowEmissionVehicleSharePercent"] * factors["percent_to_ratio"]
        * factors["low_emission_vehicle_mitigation_rate"]
    )
    adjusted_road_kg = road_kg * (1 - road_mitigation)
    warehousing_kg = values["warehousingEnergyKwh"] * values["warehousingEmissionFactorKgPerKwh"]
    warehousing_mitigation = clamp_ratio(
        values["renewableWarehousingSharePercent"] * factors["percent_to_ratio"]
        * factors["renewable_warehousing_mitigation_rate"]
    )
    adjusted_warehousing_kg = warehousing_kg * (1 - warehousing_mitigation)
    total_kg = adjusted_road_kg + rail_kg + sea_kg + air_kg + adjusted_warehousing_kg
    emissions_tonnes = total_kg * factors["kg_to_tonnes"]

    assumptions = [
        "Lavemissionskøretøjer reducerer vejtransporten med faktor "
        f"{format_number(factors['low_emission_vehicle_mitigation_rate'])} af den dokumenterede andel.",
        "Vedvarende energi i lagre reducerer energiforbruget med faktor "
        f"{format_number(factors['renewable_warehousing_mitigation_rate'])} af den dokumenterede andel.",
        _conversion_assumption(factors),
    ]
    trace = trace_lines(list(values.items()))
    trace += [
        f"roadMitigationRatio={to_fixed(road_mitigation, 6)}",
        trace_line("adjustedRoadEmissionsKg", adjusted_road_kg),
        trace_line("railEmissionsKg", rail_kg),
        trace_line("seaEmissionsKg", sea_kg),
        trace_line("airEmissionsKg", air_kg),
        trace_line("warehousingEmissionsKg", warehousing_kg),
        f"renewableWarehousingMitigationRatio={to_fixed(warehousing_mitigation, 6)}",
        trace_line("adjustedWarehousingEmissionsKg", adjusted_warehousing_kg),
        trace_line("totalEmissionsKg", total_kg),
        trace_line("emissionsTonnes", emissions_tonnes),
    ]
    return _finish("C7", input_data, factors, emissions_tonnes, assumptions, trace, warnings)


def run_c8(input_data):
    factors = FACTORS["c8"]
    warnings = []
    raw = section(input_data, "C8")
    emit_missing = has_any_value(raw)

    floor_area = field_number(raw, "leasedFloorAreaSqm", warnings, emit_missing)
    electricity_intensity = field_number(raw, "electricityIntensityKwhPerSqm", warnings, emit_missing)
    heat_intensity = field_number(raw, "heatIntensityKwhPerSqm", warnings, emit_missing)
    occupancy_default = factors["default_occupancy_percent"]
    occupancy = _percent_with_default(
        raw, "occupancySharePercent", occupancy_default, warnings, emit_missing,
        missing=f"Feltet occupancySharePercent mangler. Antager {occupancy_default}%.",
    )
    landlord_default = factors["default_landlord_share_percent"]
    landlord_share = _percent_with_default(
        raw, "landlordEnergySharePercent", landlord_default, warnings, emit_missing,
        missing=f"Feltet landlordEnergySharePercent mangler. Antager {landlord_default}%.",
    )
    efficiency = field_percent(
        raw, "energyEfficiencyImprovementPercent", factors["maximum_efficiency_percent"], warnings, emit_missing
    )
    electricity_factor = field_number(raw, "electricityEmissionFactorKgPerKwh", warnings, emit_missing)
    heat_factor = field_number(raw, "heatEmissionFactorKgPerKwh", warnings, emit_missing)
    renewable_electricity = field_percent(
        raw, "renewableElectricitySharePercent", factors["maximum_renewable_share_percent"], warnings, emit_missing
    )
    renewable_heat = field_percent(
        raw, "renewableHeatSharePercent", factors["maximum_renewable_share_percent"], warnings, emit_missing
    )

    occupancy_ratio = occupancy * factors["percent_to_ratio"]
    landlord_ratio = landlord_share * factors["percent_to_ratio"]
    efficiency_mitigation = clamp_ratio(
        efficiency * factors["percent_to_ratio"] * factors["efficiency_mitigation_rate"]
    )
    adjusted_electricity_intensity = electricity_intensity * (1 - efficiency_mitigation)
    adjusted_heat_intensity = heat_intensity * (1 - efficiency_mitigation)
    electricity_demand = floor_area * adjusted_electricity_intensity * occupancy_ratio * landlord_ratio
    heat_demand = floor_area * adjusted_heat_intensity * occupancy_ratio * landlord_ratio
    electricity_mitigation = clamp_ratio(
        renewable_electricity * factors["percent_to_ratio"] * factors["renewable_mitigation_rate"]
    )
    heat_mitigation = clamp_ratio(
        renewable_heat * factors["percent_to_ratio"] * factors["renewable_mitigation_rate"]
    )
    electricity_kg = electricity_demand * electricity_factor * (1 - electricity_mitigation)
    heat_kg = heat_demand * heat_factor * (1 - heat_mitigation)
    total_kg = electricity_kg + heat_kg
    emissions_tonnes = total_kg * factors["kg_to_tonnes"]

    assumptions = [
        f"Energiforbruget beregnes ud fra {format_number(floor_area)} m², {format_number(occupancy)}% "
        f"udnyttelse og {format_number(landlord_share)}% udlejeransvar.",
        "Energieffektivisering reducerer intensiteter med faktor "
        f"{format_number(factors['efficiency_mitigation_rate'])} af den angivne forbedringsprocent.",
        "Dokumenteret vedvarende energi reducerer emissioner med faktor "
        f"{format_number(factors['renewable_mitigation_rate'])} af de angivne andele.",
        _conversion_assumption(factors),
    ]
    trace = trace_lines([
        ("leasedFloorAreaSqm", floor_area),
        ("electricityIntensityKwhPerSqm", electricity_intensity),
        ("heatIntensityKwhPerSqm", heat_intensity),
        ("occupancySharePercent", occupancy),
        ("landlordEnergySharePercent", landlord_share),
        ("energyEfficiencyImprovementPercent", efficiency),
        ("electricityEmissionFactorKgPerKwh", electricity_factor),
        ("heatEmissionFactorKgPerKwh", heat_factor),
        ("renewableElectricitySharePercent", renewable_electricity),
        ("renewableHeatSharePercent", renewable_heat),
    ])
    trace += [
        f"occupancyRatio={to_fixed(occupancy_ratio, 6)}",
        f"landlordEnergyRatio={to_fixed(landlord_ratio, 6)}",
        f"efficiencyMitigation={to_fixed(efficiency_mitigation, 6)}",
        trace_line("adjustedElectricityIntensity", adjusted_electricity_intensity),
        trace_line("adjustedHeatIntensity", adjusted_heat_intensity),
        trace_line("electricityDemandKwh", electricity_demand),
        trace_line("heatDemandKwh", heat_demand),
        f"renewableElectricityMitigation={to_fixed(electricity_mitigation, 6)}",
        f"renewableHeatMitigation={to_fixed(heat_mitigation, 6)}",
        trace_line("electricityEmissionsKg", electricity_kg),
        trace_line("heatEmissionsKg", heat_kg),
        trace_line("totalEmissionsKg", total_kg),
        trace_line("emissionsTonnes", emissions_tonnes),
    ]
    return _finish("C8", input_data, factors, emissions_tonnes, assumptions, trace, warnings)


def run_c9(input_data):
    factors = FACTORS["c9"]
    warnings = []
    raw = section(input_data, "C9")
    emit_missing = has_any_value(raw)

    output = field_number(raw, "processedOutputTonnes", warnings, emit_missing)
    intensity = field_number(raw, "processingEnergyIntensityKwhPerTonne", warnings, emit_missing)
    emission_factor = field_number(raw, "processingEmissionFactorKgPerKwh", warnings, emit_missing)
    efficiency = field_percent(
        raw, "processEfficiencyImprovementPercent", factors["maximum_efficiency_percent"], warnings, emit_missing
    )
    secondary = field_percent(
        raw, "secondaryMaterialSharePercent", factors["maximum_secondary_material_percent"], warnings, emit_missing
    )
    renewable = field_percent(
        raw, "renewableEnergySharePercent", factors["maximum_renewable_share_percent"], warnings, emit_missing
    )

    base_energy = output * intensity
    efficiency_ratio = clamp_ratio(efficiency * factors["percent_to_ratio"] * factors["efficiency_mitigation_rate"])
    adjusted_intensity = intensity * (1 - efficiency_ratio)
    energy_after_efficiency = output * adjusted_intensity
    secondary_ratio = clamp_ratio(
        secondary * factors["percent_to_ratio"] * factors["secondary_material_mitigation_rate"]
    )
    energy_after_secondary = energy_after_efficiency * (1 - secondary_ratio)
    renewable_ratio = clamp_ratio(renewable * factors["percent_to_ratio"] * factors["renewable_mitigation_rate"])
    emissions_kg = energy_after_secondary * emission_factor * (1 - renewable_ratio)
    emissions_tonnes = emissions_kg * factors["kg_to_tonnes"]

    assumptions = [
        "Energiintensiteten reduceres med faktor "
        f"{format_number(factors['efficiency_mitigation_rate'])} af den dokumenterede proceseffektivisering.",
        "Sekundært materiale reducerer energibehovet med faktor "
        f"{format_number(factors['secondary_material_mitigation_rate'])} af den angivne andel.",
        "Vedvarende energi reducerer emissionerne med faktor "
        f"{format_number(factors['renewable_mitigation_rate'])} af den dokumenterede andel.",
        _conversion_assumption(factors),
    ]
    trace = trace_lines([
        ("processedOutputTonnes", output),
        ("processingEnergyIntensityKwhPerTonne", intensity),
        ("processingEmissionFactorKgPerKwh", emission_factor),
        ("processEfficiencyImprovementPercent", efficiency),
        ("secondaryMaterialSharePercent", secondary),
        ("renewableEnergySharePercent", renewable),
        ("baseEnergyKwh", base_energy),
    ])
    trace += [
        f"efficiencyMitigationRatio={to_fixed(efficiency_ratio, 6)}",
        trace_line("adjustedEnergyIntensity", adjusted_intensity),
        trace_line("energyAfterEfficiency", energy_after_efficiency),
        f"secondaryMaterialMitigationRatio={to_fixed(secondary_ratio, 6)}",
        trace_line("energyAfterSecondary", energy_after_secondary),
        f"renewableMitigationRatio={to_fixed(renewable_ratio, 6)}",
        trace_line("emissionsKg", emissions_kg),
        trace_line("emissionsTonnes", emissions_tonnes),
    ]
    return _finish("C9", input_data, factors, emissions_tonnes, assumptions, trace, warnings)
