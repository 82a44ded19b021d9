import pytest

from esg_engine.calculations.modules.materiality import run_d2


def _rows_by_name(result):
    table = next(table for table in result["esrsTables"] if table["conceptKey"] == "D2MaterialTopicsTable")
    return {row["name"]: row for row in table["rows"]}


def test_d2_scores_and_highlights_priority_topics(climate_risk_topic, circular_services_topic,
                                                  data_governance_topic):
    result = run_d2({"D2": {"materialTopics": [climate_risk_topic, circular_services_topic, data_governance_topic]}})

    assert result["value"] == pytest.approx(58.1, abs=0.05)
    assert result["unit"] == "prioritets-score (0-100)"
    assert any("Top prioriterede emner" in entry for entry in result["assumptions"])
    assert "inputTopics=3" in result["trace"]
    assert "validTopics=3" in result["trace"]
    assert any(line.startswith("averageCompositeScore=") for line in result["trace"])
    assert any("Prioriteret emne: Klimarisiko" in warning for warning in result["warnings"])
    assert any("CSRD-gap mangler for Klimarisiko" in warning for warning in result["warnings"])
    assert any('Finansiel score mangler for "Datastyring"' in warning for warning in result["warnings"])

    facts = {fact["conceptKey"]: fact["value"] for fact in result["esrsFacts"]}
    assert facts["D2ValidTopicsCount"] == 3
    assert facts["D2PrioritisedTopicsCount"] == 1

    rows = _rows_by_name(result)
    climate = rows["Klimarisiko i forsyningskæden"]
    assert (climate["impactType"], climate["severity"], climate["likelihood"]) == ("actual", "severe", "likely")
    assert climate["priorityBand"] == "priority"
    assert rows["Cirkulære services"]["priorityBand"] == "attention"
    governance = rows["Datastyring"]
    assert governance["missingFinancial"] is True
    assert governance["eligibleForPrioritisation"] is False
    assert governance["priorityBand"] == "monitor"


def test_d2_double_materiality_overview(climate_risk_topic, circular_services_topic, data_governance_topic):
    result = run_d2({"D2": {"materialTopics": [climate_risk_topic, circular_services_topic, data_governance_topic]}})
    overview = result["doubleMateriality"]["overview"]

    assert overview["totalTopics"] == 3
    assert overview["prioritisedTopics"] == 1
    assert overview["attentionTopics"] == 1
    assert overview["gapAlerts"] == 2

    tables = result["doubleMateriality"]["tables"]
    assert tables["topics"][0]["name"] == "Klimarisiko i forsyningskæden"
    assert tables["impactMatrix"][0]["severity"] == "severe"
    assert "Klimarisiko i forsyningskæden" in tables["gapAlerts"]
    impact_types = {entry["key"]: entry["topics"] for entry in result["doubleMateriality"]["dueDiligence"]["impactTypes"]}
    assert impact_types["actual"] == 2


def test_d2_financial_exception_allows_prioritisation():
    topic = {
        "title": "Lovpligtig compliance",
        "description": "Myndighedskrav uden kvantificerbar finansiel effekt",
        "riskType": "risk",
        "impactType": "actual",
        "severity": "severe",
        "likelihood": "veryLikely",
        "valueChainSegment": "ownOperations",
        "remediationStatus": "none",
        "financialScore": None,
        "financialExceptionApproved": True,
        "financialExceptionJustification": "Finansiel effekt kan ikke kvantificeres, men konsekvenserne er "
                                           "dokumenteret i revisionsnotat af 12/03.",
        "timeline": "shortTerm",
        "responsible": "Head of Compliance",
        "csrdGapStatus": "aligned",
    }

    result = run_d2({"D2": {"materialTopics": [topic]}})

    assert result["value"] == pytest.approx(100)
    assert any("financialOverride=approved" in line for line in result["trace"])
    assert any('Finansiel undtagelse er bekræftet for "Lovpligtig compliance"' in w for w in result["warnings"])
    assert result["doubleMateriality"]["overview"]["prioritisedTopics"] == 1
    row = _rows_by_name(result)["Lovpligtig compliance"]
    assert row["missingFinancial"] is True
    assert row["financialOverrideApproved"] is True
    assert row["eligibleForPrioritisation"] is True


def test_d2_out_of_range_financial_score_counts_as_missing(climate_risk_topic):
    result = run_d2({"D2": {"materialTopics": [dict(climate_risk_topic, financialScore=9)]}})

    row = _rows_by_name(result)["Klimarisiko i forsyningskæden"]
    assert row["missingFinancial"] is True
    assert row["financialScore"] is None


def test_d2_skips_topics_without_title_or_severity(climate_risk_topic):
    result = run_d2({"D2": {"materialTopics": [
        dict(climate_risk_topic, title="  "),
        dict(climate_risk_topic, severity="catastrophic"),
    ]}})

    assert result["value"] == 0
    assert "topic[0]=skipped|reason=no-title" in result["trace"]
    assert "topic[1]=skipped|reason=no-severity|name=Klimarisiko_i_forsyningskæden" in result["trace"]
    assert "Ingen gyldige emner med scorer kunne beregnes. Kontrollér inputtene." in result["warnings"]


def test_d2_without_topics():
    result = run_d2({"D2": {"materialTopics": []}})

    assert result["value"] == 0
    assert (
        "Ingen væsentlige emner registreret. Tilføj materialitetsemner for at beregne prioritet."
        in result["warnings"]
    )
