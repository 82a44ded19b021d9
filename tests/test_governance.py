import pytest

from esg_engine.calculations.modules.governance import run_g1


def _g1_input(**overrides):
    section = {
        "boardOversight": True,
        "governanceNarrative": "Bestyrelsen vurderer ESG-risici kvartalsvis og har etableret incitamenter til "
                               "ledelsen.",
        "policies": [
            {"topic": "ESG-politik", "status": "approved", "owner": "Legal", "lastReviewed": "2024-02"},
            {"topic": "Whistleblower", "status": "draft", "owner": None, "lastReviewed": None},
        ],
        "targets": [
            {"topic": "CSRD readiness", "status": "lagging", "baselineYear": 2023, "targetYear": 2025,
             "targetValue": None, "unit": None},
            {"topic": "Bestyrelsesuddannelse", "status": "onTrack", "baselineYear": 2022, "targetYear": 2024,
             "targetValue": None, "unit": None},
        ],
    }
    section.update(overrides)
    return {"G1": section}


def test_g1_aggregates_policies_targets_and_oversight():
    result = run_g1(_g1_input())

    assert result["value"] == pytest.approx(44)
    assert result["unit"] == "governance score"
    assert 'Angiv ejer/ansvarlig for politikken "Whistleblower".' in result["warnings"]
    assert "policy[0]=ESG-politik|status=approved|owner=Legal" in result["trace"]
    assert "target[1]=Bestyrelsesuddannelse|status=onTrack|baseline=2022|targetYear=2024" in result["trace"]

    facts = {fact["conceptKey"]: fact["value"] for fact in result["esrsFacts"]}
    assert facts["G1PolicyCount"] == 2
    assert facts["G1BoardOversight"] is True
    assert facts["G1GovernanceNarrative"].startswith("Bestyrelsen vurderer ESG-risici")

    tables = {table["conceptKey"]: table["rows"] for table in result["esrsTables"]}
    assert tables["G1PoliciesTable"][0]["topic"] == "ESG-politik"
    assert tables["G1TargetsTable"][0]["topic"] == "CSRD readiness"


def test_g1_unknown_status_scores_zero_with_warning():
    result = run_g1(_g1_input(policies=[{"topic": "Etik", "status": "someday", "owner": "CEO"}]))

    assert 'Ukendt politikstatus for "Etik". Opdater input.' in result["warnings"]
    assert result["value"] == pytest.approx(32.8)


def test_g1_missing_oversight_counts_half():
    result = run_g1(_g1_input(boardOversight=None))

    assert result["value"] == pytest.approx(34)
    assert any("bestyrelsen fører tilsyn" in warning for warning in result["warnings"])


def test_g1_target_year_before_baseline():
    result = run_g1(_g1_input(targets=[
        {"topic": "Klima", "status": "onTrack", "baselineYear": 2025, "targetYear": 2020},
    ]))

    assert 'Target "Klima" har målår 2020 før baseline 2025. Kontrollér.' in result["warnings"]


def test_g1_blank_section():
    result = run_g1({"G1": {"policies": [], "targets": []}})

    assert result["value"] == 0
    assert "policies=0" in result["trace"]
    assert "targets=0" in result["trace"]
