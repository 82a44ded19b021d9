import pytest

from esg_engine.calculations.modules.social import run_s1, run_s2, run_s3, run_s4


def _facts(result):
    return {fact["conceptKey"]: fact["value"] for fact in result.get("esrsFacts", [])}


def _metrics(result):
    return {metric["label"]: metric["value"] for metric in result.get("metrics", [])}


def _table(result, concept_key):
    return next(table for table in result["esrsTables"] if table["conceptKey"] == concept_key)


def test_s1_scores_headcount_and_coverage():
    result = run_s1({
        "S1": {
            "reportingYear": 2024,
            "totalHeadcount": 520,
            "totalFte": 483,
            "dataCoveragePercent": 90,
            "fteCoveragePercent": 95,
            "averageWeeklyHours": 37,
            "headcountBreakdown": [
                {"segment": "Danmark", "headcount": 200, "femalePercent": 48,
                 "collectiveAgreementCoveragePercent": 85},
                {"segment": "Sverige", "headcount": 120, "femalePercent": 52,
                 "collectiveAgreementCoveragePercent": 80},
                {"segment": "Produktion", "headcount": 150, "femalePercent": 18,
                 "collectiveAgreementCoveragePercent": 70},
                {"segment": "HQ", "headcount": 50, "femalePercent": 60, "collectiveAgreementCoveragePercent": 90},
            ],
            "employmentContractBreakdown": [
                {"contractType": "permanentEmployees", "headcount": 420, "fte": 400, "femalePercent": 45},
                {"contractType": "temporaryEmployees", "headcount": 70, "fte": 60, "femalePercent": 55},
                {"contractType": "nonEmployeeWorkers", "headcount": 20, "fte": 15, "femalePercent": 40},
                {"contractType": "apprentices", "headcount": 10, "fte": 8, "femalePercent": 35},
            ],
            "employmentStatusBreakdown": [
                {"status": "fullTime", "headcount": 430, "fte": 410},
                {"status": "partTime", "headcount": 70, "fte": 60},
                {"status": "seasonal", "headcount": 20, "fte": 13},
            ],
            "hasCollectiveBargainingAgreements": True,
            "genderPayGapPercent": 4,
            "genderPayGapPercentManagement": 7,
            "genderPayGapPercentOperations": -1,
            "absenteeismRatePercent": 4,
            "lostTimeInjuryFrequencyRate": 1.2,
            "workRelatedAccidentsCount": 2,
            "workRelatedFatalitiesCount": 0,
            "averageTrainingHoursPerEmployee": 10,
            "trainingCoveragePercent": 85,
            "socialProtectionCoveragePercent": 90,
            "healthCareCoveragePercent": 80,
            "pensionPlanCoveragePercent": 88,
            "workforceNarrative": "Stabil bemanding med fokus på kollektiv repræsentation.",
        }
    })

    assert result["value"] == pytest.approx(96.1, abs=0.05)
    assert (
        "Scoren vægter total headcount (35 %), segmentfordeling (35 %), datadækning (20 %) og faglig "
        "repræsentation (10 %)." in result["assumptions"]
    )
    assert (
        'Segmentet "Produktion" har en kønsfordeling på 18% kvinder – markér indsats i S2 for at adressere '
        "ubalancer." in result["warnings"]
    )
    assert "Registrerede arbejdsulykker: 2. Dokumentér forebyggelse." in result["warnings"]

    facts = _facts(result)
    assert facts["S1TotalHeadcount"] == 520
    assert facts["S1TotalFte"] == 483
    assert facts["S1SegmentHeadcountTotal"] == 520
    assert facts["S1SegmentFemaleHeadcountEstimate"] == 215.4
    assert facts["S1EmploymentContractFteTotal"] == 483
    assert facts["S1EmploymentStatusHeadcountTotal"] == 520

    rows = _table(result, "S1HeadcountBreakdownTable")["rows"]
    assert any(row["segment"] == "Danmark" and row["headcount"] == 200 for row in rows)
    _table(result, "S1EmploymentContractBreakdownTable")
    _table(result, "S1EmploymentStatusBreakdownTable")

    metrics = _metrics(result)
    assert metrics["Total headcount"] == 520
    assert metrics["Gns. ugentlige arbejdstimer"] == 37
    assert metrics["Træningstimer pr. medarbejder"] == 10
    assert any(table["id"] == "s1-headcount-breakdown" for table in result["tables"])
    assert any(narrative["label"] == "Arbejdsstyrkens udvikling" for narrative in result["narratives"])


def test_s1_data_quality_warnings():
    result = run_s1({
        "S1": {
            "reportingYear": None,
            "totalHeadcount": 100,
            "totalFte": 60,
            "dataCoveragePercent": 100,
            "fteCoveragePercent": None,
            "averageWeeklyHours": None,
            "headcountBreakdown": [
                {"segment": "HQ", "headcount": 100, "femalePercent": 55, "collectiveAgreementCoveragePercent": 40},
            ],
            "employmentContractBreakdown": [
                {"contractType": "permanentEmployees", "headcount": 80, "fte": 50, "femalePercent": 50},
            ],
            "employmentStatusBreakdown": [{"status": "fullTime", "headcount": 100, "fte": 55}],
            "hasCollectiveBargainingAgreements": False,
            "genderPayGapPercent": None,
            "absenteeismRatePercent": 10,
            "lostTimeInjuryFrequencyRate": 3,
            "workRelatedAccidentsCount": None,
            "workRelatedFatalitiesCount": None,
            "averageTrainingHoursPerEmployee": 2,
            "trainingCoveragePercent": 40,
            "socialProtectionCoveragePercent": 40,
            "healthCareCoveragePercent": 30,
            "pensionPlanCoveragePercent": 35,
            "workforceNarrative": None,
        }
    })

    expected = [
        "Datadækning for FTE er ikke angivet. Feltet dokumenterer ESRS S1-6 krav om fuldt overblik.",
        "Løngab (samlet) er ikke angivet. ESRS S1 kræver kønsopdelt aflønning.",
        "Fraværsraten er 10% – undersøg årsager og forbedringstiltag.",
        "LTIFR er 3 – styrk sikkerhedstræning og rapportering.",
        "Angiv antal arbejdsrelaterede dødsfald (0 hvis ingen).",
        "Ansættelsesformernes headcount (80) stemmer ikke overens med total headcount (100). "
        "Kontrollér opgørelsen.",
        "Ansættelsesformernes FTE (50.00) stemmer ikke overens med total FTE (60). Juster fordeling eller total.",
        "Statusfordelingens FTE (55.00) matcher ikke total FTE (60).",
    ]
    for warning in expected:
        assert warning in result["warnings"]


def test_s2_value_chain_workers():
    result = run_s2({
        "S2": {
            "valueChainWorkersCount": 2400,
            "workersAtRiskCount": 180,
            "valueChainCoveragePercent": 85,
            "highRiskSupplierSharePercent": 22,
            "livingWageCoveragePercent": 88,
            "collectiveBargainingCoveragePercent": 60,
            "socialAuditsCompletedPercent": 92,
            "grievancesOpenCount": 1,
            "grievanceMechanismForWorkers": True,
            "incidents": [
                {"supplier": "Alpha Textiles", "country": "Bangladesh", "issueType": "wagesAndBenefits",
                 "workersAffected": 60, "severityLevel": "medium", "remediationStatus": "inProgress",
                 "description": "Løn ligger under aftalt minimum – forbedringsplan igangsat."},
                {"supplier": "Omega Plast", "country": "Malaysia", "issueType": "healthAndSafety",
                 "workersAffected": 20, "severityLevel": "low", "remediationStatus": "completed",
                 "description": None},
            ],
            "socialDialogueNarrative": "Leverandørprogram med kvartalsvise dialogmøder, træning i arbejdsmiljø og "
                                       "co-funding af fagforeningsarbejde.",
            "remediationNarrative": "Kompensation til påvirkede syersker samt auditopfølgning med fokus på "
                                    "lønjusteringer og forbedret tilsyn.",
        }
    })

    assert result["value"] > 70
    assert "valueChainCoveragePercent=85" in result["trace"]
    assert (
        "1 klager fra leverandørarbejdere er åbne. Følg op og luk dem for at undgå ESRS S2 advarsler."
        in result["warnings"]
    )
    facts = _facts(result)
    assert facts["S2ValueChainWorkersCount"] == 2400
    assert facts["S2IncidentsCount"] == 2
    assert "dialog" in facts["S2SocialDialogueNarrative"]
    rows = _table(result, "S2IncidentsTable")["rows"]
    assert any(row["supplier"] == "Alpha Textiles" and row["workersAffected"] == 60 for row in rows)
    metrics = _metrics(result)
    assert metrics["Registrerede hændelser"] == 2
    assert metrics["Berørte arbejdstagere"] == 80
    labels = {narrative["label"] for narrative in result["narratives"]}
    assert {"Social dialog og træning", "Afhjælpning og kompensation"} <= labels


def test_s3_community_impacts():
    result = run_s3({
        "S3": {
            "communitiesIdentifiedCount": 5,
            "impactAssessmentsCoveragePercent": 80,
            "highRiskCommunitySharePercent": 25,
            "grievancesOpenCount": 0,
            "incidents": [
                {"community": "Fjordbyen", "geography": "Norge", "impactType": "environmentalDamage",
                 "householdsAffected": 40, "severityLevel": "medium", "remediationStatus": "inProgress",
                 "description": "Udslip fra byggeplads påvirker fiskeri – midlertidig kompensation igangsat."},
                {"community": "Skovlandsbyen", "geography": "Sverige", "impactType": "landRights",
                 "householdsAffected": 12, "severityLevel": "low", "remediationStatus": "completed",
                 "description": "Aftale om adgangsveje indgået med lokalsamfundet."},
            ],
            "engagementNarrative": "Årlige FPIC-dialoger, borgerpaneler og samarbejde med lokale NGO’er for at "
                                   "sikre inklusion.",
            "remedyNarrative": "Kompensationsfonde samt investering i infrastruktur projekter for de mest "
                               "påvirkede områder.",
        }
    })

    assert result["value"] > 60
    assert "impactAssessmentsCoveragePercent=80" in result["trace"]
    assert "Ingen påvirkninger registreret endnu." not in result["warnings"]
    facts = _facts(result)
    assert facts["S3ImpactsCount"] == 2
    assert facts["S3HouseholdsAffectedTotal"] == 52
    assert "FPIC" in facts["S3EngagementNarrative"]
    rows = _table(result, "S3CommunityImpactsTable")["rows"]
    assert any(row["community"] == "Fjordbyen" and row["householdsAffected"] == 40 for row in rows)
    assert _metrics(result)["Berørte husholdninger"] == 52
    assert any(table["id"] == "s3-community-impacts" for table in result["tables"])


def test_s4_consumers_and_end_users():
    result = run_s4({
        "S4": {
            "productsAssessedPercent": 70,
            "complaintsResolvedPercent": 85,
            "dataBreachesCount": 1,
            "severeIncidentsCount": 1,
            "recallsCount": 0,
            "grievanceMechanismInPlace": True,
            "escalationTimeframeDays": 20,
            "issues": [
                {"productOrService": "SmartHome Hub", "market": "EU", "issueType": "productSafety",
                 "usersAffected": 120, "severityLevel": "medium", "remediationStatus": "completed",
                 "description": "Firmwareopdatering reducerer risiko for overophedning."},
                {"productOrService": "Cloud Backup", "market": "Global", "issueType": "dataPrivacy",
                 "usersAffected": 50, "severityLevel": "high", "remediationStatus": "inProgress",
                 "description": "Dataeksponering under undersøgelse, midlertidige kontroller implementeret."},
            ],
            "vulnerableUsersNarrative": "Udvikler forenklet supportlinje og subsidier til seniorer samt "
                                        "handicapvenlige grænseflader.",
            "consumerEngagementNarrative": "Kvartalsvise webinarer og samarbejde med forbrugerorganisationer om "
                                           "klare sikkerhedsanbefalinger.",
        }
    })

    assert result["value"] > 50
    assert "productsAssessedPercent=70" in result["trace"]
    assert "1 alvorlige hændelser rapporteret – offentliggør detaljer og kompensation." in result["warnings"]
    facts = _facts(result)
    assert facts["S4ProductsAssessedPercent"] == 70
    assert facts["S4IssuesCount"] == 2
    assert "forbrugerorganisationer" in facts["S4ConsumerEngagementNarrative"]
    rows = _table(result, "S4ConsumerIssuesTable")["rows"]
    assert any(row["productOrService"] == "SmartHome Hub" and row["usersAffected"] == 120 for row in rows)
    assert _metrics(result)["Berørte brugere"] == 170
    labels = {narrative["label"] for narrative in result["narratives"]}
    assert {"Indsatser for udsatte brugere", "Forbrugerengagement"} <= labels


@pytest.mark.parametrize("calculator, module_id", [
    (run_s1, "S1"), (run_s2, "S2"), (run_s3, "S3"), (run_s4, "S4"),
])
def test_blank_social_sections_score_zero(calculator, module_id):
    assert calculator({})["value"] == 0
    assert calculator({module_id: {"incidents": [], "workforceNarrative": " "}})["value"] == 0
