"""Shared fixtures: a test app, its client and the material topic rows used by D2."""

import pytest

from config import TestConfig
from esg_engine import create_app


@pytest.fixture
def app():
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def climate_risk_topic():
    return {
        "title": "Klimarisiko i forsyningskæden",
        "description": "Leverandører i højrisikoområder",
        "riskType": "risk",
        "impactType": "actual",
        "severity": "severe",
        "likelihood": "likely",
        "valueChainSegment": "upstream",
        "remediationStatus": "planned",
        "impactScore": None,
        "financialScore": 4,
        "financialExceptionApproved": False,
        "financialExceptionJustification": None,
        "timeline": "shortTerm",
        "responsible": "CFO",
        "csrdGapStatus": "missing",
    }


@pytest.fixture
def circular_services_topic():
    return {
        "title": "Cirkulære services",
        "description": "Nye take-back modeller",
        "riskType": "opportunity",
        "impactType": "potential",
        "severity": "major",
        "likelihood": "possible",
        "valueChainSegment": "downstream",
        "remediationStatus": "none",
        "impactScore": None,
        "financialScore": 2,
        "financialExceptionApproved": False,
        "financialExceptionJustification": None,
        "timeline": "longTerm",
        "responsible": None,
        "csrdGapStatus": "partial",
    }


@pytest.fixture
def data_governance_topic():
    return {
        "title": "Datastyring",
        "description": "Mangler moden data governance",
        "riskType": "risk",
        "impactType": "actual",
        "severity": "major",
        "likelihood": "likely",
        "valueChainSegment": "ownOperations",
        "remediationStatus": "inPlace",
        "impactScore": None,
        "financialScore": None,
        "financialExceptionApproved": False,
        "financialExceptionJustification": None,
        "timeline": "mediumTerm",
        "responsible": None,
        "csrdGapStatus": "missing",
    }
