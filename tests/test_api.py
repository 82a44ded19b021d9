def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "modules": 50}


def test_list_modules(client):
    modules = client.get("/api/modules").get_json()

    assert len(modules) == 50
    assert modules[0] == {"moduleId": "A1", "title": "A1 – Scope 1 stationære forbrændingskilder"}
    assert modules[-1]["moduleId"] == "D2"


def test_calculate_module(client):
    payload = {
        "B1": {
            "electricityConsumptionKwh": 10000,
            "emissionFactorKgPerKwh": 0.233,
            "renewableSharePercent": 20,
        }
    }
    response = client.post("/api/modules/B1", json=payload)

    assert response.status_code == 200
    body = response.get_json()
    assert body["moduleId"] == "B1"
    assert body["title"] == "B1 – Scope 2 elforbrug"
    assert body["result"]["unit"] == "t CO2e"
    assert body["result"]["value"] > 0


def test_calculate_module_without_body_uses_empty_input(client):
    response = client.post("/api/modules/GOV")

    assert response.status_code == 200
    assert response.get_json()["result"]["value"] == 0


def test_unknown_module_returns_json_404(client):
    response = client.post("/api/modules/Z9", json={})

    assert response.status_code == 404
    assert "Z9" in response.get_json()["error"]


def test_non_object_body_is_rejected(client):
    response = client.post("/api/modules/A1", json=[1, 2, 3])

    assert response.status_code == 400
    assert response.get_json() == {"error": "Request body must be a JSON object."}


def test_report_runs_every_module(client):
    response = client.post("/api/report", json={})

    assert response.status_code == 200
    results = response.get_json()["results"]
    assert len(results) == 50
    assert [entry["moduleId"] for entry in results[:2]] == ["A1", "A2"]
    assert all(entry["result"]["value"] == 0 for entry in results)


def test_infinite_target_value_stays_valid_json(client):
    body = '{"E1Targets": {"targets": [{"scope": "scope1", "targetValueTonnes": Infinity}]}}'
    response = client.post("/api/modules/E1Targets", data=body, content_type="application/json")

    assert response.status_code == 200
    assert b"Infinity" not in response.data
    assert response.get_json()["result"]["targetsOverview"][0]["targetValueTonnes"] is None


def test_malformed_d1_fields_do_not_fail_the_request(client):
    response = client.post("/api/modules/D1", json={"D1": {"organizationalBoundary": {"x": 1}}})

    assert response.status_code == 200
    assert "organizationalBoundary=null" in response.get_json()["result"]["trace"]
