"""Integration tests for API endpoints"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from coopcredit.domain.models import Affiliate
from factories import StubRiskScorer, make_affiliate, months_ago

pytestmark = pytest.mark.integration


def submit(client: TestClient, affiliate_id: int, amount="5000000", term=36, rate="12.5"):
    return client.post(
        "/v1/applications",
        json={
            "affiliate_id": affiliate_id,
            "requested_amount": amount,
            "term_months": term,
            "interest_rate": rate,
        },
    )


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "coopcredit_evaluation_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"

    generated = client.get("/health")
    assert generated.headers["X-Request-ID"]


# Affiliates


def test_register_and_fetch_affiliate(client: TestClient):
    """Test POST /v1/affiliates then lookups by id and document"""
    response = client.post(
        "/v1/affiliates",
        json={
            "document": "1017234567",
            "name": "Laura Restrepo",
            "salary": "3000000",
            "affiliation_date": months_ago(24).isoformat(),
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "ACTIVE"
    assert Decimal(data["salary"]) == Decimal("3000000")
    assert data["months_since_affiliation"] == 24
    assert data["can_apply_for_credit"] is True

    by_id = client.get(f"/v1/affiliates/{data['id']}")
    by_document = client.get("/v1/affiliates/document/1017234567")
    assert by_id.status_code == 200
    assert by_document.json()["id"] == data["id"]


def test_register_affiliate_defaults_to_today(client: TestClient):
    response = client.post("/v1/affiliates", json={"document": "52345678", "name": "Camilo", "salary": "2000000"})

    assert response.status_code == 201
    assert response.json()["months_since_affiliation"] == 0
    assert response.json()["can_apply_for_credit"] is False


def test_register_duplicate_document(client: TestClient, affiliate: Affiliate):
    response = client.post(
        "/v1/affiliates",
        json={"document": affiliate.document, "name": "Otra Persona", "salary": "1000000"},
    )
    assert response.status_code == 409


@pytest.mark.parametrize(
    "body",
    [
        {"document": "", "name": "Ana", "salary": "1000"},
        {"document": "123", "name": "Ana", "salary": "0"},
        {"document": "123", "name": "Ana"},
    ],
)
def test_register_affiliate_validation(client: TestClient, body):
    assert client.post("/v1/affiliates", json=body).status_code == 422


def test_register_affiliate_future_date(client: TestClient):
    response = client.post(
        "/v1/affiliates",
        json={"document": "123", "name": "Ana", "salary": "1000", "affiliation_date": "2999-01-01"},
    )
    assert response.status_code == 422


def test_update_affiliate(client: TestClient, affiliate: Affiliate):
    response = client.put(f"/v1/affiliates/{affiliate.id}", json={"salary": "4500000"})

    assert response.status_code == 200
    assert Decimal(response.json()["salary"]) == Decimal("4500000")
    assert response.json()["name"] == affiliate.name


def test_delete_affiliate(client: TestClient, affiliate: Affiliate):
    assert client.delete(f"/v1/affiliates/{affiliate.id}").status_code == 204
    assert client.get(f"/v1/affiliates/{affiliate.id}").status_code == 404
    assert client.delete(f"/v1/affiliates/{affiliate.id}").status_code == 404


def test_unknown_affiliate(client: TestClient):
    assert client.get("/v1/affiliates/999").status_code == 404
    assert client.get("/v1/affiliates/document/000").status_code == 404
    assert client.put("/v1/affiliates/999", json={"name": "Nadie"}).status_code == 404


# Applications and evaluations


def test_submit_application(client: TestClient, affiliate: Affiliate):
    """Test POST /v1/applications creates a PENDING application"""
    response = submit(client, affiliate.id)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["affiliate_document"] == affiliate.document
    assert Decimal(data["monthly_payment"]) == Decimal("167269.09")
    assert data["risk_score"] is None


def test_submit_for_junior_affiliate_is_refused(client: TestClient, affiliate_repo):
    """Two months of seniority: refused before any evaluation"""
    junior = affiliate_repo.save(make_affiliate(document="80111222", seniority_months=2))

    response = submit(client, junior.id)

    assert response.status_code == 409
    assert "seniority" in response.json()["detail"]
    assert client.get(f"/v1/applications/affiliate/{junior.id}").json()["applications"] == []


def test_submit_for_unknown_affiliate(client: TestClient):
    assert submit(client, 999).status_code == 404


@pytest.mark.parametrize(
    "overrides",
    [
        {"term": 0},
        {"term": 361},
        {"amount": "-1"},
        {"rate": "101"},
        {"amount": "5000000.005"},
    ],
)
def test_submit_validation(client: TestClient, affiliate: Affiliate, overrides):
    assert submit(client, affiliate.id, **overrides).status_code == 422


def test_submit_unaffordable_application(client: TestClient, affiliate: Affiliate):
    response = submit(client, affiliate.id, amount="30000000", term=12, rate="0")

    assert response.status_code == 422
    assert "Payment-to-income ratio" in response.json()["detail"]


def test_evaluate_approves_low_risk(client: TestClient, affiliate: Affiliate, risk_scorer: StubRiskScorer):
    """Test POST /v1/evaluations/{id} with approval"""
    application_id = submit(client, affiliate.id).json()["id"]

    response = client.post(f"/v1/evaluations/{application_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["approved"] is True
    assert data["status"] == "APPROVED"
    assert data["risk_score"] == 850
    assert data["risk_level"] == "LOW"
    assert data["decision_reason"] == "Approved - Risk level: LOW, Score: 850, Payment ratio: 5.58%"
    assert Decimal(data["payment_to_income_ratio"]) == Decimal("0.0558")
    assert risk_scorer.calls == [(affiliate.document, Decimal("5000000"), 36)]

    stored = client.get(f"/v1/applications/{application_id}").json()
    assert stored["status"] == "APPROVED"
    assert stored["risk_score"] == 850


def test_evaluate_rejects_high_risk(client: TestClient, affiliate: Affiliate, risk_scorer: StubRiskScorer):
    risk_scorer.score_value = 400
    application_id = submit(client, affiliate.id).json()["id"]

    data = client.post(f"/v1/evaluations/{application_id}").json()

    assert data["approved"] is False
    assert data["status"] == "REJECTED"
    assert data["risk_level"] == "HIGH"
    assert "400" in data["decision_reason"]


def test_evaluate_twice_conflicts(client: TestClient, affiliate: Affiliate):
    application_id = submit(client, affiliate.id).json()["id"]

    assert client.post(f"/v1/evaluations/{application_id}").status_code == 200
    second = client.post(f"/v1/evaluations/{application_id}")

    assert second.status_code == 409
    assert client.get(f"/v1/applications/{application_id}").json()["status"] == "APPROVED"


def test_evaluate_unknown_application(client: TestClient):
    assert client.post("/v1/evaluations/999").status_code == 404


def test_cancel_application(client: TestClient, affiliate: Affiliate):
    application_id = submit(client, affiliate.id).json()["id"]

    response = client.post(f"/v1/applications/{application_id}/cancel", json={"reason": "Requested by affiliate"})

    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"
    assert client.post(f"/v1/evaluations/{application_id}").status_code == 409
    assert client.post(f"/v1/applications/{application_id}/cancel", json={"reason": "Again"}).status_code == 409


def test_list_applications(client: TestClient, affiliate: Affiliate):
    first = submit(client, affiliate.id).json()["id"]
    second = submit(client, affiliate.id, amount="1000000").json()["id"]
    client.post(f"/v1/evaluations/{first}")

    all_ids = [a["id"] for a in client.get("/v1/applications").json()["applications"]]
    pending_ids = [a["id"] for a in client.get("/v1/applications/status/PENDING").json()["applications"]]
    approved_ids = [a["id"] for a in client.get("/v1/applications/status/APPROVED").json()["applications"]]

    assert all_ids == [first, second]
    assert pending_ids == [second]
    assert approved_ids == [first]
    assert client.get("/v1/applications/status/UNKNOWN").status_code == 422


def test_unknown_application(client: TestClient):
    assert client.get("/v1/applications/999").status_code == 404
