"""Integration tests for service endpoints and error mapping"""

import uuid
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, funded_account: str):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "ccb_operation_total" in response.text
    assert "http_request_duration_seconds" in response.text


def test_request_id_header(client: TestClient):
    response = client.get("/health")
    assert uuid.UUID(response.headers["X-Request-ID"])


def test_not_found_maps_to_404(client: TestClient):
    response = client.get(f"/v1/withdrawals/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Withdrawal not found"


def test_malformed_path_id_is_rejected(client: TestClient):
    response = client.get("/v1/loans/not-a-uuid")
    assert response.status_code == 422


def operation_count(operation: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value("ccb_operation_total", {"operation": operation, "outcome": outcome})
    return value or 0.0


def test_rejected_operations_are_counted(client: TestClient, registered_user: dict):
    """Unknown account on deposit counts as a rejected deposit"""
    before = operation_count("deposit", "rejected")

    response = client.post(
        "/v1/accounts/deposit",
        json={"account_number": "0000000000", "account_pin": "2468", "amount": "1.00"},
    )

    assert response.status_code == 404
    assert operation_count("deposit", "rejected") == before + 1


def test_every_mutation_records_an_outcome(client: TestClient, registered_user: dict, account_number: str):
    adjusted = operation_count("adjust_balance", "success")
    reset = operation_count("password_reset_request", "success")
    notified = operation_count("add_notification", "success")

    client.post("/v1/accounts/balance-adjustment", json={"account_number": account_number, "amount_to_add": "5.00"})
    client.post("/v1/users/password-reset/request", json={"email": registered_user["email"]})
    client.post("/v1/notifications", json={"user_id": registered_user["id"], "message": "Hello"})

    assert operation_count("adjust_balance", "success") == adjusted + 1
    assert operation_count("password_reset_request", "success") == reset + 1
    assert operation_count("add_notification", "success") == notified + 1


def test_withdrawal_counted_once(client: TestClient, funded_account: str):
    before = operation_count("withdraw", "success")

    client.post(
        "/v1/withdrawals",
        json={"account_number": funded_account, "amount": "1.00", "currency": "USD", "description": "Cash"},
    )

    assert operation_count("withdraw", "success") == before + 1
