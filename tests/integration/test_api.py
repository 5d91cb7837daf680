"""Integration tests for API endpoints"""

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

from ledger_service.domain.exceptions import StoreError
from ledger_service.infrastructure.database.repositories import TransferRepository


def _create_user(client: TestClient) -> int:
    response = client.post(
        "/v1/users",
        json={"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"},
    )
    assert response.status_code == 200
    return response.json()["id"]


def _create_account(client: TestClient, user_id: int, balance="0", currency="usd") -> int:
    response = client.post(
        f"/v1/users/{user_id}/accounts",
        json={"currency": currency, "balance": balance},
    )
    assert response.status_code == 200
    return response.json()["id"]


@pytest.fixture
def funded_pair(client: TestClient):
    """A=10.0000/usd, B=0.0000/usd"""
    user_id = _create_user(client)
    return _create_account(client, user_id, "10"), _create_account(client, user_id, "0")


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, funded_pair):
    """Transfer counter is exported after a transfer"""
    a, b = funded_pair
    client.post("/v1/transfers", json={"from_account_id": a, "to_account_id": b, "amount": "1", "request_id": "m-1"})

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "ledger_transfer_total" in response.text


def test_request_id_header_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_user_crud(client: TestClient):
    user_id = _create_user(client)

    assert client.get(f"/v1/users/{user_id}").json() == {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
    }

    response = client.put(
        f"/v1/users/{user_id}",
        json={"first_name": "Ada", "last_name": "King", "email": "ada@example.com"},
    )
    assert response.status_code == 200
    assert response.json()["last_name"] == "King"

    assert client.delete(f"/v1/users/{user_id}").json() == {"id": user_id}
    assert client.get(f"/v1/users/{user_id}").status_code == 404


def test_get_accounts_for_user(client: TestClient):
    user_id = _create_user(client)
    _create_account(client, user_id, "300", "eur")
    _create_account(client, user_id, "100", "eur")

    response = client.get(f"/v1/users/{user_id}/accounts")

    assert response.status_code == 200
    assert response.json() == [
        {"currency": "eur", "balance": "300.0000"},
        {"currency": "eur", "balance": "100.0000"},
    ]


def test_create_account_for_missing_user(client: TestClient):
    response = client.post("/v1/users/42/accounts", json={})
    assert response.status_code == 404
    assert response.json()["error"]["kind"] == "not_found"


def test_get_single_account(client: TestClient):
    user_id = _create_user(client)
    account_id = _create_account(client, user_id)

    response = client.get(f"/v1/accounts/{account_id}")

    assert response.status_code == 200
    assert response.json() == {"currency": "usd", "balance": "0.0000"}


def test_deposit(client: TestClient):
    """usd 0.0000 → deposit 10 → 10.0000"""
    user_id = _create_user(client)
    account_id = _create_account(client, user_id)

    response = client.patch(f"/v1/accounts/{account_id}", json={"amount": 10})

    assert response.status_code == 200
    assert response.json() == {"currency": "usd", "balance": "10.0000"}


def test_deposit_negative_amount(client: TestClient):
    user_id = _create_user(client)
    account_id = _create_account(client, user_id)

    response = client.patch(f"/v1/accounts/{account_id}", json={"amount": "-10"})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Amount should be positive"


def test_deposit_missing_account(client: TestClient):
    response = client.patch("/v1/accounts/34", json={"amount": "1"})
    assert response.status_code == 404


def test_create_account_with_unstorable_balance(client: TestClient):
    user_id = _create_user(client)

    response = client.post(f"/v1/users/{user_id}/accounts", json={"currency": "usd", "balance": "1e15"})

    assert response.status_code == 400
    assert response.json()["error"] == {"kind": "invalid_request", "message": "Amount out of range"}


def test_deposit_overflowing_balance(client: TestClient):
    """Balance already at the storage limit: any further deposit is refused"""
    user_id = _create_user(client)
    account_id = _create_account(client, user_id, "922337203685477.5807")

    response = client.patch(f"/v1/accounts/{account_id}", json={"amount": "0.0001"})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Balance out of range"
    assert client.get(f"/v1/accounts/{account_id}").json()["balance"] == "922337203685477.5807"


def test_deposit_unstorable_amount(client: TestClient):
    user_id = _create_user(client)
    account_id = _create_account(client, user_id)

    response = client.patch(f"/v1/accounts/{account_id}", json={"amount": "1000000000000000"})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Amount out of range"


def test_delete_account(client: TestClient):
    user_id = _create_user(client)
    account_id = _create_account(client, user_id)

    response = client.delete(f"/v1/accounts/{account_id}")

    assert response.status_code == 200
    assert response.json() == {"id": account_id}


def test_delete_missing_account(client: TestClient):
    assert client.delete("/v1/accounts/34").status_code == 404


def test_transfer_and_replay(client: TestClient, funded_pair):
    """req-1 moves 10 once; the replay returns the same receipt"""
    a, b = funded_pair
    body = {"from_account_id": a, "to_account_id": b, "amount": "10.0000", "request_id": "req-1"}

    first = client.post("/v1/transfers", json=body)
    second = client.post("/v1/transfers", json=body)

    assert first.status_code == 200
    assert first.json()["request_id"] == "req-1"
    assert first.json()["receipt"]
    assert second.content == first.content
    assert client.get(f"/v1/accounts/{a}").json()["balance"] == "0.0000"
    assert client.get(f"/v1/accounts/{b}").json()["balance"] == "10.0000"


def test_transfer_same_account(client: TestClient, funded_pair):
    a, _ = funded_pair
    response = client.post(
        "/v1/transfers",
        json={"from_account_id": a, "to_account_id": a, "amount": "1.0000", "request_id": "req-2"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["kind"] == "invalid_request"


def test_transfer_insufficient_funds(client: TestClient, funded_pair):
    a, b = funded_pair
    response = client.post(
        "/v1/transfers",
        json={"from_account_id": a, "to_account_id": b, "amount": "1000000.0000", "request_id": "req-3"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Insufficient funds"
    assert client.get(f"/v1/accounts/{a}").json()["balance"] == "10.0000"


def test_transfer_missing_account(client: TestClient, funded_pair):
    a, _ = funded_pair
    response = client.post(
        "/v1/transfers",
        json={"from_account_id": a, "to_account_id": 9999, "amount": "1", "request_id": "req-404"},
    )
    assert response.status_code == 404
    assert "9999" in response.json()["error"]["message"]


def test_transfer_credit_overflow(client: TestClient, funded_pair):
    a, _ = funded_pair
    user_id = _create_user(client)
    full = _create_account(client, user_id, "922337203685477.5807")

    response = client.post(
        "/v1/transfers",
        json={"from_account_id": a, "to_account_id": full, "amount": "1", "request_id": "req-full"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Balance out of range"
    assert client.get(f"/v1/accounts/{a}").json()["balance"] == "10.0000"


def test_transfer_store_failure_is_500(client: TestClient, funded_pair):
    a, b = funded_pair
    with patch.object(TransferRepository, "add", side_effect=StoreError("disk full")):
        response = client.post(
            "/v1/transfers",
            json={"from_account_id": a, "to_account_id": b, "amount": "1", "request_id": "req-500"},
        )
    assert response.status_code == 500
    assert response.json()["error"]["kind"] == "internal"
    assert client.get(f"/v1/accounts/{a}").json()["balance"] == "10.0000"


def test_transfer_malformed_body(client: TestClient):
    response = client.post("/v1/transfers", json={"from_account_id": "abc"})
    assert response.status_code == 400
    assert response.json()["error"]["details"]


def test_non_numeric_path_id(client: TestClient):
    assert client.get("/v1/accounts/abc").status_code == 400
