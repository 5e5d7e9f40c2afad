"""Integration tests for staged withdrawals"""

import uuid
import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from ccb_gateway.domain.stages import build_stages
from ccb_gateway.infrastructure.database.models import AccountTransaction, Withdrawal
from ccb_gateway.infrastructure.database.repositories import AccountRepository, WithdrawalRepository


def withdraw(client: TestClient, account_number: str, amount: str, **extra):
    payload = {"account_number": account_number, "amount": amount, "currency": "USD", "description": "Rent"}
    payload.update(extra)
    return client.post("/v1/withdrawals", json=payload)


def pending_withdrawal(db: Session, account_number: str, stage_count: int) -> str:
    """Withdrawal with no stage confirmed yet, so every stage can be advanced"""
    account = AccountRepository(db).get_by_number(account_number)
    withdrawal = WithdrawalRepository(db).create_withdrawal(
        account,
        amount=Decimal("10.00"),
        currency="USD",
        description="Transfer",
        stages=build_stages(stage_count, confirmed=0),
    )
    db.commit()
    return str(withdrawal.id)


def test_withdraw_entire_balance(client: TestClient, funded_account: str):
    """Withdrawing 100 from 100 leaves 0 with stage1 confirmed"""
    response = withdraw(client, funded_account, "100.00")

    assert response.status_code == 201
    data = response.json()
    assert Decimal(data["account_balance"]) == Decimal("0")

    withdrawal = data["withdrawal"]
    assert withdrawal["status"] == "pending"
    assert withdrawal["current_stage"] == "stage1"
    assert len(withdrawal["stages"]) == 5
    assert withdrawal["stages"][0] == {"name": "stage1", "completed": True}
    assert withdrawal["stages"][1] == {"name": "stage2", "completed": False}

    balance = client.get(f"/v1/accounts/{funded_account}/balance").json()["balance"]
    assert Decimal(balance) == Decimal("0")


def test_withdraw_logs_debit_transaction(client: TestClient, funded_account: str, db: Session):
    withdraw(client, funded_account, "30.00")

    db.expire_all()
    debits = db.query(AccountTransaction).filter(AccountTransaction.type == "debit").all()
    assert len(debits) == 1
    assert debits[0].amount == Decimal("30.00")
    assert debits[0].description == "Rent"


def test_withdraw_more_than_balance(client: TestClient, funded_account: str, db: Session):
    """Overdraw is rejected and nothing is written"""
    response = withdraw(client, funded_account, "100.01")

    assert response.status_code == 400
    assert response.json()["detail"] == "Insufficient balance"

    balance = client.get(f"/v1/accounts/{funded_account}/balance").json()["balance"]
    assert Decimal(balance) == Decimal("100.00")
    assert db.query(Withdrawal).count() == 0
    assert db.query(AccountTransaction).count() == 1


def test_withdraw_unknown_account(client: TestClient):
    response = withdraw(client, "0000000000", "1.00")
    assert response.status_code == 404


def test_withdraw_custom_stage_count(client: TestClient, funded_account: str):
    response = withdraw(client, funded_account, "1.00", stage_count=3)
    stages = response.json()["withdrawal"]["stages"]
    assert [s["name"] for s in stages] == ["stage1", "stage2", "stage3"]


@pytest.mark.parametrize("stage_count", [0, -1, 11])
def test_withdraw_invalid_stage_count(client: TestClient, funded_account: str, stage_count: int):
    """Explicit counts outside 1..10 are rejected, zero included"""
    response = withdraw(client, funded_account, "1.00", stage_count=stage_count)

    assert response.status_code == 422
    assert response.json()["field"] == "stage_count"
    balance = client.get(f"/v1/accounts/{funded_account}/balance").json()["balance"]
    assert Decimal(balance) == Decimal("100.00")


def test_get_withdrawal(client: TestClient, funded_account: str):
    created = withdraw(client, funded_account, "5.00").json()["withdrawal"]

    response = client.get(f"/v1/withdrawals/{created['id']}")

    assert response.status_code == 200
    assert response.json()["withdrawal"] == created


def test_get_unknown_withdrawal(client: TestClient):
    response = client.get(f"/v1/withdrawals/{uuid.uuid4()}")
    assert response.status_code == 404


def test_advance_new_withdrawal_conflicts(client: TestClient, funded_account: str):
    """stage1 is confirmed at creation, so the first advance is rejected"""
    created = withdraw(client, funded_account, "5.00").json()["withdrawal"]

    response = client.put(f"/v1/withdrawals/{created['id']}/stage")

    assert response.status_code == 409
    after = client.get(f"/v1/withdrawals/{created['id']}").json()["withdrawal"]
    assert after["stages"] == created["stages"]
    assert after["current_stage"] == "stage1"
    assert after["status"] == "pending"


def test_advance_through_all_stages(client: TestClient, funded_account: str, db: Session):
    """Withdrawal completes exactly on the advance of its last stage"""
    withdrawal_id = pending_withdrawal(db, funded_account, stage_count=3)

    first = client.put(f"/v1/withdrawals/{withdrawal_id}/stage").json()["withdrawal"]
    assert first["current_stage"] == "stage2"
    assert first["status"] == "pending"
    assert [s["completed"] for s in first["stages"]] == [True, False, False]

    second = client.put(f"/v1/withdrawals/{withdrawal_id}/stage").json()["withdrawal"]
    assert second["current_stage"] == "stage3"
    assert second["status"] == "pending"

    third = client.put(f"/v1/withdrawals/{withdrawal_id}/stage").json()["withdrawal"]
    assert third["current_stage"] == "stage3"
    assert third["status"] == "completed"
    assert all(s["completed"] for s in third["stages"])

    fourth = client.put(f"/v1/withdrawals/{withdrawal_id}/stage")
    assert fourth.status_code == 409


def test_advance_unknown_withdrawal(client: TestClient):
    response = client.put(f"/v1/withdrawals/{uuid.uuid4()}/stage")
    assert response.status_code == 404
