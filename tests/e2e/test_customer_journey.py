"""
End-to-end customer journeys through the public API.

Each scenario walks a customer from registration to the operations a real
account holder performs, checking balances and ledger entries along the way.
"""

from datetime import date, timedelta
from decimal import Decimal
from fastapi.testclient import TestClient


def test_new_customer_saves_and_withdraws(client: TestClient, registration: dict, stored_otp, mail_client):
    """Register, verify, deposit, withdraw, then read the statement"""
    # Registration
    registered = client.post("/v1/users/register", json=registration)
    assert registered.status_code == 201
    user = registered.json()["user"]
    first_account = user["accounts"][0]["account_number"]

    # OTP verification opens the default account
    verified = client.post(
        "/v1/users/verify-otp",
        json={"email": registration["email"], "otp": stored_otp(registration["email"])},
    )
    assert verified.status_code == 201
    accounts = verified.json()["user"]["accounts"]
    default_account = next(a["account_number"] for a in accounts if a["account_number"] != first_account)

    # Login with the emailed account number
    login = client.post(
        "/v1/users/login",
        json={"account_number": default_account, "password": registration["password"]},
    )
    assert login.status_code == 200

    # Fund both accounts
    for number, amount in ((first_account, "250.00"), (default_account, "50.00")):
        response = client.post(
            "/v1/accounts/deposit",
            json={"account_number": number, "account_pin": registration["account_pin"], "amount": amount},
        )
        assert response.status_code == 200

    # Withdraw from the savings account
    withdrawal = client.post(
        "/v1/withdrawals",
        json={"account_number": first_account, "amount": "75.50", "currency": "USD", "description": "Groceries"},
    )
    assert withdrawal.status_code == 201
    assert Decimal(withdrawal.json()["account_balance"]) == Decimal("174.50")

    # User total tracks both accounts
    users = client.get("/v1/users").json()["users"]
    assert Decimal(users[0]["balance"]) == Decimal("224.50")

    # Statement for the savings account
    today = date.today()
    statement = client.post(
        "/v1/statements",
        json={
            "user_id": user["id"],
            "account_number": first_account,
            "start_date": str(today - timedelta(days=1)),
            "end_date": str(today + timedelta(days=1)),
        },
    ).json()["statement"]
    assert [t["type"] for t in statement["transactions"]] == ["deposit", "debit"]
    assert Decimal(statement["balance"]) == Decimal("174.50")

    # Recent activity spans both accounts
    recent = client.get(f"/v1/users/{user['id']}/transactions/recent").json()["recent_transactions"]
    assert len(recent) == 3

    # OTP email, then account number email
    subjects = [m.subject for m in mail_client.sent]
    assert subjects == ["OTP for Account Registration", "Your New Account Information"]


def test_borrower_repays_loan(client: TestClient, registered_user: dict, funded_account: str):
    """Apply for a loan, repay part of it, and review the loan history"""
    user_id = registered_user["id"]

    loan = client.post(
        "/v1/loans",
        json={
            "user_id": user_id,
            "loan_amount": "1200.00",
            "currency": "USD",
            "interest_rate": "5.0",
            "term_length": 6,
        },
    ).json()["loan"]
    assert loan["status"] == "pending"

    for _ in range(2):
        response = client.post(
            f"/v1/loans/{loan['id']}/repayments",
            json={"user_id": user_id, "repayment_amount": "200.00", "currency": "USD"},
        )
        assert response.status_code == 201

    loans = client.get(f"/v1/users/{user_id}/loans").json()["loans"]
    assert len(loans) == 1
    assert loans[0]["status"] == "active"
    assert len(loans[0]["repayments"]) == 2

    client.post("/v1/notifications", json={"user_id": user_id, "message": "Repayment received"})
    notifications = client.get(f"/v1/users/{user_id}/notifications").json()["notifications"]
    assert [n["message"] for n in notifications] == ["Repayment received"]


def test_customer_closes_profile(client: TestClient, registered_user: dict, funded_account: str):
    """Deleting a user removes the accounts and everything attached"""
    client.post(
        "/v1/withdrawals",
        json={"account_number": funded_account, "amount": "10.00", "currency": "USD", "description": "Cash"},
    )

    response = client.delete(f"/v1/users/{registered_user['id']}")

    assert response.status_code == 200
    assert client.get(f"/v1/accounts/{funded_account}/balance").status_code == 404
    assert client.get(f"/v1/users/{registered_user['id']}/loans").status_code == 404
