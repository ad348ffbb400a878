import pytest
from sqlmodel import select

from models import Transaction, Wallet


@pytest.fixture
def funded(session, giver):
    wallet = Wallet(user_id=giver.id, balance=500, total_earned=500, total_withdrawn=0)
    session.add(wallet)
    session.commit()
    return wallet


def test_wallet_without_record_is_zero(client, seeker, headers):
    res = client.get("/wallet/", headers=headers(seeker))

    assert res.status_code == 200
    assert res.json()["wallet"] == {"balance": 0, "total_earned": 0, "total_withdrawn": 0}
    assert res.json()["transactions"] == []


def test_withdraw(client, session, giver, funded, headers):
    res = client.post(
        "/wallet/withdraw",
        json={"amount": 200, "bank_details": {"account": "XXXX1234", "ifsc": "HDFC0000001"}},
        headers=headers(giver),
    )

    assert res.status_code == 200
    transaction = res.json()["transaction"]
    assert transaction["type"] == "WITHDRAWAL"
    assert transaction["amount"] == -200
    assert transaction["status"] == "PENDING"

    session.refresh(funded)
    assert funded.balance == 300
    assert funded.total_withdrawn == 200

    summary = client.get("/wallet/", headers=headers(giver)).json()
    assert summary["wallet"]["balance"] == 300
    assert len(summary["transactions"]) == 1


@pytest.mark.parametrize(
    "amount, detail",
    [
        (0, "Valid withdrawal amount is required"),
        (-10, "Valid withdrawal amount is required"),
        (600, "Insufficient balance"),
        (50, "Minimum withdrawal amount is ₹100"),
    ],
)
def test_withdraw_rejections(client, session, giver, funded, headers, amount, detail):
    res = client.post("/wallet/withdraw", json={"amount": amount}, headers=headers(giver))

    assert res.status_code == 400
    assert res.json()["detail"] == detail
    session.refresh(funded)
    assert funded.balance == 500
    assert session.exec(select(Transaction)).all() == []


@pytest.mark.parametrize("raw_amount", ["NaN", "Infinity"])
def test_withdraw_rejects_non_finite_amount(client, session, giver, funded, headers, raw_amount):
    res = client.post(
        "/wallet/withdraw",
        content=f'{{"amount": {raw_amount}}}',
        headers={**headers(giver), "Content-Type": "application/json"},
    )

    assert res.status_code == 400
    assert res.json()["detail"] == "Valid withdrawal amount is required"
    session.refresh(funded)
    assert funded.balance == 500
    assert session.exec(select(Transaction)).all() == []


def test_withdraw_without_wallet(client, seeker, headers):
    res = client.post("/wallet/withdraw", json={"amount": 150}, headers=headers(seeker))
    assert res.status_code == 400
    assert res.json()["detail"] == "Insufficient balance"
