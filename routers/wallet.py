import logging
import math

from fastapi import APIRouter, HTTPException
from sqlalchemy import update
from sqlmodel import select

from config import MIN_WITHDRAWAL_AMOUNT
from db import SessionDep
from models import Transaction, Wallet, utcnow
from schemas import WithdrawRequest
from .auth import CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["wallet"])

RECENT_TRANSACTIONS = 20


def get_wallet(session: SessionDep, user_id: int):
    return session.exec(select(Wallet).where(Wallet.user_id == user_id)).first()


def credit_wallet(session: SessionDep, user_id: int, amount: float) -> None:
    """
    Add earnings to a user's wallet, creating it on first credit.
    Existing balances are bumped with a single UPDATE ... SET balance = balance + x.
    """
    if get_wallet(session, user_id) is None:
        session.add(
            Wallet(user_id=user_id, balance=amount, total_earned=amount, total_withdrawn=0)
        )
        return

    session.exec(
        update(Wallet)
        .where(Wallet.user_id == user_id)
        .values(
            balance=Wallet.balance + amount,
            total_earned=Wallet.total_earned + amount,
            last_updated=utcnow(),
        )
    )


def debit_wallet(session: SessionDep, user_id: int, amount: float) -> None:
    session.exec(
        update(Wallet)
        .where(Wallet.user_id == user_id)
        .values(
            balance=Wallet.balance - amount,
            total_withdrawn=Wallet.total_withdrawn + amount,
            last_updated=utcnow(),
        )
    )


@router.get("/")
def get_wallet_summary(session: SessionDep, current: CurrentUserDep):
    """Balance plus the most recent transactions."""
    wallet = get_wallet(session, current.id)
    transactions = session.exec(
        select(Transaction)
        .where(Transaction.user_id == current.id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(RECENT_TRANSACTIONS)
    ).all()

    return {
        "wallet": wallet
        or {"balance": 0, "total_earned": 0, "total_withdrawn": 0},
        "transactions": transactions,
    }


@router.post("/withdraw")
def request_withdrawal(payload: WithdrawRequest, session: SessionDep, current: CurrentUserDep):
    """
    Queue a bank withdrawal. The balance is deducted straight away and the
    transaction stays PENDING until it is paid out.
    """
    amount = payload.amount
    if not math.isfinite(amount) or amount <= 0:
        raise HTTPException(status_code=400, detail="Valid withdrawal amount is required")

    wallet = get_wallet(session, current.id)
    if wallet is None or wallet.balance < amount:
        raise HTTPException(status_code=400, detail="Insufficient balance")

    if amount < MIN_WITHDRAWAL_AMOUNT:
        raise HTTPException(
            status_code=400,
            detail=f"Minimum withdrawal amount is ₹{MIN_WITHDRAWAL_AMOUNT}",
        )

    transaction = Transaction(
        user_id=current.id,
        type="WITHDRAWAL",
        amount=-amount,
        status="PENDING",
        payment_method="BANK_TRANSFER",
        description=f"Withdrawal request for ₹{amount:g}",
        meta=payload.bank_details,
    )
    session.add(transaction)
    debit_wallet(session, current.id, amount)
    session.commit()
    session.refresh(transaction)

    logger.info(f"User {current.id} requested withdrawal of {amount}")
    return {
        "success": True,
        "message": "Withdrawal request submitted successfully",
        "transaction": transaction,
    }
