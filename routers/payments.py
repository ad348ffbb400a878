import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from config import RAZORPAY_KEY_ID
from db import SessionDep
from models import TimeSession, Transaction, User
from payments import (
    PaymentGatewayError,
    RazorpayClient,
    calculate_earnings,
    get_payment_gateway,
    verify_signature,
)
from schemas import CreateOrderRequest, RefundRequest, VerifyPaymentRequest
from .auth import AdminDep, CurrentUserDep
from .wallet import credit_wallet

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])

GatewayDep = Annotated[RazorpayClient, Depends(get_payment_gateway)]


@router.post("/create-order")
def create_order(
    order_in: CreateOrderRequest,
    session: SessionDep,
    current: CurrentUserDep,
    gateway: GatewayDep,
):
    """Create a gateway order for one of the seeker's unpaid sessions."""
    ts = session.get(TimeSession, order_in.session_id)
    if ts is None or ts.seeker_id != current.id or ts.payment_status != "PENDING":
        raise HTTPException(status_code=404, detail="Session not found or already paid")

    earnings = calculate_earnings(order_in.amount)

    try:
        order = gateway.create_order(
            amount=order_in.amount,
            receipt=f"session_{ts.id}",
            notes={
                "session_id": ts.id,
                "user_id": current.id,
                "type": "SESSION_PAYMENT",
            },
        )
    except PaymentGatewayError:
        raise HTTPException(status_code=502, detail="Failed to create payment order")

    ts.amount = order_in.amount
    ts.platform_fee = earnings["platform_fee"]
    ts.giver_earnings = earnings["giver_earnings"]
    session.add(ts)
    session.commit()

    logger.info(f"Payment order {order.get('id')} created for session {ts.id}")
    return {"success": True, "order": order, "key_id": RAZORPAY_KEY_ID}


@router.post("/verify")
def verify_payment(
    payment_in: VerifyPaymentRequest,
    session: SessionDep,
    current: CurrentUserDep,
    gateway: GatewayDep,
):
    """
    Check the checkout signature, mark the session paid and move the
    giver's share into their wallet.
    """
    if not verify_signature(
        payment_in.razorpay_order_id,
        payment_in.razorpay_payment_id,
        payment_in.razorpay_signature,
    ):
        logger.warning(f"Invalid payment signature for session {payment_in.session_id}")
        raise HTTPException(status_code=400, detail="Invalid payment signature")

    try:
        gateway.fetch_payment(payment_in.razorpay_payment_id)
    except PaymentGatewayError:
        raise HTTPException(status_code=502, detail="Failed to fetch payment details")

    ts = session.get(TimeSession, payment_in.session_id)
    if ts is None or ts.seeker_id != current.id:
        raise HTTPException(status_code=404, detail="Session not found")
    if ts.payment_status == "PAID":
        raise HTTPException(status_code=400, detail="Session already paid")

    seeker = session.get(User, ts.seeker_id)
    giver = session.get(User, ts.giver_id)

    ts.payment_status = "PAID"
    ts.payment_id = payment_in.razorpay_payment_id
    session.add(ts)

    session.add(
        Transaction(
            user_id=ts.seeker_id,
            session_id=ts.id,
            type="SESSION_PAYMENT",
            amount=ts.amount,
            status="COMPLETED",
            payment_method="RAZORPAY",
            payment_id=payment_in.razorpay_payment_id,
            description=f"Payment for {ts.session_type} session with {giver.name}",
            meta={
                "razorpay_order_id": payment_in.razorpay_order_id,
                "razorpay_payment_id": payment_in.razorpay_payment_id,
                "razorpay_signature": payment_in.razorpay_signature,
            },
        )
    )

    credit_wallet(session, ts.giver_id, ts.giver_earnings)

    session.add(
        Transaction(
            user_id=ts.giver_id,
            session_id=ts.id,
            type="EARNINGS_CREDIT",
            amount=ts.giver_earnings,
            status="COMPLETED",
            payment_method="WALLET",
            description=f"Earnings from {ts.session_type} session with {seeker.name}",
            meta={
                "session_id": ts.id,
                "seeker_id": ts.seeker_id,
                "platform_fee": ts.platform_fee,
            },
        )
    )

    session.commit()
    session.refresh(ts)

    logger.info(f"Payment {ts.payment_id} verified for session {ts.id}")
    return {
        "success": True,
        "message": "Payment verified and processed successfully",
        "session": ts,
    }


@router.post("/refund")
def refund_payment(
    refund_in: RefundRequest,
    session: SessionDep,
    admin: AdminDep,
    gateway: GatewayDep,
):
    """Refund a paid session through the gateway (admins only)."""
    ts = session.get(TimeSession, refund_in.session_id)
    if ts is None or ts.payment_status != "PAID" or not ts.payment_id:
        raise HTTPException(status_code=404, detail="Paid session not found")

    amount = refund_in.amount or ts.amount
    try:
        refund = gateway.refund_payment(ts.payment_id, amount)
    except PaymentGatewayError:
        raise HTTPException(status_code=502, detail="Failed to process refund")

    ts.payment_status = "REFUNDED"
    session.add(ts)
    session.add(
        Transaction(
            user_id=ts.seeker_id,
            session_id=ts.id,
            type="REFUND",
            amount=amount,
            status="COMPLETED",
            payment_method="RAZORPAY",
            payment_id=ts.payment_id,
            description=f"Refund for session {ts.id}",
            meta={"refund_id": refund.get("id"), "refunded_by": admin.id},
        )
    )
    session.commit()

    logger.info(f"Refunded {amount} for session {ts.id}")
    return {"success": True, "refund": refund}
