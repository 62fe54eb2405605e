from fastapi import APIRouter, Depends, HTTPException, Request

from herald.auth.schemas import AuthUser
from herald.auth.session import current_user
from herald.profiles.service import ProfileNotFound, public_url
from herald.shared.db import Database
from herald.shared.deps import get_db
from herald.shared.logging import get_logger
from .gateway import OrderCreationError, PaymentGateway
from .schemas import CreateOrderInput, CreateOrderOutput, Order, PaymentRecord, VerifyPaymentInput, VerifyPaymentOutput, WebhookOutput
from .service import PaymentAlreadyCompleted, PaymentRecordNotFound, SignatureMismatch, create_order, handle_webhook, verify_payment

logger = get_logger("payment.router")


router = APIRouter()


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


@router.post("/create-order", response_model=CreateOrderOutput)
def create_order_endpoint(
    payload: CreateOrderInput,
    user: AuthUser = Depends(current_user),
    db: Database = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway),
):
    if not payload.profile_id or not payload.tier:
        raise HTTPException(status_code=400, detail="Profile ID and tier are required")
    try:
        order, payment = create_order(db, gateway, user.id, payload.profile_id, payload.tier)
    except ProfileNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PaymentAlreadyCompleted as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid tier")
    except OrderCreationError as e:
        raise HTTPException(status_code=502, detail=str(e) or "Failed to create payment order")
    return CreateOrderOutput(order=Order(**order), payment=PaymentRecord(**payment))


@router.post("/verify", response_model=VerifyPaymentOutput)
def verify_endpoint(
    payload: VerifyPaymentInput,
    user: AuthUser = Depends(current_user),
    db: Database = Depends(get_db),
    gateway: PaymentGateway = Depends(get_gateway),
):
    if not (payload.razorpay_payment_id and payload.razorpay_order_id and payload.razorpay_signature):
        raise HTTPException(status_code=400, detail="Missing payment verification data")
    try:
        profile = verify_payment(
            db, gateway, user.id, payload.razorpay_payment_id, payload.razorpay_order_id, payload.razorpay_signature
        )
    except SignatureMismatch as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (PaymentRecordNotFound, ProfileNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    return VerifyPaymentOutput(public_url=public_url(profile["slug"]))


@router.post("/webhook", response_model=WebhookOutput)
async def webhook_endpoint(request: Request, db: Database = Depends(get_db), gateway: PaymentGateway = Depends(get_gateway)):
    signature = request.headers.get("x-razorpay-signature")
    if not signature:
        raise HTTPException(status_code=400, detail="Missing signature")
    body = await request.body()
    try:
        handle_webhook(db, gateway, body, signature)
    except SignatureMismatch as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (PaymentRecordNotFound, ProfileNotFound, ValueError) as e:
        logger.error(f"webhook processing failed: {e}")
        raise HTTPException(status_code=500, detail="Webhook processing failed")
    return WebhookOutput()
