from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateOrderInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profile_id: Optional[str] = Field(None, alias="profileId")
    tier: Optional[str] = None


class Order(BaseModel):
    id: str
    entity: str = "order"
    amount: int
    amount_paid: int = 0
    amount_due: int = 0
    currency: str = "INR"
    receipt: Optional[str] = None
    status: str = "created"
    attempts: int = 0
    notes: Dict[str, Any] = {}
    created_at: Optional[int] = None


class PaymentRecord(BaseModel):
    id: str
    user_id: str
    profile_id: str
    razorpay_order_id: str
    razorpay_payment_id: Optional[str] = None
    amount: int
    currency: str = "INR"
    status: str = "created"  # created | captured | failed
    tier: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CreateOrderOutput(BaseModel):
    order: Order
    payment: PaymentRecord


class VerifyPaymentInput(BaseModel):
    razorpay_payment_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_signature: Optional[str] = None


class VerifyPaymentOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Payment verified and profile published successfully"
    public_url: Optional[str] = Field(None, alias="publicUrl")


class WebhookOutput(BaseModel):
    status: str = "ok"
