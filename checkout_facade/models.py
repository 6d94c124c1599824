from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True, slots=True)
class OrderRequest:
    """
    Everything the customer submits at checkout.
    Immutable: the facade only reads it.
    """

    product_id: str
    quantity: int
    customer_email: str
    card_number: str
    security_code: str
    shipping_address: str
    postal_code: str
    unit_price: Decimal
    coupon_code: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.product_id:
            raise ValueError("product_id must not be empty")
        if self.quantity <= 0:
            raise ValueError("quantity must be > 0")
        if not self.unit_price.is_finite():
            raise ValueError("unit_price must be a finite amount")
        if self.unit_price < 0:
            raise ValueError("unit_price must be >= 0")
        if not self.customer_email:
            raise ValueError("customer_email must not be empty")


@dataclass(slots=True)
class StockEntry:
    product_id: str
    on_hand: int
    reserved: int = 0


@dataclass(frozen=True, slots=True)
class Coupon:
    code: str
    discount: Decimal


@dataclass(frozen=True, slots=True)
class CouponUse:
    code: str
    customer_id: str


class TransactionStatus(str, Enum):
    OPEN = "open"
    CHARGED = "charged"
    ROLLED_BACK = "rolled_back"


@dataclass(slots=True)
class Transaction:
    transaction_id: str
    amount: Decimal
    status: TransactionStatus = TransactionStatus.OPEN


@dataclass(slots=True)
class ShippingLabel:
    label_id: str
    order_id: str
    address: str
    pickup_date: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class Notification:
    kind: str
    email: str
    reference: str


@dataclass(frozen=True, slots=True)
class OrderAmounts:
    subtotal: Decimal
    discount_amount: Decimal
    shipping_cost: Decimal
    total: Decimal


class FailureReason(str, Enum):
    PRODUCT_UNAVAILABLE = "ProductUnavailable"
    INVALID_CARD = "InvalidCard"
    PAYMENT_DECLINED = "PaymentDeclined"
    INTERNAL_ERROR = "InternalError"


@dataclass(frozen=True, slots=True)
class OrderSuccess:
    order_id: str
    transaction_id: str
    label_id: str
    total: Decimal

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return {
            "status": "success",
            "order_id": self.order_id,
            "transaction_id": self.transaction_id,
            "label_id": self.label_id,
            "total": str(self.total),
        }


@dataclass(frozen=True, slots=True)
class OrderFailure:
    reason: FailureReason
    detail: str = field(default="", compare=False)

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> dict:
        data = {"status": "failure", "reason": self.reason.value}
        if self.detail:
            data["detail"] = self.detail
        return data


OrderResult = Union[OrderSuccess, OrderFailure]
