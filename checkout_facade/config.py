from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict

from checkout_facade.models import OrderRequest


@dataclass(frozen=True, slots=True)
class CheckoutSettings:
    shipping_flat_rate: Decimal = Decimal("15.00")
    weight_per_unit: Decimal = Decimal("0.5")
    card_number_length: int = 16
    pickup_lead_days: int = 1


DEFAULT_STOCK: Dict[str, int] = {
    "PROD001": 10,
    "PROD002": 5,
    "PROD003": 0,  # out of stock
}

DEFAULT_COUPONS: Dict[str, Decimal] = {
    "PROMO10": Decimal("0.10"),
    "SAVE20": Decimal("0.20"),
}

SAMPLE_ORDER = OrderRequest(
    product_id="PROD001",
    quantity=2,
    customer_email="customer@example.com",
    card_number="1234567890123456",
    security_code="123",
    shipping_address="123 Example Street",
    postal_code="12345-678",
    unit_price=Decimal("100.00"),
    coupon_code="PROMO10",
)
