from __future__ import annotations

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from checkout_facade.config import CheckoutSettings
from checkout_facade.interfaces import Coupons, Inventory, Notifications, Payments, Shipping
from checkout_facade.journal import Journal
from checkout_facade.models import (
    Coupon,
    CouponUse,
    Notification,
    ShippingLabel,
    StockEntry,
    Transaction,
    TransactionStatus,
)

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    pass


class UnknownProductError(CheckoutError):
    pass


class InsufficientStockError(CheckoutError):
    pass


class UnknownTransactionError(CheckoutError):
    pass


def _mask(card_number: str) -> str:
    return f"****{card_number[-4:]}"


class InventoryLedger(Inventory):
    def __init__(self, stock: Mapping[str, int], journal: Optional[Journal] = None):
        self.journal = journal or Journal()
        self.items: Dict[str, StockEntry] = {}
        for product_id, on_hand in stock.items():
            if on_hand < 0:
                raise ValueError(f"Stock for {product_id} must be >= 0, got {on_hand}")
            self.items[product_id] = StockEntry(product_id=product_id, on_hand=on_hand)

    def stock_of(self, product_id: str) -> int:
        item = self.items.get(product_id)
        return item.on_hand if item else 0

    def check_availability(self, product_id: str, quantity: int = 1) -> bool:
        self.journal.log("Inventory", f"checking availability of {product_id}")
        item = self.items.get(product_id)
        return item is not None and item.on_hand > 0 and item.on_hand >= quantity

    def reserve(self, product_id: str, quantity: int) -> None:
        item = self.items.get(product_id)
        if not item:
            raise UnknownProductError(f"Product {product_id} not found")
        if item.on_hand < quantity:
            raise InsufficientStockError(
                f"Insufficient stock for {product_id}: have={item.on_hand}, need={quantity}"
            )
        item.on_hand -= quantity
        item.reserved += quantity
        self.journal.log("Inventory", f"reserving {quantity}x {product_id} (on_hand={item.on_hand})")

    def release(self, product_id: str, quantity: int) -> None:
        item = self.items.get(product_id)
        if not item:
            return
        released = min(quantity, item.reserved)
        if released < quantity:
            logger.warning(
                "release of %dx %s exceeds outstanding reservations (%d), clamping",
                quantity, product_id, item.reserved,
            )
        item.on_hand += released
        item.reserved -= released
        self.journal.log("Inventory", f"releasing reservation of {released}x {product_id} (on_hand={item.on_hand})")


class CouponRegistry(Coupons):
    def __init__(self, coupons: Mapping[str, Decimal], journal: Optional[Journal] = None):
        self.journal = journal or Journal()
        self.coupons: Dict[str, Coupon] = {}
        for code, discount in coupons.items():
            discount = Decimal(discount)
            if not Decimal("0") <= discount < Decimal("1"):
                raise ValueError(f"Discount for {code} must be in [0, 1), got {discount}")
            self.coupons[code] = Coupon(code=code, discount=discount)
        self.uses: List[CouponUse] = []

    def validate(self, code: str) -> bool:
        self.journal.log("Coupon", f"validating coupon {code}")
        return code in self.coupons

    def get_discount(self, code: str) -> Decimal:
        coupon = self.coupons.get(code)
        return coupon.discount if coupon else Decimal("0")

    def mark_used(self, code: str, customer_id: str) -> None:
        # Reuse is recorded, not prevented.
        self.uses.append(CouponUse(code=code, customer_id=customer_id))
        self.journal.log("Coupon", f"marking coupon {code} as used by {customer_id}")


class ShippingEstimator(Shipping):
    def __init__(self, settings: Optional[CheckoutSettings] = None, journal: Optional[Journal] = None):
        self.settings = settings or CheckoutSettings()
        self.journal = journal or Journal()
        self.labels: Dict[str, ShippingLabel] = {}

    def estimate_cost(self, postal_code: str, weight: Decimal) -> Decimal:
        self.journal.log("Shipping", f"estimating shipping to {postal_code} for {weight}kg")
        return self.settings.shipping_flat_rate

    def create_label(self, order_id: str, address: str) -> str:
        label_id = f"LABEL{order_id}"
        self.labels[label_id] = ShippingLabel(label_id=label_id, order_id=order_id, address=address)
        self.journal.log("Shipping", f"creating label for order {order_id}")
        return label_id

    def schedule_pickup(self, label_id: str, date: datetime) -> None:
        label = self.labels.get(label_id)
        if label:
            label.pickup_date = date
        self.journal.log("Shipping", f"scheduling pickup of {label_id} for {date:%d/%m/%Y}")


class PaymentProcessor(Payments):
    """
    Stub payment gateway.

    Card validation is structural only (number length). Charges always settle
    unless the card is listed in ``declined_cards``.
    """

    def __init__(
        self,
        settings: Optional[CheckoutSettings] = None,
        journal: Optional[Journal] = None,
        declined_cards: Iterable[str] = (),
    ):
        self.settings = settings or CheckoutSettings()
        self.journal = journal or Journal()
        self.declined_cards = set(declined_cards)
        self.transactions: Dict[str, Transaction] = {}

    def _get(self, transaction_id: str) -> Transaction:
        txn = self.transactions.get(transaction_id)
        if not txn:
            raise UnknownTransactionError(f"Transaction {transaction_id} not found")
        return txn

    def open_transaction(self, amount: Decimal) -> str:
        transaction_id = f"TXN{uuid.uuid4().hex[:8]}"
        while transaction_id in self.transactions:
            transaction_id = f"TXN{uuid.uuid4().hex[:8]}"
        self.transactions[transaction_id] = Transaction(transaction_id=transaction_id, amount=amount)
        self.journal.log("Payment", f"opening transaction {transaction_id} for {amount:.2f}")
        return transaction_id

    def validate_card(self, card_number: str, security_code: str) -> bool:
        self.journal.log("Payment", f"validating card {_mask(card_number)}")
        return len(card_number) == self.settings.card_number_length

    def charge(self, transaction_id: str, card_number: str) -> bool:
        txn = self._get(transaction_id)
        self.journal.log("Payment", f"charging transaction {transaction_id}")
        if card_number in self.declined_cards:
            return False
        txn.status = TransactionStatus.CHARGED
        return True

    def rollback(self, transaction_id: str) -> None:
        txn = self._get(transaction_id)
        txn.status = TransactionStatus.ROLLED_BACK
        self.journal.log("Payment", f"rolling back transaction {transaction_id}")


class NotificationDispatcher(Notifications):
    def __init__(self, journal: Optional[Journal] = None):
        self.journal = journal or Journal()
        self.sent: List[Notification] = []

    def _send(self, kind: str, email: str, reference: str, message: str) -> None:
        self.sent.append(Notification(kind=kind, email=email, reference=reference))
        self.journal.log("Notification", message)

    def send_order_confirmation(self, email: str, order_id: str) -> None:
        self._send("confirmation", email, order_id, f"sending order confirmation {order_id} to {email}")

    def send_payment_receipt(self, email: str, transaction_id: str) -> None:
        self._send("receipt", email, transaction_id, f"sending payment receipt {transaction_id} to {email}")

    def send_shipping_notification(self, email: str, label_id: str) -> None:
        self._send("tracking", email, label_id, f"sending tracking code {label_id} to {email}")
