from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Mapping, Optional, Tuple

from checkout_facade.config import DEFAULT_COUPONS, DEFAULT_STOCK, CheckoutSettings
from checkout_facade.interfaces import Coupons, Inventory, Notifications, Payments, Shipping
from checkout_facade.journal import Journal
from checkout_facade.models import (
    FailureReason,
    OrderAmounts,
    OrderFailure,
    OrderRequest,
    OrderResult,
    OrderSuccess,
)
from checkout_facade.services import (
    CouponRegistry,
    InventoryLedger,
    NotificationDispatcher,
    PaymentProcessor,
    ShippingEstimator,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass(slots=True)
class Compensation:
    """Undo action registered by a step that changed subsystem state."""

    name: str
    action: Callable[[], None]


class OrderFacade:
    """
    Single entry point for checkout.

    Sequences inventory, coupons, shipping, payment and notifications for one
    order. Once stock is reserved the facade owes a release; once a
    transaction is opened it owes a rollback until the charge settles. Those
    debts are kept as compensations and paid in reverse order on any failure.
    """

    def __init__(
        self,
        inventory: Inventory,
        payments: Payments,
        shipping: Shipping,
        coupons: Coupons,
        notifications: Notifications,
        settings: Optional[CheckoutSettings] = None,
        journal: Optional[Journal] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.inventory = inventory
        self.payments = payments
        self.shipping = shipping
        self.coupons = coupons
        self.notifications = notifications
        self.settings = settings or CheckoutSettings()
        self.journal = journal or Journal()
        self.clock = clock

    def _discount_for(self, coupon_code: Optional[str]) -> Tuple[bool, Decimal]:
        """Return whether the code applies and its discount fraction."""
        if not coupon_code:
            return False, Decimal("0")
        if not self.coupons.validate(coupon_code):
            # Unknown codes are ignored, not an error.
            logger.debug("coupon %s not recognised, no discount", coupon_code)
            return False, Decimal("0")
        return True, self.coupons.get_discount(coupon_code)

    def _calculate_amounts(self, req: OrderRequest, discount: Decimal) -> OrderAmounts:
        subtotal = (req.unit_price * req.quantity).quantize(CENTS)
        discount_amount = (subtotal * discount).quantize(CENTS)
        weight = self.settings.weight_per_unit * req.quantity
        shipping_cost = Decimal(self.shipping.estimate_cost(req.postal_code, weight)).quantize(CENTS)
        total = (subtotal - discount_amount + shipping_cost).quantize(CENTS)
        return OrderAmounts(
            subtotal=subtotal,
            discount_amount=discount_amount,
            shipping_cost=shipping_cost,
            total=total,
        )

    def _compensate(self, compensations: List[Compensation]) -> None:
        for comp in reversed(compensations):
            self.journal.log("Checkout", f"COMPENSATE {comp.name}")
            try:
                comp.action()
            except Exception as comp_exc:
                logger.exception("compensation %s failed", comp.name)
                self.journal.log("Checkout", f"COMPENSATION FAILED at {comp.name}: {comp_exc}")
                continue
            self.journal.log("Checkout", f"COMPENSATE {comp.name} OK")
        compensations.clear()

    def _fail(self, reason: FailureReason, compensations: List[Compensation], detail: str = "") -> OrderFailure:
        self.journal.log("Checkout", f"FAILED: {reason.value}" + (f" ({detail})" if detail else ""))
        self._compensate(compensations)
        return OrderFailure(reason=reason, detail=detail)

    def _notify(self, name: str, send: Callable[[str, str], None], email: str, reference: str) -> None:
        try:
            send(email, reference)
        except Exception as exc:
            logger.warning("notification %s to %s failed: %s", name, email, exc)
            self.journal.log("Checkout", f"notification {name} not delivered: {exc}")

    def process_order(self, req: OrderRequest) -> OrderResult:
        self.journal.log(
            "Checkout",
            f"START product={req.product_id} qty={req.quantity} coupon={req.coupon_code}",
        )
        compensations: List[Compensation] = []
        try:
            if not self.inventory.check_availability(req.product_id, req.quantity):
                return self._fail(FailureReason.PRODUCT_UNAVAILABLE, compensations)
            logger.debug("step availability ok for %s", req.product_id)

            self.inventory.reserve(req.product_id, req.quantity)
            compensations.append(
                Compensation("ReleaseReservation", lambda: self.inventory.release(req.product_id, req.quantity))
            )

            coupon_applied, discount = self._discount_for(req.coupon_code)
            amounts = self._calculate_amounts(req, discount)
            self.journal.log(
                "Checkout",
                f"amounts: subtotal={amounts.subtotal} discount={amounts.discount_amount} "
                f"shipping={amounts.shipping_cost} total={amounts.total}",
            )

            transaction_id = self.payments.open_transaction(amounts.total)
            rollback = Compensation("RollbackTransaction", lambda: self.payments.rollback(transaction_id))
            compensations.append(rollback)

            if not self.payments.validate_card(req.card_number, req.security_code):
                return self._fail(FailureReason.INVALID_CARD, compensations)
            if not self.payments.charge(transaction_id, req.card_number):
                return self._fail(FailureReason.PAYMENT_DECLINED, compensations)
            logger.debug("step payment ok for %s", transaction_id)
            # A settled charge is never rolled back.
            compensations.remove(rollback)

            order_id = f"ORD-{uuid.uuid4().hex[:12].upper()}"
            label_id = self.shipping.create_label(order_id, req.shipping_address)
            self.shipping.schedule_pickup(label_id, self.clock() + timedelta(days=self.settings.pickup_lead_days))
            logger.debug("step shipping ok for %s", label_id)

            if coupon_applied:
                self.coupons.mark_used(req.coupon_code, req.customer_email)
        except Exception as exc:
            logger.exception("checkout of %s failed", req.product_id)
            return self._fail(FailureReason.INTERNAL_ERROR, compensations, detail=str(exc))

        self._notify("confirmation", self.notifications.send_order_confirmation, req.customer_email, order_id)
        self._notify("receipt", self.notifications.send_payment_receipt, req.customer_email, transaction_id)
        self._notify("tracking", self.notifications.send_shipping_notification, req.customer_email, label_id)

        self.journal.log("Checkout", f"OK order={order_id} total={amounts.total}")
        return OrderSuccess(
            order_id=order_id,
            transaction_id=transaction_id,
            label_id=label_id,
            total=amounts.total,
        )


def build_facade(
    stock: Optional[Mapping[str, int]] = None,
    coupons: Optional[Mapping[str, Decimal]] = None,
    settings: Optional[CheckoutSettings] = None,
    journal: Optional[Journal] = None,
    clock: Callable[[], datetime] = datetime.now,
    declined_cards=(),
) -> OrderFacade:
    """Wire an ``OrderFacade`` over fresh in-memory subsystems sharing one journal."""
    settings = settings or CheckoutSettings()
    journal = journal or Journal()
    return OrderFacade(
        inventory=InventoryLedger(DEFAULT_STOCK if stock is None else stock, journal),
        payments=PaymentProcessor(settings, journal, declined_cards=declined_cards),
        shipping=ShippingEstimator(settings, journal),
        coupons=CouponRegistry(DEFAULT_COUPONS if coupons is None else coupons, journal),
        notifications=NotificationDispatcher(journal),
        settings=settings,
        journal=journal,
        clock=clock,
    )
