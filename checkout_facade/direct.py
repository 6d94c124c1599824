"""
Checkout written by the client against each subsystem directly.

This is what callers had to do before ``OrderFacade`` existed, kept so the two
can be compared side by side. It reproduces the historical behaviour exactly:
the opened payment transaction is never rolled back, the coupon is marked as
used whenever a code was given, and an unexpected error releases nothing.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

from checkout_facade.interfaces import Coupons, Inventory, Notifications, Payments, Shipping
from checkout_facade.models import FailureReason, OrderFailure, OrderRequest, OrderResult, OrderSuccess

logger = logging.getLogger(__name__)


def checkout_directly(
    req: OrderRequest,
    inventory: Inventory,
    payments: Payments,
    shipping: Shipping,
    coupons: Coupons,
    notifications: Notifications,
) -> OrderResult:
    try:
        if not inventory.check_availability(req.product_id):
            return OrderFailure(FailureReason.PRODUCT_UNAVAILABLE)

        inventory.reserve(req.product_id, req.quantity)

        discount = Decimal("0")
        if req.coupon_code and coupons.validate(req.coupon_code):
            discount = coupons.get_discount(req.coupon_code)

        subtotal = req.unit_price * req.quantity
        discount_amount = subtotal * discount
        shipping_cost = shipping.estimate_cost(req.postal_code, req.quantity * Decimal("0.5"))
        total = (subtotal - discount_amount + shipping_cost).quantize(Decimal("0.01"))

        transaction_id = payments.open_transaction(total)
        if not payments.validate_card(req.card_number, req.security_code):
            inventory.release(req.product_id, req.quantity)
            return OrderFailure(FailureReason.INVALID_CARD)
        if not payments.charge(transaction_id, req.card_number):
            inventory.release(req.product_id, req.quantity)
            return OrderFailure(FailureReason.PAYMENT_DECLINED)

        order_id = f"ORD-{uuid.uuid4().hex[:12].upper()}"
        label_id = shipping.create_label(order_id, req.shipping_address)
        shipping.schedule_pickup(label_id, datetime.now() + timedelta(days=1))

        if req.coupon_code:
            coupons.mark_used(req.coupon_code, req.customer_email)

        notifications.send_order_confirmation(req.customer_email, order_id)
        notifications.send_payment_receipt(req.customer_email, transaction_id)
        notifications.send_shipping_notification(req.customer_email, label_id)

        return OrderSuccess(order_id=order_id, transaction_id=transaction_id, label_id=label_id, total=total)
    except Exception as e:
        logger.error("error while processing order: %s", e)
        return OrderFailure(FailureReason.INTERNAL_ERROR, detail=str(e))
