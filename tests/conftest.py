"""Pytest fixtures for checkout facade (fresh in-memory subsystems per test)."""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from checkout_facade.config import SAMPLE_ORDER, CheckoutSettings
from checkout_facade.facade import OrderFacade
from checkout_facade.journal import Journal
from checkout_facade.models import OrderRequest
from checkout_facade.services import (
    CouponRegistry,
    InventoryLedger,
    NotificationDispatcher,
    PaymentProcessor,
    ShippingEstimator,
)

FIXED_NOW = datetime(2024, 3, 1, 10, 0, 0)
DECLINED_CARD = "4000000000000002"


@pytest.fixture
def journal() -> Journal:
    return Journal()


@pytest.fixture
def settings() -> CheckoutSettings:
    return CheckoutSettings()


@pytest.fixture
def inventory(journal) -> InventoryLedger:
    return InventoryLedger({"PROD001": 10, "PROD002": 5, "PROD003": 0}, journal)


@pytest.fixture
def coupons(journal) -> CouponRegistry:
    return CouponRegistry({"PROMO10": Decimal("0.10"), "SAVE20": Decimal("0.20")}, journal)


@pytest.fixture
def shipping(settings, journal) -> ShippingEstimator:
    return ShippingEstimator(settings, journal)


@pytest.fixture
def payments(settings, journal) -> PaymentProcessor:
    return PaymentProcessor(settings, journal, declined_cards=[DECLINED_CARD])


@pytest.fixture
def notifications(journal) -> NotificationDispatcher:
    return NotificationDispatcher(journal)


@pytest.fixture
def facade(inventory, payments, shipping, coupons, notifications, settings, journal) -> OrderFacade:
    return OrderFacade(
        inventory=inventory,
        payments=payments,
        shipping=shipping,
        coupons=coupons,
        notifications=notifications,
        settings=settings,
        journal=journal,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def order() -> OrderRequest:
    return SAMPLE_ORDER


@pytest.fixture
def make_order():
    def _make(**changes) -> OrderRequest:
        return replace(SAMPLE_ORDER, **changes)

    return _make
