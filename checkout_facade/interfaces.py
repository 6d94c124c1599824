"""
Narrow capability interfaces the facade depends on.

The in-memory implementations live in ``checkout_facade.services``; anything
implementing these methods can be handed to ``OrderFacade`` instead.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal


class Inventory(ABC):
    @abstractmethod
    def check_availability(self, product_id: str, quantity: int = 1) -> bool: ...

    @abstractmethod
    def reserve(self, product_id: str, quantity: int) -> None: ...

    @abstractmethod
    def release(self, product_id: str, quantity: int) -> None: ...


class Coupons(ABC):
    @abstractmethod
    def validate(self, code: str) -> bool: ...

    @abstractmethod
    def get_discount(self, code: str) -> Decimal: ...

    @abstractmethod
    def mark_used(self, code: str, customer_id: str) -> None: ...


class Shipping(ABC):
    @abstractmethod
    def estimate_cost(self, postal_code: str, weight: Decimal) -> Decimal: ...

    @abstractmethod
    def create_label(self, order_id: str, address: str) -> str: ...

    @abstractmethod
    def schedule_pickup(self, label_id: str, date: datetime) -> None: ...


class Payments(ABC):
    @abstractmethod
    def open_transaction(self, amount: Decimal) -> str: ...

    @abstractmethod
    def validate_card(self, card_number: str, security_code: str) -> bool: ...

    @abstractmethod
    def charge(self, transaction_id: str, card_number: str) -> bool: ...

    @abstractmethod
    def rollback(self, transaction_id: str) -> None: ...


class Notifications(ABC):
    """Fire-and-forget: nothing is returned and delivery is not acknowledged."""

    @abstractmethod
    def send_order_confirmation(self, email: str, order_id: str) -> None: ...

    @abstractmethod
    def send_payment_receipt(self, email: str, transaction_id: str) -> None: ...

    @abstractmethod
    def send_shipping_notification(self, email: str, label_id: str) -> None: ...
