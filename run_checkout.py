from __future__ import annotations

import argparse
import json
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from checkout_facade.config import DEFAULT_STOCK, SAMPLE_ORDER
from checkout_facade.direct import checkout_directly
from checkout_facade.facade import build_facade
from checkout_facade.models import FailureReason, OrderRequest, OrderResult

EXIT_CODES = {
    FailureReason.INTERNAL_ERROR: 1,
    FailureReason.PRODUCT_UNAVAILABLE: 2,
    FailureReason.INVALID_CARD: 3,
    FailureReason.PAYMENT_DECLINED: 4,
}
EXIT_USAGE = 64


def exit_code_for(result: OrderResult) -> int:
    if result.ok:
        return 0
    return EXIT_CODES[result.reason]


class CheckoutArgumentParser(argparse.ArgumentParser):
    """Reports bad arguments with the same exit code as an invalid order."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def amount(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    p = CheckoutArgumentParser(description="Run one order through checkout and print the outcome.")
    p.add_argument("--product", type=str, default=SAMPLE_ORDER.product_id)
    p.add_argument("--qty", type=int, default=SAMPLE_ORDER.quantity)
    p.add_argument("--price", type=amount, default=SAMPLE_ORDER.unit_price)
    p.add_argument("--email", type=str, default=SAMPLE_ORDER.customer_email)
    p.add_argument("--card", type=str, default=SAMPLE_ORDER.card_number)
    p.add_argument("--cvv", type=str, default=SAMPLE_ORDER.security_code)
    p.add_argument("--address", type=str, default=SAMPLE_ORDER.shipping_address)
    p.add_argument("--zip", type=str, default=SAMPLE_ORDER.postal_code)
    p.add_argument("--coupon", type=str, default=SAMPLE_ORDER.coupon_code, help="Pass an empty string for no coupon")
    p.add_argument("--decline-card", action="append", default=[], help="Card number the gateway should decline")
    p.add_argument("--direct", action="store_true", help="Orchestrate the subsystems from the client instead of the facade")
    p.add_argument("--json", action="store_true", help="Print the result as a JSON object")
    p.add_argument("--verbose", action="store_true", help="Also log each checkout step at DEBUG level")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    try:
        req = OrderRequest(
            product_id=args.product,
            quantity=args.qty,
            customer_email=args.email,
            card_number=args.card,
            security_code=args.cvv,
            shipping_address=args.address,
            postal_code=args.zip,
            unit_price=args.price,
            coupon_code=args.coupon or None,
        )
    except ValueError as e:
        print(f"invalid order: {e}", file=sys.stderr)
        return EXIT_USAGE

    facade = build_facade(stock=dict(DEFAULT_STOCK), declined_cards=args.decline_card)
    if args.direct:
        result = checkout_directly(
            req,
            facade.inventory,
            facade.payments,
            facade.shipping,
            facade.coupons,
            facade.notifications,
        )
    else:
        result = facade.process_order(req)

    if args.json:
        print(json.dumps(result.to_dict()))
    else:
        print("\n=== RESULT ===")
        if result.ok:
            print(f"order {result.order_id} completed")
            print(f"total: {result.total:.2f}")
        else:
            print(f"order failed: {result.reason.value}")
        print("stock:", {sku: item.on_hand for sku, item in facade.inventory.items.items()})

    return exit_code_for(result)


if __name__ == "__main__":
    sys.exit(main())
