# pricing.py
"""Checkout pricing: subtotal, VAT, delivery fee and order numbers.

Everything here is pure so the storefront, the checkout wizard and the
tests all agree on the numbers.
"""
from collections import namedtuple
from decimal import Decimal
import time

from core import (
    TAX_RATE, HOME_STATE, HOME_DELIVERY_FEE, OTHER_DELIVERY_FEE, ORDER_NUMBER_PREFIX
)

Quote = namedtuple("Quote", ["subtotal", "tax", "shipping", "total", "delivery_option"])

def is_pickup_available(state):
    return state == HOME_STATE

def normalize_delivery(state, delivery_option):
    """Pickup only exists in the home state; anywhere else it becomes delivery."""
    if delivery_option == "pickup" and not is_pickup_available(state):
        return "delivery"
    return delivery_option

def delivery_fee(state):
    return HOME_DELIVERY_FEE if state == HOME_STATE else OTHER_DELIVERY_FEE

def shipping_cost(delivery_option, state):
    if normalize_delivery(state, delivery_option) == "pickup":
        return Decimal("0.00")
    return Decimal(delivery_fee(state))

def _line_field(line, name):
    if isinstance(line, dict):
        return line[name]
    return getattr(line, name)

def cart_subtotal(lines):
    subtotal = Decimal("0")
    for line in lines:
        subtotal += Decimal(str(_line_field(line, "price"))) * int(_line_field(line, "quantity"))
    return subtotal

def quote(lines, delivery_option, state):
    """Price a cart for the given delivery choice.

    ``lines`` may be cart dicts or anything with ``price`` and ``quantity``
    attributes. A pickup request outside the home state is priced as
    delivery, and the returned quote says so.
    """
    option = normalize_delivery(state, delivery_option)
    subtotal = cart_subtotal(lines)
    tax = (subtotal * TAX_RATE).quantize(Decimal("0.01"))
    ship = shipping_cost(option, state)
    total = (subtotal + tax + ship).quantize(Decimal("0.01"))
    return Quote(subtotal=subtotal, tax=tax, shipping=ship, total=total, delivery_option=option)

def generate_order_number(now_ms=None):
    """Prefix plus the trailing 8 digits of the epoch-millisecond clock.

    Not collision free: two orders inside the same truncation window get
    the same number. orders.submit_order refuses to reuse a number.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{ORDER_NUMBER_PREFIX}{str(int(now_ms))[-8:]}"
