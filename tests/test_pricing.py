from decimal import Decimal

from pricing import (
    quote, normalize_delivery, shipping_cost, generate_order_number, is_pickup_available
)

CART = [{"price": 8500, "quantity": 1}, {"price": 18000, "quantity": 2}]


def test_pickup_in_abuja_is_free():
    q = quote(CART, "pickup", "Abuja")
    assert q.subtotal == Decimal("44500")
    assert q.tax == Decimal("3337.50")
    assert q.shipping == 0
    assert q.total == Decimal("47837.50")
    assert q.delivery_option == "pickup"


def test_delivery_outside_abuja():
    q = quote(CART, "delivery", "Lagos")
    assert q.shipping == Decimal("5000")
    assert q.total == Decimal("52837.50")


def test_delivery_inside_abuja_uses_home_fee():
    q = quote(CART, "delivery", "Abuja")
    assert q.shipping == Decimal("3000")
    assert q.total == Decimal("50837.50")


def test_pickup_outside_abuja_is_priced_as_delivery():
    q = quote(CART, "pickup", "Kano")
    assert q.delivery_option == "delivery"
    assert q.shipping == Decimal("5000")


def test_normalize_delivery():
    assert normalize_delivery("Abuja", "pickup") == "pickup"
    assert normalize_delivery("Lagos", "pickup") == "delivery"
    assert normalize_delivery("Lagos", "delivery") == "delivery"
    assert is_pickup_available("Abuja")
    assert not is_pickup_available("Other")


def test_shipping_is_zero_only_for_home_pickup():
    for state in ["Abuja", "Lagos", "Rivers", "Kano", "Oyo", "Other"]:
        for option in ["pickup", "delivery"]:
            free = shipping_cost(option, state) == 0
            assert free == (option == "pickup" and state == "Abuja")


def test_tax_keeps_fractional_kobo():
    q = quote([{"price": 101, "quantity": 1}], "pickup", "Abuja")
    assert q.tax == Decimal("7.58")


def test_empty_cart():
    q = quote([], "pickup", "Abuja")
    assert q.subtotal == 0 and q.tax == 0 and q.total == 0


def test_order_number_uses_last_eight_digits():
    assert generate_order_number(1734567890123) == "UT67890123"
    assert generate_order_number().startswith("UT")
    assert len(generate_order_number()) == 10


def test_order_numbers_collide_inside_truncation_window():
    # numbers only differ when the trailing digits do
    assert generate_order_number(1_000_012_345_678) == generate_order_number(2_000_012_345_678)
