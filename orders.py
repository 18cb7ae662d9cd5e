# orders.py
"""Order placement and order administration.

``submit_order`` is the one write path for new orders. The order row, its
items and the stock decrements share a single transaction; emails go out
after commit and can never fail the order. Every side effect is reported
back on the result and through the ``order_submitted`` signal.
"""
from dataclasses import dataclass, field
from typing import List, Optional
import logging
import time

from blinker import Namespace
from flask import current_app
from pydantic import ValidationError
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from core import (
    db, Order, OrderItem, Product, ORDER_STATUSES, REVENUE_STATUSES, LOW_STOCK_THRESHOLD
)
from schemas import OrderPayload, error_text
import notify

logger = logging.getLogger(__name__)

_signals = Namespace()
order_submitted = _signals.signal("order-submitted")

GENERIC_FAILURE = "Failed to submit order. Please try again or contact support."


@dataclass
class SideEffectResult:
    name: str
    ok: bool
    detail: str = ""


@dataclass
class SubmitResult:
    success: bool
    order: Optional[Order] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None     # validation, conflict, failure
    duplicate: bool = False
    stock: List[SideEffectResult] = field(default_factory=list)
    notifications: List[SideEffectResult] = field(default_factory=list)

    @property
    def side_effect_failures(self):
        return [r for r in self.stock + self.notifications if not r.ok]


def _failure(error, kind="failure"):
    return SubmitResult(success=False, error=error, error_kind=kind)


def _existing(payload):
    existing = Order.query.filter_by(order_number=payload.order_number).first()
    if existing is None:
        return None
    if existing.customer_email.lower() == str(payload.customer_email).lower():
        logger.info("Order %s already placed; returning the stored order", payload.order_number)
        return SubmitResult(success=True, order=existing, duplicate=True)
    logger.warning("Order number %s already belongs to another customer", payload.order_number)
    return _failure(f"Order number {payload.order_number} is already in use", "conflict")


def _build_item(order, line):
    return OrderItem(
        order_id=order.id,
        product_id=line.product_id,
        product_name=line.product_name,
        price=line.price,
        quantity=line.quantity,
        size=line.size,
        color=line.color,
    )


def _decrement_stock(line):
    """Take ``quantity`` off the product only if that much is left."""
    name = f"stock:{line.product_id}"
    res = db.session.execute(
        update(Product)
        .where(Product.id == line.product_id, Product.stock >= line.quantity)
        .values(stock=Product.stock - line.quantity)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 1:
        return SideEffectResult(name, True)
    logger.warning(
        "Stock for product %s not decremented: fewer than %d left", line.product_id, line.quantity
    )
    return SideEffectResult(name, False, f"insufficient stock for {line.quantity} x {line.product_name}")


def _place_order(payload):
    found = _existing(payload)
    if found is not None:
        return found

    order = Order(
        order_number=payload.order_number,
        customer_name=payload.customer_name,
        customer_email=str(payload.customer_email),
        customer_phone=payload.customer_phone,
        total_amount=payload.total_amount,
        status="pending",
        delivery_option=payload.delivery_option,
        selected_state=payload.selected_state,
        delivery_address=payload.delivery_address,
        city=payload.city,
        note=payload.note or None,
        payment_verified=False,
        receipt_url=payload.receipt_url,
    )
    db.session.add(order)
    try:
        db.session.flush()
    except IntegrityError:
        # lost a race on the unique order number
        db.session.rollback()
        return _existing(payload) or _failure(GENERIC_FAILURE)

    try:
        for line in payload.items:
            db.session.add(_build_item(order, line))
        db.session.flush()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Order %s: item insert failed, order rolled back: %s", payload.order_number, exc)
        if isinstance(exc, OperationalError):
            raise
        return _failure("Failed to create order items")

    stock = [_decrement_stock(line) for line in payload.items if line.product_id is not None]
    db.session.commit()
    logger.info(
        "Order %s placed: %d item(s), total %s", order.order_number, len(payload.items), order.total_amount
    )
    return SubmitResult(success=True, order=order, stock=stock)


def _notify(order):
    results = []
    for name, build in (("customer_email", notify.customer_confirmation),
                        ("owner_email", notify.owner_notification)):
        try:
            notify.send(build(order))
            results.append(SideEffectResult(name, True))
        except Exception as exc:  # mail trouble never fails the order
            logger.exception("Order %s: %s not sent", order.order_number, name)
            results.append(SideEffectResult(name, False, str(exc)))
    return results


def submit_order(data):
    """Validate and persist an order, then notify customer and operator.

    ``data`` is an ``OrderPayload`` or a mapping in its shape. Transient
    database errors are retried; the order-number check makes a retry or a
    double submit return the stored order instead of writing a second one.
    """
    if isinstance(data, OrderPayload):
        payload = data
    else:
        try:
            payload = OrderPayload.model_validate(data)
        except ValidationError as exc:
            return _failure(error_text(exc), "validation")

    app = current_app._get_current_object()
    attempts = max(1, int(app.config["ORDER_SUBMIT_ATTEMPTS"]))
    delay = float(app.config["ORDER_SUBMIT_RETRY_DELAY"])

    for attempt in range(1, attempts + 1):
        try:
            result = _place_order(payload)
            break
        except OperationalError as exc:
            db.session.rollback()
            logger.warning(
                "Order %s: attempt %d/%d failed: %s", payload.order_number, attempt, attempts, exc
            )
            if attempt == attempts:
                result = _failure(GENERIC_FAILURE)
                break
            time.sleep(delay)

    if result.success and not result.duplicate:
        result.notifications = _notify(result.order)
    for failed in result.side_effect_failures:
        logger.warning("Order %s: side effect %s failed: %s", payload.order_number, failed.name, failed.detail)
    order_submitted.send(app, result=result)
    return result


# --- Admin order operations ---

def list_orders(status=None):
    q = Order.query.order_by(Order.created_at.desc(), Order.id.desc())
    if status and status != "all":
        q = q.filter_by(status=status)
    return q.all()


def update_order_status(order, status):
    """Any status may follow any other; no transition rules are enforced."""
    if status not in ORDER_STATUSES:
        raise ValueError(f"Unknown status: {status}")
    previous = order.status
    order.status = status
    db.session.commit()
    logger.info("Order %s status %s -> %s", order.order_number, previous, status)
    return order


def set_payment_verified(order, verified):
    order.payment_verified = bool(verified)
    db.session.commit()
    logger.info("Order %s payment_verified=%s", order.order_number, order.payment_verified)
    return order


def dashboard_stats():
    revenue = (
        db.session.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.status.in_(REVENUE_STATUSES))
        .scalar()
    )
    return {
        "total_products": Product.query.filter_by(is_active=True).count(),
        "total_orders": Order.query.count(),
        "pending_orders": Order.query.filter_by(status="pending").count(),
        "total_revenue": revenue,
        "recent_orders": Order.query.order_by(Order.created_at.desc(), Order.id.desc()).limit(5).all(),
        "low_stock_products": (
            Product.query.filter(Product.is_active.is_(True), Product.stock <= LOW_STOCK_THRESHOLD)
            .order_by(Product.stock.asc())
            .limit(5)
            .all()
        ),
    }
