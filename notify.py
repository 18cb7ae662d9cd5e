# notify.py
from flask import current_app
from flask_mail import Message

from core import mail, PICKUP_ADDRESS, SUPPORT_PHONE

def _naira(amount):
    return f"₦{amount:,}"

def _delivery_line(order):
    if order.delivery_option == "pickup":
        return f"Store Pickup at {PICKUP_ADDRESS}"
    return f"Delivery to {order.delivery_address}, {order.city} ({order.selected_state})"

def customer_confirmation(order):
    lines = [f"Dear {order.customer_name},", "",
             f"Your order #{order.order_number} has been received and is being processed.", "",
             f"Total amount: {_naira(order.total_amount)}",
             f"Delivery method: {_delivery_line(order)}",
             "Status: Pending (payment verification in progress)", "",
             "Items:"]
    for it in order.items:
        lines.append(f"  - {it.product_name} x{it.quantity} @ {_naira(it.price)}")
    lines += ["", "We will verify your payment receipt and contact you within 24 hours.",
              f"For inquiries call {SUPPORT_PHONE}.", "", "The UrbanThreads Team"]
    return Message(
        subject=f"Order Confirmation - #{order.order_number}",
        recipients=[order.customer_email],
        body="\n".join(lines),
    )

def owner_notification(order):
    lines = [f"NEW ORDER #{order.order_number}", "",
             f"Customer: {order.customer_name}",
             f"Email: {order.customer_email}",
             f"Phone: {order.customer_phone}", "",
             f"Method: {order.delivery_option.upper()}",
             f"State: {order.selected_state}",
             _delivery_line(order), "",
             "Items:"]
    for it in order.items:
        extras = ", ".join(x for x in (it.size, it.color) if x)
        suffix = f" ({extras})" if extras else ""
        lines.append(f"  - {it.product_name}{suffix} x{it.quantity} = {_naira(it.price * it.quantity)}")
    lines += ["", f"Total: {_naira(order.total_amount)}",
              f"Receipt: {order.receipt_url or 'not attached'}"]
    if order.note:
        lines += ["", "Customer note:", order.note]
    return Message(
        subject=f"New Order #{order.order_number} - {_naira(order.total_amount)}",
        recipients=[current_app.config["STORE_OWNER_EMAIL"]],
        body="\n".join(lines),
    )

def send(message):
    mail.send(message)
