# shop.py
from flask import (
    Blueprint, render_template, redirect, url_for, session, request, flash, abort,
    current_app, send_from_directory
)
import logging

from core import (
    CATEGORY_ORDER, STATES, HOME_STATE, PICKUP_ADDRESS, BANK_DETAILS, SUPPORT_PHONE
)
from cart import Cart
from checkout import CheckoutWizard, CheckoutError, FORM, PAYMENT, CONFIRMATION
from pricing import quote, delivery_fee, is_pickup_available
from storage import save_upload, UploadError
import catalog
import orders

shop_bp = Blueprint("shop", __name__)
logger = logging.getLogger(__name__)

# --- Helpers (storefront-specific) ---
def get_cart():
    return Cart(session)

def get_wizard():
    return CheckoutWizard(session)

@shop_bp.app_context_processor
def inject_storefront():
    return {"categories": CATEGORY_ORDER, "cart_count": get_cart().count()}

# --- Routes: Storefront ---
@shop_bp.route("/")
def index():
    products = catalog.list_products()[:8]
    return render_template("index.html", products=products)

@shop_bp.route("/products")
def products():
    category = request.args.get("category", "all").strip().lower()
    if category != "all" and category not in CATEGORY_ORDER:
        abort(404)
    items = catalog.list_products(category)
    return render_template("products.html", products=items, category=category)

@shop_bp.route("/products/<int:product_id>")
def product_detail(product_id):
    product = catalog.get_product(product_id)
    if not product:
        abort(404)
    return render_template("product.html", product=product)

@shop_bp.route("/uploads/<path:filename>")
def uploaded_file(filename):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)

@shop_bp.route("/cart/add/<int:product_id>", methods=["POST"])
def add_to_cart(product_id):
    product = catalog.get_product(product_id)
    if not product:
        flash("Product not found.", "error")
        return redirect(url_for("shop.products"))
    size = request.form.get("size", "").strip() or None
    color = request.form.get("color", "").strip() or None
    try:
        qty = max(1, int(request.form.get("quantity", 1)))
    except ValueError:
        qty = 1
    if product.sizes and size not in product.sizes:
        flash("Please select a size.", "error")
        return redirect(url_for("shop.product_detail", product_id=product.id))
    if product.colors and color not in product.colors:
        flash("Please select a color.", "error")
        return redirect(url_for("shop.product_detail", product_id=product.id))
    cart = get_cart()
    if cart.quantity_of(product.id) + qty > product.stock:
        flash(f"Only {product.stock} of '{product.name}' left in stock.", "error")
        return redirect(url_for("shop.product_detail", product_id=product.id))
    cart.add(product, qty, size, color)
    flash(f"Added '{product.name}' to cart.", "success")
    return redirect(request.referrer or url_for("shop.cart_view"))

@shop_bp.route("/cart", methods=["GET", "POST"])
def cart_view():
    cart = get_cart()
    if request.method == "POST":
        for key, val in request.form.items():
            if not key.startswith("qty-"):
                continue
            try:
                qty = max(0, int(val))
            except ValueError:
                qty = 0
            cart.update(key.replace("qty-", "", 1), qty)
        flash("Cart updated.", "success")
        return redirect(url_for("shop.cart_view"))
    return render_template("cart.html", items=cart.lines, subtotal=cart.subtotal())

@shop_bp.route("/cart/remove", methods=["POST"])
def remove():
    get_cart().remove(request.form.get("key", ""))
    flash("Item removed.", "success")
    return redirect(url_for("shop.cart_view"))

# --- Routes: Checkout wizard ---
@shop_bp.route("/checkout", methods=["GET", "POST"])
def checkout():
    cart = get_cart()
    wizard = get_wizard()
    if wizard.step == CONFIRMATION:
        # a finished checkout is never resumed
        wizard.reset()
    if wizard.step == PAYMENT:
        return redirect(url_for("shop.payment"))
    if not len(cart):
        flash("Your cart is empty.", "error")
        return redirect(url_for("shop.cart_view"))

    if request.method == "POST" and request.form.get("action") == "update":
        try:
            wizard.choose_delivery(
                request.form.get("selected_state", HOME_STATE),
                request.form.get("delivery_option", "pickup"),
                request.form,
            )
        except CheckoutError as exc:
            flash(str(exc), "error")
        return redirect(url_for("shop.checkout"))

    if request.method == "POST":
        try:
            wizard.submit_details(
                request.form,
                request.form.get("selected_state", HOME_STATE),
                request.form.get("delivery_option", "pickup"),
                cart,
            )
        except CheckoutError as exc:
            for msg in exc.messages:
                flash(msg, "error")
            return redirect(url_for("shop.checkout"))
        return redirect(url_for("shop.payment"))

    q = quote(cart.lines, wizard.delivery_option, wizard.selected_state)
    return render_template(
        "checkout.html",
        items=cart.lines,
        quote=q,
        wizard=wizard,
        states=STATES,
        pickup_address=PICKUP_ADDRESS,
        pickup_available=is_pickup_available(wizard.selected_state),
        delivery_fee=delivery_fee(wizard.selected_state),
    )

@shop_bp.route("/checkout/back", methods=["POST"])
def checkout_back():
    wizard = get_wizard()
    try:
        wizard.back()
    except CheckoutError as exc:
        flash(str(exc), "error")
    return redirect(url_for("shop.checkout"))

@shop_bp.route("/checkout/payment", methods=["GET", "POST"])
def payment():
    cart = get_cart()
    wizard = get_wizard()
    if wizard.step == CONFIRMATION:
        return redirect(url_for("shop.confirmation"))
    if wizard.step == FORM:
        return redirect(url_for("shop.checkout"))

    if request.method == "POST":
        if not len(cart):
            # emptied after the form step; nothing to order
            wizard.back()
            flash("Your cart is empty.", "error")
            return redirect(url_for("shop.cart_view"))
        try:
            wizard.attach_receipt(save_upload(request.files.get("receipt"), "receipts"))
        except UploadError as exc:
            flash(str(exc), "error")
            return redirect(url_for("shop.payment"))

        result = orders.submit_order(wizard.payload(cart))
        if not result.success:
            logger.error("Checkout %s failed: %s", wizard.order_number, result.error)
        step = wizard.complete(result, cart, current_app.config["CHECKOUT_ADVANCE_ON_FAILURE"])
        if wizard.error:
            flash(f"{wizard.error} Please save your order number and contact us at {SUPPORT_PHONE}.", "error")
        if step == CONFIRMATION:
            return redirect(url_for("shop.confirmation"))
        return redirect(url_for("shop.payment"))

    return render_template(
        "payment.html",
        wizard=wizard,
        bank=BANK_DETAILS,
        support_phone=SUPPORT_PHONE,
    )

@shop_bp.route("/checkout/confirmation")
def confirmation():
    wizard = get_wizard()
    if wizard.step != CONFIRMATION:
        return redirect(url_for("shop.checkout"))
    return render_template(
        "confirmation.html",
        wizard=wizard,
        pickup_address=PICKUP_ADDRESS,
        support_phone=SUPPORT_PHONE,
    )
