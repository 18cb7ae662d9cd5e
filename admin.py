# admin.py
from flask import Blueprint, render_template, redirect, url_for, request, flash, current_app
from pydantic import ValidationError
import logging

from core import (
    db, Product, Order, CATEGORY_ORDER, ORDER_STATUSES,
    ADMIN_COOKIE, ADMIN_COOKIE_VALUE, ADMIN_COOKIE_MAX_AGE
)
from schemas import ProductPayload, error_text
from storage import save_upload, UploadError
import catalog
import orders

admin_bp = Blueprint("admin", __name__)
logger = logging.getLogger(__name__)

def is_admin():
    # presence is all that is checked; the value is a constant marker
    return request.cookies.get(ADMIN_COOKIE) is not None

def check_credentials(email, password):
    cfg = current_app.config
    return email == cfg["ADMIN_EMAIL"] and password == cfg["ADMIN_PASSWORD"]

def set_admin_cookie(response):
    response.set_cookie(
        ADMIN_COOKIE, ADMIN_COOKIE_VALUE, max_age=ADMIN_COOKIE_MAX_AGE, httponly=False, path="/"
    )
    return response

def require_admin():
    if is_admin():
        return None
    return redirect(url_for("admin.admin_login"))

@admin_bp.before_request
def gate():
    if request.endpoint == "admin.admin_login":
        return None
    return require_admin()

def _split(value):
    return [v.strip() for v in value.replace("\n", ",").split(",") if v.strip()]

def _product_form():
    form = request.form
    data = {
        "name": form.get("name", "").strip(),
        "description": form.get("description", "").strip(),
        "price": form.get("price", "").strip() or None,
        "category": form.get("category", "").strip() or "men",
        "main_image": form.get("main_image", "").strip(),
        "images": _split(form.get("images", "")),
        "colors": _split(form.get("colors", "")),
        "sizes": _split(form.get("sizes", "")),
        "stock": form.get("stock", "").strip() or 0,
    }
    upload = request.files.get("image_file")
    if upload is not None and upload.filename:
        data["main_image"] = save_upload(upload, "products")
    return ProductPayload.model_validate(data)

@admin_bp.route("/login", methods=["GET", "POST"])
def admin_login():
    if request.method == "POST":
        email = request.form.get("email", "").strip()
        pwd = request.form.get("password", "")
        if check_credentials(email, pwd):
            logger.info("Admin login for %s", email)
            return set_admin_cookie(redirect(url_for("admin.dashboard")))
        logger.warning("Failed admin login for %s", email)
        flash("Invalid credentials.", "error")
    return render_template("admin_login.html")

@admin_bp.route("/logout", methods=["GET", "POST"])
def admin_logout():
    response = redirect(url_for("shop.index"))
    response.delete_cookie(ADMIN_COOKIE, path="/")
    flash("Logged out.", "success")
    return response

@admin_bp.route("/")
def dashboard():
    return render_template("admin_dashboard.html", stats=orders.dashboard_stats())

@admin_bp.route("/products")
def products():
    items = catalog.list_products(include_inactive=True)
    return render_template("admin_products.html", products=items)

@admin_bp.route("/products/new", methods=["GET", "POST"])
def product_new():
    if request.method == "POST":
        try:
            catalog.create_product(_product_form())
        except ValidationError as exc:
            flash(f"Invalid product: {error_text(exc)}", "error")
            return redirect(url_for("admin.product_new"))
        except UploadError as exc:
            flash(str(exc), "error")
            return redirect(url_for("admin.product_new"))
        flash("Product created.", "success")
        return redirect(url_for("admin.products"))
    return render_template("admin_edit.html", product=None, categories=CATEGORY_ORDER)

@admin_bp.route("/products/<int:product_id>/edit", methods=["GET", "POST"])
def product_edit(product_id):
    product = db.get_or_404(Product, product_id)
    if request.method == "POST":
        try:
            catalog.update_product(product, _product_form())
        except ValidationError as exc:
            flash(f"Invalid product: {error_text(exc)}", "error")
            return redirect(url_for("admin.product_edit", product_id=product.id))
        except UploadError as exc:
            flash(str(exc), "error")
            return redirect(url_for("admin.product_edit", product_id=product.id))
        flash("Product updated.", "success")
        return redirect(url_for("admin.products"))
    return render_template("admin_edit.html", product=product, categories=CATEGORY_ORDER)

@admin_bp.route("/products/<int:product_id>/delete", methods=["POST"])
def product_delete(product_id):
    product = db.get_or_404(Product, product_id)
    catalog.deactivate_product(product)
    flash("Product removed from the catalog.", "success")
    return redirect(url_for("admin.products"))

@admin_bp.route("/orders")
def order_list():
    status = request.args.get("status", "all")
    if status != "all" and status not in ORDER_STATUSES:
        flash("Unknown status filter.", "error")
        return redirect(url_for("admin.order_list"))
    return render_template(
        "admin_orders.html", orders=orders.list_orders(status), status=status, statuses=ORDER_STATUSES
    )

@admin_bp.route("/orders/<int:order_id>/status", methods=["POST"])
def order_status(order_id):
    order = db.get_or_404(Order, order_id)
    try:
        orders.update_order_status(order, request.form.get("status", ""))
    except ValueError as exc:
        flash(str(exc), "error")
    else:
        flash(f"Order {order.order_number} marked {order.status}.", "success")
    return redirect(request.referrer or url_for("admin.order_list"))

@admin_bp.route("/orders/<int:order_id>/verify", methods=["POST"])
def order_verify(order_id):
    order = db.get_or_404(Order, order_id)
    orders.set_payment_verified(order, not order.payment_verified)
    flash(
        f"Payment for {order.order_number} {'verified' if order.payment_verified else 'unverified'}.",
        "success",
    )
    return redirect(request.referrer or url_for("admin.order_list"))
