# api.py
from flask import Blueprint, jsonify, request
from pydantic import ValidationError
import logging

from core import db, Order, ORDER_STATUSES, ADMIN_COOKIE
from admin import is_admin, check_credentials, set_admin_cookie
from schemas import ProductPayload, StatusUpdate, error_text
from storage import save_upload, UploadError
import catalog
import orders

api_bp = Blueprint("api", __name__)
logger = logging.getLogger(__name__)

ERROR_STATUS = {"validation": 400, "conflict": 409, "failure": 500}

def _error(message, status):
    return jsonify({"success": False, "error": message}), status

@api_bp.before_request
def gate_admin():
    if not request.path.startswith("/api/admin/") or request.path.endswith("/login"):
        return None
    if not is_admin():
        return _error("Not authenticated", 401)
    return None

# --- Catalog ---
@api_bp.route("/products")
def list_products():
    products = catalog.list_products(request.args.get("category"))
    return jsonify([p.to_dict() for p in products])

@api_bp.route("/products/<int:product_id>")
def get_product(product_id):
    product = catalog.get_product(product_id)
    if not product:
        return _error("Product not found", 404)
    return jsonify(product.to_dict())

# --- Orders ---
@api_bp.route("/orders", methods=["POST"])
def create_order():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return _error("Expected a JSON object", 400)
    result = orders.submit_order(body)
    if not result.success:
        return _error(result.error, ERROR_STATUS.get(result.error_kind, 500))
    return jsonify({
        "success": True,
        "order": result.order.to_dict(),
        "duplicate": result.duplicate,
        "warnings": [f"{r.name}: {r.detail}" for r in result.side_effect_failures],
    }), 200 if result.duplicate else 201

# --- Uploads ---
@api_bp.route("/upload", methods=["POST"])
def upload():
    try:
        url = save_upload(request.files.get("file"), request.form.get("folder", "receipts"))
    except UploadError as exc:
        return _error(str(exc), 400)
    return jsonify({"success": True, "url": url})

# --- Admin ---
@api_bp.route("/admin/login", methods=["POST"])
def admin_login():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}
    if check_credentials(body.get("email"), body.get("password")):
        logger.info("Admin API login for %s", body.get("email"))
        return set_admin_cookie(jsonify({"success": True, "message": "Login successful"}))
    return _error("Invalid credentials", 401)

@api_bp.route("/admin/logout", methods=["POST"])
def admin_logout():
    response = jsonify({"success": True})
    response.delete_cookie(ADMIN_COOKIE, path="/")
    return response

@api_bp.route("/admin/dashboard")
def dashboard():
    stats = orders.dashboard_stats()
    return jsonify({
        "totalProducts": stats["total_products"],
        "totalOrders": stats["total_orders"],
        "pendingOrders": stats["pending_orders"],
        "totalRevenue": str(stats["total_revenue"]),
        "recentOrders": [o.to_dict(with_items=False) for o in stats["recent_orders"]],
        "lowStockProducts": [p.to_dict() for p in stats["low_stock_products"]],
    })

@api_bp.route("/admin/products", methods=["GET", "POST"])
def admin_products():
    if request.method == "GET":
        return jsonify([p.to_dict() for p in catalog.list_products(include_inactive=True)])
    try:
        payload = ProductPayload.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return _error(error_text(exc), 400)
    product = catalog.create_product(payload)
    return jsonify({"success": True, "product": product.to_dict()}), 201

@api_bp.route("/admin/orders")
def admin_orders():
    status = request.args.get("status", "all")
    if status != "all" and status not in ORDER_STATUSES:
        return _error(f"Unknown status: {status}", 400)
    return jsonify([o.to_dict() for o in orders.list_orders(status)])

@api_bp.route("/admin/orders/<int:order_id>", methods=["PUT"])
def admin_update_order(order_id):
    order = db.session.get(Order, order_id)
    if order is None:
        return _error("Order not found", 404)
    try:
        update = StatusUpdate.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return _error(error_text(exc), 400)
    orders.update_order_status(order, update.status)
    return jsonify({"success": True, "order": order.to_dict()})
