# core.py
from flask import Flask
from flask_mail import Mail
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func
from decimal import Decimal
import logging
import os

# --- Extension handles (imported by blueprints) ---
db = SQLAlchemy()
mail = Mail()

# --- Constants / Config shared across blueprints ---
TAX_RATE = Decimal("0.075")         # 7.5% VAT
HOME_STATE = "Abuja"                # only state with store pickup
HOME_DELIVERY_FEE = 3000
OTHER_DELIVERY_FEE = 5000           # park drop-off outside Abuja
STATES = ["Abuja", "Lagos", "Rivers", "Kano", "Oyo", "Other"]
PICKUP_ADDRESS = "Suite 5, XYZ Plaza, Central Business District, Abuja"
DELIVERY_OPTIONS = ["pickup", "delivery"]
ORDER_NUMBER_PREFIX = "UT"
BANK_DETAILS = {
    "bank_name": "OPAY",
    "account_name": "Ifedolapo Ajayi",
    "account_number": "8096539067",
}
SUPPORT_PHONE = "0809 653 9067"
CATEGORY_ORDER = ["men", "women", "unisex"]
ORDER_STATUSES = ["pending", "confirmed", "shipped", "delivered", "cancelled"]
REVENUE_STATUSES = ["confirmed", "shipped", "delivered"]
LOW_STOCK_THRESHOLD = 10
ADMIN_COOKIE = "admin-token"
ADMIN_COOKIE_VALUE = "authenticated"
ADMIN_COOKIE_MAX_AGE = 60 * 60 * 24 * 7   # 7 days

# --- Models ---
class Product(db.Model):
    __table_args__ = (db.CheckConstraint("stock >= 0", name="stock_non_negative"),)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Integer, nullable=False)             # whole naira
    category = db.Column(db.String(20), nullable=False)       # men, women, unisex
    main_image = db.Column(db.String(500), nullable=False, default="")
    images = db.Column(db.JSON, nullable=False, default=list)
    colors = db.Column(db.JSON, nullable=False, default=list)
    sizes = db.Column(db.JSON, nullable=False, default=list)
    stock = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "main_image": self.main_image,
            "images": list(self.images or []),
            "colors": list(self.colors or []),
            "sizes": list(self.sizes or []),
            "stock": self.stock,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

class Order(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(20), unique=True, nullable=False)  # shown to the customer
    customer_name = db.Column(db.String(200), nullable=False)
    customer_email = db.Column(db.String(200), nullable=False)
    customer_phone = db.Column(db.String(40), nullable=False)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="pending")
    delivery_option = db.Column(db.String(10), nullable=False)
    selected_state = db.Column(db.String(40), nullable=False)
    delivery_address = db.Column(db.String(300), nullable=True)
    city = db.Column(db.String(120), nullable=True)
    note = db.Column(db.Text, nullable=True)
    payment_verified = db.Column(db.Boolean, nullable=False, default=False)
    receipt_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    items = db.relationship(
        "OrderItem", backref="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )

    def to_dict(self, with_items=True):
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "total_amount": str(self.total_amount),
            "status": self.status,
            "delivery_option": self.delivery_option,
            "selected_state": self.selected_state,
            "delivery_address": self.delivery_address,
            "city": self.city,
            "note": self.note,
            "payment_verified": self.payment_verified,
            "receipt_url": self.receipt_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if with_items:
            data["items"] = [it.to_dict() for it in self.items]
        return data

class OrderItem(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("order.id", ondelete="CASCADE"), nullable=False)
    # weak reference: the product may be deactivated later
    product_id = db.Column(db.Integer, db.ForeignKey("product.id", ondelete="SET NULL"), nullable=True)
    product_name = db.Column(db.String(200), nullable=False)
    price = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    size = db.Column(db.String(40), nullable=True)
    color = db.Column(db.String(40), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "price": self.price,
            "quantity": self.quantity,
            "size": self.size,
            "color": self.color,
        }

def seed_if_empty():
    """Seed the demo catalog on first run."""
    if Product.query.count() > 0:
        return
    products = [
        # Men
        {"name": "Essential Cotton Tee", "description": "Soft 100% cotton crewneck t-shirt. Perfect for everyday wear.",
         "price": 8500, "category": "men",
         "main_image": "https://images.unsplash.com/photo-1521572163474-6864f9cf17ab?w=800&auto=format&fit=crop",
         "colors": ["White", "Black", "Navy"], "sizes": ["S", "M", "L", "XL"]},
        {"name": "Oversized Hoodie", "description": "Cozy oversized hoodie with kangaroo pocket.",
         "price": 18000, "category": "men",
         "main_image": "https://images.unsplash.com/photo-1556821840-3a63f95609a7?w=800&auto=format&fit=crop",
         "colors": ["Charcoal", "Olive", "Burgundy"], "sizes": ["M", "L", "XL"]},
        {"name": "Slim Fit Chinos", "description": "Modern slim-fit chinos with stretch for comfort.",
         "price": 12500, "category": "men",
         "main_image": "https://images.unsplash.com/photo-1542272604-787c3835535d?w=800&auto=format&fit=crop",
         "colors": ["Khaki", "Navy", "Grey"], "sizes": ["30x32", "32x32", "34x32"]},
        # Women
        {"name": "Wrap Midi Dress", "description": "Elegant wrap dress with adjustable tie waist.",
         "price": 22000, "category": "women",
         "main_image": "https://images.unsplash.com/photo-1595777457583-95e059d581b8?w=800&auto=format&fit=crop",
         "colors": ["Emerald", "Black", "Dusty Rose"], "sizes": ["XS", "S", "M", "L"]},
        {"name": "High-Waist Leggings", "description": "Buttery soft leggings with high-waist support.",
         "price": 9500, "category": "women",
         "main_image": "https://images.unsplash.com/photo-1586023492125-27b2c045efd7?w=800&auto=format&fit=crop",
         "colors": ["Black", "Charcoal", "Plum"], "sizes": ["XS", "S", "M", "L", "XL"]},
        {"name": "Denim Jacket", "description": "Classic denim jacket with modern tailoring.",
         "price": 16500, "category": "women",
         "main_image": "https://images.unsplash.com/photo-1520639888713-7851133b1ed0?w=800&auto=format&fit=crop",
         "colors": ["Light Wash", "Dark Wash"], "sizes": ["S", "M", "L"]},
    ]
    for p in products:
        db.session.add(Product(stock=50, images=[], is_active=True, **p))
    db.session.commit()
    logging.getLogger(__name__).info("Seeded %d demo products", len(products))

def create_app(test_config=None):
    app = Flask(__name__)

    # --- Config ---
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    DB_PATH = os.path.join(BASE_DIR, "urbanthreads.db")
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY", "dev-secret-change-me"),
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", f"sqlite:///{DB_PATH}"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        ADMIN_EMAIL=os.environ.get("ADMIN_EMAIL", "admin@urbanthreads.com"),
        ADMIN_PASSWORD=os.environ.get("ADMIN_PASSWORD", "admin123"),
        STORE_OWNER_EMAIL=os.environ.get("STORE_OWNER_EMAIL", "orders@urbanthreads.com"),
        MAIL_SERVER=os.environ.get("MAIL_SERVER", "smtp.gmail.com"),
        MAIL_PORT=int(os.environ.get("MAIL_PORT", 587)),
        MAIL_USE_TLS=os.environ.get("MAIL_USE_TLS", "true").lower() == "true",
        MAIL_USERNAME=os.environ.get("MAIL_USERNAME"),
        MAIL_PASSWORD=os.environ.get("MAIL_PASSWORD"),
        MAIL_DEFAULT_SENDER=os.environ.get("MAIL_DEFAULT_SENDER", "UrbanThreads Store <no-reply@urbanthreads.com>"),
        # without credentials there is nothing to send with
        MAIL_SUPPRESS_SEND=not os.environ.get("MAIL_USERNAME"),
        UPLOAD_FOLDER=os.environ.get("UPLOAD_FOLDER", os.path.join(app.instance_path, "uploads")),
        MAX_UPLOAD_BYTES=5 * 1024 * 1024,
        ORDER_SUBMIT_ATTEMPTS=3,
        ORDER_SUBMIT_RETRY_DELAY=1.0,
        CHECKOUT_ADVANCE_ON_FAILURE=True,
        SEED_ON_START=True,
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
    )
    if test_config is not None:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    db.init_app(app)
    mail.init_app(app)

    # Register blueprints (import inside to avoid circular imports)
    from shop import shop_bp
    from admin import admin_bp
    from api import api_bp
    app.register_blueprint(shop_bp)          # storefront at /
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(api_bp, url_prefix="/api")

    # Ensure tables exist at startup
    with app.app_context():
        db.create_all()
        if app.config["SEED_ON_START"]:
            seed_if_empty()

    return app
