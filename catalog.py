# catalog.py
import logging

from core import db, Product

logger = logging.getLogger(__name__)

def list_products(category=None, include_inactive=False):
    """Newest first; ``category`` of None or "all" means every category."""
    q = Product.query
    if not include_inactive:
        q = q.filter_by(is_active=True)
    if category and category != "all":
        q = q.filter_by(category=category)
    return q.order_by(Product.created_at.desc(), Product.id.desc()).all()

def get_product(product_id):
    return Product.query.filter_by(id=product_id, is_active=True).first()

def create_product(payload):
    product = Product(is_active=True, **payload.model_dump())
    db.session.add(product)
    db.session.commit()
    logger.info("Product %s created: %s", product.id, product.name)
    return product

def update_product(product, payload):
    for key, value in payload.model_dump().items():
        setattr(product, key, value)
    db.session.commit()
    logger.info("Product %s updated", product.id)
    return product

def deactivate_product(product):
    # soft delete; order items keep pointing at the row
    product.is_active = False
    db.session.commit()
    logger.info("Product %s deactivated", product.id)
    return product
