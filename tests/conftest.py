import io

import pytest

from core import create_app, db, Product


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SEED_ON_START": False,
        "MAIL_SUPPRESS_SEND": True,
        "ORDER_SUBMIT_RETRY_DELAY": 0,
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "ADMIN_EMAIL": "admin@urbanthreads.com",
        "ADMIN_PASSWORD": "secret",
        "STORE_OWNER_EMAIL": "owner@urbanthreads.com",
    })
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.test_request_context():
        yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    client.set_cookie("admin-token", "authenticated")
    return client


@pytest.fixture
def make_product(app):
    def make(name="Essential Cotton Tee", price=8500, stock=50, category="men", **kw):
        with app.app_context():
            product = Product(name=name, price=price, stock=stock, category=category,
                              main_image=kw.pop("main_image", "https://img.example/tee.jpg"), **kw)
            db.session.add(product)
            db.session.commit()
            return product.id
    return make


@pytest.fixture
def order_payload():
    def build(items, **overrides):
        data = {
            "order_number": "UT12345678",
            "customer_name": "Ada Obi",
            "customer_email": "ada@gmail.com",
            "customer_phone": "08012345678",
            "total_amount": "47837.50",
            "delivery_option": "pickup",
            "selected_state": "Abuja",
            "note": "Call before coming",
            "receipt_url": "http://localhost/uploads/receipts/r.png",
            "items": items,
        }
        data.update(overrides)
        return data
    return build


@pytest.fixture
def image_file():
    def build(name="receipt.png", size=128):
        return (io.BytesIO(b"\x89PNG" + b"0" * size), name)
    return build
