from core import db, Order, Product
import orders


def place(app, order_payload, **overrides):
    with app.test_request_context():
        payload = order_payload([{"product_id": None, "product_name": "Tee", "price": 8500, "quantity": 1}],
                                **overrides)
        return orders.submit_order(payload).order.id


def test_admin_pages_need_the_cookie(client):
    res = client.get("/admin/")
    assert res.status_code == 302
    assert res.headers["Location"].endswith("/admin/login")
    assert client.get("/admin/orders").status_code == 302
    assert client.get("/admin/login").status_code == 200


def test_login_sets_cookie_and_logout_clears_it(client):
    res = client.post("/admin/login", data={"email": "admin@urbanthreads.com", "password": "secret"})
    assert res.headers["Location"].endswith("/admin/")
    cookie = client.get_cookie("admin-token")
    assert cookie is not None and cookie.value == "authenticated"
    assert client.get("/admin/").status_code == 200

    client.post("/admin/logout")
    assert client.get_cookie("admin-token") is None
    assert client.get("/admin/").status_code == 302


def test_wrong_password_is_refused(client):
    res = client.post("/admin/login", data={"email": "admin@urbanthreads.com", "password": "nope"})
    assert res.status_code == 200
    assert b"Invalid credentials." in res.data
    assert client.get_cookie("admin-token") is None


def test_any_cookie_value_passes_the_gate(client):
    client.set_cookie("admin-token", "anything")
    assert client.get("/admin/").status_code == 200


def test_create_edit_and_soft_delete_product(admin_client, app):
    res = admin_client.post("/admin/products/new", data={
        "name": "Denim Jacket", "description": "Classic", "price": "16500", "category": "women",
        "main_image": "https://img.example/jacket.jpg", "colors": "Light Wash, Dark Wash",
        "sizes": "S,M,L", "stock": "12",
    })
    assert res.headers["Location"].endswith("/admin/products")
    with app.app_context():
        product = Product.query.one()
        assert product.colors == ["Light Wash", "Dark Wash"]
        assert product.sizes == ["S", "M", "L"]
        pid = product.id

    admin_client.post(f"/admin/products/{pid}/edit", data={
        "name": "Denim Jacket", "price": "15000", "category": "women", "stock": "3",
    })
    admin_client.post(f"/admin/products/{pid}/delete")
    with app.app_context():
        product = db.session.get(Product, pid)
        assert product.price == 15000
        assert product.stock == 3
        assert product.is_active is False
    assert admin_client.get(f"/products/{pid}").status_code == 404
    assert b"Denim Jacket" in admin_client.get("/admin/products").data


def test_invalid_product_is_rejected(admin_client, app):
    admin_client.post("/admin/products/new", data={"name": "Tee", "price": "-5", "category": "kids"})
    page = admin_client.get("/admin/products/new")
    assert b"Invalid product" in page.data
    with app.app_context():
        assert Product.query.count() == 0


def test_product_image_upload(admin_client, app, image_file):
    admin_client.post("/admin/products/new", data={
        "name": "Tee", "price": "8500", "category": "men", "image_file": image_file("front.jpg"),
    }, content_type="multipart/form-data")
    with app.app_context():
        assert "/uploads/products/" in Product.query.one().main_image


def test_order_status_and_payment_verification(admin_client, app, order_payload):
    oid = place(app, order_payload)
    page = admin_client.get("/admin/orders")
    assert b"UT12345678" in page.data

    admin_client.post(f"/admin/orders/{oid}/status", data={"status": "shipped"})
    admin_client.post(f"/admin/orders/{oid}/verify")
    with app.app_context():
        order = db.session.get(Order, oid)
        assert order.status == "shipped"
        assert order.payment_verified is True

    assert b"UT12345678" in admin_client.get("/admin/orders?status=shipped").data
    assert b"UT12345678" not in admin_client.get("/admin/orders?status=pending").data


def test_dashboard_renders(admin_client, app, order_payload, make_product):
    make_product("Denim Jacket", 16500, stock=2)
    place(app, order_payload)
    page = admin_client.get("/admin/")
    assert b"Pending orders: 1" in page.data
    assert b"Denim Jacket" in page.data
