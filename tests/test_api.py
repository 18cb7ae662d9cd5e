from core import db, Order


def items(pid=None):
    return [{"product_id": pid, "product_name": "Tee", "price": 8500, "quantity": 1}]


def test_products_are_listed_newest_first(client, make_product):
    first = make_product("Essential Cotton Tee")
    second = make_product("Wrap Midi Dress", 22000, category="women")
    make_product("Retired", is_active=False)
    data = client.get("/api/products").get_json()
    assert [p["id"] for p in data] == [second, first]
    women = client.get("/api/products?category=women").get_json()
    assert [p["name"] for p in women] == ["Wrap Midi Dress"]
    assert client.get(f"/api/products/{first}").get_json()["price"] == 8500
    assert client.get("/api/products/999").status_code == 404


def test_create_order(client, make_product, order_payload, app):
    pid = make_product(stock=4)
    res = client.post("/api/orders", json=order_payload(items(pid)))
    assert res.status_code == 201
    body = res.get_json()
    assert body["success"] is True
    assert body["order"]["status"] == "pending"
    assert body["order"]["items"][0]["product_id"] == pid
    assert body["warnings"] == []


def test_resubmitted_order_is_not_duplicated(client, order_payload, app):
    payload = order_payload(items())
    assert client.post("/api/orders", json=payload).status_code == 201
    again = client.post("/api/orders", json=payload)
    assert again.status_code == 200
    assert again.get_json()["duplicate"] is True
    with app.app_context():
        assert Order.query.count() == 1


def test_order_errors(client, order_payload):
    res = client.post("/api/orders", json=order_payload([]))
    assert res.status_code == 400
    assert res.get_json()["success"] is False

    client.post("/api/orders", json=order_payload(items()))
    clash = client.post("/api/orders", json=order_payload(items(), customer_email="bola@gmail.com"))
    assert clash.status_code == 409

    assert client.post("/api/orders", data="nope", content_type="text/plain").status_code == 400


def test_stock_shortfall_is_reported(client, make_product, order_payload):
    pid = make_product(stock=0)
    body = client.post("/api/orders", json=order_payload(items(pid))).get_json()
    assert body["success"] is True
    assert body["warnings"] and body["warnings"][0].startswith(f"stock:{pid}")


def test_admin_api_needs_login(client):
    assert client.get("/api/admin/dashboard").status_code == 401
    assert client.put("/api/admin/orders/1", json={"status": "shipped"}).status_code == 401
    bad = client.post("/api/admin/login", json={"email": "admin@urbanthreads.com", "password": "x"})
    assert bad.status_code == 401

    ok = client.post("/api/admin/login", json={"email": "admin@urbanthreads.com", "password": "secret"})
    assert ok.get_json()["success"] is True
    assert client.get("/api/admin/dashboard").status_code == 200

    client.post("/api/admin/logout")
    assert client.get("/api/admin/dashboard").status_code == 401


def test_admin_updates_status_freely(admin_client, order_payload, app):
    oid = admin_client.post("/api/orders", json=order_payload(items())).get_json()["order"]["id"]
    for status in ["delivered", "pending", "cancelled"]:
        res = admin_client.put(f"/api/admin/orders/{oid}", json={"status": status})
        assert res.status_code == 200
        assert res.get_json()["order"]["status"] == status
    assert admin_client.put(f"/api/admin/orders/{oid}", json={"status": "lost"}).status_code == 400
    assert admin_client.put("/api/admin/orders/999", json={"status": "shipped"}).status_code == 404


def test_admin_orders_and_products(admin_client, order_payload):
    admin_client.post("/api/orders", json=order_payload(items()))
    listed = admin_client.get("/api/admin/orders?status=pending").get_json()
    assert [o["order_number"] for o in listed] == ["UT12345678"]
    assert admin_client.get("/api/admin/orders?status=bogus").status_code == 400

    res = admin_client.post("/api/admin/products", json={
        "name": "Oversized Hoodie", "price": 18000, "category": "unisex", "stock": 7,
        "sizes": ["M", " ", "L"],
    })
    assert res.status_code == 201
    assert res.get_json()["product"]["sizes"] == ["M", "L"]
    assert admin_client.post("/api/admin/products", json={"name": ""}).status_code == 400
    assert len(admin_client.get("/api/admin/products").get_json()) == 1


def test_dashboard_numbers(admin_client, order_payload, make_product):
    make_product("Denim Jacket", stock=1)
    admin_client.post("/api/orders", json=order_payload(items()))
    stats = admin_client.get("/api/admin/dashboard").get_json()
    assert stats["totalOrders"] == 1
    assert stats["pendingOrders"] == 1
    assert stats["totalProducts"] == 1
    assert [p["name"] for p in stats["lowStockProducts"]] == ["Denim Jacket"]


def test_admin_login_rejects_non_object_body(client):
    res = client.post("/api/admin/login", json=["admin@urbanthreads.com", "secret"])
    assert res.status_code == 401
    assert client.get_cookie("admin-token") is None
