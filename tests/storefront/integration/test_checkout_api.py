"""Integration tests for cart, checkout and order endpoints via TestClient."""


def _create_product(client, admin, price=30000.0, stock=5, name="Laptop"):
    response = client.post("/products", json={"name": name, "price": price, "stock": stock}, headers=admin)
    assert response.status_code == 201
    return response.json()["data"]["id"]


def _create_address(client, customer):
    response = client.post(
        "/addresses",
        json={
            "fullName": "Asha Rao",
            "street": "12 MG Road",
            "city": "Bengaluru",
            "postalCode": "560001",
            "country": "IN",
        },
        headers=customer,
    )
    assert response.status_code == 201
    return response.json()["data"]["id"]


def _checkout(client, customer, address_id, payment_method="CARD"):
    return client.post(
        "/orders",
        json={"shippingAddressId": address_id, "billingAddressId": address_id, "paymentMethod": payment_method},
        headers=customer,
    )


class TestCartEndpoints:
    def test_get_cart_creates_it(self, client, customer):
        response = client.get("/cart", headers=customer)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["items"] == []
        assert body["data"]["customerId"] == "cust-api-001"

    def test_add_update_remove(self, client, customer, admin):
        product_id = _create_product(client, admin, price=250.0)

        response = client.post("/cart/items", json={"productId": product_id, "quantity": 2}, headers=customer)
        assert response.status_code == 201
        item = response.json()["data"]["items"][0]
        assert item["lineTotal"] == 500.0

        response = client.patch(f"/cart/items/{item['id']}", json={"quantity": 3}, headers=customer)
        assert response.json()["data"]["subtotal"] == 750.0

        response = client.delete(f"/cart/items/{item['id']}", headers=customer)
        assert response.json()["data"]["items"] == []

    def test_missing_customer_header(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Authentication required"}

    def test_quantity_over_stock(self, client, customer, admin):
        product_id = _create_product(client, admin, stock=1)
        response = client.post("/cart/items", json={"productId": product_id, "quantity": 5}, headers=customer)
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Only 1 items available in stock"

    def test_malformed_body(self, client, customer):
        response = client.post("/cart/items", json={"quantity": 0}, headers=customer)
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert {error.split(":")[0] for error in body["errors"]} == {"productId", "quantity"}


class TestCheckoutEndpoint:
    def test_checkout_returns_full_order(self, client, customer, admin):
        product_id = _create_product(client, admin)
        address_id = _create_address(client, customer)
        client.post("/cart/items", json={"productId": product_id, "quantity": 2}, headers=customer)

        response = _checkout(client, customer, address_id)

        assert response.status_code == 201
        order = response.json()["data"]
        assert order["status"] == "PENDING"
        assert order["subtotal"] == 60000.0
        assert order["tax"] == 10800.0
        assert order["shippingFee"] == 0.0
        assert order["total"] == 70800.0
        assert order["items"][0]["quantity"] == 2
        assert order["shippingAddress"]["city"] == "Bengaluru"

        product = client.get(f"/products/{product_id}").json()["data"]
        assert product["stock"] == 3

    def test_checkout_with_coupon(self, client, customer, admin):
        product_id = _create_product(client, admin, price=1000.0)
        address_id = _create_address(client, customer)
        client.post(
            "/coupons",
            json={
                "code": "save10",
                "couponType": "PERCENTAGE",
                "value": 10,
                "maxDiscount": 150,
                "validFrom": "2020-01-01T00:00:00Z",
                "validUntil": "2099-01-01T00:00:00Z",
            },
            headers=admin,
        )
        client.post("/cart/items", json={"productId": product_id, "quantity": 2}, headers=customer)

        applied = client.post("/cart/apply-coupon", json={"code": "SAVE10"}, headers=customer)
        assert applied.status_code == 200
        assert applied.json()["data"]["coupon"]["discount"] == 150.0

        order = _checkout(client, customer, address_id).json()["data"]
        assert order["discount"] == 150.0
        assert order["total"] == 2710.0
        assert order["couponCode"] == "SAVE10"

    def test_empty_cart(self, client, customer):
        address_id = _create_address(client, customer)
        response = _checkout(client, customer, address_id)
        assert response.status_code == 400
        assert response.json()["message"] == "Cart is empty"

    def test_unknown_address(self, client, customer):
        response = _checkout(client, customer, "no-such-address")
        assert response.status_code == 404
        assert response.json()["message"] == "Shipping address not found"


class TestOrderEndpoints:
    def _order(self, client, customer, admin):
        product_id = _create_product(client, admin, price=500.0, stock=4)
        address_id = _create_address(client, customer)
        client.post("/cart/items", json={"productId": product_id, "quantity": 2}, headers=customer)
        return _checkout(client, customer, address_id).json()["data"], product_id

    def test_list_and_get(self, client, customer, admin):
        order, _ = self._order(client, customer, admin)

        listed = client.get("/orders", headers=customer).json()["data"]
        assert [o["id"] for o in listed] == [order["id"]]

        fetched = client.get(f"/orders/{order['id']}", headers=customer).json()["data"]
        assert fetched["orderNumber"] == order["orderNumber"]

    def test_other_customer_gets_404(self, client, customer, admin):
        order, _ = self._order(client, customer, admin)
        response = client.get(f"/orders/{order['id']}", headers={"X-Customer-Id": "someone-else"})
        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"

    def test_unknown_order_keeps_message(self, client, customer):
        response = client.get("/orders/does-not-exist", headers=customer)
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Order not found"}

    def test_cancel(self, client, customer, admin):
        order, product_id = self._order(client, customer, admin)
        response = client.patch(f"/orders/{order['id']}/cancel", json={"reason": "Too slow"}, headers=customer)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "CANCELLED"
        assert client.get(f"/products/{product_id}").json()["data"]["stock"] == 4

    def test_cancel_shipped_rejected(self, client, customer, admin):
        order, _ = self._order(client, customer, admin)
        client.patch(f"/orders/{order['id']}/status", json={"status": "SHIPPED", "trackingNumber": "T1"}, headers=admin)

        response = client.patch(f"/orders/{order['id']}/cancel", headers=customer)
        assert response.status_code == 400
        assert response.json()["message"] == "Cannot cancel shipped order. Please contact support."

    def test_status_requires_admin_key(self, client, customer, admin):
        order, _ = self._order(client, customer, admin)
        response = client.patch(
            f"/orders/{order['id']}/status", json={"status": "PROCESSING"}, headers={"X-Api-Key": "wrong"}
        )
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_payment_update(self, client, customer, admin):
        order, _ = self._order(client, customer, admin)
        response = client.patch(
            f"/orders/{order['id']}/payment", json={"paymentStatus": "COMPLETED", "paymentId": "pay_1"}, headers=admin
        )
        assert response.json()["data"]["paymentStatus"] == "COMPLETED"
        assert response.json()["data"]["paymentId"] == "pay_1"
