"""Integration tests for admin order management and coupon endpoints."""

COUPON = {
    "code": "SAVE10",
    "couponType": "PERCENTAGE",
    "value": 10,
    "validFrom": "2020-01-01T00:00:00Z",
    "validUntil": "2099-01-01T00:00:00Z",
}


def _place_orders(client, customer, admin, count):
    product_id = client.post(
        "/products", json={"name": "Desk Lamp", "price": 800.0, "stock": 50}, headers=admin
    ).json()["data"]["id"]
    address_id = client.post(
        "/addresses",
        json={"fullName": "R K", "street": "1 Park St", "city": "Kolkata", "postalCode": "700016", "country": "IN"},
        headers=customer,
    ).json()["data"]["id"]

    ids = []
    for _ in range(count):
        client.post("/cart/items", json={"productId": product_id, "quantity": 1}, headers=customer)
        response = client.post(
            "/orders",
            json={"shippingAddressId": address_id, "billingAddressId": address_id, "paymentMethod": "COD"},
            headers=customer,
        )
        ids.append(response.json()["data"]["id"])
    return ids


class TestAdminOrders:
    def test_requires_key(self, client):
        assert client.get("/admin/orders").status_code == 403

    def test_paginated_listing(self, client, customer, admin):
        _place_orders(client, customer, admin, 3)
        response = client.get("/admin/orders", params={"page": 1, "limit": 2}, headers=admin)
        assert response.status_code == 200
        page = response.json()["data"]
        assert len(page["orders"]) == 2
        assert page["total"] == 3
        assert page["pages"] == 2

    def test_status_filter(self, client, customer, admin):
        ids = _place_orders(client, customer, admin, 2)
        client.patch(f"/orders/{ids[0]}/status", json={"status": "PROCESSING"}, headers=admin)

        page = client.get("/admin/orders", params={"status": "PROCESSING"}, headers=admin).json()["data"]
        assert [o["id"] for o in page["orders"]] == [ids[0]]

    def test_bulk_status(self, client, customer, admin):
        ids = _place_orders(client, customer, admin, 2)
        response = client.patch(
            "/admin/orders/bulk-status", json={"orderIds": ids, "status": "PROCESSING"}, headers=admin
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"updated": 2}

    def test_bulk_status_reports_every_rejection(self, client, customer, admin):
        ids = _place_orders(client, customer, admin, 2)
        response = client.patch(
            "/admin/orders/bulk-status", json={"orderIds": ids, "status": "DELIVERED"}, headers=admin
        )
        assert response.status_code == 400
        errors = response.json()["errors"]
        assert len(errors) == 2
        assert all(error.startswith("ORD-") and "Cannot transition from PENDING to DELIVERED" in error for error in errors)

        for order_id in ids:
            order = client.get(f"/orders/{order_id}", headers=customer).json()["data"]
            assert order["status"] == "PENDING"


class TestCouponEndpoints:
    def test_validate(self, client, customer, admin):
        client.post("/coupons", json={**COUPON, "maxDiscount": 100}, headers=admin)
        response = client.post("/coupons/validate", json={"code": "save10", "cartTotal": 2500}, headers=customer)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["code"] == "SAVE10"
        assert data["discount"] == 100.0

    def test_validate_reports_all_rules(self, client, customer, admin):
        client.post(
            "/coupons",
            json={**COUPON, "minOrderAmount": 5000, "validUntil": "2021-01-01T00:00:00Z"},
            headers=admin,
        )
        response = client.post("/coupons/validate", json={"code": "SAVE10", "cartTotal": 100}, headers=customer)
        assert response.status_code == 400
        assert response.json()["errors"] == [
            "Coupon has expired",
            "Minimum order amount of 5000.00 required",
        ]

    def test_validate_unknown_code(self, client, customer):
        response = client.post("/coupons/validate", json={"code": "NOPE"}, headers=customer)
        assert response.status_code == 404
        assert response.json()["message"] == "Invalid coupon code"

    def test_crud(self, client, admin):
        created = client.post("/coupons", json=COUPON, headers=admin)
        assert created.status_code == 201
        coupon_id = created.json()["data"]["id"]

        updated = client.patch(f"/coupons/{coupon_id}", json={"value": 15}, headers=admin)
        assert updated.json()["data"]["value"] == 15.0

        listed = client.get("/coupons", params={"status": "active"}, headers=admin).json()["data"]
        assert [c["code"] for c in listed] == ["SAVE10"]

        assert client.delete(f"/coupons/{coupon_id}", headers=admin).status_code == 200
        assert client.get(f"/coupons/{coupon_id}", headers=admin).status_code == 404

    def test_duplicate_code(self, client, admin):
        client.post("/coupons", json=COUPON, headers=admin)
        response = client.post("/coupons", json={**COUPON, "code": "save10"}, headers=admin)
        assert response.status_code == 400
        assert response.json()["message"] == "Coupon code already exists"

    def test_coupon_admin_requires_key(self, client, customer):
        assert client.post("/coupons", json=COUPON, headers=customer).status_code == 403
