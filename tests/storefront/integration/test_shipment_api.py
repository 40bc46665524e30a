"""Integration tests for shipment endpoints and public tracking."""

import pytest


@pytest.fixture
def order_id(client, customer, admin):
    product_id = client.post(
        "/products", json={"name": "Kettle", "price": 1200.0, "stock": 5}, headers=admin
    ).json()["data"]["id"]
    address_id = client.post(
        "/addresses",
        json={"fullName": "R K", "street": "1 Park St", "city": "Kolkata", "postalCode": "700016", "country": "IN"},
        headers=customer,
    ).json()["data"]["id"]
    client.post("/cart/items", json={"productId": product_id, "quantity": 1}, headers=customer)
    response = client.post(
        "/orders",
        json={"shippingAddressId": address_id, "billingAddressId": address_id, "paymentMethod": "COD"},
        headers=customer,
    )
    return response.json()["data"]["id"]


def _create(client, admin, order_id, tracking_number="BD123", **extra):
    return client.post(
        "/shipments",
        json={"orderId": order_id, "carrier": "BlueDart", "trackingNumber": tracking_number, **extra},
        headers=admin,
    )


class TestShipmentAdmin:
    def test_create_ships_order(self, client, customer, admin, order_id):
        response = _create(client, admin, order_id, estimatedDelivery="2026-05-04T00:00:00Z")
        assert response.status_code == 201
        shipment = response.json()["data"]
        assert shipment["trackingNumber"] == "BD123"
        assert shipment["status"] == "PENDING"

        order = client.get(f"/orders/{order_id}", headers=customer).json()["data"]
        assert order["status"] == "SHIPPED"
        assert order["trackingNumber"] == "BD123"
        assert order["shippedAt"] is not None

    def test_requires_admin_key(self, client, customer, order_id):
        assert _create(client, customer, order_id).status_code == 403
        assert client.get("/shipments", headers=customer).status_code == 403

    def test_duplicate_tracking_number(self, client, admin, order_id):
        _create(client, admin, order_id)
        response = _create(client, admin, order_id)
        assert response.status_code == 400
        assert response.json()["errors"] == ["Tracking number already exists"]

    def test_unknown_order(self, client, admin):
        response = _create(client, admin, "missing-order")
        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"

    def test_missing_carrier(self, client, admin, order_id):
        response = client.post("/shipments", json={"orderId": order_id, "trackingNumber": "BD1"}, headers=admin)
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"

    def test_delivery_completes_order(self, client, customer, admin, order_id):
        shipment_id = _create(client, admin, order_id).json()["data"]["id"]

        response = client.patch(f"/shipments/{shipment_id}", json={"status": "DELIVERED"}, headers=admin)
        assert response.status_code == 200
        assert response.json()["data"]["deliveredAt"] is not None

        order = client.get(f"/orders/{order_id}", headers=customer).json()["data"]
        assert order["status"] == "DELIVERED"
        assert order["paymentStatus"] == "COMPLETED"

    def test_list_filters_and_delete(self, client, admin, order_id):
        first = _create(client, admin, order_id, tracking_number="BD123").json()["data"]["id"]
        _create(client, admin, order_id, tracking_number="DL999", carrier="Delhivery")

        listed = client.get("/shipments", params={"carrier": "BlueDart"}, headers=admin).json()["data"]
        assert [s["id"] for s in listed] == [first]

        assert client.delete(f"/shipments/{first}", headers=admin).status_code == 200
        response = client.get(f"/shipments/{first}", headers=admin)
        assert response.status_code == 404
        assert response.json()["message"] == "Shipment not found"


class TestShipmentTracking:
    def test_track_by_number(self, client, admin, order_id):
        _create(client, admin, order_id)

        response = client.get("/shipments/track/BD123")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["shipment"]["carrier"] == "BlueDart"
        assert data["orderStatus"] == "SHIPPED"
        assert [item["productName"] for item in data["items"]] == ["Kettle"]
        assert data["shippingAddress"]["city"] == "Kolkata"

    def test_unknown_tracking_number(self, client):
        response = client.get("/shipments/track/NOPE")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Shipment not found with this tracking number"}

    def test_customer_lists_own_order_shipments(self, client, customer, admin, order_id):
        _create(client, admin, order_id)

        shipments = client.get(f"/orders/{order_id}/shipments", headers=customer).json()["data"]
        assert [s["trackingNumber"] for s in shipments] == ["BD123"]

        other = client.get(f"/orders/{order_id}/shipments", headers={"X-Customer-Id": "someone-else"})
        assert other.status_code == 404
