import uuid

import pytest
import requests
from midtransclient.error_midtrans import MidtransAPIError

from conftest import auth_headers, create_product, make_user
from zerowaste.models.product import Product
from zerowaste.services.payment_service import (
    CheckoutItem,
    group_items_by_seller,
    map_transaction_status,
    to_gateway_price,
)


def _product(seller_id, price):
    return Product(
        id=uuid.uuid4(),
        seller_id=seller_id,
        name="Item",
        price=price,
        category="Misc",
        condition="used",
        type="Sell",
    )


def test_group_items_by_seller():
    s1, s2 = uuid.uuid4(), uuid.uuid4()
    items = [
        CheckoutItem(_product(s1, 100), 1),
        CheckoutItem(_product(s2, 50), 2),
        CheckoutItem(_product(s1, 10), 3),
    ]
    groups = group_items_by_seller(items)
    assert list(groups) == [s1, s2]
    assert [it.quantity for it in groups[s1]] == [1, 3]
    assert sum(it.price * it.quantity for it in groups[s1]) == 130
    assert sum(it.price * it.quantity for it in groups[s2]) == 100


@pytest.mark.parametrize(
    "transaction_status,fraud_status,expected",
    [
        ("capture", "accept", "paid"),
        ("capture", "challenge", "pending"),
        ("settlement", None, "paid"),
        ("cancel", None, "cancelled"),
        ("deny", None, "cancelled"),
        ("expire", None, "cancelled"),
        ("pending", None, "pending"),
        ("refund", None, None),
        (None, None, None),
    ],
)
def test_map_transaction_status(transaction_status, fraud_status, expected):
    assert map_transaction_status(transaction_status, fraud_status) == expected


def test_single_checkout(client, gateway, alice, alice_headers, bob_headers):
    long_name = "Reclaimed teak coffee table with two drawers and a glass top"
    table = create_product(client, alice_headers, name=long_name, price="250000")

    response = client.post(
        "/api/payment/create-transaction",
        json={"productId": table["id"], "quantity": 2},
        headers=bob_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["token"] == "snap-token-1"
    assert body["redirectUrl"].endswith("snap-token-1")
    transaction_id = body["orderId"]
    assert transaction_id.startswith("ORDER-")
    assert len(body["orderIds"]) == 1

    params = gateway.checkouts[0]
    assert params["transaction_details"] == {"order_id": transaction_id, "gross_amount": 500000}
    assert params["item_details"][0]["name"] == long_name[:50]
    assert params["customer_details"]["first_name"] == "Bob"
    assert params["customer_details"]["email"] == "bob@example.com"
    assert params["callbacks"]["finish"] == "http://frontend.test/payment/success"
    assert params["expiry"]["duration"] == 60

    orders = client.get("/api/orders", headers=bob_headers).json()["orders"]
    assert len(orders) == 1
    assert orders[0]["status"] == "pending"
    assert orders[0]["orderType"] == "single"
    assert orders[0]["totalAmount"] == 500000
    assert orders[0]["transactionId"] == transaction_id
    assert orders[0]["items"][0]["product"]["name"] == long_name


def test_single_checkout_unknown_product(client, gateway, bob_headers):
    response = client.post(
        "/api/payment/create-transaction",
        json={"productId": str(uuid.uuid4())},
        headers=bob_headers,
    )
    assert response.status_code == 404
    assert gateway.checkouts == []


def test_cart_checkout_creates_one_order_per_seller(client, gateway, alice_headers, bob_headers):
    carol = make_user("carol")
    buyer_headers = auth_headers(carol)

    jar = create_product(client, alice_headers, name="Jar", price="10000")
    lamp = create_product(client, alice_headers, name="Lamp", price="5000")
    bag = create_product(client, bob_headers, name="Bag", price="30000")

    response = client.post(
        "/api/payment/create-cart-transaction",
        json={
            "items": [
                {"productId": jar["id"], "quantity": 2},
                {"productId": bag["id"], "quantity": 1},
                {"productId": lamp["id"], "quantity": 1},
            ]
        },
        headers=buyer_headers,
    )
    assert response.status_code == 200
    body = response.json()
    transaction_id = body["orderId"]
    assert transaction_id.startswith("CART-")
    assert len(body["orderIds"]) == 2

    # One gateway session covering every line
    assert len(gateway.checkouts) == 1
    assert gateway.checkouts[0]["transaction_details"]["gross_amount"] == 55000
    assert len(gateway.checkouts[0]["item_details"]) == 3

    orders = client.get("/api/orders", headers=buyer_headers).json()["orders"]
    assert len(orders) == 2
    assert {o["transactionId"] for o in orders} == {transaction_id}
    by_seller = {o["seller"]["username"]: o for o in orders}
    assert by_seller["alice"]["totalAmount"] == 25000
    assert by_seller["bob"]["totalAmount"] == 30000
    assert by_seller["alice"]["orderType"] == "cart"
    assert sorted(line["productName"] for line in by_seller["alice"]["items"]) == ["Jar", "Lamp"]


def test_cart_checkout_validation(client, gateway, alice_headers, bob_headers):
    response = client.post(
        "/api/payment/create-cart-transaction", json={"items": []}, headers=bob_headers
    )
    assert response.status_code == 400

    jar = create_product(client, alice_headers)
    response = client.post(
        "/api/payment/create-cart-transaction",
        json={"items": [{"productId": jar["id"]}, {"productId": str(uuid.uuid4())}]},
        headers=bob_headers,
    )
    assert response.status_code == 404
    assert client.get("/api/orders", headers=bob_headers).json()["orders"] == []


def _cart_checkout(client, alice_headers, bob_headers, carol_headers):
    jar = create_product(client, alice_headers, name="Jar", price="10000")
    bag = create_product(client, bob_headers, name="Bag", price="30000")
    response = client.post(
        "/api/payment/create-cart-transaction",
        json={"items": [{"productId": jar["id"]}, {"productId": bag["id"]}]},
        headers=carol_headers,
    )
    return response.json()["orderId"]


def test_notification_uses_verified_status_for_all_orders(client, gateway, alice_headers, bob_headers):
    carol_headers = auth_headers(make_user("carol"))
    transaction_id = _cart_checkout(client, alice_headers, bob_headers, carol_headers)

    gateway.verified[transaction_id] = {
        "transaction_status": "settlement",
        "payment_type": "bank_transfer",
    }
    # The posted status is ignored in favour of the verified one
    response = client.post(
        "/api/payment/notification",
        json={"order_id": transaction_id, "transaction_status": "pending"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "paid"
    assert body["updatedOrders"] == 2

    orders = client.get("/api/orders", headers=carol_headers).json()["orders"]
    assert {o["status"] for o in orders} == {"paid"}
    assert all(o["paidAt"] for o in orders)
    assert {o["paymentType"] for o in orders} == {"bank_transfer"}

    response = client.get(f"/api/payment/transaction-status/{transaction_id}", headers=carol_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "paid"
    assert response.json()["totalAmount"] == 40000


def test_notification_cancel_and_no_change(client, gateway, alice_headers, bob_headers):
    carol_headers = auth_headers(make_user("carol"))
    transaction_id = _cart_checkout(client, alice_headers, bob_headers, carol_headers)

    gateway.verified[transaction_id] = {"transaction_status": "refund"}
    response = client.post("/api/payment/notification", json={"order_id": transaction_id})
    assert response.status_code == 200
    assert response.json()["status"] is None
    orders = client.get("/api/orders", headers=carol_headers).json()["orders"]
    assert {o["status"] for o in orders} == {"pending"}

    gateway.verified[transaction_id] = {"transaction_status": "expire"}
    client.post("/api/payment/notification", json={"order_id": transaction_id})
    orders = client.get("/api/orders", headers=carol_headers).json()["orders"]
    assert {o["status"] for o in orders} == {"cancelled"}
    assert all(o["cancelledAt"] for o in orders)


def test_notification_errors(client, gateway):
    response = client.post("/api/payment/notification", json={"transaction_status": "settlement"})
    assert response.status_code == 400

    response = client.post(
        "/api/payment/notification",
        json={"order_id": "CART-0-nope", "transaction_status": "settlement"},
    )
    assert response.status_code == 404


def test_transaction_status_is_buyer_scoped(client, gateway, alice_headers, bob_headers):
    jar = create_product(client, alice_headers)
    response = client.post(
        "/api/payment/create-transaction", json={"productId": jar["id"]}, headers=bob_headers
    )
    transaction_id = response.json()["orderId"]

    response = client.get(f"/api/payment/transaction-status/{transaction_id}", headers=alice_headers)
    assert response.status_code == 404

    response = client.get(f"/api/payment/transaction-status/{transaction_id}", headers=bob_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    assert len(response.json()["orders"]) == 1


def test_checkout_without_gateway_keys(client, alice_headers, bob_headers):
    jar = create_product(client, alice_headers)
    response = client.post(
        "/api/payment/create-transaction", json={"productId": jar["id"]}, headers=bob_headers
    )
    assert response.status_code == 500
    assert response.json()["message"] == "Payment gateway not configured"


def test_payment_config(client):
    response = client.get("/api/payment/config")
    assert response.status_code == 200
    assert response.json()["isProduction"] is False


@pytest.mark.parametrize(
    "price,expected",
    [(10000, 10000), (10000.4, 10000), (10000.5, 10001), (2.5, 3), (0.5, 1)],
)
def test_to_gateway_price_rounds_half_up(price, expected):
    assert to_gateway_price(price) == expected


def test_order_total_matches_charged_amount(client, gateway, alice_headers, bob_headers):
    jar = create_product(client, alice_headers, price="10000.5")

    response = client.post(
        "/api/payment/create-transaction",
        json={"productId": jar["id"], "quantity": 2},
        headers=bob_headers,
    )
    assert response.status_code == 200

    assert gateway.checkouts[0]["transaction_details"]["gross_amount"] == 20002
    orders = client.get("/api/orders", headers=bob_headers).json()["orders"]
    assert orders[0]["totalAmount"] == 20002


# -------- Real SDK objects, stubbed transport --------


def _snap_reply(token="snap-sdk-token"):
    return {"token": token, "redirect_url": f"https://app.sandbox.midtrans.com/snap/v4/redirection/{token}"}


def test_sdk_checkout_and_notification(client, midtrans, alice_headers, bob_headers):
    midtrans.replies["/transactions"] = _snap_reply()
    jar = create_product(client, alice_headers, price="12000")

    response = client.post(
        "/api/payment/create-transaction",
        json={"productId": jar["id"], "quantity": 1},
        headers=bob_headers,
    )
    assert response.status_code == 200
    assert response.json()["token"] == "snap-sdk-token"
    transaction_id = response.json()["orderId"]

    snap_call = midtrans.requests[0]
    assert snap_call["method"] == "post"
    assert snap_call["url"] == "https://app.sandbox.midtrans.com/snap/v1/transactions"
    assert snap_call["parameters"]["transaction_details"]["gross_amount"] == 12000

    midtrans.replies[f"/v2/{transaction_id}/status"] = {
        "status_code": "200",
        "order_id": transaction_id,
        "transaction_status": "settlement",
        "fraud_status": "accept",
        "payment_type": "qris",
    }
    # The webhook body carries order_id but no transaction_id
    response = client.post(
        "/api/payment/notification",
        json={
            "order_id": transaction_id,
            "transaction_status": "settlement",
            "fraud_status": "accept",
        },
    )
    assert response.status_code == 200
    assert response.json()["status"] == "paid"

    status_call = midtrans.requests[-1]
    assert status_call["method"] == "get"
    assert status_call["url"] == f"https://api.sandbox.midtrans.com/v2/{transaction_id}/status"

    orders = client.get("/api/orders", headers=bob_headers).json()["orders"]
    assert orders[0]["status"] == "paid"
    assert orders[0]["paymentType"] == "qris"


def test_sdk_checkout_api_error_is_500(client, midtrans, alice_headers, bob_headers):
    midtrans.replies["/transactions"] = MidtransAPIError(
        message="Midtrans API is returning API error. HTTP status code: `401`.",
        http_status_code=401,
    )
    jar = create_product(client, alice_headers)

    response = client.post(
        "/api/payment/create-transaction", json={"productId": jar["id"]}, headers=bob_headers
    )
    assert response.status_code == 500
    assert response.json()["message"] == "Failed to create payment transaction"
    # Nothing is committed when the gateway refuses the checkout
    assert client.get("/api/orders", headers=bob_headers).json()["orders"] == []


def test_sdk_verification_failure_leaves_orders(client, midtrans, alice_headers, bob_headers):
    midtrans.replies["/transactions"] = _snap_reply()
    jar = create_product(client, alice_headers)
    response = client.post(
        "/api/payment/create-transaction", json={"productId": jar["id"]}, headers=bob_headers
    )
    transaction_id = response.json()["orderId"]

    midtrans.replies[f"/v2/{transaction_id}/status"] = requests.ConnectionError("gateway unreachable")
    response = client.post(
        "/api/payment/notification",
        json={"order_id": transaction_id, "transaction_status": "settlement"},
    )
    assert response.status_code == 500
    assert response.json()["message"] == "Error handling notification"

    orders = client.get("/api/orders", headers=bob_headers).json()["orders"]
    assert orders[0]["status"] == "pending"
