import uuid
from datetime import timedelta

from sqlmodel import Session

from zerowaste.database import engine
from zerowaste.models.order import Order, OrderItem
from zerowaste.models.user import utcnow


def make_order(buyer, seller, total, status="pending", minutes_ago=0, **fields):
    with Session(engine) as session:
        order = Order(
            buyer_id=buyer.id,
            seller_id=seller.id,
            product_id=fields.pop("product_id", uuid.uuid4()),
            product_name=fields.pop("product_name", "Glass jar"),
            total_amount=total,
            status=status,
            transaction_id=fields.pop("transaction_id", f"ORDER-{uuid.uuid4().hex[:8]}"),
            created_at=utcnow() - timedelta(minutes=minutes_ago),
            **fields,
        )
        session.add(order)
        session.commit()
        session.refresh(order)
        return order


def test_list_orders_pagination(client, alice, bob, bob_headers):
    for i in range(12):
        make_order(bob, alice, total=1000 * (i + 1), minutes_ago=i)

    response = client.get("/api/orders", params={"page": 3, "limit": 5}, headers=bob_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["orders"]) == 2
    assert body["pagination"] == {
        "currentPage": 3,
        "totalPages": 3,
        "totalOrders": 12,
        "hasNextPage": False,
        "hasPrevPage": True,
        "limit": 5,
    }

    # Newest first by default
    first_page = client.get("/api/orders", params={"limit": 5}, headers=bob_headers).json()
    assert [o["totalAmount"] for o in first_page["orders"]] == [1000, 2000, 3000, 4000, 5000]
    assert first_page["pagination"]["hasNextPage"] is True
    assert first_page["pagination"]["hasPrevPage"] is False


def test_list_orders_is_scoped_to_buyer(client, alice, bob, alice_headers):
    make_order(bob, alice, total=500)
    response = client.get("/api/orders", headers=alice_headers)
    assert response.json()["orders"] == []
    assert response.json()["pagination"]["totalOrders"] == 0


def test_list_orders_status_filter_and_sort(client, alice, bob, bob_headers):
    make_order(bob, alice, total=300, status="paid")
    make_order(bob, alice, total=100, status="paid")
    make_order(bob, alice, total=200, status="pending")

    response = client.get("/api/orders", params={"status": "paid"}, headers=bob_headers)
    assert {o["totalAmount"] for o in response.json()["orders"]} == {300, 100}

    response = client.get(
        "/api/orders", params={"status": "all", "sort": "amount-high"}, headers=bob_headers
    )
    assert [o["totalAmount"] for o in response.json()["orders"]] == [300, 200, 100]

    response = client.get("/api/orders", params={"sort": "amount-low"}, headers=bob_headers)
    assert [o["totalAmount"] for o in response.json()["orders"]] == [100, 200, 300]

    response = client.get("/api/orders", params={"status": "lost"}, headers=bob_headers)
    assert response.status_code == 400

    response = client.get("/api/orders", params={"limit": 101}, headers=bob_headers)
    assert response.status_code == 400


def test_order_stats(client, alice, bob, bob_headers):
    make_order(bob, alice, total=1000, status="paid")
    make_order(bob, alice, total=2500, status="completed")
    make_order(bob, alice, total=400, status="pending")
    make_order(bob, alice, total=700, status="cancelled")
    make_order(alice, bob, total=9999, status="paid")

    response = client.get("/api/orders/stats", headers=bob_headers)
    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["totalOrders"] == 4
    assert stats["totalSpent"] == 3500
    assert set(stats["byStatus"]) == {
        "pending", "paid", "processing", "shipped", "delivered", "completed", "cancelled",
    }
    assert stats["byStatus"]["paid"] == {"count": 1, "totalAmount": 1000}
    assert stats["byStatus"]["shipped"] == {"count": 0, "totalAmount": 0}


def test_get_order_detail(client, alice, bob, alice_headers, bob_headers):
    order = make_order(bob, alice, total=4500, quantity=3, product_name="Jar")

    response = client.get(f"/api/orders/{order.id}", headers=bob_headers)
    assert response.status_code == 200
    detail = response.json()["order"]
    assert detail["orderType"] == "single"
    assert detail["seller"]["username"] == "alice"
    assert detail["items"] == [
        {
            "productId": str(order.product_id),
            "productName": "Jar",
            "product": None,
            "quantity": 3,
            "price": 1500,
            "lineTotal": 4500,
        }
    ]

    # Seller cannot read it through the buyer endpoint
    response = client.get(f"/api/orders/{order.id}", headers=alice_headers)
    assert response.status_code == 404


def test_cart_order_lines(client, alice, bob, bob_headers):
    order = make_order(bob, alice, total=3000, product_id=None, product_name=None)
    with Session(engine) as session:
        session.add_all(
            [
                OrderItem(order_id=order.id, product_id=uuid.uuid4(), product_name="A", quantity=1, price=1000),
                OrderItem(order_id=order.id, product_id=uuid.uuid4(), product_name="B", quantity=2, price=1000),
            ]
        )
        session.commit()

    detail = client.get(f"/api/orders/{order.id}", headers=bob_headers).json()["order"]
    assert detail["orderType"] == "cart"
    assert sorted(line["productName"] for line in detail["items"]) == ["A", "B"]
    assert sum(line["lineTotal"] for line in detail["items"]) == detail["totalAmount"]


def test_cancel_pending_order(client, alice, bob, bob_headers):
    order = make_order(bob, alice, total=1000)

    response = client.put(f"/api/orders/{order.id}/cancel", headers=bob_headers)
    assert response.status_code == 200
    cancelled = response.json()["order"]
    assert cancelled["status"] == "cancelled"
    assert cancelled["cancelReason"] == "Cancelled by user"
    assert cancelled["cancelledAt"] is not None

    # Only pending orders can be cancelled
    response = client.put(f"/api/orders/{order.id}/cancel", headers=bob_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Order not found or cannot be cancelled"


def test_cancel_with_reason_and_rules(client, alice, bob, alice_headers, bob_headers):
    pending = make_order(bob, alice, total=1000)
    paid = make_order(bob, alice, total=1000, status="paid")

    response = client.put(
        f"/api/orders/{pending.id}/cancel", json={"reason": "Changed my mind"}, headers=alice_headers
    )
    assert response.status_code == 404

    response = client.put(
        f"/api/orders/{pending.id}/cancel", json={"reason": "Changed my mind"}, headers=bob_headers
    )
    assert response.json()["order"]["cancelReason"] == "Changed my mind"

    response = client.put(f"/api/orders/{paid.id}/cancel", headers=bob_headers)
    assert response.status_code == 404
