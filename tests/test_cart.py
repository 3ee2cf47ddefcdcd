import uuid

from conftest import create_product


def test_cart_is_created_on_first_access(client, bob, bob_headers):
    response = client.get("/api/cart", headers=bob_headers)
    assert response.status_code == 200
    cart = response.json()
    assert cart["userId"] == str(bob.id)
    assert cart["items"] == []
    assert cart["totalAmount"] == 0
    assert cart["totalQuantity"] == 0


def test_add_to_cart_increments_existing_line(client, alice_headers, bob_headers):
    jar = create_product(client, alice_headers, price="15000")

    response = client.post("/api/cart/add", json={"productId": jar["id"]}, headers=bob_headers)
    assert response.status_code == 200
    assert response.json()["totalAmount"] == 15000

    response = client.post(
        "/api/cart/add", json={"productId": jar["id"], "quantity": 2}, headers=bob_headers
    )
    cart = response.json()
    assert len(cart["items"]) == 1
    line = cart["items"][0]
    assert line["quantity"] == 3
    assert line["price"] == 15000
    assert line["lineTotal"] == 45000
    assert line["product"]["name"] == "Glass jar"
    assert line["product"]["imageUrl"].startswith("http://testserver/uploads/")
    assert cart["totalAmount"] == 45000
    assert cart["totalQuantity"] == 3


def test_add_to_cart_validation(client, alice_headers, bob_headers):
    jar = create_product(client, alice_headers)

    response = client.post(
        "/api/cart/add", json={"productId": jar["id"], "quantity": 0}, headers=bob_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Quantity must be at least 1"

    response = client.post(
        "/api/cart/add", json={"productId": str(uuid.uuid4())}, headers=bob_headers
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Product not found"


def test_cart_keeps_price_snapshot(client, alice_headers, bob_headers):
    jar = create_product(client, alice_headers, price="10000")
    client.post("/api/cart/add", json={"productId": jar["id"]}, headers=bob_headers)

    client.put(f"/api/products/{jar['id']}", data={"price": "99000"}, headers=alice_headers)

    cart = client.get("/api/cart", headers=bob_headers).json()
    assert cart["items"][0]["price"] == 10000
    assert cart["items"][0]["product"]["price"] == 99000
    assert cart["totalAmount"] == 10000


def test_update_quantity(client, alice_headers, bob_headers):
    jar = create_product(client, alice_headers, price="2000")
    spoon = create_product(client, alice_headers, name="Spoon", price="500")
    client.post("/api/cart/add", json={"productId": jar["id"]}, headers=bob_headers)
    client.post("/api/cart/add", json={"productId": spoon["id"]}, headers=bob_headers)

    response = client.put(
        "/api/cart/update", json={"productId": jar["id"], "quantity": 5}, headers=bob_headers
    )
    assert response.status_code == 200
    assert response.json()["totalAmount"] == 5 * 2000 + 500

    # quantity <= 0 removes the line
    response = client.put(
        "/api/cart/update", json={"productId": jar["id"], "quantity": 0}, headers=bob_headers
    )
    cart = response.json()
    assert [item["productId"] for item in cart["items"]] == [spoon["id"]]
    assert cart["totalAmount"] == 500

    response = client.put(
        "/api/cart/update", json={"productId": jar["id"], "quantity": 1}, headers=bob_headers
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Item not found in cart"


def test_update_without_cart_is_404(client, alice_headers, bob_headers):
    jar = create_product(client, alice_headers)
    response = client.put(
        "/api/cart/update", json={"productId": jar["id"], "quantity": 1}, headers=bob_headers
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Cart not found"


def test_remove_and_clear(client, alice_headers, bob_headers):
    jar = create_product(client, alice_headers, price="2000")
    spoon = create_product(client, alice_headers, name="Spoon", price="500")

    response = client.delete(f"/api/cart/remove/{jar['id']}", headers=bob_headers)
    assert response.status_code == 404

    client.post("/api/cart/add", json={"productId": jar["id"]}, headers=bob_headers)
    client.post("/api/cart/add", json={"productId": spoon["id"]}, headers=bob_headers)

    response = client.delete(f"/api/cart/remove/{jar['id']}", headers=bob_headers)
    assert response.status_code == 200
    assert response.json()["totalAmount"] == 500

    response = client.delete("/api/cart/clear", headers=bob_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Cart cleared successfully"
    assert body["cart"]["items"] == []
    assert body["cart"]["totalAmount"] == 0


def test_clear_without_cart_is_404(client, bob_headers):
    response = client.delete("/api/cart/clear", headers=bob_headers)
    assert response.status_code == 404
