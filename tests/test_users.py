import os

from conftest import UPLOAD_DIR, auth_headers, create_product, image_part


def test_read_profile(client, alice, alice_headers):
    response = client.get("/api/users/profile", headers=alice_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == str(alice.id)
    assert body["username"] == "alice"
    assert body["phone"] == "08123456789"
    assert body["profilePictureUrl"] is None


def test_update_profile_only_touches_sent_fields(client, alice_headers):
    response = client.put(
        "/api/users/profile",
        json={"fullName": "Alice Liddell", "bio": "Collector of jars"},
        headers=alice_headers,
    )
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["fullName"] == "Alice Liddell"
    assert user["bio"] == "Collector of jars"
    assert user["phone"] == "08123456789"

    # Empty string clears an optional field
    response = client.put("/api/users/profile", json={"phone": ""}, headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["user"]["phone"] is None
    assert response.json()["user"]["fullName"] == "Alice Liddell"


def test_update_profile_username_must_stay_unique(client, alice_headers, bob):
    response = client.put("/api/users/profile", json={"username": "bob"}, headers=alice_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Username already taken"

    response = client.put("/api/users/profile", json={"username": "   "}, headers=alice_headers)
    assert response.status_code == 400

    response = client.put("/api/users/profile", json={"username": "alice2"}, headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["user"]["username"] == "alice2"


def test_change_password(client, alice_headers):
    response = client.post(
        "/api/users/change-password",
        json={"currentPassword": "wrong-one", "newPassword": "next-secret"},
        headers=alice_headers,
    )
    assert response.status_code == 400

    response = client.post(
        "/api/users/change-password",
        json={"currentPassword": "secret123", "newPassword": "next-secret"},
        headers=alice_headers,
    )
    assert response.status_code == 200

    response = client.post("/api/auth/login", json={"username": "alice", "password": "next-secret"})
    assert response.status_code == 200


def test_profile_picture_replaces_previous_file(client, alice_headers):
    response = client.post(
        "/api/users/profile-picture",
        files=[image_part("profilePicture", "me.jpg", content_type="image/jpeg")],
        headers=alice_headers,
    )
    assert response.status_code == 200
    first = response.json()
    assert first["profilePicture"].startswith("uploads/")
    assert first["profilePicture"].endswith(".jpg")
    assert first["profilePictureUrl"] == f"http://testserver/{first['profilePicture']}"
    first_file = os.path.join(UPLOAD_DIR, os.path.basename(first["profilePicture"]))
    assert os.path.exists(first_file)

    response = client.post(
        "/api/users/profile-picture",
        files=[image_part("profilePicture", "me2.png")],
        headers=alice_headers,
    )
    assert response.status_code == 200
    assert response.json()["profilePicture"] != first["profilePicture"]
    assert not os.path.exists(first_file)

    profile = client.get("/api/users/profile", headers=alice_headers).json()
    assert profile["profilePicture"] == response.json()["profilePicture"]


def test_profile_picture_requires_a_file(client, alice_headers):
    response = client.post(
        "/api/users/profile-picture",
        files=[image_part("avatar")],
        headers=alice_headers,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "UNEXPECTED_FIELD"


def test_my_products_include_every_status(client, alice, alice_headers, bob):
    first = create_product(client, alice_headers, name="Jar")
    create_product(client, alice_headers, name="Bottle")
    create_product(client, auth_headers(bob), name="Bob's bag")

    response = client.put(
        f"/api/products/{first['id']}", data={"status": "sold"}, headers=alice_headers
    )
    assert response.status_code == 200

    response = client.get("/api/users/products", headers=alice_headers)
    assert response.status_code == 200
    products = response.json()
    assert {p["name"] for p in products} == {"Jar", "Bottle"}
    assert {p["status"] for p in products} == {"active", "sold"}
    assert all(p["imageUrls"] for p in products)
