import os
import tempfile

# Settings are read once at import time, so the environment comes first.
_tmp = tempfile.mkdtemp(prefix="zerowaste-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp, "uploads")
os.environ["STORAGE_BACKEND"] = "local"
os.environ["BASE_URL"] = "http://testserver"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ["REQUIRE_EMAIL_VERIFICATION"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ["MIDTRANS_SERVER_KEY"] = ""
os.environ["MIDTRANS_CLIENT_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from zerowaste.core.auth import create_access_token, hash_password
from zerowaste.core.midtrans_client import MidtransGateway, get_payment_gateway
from zerowaste.database import engine
from zerowaste.main import app
from zerowaste.models.user import User

UPLOAD_DIR = os.environ["UPLOAD_DIR"]

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeGateway:
    """
    Stands in for MidtransGateway.

    `verified` maps a transaction id to the fields the gateway reports
    when a notification for it is verified.
    """

    def __init__(self):
        self.checkouts = []
        self.verified = {}

    def create_checkout(self, parameters):
        self.checkouts.append(parameters)
        token = f"snap-token-{len(self.checkouts)}"
        return {
            "token": token,
            "redirect_url": f"https://app.sandbox.midtrans.com/snap/v2/vtweb/{token}",
        }

    def verify_notification(self, notification):
        return {**notification, **self.verified.get(notification["order_id"], {})}


class StubHttpClient:
    """
    Takes the place of the Midtrans SDK's HttpClient, so the real SDK
    objects build the requests and nothing leaves the process.

    `replies` maps a URL suffix to the decoded JSON reply, or to an
    exception to raise.
    """

    def __init__(self):
        self.requests = []
        self.replies = {}

    def request(self, method, server_key, request_url, parameters=None, custom_headers=None, proxies=None):
        self.requests.append({"method": method, "url": request_url, "parameters": parameters})
        for suffix, reply in self.replies.items():
            if request_url.endswith(suffix):
                if isinstance(reply, Exception):
                    raise reply
                return reply, None
        raise AssertionError(f"unexpected Midtrans call: {method} {request_url}")


@pytest.fixture(autouse=True)
def reset_db():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    sent = []

    def fake_send(to_email, subject, text_body, html_body=None):
        sent.append({"to": to_email, "subject": subject, "text": text_body})

    monkeypatch.setattr("zerowaste.services.auth_service.send_email", fake_send)
    monkeypatch.setattr("zerowaste.services.admin_service.send_email", fake_send)
    return sent


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def gateway():
    fake = FakeGateway()
    app.dependency_overrides[get_payment_gateway] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_payment_gateway, None)


@pytest.fixture
def midtrans():
    """A real MidtransGateway whose SDK clients talk to a StubHttpClient."""
    real = MidtransGateway("SB-Mid-server-test", "SB-Mid-client-test")
    stub = StubHttpClient()
    real.snap.http_client = stub
    real.core.http_client = stub
    app.dependency_overrides[get_payment_gateway] = lambda: real
    yield stub
    app.dependency_overrides.pop(get_payment_gateway, None)


def make_user(username, password="secret123", verified=True, **fields):
    with Session(engine) as session:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(password),
            full_name=fields.pop("full_name", username.title()),
            is_verified=verified,
            **fields,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def image_part(field="images", name="photo.png", data=PNG_BYTES, content_type="image/png"):
    return (field, (name, data, content_type))


def create_product(client, headers, images=None, **fields):
    data = {
        "name": "Glass jar",
        "price": "15000",
        "category": "Kitchen",
        "condition": "used",
        "type": "Sell",
        "description": "Clean 1L jar with lid",
    }
    data.update(fields)
    if images is None:
        images = [image_part()]
    response = client.post("/api/products", data=data, files=images, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["product"]


@pytest.fixture
def alice():
    return make_user("alice", phone="08123456789")


@pytest.fixture
def bob():
    return make_user("bob")


@pytest.fixture
def alice_headers(alice):
    return auth_headers(alice)


@pytest.fixture
def bob_headers(bob):
    return auth_headers(bob)
