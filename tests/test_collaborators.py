# tests/test_collaborators.py
from types import SimpleNamespace
from urllib.parse import unquote

import pytest
import requests

from autowheel import images
from autowheel.client import CatalogClient, CatalogUnavailable
from autowheel.images import UploadError, placeholder_image, primary_image, upload_image
from autowheel.messaging import build_inquiry_message, format_price, whatsapp_url


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code}")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.headers = {}
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _page(ids, page, total_pages):
    return {"data": [{"id": i, "make": "Toyota", "model": "Camry"} for i in ids],
            "total": 3, "page": page, "limit": 2, "total_pages": total_pages}


def test_client_walks_all_pages():
    session = FakeSession([FakeResponse(_page([1, 2], 1, 2)), FakeResponse(_page([3], 2, 2))])
    client = CatalogClient("http://api/", token="t", session=session)
    assert [c.id for c in client.get_cars()] == [1, 2, 3]
    assert session.headers["Authorization"] == "Bearer t"
    assert session.calls[1] == ("http://api/cars", {"page": 2, "limit": 100})


def test_client_network_error():
    session = FakeSession([requests.exceptions.ConnectionError("down")])
    with pytest.raises(CatalogUnavailable):
        CatalogClient("http://api", session=session).get_cars()


def test_client_bad_payload():
    session = FakeSession([FakeResponse({"unexpected": True})])
    with pytest.raises(CatalogUnavailable):
        CatalogClient("http://api", session=session).get_cars()


def test_placeholder_is_deterministic():
    assert placeholder_image("Toyota", "Camry") == placeholder_image("toyota", "CAMRY")
    assert placeholder_image("Tesla", "Model 3") == images.CAR_IMAGES["tesla"]["model3"]
    assert placeholder_image("BMW", "Unknown") == images.CAR_IMAGES["bmw"]["x5"]
    assert placeholder_image("Lada", "Niva") == images.DEFAULT_IMAGE
    assert primary_image(["", "https://x/1.jpg"], "Toyota", "Camry") == "https://x/1.jpg"


def test_upload_needs_config(monkeypatch):
    monkeypatch.delenv("CLOUDINARY_CLOUD_NAME", raising=False)
    with pytest.raises(UploadError):
        upload_image(b"x", "car.jpg")


def test_upload_posts_to_cloudinary(monkeypatch):
    monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setenv("CLOUDINARY_UPLOAD_PRESET", "unsigned")
    sent = {}

    def fake_post(url, data=None, files=None, timeout=None):
        sent.update(url=url, data=data)
        return FakeResponse({"secure_url": "https://res.cloudinary.com/demo/car.jpg"})

    monkeypatch.setattr(images.requests, "post", fake_post)
    assert upload_image(b"x", "car.png") == "https://res.cloudinary.com/demo/car.jpg"
    assert sent["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert sent["data"] == {"upload_preset": "unsigned"}


def test_upload_rejects_bad_files(monkeypatch):
    monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setenv("CLOUDINARY_UPLOAD_PRESET", "unsigned")
    with pytest.raises(UploadError):
        upload_image(b"x", "car.gif")
    with pytest.raises(UploadError):
        upload_image(b"x" * (images.MAX_UPLOAD_BYTES + 1), "car.jpg")


def test_upload_http_failure(monkeypatch):
    monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setenv("CLOUDINARY_UPLOAD_PRESET", "unsigned")
    monkeypatch.setattr(images.requests, "post", lambda *a, **k: FakeResponse({}, status=500))
    with pytest.raises(UploadError):
        upload_image(b"x", "car.jpg")


def test_message_and_link(monkeypatch):
    monkeypatch.setenv("WHATSAPP_NUMBER", "+94 77 000 0000")
    record = SimpleNamespace(
        car_id=3, car_make="BMW", car_model="X5", car_year=2019, car_price=25_000_000,
        customer_name="Amal", customer_phone="+94771234567", customer_email="amal@example.com",
        customer_location="", customer_message="Is it still available?",
        inquiry_type="financing", preferred_contact_method="phone",
    )
    message = build_inquiry_message(record)
    assert "2019 BMW X5 (ID: 3)" in message
    assert "Financing options" in message
    assert "Location" not in message
    url = whatsapp_url(message)
    assert url.startswith("https://wa.me/94770000000?text=")
    assert unquote(url.split("text=", 1)[1]) == message
    assert format_price(None) == "Price on request"
