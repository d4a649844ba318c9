"""
Pytest configuration and fixtures for nexuschain tests

This module provides shared fixtures for unit and integration tests: an
in-memory record store served through httpx.MockTransport, and in-process
fakes for the blockchain anchor client and the QR renderer.
"""
import itertools
import json
from datetime import datetime, timezone
from typing import Generator

import httpx
import pytest

from nexuschain.clients.anchor_client import AnchorClient
from nexuschain.clients.qr_renderer import IdentifierRenderer
from nexuschain.clients.record_client import RecordClient
from nexuschain.core.errors import AnchorError, RenderError
from nexuschain.core.models import AuthenticatedIdentity
from nexuschain.observability.metrics import REGISTRY


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that run whole workflows against in-memory collaborators"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


BASE_URL = "http://nexus.test"
TX_HASH = "0x" + "ab" * 32


# =======================
# RECORD STORE FAKE
# =======================

class InMemoryRecordStore:
    """
    Record store REST API held in memory, used as an httpx.MockTransport handler.

    Failures are injected per operation: `fail("link_anchor", 500)` makes
    every PATCH .../blockchain answer 500, `fail("get_product", None)`
    raises a transport error instead of answering.
    """

    def __init__(self):
        self.products: dict[str, dict] = {}
        self.checkpoints: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.failures: dict[str, int | None] = {}
        self.now = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        self._ids = itertools.count(1)

    def fail(self, operation: str, status_code: int | None = 500) -> None:
        self.failures[operation] = status_code

    def add_product(self, **fields) -> dict:
        """Seed a product directly; returns the stored wire object."""
        record_id = fields.pop("id", None) or self._next_id("prd")
        product = {
            "id": record_id,
            "productId": "SEED-001",
            "name": "Seeded product",
            "category": "OTHER",
            "description": "Seeded for tests",
            "manufacturingDate": "2024-01-01",
            "originLocation": "Rotterdam",
            "status": "CREATED",
            "blockchainHash": None,
            "createdAt": self.now.isoformat(),
        }
        product.update(fields)
        self.products[record_id] = product
        return product

    def add_checkpoint(self, record_id: str, **fields) -> dict:
        checkpoint = {
            "id": self._next_id("chk"),
            "productId": record_id,
            "timestamp": self.now.isoformat(),
            "location": "Somewhere",
            "status": "IN_TRANSIT",
        }
        checkpoint.update(fields)
        self.checkpoints.append(checkpoint)
        return checkpoint

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids):04d}"

    def _find(self, identifier: str) -> dict | None:
        if identifier in self.products:
            return self.products[identifier]
        for product in self.products.values():
            if product["productId"] == identifier:
                return product
        return None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.method
        parts = [p for p in request.url.path.split("/") if p][1:]  # drop "api"

        if parts[:1] == ["products"]:
            if method == "POST" and len(parts) == 1:
                return self._dispatch("create_product", request, self._create_product)
            if method == "GET" and len(parts) == 1:
                return self._dispatch("list_products", request, self._list_products)
            if method == "GET" and len(parts) == 3 and parts[1] == "verify":
                return self._dispatch("verify", request, lambda r: self._get(parts[2], wrap=True))
            if method == "GET" and len(parts) == 2:
                return self._dispatch("get_product", request, lambda r: self._get(parts[1]))
            if method == "PATCH" and len(parts) == 3 and parts[2] == "blockchain":
                return self._dispatch("link_anchor", request, lambda r: self._link(parts[1], r))

        if parts[:1] == ["checkpoints"]:
            if method == "POST" and len(parts) == 1:
                return self._dispatch("create_checkpoint", request, self._create_checkpoint)
            if method == "GET" and len(parts) == 3 and parts[1] == "product":
                return self._dispatch("get_checkpoints", request, lambda r: self._list_checkpoints(parts[2]))

        return httpx.Response(404, json={"message": "Route not found"})

    def _dispatch(self, operation, request, handler) -> httpx.Response:
        if operation in self.failures:
            status_code = self.failures[operation]
            if status_code is None:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(status_code, json={"message": "internal stack trace here"})
        return handler(request)

    def _create_product(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if any(p["productId"] == body["productId"] for p in self.products.values()):
            return httpx.Response(409, json={"message": "Product ID already exists"})

        record_id = self._next_id("prd")
        product = {
            **body,
            "id": record_id,
            "status": "CREATED",
            "blockchainHash": None,
            "createdAt": self.now.isoformat(),
        }
        self.products[record_id] = product
        return httpx.Response(201, json={"product": product})

    def _list_products(self, request: httpx.Request) -> httpx.Response:
        status = request.url.params.get("status")
        search = request.url.params.get("search")
        items = [
            p for p in self.products.values()
            if (not status or p["status"] == status)
            and (not search or search.lower() in p["name"].lower())
        ]
        return httpx.Response(200, json={"products": items})

    def _get(self, identifier: str, wrap: bool = False) -> httpx.Response:
        product = self._find(identifier)
        if product is None:
            return httpx.Response(404, json={"message": "Product not found"})
        return httpx.Response(200, json={"product": product} if wrap else product)

    def _link(self, record_id: str, request: httpx.Request) -> httpx.Response:
        if record_id not in self.products:
            return httpx.Response(404, json={"message": "Product not found"})
        self.products[record_id]["blockchainHash"] = json.loads(request.content)["blockchainHash"]
        return httpx.Response(200, json={"product": self.products[record_id]})

    def _create_checkpoint(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if body["productId"] not in self.products:
            return httpx.Response(404, json={"message": "Product not found"})
        checkpoint = self.add_checkpoint(
            body["productId"],
            **{k: v for k, v in body.items() if k != "productId"},
        )
        self.products[body["productId"]]["currentLocation"] = checkpoint["location"]
        return httpx.Response(201, json={"checkpoint": checkpoint})

    def _list_checkpoints(self, record_id: str) -> httpx.Response:
        if record_id not in self.products:
            return httpx.Response(404, json={"message": "Product not found"})
        items = [c for c in self.checkpoints if c["productId"] == record_id]
        return httpx.Response(200, json={"checkpoints": items})


@pytest.fixture(scope="function")
def record_store() -> InMemoryRecordStore:
    """Fresh in-memory record store for a single test"""
    return InMemoryRecordStore()


@pytest.fixture(scope="function")
def record_client(record_store) -> Generator[RecordClient, None, None]:
    """
    RecordClient talking to the in-memory record store

    Yields:
        RecordClient backed by httpx.MockTransport
    """
    client = RecordClient(BASE_URL, timeout=5, transport=httpx.MockTransport(record_store))
    yield client
    client.close()


# =======================
# COLLABORATOR FAKES
# =======================

class FakeAnchorClient(AnchorClient):
    """Anchor client returning a fixed transaction id, or failing."""

    def __init__(self, reference: str = TX_HASH, fail: bool = False):
        self.reference = reference
        self.should_fail = fail
        self.calls: list[tuple[str, str, str]] = []

    def anchor(self, product_key, name, signer):
        self.calls.append((product_key, name, signer.wallet_address))
        if self.should_fail:
            raise AnchorError("execution reverted")
        return self.reference


class FakeRenderer(IdentifierRenderer):
    """Renderer producing a PNG-signed byte string, or failing."""

    def __init__(self, fail: bool = False):
        self.should_fail = fail
        self.payloads: list[str] = []

    def render(self, payload):
        self.payloads.append(payload)
        if self.should_fail:
            raise RenderError("image backend unavailable")
        return b"\x89PNG\r\n\x1a\n" + payload.encode("utf-8")


@pytest.fixture
def anchor_client() -> FakeAnchorClient:
    return FakeAnchorClient()


@pytest.fixture
def failing_anchor_client() -> FakeAnchorClient:
    return FakeAnchorClient(fail=True)


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def failing_renderer() -> FakeRenderer:
    return FakeRenderer(fail=True)


@pytest.fixture
def identity() -> AuthenticatedIdentity:
    """Manufacturer with a wallet, able to anchor"""
    return AuthenticatedIdentity(
        user_id="usr_81f2",
        role="MANUFACTURER",
        wallet_address="0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1",
    )


@pytest.fixture
def registration_data() -> dict:
    """Valid registration for a cold-chain vaccine"""
    return {
        "product_key": "PFZ-CV19-001",
        "name": "Vaccine X",
        "category": "PHARMACEUTICALS",
        "description": "mRNA vaccine, cold chain required",
        "manufacturing_date": "2024-01-01",
        "expiry_date": "2024-07-01",
        "origin_location": "New York",
        "min_temperature": -80,
        "max_temperature": -60,
    }


# =======================
# METRICS
# =======================

@pytest.fixture
def metric_value():
    """
    Read a sample from the nexuschain registry (0.0 when never observed)

    Counters are process-global, so tests compare before/after values.
    """
    def _read(name: str, **labels) -> float:
        return REGISTRY.get_sample_value(name, labels) or 0.0
    return _read
