"""
HTTP client for the authoritative record store.

The record store owns products and checkpoints. This client is a stateless
gateway: every method is one request, no retries, and every failure is
translated into the provenance error taxonomy so callers never see httpx
or pydantic exceptions.
"""

from typing import Any
from urllib.parse import quote

import httpx
import pydantic

from nexuschain.config import Settings
from nexuschain.core.errors import DuplicateError, NotFoundError, RecordStoreError
from nexuschain.core.models import Checkpoint, CheckpointInput, Product, ProductRegistration
from nexuschain.observability.logger import get_logger
from nexuschain.observability.metrics import collaborator_call
from nexuschain.utils.validation import validate_limit, validate_page, validate_record_id

logger = get_logger(__name__)


def _segment(value: str) -> str:
    """Quote a value for use as a single URL path segment."""
    return quote(value, safe="")


def _unwrap(data: Any, key: str) -> Any:
    """Accept both bare objects and {"<key>": {...}} envelopes."""
    if isinstance(data, dict) and key in data:
        return data[key]
    return data


class RecordClient:
    """
    Typed operations against the record store's REST API.

    Usage:
        with RecordClient("http://localhost:3000", timeout=10) as client:
            product = client.get_product("65f1c2e4a9")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Record store base URL
            timeout: Per-request timeout in seconds; a timeout is a RecordStoreError
            token: Optional bearer token
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.BaseTransport | None = None) -> "RecordClient":
        token = settings.api_token.get_secret_value() if settings.api_token else None
        return cls(settings.api_url, timeout=settings.api_timeout, token=token, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # =======================
    # PRODUCTS
    # =======================

    def create_product(self, registration: ProductRegistration) -> Product:
        """
        Create a product record.

        Raises:
            DuplicateError: If the product key is already registered
            RecordStoreError: If the store is unreachable or rejects the input
        """
        data = self._request(
            "POST", "/api/products", "create_product",
            json=registration.to_wire(),
            conflict_key=registration.product_key,
        )
        return self._parse(Product, _unwrap(data, "product"), "create_product")

    def get_product(self, record_id: str) -> Product:
        """
        Fetch a product by record id.

        Raises:
            NotFoundError: If no product has this record id
            RecordStoreError: On transport or store failure
        """
        record_id = validate_record_id(record_id)
        data = self._request("GET", f"/api/products/{_segment(record_id)}", "get_product", not_found=record_id)
        return self._parse(Product, _unwrap(data, "product"), "get_product")

    def verify_by_identifier(self, identifier: str) -> Product:
        """
        Resolve a product key, record id or QR label to a product.

        Raises:
            NotFoundError: If the identifier matches nothing
            RecordStoreError: On transport or store failure
        """
        data = self._request(
            "GET", f"/api/products/verify/{_segment(identifier)}", "verify_by_identifier",
            not_found=identifier,
        )
        return self._parse(Product, _unwrap(data, "product"), "verify_by_identifier")

    def list_products(
        self,
        status: str | None = None,
        search: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[Product]:
        """List products, optionally filtered by status or search text."""
        params: dict[str, Any] = {}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        if page is not None:
            params["page"] = validate_page(page)
        if limit is not None:
            params["limit"] = validate_limit(limit)

        data = self._request("GET", "/api/products", "list_products", params=params)
        items = _unwrap(data, "products")
        if not isinstance(items, list):
            raise RecordStoreError("list_products", detail="expected a list of products")
        return [self._parse(Product, item, "list_products") for item in items]

    def update_anchor_reference(self, record_id: str, anchor_reference: str) -> None:
        """
        Link a blockchain transaction id to a product record.

        Raises:
            RecordStoreError: If the store cannot persist the reference
        """
        record_id = validate_record_id(record_id)
        try:
            self._request(
                "PATCH", f"/api/products/{_segment(record_id)}/blockchain", "update_anchor_reference",
                json={"blockchainHash": anchor_reference},
                not_found=record_id,
            )
        except NotFoundError as e:
            raise RecordStoreError("update_anchor_reference", status_code=404, detail=str(e)) from e

    # =======================
    # CHECKPOINTS
    # =======================

    def create_checkpoint(self, checkpoint: CheckpointInput) -> Checkpoint:
        """
        Record a checkpoint.

        Raises:
            NotFoundError: If the owning product does not exist
            RecordStoreError: On transport or store failure
        """
        data = self._request(
            "POST", "/api/checkpoints", "create_checkpoint",
            json=checkpoint.to_wire(),
            not_found=checkpoint.product_record_id,
        )
        return self._parse(Checkpoint, _unwrap(data, "checkpoint"), "create_checkpoint")

    def get_checkpoints(self, record_id: str) -> list[Checkpoint]:
        """
        List a product's checkpoints in the order the store returns them.

        A product without checkpoints yields an empty list.
        """
        record_id = validate_record_id(record_id)
        data = self._request(
            "GET", f"/api/checkpoints/product/{_segment(record_id)}", "get_checkpoints",
            not_found=record_id,
        )
        items = _unwrap(data, "checkpoints")
        if items is None:
            return []
        if not isinstance(items, list):
            raise RecordStoreError("get_checkpoints", detail="expected a list of checkpoints")
        return [self._parse(Checkpoint, item, "get_checkpoints") for item in items]

    # =======================
    # INTERNALS
    # =======================

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        not_found: str | None = None,
        conflict_key: str | None = None,
    ) -> Any:
        """
        Send one request and classify the outcome.

        Returns:
            Decoded JSON body (None for empty bodies)
        """
        try:
            with collaborator_call("record_store", operation):
                response = self._client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            logger.warning(f"Record store timed out during {operation}", extra={"operation": operation})
            raise RecordStoreError(operation, detail=f"timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.warning(
                f"Record store unreachable during {operation}",
                extra={"operation": operation, "error_type": type(e).__name__},
            )
            raise RecordStoreError(operation, detail=str(e)) from e

        status = response.status_code
        if status == 404:
            raise NotFoundError(not_found or path)
        if status == 409:
            raise DuplicateError(conflict_key)
        if status >= 400:
            logger.warning(
                f"Record store rejected {operation}",
                extra={"operation": operation, "status_code": status},
            )
            raise RecordStoreError(operation, status_code=status, detail=response.text[:500])

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RecordStoreError(operation, status_code=status, detail="response is not JSON") from e

    @staticmethod
    def _parse(model: type[pydantic.BaseModel], data: Any, operation: str) -> Any:
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            raise RecordStoreError(operation, detail=f"unexpected response shape: {e}") from e
