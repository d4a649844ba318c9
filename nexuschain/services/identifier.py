"""
Identifier encoding: the scannable payload attached to a physical product.

The payload is the minimal pair {productKey, recordId}, serialized as
compact JSON with sorted keys so the same product always yields the same
bytes (and the same QR image).
"""

import json
from dataclasses import dataclass

from nexuschain.clients.qr_renderer import IdentifierRenderer
from nexuschain.core.models import IdentifierImage, Product

# Printed labels from earlier deployments carry "NEXUS-<record id>"
LEGACY_LABEL_PREFIX = "NEXUS-"


@dataclass(frozen=True)
class IdentifierPayload:
    product_key: str
    record_id: str

    def encode(self) -> str:
        return json.dumps(
            {"productKey": self.product_key, "recordId": self.record_id},
            separators=(",", ":"),
            sort_keys=True,
        )


def decode_payload(text: str) -> IdentifierPayload | None:
    """
    Parse a scanned payload.

    Returns None when the text is not an encoded payload (e.g. a bare
    product key typed by hand).
    """
    if not text.startswith("{"):
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    product_key = data.get("productKey")
    record_id = data.get("recordId")
    if not isinstance(product_key, str) or not isinstance(record_id, str):
        return None
    if not product_key.strip() or not record_id.strip():
        return None
    return IdentifierPayload(product_key=product_key.strip(), record_id=record_id.strip())


class IdentifierEncoder:
    """Builds identifier payloads and delegates image rendering."""

    def __init__(self, renderer: IdentifierRenderer):
        self.renderer = renderer

    @staticmethod
    def build_payload(product: Product) -> IdentifierPayload:
        return IdentifierPayload(product_key=product.product_key, record_id=product.record_id)

    def encode(self, product: Product) -> IdentifierImage:
        """
        Render the product's identifier image.

        Raises:
            RenderError: If the renderer fails
        """
        payload = self.build_payload(product).encode()
        content = self.renderer.render(payload)
        return IdentifierImage(
            payload=payload,
            content=content,
            mime_type=self.renderer.mime_type,
            filename=f"{product.product_key}-qr-code.png",
        )
