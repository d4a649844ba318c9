"""
QR image rendering for product identifiers.
"""

import io
from abc import ABC, abstractmethod

import qrcode
from qrcode.constants import ERROR_CORRECT_L

from nexuschain.config import Settings
from nexuschain.core.errors import RenderError
from nexuschain.observability.metrics import collaborator_call


class IdentifierRenderer(ABC):
    """Interface for turning an identifier payload into an image."""

    @abstractmethod
    def render(self, payload: str) -> bytes:
        """
        Render the payload.

        Returns:
            Encoded image bytes

        Raises:
            RenderError: If the image cannot be produced
        """
        pass

    @property
    def mime_type(self) -> str:
        return "image/png"


class QRCodeRenderer(IdentifierRenderer):
    """Renders payloads as PNG QR codes with the qrcode library."""

    def __init__(self, box_size: int = 10, border: int = 4):
        self.box_size = box_size
        self.border = border

    @classmethod
    def from_settings(cls, settings: Settings) -> "QRCodeRenderer":
        return cls(box_size=settings.qr_box_size, border=settings.qr_border)

    def render(self, payload: str) -> bytes:
        try:
            with collaborator_call("qr", "render"):
                qr = qrcode.QRCode(
                    version=None,
                    error_correction=ERROR_CORRECT_L,
                    box_size=self.box_size,
                    border=self.border,
                )
                qr.add_data(payload)
                qr.make(fit=True)

                img = qr.make_image(fill_color="black", back_color="white")
                buffer = io.BytesIO()
                img.save(buffer, format="PNG")
        except Exception as e:
            # qrcode and PIL raise a variety of errors (data overflow, codec)
            raise RenderError(f"QR rendering failed: {e}") from e

        return buffer.getvalue()
