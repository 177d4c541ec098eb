"""QR code rendering for provisioning URIs."""

import base64
from io import BytesIO

import qrcode
import qrcode.constants

from twofa.config import settings


def generate_qr_code(data: str, box_size: int | None = None, border: int | None = None) -> str:
    """Render ``data`` as a QR code and return the PNG as base64."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=box_size or settings.qr_box_size,
        border=border if border is not None else settings.qr_border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    buffer.seek(0)

    return base64.b64encode(buffer.read()).decode("utf-8")


def to_data_uri(png_base64: str) -> str:
    """Wrap a base64 PNG so it can be used directly as an <img> src."""
    return f"data:image/png;base64,{png_base64}"
