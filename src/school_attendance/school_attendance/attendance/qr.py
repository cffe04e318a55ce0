from __future__ import annotations

import io
from typing import BinaryIO, Optional, Union

import qrcode
from PIL import Image


def render_qr_png(data: str, *, box_size: int = 10, border: int = 2) -> bytes:
    """Render ``data`` (an attendance token) as a PNG QR code."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_qr_image(image: Union[bytes, BinaryIO]) -> Optional[str]:
    """Return the text of the first QR code found in an uploaded image, or None."""
    # pyzbar loads the native zbar library at import time
    from pyzbar.pyzbar import decode as pyzbar_decode

    stream = io.BytesIO(image) if isinstance(image, (bytes, bytearray)) else image
    img = Image.open(stream).convert("RGB")
    decoded = pyzbar_decode(img)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip()
