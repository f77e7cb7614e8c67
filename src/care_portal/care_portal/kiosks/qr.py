from __future__ import annotations

import io
from typing import BinaryIO

import qrcode
from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

from ..core.exceptions import ValidationError


def pairing_qr_png(token: str) -> io.BytesIO:
    """Render a pairing token as a PNG the kiosk camera can scan."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(token)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf


def decode_qr_image(stream: BinaryIO) -> str:
    """Return the text of the first QR code found in an uploaded image."""
    try:
        img = Image.open(stream).convert("RGB")
    except OSError:
        raise ValidationError("Uploaded file is not an image")
    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in image")
    try:
        return decoded[0].data.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise ValidationError("QR code does not contain a pairing token")
