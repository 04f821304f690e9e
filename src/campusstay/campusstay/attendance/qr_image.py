from __future__ import annotations

from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from ..core.exceptions import ValidationError


def decode_qr_token(stream: BinaryIO) -> str:
    """Read the first QR code found in an uploaded image."""
    # pyzbar loads the native zbar library on import; only pay for it here.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except UnidentifiedImageError:
        raise ValidationError("Uploaded file is not an image")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in the image")
    return decoded[0].data.decode("utf-8").strip()
