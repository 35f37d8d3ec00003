from __future__ import annotations
from io import BytesIO
import uuid

import qrcode

CODE_LENGTH = 12

def generate_code() -> str:
    """Random 12 char lowercase hex code printed into each QR image."""
    return uuid.uuid4().hex[:CODE_LENGTH]

def scan_url(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/qr/{code}"

def render_png(data: str, *, box_size: int = 10, border: int = 4) -> bytes:
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image()
    b = BytesIO(); img.save(b, format="PNG")
    return b.getvalue()
