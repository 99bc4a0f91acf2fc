from __future__ import annotations

import io

import qrcode

from .model import SignedToken


def render_token_png(token: SignedToken, *, box_size: int = 10, border: int = 4) -> bytes:
    """Render the token's wire payload as a printable QR code PNG."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(token.to_json())
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
