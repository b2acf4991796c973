"""
Génération des QR codes élèves.
Le QR encode l'id de l'élève tel quel : le décoder redonne exactement l'id.
"""

import base64
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_H


def generate_qr_image(text: str) -> bytes:
    """Génère une image PNG du QR code encodant le texte donné."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_H, box_size=8, border=1)
    qr.add_data(text)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def qr_data_url(text: str) -> str:
    """Retourne le QR code sous forme de data URL PNG (stockée dans le registre)."""
    encoded = base64.b64encode(generate_qr_image(text)).decode("ascii")
    return f"data:image/png;base64,{encoded}"

