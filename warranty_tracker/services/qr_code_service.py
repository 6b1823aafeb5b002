"""
QR code generation for equipment labels. The code encodes the SKU only.
"""

from io import BytesIO

import qrcode

from warranty_tracker.business.errors import ValidationError


class QRCodeService:

    BOX_SIZE = 10
    BORDER = 4

    @staticmethod
    def generate_png(data: str) -> bytes:
        """Render ``data`` as a PNG QR code and return the image bytes"""
        if not data:
            raise ValidationError("Nothing to encode in the QR code", field='sku')

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=QRCodeService.BOX_SIZE,
            border=QRCodeService.BORDER,
        )
        qr.add_data(data)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buffer = BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()
