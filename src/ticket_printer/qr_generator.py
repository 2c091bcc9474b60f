"""
QR code rendering for the thermal ticket printer client.
Produces monochrome images for printers without a native QR command.
"""

import qrcode
from qrcode.constants import ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q, ERROR_CORRECT_H
from qrcode.exceptions import DataOverflowError
from PIL import Image

from .config import config
from .exceptions import ProtocolEncodingError
from .utils.logger import logger
from .utils.bitmap import fit_to_width


class QRGenerator:
    """Renders QR payloads to PIL images sized for the paper."""

    def __init__(self, error_correction: str = None, box_size: int = None, border: int = None):
        self.error_correction_map = {
            'L': ERROR_CORRECT_L,
            'M': ERROR_CORRECT_M,
            'Q': ERROR_CORRECT_Q,
            'H': ERROR_CORRECT_H
        }
        self.error_correction = (error_correction or config.QR_ERROR_CORRECTION).upper()
        self.box_size = box_size or config.QR_BOX_SIZE
        self.border = config.QR_BORDER if border is None else border

    def render_image(self, payload: str, max_dots: int) -> Image.Image:
        """
        Render a QR code as a greyscale image no wider than max_dots.

        Args:
            payload: Text to encode
            max_dots: Printable width of the paper in dots

        Returns:
            PIL Image in mode 'L'

        Raises:
            ProtocolEncodingError: Payload does not fit the largest QR version
        """
        qr = qrcode.QRCode(
            version=None,
            error_correction=self.error_correction_map[self.error_correction],
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(payload)
        try:
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as e:
            raise ProtocolEncodingError("QR payload too large",
                                        {"length": len(payload), "error": str(e)})

        img = qr.make_image(fill_color="black", back_color="white")
        if not isinstance(img, Image.Image):
            img = img.get_image()
        img = fit_to_width(img.convert("L"), max_dots)

        logger.debug("🔲 QR image rendered",
                     version=qr.version,
                     size=f"{img.size[0]}x{img.size[1]}")
        return img
